import uuid

from flask import Blueprint, current_app, jsonify, session

from models.slot import (
    DAYS, DAY_NAMES, MAX_SLOT, MIN_SLOT, SECTION_TYPE_NAMES, build_timetable_grid, get_slot_timing
)

main_bp = Blueprint('main', __name__)


@main_bp.before_app_request
def ensure_owner():
    """Give every browser without a signed-in user its own guest id."""
    if 'user_id' not in session and 'guest_id' not in session:
        session['guest_id'] = uuid.uuid4().hex
        session.permanent = True


def get_owner():
    """Return (user_id, guest_id) for the current session; exactly one is set."""
    if 'user_id' in session:
        return session['user_id'], None
    return None, session.get('guest_id')


def get_catalog():
    return current_app.extensions['catalog']


@main_bp.route('/')
def index():
    """Service summary."""
    catalog = get_catalog()
    return jsonify({
        'service': 'timetable-generator',
        'catalog': {
            'metadata': catalog.metadata,
            'course_count': len(catalog)
        }
    })


@main_bp.route('/api/meta')
def meta():
    """Fixed tables a display layer needs to draw the week."""
    return jsonify({
        'slots': {str(slot): get_slot_timing(slot) for slot in range(MIN_SLOT, MAX_SLOT + 1)},
        'days': DAYS,
        'day_names': DAY_NAMES,
        'section_types': SECTION_TYPE_NAMES
    })


def grid_payload(sections):
    """JSON-ready day x slot grid of section dicts."""
    grid = build_timetable_grid(sections)
    return {
        day: {str(slot): entry for slot, entry in cells.items()}
        for day, cells in grid.items()
    }
