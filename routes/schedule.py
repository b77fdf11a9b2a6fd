from flask import Blueprint, current_app, jsonify, request

from models import SelectedScheduleStore
from routes.main import get_catalog, get_owner, grid_payload
from utils.constraints import sections_clash
from utils.exceptions import UnknownCourseError, UnknownSectionError
from utils.timetable_generator import SectionOption

schedule_bp = Blueprint('schedule', __name__)


def get_current_store():
    """Selected-schedule store for the current session, or None without one."""
    user_id, guest_id = get_owner()
    if not user_id and not guest_id:
        return None
    return SelectedScheduleStore(user_id=user_id, guest_id=guest_id)


def total_credits(sections):
    """Credits of each distinct course, counted once."""
    catalog = get_catalog()
    credits = 0
    for code in {s['course_code'] for s in sections}:
        course = catalog.get(code)
        if course:
            credits += course.units
    return credits


def check_section_clashes(new_options, existing_rows):
    """Check new section blocks against the blocks already selected."""
    clashing = []
    seen = set()

    for row in existing_rows:
        existing = SectionOption.from_dict(row.to_dict())
        key = existing.logical_key
        if key in seen:
            continue

        for option in new_options:
            if option.logical_key == key:
                continue
            if sections_clash(option, existing):
                clashing.append({
                    'course_code': existing.course_code,
                    'course_title': existing.course_title,
                    'section': existing.section,
                    'reason': 'Time overlap'
                })
                seen.add(key)
                break

    return {
        'has_clash': len(clashing) > 0,
        'clashing_sections': clashing
    }


def _resolve_section(data):
    """Expand the request's course/section into options, or an error response."""
    course_code = (data.get('course_code') or '').strip()
    section = (data.get('section') or '').strip()
    if not course_code or not section:
        return None, (jsonify({'error': 'course_code and section are required'}), 400)

    try:
        return get_catalog().section_options(course_code, section), None
    except (UnknownCourseError, UnknownSectionError) as e:
        return None, (jsonify({'error': str(e)}), 404)


@schedule_bp.route('/', methods=['GET'])
def get_schedule():
    """Get the selected schedule."""
    store = get_current_store()
    sections = [row.to_dict() for row in store.all()] if store else []

    return jsonify({
        'sections': sections,
        'count': len(sections),
        'course_count': len({s['course_code'] for s in sections}),
        'total_credits': total_credits(sections)
    })


@schedule_bp.route('/', methods=['POST'])
def add_section():
    """Add every meeting block of one course section to the schedule."""
    data = request.get_json(silent=True) or {}

    store = get_current_store()
    if store is None:
        return jsonify({'error': 'No active session'}), 401

    options, error = _resolve_section(data)
    if error:
        return error

    course_code = data['course_code'].strip()
    section = data['section'].strip()

    existing = store.all()
    if any(r.course_code == course_code and r.section == section for r in existing):
        return jsonify({'error': 'Section already in schedule'}), 400

    clash_result = check_section_clashes(options, existing)
    if clash_result['has_clash']:
        return jsonify({
            'error': 'Section clash detected',
            'clashing_sections': clash_result['clashing_sections']
        }), 400

    try:
        store.add(options)
    except Exception as e:
        current_app.logger.error(f"Could not add {course_code} {section}: {e}")
        return jsonify({'error': 'Could not save section'}), 500

    return jsonify({
        'success': True,
        'sections': [o.to_dict() for o in options]
    }), 201


@schedule_bp.route('/<course_code>', methods=['DELETE'])
def remove_course(course_code):
    """Remove all sections of a course."""
    store = get_current_store()
    if store is None:
        return jsonify({'error': 'No active session'}), 401

    removed = store.remove_course(course_code)
    if not removed:
        return jsonify({'error': 'Course not in schedule'}), 404

    return jsonify({'success': True, 'removed': removed})


@schedule_bp.route('/check-clash', methods=['POST'])
def check_clash():
    """Check if a section would clash with the current schedule."""
    data = request.get_json(silent=True) or {}

    options, error = _resolve_section(data)
    if error:
        return error

    store = get_current_store()
    existing = store.all() if store else []
    return jsonify(check_section_clashes(options, existing))


@schedule_bp.route('/credits', methods=['GET'])
def get_credits():
    """Get current credit summary."""
    store = get_current_store()
    sections = [row.to_dict() for row in store.all()] if store else []

    return jsonify({
        'total_credits': total_credits(sections),
        'course_count': len({s['course_code'] for s in sections})
    })


@schedule_bp.route('/grid', methods=['GET'])
def get_grid():
    """Selected schedule laid out by day and slot."""
    store = get_current_store()
    sections = [row.to_dict() for row in store.all()] if store else []
    return jsonify({'grid': grid_payload(sections)})
