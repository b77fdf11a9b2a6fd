"""Routes for the timetable generator session."""

import threading

from flask import Blueprint, current_app, jsonify, request

from models import db, GeneratorSession, SelectedScheduleStore
from routes.main import get_catalog, get_owner, grid_payload
from utils.constraints import GeneratorConstraints
from utils.exceptions import (
    CourseHasNoSectionsError,
    DuplicateCourseError,
    InvalidConstraintError,
    UnknownCourseError,
)
from utils.timetable_generator import (
    CourseSelection,
    GeneratedTimetable,
    TimetableBrowser,
    TimetableGenerator,
)

generator_bp = Blueprint('generator', __name__)

NO_TIMETABLE_MESSAGE = 'No valid timetable under current constraints'

# Owners with a generation in progress
_busy_owners = set()
_busy_lock = threading.Lock()


def get_generator_session():
    user_id, guest_id = get_owner()
    return GeneratorSession.for_owner(user_id=user_id, guest_id=guest_id)


def load_constraints(gen_session):
    if gen_session.constraints is None:
        return GeneratorConstraints(max_hours_per_day=current_app.config['DEFAULT_MAX_HOURS_PER_DAY'])
    return GeneratorConstraints.from_dict(gen_session.constraints)


def load_browser(gen_session):
    timetables = [GeneratedTimetable.from_dict(t) for t in gen_session.timetables or []]
    return TimetableBrowser(timetables, index=gen_session.current_index)


def current_payload(browser):
    timetable = browser.current
    if timetable is None:
        return {'index': 0, 'count': 0, 'timetable': None}
    data = timetable.to_dict()
    return {
        'index': browser.index,
        'count': browser.count,
        'timetable': data,
        'grid': grid_payload(data['sections'])
    }


def save_session(action):
    """Commit generator session changes. Returns an error response on failure, else None."""
    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Could not {action}: {e}")
        return jsonify({'error': f'Could not {action}'}), 500
    return None


def session_payload(gen_session):
    courses = gen_session.courses or []
    return {
        'courses': courses,
        'total_credits': sum(c.get('credits', 0) for c in courses),
        'constraints': load_constraints(gen_session).to_dict(),
        'timetable_count': len(gen_session.timetables or []),
        'current_index': gen_session.current_index,
        'truncated': gen_session.truncated
    }


@generator_bp.route('/', methods=['GET'])
def get_state():
    """Courses, constraints and generation status of the current session."""
    return jsonify(session_payload(get_generator_session()))


@generator_bp.route('/courses', methods=['POST'])
def add_course():
    """Add a course to the generator."""
    data = request.get_json(silent=True) or {}
    course_code = (data.get('course_code') or '').strip()
    if not course_code:
        return jsonify({'error': 'course_code is required'}), 400

    gen_session = get_generator_session()
    courses = list(gen_session.courses or [])

    try:
        if any(c['course_code'] == course_code for c in courses):
            raise DuplicateCourseError(course_code)
        selection = get_catalog().course_selection(course_code)
    except UnknownCourseError as e:
        return jsonify({'error': str(e)}), 404
    except (CourseHasNoSectionsError, DuplicateCourseError) as e:
        return jsonify({'error': str(e)}), 400

    courses.append(selection.to_dict())
    gen_session.courses = courses
    gen_session.clear_timetables()
    error = save_session('add course')
    if error:
        return error

    return jsonify({
        'success': True,
        'course': selection.to_dict(),
        'state': session_payload(gen_session)
    }), 201


@generator_bp.route('/courses/<course_code>', methods=['DELETE'])
def remove_course(course_code):
    """Remove a course from the generator."""
    gen_session = get_generator_session()
    courses = [c for c in gen_session.courses or [] if c['course_code'] != course_code]
    if len(courses) == len(gen_session.courses or []):
        return jsonify({'error': 'Course not selected'}), 404

    gen_session.courses = courses
    gen_session.clear_timetables()
    error = save_session('remove course')
    if error:
        return error

    return jsonify({'success': True, 'state': session_payload(gen_session)})


@generator_bp.route('/constraints', methods=['GET'])
def get_constraints():
    return jsonify(load_constraints(get_generator_session()).to_dict())


@generator_bp.route('/constraints', methods=['PUT'])
def update_constraints():
    """Replace the constraint set."""
    data = request.get_json(silent=True)
    if data is None:
        return jsonify({'error': 'JSON body required'}), 400

    try:
        constraints = GeneratorConstraints.from_dict(data)
    except InvalidConstraintError as e:
        return jsonify({'error': str(e), 'field': e.field}), 400

    gen_session = get_generator_session()
    gen_session.constraints = constraints.to_dict()
    error = save_session('save constraints')
    if error:
        return error

    return jsonify({'success': True, 'constraints': constraints.to_dict()})


@generator_bp.route('/generate', methods=['POST'])
def generate():
    """Generate and rank timetables for the selected courses."""
    user_id, guest_id = get_owner()
    owner_key = ('user', user_id) if user_id else ('guest', guest_id)

    with _busy_lock:
        if owner_key in _busy_owners:
            return jsonify({'error': 'Generation already in progress'}), 409
        _busy_owners.add(owner_key)

    try:
        gen_session = get_generator_session()
        courses = [CourseSelection.from_dict(c) for c in gen_session.courses or []]
        if not courses:
            return jsonify({'error': 'No courses selected'}), 400

        generator = TimetableGenerator(
            get_catalog(),
            courses,
            constraints=load_constraints(gen_session),
            max_timetables=current_app.config['GENERATOR_MAX_TIMETABLES']
        )
        timetables = generator.generate()
    except UnknownCourseError as e:
        return jsonify({'error': f'{e}; remove it and try again'}), 409
    finally:
        with _busy_lock:
            _busy_owners.discard(owner_key)

    gen_session.timetables = [t.to_dict() for t in timetables]
    gen_session.current_index = 0
    gen_session.truncated = generator.truncated
    error = save_session('save generated timetables')
    if error:
        return error

    current_app.logger.info(
        f"Generated {len(timetables)} timetables for {len(courses)} courses "
        f"({generator.candidates_examined} candidates examined)"
    )

    payload = {
        'success': True,
        'count': len(timetables),
        'truncated': generator.truncated,
        'candidates_examined': generator.candidates_examined,
        'current': current_payload(load_browser(gen_session))
    }
    if not timetables:
        payload['message'] = NO_TIMETABLE_MESSAGE
    return jsonify(payload)


@generator_bp.route('/timetables', methods=['GET'])
def list_timetables():
    """Ranked list summary."""
    gen_session = get_generator_session()
    return jsonify({
        'timetables': [
            {'index': i, 'score': t['score'], 'hours_per_day': t['hours_per_day']}
            for i, t in enumerate(gen_session.timetables or [])
        ],
        'current_index': gen_session.current_index
    })


@generator_bp.route('/current', methods=['GET'])
def get_current():
    browser = load_browser(get_generator_session())
    return jsonify(current_payload(browser))


def _navigate(move):
    gen_session = get_generator_session()
    browser = load_browser(gen_session)
    move(browser)
    gen_session.current_index = browser.index
    error = save_session('save position')
    if error:
        return error
    return jsonify(current_payload(browser))


@generator_bp.route('/next', methods=['POST'])
def next_timetable():
    return _navigate(lambda browser: browser.next())


@generator_bp.route('/previous', methods=['POST'])
def previous_timetable():
    return _navigate(lambda browser: browser.previous())


@generator_bp.route('/apply', methods=['POST'])
def apply_timetable():
    """Replace the selected schedule with the current timetable."""
    user_id, guest_id = get_owner()
    browser = load_browser(get_generator_session())
    store = SelectedScheduleStore(user_id=user_id, guest_id=guest_id)

    try:
        applied = browser.apply(store)
    except Exception as e:
        current_app.logger.error(f"Apply failed: {e}")
        return jsonify({'error': 'Could not save timetable'}), 500

    if applied is None:
        return jsonify({'error': 'No generated timetable to apply'}), 400

    return jsonify({
        'success': True,
        'index': browser.index,
        'sections': [s.to_dict() for s in applied.sections]
    })
