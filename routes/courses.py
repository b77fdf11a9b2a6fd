from flask import Blueprint, jsonify, request

from routes.main import get_catalog

courses_bp = Blueprint('courses', __name__)


@courses_bp.route('/search')
def search_courses():
    """Search courses by code or name."""
    query = request.args.get('q', '').strip()
    exclude = [c for c in request.args.get('exclude', '').split(',') if c]

    courses = get_catalog().search(query, exclude=exclude)

    return jsonify({
        'courses': [course.to_dict() for course in courses]
    })


@courses_bp.route('/instructors')
def get_instructors():
    """All instructor names, for the avoid-instructor picker."""
    return jsonify({'instructors': get_catalog().instructors()})


@courses_bp.route('/<course_code>/sections')
def get_course_sections(course_code):
    """Get all sections of a course with their meeting blocks."""
    course = get_catalog().get(course_code)
    if course is None:
        return jsonify({'error': f"Course '{course_code}' not found"}), 404

    sections = []
    for section in sorted(course.sections.values(), key=lambda s: s.name):
        if section.section_type is None:
            continue
        sections.append({
            'section': section.name,
            'section_type': section.section_type,
            'instructor': list(section.instructor),
            'room': section.schedule[0].room if section.schedule else 'TBA',
            'schedule': [
                {'room': block.room, 'days': list(block.days), 'slots': list(block.hours)}
                for block in section.schedule
            ]
        })

    return jsonify({
        'course': course.to_dict(),
        'sections': sections
    })


@courses_bp.route('/<course_code>')
def get_course(course_code):
    """Get course details by code."""
    course = get_catalog().get(course_code)
    if course is None:
        return jsonify({'error': f"Course '{course_code}' not found"}), 404
    return jsonify(course.to_dict())
