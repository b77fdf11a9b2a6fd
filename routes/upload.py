"""Routes for catalog file upload."""

import json

from flask import Blueprint, current_app, jsonify, request

from utils.catalog import Catalog
from utils.exceptions import CatalogFormatError

upload_bp = Blueprint('upload', __name__)


def _read_catalog_file(file):
    try:
        data = json.loads(file.read().decode('utf-8'))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise CatalogFormatError(f'not valid JSON ({e})')
    return Catalog.from_dict(data)


@upload_bp.route('/parse', methods=['POST'])
def parse_catalog_file():
    """
    Validate an uploaded catalog file.
    Returns a summary without replacing the loaded catalog.
    """
    if 'file' not in request.files:
        return jsonify({'error': 'No file provided'}), 400

    file = request.files['file']

    if file.filename == '':
        return jsonify({'error': 'No file selected'}), 400

    if not file.filename.lower().endswith('.json'):
        return jsonify({'error': 'File must be JSON'}), 400

    try:
        catalog = _read_catalog_file(file)
    except CatalogFormatError as e:
        return jsonify({'error': str(e)}), 400

    return jsonify({
        'success': True,
        'metadata': catalog.metadata,
        'course_count': len(catalog),
        'instructor_count': len(catalog.instructors())
    })


@upload_bp.route('/catalog', methods=['POST'])
def import_catalog_file():
    """
    Replace the in-memory catalog with an uploaded catalog file.
    Generator sessions keep their courses; codes missing from the new
    catalog are reported when generation runs.
    """
    if 'file' not in request.files:
        return jsonify({'error': 'No file provided'}), 400

    file = request.files['file']

    if file.filename == '' or not file.filename.lower().endswith('.json'):
        return jsonify({'error': 'File must be JSON'}), 400

    try:
        catalog = _read_catalog_file(file)
    except CatalogFormatError as e:
        return jsonify({'error': str(e)}), 400

    current_app.extensions['catalog'] = catalog
    current_app.logger.info(f"Catalog replaced from upload {file.filename}: {len(catalog)} courses")

    return jsonify({
        'success': True,
        'summary': f'Loaded {len(catalog)} courses from {file.filename}.',
        'metadata': catalog.metadata,
        'course_count': len(catalog)
    })
