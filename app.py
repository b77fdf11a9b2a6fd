import threading
import time
from datetime import datetime, timedelta

from flask import Flask, jsonify

from models import db, GeneratorSession, SelectedSection
from routes import main_bp, courses_bp, schedule_bp, generator_bp, upload_bp
from utils.catalog import Catalog, load_catalog
from utils.exceptions import CatalogFormatError


def create_app(test_config=None):
    """Application factory. ``test_config`` overrides values from config.py."""
    app = Flask(__name__)
    app.config.from_object('config')
    if test_config:
        app.config.update(test_config)

    # Initialize database
    db.init_app(app)

    # Load course catalog
    catalog = app.config.get('CATALOG')
    if catalog is None:
        catalog = _load_configured_catalog(app)
    app.extensions['catalog'] = catalog

    # Register blueprints
    app.register_blueprint(main_bp)
    app.register_blueprint(courses_bp, url_prefix='/api/courses')
    app.register_blueprint(schedule_bp, url_prefix='/api/schedule')
    app.register_blueprint(generator_bp, url_prefix='/api/generator')
    app.register_blueprint(upload_bp, url_prefix='/api/upload')

    # Create tables
    with app.app_context():
        db.create_all()

    @app.after_request
    def add_header(response):
        """Add headers to prevent caching."""
        response.headers['Cache-Control'] = 'no-cache, no-store, must-revalidate'
        response.headers['Pragma'] = 'no-cache'
        response.headers['Expires'] = '0'
        return response

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Not found'}), 404

    if app.config.get('CLEANUP_ENABLED') and not app.config.get('TESTING'):
        cleanup_thread = threading.Thread(target=cleanup_orphaned_data, args=(app,), daemon=True)
        cleanup_thread.start()

    return app


def _load_configured_catalog(app):
    path = app.config.get('CATALOG_PATH')
    try:
        return load_catalog(path)
    except FileNotFoundError:
        app.logger.warning(f"Catalog file {path} not found; starting with an empty catalog")
    except CatalogFormatError as e:
        app.logger.error(f"Catalog file {path} could not be loaded: {e}")
    return Catalog({})


def purge_stale_guest_data(app, now=None):
    """Delete guest generator sessions and schedules older than SESSION_TTL_HOURS."""
    cutoff = (now or datetime.utcnow()) - timedelta(hours=app.config['SESSION_TTL_HOURS'])

    sessions_removed = GeneratorSession.query.filter(
        GeneratorSession.guest_id.isnot(None),
        GeneratorSession.updated_at < cutoff
    ).delete(synchronize_session=False)

    sections_removed = SelectedSection.query.filter(
        SelectedSection.guest_id.isnot(None),
        SelectedSection.created_at < cutoff
    ).delete(synchronize_session=False)

    db.session.commit()
    return sessions_removed, sections_removed


def cleanup_orphaned_data(app):
    """Background loop purging stale guest data."""
    while True:
        try:
            with app.app_context():
                sessions_removed, sections_removed = purge_stale_guest_data(app)
                if sessions_removed or sections_removed:
                    app.logger.info(
                        f"Cleanup: deleted {sessions_removed} guest generator sessions "
                        f"and {sections_removed} guest schedule entries"
                    )
        except Exception as e:
            app.logger.error(f"Cleanup error: {e}")

        time.sleep(app.config['CLEANUP_INTERVAL_SECONDS'])


if __name__ == '__main__':
    app = create_app()
    app.run(debug=app.config.get('DEBUG', False), port=5000)
