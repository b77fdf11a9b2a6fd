from .main import main_bp
from .courses import courses_bp
from .schedule import schedule_bp
from .generator import generator_bp
from .upload import upload_bp

__all__ = ['main_bp', 'courses_bp', 'schedule_bp', 'generator_bp', 'upload_bp']
