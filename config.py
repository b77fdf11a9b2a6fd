import os
import dotenv
dotenv.load_dotenv()
basedir = os.path.abspath(os.path.dirname(__file__))

# Flask configuration
SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-key-please-change-in-production'
DEBUG = os.environ.get('FLASK_DEBUG', '0') == '1'

# Database configuration
if os.environ.get('DATABASE_URL'):
    SQLALCHEMY_DATABASE_URI = os.environ['DATABASE_URL']
elif os.environ.get('VERCEL'):
    # Vercel filesystem is read-only, use ephemeral /tmp
    SQLALCHEMY_DATABASE_URI = 'sqlite:////tmp/timetable.db'
else:
    SQLALCHEMY_DATABASE_URI = 'sqlite:///' + os.path.join(basedir, 'timetable.db')
SQLALCHEMY_TRACK_MODIFICATIONS = False

# Course catalog (loaded into memory at startup)
CATALOG_PATH = os.environ.get('CATALOG_PATH') or os.path.join(basedir, 'data', 'catalog.json')

# Timetable generator
GENERATOR_MAX_TIMETABLES = int(os.environ.get('GENERATOR_MAX_TIMETABLES', 100))
DEFAULT_MAX_HOURS_PER_DAY = int(os.environ.get('DEFAULT_MAX_HOURS_PER_DAY', 8))

# Guest data older than this is purged by the cleanup thread
SESSION_TTL_HOURS = int(os.environ.get('SESSION_TTL_HOURS', 24))
CLEANUP_INTERVAL_SECONDS = int(os.environ.get('CLEANUP_INTERVAL_SECONDS', 3600))
CLEANUP_ENABLED = os.environ.get('CLEANUP_ENABLED', '1') == '1'
