import os
from datetime import timedelta
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Base configuration class with all settings as static attributes."""

    # Core configuration
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-me'
    DEBUG = os.environ.get('FLASK_DEBUG', 'false').lower() == 'true'
    VERSION = '1.0.0'

    # Session settings
    PERMANENT_SESSION_LIFETIME = timedelta(hours=8)
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    # Database connection timeouts (seconds)
    DB_CONNECT_TIMEOUT = 10
    DB_READ_TIMEOUT = 15
    DB_WRITE_TIMEOUT = 15

    # Database configuration
    base_db_uri = os.environ.get('DATABASE_URL')

    # Fallback to SQLite if no DATABASE_URL is provided
    if not base_db_uri:
        base_db_uri = 'sqlite:///createverse.db'

    SQLALCHEMY_DATABASE_URI = base_db_uri
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Engine options; driver timeouts bound every store round trip
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
    }
    if base_db_uri.startswith('mysql'):
        SQLALCHEMY_ENGINE_OPTIONS.update({
            "pool_recycle": 3600,
            "pool_size": 10,
            "max_overflow": 20,
            "connect_args": {
                "connect_timeout": DB_CONNECT_TIMEOUT,
                "read_timeout": DB_READ_TIMEOUT,
                "write_timeout": DB_WRITE_TIMEOUT,
            }
        })
    elif base_db_uri.startswith('postgres'):
        SQLALCHEMY_ENGINE_OPTIONS.update({
            "pool_recycle": 3600,
            "pool_size": 10,
            "max_overflow": 20,
            "connect_args": {
                "connect_timeout": DB_CONNECT_TIMEOUT,
                "options": f"-c statement_timeout={DB_READ_TIMEOUT * 1000}",
            }
        })

    # Logging
    LOG_TO_FILE = os.environ.get('LOG_TO_FILE', 'false').lower() == 'true'
    LOG_DIR = os.environ.get('LOG_DIR', 'logs')

    # Site settings
    SITE_NAME = 'CREATEVERSE'

    # Registration settings
    TEAM_SIZE = 4  # One leader plus three members
    REGISTRATIONS_OPEN_DEFAULT = False  # Used until staff store the setting

    # Check-in settings
    SCAN_DEBOUNCE_MS = 3000
    MIN_SCAN_LENGTH = 2
    MAX_SCAN_STATIONS = 64  # least recently used stations are dropped beyond this

    # Memberless teams younger than this may still be mid-registration
    ORPHAN_GRACE_SECONDS = 300


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    SESSION_COOKIE_SECURE = False
    SQLALCHEMY_ECHO = os.environ.get('SQL_DEBUG', 'false').lower() == 'true'


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False

    # Ensure secret key is set in production
    SECRET_KEY = os.environ.get('SECRET_KEY')

    # Use production database
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL')

    @classmethod
    def validate(cls):
        """Raise if required production settings are missing."""
        if not cls.SECRET_KEY:
            raise ValueError("SECRET_KEY environment variable must be set in production")
        if not cls.SQLALCHEMY_DATABASE_URI:
            raise ValueError("DATABASE_URL environment variable must be set in production")


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    WTF_CSRF_ENABLED = False
    SESSION_COOKIE_SECURE = False
    LOG_TO_FILE = False


# Configuration dictionary
config_by_name = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig
}


def get_config():
    """Get current configuration instance."""
    config_name = os.environ.get('FLASK_CONFIG', 'development')
    return config_by_name[config_name]()
