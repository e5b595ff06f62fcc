# extensions.py
"""
Flask extensions initialization.
Extensions are created here without an app and bound to it in the application factory,
which keeps models and services importable without circular imports.
"""

from flask import current_app
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_wtf.csrf import CSRFProtect
from flask_login import LoginManager
from sqlalchemy import event, text
import time
import logging
import threading

# Initialize extensions without app binding
db = SQLAlchemy()
migrate = Migrate()
csrf = CSRFProtect()
login_manager = LoginManager()

# Connection monitoring
connection_stats = {
    'total_checks': 0,
    'failed_checks': 0,
    'last_check': 0,
    'healthy': True
}
connection_lock = threading.Lock()

logger = logging.getLogger(__name__)


def get_connection_stats():
    """
    Get current database connection statistics.

    Returns:
        dict: Connection statistics
    """
    with connection_lock:
        return connection_stats.copy()


def check_database_health():
    """
    Check if the database connection is healthy.
    This function requires an active Flask application context.

    Returns:
        tuple: (bool, str) indicating health status and message
    """
    try:
        if not current_app:
            return False, "No application context available"

        # Use a separate connection to avoid disturbing the request session
        connection = db.engine.connect()
        try:
            with connection.begin():
                connection.execute(text("SELECT 1")).fetchone()

            with connection_lock:
                connection_stats['total_checks'] += 1
                connection_stats['healthy'] = True
                connection_stats['last_check'] = time.time()

            return True, "Database connection is healthy"
        finally:
            connection.close()

    except Exception as e:
        logger.error(f"Database health check failed: {e}")

        with connection_lock:
            connection_stats['total_checks'] += 1
            connection_stats['failed_checks'] += 1
            connection_stats['healthy'] = False
            connection_stats['last_check'] = time.time()

        return False, f"Database connection failed: {str(e)}"


def enable_sqlite_foreign_keys(engine):
    """
    Enforce foreign keys on every SQLite connection of the engine.

    SQLite ships with them off, which would let members be inserted for a
    team that no longer exists.

    Args:
        engine: SQLAlchemy engine instance
    """

    @event.listens_for(engine, "connect")
    def set_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
        finally:
            cursor.close()


def init_extensions(app):
    """
    Initialize all extensions with proper order and configuration.

    Args:
        app: Flask application instance
    """
    # Step 1: Initialize database first (required by other extensions)
    db.init_app(app)
    migrate.init_app(app, db)

    if app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite'):
        with app.app_context():
            enable_sqlite_foreign_keys(db.engine)

    # Step 2: Staff sessions
    login_manager.init_app(app)
    login_manager.session_protection = 'basic'

    # Step 3: CSRF protection; JSON blueprints are exempted when registered
    csrf.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        # Import here to avoid circular imports
        from createverse.models import StaffUser

        return db.session.get(StaffUser, user_id)

    @login_manager.unauthorized_handler
    def unauthorized():
        from flask import jsonify
        return jsonify({
            'success': False,
            'message': 'Authentication required',
            'error_code': 'AUTH_REQUIRED'
        }), 401

    app.logger.info("Extensions initialized successfully in correct order")
