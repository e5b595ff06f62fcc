# __init__.py
"""
Application factory for the CREATEVERSE registration and check-in system.
"""

import os
import logging
from datetime import datetime
from logging.handlers import RotatingFileHandler

from flask import Flask, jsonify
from dotenv import load_dotenv

from createverse.config import config_by_name
from createverse.extensions import init_extensions, db, csrf


def setup_logging(app):
    """
    Configure structured logging for the application.

    Args:
        app: Flask application instance
    """
    log_format = logging.Formatter(
        '%(asctime)s %(levelname)s %(name)s %(threadName)s : %(message)s'
    )
    level = logging.DEBUG if app.debug else logging.INFO

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(log_format)
    console_handler.setLevel(level)

    handlers = [console_handler]

    if app.config.get('LOG_TO_FILE'):
        log_dir = app.config.get('LOG_DIR') or os.path.join(app.root_path, 'logs')
        os.makedirs(log_dir, exist_ok=True)

        file_handler = RotatingFileHandler(
            os.path.join(log_dir, 'app.log'),
            maxBytes=1024 * 1024 * 10,  # 10MB
            backupCount=5
        )
        file_handler.setFormatter(log_format)
        file_handler.setLevel(logging.INFO)
        handlers.append(file_handler)

    app.logger.setLevel(level)
    for handler in handlers:
        app.logger.addHandler(handler)

    # Service loggers share the application handlers
    for name in ('registration_service', 'attendance_service', 'settings_service',
                 'check_in', 'registration', 'admin', 'auth', 'store'):
        service_logger = logging.getLogger(name)
        service_logger.setLevel(level)
        for handler in handlers:
            service_logger.addHandler(handler)

    # Suppress excessive SQLAlchemy logging
    sa_logger = logging.getLogger('sqlalchemy.engine')
    sa_logger.setLevel(logging.WARNING)
    sa_logger.propagate = False


def register_blueprints(app):
    """
    Register all application blueprints.

    Args:
        app: Flask application instance
    """
    # Import blueprints here to avoid circular imports
    from .controllers.auth import auth_bp
    from .controllers.registration import registration_bp
    from .controllers.check_in import check_in_bp
    from .controllers.admin import admin_bp

    # JSON endpoints; browsers reach them through the staff session cookie only
    for blueprint in (auth_bp, registration_bp, check_in_bp, admin_bp):
        csrf.exempt(blueprint)

    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(registration_bp, url_prefix='/register')
    app.register_blueprint(check_in_bp, url_prefix='/check-in')
    app.register_blueprint(admin_bp, url_prefix='/admin')

    app.logger.info("All blueprints registered successfully")


def register_error_handlers(app):
    """
    Register global error handlers.

    Args:
        app: Flask application instance
    """
    from werkzeug.exceptions import HTTPException
    from createverse.services.errors import ServiceError

    @app.errorhandler(ServiceError)
    def handle_service_error(e):
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        return jsonify({
            'success': False,
            'message': e.description,
            'error_code': e.name.upper().replace(' ', '_')
        }), e.code

    @app.errorhandler(Exception)
    def handle_exception(e):
        app.logger.error(f"Unhandled exception: {str(e)}", exc_info=True)
        return jsonify({
            'success': False,
            'message': str(e) if app.debug else 'Internal server error',
            'error_code': 'STORE_ERROR'
        }), 500


def register_shell_context(app):
    """
    Register shell context for flask shell command.

    Args:
        app: Flask application instance
    """

    @app.shell_context_processor
    def make_shell_context():
        from createverse.models import Team, Member, AttendanceRecord, Setting, StaffUser
        return {
            'db': db,
            'Team': Team,
            'Member': Member,
            'AttendanceRecord': AttendanceRecord,
            'Setting': Setting,
            'StaffUser': StaffUser
        }


def register_health_checks(app):
    """
    Register health check endpoints.

    Args:
        app: Flask application instance
    """

    @app.route('/health')
    def health_check():
        """Basic health check endpoint."""
        return jsonify({
            'status': 'ok',
            'timestamp': datetime.now().isoformat(),
            'version': app.config.get('VERSION', '1.0.0')
        })

    @app.route('/health/database')
    def database_health_check():
        """Database health check endpoint."""
        from createverse.extensions import check_database_health, get_connection_stats

        healthy, message = check_database_health()
        stats = get_connection_stats()

        return jsonify({
            'status': 'healthy' if healthy else 'unhealthy',
            'message': message,
            'stats': stats,
            'timestamp': datetime.now().isoformat()
        }), 200 if healthy else 503


def create_app(config_name=None):
    """
    Application factory function.

    Args:
        config_name (str): Configuration name ('development', 'production', 'testing')

    Returns:
        Flask: Configured Flask application instance
    """
    load_dotenv()

    app = Flask(__name__)

    config_name = config_name or os.environ.get('FLASK_ENV', 'development')
    config_class = config_by_name[config_name]
    if hasattr(config_class, 'validate'):
        config_class.validate()
    app.config.from_object(config_class)

    if not app.testing:
        setup_logging(app)
    app.logger.info(f"Starting application with config: {config_name}")

    init_extensions(app)

    register_blueprints(app)
    register_error_handlers(app)
    register_shell_context(app)
    register_health_checks(app)

    from .cli import register_cli_commands
    register_cli_commands(app)

    with app.app_context():
        # Tables for a fresh SQLite database; migrations own the schema elsewhere
        if app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite'):
            from createverse import models  # noqa: F401
            db.create_all()

    app.logger.info("Application factory completed successfully")

    return app
