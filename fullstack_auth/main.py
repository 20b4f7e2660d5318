"""Flask application entry point.

create_app() builds the whole component graph from one Settings object:

    Settings -> Database, PasswordHasher, TokenIssuer, LoggingAuditSink
             -> AuthService -> app.extensions["fullstack_auth"]

Run the development server with the ``fullstack-auth`` console script, or
point a WSGI server at ``fullstack_auth.main:create_app()``.
"""

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from . import __version__
from .auth.api import auth_bp
from .auth.audit import AUDIT_LOGGER_NAME, LoggingAuditSink
from .auth.decorators import EXTENSION_KEY
from .auth.password import PasswordHasher
from .auth.service import AuthService
from .auth.token import TokenIssuer
from .config import Settings
from .db import Database
from .exceptions import (
    AuthenticationError,
    ConflictError,
    FullstackAuthError,
    ResourceNotFound,
    ValidationError,
)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def _add_daily_file(
    target: logging.Logger,
    filename: str,
    backup_count: int,
    fmt: str = LOG_FORMAT,
    level: int = logging.NOTSET,
) -> None:
    """Attach a midnight-rotated file handler unless one already writes there."""
    path = Path(filename).resolve()
    for handler in target.handlers:
        if isinstance(handler, TimedRotatingFileHandler) and Path(handler.baseFilename) == path:
            return

    path.parent.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(
        path, when="midnight", backupCount=backup_count, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    target.addHandler(handler)


def configure_logging(settings: Settings) -> None:
    """Configure root logging and the optional application, error and audit files.

    Retention: application 14 days, errors 30 days, audit 90 days.
    """
    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT)
    root = logging.getLogger()

    if settings.app_log_file:
        _add_daily_file(root, settings.app_log_file, backup_count=14)

    if settings.error_log_file:
        _add_daily_file(root, settings.error_log_file, backup_count=30, level=logging.ERROR)

    if settings.audit_log_file:
        _add_daily_file(
            logging.getLogger(AUDIT_LOGGER_NAME),
            settings.audit_log_file,
            backup_count=90,
            fmt="%(asctime)s - AUTH - %(message)s",
        )


def _error_response(error: FullstackAuthError, status: int):
    response = {
        "error": {
            "type": error.__class__.__name__,
            "message": error.message
        }
    }
    if error.details:
        response["error"]["details"] = error.details
    return jsonify(response), status


# Error handlers
def handle_validation_error(error):
    """Handle ValidationError exceptions."""
    return _error_response(error, 400)


def handle_authentication_error(error):
    """Handle AuthenticationError exceptions."""
    return _error_response(error, 401)


def handle_not_found(error):
    """Handle ResourceNotFound exceptions."""
    return _error_response(error, 404)


def handle_conflict(error):
    """Handle ConflictError exceptions."""
    return _error_response(error, 409)


def handle_fullstack_auth_error(error):
    """Handle generic FullstackAuthError exceptions."""
    logger.error(f"{error.__class__.__name__}: {error.message}")
    return _error_response(error, 500)


def handle_http_exception(error):
    """Render werkzeug HTTP errors (404, 405, ...) in the JSON envelope."""
    return jsonify({
        "error": {
            "type": error.name.replace(" ", ""),
            "message": error.description
        }
    }), error.code


def handle_internal_error(error):
    """Handle unexpected exceptions."""
    logger.exception(f"Internal error: {error}")
    return jsonify({
        "error": {
            "type": "InternalServerError",
            "message": "An internal error occurred"
        }
    }), 500


def register_error_handlers(app: Flask) -> None:
    app.register_error_handler(ValidationError, handle_validation_error)
    app.register_error_handler(AuthenticationError, handle_authentication_error)
    app.register_error_handler(ResourceNotFound, handle_not_found)
    app.register_error_handler(ConflictError, handle_conflict)
    app.register_error_handler(FullstackAuthError, handle_fullstack_auth_error)
    app.register_error_handler(HTTPException, handle_http_exception)
    app.register_error_handler(Exception, handle_internal_error)


def create_app(settings: Settings | None = None) -> Flask:
    """
    Build the Flask application.

    Args:
        settings: Configuration for this process. Loaded from the
                  environment when omitted.

    Returns:
        Configured Flask app with the database schema applied
    """
    settings = settings or Settings()
    configure_logging(settings)

    app = Flask(__name__)
    app.config["SETTINGS"] = settings

    # CORS configuration
    CORS(app, origins=settings.cors_origins, supports_credentials=True)

    database = Database(settings.database_path, timeout=settings.database_timeout_seconds)
    try:
        database.init_schema()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise

    app.extensions[EXTENSION_KEY] = AuthService(
        database=database,
        hasher=PasswordHasher(settings.bcrypt_work_factor),
        tokens=TokenIssuer(settings.jwt_secret_key, settings.jwt_expiry_days),
        audit_sink=LoggingAuditSink(),
    )

    register_error_handlers(app)

    @app.route("/health")
    def health():
        """Health check endpoint."""
        return jsonify({"status": "ok", "schema_version": database.get_schema_version()})

    @app.route(settings.api_prefix)
    def index():
        """API welcome endpoint."""
        return jsonify({
            "message": "Welcome to the Fullstack Auth App API!",
            "version": __version__,
            "description": "This API provides authentication and user management features for the Fullstack Auth App."
        })

    app.register_blueprint(auth_bp, url_prefix=settings.api_prefix)

    return app


def main() -> None:
    """Run the development server."""
    settings = Settings()
    app = create_app(settings)
    logger.info(f"Application starting on port {settings.port}")
    app.run(host=settings.host, port=settings.port, threaded=True)


if __name__ == "__main__":
    main()
