from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_wtf.csrf import CSRFProtect, CSRFError
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from werkzeug.exceptions import HTTPException
import os
from marketplace.logger import get_logger

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
csrf = CSRFProtect()
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri="memory://"  # Use Redis when running more than one worker
)


def _env_flag(name, default):
    return os.environ.get(name, default).lower() in ('true', '1', 'yes', 'on')


def create_app(config_overrides=None):
    from pathlib import Path

    app = Flask(__name__)

    logger = get_logger("marketplace")
    logger.info("Initializing Flask application")

    # SECURITY: Require SECRET_KEY in environment (or overrides) - no fallback
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY')

    # Prefer an explicit DATABASE_URL; otherwise keep the SQLite file inside
    # the project's `instance/` directory.
    db_env = os.environ.get('DATABASE_URL')
    if db_env:
        app.config['SQLALCHEMY_DATABASE_URI'] = db_env
    elif 'SQLALCHEMY_DATABASE_URI' not in (config_overrides or {}):
        instance_dir = Path(__file__).parent.parent / 'instance'
        instance_dir.mkdir(parents=True, exist_ok=True)
        default_db_path = instance_dir / 'marketplace.db'
        app.config['SQLALCHEMY_DATABASE_URI'] = f"sqlite:///{str(default_db_path.resolve())}"

    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    # Concurrent writers against SQLite wait on the file lock instead of failing
    app.config['SQLITE_BUSY_TIMEOUT'] = float(os.environ.get('SQLITE_BUSY_TIMEOUT', '30'))

    # Session cookie security configuration
    app.config['SESSION_COOKIE_SECURE'] = _env_flag('SESSION_COOKIE_SECURE', 'True')
    app.config['SESSION_COOKIE_HTTPONLY'] = True
    app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'
    app.config['PERMANENT_SESSION_LIFETIME'] = int(os.environ.get('PERMANENT_SESSION_LIFETIME', '3600'))
    app.config['REMEMBER_COOKIE_SECURE'] = _env_flag('REMEMBER_COOKIE_SECURE', 'True')
    app.config['REMEMBER_COOKIE_HTTPONLY'] = True

    # SPA clients send the token from /csrf-token back in this header
    app.config['WTF_CSRF_HEADERS'] = ['X-CSRFToken', 'X-CSRF-Token']

    app.config['RATELIMIT_DEFAULT'] = os.environ.get('RATELIMIT_DEFAULT', '200 per hour')

    # Accept/decline only by the employee the order is assigned to
    app.config['ENFORCE_ORDER_OWNERSHIP'] = _env_flag('ENFORCE_ORDER_OWNERSHIP', 'True')

    if config_overrides:
        app.config.update(config_overrides)

    if not app.config['SECRET_KEY']:
        logger.critical("SECRET_KEY not set in environment! Application cannot start.")
        raise RuntimeError("SECRET_KEY environment variable is required")

    if app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite'):
        engine_options = dict(app.config.get('SQLALCHEMY_ENGINE_OPTIONS') or {})
        connect_args = dict(engine_options.get('connect_args') or {})
        connect_args.setdefault('timeout', app.config['SQLITE_BUSY_TIMEOUT'])
        connect_args.setdefault('check_same_thread', False)
        engine_options['connect_args'] = connect_args
        app.config['SQLALCHEMY_ENGINE_OPTIONS'] = engine_options
        logger.debug("Database configured: SQLite")

    # Initialize extensions with app
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)

    logger.debug("Extensions initialized")

    # Import models to ensure they're registered with SQLAlchemy
    from marketplace.data.users.user import User
    from marketplace.data.catalog.item import Item
    from marketplace.data.orders.order import Order
    from marketplace.data.orders.notification import Notification
    from marketplace.data.orders.order_transaction import OrderTransaction

    logger.debug("Models imported and registered")

    # Register blueprints
    from marketplace.auth import auth
    from marketplace.presentation.routes import init_app as init_routes

    app.register_blueprint(auth)
    init_routes(app)

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'message': 'Authentication required.', 'error': 'unauthenticated'}), 401

    @app.errorhandler(CSRFError)
    def handle_csrf_error(error):
        logger.warning(f"CSRF validation failed: {error.description}")
        return jsonify({'message': error.description, 'error': 'csrf'}), 400

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'message': error.description, 'error': error.name.lower().replace(' ', '_')}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        logger.exception(f"Unhandled error: {error}")
        return jsonify({'message': 'Something went wrong. Please try again later.', 'error': 'internal'}), 500

    @app.after_request
    def set_security_headers(response):
        """Add security headers to all responses"""
        response.headers['X-Frame-Options'] = 'SAMEORIGIN'
        response.headers['X-Content-Type-Options'] = 'nosniff'
        return response

    logger.info("Flask application initialization complete")

    return app
