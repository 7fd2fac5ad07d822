from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from dotenv import load_dotenv
import os
from pathlib import Path
from maintenance_app.logger import get_logger

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["2000 per day", "500 per hour"],
    storage_uri="memory://"  # Use Redis in production for distributed systems
)

REPOSITORY_EXTENSION = 'maintenance_repository'
TEXT_GENERATION_EXTENSION = 'maintenance_text_generation'


def _env_flag(name, default):
    return os.environ.get(name, default).lower() in ('true', '1', 'yes', 'on')


def _load_config(app, base_dir):
    """Copy the environment (and .env) into app.config"""
    instance_dir = base_dir / 'instance'

    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY')

    app.config['STORAGE_BACKEND'] = os.environ.get('STORAGE_BACKEND', 'json').lower()
    app.config['DATA_DIR'] = os.environ.get('DATA_DIR', str(instance_dir / 'data'))

    db_env = os.environ.get('DATABASE_URL')
    if db_env:
        app.config['SQLALCHEMY_DATABASE_URI'] = db_env
    else:
        # Absolute path so the database does not move with the working directory
        default_db_path = instance_dir / 'maintenance.db'
        app.config['SQLALCHEMY_DATABASE_URI'] = f"sqlite:///{str(default_db_path.resolve())}"
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    app.config['AI_API_URL'] = os.environ.get('AI_API_URL', 'https://api.groq.com/openai/v1/chat/completions')
    app.config['AI_API_KEY'] = os.environ.get('AI_API_KEY', '')
    app.config['AI_MODEL'] = os.environ.get('AI_MODEL', 'llama-3.3-70b-versatile')
    app.config['AI_TIMEOUT_SECONDS'] = float(os.environ.get('AI_TIMEOUT_SECONDS', '30'))

    app.config['ADMIN_EMAIL'] = os.environ.get('ADMIN_EMAIL', 'admin@empresa.com')
    app.config['ADMIN_PASSWORD'] = os.environ.get('ADMIN_PASSWORD')
    app.config['ADMIN_NAME'] = os.environ.get('ADMIN_NAME', 'Administrador')

    app.config['STOCKOUT_WINDOW_DAYS'] = int(os.environ.get('STOCKOUT_WINDOW_DAYS', '90'))
    app.config['AUDIT_TOP_N'] = int(os.environ.get('AUDIT_TOP_N', '10'))
    app.config['DASHBOARD_TOP_N'] = int(os.environ.get('DASHBOARD_TOP_N', '5'))

    app.config['RATELIMIT_ENABLED'] = _env_flag('RATELIMIT_ENABLED', 'True')
    app.config['LOGIN_RATE_LIMIT'] = os.environ.get('LOGIN_RATE_LIMIT', '10 per minute')

    # Session cookie security configuration
    # Default to True (secure) - only set to False for development (HTTP)
    app.config['SESSION_COOKIE_SECURE'] = _env_flag('SESSION_COOKIE_SECURE', 'True')
    app.config['SESSION_COOKIE_HTTPONLY'] = True
    app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'
    app.config['PERMANENT_SESSION_LIFETIME'] = int(os.environ.get('PERMANENT_SESSION_LIFETIME', '3600'))  # Default: 1 hour
    app.config['REMEMBER_COOKIE_SECURE'] = app.config['SESSION_COOKIE_SECURE']
    app.config['REMEMBER_COOKIE_HTTPONLY'] = True


def create_app(test_config=None):
    """
    Application factory.

    Args:
        test_config (dict): Values applied over the environment configuration

    Raises:
        RuntimeError: If SECRET_KEY is not configured
    """
    load_dotenv()
    base_dir = Path(__file__).parent.parent

    app = Flask(__name__, instance_path=str(base_dir / 'instance'))

    # Get singleton logger
    logger = get_logger("maintenance_app")
    logger.info("Initializing Flask application")

    _load_config(app, base_dir)
    if test_config:
        app.config.update(test_config)

    # SECURITY: Require SECRET_KEY - no fallback
    if not app.config.get('SECRET_KEY'):
        logger.critical("SECRET_KEY not set in environment! Application cannot start.")
        raise RuntimeError("SECRET_KEY environment variable is required")

    if app.config['STORAGE_BACKEND'] == 'json':
        Path(app.config['DATA_DIR']).mkdir(parents=True, exist_ok=True)
    elif app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite:///'):
        Path(app.instance_path).mkdir(parents=True, exist_ok=True)

    logger.debug(f"Storage backend: {app.config['STORAGE_BACKEND']}")

    # Initialize extensions with app
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    limiter.init_app(app)

    logger.debug("Extensions initialized")

    # Import models to ensure they're registered with SQLAlchemy
    from maintenance_app.data.storage import records  # noqa: F401
    from maintenance_app.data.storage.repository import build_repository
    from maintenance_app.services.ai.text_generation import TextGenerationClient

    if app.config['STORAGE_BACKEND'] == 'sql':
        with app.app_context():
            db.create_all()
        logger.debug("Database tables created")

    app.extensions[REPOSITORY_EXTENSION] = build_repository(app.config)
    app.extensions[TEXT_GENERATION_EXTENSION] = TextGenerationClient.from_config(app.config)

    # Register blueprints
    from maintenance_app.auth import auth, register_login_manager
    from maintenance_app.presentation.routes import init_app as init_routes

    register_login_manager(login_manager)
    app.register_blueprint(auth)
    init_routes(app)

    from maintenance_app.data.storage.base import StorageUnavailableError
    from maintenance_app.utils.logging_sanitizer import sanitize_exception_message

    @app.errorhandler(StorageUnavailableError)
    def storage_unavailable(error):
        logger.error(f"Storage unavailable: {error}")
        return jsonify({'success': False, 'error': 'Serviço de dados indisponível.'}), 503

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'success': False, 'error': 'Recurso não encontrado.'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'success': False, 'error': 'Método não permitido.'}), 405

    @app.errorhandler(429)
    def rate_limited(error):
        return jsonify({'success': False, 'error': 'Muitas tentativas. Tente novamente mais tarde.'}), 429

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Unhandled error: {sanitize_exception_message(getattr(error, 'original_exception', None) or error)}")
        return jsonify({'success': False, 'error': 'Erro interno do servidor.'}), 500

    # Add security headers to all responses
    @app.after_request
    def set_security_headers(response):
        """Add security headers to all responses"""
        response.headers['X-Frame-Options'] = 'SAMEORIGIN'
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['Cache-Control'] = 'no-store'
        return response

    logger.info("Flask application initialization complete")

    return app


def get_repository(app=None):
    """Repository of the current (or given) application"""
    from flask import current_app
    return (app or current_app).extensions[REPOSITORY_EXTENSION]


def get_text_generation_client(app=None):
    from flask import current_app
    return (app or current_app).extensions[TEXT_GENERATION_EXTENSION]
