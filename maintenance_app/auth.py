from flask import Blueprint, current_app, jsonify
from flask_login import current_user, login_required, login_user, logout_user

from maintenance_app import get_repository, limiter
from maintenance_app.business.core.permission_manager import PermissionManager
from maintenance_app.business.users.user_manager import UserManager
from maintenance_app.data.storage.base import StorageUnavailableError
from maintenance_app.logger import get_logger
from maintenance_app.presentation.routes.helpers import current_ctx, json_body, result_response
from maintenance_app.utils.logging_sanitizer import sanitize_dict, sanitize_exception_message

logger = get_logger("maintenance_app.auth")
auth = Blueprint('auth', __name__, url_prefix='/api')

INVALID_CREDENTIALS_ERROR = 'E-mail ou senha inválidos.'
STORAGE_ERROR = 'Serviço de dados indisponível.'
UNEXPECTED_ERROR = 'Ocorreu um erro inesperado. Tente novamente.'


def register_login_manager(login_manager):
    """Attach the user loader and the JSON 401 handler"""

    @login_manager.user_loader
    def load_user(user_id):
        return UserManager(get_repository()).get_user(user_id)

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'success': False, 'error': 'Autenticação necessária.'}), 401


def _login_rate_limit():
    return current_app.config['LOGIN_RATE_LIMIT']


@auth.route('/login', methods=['POST'])
@limiter.limit(_login_rate_limit)
def login():
    payload = json_body()
    logger.debug(f"Login attempt: {sanitize_dict(payload)}")

    email = payload.get('email')
    email = email.strip() if isinstance(email, str) else ''
    password = payload.get('password')
    password = password if isinstance(password, str) else ''
    if not email or not password:
        logger.warning(f"Login attempt with missing credentials for email: {email}")
        return jsonify({'success': False, 'error': 'Informe e-mail e senha.'}), 400

    try:
        user = UserManager(get_repository()).authenticate(email, password)
    except StorageUnavailableError as e:
        logger.error(f"Login failed, storage unavailable: {e}")
        return jsonify({'success': False, 'error': STORAGE_ERROR}), 503
    except Exception as e:
        logger.error(f"Unexpected error during login for {email}: {sanitize_exception_message(e)}")
        return jsonify({'success': False, 'error': UNEXPECTED_ERROR}), 500

    if user is None:
        return jsonify({'success': False, 'error': INVALID_CREDENTIALS_ERROR}), 401

    login_user(user)
    logger.info(f"Successful login for user: {user.email}")
    return jsonify({'success': True, 'data': user.public_dict()})


@auth.route('/logout', methods=['POST'])
@login_required
def logout():
    email = current_user.email
    logout_user()
    logger.info(f"User logged out: {email}")
    return jsonify({'success': True})


@auth.route('/me')
@login_required
def me():
    """Current user with the resolved permission flags of their role"""
    permissions = PermissionManager(get_repository()).get_permissions(current_user.role)
    return jsonify({'success': True, 'data': {**current_user.public_dict(), 'permissions': permissions}})


@auth.route('/me', methods=['PATCH'])
@login_required
def update_me():
    """Self-service profile edit; role and e-mail changes go through the users admin"""
    payload = json_body()
    logger.debug(f"Profile update for {current_user.id}: {sanitize_dict(payload)}")
    return result_response(UserManager(get_repository()).update_profile(current_ctx(), payload))
