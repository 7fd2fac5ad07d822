"""
Administration routes
Stores, users and the role permission matrix
"""

from flask import Blueprint

from maintenance_app.data.core.roles import PERMISSION_GROUPS, PERMISSION_LABELS
from maintenance_app.presentation.routes.helpers import (
    current_ctx, json_body, ok_response, permission_manager, require_permission, result_response,
    store_manager, user_manager,
)
from maintenance_app.utils.logging_sanitizer import sanitize_dict
from maintenance_app.logger import get_logger

bp = Blueprint('administration', __name__)
logger = get_logger("maintenance_app.routes.administration")


# Stores

@bp.route('/stores', methods=['GET'])
@require_permission('viewStores')
def list_stores():
    return ok_response([s.to_dict() for s in store_manager().list_stores()])


@bp.route('/stores', methods=['POST'])
@require_permission('modifyStores')
def add_store():
    return result_response(store_manager().add_store(current_ctx(), json_body().get('name')))


@bp.route('/stores/<store_id>', methods=['PATCH'])
@require_permission('modifyStores')
def update_store(store_id):
    return result_response(store_manager().update_store(current_ctx(), store_id, json_body().get('name')))


@bp.route('/stores/<store_id>', methods=['DELETE'])
@require_permission('modifyStores')
def delete_store(store_id):
    return result_response(store_manager().delete_store(current_ctx(), store_id))


# Users

@bp.route('/users', methods=['GET'])
@require_permission('viewUsers')
def list_users():
    return ok_response([u.public_dict() for u in user_manager().list_users()])


@bp.route('/users', methods=['POST'])
@require_permission('modifyUsers')
def create_user():
    payload = json_body()
    logger.debug(f"Create user request: {sanitize_dict(payload)}")
    return result_response(user_manager().create_user(current_ctx(), payload))


@bp.route('/users/<user_id>', methods=['PATCH'])
@require_permission('modifyUsers')
def update_user(user_id):
    payload = json_body()
    logger.debug(f"Update user {user_id} request: {sanitize_dict(payload)}")
    return result_response(user_manager().update_user(current_ctx(), user_id, payload))


@bp.route('/users/<user_id>', methods=['DELETE'])
@require_permission('modifyUsers')
def delete_user(user_id):
    return result_response(user_manager().delete_user(current_ctx(), user_id))


# Roles

@bp.route('/roles', methods=['GET'])
@require_permission('viewRoles')
def list_roles():
    return ok_response({
        'roles': permission_manager().list_roles(),
        'labels': PERMISSION_LABELS,
        'groups': PERMISSION_GROUPS,
    })


@bp.route('/roles/<role>/permissions/<permission>', methods=['PUT'])
@require_permission('modifyRoles')
def set_permission(role, permission):
    value = bool(json_body().get('value'))
    return result_response(permission_manager().set_permission(current_ctx(), role, permission, value))
