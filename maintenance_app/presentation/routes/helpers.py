"""
Shared helpers for the JSON route modules: permission checks, the
authenticated context, ActionResult responses and manager construction.
"""

from functools import wraps

from flask import current_app, jsonify, request
from flask_login import current_user, login_required

from maintenance_app import get_repository, get_text_generation_client
from maintenance_app.business.core.action_result import ActionResult
from maintenance_app.business.core.auth_context import AuthContext
from maintenance_app.business.core.permission_manager import PermissionManager
from maintenance_app.business.core.store_manager import StoreManager
from maintenance_app.business.equipment.ai_assistant import EquipmentAssistant
from maintenance_app.business.equipment.equipment_manager import EquipmentManager
from maintenance_app.business.inventory.purchasing_manager import PurchasingManager
from maintenance_app.business.inventory.warehouse_manager import WarehouseManager
from maintenance_app.business.maintenance.log_manager import MaintenanceLogManager
from maintenance_app.business.maintenance.preventive_manager import PreventivePlanManager
from maintenance_app.business.users.user_manager import UserManager
from maintenance_app.logger import get_logger
from maintenance_app.services.analytics.dashboards import DashboardService

logger = get_logger("maintenance_app.routes")

FORBIDDEN_ERROR = 'Você não tem permissão para realizar esta ação.'


def require_permission(permission):
    """Decorator: logged-in user whose role grants `permission`, else 403"""
    def decorator(f):
        @wraps(f)
        @login_required
        def decorated_function(*args, **kwargs):
            if not permission_manager().has_permission(current_user, permission):
                logger.warning(f"User {current_user.id} ({current_user.role}) denied {permission} on {request.path}")
                return jsonify({'success': False, 'error': FORBIDDEN_ERROR}), 403
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def current_ctx() -> AuthContext:
    return AuthContext.from_user(current_user)


def json_body() -> dict:
    """JSON object of the request; anything else reads as empty"""
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def result_response(result: ActionResult):
    return jsonify(result.to_dict()), result.status


def ok_response(data):
    return jsonify({'success': True, 'data': data})


# Manager construction, one set per request

def permission_manager() -> PermissionManager:
    return PermissionManager(get_repository())


def store_manager() -> StoreManager:
    return StoreManager(get_repository())


def user_manager() -> UserManager:
    return UserManager(get_repository())


def equipment_manager() -> EquipmentManager:
    return EquipmentManager(get_repository())


def log_manager() -> MaintenanceLogManager:
    return MaintenanceLogManager(get_repository(), get_text_generation_client())


def preventive_manager() -> PreventivePlanManager:
    return PreventivePlanManager(get_repository(), log_manager())


def warehouse_manager() -> WarehouseManager:
    return WarehouseManager(get_repository())


def purchasing_manager() -> PurchasingManager:
    return PurchasingManager(get_repository(), warehouse_manager())


def equipment_assistant() -> EquipmentAssistant:
    return EquipmentAssistant(get_text_generation_client())


def dashboard_service() -> DashboardService:
    return DashboardService.from_config(get_repository(), current_app.config)
