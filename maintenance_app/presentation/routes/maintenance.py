"""
Maintenance routes
Log creation, consumable replacement and the preventive plan of an equipment
"""

from flask import Blueprint

from maintenance_app.presentation.routes.helpers import (
    current_ctx, json_body, log_manager, preventive_manager, require_permission, result_response,
)
from maintenance_app.utils.logging_sanitizer import sanitize_dict
from maintenance_app.logger import get_logger

bp = Blueprint('maintenance', __name__)
logger = get_logger("maintenance_app.routes.maintenance")


@bp.route('/equipment/<equipment_id>/logs', methods=['POST'])
@require_permission('modifyEquipment')
def create_maintenance_log(equipment_id):
    payload = json_body()
    logger.debug(f"Maintenance log request for {equipment_id}: {sanitize_dict(payload)}")
    return result_response(log_manager().create_maintenance_log(current_ctx(), {**payload, 'equipmentId': equipment_id}))


@bp.route('/equipment/<equipment_id>/consumables', methods=['POST'])
@require_permission('modifyEquipment')
def register_consumable_replacement(equipment_id):
    payload = json_body()
    manager = log_manager()
    if payload.get('tempoGasto') is not None:
        result = manager.register_consumable_replacement(current_ctx(), equipment_id, payload.get('insumoName'),
                                                         payload['tempoGasto'])
    else:
        result = manager.register_consumable_replacement(current_ctx(), equipment_id, payload.get('insumoName'))
    return result_response(result)


@bp.route('/equipment/<equipment_id>/preventive', methods=['POST'])
@require_permission('modifyEquipment')
def add_preventive_task(equipment_id):
    payload = json_body()
    return result_response(preventive_manager().add_preventive_task(
        current_ctx(), equipment_id, payload.get('taskName'), payload.get('frequencyDays')))


@bp.route('/equipment/<equipment_id>/preventive/<task_id>', methods=['PATCH'])
@require_permission('modifyEquipment')
def update_preventive_task(equipment_id, task_id):
    return result_response(preventive_manager().update_preventive_task(current_ctx(), equipment_id, task_id, json_body()))


@bp.route('/equipment/<equipment_id>/preventive/<task_id>', methods=['DELETE'])
@require_permission('modifyEquipment')
def remove_preventive_task(equipment_id, task_id):
    return result_response(preventive_manager().remove_preventive_task(current_ctx(), equipment_id, task_id))


@bp.route('/equipment/<equipment_id>/preventive/<task_id>/complete', methods=['POST'])
@require_permission('modifyEquipment')
def complete_preventive_task(equipment_id, task_id):
    return result_response(preventive_manager().complete_preventive_task(current_ctx(), equipment_id, task_id))
