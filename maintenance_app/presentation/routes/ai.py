"""
AI helper routes used by the equipment forms
"""

from flask import Blueprint

from maintenance_app.presentation.routes.helpers import (
    equipment_assistant, json_body, require_permission, result_response,
)

bp = Blueprint('ai', __name__)


@bp.route('/improve-name', methods=['POST'])
@require_permission('createEquipment')
def improve_name():
    payload = json_body()
    return result_response(equipment_assistant().improve_name(payload.get('name', ''), payload.get('description', '')))


@bp.route('/improve-description', methods=['POST'])
@require_permission('createEquipment')
def improve_description():
    payload = json_body()
    return result_response(equipment_assistant().improve_description(payload.get('name', ''),
                                                                      payload.get('description', '')))


@bp.route('/find-components', methods=['POST'])
@require_permission('createEquipment')
def find_components():
    payload = json_body()
    return result_response(equipment_assistant().find_components(payload.get('name', ''), payload.get('model', '')))


@bp.route('/find-insumos', methods=['POST'])
@require_permission('createEquipment')
def find_insumos():
    payload = json_body()
    return result_response(equipment_assistant().find_insumos(payload.get('name', ''), payload.get('model', '')))


@bp.route('/find-models', methods=['POST'])
@require_permission('createEquipment')
def find_models():
    return result_response(equipment_assistant().find_models(json_body().get('name', '')))
