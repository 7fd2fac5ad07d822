"""
Equipment routes
CRUD, global search and QR labels
"""

from flask import Blueprint, Response, request

from maintenance_app.presentation.routes.helpers import (
    current_ctx, equipment_manager, json_body, ok_response, require_permission, result_response,
)
from maintenance_app.services.qr_code import render_qr_png
from maintenance_app.logger import get_logger

bp = Blueprint('equipment', __name__)
logger = get_logger("maintenance_app.routes.equipment")


@bp.route('/equipment', methods=['GET'])
@require_permission('viewEquipment')
def list_equipment():
    store_id = request.args.get('storeId')
    return ok_response([e.to_dict() for e in equipment_manager().list_equipment(store_id)])


@bp.route('/equipment', methods=['POST'])
@require_permission('createEquipment')
def register_equipment():
    return result_response(equipment_manager().register_equipment(current_ctx(), json_body()))


@bp.route('/equipment/<equipment_id>', methods=['GET'])
@require_permission('viewEquipment')
def get_equipment(equipment_id):
    equipment = equipment_manager().get_equipment(equipment_id)
    if equipment is None:
        return {'success': False, 'error': 'Equipamento não encontrado.'}, 404
    return ok_response(equipment.to_dict())


@bp.route('/equipment/<equipment_id>', methods=['PATCH'])
@require_permission('modifyEquipment')
def update_equipment(equipment_id):
    return result_response(equipment_manager().update_equipment(current_ctx(), equipment_id, json_body()))


@bp.route('/equipment/<equipment_id>', methods=['DELETE'])
@require_permission('modifyEquipment')
def delete_equipment(equipment_id):
    return result_response(equipment_manager().delete_equipment(current_ctx(), equipment_id))


@bp.route('/search', methods=['GET'])
@require_permission('viewEquipment')
def search():
    query = request.args.get('q', '').strip()
    return ok_response(equipment_manager().search(query))


@bp.route('/equipment/<equipment_id>/qr.png', methods=['GET'])
@require_permission('viewEquipment')
def qr_code_png(equipment_id):
    """Printable QR label; the payload is the equipment id itself"""
    if equipment_manager().get_equipment(equipment_id) is None:
        return {'success': False, 'error': 'Equipamento não encontrado.'}, 404
    return Response(render_qr_png(equipment_id), mimetype='image/png')


@bp.route('/qr/validate', methods=['POST'])
@require_permission('viewEquipment')
def validate_qr_code():
    payload = str(json_body().get('payload') or '').strip()
    result = equipment_manager().validate_qr_code(payload)
    return result, (200 if result['success'] else 404)
