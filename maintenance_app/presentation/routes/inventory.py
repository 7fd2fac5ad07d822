"""
Inventory routes
Warehouse stock (components and insumos) and purchase requests
"""

from flask import Blueprint, request

from maintenance_app.presentation.routes.helpers import (
    current_ctx, json_body, ok_response, purchasing_manager, require_permission, result_response,
    warehouse_manager,
)
from maintenance_app.logger import get_logger

bp = Blueprint('inventory', __name__)
logger = get_logger("maintenance_app.routes.inventory")


# Warehouse

@bp.route('/warehouse/components', methods=['GET'])
@require_permission('viewEquipment')
def list_components():
    return ok_response([c.to_dict() for c in warehouse_manager().list_components()])


@bp.route('/warehouse/components', methods=['POST'])
@require_permission('modifyEquipment')
def add_component():
    return result_response(warehouse_manager().add_component(current_ctx(), json_body()))


@bp.route('/warehouse/components/<part_number>', methods=['PATCH'])
@require_permission('modifyEquipment')
def update_component(part_number):
    return result_response(warehouse_manager().update_component(current_ctx(), part_number, json_body()))


@bp.route('/warehouse/components/search', methods=['GET'])
@require_permission('viewEquipment')
def search_components():
    query = request.args.get('q', '').strip()
    return ok_response([c.to_dict() for c in warehouse_manager().search_components(query)])


@bp.route('/warehouse/insumos', methods=['GET'])
@require_permission('viewEquipment')
def list_insumos():
    return ok_response([i.to_dict() for i in warehouse_manager().list_insumos()])


@bp.route('/warehouse/insumos', methods=['POST'])
@require_permission('modifyEquipment')
def add_insumo():
    return result_response(warehouse_manager().add_insumo(current_ctx(), json_body()))


@bp.route('/warehouse/insumos/<insumo_id>', methods=['PATCH'])
@require_permission('modifyEquipment')
def update_insumo(insumo_id):
    return result_response(warehouse_manager().update_insumo(current_ctx(), insumo_id, json_body()))


@bp.route('/warehouse/<item_type>/<key>/receive', methods=['POST'])
@require_permission('modifyEquipment')
def receive_stock(item_type, key):
    quantity = json_body().get('quantity')
    return result_response(warehouse_manager().receive_stock(current_ctx(), item_type, key, quantity))


@bp.route('/warehouse/<item_type>/<key>/checkout', methods=['POST'])
@require_permission('modifyEquipment')
def checkout_stock(item_type, key):
    quantity = json_body().get('quantity')
    return result_response(warehouse_manager().checkout_stock(current_ctx(), item_type, key, quantity))


# Purchasing

@bp.route('/purchasing/requests', methods=['GET'])
@require_permission('viewEquipment')
def list_purchase_requests():
    status = request.args.get('status')
    return ok_response([r.to_dict() for r in purchasing_manager().list_requests(status)])


@bp.route('/purchasing/requests', methods=['POST'])
@require_permission('modifyEquipment')
def request_purchase():
    payload = json_body()
    return result_response(purchasing_manager().request_purchase(
        current_ctx(), payload.get('itemType'), payload.get('itemKey'), payload.get('quantity')))


@bp.route('/purchasing/requests/<request_id>/receive', methods=['POST'])
@require_permission('modifyEquipment')
def receive_purchase(request_id):
    return result_response(purchasing_manager().receive_purchase(current_ctx(), request_id))


@bp.route('/purchasing/pending', methods=['GET'])
@require_permission('viewEquipment')
def list_pending_purchases():
    return ok_response([r.to_dict() for r in purchasing_manager().list_pending_purchases()])
