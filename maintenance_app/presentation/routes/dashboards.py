"""
Dashboard routes
Read-only aggregated payloads, recomputed on every request
"""

from flask import Blueprint

from maintenance_app.presentation.routes.helpers import dashboard_service, ok_response, require_permission

bp = Blueprint('dashboards', __name__)


@bp.route('/dashboard', methods=['GET'])
@require_permission('viewDashboard')
def main_dashboard():
    return ok_response(dashboard_service().main_dashboard())


@bp.route('/dashboard/maintenance', methods=['GET'])
@require_permission('viewDashboard')
def maintenance_dashboard():
    return ok_response(dashboard_service().maintenance_dashboard())


@bp.route('/dashboard/stock', methods=['GET'])
@require_permission('viewDashboard')
def stock_dashboard():
    return ok_response(dashboard_service().stock_dashboard())


@bp.route('/dashboard/admin', methods=['GET'])
@require_permission('viewUsers')
def admin_dashboard():
    return ok_response(dashboard_service().admin_dashboard())


@bp.route('/reports/audit', methods=['GET'])
@require_permission('viewDashboard')
def audit_report():
    return ok_response(dashboard_service().audit_report())


@bp.route('/reports/mrp', methods=['GET'])
@require_permission('viewDashboard')
def mrp_report():
    return ok_response(dashboard_service().mrp_report())


@bp.route('/reports/preventive', methods=['GET'])
@require_permission('viewEquipment')
def preventive_schedule():
    return ok_response(dashboard_service().preventive_schedule())


@bp.route('/reports/corrective', methods=['GET'])
@require_permission('viewEquipment')
def corrective_history():
    return ok_response(dashboard_service().corrective_history())


@bp.route('/reports/components', methods=['GET'])
@require_permission('viewEquipment')
def component_catalog():
    return ok_response(dashboard_service().component_catalog())


@bp.route('/reports/insumos', methods=['GET'])
@require_permission('viewEquipment')
def insumo_usage():
    return ok_response(dashboard_service().insumo_usage())


@bp.route('/reports/purchasing', methods=['GET'])
@require_permission('viewEquipment')
def purchasing_overview():
    return ok_response(dashboard_service().purchasing_overview())
