"""
Equipment registry: registration, edits, deletion, QR lookup and global search
"""
import pytest

from maintenance_app.business.equipment.equipment_manager import (
    DUPLICATE_ID_ERROR, DUPLICATE_ID_ON_UPDATE_ERROR, MANAGED_FIELD_ERROR, NOT_FOUND_ERROR, EquipmentManager,
)
from maintenance_app.business.maintenance.log_manager import MaintenanceLogManager
from maintenance_app.business.maintenance.preventive_manager import PreventivePlanManager
from maintenance_app.services.analytics.dashboards import DashboardService
from maintenance_app.services.qr_code import render_qr_png
from conftest import equipment_document


@pytest.fixture
def manager(repository):
    return EquipmentManager(repository)


def test_register_starts_with_empty_plan_and_history(manager, ctx):
    result = manager.register_equipment(ctx, equipment_document(preventivePlan=[{'id': 'x'}]))
    assert result.success
    stored = manager.get_equipment('EQ-001')
    assert stored.preventive_plan == []
    assert stored.maintenance_history == []
    assert stored.name == 'Balcão Refrigerado'


def test_register_drops_client_supplied_history(manager, ctx, repository):
    forged = {'id': 'log-forjado', 'date': 'not-a-date', 'userRequest': 'Troca', 'cost': 99999}
    assert manager.register_equipment(ctx, equipment_document(maintenanceHistory=[forged])).success
    assert repository.equipment.get_by_id('EQ-001')['maintenanceHistory'] == []


def test_register_requires_id_and_name(manager, ctx):
    assert manager.register_equipment(ctx, equipment_document(id='')).status == 400
    assert manager.register_equipment(ctx, equipment_document(name='  ')).status == 400
    assert manager.list_equipment() == []


def test_register_duplicate_id_conflicts(manager, ctx):
    manager.register_equipment(ctx, equipment_document())
    result = manager.register_equipment(ctx, equipment_document(name='Outro'))
    assert not result.success
    assert result.status == 409
    assert result.error == DUPLICATE_ID_ERROR


def test_update_unknown_equipment(manager, ctx):
    result = manager.update_equipment(ctx, 'EQ-404', {'name': 'x'})
    assert result.status == 404
    assert result.error == NOT_FOUND_ERROR


def test_update_with_empty_partial_leaves_record_unchanged(manager, ctx, repository):
    manager.register_equipment(ctx, equipment_document())
    before = repository.equipment.get_by_id('EQ-001')
    result = manager.update_equipment(ctx, 'EQ-001', {})
    assert result.success
    assert repository.equipment.get_by_id('EQ-001') == before


def test_update_renames_id(manager, ctx):
    manager.register_equipment(ctx, equipment_document())
    result = manager.update_equipment(ctx, 'EQ-001', {'id': 'EQ-100', 'model': 'BR-3000'})
    assert result.success
    assert manager.get_equipment('EQ-001') is None
    assert manager.get_equipment('EQ-100').model == 'BR-3000'


def test_update_id_collision_conflicts(manager, ctx):
    manager.register_equipment(ctx, equipment_document('EQ-001'))
    manager.register_equipment(ctx, equipment_document('EQ-002'))
    result = manager.update_equipment(ctx, 'EQ-001', {'id': 'EQ-002'})
    assert result.status == 409
    assert result.error == DUPLICATE_ID_ON_UPDATE_ERROR


def test_delete_is_idempotent(manager, ctx):
    manager.register_equipment(ctx, equipment_document())
    first = manager.delete_equipment(ctx, 'EQ-001')
    second = manager.delete_equipment(ctx, 'EQ-001')
    assert first.success and first.data['deleted'] is True
    assert second.success and second.data['deleted'] is False


def test_list_filters_by_store(manager, ctx):
    manager.register_equipment(ctx, equipment_document('EQ-001', storeId='loja-1'))
    manager.register_equipment(ctx, equipment_document('EQ-002', storeId='loja-2'))
    assert [e.id for e in manager.list_equipment('loja-2')] == ['EQ-002']
    assert len(manager.list_equipment()) == 2


def test_validate_qr_code(manager, ctx):
    manager.register_equipment(ctx, equipment_document())
    found = manager.validate_qr_code('EQ-001')
    assert found['success'] is True
    assert found['equipment']['id'] == 'EQ-001'

    missing = manager.validate_qr_code('EQ-999')
    assert missing == {'success': False, 'equipment': None}
    assert manager.validate_qr_code('')['success'] is False


def test_search_covers_equipment_users_and_stock(manager, ctx, repository):
    manager.register_equipment(ctx, equipment_document())
    repository.users.add({'id': 'user-ana-1', 'name': 'Ana Balconista', 'email': 'ana@empresa.com'})
    repository.warehouse_components.add({'partNumber': 'BAL-1', 'name': 'Porta de balcão', 'quantityInStock': 1})
    repository.warehouse_insumos.add({'id': 'insumo-1', 'name': 'Gás R404', 'type': 'Gás', 'quantityInStock': 1})

    results = manager.search('BAL')
    assert [e['id'] for e in results['equipment']] == ['EQ-001']
    assert [u['id'] for u in results['users']] == ['user-ana-1']
    assert [c['partNumber'] for c in results['components']] == ['BAL-1']
    assert results['insumos'] == []

    assert manager.search('   ') == {'equipment': [], 'users': [], 'components': [], 'insumos': []}


def test_qr_png_renders_image():
    png = render_qr_png('EQ-001')
    assert png.startswith(b'\x89PNG')


def test_qr_png_rejects_empty_payload():
    with pytest.raises(ValueError):
        render_qr_png('')


def test_update_refuses_to_rewrite_maintenance_history(manager, ctx, repository, ai_client, clock):
    manager.register_equipment(ctx, equipment_document())
    log = MaintenanceLogManager(repository, ai_client, clock=clock).create_maintenance_log(
        ctx, {'equipmentId': 'EQ-001', 'modifications': 'Troca de termostato'}).data['log']

    forged = {'id': 'log-forjado', 'date': log['date'], 'userRequest': 'Troca', 'cost': 99999}
    result = manager.update_equipment(ctx, 'EQ-001', {'maintenanceHistory': [forged], 'model': 'BR-3000'})

    assert result.status == 400
    assert result.error == MANAGED_FIELD_ERROR
    stored = repository.equipment.get_by_id('EQ-001')
    assert [h['id'] for h in stored['maintenanceHistory']] == [log['id']]
    assert stored['model'] == 'BR-2000'


def test_update_refuses_preventive_plan_and_reports_stay_computable(manager, ctx, repository, ai_client, clock):
    manager.register_equipment(ctx, equipment_document())
    plan = PreventivePlanManager(repository, MaintenanceLogManager(repository, ai_client, clock=clock), clock=clock)
    task = plan.add_preventive_task(ctx, 'EQ-001', 'Limpeza', 30).data

    broken = {**task, 'frequencyDays': '30'}
    assert manager.update_equipment(ctx, 'EQ-001', {'preventivePlan': [broken]}).status == 400
    assert repository.equipment.get_by_id('EQ-001')['preventivePlan'] == [task]

    schedule = DashboardService(repository, clock=clock).preventive_schedule()
    assert [entry['status'] for entry in schedule] == ['Em Dia']
