"""
Maintenance log creation: AI summary with fallback, stock resolution and
compensation of the stock decrement when the append fails
"""
import pytest

from maintenance_app.business.maintenance.log_manager import (
    AI_FALLBACK_WARNING, CONSUMABLE_REPLACEMENT_HOURS, MaintenanceLogManager,
)
from maintenance_app.data.core.equipment import LogKind, MaintenanceLog
from maintenance_app.data.storage.base import StorageUnavailableError
from maintenance_app.utils.dates import epoch_millis, to_iso
from conftest import equipment_document


@pytest.fixture
def seeded(repository):
    repository.equipment.add(equipment_document())
    repository.warehouse_components.add({'partNumber': 'CMP-100', 'name': 'Compressor', 'quantityInStock': 2, 'cost': 150.0})
    repository.warehouse_insumos.add({'id': 'insumo-1', 'name': 'Óleo POE', 'type': 'Óleo', 'quantityInStock': 1, 'cost': 40.0})
    return repository


@pytest.fixture
def manager(seeded, ai_client, clock):
    return MaintenanceLogManager(seeded, ai_client, clock=clock)


def _stock(repository, collection, key):
    return getattr(repository, collection).get_by_id(key)['quantityInStock']


def test_log_uses_ai_summary_and_is_inserted_at_head(manager, seeded, ctx, clock):
    first = manager.create_maintenance_log(ctx, {'equipmentId': 'EQ-001', 'modifications': 'Troca de termostato'})
    assert first.success
    assert first.warning is None
    assert first.data['logEntry'] == 'Relatório: Troca de termostato em Balcão Refrigerado'

    second = manager.create_maintenance_log(ctx, {'equipmentId': 'EQ-001', 'modifications': 'Limpeza do condensador'})
    history = seeded.equipment.get_by_id('EQ-001')['maintenanceHistory']
    assert [h['id'] for h in history] == [second.data['log']['id'], first.data['log']['id']]

    log = history[1]
    assert log['date'] == to_iso(clock())
    assert log['userRequest'] == 'Troca de termostato'
    assert log['kind'] == LogKind.CORRECTIVE
    assert log['createdBy'] == ctx.user_id


def test_log_ids_stay_unique_within_the_same_millisecond(manager, seeded, ctx, clock):
    manager.create_maintenance_log(ctx, {'equipmentId': 'EQ-001', 'modifications': 'A'})
    manager.create_maintenance_log(ctx, {'equipmentId': 'EQ-001', 'modifications': 'B'})
    millis = epoch_millis(clock())
    ids = {h['id'] for h in seeded.equipment.get_by_id('EQ-001')['maintenanceHistory']}
    assert ids == {f'log-{millis}', f'log-{millis + 1}'}


def test_ai_failure_falls_back_to_plain_text(seeded, failing_ai_client, ctx, clock):
    manager = MaintenanceLogManager(seeded, failing_ai_client, clock=clock)
    result = manager.create_maintenance_log(ctx, {'equipmentId': 'EQ-001', 'modifications': 'Troca de ventilador'})
    assert result.success
    assert result.warning == AI_FALLBACK_WARNING
    assert result.data['logEntry'] == 'Serviço registrado: Troca de ventilador'
    assert seeded.equipment.get_by_id('EQ-001')['maintenanceHistory'][0]['generatedLog'] == \
        'Serviço registrado: Troca de ventilador'


def test_component_without_cost_consumes_one_unit(manager, seeded, ctx):
    result = manager.create_maintenance_log(ctx, {
        'equipmentId': 'EQ-001', 'modifications': 'Compressor trocado',
        'componentId': 'c-1', 'componentName': 'Compressor', 'componentPartNumber': 'CMP-100',
    })
    assert result.success
    assert result.data['log']['cost'] == 150.0
    assert _stock(seeded, 'warehouse_components', 'CMP-100') == 1


def test_insumo_is_matched_by_name_ignoring_case(manager, seeded, ctx):
    result = manager.create_maintenance_log(ctx, {
        'equipmentId': 'EQ-001', 'modifications': 'Completar óleo', 'insumoName': 'óleo poe',
    })
    assert result.data['log']['cost'] == 40.0
    assert _stock(seeded, 'warehouse_insumos', 'insumo-1') == 0


def test_out_of_stock_leaves_cost_unset(manager, seeded, ctx):
    seeded.warehouse_insumos.update('insumo-1', {'quantityInStock': 0})
    result = manager.create_maintenance_log(ctx, {
        'equipmentId': 'EQ-001', 'modifications': 'Completar óleo', 'insumoName': 'Óleo POE',
    })
    assert result.success
    assert 'cost' not in result.data['log']
    assert _stock(seeded, 'warehouse_insumos', 'insumo-1') == 0


def test_explicit_cost_does_not_touch_stock(manager, seeded, ctx):
    result = manager.create_maintenance_log(ctx, {
        'equipmentId': 'EQ-001', 'modifications': 'Compressor trocado',
        'componentName': 'Compressor', 'componentPartNumber': 'CMP-100', 'cost': 320.0,
    })
    assert result.data['log']['cost'] == 320.0
    assert _stock(seeded, 'warehouse_components', 'CMP-100') == 2


def test_failed_append_restores_stock(manager, seeded, ctx, monkeypatch):
    def broken_append(*args, **kwargs):
        raise StorageUnavailableError('equipment: disk full')

    monkeypatch.setattr(manager, 'append_log', broken_append)
    with pytest.raises(StorageUnavailableError):
        manager.create_maintenance_log(ctx, {
            'equipmentId': 'EQ-001', 'modifications': 'Compressor trocado',
            'componentName': 'Compressor', 'componentPartNumber': 'CMP-100',
        })
    assert _stock(seeded, 'warehouse_components', 'CMP-100') == 2
    assert seeded.equipment.get_by_id('EQ-001').get('maintenanceHistory', []) == []


@pytest.mark.parametrize('request_body, status', [
    ({'equipmentId': 'EQ-001', 'modifications': '   '}, 400),
    ({'equipmentId': 'EQ-404', 'modifications': 'Troca'}, 404),
    ({'equipmentId': 'EQ-001', 'modifications': 'Troca', 'cost': -5}, 400),
    ({'equipmentId': 'EQ-001', 'modifications': 'Troca', 'tempoGasto': 'duas horas'}, 400),
    ({'equipmentId': 'EQ-001', 'modifications': 'Troca', 'kind': 'emergencial'}, 400),
])
def test_invalid_requests_are_rejected(manager, seeded, ctx, request_body, status):
    result = manager.create_maintenance_log(ctx, request_body)
    assert not result.success
    assert result.status == status
    assert seeded.equipment.get_by_id('EQ-001').get('maintenanceHistory', []) == []


def test_consumable_replacement(manager, seeded, ctx):
    result = manager.register_consumable_replacement(ctx, 'EQ-001', 'Óleo POE')
    assert result.success
    log = result.data['log']
    assert log['kind'] == LogKind.CONSUMABLE
    assert log['userRequest'] == 'Substituição do insumo: Óleo POE'
    assert log['tempoGasto'] == CONSUMABLE_REPLACEMENT_HOURS
    assert log['insumoName'] == 'Óleo POE'
    assert _stock(seeded, 'warehouse_insumos', 'insumo-1') == 0


def test_consumable_replacement_requires_insumo(manager, ctx):
    assert manager.register_consumable_replacement(ctx, 'EQ-001', '  ').status == 400


@pytest.mark.parametrize('user_request, kind', [
    ('Execução da tarefa de manutenção preventiva: Limpeza.', LogKind.PREVENTIVE),
    ('Substituição do insumo: Óleo POE', LogKind.CONSUMABLE),
    ('Vazamento no evaporador', LogKind.CORRECTIVE),
])
def test_legacy_logs_are_classified_by_request_text(user_request, kind):
    log = MaintenanceLog.from_dict({'id': 'log-1', 'date': '2024-01-01T00:00:00.000Z', 'userRequest': user_request})
    assert log.kind == kind


def test_consumed_insumo_read_from_legacy_text():
    log = MaintenanceLog.from_dict({'id': 'log-1', 'userRequest': 'Substituição do insumo: Filtro de ar'})
    assert log.consumed_insumo == 'Filtro de ar'
