"""
Preventive plan editing and task completion
"""
from datetime import timedelta

import pytest

from maintenance_app.business.maintenance.log_manager import AI_FALLBACK_WARNING, MaintenanceLogManager
from maintenance_app.business.maintenance.preventive_manager import PreventivePlanManager, TASK_NOT_FOUND_ERROR
from maintenance_app.business.core.action_result import ActionResult
from maintenance_app.data.core.equipment import LogKind
from maintenance_app.data.storage.base import StorageUnavailableError
from maintenance_app.utils.dates import to_iso
from conftest import equipment_document


@pytest.fixture
def managers(repository, ai_client, clock):
    repository.equipment.add(equipment_document())
    log_manager = MaintenanceLogManager(repository, ai_client, clock=clock)
    return log_manager, PreventivePlanManager(repository, log_manager, clock=clock)


@pytest.fixture
def plan(managers):
    return managers[1]


def _add_task(plan, ctx, name='Limpeza do condensador', frequency=30):
    result = plan.add_preventive_task(ctx, 'EQ-001', name, frequency)
    assert result.success
    return result.data


def test_add_task_sets_last_execution_to_now(plan, ctx, clock, repository):
    task = _add_task(plan, ctx)
    assert task['lastExecution'] == to_iso(clock())
    assert task['id'].startswith('prev-task-')
    stored = repository.equipment.get_by_id('EQ-001')['preventivePlan']
    assert stored == [task]


@pytest.mark.parametrize('name, frequency', [('', 30), ('Limpeza', 0), ('Limpeza', -7), ('Limpeza', 2.5), ('Limpeza', None)])
def test_add_task_validation(plan, ctx, name, frequency):
    assert plan.add_preventive_task(ctx, 'EQ-001', name, frequency).status == 400


def test_add_task_unknown_equipment(plan, ctx):
    assert plan.add_preventive_task(ctx, 'EQ-404', 'Limpeza', 30).status == 404


def test_update_and_remove_task(plan, ctx, repository):
    task = _add_task(plan, ctx)
    updated = plan.update_preventive_task(ctx, 'EQ-001', task['id'], {'frequencyDays': 15, 'bogus': 1})
    assert updated.success
    assert updated.data['frequencyDays'] == 15
    assert 'bogus' not in updated.data

    assert plan.update_preventive_task(ctx, 'EQ-001', 'prev-task-0', {'frequencyDays': 5}).error == TASK_NOT_FOUND_ERROR

    assert plan.remove_preventive_task(ctx, 'EQ-001', task['id']).success
    assert repository.equipment.get_by_id('EQ-001')['preventivePlan'] == []


def test_complete_logs_then_advances_task(plan, ctx, clock, repository):
    task = _add_task(plan, ctx)
    clock.set(clock() + timedelta(days=31))

    result = plan.complete_preventive_task(ctx, 'EQ-001', task['id'])
    assert result.success
    assert result.data['task']['lastExecution'] == to_iso(clock())

    document = repository.equipment.get_by_id('EQ-001')
    log = document['maintenanceHistory'][0]
    assert log['kind'] == LogKind.PREVENTIVE
    assert log['userRequest'] == 'Execução da tarefa de manutenção preventiva: Limpeza do condensador.'
    assert log['tempoGasto'] == 0
    assert document['preventivePlan'][0]['lastExecution'] == to_iso(clock())


def test_complete_unknown_task(plan, ctx):
    result = plan.complete_preventive_task(ctx, 'EQ-001', 'prev-task-missing')
    assert result.status == 404


def test_failed_log_creation_does_not_advance_task(managers, ctx, clock, repository, monkeypatch):
    log_manager, plan = managers
    task = _add_task(plan, ctx)
    clock.set(clock() + timedelta(days=31))

    monkeypatch.setattr(log_manager, 'create_maintenance_log',
                        lambda *args, **kwargs: ActionResult.fail('Falha ao registrar.', status=500))
    result = plan.complete_preventive_task(ctx, 'EQ-001', task['id'])

    assert not result.success
    document = repository.equipment.get_by_id('EQ-001')
    assert document['preventivePlan'][0]['lastExecution'] == task['lastExecution']
    assert document.get('maintenanceHistory', []) == []


def test_failed_task_update_removes_appended_log(managers, ctx, clock, repository, monkeypatch):
    log_manager, plan = managers
    task = _add_task(plan, ctx)
    clock.set(clock() + timedelta(days=31))

    def broken_save(equipment_id, tasks):
        raise StorageUnavailableError('equipment: write failed')

    monkeypatch.setattr(plan, '_save_plan', broken_save)
    with pytest.raises(StorageUnavailableError):
        plan.complete_preventive_task(ctx, 'EQ-001', task['id'])

    document = repository.equipment.get_by_id('EQ-001')
    assert document['maintenanceHistory'] == []
    assert document['preventivePlan'][0]['lastExecution'] == task['lastExecution']


def test_ai_fallback_still_completes_task(repository, failing_ai_client, clock, ctx):
    repository.equipment.add(equipment_document())
    log_manager = MaintenanceLogManager(repository, failing_ai_client, clock=clock)
    plan = PreventivePlanManager(repository, log_manager, clock=clock)
    task = plan.add_preventive_task(ctx, 'EQ-001', 'Lubrificação', 60).data

    result = plan.complete_preventive_task(ctx, 'EQ-001', task['id'])
    assert result.success
    assert result.warning == AI_FALLBACK_WARNING
