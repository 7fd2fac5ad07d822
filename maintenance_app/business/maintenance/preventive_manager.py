"""
PreventivePlanManager - Business logic for the recurring preventive plan

Next due date of a task is lastExecution + frequencyDays. Completing a task
is one user-visible action made of two writes: the execution log is appended
first, then lastExecution advances. A failed log leaves the task untouched;
a failed task update removes the log again.
"""

from typing import Any, Callable, Dict, List

from maintenance_app.business.core.action_result import ActionResult
from maintenance_app.business.core.auth_context import AuthContext
from maintenance_app.business.core.compensating_transaction import CompensatingTransaction
from maintenance_app.data.core.equipment import PREVENTIVE_REQUEST_PREFIX, Equipment, LogKind, PreventiveTask
from maintenance_app.data.storage.repository import EQUIPMENT
from maintenance_app.utils.dates import epoch_millis, parse_timestamp, to_iso, utcnow
from maintenance_app.logger import get_logger

logger = get_logger("maintenance_app.business.maintenance.preventive")

EQUIPMENT_NOT_FOUND_ERROR = 'Equipamento não encontrado.'
TASK_NOT_FOUND_ERROR = 'Tarefa preventiva não encontrada.'


def preventive_request_text(task_name: str) -> str:
    return f'{PREVENTIVE_REQUEST_PREFIX} {task_name}.'


def _validate_task_fields(fields: Dict[str, Any]):
    """Return an error message or None."""
    if 'taskName' in fields and not str(fields['taskName'] or '').strip():
        return 'O nome da tarefa é obrigatório.'
    if 'frequencyDays' in fields:
        frequency = fields['frequencyDays']
        if not isinstance(frequency, int) or isinstance(frequency, bool) or frequency <= 0:
            return 'A frequência deve ser um número inteiro de dias maior que zero.'
    if fields.get('lastExecution') is not None:
        try:
            parse_timestamp(fields['lastExecution'])
        except (TypeError, ValueError):
            return 'Data da última execução inválida.'
    return None


class PreventivePlanManager:

    def __init__(self, repository, log_manager, clock: Callable = utcnow):
        self.repository = repository
        self.log_manager = log_manager
        self.clock = clock

    def _load(self, equipment_id: str):
        document = self.repository.equipment.get_by_id(equipment_id) if equipment_id else None
        return Equipment.from_dict(document) if document is not None else None

    def _save_plan(self, equipment_id: str, plan: List[PreventiveTask]) -> None:
        self.repository.equipment.update(equipment_id, {'preventivePlan': [t.to_dict() for t in plan]})
        self.repository.invalidate_views(EQUIPMENT)

    def add_preventive_task(self, ctx: AuthContext, equipment_id: str, task_name: str, frequency_days: int) -> ActionResult:
        error = _validate_task_fields({'taskName': task_name, 'frequencyDays': frequency_days})
        if error:
            return ActionResult.fail(error)
        equipment = self._load(equipment_id)
        if equipment is None:
            return ActionResult.not_found(EQUIPMENT_NOT_FOUND_ERROR)

        now = self.clock()
        taken = {t.id for t in equipment.preventive_plan}
        millis = epoch_millis(now)
        while f'prev-task-{millis}' in taken:
            millis += 1

        task = PreventiveTask(
            id=f'prev-task-{millis}',
            task_name=task_name.strip(),
            frequency_days=frequency_days,
            last_execution=to_iso(now),
        )
        self._save_plan(equipment_id, equipment.preventive_plan + [task])
        logger.info(f"{ctx} added preventive task {task.id} '{task.task_name}' to {equipment_id}")
        return ActionResult.ok(task.to_dict())

    def update_preventive_task(self, ctx: AuthContext, equipment_id: str, task_id: str, partial: Dict[str, Any]) -> ActionResult:
        changes = {k: v for k, v in (partial or {}).items() if k in ('taskName', 'frequencyDays', 'lastExecution')}
        error = _validate_task_fields(changes)
        if error:
            return ActionResult.fail(error)
        equipment = self._load(equipment_id)
        if equipment is None:
            return ActionResult.not_found(EQUIPMENT_NOT_FOUND_ERROR)
        if equipment.find_task(task_id) is None:
            return ActionResult.not_found(TASK_NOT_FOUND_ERROR)

        plan = [t.merged(changes) if t.id == task_id else t for t in equipment.preventive_plan]
        self._save_plan(equipment_id, plan)
        logger.info(f"{ctx} updated preventive task {task_id} on {equipment_id}")
        return ActionResult.ok(next(t for t in plan if t.id == task_id).to_dict())

    def remove_preventive_task(self, ctx: AuthContext, equipment_id: str, task_id: str) -> ActionResult:
        equipment = self._load(equipment_id)
        if equipment is None:
            return ActionResult.not_found(EQUIPMENT_NOT_FOUND_ERROR)
        plan = [t for t in equipment.preventive_plan if t.id != task_id]
        if len(plan) != len(equipment.preventive_plan):
            self._save_plan(equipment_id, plan)
            logger.info(f"{ctx} removed preventive task {task_id} from {equipment_id}")
        return ActionResult.ok({'id': task_id})

    def complete_preventive_task(self, ctx: AuthContext, equipment_id: str, task_id: str) -> ActionResult:
        """
        Log the execution of a task and advance its lastExecution to now.

        Returns:
            ActionResult with data {'task': ..., 'log': ...}
        """
        equipment = self._load(equipment_id)
        if equipment is None:
            return ActionResult.not_found(EQUIPMENT_NOT_FOUND_ERROR)
        task = equipment.find_task(task_id)
        if task is None:
            return ActionResult.not_found(TASK_NOT_FOUND_ERROR)

        with CompensatingTransaction(f'preventive task {task_id} on {equipment_id}') as tx:
            log_result = self.log_manager.create_maintenance_log(ctx, {
                'equipmentId': equipment_id,
                'modifications': preventive_request_text(task.task_name),
                'tempoGasto': 0,
                'kind': LogKind.PREVENTIVE,
            })
            if not log_result.success:
                logger.warning(f"Preventive task {task_id} not advanced: {log_result.error}")
                return log_result
            log = log_result.data['log']
            tx.on_rollback(lambda: self.log_manager.remove_log(ctx, equipment_id, log['id']),
                           f"remove log {log['id']}")

            # Re-read: the history was just rewritten by the log append
            current = self._load(equipment_id)
            executed_at = to_iso(self.clock())
            plan = [t.merged({'lastExecution': executed_at}) if t.id == task_id else t
                    for t in current.preventive_plan]
            self._save_plan(equipment_id, plan)

        logger.info(f"{ctx} completed preventive task {task_id} on {equipment_id}")
        completed = next(t for t in plan if t.id == task_id)
        return ActionResult.ok({'task': completed.to_dict(), 'log': log}, warning=log_result.warning)
