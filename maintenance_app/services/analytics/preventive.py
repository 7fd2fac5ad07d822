"""
Preventive schedule: due dates and status of every task in every plan.

Due date = date of lastExecution + frequencyDays, compared with `today` as
calendar dates (time of day is ignored).
"""

from datetime import date, timedelta
from typing import Dict, Iterable, List

from maintenance_app.data.core.equipment import Equipment
from maintenance_app.utils.dates import format_br_date, parse_timestamp
from maintenance_app.logger import get_logger

logger = get_logger("maintenance_app.analytics.preventive")

STATUS_OVERDUE = 'Atrasado'
STATUS_DUE_TODAY = 'Vence Hoje'
STATUS_ON_SCHEDULE = 'Em Dia'

_STATUS_RANK = {STATUS_OVERDUE: 0, STATUS_DUE_TODAY: 1, STATUS_ON_SCHEDULE: 2}


def task_status(days_until_due: int) -> str:
    if days_until_due < 0:
        return STATUS_OVERDUE
    if days_until_due == 0:
        return STATUS_DUE_TODAY
    return STATUS_ON_SCHEDULE


def preventive_schedule(equipment: Iterable[Equipment], today: date) -> List[Dict]:
    """
    Every task of every plan with its next due date and status, sorted
    overdue first, then due today, then by ascending due date.
    """
    tasks = []
    for item in equipment:
        for task in item.preventive_plan:
            try:
                due = parse_timestamp(task.last_execution).date() + timedelta(days=task.frequency_days or 0)
            except (TypeError, ValueError, OverflowError):
                logger.warning(f"Skipping task {task.id} of {item.id}: bad lastExecution {task.last_execution!r} "
                               f"or frequencyDays {task.frequency_days!r}")
                continue
            days_until_due = (due - today).days
            tasks.append({
                **task.to_dict(),
                'equipmentId': item.id,
                'equipmentName': item.name,
                'nextDueDate': due.isoformat(),
                'nextDueDateLabel': format_br_date(due),
                'daysUntilDue': days_until_due,
                'daysOverdue': -days_until_due,
                'status': task_status(days_until_due),
            })
    tasks.sort(key=lambda t: (_STATUS_RANK[t['status']], t['nextDueDate']))
    return tasks


def overdue_tasks(equipment: Iterable[Equipment], today: date) -> List[Dict]:
    """Tasks past their due date, most overdue first."""
    late = [t for t in preventive_schedule(equipment, today) if t['daysOverdue'] > 0]
    return sorted(late, key=lambda t: t['daysOverdue'], reverse=True)
