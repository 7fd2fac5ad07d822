"""
Reliability metrics over the fleet's maintenance history.

All functions take already-loaded Equipment models and never touch storage.
Averages with nothing to average return None, which the API renders as
"N/A".
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional

from maintenance_app.data.core.equipment import Equipment, MaintenanceLog
from maintenance_app.utils.dates import parse_timestamp, whole_days_between
from maintenance_app.logger import get_logger

logger = get_logger("maintenance_app.analytics.reliability")

MONTH_LABELS = ('jan', 'fev', 'mar', 'abr', 'mai', 'jun', 'jul', 'ago', 'set', 'out', 'nov', 'dez')


def log_moment(log: MaintenanceLog) -> Optional[datetime]:
    """Timestamp of a log entry, or None when it cannot be parsed."""
    try:
        return parse_timestamp(log.date)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring log {log.id} with unreadable date {log.date!r}")
        return None


def compute_mtbf(equipment: Iterable[Equipment]) -> Optional[float]:
    """
    Fleet-wide mean time between failures, in days.

    For every equipment with more than one log, logs are sorted by date and
    the whole-day gaps between consecutive entries are collected. Only
    positive gaps count. The mean is taken over all gaps of all equipment
    together, not per equipment.
    """
    total_days = 0
    gap_count = 0
    for item in equipment:
        moments = sorted(m for m in (log_moment(log) for log in item.maintenance_history) if m is not None)
        for previous, current in zip(moments, moments[1:]):
            gap = whole_days_between(previous, current)
            if gap > 0:
                total_days += gap
                gap_count += 1
    if gap_count == 0:
        return None
    return total_days / gap_count


def compute_mttr(equipment: Iterable[Equipment]) -> Optional[float]:
    """Mean of every logged tempoGasto greater than zero, in hours."""
    hours = [
        log.tempo_gasto
        for item in equipment
        for log in item.maintenance_history
        if log.tempo_gasto and log.tempo_gasto > 0
    ]
    if not hours:
        return None
    return sum(hours) / len(hours)


def monthly_histogram(equipment: Iterable[Equipment]) -> List[Dict]:
    """
    Count and cost of logs per calendar month, ignoring the year.

    Returns:
        list: 12 dicts {'name', 'count', 'cost'} from January to December
    """
    slots = [{'name': label, 'count': 0, 'cost': 0} for label in MONTH_LABELS]
    for item in equipment:
        for log in item.maintenance_history:
            moment = log_moment(log)
            if moment is None:
                continue
            slot = slots[moment.month - 1]
            slot['count'] += 1
            slot['cost'] += log.cost or 0
    return slots


def total_maintenance_cost(equipment: Iterable[Equipment]) -> float:
    return sum(log.cost or 0 for item in equipment for log in item.maintenance_history)


def most_maintained(equipment: Iterable[Equipment], top_n: int = 5) -> List[Equipment]:
    """Equipment with the longest history first."""
    return sorted(equipment, key=lambda e: len(e.maintenance_history), reverse=True)[:top_n]


def format_metric(value: Optional[float]) -> str:
    """One decimal place, "N/A" when undefined."""
    return 'N/A' if value is None else f'{value:.1f}'
