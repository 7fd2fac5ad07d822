"""
Audit rollups: which equipment costs the most and which fails the most.
"""

from typing import Dict, Iterable, List

from maintenance_app.data.core.equipment import Equipment

DEFAULT_TOP_N = 10


def equipment_analysis(equipment: Iterable[Equipment]) -> List[Dict]:
    """Total cost and non-preventive log count per equipment."""
    return [
        {
            'id': item.id,
            'name': item.name,
            'totalCost': sum(log.cost or 0 for log in item.maintenance_history),
            'maintenanceCount': sum(1 for log in item.maintenance_history if not log.is_preventive),
        }
        for item in equipment
    ]


def high_cost_equipment(equipment: Iterable[Equipment], top_n: int = DEFAULT_TOP_N) -> List[Dict]:
    ranked = sorted(equipment_analysis(equipment), key=lambda e: e['totalCost'], reverse=True)
    return [e for e in ranked if e['totalCost'] > 0][:top_n]


def frequent_failure_equipment(equipment: Iterable[Equipment], top_n: int = DEFAULT_TOP_N) -> List[Dict]:
    ranked = sorted(equipment_analysis(equipment), key=lambda e: e['maintenanceCount'], reverse=True)
    return [e for e in ranked if e['maintenanceCount'] > 0][:top_n]
