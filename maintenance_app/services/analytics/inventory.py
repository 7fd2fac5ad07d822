"""
Stock analytics: low-stock (MRP) classification, consumable consumption and
stockout forecasting.
"""

from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional

from maintenance_app.data.core.equipment import Equipment
from maintenance_app.data.inventory.warehouse import COMPONENT, INSUMO, WarehouseComponent, WarehouseInsumo
from maintenance_app.services.analytics.reliability import log_moment
from maintenance_app.utils.dates import format_br_date

DEFAULT_WINDOW_DAYS = 90

ITEM_TYPE_LABELS = {COMPONENT: 'Componente', INSUMO: 'Insumo'}


def low_stock_items(components: Iterable[WarehouseComponent], insumos: Iterable[WarehouseInsumo]) -> List[Dict]:
    """
    Items at or below their reorder point (a missing reorder point counts as
    0), most deficient first.
    """
    items = []
    for item in list(components) + list(insumos):
        if not item.is_low_stock:
            continue
        items.append({
            'id': item.key,
            'itemType': item.item_type,
            'type': ITEM_TYPE_LABELS[item.item_type],
            'name': item.name,
            'quantityInStock': item.quantity_in_stock,
            'reorderPoint': item.effective_reorder_point,
            'gap': item.stock_gap,
            'cost': item.cost,
        })
    # sorted() is stable: ties keep components before insumos
    return sorted(items, key=lambda i: i['gap'])


def mrp_count(components: Iterable[WarehouseComponent], insumos: Iterable[WarehouseInsumo]) -> int:
    return sum(1 for item in list(components) + list(insumos) if item.is_low_stock)


def stock_value(items: Iterable) -> float:
    return sum(item.stock_value for item in items)


def insumo_consumption(equipment: Iterable[Equipment], since: Optional[datetime] = None) -> Dict[str, int]:
    """
    Consumable usage events per insumo name (lower-cased), optionally only
    those logged strictly after `since`.
    """
    counts: Dict[str, int] = {}
    for item in equipment:
        for log in item.maintenance_history:
            name = log.consumed_insumo
            if not name:
                continue
            if since is not None:
                moment = log_moment(log)
                if moment is None or moment <= since:
                    continue
            key = name.lower()
            counts[key] = counts.get(key, 0) + 1
    return counts


def forecast_stockout(quantity_in_stock: int, consumption_count: int, today: date,
                      window_days: int = DEFAULT_WINDOW_DAYS) -> Dict:
    """
    Project when a consumable runs out at its recent consumption rate.

    rate = consumption_count / window_days; days until empty =
    floor(stock / rate) when rate > 0, otherwise unknown (None).
    """
    if window_days <= 0:
        raise ValueError("window_days must be positive")
    daily_rate = consumption_count / window_days
    if consumption_count > 0:
        # floor(stock / (count / window)) without the float rounding
        days = int(quantity_in_stock * window_days // consumption_count)
        predicted = today + timedelta(days=days)
    else:
        days = None
        predicted = None
    return {
        'consumptionCount': consumption_count,
        'avgDailyConsumption': daily_rate,
        'daysUntilStockout': days,
        'predictedStockoutDate': predicted.isoformat() if predicted else None,
        'predictedStockoutDateLabel': format_br_date(predicted) if predicted else None,
    }
