"""
Warehouse stock and purchase request models
"""

from .purchase_request import PurchaseRequest
from .warehouse import WarehouseComponent, WarehouseInsumo

__all__ = [
    'PurchaseRequest',
    'WarehouseComponent',
    'WarehouseInsumo',
]
