"""
Core document models: equipment with its embedded history and plan, stores,
users and the role permission matrix.
"""

from .equipment import (
    Component,
    Equipment,
    EquipmentLocation,
    Insumo,
    LogKind,
    MaintenanceLog,
    PreventiveTask,
)
from .roles import RolePermissions
from .store import Store
from .user import User

__all__ = [
    'Component',
    'Equipment',
    'EquipmentLocation',
    'Insumo',
    'LogKind',
    'MaintenanceLog',
    'PreventiveTask',
    'RolePermissions',
    'Store',
    'User',
]
