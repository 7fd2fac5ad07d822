"""
Repository: the seven document collections behind one object, plus the
view-invalidation hook every mutation calls.
"""

from pathlib import Path
from typing import Dict, Iterable, List

from maintenance_app.data.storage.base import Collection
from maintenance_app.logger import get_logger

logger = get_logger("maintenance_app.storage")

EQUIPMENT = 'equipment'
STORES = 'stores'
USERS = 'users'
WAREHOUSE_COMPONENTS = 'warehouse-components'
WAREHOUSE_INSUMOS = 'warehouse-insumos'
ROLES = 'roles'
PURCHASE_REQUESTS = 'purchase-requests'

COLLECTIONS = (
    EQUIPMENT, STORES, USERS, WAREHOUSE_COMPONENTS,
    WAREHOUSE_INSUMOS, ROLES, PURCHASE_REQUESTS,
)

KEY_FIELDS = {WAREHOUSE_COMPONENTS: 'partNumber'}

# API views whose payloads are derived from each collection
DEPENDENT_VIEWS = {
    EQUIPMENT: ['/api/equipment', '/api/dashboard', '/api/dashboard/maintenance', '/api/dashboard/admin',
                '/api/reports/audit', '/api/reports/mrp', '/api/reports/preventive', '/api/reports/corrective',
                '/api/reports/components', '/api/reports/insumos'],
    STORES: ['/api/stores', '/api/dashboard', '/api/dashboard/admin'],
    USERS: ['/api/users', '/api/dashboard/admin'],
    WAREHOUSE_COMPONENTS: ['/api/warehouse/components', '/api/dashboard', '/api/dashboard/stock',
                           '/api/reports/audit', '/api/reports/mrp', '/api/reports/purchasing'],
    WAREHOUSE_INSUMOS: ['/api/warehouse/insumos', '/api/dashboard', '/api/dashboard/stock',
                        '/api/reports/audit', '/api/reports/mrp', '/api/reports/insumos', '/api/reports/purchasing'],
    ROLES: ['/api/roles'],
    PURCHASE_REQUESTS: ['/api/purchasing/requests', '/api/dashboard/stock', '/api/reports/mrp',
                        '/api/reports/purchasing'],
}


class Repository:

    def __init__(self, collections: Dict[str, Collection]):
        missing = [name for name in COLLECTIONS if name not in collections]
        if missing:
            raise ValueError(f"Repository is missing collections: {', '.join(missing)}")
        self.collections = collections

    @property
    def equipment(self) -> Collection:
        return self.collections[EQUIPMENT]

    @property
    def stores(self) -> Collection:
        return self.collections[STORES]

    @property
    def users(self) -> Collection:
        return self.collections[USERS]

    @property
    def warehouse_components(self) -> Collection:
        return self.collections[WAREHOUSE_COMPONENTS]

    @property
    def warehouse_insumos(self) -> Collection:
        return self.collections[WAREHOUSE_INSUMOS]

    @property
    def roles(self) -> Collection:
        return self.collections[ROLES]

    @property
    def purchase_requests(self) -> Collection:
        return self.collections[PURCHASE_REQUESTS]

    def invalidate_views(self, *names: str) -> List[str]:
        """
        Drop memoized reads of the touched collections (all of them when no
        name is given) and return the views that now need reloading.
        """
        touched: Iterable[str] = names or COLLECTIONS
        views = []
        for name in touched:
            self.collections[name].invalidate()
            for view in DEPENDENT_VIEWS.get(name, []):
                if view not in views:
                    views.append(view)
        logger.debug(f"Invalidated {', '.join(touched)}; stale views: {', '.join(views)}")
        return views


def build_json_repository(data_dir) -> Repository:
    from maintenance_app.data.storage.json_store import JsonFileCollection

    data_dir = Path(data_dir)
    return Repository({
        name: JsonFileCollection(data_dir / f'{name}.json', name, KEY_FIELDS.get(name, 'id'))
        for name in COLLECTIONS
    })


def build_sql_repository() -> Repository:
    from maintenance_app.data.storage import records
    from maintenance_app.data.storage.sql_store import SqlCollection

    models = {
        EQUIPMENT: records.EquipmentRecord,
        STORES: records.StoreRecord,
        USERS: records.UserRecord,
        WAREHOUSE_COMPONENTS: records.WarehouseComponentRecord,
        WAREHOUSE_INSUMOS: records.WarehouseInsumoRecord,
        ROLES: records.RoleRecord,
        PURCHASE_REQUESTS: records.PurchaseRequestRecord,
    }
    return Repository({
        name: SqlCollection(model, name, KEY_FIELDS.get(name, 'id'))
        for name, model in models.items()
    })


def build_repository(config) -> Repository:
    """
    Pick the persistence adapter from STORAGE_BACKEND ("json" or "sql").

    Raises:
        ValueError: If the backend name is unknown
    """
    backend = (config.get('STORAGE_BACKEND') or 'json').lower()
    if backend == 'json':
        logger.info(f"Using flat-file storage in {config.get('DATA_DIR')}")
        return build_json_repository(config['DATA_DIR'])
    if backend == 'sql':
        logger.info("Using relational storage")
        return build_sql_repository()
    raise ValueError(f"Unknown STORAGE_BACKEND '{backend}' (expected 'json' or 'sql')")
