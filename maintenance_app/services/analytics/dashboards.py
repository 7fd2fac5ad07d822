"""
Dashboard Service
Presentation service that loads a snapshot of the collections and runs the
analytics functions over it. Every payload is recomputed on each call.
"""

from datetime import timedelta
from typing import Callable, Dict, List

from maintenance_app.data.core.equipment import Equipment
from maintenance_app.data.core.store import Store
from maintenance_app.data.inventory.purchase_request import STATUS_REQUESTED, PurchaseRequest
from maintenance_app.data.inventory.warehouse import WarehouseComponent, WarehouseInsumo
from maintenance_app.services.analytics import audit, inventory, preventive, reliability
from maintenance_app.utils.dates import parse_timestamp, utcnow


class DashboardService:
    """
    Service for dashboard and report payloads.

    Args:
        repository: Repository to read from
        clock: Callable returning the current aware datetime
        window_days: Consumption window of the stockout forecast
        audit_top_n: Length of the audit rankings
        dashboard_top_n: Length of the "most maintained" list
    """

    def __init__(self, repository, clock: Callable = utcnow, window_days: int = inventory.DEFAULT_WINDOW_DAYS,
                 audit_top_n: int = audit.DEFAULT_TOP_N, dashboard_top_n: int = 5):
        self.repository = repository
        self.clock = clock
        self.window_days = window_days
        self.audit_top_n = audit_top_n
        self.dashboard_top_n = dashboard_top_n

    @classmethod
    def from_config(cls, repository, config, clock: Callable = utcnow) -> 'DashboardService':
        return cls(
            repository,
            clock=clock,
            window_days=config.get('STOCKOUT_WINDOW_DAYS', inventory.DEFAULT_WINDOW_DAYS),
            audit_top_n=config.get('AUDIT_TOP_N', audit.DEFAULT_TOP_N),
            dashboard_top_n=config.get('DASHBOARD_TOP_N', 5),
        )

    # -------------------------------------------------------------- snapshot

    def _equipment(self) -> List[Equipment]:
        return [Equipment.from_dict(d) for d in self.repository.equipment.get_all()]

    def _components(self) -> List[WarehouseComponent]:
        return [WarehouseComponent.from_dict(d) for d in self.repository.warehouse_components.get_all()]

    def _insumos(self) -> List[WarehouseInsumo]:
        return [WarehouseInsumo.from_dict(d) for d in self.repository.warehouse_insumos.get_all()]

    def _stores(self) -> List[Store]:
        return [Store.from_dict(d) for d in self.repository.stores.get_all()]

    @staticmethod
    def _summary(item: Equipment) -> Dict:
        return {
            'id': item.id,
            'name': item.name,
            'model': item.model,
            'imageUrl': item.image_url,
            'maintenanceCount': len(item.maintenance_history),
        }

    def _reliability(self, equipment: List[Equipment]) -> Dict:
        mtbf = reliability.compute_mtbf(equipment)
        mttr = reliability.compute_mttr(equipment)
        return {
            'totalMaintenances': sum(len(e.maintenance_history) for e in equipment),
            'totalMaintenanceCost': reliability.total_maintenance_cost(equipment),
            'mtbf': mtbf,
            'mtbfLabel': reliability.format_metric(mtbf),
            'mttr': mttr,
            'mttrLabel': reliability.format_metric(mttr),
            'maintenanceByMonth': reliability.monthly_histogram(equipment),
            'mostMaintained': [self._summary(e) for e in
                               reliability.most_maintained(equipment, self.dashboard_top_n)],
        }

    # -------------------------------------------------------------- payloads

    def main_dashboard(self) -> Dict:
        equipment = self._equipment()
        components, insumos = self._components(), self._insumos()
        return {
            'totalEquipment': len(equipment),
            'totalStores': len(self._stores()),
            'mrpItemsCount': inventory.mrp_count(components, insumos),
            'totalAssetValue': sum(e.value or 0 for e in equipment),
            'totalStockValue': inventory.stock_value(components) + inventory.stock_value(insumos),
            **self._reliability(equipment),
        }

    def maintenance_dashboard(self) -> Dict:
        equipment = self._equipment()
        today = self.clock().date()
        return {
            **self._reliability(equipment),
            'overdueTasks': len(preventive.overdue_tasks(equipment, today)),
        }

    def stock_dashboard(self) -> Dict:
        components, insumos = self._components(), self._insumos()
        components_value = inventory.stock_value(components)
        insumos_value = inventory.stock_value(insumos)
        open_requests = sum(1 for d in self.repository.purchase_requests.get_all()
                            if d.get('status') == STATUS_REQUESTED)
        return {
            'totalStockValue': components_value + insumos_value,
            'mrpItemsCount': inventory.mrp_count(components, insumos),
            'purchaseOrdersCount': open_requests,
            'uniqueComponents': len(components),
            'uniqueInsumos': len(insumos),
            'stockValueDistribution': [
                {'name': 'Componentes', 'value': components_value},
                {'name': 'Insumos', 'value': insumos_value},
            ],
        }

    def admin_dashboard(self) -> Dict:
        equipment = self._equipment()
        stores = self._stores()
        by_store = [
            {'id': s.id, 'name': s.name, 'value': sum(1 for e in equipment if e.store_id == s.id)}
            for s in stores
        ]
        return {
            'totalEquipment': len(equipment),
            'totalStores': len(stores),
            'totalUsers': len(self.repository.users.get_all()),
            'equipmentByStore': [s for s in by_store if s['value'] > 0],
        }

    def audit_report(self) -> Dict:
        equipment = self._equipment()
        today = self.clock().date()
        return {
            'overdueTasks': preventive.overdue_tasks(equipment, today),
            'lowStockItems': inventory.low_stock_items(self._components(), self._insumos()),
            'highCostEquipment': audit.high_cost_equipment(equipment, self.audit_top_n),
            'frequentFailureEquipment': audit.frequent_failure_equipment(equipment, self.audit_top_n),
        }

    def preventive_schedule(self) -> List[Dict]:
        return preventive.preventive_schedule(self._equipment(), self.clock().date())

    def mrp_report(self) -> Dict:
        """Low-stock components, and low-stock insumos with their stockout forecast."""
        now = self.clock()
        components = [c for c in self._components() if c.is_low_stock]
        insumos = [i for i in self._insumos() if i.is_low_stock]
        consumption = inventory.insumo_consumption(self._equipment(), since=now - timedelta(days=self.window_days))
        open_keys = {(r.item_type, r.item_key) for r in
                     (PurchaseRequest.from_dict(d) for d in self.repository.purchase_requests.get_all())
                     if r.is_open}

        return {
            'windowDays': self.window_days,
            'components': [
                {**c.to_dict(), 'purchaseRequested': (c.item_type, c.key) in open_keys}
                for c in components
            ],
            'insumos': [
                {
                    **i.to_dict(),
                    **inventory.forecast_stockout(i.quantity_in_stock, consumption.get(i.name.strip().lower(), 0),
                                                  now.date(), self.window_days),
                    'purchaseRequested': (i.item_type, i.key) in open_keys,
                }
                for i in insumos
            ],
        }

    def corrective_history(self) -> List[Dict]:
        """Every non-preventive log of the fleet, newest first."""
        logs = []
        for item in self._equipment():
            for log in item.maintenance_history:
                if log.is_preventive:
                    continue
                logs.append({**log.to_dict(), 'equipmentId': item.id, 'equipmentName': item.name})

        def moment(entry):
            try:
                return parse_timestamp(entry['date']).timestamp()
            except (TypeError, ValueError):
                return float('-inf')

        return sorted(logs, key=moment, reverse=True)

    def component_catalog(self) -> List[Dict]:
        """Installed components grouped by part number."""
        groups: Dict[str, Dict] = {}
        for item in self._equipment():
            for component in item.components:
                group = groups.setdefault(component.part_number, {
                    'partNumber': component.part_number,
                    'name': component.name,
                    'description': component.description or 'Sem descrição',
                    'instances': [],
                })
                group['instances'].append({**component.to_dict(), 'equipmentId': item.id, 'equipmentName': item.name})
        return list(groups.values())

    def insumo_usage(self) -> List[Dict]:
        """
        Consumables grouped by name: the ones specified on equipment plus
        the ones in the warehouse, with their replacement history.
        """
        groups: Dict[str, Dict] = {}
        equipment = self._equipment()

        for item in equipment:
            for insumo in item.insumos:
                groups.setdefault(insumo.name.strip().lower(), {
                    'name': insumo.name,
                    'type': insumo.type,
                    'description': insumo.description,
                    'quantityInStock': 0,
                    'usageHistory': [],
                    'totalUsage': 0,
                })

        for stock_item in self._insumos():
            group = groups.setdefault(stock_item.name.strip().lower(), {
                'name': stock_item.name,
                'type': stock_item.type,
                'description': stock_item.description,
                'quantityInStock': 0,
                'usageHistory': [],
                'totalUsage': 0,
            })
            group['quantityInStock'] = stock_item.quantity_in_stock

        for item in equipment:
            for log in item.maintenance_history:
                name = log.consumed_insumo
                group = groups.get(name.lower()) if name else None
                if group is None:
                    continue
                group['totalUsage'] += 1
                entry = next((h for h in group['usageHistory'] if h['equipmentId'] == item.id), None)
                if entry is None:
                    group['usageHistory'].append({'equipmentId': item.id, 'equipmentName': item.name, 'count': 1})
                else:
                    entry['count'] += 1

        return list(groups.values())

    def purchasing_overview(self) -> Dict:
        """Open purchase requests and low-stock items that still have none."""
        requests = [PurchaseRequest.from_dict(d) for d in self.repository.purchase_requests.get_all()]
        open_keys = {(r.item_type, r.item_key) for r in requests if r.is_open}
        low = inventory.low_stock_items(self._components(), self._insumos())
        return {
            'pendingRequests': [r.to_dict() for r in requests if r.is_open],
            'receivedRequests': [r.to_dict() for r in requests if not r.is_open],
            'unrequestedLowStock': [i for i in low if (i['itemType'], i['id']) not in open_keys],
        }
