"""
WarehouseManager - Business logic for spare parts and consumables in stock

Responsibilities:
- Register components (unique part number) and insumos (unique name)
- Edit stock records
- Receive and check out stock without ever going negative
- Part picker search
"""

from typing import Any, Callable, Dict, List, Optional, Union

from maintenance_app.business.core.action_result import ActionResult
from maintenance_app.business.core.auth_context import AuthContext
from maintenance_app.data.inventory.warehouse import COMPONENT, INSUMO, WarehouseComponent, WarehouseInsumo
from maintenance_app.data.storage.base import DuplicateKeyError
from maintenance_app.data.storage.repository import WAREHOUSE_COMPONENTS, WAREHOUSE_INSUMOS
from maintenance_app.utils.dates import epoch_millis, utcnow
from maintenance_app.logger import get_logger

logger = get_logger("maintenance_app.business.inventory.warehouse")

COMPONENT_EXISTS_ERROR = "Um componente com este Part Number já existe."
INSUMO_EXISTS_ERROR = "Um insumo com este nome já existe."
COMPONENT_NOT_FOUND_ERROR = "Componente não encontrado."
INSUMO_NOT_FOUND_ERROR = "Insumo não encontrado."

SEARCH_LIMIT = 5

StockedItem = Union[WarehouseComponent, WarehouseInsumo]


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_stock_fields(fields: Dict[str, Any]) -> Optional[str]:
    """Quantities and costs must be non-negative numbers."""
    if 'quantityInStock' in fields:
        value = fields['quantityInStock']
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            return 'A quantidade em estoque deve ser um número inteiro não negativo.'
    if fields.get('reorderPoint') is not None:
        value = fields['reorderPoint']
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            return 'O ponto de pedido deve ser um número inteiro não negativo.'
    if fields.get('cost') is not None and (not _is_number(fields['cost']) or fields['cost'] < 0):
        return 'O custo deve ser um número não negativo.'
    return None


class WarehouseManager:

    def __init__(self, repository, clock: Callable = utcnow):
        self.repository = repository
        self.clock = clock

    def _collection(self, item_type: str):
        if item_type == COMPONENT:
            return self.repository.warehouse_components, WarehouseComponent, WAREHOUSE_COMPONENTS
        if item_type == INSUMO:
            return self.repository.warehouse_insumos, WarehouseInsumo, WAREHOUSE_INSUMOS
        raise ValueError(f"Unknown item type '{item_type}'")

    # ------------------------------------------------------------------ reads

    def list_components(self) -> List[WarehouseComponent]:
        return [WarehouseComponent.from_dict(d) for d in self.repository.warehouse_components.get_all()]

    def list_insumos(self) -> List[WarehouseInsumo]:
        return [WarehouseInsumo.from_dict(d) for d in self.repository.warehouse_insumos.get_all()]

    def get_item(self, item_type: str, key: str) -> Optional[StockedItem]:
        collection, model, _ = self._collection(item_type)
        document = collection.get_by_id(key)
        return model.from_dict(document) if document is not None else None

    def find_insumo_by_name(self, name: str) -> Optional[WarehouseInsumo]:
        wanted = (name or '').strip().lower()
        for insumo in self.list_insumos():
            if insumo.name.strip().lower() == wanted:
                return insumo
        return None

    def search_components(self, query: str) -> List[WarehouseComponent]:
        """Components whose name or part number contains the query (max 5)."""
        text = (query or '').strip().lower()
        if not text:
            return []
        return [
            c for c in self.list_components()
            if text in c.name.lower() or text in c.part_number.lower()
        ][:SEARCH_LIMIT]

    # -------------------------------------------------------------- mutations

    def add_component(self, ctx: AuthContext, data: Dict[str, Any]) -> ActionResult:
        data = dict(data or {})
        data['partNumber'] = str(data.get('partNumber') or '').strip()
        if not data['partNumber'] or not str(data.get('name') or '').strip():
            return ActionResult.fail('Part Number e nome são obrigatórios.')
        data.setdefault('quantityInStock', 0)
        error = validate_stock_fields(data)
        if error:
            return ActionResult.fail(error)

        component = WarehouseComponent.from_dict(data)
        try:
            self.repository.warehouse_components.add(component.to_dict())
        except DuplicateKeyError:
            return ActionResult.conflict(COMPONENT_EXISTS_ERROR)

        self.repository.invalidate_views(WAREHOUSE_COMPONENTS)
        logger.info(f"{ctx} added component {component.part_number} ({component.quantity_in_stock} in stock)")
        return ActionResult.ok(component.to_dict())

    def add_insumo(self, ctx: AuthContext, data: Dict[str, Any]) -> ActionResult:
        data = dict(data or {})
        data.pop('id', None)
        name = str(data.get('name') or '').strip()
        if not name:
            return ActionResult.fail('O nome do insumo é obrigatório.')
        data['name'] = name
        data.setdefault('quantityInStock', 0)
        error = validate_stock_fields(data)
        if error:
            return ActionResult.fail(error)
        if self.find_insumo_by_name(name) is not None:
            return ActionResult.conflict(INSUMO_EXISTS_ERROR)

        taken = {i.id for i in self.list_insumos()}
        millis = epoch_millis(self.clock())
        while f'insumo-{millis}' in taken:
            millis += 1
        insumo = WarehouseInsumo.from_dict({**data, 'id': f'insumo-{millis}'})
        self.repository.warehouse_insumos.add(insumo.to_dict())

        self.repository.invalidate_views(WAREHOUSE_INSUMOS)
        logger.info(f"{ctx} added insumo {insumo.id} '{insumo.name}'")
        return ActionResult.ok(insumo.to_dict())

    def update_component(self, ctx: AuthContext, part_number: str, partial: Dict[str, Any]) -> ActionResult:
        if self.repository.warehouse_components.get_by_id(part_number) is None:
            return ActionResult.not_found(COMPONENT_NOT_FOUND_ERROR)
        partial = dict(partial or {})
        error = validate_stock_fields(partial)
        if error:
            return ActionResult.fail(error)
        if 'partNumber' in partial and not str(partial['partNumber'] or '').strip():
            return ActionResult.fail('Part Number é obrigatório.')

        try:
            updated = self.repository.warehouse_components.update(part_number, partial)
        except DuplicateKeyError:
            return ActionResult.conflict(COMPONENT_EXISTS_ERROR)

        self.repository.invalidate_views(WAREHOUSE_COMPONENTS)
        logger.info(f"{ctx} updated component {part_number}: {', '.join(sorted(partial))}")
        return ActionResult.ok(updated)

    def update_insumo(self, ctx: AuthContext, insumo_id: str, partial: Dict[str, Any]) -> ActionResult:
        if self.repository.warehouse_insumos.get_by_id(insumo_id) is None:
            return ActionResult.not_found(INSUMO_NOT_FOUND_ERROR)
        partial = dict(partial or {})
        partial.pop('id', None)
        error = validate_stock_fields(partial)
        if error:
            return ActionResult.fail(error)
        if 'name' in partial:
            name = str(partial['name'] or '').strip()
            if not name:
                return ActionResult.fail('O nome do insumo é obrigatório.')
            other = self.find_insumo_by_name(name)
            if other is not None and other.id != insumo_id:
                return ActionResult.conflict(INSUMO_EXISTS_ERROR)
            partial['name'] = name

        updated = self.repository.warehouse_insumos.update(insumo_id, partial)
        self.repository.invalidate_views(WAREHOUSE_INSUMOS)
        logger.info(f"{ctx} updated insumo {insumo_id}: {', '.join(sorted(partial))}")
        return ActionResult.ok(updated)

    def receive_stock(self, ctx: AuthContext, item_type: str, key: str, quantity: int) -> ActionResult:
        """Add received units to stock."""
        return self._adjust_stock(ctx, item_type, key, quantity, inbound=True)

    def checkout_stock(self, ctx: AuthContext, item_type: str, key: str, quantity: int) -> ActionResult:
        """Take units out of stock; refused when more than the available stock is asked for."""
        return self._adjust_stock(ctx, item_type, key, quantity, inbound=False)

    def _adjust_stock(self, ctx: AuthContext, item_type: str, key: str, quantity: int, inbound: bool) -> ActionResult:
        if item_type not in (COMPONENT, INSUMO):
            return ActionResult.fail(f'Tipo de item inválido: {item_type}')
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
            return ActionResult.fail('A quantidade deve ser um número inteiro maior que zero.')

        collection, _, name = self._collection(item_type)
        item = self.get_item(item_type, key)
        if item is None:
            return ActionResult.not_found(COMPONENT_NOT_FOUND_ERROR if item_type == COMPONENT else INSUMO_NOT_FOUND_ERROR)

        if inbound:
            new_quantity = item.quantity_in_stock + quantity
        else:
            if quantity > item.quantity_in_stock:
                return ActionResult.fail(
                    f'Estoque insuficiente: {item.quantity_in_stock} disponível(is), {quantity} solicitado(s).')
            new_quantity = item.quantity_in_stock - quantity

        updated = collection.update(key, {'quantityInStock': new_quantity})
        self.repository.invalidate_views(name)
        logger.info(f"{ctx} {'received' if inbound else 'checked out'} {quantity} x {item_type} {key} "
                    f"({item.quantity_in_stock} -> {new_quantity})")
        return ActionResult.ok(updated)
