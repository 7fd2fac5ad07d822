from dataclasses import dataclass
from typing import Optional

from maintenance_app.data.core.document import DocumentMixin, doc_field

# Item types, used by stock reports and purchase requests
COMPONENT = 'component'
INSUMO = 'insumo'


class StockedItemMixin:
    """Stock classification shared by components and consumables."""

    @property
    def effective_reorder_point(self) -> float:
        return self.reorder_point or 0

    @property
    def is_low_stock(self) -> bool:
        return self.quantity_in_stock <= self.effective_reorder_point

    @property
    def is_out_of_stock(self) -> bool:
        return self.quantity_in_stock <= 0

    @property
    def stock_value(self) -> float:
        return (self.cost or 0) * self.quantity_in_stock

    @property
    def stock_gap(self) -> float:
        """Stock above (positive) or below (negative) the reorder point."""
        return self.quantity_in_stock - self.effective_reorder_point


@dataclass
class WarehouseComponent(StockedItemMixin, DocumentMixin):
    """Spare part kept in stock, keyed by part number."""
    part_number: str = doc_field('partNumber', '')
    name: str = doc_field('name', '')
    description: str = doc_field('description', '')
    quantity_in_stock: int = doc_field('quantityInStock', 0)
    reorder_point: Optional[int] = doc_field('reorderPoint')
    cost: Optional[float] = doc_field('cost')

    item_type = COMPONENT

    @property
    def key(self) -> str:
        return self.part_number

    def __repr__(self):
        return f'<WarehouseComponent {self.part_number}: {self.name} ({self.quantity_in_stock})>'


@dataclass
class WarehouseInsumo(StockedItemMixin, DocumentMixin):
    """Consumable kept in stock, keyed by id and unique by name."""
    id: str = doc_field('id', '')
    name: str = doc_field('name', '')
    type: str = doc_field('type', '')
    description: str = doc_field('description', '')
    quantity_in_stock: int = doc_field('quantityInStock', 0)
    reorder_point: Optional[int] = doc_field('reorderPoint')
    cost: Optional[float] = doc_field('cost')

    item_type = INSUMO

    @property
    def key(self) -> str:
        return self.id

    def __repr__(self):
        return f'<WarehouseInsumo {self.id}: {self.name} ({self.quantity_in_stock})>'
