from dataclasses import dataclass
from typing import Optional

from maintenance_app.data.core.document import DocumentMixin, doc_field

STATUS_REQUESTED = 'requested'
STATUS_RECEIVED = 'received'


@dataclass
class PurchaseRequest(DocumentMixin):
    """
    Purchase raised from the MRP report for a low-stock item. Stays open
    until the goods are received into stock.
    """
    id: str = doc_field('id', '')
    item_type: str = doc_field('itemType', '')
    item_key: str = doc_field('itemKey', '')
    item_name: str = doc_field('itemName', '')
    quantity: int = doc_field('quantity', 0)
    status: str = doc_field('status', STATUS_REQUESTED)
    requested_at: str = doc_field('requestedAt', '')
    requested_by: Optional[str] = doc_field('requestedBy')
    received_at: Optional[str] = doc_field('receivedAt')
    received_by: Optional[str] = doc_field('receivedBy')

    @property
    def is_open(self) -> bool:
        return self.status == STATUS_REQUESTED

    def __repr__(self):
        return f'<PurchaseRequest {self.id} {self.item_type}:{self.item_key} x{self.quantity} {self.status}>'
