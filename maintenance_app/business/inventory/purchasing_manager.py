"""
PurchasingManager - Business logic for purchase requests

A purchase request is raised for a low-stock item from the MRP report and
stays open until the goods arrive. Receiving it adds the quantity to stock.
Only one open request per item is allowed.
"""

from typing import Callable, List, Optional

from maintenance_app.business.core.action_result import ActionResult
from maintenance_app.business.core.auth_context import AuthContext
from maintenance_app.business.core.compensating_transaction import CompensatingTransaction
from maintenance_app.data.inventory.purchase_request import STATUS_RECEIVED, STATUS_REQUESTED, PurchaseRequest
from maintenance_app.data.inventory.warehouse import COMPONENT, INSUMO
from maintenance_app.data.storage.repository import PURCHASE_REQUESTS
from maintenance_app.utils.dates import epoch_millis, to_iso, utcnow
from maintenance_app.logger import get_logger

logger = get_logger("maintenance_app.business.inventory.purchasing")

NOT_FOUND_ERROR = 'Solicitação de compra não encontrada.'


class PurchasingManager:

    def __init__(self, repository, warehouse_manager, clock: Callable = utcnow):
        self.repository = repository
        self.warehouse_manager = warehouse_manager
        self.clock = clock

    def list_requests(self, status: Optional[str] = None) -> List[PurchaseRequest]:
        requests = [PurchaseRequest.from_dict(d) for d in self.repository.purchase_requests.get_all()]
        if status:
            requests = [r for r in requests if r.status == status]
        return requests

    def list_pending_purchases(self) -> List[PurchaseRequest]:
        return self.list_requests(STATUS_REQUESTED)

    def open_request_for(self, item_type: str, key: str) -> Optional[PurchaseRequest]:
        for request in self.list_pending_purchases():
            if request.item_type == item_type and request.item_key == key:
                return request
        return None

    def request_purchase(self, ctx: AuthContext, item_type: str, key: str, quantity: int) -> ActionResult:
        if item_type not in (COMPONENT, INSUMO):
            return ActionResult.fail(f'Tipo de item inválido: {item_type}')
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
            return ActionResult.fail('A quantidade deve ser um número inteiro maior que zero.')

        item = self.warehouse_manager.get_item(item_type, key)
        if item is None:
            return ActionResult.not_found('Item não encontrado no almoxarifado.')
        if self.open_request_for(item_type, key) is not None:
            return ActionResult.conflict('Já existe uma solicitação de compra em aberto para este item.')

        now = self.clock()
        taken = {r.id for r in self.list_requests()}
        millis = epoch_millis(now)
        while f'pr-{millis}' in taken:
            millis += 1

        request = PurchaseRequest(
            id=f'pr-{millis}',
            item_type=item_type,
            item_key=key,
            item_name=item.name,
            quantity=quantity,
            status=STATUS_REQUESTED,
            requested_at=to_iso(now),
            requested_by=ctx.user_id,
        )
        self.repository.purchase_requests.add(request.to_dict())
        self.repository.invalidate_views(PURCHASE_REQUESTS)
        logger.info(f"{ctx} requested purchase {request.id}: {quantity} x {item_type} {key}")
        return ActionResult.ok(request.to_dict())

    def receive_purchase(self, ctx: AuthContext, request_id: str) -> ActionResult:
        """Mark a request as received and add its quantity to stock."""
        document = self.repository.purchase_requests.get_by_id(request_id)
        if document is None:
            return ActionResult.not_found(NOT_FOUND_ERROR)
        request = PurchaseRequest.from_dict(document)
        if not request.is_open:
            return ActionResult.conflict('Esta solicitação de compra já foi recebida.')

        with CompensatingTransaction(f'receive purchase {request_id}') as tx:
            stock_result = self.warehouse_manager.receive_stock(ctx, request.item_type, request.item_key, request.quantity)
            if not stock_result.success:
                return stock_result
            tx.on_rollback(lambda: self.warehouse_manager.checkout_stock(
                ctx, request.item_type, request.item_key, request.quantity), f'undo receipt of {request_id}')

            updated = self.repository.purchase_requests.update(request_id, {
                'status': STATUS_RECEIVED,
                'receivedAt': to_iso(self.clock()),
                'receivedBy': ctx.user_id,
            })

        self.repository.invalidate_views(PURCHASE_REQUESTS)
        logger.info(f"{ctx} received purchase {request_id}")
        return ActionResult.ok({'request': updated, 'item': stock_result.data})
