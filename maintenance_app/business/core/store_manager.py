"""
StoreManager - Business logic for stores (lojas)

Stores are referenced by Equipment.storeId; a store cannot be deleted while
any equipment points at it.
"""

from typing import List, Optional

from maintenance_app.business.core.action_result import ActionResult
from maintenance_app.business.core.auth_context import AuthContext
from maintenance_app.data.core.store import Store
from maintenance_app.data.storage.base import DuplicateKeyError
from maintenance_app.data.storage.repository import STORES
from maintenance_app.logger import get_logger

logger = get_logger("maintenance_app.business.stores")

STORE_IN_USE_ERROR = 'Esta loja não pode ser excluída pois há equipamentos associados a ela.'
NOT_FOUND_ERROR = 'Loja não encontrada.'


class StoreManager:

    def __init__(self, repository):
        self.repository = repository

    def list_stores(self) -> List[Store]:
        return [Store.from_dict(d) for d in self.repository.stores.get_all()]

    def get_store(self, store_id: str) -> Optional[Store]:
        document = self.repository.stores.get_by_id(store_id)
        return Store.from_dict(document) if document is not None else None

    def next_store_id(self) -> str:
        """loja-<n>, starting at one past the current count and skipping ids in use."""
        existing = {s.id for s in self.list_stores()}
        n = len(existing) + 1
        while f'loja-{n}' in existing:
            n += 1
        return f'loja-{n}'

    def add_store(self, ctx: AuthContext, name: str) -> ActionResult:
        name = (name or '').strip()
        if not name:
            return ActionResult.fail('O nome da loja é obrigatório.')

        store = Store(id=self.next_store_id(), name=name)
        try:
            self.repository.stores.add(store.to_dict())
        except DuplicateKeyError:
            return ActionResult.conflict(f'Já existe uma loja com o id {store.id}.')

        self.repository.invalidate_views(STORES)
        logger.info(f"{ctx} added store {store.id} ({name})")
        return ActionResult.ok(store.to_dict())

    def update_store(self, ctx: AuthContext, store_id: str, name: str) -> ActionResult:
        name = (name or '').strip()
        if not name:
            return ActionResult.fail('O nome da loja é obrigatório.')
        if self.repository.stores.get_by_id(store_id) is None:
            return ActionResult.not_found(NOT_FOUND_ERROR)

        updated = self.repository.stores.update(store_id, {'name': name})
        self.repository.invalidate_views(STORES)
        logger.info(f"{ctx} renamed store {store_id} to {name}")
        return ActionResult.ok(updated)

    def delete_store(self, ctx: AuthContext, store_id: str) -> ActionResult:
        in_use = [d.get('id') for d in self.repository.equipment.get_all() if d.get('storeId') == store_id]
        if in_use:
            logger.warning(f"{ctx} tried to delete store {store_id} still used by {len(in_use)} equipment")
            return ActionResult.conflict(STORE_IN_USE_ERROR)

        self.repository.stores.delete(store_id)
        self.repository.invalidate_views(STORES)
        logger.info(f"{ctx} deleted store {store_id}")
        return ActionResult.ok({'id': store_id})
