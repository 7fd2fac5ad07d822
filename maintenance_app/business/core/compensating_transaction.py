"""
Compensating transaction for multi-step mutations across collections.

The persistence adapters commit each write on its own, so a compound action
(decrement stock, then append a log) registers an undo step after every write
that succeeded. If a later step raises, the undo steps run newest first and
the original exception propagates.

    with CompensatingTransaction('consume stock') as tx:
        repo.warehouse_insumos.update(key, {'quantityInStock': stock - 1})
        tx.on_rollback(lambda: repo.warehouse_insumos.update(key, {'quantityInStock': stock}))
        append_log(...)
"""

from typing import Callable, List, Tuple

from maintenance_app.logger import get_logger

logger = get_logger("maintenance_app.business.transaction")


class CompensatingTransaction:

    def __init__(self, description: str):
        self.description = description
        self._compensations: List[Tuple[str, Callable[[], None]]] = []
        self.rolled_back = False

    def on_rollback(self, compensation: Callable[[], None], label: str = '') -> None:
        self._compensations.append((label or getattr(compensation, '__name__', 'step'), compensation))

    def rollback(self) -> None:
        """Run the registered compensations newest first. A failing
        compensation is logged and the remaining ones still run."""
        self.rolled_back = True
        while self._compensations:
            label, compensation = self._compensations.pop()
            try:
                compensation()
                logger.info(f"Compensated '{label}' of {self.description}")
            except Exception as e:
                logger.error(f"Compensation '{label}' of {self.description} failed: {e}")

    def __enter__(self) -> 'CompensatingTransaction':
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is not None:
            logger.warning(f"{self.description} failed ({exc}); rolling back {len(self._compensations)} step(s)")
            self.rollback()
        else:
            self._compensations.clear()
        return False
