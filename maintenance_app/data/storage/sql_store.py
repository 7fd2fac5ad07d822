"""
Relational adapter over the DocumentRecord tables (Flask-SQLAlchemy).

Every call commits its own unit of work. Engine failures are rolled back and
surface as StorageUnavailableError so callers see the same error taxonomy as
with the flat-file adapter. Must be used inside an application context.
"""

import copy
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from maintenance_app import db
from maintenance_app.data.storage.base import (
    Collection,
    DuplicateKeyError,
    RecordNotFoundError,
    StorageUnavailableError,
)
from maintenance_app.logger import get_logger

logger = get_logger("maintenance_app.storage.sql")


class SqlCollection(Collection):

    def __init__(self, model, name: Optional[str] = None, key_field: str = 'id'):
        super().__init__(name or model.__tablename__, key_field)
        self.model = model

    def _fail(self, e: SQLAlchemyError):
        db.session.rollback()
        logger.error(f"Database error on collection {self.name}: {e}")
        raise StorageUnavailableError(f"{self.name}: {e}") from e

    def get_all(self) -> List[Dict[str, Any]]:
        try:
            records = self.model.query.order_by(self.model.position).all()
        except SQLAlchemyError as e:
            self._fail(e)
        return [copy.deepcopy(r.data) for r in records]

    def get_by_id(self, key: str) -> Optional[Dict[str, Any]]:
        try:
            record = db.session.get(self.model, key)
        except SQLAlchemyError as e:
            self._fail(e)
        return copy.deepcopy(record.data) if record is not None else None

    def add(self, document: Dict[str, Any]) -> Dict[str, Any]:
        key = self.key_of(document)
        try:
            if db.session.get(self.model, key) is not None:
                raise DuplicateKeyError(self.name, key)
            last = db.session.query(func.max(self.model.position)).scalar()
            record = self.model(key=key, position=(last or 0) + 1, data=copy.deepcopy(document))
            db.session.add(record)
            db.session.commit()
        except SQLAlchemyError as e:
            self._fail(e)
        return copy.deepcopy(document)

    def update(self, key: str, partial: Dict[str, Any]) -> Dict[str, Any]:
        try:
            record = db.session.get(self.model, key)
            if record is None:
                raise RecordNotFoundError(self.name, key)
            new_key = (partial or {}).get(self.key_field, key)
            others = set()
            if new_key != key and db.session.get(self.model, new_key) is not None:
                others.add(new_key)
            merged = self._merge(record.data, key, partial, others)
            # JSON columns only detect reassignment, not in-place mutation
            record.data = merged
            record.key = new_key
            db.session.commit()
        except SQLAlchemyError as e:
            self._fail(e)
        return copy.deepcopy(merged)

    def delete(self, key: str) -> None:
        try:
            record = db.session.get(self.model, key)
            if record is None:
                return
            db.session.delete(record)
            db.session.commit()
        except SQLAlchemyError as e:
            self._fail(e)
