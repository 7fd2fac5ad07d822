"""
Relational backing for the document collections.

Each collection is one table holding the document key and the whole document
in a JSON column. `position` keeps insertion order, which the flat-file
adapter gets for free from the array order.
"""

from maintenance_app import db


class DocumentRecord(db.Model):
    __abstract__ = True

    key = db.Column(db.String(255), primary_key=True)
    position = db.Column(db.Integer, nullable=False, index=True)
    data = db.Column(db.JSON, nullable=False)

    def __repr__(self):
        return f'<{type(self).__name__} {self.key}>'


class EquipmentRecord(DocumentRecord):
    __tablename__ = 'equipment'


class StoreRecord(DocumentRecord):
    __tablename__ = 'stores'


class UserRecord(DocumentRecord):
    __tablename__ = 'users'


class WarehouseComponentRecord(DocumentRecord):
    __tablename__ = 'warehouse_components'


class WarehouseInsumoRecord(DocumentRecord):
    __tablename__ = 'warehouse_insumos'


class RoleRecord(DocumentRecord):
    __tablename__ = 'roles'


class PurchaseRequestRecord(DocumentRecord):
    __tablename__ = 'purchase_requests'
