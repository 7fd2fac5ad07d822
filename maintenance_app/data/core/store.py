from dataclasses import dataclass

from maintenance_app.data.core.document import DocumentMixin, doc_field


@dataclass
class Store(DocumentMixin):
    """A site (loja) where equipment is installed."""
    id: str = doc_field('id', '')
    name: str = doc_field('name', '')

    def __repr__(self):
        return f'<Store {self.id}: {self.name}>'
