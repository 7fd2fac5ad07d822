"""
Document mixin for the dataclass models.

Every record is persisted as a JSON document whose keys keep the camelCase
names used on disk and on the wire. Fields declare their document key (and the
model type of nested values) through doc_field(); DocumentMixin converts in
both directions.
"""

from dataclasses import field, fields, MISSING
from typing import Any, Dict


def doc_field(key, default=None, *, item=None, nested=None, default_factory=MISSING):
    """
    Declare a dataclass field stored under `key` in the document.

    Args:
        key (str): Document key (camelCase)
        default: Default value when absent from the document
        item: Model class of list items (for lists of nested documents)
        nested: Model class of a single nested document
        default_factory: Factory for mutable defaults
    """
    metadata = {'key': key, 'item': item, 'nested': nested}
    if default_factory is not MISSING:
        return field(default_factory=default_factory, metadata=metadata)
    return field(default=default, metadata=metadata)


class DocumentMixin:
    """
    Adds from_dict() / to_dict() / merged() to dataclass models.
    """

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        """
        Build a model from a stored document. Unknown keys are ignored.

        Raises:
            ValueError: If data is not a mapping
        """
        if not isinstance(data, dict):
            raise ValueError(f"{cls.__name__} document must be an object, got {type(data).__name__}")

        kwargs = {}
        for f in fields(cls):
            key = f.metadata.get('key', f.name)
            if key not in data:
                continue
            value = data[key]
            item_type = f.metadata.get('item')
            nested_type = f.metadata.get('nested')
            if item_type is not None and value is not None:
                value = [item_type.from_dict(v) for v in value]
            elif nested_type is not None and value is not None:
                value = nested_type.from_dict(value)
            kwargs[f.name] = value
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize to a document. None values are omitted, like optional
        fields that were never set.
        """
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            key = f.metadata.get('key', f.name)
            if isinstance(value, list):
                value = [v.to_dict() if isinstance(v, DocumentMixin) else v for v in value]
            elif isinstance(value, DocumentMixin):
                value = value.to_dict()
            result[key] = value
        return result

    def merged(self, partial: Dict[str, Any]):
        """Return a copy with the given document keys overwritten."""
        document = self.to_dict()
        document.update(partial or {})
        return type(self).from_dict(document)
