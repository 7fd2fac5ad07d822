"""
Persistence adapters and their error taxonomy
"""

from .base import (
    Collection,
    DuplicateKeyError,
    RecordNotFoundError,
    StorageError,
    StorageUnavailableError,
)

__all__ = [
    'Collection',
    'DuplicateKeyError',
    'RecordNotFoundError',
    'StorageError',
    'StorageUnavailableError',
]
