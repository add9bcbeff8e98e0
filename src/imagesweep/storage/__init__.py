"""Storage helpers for Imagesweep."""

from .db import (
    TABLE_PLACEHOLDER,
    ContentStore,
    ContentStoreConnectionError,
    ContentStoreError,
    ContentStoreQueryError,
)

__all__ = [
    "TABLE_PLACEHOLDER",
    "ContentStore",
    "ContentStoreConnectionError",
    "ContentStoreError",
    "ContentStoreQueryError",
]
