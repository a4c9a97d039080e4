"""Services package."""

from fintrack.services.storage import (
    ConnectionError,
    DuplicateError,
    FinanceStoreInterface,
    InMemoryFinanceStore,
    JsonFileFinanceStore,
    NotFoundError,
    StorageError,
)

__all__ = [
    "ConnectionError",
    "DuplicateError",
    "FinanceStoreInterface",
    "InMemoryFinanceStore",
    "JsonFileFinanceStore",
    "NotFoundError",
    "StorageError",
]
