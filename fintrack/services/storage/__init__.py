"""
Storage Services Package

Provides the abstract store interface and its implementations.
The in-memory store backs tests; the JSON file store persists locally.
"""

from fintrack.services.storage.interface import (
    ConnectionError,
    DuplicateError,
    FinanceStoreInterface,
    NotFoundError,
    StorageError,
)
from fintrack.services.storage.memory import InMemoryFinanceStore
from fintrack.services.storage.json_file import JsonFileFinanceStore

__all__ = [
    # Interface
    "FinanceStoreInterface",
    # Exceptions
    "ConnectionError",
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "InMemoryFinanceStore",
    "JsonFileFinanceStore",
]
