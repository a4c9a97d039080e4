"""
Abstract Storage Interface

DESIGN DECISION: The engine never talks to storage. Storage hands out a
FinanceSnapshot; the orchestrator passes it into the pure functions.
This allows us to:
1. Use in-memory storage for tests
2. Persist to a local JSON file
3. Swap in a hosted backend later without touching the engine

The interface is intentionally simple - just the operations the
tracker needs. Last write wins; there is no concurrency control.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from fintrack.models.finance import (
    ExpenseCategory,
    FinanceSnapshot,
    IncomeSource,
    Project,
    Transaction,
    TransactionType,
    TransactionUpdate,
    UserSettings,
)


class FinanceStoreInterface(ABC):
    """
    Abstract interface for one user's finance data.

    Any storage implementation must implement these methods.
    """

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    @abstractmethod
    async def add_transaction(self, transaction: Transaction) -> Transaction:
        """
        Save a new transaction.

        Raises:
            DuplicateError: If a transaction with the same ID exists
            StorageError: If the save fails
        """

    @abstractmethod
    async def get_transaction(self, transaction_id: UUID) -> Optional[Transaction]:
        """Retrieve a transaction by ID, None if it doesn't exist."""

    @abstractmethod
    async def update_transaction(
        self,
        transaction_id: UUID,
        update: TransactionUpdate,
    ) -> Transaction:
        """
        Apply an edit (amount, currency, date, notes) to a transaction.

        Returns:
            The updated transaction

        Raises:
            NotFoundError: If the transaction doesn't exist
        """

    @abstractmethod
    async def delete_transaction(self, transaction_id: UUID) -> bool:
        """
        Delete a transaction by ID.

        Returns:
            True if a transaction was deleted, False if none matched
        """

    @abstractmethod
    async def list_transactions(
        self,
        kind: Optional[TransactionType] = None,
    ) -> list[Transaction]:
        """List transactions, newest date first, then newest created first."""

    # -------------------------------------------------------------------------
    # Expense categories
    # -------------------------------------------------------------------------

    @abstractmethod
    async def add_category(self, category: ExpenseCategory) -> ExpenseCategory:
        """
        Save a new category.

        Raises:
            DuplicateError: If a category with the same name exists
                            (case-insensitive)
        """

    @abstractmethod
    async def rename_category(self, category_id: UUID, name: str) -> ExpenseCategory:
        """
        Rename a category.

        Raises:
            NotFoundError: If the category doesn't exist
            DuplicateError: If another category already uses the name
        """

    @abstractmethod
    async def delete_category(self, category_id: UUID) -> int:
        """
        Delete a category and every transaction that references it.

        Returns:
            Number of transactions deleted with the category

        Raises:
            NotFoundError: If the category doesn't exist
        """

    @abstractmethod
    async def list_categories(self) -> list[ExpenseCategory]:
        """List categories ordered by name."""

    # -------------------------------------------------------------------------
    # Income sources and projects
    # -------------------------------------------------------------------------

    @abstractmethod
    async def add_source(self, source: IncomeSource) -> IncomeSource:
        """Save a new income source (unique name, case-insensitive)."""

    @abstractmethod
    async def delete_source(self, source_id: UUID) -> bool:
        """Delete an income source. Transactions keep their source_id."""

    @abstractmethod
    async def list_sources(self) -> list[IncomeSource]:
        """List income sources ordered by name."""

    @abstractmethod
    async def add_project(self, project: Project) -> Project:
        """Save a new project."""

    @abstractmethod
    async def update_project(self, project: Project) -> Project:
        """
        Replace an existing project.

        Raises:
            NotFoundError: If the project doesn't exist
        """

    @abstractmethod
    async def delete_project(self, project_id: UUID) -> bool:
        """Delete a project. Linked transactions are kept."""

    @abstractmethod
    async def list_projects(self) -> list[Project]:
        """List projects, newest first."""

    # -------------------------------------------------------------------------
    # Settings and snapshots
    # -------------------------------------------------------------------------

    @abstractmethod
    async def get_settings(self) -> UserSettings:
        """Get the user's settings (defaults when never saved)."""

    @abstractmethod
    async def save_settings(self, settings: UserSettings) -> UserSettings:
        """Replace the user's settings."""

    @abstractmethod
    async def load_snapshot(self) -> FinanceSnapshot:
        """Everything the engine needs for one computation pass."""


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class ConnectionError(StorageError):
    """Could not read or write the storage backend."""
    pass
