"""
In-Memory Storage Implementation

Holds one user's data in dictionaries. Used directly in tests and as the
base for the JSON file store, which persists after every mutation.
"""

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
    utcnow,
)
from fintrack.services.storage.interface import (
    DuplicateError,
    FinanceStoreInterface,
    NotFoundError,
)


class InMemoryFinanceStore(FinanceStoreInterface):
    """Dictionary-backed store; data lives as long as the object."""

    def __init__(self, snapshot: Optional[FinanceSnapshot] = None):
        self._load(snapshot or FinanceSnapshot())

    def _load(self, snapshot: FinanceSnapshot) -> None:
        self._transactions: dict[UUID, Transaction] = {
            t.id: t for t in snapshot.transactions
        }
        self._categories: dict[UUID, ExpenseCategory] = {
            c.id: c for c in snapshot.categories
        }
        self._sources: dict[UUID, IncomeSource] = {s.id: s for s in snapshot.sources}
        self._projects: dict[UUID, Project] = {p.id: p for p in snapshot.projects}
        self._settings: UserSettings = snapshot.settings

    async def _commit(self) -> None:
        """Hook called after every mutation; nothing to flush in memory."""

    def _snapshot(self) -> FinanceSnapshot:
        return FinanceSnapshot(
            transactions=self._sorted_transactions(),
            categories=self._sorted_by_name(self._categories.values()),
            sources=self._sorted_by_name(self._sources.values()),
            projects=sorted(
                self._projects.values(), key=lambda p: p.created_at, reverse=True
            ),
            settings=self._settings,
        )

    def _sorted_transactions(self) -> list[Transaction]:
        return sorted(
            self._transactions.values(),
            key=lambda t: (t.transaction_date, t.created_at),
            reverse=True,
        )

    @staticmethod
    def _sorted_by_name(items) -> list:
        return sorted(items, key=lambda item: item.name.casefold())

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def add_transaction(self, transaction: Transaction) -> Transaction:
        if transaction.id in self._transactions:
            raise DuplicateError(f"Transaction already exists: {transaction.id}")
        self._transactions[transaction.id] = transaction
        await self._commit()
        return transaction

    async def get_transaction(self, transaction_id: UUID) -> Optional[Transaction]:
        return self._transactions.get(transaction_id)

    async def update_transaction(
        self,
        transaction_id: UUID,
        update: TransactionUpdate,
    ) -> Transaction:
        existing = self._transactions.get(transaction_id)
        if existing is None:
            raise NotFoundError(f"Transaction not found: {transaction_id}")
        updated = existing.apply_update(update)
        self._transactions[transaction_id] = updated
        await self._commit()
        return updated

    async def delete_transaction(self, transaction_id: UUID) -> bool:
        if self._transactions.pop(transaction_id, None) is None:
            return False
        await self._commit()
        return True

    async def list_transactions(
        self,
        kind: Optional[TransactionType] = None,
    ) -> list[Transaction]:
        transactions = self._sorted_transactions()
        if kind is not None:
            transactions = [t for t in transactions if t.type == kind]
        return transactions

    # -------------------------------------------------------------------------
    # Expense categories
    # -------------------------------------------------------------------------

    def _check_category_name(self, name: str, exclude: Optional[UUID] = None) -> None:
        key = name.strip().casefold()
        for category in self._categories.values():
            if category.id != exclude and category.name_key == key:
                raise DuplicateError(f"Category already exists: {category.name}")

    async def add_category(self, category: ExpenseCategory) -> ExpenseCategory:
        if category.id in self._categories:
            raise DuplicateError(f"Category already exists: {category.id}")
        self._check_category_name(category.name)
        self._categories[category.id] = category
        await self._commit()
        return category

    async def rename_category(self, category_id: UUID, name: str) -> ExpenseCategory:
        existing = self._categories.get(category_id)
        if existing is None:
            raise NotFoundError(f"Category not found: {category_id}")
        self._check_category_name(name, exclude=category_id)
        renamed = ExpenseCategory.model_validate({**existing.model_dump(), "name": name})
        self._categories[category_id] = renamed
        await self._commit()
        return renamed

    async def delete_category(self, category_id: UUID) -> int:
        if category_id not in self._categories:
            raise NotFoundError(f"Category not found: {category_id}")
        doomed = [
            t.id for t in self._transactions.values() if t.category_id == category_id
        ]
        for transaction_id in doomed:
            del self._transactions[transaction_id]
        del self._categories[category_id]
        await self._commit()
        return len(doomed)

    async def list_categories(self) -> list[ExpenseCategory]:
        return self._sorted_by_name(self._categories.values())

    # -------------------------------------------------------------------------
    # Income sources and projects
    # -------------------------------------------------------------------------

    async def add_source(self, source: IncomeSource) -> IncomeSource:
        key = source.name_key
        if source.id in self._sources or any(
            s.name_key == key for s in self._sources.values()
        ):
            raise DuplicateError(f"Income source already exists: {source.name}")
        self._sources[source.id] = source
        await self._commit()
        return source

    async def delete_source(self, source_id: UUID) -> bool:
        if self._sources.pop(source_id, None) is None:
            return False
        await self._commit()
        return True

    async def list_sources(self) -> list[IncomeSource]:
        return self._sorted_by_name(self._sources.values())

    async def add_project(self, project: Project) -> Project:
        if project.id in self._projects:
            raise DuplicateError(f"Project already exists: {project.id}")
        self._projects[project.id] = project
        await self._commit()
        return project

    async def update_project(self, project: Project) -> Project:
        if project.id not in self._projects:
            raise NotFoundError(f"Project not found: {project.id}")
        updated = project.model_copy(update={"updated_at": utcnow()})
        self._projects[project.id] = updated
        await self._commit()
        return updated

    async def delete_project(self, project_id: UUID) -> bool:
        if self._projects.pop(project_id, None) is None:
            return False
        await self._commit()
        return True

    async def list_projects(self) -> list[Project]:
        return self._snapshot().projects

    # -------------------------------------------------------------------------
    # Settings and snapshots
    # -------------------------------------------------------------------------

    async def get_settings(self) -> UserSettings:
        return self._settings

    async def save_settings(self, settings: UserSettings) -> UserSettings:
        self._settings = settings
        await self._commit()
        return settings

    async def load_snapshot(self) -> FinanceSnapshot:
        return self._snapshot()
