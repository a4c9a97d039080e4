"""
Main Orchestrator for Fintrack

This module ties together storage, validation and the engine, and defines
the flows a front end calls:
1. Recording (form input → model → validate → save)
2. Editing and deleting (type is immutable, category delete cascades)
3. Reporting (load snapshot → filter → aggregate → pace)

DESIGN DECISION: The orchestrator is the only place that does I/O.
It loads a FinanceSnapshot from the store and hands it to the pure engine
functions, so every report is a full, side-effect-free recomputation.
"""

from collections.abc import Callable
from datetime import date
from decimal import Decimal
from typing import Optional, Union
from uuid import UUID

from fintrack.config import Settings, get_settings
from fintrack.engine import (
    aggregate,
    breakdown_by_source,
    budget_spend,
    emergency_fund_progress,
    filter_transactions,
    monthly_overview,
    pacing,
    project_summary,
)
from fintrack.log import get_logger
from fintrack.models.finance import (
    ExpenseCategory,
    FinanceSnapshot,
    IncomeSource,
    MonthAnchor,
    Project,
    ProjectStatus,
    Transaction,
    TransactionFilter,
    TransactionType,
    TransactionUpdate,
    TransferDirection,
    UserSettings,
)
from fintrack.models.results import (
    EmergencyFundProgress,
    ExpenseMonthReport,
    GroupTotal,
    MonthlyOverview,
    ProjectSummary,
    ValidationResult,
)
from fintrack.services.storage import (
    FinanceStoreInterface,
    InMemoryFinanceStore,
    JsonFileFinanceStore,
    NotFoundError,
)
from fintrack.validation import TransactionValidator


Amount = Union[Decimal, float, int, str]

logger = get_logger(__name__)


class ValidationFailedError(Exception):
    """Input was rejected by the validator; nothing was saved."""

    def __init__(self, result: ValidationResult, message: Optional[str] = None):
        self.result = result
        errors = [issue.message for issue in result.issues if issue.severity == "error"]
        super().__init__(message or "; ".join(errors) or "Validation failed")


class FinanceTracker:
    """
    Records transactions and produces monthly reports for one user.

    Flow for every report:
    1. Load a snapshot from the store
    2. Period filter (month, filters, orphan exclusion)
    3. Aggregate (per currency, home currency, per category)
    4. Budget pacing (when a budget is active)
    """

    def __init__(
        self,
        store: FinanceStoreInterface,
        settings: Optional[Settings] = None,
        clock: Callable[[], date] = date.today,
    ):
        self._store = store
        self._settings = settings or get_settings()
        self._engine_settings = self._settings.engine
        self._clock = clock

    @property
    def store(self) -> FinanceStoreInterface:
        return self._store

    def _current_month(self) -> MonthAnchor:
        return MonthAnchor.of(self._clock())

    async def _save(
        self,
        transaction: Transaction,
        snapshot: FinanceSnapshot,
        new_category: Optional[ExpenseCategory] = None,
    ) -> Transaction:
        """
        Validate against the snapshot, then persist.

        A category created on the fly is only stored once the transaction
        that needs it has passed validation.
        """
        validator = TransactionValidator(snapshot, self._engine_settings)
        result = validator.validate(transaction, today=self._clock())

        if result.has_errors:
            logger.warning(
                "transaction_rejected",
                transaction_type=transaction.type.value,
                errors=[i.message for i in result.issues if i.severity == "error"],
            )
            raise ValidationFailedError(result)

        if new_category is not None:
            await self._store.add_category(new_category)
            logger.info(
                "category_created",
                category_id=str(new_category.id),
                name=new_category.name,
            )

        saved = await self._store.add_transaction(transaction)
        logger.info(
            "transaction_recorded",
            transaction_id=str(saved.id),
            transaction_type=saved.type.value,
            amount=str(saved.amount),
            currency=saved.currency,
            warnings=result.warnings,
        )
        return saved

    # -------------------------------------------------------------------------
    # Recording
    # -------------------------------------------------------------------------

    def _resolve_category(
        self,
        category: Union[UUID, str],
        snapshot: FinanceSnapshot,
    ) -> tuple[ExpenseCategory, bool]:
        """
        Find a category by ID or name, or build a new one for an unknown name.

        Mirrors the expense form, where typing a new name creates the category.
        The new category is added to the snapshot but not stored.

        Returns: (category, is_new)
        """
        if not isinstance(category, UUID):
            try:
                category = UUID(category.strip())
            except ValueError:
                pass

        if isinstance(category, UUID):
            found = snapshot.category_by_id(category)
            if found is None:
                raise NotFoundError(f"Category not found: {category}")
            return found, False

        found = snapshot.category_by_name(category)
        if found is not None:
            return found, False

        created = ExpenseCategory(name=category)
        snapshot.categories.append(created)
        return created, True

    async def record_expense(
        self,
        amount: Amount,
        currency: str,
        transaction_date: date,
        category: Optional[Union[UUID, str]] = None,
        notes: Optional[str] = None,
        project_id: Optional[UUID] = None,
    ) -> Transaction:
        """
        Record an expense.

        Args:
            category: Category ID or name. Unknown names create a new category.

        Raises:
            ValueError: If the amount or currency is malformed
            ValidationFailedError: If a referenced entity doesn't exist
            NotFoundError: If category is an unknown ID
        """
        snapshot = await self._store.load_snapshot()
        resolved = None
        is_new = False
        if category is not None:
            resolved, is_new = self._resolve_category(category, snapshot)

        transaction = Transaction(
            type=TransactionType.EXPENSE,
            amount=amount,
            currency=currency,
            transaction_date=transaction_date,
            category_id=resolved.id if resolved is not None else None,
            project_id=project_id,
            notes=notes or None,
        )
        return await self._save(
            transaction, snapshot, new_category=resolved if is_new else None
        )

    async def record_income(
        self,
        amount: Amount,
        currency: str,
        transaction_date: date,
        source_id: Optional[UUID] = None,
        project_id: Optional[UUID] = None,
        notes: Optional[str] = None,
    ) -> Transaction:
        """Record income, optionally attributed to a source and/or project."""
        snapshot = await self._store.load_snapshot()
        transaction = Transaction(
            type=TransactionType.INCOME,
            amount=amount,
            currency=currency,
            transaction_date=transaction_date,
            source_id=source_id,
            project_id=project_id,
            notes=notes or None,
        )
        return await self._save(transaction, snapshot)

    async def record_savings_transfer(
        self,
        amount: Amount,
        currency: str,
        direction: TransferDirection,
        transaction_date: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> Transaction:
        """Move money into or out of savings (dated today unless given)."""
        snapshot = await self._store.load_snapshot()
        transaction = Transaction(
            type=TransactionType.SAVINGS_TRANSFER,
            amount=amount,
            currency=currency,
            transaction_date=transaction_date or self._clock(),
            transfer_direction=direction,
            notes=notes or None,
        )
        return await self._save(transaction, snapshot)

    # -------------------------------------------------------------------------
    # Editing
    # -------------------------------------------------------------------------

    async def edit_transaction(self, transaction_id: UUID, **changes) -> Transaction:
        """
        Edit amount, currency, date or notes of a transaction.

        Raises:
            ValueError: If any other field is passed or a value is malformed
            NotFoundError: If the transaction doesn't exist
        """
        update = TransactionUpdate(**changes)
        updated = await self._store.update_transaction(transaction_id, update)
        logger.info(
            "transaction_updated",
            transaction_id=str(transaction_id),
            fields=sorted(update.model_dump(exclude_unset=True)),
        )
        return updated

    async def delete_transaction(self, transaction_id: UUID) -> bool:
        deleted = await self._store.delete_transaction(transaction_id)
        logger.info("transaction_deleted", transaction_id=str(transaction_id), deleted=deleted)
        return deleted

    async def create_category(
        self,
        name: str,
        currency: Optional[str] = None,
    ) -> ExpenseCategory:
        """
        Create an expense category.

        Raises:
            ValidationFailedError: If the name is blank or already used
        """
        snapshot = await self._store.load_snapshot()
        result = TransactionValidator(snapshot, self._engine_settings).validate_category_name(name)
        if result.has_errors:
            raise ValidationFailedError(result)

        category = await self._store.add_category(
            ExpenseCategory(name=name, currency=currency)
        )
        logger.info("category_created", category_id=str(category.id), name=category.name)
        return category

    async def rename_category(self, category_id: UUID, name: str) -> ExpenseCategory:
        category = await self._store.rename_category(category_id, name)
        logger.info("category_renamed", category_id=str(category_id), name=category.name)
        return category

    async def delete_category(self, category_id: UUID) -> int:
        """
        Delete a category together with all of its transactions.

        Returns:
            Number of transactions removed
        """
        removed = await self._store.delete_category(category_id)
        logger.warning(
            "category_deleted",
            category_id=str(category_id),
            transactions_deleted=removed,
        )
        return removed

    async def add_source(self, name: str) -> IncomeSource:
        source = await self._store.add_source(IncomeSource(name=name))
        logger.info("source_created", source_id=str(source.id), name=source.name)
        return source

    async def create_project(
        self,
        name: str,
        currency: str = "USD",
        status: ProjectStatus = ProjectStatus.ACTIVE,
        notes: Optional[str] = None,
    ) -> Project:
        project = await self._store.add_project(
            Project(name=name, currency=currency, status=status, notes=notes or None)
        )
        logger.info("project_created", project_id=str(project.id), name=project.name)
        return project

    async def update_settings(self, **changes) -> UserSettings:
        """Merge changes into the user's settings and save them."""
        current = await self._store.get_settings()
        data = current.model_dump()
        if "home_currency" in changes:
            # Currencies that merely followed the old home currency follow the new one
            for key in ("budget_currency", "emergency_fund_currency"):
                if key not in changes and data[key] == current.home_currency:
                    data[key] = None
        merged = UserSettings.model_validate({**data, **changes})
        saved = await self._store.save_settings(merged)
        logger.info("settings_updated", fields=sorted(changes))
        return saved

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------

    async def monthly_expenses(
        self,
        anchor: Optional[MonthAnchor] = None,
        filters: Optional[TransactionFilter] = None,
    ) -> ExpenseMonthReport:
        """
        The expenses view for a month.

        The category/currency filters narrow the listed transactions and
        totals. The budget is always paced against every expense of the
        month, whatever the filters.
        """
        anchor = anchor or self._current_month()
        filters = (filters or TransactionFilter()).model_copy(
            update={"type": TransactionType.EXPENSE.value}
        )
        snapshot = await self._store.load_snapshot()
        settings = snapshot.settings

        transactions = filter_transactions(
            snapshot.transactions, anchor, snapshot.categories, filters
        )
        result = aggregate(transactions, settings.home_currency, snapshot.categories)

        spent = None
        budget = None
        if settings.budget_active:
            month_expenses = filter_transactions(
                snapshot.transactions,
                anchor,
                snapshot.categories,
                TransactionFilter(type=TransactionType.EXPENSE),
            )
            spent = budget_spend(month_expenses, settings.budget_currency)
            budget = pacing(
                settings.monthly_budget_amount,
                settings.budget_currency,
                spent,
                anchor,
                today=self._clock(),
                on_track_tolerance=self._engine_settings.on_track_tolerance_points,
                severe_threshold=self._engine_settings.severe_pace_points,
                warning_percentage=self._engine_settings.budget_warning_percentage,
            )

        logger.info(
            "expense_report_built",
            month=str(anchor),
            transactions=len(transactions),
            pacing_status=budget.status.value if budget else None,
        )
        return ExpenseMonthReport(
            month=anchor,
            filters=filters,
            transactions=transactions,
            aggregate=result,
            budget_spent=spent,
            pacing=budget,
        )

    async def dashboard(self, anchor: Optional[MonthAnchor] = None) -> MonthlyOverview:
        snapshot = await self._store.load_snapshot()
        return monthly_overview(
            snapshot,
            anchor or self._current_month(),
            recent_limit=self._engine_settings.recent_transactions_limit,
        )

    async def emergency_fund(self) -> EmergencyFundProgress:
        snapshot = await self._store.load_snapshot()
        return emergency_fund_progress(snapshot)

    async def income_by_source(self, anchor: Optional[MonthAnchor] = None) -> list[GroupTotal]:
        anchor = anchor or self._current_month()
        snapshot = await self._store.load_snapshot()
        transactions = filter_transactions(
            snapshot.transactions,
            anchor,
            snapshot.categories,
            TransactionFilter(type=TransactionType.INCOME),
        )
        return breakdown_by_source(
            transactions, snapshot.sources, snapshot.settings.home_currency
        )

    async def project_report(
        self,
        project_id: UUID,
        anchor: Optional[MonthAnchor] = None,
    ) -> ProjectSummary:
        """
        Raises:
            NotFoundError: If the project doesn't exist
        """
        snapshot = await self._store.load_snapshot()
        project = snapshot.project_by_id(project_id)
        if project is None:
            raise NotFoundError(f"Project not found: {project_id}")
        return project_summary(
            snapshot,
            project,
            anchor or self._current_month(),
            today=self._clock(),
            trend_months=self._engine_settings.trend_months,
        )


def create_tracker(
    use_file_storage: bool = False,
    path: Optional[str] = None,
) -> FinanceTracker:
    """
    Factory function to create a tracker.

    Args:
        use_file_storage: Persist to the JSON data file instead of memory
        path: Overrides the configured data file path
    """
    settings = get_settings()
    if use_file_storage:
        store: FinanceStoreInterface = JsonFileFinanceStore(path, settings.storage)
    else:
        store = InMemoryFinanceStore(
            FinanceSnapshot(
                settings=UserSettings(
                    home_currency=settings.engine.default_home_currency
                )
            )
        )
    return FinanceTracker(store, settings)
