"""
Core Data Models for Fintrack

These models define the schemas for everything the aggregation engine
consumes. They are designed to:
1. Enforce the per-type field invariants of a transaction at runtime
2. Provide clear validation error messages to the data-access layer
3. Be serializable for the JSON file store

DESIGN DECISION: Money is held as Decimal on the entities.
Per-currency totals are summed exactly; anything that crosses currencies
is converted to float by the engine.
"""

import calendar
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


ALL = "all"


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp for created_at/updated_at defaults."""
    return datetime.now(timezone.utc)


def normalize_currency_code(value: Any) -> Any:
    """Upper-case and strip a currency code; other types pass through."""
    if isinstance(value, str):
        return value.strip().upper()
    return value


def coerce_calendar_date(value: Any) -> Any:
    """
    Reduce datetimes and ISO timestamps to their calendar date.

    Transactions are compared at date granularity only, so
    "2024-01-31T23:00:00Z" must land on January 31st.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and "T" in value:
        return value.split("T", 1)[0]
    return value


CurrencyCode = Annotated[
    str,
    BeforeValidator(normalize_currency_code),
    Field(pattern=r"^[A-Z]{3}$"),
]
CalendarDate = Annotated[date, BeforeValidator(coerce_calendar_date)]


# =============================================================================
# ENUMS
# =============================================================================

class TransactionType(str, Enum):
    """Kinds of money movement a user can record."""
    INCOME = "income"
    EXPENSE = "expense"
    SAVINGS_TRANSFER = "savings_transfer"


class TransferDirection(str, Enum):
    """Direction of a savings transfer."""
    TO_SAVINGS = "to_savings"
    FROM_SAVINGS = "from_savings"


class ProjectStatus(str, Enum):
    """Lifecycle status of an income project."""
    ACTIVE = "active"
    COMPLETED = "completed"
    ON_HOLD = "on_hold"


# =============================================================================
# GROUPING ENTITIES
# =============================================================================

class ExpenseCategory(BaseModel):
    """
    A user-defined expense category.

    The optional currency is the category's own display currency; the
    category breakdown converts each expense into it.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Category name (unique per user, case-insensitive)"
    )
    currency: Optional[CurrencyCode] = Field(
        default=None,
        description="Display/aggregation currency for this category"
    )
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def name_key(self) -> str:
        """Key used for case-insensitive uniqueness checks."""
        return self.name.casefold()


class IncomeSource(BaseModel):
    """Where income comes from (employer, client, platform)."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(..., min_length=1, max_length=100)
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def name_key(self) -> str:
        return self.name.casefold()


class Project(BaseModel):
    """A client project that income and linked expenses are tracked against."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    name: str = Field(..., min_length=1, max_length=200)
    currency: CurrencyCode = Field(default="USD")
    status: ProjectStatus = Field(default=ProjectStatus.ACTIVE)
    notes: Optional[str] = Field(default=None, max_length=2000)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None


# =============================================================================
# TRANSACTIONS
# =============================================================================

class Transaction(BaseModel):
    """
    A single income, expense or savings transfer.

    Invariants:
    - amount is strictly positive
    - category_id only on expenses
    - source_id only on income
    - project_id only on income or expenses
    - transfer_direction on savings transfers, and only there
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(default_factory=uuid4)
    type: TransactionType
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Positive amount in the transaction's own currency"
    )
    currency: CurrencyCode
    transaction_date: CalendarDate = Field(
        ...,
        description="Calendar date of the transaction"
    )
    category_id: Optional[UUID] = None
    source_id: Optional[UUID] = None
    project_id: Optional[UUID] = None
    transfer_direction: Optional[TransferDirection] = None
    notes: Optional[str] = Field(default=None, max_length=1000)
    created_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode='after')
    def validate_type_fields(self) -> 'Transaction':
        """Reject fields that don't belong to this transaction type."""
        if self.category_id is not None and self.type != TransactionType.EXPENSE:
            raise ValueError("Only expenses can have a category")
        if self.source_id is not None and self.type != TransactionType.INCOME:
            raise ValueError("Only income can have a source")
        if self.project_id is not None and self.type == TransactionType.SAVINGS_TRANSFER:
            raise ValueError("Savings transfers cannot be linked to a project")

        if self.type == TransactionType.SAVINGS_TRANSFER:
            if self.transfer_direction is None:
                raise ValueError("Savings transfers need a transfer direction")
        elif self.transfer_direction is not None:
            raise ValueError("Only savings transfers can have a transfer direction")

        return self

    @property
    def signed_savings_amount(self) -> Decimal:
        """Amount moved into savings; withdrawals are negative."""
        if self.transfer_direction == TransferDirection.FROM_SAVINGS:
            return -self.amount
        return self.amount

    def apply_update(self, update: 'TransactionUpdate') -> 'Transaction':
        """Return a copy with the editable fields replaced."""
        changes = update.model_dump(exclude_unset=True)
        if "notes" in changes and not changes["notes"]:
            changes["notes"] = None
        return Transaction.model_validate({**self.model_dump(), **changes})


class TransactionUpdate(BaseModel):
    """
    Editable fields of an existing transaction.

    The transaction type (and with it the category/source/direction
    links) cannot change after creation.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    amount: Optional[Decimal] = Field(default=None, gt=0)
    currency: Optional[CurrencyCode] = None
    transaction_date: Optional[CalendarDate] = None
    notes: Optional[str] = Field(default=None, max_length=1000)


# =============================================================================
# SETTINGS
# =============================================================================

class UserSettings(BaseModel):
    """Per-user preferences; a singleton per user."""

    home_currency: CurrencyCode = Field(default="USD")
    budget_enabled: bool = False
    monthly_budget_amount: Decimal = Field(default=Decimal("0"), ge=0)
    budget_currency: Optional[CurrencyCode] = None
    emergency_fund_goal: Optional[Decimal] = Field(default=None, ge=0)
    emergency_fund_currency: Optional[CurrencyCode] = None

    @model_validator(mode='after')
    def default_currencies(self) -> 'UserSettings':
        """Budget and emergency fund default to the home currency."""
        if self.budget_currency is None:
            self.budget_currency = self.home_currency
        if self.emergency_fund_currency is None:
            self.emergency_fund_currency = self.home_currency
        return self

    @property
    def budget_active(self) -> bool:
        """Pacing only runs for an enabled, positive budget."""
        return self.budget_enabled and self.monthly_budget_amount > 0


# =============================================================================
# PERIODS AND FILTERS
# =============================================================================

class MonthAnchor(BaseModel):
    """A calendar month, the unit every aggregation is computed over."""
    model_config = ConfigDict(frozen=True)

    year: int = Field(..., ge=1, le=9999)
    month: int = Field(..., ge=1, le=12)

    @classmethod
    def of(cls, value: date) -> 'MonthAnchor':
        """Month containing the given date."""
        return cls(year=value.year, month=value.month)

    @property
    def days_in_month(self) -> int:
        return calendar.monthrange(self.year, self.month)[1]

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def last_day(self) -> date:
        return date(self.year, self.month, self.days_in_month)

    @property
    def label(self) -> str:
        """Display label, e.g. 'February 2024'."""
        return self.first_day.strftime("%B %Y")

    def contains(self, value: date) -> bool:
        return self.first_day <= value <= self.last_day

    def shift(self, months: int) -> 'MonthAnchor':
        """Move forward (positive) or backward (negative) by whole months."""
        index = self.year * 12 + (self.month - 1) + months
        return MonthAnchor(year=index // 12, month=index % 12 + 1)

    def previous(self) -> 'MonthAnchor':
        return self.shift(-1)

    def next(self) -> 'MonthAnchor':
        return self.shift(1)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


class TransactionFilter(BaseModel):
    """
    Optional equality filters combined with AND.

    Each field accepts the "all" sentinel, which disables that filter.
    """

    category: str = ALL
    currency: str = ALL
    type: str = ALL

    @field_validator('category', 'type', mode='before')
    @classmethod
    def stringify(cls, v: Any) -> str:
        """Accept UUIDs and enum members as filter values."""
        if isinstance(v, Enum):
            return v.value
        return str(v)

    @field_validator('currency', mode='before')
    @classmethod
    def normalize_currency(cls, v: Any) -> str:
        if isinstance(v, str) and v.strip().lower() == ALL:
            return ALL
        return normalize_currency_code(v)

    def matches(self, transaction: Transaction) -> bool:
        """True when the transaction passes every active filter."""
        if self.category != ALL and str(transaction.category_id) != self.category:
            return False
        if self.currency != ALL and transaction.currency != self.currency:
            return False
        if self.type != ALL and transaction.type.value != self.type:
            return False
        return True


# =============================================================================
# SNAPSHOT
# =============================================================================

class FinanceSnapshot(BaseModel):
    """
    Everything one computation pass needs, handed over explicitly.

    The engine never reaches into ambient state; callers load a snapshot
    from the store and pass it in.
    """

    transactions: list[Transaction] = Field(default_factory=list)
    categories: list[ExpenseCategory] = Field(default_factory=list)
    sources: list[IncomeSource] = Field(default_factory=list)
    projects: list[Project] = Field(default_factory=list)
    settings: UserSettings = Field(default_factory=UserSettings)

    @property
    def category_ids(self) -> set[UUID]:
        return {category.id for category in self.categories}

    def category_by_id(self, category_id: UUID) -> Optional[ExpenseCategory]:
        for category in self.categories:
            if category.id == category_id:
                return category
        return None

    def category_by_name(self, name: str) -> Optional[ExpenseCategory]:
        key = name.strip().casefold()
        for category in self.categories:
            if category.name_key == key:
                return category
        return None

    def project_by_id(self, project_id: UUID) -> Optional[Project]:
        for project in self.projects:
            if project.id == project_id:
                return project
        return None

    def transactions_of_type(self, kind: TransactionType) -> list[Transaction]:
        return [t for t in self.transactions if t.type == kind]
