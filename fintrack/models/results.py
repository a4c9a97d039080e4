"""
Result Models for Fintrack

Plain data structures the engine hands to the presentation layer.
Every cross-currency figure is a float; per-currency totals stay Decimal
so they add up exactly to the transactions they were built from.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from fintrack.models.finance import (
    MonthAnchor,
    Transaction,
    TransactionFilter,
    utcnow,
)


# =============================================================================
# ENUMS
# =============================================================================

class PacingStatus(str, Enum):
    """
    Where month-to-date spend sits relative to an even burn of the budget.

    DISABLED is returned when there is no positive budget to pace against.
    """
    EXCEEDED = "exceeded"
    ON_TRACK = "on_track"
    UNDER_BUDGET = "under_budget"
    OVER_PACE = "over_pace"
    DISABLED = "disabled"


class PaceSeverity(str, Enum):
    """How far ahead of the expected pace spending is (for color-coding)."""
    NONE = "none"
    SLIGHT = "slight"      # under 5 points ahead
    MODERATE = "moderate"  # 5-20 points ahead
    SEVERE = "severe"      # more than 20 points ahead


class BudgetLevel(str, Enum):
    """Progress bar tone based on raw budget usage."""
    OK = "ok"
    WARNING = "warning"
    EXCEEDED = "exceeded"


# =============================================================================
# AGGREGATION
# =============================================================================

class CategoryBreakdown(BaseModel):
    """One row of the expense category breakdown."""

    category_id: UUID
    name: str
    amount: float = 0.0
    currency: Optional[str] = Field(
        default=None,
        description="Currency of amount; None when the category has no "
                    "currency and its expenses mix currencies"
    )
    percentage: float = 0.0
    transaction_count: int = Field(default=0, ge=0)


class GroupTotal(BaseModel):
    """A named total in home currency (e.g. income per source)."""

    group_id: UUID
    name: str
    amount: float = 0.0
    percentage: float = 0.0
    transaction_count: int = Field(default=0, ge=0)


class AggregateResult(BaseModel):
    """Totals for one filtered set of transactions."""

    home_currency: str
    per_currency_totals: dict[str, Decimal] = Field(default_factory=dict)
    home_currency_total: float = 0.0
    categories: list[CategoryBreakdown] = Field(default_factory=list)
    transaction_count: int = Field(default=0, ge=0)

    @property
    def has_data(self) -> bool:
        return self.transaction_count > 0


# =============================================================================
# BUDGET PACING
# =============================================================================

class PacingRecommendation(BaseModel):
    """
    Daily allowance that brings spend back on pace within a horizon.

    recommended_daily_amount goes negative when even zero spending
    cannot restore the pace inside the horizon.
    """

    horizon_days: int = Field(..., ge=1)
    target_cumulative_spend: float
    allowance: float
    recommended_daily_amount: float
    reaches_month_end: bool = False

    @property
    def is_achievable(self) -> bool:
        return self.recommended_daily_amount >= 0


class PacingResult(BaseModel):
    """Budget adherence for one month."""

    month: MonthAnchor
    budget_amount: float
    budget_currency: str
    spent: float
    remaining: float
    budget_percentage: float
    total_days_in_month: int
    current_day: int
    days_remaining: int
    is_current_month: bool
    ideal_daily_spend: float
    expected_spend_by_today: float
    is_on_track: bool
    pace_gap_points: float = Field(
        default=0.0,
        description="(spent - expected) as percentage points of the budget"
    )
    status: PacingStatus
    severity: PaceSeverity = PaceSeverity.NONE
    level: BudgetLevel = BudgetLevel.OK
    recommendations: list[PacingRecommendation] = Field(default_factory=list)


# =============================================================================
# REPORTS
# =============================================================================

class ExpenseMonthReport(BaseModel):
    """Everything the expenses view shows for one month."""

    month: MonthAnchor
    filters: TransactionFilter
    transactions: list[Transaction] = Field(default_factory=list)
    aggregate: AggregateResult
    budget_spent: Optional[float] = None
    pacing: Optional[PacingResult] = None
    generated_at: datetime = Field(default_factory=utcnow)


class MonthlyOverview(BaseModel):
    """Dashboard summary cards."""

    month: MonthAnchor
    home_currency: str
    income: float = 0.0
    expenses: float = 0.0
    previous_income: float = 0.0
    previous_expenses: float = 0.0
    income_change: float = 0.0
    expense_change: float = 0.0
    savings_balance: float = 0.0
    available_balance: float = 0.0
    recent_transactions: list[Transaction] = Field(default_factory=list)


class EmergencyFundProgress(BaseModel):
    """Savings balance measured against the emergency fund goal."""

    goal: float = 0.0
    currency: str
    saved: float = 0.0
    percentage: float = 0.0
    goal_reached: bool = False

    @property
    def has_goal(self) -> bool:
        return self.goal > 0


class TrendPoint(BaseModel):
    """Income for one month of a trend chart."""

    month: MonthAnchor
    label: str
    income: float = 0.0


class ProjectSummary(BaseModel):
    """Month figures for one project, in the project's currency."""

    project_id: UUID
    name: str
    currency: str
    month: MonthAnchor
    income: float = 0.0
    expenses: float = 0.0
    net_profit: float = 0.0
    profit_margin: float = 0.0
    income_change: float = 0.0
    income_transactions: list[Transaction] = Field(default_factory=list)
    expense_transactions: list[Transaction] = Field(default_factory=list)
    trend: list[TrendPoint] = Field(default_factory=list)


# =============================================================================
# VALIDATION
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'unknown_reference', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = None


class ValidationResult(BaseModel):
    """
    Result of the two-stage validation.

    Stage 1: Reference checks (category, source, project exist)
    Stage 2: Semantic checks (currency, date, amount sanity)
    """

    validated_at: datetime = Field(default_factory=utcnow)
    references_valid: bool
    semantic_valid: bool
    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")
