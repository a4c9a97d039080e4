"""
Data Models Package

This package contains all Pydantic models used in Fintrack.
All data flowing into and out of the engine conforms to these schemas.
"""

from fintrack.models.finance import (
    ALL,
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
    AggregateResult,
    BudgetLevel,
    CategoryBreakdown,
    EmergencyFundProgress,
    ExpenseMonthReport,
    GroupTotal,
    MonthlyOverview,
    PaceSeverity,
    PacingRecommendation,
    PacingResult,
    PacingStatus,
    ProjectSummary,
    TrendPoint,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    # Entities
    "ALL",
    "ExpenseCategory",
    "FinanceSnapshot",
    "IncomeSource",
    "MonthAnchor",
    "Project",
    "ProjectStatus",
    "Transaction",
    "TransactionFilter",
    "TransactionType",
    "TransactionUpdate",
    "TransferDirection",
    "UserSettings",
    # Results
    "AggregateResult",
    "BudgetLevel",
    "CategoryBreakdown",
    "EmergencyFundProgress",
    "ExpenseMonthReport",
    "GroupTotal",
    "MonthlyOverview",
    "PaceSeverity",
    "PacingRecommendation",
    "PacingResult",
    "PacingStatus",
    "ProjectSummary",
    "TrendPoint",
    "ValidationIssue",
    "ValidationResult",
]
