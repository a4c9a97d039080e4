"""
Aggregation Engine Package

Pure functions over an explicit snapshot:
Period Filter -> Aggregator -> Budget Pacing Engine.
"""

from fintrack.engine.aggregator import (
    aggregate,
    breakdown_by_source,
    budget_spend,
    category_breakdown,
    converted_total,
    per_currency_totals,
    percentage_change,
    percentage_of,
)
from fintrack.engine.currency import (
    RATE_TO_USD,
    SUPPORTED_CURRENCIES,
    convert,
    is_supported,
)
from fintrack.engine.pacing import (
    budget_level,
    elapsed_days,
    pacing,
    recommendation_horizons,
)
from fintrack.engine.period import (
    exclude_orphans,
    filter_transactions,
    in_month,
    is_orphan,
)
from fintrack.engine.summary import (
    emergency_fund_progress,
    income_trend,
    monthly_overview,
    project_summary,
    recent_transactions,
    savings_balance,
)

__all__ = [
    # Currency
    "RATE_TO_USD",
    "SUPPORTED_CURRENCIES",
    "convert",
    "is_supported",
    # Period
    "exclude_orphans",
    "filter_transactions",
    "in_month",
    "is_orphan",
    # Aggregation
    "aggregate",
    "breakdown_by_source",
    "budget_spend",
    "category_breakdown",
    "converted_total",
    "per_currency_totals",
    "percentage_change",
    "percentage_of",
    # Pacing
    "budget_level",
    "elapsed_days",
    "pacing",
    "recommendation_horizons",
    # Summaries
    "emergency_fund_progress",
    "income_trend",
    "monthly_overview",
    "project_summary",
    "recent_transactions",
    "savings_balance",
]
