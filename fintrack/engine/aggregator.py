"""
Monthly Aggregation

Turns a filtered list of transactions into:
- raw totals per currency (no conversion, exact Decimal sums)
- a grand total in the home currency
- a per-category expense breakdown with percentages

DESIGN DECISION: Cross-currency totals convert each transaction and then
sum. Converting per-currency subtotals instead would round differently.
"""

from collections import defaultdict
from collections.abc import Iterable
from decimal import Decimal
from typing import Optional
from uuid import UUID

from fintrack.engine.currency import convert
from fintrack.engine.period import exclude_orphans
from fintrack.log import get_logger
from fintrack.models.finance import (
    ExpenseCategory,
    IncomeSource,
    Transaction,
    TransactionType,
)
from fintrack.models.results import (
    AggregateResult,
    CategoryBreakdown,
    GroupTotal,
)


logger = get_logger(__name__)


def percentage_of(part: float, whole: float) -> float:
    """part as a percentage of whole; 0 when whole is 0."""
    if not whole:
        return 0.0
    return part / whole * 100


def percentage_change(current: float, previous: float) -> float:
    """
    Month-over-month change in percent.

    With no previous value the change is 100 when anything happened
    this month and 0 otherwise.
    """
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) / previous * 100


def per_currency_totals(transactions: Iterable[Transaction]) -> dict[str, Decimal]:
    """Sum raw amounts per currency."""
    totals: dict[str, Decimal] = {}
    for transaction in transactions:
        totals[transaction.currency] = (
            totals.get(transaction.currency, Decimal("0")) + transaction.amount
        )
    return totals


def converted_total(transactions: Iterable[Transaction], currency: str) -> float:
    """Sum of every transaction converted individually into currency."""
    return sum(
        (convert(t.amount, t.currency, currency) for t in transactions),
        0.0,
    )


def budget_spend(transactions: Iterable[Transaction], budget_currency: str) -> float:
    """Month-to-date spend expressed in the budget's currency."""
    return converted_total(transactions, budget_currency)


def category_breakdown(
    transactions: Iterable[Transaction],
    categories: Iterable[ExpenseCategory],
) -> list[CategoryBreakdown]:
    """
    Expense totals for every known category, largest first.

    Each expense is converted into its category's currency, or kept in its
    own currency when the category has none. Categories without expenses
    are listed with zero amount and zero percentage. Uncategorized and
    orphaned expenses are not part of the breakdown.
    """
    categories = list(categories)
    by_id = {category.id: category for category in categories}

    amounts: dict[UUID, float] = defaultdict(float)
    counts: dict[UUID, int] = defaultdict(int)
    seen_currencies: dict[UUID, set[str]] = defaultdict(set)

    for transaction in transactions:
        if transaction.type != TransactionType.EXPENSE:
            continue
        category = by_id.get(transaction.category_id)
        if category is None:
            continue
        target = category.currency or transaction.currency
        amounts[category.id] += convert(transaction.amount, transaction.currency, target)
        counts[category.id] += 1
        seen_currencies[category.id].add(target)

    total = sum(amounts.values())

    rows = []
    for category in categories:
        currency = category.currency
        if currency is None and len(seen_currencies[category.id]) == 1:
            currency = next(iter(seen_currencies[category.id]))
        amount = amounts.get(category.id, 0.0)
        rows.append(CategoryBreakdown(
            category_id=category.id,
            name=category.name,
            amount=amount,
            currency=currency,
            percentage=percentage_of(amount, total),
            transaction_count=counts.get(category.id, 0),
        ))

    rows.sort(key=lambda row: row.amount, reverse=True)
    return rows


def breakdown_by_source(
    transactions: Iterable[Transaction],
    sources: Iterable[IncomeSource],
    home_currency: str,
) -> list[GroupTotal]:
    """Income per known source in home currency, largest first."""
    sources = list(sources)
    amounts: dict[UUID, float] = defaultdict(float)
    counts: dict[UUID, int] = defaultdict(int)
    known = {source.id for source in sources}

    for transaction in transactions:
        if transaction.type != TransactionType.INCOME:
            continue
        if transaction.source_id not in known:
            continue
        amounts[transaction.source_id] += convert(
            transaction.amount, transaction.currency, home_currency
        )
        counts[transaction.source_id] += 1

    total = sum(amounts.values())
    rows = [
        GroupTotal(
            group_id=source.id,
            name=source.name,
            amount=amounts.get(source.id, 0.0),
            percentage=percentage_of(amounts.get(source.id, 0.0), total),
            transaction_count=counts.get(source.id, 0),
        )
        for source in sources
    ]
    rows.sort(key=lambda row: row.amount, reverse=True)
    return rows


def aggregate(
    transactions: Iterable[Transaction],
    home_currency: str,
    categories: Optional[Iterable[ExpenseCategory]] = None,
) -> AggregateResult:
    """
    Aggregate an already period-filtered set of transactions.

    Args:
        transactions: Filtered transactions (typically one month)
        home_currency: Currency for the grand total
        categories: The user's categories. When given, orphans are
                    excluded and the category breakdown is computed.

    Returns:
        AggregateResult with per-currency, home-currency and category totals
    """
    transactions = list(transactions)
    breakdown: list[CategoryBreakdown] = []

    if categories is not None:
        categories = list(categories)
        transactions = exclude_orphans(transactions, categories)
        breakdown = category_breakdown(transactions, categories)

    result = AggregateResult(
        home_currency=home_currency,
        per_currency_totals=per_currency_totals(transactions),
        home_currency_total=converted_total(transactions, home_currency),
        categories=breakdown,
        transaction_count=len(transactions),
    )

    logger.debug(
        "transactions_aggregated",
        home_currency=home_currency,
        transaction_count=result.transaction_count,
        currencies=sorted(result.per_currency_totals),
        home_currency_total=round(result.home_currency_total, 2),
    )
    return result
