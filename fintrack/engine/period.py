"""
Period Filtering

Selects the transactions a monthly view is computed over:
1. Date falls within the anchor month (calendar-date granularity)
2. Every active equality filter matches ("all" disables a filter)
3. Expenses pointing at a deleted category are dropped (orphans)

Orphans are excluded here, at read time, whether or not storage
housekeeping has already removed them.
"""

from collections.abc import Iterable
from typing import Optional
from uuid import UUID

from fintrack.log import get_logger
from fintrack.models.finance import (
    ExpenseCategory,
    MonthAnchor,
    Transaction,
    TransactionFilter,
)


logger = get_logger(__name__)


def in_month(transaction: Transaction, anchor: MonthAnchor) -> bool:
    """True when the transaction's date is between the 1st and last day of the month."""
    return anchor.contains(transaction.transaction_date)


def is_orphan(transaction: Transaction, category_ids: set[UUID]) -> bool:
    """A transaction whose category no longer exists."""
    return (
        transaction.category_id is not None
        and transaction.category_id not in category_ids
    )


def exclude_orphans(
    transactions: Iterable[Transaction],
    categories: Iterable[ExpenseCategory],
) -> list[Transaction]:
    """Drop transactions that reference a deleted category."""
    category_ids = {category.id for category in categories}
    return [t for t in transactions if not is_orphan(t, category_ids)]


def filter_transactions(
    transactions: Iterable[Transaction],
    anchor: MonthAnchor,
    categories: Iterable[ExpenseCategory],
    filters: Optional[TransactionFilter] = None,
) -> list[Transaction]:
    """
    Transactions of the anchor month that pass every active filter.

    Args:
        transactions: All of the user's transactions, unfiltered
        anchor: Month to select
        categories: The user's existing categories (for orphan exclusion)
        filters: Optional category/currency/type filters

    Returns:
        Matching transactions in their original order
    """
    filters = filters or TransactionFilter()
    category_ids = {category.id for category in categories}

    transactions = list(transactions)
    selected = []
    orphans = 0
    for transaction in transactions:
        if not in_month(transaction, anchor):
            continue
        if is_orphan(transaction, category_ids):
            orphans += 1
            continue
        if filters.matches(transaction):
            selected.append(transaction)

    logger.debug(
        "transactions_filtered",
        month=str(anchor),
        total=len(transactions),
        selected=len(selected),
        orphans_excluded=orphans,
        filters=filters.model_dump(),
    )
    return selected
