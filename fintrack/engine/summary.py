"""
Dashboard, Savings and Project Summaries

Month-level figures built on the same converter and period rules as the
expense aggregation: income and expenses in home currency, the all-time
savings balance, emergency fund progress and per-project profitability.
"""

from collections.abc import Iterable
from datetime import date
from typing import Optional
from uuid import UUID

from fintrack.engine.aggregator import converted_total, percentage_change, percentage_of
from fintrack.engine.currency import convert
from fintrack.engine.period import exclude_orphans, in_month
from fintrack.models.finance import (
    FinanceSnapshot,
    MonthAnchor,
    Project,
    Transaction,
    TransactionType,
)
from fintrack.models.results import (
    EmergencyFundProgress,
    MonthlyOverview,
    ProjectSummary,
    TrendPoint,
)


def month_transactions(
    transactions: Iterable[Transaction],
    anchor: MonthAnchor,
    kind: TransactionType,
    project_id: Optional[UUID] = None,
) -> list[Transaction]:
    """Transactions of one type (and optionally one project) in a month."""
    return [
        t for t in transactions
        if t.type == kind
        and in_month(t, anchor)
        and (project_id is None or t.project_id == project_id)
    ]


def savings_balance(transactions: Iterable[Transaction], currency: str) -> float:
    """All-time net amount moved into savings, in currency."""
    return sum(
        (
            convert(t.signed_savings_amount, t.currency, currency)
            for t in transactions
            if t.type == TransactionType.SAVINGS_TRANSFER
        ),
        0.0,
    )


def recent_transactions(transactions: Iterable[Transaction], limit: int = 5) -> list[Transaction]:
    """Newest first by date, then by creation time."""
    ordered = sorted(
        transactions,
        key=lambda t: (t.transaction_date, t.created_at),
        reverse=True,
    )
    return ordered[:limit]


def monthly_overview(
    snapshot: FinanceSnapshot,
    anchor: MonthAnchor,
    recent_limit: int = 5,
) -> MonthlyOverview:
    """
    Dashboard cards for a month.

    Available balance is this month's income minus this month's expenses
    minus everything currently held in savings.
    """
    home = snapshot.settings.home_currency
    transactions = exclude_orphans(snapshot.transactions, snapshot.categories)
    previous = anchor.previous()

    income = converted_total(
        month_transactions(transactions, anchor, TransactionType.INCOME), home
    )
    expenses = converted_total(
        month_transactions(transactions, anchor, TransactionType.EXPENSE), home
    )
    previous_income = converted_total(
        month_transactions(transactions, previous, TransactionType.INCOME), home
    )
    previous_expenses = converted_total(
        month_transactions(transactions, previous, TransactionType.EXPENSE), home
    )
    savings = savings_balance(transactions, home)

    return MonthlyOverview(
        month=anchor,
        home_currency=home,
        income=income,
        expenses=expenses,
        previous_income=previous_income,
        previous_expenses=previous_expenses,
        income_change=percentage_change(income, previous_income),
        expense_change=percentage_change(expenses, previous_expenses),
        savings_balance=savings,
        available_balance=income - expenses - savings,
        recent_transactions=recent_transactions(transactions, recent_limit),
    )


def emergency_fund_progress(snapshot: FinanceSnapshot) -> EmergencyFundProgress:
    """Savings balance against the emergency fund goal, in the goal's currency."""
    settings = snapshot.settings
    currency = settings.emergency_fund_currency or settings.home_currency
    goal = float(settings.emergency_fund_goal or 0)
    saved = savings_balance(snapshot.transactions, currency)
    percentage = percentage_of(saved, goal)

    return EmergencyFundProgress(
        goal=goal,
        currency=currency,
        saved=saved,
        percentage=percentage,
        goal_reached=goal > 0 and percentage >= 100,
    )


def income_trend(
    transactions: Iterable[Transaction],
    end: MonthAnchor,
    currency: str,
    months: int = 6,
    project_id: Optional[UUID] = None,
) -> list[TrendPoint]:
    """Income per month for the months up to and including end, oldest first."""
    transactions = list(transactions)
    points = []
    for offset in range(months - 1, -1, -1):
        month = end.shift(-offset)
        income = converted_total(
            month_transactions(transactions, month, TransactionType.INCOME, project_id),
            currency,
        )
        points.append(TrendPoint(
            month=month,
            label=month.first_day.strftime("%b"),
            income=income,
        ))
    return points


def project_summary(
    snapshot: FinanceSnapshot,
    project: Project,
    anchor: MonthAnchor,
    today: Optional[date] = None,
    trend_months: int = 6,
) -> ProjectSummary:
    """
    Income, linked expenses and profit of one project for a month.

    Amounts are converted into the project's currency. The trend always
    ends at the current month, independent of the anchor.
    """
    today = today or date.today()
    transactions = exclude_orphans(snapshot.transactions, snapshot.categories)

    income_items = month_transactions(
        transactions, anchor, TransactionType.INCOME, project.id
    )
    expense_items = month_transactions(
        transactions, anchor, TransactionType.EXPENSE, project.id
    )
    previous_items = month_transactions(
        transactions, anchor.previous(), TransactionType.INCOME, project.id
    )

    income = converted_total(income_items, project.currency)
    expenses = converted_total(expense_items, project.currency)
    previous_income = converted_total(previous_items, project.currency)
    net_profit = income - expenses

    return ProjectSummary(
        project_id=project.id,
        name=project.name,
        currency=project.currency,
        month=anchor,
        income=income,
        expenses=expenses,
        net_profit=net_profit,
        profit_margin=percentage_of(net_profit, income),
        income_change=percentage_change(income, previous_income),
        income_transactions=income_items,
        expense_transactions=expense_items,
        trend=income_trend(
            transactions,
            MonthAnchor.of(today),
            project.currency,
            months=trend_months,
            project_id=project.id,
        ),
    )
