"""Shared fixtures: model factories and a fixed clock."""

from datetime import date
from decimal import Decimal

import pytest

from fintrack.models.finance import (
    ExpenseCategory,
    Transaction,
    TransactionType,
    TransferDirection,
)


TODAY = date(2024, 4, 15)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def make_category():
    def _make(name="Groceries", currency=None):
        return ExpenseCategory(name=name, currency=currency)
    return _make


@pytest.fixture
def make_expense():
    def _make(amount="10.00", currency="USD", on=TODAY, category=None, **kwargs):
        return Transaction(
            type=TransactionType.EXPENSE,
            amount=Decimal(str(amount)),
            currency=currency,
            transaction_date=on,
            category_id=category.id if category is not None else None,
            **kwargs,
        )
    return _make


@pytest.fixture
def make_income():
    def _make(amount="100.00", currency="USD", on=TODAY, **kwargs):
        return Transaction(
            type=TransactionType.INCOME,
            amount=Decimal(str(amount)),
            currency=currency,
            transaction_date=on,
            **kwargs,
        )
    return _make


@pytest.fixture
def make_transfer():
    def _make(amount="50.00", currency="USD", on=TODAY, direction=TransferDirection.TO_SAVINGS):
        return Transaction(
            type=TransactionType.SAVINGS_TRANSFER,
            amount=Decimal(str(amount)),
            currency=currency,
            transaction_date=on,
            transfer_direction=direction,
        )
    return _make
