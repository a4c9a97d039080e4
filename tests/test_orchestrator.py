"""Integration tests for the FinanceTracker flows (in-memory store)."""

import asyncio

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from fintrack.config import get_settings
from fintrack.models.finance import (
    MonthAnchor,
    TransactionFilter,
    TransactionType,
    TransferDirection,
)
from fintrack.models.results import PacingStatus
from fintrack.orchestrator import (
    FinanceTracker,
    ValidationFailedError,
    create_tracker,
)
from fintrack.services.storage import (
    InMemoryFinanceStore,
    JsonFileFinanceStore,
    NotFoundError,
)


TODAY = date(2024, 4, 15)
APRIL = MonthAnchor(year=2024, month=4)


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def tracker():
    return FinanceTracker(InMemoryFinanceStore(), get_settings(), clock=lambda: TODAY)


class TestRecording:
    """Recording income, expenses and savings transfers."""

    def test_expense_creates_unknown_category(self, tracker):
        expense = run(tracker.record_expense("25", "usd", date(2024, 4, 2), category="Groceries"))
        categories = run(tracker.store.list_categories())

        assert [c.name for c in categories] == ["Groceries"]
        assert expense.category_id == categories[0].id
        assert expense.currency == "USD"

    def test_expense_reuses_category_by_name(self, tracker):
        first = run(tracker.record_expense("25", "USD", date(2024, 4, 2), category="Groceries"))
        second = run(tracker.record_expense("10", "USD", date(2024, 4, 3), category=" groceries"))
        assert first.category_id == second.category_id
        assert len(run(tracker.store.list_categories())) == 1

    def test_expense_by_category_id(self, tracker):
        food = run(tracker.create_category("Food"))
        expense = run(tracker.record_expense("5", "USD", date(2024, 4, 2), category=food.id))
        by_string = run(tracker.record_expense("5", "USD", date(2024, 4, 2), category=str(food.id)))
        assert expense.category_id == food.id
        assert by_string.category_id == food.id

    def test_unknown_category_id_raises(self, tracker):
        with pytest.raises(NotFoundError):
            run(tracker.record_expense("5", "USD", date(2024, 4, 2), category=uuid4()))

    def test_unknown_project_rejected(self, tracker):
        """Nothing is saved when validation finds an error."""
        with pytest.raises(ValidationFailedError) as exc_info:
            run(tracker.record_expense("5", "USD", date(2024, 4, 2), project_id=uuid4()))

        assert exc_info.value.result.has_errors
        assert "Project" in str(exc_info.value)
        assert run(tracker.store.list_transactions()) == []

    def test_rejected_expense_does_not_create_category(self, tracker):
        """A new category name is only stored with a saved expense."""
        with pytest.raises(ValidationFailedError):
            run(tracker.record_expense(
                "10", "USD", date(2024, 4, 2), category="Brand New", project_id=uuid4()
            ))
        assert run(tracker.store.list_categories()) == []

    def test_malformed_expense_does_not_create_category(self, tracker):
        with pytest.raises(ValueError):
            run(tracker.record_expense("-10", "USD", date(2024, 4, 2), category="Brand New"))
        assert run(tracker.store.list_categories()) == []

    def test_invalid_amount_rejected(self, tracker):
        with pytest.raises(ValueError):
            run(tracker.record_income("-10", "USD", date(2024, 4, 2)))

    def test_income_with_source(self, tracker):
        employer = run(tracker.add_source("Employer"))
        income = run(tracker.record_income("3000", "USD", date(2024, 4, 1), source_id=employer.id))
        assert income.type == TransactionType.INCOME
        assert income.source_id == employer.id

    def test_savings_transfer_defaults_to_today(self, tracker):
        transfer = run(tracker.record_savings_transfer("100", "USD", TransferDirection.TO_SAVINGS))
        assert transfer.transaction_date == TODAY
        assert transfer.transfer_direction == TransferDirection.TO_SAVINGS


class TestEditing:
    """Editing, deleting and category management."""

    def test_edit_transaction(self, tracker):
        expense = run(tracker.record_expense("25", "USD", date(2024, 4, 2), category="Food"))
        edited = run(tracker.edit_transaction(expense.id, amount=Decimal("30"), currency="EUR"))
        assert edited.amount == Decimal("30")
        assert edited.currency == "EUR"
        assert edited.category_id == expense.category_id

    def test_type_is_not_editable(self, tracker):
        expense = run(tracker.record_expense("25", "USD", date(2024, 4, 2), category="Food"))
        with pytest.raises(ValueError):
            run(tracker.edit_transaction(expense.id, type="income"))

    def test_edit_missing_raises(self, tracker):
        with pytest.raises(NotFoundError):
            run(tracker.edit_transaction(uuid4(), notes="x"))

    def test_delete_transaction(self, tracker):
        income = run(tracker.record_income("10", "USD", date(2024, 4, 2)))
        assert run(tracker.delete_transaction(income.id)) is True
        assert run(tracker.store.list_transactions()) == []

    def test_duplicate_category_rejected(self, tracker):
        run(tracker.create_category("Food"))
        with pytest.raises(ValidationFailedError, match="already exists"):
            run(tracker.create_category("FOOD"))

    def test_rename_category(self, tracker):
        food = run(tracker.create_category("Food"))
        assert run(tracker.rename_category(food.id, "Dining")).name == "Dining"

    def test_delete_category_cascades(self, tracker):
        for day in range(1, 6):
            run(tracker.record_expense("10", "USD", date(2024, 4, day), category="Dining"))
        run(tracker.record_expense("50", "USD", date(2024, 4, 6), category="Rent"))
        dining = next(
            c for c in run(tracker.store.list_categories()) if c.name == "Dining"
        )

        assert run(tracker.delete_category(dining.id)) == 5
        report = run(tracker.monthly_expenses(APRIL))
        assert len(report.transactions) == 1
        assert report.aggregate.home_currency_total == pytest.approx(50.0)

    def test_update_settings(self, tracker):
        saved = run(tracker.update_settings(home_currency="eur"))
        assert saved.home_currency == "EUR"
        assert saved.budget_currency == "EUR"

        saved = run(tracker.update_settings(budget_currency="GBP"))
        saved = run(tracker.update_settings(home_currency="USD"))
        assert saved.budget_currency == "GBP"
        assert saved.emergency_fund_currency == "USD"


class TestMonthlyExpenses:
    """The expenses view with budget pacing."""

    @pytest.fixture
    def populated(self, tracker):
        run(tracker.update_settings(budget_enabled=True, monthly_budget_amount=Decimal("1000")))
        run(tracker.record_expense("400", "USD", date(2024, 4, 3), category="Food"))
        run(tracker.record_expense("200", "USD", date(2024, 4, 9), category="Rent"))
        run(tracker.record_expense("70", "USD", date(2024, 3, 30), category="Food"))
        run(tracker.record_income("5000", "USD", date(2024, 4, 1)))
        return tracker

    def test_report_totals_and_pacing(self, populated):
        report = run(populated.monthly_expenses(APRIL))

        assert report.month == APRIL
        assert report.filters.type == "expense"
        assert len(report.transactions) == 2
        assert report.aggregate.home_currency_total == pytest.approx(600.0)
        assert [row.name for row in report.aggregate.categories] == ["Food", "Rent"]
        assert report.budget_spent == pytest.approx(600.0)
        assert report.pacing.status == PacingStatus.OVER_PACE
        assert report.pacing.expected_spend_by_today == pytest.approx(500.0)

    def test_filters_do_not_change_budget_spend(self, populated):
        """The category filter narrows the listing, not the budget pace."""
        food = next(
            c for c in run(populated.store.list_categories()) if c.name == "Food"
        )
        report = run(populated.monthly_expenses(APRIL, TransactionFilter(category=food.id)))

        assert len(report.transactions) == 1
        assert report.aggregate.home_currency_total == pytest.approx(400.0)
        assert report.budget_spent == pytest.approx(600.0)

    def test_defaults_to_current_month(self, populated):
        report = run(populated.monthly_expenses())
        assert report.month == APRIL

    def test_no_budget_no_pacing(self, tracker):
        run(tracker.record_expense("10", "USD", date(2024, 4, 3), category="Food"))
        report = run(tracker.monthly_expenses(APRIL))
        assert report.pacing is None
        assert report.budget_spent is None

    def test_budget_in_other_currency(self, tracker):
        run(tracker.update_settings(
            budget_enabled=True,
            monthly_budget_amount=Decimal("850"),
            budget_currency="EUR",
        ))
        run(tracker.record_expense("100", "USD", date(2024, 4, 3), category="Food"))
        report = run(tracker.monthly_expenses(APRIL))
        assert report.pacing.budget_currency == "EUR"
        assert report.budget_spent == pytest.approx(85.0)
        assert report.pacing.budget_percentage == pytest.approx(10.0)


class TestReports:
    """Dashboard, emergency fund and project reports."""

    def test_dashboard(self, tracker):
        run(tracker.record_income("1000", "USD", date(2024, 4, 1)))
        run(tracker.record_expense("300", "USD", date(2024, 4, 5), category="Food"))
        run(tracker.record_savings_transfer("200", "USD", TransferDirection.TO_SAVINGS))

        overview = run(tracker.dashboard())
        assert overview.month == APRIL
        assert overview.available_balance == pytest.approx(500.0)
        assert len(overview.recent_transactions) == 3

    def test_emergency_fund(self, tracker):
        run(tracker.update_settings(emergency_fund_goal=Decimal("1000")))
        run(tracker.record_savings_transfer("250", "USD", TransferDirection.TO_SAVINGS))
        progress = run(tracker.emergency_fund())
        assert progress.percentage == pytest.approx(25.0)

    def test_income_by_source(self, tracker):
        employer = run(tracker.add_source("Employer"))
        run(tracker.record_income("300", "USD", date(2024, 4, 1), source_id=employer.id))
        rows = run(tracker.income_by_source(APRIL))
        assert rows[0].name == "Employer"
        assert rows[0].percentage == pytest.approx(100.0)

    def test_project_report(self, tracker):
        project = run(tracker.create_project("Website", currency="USD"))
        run(tracker.record_income("1000", "USD", date(2024, 4, 2), project_id=project.id))
        run(tracker.record_expense("250", "USD", date(2024, 4, 3), category="Hosting",
                                   project_id=project.id))

        summary = run(tracker.project_report(project.id, APRIL))
        assert summary.net_profit == pytest.approx(750.0)
        assert summary.profit_margin == pytest.approx(75.0)
        assert len(summary.trend) == 6

    def test_unknown_project_report(self, tracker):
        with pytest.raises(NotFoundError):
            run(tracker.project_report(uuid4()))


class TestFactory:
    """create_tracker wiring."""

    def test_in_memory_by_default(self):
        tracker = create_tracker()
        assert isinstance(tracker.store, InMemoryFinanceStore)
        assert not isinstance(tracker.store, JsonFileFinanceStore)
        settings = run(tracker.store.get_settings())
        assert settings.home_currency == get_settings().engine.default_home_currency

    def test_file_storage(self, tmp_path):
        path = tmp_path / "fintrack.json"
        tracker = create_tracker(use_file_storage=True, path=str(path))
        assert isinstance(tracker.store, JsonFileFinanceStore)
        run(tracker.create_category("Food"))
        assert path.exists()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
