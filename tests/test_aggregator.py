"""Tests for monthly aggregation."""

import pytest
from datetime import date
from decimal import Decimal

from fintrack.engine.aggregator import (
    aggregate,
    breakdown_by_source,
    budget_spend,
    category_breakdown,
    per_currency_totals,
    percentage_change,
    percentage_of,
)
from fintrack.models.finance import IncomeSource


class TestTotals:
    """Per-currency and home-currency totals."""

    def test_mixed_currencies_in_home_currency(self, make_expense):
        """$100 + 50 EUR + 20 GBP, each converted before summing."""
        transactions = [
            make_expense("100", "USD"),
            make_expense("50", "EUR"),
            make_expense("20", "GBP"),
        ]
        result = aggregate(transactions, "USD")

        assert result.home_currency_total == pytest.approx(100 + 50 / 0.85 + 20 / 0.73)
        assert result.per_currency_totals == {
            "USD": Decimal("100"),
            "EUR": Decimal("50"),
            "GBP": Decimal("20"),
        }
        assert result.transaction_count == 3
        assert result.has_data

    def test_per_currency_totals_are_exact(self, make_expense):
        transactions = [make_expense("0.10"), make_expense("0.20")]
        assert per_currency_totals(transactions) == {"USD": Decimal("0.30")}

    def test_empty_input(self):
        """No transactions means zero totals and no data, never an error."""
        result = aggregate([], "EUR", [])
        assert result.home_currency_total == 0.0
        assert result.per_currency_totals == {}
        assert result.categories == []
        assert not result.has_data

    def test_orphans_excluded_when_categories_given(self, make_category, make_expense):
        kept = make_category("Rent")
        transactions = [
            make_expense("40", category=kept),
            make_expense("60", category=make_category("Gone")),
        ]
        result = aggregate(transactions, "USD", [kept])
        assert result.home_currency_total == pytest.approx(40.0)
        assert result.transaction_count == 1

    def test_budget_spend_in_budget_currency(self, make_expense):
        transactions = [make_expense("85", "EUR"), make_expense("100", "USD")]
        assert budget_spend(transactions, "EUR") == pytest.approx(170.0)


class TestCategoryBreakdown:
    """Per-category expense totals."""

    def test_percentages_sum_to_100(self, make_category, make_expense):
        food = make_category("Food")
        rent = make_category("Rent")
        fun = make_category("Fun")
        transactions = [
            make_expense("30", category=food),
            make_expense("60", category=rent),
            make_expense("10", category=fun),
            make_expense("33.33", category=food),
        ]
        rows = category_breakdown(transactions, [food, rent, fun])
        assert sum(row.percentage for row in rows) == pytest.approx(100.0)

    def test_sorted_descending_and_zero_filled(self, make_category, make_expense):
        """Every known category appears, empty ones with zero."""
        food = make_category("Food")
        rent = make_category("Rent")
        unused = make_category("Travel")
        transactions = [
            make_expense("20", category=food),
            make_expense("80", category=rent),
        ]
        rows = category_breakdown(transactions, [food, rent, unused])

        assert [row.name for row in rows] == ["Rent", "Food", "Travel"]
        assert rows[0].percentage == pytest.approx(80.0)
        assert rows[2].amount == 0.0
        assert rows[2].percentage == 0.0
        assert rows[2].transaction_count == 0

    def test_converts_into_category_currency(self, make_category, make_expense):
        travel = make_category("Travel", currency="EUR")
        rows = category_breakdown(
            [make_expense("100", "USD", category=travel), make_expense("15", "EUR", category=travel)],
            [travel],
        )
        assert rows[0].currency == "EUR"
        assert rows[0].amount == pytest.approx(100.0)
        assert rows[0].transaction_count == 2

    def test_category_without_currency_keeps_transaction_currency(self, make_category, make_expense):
        food = make_category("Food")
        rows = category_breakdown(
            [make_expense("10", "GBP", category=food), make_expense("5", "GBP", category=food)],
            [food],
        )
        assert rows[0].currency == "GBP"
        assert rows[0].amount == pytest.approx(15.0)

    def test_mixed_currencies_without_category_currency(self, make_category, make_expense):
        """Amounts stay in their own currencies; no single currency applies."""
        food = make_category("Food")
        rows = category_breakdown(
            [make_expense("10", "GBP", category=food), make_expense("5", "USD", category=food)],
            [food],
        )
        assert rows[0].currency is None
        assert rows[0].amount == pytest.approx(15.0)

    def test_ignores_income_and_uncategorized(self, make_category, make_expense, make_income):
        food = make_category("Food")
        rows = category_breakdown(
            [make_expense("10", category=food), make_expense("99"), make_income("500")],
            [food],
        )
        assert len(rows) == 1
        assert rows[0].amount == pytest.approx(10.0)
        assert rows[0].percentage == pytest.approx(100.0)

    def test_no_expenses_gives_zero_percentages(self, make_category):
        rows = category_breakdown([], [make_category("Food"), make_category("Rent")])
        assert all(row.percentage == 0.0 for row in rows)


class TestSourceBreakdown:
    """Income per source in home currency."""

    def test_breakdown_by_source(self, make_income):
        employer = IncomeSource(name="Employer")
        client = IncomeSource(name="Client")
        transactions = [
            make_income("300", source_id=employer.id),
            make_income("85", "EUR", source_id=client.id),
            make_income("1000"),
        ]
        rows = breakdown_by_source(transactions, [employer, client], "USD")

        assert [row.name for row in rows] == ["Employer", "Client"]
        assert rows[1].amount == pytest.approx(100.0)
        assert rows[0].percentage == pytest.approx(75.0)


class TestPercentages:
    """Guarded percentage helpers."""

    def test_percentage_of_zero_whole(self):
        assert percentage_of(10, 0) == 0.0

    def test_percentage_change(self):
        assert percentage_change(150, 100) == pytest.approx(50.0)
        assert percentage_change(50, 100) == pytest.approx(-50.0)

    def test_percentage_change_from_zero(self):
        """No previous month: 100 if anything happened, 0 otherwise."""
        assert percentage_change(10, 0) == 100.0
        assert percentage_change(0, 0) == 0.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
