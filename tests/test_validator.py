"""Tests for two-stage transaction validation."""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from fintrack.config import EngineSettings
from fintrack.models.finance import FinanceSnapshot, IncomeSource, Project
from fintrack.validation import TransactionValidator


TODAY = date(2024, 4, 15)


@pytest.fixture
def snapshot(make_category):
    return FinanceSnapshot(
        categories=[make_category("Food")],
        sources=[IncomeSource(name="Employer")],
        projects=[Project(name="Website")],
    )


@pytest.fixture
def validator(snapshot):
    return TransactionValidator(snapshot, EngineSettings())


class TestReferenceValidation:
    """Stage 1: referenced entities exist."""

    def test_valid_expense(self, snapshot, validator, make_expense):
        expense = make_expense(category=snapshot.categories[0])
        result = validator.validate(expense, today=TODAY)
        assert result.is_valid
        assert result.issues == []

    def test_unknown_category_is_error(self, validator, make_category, make_expense):
        result = validator.validate(make_expense(category=make_category("Ghost")), today=TODAY)
        assert not result.references_valid
        assert not result.semantic_valid
        assert result.has_errors
        assert result.issues[0].field == "category_id"

    def test_uncategorized_expense_is_warning(self, validator, make_expense):
        result = validator.validate(make_expense(), today=TODAY)
        assert result.is_valid
        assert not result.has_errors
        assert result.warnings == ["Expense has no category"]

    def test_unknown_source_and_project(self, validator, make_income):
        income = make_income(source_id=uuid4(), project_id=uuid4())
        result = validator.validate(income, today=TODAY)
        assert result.error_count == 2
        assert {issue.field for issue in result.issues} == {"source_id", "project_id"}

    def test_known_source_and_project(self, snapshot, validator, make_income):
        income = make_income(
            source_id=snapshot.sources[0].id, project_id=snapshot.projects[0].id
        )
        assert validator.validate(income, today=TODAY).is_valid


class TestSemanticValidation:
    """Stage 2: suspicious but legal values are warnings."""

    def test_unsupported_currency_warns(self, validator, make_income):
        result = validator.validate(make_income(currency="CHF"), today=TODAY)
        assert result.is_valid
        assert result.issues[0].issue_type == "unsupported_currency"

    def test_future_date_warns(self, validator, make_income):
        result = validator.validate(make_income(on=date(2024, 5, 1)), today=TODAY)
        assert result.issues[0].issue_type == "future_date"
        assert not result.has_errors

    def test_date_within_tolerance_ok(self, validator, make_income):
        result = validator.validate(make_income(on=date(2024, 4, 22)), today=TODAY)
        assert result.issues == []

    def test_huge_amount_warns(self, snapshot, make_income):
        validator = TransactionValidator(snapshot, EngineSettings(max_transaction_amount=1000))
        result = validator.validate(make_income(amount="5000"), today=TODAY)
        assert result.issues[0].issue_type == "suspicious_value"

    def test_semantic_skipped_after_reference_errors(self, validator, make_income):
        income = make_income(currency="CHF", source_id=uuid4())
        result = validator.validate(income, today=TODAY)
        assert [issue.issue_type for issue in result.issues] == ["unknown_reference"]


class TestCategoryNames:
    """Category name checks."""

    def test_blank_name(self, validator):
        result = validator.validate_category_name("   ")
        assert result.has_errors
        assert result.issues[0].issue_type == "missing"

    def test_duplicate_name(self, validator):
        result = validator.validate_category_name("FOOD")
        assert result.issues[0].issue_type == "duplicate"

    def test_new_name(self, validator):
        assert validator.validate_category_name("Travel").is_valid


class TestUserFriendlySummary:
    """Plain-language summaries."""

    def test_all_passed(self, snapshot, validator, make_expense):
        result = validator.validate(make_expense(category=snapshot.categories[0]), today=TODAY)
        assert validator.get_user_friendly_summary(result) == "All checks passed."

    def test_errors_listed(self, validator, make_income):
        result = validator.validate(make_income(source_id=uuid4()), today=TODAY)
        summary = validator.get_user_friendly_summary(result)
        assert "can't be saved" in summary
        assert "Income source" in summary

    def test_warnings_listed(self, validator, make_expense):
        result = validator.validate(make_expense(amount=Decimal("5")), today=TODAY)
        summary = validator.get_user_friendly_summary(result)
        assert "Please double-check" in summary
        assert "no category" in summary


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
