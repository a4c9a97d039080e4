"""
Two-Stage Transaction Validation

STAGE 1 - REFERENCE VALIDATION:
- Referenced category, source and project exist
- Expenses carry a category

STAGE 2 - SEMANTIC VALIDATION:
- Currency has a known exchange rate
- Future date detection
- Absurd amount detection

Structural rules (positive amount, type-specific fields, currency code
format) are already enforced by the Transaction model itself.

IMPORTANT: Validation NEVER silently fixes issues.
It reports them and the orchestrator decides whether to proceed.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from fintrack.config import EngineSettings, get_settings
from fintrack.engine.currency import SUPPORTED_CURRENCIES, is_supported
from fintrack.models.finance import (
    FinanceSnapshot,
    Transaction,
    TransactionType,
)
from fintrack.models.results import ValidationIssue, ValidationResult


class TransactionValidator:
    """
    Validates transactions and category names against a snapshot.

    Stage 2 only runs when stage 1 found no errors.
    """

    def __init__(
        self,
        snapshot: FinanceSnapshot,
        settings: Optional[EngineSettings] = None,
    ):
        self._snapshot = snapshot
        self._settings = settings or get_settings().engine

    def _validate_references(
        self,
        transaction: Transaction,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: every referenced entity exists.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        if transaction.category_id is not None:
            if transaction.category_id not in self._snapshot.category_ids:
                issues.append(ValidationIssue(
                    field="category_id",
                    issue_type="unknown_reference",
                    message=f"Category {transaction.category_id} does not exist",
                    severity="error",
                    suggested_fix="Pick an existing category or create it first",
                ))
        elif transaction.type == TransactionType.EXPENSE:
            issues.append(ValidationIssue(
                field="category_id",
                issue_type="missing",
                message="Expense has no category",
                severity="warning",
                suggested_fix="Uncategorized expenses are left out of the category breakdown",
            ))

        if transaction.source_id is not None:
            known_sources = {source.id for source in self._snapshot.sources}
            if transaction.source_id not in known_sources:
                issues.append(ValidationIssue(
                    field="source_id",
                    issue_type="unknown_reference",
                    message=f"Income source {transaction.source_id} does not exist",
                    severity="error",
                ))

        if transaction.project_id is not None:
            if self._snapshot.project_by_id(transaction.project_id) is None:
                issues.append(ValidationIssue(
                    field="project_id",
                    issue_type="unknown_reference",
                    message=f"Project {transaction.project_id} does not exist",
                    severity="error",
                ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def _validate_semantic(
        self,
        transaction: Transaction,
        today: date,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: values that are legal but suspicious.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        if not is_supported(transaction.currency):
            issues.append(ValidationIssue(
                field="currency",
                issue_type="unsupported_currency",
                message=(
                    f"No exchange rate for {transaction.currency}; "
                    "it will be converted at parity with USD"
                ),
                severity="warning",
                suggested_fix=f"Use one of {', '.join(SUPPORTED_CURRENCIES)}",
            ))

        max_future_date = today + timedelta(days=self._settings.future_date_tolerance_days)
        if transaction.transaction_date > max_future_date:
            issues.append(ValidationIssue(
                field="transaction_date",
                issue_type="future_date",
                message=f"Date ({transaction.transaction_date}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))

        max_amount = Decimal(str(self._settings.max_transaction_amount))
        if transaction.amount > max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({transaction.amount:,.2f} {transaction.currency}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def validate(
        self,
        transaction: Transaction,
        today: Optional[date] = None,
    ) -> ValidationResult:
        """
        Run the full two-stage pipeline.

        Args:
            transaction: The transaction about to be saved
            today: Reference date for the future-date check

        Returns:
            ValidationResult with all issues found
        """
        today = today or date.today()
        all_issues = []

        references_valid, reference_issues = self._validate_references(transaction)
        all_issues.extend(reference_issues)

        semantic_valid = False
        if references_valid:
            semantic_valid, semantic_issues = self._validate_semantic(transaction, today)
            all_issues.extend(semantic_issues)

        return ValidationResult(
            references_valid=references_valid,
            semantic_valid=semantic_valid,
            is_valid=references_valid and semantic_valid,
            issues=all_issues,
            warnings=[issue.message for issue in all_issues if issue.severity == "warning"],
        )

    def validate_category_name(self, name: str) -> ValidationResult:
        """Category names must be non-blank and unique (case-insensitive)."""
        issues = []

        if not name or not name.strip():
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="Category name is required",
                severity="error",
            ))
        elif self._snapshot.category_by_name(name) is not None:
            issues.append(ValidationIssue(
                field="name",
                issue_type="duplicate",
                message=f"A category named '{name.strip()}' already exists",
                severity="error",
                suggested_fix="Use the existing category or choose another name",
            ))

        is_valid = not issues
        return ValidationResult(
            references_valid=is_valid,
            semantic_valid=is_valid,
            is_valid=is_valid,
            issues=issues,
        )

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """Plain-language summary of a validation result."""
        if result.is_valid and not result.warnings:
            return "All checks passed."

        lines = []

        if result.has_errors:
            lines.append("This can't be saved yet:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("Please double-check:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
