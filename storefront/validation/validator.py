"""
Form Validation

DESIGN DECISION: Forms are checked locally before anything is sent to
the provider. A failed check blocks the action and tells the user what
to fix; nothing is ever silently corrected.

Severity:
- error: blocks submission (missing amount, not a number, negative)
- warning: shown but allowed (zero amount, date in the future)
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

from storefront.models.finance import (
    TransactionDraft,
    ValidationIssue,
    ValidationResult,
)


def parse_amount(raw: Optional[str]) -> Optional[Decimal]:
    """
    Parse a user-typed amount.

    Returns None for blanks and anything that is not a finite number.
    """
    if raw is None:
        return None
    text = str(raw).strip().replace(",", "")
    if not text:
        return None
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return value


class TransactionValidator:
    """Checks add-transaction and add-category forms."""

    def validate_transaction(
        self,
        draft: TransactionDraft,
        today: Optional[date] = None,
    ) -> ValidationResult:
        issues = []
        today = today or date.today()

        if not draft.amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
                severity="error",
            ))
        else:
            amount = parse_amount(draft.amount)
            if amount is None:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="invalid_value",
                    message=f"Amount must be a number (got '{draft.amount}')",
                    severity="error",
                ))
            elif amount < 0:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="invalid_value",
                    message="Amount cannot be negative",
                    severity="error",
                ))
            elif amount == 0:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="suspicious_value",
                    message="Amount is zero",
                    severity="warning",
                ))

        if draft.transaction_date and draft.transaction_date > today:
            issues.append(ValidationIssue(
                field="transaction_date",
                issue_type="future_date",
                message=f"Transaction date ({draft.transaction_date}) is in the future",
                severity="warning",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return ValidationResult(is_valid=is_valid, issues=issues)

    def validate_category_name(
        self,
        name: str,
        existing: list[str],
    ) -> ValidationResult:
        """Check a new category name against the user's existing ones."""
        issues = []
        cleaned = (name or "").strip()

        if not cleaned:
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="Category name is required",
                severity="error",
            ))
        elif cleaned.lower() in {n.strip().lower() for n in existing}:
            issues.append(ValidationIssue(
                field="name",
                issue_type="duplicate",
                message=f"A category named '{cleaned}' already exists",
                severity="warning",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return ValidationResult(is_valid=is_valid, issues=issues)
