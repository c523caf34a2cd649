"""
Expense & Task Input Validation

DESIGN DECISION: The ledger engine trusts its input. Inconsistent splits
(fixed amounts that don't add up to the total, percentages that don't add
up to 100) are caught HERE, before an expense is stored, never by the
engine.

Validation happens in two stages:

STAGE 1 - STRUCTURE:
- Description present
- Payer and participants are on the roster
- At least one participant, none listed twice

STAGE 2 - SPLIT CONSISTENCY:
- BY_AMOUNT amounts add up to the expense total (within one cent)
- BY_PERCENTAGE percentages add up to 100 (within one cent)
- BY_SHARES has at least one share
- Unusually large amounts (warning only)

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the form can show them.
"""

from decimal import Decimal
from typing import Optional, Sequence

from src.config import AppSettings, get_settings
from src.ledger import SETTLEMENT_EPSILON
from src.models.party import (
    AmountSplit,
    Expense,
    Member,
    PercentageSplit,
    SharesSplit,
    Task,
    ValidationIssue,
    ValidationResult,
)


class ExpenseValidator:
    """
    Validates expenses and tasks against the party roster.

    Stage 2 only runs when stage 1 passes.
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def _money(self, amount: Decimal) -> str:
        return f"{self._settings.currency_symbol}{amount:,.2f}"

    def _validate_structure(
        self,
        expense: Expense,
        members: Sequence[Member],
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: roster and participant checks.

        Returns: (is_valid, list_of_issues)
        """
        issues = []
        roster = {m.id for m in members}

        if not expense.description:
            issues.append(ValidationIssue(
                field="description",
                issue_type="missing",
                message="Description is required",
                severity="error",
            ))

        if expense.paid_by not in roster:
            issues.append(ValidationIssue(
                field="paid_by",
                issue_type="unknown_member",
                message=f"Payer '{expense.paid_by}' is not a member of this party",
                severity="error",
                suggested_fix="Choose who paid from the party's friends",
            ))

        participant_ids = expense.participant_ids
        if not participant_ids:
            issues.append(ValidationIssue(
                field="participants",
                issue_type="missing",
                message="Select at least one person to split between",
                severity="error",
            ))

        seen = set()
        for member_id in participant_ids:
            if member_id in seen:
                issues.append(ValidationIssue(
                    field="participants",
                    issue_type="duplicate",
                    message=f"Member '{member_id}' is listed more than once",
                    severity="error",
                ))
            seen.add(member_id)

            if member_id not in roster:
                issues.append(ValidationIssue(
                    field="participants",
                    issue_type="unknown_member",
                    message=f"Participant '{member_id}' is not a member of this party",
                    severity="error",
                    suggested_fix="Remove this participant or add them as a friend first",
                ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def _validate_split(
        self,
        expense: Expense,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: split consistency.

        Returns: (is_valid, list_of_issues)
        """
        issues = []
        split = expense.split

        if isinstance(split, AmountSplit):
            total = sum((p.amount for p in split.participants), Decimal("0"))
            if abs(total - expense.amount) > SETTLEMENT_EPSILON:
                issues.append(ValidationIssue(
                    field="participants",
                    issue_type="sum_mismatch",
                    message=(
                        f"Amounts must add up to {self._money(expense.amount)}. "
                        f"Current total: {self._money(total)}"
                    ),
                    severity="error",
                ))

        elif isinstance(split, PercentageSplit):
            total = sum((p.percentage for p in split.participants), Decimal("0"))
            if abs(total - Decimal("100")) > SETTLEMENT_EPSILON:
                issues.append(ValidationIssue(
                    field="participants",
                    issue_type="sum_mismatch",
                    message=f"Percentages must add up to 100%. Current total: {total:.2f}%",
                    severity="error",
                ))

        elif isinstance(split, SharesSplit):
            if sum(p.shares for p in split.participants) == 0:
                issues.append(ValidationIssue(
                    field="participants",
                    issue_type="no_shares",
                    message="Give at least one share to someone",
                    severity="error",
                ))

        max_amount = Decimal(str(self._settings.max_expense_amount))
        if expense.amount > max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({self._money(expense.amount)}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def validate(
        self,
        expense: Expense,
        members: Sequence[Member],
    ) -> ValidationResult:
        """
        Run the full validation pipeline on an expense.

        Args:
            expense: The expense about to be stored
            members: The party's current roster

        Returns:
            ValidationResult with all issues found
        """
        all_issues = []

        structure_valid, structure_issues = self._validate_structure(expense, members)
        all_issues.extend(structure_issues)

        split_valid = False
        if structure_valid:
            split_valid, split_issues = self._validate_split(expense)
            all_issues.extend(split_issues)

        return ValidationResult(
            entity_id=expense.id,
            is_valid=structure_valid and split_valid,
            issues=all_issues,
            warnings=[i.message for i in all_issues if i.severity == "warning"],
        )

    def validate_task(
        self,
        task: Task,
        members: Sequence[Member],
    ) -> ValidationResult:
        """Check that a task's assignee, if any, is on the roster."""
        issues = []

        if task.assigned_to and task.assigned_to not in {m.id for m in members}:
            issues.append(ValidationIssue(
                field="assigned_to",
                issue_type="unknown_member",
                message=f"Assignee '{task.assigned_to}' is not a member of this party",
                severity="error",
            ))

        return ValidationResult(
            entity_id=task.id,
            is_valid=not issues,
            issues=issues,
        )

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """Summary of validation results for the expense form."""
        if result.is_valid and not result.warnings:
            return "✅ Looks good."

        lines = []

        if result.has_errors:
            lines.append("❌ This expense can't be saved yet:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
