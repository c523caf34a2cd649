"""Tests for expense and task input validation."""

from src.config import AppSettings
from src.models.party import SplitMethod, Task
from src.validation import ExpenseValidator

from tests.factories import make_expense


class TestStructureValidation:
    """Stage 1: roster and participants."""

    def test_valid_equal_split(self, validator, members):
        """Test a plain equal split passes."""
        result = validator.validate(make_expense(90, "alice", ["alice", "bob"]), members)
        assert result.is_valid
        assert result.issues == []

    def test_unknown_payer(self, validator, members):
        """Test that the payer must be on the roster."""
        result = validator.validate(make_expense(90, "dave", ["alice"]), members)
        assert not result.is_valid
        assert [i.issue_type for i in result.issues] == ["unknown_member"]
        assert result.issues[0].field == "paid_by"

    def test_no_participants(self, validator, members):
        """Test that at least one participant is required."""
        result = validator.validate(make_expense(90, "alice", []), members)
        assert not result.is_valid
        assert "Select at least one person to split between" in result.error_messages

    def test_duplicate_participant(self, validator, members):
        """Test that a member can't be listed twice."""
        result = validator.validate(make_expense(90, "alice", ["bob", "bob"]), members)
        assert not result.is_valid
        assert any(i.issue_type == "duplicate" for i in result.issues)

    def test_unknown_participant(self, validator, members):
        """Test that participants must be on the roster."""
        result = validator.validate(make_expense(90, "alice", ["alice", "ghost"]), members)
        assert not result.is_valid
        assert result.issues[0].suggested_fix

    def test_split_checks_skipped_when_structure_fails(self, validator, members):
        """Test that stage 2 doesn't run after a stage 1 error."""
        expense = make_expense(
            90, "dave", ["alice"],
            method=SplitMethod.BY_AMOUNT, values={"alice": 10},
        )
        result = validator.validate(expense, members)
        assert all(i.issue_type != "sum_mismatch" for i in result.issues)


class TestSplitValidation:
    """Stage 2: split consistency."""

    def test_amounts_must_match_total(self, validator, members):
        """Test a by-amount split that doesn't add up."""
        expense = make_expense(
            50, "alice", ["alice", "bob"],
            method=SplitMethod.BY_AMOUNT, values={"alice": 20, "bob": 20},
        )
        result = validator.validate(expense, members)
        assert not result.is_valid
        assert result.error_messages == [
            "Amounts must add up to ₹50.00. Current total: ₹40.00"
        ]

    def test_amounts_within_a_cent(self, validator, members):
        """Test that a one-cent difference is tolerated."""
        expense = make_expense(
            50, "alice", ["alice", "bob"],
            method=SplitMethod.BY_AMOUNT, values={"alice": 25, "bob": 24.99},
        )
        assert validator.validate(expense, members).is_valid

    def test_percentages_must_sum_to_100(self, validator, members):
        """Test a by-percentage split that doesn't add up."""
        expense = make_expense(
            50, "alice", ["alice", "bob"],
            method=SplitMethod.BY_PERCENTAGE, values={"alice": 50, "bob": 40},
        )
        result = validator.validate(expense, members)
        assert not result.is_valid
        assert result.issues[0].message.startswith("Percentages must add up to 100%")

    def test_percentages_valid(self, validator, members):
        """Test a consistent by-percentage split."""
        expense = make_expense(
            50, "alice", ["alice", "bob", "carol"],
            method=SplitMethod.BY_PERCENTAGE, values={"alice": 33.33, "bob": 33.33, "carol": 33.34},
        )
        assert validator.validate(expense, members).is_valid

    def test_zero_shares_rejected(self, validator, members):
        """Test that a shares split needs at least one share."""
        expense = make_expense(
            50, "alice", ["alice", "bob"],
            method=SplitMethod.BY_SHARES, values={"alice": 0, "bob": 0},
        )
        result = validator.validate(expense, members)
        assert not result.is_valid
        assert result.issues[0].issue_type == "no_shares"

    def test_large_amount_is_warning_only(self, members):
        """Test that a large amount warns but stays valid."""
        validator = ExpenseValidator(AppSettings(max_expense_amount=100.0))
        result = validator.validate(make_expense(500, "alice", ["alice", "bob"]), members)
        assert result.is_valid
        assert len(result.warnings) == 1
        assert not result.has_errors


class TestTaskValidation:
    """Task assignee checks."""

    def test_unassigned_task_valid(self, validator, members):
        """Test that a task needs no assignee."""
        task = Task(id="t1", description="Bring chairs")
        assert validator.validate_task(task, members).is_valid

    def test_unknown_assignee(self, validator, members):
        """Test that the assignee must be on the roster."""
        task = Task(id="t1", description="Bring chairs", assigned_to="ghost")
        result = validator.validate_task(task, members)
        assert not result.is_valid
        assert result.issues[0].field == "assigned_to"


class TestSummary:
    """User-facing summaries."""

    def test_summary_clean(self, validator, members):
        """Test the summary for a valid expense."""
        result = validator.validate(make_expense(90, "alice", ["alice"]), members)
        assert validator.get_user_friendly_summary(result) == "✅ Looks good."

    def test_summary_with_errors(self, validator, members):
        """Test that errors and fixes are listed."""
        result = validator.validate(make_expense(90, "alice", ["ghost"]), members)
        summary = validator.get_user_friendly_summary(result)
        assert summary.startswith("❌ This expense can't be saved yet:")
        assert "💡" in summary

    def test_summary_with_warnings(self, members):
        """Test that warnings get their own section."""
        validator = ExpenseValidator(AppSettings(max_expense_amount=100.0))
        result = validator.validate(make_expense(500, "alice", ["alice"]), members)
        assert "⚠️ Please verify the following:" in validator.get_user_friendly_summary(result)
