"""Tests for the split resolver."""

from decimal import Decimal

from src.ledger import resolve_shares
from src.models.party import SplitMethod

from tests.factories import make_expense


class TestResolveShares:
    """One expense -> what each participant owes."""

    def test_equal_split(self):
        """Test that an equal split divides the total evenly."""
        expense = make_expense(90, "alice", ["alice", "bob", "carol"])
        assert resolve_shares(expense) == {
            "alice": Decimal("30"),
            "bob": Decimal("30"),
            "carol": Decimal("30"),
        }

    def test_equal_split_is_not_rounded(self):
        """Test that shares keep full precision."""
        shares = resolve_shares(make_expense(100, "alice", ["alice", "bob", "carol"]))
        assert abs(sum(shares.values()) - Decimal("100")) < Decimal("0.0001")
        assert shares["alice"] != Decimal("33.33")

    def test_by_amount_uses_fixed_amounts(self):
        """Test fixed amounts are taken as-is."""
        expense = make_expense(
            50, "alice", ["alice", "bob"],
            method=SplitMethod.BY_AMOUNT, values={"alice": 20, "bob": 30},
        )
        assert resolve_shares(expense) == {"alice": Decimal("20"), "bob": Decimal("30")}

    def test_by_amount_does_not_check_total(self):
        """Test that inconsistent amounts are resolved, not rejected."""
        expense = make_expense(
            50, "alice", ["alice", "bob"],
            method=SplitMethod.BY_AMOUNT, values={"alice": 10, "bob": 10},
        )
        assert sum(resolve_shares(expense).values()) == Decimal("20")

    def test_by_percentage(self):
        """Test percentages of the total."""
        expense = make_expense(
            200, "alice", ["alice", "bob"],
            method=SplitMethod.BY_PERCENTAGE, values={"alice": 25, "bob": 75},
        )
        assert resolve_shares(expense) == {"alice": Decimal("50"), "bob": Decimal("150")}

    def test_by_shares(self):
        """Test proportional shares."""
        expense = make_expense(
            90, "alice", ["alice", "bob", "carol"],
            method=SplitMethod.BY_SHARES, values={"alice": 1, "bob": 2, "carol": 3},
        )
        assert resolve_shares(expense) == {
            "alice": Decimal("15"),
            "bob": Decimal("30"),
            "carol": Decimal("45"),
        }

    def test_zero_total_shares_owes_nothing(self):
        """Test that zero shares overall produce zero for everyone."""
        expense = make_expense(
            60, "alice", ["alice", "bob"],
            method=SplitMethod.BY_SHARES, values={"alice": 0, "bob": 0},
        )
        assert resolve_shares(expense) == {"alice": Decimal("0"), "bob": Decimal("0")}

    def test_no_participants(self):
        """Test that an expense with no participants resolves to nothing."""
        assert resolve_shares(make_expense(60, "alice", [])) == {}

    def test_keeps_participant_order(self):
        """Test that the result follows declaration order."""
        shares = resolve_shares(make_expense(30, "alice", ["carol", "alice", "bob"]))
        assert list(shares) == ["carol", "alice", "bob"]
