"""
Tests for the ledger engine

Balances must always sum to zero, and applying the settlement plan must
leave every member within one cent of zero.
"""

from decimal import Decimal

from src.ledger import (
    SETTLEMENT_EPSILON,
    compute_balances,
    evaluate,
    member_balances,
    name_settlements,
    simplify,
)
from src.models.party import Member, SplitMethod

from tests.factories import make_expense


def apply_settlements(balances, settlements):
    after = dict(balances)
    for tx in settlements:
        after[tx.from_member_id] += tx.amount
        after[tx.to_member_id] -= tx.amount
    return after


class TestComputeBalances:
    """Expenses -> one net balance per member."""

    def test_equal_split_two_members(self, members):
        """Alice pays 100 split with Bob."""
        expense = make_expense(100, "alice", ["alice", "bob"])
        balances = compute_balances(members[:2], [expense])
        assert balances == {"alice": Decimal("50"), "bob": Decimal("-50")}

    def test_by_shares(self, members):
        """Alice pays 90 split 1:2:3."""
        expense = make_expense(
            90, "alice", ["alice", "bob", "carol"],
            method=SplitMethod.BY_SHARES, values={"alice": 1, "bob": 2, "carol": 3},
        )
        assert compute_balances(members, [expense]) == {
            "alice": Decimal("75"),
            "bob": Decimal("-30"),
            "carol": Decimal("-45"),
        }

    def test_uniform_percentages_match_equal_split(self, members):
        """Uniform percentages give the same balances as an equal split."""
        equal = make_expense(80, "bob", ["alice", "bob"])
        by_pct = make_expense(
            80, "bob", ["alice", "bob"],
            method=SplitMethod.BY_PERCENTAGE, values={"alice": 50, "bob": 50},
        )
        assert compute_balances(members, [equal]) == compute_balances(members, [by_pct])

    def test_zero_total_shares_credits_payer_only(self, members):
        """Nobody owes anything, but the payer is still credited."""
        expense = make_expense(
            60, "alice", ["alice", "bob"],
            method=SplitMethod.BY_SHARES, values={"alice": 0, "bob": 0},
        )
        balances = compute_balances(members, [expense])
        assert balances["alice"] == Decimal("60")
        assert balances["bob"] == Decimal("0")

    def test_removed_member_still_has_balance(self, members):
        """A member dropped from the roster keeps their history."""
        expense = make_expense(100, "dave", ["alice", "dave"])
        balances = compute_balances(members, [expense])
        assert balances["dave"] == Decimal("50")
        assert balances["alice"] == Decimal("-50")

    def test_every_member_appears_in_roster_order(self, members):
        """Members without activity are listed at zero."""
        expense = make_expense(30, "carol", ["carol"])
        balances = compute_balances(members, [expense])
        assert list(balances) == ["alice", "bob", "carol"]
        assert balances["alice"] == Decimal("0")

    def test_empty_inputs(self, members):
        """No expenses -> everyone at zero. No members -> empty map."""
        assert compute_balances(members, []) == {m.id: Decimal("0") for m in members}
        assert compute_balances([], []) == {}

    def test_balances_sum_to_zero(self, members):
        """Conservation across mixed split methods."""
        expenses = [
            make_expense(100, "alice", ["alice", "bob", "carol"], expense_id="e1"),
            make_expense(
                45.5, "bob", ["alice", "carol"],
                method=SplitMethod.BY_AMOUNT, values={"alice": 20.25, "carol": 25.25},
                expense_id="e2",
            ),
            make_expense(
                70, "carol", ["alice", "bob", "carol"],
                method=SplitMethod.BY_SHARES, values={"alice": 1, "bob": 1, "carol": 5},
                expense_id="e3",
            ),
        ]
        total = sum(compute_balances(members, expenses).values())
        assert abs(total) < SETTLEMENT_EPSILON


class TestSimplify:
    """Balances -> settlement transactions."""

    def test_single_debt(self):
        """Bob pays Alice 50."""
        txs = simplify({"alice": Decimal("50"), "bob": Decimal("-50")})
        assert len(txs) == 1
        assert txs[0].from_member_id == "bob"
        assert txs[0].to_member_id == "alice"
        assert txs[0].amount == Decimal("50")

    def test_greedy_order(self):
        """Debtors are paired with the head creditor in balance order."""
        txs = simplify({
            "alice": Decimal("75"),
            "bob": Decimal("-30"),
            "carol": Decimal("-45"),
        })
        assert [(t.from_member_id, t.to_member_id, t.amount) for t in txs] == [
            ("bob", "alice", Decimal("30")),
            ("carol", "alice", Decimal("45")),
        ]

    def test_debtor_split_across_creditors(self):
        """One debtor can pay several creditors."""
        txs = simplify({
            "alice": Decimal("20"),
            "bob": Decimal("10"),
            "carol": Decimal("-30"),
        })
        assert [(t.from_member_id, t.to_member_id, t.amount) for t in txs] == [
            ("carol", "alice", Decimal("20")),
            ("carol", "bob", Decimal("10")),
        ]

    def test_sub_cent_balances_are_settled(self):
        """Balances within one cent of zero produce nothing."""
        assert simplify({"alice": Decimal("0.005"), "bob": Decimal("-0.005")}) == []
        assert simplify({}) == []

    def test_removed_member_can_settle(self, members):
        """An id missing from the roster still takes part."""
        expense = make_expense(100, "dave", ["alice", "dave"])
        txs = simplify(compute_balances(members, [expense]))
        assert [(t.from_member_id, t.to_member_id) for t in txs] == [("alice", "dave")]

    def test_settlements_zero_out_balances(self, members):
        """Applying the plan leaves everyone within one cent of zero."""
        expenses = [
            make_expense(100, "alice", ["alice", "bob", "carol"], expense_id="e1"),
            make_expense(33.33, "bob", ["alice", "bob", "carol"], expense_id="e2"),
            make_expense(
                12, "carol", ["alice", "bob"],
                method=SplitMethod.BY_PERCENTAGE, values={"alice": 33.3, "bob": 66.7},
                expense_id="e3",
            ),
        ]
        balances = compute_balances(members, expenses)
        after = apply_settlements(balances, simplify(balances))
        assert all(abs(v) < SETTLEMENT_EPSILON for v in after.values())

    def test_amounts_positive_and_no_self_payments(self, members):
        """Every transaction moves money between two different members."""
        expenses = [
            make_expense(90, "alice", ["alice", "bob", "carol"], expense_id="e1"),
            make_expense(60, "bob", ["bob", "carol"], expense_id="e2"),
        ]
        for tx in simplify(compute_balances(members, expenses)):
            assert tx.amount > 0
            assert tx.from_member_id != tx.to_member_id


class TestEvaluate:
    """Full ledger evaluation."""

    def test_evaluate_is_repeatable(self, members):
        """Evaluating the same snapshot twice gives the same result."""
        expenses = [make_expense(100, "alice", ["alice", "bob"])]
        assert evaluate(members, expenses) == evaluate(members, expenses)

    def test_evaluate_settled_party(self, members):
        """A party with no expenses is settled."""
        summary = evaluate(members, [])
        assert summary.is_settled
        assert set(summary.balances) == {"alice", "bob", "carol"}

    def test_member_balances_sorted_and_named(self, members):
        """Highest balance first; removed members show as Unknown."""
        expenses = [
            make_expense(90, "alice", ["alice", "bob", "carol"], expense_id="e1"),
            make_expense(40, "dave", ["bob", "dave"], expense_id="e2"),
        ]
        rows = member_balances(members, expenses)
        assert [r.member_id for r in rows][0] == "alice"
        assert rows[-1].member_id == "bob"
        assert {r.member_id: r.name for r in rows}["dave"] == "Unknown"

    def test_name_settlements(self, members):
        """Settlement ids resolve to display names."""
        summary = evaluate(members[:2], [make_expense(100, "alice", ["alice", "bob"])])
        named = name_settlements(summary.settlements, members)
        assert [(n.from_name, n.to_name, n.amount) for n in named] == [
            ("Bob", "Alice", Decimal("50")),
        ]

    def test_name_settlements_unknown_member(self):
        """Ids not on the roster become Unknown."""
        summary = evaluate(
            [Member(id="alice", name="Alice")],
            [make_expense(100, "alice", ["alice", "dave"])],
        )
        named = name_settlements(summary.settlements, [Member(id="alice", name="Alice")])
        assert named[0].from_name == "Unknown"
