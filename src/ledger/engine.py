"""
Ledger Engine

Computes where every member of a party stands and how the party settles up.

Two stages, both pure:
1. Balance aggregation: all expenses -> one signed net amount per member
2. Debt simplification: greedy first-debtor / first-creditor matching

DESIGN DECISION: Nothing is cached. Every call rebuilds balances and the
settlement plan from the snapshot it is given, so the engine can be called
again after any edit without carrying state over.

The settlement plan is deterministic (member declaration order) but is NOT
guaranteed to use the minimum number of transactions.
"""

from collections import deque
from decimal import Decimal
from typing import Iterable, Mapping, Sequence

from src.ledger.splits import ZERO, resolve_shares
from src.log import get_logger
from src.models.party import (
    Balance,
    Expense,
    LedgerSummary,
    Member,
    NamedSettlement,
    SettlementTransaction,
)


# Amounts within one cent of zero are treated as settled
SETTLEMENT_EPSILON = Decimal("0.01")

UNKNOWN_MEMBER_NAME = "Unknown"

logger = get_logger(__name__)


def compute_balances(
    members: Sequence[Member],
    expenses: Iterable[Expense],
) -> dict[str, Decimal]:
    """
    Aggregate all expenses into one net balance per member.

    Every rostered member appears, in roster order, even with no activity.
    Ids referenced by an expense but missing from the roster (e.g. a member
    removed after the expense was recorded) are added at zero instead of
    failing. Sums are exact; rounding is left to display.
    """
    balances: dict[str, Decimal] = {member.id: ZERO for member in members}

    for expense in expenses:
        balances[expense.paid_by] = balances.get(expense.paid_by, ZERO) + expense.amount
        for member_id, share in resolve_shares(expense).items():
            balances[member_id] = balances.get(member_id, ZERO) - share

    return balances


def simplify(balances: Mapping[str, Decimal]) -> list[SettlementTransaction]:
    """
    Reduce net balances to a list of point-to-point payments.

    Debtors and creditors are queued in balance-map order. The head debtor
    pays the head creditor the smaller of the two outstanding amounts; a head
    leaves its queue once less than one cent remains. Stops when either
    queue runs out.

    Returns transactions in the order they were emitted.
    """
    # [member_id, remaining magnitude]
    debtors = deque(
        [member_id, -amount]
        for member_id, amount in balances.items()
        if amount < -SETTLEMENT_EPSILON
    )
    creditors = deque(
        [member_id, amount]
        for member_id, amount in balances.items()
        if amount > SETTLEMENT_EPSILON
    )

    transactions: list[SettlementTransaction] = []

    while debtors and creditors:
        debtor = debtors[0]
        creditor = creditors[0]

        transfer = min(debtor[1], creditor[1])
        transactions.append(
            SettlementTransaction(
                from_member_id=debtor[0],
                to_member_id=creditor[0],
                amount=transfer,
            )
        )

        debtor[1] -= transfer
        creditor[1] -= transfer

        if debtor[1] < SETTLEMENT_EPSILON:
            debtors.popleft()
        if creditor[1] < SETTLEMENT_EPSILON:
            creditors.popleft()

    return transactions


def member_balances(
    members: Sequence[Member],
    expenses: Iterable[Expense],
) -> list[Balance]:
    """
    Per-member totals view, highest balance first.

    Built on compute_balances so the totals always agree with the
    settlement plan, whatever the split methods.
    """
    names = {member.id: member.name for member in members}
    balances = compute_balances(members, expenses)

    rows = [
        Balance(
            member_id=member_id,
            name=names.get(member_id, UNKNOWN_MEMBER_NAME),
            amount=amount,
        )
        for member_id, amount in balances.items()
    ]
    rows.sort(key=lambda b: b.amount, reverse=True)
    return rows


def name_settlements(
    transactions: Iterable[SettlementTransaction],
    members: Sequence[Member],
) -> list[NamedSettlement]:
    """Resolve member ids to display names ("Unknown" for removed members)."""
    names = {member.id: member.name for member in members}
    return [
        NamedSettlement(
            from_name=names.get(t.from_member_id, UNKNOWN_MEMBER_NAME),
            to_name=names.get(t.to_member_id, UNKNOWN_MEMBER_NAME),
            amount=t.amount,
        )
        for t in transactions
    ]


def evaluate(
    members: Sequence[Member],
    expenses: Sequence[Expense],
) -> LedgerSummary:
    """Compute balances and the settlement plan for one party snapshot."""
    balances = compute_balances(members, expenses)
    settlements = simplify(balances)

    logger.debug(
        "ledger_evaluated",
        member_count=len(members),
        expense_count=len(expenses),
        balance_count=len(balances),
        settlement_count=len(settlements),
    )

    return LedgerSummary(balances=balances, settlements=settlements)
