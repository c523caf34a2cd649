"""
Split Resolver

Turns one expense into the amount each participant owes for it.

The resolver applies the split rule and nothing else. It does NOT check that
fixed amounts add up to the total or that percentages add up to 100; that is
the job of the validation layer, before an expense is ever stored.
"""

from decimal import Decimal

from src.models.party import (
    AmountSplit,
    EqualSplit,
    Expense,
    PercentageSplit,
    SharesSplit,
)


ZERO = Decimal("0")
HUNDRED = Decimal("100")


def _add(shares: dict[str, Decimal], member_id: str, amount: Decimal) -> None:
    shares[member_id] = shares.get(member_id, ZERO) + amount


def resolve_shares(expense: Expense) -> dict[str, Decimal]:
    """
    Compute each participant's owed share of an expense.

    Returns a mapping of member id to owed amount, in participant order.
    An expense with no participants resolves to an empty mapping.
    """
    split = expense.split
    shares: dict[str, Decimal] = {}

    if not split.participants:
        return shares

    if isinstance(split, EqualSplit):
        per_person = expense.amount / len(split.participants)
        for p in split.participants:
            _add(shares, p.member_id, per_person)

    elif isinstance(split, AmountSplit):
        for p in split.participants:
            _add(shares, p.member_id, p.amount)

    elif isinstance(split, PercentageSplit):
        for p in split.participants:
            _add(shares, p.member_id, expense.amount * (p.percentage / HUNDRED))

    elif isinstance(split, SharesSplit):
        total_shares = sum(p.shares for p in split.participants)
        for p in split.participants:
            if total_shares == 0:
                # Nothing to divide by: a no-op split
                _add(shares, p.member_id, ZERO)
            else:
                _add(shares, p.member_id, expense.amount * Decimal(p.shares) / Decimal(total_shares))

    else:
        raise TypeError(f"Unsupported split: {type(split).__name__}")

    return shares
