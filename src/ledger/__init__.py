"""
Ledger Package

Split resolution and balance/settlement computation. Pure functions over an
in-memory party snapshot: no I/O, no shared state.
"""

from src.ledger.engine import (
    SETTLEMENT_EPSILON,
    compute_balances,
    evaluate,
    member_balances,
    name_settlements,
    simplify,
)
from src.ledger.splits import resolve_shares

__all__ = [
    "SETTLEMENT_EPSILON",
    "compute_balances",
    "evaluate",
    "member_balances",
    "name_settlements",
    "resolve_shares",
    "simplify",
]
