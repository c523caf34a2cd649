"""
Party Splitter - Source Package

Shared-expense groups ("parties"): rosters, tasks and itemized expenses,
with a ledger that works out who owes whom.

DESIGN PRINCIPLES:
1. The ledger is a pure function of the party snapshot
2. Bad input is rejected before it is stored, not patched by the ledger
3. No silent corrections
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Party Splitter Team"
