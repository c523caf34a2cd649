"""
Data Models Package

This package contains all Pydantic models used in Party Splitter.
Everything the ledger engine, the storage layer and the UI exchange
conforms to these schemas.
"""

from src.models.party import (
    AmountShare,
    AmountSplit,
    Balance,
    EqualShare,
    EqualSplit,
    Expense,
    ExpenseSplit,
    LedgerSummary,
    LedgerView,
    Member,
    NamedSettlement,
    Party,
    PercentageShare,
    PercentageSplit,
    SettlementTransaction,
    SharesShare,
    SharesSplit,
    SplitMethod,
    Task,
    ValidationIssue,
    ValidationResult,
    build_split,
    new_entity_id,
    split_values,
)

__all__ = [
    # Party aggregate
    "Expense",
    "Member",
    "Party",
    "Task",
    # Split variants
    "AmountShare",
    "AmountSplit",
    "EqualShare",
    "EqualSplit",
    "ExpenseSplit",
    "PercentageShare",
    "PercentageSplit",
    "SharesShare",
    "SharesSplit",
    "SplitMethod",
    "build_split",
    "split_values",
    # Ledger output
    "Balance",
    "LedgerSummary",
    "LedgerView",
    "NamedSettlement",
    "SettlementTransaction",
    # Validation
    "ValidationIssue",
    "ValidationResult",
    # Identifiers
    "new_entity_id",
]
