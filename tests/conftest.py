"""
Shared fixtures for Party Splitter tests.

No test touches Google Sheets; the Sheets backend is exercised through an
in-memory worksheet.
"""

import pytest

from src.config import AppSettings
from src.models.party import Member
from src.validation import ExpenseValidator


@pytest.fixture
def members() -> list[Member]:
    return [
        Member(id="alice", name="Alice"),
        Member(id="bob", name="Bob"),
        Member(id="carol", name="Carol"),
    ]


@pytest.fixture
def validator() -> ExpenseValidator:
    return ExpenseValidator(AppSettings(currency_symbol="₹", max_expense_amount=1000000.0))
