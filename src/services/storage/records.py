"""
Persisted Party Records

Converts between the Party model and the record shape every backend stores:

    {id, name, date,
     friends:  [{id, name}],
     tasks:    [{id, description, assignedTo?, deadline?, completed}],
     expenses: [{id, description, amount, paidById, date, splitType,
                 splitBetween: [{friendId, amount?, percentage?, shares?}]}]}

Each split entry only carries the field meaningful to the expense's
`splitType`; other fields found on input are ignored. Amounts are plain
JSON numbers, or decimal strings when a float would lose digits. Share
counts must be whole numbers.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

from pydantic import ValidationError

from src.models.party import (
    AmountShare,
    AmountSplit,
    EqualShare,
    EqualSplit,
    Expense,
    Member,
    Party,
    PercentageShare,
    PercentageSplit,
    SharesShare,
    SharesSplit,
    SplitMethod,
    Task,
)
from src.services.storage.interface import StorageError


def _number(value: Decimal) -> Union[int, float, str]:
    """
    Decimal -> JSON number, keeping whole amounts as integers.

    Values a float can't hold exactly are written as decimal strings.
    """
    if value == value.to_integral_value():
        return int(value)
    as_float = float(value)
    if Decimal(repr(as_float)) == value:
        return as_float
    return str(value)


def _decimal(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    return Decimal(str(value))


def _shares(value: Any) -> int:
    shares = _decimal(value)
    if shares != shares.to_integral_value():
        raise ValueError(f"Share count must be a whole number, got {value!r}")
    return int(shares)


def _optional_date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


# =============================================================================
# MODEL -> RECORD
# =============================================================================

def _split_to_record(expense: Expense) -> list[dict]:
    split = expense.split
    if isinstance(split, AmountSplit):
        return [{"friendId": p.member_id, "amount": _number(p.amount)} for p in split.participants]
    if isinstance(split, PercentageSplit):
        return [{"friendId": p.member_id, "percentage": _number(p.percentage)} for p in split.participants]
    if isinstance(split, SharesSplit):
        return [{"friendId": p.member_id, "shares": p.shares} for p in split.participants]
    return [{"friendId": p.member_id} for p in split.participants]


def expense_to_record(expense: Expense) -> dict:
    return {
        "id": expense.id,
        "description": expense.description,
        "amount": _number(expense.amount),
        "paidById": expense.paid_by,
        "date": expense.date.isoformat(),
        "splitType": expense.split_method.value,
        "splitBetween": _split_to_record(expense),
    }


def task_to_record(task: Task) -> dict:
    record = {
        "id": task.id,
        "description": task.description,
        "completed": task.completed,
    }
    if task.assigned_to:
        record["assignedTo"] = task.assigned_to
    if task.deadline:
        record["deadline"] = task.deadline.isoformat()
    return record


def party_to_record(party: Party) -> dict:
    """Convert a Party to its persisted record."""
    return {
        "id": party.id,
        "name": party.name,
        "date": party.date.isoformat(),
        "friends": [{"id": m.id, "name": m.name} for m in party.members],
        "tasks": [task_to_record(t) for t in party.tasks],
        "expenses": [expense_to_record(e) for e in party.expenses],
    }


# =============================================================================
# RECORD -> MODEL
# =============================================================================

def _split_from_record(split_type: str, entries: list[dict]):
    method = SplitMethod(split_type)

    if method == SplitMethod.BY_AMOUNT:
        return AmountSplit(participants=[
            AmountShare(member_id=e["friendId"], amount=_decimal(e.get("amount")))
            for e in entries
        ])
    if method == SplitMethod.BY_PERCENTAGE:
        return PercentageSplit(participants=[
            PercentageShare(member_id=e["friendId"], percentage=_decimal(e.get("percentage")))
            for e in entries
        ])
    if method == SplitMethod.BY_SHARES:
        return SharesSplit(participants=[
            SharesShare(member_id=e["friendId"], shares=_shares(e.get("shares")))
            for e in entries
        ])
    return EqualSplit(participants=[EqualShare(member_id=e["friendId"]) for e in entries])


def expense_from_record(record: dict) -> Expense:
    return Expense(
        id=record["id"],
        description=record["description"],
        amount=_decimal(record["amount"]),
        paid_by=record["paidById"],
        date=date.fromisoformat(record["date"]),
        split=_split_from_record(record["splitType"], record.get("splitBetween") or []),
    )


def task_from_record(record: dict) -> Task:
    return Task(
        id=record["id"],
        description=record["description"],
        assigned_to=record.get("assignedTo") or None,
        deadline=_optional_date(record.get("deadline")),
        completed=bool(record.get("completed", False)),
    )


def party_from_record(record: dict) -> Party:
    """
    Convert a persisted record to a Party.

    Raises:
        StorageError: If the record is malformed
    """
    try:
        return Party(
            id=record["id"],
            name=record["name"],
            date=date.fromisoformat(record["date"]),
            members=[Member(id=f["id"], name=f["name"]) for f in record.get("friends") or []],
            tasks=[task_from_record(t) for t in record.get("tasks") or []],
            expenses=[expense_from_record(e) for e in record.get("expenses") or []],
        )
    except (KeyError, TypeError, ValueError, InvalidOperation, ValidationError) as e:
        raise StorageError(f"Malformed party record {record.get('id', '?')!r}: {e}") from e
