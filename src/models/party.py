"""
Core Data Models for Party Splitter

These models define the schemas for everything the ledger engine and the
storage layer exchange:
1. Party aggregate (members, tasks, expenses)
2. Split rules as a tagged variant, one case per split method
3. Derived, ephemeral ledger output (balances, settlements)
4. Validation results for caller-side input checks

DESIGN DECISION: Each split method carries only the fields meaningful to it.
An equal split has no amounts, a shares split has no percentages. The
discriminator is the persisted `splitType` tag.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Optional, Union
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# =============================================================================
# ENUMS
# =============================================================================

class SplitMethod(str, Enum):
    """
    How one expense's cost is divided among its participants.

    The values are the `splitType` tags of the persisted record.
    """
    EQUAL = "equally"
    BY_AMOUNT = "by_amount"
    BY_PERCENTAGE = "by_percentage"
    BY_SHARES = "by_shares"


# =============================================================================
# ROSTER & TASKS
# =============================================================================

class Member(BaseModel):
    """A person participating in shared expenses. Identity is the id."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(..., min_length=1, description="Opaque member identifier")
    name: str = Field(..., min_length=1, max_length=100, description="Display name")


class Task(BaseModel):
    """A to-do item attached to a party, optionally assigned to a member."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1, max_length=500)
    assigned_to: Optional[str] = Field(
        default=None,
        description="Member id of the assignee"
    )
    deadline: Optional[date] = None
    completed: bool = False


# =============================================================================
# SPLIT VARIANTS
# =============================================================================

class EqualShare(BaseModel):
    """Participant of an equal split."""
    member_id: str = Field(..., min_length=1)


class AmountShare(BaseModel):
    """Participant owing a fixed amount."""
    member_id: str = Field(..., min_length=1)
    amount: Decimal = Field(default=Decimal("0"), ge=0)


class PercentageShare(BaseModel):
    """Participant owing a percentage of the expense total."""
    member_id: str = Field(..., min_length=1)
    percentage: Decimal = Field(default=Decimal("0"), ge=0, le=100)


class SharesShare(BaseModel):
    """Participant owing a proportional number of shares."""
    member_id: str = Field(..., min_length=1)
    shares: int = Field(default=0, ge=0)


class EqualSplit(BaseModel):
    method: Literal[SplitMethod.EQUAL] = SplitMethod.EQUAL
    participants: list[EqualShare] = Field(default_factory=list)


class AmountSplit(BaseModel):
    method: Literal[SplitMethod.BY_AMOUNT] = SplitMethod.BY_AMOUNT
    participants: list[AmountShare] = Field(default_factory=list)


class PercentageSplit(BaseModel):
    method: Literal[SplitMethod.BY_PERCENTAGE] = SplitMethod.BY_PERCENTAGE
    participants: list[PercentageShare] = Field(default_factory=list)


class SharesSplit(BaseModel):
    method: Literal[SplitMethod.BY_SHARES] = SplitMethod.BY_SHARES
    participants: list[SharesShare] = Field(default_factory=list)


ExpenseSplit = Annotated[
    Union[EqualSplit, AmountSplit, PercentageSplit, SharesSplit],
    Field(discriminator="method"),
]


def build_split(
    method: SplitMethod,
    member_ids: list[str],
    values: Optional[dict[str, float]] = None,
):
    """
    Build the split variant for a method from per-member form values.

    `values` holds the amount, percentage or share count entered for each
    member; it is ignored for an equal split. Missing entries count as 0.
    """
    values = values or {}

    if method == SplitMethod.BY_AMOUNT:
        return AmountSplit(participants=[
            AmountShare(member_id=m, amount=Decimal(str(values.get(m, 0))))
            for m in member_ids
        ])
    if method == SplitMethod.BY_PERCENTAGE:
        return PercentageSplit(participants=[
            PercentageShare(member_id=m, percentage=Decimal(str(values.get(m, 0))))
            for m in member_ids
        ])
    if method == SplitMethod.BY_SHARES:
        return SharesSplit(participants=[
            SharesShare(member_id=m, shares=int(values.get(m, 0)))
            for m in member_ids
        ])
    return EqualSplit(participants=[EqualShare(member_id=m) for m in member_ids])


def split_values(split) -> dict[str, float]:
    """Per-member form values of an existing split (empty for an equal split)."""
    if isinstance(split, AmountSplit):
        return {p.member_id: float(p.amount) for p in split.participants}
    if isinstance(split, PercentageSplit):
        return {p.member_id: float(p.percentage) for p in split.participants}
    if isinstance(split, SharesSplit):
        return {p.member_id: float(p.shares) for p in split.participants}
    return {}


# =============================================================================
# EXPENSE & PARTY
# =============================================================================

class Expense(BaseModel):
    """
    One itemized expense.

    Immutable: an edit replaces the whole record. The ledger engine never
    mutates an expense.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1, max_length=200)
    amount: Decimal = Field(..., gt=0, description="Expense total")
    paid_by: str = Field(..., min_length=1, description="Member id of the payer")
    date: date
    split: ExpenseSplit = Field(default_factory=EqualSplit)

    @property
    def split_method(self) -> SplitMethod:
        return self.split.method

    @property
    def participant_ids(self) -> list[str]:
        """Participant member ids in declaration order."""
        return [p.member_id for p in self.split.participants]


class Party(BaseModel):
    """
    The shared context: roster, tasks and expenses.

    This is the aggregate the storage layer loads and saves as a whole.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    date: date
    members: list[Member] = Field(default_factory=list)
    tasks: list[Task] = Field(default_factory=list)
    expenses: list[Expense] = Field(default_factory=list)

    def member_by_id(self, member_id: str) -> Optional[Member]:
        for member in self.members:
            if member.id == member_id:
                return member
        return None

    def member_name(self, member_id: Optional[str], default: str = "Unknown") -> str:
        member = self.member_by_id(member_id) if member_id else None
        return member.name if member else default


# =============================================================================
# LEDGER OUTPUT (derived, never persisted)
# =============================================================================

class Balance(BaseModel):
    """
    Net position of one member.

    Positive: the group owes this member. Negative: this member owes the group.
    """
    member_id: str
    name: str
    amount: Decimal


class SettlementTransaction(BaseModel):
    """A single recommended payment: `from` pays `to` the amount."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    from_member_id: str = Field(..., alias="from")
    to_member_id: str = Field(..., alias="to")
    amount: Decimal = Field(..., gt=0)


class NamedSettlement(BaseModel):
    """Settlement transaction with member names resolved for display."""
    from_name: str
    to_name: str
    amount: Decimal


class LedgerSummary(BaseModel):
    """Balances and settlement plan for one evaluation of a party."""
    balances: dict[str, Decimal] = Field(default_factory=dict)
    settlements: list[SettlementTransaction] = Field(default_factory=list)

    @property
    def is_settled(self) -> bool:
        return not self.settlements


class LedgerView(BaseModel):
    """Everything the Balance Summary panel renders for one party."""
    party_id: str
    summary: LedgerSummary
    balances: list[Balance] = Field(default_factory=list)
    settlements: list[NamedSettlement] = Field(default_factory=list)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'sum_mismatch', 'unknown_member')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = None


class ValidationResult(BaseModel):
    """Outcome of validating one expense or task before it is stored."""

    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the expense or task being validated"
    )
    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @field_validator("warnings")
    @classmethod
    def dedupe_warnings(cls, v: list[str]) -> list[str]:
        return list(dict.fromkeys(v))

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def error_messages(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "error"]


def new_entity_id() -> str:
    """
    Generate an opaque, timestamp-derived identifier for a party, member,
    task or expense.

    The random suffix keeps IDs unique when two are created in the same
    millisecond.
    """
    stamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return f"{stamp}-{uuid4().hex[:6]}"
