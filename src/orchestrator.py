"""
Main Orchestrator for Party Splitter

This module ties together storage, validation and the ledger, and defines
every edit a user can make to a party:
1. Parties (create, list, delete)
2. Friends (add, remove)
3. Tasks (add, edit, toggle, remove)
4. Expenses (add, edit, remove; validated first)
5. Ledger (balances and who-owes-whom, recomputed on every request)

DESIGN DECISION: Every edit loads the party, builds the edited aggregate
and saves it whole. With a single writer the last write wins; there is no
merging of concurrent edits.

Storage failures propagate unchanged (StorageError and subclasses) so the
UI can offer a retry. Nothing here catches them.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import ValidationError

from src.config import Settings, get_settings
from src.ledger import evaluate, member_balances, name_settlements
from src.log import create_correlation_id, get_logger
from src.models.party import (
    Expense,
    ExpenseSplit,
    LedgerView,
    Member,
    Party,
    Task,
    ValidationIssue,
    ValidationResult,
    new_entity_id,
)
from src.services.storage import (
    LocalJsonPartyStorage,
    NotFoundError,
    PartyStorageInterface,
    StorageError,
    create_party_storage,
)
from src.validation import ExpenseValidator


class InvalidInputError(ValueError):
    """User input was rejected by validation. Carries the full result."""

    def __init__(self, result: ValidationResult):
        self.result = result
        super().__init__("; ".join(result.error_messages) or "Invalid input")


class InvalidExpenseError(InvalidInputError):
    """An expense failed validation and was not saved."""
    pass


class InvalidTaskError(InvalidInputError):
    """A task failed validation and was not saved."""
    pass


def result_from_model_error(error: ValidationError) -> ValidationResult:
    """Report a rejected model construction the same way the validator does."""
    issues = []
    for err in error.errors():
        field = ".".join(str(part) for part in err["loc"]) or "input"
        issues.append(ValidationIssue(
            field=field,
            issue_type=err["type"],
            message=f"{field.replace('_', ' ').capitalize()}: {err['msg']}",
            severity="error",
        ))
    return ValidationResult(is_valid=False, issues=issues)


class PartyFlow:
    """
    Orchestrates party edits and ledger evaluation.

    Expenses are validated before they are stored. The ledger itself
    never validates; it trusts what this flow lets through.
    """

    def __init__(
        self,
        storage: PartyStorageInterface,
        validator: Optional[ExpenseValidator] = None,
    ):
        self._storage = storage
        self._validator = validator or ExpenseValidator()
        self._logger = get_logger(__name__)

    def _bind(self, action: str, party_id: Optional[str] = None):
        return self._logger.bind(
            action=action,
            party_id=party_id,
            correlation_id=str(create_correlation_id()),
        )

    async def _load(self, party_id: str) -> Party:
        party = await self._storage.get_party(party_id)
        if party is None:
            raise NotFoundError(f"Party not found: {party_id}")
        return party

    async def _save(self, party: Party, log) -> Party:
        saved = await self._storage.update_party(party)
        log.info("party_saved")
        return saved

    # -------------------------------------------------------------------------
    # Parties
    # -------------------------------------------------------------------------

    async def list_parties(self) -> list[Party]:
        return await self._storage.list_parties()

    async def get_party(self, party_id: str) -> Party:
        """
        Load one party.

        Raises:
            NotFoundError: If no party has this ID
        """
        return await self._load(party_id)

    async def create_party(self, name: str, party_date: date) -> Party:
        if not name or not name.strip():
            raise ValueError("Party name is required")

        party = await self._storage.create_party(name.strip(), party_date)
        self._bind("create_party", party.id).info("party_created")
        return party

    async def delete_party(self, party_id: str) -> bool:
        deleted = await self._storage.delete_party(party_id)
        self._bind("delete_party", party_id).info("party_deleted", deleted=deleted)
        return deleted

    # -------------------------------------------------------------------------
    # Friends
    # -------------------------------------------------------------------------

    async def add_member(self, party_id: str, name: str) -> Party:
        """Add a friend to the party's roster with a generated ID."""
        if not name or not name.strip():
            raise ValueError("Friend name is required")

        log = self._bind("add_member", party_id)
        party = await self._load(party_id)
        member = Member(id=new_entity_id(), name=name)

        updated = party.model_copy(update={"members": [*party.members, member]})
        log = log.bind(member_id=member.id)
        return await self._save(updated, log)

    async def remove_member(self, party_id: str, member_id: str) -> Party:
        """
        Remove a friend from the roster.

        Expenses that mention them are kept; the ledger still accounts for
        them under "Unknown".
        """
        log = self._bind("remove_member", party_id).bind(member_id=member_id)
        party = await self._load(party_id)

        if party.member_by_id(member_id) is None:
            raise NotFoundError(f"Member not found: {member_id}")

        referenced = any(
            e.paid_by == member_id or member_id in e.participant_ids
            for e in party.expenses
        )
        if referenced:
            log.warning("member_removed_with_expenses")

        members = [m for m in party.members if m.id != member_id]
        return await self._save(party.model_copy(update={"members": members}), log)

    # -------------------------------------------------------------------------
    # Tasks
    # -------------------------------------------------------------------------

    def _check_task(self, task: Task, party: Party) -> None:
        result = self._validator.validate_task(task, party.members)
        if not result.is_valid:
            raise InvalidTaskError(result)

    async def add_task(
        self,
        party_id: str,
        description: str,
        assigned_to: Optional[str] = None,
        deadline: Optional[date] = None,
    ) -> Party:
        log = self._bind("add_task", party_id)
        party = await self._load(party_id)

        try:
            task = Task(
                id=new_entity_id(),
                description=description,
                assigned_to=assigned_to or None,
                deadline=deadline,
            )
        except ValidationError as e:
            raise InvalidTaskError(result_from_model_error(e)) from e
        self._check_task(task, party)

        log = log.bind(task_id=task.id)
        return await self._save(party.model_copy(update={"tasks": [*party.tasks, task]}), log)

    async def update_task(self, party_id: str, task: Task) -> Party:
        """Replace the task with the same ID."""
        log = self._bind("update_task", party_id).bind(task_id=task.id)
        party = await self._load(party_id)

        if not any(t.id == task.id for t in party.tasks):
            raise NotFoundError(f"Task not found: {task.id}")
        self._check_task(task, party)

        tasks = [task if t.id == task.id else t for t in party.tasks]
        return await self._save(party.model_copy(update={"tasks": tasks}), log)

    async def toggle_task(self, party_id: str, task_id: str) -> Party:
        log = self._bind("toggle_task", party_id).bind(task_id=task_id)
        party = await self._load(party_id)

        tasks = []
        found = False
        for t in party.tasks:
            if t.id == task_id:
                t = t.model_copy(update={"completed": not t.completed})
                found = True
            tasks.append(t)

        if not found:
            raise NotFoundError(f"Task not found: {task_id}")

        return await self._save(party.model_copy(update={"tasks": tasks}), log)

    async def remove_task(self, party_id: str, task_id: str) -> Party:
        log = self._bind("remove_task", party_id).bind(task_id=task_id)
        party = await self._load(party_id)

        tasks = [t for t in party.tasks if t.id != task_id]
        if len(tasks) == len(party.tasks):
            raise NotFoundError(f"Task not found: {task_id}")

        return await self._save(party.model_copy(update={"tasks": tasks}), log)

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    def validate_expense(self, expense: Expense, party: Party) -> ValidationResult:
        """Run input validation without saving (for live form feedback)."""
        return self._validator.validate(expense, party.members)

    def describe_validation(self, result: ValidationResult) -> str:
        return self._validator.get_user_friendly_summary(result)

    def _check_expense(self, expense: Expense, party: Party, log) -> None:
        result = self.validate_expense(expense, party)
        if not result.is_valid:
            log.info(
                "expense_rejected",
                issues=[{"field": i.field, "type": i.issue_type} for i in result.issues],
            )
            raise InvalidExpenseError(result)

    async def add_expense(
        self,
        party_id: str,
        description: str,
        amount: Decimal,
        paid_by: str,
        expense_date: date,
        split: ExpenseSplit,
    ) -> Party:
        """
        Validate and add a new expense.

        Raises:
            InvalidExpenseError: If the split is inconsistent or refers to
                                 people who aren't in the party
            NotFoundError: If the party doesn't exist
        """
        log = self._bind("add_expense", party_id)
        party = await self._load(party_id)

        try:
            expense = Expense(
                id=new_entity_id(),
                description=description,
                amount=amount,
                paid_by=paid_by,
                date=expense_date,
                split=split,
            )
        except ValidationError as e:
            log.info("expense_rejected", issues=[err["type"] for err in e.errors()])
            raise InvalidExpenseError(result_from_model_error(e)) from e
        log = log.bind(expense_id=expense.id, split_method=expense.split_method.value)
        self._check_expense(expense, party, log)

        return await self._save(
            party.model_copy(update={"expenses": [*party.expenses, expense]}),
            log,
        )

    async def update_expense(self, party_id: str, expense: Expense) -> Party:
        """Validate and replace the expense with the same ID."""
        log = self._bind("update_expense", party_id).bind(expense_id=expense.id)
        party = await self._load(party_id)

        if not any(e.id == expense.id for e in party.expenses):
            raise NotFoundError(f"Expense not found: {expense.id}")
        self._check_expense(expense, party, log)

        expenses = [expense if e.id == expense.id else e for e in party.expenses]
        return await self._save(party.model_copy(update={"expenses": expenses}), log)

    async def remove_expense(self, party_id: str, expense_id: str) -> Party:
        log = self._bind("remove_expense", party_id).bind(expense_id=expense_id)
        party = await self._load(party_id)

        expenses = [e for e in party.expenses if e.id != expense_id]
        if len(expenses) == len(party.expenses):
            raise NotFoundError(f"Expense not found: {expense_id}")

        return await self._save(party.model_copy(update={"expenses": expenses}), log)

    # -------------------------------------------------------------------------
    # Ledger
    # -------------------------------------------------------------------------

    @staticmethod
    def ledger_for(party: Party) -> LedgerView:
        """Compute the ledger view of an already-loaded party."""
        summary = evaluate(party.members, party.expenses)
        return LedgerView(
            party_id=party.id,
            summary=summary,
            balances=member_balances(party.members, party.expenses),
            settlements=name_settlements(summary.settlements, party.members),
        )

    async def get_ledger(self, party_id: str) -> LedgerView:
        """Load a party and compute its balances and settlement plan."""
        return self.ledger_for(await self._load(party_id))


def create_app_components(settings: Optional[Settings] = None) -> PartyFlow:
    """
    Factory function to create the application's party flow.

    Falls back to local JSON storage if the configured backend can't be
    set up.
    """
    settings = settings or get_settings()
    logger = get_logger(__name__)

    try:
        storage = create_party_storage(settings)
    except StorageError as e:
        logger.warning("storage_fallback_to_local", error=str(e))
        storage = LocalJsonPartyStorage(settings.storage.local_path)

    return PartyFlow(
        storage=storage,
        validator=ExpenseValidator(settings.app),
    )
