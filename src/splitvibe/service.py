"""Service layer that composes splitting, balances and simplification.

This module plays the part of the request-handling layer: it validates
requests against the group roster, builds ledger records, filters out
soft-deleted rows and enforces the settlement deletion window. Storage stays
with the caller; every method takes and returns plain records.
"""

import logging
from collections.abc import Sequence
from datetime import UTC, date, datetime, timedelta
from decimal import Decimal

from .balances import balance_entries, calculate_balances
from .config import Settings
from .exceptions import (
    DeletionWindowExpiredError,
    InvalidAmountError,
    InvalidSettlementError,
    SettlementNotFoundError,
)
from .models import (
    ExpenseRecord,
    ExpenseRequest,
    GroupBalances,
    Participant,
    PayerLine,
    SettlementRecord,
)
from .money import from_cents, to_cents
from .simplifier import simplify_debts
from .splitter import split_expense

logger = logging.getLogger(__name__)

MAX_NOTES_LENGTH = 500


class LedgerService:
    """Service for recording expenses and settlements and reporting balances."""

    def __init__(self, settings: Settings):
        """Initialize the ledger service."""
        self.settings = settings

    @property
    def deletion_window(self) -> timedelta:
        """How long after creation a settlement may still be deleted."""
        return timedelta(hours=self.settings.settlement_deletion_window_hours)

    def create_expense(
        self,
        request: ExpenseRequest,
        members: Sequence[Participant],
        expense_id: str | None = None,
    ) -> ExpenseRecord:
        """
        Build an expense record from a request, splitting it among participants.

        The payer is recorded as having paid the full amount.

        Args:
            request: The validated expense request
            members: Current group roster
            expense_id: Optional id assigned by the caller's storage

        Returns:
            Expense record with payer and split lines, ready to persist
        """
        splits = split_expense(
            request, members, tolerance=self.settings.percentage_tolerance
        )
        amount = from_cents(to_cents(request.amount))

        expense = ExpenseRecord(
            id=expense_id,
            title=request.title,
            amount=amount,
            currency=self.settings.currency,
            split_mode=request.split_mode,
            expense_date=request.expense_date,
            payers=[PayerLine(user_id=request.paid_by, amount=amount)],
            splits=splits,
        )

        logger.info(
            f"Created expense '{request.title}' for {amount} {self.settings.currency} "
            f"with {len(splits)} split line(s)"
        )

        return expense

    def create_settlement(
        self,
        payer_id: str,
        payee_id: str,
        amount: Decimal,
        members: Sequence[Participant],
        settlement_date: date | None = None,
        notes: str | None = None,
        settlement_id: str | None = None,
        now: datetime | None = None,
    ) -> SettlementRecord:
        """
        Build a settlement record: ``payer_id`` paid ``amount`` to ``payee_id``.

        Raises:
            InvalidSettlementError: If the parties are the same, not group
                members, or the notes are too long
            InvalidAmountError: If the amount is not positive
        """
        if payer_id == payee_id:
            raise InvalidSettlementError("Payer and payee must be different")

        member_ids = {member.id for member in members}
        for user_id in (payer_id, payee_id):
            if user_id not in member_ids:
                raise InvalidSettlementError(f"User {user_id} is not a group member")

        cents = to_cents(amount)
        if cents <= 0:
            raise InvalidAmountError(amount)

        if notes is not None and len(notes) > MAX_NOTES_LENGTH:
            raise InvalidSettlementError(
                f"Notes cannot exceed {MAX_NOTES_LENGTH} characters"
            )

        created_at = now or datetime.now(UTC)
        settlement = SettlementRecord(
            id=settlement_id,
            payer_id=payer_id,
            payee_id=payee_id,
            amount=from_cents(cents),
            currency=self.settings.currency,
            settlement_date=settlement_date or created_at.date(),
            notes=notes,
            created_at=created_at,
        )

        logger.info(
            f"Recorded settlement of {settlement.amount} {settlement.currency} "
            f"from {payer_id} to {payee_id}"
        )

        return settlement

    def can_delete_settlement(
        self, settlement: SettlementRecord, now: datetime | None = None
    ) -> bool:
        """
        Check whether a settlement is still inside its deletion window.

        Settlements without a creation timestamp are never deletable.
        """
        if settlement.is_deleted or settlement.created_at is None:
            return False

        if now is None:
            now = _now_like(settlement.created_at)
        else:
            now = _align(now, settlement.created_at)
        return now - settlement.created_at <= self.deletion_window

    def delete_settlement(
        self, settlement: SettlementRecord, now: datetime | None = None
    ) -> SettlementRecord:
        """
        Soft-delete a settlement by stamping ``deleted_at``.

        Returns:
            A copy of the settlement marked as deleted

        Raises:
            SettlementNotFoundError: If the settlement is already deleted
            DeletionWindowExpiredError: If the deletion window has passed
        """
        if settlement.is_deleted:
            raise SettlementNotFoundError(
                f"Settlement {settlement.id or '(unsaved)'} not found"
            )

        if now is None:
            now = _now_like(settlement.created_at or datetime.now(UTC))

        if not self.can_delete_settlement(settlement, now=now):
            logger.warning(f"Refused to delete settlement {settlement.id}: too old")
            raise DeletionWindowExpiredError(
                settlement.id, self.settings.settlement_deletion_window_hours
            )

        logger.info(f"Soft-deleted settlement {settlement.id}")
        return settlement.model_copy(update={"deleted_at": now})

    def group_balances(
        self,
        expenses: Sequence[ExpenseRecord],
        settlements: Sequence[SettlementRecord],
    ) -> GroupBalances:
        """
        Compute net balances and suggested transfers for a ledger snapshot.

        Soft-deleted expenses and settlements are ignored. The caller must pass
        a consistent snapshot; no locking happens here.
        """
        active_expenses = [e for e in expenses if not e.is_deleted]
        active_settlements = [s for s in settlements if not s.is_deleted]

        foreign = {
            record.currency
            for record in [*active_expenses, *active_settlements]
            if record.currency != self.settings.currency
        }
        if foreign:
            logger.warning(
                f"Records in {', '.join(sorted(foreign))} are summed as "
                f"{self.settings.currency}; no currency conversion is applied"
            )

        balances = calculate_balances(active_expenses, active_settlements)
        debts = simplify_debts(balances, epsilon=self.settings.settled_epsilon)

        logger.info(
            f"Balances for {len(balances)} user(s) from {len(active_expenses)} "
            f"expense(s) and {len(active_settlements)} settlement(s): "
            f"{len(debts)} suggested transfer(s)"
        )

        return GroupBalances(
            balances=balance_entries(balances),
            simplified_debts=debts,
        )


def _now_like(reference: datetime) -> datetime:
    """Current time, naive or aware to match ``reference``."""
    if reference.tzinfo is None:
        return datetime.now()
    return datetime.now(UTC)


def _align(moment: datetime, reference: datetime) -> datetime:
    """Express ``moment`` naive or aware to match ``reference``.

    Naive timestamps are read as local time.
    """
    if reference.tzinfo is None and moment.tzinfo is not None:
        return moment.astimezone().replace(tzinfo=None)
    if reference.tzinfo is not None and moment.tzinfo is None:
        return moment.astimezone(UTC)
    return moment
