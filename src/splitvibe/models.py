"""Pydantic domain models for SplitVibe."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

# ============================================================================
# Group Models
# ============================================================================


class Participant(BaseModel):
    """A group member as seen by the split calculator."""

    id: str = Field(min_length=1)
    name: str | None = None
    email: str | None = None

    @property
    def display_name(self) -> str:
        """Name, falling back to email, then to the id."""
        return self.name or self.email or self.id

    @property
    def sort_key(self) -> tuple[str, str]:
        """Case-insensitive display name, ties broken by id."""
        return (self.display_name.casefold(), self.id)


class SplitMode(str, Enum):
    """How an expense total is allocated among participants."""

    EQUAL = "EQUAL"
    PERCENTAGE = "PERCENTAGE"
    SHARES = "SHARES"


# ============================================================================
# Ledger Models
# ============================================================================


class SplitLine(BaseModel):
    """One participant's share of an expense."""

    user_id: str
    amount: Decimal = Field(decimal_places=2)


class PayerLine(BaseModel):
    """One payer's contribution to an expense."""

    user_id: str
    amount: Decimal = Field(decimal_places=2)


class ExpenseRecord(BaseModel):
    """A stored expense: who paid, and who owes what.

    Only ``payers`` and ``splits`` feed the balance engine. The remaining
    fields are carried for display and soft-delete filtering.
    """

    id: str | None = None
    title: str | None = None
    amount: Decimal | None = Field(default=None, decimal_places=2)
    currency: str = "USD"
    split_mode: SplitMode = SplitMode.EQUAL
    expense_date: date | None = None
    payers: list[PayerLine] = Field(min_length=1)
    splits: list[SplitLine] = Field(min_length=1)
    deleted_at: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        """Whether the expense has been soft-deleted."""
        return self.deleted_at is not None


class SettlementRecord(BaseModel):
    """A direct payment from payer to payee that reduces a debt."""

    id: str | None = None
    payer_id: str = Field(min_length=1)
    payee_id: str = Field(min_length=1)
    amount: Decimal = Field(gt=0, decimal_places=2)
    currency: str = "USD"
    settlement_date: date | None = None
    notes: str | None = Field(default=None, max_length=500)
    created_at: datetime | None = None
    deleted_at: datetime | None = None

    @model_validator(mode="after")
    def _check_distinct_parties(self) -> "SettlementRecord":
        if self.payer_id == self.payee_id:
            raise ValueError("Payer and payee must be different")
        return self

    @property
    def is_deleted(self) -> bool:
        """Whether the settlement has been soft-deleted."""
        return self.deleted_at is not None


# ============================================================================
# Request Models
# ============================================================================


class ExpenseRequest(BaseModel):
    """An expense as submitted by a group member, before splitting."""

    title: str = Field(min_length=1, max_length=200)
    amount: Decimal = Field(gt=0)
    paid_by: str = Field(min_length=1)
    split_among: list[str] = Field(min_length=1)
    split_mode: SplitMode = SplitMode.EQUAL
    percentages: dict[str, Decimal] | None = None
    shares: dict[str, int] | None = None
    expense_date: date = Field(default_factory=date.today)


# ============================================================================
# Result Models
# ============================================================================


class BalanceEntry(BaseModel):
    """A participant's net position. Positive means others owe them."""

    user_id: str
    amount: Decimal


class SimplifiedDebt(BaseModel):
    """A suggested transfer: ``from_user_id`` pays ``to_user_id``."""

    model_config = ConfigDict(populate_by_name=True)

    from_user_id: str = Field(alias="from")
    to_user_id: str = Field(alias="to")
    amount: Decimal = Field(gt=0)


class GroupBalances(BaseModel):
    """Net balances for a group plus the transfers that settle them."""

    balances: list[BalanceEntry] = Field(default_factory=list)
    simplified_debts: list[SimplifiedDebt] = Field(default_factory=list)


class LedgerSnapshot(BaseModel):
    """A consistent read of one group's ledger."""

    currency: str = "USD"
    members: list[Participant] = Field(default_factory=list)
    expenses: list[ExpenseRecord] = Field(default_factory=list)
    settlements: list[SettlementRecord] = Field(default_factory=list)

    def member_map(self) -> dict[str, Participant]:
        """Members keyed by id."""
        return {member.id: member for member in self.members}
