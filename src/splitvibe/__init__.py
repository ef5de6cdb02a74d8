"""SplitVibe - Shared-expense splitting, balances and debt simplification."""

__version__ = "0.1.0"

from .balances import balance_entries, calculate_balances
from .config import Settings, load_settings
from .models import (
    BalanceEntry,
    ExpenseRecord,
    ExpenseRequest,
    GroupBalances,
    Participant,
    PayerLine,
    SettlementRecord,
    SimplifiedDebt,
    SplitLine,
    SplitMode,
)
from .money import from_cents, to_cents
from .service import LedgerService
from .simplifier import simplify_debts
from .splitter import compute_split, split_expense

__all__ = [
    "Settings",
    "load_settings",
    "BalanceEntry",
    "ExpenseRecord",
    "ExpenseRequest",
    "GroupBalances",
    "Participant",
    "PayerLine",
    "SettlementRecord",
    "SimplifiedDebt",
    "SplitLine",
    "SplitMode",
    "balance_entries",
    "calculate_balances",
    "compute_split",
    "split_expense",
    "simplify_debts",
    "from_cents",
    "to_cents",
    "LedgerService",
]
