"""Balance engine: fold expenses and settlements into net positions.

Positive balance = others owe this user. Negative = this user owes others.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable, Mapping
from decimal import Decimal

from .models import BalanceEntry, ExpenseRecord, SettlementRecord
from .money import from_cents, to_cents

logger = logging.getLogger(__name__)


def calculate_balances(
    expenses: Iterable[ExpenseRecord],
    settlements: Iterable[SettlementRecord],
) -> dict[str, Decimal]:
    """
    Calculate the net balance for each user.

    For each expense:
      - Payers get +amount (they paid)
      - Split participants get -amount (they owe)

    For each settlement:
      - Payer gets +amount (reduces what they owe)
      - Payee gets -amount (reduces what they're owed)

    Amounts are accumulated as integer cents, so the result does not depend on
    the order of the records. Users who appear in no record are left out.

    Args:
        expenses: Non-deleted expense records
        settlements: Non-deleted settlement records

    Returns:
        Mapping of user id -> net balance, ordered by user id
    """
    cents: defaultdict[str, int] = defaultdict(int)
    expense_count = 0
    settlement_count = 0

    for expense in expenses:
        for payer in expense.payers:
            cents[payer.user_id] += to_cents(payer.amount)
        for split in expense.splits:
            cents[split.user_id] -= to_cents(split.amount)
        expense_count += 1

    for settlement in settlements:
        amount = to_cents(settlement.amount)
        cents[settlement.payer_id] += amount
        cents[settlement.payee_id] -= amount
        settlement_count += 1

    net = sum(cents.values())
    if net != 0:
        # Expenses whose payers and splits disagree leave the ledger open
        logger.warning(f"Ledger does not net to zero: off by {from_cents(net)}")

    logger.debug(
        f"Computed balances for {len(cents)} user(s) from {expense_count} "
        f"expense(s) and {settlement_count} settlement(s)"
    )

    return {user_id: from_cents(cents[user_id]) for user_id in sorted(cents)}


def balance_entries(balances: Mapping[str, Decimal]) -> list[BalanceEntry]:
    """Flatten a balance mapping into entries ordered by user id."""
    return [
        BalanceEntry(user_id=user_id, amount=balances[user_id])
        for user_id in sorted(balances)
    ]
