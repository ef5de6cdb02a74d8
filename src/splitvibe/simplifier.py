"""Debt simplification using greedy largest-creditor / largest-debtor matching.

The greedy match always settles a balanced ledger completely. It is minimal for
the common one-payer topologies but not for every cyclic debt graph, and the
output shape is relied on as-is.
"""

import logging
from collections.abc import Mapping
from decimal import Decimal

from .models import SimplifiedDebt
from .money import round_to_cents

logger = logging.getLogger(__name__)

# Balances closer to zero than this are treated as settled
DEFAULT_EPSILON = Decimal("0.001")


def simplify_debts(
    balances: Mapping[str, Decimal | int | float],
    epsilon: Decimal = DEFAULT_EPSILON,
) -> list[SimplifiedDebt]:
    """
    Produce a short list of transfers that brings every balance to zero.

    Steps:
    1. Split users into creditors (> epsilon) and debtors (< -epsilon)
    2. Sort both by amount, largest first (ties by user id)
    3. Match the largest creditor with the largest debtor, transferring the
       smaller of the two, and move past whoever is fully settled

    Args:
        balances: User id -> net balance (positive = owed money)
        epsilon: Settled threshold, in currency units

    Returns:
        Transfers in the order they were matched; empty for an empty or
        already-settled ledger
    """
    creditors: list[list] = []
    debtors: list[list] = []

    for user_id, balance in balances.items():
        amount = _as_decimal(balance)
        if amount > epsilon:
            creditors.append([user_id, amount])
        elif amount < -epsilon:
            debtors.append([user_id, -amount])  # Store as positive

    creditors.sort(key=lambda entry: (-entry[1], entry[0]))
    debtors.sort(key=lambda entry: (-entry[1], entry[0]))

    debts: list[SimplifiedDebt] = []
    i = 0
    j = 0

    while i < len(creditors) and j < len(debtors):
        creditor_id, credit = creditors[i]
        debtor_id, debt = debtors[j]
        transfer = min(credit, debt)

        if transfer > epsilon:
            amount = round_to_cents(transfer)
            if amount > 0:
                debts.append(
                    SimplifiedDebt(
                        from_user_id=debtor_id, to_user_id=creditor_id, amount=amount
                    )
                )
            else:
                logger.debug(
                    f"Dropped sub-cent transfer {transfer} from {debtor_id} "
                    f"to {creditor_id}"
                )

        creditors[i][1] = credit - transfer
        debtors[j][1] = debt - transfer

        if creditors[i][1] < epsilon:
            i += 1
        if debtors[j][1] < epsilon:
            j += 1

    unmatched = sum((entry[1] for entry in creditors[i:]), Decimal("0")) + sum(
        (entry[1] for entry in debtors[j:]), Decimal("0")
    )
    if unmatched > epsilon:
        logger.warning(
            f"Balances do not sum to zero; {unmatched} left unmatched "
            f"after simplification"
        )

    logger.debug(
        f"Simplified {len(creditors)} creditor(s) and {len(debtors)} debtor(s) "
        f"into {len(debts)} transfer(s)"
    )

    return debts


def _as_decimal(value: Decimal | int | float) -> Decimal:
    # str() so 33.33 stays 33.33 rather than its binary expansion
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)
