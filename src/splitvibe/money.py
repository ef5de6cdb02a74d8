"""Fixed-point money helpers shared by the split calculator and balance engine.

Amounts cross the module boundary as ``Decimal`` with two fractional digits and
are handled internally as integer cents, so no computation ever accumulates
floating-point drift.
"""

import logging
from collections.abc import Sequence
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal

from .exceptions import RoundingError

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def to_cents(amount: Decimal | int | str) -> int:
    """
    Convert a currency amount to integer cents.
    Uses ROUND_HALF_UP, the usual rule for currency.

    Args:
        amount: Amount in currency units

    Returns:
        Amount in cents (integer)
    """
    cents = Decimal(amount) * 100
    return int(cents.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_cents(cents: int) -> Decimal:
    """Convert integer cents back to a two-place Decimal."""
    return (Decimal(cents) / 100).quantize(CENT)


def round_to_cents(amount: Decimal) -> Decimal:
    """Round a Decimal amount to the nearest cent (half-up)."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def floor_cents(raw_cents: Decimal) -> int:
    """Floor a fractional number of cents to a whole cent."""
    return int(raw_cents.to_integral_value(rounding=ROUND_FLOOR))


def distribute_remainder(
    floored: dict[str, int],
    total_cents: int,
    payer_id: str,
    ordered_ids: Sequence[str],
) -> dict[str, int]:
    """
    Adjust floored shares so they add up to the total exactly.

    Priority:
    1. If the payer is one of the participants, they absorb the whole remainder
    2. Otherwise one cent each, following ``ordered_ids`` from the start

    The remainder is normally positive. Percentages accepted within the
    tolerance can sum to slightly more than 100, so it can also be negative:
    the payer then gives back the overshoot (never going below zero), and any
    cents still left are taken one at a time from the other participants in
    ``ordered_ids`` order, skipping shares that are already zero.

    Args:
        floored: Participant id -> floored share in cents
        total_cents: The amount the shares must add up to
        payer_id: Whoever paid the expense
        ordered_ids: Participants in remainder-recipient order

    Returns:
        New mapping of participant id -> final share in cents

    Raises:
        RoundingError: If the shares cannot be brought to the total
    """
    shares = dict(floored)
    remainder = total_cents - sum(shares.values())

    if remainder == 0:
        return shares

    if remainder > 0:
        if payer_id in shares:
            shares[payer_id] += remainder
            logger.debug(f"Assigned {remainder} remainder cent(s) to payer {payer_id}")
            return shares

        for i in range(remainder):
            user_id = ordered_ids[i % len(ordered_ids)]
            shares[user_id] += 1

        logger.debug(
            f"Distributed {remainder} remainder cent(s) starting from {ordered_ids[0]}"
        )
        return shares

    overshoot = -remainder
    if total_cents < 0:
        raise RoundingError(
            f"Floored shares ({sum(shares.values())} cents) cannot be reduced "
            f"to a negative total ({total_cents} cents)"
        )

    if payer_id in shares:
        taken = min(overshoot, shares[payer_id])
        shares[payer_id] -= taken
        overshoot -= taken

    while overshoot:
        for user_id in ordered_ids:
            if overshoot and shares[user_id] > 0:
                shares[user_id] -= 1
                overshoot -= 1

    logger.warning(
        f"Floored shares exceeded total by {-remainder} cent(s); "
        f"took the overshoot back, payer {payer_id} first"
    )
    return shares
