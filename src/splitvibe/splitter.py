"""Split calculator: partition an expense total among its participants.

Every policy runs the same two phases. Each participant's ideal share is
floored to whole cents, then the cents lost to flooring are handed out by
``distribute_remainder``. The result always adds up to the total exactly.
"""

import logging
from collections.abc import Mapping, Sequence
from decimal import Decimal, InvalidOperation

from .exceptions import (
    InvalidAmountError,
    InvalidPolicyParametersError,
    ParticipantMismatchError,
    RoundingError,
)
from .models import ExpenseRequest, Participant, SplitLine, SplitMode
from .money import distribute_remainder, floor_cents, from_cents, to_cents

logger = logging.getLogger(__name__)

DEFAULT_PERCENTAGE_TOLERANCE = Decimal("0.001")
HUNDRED = Decimal("100")


def compute_split(
    total: Decimal,
    participants: Sequence[Participant],
    split_mode: SplitMode | str,
    payer_id: str,
    percentages: Mapping[str, Decimal | int | float] | None = None,
    shares: Mapping[str, int] | None = None,
    tolerance: Decimal = DEFAULT_PERCENTAGE_TOLERANCE,
) -> list[SplitLine]:
    """
    Split ``total`` among ``participants`` under one allocation policy.

    Args:
        total: Expense total in currency units (rounded half-up to cents)
        participants: Who shares the expense; ids must be unique
        split_mode: EQUAL, PERCENTAGE or SHARES
        payer_id: Whoever paid; gets the rounding remainder if they participate
        percentages: Participant id -> percent, required for PERCENTAGE
        shares: Participant id -> integer weight, required for SHARES
        tolerance: Allowed distance between the percentage sum and 100

    Returns:
        One split line per participant, ordered by display name

    Raises:
        InvalidAmountError: If the total is not positive
        InvalidPolicyParametersError: If the policy parameters are malformed
        ParticipantMismatchError: If a parameter map and the participants differ
    """
    total_cents = to_cents(total)
    if total_cents <= 0:
        raise InvalidAmountError(total)

    mode = _coerce_mode(split_mode)
    ordered = _order_participants(participants)
    ids = [p.id for p in ordered]

    if mode is SplitMode.EQUAL:
        floored = {uid: total_cents // len(ids) for uid in ids}
    elif mode is SplitMode.PERCENTAGE:
        percent_map = _validate_percentages(percentages, ids, tolerance)
        floored = {
            uid: floor_cents(Decimal(total_cents) * percent_map[uid] / HUNDRED)
            for uid in ids
        }
    else:
        weight_map = _validate_shares(shares, ids)
        total_weight = sum(weight_map.values())
        floored = {
            uid: total_cents * weight_map[uid] // total_weight for uid in ids
        }

    final = distribute_remainder(floored, total_cents, payer_id, ids)

    if sum(final.values()) != total_cents:
        raise RoundingError(
            f"Split of {total_cents} cents adds up to {sum(final.values())} cents"
        )

    logger.info(
        f"Split {from_cents(total_cents)} among {len(ids)} participant(s) "
        f"({mode.value}, paid by {payer_id})"
    )

    return [SplitLine(user_id=uid, amount=from_cents(final[uid])) for uid in ids]


def split_expense(
    request: ExpenseRequest,
    members: Sequence[Participant],
    tolerance: Decimal = DEFAULT_PERCENTAGE_TOLERANCE,
) -> list[SplitLine]:
    """
    Split an expense request among group members.

    The payer and every participant must belong to the group; members supply
    the display names used to order remainder recipients.
    """
    by_id = {member.id: member for member in members}

    if request.paid_by not in by_id:
        raise ParticipantMismatchError(
            "Payer is not a group member", [request.paid_by]
        )

    unknown = [uid for uid in request.split_among if uid not in by_id]
    if unknown:
        raise ParticipantMismatchError(
            f"User {unknown[0]} is not a group member", unknown
        )

    participants = [by_id[uid] for uid in request.split_among]

    return compute_split(
        total=request.amount,
        participants=participants,
        split_mode=request.split_mode,
        payer_id=request.paid_by,
        percentages=request.percentages,
        shares=request.shares,
        tolerance=tolerance,
    )


def _coerce_mode(split_mode: SplitMode | str) -> SplitMode:
    try:
        return SplitMode(split_mode)
    except ValueError as e:
        raise InvalidPolicyParametersError(
            f"Unknown split mode: {split_mode!r}"
        ) from e


def _order_participants(participants: Sequence[Participant]) -> list[Participant]:
    """Sort participants for remainder assignment, rejecting bad sets."""
    if not participants:
        raise InvalidPolicyParametersError("At least one participant is required")

    seen: set[str] = set()
    duplicates = []
    for participant in participants:
        if participant.id in seen:
            duplicates.append(participant.id)
        seen.add(participant.id)

    if duplicates:
        raise InvalidPolicyParametersError(
            f"Duplicate participants: {', '.join(sorted(set(duplicates)))}"
        )

    return sorted(participants, key=lambda p: p.sort_key)


def _check_coverage(kind: str, keys: set[str], ids: list[str]) -> None:
    """Require a parameter map to cover exactly the split participants."""
    missing = [uid for uid in ids if uid not in keys]
    extra = sorted(keys - set(ids))

    if missing:
        raise ParticipantMismatchError(
            f"{kind} missing for participant(s): {', '.join(missing)}", missing
        )
    if extra:
        raise ParticipantMismatchError(
            f"{kind} given for non-participant(s): {', '.join(extra)}", extra
        )


def _validate_percentages(
    percentages: Mapping[str, Decimal | int | float] | None,
    ids: list[str],
    tolerance: Decimal,
) -> dict[str, Decimal]:
    if percentages is None:
        raise InvalidPolicyParametersError(
            "Percentages are required for PERCENTAGE split mode"
        )

    _check_coverage("Percentages", set(percentages), ids)

    percent_map = {}
    for uid in ids:
        try:
            # str() keeps floats like 33.3 from expanding to binary noise
            pct = Decimal(str(percentages[uid]))
        except InvalidOperation as e:
            raise InvalidPolicyParametersError(
                f"Percentage for {uid} is not a number: {percentages[uid]!r}"
            ) from e
        if not pct.is_finite() or pct < 0 or pct > HUNDRED:
            raise InvalidPolicyParametersError(
                f"Percentage for {uid} must be between 0 and 100, got {pct}"
            )
        percent_map[uid] = pct

    total = sum(percent_map.values(), Decimal("0"))
    if abs(total - HUNDRED) > tolerance:
        raise InvalidPolicyParametersError(
            f"Percentages must sum to 100 (got {total})"
        )

    return percent_map


def _validate_shares(
    shares: Mapping[str, int] | None, ids: list[str]
) -> dict[str, int]:
    if shares is None:
        raise InvalidPolicyParametersError("Shares are required for SHARES split mode")

    _check_coverage("Shares", set(shares), ids)

    weight_map = {}
    for uid in ids:
        weight = shares[uid]
        if isinstance(weight, bool) or not isinstance(weight, int):
            raise InvalidPolicyParametersError(
                f"Share for {uid} must be a whole number, got {weight!r}"
            )
        if weight < 0:
            raise InvalidPolicyParametersError(
                f"Share for {uid} cannot be negative, got {weight}"
            )
        weight_map[uid] = weight

    if sum(weight_map.values()) <= 0:
        raise InvalidPolicyParametersError("Total shares must be positive")

    return weight_map
