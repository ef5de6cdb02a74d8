"""Read ledger snapshots exported by the storage layer as JSON."""

import logging
from pathlib import Path

from pydantic import ValidationError

from .exceptions import LedgerFileError
from .models import LedgerSnapshot

logger = logging.getLogger(__name__)


def load_ledger(path: Path | str) -> LedgerSnapshot:
    """
    Load a ledger snapshot from a JSON file.

    Expected shape::

        {
          "currency": "USD",
          "members": [{"id": "u1", "name": "Alice", "email": "alice@example.com"}],
          "expenses": [{"payers": [...], "splits": [...]}],
          "settlements": [{"payer_id": "u2", "payee_id": "u1", "amount": "30.00"}]
        }

    Args:
        path: Path to the snapshot file

    Returns:
        The parsed snapshot

    Raises:
        LedgerFileError: If the file is missing, unreadable or malformed
    """
    path = Path(path)

    if not path.is_file():
        raise LedgerFileError(f"Ledger file not found: {path}")

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise LedgerFileError(f"Could not read ledger file {path}: {e}") from e

    try:
        snapshot = LedgerSnapshot.model_validate_json(raw)
    except ValidationError as e:
        raise LedgerFileError(f"Invalid ledger file {path}:\n{e}") from e

    logger.info(
        f"Loaded ledger {path}: {len(snapshot.members)} member(s), "
        f"{len(snapshot.expenses)} expense(s), "
        f"{len(snapshot.settlements)} settlement(s)"
    )

    return snapshot
