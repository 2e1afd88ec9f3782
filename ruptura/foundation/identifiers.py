"""ID generation for ledger entries."""

from __future__ import annotations

from uuid import UUID, uuid4


def new_id() -> UUID:
    """Generate a new random UUID v4 for a ledger entry."""
    return uuid4()
