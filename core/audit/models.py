"""
Custody Ledger Core Audit — Immutable Audit Models
=====================================================
Append-only audit entries, one sequence per batch.
Frozen dataclasses — once created, never modified.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class AuditAction(Enum):
    """Closed set of audited actions. Full text, never compressed codes."""
    CREATED = "CREATED"
    STATUS_UPDATED = "STATUS_UPDATED"
    TRANSFER_REQUESTED = "TRANSFER_REQUESTED"
    TRANSFER_ACCEPTED = "TRANSFER_ACCEPTED"
    TRANSFER_REJECTED = "TRANSFER_REJECTED"
    TRANSFER_CANCELLED = "TRANSFER_CANCELLED"
    BATCH_REJECTED = "BATCH_REJECTED"


@dataclass(frozen=True)
class AuditEntry:
    """
    Immutable record of one state-mutating action on a batch.

    sequence is the position of the originating event in the change
    feed, so an entry can always be traced back to its feed event.
    """

    batch_id: int
    actor_id: str
    action: AuditAction
    details: str
    occurred_at: datetime
    location: Optional[str] = None
    sequence: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.action, AuditAction):
            raise ValueError(
                f"AuditEntry action must be AuditAction, got {self.action!r}."
            )

    def to_dict(self) -> dict:
        return {
            "batch_id": self.batch_id,
            "actor_id": self.actor_id,
            "action": self.action.value,
            "details": self.details,
            "occurred_at": self.occurred_at.isoformat(),
            "location": self.location,
            "sequence": self.sequence,
        }
