"""
Custody Ledger Batches Engine — Models
=========================================
Batch records and the closed status enum.
The legal transitions live in BATCH_LIFECYCLE_WORKFLOW.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import FrozenSet, Optional

from core.primitives.workflow import BATCH_LIFECYCLE_WORKFLOW


class BatchStatus(Enum):
    CREATED = "CREATED"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"
    QUALITY_TESTED = "QUALITY_TESTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CONSUMED = "CONSUMED"

    @property
    def is_terminal(self) -> bool:
        return BATCH_LIFECYCLE_WORKFLOW.is_terminal(self.value)

    def allowed_next(self) -> FrozenSet["BatchStatus"]:
        return frozenset(
            BatchStatus(state)
            for state in BATCH_LIFECYCLE_WORKFLOW.allowed_next_states(self.value)
        )


def _status_key(text: str) -> str:
    return text.strip().replace("_", "").replace(" ", "").upper()


_STATUS_BY_KEY = {_status_key(status.value): status for status in BatchStatus}


def coerce_status(status) -> Optional[BatchStatus]:
    """
    BatchStatus from an enum member or a status name; None if unknown.
    Case, underscores and spaces are ignored, so "IN_TRANSIT",
    "in_transit" and "InTransit" are the same status.
    """
    if isinstance(status, BatchStatus):
        return status
    if isinstance(status, str):
        return _STATUS_BY_KEY.get(_status_key(status))
    return None


@dataclass(frozen=True)
class Batch:
    """Immutable snapshot of a batch record."""
    batch_id: int
    creator_id: str
    current_owner: str
    status: BatchStatus
    batch_type: str
    quantity: int
    origin_location: str
    metadata_uri: str
    created_at: datetime
    updated_at: datetime
    pending_owner: Optional[str] = None
    exists: bool = True

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def has_pending_transfer(self) -> bool:
        return self.pending_owner is not None

    def to_dict(self) -> dict:
        return {
            "batch_id": self.batch_id,
            "creator_id": self.creator_id,
            "current_owner": self.current_owner,
            "pending_owner": self.pending_owner,
            "status": self.status.value,
            "batch_type": self.batch_type,
            "quantity": self.quantity,
            "origin_location": self.origin_location,
            "metadata_uri": self.metadata_uri,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "exists": self.exists,
        }
