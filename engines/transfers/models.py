"""
Custody Ledger Transfers Engine — Models
==========================================
A transfer request is a two-phase custody handoff proposal.
It is ACTIVE until exactly one of accept / reject / cancel closes it,
after which it never changes again.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class TransferOutcome(Enum):
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


@dataclass(frozen=True)
class TransferRequest:
    request_id: int
    batch_id: int
    from_id: str
    to_id: str
    reason: str
    transport_details: str
    requested_at: datetime
    is_active: bool = True
    outcome: Optional[TransferOutcome] = None
    closed_at: Optional[datetime] = None
    closed_by: Optional[str] = None

    def __post_init__(self) -> None:
        if self.is_active and self.outcome is not None:
            raise ValueError("An active transfer request cannot carry an outcome.")
        if not self.is_active and self.outcome is None:
            raise ValueError("A closed transfer request must carry an outcome.")

    @property
    def state(self) -> str:
        """Workflow state: ACTIVE or the closing outcome."""
        return "ACTIVE" if self.is_active else self.outcome.value

    def to_dict(self) -> dict:
        return {
            "request_id": self.request_id,
            "batch_id": self.batch_id,
            "from_id": self.from_id,
            "to_id": self.to_id,
            "reason": self.reason,
            "transport_details": self.transport_details,
            "requested_at": self.requested_at.isoformat(),
            "is_active": self.is_active,
            "state": self.state,
            "closed_at": self.closed_at.isoformat() if self.closed_at else None,
            "closed_by": self.closed_by,
        }
