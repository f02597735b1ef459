"""
Custody Ledger Event Bus — Feed Event Envelope
=================================================
The change-notification feed carries one FeedEvent per committed
audit entry (and per participant registration / deactivation).

An EventDraft is what a service builds; the LedgerWriter seals it
into a FeedEvent by assigning the next sequence and the hash chain.

Fields mirror AuditEntry (batch_id, actor_id, action, details,
occurred_at, location) plus:
    sequence:            Monotonic position in the feed (1-based).
    event_type:          engine.domain.action.vN
    source_engine:       Engine that emitted the event.
    payload:             JSON-safe data sufficient to rebuild state by replay.
    previous_event_hash: Hash of the preceding event (GENESIS for the first).
    event_hash:          SHA-256 over this envelope + previous_event_hash.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


@dataclass(frozen=True)
class EventDraft:
    """Unsealed event built by a service inside a write transaction."""

    event_type: str
    source_engine: str
    actor_id: str
    occurred_at: datetime
    payload: dict = field(default_factory=dict)
    batch_id: Optional[int] = None
    action: Optional[str] = None
    details: str = ""
    location: Optional[str] = None

    def __post_init__(self):
        if not self.event_type or len(self.event_type.split(".")) < 3:
            raise ValueError(
                f"event_type '{self.event_type}' must follow "
                f"engine.domain.action format."
            )
        if self.event_type.split(".")[0] != self.source_engine:
            raise ValueError(
                f"event_type namespace does not match "
                f"source_engine '{self.source_engine}'."
            )
        if not isinstance(self.payload, dict):
            raise TypeError("payload must be a dict.")
        if self.occurred_at.tzinfo is None:
            raise ValueError("occurred_at must be timezone-aware.")
        # Hashed as UTC so the chain survives a journal round-trip.
        object.__setattr__(self, "occurred_at", self.occurred_at.astimezone(timezone.utc))


@dataclass(frozen=True)
class FeedEvent:
    """Sealed, immutable feed event."""

    sequence: int
    event_type: str
    source_engine: str
    actor_id: str
    occurred_at: datetime
    payload: dict
    batch_id: Optional[int]
    action: Optional[str]
    details: str
    location: Optional[str]
    previous_event_hash: str
    event_hash: str

    def hash_body(self) -> dict:
        """Envelope content covered by event_hash (everything but the hashes)."""
        return envelope_body(
            sequence=self.sequence,
            event_type=self.event_type,
            source_engine=self.source_engine,
            actor_id=self.actor_id,
            occurred_at=self.occurred_at,
            payload=self.payload,
            batch_id=self.batch_id,
            action=self.action,
            details=self.details,
            location=self.location,
        )

    def to_dict(self) -> dict:
        data = self.hash_body()
        data["previous_event_hash"] = self.previous_event_hash
        data["event_hash"] = self.event_hash
        return data


def envelope_body(
    *,
    sequence: int,
    event_type: str,
    source_engine: str,
    actor_id: str,
    occurred_at: datetime,
    payload: dict,
    batch_id: Optional[int],
    action: Optional[str],
    details: str,
    location: Optional[str],
) -> dict:
    return {
        "sequence": sequence,
        "event_type": event_type,
        "source_engine": source_engine,
        "actor_id": actor_id,
        "occurred_at": occurred_at.isoformat(),
        "payload": payload,
        "batch_id": batch_id,
        "action": action,
        "details": details,
        "location": location,
    }
