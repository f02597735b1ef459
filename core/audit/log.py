"""
Custody Ledger Core Audit — Audit Log
========================================
Append-only, keyed by batch id, ordered by insertion.

There is no public mutation API. Entries are written only by
applying committed feed events that carry an audit action, so
every entry corresponds to exactly one committed event.
"""

from __future__ import annotations

from typing import Dict, List

from core.audit.models import AuditAction, AuditEntry
from core.events.envelope import FeedEvent


class AuditLog:
    """Per-batch audit trails (projection of the change feed)."""

    def __init__(self):
        self._entries: Dict[int, List[AuditEntry]] = {}

    def apply(self, event: FeedEvent) -> None:
        if event.batch_id is None or event.action is None:
            return
        entry = AuditEntry(
            batch_id=event.batch_id,
            actor_id=event.actor_id,
            action=AuditAction(event.action),
            details=event.details,
            occurred_at=event.occurred_at,
            location=event.location,
            sequence=event.sequence,
        )
        self._entries.setdefault(event.batch_id, []).append(entry)

    def get_trail(self, batch_id: int) -> tuple[AuditEntry, ...]:
        """Full ordered trail; empty for a batch with no entries."""
        return tuple(self._entries.get(batch_id, ()))

    def count(self, batch_id: int) -> int:
        return len(self._entries.get(batch_id, ()))
