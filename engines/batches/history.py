"""
Custody Ledger Batches Engine — Ownership History
====================================================
Append-only sequence of owners per batch.

Written only by two feed events:
    batches.batch.created.v1       → [creator]
    transfers.request.accepted.v1  → + new owner

So len(history) == 1 + accepted transfers, and history[-1] is the
current owner, for every batch at all times.
"""

from __future__ import annotations

from typing import Dict, List

from core.events.envelope import FeedEvent
from engines.batches.events import BATCH_CREATED_V1
from engines.transfers.events import TRANSFER_ACCEPTED_V1


class OwnershipHistory:

    def __init__(self):
        self._owners: Dict[int, List[str]] = {}

    def apply(self, event: FeedEvent) -> None:
        if event.event_type == BATCH_CREATED_V1:
            self._owners[event.payload["batch_id"]] = [event.payload["creator_id"]]

        elif event.event_type == TRANSFER_ACCEPTED_V1:
            self._owners.setdefault(event.payload["batch_id"], []).append(
                event.payload["to_id"]
            )

    def get(self, batch_id: int) -> tuple[str, ...]:
        return tuple(self._owners.get(batch_id, ()))

    def accepted_transfer_count(self, batch_id: int) -> int:
        return max(len(self._owners.get(batch_id, ())) - 1, 0)
