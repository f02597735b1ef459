"""
Custody Ledger Batches Engine — Application Service
======================================================
BatchLedger: owns batch records and enforces the status state machine.

Flow for every mutation:
    authorize (ParticipantRegistry) → validate domain rules →
    commit feed events (batch store, ownership history and audit log
    are updated by applying them) → return
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Dict, Optional

from core.audit.log import AuditLog
from core.audit.models import AuditEntry
from core.commands.errors import raise_rejection
from core.event_store.writer import LedgerWriter
from core.events.envelope import FeedEvent
from core.time.clock import Clock, SystemClock
from engines.batches.events import (
    BATCH_CREATED_V1,
    BATCH_STATUS_UPDATED_V1,
    build_batch_created,
    build_batch_rejected,
    build_status_updated,
)
from engines.batches.history import OwnershipHistory
from engines.batches.models import Batch, BatchStatus, coerce_status
from engines.batches.policies import (
    batch_must_exist_policy,
    batch_type_must_be_present_policy,
    caller_may_update_status_policy,
    caller_must_be_active_participant_policy,
    origin_must_be_present_policy,
    quantity_must_be_positive_policy,
    status_must_be_known_policy,
    transition_must_be_legal_policy,
)
from engines.participants.models import ParticipantRole
from engines.participants.services import ParticipantRegistry
from engines.transfers.events import (
    TRANSFER_ACCEPTED_V1,
    TRANSFER_CLOSING_EVENT_TYPES,
    TRANSFER_REQUESTED_V1,
)

logger = logging.getLogger("custody.batches")


# ══════════════════════════════════════════════════════════════
# PROJECTION STORE
# ══════════════════════════════════════════════════════════════

class BatchProjectionStore:
    """
    In-memory batch records keyed by id.

    Owner fields change only through transfer events:
        requested → pending_owner = to
        accepted  → current_owner = to, pending_owner cleared
        rejected / cancelled → pending_owner cleared
    """

    def __init__(self):
        self._batches: Dict[int, Batch] = {}
        self._last_batch_id: int = 0

    def apply(self, event: FeedEvent) -> None:
        payload = event.payload
        event_type = event.event_type

        if event_type == BATCH_CREATED_V1:
            batch_id = payload["batch_id"]
            self._batches[batch_id] = Batch(
                batch_id=batch_id,
                creator_id=payload["creator_id"],
                current_owner=payload["creator_id"],
                status=BatchStatus.CREATED,
                batch_type=payload["batch_type"],
                quantity=payload["quantity"],
                origin_location=payload["origin_location"],
                metadata_uri=payload["metadata_uri"],
                created_at=event.occurred_at,
                updated_at=event.occurred_at,
            )
            self._last_batch_id = max(self._last_batch_id, batch_id)

        elif event_type == BATCH_STATUS_UPDATED_V1:
            self._replace(
                payload["batch_id"],
                status=BatchStatus(payload["to_status"]),
                updated_at=event.occurred_at,
            )

        elif event_type == TRANSFER_REQUESTED_V1:
            self._replace(
                payload["batch_id"],
                pending_owner=payload["to_id"],
                updated_at=event.occurred_at,
            )

        elif event_type == TRANSFER_ACCEPTED_V1:
            self._replace(
                payload["batch_id"],
                current_owner=payload["to_id"],
                pending_owner=None,
                updated_at=event.occurred_at,
            )

        elif event_type in TRANSFER_CLOSING_EVENT_TYPES:
            self._replace(
                payload["batch_id"],
                pending_owner=None,
                updated_at=event.occurred_at,
            )

    def _replace(self, batch_id: int, **changes) -> None:
        current = self._batches.get(batch_id)
        if current is not None:
            self._batches[batch_id] = dataclasses.replace(current, **changes)

    def get(self, batch_id) -> Optional[Batch]:
        return self._batches.get(batch_id)

    def next_batch_id(self) -> int:
        return self._last_batch_id + 1

    @property
    def total(self) -> int:
        return len(self._batches)

    def owned_by(self, identity: str) -> tuple[int, ...]:
        return tuple(sorted(
            batch_id for batch_id, batch in self._batches.items()
            if batch.current_owner == identity
        ))


# ══════════════════════════════════════════════════════════════
# APPLICATION SERVICE
# ══════════════════════════════════════════════════════════════

class BatchLedger:
    """Batch registration, status lifecycle, and batch read accessors."""

    def __init__(
        self,
        *,
        writer: LedgerWriter,
        participants: ParticipantRegistry,
        clock: Clock | None = None,
        projection_store: BatchProjectionStore | None = None,
        ownership_history: OwnershipHistory | None = None,
        audit_log: AuditLog | None = None,
    ):
        self._writer = writer
        self._participants = participants
        self._clock = clock or SystemClock()
        self._store = projection_store or BatchProjectionStore()
        self._history = ownership_history or OwnershipHistory()
        self._audit_log = audit_log or AuditLog()

        self._writer.register_projection(self._store)
        self._writer.register_projection(self._history)
        self._writer.register_projection(self._audit_log)

    # ══════════════════════════════════════════════════════════
    # MUTATIONS
    # ══════════════════════════════════════════════════════════

    def register_batch(
        self,
        caller_id: str,
        batch_type: str,
        quantity: int,
        origin_location: str,
        metadata_uri: str = "",
    ) -> int:
        """Create a batch owned by the caller. Returns the new batch id."""
        with self._writer.transaction():
            raise_rejection(caller_must_be_active_participant_policy(
                caller_id, self._participants.find(caller_id),
            ))
            raise_rejection(batch_type_must_be_present_policy(batch_type))
            raise_rejection(quantity_must_be_positive_policy(quantity))
            raise_rejection(origin_must_be_present_policy(origin_location))

            batch_id = self._store.next_batch_id()
            self._writer.commit([
                build_batch_created(
                    actor_id=caller_id,
                    batch_id=batch_id,
                    batch_type=batch_type,
                    quantity=quantity,
                    origin_location=origin_location,
                    metadata_uri=metadata_uri or "",
                    occurred_at=self._clock.now_utc(),
                )
            ])

        logger.info(f"Batch {batch_id} registered by {caller_id} ({batch_type})")
        return batch_id

    def update_status(
        self,
        caller_id: str,
        batch_id: int,
        new_status,
        details: str = "",
        location_data: str = "",
    ) -> Batch:
        """
        Advance a batch along the lifecycle.

        A move to REJECTED appends a second, BATCH_REJECTED audit entry
        carrying the details as the rejection reason. A pending transfer
        is deliberately left in place.
        """
        with self._writer.transaction():
            batch = self._store.get(batch_id)
            raise_rejection(batch_must_exist_policy(batch_id, batch))
            raise_rejection(caller_may_update_status_policy(
                caller_id,
                batch,
                self._participants.has_role(caller_id, ParticipantRole.OVERSEER),
            ))
            status = coerce_status(new_status)
            raise_rejection(status_must_be_known_policy(new_status, status))
            raise_rejection(transition_must_be_legal_policy(batch, status))

            now = self._clock.now_utc()
            location = location_data or None
            drafts = [
                build_status_updated(
                    actor_id=caller_id,
                    batch_id=batch_id,
                    from_status=batch.status,
                    to_status=status,
                    details=details or "",
                    location=location,
                    occurred_at=now,
                )
            ]
            if status is BatchStatus.REJECTED:
                drafts.append(build_batch_rejected(
                    actor_id=caller_id,
                    batch_id=batch_id,
                    reason=details or "",
                    location=location,
                    occurred_at=now,
                ))

            self._writer.commit(drafts)
            updated = self._store.get(batch_id)

        logger.info(
            f"Batch {batch_id} status {batch.status.value} → "
            f"{status.value} by {caller_id}"
        )
        return updated

    # ══════════════════════════════════════════════════════════
    # READS
    # ══════════════════════════════════════════════════════════

    def find_batch(self, batch_id: int) -> Optional[Batch]:
        with self._writer.snapshot():
            return self._store.get(batch_id)

    def get_batch(self, batch_id: int) -> Batch:
        batch = self.find_batch(batch_id)
        raise_rejection(batch_must_exist_policy(batch_id, batch))
        return batch

    def get_ownership_history(self, batch_id: int) -> tuple[str, ...]:
        with self._writer.snapshot():
            raise_rejection(batch_must_exist_policy(batch_id, self._store.get(batch_id)))
            return self._history.get(batch_id)

    def get_audit_trail(self, batch_id: int) -> tuple[AuditEntry, ...]:
        with self._writer.snapshot():
            raise_rejection(batch_must_exist_policy(batch_id, self._store.get(batch_id)))
            return self._audit_log.get_trail(batch_id)

    def get_total_batches(self) -> int:
        with self._writer.snapshot():
            return self._store.total

    def get_batches_by_owner(self, identity: str) -> tuple[int, ...]:
        with self._writer.snapshot():
            return self._store.owned_by(identity)

    @property
    def projection_store(self) -> BatchProjectionStore:
        return self._store

    @property
    def ownership_history(self) -> OwnershipHistory:
        return self._history

    @property
    def audit_log(self) -> AuditLog:
        return self._audit_log
