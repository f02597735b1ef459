"""
Custody Ledger Batches Engine — Event Types and Draft Builders
=================================================================
Each builder returns the EventDraft for exactly one audit entry.
"""

from __future__ import annotations

from datetime import datetime

from core.audit.models import AuditAction
from core.events.envelope import EventDraft
from engines.batches.models import BatchStatus


BATCHES_ENGINE = "batches"

BATCH_CREATED_V1 = "batches.batch.created.v1"
BATCH_STATUS_UPDATED_V1 = "batches.batch.status_updated.v1"
BATCH_REJECTED_V1 = "batches.batch.rejected.v1"

BATCH_EVENT_TYPES = (
    BATCH_CREATED_V1,
    BATCH_STATUS_UPDATED_V1,
    BATCH_REJECTED_V1,
)


def build_batch_created(
    *,
    actor_id: str,
    batch_id: int,
    batch_type: str,
    quantity: int,
    origin_location: str,
    metadata_uri: str,
    occurred_at: datetime,
) -> EventDraft:
    return EventDraft(
        event_type=BATCH_CREATED_V1,
        source_engine=BATCHES_ENGINE,
        actor_id=actor_id,
        occurred_at=occurred_at,
        batch_id=batch_id,
        action=AuditAction.CREATED.value,
        details=f"Batch registered: {batch_type}, quantity {quantity}",
        location=origin_location,
        payload={
            "batch_id": batch_id,
            "creator_id": actor_id,
            "batch_type": batch_type,
            "quantity": quantity,
            "origin_location": origin_location,
            "metadata_uri": metadata_uri,
        },
    )


def build_status_updated(
    *,
    actor_id: str,
    batch_id: int,
    from_status: BatchStatus,
    to_status: BatchStatus,
    details: str,
    location: str | None,
    occurred_at: datetime,
) -> EventDraft:
    return EventDraft(
        event_type=BATCH_STATUS_UPDATED_V1,
        source_engine=BATCHES_ENGINE,
        actor_id=actor_id,
        occurred_at=occurred_at,
        batch_id=batch_id,
        action=AuditAction.STATUS_UPDATED.value,
        details=details,
        location=location,
        payload={
            "batch_id": batch_id,
            "from_status": from_status.value,
            "to_status": to_status.value,
        },
    )


def build_batch_rejected(
    *,
    actor_id: str,
    batch_id: int,
    reason: str,
    location: str | None,
    occurred_at: datetime,
) -> EventDraft:
    return EventDraft(
        event_type=BATCH_REJECTED_V1,
        source_engine=BATCHES_ENGINE,
        actor_id=actor_id,
        occurred_at=occurred_at,
        batch_id=batch_id,
        action=AuditAction.BATCH_REJECTED.value,
        details=reason,
        location=location,
        payload={"batch_id": batch_id, "reason": reason},
    )
