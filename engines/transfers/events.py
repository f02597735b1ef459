"""
Custody Ledger Transfers Engine — Event Types and Draft Builders
===================================================================
Every transfer event carries the full request coordinates
(request_id, batch_id, from_id, to_id) so projections and replay
never need to look anything up.
"""

from __future__ import annotations

from datetime import datetime

from core.audit.models import AuditAction
from core.events.envelope import EventDraft


TRANSFERS_ENGINE = "transfers"

TRANSFER_REQUESTED_V1 = "transfers.request.requested.v1"
TRANSFER_ACCEPTED_V1 = "transfers.request.accepted.v1"
TRANSFER_REJECTED_V1 = "transfers.request.rejected.v1"
TRANSFER_CANCELLED_V1 = "transfers.request.cancelled.v1"

TRANSFER_EVENT_TYPES = (
    TRANSFER_REQUESTED_V1,
    TRANSFER_ACCEPTED_V1,
    TRANSFER_REJECTED_V1,
    TRANSFER_CANCELLED_V1,
)

# Events that close an active request (the request becomes inactive).
TRANSFER_CLOSING_EVENT_TYPES = frozenset({
    TRANSFER_ACCEPTED_V1,
    TRANSFER_REJECTED_V1,
    TRANSFER_CANCELLED_V1,
})


def _coordinates(request) -> dict:
    return {
        "request_id": request.request_id,
        "batch_id": request.batch_id,
        "from_id": request.from_id,
        "to_id": request.to_id,
    }


def build_transfer_requested(
    *,
    actor_id: str,
    request_id: int,
    batch_id: int,
    to_id: str,
    reason: str,
    transport_details: str,
    occurred_at: datetime,
) -> EventDraft:
    return EventDraft(
        event_type=TRANSFER_REQUESTED_V1,
        source_engine=TRANSFERS_ENGINE,
        actor_id=actor_id,
        occurred_at=occurred_at,
        batch_id=batch_id,
        action=AuditAction.TRANSFER_REQUESTED.value,
        details=reason,
        payload={
            "request_id": request_id,
            "batch_id": batch_id,
            "from_id": actor_id,
            "to_id": to_id,
            "reason": reason,
            "transport_details": transport_details,
        },
    )


def build_transfer_accepted(*, actor_id: str, request, occurred_at: datetime) -> EventDraft:
    return EventDraft(
        event_type=TRANSFER_ACCEPTED_V1,
        source_engine=TRANSFERS_ENGINE,
        actor_id=actor_id,
        occurred_at=occurred_at,
        batch_id=request.batch_id,
        action=AuditAction.TRANSFER_ACCEPTED.value,
        details=f"Custody transferred from {request.from_id} to {request.to_id}",
        payload=_coordinates(request),
    )


def build_transfer_rejected(
    *,
    actor_id: str,
    request,
    reason: str,
    occurred_at: datetime,
) -> EventDraft:
    payload = _coordinates(request)
    payload["reason"] = reason
    return EventDraft(
        event_type=TRANSFER_REJECTED_V1,
        source_engine=TRANSFERS_ENGINE,
        actor_id=actor_id,
        occurred_at=occurred_at,
        batch_id=request.batch_id,
        action=AuditAction.TRANSFER_REJECTED.value,
        details=reason,
        payload=payload,
    )


def build_transfer_cancelled(*, actor_id: str, request, occurred_at: datetime) -> EventDraft:
    return EventDraft(
        event_type=TRANSFER_CANCELLED_V1,
        source_engine=TRANSFERS_ENGINE,
        actor_id=actor_id,
        occurred_at=occurred_at,
        batch_id=request.batch_id,
        action=AuditAction.TRANSFER_CANCELLED.value,
        details=f"Transfer request {request.request_id} cancelled by requester",
        payload=_coordinates(request),
    )
