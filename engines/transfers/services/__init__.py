"""
Custody Ledger Transfers Engine — Application Service
========================================================
TransferCoordinator: the two-phase custody handoff.

    request  (owner)      → batch.pending_owner = to, request ACTIVE
    accept   (recipient)  → batch.current_owner = to, history += to
    reject   (recipient)  → pending cleared, ownership unchanged
    cancel   (requester)  → pending cleared, ownership unchanged

accept is the only place ownership changes hands. Every call commits
exactly one feed event; all state changes come from applying it.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Dict, List, Optional

from core.commands.errors import raise_rejection
from core.event_store.writer import LedgerWriter
from core.events.envelope import FeedEvent
from core.time.clock import Clock, SystemClock
from engines.batches.policies import batch_must_exist_policy
from engines.batches.services import BatchLedger
from engines.participants.services import ParticipantRegistry
from engines.transfers.events import (
    TRANSFER_ACCEPTED_V1,
    TRANSFER_CANCELLED_V1,
    TRANSFER_REJECTED_V1,
    TRANSFER_REQUESTED_V1,
    build_transfer_accepted,
    build_transfer_cancelled,
    build_transfer_rejected,
    build_transfer_requested,
)
from engines.transfers.models import TransferOutcome, TransferRequest
from engines.transfers.policies import (
    active_request_must_exist_policy,
    batch_must_be_transferable_policy,
    caller_must_be_recipient_policy,
    caller_must_be_requester_policy,
    caller_must_own_batch_policy,
    no_transfer_pending_policy,
    ownership_must_be_unchanged_policy,
    reason_must_be_present_policy,
    recipient_must_be_registered_policy,
    recipient_must_differ_policy,
    request_must_be_active_policy,
    request_must_exist_policy,
)

logger = logging.getLogger("custody.transfers")


_OUTCOME_FOR_EVENT = {
    TRANSFER_ACCEPTED_V1: TransferOutcome.ACCEPTED,
    TRANSFER_REJECTED_V1: TransferOutcome.REJECTED,
    TRANSFER_CANCELLED_V1: TransferOutcome.CANCELLED,
}


# ══════════════════════════════════════════════════════════════
# PROJECTION STORE
# ══════════════════════════════════════════════════════════════

class TransferProjectionStore:
    """
    Transfer requests keyed by id, plus an index of the single
    active request per batch.
    """

    def __init__(self):
        self._requests: Dict[int, TransferRequest] = {}
        self._active_by_batch: Dict[int, int] = {}
        self._last_request_id: int = 0

    def apply(self, event: FeedEvent) -> None:
        payload = event.payload

        if event.event_type == TRANSFER_REQUESTED_V1:
            request_id = payload["request_id"]
            self._requests[request_id] = TransferRequest(
                request_id=request_id,
                batch_id=payload["batch_id"],
                from_id=payload["from_id"],
                to_id=payload["to_id"],
                reason=payload["reason"],
                transport_details=payload["transport_details"],
                requested_at=event.occurred_at,
            )
            self._active_by_batch[payload["batch_id"]] = request_id
            self._last_request_id = max(self._last_request_id, request_id)

        elif event.event_type in _OUTCOME_FOR_EVENT:
            request_id = payload["request_id"]
            current = self._requests.get(request_id)
            if current is None:
                return
            self._requests[request_id] = dataclasses.replace(
                current,
                is_active=False,
                outcome=_OUTCOME_FOR_EVENT[event.event_type],
                closed_at=event.occurred_at,
                closed_by=event.actor_id,
            )
            if self._active_by_batch.get(current.batch_id) == request_id:
                del self._active_by_batch[current.batch_id]

    def get(self, request_id) -> Optional[TransferRequest]:
        return self._requests.get(request_id)

    def active_for(self, batch_id) -> Optional[TransferRequest]:
        request_id = self._active_by_batch.get(batch_id)
        if request_id is None:
            return None
        return self._requests[request_id]

    def active_requests(self) -> List[TransferRequest]:
        return [self._requests[rid] for rid in sorted(self._active_by_batch.values())]

    def incoming_for(self, identity: str) -> List[TransferRequest]:
        return [
            request for request in self.active_requests()
            if request.to_id == identity
        ]

    def next_request_id(self) -> int:
        return self._last_request_id + 1

    @property
    def total(self) -> int:
        return len(self._requests)


# ══════════════════════════════════════════════════════════════
# APPLICATION SERVICE
# ══════════════════════════════════════════════════════════════

class TransferCoordinator:

    def __init__(
        self,
        *,
        writer: LedgerWriter,
        batch_ledger: BatchLedger,
        participants: ParticipantRegistry,
        clock: Clock | None = None,
        projection_store: TransferProjectionStore | None = None,
    ):
        self._writer = writer
        self._batches = batch_ledger
        self._participants = participants
        self._clock = clock or SystemClock()
        self._store = projection_store or TransferProjectionStore()

        self._writer.register_projection(self._store)

    # ══════════════════════════════════════════════════════════
    # MUTATIONS
    # ══════════════════════════════════════════════════════════

    def request_transfer(
        self,
        caller_id: str,
        batch_id: int,
        to_id: str,
        reason: str,
        transport_details: str = "",
    ) -> int:
        """Open a handoff of batch_id from its owner to to_id. Returns the request id."""
        with self._writer.transaction():
            batch = self._batches.find_batch(batch_id)
            raise_rejection(batch_must_exist_policy(batch_id, batch))
            raise_rejection(caller_must_own_batch_policy(caller_id, batch))
            raise_rejection(recipient_must_differ_policy(caller_id, to_id))
            raise_rejection(recipient_must_be_registered_policy(
                to_id, self._participants.find(to_id),
            ))
            raise_rejection(no_transfer_pending_policy(
                batch, self._store.active_for(batch_id),
            ))
            raise_rejection(batch_must_be_transferable_policy(batch))
            raise_rejection(reason_must_be_present_policy(reason))

            request_id = self._store.next_request_id()
            self._writer.commit([
                build_transfer_requested(
                    actor_id=caller_id,
                    request_id=request_id,
                    batch_id=batch_id,
                    to_id=to_id,
                    reason=reason,
                    transport_details=transport_details or "",
                    occurred_at=self._clock.now_utc(),
                )
            ])

        logger.info(
            f"Transfer request {request_id} opened: batch {batch_id} "
            f"{caller_id} → {to_id}"
        )
        return request_id

    def accept_transfer(self, caller_id: str, request_id: int) -> TransferRequest:
        """
        Complete the handoff. Batch status is not re-checked here, so a
        request opened before the batch was rejected can still complete.
        """
        with self._writer.transaction():
            request = self._resolvable(request_id)
            raise_rejection(caller_must_be_recipient_policy(caller_id, request))
            raise_rejection(ownership_must_be_unchanged_policy(
                self._batches.find_batch(request.batch_id), request,
            ))

            self._writer.commit([
                build_transfer_accepted(
                    actor_id=caller_id,
                    request=request,
                    occurred_at=self._clock.now_utc(),
                )
            ])
            closed = self._store.get(request_id)

        logger.info(
            f"Transfer request {request_id} accepted: batch {request.batch_id} "
            f"now owned by {request.to_id}"
        )
        return closed

    def reject_transfer(
        self,
        caller_id: str,
        request_id: int,
        reason: str,
    ) -> TransferRequest:
        with self._writer.transaction():
            request = self._resolvable(request_id)
            raise_rejection(caller_must_be_recipient_policy(caller_id, request))
            raise_rejection(reason_must_be_present_policy(reason))

            self._writer.commit([
                build_transfer_rejected(
                    actor_id=caller_id,
                    request=request,
                    reason=reason,
                    occurred_at=self._clock.now_utc(),
                )
            ])
            closed = self._store.get(request_id)

        logger.info(f"Transfer request {request_id} rejected by {caller_id}")
        return closed

    def cancel_transfer(self, caller_id: str, request_id: int) -> TransferRequest:
        """Withdraw a request. Only its original requester may do so."""
        with self._writer.transaction():
            request = self._resolvable(request_id)
            raise_rejection(caller_must_be_requester_policy(caller_id, request))

            self._writer.commit([
                build_transfer_cancelled(
                    actor_id=caller_id,
                    request=request,
                    occurred_at=self._clock.now_utc(),
                )
            ])
            closed = self._store.get(request_id)

        logger.info(f"Transfer request {request_id} cancelled by {caller_id}")
        return closed

    def _resolvable(self, request_id) -> TransferRequest:
        request = self._store.get(request_id)
        raise_rejection(request_must_exist_policy(request_id, request))
        raise_rejection(request_must_be_active_policy(request))
        return request

    # ══════════════════════════════════════════════════════════
    # READS
    # ══════════════════════════════════════════════════════════

    def get_active_request(self, batch_id: int) -> TransferRequest:
        with self._writer.snapshot():
            request = self._store.active_for(batch_id)
        raise_rejection(active_request_must_exist_policy(batch_id, request))
        return request

    def get_transfer_request(self, request_id: int) -> TransferRequest:
        with self._writer.snapshot():
            request = self._store.get(request_id)
        raise_rejection(request_must_exist_policy(request_id, request))
        return request

    def get_incoming_requests(self, identity: str) -> List[TransferRequest]:
        with self._writer.snapshot():
            return self._store.incoming_for(identity)

    def get_total_requests(self) -> int:
        with self._writer.snapshot():
            return self._store.total

    @property
    def projection_store(self) -> TransferProjectionStore:
        return self._store
