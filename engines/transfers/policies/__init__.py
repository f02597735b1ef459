"""
Custody Ledger Transfers Engine — Policies
=============================================
Rule functions for the two-phase handoff.
Each returns None on pass, or the RejectionReason that aborts the call.
"""

from __future__ import annotations

from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason
from engines.batches.models import Batch
from engines.participants.models import Participant
from engines.transfers.models import TransferRequest


# ══════════════════════════════════════════════════════════════
# REQUEST RULES
# ══════════════════════════════════════════════════════════════

def caller_must_own_batch_policy(
    caller_id: str,
    batch: Batch,
) -> Optional[RejectionReason]:
    if caller_id != batch.current_owner:
        return RejectionReason(
            code=ReasonCode.NOT_BATCH_OWNER,
            message=(
                f"Caller '{caller_id}' is not the current owner of "
                f"batch {batch.batch_id}."
            ),
            policy_name="caller_must_own_batch_policy",
        )
    return None


def recipient_must_differ_policy(
    caller_id: str,
    to_id: str,
) -> Optional[RejectionReason]:
    if to_id == caller_id:
        return RejectionReason(
            code=ReasonCode.SELF_TRANSFER,
            message="Cannot transfer a batch to its current owner.",
            policy_name="recipient_must_differ_policy",
        )
    return None


def recipient_must_be_registered_policy(
    to_id: str,
    recipient: Optional[Participant],
) -> Optional[RejectionReason]:
    if recipient is None or not recipient.is_active:
        return RejectionReason(
            code=ReasonCode.RECIPIENT_NOT_REGISTERED,
            message=f"Recipient '{to_id}' is not a registered participant.",
            policy_name="recipient_must_be_registered_policy",
        )
    return None


def no_transfer_pending_policy(
    batch: Batch,
    active_request: Optional[TransferRequest],
) -> Optional[RejectionReason]:
    if active_request is not None:
        return RejectionReason(
            code=ReasonCode.TRANSFER_ALREADY_PENDING,
            message=(
                f"Batch {batch.batch_id} has a transfer already pending "
                f"(request {active_request.request_id})."
            ),
            policy_name="no_transfer_pending_policy",
        )
    return None


def batch_must_be_transferable_policy(batch: Batch) -> Optional[RejectionReason]:
    if batch.is_terminal:
        return RejectionReason(
            code=ReasonCode.BATCH_NOT_TRANSFERABLE,
            message=(
                f"Batch {batch.batch_id} is {batch.status.value} "
                f"and cannot be transferred."
            ),
            policy_name="batch_must_be_transferable_policy",
        )
    return None


def reason_must_be_present_policy(reason) -> Optional[RejectionReason]:
    if not reason or not isinstance(reason, str) or not reason.strip():
        return RejectionReason(
            code=ReasonCode.EMPTY_REASON,
            message="Reason cannot be empty.",
            policy_name="reason_must_be_present_policy",
        )
    return None


# ══════════════════════════════════════════════════════════════
# RESOLUTION RULES (accept / reject / cancel)
# ══════════════════════════════════════════════════════════════

def request_must_exist_policy(
    request_id,
    request: Optional[TransferRequest],
) -> Optional[RejectionReason]:
    if request is None:
        return RejectionReason(
            code=ReasonCode.REQUEST_NOT_FOUND,
            message=f"Transfer request {request_id} does not exist.",
            policy_name="request_must_exist_policy",
        )
    return None


def request_must_be_active_policy(request: TransferRequest) -> Optional[RejectionReason]:
    if not request.is_active:
        return RejectionReason(
            code=ReasonCode.REQUEST_NOT_ACTIVE,
            message=(
                f"Transfer request {request.request_id} is not active "
                f"({request.state})."
            ),
            policy_name="request_must_be_active_policy",
        )
    return None


def caller_must_be_recipient_policy(
    caller_id: str,
    request: TransferRequest,
) -> Optional[RejectionReason]:
    if caller_id != request.to_id:
        return RejectionReason(
            code=ReasonCode.NOT_TRANSFER_RECIPIENT,
            message=(
                f"Only '{request.to_id}' may resolve transfer request "
                f"{request.request_id}."
            ),
            policy_name="caller_must_be_recipient_policy",
        )
    return None


def caller_must_be_requester_policy(
    caller_id: str,
    request: TransferRequest,
) -> Optional[RejectionReason]:
    # Ownership of the batch is not consulted here.
    if caller_id != request.from_id:
        return RejectionReason(
            code=ReasonCode.NOT_TRANSFER_REQUESTER,
            message=(
                f"Only '{request.from_id}' may cancel transfer request "
                f"{request.request_id}."
            ),
            policy_name="caller_must_be_requester_policy",
        )
    return None


def ownership_must_be_unchanged_policy(
    batch: Optional[Batch],
    request: TransferRequest,
) -> Optional[RejectionReason]:
    if (
        batch is None
        or batch.current_owner != request.from_id
        or batch.pending_owner != request.to_id
    ):
        return RejectionReason(
            code=ReasonCode.OWNER_CHANGED,
            message=(
                f"Owner changed for batch {request.batch_id} since "
                f"request {request.request_id} was made."
            ),
            policy_name="ownership_must_be_unchanged_policy",
        )
    return None


def active_request_must_exist_policy(
    batch_id,
    request: Optional[TransferRequest],
) -> Optional[RejectionReason]:
    if request is None:
        return RejectionReason(
            code=ReasonCode.NO_ACTIVE_REQUEST,
            message=f"No active transfer request for batch {batch_id}.",
            policy_name="active_request_must_exist_policy",
        )
    return None
