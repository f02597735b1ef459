"""
Custody Ledger Batches Engine — Policies
===========================================
Small pure predicates plus the rule functions built on them.
Rule functions return None when the rule passes, or the
RejectionReason that aborts the operation.
"""

from __future__ import annotations

from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason
from core.primitives.workflow import BATCH_LIFECYCLE_WORKFLOW
from engines.batches.models import Batch, BatchStatus
from engines.participants.models import Participant


# ══════════════════════════════════════════════════════════════
# PREDICATES
# ══════════════════════════════════════════════════════════════

def is_legal_transition(from_status: BatchStatus, to_status: BatchStatus) -> bool:
    return BATCH_LIFECYCLE_WORKFLOW.is_valid_transition(
        from_status.value, to_status.value,
    )


def can_update_status(caller_id: str, batch: Batch, caller_is_overseer: bool) -> bool:
    """Current owner, or any active overseer."""
    return caller_id == batch.current_owner or caller_is_overseer


# ══════════════════════════════════════════════════════════════
# REGISTRATION RULES
# ══════════════════════════════════════════════════════════════

def caller_must_be_active_participant_policy(
    caller_id: str,
    caller: Optional[Participant],
) -> Optional[RejectionReason]:
    if caller is None or not caller.is_active:
        return RejectionReason(
            code=ReasonCode.CALLER_NOT_REGISTERED,
            message=f"Caller '{caller_id}' is not a registered participant.",
            policy_name="caller_must_be_active_participant_policy",
        )
    return None


def batch_type_must_be_present_policy(batch_type) -> Optional[RejectionReason]:
    if not batch_type or not isinstance(batch_type, str) or not batch_type.strip():
        return RejectionReason(
            code=ReasonCode.EMPTY_BATCH_TYPE,
            message="Batch type cannot be empty.",
            policy_name="batch_type_must_be_present_policy",
        )
    return None


def quantity_must_be_positive_policy(quantity) -> Optional[RejectionReason]:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        return RejectionReason(
            code=ReasonCode.INVALID_QUANTITY,
            message=f"Quantity must be a positive integer, got {quantity!r}.",
            policy_name="quantity_must_be_positive_policy",
        )
    return None


def origin_must_be_present_policy(origin_location) -> Optional[RejectionReason]:
    if (
        not origin_location
        or not isinstance(origin_location, str)
        or not origin_location.strip()
    ):
        return RejectionReason(
            code=ReasonCode.EMPTY_ORIGIN,
            message="Origin location cannot be empty.",
            policy_name="origin_must_be_present_policy",
        )
    return None


# ══════════════════════════════════════════════════════════════
# STATUS RULES
# ══════════════════════════════════════════════════════════════

def batch_must_exist_policy(
    batch_id,
    batch: Optional[Batch],
) -> Optional[RejectionReason]:
    if batch is None:
        return RejectionReason(
            code=ReasonCode.BATCH_NOT_FOUND,
            message=f"Batch {batch_id} does not exist.",
            policy_name="batch_must_exist_policy",
        )
    return None


def status_must_be_known_policy(
    raw_status,
    status: Optional[BatchStatus],
) -> Optional[RejectionReason]:
    if status is None:
        return RejectionReason(
            code=ReasonCode.INVALID_STATUS,
            message=f"Unknown batch status {raw_status!r}.",
            policy_name="status_must_be_known_policy",
        )
    return None


def caller_may_update_status_policy(
    caller_id: str,
    batch: Batch,
    caller_is_overseer: bool,
) -> Optional[RejectionReason]:
    if not can_update_status(caller_id, batch, caller_is_overseer):
        return RejectionReason(
            code=ReasonCode.NOT_OWNER_OR_OVERSEER,
            message=(
                f"Caller '{caller_id}' is neither the owner of batch "
                f"{batch.batch_id} nor an overseer."
            ),
            policy_name="caller_may_update_status_policy",
        )
    return None


def transition_must_be_legal_policy(
    batch: Batch,
    new_status: BatchStatus,
) -> Optional[RejectionReason]:
    if not is_legal_transition(batch.status, new_status):
        allowed = sorted(s.value for s in batch.status.allowed_next())
        return RejectionReason(
            code=ReasonCode.ILLEGAL_TRANSITION,
            message=(
                f"Invalid status transition for batch {batch.batch_id}: "
                f"{batch.status.value} → {new_status.value}. "
                f"Allowed: {allowed}."
            ),
            policy_name="transition_must_be_legal_policy",
        )
    return None
