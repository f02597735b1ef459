"""
Custody Ledger Participants Engine — Policies
================================================
Pure rule functions. Each returns None when the rule passes,
or the RejectionReason that aborts the operation.
"""

from __future__ import annotations

from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason
from engines.participants.models import Participant, ParticipantRole


def caller_must_be_admin_policy(
    caller_id: str,
    admin_id: str,
) -> Optional[RejectionReason]:
    """Only the configured administrative principal manages the registry."""
    if caller_id != admin_id:
        return RejectionReason(
            code=ReasonCode.NOT_ADMIN,
            message=f"Caller '{caller_id}' is not the registry administrator.",
            policy_name="caller_must_be_admin_policy",
        )
    return None


def identity_must_be_present_policy(identity) -> Optional[RejectionReason]:
    if not identity or not isinstance(identity, str) or not identity.strip():
        return RejectionReason(
            code=ReasonCode.EMPTY_IDENTITY,
            message="Participant identity must be non-empty.",
            policy_name="identity_must_be_present_policy",
        )
    return None


def role_must_be_assignable_policy(
    role: Optional[ParticipantRole],
) -> Optional[RejectionReason]:
    if role is None or role is ParticipantRole.NONE:
        return RejectionReason(
            code=ReasonCode.INVALID_ROLE,
            message="Participant role must be one of the assignable roles.",
            policy_name="role_must_be_assignable_policy",
        )
    return None


def name_must_be_present_policy(name) -> Optional[RejectionReason]:
    if not name or not isinstance(name, str) or not name.strip():
        return RejectionReason(
            code=ReasonCode.EMPTY_NAME,
            message="Participant name must be non-empty.",
            policy_name="name_must_be_present_policy",
        )
    return None


def identity_must_not_be_active_policy(
    existing: Optional[Participant],
) -> Optional[RejectionReason]:
    """Re-registration over an active record is a conflict."""
    if existing is not None and existing.is_active:
        return RejectionReason(
            code=ReasonCode.ALREADY_REGISTERED,
            message=f"Participant '{existing.identity}' is already registered.",
            policy_name="identity_must_not_be_active_policy",
        )
    return None


def participant_must_exist_policy(
    identity: str,
    existing: Optional[Participant],
) -> Optional[RejectionReason]:
    if existing is None:
        return RejectionReason(
            code=ReasonCode.PARTICIPANT_NOT_FOUND,
            message=f"Participant '{identity}' is not registered.",
            policy_name="participant_must_exist_policy",
        )
    return None


def participant_must_be_active_policy(
    existing: Participant,
) -> Optional[RejectionReason]:
    if not existing.is_active:
        return RejectionReason(
            code=ReasonCode.PARTICIPANT_INACTIVE,
            message=f"Participant '{existing.identity}' is already inactive.",
            policy_name="participant_must_be_active_policy",
        )
    return None
