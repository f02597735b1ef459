"""
Custody Ledger Command Layer — Error Taxonomy
================================================
Typed failures returned synchronously to the caller.

    ValidationError     malformed / empty / zero input
    AuthorizationError  caller lacks the required role or ownership
    StateError          illegal transition, duplicate active request,
                        inactive request re-used
    NotFoundError       unknown batch / participant / request id
    ConflictError       duplicate registration

Every error aborts the whole operation. Nothing is retryable at this
layer; the caller re-submits with corrected input.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Type

from core.commands.rejection import ReasonCode, RejectionReason

logger = logging.getLogger("custody.commands")


class CustodyError(Exception):
    """Base error for rejected custody operations."""

    def __init__(self, reason: RejectionReason):
        self.reason = reason
        super().__init__(reason.message)

    @property
    def code(self) -> str:
        return self.reason.code


class ValidationError(CustodyError):
    pass


class AuthorizationError(CustodyError):
    pass


class StateError(CustodyError):
    pass


class NotFoundError(CustodyError):
    pass


class ConflictError(CustodyError):
    pass


ERROR_FOR_CODE: Dict[str, Type[CustodyError]] = {
    ReasonCode.EMPTY_IDENTITY: ValidationError,
    ReasonCode.INVALID_ROLE: ValidationError,
    ReasonCode.EMPTY_NAME: ValidationError,
    ReasonCode.EMPTY_BATCH_TYPE: ValidationError,
    ReasonCode.EMPTY_ORIGIN: ValidationError,
    ReasonCode.INVALID_QUANTITY: ValidationError,
    ReasonCode.INVALID_STATUS: ValidationError,
    ReasonCode.EMPTY_REASON: ValidationError,
    ReasonCode.SELF_TRANSFER: ValidationError,
    ReasonCode.RECIPIENT_NOT_REGISTERED: ValidationError,
    ReasonCode.NOT_ADMIN: AuthorizationError,
    ReasonCode.CALLER_NOT_REGISTERED: AuthorizationError,
    ReasonCode.NOT_BATCH_OWNER: AuthorizationError,
    ReasonCode.NOT_OWNER_OR_OVERSEER: AuthorizationError,
    ReasonCode.NOT_TRANSFER_RECIPIENT: AuthorizationError,
    ReasonCode.NOT_TRANSFER_REQUESTER: AuthorizationError,
    ReasonCode.PARTICIPANT_INACTIVE: StateError,
    ReasonCode.ILLEGAL_TRANSITION: StateError,
    ReasonCode.TRANSFER_ALREADY_PENDING: StateError,
    ReasonCode.BATCH_NOT_TRANSFERABLE: StateError,
    ReasonCode.REQUEST_NOT_ACTIVE: StateError,
    ReasonCode.OWNER_CHANGED: StateError,
    ReasonCode.PARTICIPANT_NOT_FOUND: NotFoundError,
    ReasonCode.BATCH_NOT_FOUND: NotFoundError,
    ReasonCode.REQUEST_NOT_FOUND: NotFoundError,
    ReasonCode.NO_ACTIVE_REQUEST: NotFoundError,
    ReasonCode.ALREADY_REGISTERED: ConflictError,
}


def error_for(reason: RejectionReason) -> CustodyError:
    """Build the typed error for a rejection. Unknown codes are state errors."""
    error_cls = ERROR_FOR_CODE.get(reason.code, StateError)
    return error_cls(reason)


def raise_rejection(reason: Optional[RejectionReason]) -> None:
    """Raise the typed error for a rejection; no-op when the policy passed."""
    if reason is not None:
        logger.info(
            f"Rejected by {reason.policy_name}: {reason.code} ({reason.message})"
        )
        raise error_for(reason)
