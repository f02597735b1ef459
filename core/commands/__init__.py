"""
Custody Ledger Command Layer — Rejections and Errors
=======================================================
Every operation either commits fully or is rejected with a reason.
Rejections surface to the caller as typed errors.
"""

from core.commands.errors import (
    AuthorizationError,
    ConflictError,
    CustodyError,
    ERROR_FOR_CODE,
    NotFoundError,
    StateError,
    ValidationError,
    error_for,
    raise_rejection,
)
from core.commands.rejection import (
    ReasonCode,
    RejectionReason,
)

__all__ = [
    # ── Rejection ─────────────────────────────────────────────
    "RejectionReason",
    "ReasonCode",
    # ── Errors ────────────────────────────────────────────────
    "CustodyError",
    "ValidationError",
    "AuthorizationError",
    "StateError",
    "NotFoundError",
    "ConflictError",
    "ERROR_FOR_CODE",
    "error_for",
    "raise_rejection",
]
