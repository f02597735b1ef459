"""
Custody Ledger Command Layer — Rejection Model
=================================================
Structured rejection reasons for denied operations.

This is NOT an event. Rejected operations never reach the feed.
A RejectionReason is the explanation carried by the typed error
raised back to the caller.

Every rejection must be:
- Deterministic (same input + same state → same rejection)
- Machine-readable (code)
- Human-readable (message)
- Attributable (policy_name)
"""

from __future__ import annotations

from dataclasses import dataclass


# ══════════════════════════════════════════════════════════════
# REJECTION REASON (frozen explanation structure)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RejectionReason:
    """
    Structured reason for an operation rejection.

    Fields:
        code:        Machine-readable rejection code (e.g. 'BATCH_NOT_FOUND').
        message:     Human-readable explanation.
        policy_name: Name of the policy that caused rejection.
    """

    code: str
    message: str
    policy_name: str

    def __post_init__(self):
        if not self.code or not isinstance(self.code, str):
            raise ValueError("code must be a non-empty string.")

        if not self.message or not isinstance(self.message, str):
            raise ValueError("message must be a non-empty string.")

        if not self.policy_name or not isinstance(self.policy_name, str):
            raise ValueError("policy_name must be a non-empty string.")

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "policy_name": self.policy_name,
        }


# ══════════════════════════════════════════════════════════════
# STANDARD REJECTION CODES
# ══════════════════════════════════════════════════════════════

class ReasonCode:
    """
    Known rejection codes.

    Convention: SCREAMING_SNAKE_CASE. Every code maps to exactly one
    error class in core.commands.errors.
    """

    # ── Input ─────────────────────────────────────────────────
    EMPTY_IDENTITY = "EMPTY_IDENTITY"
    INVALID_ROLE = "INVALID_ROLE"
    EMPTY_NAME = "EMPTY_NAME"
    EMPTY_BATCH_TYPE = "EMPTY_BATCH_TYPE"
    EMPTY_ORIGIN = "EMPTY_ORIGIN"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    INVALID_STATUS = "INVALID_STATUS"
    EMPTY_REASON = "EMPTY_REASON"
    SELF_TRANSFER = "SELF_TRANSFER"
    RECIPIENT_NOT_REGISTERED = "RECIPIENT_NOT_REGISTERED"

    # ── Authorization ─────────────────────────────────────────
    NOT_ADMIN = "NOT_ADMIN"
    CALLER_NOT_REGISTERED = "CALLER_NOT_REGISTERED"
    NOT_BATCH_OWNER = "NOT_BATCH_OWNER"
    NOT_OWNER_OR_OVERSEER = "NOT_OWNER_OR_OVERSEER"
    NOT_TRANSFER_RECIPIENT = "NOT_TRANSFER_RECIPIENT"
    NOT_TRANSFER_REQUESTER = "NOT_TRANSFER_REQUESTER"

    # ── State ─────────────────────────────────────────────────
    PARTICIPANT_INACTIVE = "PARTICIPANT_INACTIVE"
    ILLEGAL_TRANSITION = "ILLEGAL_TRANSITION"
    TRANSFER_ALREADY_PENDING = "TRANSFER_ALREADY_PENDING"
    BATCH_NOT_TRANSFERABLE = "BATCH_NOT_TRANSFERABLE"
    REQUEST_NOT_ACTIVE = "REQUEST_NOT_ACTIVE"
    OWNER_CHANGED = "OWNER_CHANGED"

    # ── Lookup ────────────────────────────────────────────────
    PARTICIPANT_NOT_FOUND = "PARTICIPANT_NOT_FOUND"
    BATCH_NOT_FOUND = "BATCH_NOT_FOUND"
    REQUEST_NOT_FOUND = "REQUEST_NOT_FOUND"
    NO_ACTIVE_REQUEST = "NO_ACTIVE_REQUEST"

    # ── Conflict ──────────────────────────────────────────────
    ALREADY_REGISTERED = "ALREADY_REGISTERED"
