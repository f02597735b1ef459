"""
Custody Ledger Participants Engine — Models
==============================================
Registered actors and their closed set of roles.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class ParticipantRole(Enum):
    NONE = "NONE"  # the null role; never assignable
    PRODUCER = "PRODUCER"
    DISTRIBUTOR = "DISTRIBUTOR"
    RECEIVER = "RECEIVER"
    OVERSEER = "OVERSEER"
    CONSUMER = "CONSUMER"


ASSIGNABLE_ROLES = frozenset(
    role for role in ParticipantRole if role is not ParticipantRole.NONE
)


def coerce_role(role) -> Optional[ParticipantRole]:
    """ParticipantRole from an enum member or its name/value; None if unknown."""
    if isinstance(role, ParticipantRole):
        return role
    if isinstance(role, str):
        key = role.strip().upper()
        try:
            return ParticipantRole(key)
        except ValueError:
            return None
    return None


@dataclass(frozen=True)
class Participant:
    """Immutable snapshot of a registered participant."""
    identity: str
    role: ParticipantRole
    name: str
    location: str
    is_active: bool
    registered_at: datetime
    deactivated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "identity": self.identity,
            "role": self.role.value,
            "name": self.name,
            "location": self.location,
            "is_active": self.is_active,
            "registered_at": self.registered_at.isoformat(),
            "deactivated_at": (
                self.deactivated_at.isoformat() if self.deactivated_at else None
            ),
        }
