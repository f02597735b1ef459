"""
Custody Ledger Core Config — Administrative Configuration
============================================================
The administrative principal is designated at configuration time
and injected at construction. It is never inferred from call context.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CustodyConfig:
    """
    Construction-time configuration for a custody ledger.

    Fields:
        admin_id:                   Principal allowed to register and
                                    deactivate participants.
        admin_name:                 Display name used when the admin is
                                    bootstrapped as a participant.
        admin_location:             Location used for the same.
        register_admin_as_overseer: Register the admin as an active
                                    OVERSEER when the journal is empty.
    """

    admin_id: str
    admin_name: str = "Administrator"
    admin_location: str = ""
    register_admin_as_overseer: bool = True

    def __post_init__(self) -> None:
        if not self.admin_id or not isinstance(self.admin_id, str):
            raise ValueError("admin_id must be a non-empty string.")
        if not self.admin_name or not isinstance(self.admin_name, str):
            raise ValueError("admin_name must be a non-empty string.")

    @classmethod
    def from_settings(cls, settings: Any) -> "CustodyConfig":
        """Read CUSTODY_* values from a Django settings object (or any namespace)."""
        return cls(
            admin_id=getattr(settings, "CUSTODY_ADMIN_ID", ""),
            admin_name=getattr(settings, "CUSTODY_ADMIN_NAME", "Administrator"),
            admin_location=getattr(settings, "CUSTODY_ADMIN_LOCATION", ""),
            register_admin_as_overseer=bool(
                getattr(settings, "CUSTODY_REGISTER_ADMIN_AS_OVERSEER", True)
            ),
        )
