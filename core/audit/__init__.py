"""
Custody Ledger Core Audit — Public API
=========================================
Append-only per-batch audit trail.
"""

from core.audit.log import AuditLog
from core.audit.models import AuditAction, AuditEntry

__all__ = [
    "AuditAction",
    "AuditEntry",
    "AuditLog",
]
