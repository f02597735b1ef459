"""
Custody Ledger Core Config — Public API
==========================================
Construction-time configuration (administrative principal).
"""

from core.config.custody import CustodyConfig

__all__ = [
    "CustodyConfig",
]
