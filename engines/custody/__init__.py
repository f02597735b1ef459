"""
Custody Ledger — Public API
=============================
"""

from engines.custody.ledger import CustodyLedger
from engines.custody.replay import rebuild_ledger, replay_feed


def build_custody_ledger(config, journal=None, clock=None, subscriber_registry=None):
    """Construct a ledger on journal (in-memory when omitted)."""
    return CustodyLedger(
        config,
        journal=journal,
        clock=clock,
        subscriber_registry=subscriber_registry,
    )


__all__ = [
    "CustodyLedger",
    "build_custody_ledger",
    "rebuild_ledger",
    "replay_feed",
]
