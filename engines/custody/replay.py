"""
Custody Ledger — Replay
=========================
Rebuild state from the change feed.

    replay_feed     verify the chain, then apply every event to the
                    given projections in sequence order
    rebuild_ledger  build a CustodyLedger whose state comes entirely
                    from an existing journal

Replay never re-runs authorization or validation: every event in a
verified feed was accepted when it was committed.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from core.config.custody import CustodyConfig
from core.event_store.hashing.verifier import verify_chain
from core.event_store.persistence.errors import JournalError
from core.event_store.writer import FeedJournal, Projection
from core.events.envelope import FeedEvent
from core.events.registry import SubscriberRegistry
from core.time.clock import Clock
from engines.custody.ledger import CustodyLedger

logger = logging.getLogger("custody.replay")


def replay_feed(
    events: Iterable[FeedEvent],
    projections: Sequence[Projection],
) -> int:
    """
    Apply a feed to fresh projections. Returns the number of events applied.

    Raises:
        JournalError: the feed's hash chain does not verify
    """
    events = tuple(events)
    verification = verify_chain(events)
    if not verification.valid:
        logger.error(
            f"Replay refused at sequence {verification.failed_sequence}: "
            f"{verification.code}"
        )
        raise JournalError(
            f"Cannot replay: chain broken at sequence "
            f"{verification.failed_sequence}: {verification.message}"
        )

    for event in events:
        for projection in projections:
            projection.apply(event)

    logger.info(f"Replayed {len(events)} feed events into {len(projections)} projections")
    return len(events)


def rebuild_ledger(
    config: CustodyConfig,
    journal: FeedJournal,
    clock: Optional[Clock] = None,
    subscriber_registry: Optional[SubscriberRegistry] = None,
) -> CustodyLedger:
    """CustodyLedger restored from journal. Nothing is written."""
    ledger = CustodyLedger(
        config,
        journal=journal,
        clock=clock,
        subscriber_registry=subscriber_registry,
        bootstrap=False,
    )
    logger.info(f"Ledger rebuilt at sequence {ledger.sequence}")
    return ledger
