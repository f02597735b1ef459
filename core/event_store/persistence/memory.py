"""
Custody Ledger Event Store — In-Memory Journal
=================================================
Default journal for a single process. Appends are all-or-nothing:
a batch of events either extends the chain as a whole or is refused.
"""

from __future__ import annotations

from threading import Lock
from typing import List, Sequence

from core.event_store.hashing.hasher import GENESIS_HASH
from core.event_store.persistence.errors import (
    JournalConflictError,
    JournalError,
)
from core.events.envelope import FeedEvent


class InMemoryFeedJournal:
    """Append-only list of sealed feed events."""

    def __init__(self):
        self._events: List[FeedEvent] = []
        self._lock = Lock()

    def append(self, events: Sequence[FeedEvent]) -> None:
        if not events:
            return
        with self._lock:
            check_continuity(self._events[-1] if self._events else None, events)
            self._events.extend(events)

    def load(self) -> tuple[FeedEvent, ...]:
        with self._lock:
            return tuple(self._events)

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)


def check_continuity(head, events: Sequence[FeedEvent]) -> None:
    """Refuse events that do not continue the chain from head."""
    expected_sequence = head.sequence + 1 if head is not None else 1
    expected_previous = head.event_hash if head is not None else GENESIS_HASH

    for event in events:
        if event.sequence != expected_sequence:
            raise JournalConflictError(expected_sequence, event.sequence)
        if event.previous_event_hash != expected_previous:
            raise JournalError(
                f"Event {event.sequence} does not link to the journal head."
            )
        expected_sequence += 1
        expected_previous = event.event_hash
