"""
Custody Ledger Event Store — Ledger Writer
=============================================
The single serialized write path shared by every engine.

Write flow:
    1. Service enters writer.transaction() (process-wide re-entrant lock)
    2. Service validates against current projections — no mutation
    3. Service calls writer.commit(drafts)
         a. seal: assign next sequence + hash chain
         b. journal.append(sealed)     (all-or-nothing)
         c. apply each event to every registered projection
         d. queue for dispatch; the outermost commit delivers the queue
            to feed subscribers in sequence order
    4. Lock released

If the journal append fails nothing is applied and nothing is
dispatched. Reads take the same lock, so no reader ever observes a
half-applied operation.
"""

from __future__ import annotations

import logging
from collections import deque
from contextlib import contextmanager
from threading import RLock
from typing import Iterable, Iterator, List, Optional, Protocol, Sequence

from core.event_store.hashing.hasher import GENESIS_HASH, compute_event_hash
from core.event_store.hashing.verifier import ChainVerification, verify_chain
from core.event_store.persistence.errors import JournalError
from core.event_store.persistence.memory import InMemoryFeedJournal
from core.events.dispatcher import DispatchReport, dispatch_all
from core.events.envelope import EventDraft, FeedEvent, envelope_body
from core.events.registry import SubscriberRegistry

logger = logging.getLogger("custody.event_store")


# ══════════════════════════════════════════════════════════════
# PROTOCOLS
# ══════════════════════════════════════════════════════════════

class FeedJournal(Protocol):
    def append(self, events: Sequence[FeedEvent]) -> None:
        ...

    def load(self) -> tuple[FeedEvent, ...]:
        ...


class Projection(Protocol):
    def apply(self, event: FeedEvent) -> None:
        ...


# ══════════════════════════════════════════════════════════════
# LEDGER WRITER
# ══════════════════════════════════════════════════════════════

class LedgerWriter:
    """Serializes all mutations and owns the feed head."""

    def __init__(
        self,
        journal: Optional[FeedJournal] = None,
        subscriber_registry: Optional[SubscriberRegistry] = None,
    ):
        self._journal = journal if journal is not None else InMemoryFeedJournal()
        self._subscribers = subscriber_registry or SubscriberRegistry()
        self._projections: List[Projection] = []
        self._lock = RLock()
        self._sequence = 0
        self._head_hash = GENESIS_HASH
        self._last_dispatch: tuple[DispatchReport, ...] = ()
        self._pending: deque = deque()
        self._draining = False

    def register_projection(self, projection: Projection) -> None:
        if not hasattr(projection, "apply") or not callable(projection.apply):
            raise TypeError("Projection must have callable .apply() method.")
        with self._lock:
            self._projections.append(projection)

    @contextmanager
    def transaction(self) -> Iterator["LedgerWriter"]:
        """Hold the write lock across validate + commit."""
        with self._lock:
            yield self

    # Reads share the lock so they see whole operations only.
    snapshot = transaction

    # ══════════════════════════════════════════════════════════
    # COMMIT
    # ══════════════════════════════════════════════════════════

    def commit(self, drafts: Sequence[EventDraft]) -> tuple[FeedEvent, ...]:
        if not drafts:
            raise ValueError("commit requires at least one event draft.")

        with self._lock:
            sealed = self._seal(drafts)

            try:
                self._journal.append(sealed)
            except JournalError:
                logger.error(
                    f"Journal append refused at sequence {sealed[0].sequence}; "
                    f"nothing applied."
                )
                raise

            self._sequence = sealed[-1].sequence
            self._head_hash = sealed[-1].event_hash
            self._apply(sealed)

            self._pending.extend(sealed)
            if not self._draining:
                self._drain()

        return sealed

    def _drain(self) -> None:
        """
        Dispatch queued events in sequence order. A subscriber that commits
        during dispatch only queues its events; the outermost commit
        delivers them after the ones already queued.
        """
        self._draining = True
        try:
            self._last_dispatch = dispatch_all(self._take_pending(), self._subscribers)
        finally:
            self._draining = False

    def _take_pending(self) -> Iterator[FeedEvent]:
        while self._pending:
            yield self._pending.popleft()

    def _seal(self, drafts: Sequence[EventDraft]) -> tuple[FeedEvent, ...]:
        sequence = self._sequence
        previous = self._head_hash
        sealed = []

        for draft in drafts:
            sequence += 1
            body = envelope_body(
                sequence=sequence,
                event_type=draft.event_type,
                source_engine=draft.source_engine,
                actor_id=draft.actor_id,
                occurred_at=draft.occurred_at,
                payload=draft.payload,
                batch_id=draft.batch_id,
                action=draft.action,
                details=draft.details,
                location=draft.location,
            )
            event_hash = compute_event_hash(body, previous)
            sealed.append(FeedEvent(
                sequence=sequence,
                event_type=draft.event_type,
                source_engine=draft.source_engine,
                actor_id=draft.actor_id,
                occurred_at=draft.occurred_at,
                payload=draft.payload,
                batch_id=draft.batch_id,
                action=draft.action,
                details=draft.details,
                location=draft.location,
                previous_event_hash=previous,
                event_hash=event_hash,
            ))
            previous = event_hash

        return tuple(sealed)

    def _apply(self, events: Iterable[FeedEvent]) -> None:
        for event in events:
            for projection in self._projections:
                projection.apply(event)

    # ══════════════════════════════════════════════════════════
    # RESTORE (startup from an existing journal)
    # ══════════════════════════════════════════════════════════

    def restore(self) -> int:
        """
        Rebuild registered projections from the journal.
        Refuses a journal whose chain does not verify. Returns events applied.
        """
        with self._lock:
            if self._sequence:
                raise JournalError("restore() is only valid on a fresh writer.")

            events = self._journal.load()
            verification = verify_chain(events)
            if not verification.valid:
                raise JournalError(
                    f"Journal chain broken at sequence "
                    f"{verification.failed_sequence}: {verification.message}"
                )

            self._apply(events)
            if events:
                self._sequence = events[-1].sequence
                self._head_hash = events[-1].event_hash

        logger.info(f"Restored {len(events)} feed events from journal")
        return len(events)

    # ══════════════════════════════════════════════════════════
    # READS
    # ══════════════════════════════════════════════════════════

    def feed(self, after_sequence: int = 0) -> tuple[FeedEvent, ...]:
        """Committed events with sequence > after_sequence, in order."""
        with self._lock:
            return tuple(
                event for event in self._journal.load()
                if event.sequence > after_sequence
            )

    def verify(self) -> ChainVerification:
        with self._lock:
            return verify_chain(self._journal.load())

    @property
    def sequence(self) -> int:
        return self._sequence

    @property
    def head_hash(self) -> str:
        return self._head_hash

    @property
    def last_dispatch(self) -> tuple[DispatchReport, ...]:
        """Reports for the most recent outermost commit, one per event delivered."""
        return self._last_dispatch

    @property
    def subscribers(self) -> SubscriberRegistry:
        return self._subscribers
