"""
Custody Ledger — Facade
=========================
Wires every component to one shared LedgerWriter:

    LedgerWriter ─┬─ ParticipantProjectionStore   (ParticipantRegistry)
                  ├─ BatchProjectionStore         (BatchLedger)
                  ├─ OwnershipHistory             (BatchLedger)
                  ├─ AuditLog                     (BatchLedger)
                  └─ TransferProjectionStore      (TransferCoordinator)

On construction the projections are restored from the journal. When
the journal is empty and the config asks for it, the administrator is
registered as an active OVERSEER.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from core.audit.log import AuditLog
from core.config.custody import CustodyConfig
from core.event_store.hashing.verifier import ChainVerification
from core.event_store.writer import FeedJournal, LedgerWriter
from core.events.envelope import FeedEvent
from core.events.registry import ALL_EVENTS, SubscriberRegistry
from core.time.clock import Clock, SystemClock
from engines.batches.history import OwnershipHistory
from engines.batches.services import BatchLedger
from engines.participants.models import ParticipantRole
from engines.participants.services import ParticipantRegistry
from engines.transfers.services import TransferCoordinator

logger = logging.getLogger("custody.ledger")


class CustodyLedger:

    def __init__(
        self,
        config: CustodyConfig,
        *,
        journal: Optional[FeedJournal] = None,
        clock: Optional[Clock] = None,
        subscriber_registry: Optional[SubscriberRegistry] = None,
        bootstrap: bool = True,
    ):
        self._config = config
        self._clock = clock or SystemClock()
        self._writer = LedgerWriter(
            journal=journal,
            subscriber_registry=subscriber_registry,
        )

        self.participants = ParticipantRegistry(
            writer=self._writer,
            admin_id=config.admin_id,
            clock=self._clock,
        )
        self.batches = BatchLedger(
            writer=self._writer,
            participants=self.participants,
            clock=self._clock,
        )
        self.transfers = TransferCoordinator(
            writer=self._writer,
            batch_ledger=self.batches,
            participants=self.participants,
            clock=self._clock,
        )

        restored = self._writer.restore()
        if bootstrap and restored == 0 and config.register_admin_as_overseer:
            self._bootstrap_admin()

    def _bootstrap_admin(self) -> None:
        self.participants.register(
            self._config.admin_id,
            self._config.admin_id,
            ParticipantRole.OVERSEER,
            self._config.admin_name,
            self._config.admin_location,
        )
        logger.info(f"Administrator {self._config.admin_id} bootstrapped as OVERSEER")

    # ══════════════════════════════════════════════════════════
    # FEED
    # ══════════════════════════════════════════════════════════

    def subscribe(
        self,
        handler: Callable[[FeedEvent], None],
        event_type: str = ALL_EVENTS,
        subscriber_name: Optional[str] = None,
    ) -> None:
        """Receive committed feed events (the whole feed by default)."""
        self._writer.subscribers.register_subscriber(
            event_type,
            handler,
            subscriber_name or getattr(handler, "__qualname__", repr(handler)),
        )

    def feed(self, after_sequence: int = 0) -> tuple[FeedEvent, ...]:
        return self._writer.feed(after_sequence)

    def verify_integrity(self) -> ChainVerification:
        verification = self._writer.verify()
        if not verification.valid:
            logger.error(
                f"Feed integrity check failed at sequence "
                f"{verification.failed_sequence}: {verification.message}"
            )
        return verification

    # ══════════════════════════════════════════════════════════
    # STATE
    # ══════════════════════════════════════════════════════════

    @property
    def config(self) -> CustodyConfig:
        return self._config

    @property
    def writer(self) -> LedgerWriter:
        return self._writer

    @property
    def audit_log(self) -> AuditLog:
        return self.batches.audit_log

    @property
    def ownership_history(self) -> OwnershipHistory:
        return self.batches.ownership_history

    @property
    def sequence(self) -> int:
        return self._writer.sequence

    def export_state(self) -> dict:
        """Plain-dict view of every projection, for comparison and debugging."""
        with self._writer.snapshot():
            batch_ids = range(1, self.batches.get_total_batches() + 1)
            return {
                "sequence": self._writer.sequence,
                "head_hash": self._writer.head_hash,
                "participants": [
                    p.to_dict() for p in self.participants.list_participants()
                ],
                "batches": [
                    self.batches.get_batch(batch_id).to_dict()
                    for batch_id in batch_ids
                ],
                "ownership_history": {
                    batch_id: list(self.ownership_history.get(batch_id))
                    for batch_id in batch_ids
                },
                "audit_trails": {
                    batch_id: [e.to_dict() for e in self.audit_log.get_trail(batch_id)]
                    for batch_id in batch_ids
                },
                "transfer_requests": [
                    self.transfers.get_transfer_request(request_id).to_dict()
                    for request_id in range(1, self.transfers.get_total_requests() + 1)
                ],
            }
