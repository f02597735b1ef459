"""
Custody Ledger Event Store — Django Journal
==============================================
Durable feed journal on the Django ORM.

append() runs in one transaction.atomic() block: the chain head is
read under select_for_update, continuity is checked, then all rows are
inserted. Any failure rolls the whole append back.
"""

from __future__ import annotations

import logging
from datetime import timezone
from typing import Sequence

from django.db import IntegrityError, transaction

from core.event_store.models import FeedEventRecord
from core.event_store.persistence.errors import JournalError
from core.event_store.persistence.memory import check_continuity
from core.events.envelope import FeedEvent

logger = logging.getLogger("custody.event_store")


def _to_record(event: FeedEvent) -> FeedEventRecord:
    return FeedEventRecord(
        sequence=event.sequence,
        event_type=event.event_type,
        source_engine=event.source_engine,
        actor_id=event.actor_id,
        batch_id=event.batch_id,
        action=event.action,
        details=event.details,
        location=event.location,
        occurred_at=event.occurred_at,
        payload=event.payload,
        previous_event_hash=event.previous_event_hash,
        event_hash=event.event_hash,
    )


def _to_event(record: FeedEventRecord) -> FeedEvent:
    return FeedEvent(
        sequence=record.sequence,
        event_type=record.event_type,
        source_engine=record.source_engine,
        actor_id=record.actor_id,
        occurred_at=record.occurred_at.astimezone(timezone.utc),
        payload=record.payload,
        batch_id=record.batch_id,
        action=record.action,
        details=record.details,
        location=record.location,
        previous_event_hash=record.previous_event_hash,
        event_hash=record.event_hash,
    )


class DjangoFeedJournal:
    """Feed journal backed by the custody_feed_event table."""

    def __init__(self, using: str = "default"):
        self._using = using

    def append(self, events: Sequence[FeedEvent]) -> None:
        if not events:
            return
        try:
            with transaction.atomic(using=self._using):
                head = (
                    FeedEventRecord.objects.using(self._using)
                    .select_for_update()
                    .order_by("-sequence")
                    .first()
                )
                check_continuity(head, events)
                FeedEventRecord.objects.using(self._using).bulk_create(
                    [_to_record(event) for event in events]
                )
        except IntegrityError as exc:
            logger.error(
                f"Feed append failed at sequence {events[0].sequence}: {exc}"
            )
            raise JournalError(
                f"Feed append failed at sequence {events[0].sequence}."
            ) from exc

    def load(self) -> tuple[FeedEvent, ...]:
        records = FeedEventRecord.objects.using(self._using).order_by("sequence")
        return tuple(_to_event(record) for record in records)

    def __len__(self) -> int:
        return FeedEventRecord.objects.using(self._using).count()
