"""
Custody Ledger Event Store — Feed Event Record
================================================
Durable, append-only storage of the change feed (Django ORM).

RULES:
- INSERT only. Rows are never updated or deleted.
- sequence is the feed position (1-based, contiguous)
- previous_event_hash → event_hash forms a tamper-evident chain

This file contains NO business logic.
"""

from django.db import models


class FeedEventRecord(models.Model):
    """One committed feed event."""

    sequence = models.PositiveBigIntegerField(
        primary_key=True,
        help_text="Monotonic feed position. Never reused.",
    )

    event_type = models.CharField(
        max_length=255,
        help_text="engine.domain.action.vN (e.g. batches.batch.created.v1).",
    )

    source_engine = models.CharField(max_length=100)

    actor_id = models.CharField(
        max_length=255,
        help_text="Verified caller identity that performed the operation.",
    )

    batch_id = models.PositiveBigIntegerField(
        null=True,
        blank=True,
        help_text="Batch the event belongs to. Null for participant events.",
    )

    action = models.CharField(
        max_length=32,
        null=True,
        blank=True,
        help_text="Audit action tag (CREATED, STATUS_UPDATED, ...).",
    )

    details = models.TextField(blank=True, default="")

    location = models.TextField(null=True, blank=True)

    occurred_at = models.DateTimeField()

    payload = models.JSONField(
        help_text="Data sufficient to rebuild ledger state by replay.",
    )

    previous_event_hash = models.CharField(max_length=64)

    event_hash = models.CharField(max_length=64, unique=True)

    class Meta:
        db_table = "custody_feed_event"
        ordering = ["sequence"]
        indexes = [
            models.Index(
                fields=["batch_id", "sequence"],
                name="idx_feed_batch_seq",
            ),
            models.Index(
                fields=["event_type"],
                name="idx_feed_type",
            ),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise PermissionError(
                "Feed events are immutable. Cannot update a persisted event."
            )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise PermissionError("Feed events are never deleted.")

    def __str__(self):
        return f"[{self.sequence}] {self.event_type} (batch {self.batch_id})"
