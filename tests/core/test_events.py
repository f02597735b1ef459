"""
Tests for core.events — envelope, subscriber registry, dispatch.
"""

from datetime import datetime, timedelta, timezone

import pytest

from core.events import (
    ALL_EVENTS,
    DuplicateSubscriberError,
    EventBusError,
    EventDraft,
    FeedEvent,
    InvalidEventTypeFormat,
    SubscriberRegistry,
    dispatch,
    dispatch_all,
)


NOW = datetime(2026, 2, 20, 12, 0, 0, tzinfo=timezone.utc)
CREATED = "batches.batch.created.v1"


def _event(event_type=CREATED, sequence=1):
    return FeedEvent(
        sequence=sequence,
        event_type=event_type,
        source_engine=event_type.split(".")[0],
        actor_id="producer-1",
        occurred_at=NOW,
        payload={"batch_id": 1},
        batch_id=1,
        action="CREATED",
        details="",
        location=None,
        previous_event_hash="GENESIS",
        event_hash="x" * 64,
    )


# ══════════════════════════════════════════════════════════════
# ENVELOPE
# ══════════════════════════════════════════════════════════════

class TestEventDraft:
    def test_valid_draft(self):
        draft = EventDraft(
            event_type=CREATED,
            source_engine="batches",
            actor_id="producer-1",
            occurred_at=NOW,
        )
        assert draft.payload == {}
        assert draft.batch_id is None

    def test_event_type_needs_three_segments(self):
        with pytest.raises(ValueError, match="engine.domain.action"):
            EventDraft(event_type="batches.created", source_engine="batches",
                       actor_id="a", occurred_at=NOW)

    def test_namespace_must_match_engine(self):
        with pytest.raises(ValueError, match="source_engine"):
            EventDraft(event_type=CREATED, source_engine="transfers",
                       actor_id="a", occurred_at=NOW)

    def test_naive_timestamp_rejected(self):
        with pytest.raises(ValueError, match="timezone-aware"):
            EventDraft(event_type=CREATED, source_engine="batches",
                       actor_id="a", occurred_at=datetime(2026, 1, 1))

    def test_timestamp_normalized_to_utc(self):
        local = datetime(2026, 2, 20, 14, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        draft = EventDraft(event_type=CREATED, source_engine="batches",
                           actor_id="a", occurred_at=local)
        assert draft.occurred_at == NOW
        assert draft.occurred_at.utcoffset() == timedelta(0)

    def test_payload_must_be_dict(self):
        with pytest.raises(TypeError):
            EventDraft(event_type=CREATED, source_engine="batches",
                       actor_id="a", occurred_at=NOW, payload=[1])


class TestFeedEvent:
    def test_hash_body_excludes_hashes(self):
        body = _event().hash_body()
        assert "event_hash" not in body
        assert "previous_event_hash" not in body
        assert body["occurred_at"] == NOW.isoformat()

    def test_to_dict_includes_hashes(self):
        data = _event().to_dict()
        assert data["previous_event_hash"] == "GENESIS"
        assert data["sequence"] == 1


# ══════════════════════════════════════════════════════════════
# SUBSCRIBER REGISTRY
# ══════════════════════════════════════════════════════════════

class TestSubscriberRegistry:
    def test_register_and_lookup(self):
        registry = SubscriberRegistry()
        handler = lambda event: None
        registry.register_subscriber(CREATED, handler, "ui")
        assert registry.get_subscribers(CREATED) == [(handler, "ui")]
        assert registry.has_subscribers(CREATED)
        assert not registry.has_subscribers("batches.batch.rejected.v1")

    def test_wildcard_subscribers_come_after_specific(self):
        registry = SubscriberRegistry()
        specific = lambda event: None
        everything = lambda event: None
        registry.register_subscriber(ALL_EVENTS, everything, "feed")
        registry.register_subscriber(CREATED, specific, "ui")
        assert registry.get_subscribers(CREATED) == [
            (specific, "ui"), (everything, "feed"),
        ]
        assert registry.subscriber_count("transfers.request.accepted.v1") == 1

    def test_invalid_event_type(self):
        with pytest.raises(InvalidEventTypeFormat):
            SubscriberRegistry().register_subscriber("created", lambda e: None, "x")

    def test_duplicate_handler_rejected(self):
        registry = SubscriberRegistry()
        handler = lambda event: None
        registry.register_subscriber(CREATED, handler, "ui")
        with pytest.raises(DuplicateSubscriberError):
            registry.register_subscriber(CREATED, handler, "ui-again")

    def test_handler_must_be_callable(self):
        with pytest.raises(EventBusError, match="callable"):
            SubscriberRegistry().register_subscriber(CREATED, "nope", "x")


# ══════════════════════════════════════════════════════════════
# DISPATCH
# ══════════════════════════════════════════════════════════════

class TestDispatch:
    def test_no_subscribers(self):
        report = dispatch(_event(), SubscriberRegistry())
        assert report.notified == 0
        assert report.delivered_cleanly

    def test_failing_subscriber_does_not_stop_others(self):
        registry = SubscriberRegistry()
        received = []

        def broken(event):
            raise RuntimeError("display offline")

        registry.register_subscriber(CREATED, broken, "display")
        registry.register_subscriber(CREATED, received.append, "recorder")

        report = dispatch(_event(), registry)

        assert report.notified == 1
        assert report.failed == 1
        assert report.failures[0].error_type == "RuntimeError"
        assert report.failures[0].subscriber_name == "display"
        assert report.to_dict()["subscribers_failed"] == 1
        assert len(received) == 1

    def test_dispatch_all_preserves_order(self):
        registry = SubscriberRegistry()
        seen = []
        registry.register_subscriber(ALL_EVENTS, lambda e: seen.append(e.sequence), "ui")

        reports = dispatch_all([_event(sequence=1), _event(sequence=2)], registry)

        assert seen == [1, 2]
        assert [r.sequence for r in reports] == [1, 2]
