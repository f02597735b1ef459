"""
Custody Ledger Event Bus — Public API
========================================
The journal seals the change feed. The bus distributes it.
Truth must exist before it is heard.
"""

from core.events.dispatcher import (
    DispatchReport,
    SubscriberFailure,
    dispatch,
    dispatch_all,
)
from core.events.envelope import EventDraft, FeedEvent, envelope_body
from core.events.errors import (
    DuplicateSubscriberError,
    EventBusError,
    InvalidEventTypeFormat,
)
from core.events.registry import ALL_EVENTS, SubscriberRegistry

__all__ = [
    "dispatch",
    "dispatch_all",
    "DispatchReport",
    "SubscriberFailure",
    "EventDraft",
    "FeedEvent",
    "envelope_body",
    "SubscriberRegistry",
    "ALL_EVENTS",
    "EventBusError",
    "InvalidEventTypeFormat",
    "DuplicateSubscriberError",
]
