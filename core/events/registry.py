"""
Custody Ledger Event Bus — Subscriber Registry
=================================================
Controls which handlers receive which feed events.

Rules:
- Event types must follow engine.domain.action format
- ALL_EVENTS ("*") subscribes a handler to the whole feed
- Multiple subscribers per event type allowed
- Duplicate handler for the same event type forbidden
- In-memory only, thread-safe
"""

import logging
from threading import Lock
from typing import Callable

from core.events.errors import (
    DuplicateSubscriberError,
    EventBusError,
    InvalidEventTypeFormat,
)

logger = logging.getLogger("custody.events")

ALL_EVENTS = "*"


class SubscriberRegistry:
    """
    In-memory registry of feed subscribers.

    Each entry maps an event_type (or ALL_EVENTS) to a list of
    (handler, subscriber_name) tuples, kept in registration order.
    """

    def __init__(self):
        self._subscribers: dict[str, list[tuple[Callable, str]]] = {}
        self._lock = Lock()

    @staticmethod
    def _validate_event_type_format(event_type: str) -> None:
        if event_type == ALL_EVENTS:
            return
        if not event_type or not isinstance(event_type, str):
            raise InvalidEventTypeFormat(event_type or "")

        parts = event_type.strip().split(".")
        if len(parts) < 3:
            raise InvalidEventTypeFormat(event_type)

    def register_subscriber(
        self,
        event_type: str,
        handler: Callable,
        subscriber_name: str,
    ) -> None:
        """
        Register a handler for an event type.

        Raises:
            InvalidEventTypeFormat:   Bad event type format
            DuplicateSubscriberError: Handler already registered
        """
        self._validate_event_type_format(event_type)

        if not callable(handler):
            raise EventBusError(
                f"Handler must be callable, got {type(handler)}."
            )

        handler_name = getattr(handler, "__qualname__", str(handler))

        with self._lock:
            entries = self._subscribers.setdefault(event_type, [])
            for existing_handler, _ in entries:
                if existing_handler is handler:
                    raise DuplicateSubscriberError(event_type, handler_name)
            entries.append((handler, subscriber_name))

        logger.info(
            f"Subscriber registered: {handler_name} → {event_type} "
            f"(subscriber: {subscriber_name})"
        )

    def get_subscribers(self, event_type: str) -> list[tuple[Callable, str]]:
        """
        Subscribers for an event type: specific ones first, then ALL_EVENTS ones.
        Returns an empty list if none (not an error).
        """
        with self._lock:
            specific = list(self._subscribers.get(event_type, []))
            wildcard = list(self._subscribers.get(ALL_EVENTS, []))
        return specific + wildcard

    def has_subscribers(self, event_type: str) -> bool:
        return bool(self.get_subscribers(event_type))

    def subscriber_count(self, event_type: str) -> int:
        return len(self.get_subscribers(event_type))
