"""
Custody Ledger Event Bus — Dispatcher
========================================
Hands committed feed events to subscribers, in sequence order.

A subscriber that raises is logged and recorded in the DispatchReport;
the remaining subscribers still run and the committed event stands.
Only committed events reach this module.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List

from core.events.envelope import FeedEvent
from core.events.registry import SubscriberRegistry

logger = logging.getLogger("custody.events")


@dataclass(frozen=True)
class SubscriberFailure:
    subscriber_name: str
    handler_name: str
    error_type: str
    error: str


@dataclass(frozen=True)
class DispatchReport:
    """Outcome of delivering one feed event."""

    event_type: str
    sequence: int
    notified: int = 0
    failures: tuple[SubscriberFailure, ...] = ()

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def delivered_cleanly(self) -> bool:
        return not self.failures

    def to_dict(self) -> dict:
        return {
            "event_type": self.event_type,
            "sequence": self.sequence,
            "subscribers_notified": self.notified,
            "subscribers_failed": self.failed,
            "failures": [
                {
                    "subscriber": f.subscriber_name,
                    "handler": f.handler_name,
                    "error_type": f.error_type,
                    "error": f.error,
                }
                for f in self.failures
            ],
        }


def dispatch(event: FeedEvent, registry: SubscriberRegistry) -> DispatchReport:
    """Deliver one event to its subscribers. Never raises."""
    notified = 0
    failures: List[SubscriberFailure] = []

    for handler, subscriber_name in registry.get_subscribers(event.event_type):
        handler_name = getattr(handler, "__qualname__", repr(handler))
        try:
            handler(event)
        except Exception as exc:
            failures.append(SubscriberFailure(
                subscriber_name=subscriber_name,
                handler_name=handler_name,
                error_type=type(exc).__name__,
                error=str(exc),
            ))
            logger.error(
                f"Subscriber {subscriber_name} ({handler_name}) failed on "
                f"{event.event_type} #{event.sequence}: {exc}",
                exc_info=True,
            )
        else:
            notified += 1

    return DispatchReport(
        event_type=event.event_type,
        sequence=event.sequence,
        notified=notified,
        failures=tuple(failures),
    )


def dispatch_all(
    events: Iterable[FeedEvent],
    registry: SubscriberRegistry,
) -> tuple[DispatchReport, ...]:
    """Deliver events one after another, in the order given."""
    reports = tuple(dispatch(event, registry) for event in events)
    failed = sum(report.failed for report in reports)
    if failed:
        logger.warning(
            f"{failed} subscriber failure(s) while dispatching "
            f"{len(reports)} event(s)"
        )
    return reports
