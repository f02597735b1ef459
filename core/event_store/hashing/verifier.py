"""
Custody Ledger Event Store — Hash-Chain Verifier
===================================================
Walks a feed in sequence order and checks, for every event:

1. sequence is exactly previous sequence + 1 (first is 1)
2. previous_event_hash equals the preceding event's event_hash
   (GENESIS_HASH for the first event)
3. event_hash equals the recomputed hash of the envelope

The verifier never corrects anything. The first failure is reported.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from core.event_store.hashing.errors import HashRejectionCode
from core.event_store.hashing.hasher import GENESIS_HASH, compute_event_hash
from core.events.envelope import FeedEvent


@dataclass(frozen=True)
class ChainVerification:
    """Outcome of verifying a feed."""

    valid: bool
    events_checked: int
    failed_sequence: Optional[int] = None
    code: Optional[str] = None
    message: str = ""


def verify_chain(events: Iterable[FeedEvent]) -> ChainVerification:
    expected_previous = GENESIS_HASH
    expected_sequence = 1
    checked = 0

    for event in events:
        if event.sequence != expected_sequence:
            return ChainVerification(
                valid=False,
                events_checked=checked,
                failed_sequence=event.sequence,
                code=HashRejectionCode.SEQUENCE_GAP,
                message=(
                    f"Expected sequence {expected_sequence}, "
                    f"found {event.sequence}."
                ),
            )

        if event.previous_event_hash != expected_previous:
            return ChainVerification(
                valid=False,
                events_checked=checked,
                failed_sequence=event.sequence,
                code=HashRejectionCode.HASH_CHAIN_BROKEN,
                message=(
                    f"Event {event.sequence} links to "
                    f"'{event.previous_event_hash}', "
                    f"expected '{expected_previous}'."
                ),
            )

        computed = compute_event_hash(event.hash_body(), event.previous_event_hash)
        if computed != event.event_hash:
            return ChainVerification(
                valid=False,
                events_checked=checked,
                failed_sequence=event.sequence,
                code=HashRejectionCode.HASH_COMPUTATION_MISMATCH,
                message=(
                    f"Event {event.sequence} hash does not match its content."
                ),
            )

        checked += 1
        expected_previous = event.event_hash
        expected_sequence += 1

    return ChainVerification(valid=True, events_checked=checked)
