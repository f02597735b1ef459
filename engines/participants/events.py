"""
Custody Ledger Participants Engine — Event Types and Draft Builders
======================================================================
Participant events carry no batch id and no audit action; they are
feed-only records of registry changes.
"""

from __future__ import annotations

from datetime import datetime

from core.events.envelope import EventDraft
from engines.participants.models import ParticipantRole


PARTICIPANTS_ENGINE = "participants"

PARTICIPANT_REGISTERED_V1 = "participants.participant.registered.v1"
PARTICIPANT_DEACTIVATED_V1 = "participants.participant.deactivated.v1"

PARTICIPANT_EVENT_TYPES = (
    PARTICIPANT_REGISTERED_V1,
    PARTICIPANT_DEACTIVATED_V1,
)


def build_participant_registered(
    *,
    actor_id: str,
    identity: str,
    role: ParticipantRole,
    name: str,
    location: str,
    occurred_at: datetime,
) -> EventDraft:
    return EventDraft(
        event_type=PARTICIPANT_REGISTERED_V1,
        source_engine=PARTICIPANTS_ENGINE,
        actor_id=actor_id,
        occurred_at=occurred_at,
        details=f"Registered {identity} as {role.value}",
        location=location or None,
        payload={
            "identity": identity,
            "role": role.value,
            "name": name,
            "location": location,
        },
    )


def build_participant_deactivated(
    *,
    actor_id: str,
    identity: str,
    occurred_at: datetime,
) -> EventDraft:
    return EventDraft(
        event_type=PARTICIPANT_DEACTIVATED_V1,
        source_engine=PARTICIPANTS_ENGINE,
        actor_id=actor_id,
        occurred_at=occurred_at,
        details=f"Deactivated {identity}",
        payload={"identity": identity},
    )
