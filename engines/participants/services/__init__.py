"""
Custody Ledger Participants Engine — Application Service
===========================================================
ParticipantRegistry: the authoritative set of known actors and roles.

Mutations (register / deactivate) are restricted to the configured
administrative principal and go through the shared LedgerWriter.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Dict, List, Optional

from core.commands.errors import raise_rejection
from core.event_store.writer import LedgerWriter
from core.events.envelope import FeedEvent
from core.time.clock import Clock, SystemClock
from engines.participants.events import (
    PARTICIPANT_DEACTIVATED_V1,
    PARTICIPANT_REGISTERED_V1,
    build_participant_deactivated,
    build_participant_registered,
)
from engines.participants.models import (
    Participant,
    ParticipantRole,
    coerce_role,
)
from engines.participants.policies import (
    caller_must_be_admin_policy,
    identity_must_be_present_policy,
    identity_must_not_be_active_policy,
    name_must_be_present_policy,
    participant_must_be_active_policy,
    participant_must_exist_policy,
    role_must_be_assignable_policy,
)

logger = logging.getLogger("custody.participants")


# ══════════════════════════════════════════════════════════════
# PROJECTION STORE
# ══════════════════════════════════════════════════════════════

class ParticipantProjectionStore:
    """In-memory participant state, built only from feed events."""

    def __init__(self):
        self._participants: Dict[str, Participant] = {}

    def apply(self, event: FeedEvent) -> None:
        payload = event.payload

        if event.event_type == PARTICIPANT_REGISTERED_V1:
            self._participants[payload["identity"]] = Participant(
                identity=payload["identity"],
                role=ParticipantRole(payload["role"]),
                name=payload["name"],
                location=payload["location"],
                is_active=True,
                registered_at=event.occurred_at,
            )

        elif event.event_type == PARTICIPANT_DEACTIVATED_V1:
            current = self._participants.get(payload["identity"])
            if current is not None:
                self._participants[payload["identity"]] = dataclasses.replace(
                    current,
                    is_active=False,
                    deactivated_at=event.occurred_at,
                )

    def get(self, identity: str) -> Optional[Participant]:
        return self._participants.get(identity)

    def all(self) -> List[Participant]:
        return list(self._participants.values())


# ══════════════════════════════════════════════════════════════
# APPLICATION SERVICE
# ══════════════════════════════════════════════════════════════

class ParticipantRegistry:
    """Authoritative registry of participants."""

    def __init__(
        self,
        *,
        writer: LedgerWriter,
        admin_id: str,
        clock: Clock | None = None,
        projection_store: ParticipantProjectionStore | None = None,
    ):
        self._writer = writer
        self._admin_id = admin_id
        self._clock = clock or SystemClock()
        self._store = projection_store or ParticipantProjectionStore()
        self._writer.register_projection(self._store)

    @property
    def admin_id(self) -> str:
        return self._admin_id

    # ══════════════════════════════════════════════════════════
    # MUTATIONS
    # ══════════════════════════════════════════════════════════

    def register(
        self,
        caller_id: str,
        identity: str,
        role,
        name: str,
        location: str = "",
    ) -> Participant:
        """
        Register (or freshly re-register a deactivated) participant.

        Raises AuthorizationError for non-admin callers, ValidationError
        for an empty identity/name or the null role, ConflictError when
        the identity is already active.
        """
        with self._writer.transaction():
            raise_rejection(caller_must_be_admin_policy(caller_id, self._admin_id))
            raise_rejection(identity_must_be_present_policy(identity))
            parsed_role = coerce_role(role)
            raise_rejection(role_must_be_assignable_policy(parsed_role))
            raise_rejection(name_must_be_present_policy(name))
            raise_rejection(
                identity_must_not_be_active_policy(self._store.get(identity))
            )

            self._writer.commit([
                build_participant_registered(
                    actor_id=caller_id,
                    identity=identity,
                    role=parsed_role,
                    name=name,
                    location=location or "",
                    occurred_at=self._clock.now_utc(),
                )
            ])
            participant = self._store.get(identity)

        logger.info(f"Participant registered: {identity} ({parsed_role.value})")
        return participant

    def deactivate(self, caller_id: str, identity: str) -> Participant:
        """Flip the active flag off. Irreversible except by fresh registration."""
        with self._writer.transaction():
            raise_rejection(caller_must_be_admin_policy(caller_id, self._admin_id))
            existing = self._store.get(identity)
            raise_rejection(participant_must_exist_policy(identity, existing))
            raise_rejection(participant_must_be_active_policy(existing))

            self._writer.commit([
                build_participant_deactivated(
                    actor_id=caller_id,
                    identity=identity,
                    occurred_at=self._clock.now_utc(),
                )
            ])
            participant = self._store.get(identity)

        logger.info(f"Participant deactivated: {identity}")
        return participant

    # ══════════════════════════════════════════════════════════
    # READS
    # ══════════════════════════════════════════════════════════

    def is_active(self, identity: str) -> bool:
        with self._writer.snapshot():
            participant = self._store.get(identity)
            return participant is not None and participant.is_active

    def has_role(self, identity: str, role: ParticipantRole) -> bool:
        """True only for an ACTIVE participant holding the role."""
        with self._writer.snapshot():
            participant = self._store.get(identity)
            return (
                participant is not None
                and participant.is_active
                and participant.role is role
            )

    def get(self, identity: str) -> Participant:
        with self._writer.snapshot():
            participant = self._store.get(identity)
        raise_rejection(participant_must_exist_policy(identity, participant))
        return participant

    def find(self, identity: str) -> Optional[Participant]:
        with self._writer.snapshot():
            return self._store.get(identity)

    def list_participants(self, active_only: bool = False) -> List[Participant]:
        with self._writer.snapshot():
            participants = self._store.all()
        if active_only:
            participants = [p for p in participants if p.is_active]
        return sorted(participants, key=lambda p: p.registered_at)

    @property
    def projection_store(self) -> ParticipantProjectionStore:
        return self._store
