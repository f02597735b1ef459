"""
Tests for engines.batches — BatchLedger, the status state machine
and OwnershipHistory.
"""

from datetime import datetime, timezone

import pytest

from core.audit.models import AuditAction
from core.commands import (
    AuthorizationError,
    NotFoundError,
    ReasonCode,
    StateError,
    ValidationError,
)
from core.config import CustodyConfig
from core.time import FixedClock
from engines.batches.models import BatchStatus, coerce_status
from engines.batches.policies import can_update_status, is_legal_transition
from engines.custody import build_custody_ledger
from engines.participants.models import ParticipantRole


NOW = datetime(2026, 2, 20, 12, 0, 0, tzinfo=timezone.utc)
ADMIN = "admin"
P = "producer-1"
R = "receiver-1"
D = "distributor-1"


def _ledger():
    clock = FixedClock(NOW)
    ledger = build_custody_ledger(CustodyConfig(admin_id=ADMIN), clock=clock)
    ledger.participants.register(ADMIN, P, ParticipantRole.PRODUCER, "Green Farm", "Site1")
    ledger.participants.register(ADMIN, R, ParticipantRole.RECEIVER, "Port Depot", "Port")
    ledger.participants.register(ADMIN, D, ParticipantRole.DISTRIBUTOR, "Trucks", "Road")
    return ledger, clock


def _fuel_batch(ledger):
    return ledger.batches.register_batch(P, "FuelX", 1000, "Site1", "ipfs://fuelx")


def _assert_history_consistent(ledger, batch_id):
    batch = ledger.batches.get_batch(batch_id)
    history = ledger.batches.get_ownership_history(batch_id)
    assert history[0] == batch.creator_id
    assert history[-1] == batch.current_owner
    assert len(history) == 1 + ledger.ownership_history.accepted_transfer_count(batch_id)


# ══════════════════════════════════════════════════════════════
# PREDICATES
# ══════════════════════════════════════════════════════════════

class TestPredicates:
    def test_is_legal_transition(self):
        assert is_legal_transition(BatchStatus.CREATED, BatchStatus.IN_TRANSIT)
        assert not is_legal_transition(BatchStatus.DELIVERED, BatchStatus.CREATED)
        assert not is_legal_transition(BatchStatus.APPROVED, BatchStatus.APPROVED)

    def test_status_helpers(self):
        assert BatchStatus.REJECTED.is_terminal
        assert BatchStatus.CONSUMED.is_terminal
        assert not BatchStatus.APPROVED.is_terminal
        assert BatchStatus.APPROVED.allowed_next() == frozenset({BatchStatus.CONSUMED})

    def test_coerce_status(self):
        assert coerce_status("in_transit") is BatchStatus.IN_TRANSIT
        assert coerce_status(BatchStatus.DELIVERED) is BatchStatus.DELIVERED
        assert coerce_status("InTransit") is BatchStatus.IN_TRANSIT
        assert coerce_status("QualityTested") is BatchStatus.QUALITY_TESTED
        assert coerce_status("LOST") is None
        assert coerce_status(3) is None

    def test_can_update_status(self):
        ledger, _ = _ledger()
        batch = ledger.batches.get_batch(_fuel_batch(ledger))
        assert can_update_status(P, batch, caller_is_overseer=False)
        assert can_update_status(R, batch, caller_is_overseer=True)
        assert not can_update_status(R, batch, caller_is_overseer=False)


# ══════════════════════════════════════════════════════════════
# REGISTER BATCH
# ══════════════════════════════════════════════════════════════

class TestRegisterBatch:
    def test_scenario_a(self):
        ledger, _ = _ledger()
        batch_id = _fuel_batch(ledger)

        assert batch_id == 1
        batch = ledger.batches.get_batch(batch_id)
        assert batch.status is BatchStatus.CREATED
        assert batch.current_owner == P
        assert batch.creator_id == P
        assert batch.pending_owner is None
        assert ledger.batches.get_ownership_history(batch_id) == (P,)

    def test_round_trip_fields(self):
        ledger, _ = _ledger()
        batch = ledger.batches.get_batch(_fuel_batch(ledger))

        assert batch.batch_type == "FuelX"
        assert batch.quantity == 1000
        assert batch.origin_location == "Site1"
        assert batch.metadata_uri == "ipfs://fuelx"
        assert batch.created_at == NOW
        assert batch.updated_at == NOW
        assert batch.exists

        (entry,) = ledger.batches.get_audit_trail(batch.batch_id)
        assert entry.action is AuditAction.CREATED
        assert entry.actor_id == P
        assert entry.location == "Site1"

    def test_ids_strictly_increase(self):
        ledger, _ = _ledger()
        ids = [_fuel_batch(ledger) for _ in range(3)]
        ids.append(ledger.batches.register_batch(R, "Grain", 5, "Port"))
        assert ids == [1, 2, 3, 4]
        assert ledger.batches.get_total_batches() == 4

    def test_scenario_d_unregistered_caller(self):
        ledger, _ = _ledger()
        with pytest.raises(AuthorizationError) as exc_info:
            ledger.batches.register_batch("unknown-u", "FuelX", 10, "Site1")
        assert exc_info.value.code == ReasonCode.CALLER_NOT_REGISTERED
        assert ledger.batches.get_total_batches() == 0

    def test_deactivated_caller(self):
        ledger, _ = _ledger()
        ledger.participants.deactivate(ADMIN, P)
        with pytest.raises(AuthorizationError):
            _fuel_batch(ledger)

    @pytest.mark.parametrize("batch_type, quantity, origin, code", [
        ("", 10, "Site1", ReasonCode.EMPTY_BATCH_TYPE),
        ("   ", 10, "Site1", ReasonCode.EMPTY_BATCH_TYPE),
        ("FuelX", 0, "Site1", ReasonCode.INVALID_QUANTITY),
        ("FuelX", -5, "Site1", ReasonCode.INVALID_QUANTITY),
        ("FuelX", True, "Site1", ReasonCode.INVALID_QUANTITY),
        ("FuelX", "10", "Site1", ReasonCode.INVALID_QUANTITY),
        ("FuelX", 10, "", ReasonCode.EMPTY_ORIGIN),
    ])
    def test_validation(self, batch_type, quantity, origin, code):
        ledger, _ = _ledger()
        sequence = ledger.sequence
        with pytest.raises(ValidationError) as exc_info:
            ledger.batches.register_batch(P, batch_type, quantity, origin)
        assert exc_info.value.code == code
        assert ledger.sequence == sequence


# ══════════════════════════════════════════════════════════════
# UPDATE STATUS
# ══════════════════════════════════════════════════════════════

class TestUpdateStatus:
    def test_scenario_b(self):
        ledger, clock = _ledger()
        batch_id = _fuel_batch(ledger)

        clock.advance(60)
        ledger.batches.update_status(P, batch_id, BatchStatus.IN_TRANSIT, "loaded", "Road 4")
        ledger.batches.update_status(P, batch_id, BatchStatus.DELIVERED, "unloaded", "Port")

        with pytest.raises(StateError) as exc_info:
            ledger.batches.update_status(P, batch_id, BatchStatus.CREATED, "back")
        assert exc_info.value.code == ReasonCode.ILLEGAL_TRANSITION

        batch = ledger.batches.get_batch(batch_id)
        assert batch.status is BatchStatus.DELIVERED
        assert batch.updated_at == clock.now_utc()
        trail = ledger.batches.get_audit_trail(batch_id)
        assert [e.action for e in trail] == [
            AuditAction.CREATED, AuditAction.STATUS_UPDATED, AuditAction.STATUS_UPDATED,
        ]
        assert trail[1].details == "loaded"
        assert trail[1].location == "Road 4"

    def test_full_lifecycle_to_consumed(self):
        ledger, _ = _ledger()
        batch_id = _fuel_batch(ledger)
        for status in ("IN_TRANSIT", "DELIVERED", "QUALITY_TESTED", "APPROVED", "CONSUMED"):
            ledger.batches.update_status(P, batch_id, status)

        batch = ledger.batches.get_batch(batch_id)
        assert batch.status is BatchStatus.CONSUMED
        assert batch.is_terminal
        for status in BatchStatus:
            with pytest.raises(StateError):
                ledger.batches.update_status(P, batch_id, status)

    def test_status_name_spelling_is_flexible(self):
        ledger, _ = _ledger()
        batch_id = _fuel_batch(ledger)
        ledger.batches.update_status(P, batch_id, "InTransit")
        ledger.batches.update_status(P, batch_id, "delivered")
        ledger.batches.update_status(P, batch_id, "QualityTested")
        assert ledger.batches.get_batch(batch_id).status is BatchStatus.QUALITY_TESTED

    def test_restating_current_status_is_illegal(self):
        ledger, _ = _ledger()
        batch_id = _fuel_batch(ledger)
        with pytest.raises(StateError):
            ledger.batches.update_status(P, batch_id, BatchStatus.CREATED)

    def test_skipping_states_is_illegal(self):
        ledger, _ = _ledger()
        batch_id = _fuel_batch(ledger)
        with pytest.raises(StateError):
            ledger.batches.update_status(P, batch_id, BatchStatus.APPROVED)

    def test_unknown_batch(self):
        ledger, _ = _ledger()
        with pytest.raises(NotFoundError):
            ledger.batches.update_status(P, 42, BatchStatus.IN_TRANSIT)

    def test_unknown_status_value(self):
        ledger, _ = _ledger()
        batch_id = _fuel_batch(ledger)
        with pytest.raises(ValidationError) as exc_info:
            ledger.batches.update_status(P, batch_id, "LOST")
        assert exc_info.value.code == ReasonCode.INVALID_STATUS

    def test_non_owner_refused(self):
        ledger, _ = _ledger()
        batch_id = _fuel_batch(ledger)
        with pytest.raises(AuthorizationError) as exc_info:
            ledger.batches.update_status(D, batch_id, BatchStatus.IN_TRANSIT)
        assert exc_info.value.code == ReasonCode.NOT_OWNER_OR_OVERSEER
        assert len(ledger.batches.get_audit_trail(batch_id)) == 1

    def test_overseer_may_update_any_batch(self):
        ledger, _ = _ledger()
        ledger.participants.register(ADMIN, "inspector", ParticipantRole.OVERSEER, "QA")
        batch_id = _fuel_batch(ledger)

        ledger.batches.update_status("inspector", batch_id, BatchStatus.IN_TRANSIT)
        # the bootstrapped administrator is an overseer too
        ledger.batches.update_status(ADMIN, batch_id, BatchStatus.DELIVERED)

        trail = ledger.batches.get_audit_trail(batch_id)
        assert [e.actor_id for e in trail[1:]] == ["inspector", ADMIN]

    def test_deactivated_overseer_refused(self):
        ledger, _ = _ledger()
        ledger.participants.register(ADMIN, "inspector", ParticipantRole.OVERSEER, "QA")
        ledger.participants.deactivate(ADMIN, "inspector")
        batch_id = _fuel_batch(ledger)
        with pytest.raises(AuthorizationError):
            ledger.batches.update_status("inspector", batch_id, BatchStatus.IN_TRANSIT)

    def test_rejection_appends_second_entry(self):
        ledger, _ = _ledger()
        batch_id = _fuel_batch(ledger)
        ledger.batches.update_status(P, batch_id, BatchStatus.IN_TRANSIT)
        before = ledger.sequence

        batch = ledger.batches.update_status(
            P, batch_id, BatchStatus.REJECTED, "contaminated", "Lab 2",
        )

        assert batch.status is BatchStatus.REJECTED
        trail = ledger.batches.get_audit_trail(batch_id)
        assert [e.action for e in trail[-2:]] == [
            AuditAction.STATUS_UPDATED, AuditAction.BATCH_REJECTED,
        ]
        assert trail[-1].details == "contaminated"
        assert trail[-1].location == "Lab 2"
        assert ledger.sequence == before + 2

    def test_rejected_is_terminal(self):
        ledger, _ = _ledger()
        batch_id = _fuel_batch(ledger)
        ledger.batches.update_status(P, batch_id, BatchStatus.REJECTED, "bad")
        with pytest.raises(StateError):
            ledger.batches.update_status(P, batch_id, BatchStatus.IN_TRANSIT)

    def test_empty_location_recorded_as_none(self):
        ledger, _ = _ledger()
        batch_id = _fuel_batch(ledger)
        ledger.batches.update_status(P, batch_id, BatchStatus.IN_TRANSIT, "go", "")
        assert ledger.batches.get_audit_trail(batch_id)[-1].location is None


# ══════════════════════════════════════════════════════════════
# READS
# ══════════════════════════════════════════════════════════════

class TestReads:
    @pytest.mark.parametrize("read", [
        "get_batch", "get_ownership_history", "get_audit_trail",
    ])
    def test_unknown_batch(self, read):
        ledger, _ = _ledger()
        with pytest.raises(NotFoundError):
            getattr(ledger.batches, read)(7)

    def test_total_batches_starts_at_zero(self):
        ledger, _ = _ledger()
        assert ledger.batches.get_total_batches() == 0

    def test_batches_by_owner(self):
        ledger, _ = _ledger()
        first = _fuel_batch(ledger)
        ledger.batches.register_batch(R, "Grain", 5, "Port")
        third = _fuel_batch(ledger)

        assert ledger.batches.get_batches_by_owner(P) == (first, third)
        assert ledger.batches.get_batches_by_owner(D) == ()

    def test_history_consistent_after_creation(self):
        ledger, _ = _ledger()
        _assert_history_consistent(ledger, _fuel_batch(ledger))
