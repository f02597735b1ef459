"""
Tests for core.commands — rejection reasons and the typed error taxonomy.
"""

import pytest

from core.commands import (
    AuthorizationError,
    ConflictError,
    CustodyError,
    NotFoundError,
    ReasonCode,
    RejectionReason,
    StateError,
    ValidationError,
    error_for,
    raise_rejection,
)
from core.commands.errors import ERROR_FOR_CODE


def _reason(code, message="nope", policy_name="test_policy"):
    return RejectionReason(code=code, message=message, policy_name=policy_name)


def _all_codes():
    return [
        value for name, value in vars(ReasonCode).items()
        if name.isupper() and isinstance(value, str)
    ]


# ── RejectionReason ───────────────────────────────────────────

class TestRejectionReason:
    def test_valid_reason(self):
        reason = _reason(ReasonCode.BATCH_NOT_FOUND, "Batch 9 does not exist.")
        assert reason.code == "BATCH_NOT_FOUND"
        assert reason.to_dict() == {
            "code": "BATCH_NOT_FOUND",
            "message": "Batch 9 does not exist.",
            "policy_name": "test_policy",
        }

    @pytest.mark.parametrize("field", ["code", "message", "policy_name"])
    def test_empty_fields_rejected(self, field):
        kwargs = {"code": "X", "message": "m", "policy_name": "p"}
        kwargs[field] = ""
        with pytest.raises(ValueError, match=field):
            RejectionReason(**kwargs)

    def test_frozen(self):
        reason = _reason(ReasonCode.EMPTY_NAME)
        with pytest.raises(AttributeError):
            reason.code = "OTHER"


# ── Error taxonomy ────────────────────────────────────────────

class TestErrorTaxonomy:
    def test_every_code_maps_to_one_error_class(self):
        codes = _all_codes()
        assert codes
        for code in codes:
            assert code in ERROR_FOR_CODE, code
            assert issubclass(ERROR_FOR_CODE[code], CustodyError)

    @pytest.mark.parametrize("code, error_cls", [
        (ReasonCode.EMPTY_REASON, ValidationError),
        (ReasonCode.RECIPIENT_NOT_REGISTERED, ValidationError),
        (ReasonCode.NOT_ADMIN, AuthorizationError),
        (ReasonCode.NOT_BATCH_OWNER, AuthorizationError),
        (ReasonCode.ILLEGAL_TRANSITION, StateError),
        (ReasonCode.TRANSFER_ALREADY_PENDING, StateError),
        (ReasonCode.BATCH_NOT_FOUND, NotFoundError),
        (ReasonCode.NO_ACTIVE_REQUEST, NotFoundError),
        (ReasonCode.ALREADY_REGISTERED, ConflictError),
    ])
    def test_error_for_code(self, code, error_cls):
        error = error_for(_reason(code))
        assert type(error) is error_cls
        assert error.code == code

    def test_unknown_code_is_state_error(self):
        error = error_for(_reason("SOMETHING_ELSE"))
        assert isinstance(error, StateError)

    def test_error_carries_reason_and_message(self):
        reason = _reason(ReasonCode.EMPTY_ORIGIN, "Origin location cannot be empty.")
        error = error_for(reason)
        assert error.reason is reason
        assert str(error) == "Origin location cannot be empty."


class TestRaiseRejection:
    def test_none_is_noop(self):
        raise_rejection(None)

    def test_raises_typed_error(self):
        with pytest.raises(ConflictError) as exc_info:
            raise_rejection(_reason(ReasonCode.ALREADY_REGISTERED))
        assert exc_info.value.reason.policy_name == "test_policy"

    def test_all_errors_catchable_as_custody_error(self):
        with pytest.raises(CustodyError):
            raise_rejection(_reason(ReasonCode.REQUEST_NOT_ACTIVE))
