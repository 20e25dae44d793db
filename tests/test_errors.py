"""Decision and HTTP error mapping tests."""

import pytest

from legalaid.core.errors import (
    ALLOW,
    FORBIDDEN_DETAIL,
    NOT_FOUND_DETAIL,
    AccessDecision,
    Denial,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    StatusConflictError,
    http_exception_for,
    raise_for_decision,
)


def test_decisions_are_truthy_only_when_allowed():
    assert ALLOW
    assert not AccessDecision.forbidden("x")
    assert AccessDecision.not_found().denial == Denial.NOT_FOUND


@pytest.mark.parametrize(
    "decision,error_cls",
    [
        (AccessDecision.forbidden("nope"), ForbiddenError),
        (AccessDecision.not_found("hidden"), NotFoundError),
        (AccessDecision.invalid_transition("no edge"), InvalidTransitionError),
    ],
)
def test_raise_for_decision(decision, error_cls):
    with pytest.raises(error_cls) as exc_info:
        raise_for_decision(decision)
    assert exc_info.value.reason == decision.reason
    assert exc_info.value.denial == decision.denial


def test_allow_does_not_raise():
    raise_for_decision(ALLOW)


def test_http_mapping():
    assert http_exception_for(ForbiddenError("x")).status_code == 403
    assert http_exception_for(NotFoundError("x")).status_code == 404
    assert http_exception_for(InvalidTransitionError("x")).status_code == 400
    assert http_exception_for(StatusConflictError("a", "b")).status_code == 409


def test_masked_not_found_reveals_nothing():
    masked = http_exception_for(NotFoundError("case owned by another beneficiary"))
    missing = http_exception_for(NotFoundError("case does not exist"))
    assert masked.detail == missing.detail == NOT_FOUND_DETAIL


def test_forbidden_reads_as_permission_message():
    assert http_exception_for(ForbiddenError("internal reason")).detail == FORBIDDEN_DETAIL
