from __future__ import annotations

import pytest

from skillmesh.dispatch.context import Context
from skillmesh.dispatch.errors import (
    CapabilityFailure,
    CapabilityNotFoundError,
    ConfigurationError,
    DuplicateCapabilityError,
    ErrorKind,
    PlanningError,
)
from skillmesh.dispatch.planning.steps import Plan, Step
from skillmesh.dispatch.schemas.domain import DispatchRequest, DispatchResult


@pytest.mark.parametrize(
    "kind,status",
    [
        (ErrorKind.not_found, 404),
        (ErrorKind.planning_error, 400),
        (ErrorKind.capability_failure, 400),
        (ErrorKind.configuration_error, 500),
    ],
)
def test_error_kind_http_status(kind: ErrorKind, status: int) -> None:
    assert kind.http_status == status


def test_error_kinds_and_messages() -> None:
    dup = DuplicateCapabilityError("A", "f")
    assert isinstance(dup, ConfigurationError)
    assert dup.kind is ErrorKind.configuration_error
    assert dup.message == "capability already registered: A.f"

    missing = CapabilityNotFoundError("A", "g")
    assert isinstance(missing, LookupError)
    assert missing.kind is ErrorKind.not_found
    assert str(missing) == "capability not found: A.g"

    assert PlanningError("x").kind is ErrorKind.planning_error


def test_capability_failure_keeps_step_and_variables() -> None:
    variables = {"input": "v", "k": "1"}
    err = CapabilityFailure("A", "f", "boom", variables=variables)
    variables["k"] = "mutated"

    assert err.kind is ErrorKind.capability_failure
    assert err.step == "A.f"
    assert err.reason == "boom"
    assert err.message == "A.f failed: boom"
    assert err.variables == {"input": "v", "k": "1"}


def test_request_to_context() -> None:
    req = DispatchRequest(input="hi", variables=[("a", "1"), ("a", "2")])
    ctx = req.to_context()
    assert ctx.result == "hi"
    assert ctx.get("a") == "2"


def test_result_from_failure_fills_diagnostics() -> None:
    plan = Plan(goal="g", steps=(Step(namespace="A", name="f"),))
    err = CapabilityFailure("A", "f", "boom", variables={"input": "x"})

    result = DispatchResult.failed(err, plan=plan)

    assert result.ok is False
    assert result.value is None
    assert result.error_kind is ErrorKind.capability_failure
    assert result.failed_step == "A.f"
    assert result.diagnostic_variables == {"input": "x"}
    assert result.plan == plan
    assert result.http_status == 400


def test_result_from_success() -> None:
    ctx = Context("done", [("k", "v")])
    result = DispatchResult.succeeded(ctx, used_fallback=True)

    assert result.ok is True
    assert result.value == "done"
    assert result.variables == {"input": "done", "k": "v"}
    assert result.used_fallback is True
    assert result.http_status == 200


def test_request_rejects_unknown_fields() -> None:
    with pytest.raises(ValueError):
        DispatchRequest(input="x", unexpected="y")  # type: ignore[call-arg]
