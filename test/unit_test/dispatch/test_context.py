from __future__ import annotations

import pytest

from skillmesh.dispatch.context import MAIN_KEY, Context


def test_seed_variables_last_value_wins() -> None:
    ctx = Context("hello", [("a", "1"), ("b", "2"), ("a", "3")])

    assert ctx.result == "hello"
    assert ctx.get("a") == "3"
    assert ctx.get("b") == "2"
    assert list(ctx) == [MAIN_KEY, "a", "b"]


def test_seed_may_overwrite_main_value() -> None:
    ctx = Context("hello", [(MAIN_KEY, "override")])
    assert ctx.result == "override"


def test_set_rejects_empty_key_and_coerces_none() -> None:
    ctx = Context()
    with pytest.raises(ValueError):
        ctx.set("", "x")

    ctx.set("k", None)  # type: ignore[arg-type]
    assert ctx.get("k") == ""


def test_update_and_variables_copy() -> None:
    ctx = Context("in", [("x", "1")])
    ctx.update("out")

    snapshot = ctx.variables()
    snapshot["x"] = "changed"

    assert ctx.result == "out"
    assert ctx.get("x") == "1"
    assert snapshot[MAIN_KEY] == "out"
    assert len(ctx) == 2
    assert "x" in ctx and "missing" not in ctx
    assert ctx.get("missing", "d") == "d"


def test_fail_marks_context() -> None:
    err = RuntimeError("boom")
    ctx = Context("in")

    returned = ctx.fail("went wrong", err)

    assert returned is ctx
    assert ctx.error_occurred is True
    assert ctx.last_error == "went wrong"
    assert ctx.last_exception is err
