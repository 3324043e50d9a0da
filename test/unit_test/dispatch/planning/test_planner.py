from __future__ import annotations

from typing import List, Sequence

import pytest

from skillmesh.dispatch.capabilities.base import Capability, CapabilityDescriptor
from skillmesh.dispatch.capabilities.registry import CapabilityRegistry
from skillmesh.dispatch.context import Context
from skillmesh.dispatch.errors import PlanningError
from skillmesh.dispatch.planning.planner import PlanBuilder
from skillmesh.dispatch.planning.ranker import CandidateStep


async def _noop(ctx: Context) -> None:
    return None


class _Work:
    namespace = "Work"

    def functions(self) -> List[Capability]:
        return [Capability(n, _noop, f"{n} things") for n in ("A", "B", "C")]


class _ListRanker:
    def __init__(self, candidates: List[CandidateStep]) -> None:
        self.candidates = candidates
        self.calls: List[tuple] = []

    async def rank(
        self, goal: str, descriptors: Sequence[CapabilityDescriptor], *, max_steps: int
    ) -> List[CandidateStep]:
        self.calls.append((goal, [d.qualified_name for d in descriptors], max_steps))
        return self.candidates


class _FailingRanker:
    async def rank(self, goal, descriptors, *, max_steps):
        raise RuntimeError("model unavailable")


@pytest.fixture
def registry() -> CapabilityRegistry:
    reg = CapabilityRegistry()
    reg.register("Work", _Work())
    return reg


def _c(name: str, **overrides: str) -> CandidateStep:
    return CandidateStep(namespace="Work", name=name, input_overrides=overrides)


@pytest.mark.asyncio
async def test_build_returns_validated_steps(registry: CapabilityRegistry) -> None:
    ranker = _ListRanker([_c("A", x="1"), _c("B")])

    plan = await PlanBuilder(ranker).build("goal", registry, Context("in"))

    assert plan.goal == "goal"
    assert [s.qualified_name for s in plan.steps] == ["Work.A", "Work.B"]
    assert plan.steps[0].input_overrides == {"x": "1"}
    assert ranker.calls == [("goal", ["Work.A", "Work.B", "Work.C"], 8)]


@pytest.mark.asyncio
async def test_unresolved_candidates_are_dropped(registry: CapabilityRegistry) -> None:
    ranker = _ListRanker([_c("Missing"), _c("A"), CandidateStep(namespace="Other", name="B")])

    plan = await PlanBuilder(ranker).build("goal", registry, Context())

    assert [s.qualified_name for s in plan.steps] == ["Work.A"]


@pytest.mark.asyncio
async def test_plan_is_bounded_after_validation(registry: CapabilityRegistry) -> None:
    ranker = _ListRanker([_c("Missing"), _c("A"), _c("B"), _c("C")])

    plan = await PlanBuilder(ranker, max_steps=2).build("goal", registry, Context())

    assert [s.name for s in plan.steps] == ["A", "B"]


@pytest.mark.asyncio
async def test_empty_ranking_gives_empty_plan(registry: CapabilityRegistry) -> None:
    plan = await PlanBuilder(_ListRanker([])).build("goal", registry, Context())
    assert plan.is_empty


@pytest.mark.asyncio
async def test_ranker_failure_raises_planning_error(registry: CapabilityRegistry) -> None:
    with pytest.raises(PlanningError) as exc:
        await PlanBuilder(_FailingRanker()).build("goal", registry, Context())
    assert "model unavailable" in exc.value.message


def test_max_steps_must_be_positive() -> None:
    with pytest.raises(ValueError):
        PlanBuilder(_ListRanker([]), max_steps=0)


@pytest.mark.asyncio
async def test_empty_override_keys_are_dropped(registry: CapabilityRegistry) -> None:
    ranker = _ListRanker([CandidateStep(namespace="Work", name="A", input_overrides={"": "x", " ": "y", "k": "v"})])

    plan = await PlanBuilder(ranker).build("goal", registry, Context())

    assert plan.steps[0].input_overrides == {"k": "v"}
