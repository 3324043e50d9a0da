from __future__ import annotations

from typing import Any, List

import pytest
from pydantic_ai.models.test import TestModel

from skillmesh.dispatch.capabilities.base import CapabilityDescriptor
from skillmesh.dispatch.planning import ranker as ranker_module
from skillmesh.dispatch.planning.ranker import CandidateStep, PydanticAIRanker

DESCRIPTORS = [
    CapabilityDescriptor("GitHubSkill", "ListPullRequests", "List pull requests"),
    CapabilityDescriptor("RenderSkills", "RenderText", "Render a plain text answer"),
]


@pytest.mark.asyncio
async def test_ranker_without_model_returns_no_candidates() -> None:
    assert await PydanticAIRanker().rank("goal", DESCRIPTORS, max_steps=3) == []


@pytest.mark.asyncio
async def test_ranker_uses_agent_structured_output(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, Any] = {}

    class _FakeResult:
        output = [
            CandidateStep(namespace="GitHubSkill", name="ListPullRequests", input_overrides={"state": "open"}),
            CandidateStep(namespace="RenderSkills", name="RenderText"),
        ]

    class _FakeAgent:
        def __init__(self, model: Any, *, output_type: Any, system_prompt: str) -> None:
            seen["model"] = model
            seen["output_type"] = output_type

        async def run(self, prompt: str) -> _FakeResult:
            seen["prompt"] = prompt
            return _FakeResult()

    monkeypatch.setattr(ranker_module, "Agent", _FakeAgent)

    out = await PydanticAIRanker(model="openai:gpt-4o").rank("list PRs", DESCRIPTORS, max_steps=3)

    assert [c.name for c in out] == ["ListPullRequests", "RenderText"]
    assert seen["model"] == "openai:gpt-4o"
    assert seen["output_type"] == List[CandidateStep]
    assert "at most 3 steps" in seen["prompt"]
    assert "goal=list PRs" in seen["prompt"]
    assert "- GitHubSkill.ListPullRequests: List pull requests" in seen["prompt"]


@pytest.mark.asyncio
async def test_ranker_with_test_model_returns_candidates() -> None:
    ranker = PydanticAIRanker(model=TestModel())
    out = await ranker.rank("goal", DESCRIPTORS, max_steps=2)
    assert isinstance(out, list)
    assert all(isinstance(c, CandidateStep) for c in out)
