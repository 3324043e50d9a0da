from __future__ import annotations

from typing import Any

import pytest
from pydantic_ai.models.test import TestModel

from skillmesh.dispatch.capabilities import builtin as builtin_module
from skillmesh.dispatch.capabilities.builtin import FORMAT_KEY, ChatSkill, ImageSkills, RenderSkills
from skillmesh.dispatch.context import Context


@pytest.mark.asyncio
async def test_render_text_trims_whitespace() -> None:
    ctx = await RenderSkills().render_text(Context("  line one   \nline two  \n\n"))
    assert ctx.result == "line one\nline two"
    assert ctx.get(FORMAT_KEY) == "text"


@pytest.mark.asyncio
async def test_render_rich_text() -> None:
    ctx = await RenderSkills().render_rich_text(Context("\n# Title\n"))
    assert ctx.result == "# Title"
    assert ctx.get(FORMAT_KEY) == "markdown"


@pytest.mark.asyncio
async def test_render_code_wraps_in_fence() -> None:
    ctx = await RenderSkills().render_code(Context("print(1)", [("language", "python")]))
    assert ctx.result == "```python\nprint(1)\n```"
    assert ctx.get(FORMAT_KEY) == "code"


@pytest.mark.asyncio
async def test_render_code_keeps_existing_fence() -> None:
    ctx = await RenderSkills().render_code(Context("```\nx\n```"))
    assert ctx.result == "```\nx\n```"


@pytest.mark.asyncio
async def test_render_image() -> None:
    ctx = await RenderSkills().render_image(Context("", [("image_url", "http://img/1.png"), ("image_alt", "cat")]))
    assert ctx.result == "![cat](http://img/1.png)"
    assert ctx.get(FORMAT_KEY) == "image"


@pytest.mark.asyncio
async def test_render_image_without_source_fails() -> None:
    ctx = await RenderSkills().render_image(Context("  "))
    assert ctx.error_occurred
    assert ctx.last_error == "no image to render"


@pytest.mark.asyncio
async def test_render_person() -> None:
    ctx = await RenderSkills().render_person(
        Context("", [("person_name", "Ada"), ("person_email", "ada@example.com")])
    )
    assert ctx.result == "**Ada**\nada@example.com"
    assert ctx.get(FORMAT_KEY) == "person"

    missing = await RenderSkills().render_person(Context(""))
    assert missing.error_occurred


def test_image_skills_are_placeholders() -> None:
    caps = ImageSkills().functions()
    assert {c.name for c in caps} == {"UnderstandImage", "GenerateImage"}
    assert all(c.placeholder for c in caps)
    assert not any(c.placeholder for c in RenderSkills().functions())


@pytest.mark.asyncio
async def test_chat_without_model_is_deterministic() -> None:
    skill = ChatSkill()
    assert (await skill.chat(Context(""))).result == "How can I help you?"
    assert (await skill.chat(Context("book a flight"))).result == (
        "I could not find a specific action for: book a flight"
    )


@pytest.mark.asyncio
async def test_chat_with_test_model() -> None:
    skill = ChatSkill(model=TestModel(custom_output_text="hi there"))
    ctx = await skill.chat(Context("hello"))
    assert ctx.result == "hi there"


@pytest.mark.asyncio
async def test_chat_passes_prompt_to_agent(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, Any] = {}

    class _FakeResult:
        output = "agent reply"

    class _FakeAgent:
        def __init__(self, model: Any, *, output_type: Any, system_prompt: str) -> None:
            seen["model"] = model
            seen["system_prompt"] = system_prompt

        async def run(self, prompt: str) -> _FakeResult:
            seen["prompt"] = prompt
            return _FakeResult()

    monkeypatch.setattr(builtin_module, "Agent", _FakeAgent)

    ctx = await ChatSkill(model="openai:gpt-4o", system_prompt="be brief").chat(Context(""))

    assert ctx.result == "agent reply"
    assert seen == {"model": "openai:gpt-4o", "system_prompt": "be brief", "prompt": "Hello"}
