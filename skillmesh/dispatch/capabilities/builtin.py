from __future__ import annotations

"""Built-in skills registered for every dispatch.

- ``RenderSkills``: presentation steps that format the primary value.
- ``ImageSkills``: image understanding/generation stubs. They are marked as
  placeholders so plan filtering removes them until a real backend exists.
- ``ChatSkill``: the default-response skill used when no actionable plan
  exists.
"""

import logging
from typing import Any, List, Optional

from pydantic_ai import Agent

from ..context import Context
from .base import Capability

logger = logging.getLogger(__name__)

FORMAT_KEY = "format"


class RenderSkills:
    """
    Skills that present the current primary value.

    Each renderer records the chosen presentation in the ``format`` variable.
    """

    namespace = "RenderSkills"

    def functions(self) -> List[Capability]:
        return [
            Capability("RenderText", self.render_text, "Render a plain text answer"),
            Capability("RenderRichText", self.render_rich_text, "Render a rich text (markdown) answer"),
            Capability("RenderCode", self.render_code, "Render program code"),
            Capability("RenderImage", self.render_image, "Render an image"),
            Capability("RenderPerson", self.render_person, "Render a person card"),
        ]

    async def render_text(self, ctx: Context) -> Context:
        lines = [line.rstrip() for line in ctx.result.strip().splitlines()]
        ctx.update("\n".join(lines))
        ctx.set(FORMAT_KEY, "text")
        return ctx

    async def render_rich_text(self, ctx: Context) -> Context:
        ctx.update(ctx.result.strip())
        ctx.set(FORMAT_KEY, "markdown")
        return ctx

    async def render_code(self, ctx: Context) -> Context:
        """
        Wrap the primary value in a fenced code block.

        Reads the optional ``language`` variable for the fence info string.
        """
        code = ctx.result.strip("\n")
        if code.startswith("```"):
            ctx.update(code)
        else:
            language = ctx.get("language") or ""
            ctx.update(f"```{language}\n{code}\n```")
        ctx.set(FORMAT_KEY, "code")
        return ctx

    async def render_image(self, ctx: Context) -> Context:
        """
        Render an image reference as markdown.

        Uses ``image_url`` (or the primary value) as the source and
        ``image_alt`` as alternative text.
        """
        url = (ctx.get("image_url") or ctx.result).strip()
        if not url:
            return ctx.fail("no image to render")
        alt = ctx.get("image_alt") or "image"
        ctx.update(f"![{alt}]({url})")
        ctx.set(FORMAT_KEY, "image")
        return ctx

    async def render_person(self, ctx: Context) -> Context:
        name = (ctx.get("person_name") or "").strip()
        if not name:
            return ctx.fail("missing 'person_name'")
        lines = [f"**{name}**"]
        for key in ("person_title", "person_email"):
            value = (ctx.get(key) or "").strip()
            if value:
                lines.append(value)
        ctx.update("\n".join(lines))
        ctx.set(FORMAT_KEY, "person")
        return ctx


class ImageSkills:
    """Image skills without a backend yet; both functions are placeholders."""

    namespace = "ImageSkills"

    def functions(self) -> List[Capability]:
        return [
            Capability(
                "UnderstandImage",
                self.understand_image,
                "When user input an image, provide a text description of the image",
                placeholder=True,
            ),
            Capability("GenerateImage", self.generate_image, "Generate or create an image", placeholder=True),
        ]

    async def understand_image(self, ctx: Context) -> Context:
        logger.debug("UnderstandImage invoked; no image backend configured")
        return ctx

    async def generate_image(self, ctx: Context) -> Context:
        logger.debug("GenerateImage invoked; no image backend configured")
        return ctx


DEFAULT_CHAT_PROMPT = (
    "You are a helpful assistant. Answer the user's request directly and concisely. "
    "If you cannot help, say so and explain why."
)


class ChatSkill:
    """Default-response skill.

    The skill supports two modes:

    - ``model=None``: deterministic reply acknowledging the request. This is
      useful for tests or deployments that want to avoid LLM calls.
    - ``model!=None``: asks a Pydantic AI agent for a free-text reply.
    """

    namespace = "ChatSkill"

    def __init__(self, *, model: Any | None = None, system_prompt: str = DEFAULT_CHAT_PROMPT) -> None:
        self._model = model
        self._system_prompt = system_prompt

    def functions(self) -> List[Capability]:
        return [Capability("Chat", self.chat, "Reply to the user in free text")]

    async def chat(self, ctx: Context) -> Context:
        message = ctx.result.strip()
        if self._model is None:
            ctx.update(self._default_reply(message))
            return ctx

        agent: Agent = Agent(self._model, output_type=str, system_prompt=self._system_prompt)
        result = await agent.run(message or "Hello")
        ctx.update(str(result.output))
        return ctx

    @staticmethod
    def _default_reply(message: Optional[str]) -> str:
        if not message:
            return "How can I help you?"
        return f"I could not find a specific action for: {message}"
