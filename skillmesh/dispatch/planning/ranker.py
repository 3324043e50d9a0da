from __future__ import annotations

"""Ranking delegates.

A ranking delegate chooses which capabilities to call for a goal. It only
sees capability descriptors and returns ordered candidates; validation and
bounding of those candidates belong to ``PlanBuilder``.
"""

import logging
from typing import Any, Dict, List, Protocol, Sequence

from pydantic import Field
from pydantic_ai import Agent

from ..capabilities.base import CapabilityDescriptor
from ..schemas.base import BaseSchema

logger = logging.getLogger(__name__)


class CandidateStep(BaseSchema):
    namespace: str
    name: str
    input_overrides: Dict[str, str] = Field(default_factory=dict)


class Ranker(Protocol):
    """Choose an ordered list of candidate steps for a goal."""

    async def rank(
        self,
        goal: str,
        descriptors: Sequence[CapabilityDescriptor],
        *,
        max_steps: int,
    ) -> List[CandidateStep]: ...


DEFAULT_SYSTEM_PROMPT = (
    "You are a planner for a chat assistant. Given a goal and a list of available "
    "functions, return the shortest ordered list of function calls that satisfies the goal. "
    "Use only the listed functions, referring to them by namespace and name. "
    "Return an empty list if no function helps."
)


class PydanticAIRanker:
    """Ranking delegate backed by a Pydantic AI agent.

    The ranker supports two modes:

    - ``model=None``: returns no candidates, so every dispatch falls back to
      the default-response capability. This is useful for tests or
      deployments that want to avoid LLM calls.
    - ``model!=None``: asks the model for a ``List[CandidateStep]``.
    """

    def __init__(self, *, model: Any | None = None, system_prompt: str = DEFAULT_SYSTEM_PROMPT) -> None:
        self._model = model
        self._system_prompt = system_prompt

    async def rank(
        self,
        goal: str,
        descriptors: Sequence[CapabilityDescriptor],
        *,
        max_steps: int,
    ) -> List[CandidateStep]:
        if self._model is None:
            logger.debug("No planner model configured; returning no candidates")
            return []

        agent: Agent = Agent(self._model, output_type=List[CandidateStep], system_prompt=self._system_prompt)
        result = await agent.run(self._prompt(goal, descriptors, max_steps))
        return list(result.output)

    @staticmethod
    def _prompt(goal: str, descriptors: Sequence[CapabilityDescriptor], max_steps: int) -> str:
        functions = "\n".join(f"- {d.qualified_name}: {d.description}" for d in descriptors)
        return (
            f"Create a plan of at most {max_steps} steps.\n\n"
            f"goal={goal}\n\n"
            f"available functions:\n{functions}\n"
        )
