from __future__ import annotations

"""Plan construction.

``PlanBuilder`` turns a goal into a ``Plan``:

- the injected ``Ranker`` proposes ordered candidate steps;
- candidates that do not resolve in the registry are dropped (one
  hallucinated or unavailable function must not abort the dispatch);
- the validated steps are bounded to ``max_steps``.

An empty plan is a valid outcome meaning "nothing actionable". Only a
failure of the ranker itself raises ``PlanningError``.
"""

import logging
from typing import List

from ..capabilities.registry import CapabilityRegistry
from ..context import Context
from ..errors import PlanningError
from .ranker import Ranker
from .steps import Plan, Step

logger = logging.getLogger(__name__)


class PlanBuilder:
    """Build validated, bounded plans from a ranking delegate."""

    def __init__(self, ranker: Ranker, *, max_steps: int = 8) -> None:
        if max_steps < 1:
            raise ValueError("max_steps must be at least 1")
        self._ranker = ranker
        self._max_steps = max_steps

    @property
    def max_steps(self) -> int:
        return self._max_steps

    async def build(self, goal: str, registry: CapabilityRegistry, context: Context) -> Plan:
        """Generate a plan for ``goal`` using the capabilities in ``registry``.

        Raises
        ------
        PlanningError
            When the ranking delegate raises.
        """
        logger.debug(f"Planning goal with {len(registry)} capabilities and {len(context)} variables")
        try:
            candidates = await self._ranker.rank(goal, registry.descriptors(), max_steps=self._max_steps)
        except Exception as e:
            logger.error(f"Ranking failed for goal '{goal}': {e}", exc_info=True)
            raise PlanningError(f"could not create a plan: {e}") from e

        steps: List[Step] = []
        for candidate in candidates:
            if not registry.has(candidate.namespace, candidate.name):
                logger.warning(f"Dropping unresolved plan step {candidate.namespace}.{candidate.name}")
                continue
            overrides = {k: v for k, v in candidate.input_overrides.items() if k.strip()}
            if len(overrides) != len(candidate.input_overrides):
                logger.warning(f"Dropping empty input override keys of {candidate.namespace}.{candidate.name}")
            steps.append(Step(namespace=candidate.namespace, name=candidate.name, input_overrides=overrides))

        if len(steps) > self._max_steps:
            logger.warning(f"Plan truncated from {len(steps)} to {self._max_steps} steps")
            steps = steps[: self._max_steps]

        return Plan(goal=goal, steps=tuple(steps))
