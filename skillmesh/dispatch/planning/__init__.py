"""Planning components.

 The planning subsystem turns a goal into a ``Plan``: an immutable, ordered
 sequence of ``Step`` items, each naming a capability by namespace and name
 plus optional input overrides.

 - ``Ranker`` / ``PydanticAIRanker``: choose candidate steps for a goal.
 - ``PlanBuilder``: validates candidates against the registry and bounds the
   plan length.
 - ``filter_plan``: removes degenerate steps before execution.

 The planner never executes capabilities; execution belongs to
 ``skillmesh.dispatch.runtime.Dispatcher``.
 """

from .filtering import DEFAULT_TERMINAL_RENDERER, filter_plan
from .planner import PlanBuilder
from .ranker import CandidateStep, PydanticAIRanker, Ranker
from .steps import Plan, Step

__all__ = [
    "CandidateStep",
    "DEFAULT_TERMINAL_RENDERER",
    "Plan",
    "PlanBuilder",
    "PydanticAIRanker",
    "Ranker",
    "Step",
    "filter_plan",
]
