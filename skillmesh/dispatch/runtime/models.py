from __future__ import annotations

"""Runtime dependency bundle and LangGraph state types.

The dispatcher is designed to be dependency-injected.

- ``DispatchDeps`` collects the long-lived, read-only pieces shared by every
  dispatch: static providers, conditional integrations, the plan builder and
  the capability names the state machine relies on.
- ``_DispatchState`` is the mutable state passed between LangGraph nodes for
  one dispatch. Nothing in it outlives the dispatch.
"""

from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from typing import Dict, NotRequired, Optional, Required, Sequence, Tuple, TypedDict

from ..capabilities.base import CapabilityProvider
from ..capabilities.registry import CapabilityRegistry, ConditionalRegistration
from ..context import Context
from ..planning.filtering import DEFAULT_TERMINAL_RENDERER
from ..planning.planner import PlanBuilder
from ..planning.steps import Plan
from ..schemas.domain import DispatchRequest, DispatchResult

DEFAULT_GOAL_TEMPLATE = "{input}"
DEFAULT_FALLBACK: Tuple[str, str] = ("ChatSkill", "Chat")


@dataclass(frozen=True)
class DispatchDeps:
    """Dependency bundle for ``Dispatcher``.

    This object is typically constructed by ``skillmesh.dispatch.factory`` and
    passed into the dispatcher. It holds:

    - ``static_providers``: registered for every dispatch under their own
      namespace.
    - ``conditional``: integrations registered only when their predicate
      accepts the request credential.
    - ``plan_builder``: turns the goal into a plan.
    - ``goal_template``: renders the planner goal; ``{input}`` is replaced by
      the request input.
    - ``fallback``/``terminal_renderer``: ``(namespace, name)`` pairs.
    """

    plan_builder: PlanBuilder
    static_providers: Sequence[CapabilityProvider] = ()
    conditional: Sequence[ConditionalRegistration] = ()
    goal_template: str = DEFAULT_GOAL_TEMPLATE
    fallback: Tuple[str, str] = DEFAULT_FALLBACK
    terminal_renderer: Tuple[str, str] = field(default=DEFAULT_TERMINAL_RENDERER)


class _DispatchState(TypedDict):
    """Mutable LangGraph state for a single dispatch.

    Required keys:

    - ``request``: the incoming request.
    - ``credentials``: integration name to credential (or None).
    - ``resources``: exit stack releasing per-dispatch resources.

    Optional keys are filled in as the state machine advances; ``result`` is
    set exactly once, either on failure or by the finish node.
    """

    request: Required[DispatchRequest]
    credentials: Required[Dict[str, Optional[str]]]
    resources: Required[AsyncExitStack]
    context: NotRequired[Context]
    registry: NotRequired[CapabilityRegistry]
    plan: NotRequired[Plan]
    filtered: NotRequired[Plan]
    idx: NotRequired[int]
    used_fallback: NotRequired[bool]
    result: NotRequired[DispatchResult]
