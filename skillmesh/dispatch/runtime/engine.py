from __future__ import annotations

"""LangGraph dispatch engine.

``Dispatcher`` turns one request into a result through a LangGraph state
machine over a mutable ``_DispatchState``.

State machine
-------------

::

    build_registry -> build_plan -> filter_plan -> invoke_fallback -> finish
                                              \\-> execute (loop)   -> finish

- ``build_registry``: registers the static providers, then each conditional
  integration whose predicate accepts the request credential. A duplicate
  registration fails the dispatch.
- ``build_plan``: renders the goal template and asks the ``PlanBuilder`` for
  a plan. A ``PlanningError`` fails the dispatch.
- ``filter_plan``: removes degenerate steps (``filter_plan``).
- ``invoke_fallback``: taken when the filtered plan is empty; invokes the
  fallback capability with the original context.
- ``execute``: runs exactly one step per iteration at index ``idx``, feeding
  the output context of a step to the next one. The first failure stops the
  loop; the context mutations applied so far are reported in the result.
- ``finish``: builds the success result unless a failure was recorded.

Resources
---------

Per-dispatch resources (integration HTTP clients) are pushed onto an
``AsyncExitStack`` that wraps the whole graph run, so they are released on
success, failure, fallback and cancellation alike.
"""

import logging
import time
from contextlib import AsyncExitStack
from functools import partial
from typing import Dict, List, Mapping, Optional

from langgraph.graph import END, StateGraph

from skillmesh.core.monitoring import log_dispatch_completed, log_dispatch_started

from ..capabilities.base import Capability, CapabilityProvider
from ..capabilities.registry import CapabilityRegistry, ConditionalRegistration
from ..context import Context
from ..errors import CapabilityFailure, ConfigurationError, DispatchError, qualified_name
from ..planning.filtering import filter_plan
from ..planning.steps import Step
from ..schemas.domain import DispatchRequest, DispatchResult
from .models import DispatchDeps, _DispatchState

logger = logging.getLogger(__name__)


class Dispatcher:
    """Plan and execute capability invocations for a user goal.

    The dispatcher is long-lived and holds no per-request state: every call
    to ``dispatch`` or ``invoke`` builds its own registry and context, so
    concurrent dispatches do not interfere.
    """

    def __init__(self, deps: DispatchDeps) -> None:
        """
        Initialize the Dispatcher.

        Args:
            deps: Static providers, conditional integrations, plan builder and
                the capability names used for fallback and filtering.
        """
        self._deps = deps
        self._graph = self._build_graph()

    def _build_graph(self):
        """Build and compile the LangGraph state machine."""
        g: StateGraph = StateGraph(_DispatchState)
        g.add_node("build_registry", self._node_build_registry)
        g.add_node("build_plan", self._node_build_plan)
        g.add_node("filter_plan", self._node_filter_plan)
        g.add_node("invoke_fallback", self._node_invoke_fallback)
        g.add_node("execute", self._node_execute_next)
        g.add_node("finish", self._node_finish)

        g.set_entry_point("build_registry")
        g.add_conditional_edges(
            "build_registry",
            self._route_unless_failed,
            {"next": "build_plan", "finish": "finish"},
        )
        g.add_conditional_edges(
            "build_plan",
            self._route_unless_failed,
            {"next": "filter_plan", "finish": "finish"},
        )
        g.add_conditional_edges(
            "filter_plan",
            self._route_after_filter,
            {"fallback": "invoke_fallback", "execute": "execute"},
        )
        g.add_conditional_edges(
            "execute",
            self._route_after_execute,
            {"continue": "execute", "finish": "finish"},
        )
        g.add_edge("invoke_fallback", "finish")
        g.add_edge("finish", END)
        return g.compile()

    async def dispatch(
        self,
        request: DispatchRequest,
        credentials: Optional[Mapping[str, Optional[str]]] = None,
    ) -> DispatchResult:
        """Plan and execute ``request``.

        Planning, capability and registry failures are returned as a failed
        ``DispatchResult``; they never propagate. Cancellation of the calling
        task does propagate, after per-dispatch resources are released and
        without invoking the remaining steps.
        """
        creds: Dict[str, Optional[str]] = dict(credentials or {})
        started = time.perf_counter()
        logger.debug("Dispatch request received")
        log_dispatch_started(self._render_goal(request), self._credentialed(creds))

        async with AsyncExitStack() as resources:
            state: _DispatchState = {"request": request, "credentials": creds, "resources": resources}
            out = await self._graph.ainvoke(
                state,
                config={"recursion_limit": self._deps.plan_builder.max_steps + 10},
            )

        result: DispatchResult = out["result"]
        log_dispatch_completed(
            result.ok,
            (time.perf_counter() - started) * 1000.0,
            result.error_kind.value if result.error_kind is not None else None,
        )
        return result

    async def invoke(
        self,
        namespace: str,
        name: str,
        request: DispatchRequest,
        credentials: Optional[Mapping[str, Optional[str]]] = None,
    ) -> DispatchResult:
        """Invoke a single capability directly, without planning or filtering."""
        logger.debug(f"Received call to invoke {qualified_name(namespace, name)}")
        async with AsyncExitStack() as resources:
            try:
                registry = self._assemble_registry(dict(credentials or {}), resources)
                cap = registry.lookup(namespace, name)
                ctx = await self._invoke(namespace, name, cap, request.to_context())
            except DispatchError as e:
                logger.error(f"Invocation of {qualified_name(namespace, name)} failed: {e.message}")
                return DispatchResult.failed(e)
        return DispatchResult.succeeded(ctx)

    async def _node_build_registry(self, state: _DispatchState) -> _DispatchState:
        state["context"] = state["request"].to_context()
        try:
            state["registry"] = self._assemble_registry(state["credentials"], state["resources"])
        except DispatchError as e:
            logger.error(f"Registry assembly failed: {e.message}")
            state["result"] = DispatchResult.failed(e)
            return state
        logger.debug(f"Registry built with {len(state['registry'])} capabilities")
        return state

    async def _node_build_plan(self, state: _DispatchState) -> _DispatchState:
        goal = self._render_goal(state["request"])
        try:
            plan = await self._deps.plan_builder.build(goal, state["registry"], state["context"])
        except DispatchError as e:
            logger.error(f"I couldn't create a plan for '{state['request'].input}': {e.message}")
            state["result"] = DispatchResult.failed(e)
            return state
        logger.debug(f"Plan created: {plan.to_json()}")
        state["plan"] = plan
        return state

    async def _node_filter_plan(self, state: _DispatchState) -> _DispatchState:
        state["filtered"] = filter_plan(
            state["plan"],
            state["registry"],
            terminal_renderer=self._deps.terminal_renderer,
        )
        state["idx"] = 0
        return state

    async def _node_invoke_fallback(self, state: _DispatchState) -> _DispatchState:
        namespace, name = self._deps.fallback
        logger.info(f"No actionable plan; falling back to {qualified_name(namespace, name)}")
        state["used_fallback"] = True
        try:
            cap = state["registry"].lookup(namespace, name)
            state["context"] = await self._invoke(namespace, name, cap, state["context"])
        except DispatchError as e:
            logger.error(f"Fallback failed: {e.message}")
            state["result"] = DispatchResult.failed(e, plan=state["filtered"], used_fallback=True)
        return state

    async def _node_execute_next(self, state: _DispatchState) -> _DispatchState:
        """Execute the plan step at ``idx`` and advance the index."""
        plan = state["filtered"]
        idx = int(state.get("idx") or 0)
        if idx >= len(plan.steps):
            return state

        step = plan.steps[idx]
        logger.debug(f"Executing step {idx + 1}/{len(plan.steps)}: {step.qualified_name}")
        try:
            state["context"] = await self._run_step(state["registry"], step, state["context"])
        except DispatchError as e:
            logger.error(f"Step {idx + 1} ({step.qualified_name}) failed: {e.message}")
            state["result"] = DispatchResult.failed(e, plan=plan)
            return state

        state["idx"] = idx + 1
        return state

    async def _node_finish(self, state: _DispatchState) -> _DispatchState:
        if "result" not in state:
            state["result"] = DispatchResult.succeeded(
                state["context"],
                plan=state.get("filtered"),
                used_fallback=bool(state.get("used_fallback")),
            )
        result = state["result"]
        if result.ok:
            logger.info(f"Dispatch completed (fallback={result.used_fallback})")
        else:
            logger.info(f"Dispatch failed: kind={result.error_kind}, step={result.failed_step}")
        return state

    def _route_unless_failed(self, state: _DispatchState) -> str:
        return "finish" if "result" in state else "next"

    def _route_after_filter(self, state: _DispatchState) -> str:
        return "fallback" if state["filtered"].is_empty else "execute"

    def _route_after_execute(self, state: _DispatchState) -> str:
        if "result" in state:
            return "finish"
        if int(state.get("idx") or 0) >= len(state["filtered"].steps):
            return "finish"
        return "continue"

    def _render_goal(self, request: DispatchRequest) -> str:
        return self._deps.goal_template.replace("{input}", request.input)

    def _credentialed(self, credentials: Mapping[str, Optional[str]]) -> List[str]:
        return [c.integration for c in self._deps.conditional if c.predicate(credentials.get(c.integration))]

    def _assemble_registry(
        self,
        credentials: Mapping[str, Optional[str]],
        resources: AsyncExitStack,
    ) -> CapabilityRegistry:
        registry = CapabilityRegistry()
        for provider in self._deps.static_providers:
            registry.register(provider.namespace, provider)
        for cond in self._deps.conditional:
            credential = credentials.get(cond.integration)
            registry.register_if(
                cond.predicate(credential),
                cond.namespace,
                partial(self._open_provider, cond, credential, resources),
            )
        return registry

    @staticmethod
    def _open_provider(
        cond: ConditionalRegistration,
        credential: Optional[str],
        resources: AsyncExitStack,
    ) -> CapabilityProvider:
        try:
            provider = cond.factory(credential or "")
        except Exception as e:
            raise ConfigurationError(f"could not build integration '{cond.integration}': {e}") from e
        aclose = getattr(provider, "aclose", None)
        if aclose is not None:
            resources.push_async_callback(aclose)
        return provider

    async def _run_step(self, registry: CapabilityRegistry, step: Step, ctx: Context) -> Context:
        cap = registry.lookup(step.namespace, step.name)
        for key, value in step.input_overrides.items():
            # "$name" refers to another context variable
            if value.startswith("$") and value[1:] in ctx:
                value = ctx.get(value[1:]) or ""
            try:
                ctx.set(key, value)
            except ValueError as e:
                raise CapabilityFailure(
                    step.namespace,
                    step.name,
                    f"invalid input override: {e}",
                    variables=ctx.variables(),
                ) from e
        return await self._invoke(step.namespace, step.name, cap, ctx)

    async def _invoke(self, namespace: str, name: str, cap: Capability, ctx: Context) -> Context:
        try:
            out = await cap.invoke(ctx)
        except Exception as e:
            logger.error(f"Capability {qualified_name(namespace, name)} raised: {e}", exc_info=True)
            raise CapabilityFailure(namespace, name, str(e) or type(e).__name__, variables=ctx.variables()) from e
        if not isinstance(out, Context):
            raise CapabilityFailure(namespace, name, f"returned {type(out).__name__}", variables=ctx.variables())
        if out.error_occurred:
            raise CapabilityFailure(
                namespace,
                name,
                out.last_error or "capability reported a failure",
                variables=out.variables(),
            )
        return out
