"""Goal-driven skill dispatch.

This package contains the "engine room" of skillmesh.

Design overview
---------------

A dispatch turns a request into a result in four stages:

1. Assemble a per-request ``CapabilityRegistry``: built-in skills always,
   integration skills only when their credential is present.
2. Build a ``Plan`` for the goal with ``PlanBuilder`` (an injected ranking
   delegate proposes steps; unresolvable steps are dropped).
3. Filter degenerate steps with ``filter_plan``.
4. Execute the plan in order through the ``Dispatcher``, or invoke the
   fallback capability when nothing actionable remains.

Typical usage
-------------

Most applications should build the dispatcher with
``skillmesh.dispatch.factory.build_dispatcher`` and call
``Dispatcher.dispatch`` once per request.
"""

from .context import MAIN_KEY, Context
from .errors import (
    CapabilityFailure,
    CapabilityNotFoundError,
    ConfigurationError,
    DispatchError,
    DuplicateCapabilityError,
    ErrorKind,
    PlanningError,
)
from .runtime import DispatchDeps, Dispatcher
from .schemas.domain import DispatchRequest, DispatchResult

__all__ = [
    "Context",
    "MAIN_KEY",
    "CapabilityFailure",
    "CapabilityNotFoundError",
    "ConfigurationError",
    "DispatchError",
    "DuplicateCapabilityError",
    "ErrorKind",
    "PlanningError",
    "DispatchDeps",
    "Dispatcher",
    "DispatchRequest",
    "DispatchResult",
]
