"""LangGraph-based dispatch runtime.

 The runtime takes a request, assembles the per-request capability registry,
 builds and filters a plan, then either executes the plan step by step or
 invokes the fallback capability:

 - failures (planning, missing capabilities, failing steps, duplicate
   registrations) are converted into a failed ``DispatchResult``;
 - per-dispatch resources are released on every exit path.

 The main entry point is ``Dispatcher``.
 """

from .engine import Dispatcher
from .models import DispatchDeps

__all__ = [
    "Dispatcher",
    "DispatchDeps",
]
