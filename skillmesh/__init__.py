"""skillmesh.

This package turns a free-text user goal into a sequence of skill invocations
and executes it.

High-level architecture
-----------------------

The codebase is organized around three cooperating pieces:

- **Capability registry**: the set of callable skills visible to one dispatch.
  Built-in skills are always present; integration skills (GitHub, Jira,
  calendar, shopping) are registered only when the request carries the
  matching credential.
- **Plan builder**: asks an injected ranking delegate (usually a language
  model) which skills to call for the goal, then keeps only the steps that
  resolve in the registry.
- **Dispatcher**: a LangGraph state machine that assembles the registry,
  builds and filters the plan, and either executes it step by step or falls
  back to the default chat skill.

Core subpackages
----------------

- ``skillmesh.core``: settings, logging and monitoring.
- ``skillmesh.dispatch``: context, capabilities, planning and the runtime
  dispatcher.

Typical workflow
----------------

Most integrations should use ``skillmesh.dispatch.factory.build_dispatcher``:

1. Build a ``Dispatcher`` once from ``Settings``.
2. For each request, call ``Dispatcher.dispatch`` with a ``DispatchRequest``
   and the per-request integration credentials.
3. Inspect the returned ``DispatchResult``: ``ok`` with ``value`` and
   ``variables``, or ``error_kind`` and ``message``.
"""

__version__ = "0.1.0"
