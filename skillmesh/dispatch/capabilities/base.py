from __future__ import annotations

"""Capability protocol and descriptor models.

A capability is the concrete execution unit behind a plan step.

The dispatcher resolves ``Step.namespace``/``Step.name`` through a
``CapabilityRegistry`` and invokes the implementation with the dispatch
``Context``.

Capabilities should:

- read their inputs from the context variables,
- write their primary output with ``Context.update`` (other outputs as named
  variables),
- signal failure with ``Context.fail`` or by raising; the dispatcher turns
  both into a ``CapabilityFailure``.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, Optional, Protocol

from ..context import Context
from ..errors import qualified_name

CapabilityFunction = Callable[[Context], Awaitable[Optional[Context]]]


@dataclass(frozen=True)
class Capability:
    """One invocable skill function.

    Attributes
    ----------
    name:
        Function name, unique within its provider's namespace.
    fn:
        Coroutine function taking the context and returning it (or a
        replacement context). Returning ``None`` keeps the input context.
    description:
        Natural-language description offered to the ranking delegate.
    placeholder:
        Marks a no-op stub; plan filtering drops steps that resolve to it.
    """

    name: str
    fn: CapabilityFunction
    description: str = ""
    placeholder: bool = False

    async def invoke(self, ctx: Context) -> Context:
        out = await self.fn(ctx)
        return ctx if out is None else out


@dataclass(frozen=True)
class CapabilityDescriptor:
    """Read-only view of a registered capability, handed to the planner."""

    namespace: str
    name: str
    description: str = ""

    @property
    def qualified_name(self) -> str:
        return qualified_name(self.namespace, self.name)


class CapabilityProvider(Protocol):
    """A named collection of capabilities ("skill").

    Providers holding per-request resources (HTTP clients) also expose an
    ``async aclose()`` which the dispatcher awaits at the end of the dispatch.
    """

    namespace: str

    def functions(self) -> Iterable[Capability]: ...
