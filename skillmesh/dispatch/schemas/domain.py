from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from pydantic import Field, field_validator

from ..context import Context
from ..errors import CapabilityFailure, DispatchError, ErrorKind
from ..planning.steps import Plan
from .base import BaseSchema


class DispatchRequest(BaseSchema):
    """Incoming dispatch: the user input plus ordered seed variables."""

    input: str = ""
    variables: List[Tuple[str, str]] = Field(default_factory=list)

    @field_validator("variables")
    @classmethod
    def _keys_not_empty(cls, value: List[Tuple[str, str]]) -> List[Tuple[str, str]]:
        if any(not key for key, _ in value):
            raise ValueError("variable names must be non-empty")
        return value

    def to_context(self) -> Context:
        return Context(self.input, self.variables)


class DispatchResult(BaseSchema):
    """Outcome of a dispatch (or of a single capability invocation).

    On success ``value`` holds the primary value and ``variables`` every
    final context variable. On failure ``value`` is None and ``error_kind``
    and ``message`` describe the failure; a failed step also fills
    ``failed_step`` and ``diagnostic_variables`` (the partial context).
    """

    ok: bool
    value: Optional[str] = None
    variables: Dict[str, str] = Field(default_factory=dict)
    error_kind: Optional[ErrorKind] = None
    message: Optional[str] = None
    failed_step: Optional[str] = None
    diagnostic_variables: Dict[str, str] = Field(default_factory=dict)
    plan: Optional[Plan] = None
    used_fallback: bool = False

    @classmethod
    def succeeded(cls, ctx: Context, *, plan: Optional[Plan] = None, used_fallback: bool = False) -> "DispatchResult":
        return cls(ok=True, value=ctx.result, variables=ctx.variables(), plan=plan, used_fallback=used_fallback)

    @classmethod
    def failed(cls, error: DispatchError, *, plan: Optional[Plan] = None, used_fallback: bool = False) -> "DispatchResult":
        failed_step: Optional[str] = None
        diagnostic: Dict[str, str] = {}
        if isinstance(error, CapabilityFailure):
            failed_step = error.step
            diagnostic = dict(error.variables)
        return cls(
            ok=False,
            error_kind=error.kind,
            message=error.message,
            failed_step=failed_step,
            diagnostic_variables=diagnostic,
            plan=plan,
            used_fallback=used_fallback,
        )

    @property
    def http_status(self) -> int:
        return 200 if self.ok or self.error_kind is None else self.error_kind.http_status
