from __future__ import annotations

"""Dispatch error taxonomy.

Every error raised by the dispatch core derives from ``DispatchError`` and
carries an ``ErrorKind``. The dispatcher converts these into a failed
``DispatchResult`` instead of letting them escape the request handler.

- ``DuplicateCapabilityError``: two capabilities share a (namespace, name)
  while the registry is assembled.
- ``CapabilityNotFoundError``: a capability (or the fallback) is missing.
- ``PlanningError``: the ranking delegate itself failed.
- ``CapabilityFailure``: a step failed; carries the step identity and the
  context variables at the time of failure.
- ``ConfigurationError``: invalid static configuration, raised at startup.
"""

from enum import Enum
from typing import Dict, Mapping, Optional


class ErrorKind(str, Enum):
    not_found = "not_found"
    planning_error = "planning_error"
    capability_failure = "capability_failure"
    configuration_error = "configuration_error"

    @property
    def http_status(self) -> int:
        """HTTP-equivalent status code for transports exposing the dispatcher."""
        return _HTTP_STATUS[self]


_HTTP_STATUS: Dict[ErrorKind, int] = {
    ErrorKind.not_found: 404,
    ErrorKind.planning_error: 400,
    ErrorKind.capability_failure: 400,
    ErrorKind.configuration_error: 500,
}


def qualified_name(namespace: str, name: str) -> str:
    return f"{namespace}.{name}"


class DispatchError(Exception):
    """Base class for all dispatch errors."""

    kind: ErrorKind = ErrorKind.configuration_error

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(DispatchError):
    """Invalid static configuration (unknown integration, bad capability name, ...)."""

    kind = ErrorKind.configuration_error


class DuplicateCapabilityError(ConfigurationError):
    """A (namespace, name) pair was registered twice."""

    def __init__(self, namespace: str, name: str) -> None:
        super().__init__(f"capability already registered: {qualified_name(namespace, name)}")
        self.namespace = namespace
        self.name = name


class CapabilityNotFoundError(DispatchError, LookupError):
    """No capability is registered under (namespace, name)."""

    kind = ErrorKind.not_found

    def __init__(self, namespace: str, name: str) -> None:
        super().__init__(f"capability not found: {qualified_name(namespace, name)}")
        self.namespace = namespace
        self.name = name


class PlanningError(DispatchError):
    """The ranking delegate failed to produce candidate steps."""

    kind = ErrorKind.planning_error


class CapabilityFailure(DispatchError):
    """A capability invocation failed.

    ``variables`` holds the context variables as they were when the failure
    happened, including mutations applied by earlier steps.
    """

    kind = ErrorKind.capability_failure

    def __init__(
        self,
        namespace: str,
        name: str,
        message: str,
        *,
        variables: Optional[Mapping[str, str]] = None,
    ) -> None:
        super().__init__(f"{qualified_name(namespace, name)} failed: {message}")
        self.namespace = namespace
        self.name = name
        self.reason = message
        self.variables: Dict[str, str] = dict(variables or {})

    @property
    def step(self) -> str:
        return qualified_name(self.namespace, self.name)
