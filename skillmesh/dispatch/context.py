"""Shared key/value state threaded through one dispatch.

A ``Context`` is created from the incoming request, handed to each executed
capability in turn and read back by the dispatcher once execution ends.
Capabilities may add or overwrite variables but never remove them.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, Optional, Tuple

MAIN_KEY = "input"
"""Variable holding the primary value: the user input on entry, the result on exit."""


class Context:
    """Mutable variables of a single dispatch.

    The primary value lives under ``MAIN_KEY``. Seed pairs are applied in
    order, so a duplicated key keeps the last value (including ``MAIN_KEY``).
    """

    def __init__(self, input: str = "", variables: Iterable[Tuple[str, str]] = ()) -> None:
        self._variables: Dict[str, str] = {MAIN_KEY: str(input)}
        for key, value in variables:
            self.set(key, value)
        self.error_occurred = False
        self.last_error: Optional[str] = None
        self.last_exception: Optional[BaseException] = None

    def set(self, key: str, value: str) -> None:
        if not key:
            raise ValueError("context key must be a non-empty string")
        self._variables[str(key)] = "" if value is None else str(value)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._variables.get(key, default)

    def update(self, value: str) -> None:
        """Overwrite the primary value."""
        self.set(MAIN_KEY, value)

    @property
    def result(self) -> str:
        return self._variables[MAIN_KEY]

    def variables(self) -> Dict[str, str]:
        """Return a copy of all variables, the primary value included."""
        return dict(self._variables)

    def fail(self, message: str, error: Optional[BaseException] = None) -> "Context":
        """Mark this context as failed; the dispatcher stops at the current step."""
        self.error_occurred = True
        self.last_error = message
        self.last_exception = error
        return self

    def __contains__(self, key: object) -> bool:
        return key in self._variables

    def __iter__(self) -> Iterator[str]:
        return iter(self._variables)

    def __len__(self) -> int:
        return len(self._variables)

    def __repr__(self) -> str:
        return f"Context(input={self.result!r}, variables={len(self._variables)}, failed={self.error_occurred})"
