from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from pydantic import Field, field_serializer, field_validator

from ..errors import qualified_name
from ..schemas.base import FrozenSchema


class Step(FrozenSchema):
    namespace: str = ""
    name: str = ""
    input_overrides: Mapping[str, str] = Field(default_factory=dict, validate_default=True)

    @field_validator("input_overrides")
    @classmethod
    def _freeze_overrides(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(value))

    @field_serializer("input_overrides")
    def _dump_overrides(self, value: Mapping[str, str]) -> Dict[str, str]:
        return dict(value)

    @property
    def qualified_name(self) -> str:
        return qualified_name(self.namespace, self.name)


class Plan(FrozenSchema):
    """Ordered, immutable capability invocations for one goal.

    Step order is execution order. Filtering and other transformations build
    a new ``Plan`` through ``with_steps``.
    """

    goal: str
    steps: Tuple[Step, ...] = ()

    def with_steps(self, steps: Iterable[Step]) -> "Plan":
        return Plan(goal=self.goal, steps=tuple(steps))

    @property
    def is_empty(self) -> bool:
        return not self.steps

    def to_records(self) -> List[Dict[str, Any]]:
        """Serialize steps as ``{namespace, name, input_overrides}`` records."""
        return [s.model_dump() for s in self.steps]

    @classmethod
    def from_records(cls, goal: str, records: Iterable[Mapping[str, Any]]) -> "Plan":
        return cls(goal=goal, steps=tuple(Step.model_validate(dict(r)) for r in records))

    def to_json(self) -> str:
        return self.model_dump_json()

    @classmethod
    def from_json(cls, data: str | bytes) -> "Plan":
        return cls.model_validate_json(data)
