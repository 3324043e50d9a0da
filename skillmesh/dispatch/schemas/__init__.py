"""Schemas and DTOs for the dispatch core.

Request/result models live in ``skillmesh.dispatch.schemas.domain``; they are
not re-exported here because they depend on the planning models, which in
turn build on the base schemas below.
"""

from .base import BaseSchema, FrozenSchema

__all__ = [
    "BaseSchema",
    "FrozenSchema",
]
