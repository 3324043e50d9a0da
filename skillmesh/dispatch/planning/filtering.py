"""Structural filtering of plans.

A plan is degenerate when it carries no informational action. Filtering:

1. drops steps with an empty name and steps resolving to a placeholder
   capability;
2. drops the remaining step if it is the only one left and it is the
   terminal renderer (a lone "render the text" step renders nothing useful).

Retained steps keep their order and filtering twice gives the same plan.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from ..capabilities.registry import CapabilityRegistry
from .steps import Plan, Step

logger = logging.getLogger(__name__)

DEFAULT_TERMINAL_RENDERER: Tuple[str, str] = ("RenderSkills", "RenderText")


def _is_placeholder(step: Step, registry: Optional[CapabilityRegistry]) -> bool:
    if registry is None or not registry.has(step.namespace, step.name):
        return False
    return registry.lookup(step.namespace, step.name).placeholder


def filter_plan(
    plan: Plan,
    registry: Optional[CapabilityRegistry] = None,
    *,
    terminal_renderer: Tuple[str, str] = DEFAULT_TERMINAL_RENDERER,
) -> Plan:
    """Return a new plan without degenerate steps.

    Without a registry, placeholder detection is skipped and only the
    structural rules apply.
    """
    kept = [s for s in plan.steps if s.name.strip() and not _is_placeholder(s, registry)]
    if len(kept) == 1 and (kept[0].namespace, kept[0].name) == terminal_renderer:
        logger.debug(f"Dropping lone terminal renderer {kept[0].qualified_name}")
        kept = []
    if len(kept) != len(plan.steps):
        logger.debug(f"Filtered plan from {len(plan.steps)} to {len(kept)} steps")
    return plan.with_steps(kept)
