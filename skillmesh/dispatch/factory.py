from __future__ import annotations

"""Convenience factories for wiring the dispatch core.

This module turns ``Settings`` into a ready ``Dispatcher``:

- validates the static configuration (raising ``ConfigurationError``),
- builds the model used by the planner and the chat skill,
- instantiates the built-in providers once (shared, read-only),
- selects the conditional integrations enabled in the settings.

Advanced deployments and tests can pass their own ranker or chat model.
"""

import logging
from typing import Any, List, Optional, Sequence, Tuple

from pydantic_ai.models.test import TestModel

from skillmesh.core.config import Settings
from skillmesh.core.logging_config import setup_logging
from skillmesh.core.monitoring import initialize_logfire

from .capabilities.base import CapabilityProvider
from .capabilities.builtin import ChatSkill, ImageSkills, RenderSkills
from .capabilities.integrations import DEFAULT_INTEGRATIONS
from .capabilities.registry import ConditionalRegistration
from .errors import ConfigurationError
from .planning.planner import PlanBuilder
from .planning.ranker import PydanticAIRanker, Ranker
from .runtime import DispatchDeps, Dispatcher

logger = logging.getLogger(__name__)

# ai_service_type -> pydantic-ai model name prefix
MODEL_PREFIXES = {
    "openai": "openai",
    "anthropic": "anthropic",
    "google": "google-gla",
}


def parse_qualified_name(value: str) -> Tuple[str, str]:
    """Split ``"Namespace.Name"`` into its two parts."""
    namespace, sep, name = value.strip().partition(".")
    if not sep or not namespace or not name or "." in name:
        raise ConfigurationError(f"expected 'Namespace.Name', got '{value}'")
    return namespace, name


def create_model(settings: Settings) -> Any | None:
    """
    Build the pydantic-ai model for the configured AI service.

    Returns:
        A model name (``"openai:gpt-4o"``), a ``TestModel`` for ``test``, or
        None for ``none`` (deterministic mode without LLM calls).

    Raises:
        ConfigurationError: If the service type is unknown.
    """
    service = settings.ai_service_type.strip().lower()
    if service == "none":
        return None
    if service == "test":
        return TestModel()
    prefix = MODEL_PREFIXES.get(service)
    if prefix is None:
        raise ConfigurationError(f"Invalid ai_service_type value: '{settings.ai_service_type}'")
    return f"{prefix}:{settings.completion_model}"


def build_static_providers(*, chat_model: Any | None = None) -> List[CapabilityProvider]:
    """Build the providers registered for every dispatch."""
    return [RenderSkills(), ImageSkills(), ChatSkill(model=chat_model)]


def build_conditional_registrations(integrations: Sequence[str]) -> List[ConditionalRegistration]:
    """
    Select the credential-gated integrations to offer.

    Raises:
        ConfigurationError: If an integration name is unknown.
    """
    out: List[ConditionalRegistration] = []
    for name in integrations:
        reg = DEFAULT_INTEGRATIONS.get(name)
        if reg is None:
            raise ConfigurationError(f"unknown integration: '{name}'")
        out.append(reg)
    return out


def build_dispatcher(
    settings: Optional[Settings] = None,
    *,
    ranker: Optional[Ranker] = None,
    chat_model: Any | None = None,
) -> Dispatcher:
    """Construct a ``Dispatcher`` from settings.

    ``ranker`` and ``chat_model`` override the model derived from
    ``settings.ai_service_type``.
    """
    if settings is None:
        from skillmesh.core.config import settings as default_settings

        settings = default_settings

    if "{input}" not in settings.goal_template:
        raise ConfigurationError("goal_template must contain '{input}'")
    fallback = parse_qualified_name(settings.fallback_capability)
    terminal_renderer = parse_qualified_name(settings.terminal_renderer)
    conditional = build_conditional_registrations(settings.integrations)

    model = create_model(settings)
    deps = DispatchDeps(
        plan_builder=PlanBuilder(ranker or PydanticAIRanker(model=model), max_steps=settings.max_plan_steps),
        static_providers=build_static_providers(chat_model=chat_model if chat_model is not None else model),
        conditional=conditional,
        goal_template=settings.goal_template,
        fallback=fallback,
        terminal_renderer=terminal_renderer,
    )
    logger.info(
        f"Dispatcher configured: ai_service={settings.ai_service_type}, "
        f"integrations={[c.integration for c in conditional]}, max_plan_steps={settings.max_plan_steps}"
    )
    return Dispatcher(deps)


def bootstrap(settings: Optional[Settings] = None) -> Dispatcher:
    """Configure logging and monitoring, then build the dispatcher."""
    if settings is None:
        from skillmesh.core.config import settings as default_settings

        settings = default_settings

    setup_logging(
        log_level=settings.log_level,
        log_format=settings.log_format,
        enable_file=settings.enable_file_logging,
        log_file_dir=settings.log_file_dir,
    )
    initialize_logfire(settings)
    return build_dispatcher(settings)
