"""
Monitoring and Tracing Configuration Module.

This module provides integration with Pydantic Logfire for tracing dispatch
operations, including:
- Pydantic AI model calls made by the planner and the chat skill
- HTTPX requests made by credentialed integration skills
- Dispatch start/completion events with outcome and latency

Logfire is entirely optional: until ``initialize_logfire`` succeeds, the
``log_*`` helpers are no-ops.
"""

import logging
from typing import Optional

from skillmesh.core.config import Settings

logger = logging.getLogger(__name__)

_logfire_active = False


def is_logfire_active() -> bool:
    return _logfire_active


def initialize_logfire(settings: Settings) -> bool:
    """
    Initialize Pydantic Logfire for monitoring and tracing.

    The initialization is conditional on ``settings.logfire_enabled`` and
    requires ``settings.logfire_token``.

    Returns:
        True when Logfire was configured, False otherwise.
    """
    global _logfire_active

    if not settings.logfire_enabled:
        logger.info("Logfire monitoring is disabled. Set LOGFIRE_ENABLED=true to enable.")
        return False

    if not settings.logfire_token:
        logger.warning(
            "Logfire is enabled but LOGFIRE_TOKEN is not set. "
            "Monitoring will not work. Set LOGFIRE_TOKEN to enable Logfire."
        )
        return False

    try:
        import logfire

        logfire.configure(
            token=settings.logfire_token,
            service_name=settings.logfire_service_name,
            environment=settings.logfire_environment,
        )

        try:
            logfire.instrument_pydantic_ai()
            logger.info("Logfire: Pydantic AI instrumentation enabled")
        except Exception as e:
            logger.warning(f"Failed to instrument Pydantic AI: {e}")

        try:
            logfire.instrument_httpx()
            logger.info("Logfire: HTTPX instrumentation enabled")
        except Exception as e:
            logger.warning(f"Failed to instrument HTTPX: {e}")

    except Exception as e:
        logger.error(f"Failed to initialize Logfire: {e}", exc_info=True)
        return False

    _logfire_active = True
    logger.info(
        f"Logfire monitoring initialized: environment={settings.logfire_environment}, "
        f"service={settings.logfire_service_name}"
    )
    return True


def log_dispatch_started(goal: str, integrations: list[str]) -> None:
    """
    Log the start of a dispatch.

    Args:
        goal: The rendered planner goal
        integrations: Integration names that supplied a credential
    """
    if not _logfire_active:
        return
    try:
        import logfire

        logfire.info("Dispatch started", goal=goal, integrations=integrations)
    except Exception:
        logger.debug("Could not log dispatch start to Logfire")


def log_dispatch_completed(ok: bool, duration_ms: float, error_kind: Optional[str] = None) -> None:
    """
    Log the completion of a dispatch.

    Args:
        ok: Whether the dispatch succeeded
        duration_ms: The duration of the dispatch in milliseconds
        error_kind: The failure kind, if any
    """
    if not _logfire_active:
        return
    try:
        import logfire

        logfire.info("Dispatch completed", ok=ok, duration_ms=duration_ms, error_kind=error_kind)
    except Exception:
        logger.debug("Could not log dispatch completion to Logfire")
