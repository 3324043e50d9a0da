"""
Core utilities and configuration for skillmesh.

This package provides core functionality including settings, logging
configuration and optional monitoring.
"""

from skillmesh.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
