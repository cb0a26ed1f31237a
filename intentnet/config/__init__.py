# intentnet/config/__init__.py
"""
Configuration module for intentnet

Provides centralized configuration management using Pydantic settings,
including environment variable loading, validation, and type safety.

Usage:
    from intentnet.config import resolve_settings

    settings = resolve_settings({"alpha": 0.08, "log": True})
    print(settings.learning_rate)
"""

from intentnet.config.logging_config import (
    log_training_run,
    setup_logging,
    timed_operation,
)
from intentnet.config.settings import (
    NeuralSettings,
    Settings,
    get_settings,
    normalize_options,
    resolve_settings,
)

__all__ = [
    # Settings
    "Settings",
    "NeuralSettings",
    "get_settings",
    "normalize_options",
    "resolve_settings",
    # Logging
    "setup_logging",
    "timed_operation",
    "log_training_run",
]
