"""
================================================================================
UI Framework Common Utilities
================================================================================

Shared configuration management and logging setup.

Usage:
    from ui_framework.common import get_config, init_logger

    init_logger()
    timeout = get_config("wait.timeout_ms", 10000)

================================================================================
"""

from .global_config import (
    ConfigurationError,
    get_config,
    get_logger,
    init_logger,
    reload_config,
    reset_config,
    set_config,
)

__all__ = [
    "ConfigurationError",
    "get_config",
    "get_logger",
    "init_logger",
    "reload_config",
    "reset_config",
    "set_config",
]
