"""
Configuration management for Tallytree.

Handles loading and validation of configuration files.
"""

from tallytree.config.settings import (
    HashingConfig,
    HashStrategyConfig,
    LoggingConfig,
    TallytreeConfig,
    TreeConfig,
    get_default_config,
    get_default_config_path,
    load_config,
)

__all__ = [
    "HashingConfig",
    "HashStrategyConfig",
    "LoggingConfig",
    "TallytreeConfig",
    "TreeConfig",
    "get_default_config",
    "get_default_config_path",
    "load_config",
]
