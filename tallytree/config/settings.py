"""
Configuration management for Tallytree.

Loads YAML configuration from file with sensible defaults and validation.
Supports environment variable substitution using ${ENV_VAR} syntax.
"""

import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import yaml

from tallytree.exceptions import InvalidConfigurationError, UnsupportedStrategyError
from tallytree.hashing.factory import DEFAULT_TAG, HashAlgorithm, resolve_algorithm
from tallytree.logging_config import get_logger
from tallytree.merkle.tree import OddNodePolicy

logger = get_logger(__name__)


def _expand_env_vars(value: Any) -> Any:
    """
    Recursively expand environment variables in configuration values.

    Supports ${ENV_VAR} syntax with optional default values: ${ENV_VAR:default}

    Args:
        value: Configuration value (string, dict, list, or other)

    Returns:
        Value with environment variables expanded

    Examples:
        "${LEAF_TAG}" -> value of LEAF_TAG env var
        "${LEAF_TAG:RESERVE_LEAF}" -> value of LEAF_TAG or "RESERVE_LEAF" if not set
    """
    if isinstance(value, str):
        # Pattern matches ${VAR} or ${VAR:default}
        pattern = r'\$\{([^}:]+)(?::([^}]*))?\}'

        def replace_env_var(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else ""
            return os.environ.get(var_name, default_value)

        return re.sub(pattern, replace_env_var, value)
    elif isinstance(value, dict):
        return {k: _expand_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_expand_env_vars(item) for item in value]
    else:
        return value


@dataclass
class HashStrategyConfig:
    """Hash strategy selection for one node kind (leaf or branch)."""

    algorithm: str = HashAlgorithm.TAGGED_SHA256.value
    tag: str = DEFAULT_TAG  # Only used by tagged-sha256


@dataclass
class HashingConfig:
    """Leaf and branch hashing configuration."""

    leaf: HashStrategyConfig = field(default_factory=HashStrategyConfig)
    branch: HashStrategyConfig = field(default_factory=HashStrategyConfig)


@dataclass
class TreeConfig:
    """Tree construction configuration."""

    odd_node_policy: str = OddNodePolicy.CARRY.value  # "carry" or "duplicate" (legacy)
    use_parallel: bool = True
    parallel_threshold: int = 100  # Min level size before hashing on a thread pool


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    file: str = ""
    format: str = "console"  # "console" or "json"


@dataclass
class TallytreeConfig:
    """Main Tallytree configuration."""

    hashing: HashingConfig = field(default_factory=HashingConfig)
    tree: TreeConfig = field(default_factory=TreeConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def get_default_config_path() -> str:
    """Get the default configuration file path."""
    return os.path.expanduser("~/.tallytree/config.yaml")


def get_default_config() -> TallytreeConfig:
    """
    Get default configuration with sensible defaults.

    Returns:
        TallytreeConfig: Default configuration object
    """
    return TallytreeConfig()


def load_config(config_path: Optional[str] = None) -> TallytreeConfig:
    """
    Load configuration from YAML file with validation.

    If config file is not found, returns default configuration.
    If config file is malformed or invalid, raises InvalidConfigurationError.

    Args:
        config_path: Path to configuration file. If None, uses default path.

    Returns:
        TallytreeConfig: Loaded and validated configuration

    Raises:
        InvalidConfigurationError: If configuration is invalid or malformed
    """
    if config_path is None:
        config_path = get_default_config_path()

    config_path = os.path.expanduser(str(config_path))

    if not os.path.exists(config_path):
        logger.info(f"Configuration file not found at {config_path}, using defaults")
        return get_default_config()

    try:
        with open(config_path, 'r') as f:
            config_data = yaml.safe_load(f)
        logger.debug(f"Loaded configuration from {config_path}")
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML configuration file '{config_path}': {e}")
        raise InvalidConfigurationError(
            f"Failed to parse YAML configuration file '{config_path}': {e}"
        )
    except OSError as e:
        logger.error(f"Failed to read configuration file '{config_path}': {e}")
        raise InvalidConfigurationError(
            f"Failed to read configuration file '{config_path}': {e}"
        )

    if config_data is None:
        logger.info(f"Configuration file {config_path} is empty, using defaults")
        return get_default_config()

    if not isinstance(config_data, dict):
        raise InvalidConfigurationError(
            f"Invalid configuration in '{config_path}': top level must be a mapping"
        )

    config_data = _expand_env_vars(config_data)
    logger.debug("Expanded environment variables in configuration")

    try:
        config = _build_config_from_dict(config_data)
        _validate_config(config)
    except InvalidConfigurationError as e:
        logger.error(f"Invalid configuration in '{config_path}': {e}")
        raise InvalidConfigurationError(
            f"Invalid configuration in '{config_path}': {e}"
        ) from e

    logger.info(f"Successfully loaded and validated configuration from {config_path}")
    return config


def _section(config_data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = config_data.get(name) or {}
    if not isinstance(section, dict):
        raise InvalidConfigurationError(f"'{name}' section must be a mapping")
    return section


def _build_strategy_config(data: Dict[str, Any], name: str) -> HashStrategyConfig:
    section = _section(data, name)
    default = HashStrategyConfig()
    return HashStrategyConfig(
        algorithm=str(section.get('algorithm', default.algorithm)),
        tag=str(section.get('tag', default.tag)),
    )


def _as_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    # Values produced by ${ENV_VAR} expansion arrive as strings
    if isinstance(value, str) and value.lower() in ("true", "yes", "1", "on"):
        return True
    if isinstance(value, str) and value.lower() in ("false", "no", "0", "off"):
        return False
    raise InvalidConfigurationError(f"{name} must be a boolean, got {value!r}")


def _as_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise InvalidConfigurationError(f"{name} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidConfigurationError(f"{name} must be an integer, got {value!r}") from None


def _build_config_from_dict(config_data: Dict[str, Any]) -> TallytreeConfig:
    """
    Build TallytreeConfig from dictionary loaded from YAML.

    Merges user configuration with defaults. All sections are optional.

    Args:
        config_data: Dictionary loaded from YAML file

    Returns:
        TallytreeConfig: Configuration object

    Raises:
        InvalidConfigurationError: If a section has the wrong shape or type
    """
    default_config = get_default_config()

    hashing_data = _section(config_data, 'hashing')
    hashing = HashingConfig(
        leaf=_build_strategy_config(hashing_data, 'leaf'),
        branch=_build_strategy_config(hashing_data, 'branch'),
    )

    tree_data = _section(config_data, 'tree')
    tree = TreeConfig(
        odd_node_policy=str(
            tree_data.get('odd_node_policy', default_config.tree.odd_node_policy)
        ),
        use_parallel=_as_bool(
            tree_data.get('use_parallel', default_config.tree.use_parallel), 'use_parallel'
        ),
        parallel_threshold=_as_int(
            tree_data.get('parallel_threshold', default_config.tree.parallel_threshold),
            'parallel_threshold',
        ),
    )

    logging_data = _section(config_data, 'logging')
    logging = LoggingConfig(
        level=str(logging_data.get('level', default_config.logging.level)),
        file=os.path.expanduser(
            str(logging_data.get('file', default_config.logging.file) or "")
        ),
        format=str(logging_data.get('format', default_config.logging.format)),
    )

    return TallytreeConfig(hashing=hashing, tree=tree, logging=logging)


def _validate_config(config: TallytreeConfig) -> None:
    """
    Validate configuration values.

    Args:
        config: Configuration to validate

    Raises:
        InvalidConfigurationError: If configuration is invalid
    """
    for name, strategy in (("leaf", config.hashing.leaf), ("branch", config.hashing.branch)):
        try:
            algorithm = resolve_algorithm(strategy.algorithm)
        except UnsupportedStrategyError as e:
            raise InvalidConfigurationError(f"hashing.{name}.algorithm: {e}") from e
        if algorithm is HashAlgorithm.TAGGED_SHA256 and not strategy.tag:
            raise InvalidConfigurationError(f"hashing.{name}.tag cannot be empty for tagged-sha256")

    valid_policies = [policy.value for policy in OddNodePolicy]
    if config.tree.odd_node_policy.lower() not in valid_policies:
        raise InvalidConfigurationError(
            f"odd_node_policy must be one of {valid_policies}, "
            f"got '{config.tree.odd_node_policy}'"
        )

    if config.tree.parallel_threshold < 1:
        raise InvalidConfigurationError(
            f"parallel_threshold must be at least 1, got {config.tree.parallel_threshold}"
        )

    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if config.logging.level.upper() not in valid_log_levels:
        raise InvalidConfigurationError(
            f"logging level must be one of {valid_log_levels}, "
            f"got '{config.logging.level}'"
        )

    valid_formats = ["console", "json"]
    if config.logging.format.lower() not in valid_formats:
        raise InvalidConfigurationError(
            f"logging format must be one of {valid_formats}, "
            f"got '{config.logging.format}'"
        )
