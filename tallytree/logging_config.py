"""
Logging configuration for Tallytree.

Provides centralized structured logging setup with JSON output for production
and human-readable output for development. Supports correlation IDs for
tracing a batch of tree operations across components.
"""

import logging
import sys
import uuid
from contextvars import ContextVar
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional

import structlog
from structlog.types import EventDict

if TYPE_CHECKING:
    from tallytree.config.settings import LoggingConfig


# Context variable for correlation ID
correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def add_correlation_id(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Add correlation ID to log events if present in context.
    
    Args:
        logger: Logger instance
        method_name: Name of the logging method
        event_dict: Event dictionary to modify
        
    Returns:
        Modified event dictionary with correlation_id if available
    """
    correlation_id = correlation_id_var.get()
    if correlation_id:
        event_dict["correlation_id"] = correlation_id
    return event_dict


def set_correlation_id(correlation_id: Optional[str] = None) -> str:
    """
    Set correlation ID for the current context.
    
    Args:
        correlation_id: Optional correlation ID. If None, generates a new UUID.
        
    Returns:
        The correlation ID that was set
    """
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())
    correlation_id_var.set(correlation_id)
    return correlation_id


def clear_correlation_id() -> None:
    """Clear correlation ID from the current context."""
    correlation_id_var.set(None)


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from context, or None if not set."""
    return correlation_id_var.get()


def _build_handler(log_file: Optional[Path]) -> logging.Handler:
    if log_file is None:
        return logging.StreamHandler(sys.stderr)
    log_file = Path(log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(log_file, encoding="utf-8")


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    json_format: bool = True,
) -> None:
    """
    Configure structured logging for Tallytree.
    
    Log records go to exactly one destination, so command output on stdout
    (roots, proof documents) is never interleaved with log lines.
    
    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to log file. If None, logs only to stderr.
        json_format: If True, use JSON format. If False, use human-readable
            format (colored only when writing to stderr).
    
    Raises:
        OSError: If the log file cannot be created
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    
    handler = _build_handler(log_file)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for old_handler in list(root_logger.handlers):
        root_logger.removeHandler(old_handler)
        old_handler.close()
    root_logger.addHandler(handler)
    
    processors: list = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_correlation_id,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    
    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=log_file is None))
    
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def setup_logging_from_config(
    logging_config: "LoggingConfig",
    level_override: Optional[str] = None,
) -> str:
    """
    Configure logging from the `logging` section of a TallytreeConfig.
    
    Args:
        logging_config: Loaded logging section
        level_override: Level taking precedence over the configured one
    
    Returns:
        The effective log level
    """
    level = (level_override or logging_config.level).upper()
    setup_logging(
        level=level,
        log_file=Path(logging_config.file) if logging_config.file else None,
        json_format=logging_config.format.lower() == "json",
    )
    return level


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance for a specific module.
    
    Args:
        name: Logger name (typically __name__ of the module).
        
    Returns:
        Structured logger instance.
    """
    if name == "tallytree" or name.startswith("tallytree."):
        return structlog.get_logger(name)
    return structlog.get_logger(f"tallytree.{name}")


# Convenience functions for common logging patterns

def log_merkle_root_computation(
    logger: structlog.stdlib.BoundLogger,
    leaf_count: int,
    merkle_root: str,
    duration_ms: float,
    **kwargs: Any,
) -> None:
    """
    Log a Merkle root computation.
    
    Args:
        logger: Logger instance
        leaf_count: Number of leaves committed to
        merkle_root: Computed Merkle root (hex encoded)
        duration_ms: Computation duration in milliseconds
        **kwargs: Additional context to log
    """
    log_data: Dict[str, Any] = {
        "event_type": "merkle_root_computation",
        "leaf_count": leaf_count,
        "merkle_root": merkle_root,
        "duration_ms": duration_ms,
    }
    
    log_data.update(kwargs)
    
    logger.debug("merkle_root_computation", **log_data)


def log_leaf_update(
    logger: structlog.stdlib.BoundLogger,
    leaf_index: int,
    old_root: str,
    new_root: str,
    hash_operations: int,
    **kwargs: Any,
) -> None:
    """
    Log an in-place leaf update.
    
    Args:
        logger: Logger instance
        leaf_index: Index of the replaced leaf
        old_root: Root before the update (hex encoded)
        new_root: Root after the update (hex encoded)
        hash_operations: Number of hash calls spent on the recomputation
        **kwargs: Additional context to log
    """
    log_data: Dict[str, Any] = {
        "event_type": "merkle_leaf_update",
        "leaf_index": leaf_index,
        "old_root": old_root,
        "new_root": new_root,
        "hash_operations": hash_operations,
    }
    
    log_data.update(kwargs)
    
    logger.info("merkle_leaf_update", **log_data)


def log_merkle_verification(
    logger: structlog.stdlib.BoundLogger,
    leaf_index: int,
    success: bool,
    duration_ms: float,
    failure_reason: Optional[str] = None,
    **kwargs: Any,
) -> None:
    """
    Log a Merkle proof verification.
    
    Args:
        logger: Logger instance
        leaf_index: Index recorded in the proof
        success: Whether verification succeeded
        duration_ms: Verification duration in milliseconds
        failure_reason: Reason for failure if not successful
        **kwargs: Additional context to log
    """
    log_data: Dict[str, Any] = {
        "event_type": "merkle_verification",
        "leaf_index": leaf_index,
        "success": success,
        "duration_ms": duration_ms,
    }
    
    if failure_reason is not None:
        log_data["failure_reason"] = failure_reason
    
    log_data.update(kwargs)
    
    if success:
        logger.info("merkle_verification", **log_data)
    else:
        logger.warning("merkle_verification_failed", **log_data)
