"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tallytree, a product of Garudex Labs

Factory resolving hash algorithm identifiers to strategy instances.
"""

from enum import Enum
from typing import Optional, Union

from tallytree.exceptions import UnsupportedStrategyError
from tallytree.hashing.strategy import (
    HashStrategy,
    Sha256Strategy,
    Sha3_256Strategy,
    Sha512Strategy,
    TaggedSha256Strategy,
)
from tallytree.logging_config import get_logger

logger = get_logger(__name__)


# Applied when a tagged strategy is requested without a tag. Applications
# that need separation from each other must pass their own tags.
DEFAULT_TAG = "Bitcoin_Transaction"


class HashAlgorithm(str, Enum):
    """Closed set of supported hash algorithms."""
    
    SHA256 = "sha256"
    TAGGED_SHA256 = "tagged-sha256"
    SHA512 = "sha512"
    SHA3_256 = "sha3-256"


def resolve_algorithm(algorithm: Union[HashAlgorithm, str]) -> HashAlgorithm:
    """
    Resolve an algorithm identifier to a HashAlgorithm member.
    
    Args:
        algorithm: HashAlgorithm member or its string value (case-insensitive)
    
    Returns:
        Matching HashAlgorithm
    
    Raises:
        UnsupportedStrategyError: If the identifier is unknown
    """
    if isinstance(algorithm, HashAlgorithm):
        return algorithm
    try:
        return HashAlgorithm(str(algorithm).strip().lower())
    except ValueError:
        supported = ", ".join(a.value for a in HashAlgorithm)
        raise UnsupportedStrategyError(
            f"Unsupported hash algorithm: {algorithm!r} (supported: {supported})"
        ) from None


def create_hash_strategy(
    algorithm: Union[HashAlgorithm, str] = HashAlgorithm.TAGGED_SHA256,
    tag: Optional[str] = None,
) -> HashStrategy:
    """
    Create a hash strategy for the requested algorithm.
    
    Args:
        algorithm: Algorithm identifier (default: tagged-sha256)
        tag: Domain separation tag, used only by tagged-sha256. When omitted
            for tagged-sha256, DEFAULT_TAG is applied and a warning is logged.
    
    Returns:
        HashStrategy instance
    
    Raises:
        UnsupportedStrategyError: If the algorithm is unknown
    """
    resolved = resolve_algorithm(algorithm)
    
    if resolved is HashAlgorithm.TAGGED_SHA256:
        if not tag:
            logger.warning(
                "default_tag_applied",
                algorithm=resolved.value,
                tag=DEFAULT_TAG,
            )
            tag = DEFAULT_TAG
        return TaggedSha256Strategy(tag)
    
    if tag:
        logger.debug("tag_ignored_for_plain_algorithm", algorithm=resolved.value, tag=tag)
    
    if resolved is HashAlgorithm.SHA256:
        return Sha256Strategy()
    if resolved is HashAlgorithm.SHA512:
        return Sha512Strategy()
    if resolved is HashAlgorithm.SHA3_256:
        return Sha3_256Strategy()
    
    # Unreachable while HashAlgorithm and the branches above stay in sync
    raise UnsupportedStrategyError(f"Unsupported hash algorithm: {resolved.value}")
