"""
Exception hierarchy for Tallytree.

All custom exceptions inherit from TallytreeError base class. Every error
here signals a contract violation by the caller; none of them is retryable.
A proof that fails to verify is not an error and never raises.
"""


class TallytreeError(Exception):
    """Base exception for all Tallytree errors."""
    pass


# Tree Errors
class TreeError(TallytreeError):
    """Base exception for Merkle tree errors."""
    pass


class EmptyInputError(TreeError, ValueError):
    """Raised when a tree is constructed from an empty leaf sequence."""
    pass


class IndexOutOfRangeError(TreeError, IndexError):
    """Raised when a leaf index is negative or not below the leaf count."""
    
    def __init__(self, index: int, leaf_count: int):
        self.index = index
        self.leaf_count = leaf_count
        super().__init__(f"Leaf index {index} out of range [0, {leaf_count})")


# Hashing Errors
class HashingError(TallytreeError):
    """Base exception for hash strategy errors."""
    pass


class UnsupportedStrategyError(HashingError, ValueError):
    """Raised when an unknown hash algorithm identifier is requested."""
    pass


# Proof Errors
class ProofError(TallytreeError):
    """Base exception for proof encoding errors."""
    pass


class MalformedEncodingError(ProofError, ValueError):
    """Raised when hex or transport-format proof input cannot be decoded."""
    pass


# Configuration Errors
class ConfigurationError(TallytreeError):
    """Base exception for configuration-related errors."""
    pass


class InvalidConfigurationError(ConfigurationError):
    """Raised when configuration is invalid or malformed."""
    pass
