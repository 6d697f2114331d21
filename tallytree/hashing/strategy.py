"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tallytree, a product of Garudex Labs

Hash strategies for Merkle tree construction and verification.

A hash strategy is a pure, deterministic function from bytes to a
fixed-size digest together with an identifying name. Strategies are
stateless apart from the precomputed tag hash of the tagged variant, so a
single instance can be shared freely between trees, verifiers and threads.

Supported variants:
- Sha256Strategy: plain SHA-256
- TaggedSha256Strategy: BIP-340 style domain-separated SHA-256,
  SHA256(SHA256(tag) || SHA256(tag) || msg)
- Sha512Strategy, Sha3_256Strategy: additional plain digests
"""

import hashlib
from typing import Protocol, Union, runtime_checkable


HashInput = Union[bytes, bytearray, memoryview, str]


def _to_bytes(data: HashInput) -> bytes:
    """
    Encode str input as UTF-8; pass byte-like input through.

    Raises:
        TypeError: For any other input type, int included
    """
    if isinstance(data, str):
        return data.encode("utf-8")
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    raise TypeError(f"Hash input must be str or bytes-like, got {type(data).__name__}")


def compute_tag_hash(tag: str) -> bytes:
    """Return SHA256(UTF8(tag)), the prefix used by tagged hashing."""
    return hashlib.sha256(tag.encode("utf-8")).digest()


def tagged_hash(tag: str, msg: HashInput) -> bytes:
    """
    Compute a BIP-340 tagged hash in one call.
    
    This is the byte-level interoperability contract:
    SHA256(SHA256(tag) || SHA256(tag) || msg). Prefer TaggedSha256Strategy
    when hashing repeatedly under the same tag.
    
    Args:
        tag: Domain separation tag
        msg: Message to hash
    
    Returns:
        32-byte digest
    """
    tag_hash = compute_tag_hash(tag)
    return hashlib.sha256(tag_hash + tag_hash + _to_bytes(msg)).digest()


@runtime_checkable
class HashStrategy(Protocol):
    """
    Capability implemented by every hash strategy.
    
    Implementations must be deterministic and side-effect free: the same
    input under the same instance always yields the same digest.
    """
    
    digest_size: int
    
    def hash(self, data: HashInput) -> bytes:
        """Hash data (str is UTF-8 encoded) and return the raw digest."""
        ...
    
    def get_algorithm_name(self) -> str:
        """Return a human readable identifier for the algorithm."""
        ...


class Sha256Strategy:
    """Plain SHA-256 strategy."""
    
    digest_size = 32
    
    def hash(self, data: HashInput) -> bytes:
        return hashlib.sha256(_to_bytes(data)).digest()
    
    def get_algorithm_name(self) -> str:
        return "SHA-256"
    
    def __repr__(self) -> str:
        return "Sha256Strategy()"


class TaggedSha256Strategy:
    """
    Domain-separated SHA-256 (BIP-340 tagged hash).
    
    The tag hash is computed once at construction and mixed into every
    invocation, so digests produced under different tags never collide
    even when the underlying message is identical.
    
    Example:
        >>> leaf = TaggedSha256Strategy("BALANCE_LEAF")
        >>> branch = TaggedSha256Strategy("BALANCE_BRANCH")
        >>> leaf.hash("x") != branch.hash("x")
        True
    """
    
    digest_size = 32
    
    def __init__(self, tag: str):
        """
        Initialize with a domain separation tag.
        
        Args:
            tag: Tag string, UTF-8 encoded before hashing
        """
        self._tag = tag
        self._tag_hash = compute_tag_hash(tag)
        self._prefix = self._tag_hash + self._tag_hash
    
    @property
    def tag(self) -> str:
        """Tag used for domain separation."""
        return self._tag
    
    @property
    def tag_hash(self) -> bytes:
        """Precomputed SHA256(UTF8(tag))."""
        return self._tag_hash
    
    def hash(self, data: HashInput) -> bytes:
        hasher = hashlib.sha256(self._prefix)
        hasher.update(_to_bytes(data))
        return hasher.digest()
    
    def get_algorithm_name(self) -> str:
        return f"Tagged-SHA-256({self._tag})"
    
    def __repr__(self) -> str:
        return f"TaggedSha256Strategy(tag={self._tag!r})"


class Sha512Strategy:
    """Plain SHA-512 strategy (64-byte digests)."""
    
    digest_size = 64
    
    def hash(self, data: HashInput) -> bytes:
        return hashlib.sha512(_to_bytes(data)).digest()
    
    def get_algorithm_name(self) -> str:
        return "SHA-512"
    
    def __repr__(self) -> str:
        return "Sha512Strategy()"


class Sha3_256Strategy:
    """Plain SHA3-256 strategy (FIPS 202, not Ethereum's Keccak-256)."""
    
    digest_size = 32
    
    def hash(self, data: HashInput) -> bytes:
        return hashlib.sha3_256(_to_bytes(data)).digest()
    
    def get_algorithm_name(self) -> str:
        return "SHA3-256"
    
    def __repr__(self) -> str:
        return "Sha3_256Strategy()"
