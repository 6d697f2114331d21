"""
Pluggable, domain-separated hash strategies.
"""

from tallytree.hashing.factory import (
    DEFAULT_TAG,
    HashAlgorithm,
    create_hash_strategy,
    resolve_algorithm,
)
from tallytree.hashing.strategy import (
    HashStrategy,
    Sha256Strategy,
    Sha3_256Strategy,
    Sha512Strategy,
    TaggedSha256Strategy,
    compute_tag_hash,
    tagged_hash,
)

__all__ = [
    "DEFAULT_TAG",
    "HashAlgorithm",
    "HashStrategy",
    "Sha256Strategy",
    "Sha3_256Strategy",
    "Sha512Strategy",
    "TaggedSha256Strategy",
    "compute_tag_hash",
    "create_hash_strategy",
    "resolve_algorithm",
    "tagged_hash",
]
