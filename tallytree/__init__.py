"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tallytree, a product of Garudex Labs

Tallytree - Merkle commitments and inclusion proofs

Tallytree builds binary Merkle trees over ordered records with
domain-separated hashing, issues compact inclusion proofs and verifies
them independently of the tree, for proof-of-reserve, transaction-log
commitments and tamper-evident audit logs.
"""

from tallytree._version import __version__
from tallytree.exceptions import (
    EmptyInputError,
    IndexOutOfRangeError,
    MalformedEncodingError,
    TallytreeError,
    UnsupportedStrategyError,
)
from tallytree.hashing import (
    DEFAULT_TAG,
    HashAlgorithm,
    HashStrategy,
    Sha256Strategy,
    TaggedSha256Strategy,
    create_hash_strategy,
)
from tallytree.merkle import (
    MerkleProof,
    MerkleProofVerifier,
    MerkleTree,
    OddNodePolicy,
    ProofDirection,
    ProofElement,
)

__all__ = [
    "__version__",
    "DEFAULT_TAG",
    "EmptyInputError",
    "HashAlgorithm",
    "HashStrategy",
    "IndexOutOfRangeError",
    "MalformedEncodingError",
    "MerkleProof",
    "MerkleProofVerifier",
    "MerkleTree",
    "OddNodePolicy",
    "ProofDirection",
    "ProofElement",
    "Sha256Strategy",
    "TaggedSha256Strategy",
    "TallytreeError",
    "UnsupportedStrategyError",
    "create_hash_strategy",
]
