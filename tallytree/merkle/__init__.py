"""
Merkle tree implementation for tamper-evident commitments.

This module provides Merkle tree construction, proof generation, in-place
leaf update and independent proof verification.
"""

from tallytree.merkle.proof import MerkleProof, ProofDirection, ProofElement
from tallytree.merkle.tree import MerkleTree, OddNodePolicy
from tallytree.merkle.verifier import MerkleProofVerifier
from tallytree.merkle.builder import MerkleTreeBuilder, create_strategies

__all__ = [
    "MerkleProof",
    "MerkleProofVerifier",
    "MerkleTree",
    "MerkleTreeBuilder",
    "OddNodePolicy",
    "ProofDirection",
    "ProofElement",
    "create_strategies",
]
