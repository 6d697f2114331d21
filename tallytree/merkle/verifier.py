"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tallytree, a product of Garudex Labs

Merkle proof verifier.

The verifier recomputes a candidate root from a MerkleProof with its own
leaf and branch strategies and compares it byte-for-byte with the root the
proof was issued against. It needs no reference to the tree that issued
the proof. A mismatch is an expected outcome and is reported as False,
never raised.

Entry points:
- verify: canonical MerkleProof verification
- verify_simple: hex-encoded sibling path and root
- legacy_verify: deprecated string-keyed left/right path
"""

import time
import warnings
from dataclasses import replace
from typing import Any, Iterable, Mapping, Optional

from tallytree.hashing.factory import DEFAULT_TAG
from tallytree.hashing.strategy import HashStrategy, TaggedSha256Strategy
from tallytree.logging_config import get_logger, log_merkle_verification
from tallytree.merkle.proof import (
    LeafData,
    MerkleProof,
    ProofDirection,
    ProofElement,
    decode_hex,
)

logger = get_logger(__name__)


class MerkleProofVerifier:
    """
    Verify Merkle inclusion proofs.

    Must be constructed with the same strategies that built the audited
    tree, otherwise every proof fails.

    Example:
        >>> from tallytree.hashing import create_hash_strategy
        >>> verifier = MerkleProofVerifier(
        ...     create_hash_strategy("tagged-sha256", tag="BALANCE_LEAF"),
        ...     create_hash_strategy("tagged-sha256", tag="BALANCE_BRANCH"),
        ... )
        >>> verifier.verify(proof)
        True
    """

    def __init__(
        self,
        leaf_hash_strategy: Optional[HashStrategy] = None,
        branch_hash_strategy: Optional[HashStrategy] = None,
    ):
        """
        Initialize verifier with hash strategies.

        Args:
            leaf_hash_strategy: Strategy for leaves (default: tagged SHA-256
                with DEFAULT_TAG)
            branch_hash_strategy: Strategy for internal nodes (default: the
                leaf strategy when one is given, else tagged SHA-256 with
                DEFAULT_TAG)
        """
        if leaf_hash_strategy is None:
            leaf_hash_strategy = TaggedSha256Strategy(DEFAULT_TAG)
        if branch_hash_strategy is None:
            branch_hash_strategy = leaf_hash_strategy

        self._leaf_strategy = leaf_hash_strategy
        self._branch_strategy = branch_hash_strategy

    @property
    def leaf_hash_strategy(self) -> HashStrategy:
        return self._leaf_strategy

    @property
    def branch_hash_strategy(self) -> HashStrategy:
        return self._branch_strategy

    def set_leaf_hash_strategy(self, strategy: HashStrategy) -> None:
        """Replace the strategy used for hashing leaves."""
        self._leaf_strategy = strategy

    def set_branch_hash_strategy(self, strategy: HashStrategy) -> None:
        """Replace the strategy used for hashing internal nodes."""
        self._branch_strategy = strategy

    def _apply_element(self, current_hash: bytes, element: ProofElement) -> bytes:
        if element.direction == ProofDirection.LEFT:
            combined = element.sibling_hash + current_hash
        else:
            combined = current_hash + element.sibling_hash
        return self._branch_strategy.hash(combined)

    def compute_root(self, proof: MerkleProof) -> bytes:
        """
        Recompute the candidate root implied by a proof.

        Args:
            proof: Proof to replay

        Returns:
            Candidate root digest
        """
        current_hash = self._leaf_strategy.hash(proof.leaf_data)
        for element in proof.elements:
            current_hash = self._apply_element(current_hash, element)
        return current_hash

    def verify(self, proof: MerkleProof, expected_root: Optional[bytes] = None) -> bool:
        """
        Verify a Merkle proof.

        Args:
            proof: Proof to verify
            expected_root: Root to check against. Defaults to the root
                recorded in the proof.

        Returns:
            True if the recomputed root matches, False otherwise
        """
        start = time.perf_counter()

        target = proof.root_hash if expected_root is None else bytes(expected_root)
        computed = self.compute_root(proof)
        result = computed == target

        log_merkle_verification(
            logger,
            leaf_index=proof.leaf_index,
            success=result,
            duration_ms=(time.perf_counter() - start) * 1000,
            failure_reason=None if result else "root_mismatch",
            path_length=len(proof.elements),
        )

        return result

    def verify_simple(
        self,
        leaf_data: LeafData,
        proof: Iterable[Any],
        merkle_root: str,
    ) -> bool:
        """
        Verify a proof given as hex-encoded transport pairs.

        Args:
            leaf_data: Original leaf data
            proof: Iterable of (sibling_hash_hex, direction_code) pairs
            merkle_root: Expected root, hex encoded

        Returns:
            True if valid, False otherwise

        Raises:
            MalformedEncodingError: If any hex input or direction is malformed
        """
        merkle_proof = MerkleProof(
            leaf_data=leaf_data,
            leaf_index=0,  # index does not take part in verification
            elements=MerkleProof.from_api_format(proof),
            root_hash=decode_hex(merkle_root, "root hash"),
        )
        return self.verify(merkle_proof)

    def legacy_verify(
        self,
        leaf_data: LeafData,
        proof_path: Iterable[Mapping[str, str]],
        expected_root: str,
    ) -> bool:
        """
        Verify a proof in the deprecated {"sibling", "position"} format.

        Deprecated: use verify() with MerkleProof objects instead.

        Args:
            leaf_data: Original leaf data
            proof_path: Records of {"sibling": hex, "position": "left"|"right"}
            expected_root: Expected root, hex encoded

        Returns:
            True if valid, False otherwise

        Raises:
            MalformedEncodingError: If any hex input or position is malformed
        """
        warnings.warn(
            "legacy_verify() is deprecated; use verify() with MerkleProof objects instead",
            DeprecationWarning,
            stacklevel=2,
        )
        merkle_proof = MerkleProof(
            leaf_data=leaf_data,
            leaf_index=0,
            elements=MerkleProof.from_position_format(proof_path),
            root_hash=decode_hex(expected_root, "root hash"),
        )
        return self.verify(merkle_proof)

    def verify_leaf(self, proof: MerkleProof, leaf_data: LeafData) -> bool:
        """
        Verify that leaf_data, rather than the data recorded in the proof,
        sits on the proof's path.

        Returns:
            True if valid, False otherwise
        """
        return self.verify(replace(proof, leaf_data=leaf_data))
