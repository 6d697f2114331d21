"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tallytree, a product of Garudex Labs

Merkle tree implementation for tamper-evident commitments.

This module implements a binary Merkle tree over an ordered sequence of
records with pluggable leaf and branch hash strategies. It supports:
- Tree construction from leaf data
- Merkle proof generation for any leaf
- In-place leaf update with O(log n) path recomputation
- Parallel leaf hashing and level construction for large inputs
- An explicit odd-node policy (carry forward, or legacy duplication)
"""

import concurrent.futures
import time
from enum import Enum
from typing import Dict, Iterable, List, Optional, Union

from tallytree.exceptions import EmptyInputError, IndexOutOfRangeError
from tallytree.hashing.factory import DEFAULT_TAG
from tallytree.hashing.strategy import HashStrategy, TaggedSha256Strategy
from tallytree.logging_config import (
    get_logger,
    log_leaf_update,
    log_merkle_root_computation,
)
from tallytree.merkle.proof import (
    LeafData,
    MerkleProof,
    ProofDirection,
    ProofElement,
    snapshot_leaf,
)

logger = get_logger(__name__)


class OddNodePolicy(str, Enum):
    """
    Rule for the unpaired last node of an odd-length level.

    CARRY: the node moves to the next level unchanged (canonical).
    DUPLICATE: the node is paired with itself, H(node || node). Legacy mode
        kept for roots produced by older deployments; it yields different
        roots than CARRY for odd-length inputs.
    """

    CARRY = "carry"
    DUPLICATE = "duplicate"


class MerkleTree:
    """
    Binary Merkle tree with pluggable hashing and in-place updates.

    Levels are stored as flat lists of digests addressed by
    (level, position): levels[0] holds the leaf digests and levels[-1]
    holds the single root digest. Each next level has
    floor(n/2) + (n mod 2) entries.

    A single instance is not safe for concurrent mutation. Callers that
    share a tree between threads must serialize update_leaf against every
    other operation. Read-only operations may interleave freely.

    Example:
        >>> tree = MerkleTree(["aaa", "bbb", "ccc"])
        >>> proof = tree.generate_proof(2)
        >>> MerkleProofVerifier().verify(proof)
        True
        >>> new_root = tree.update_leaf(2, "ccc2")
    """

    # Threshold for parallel processing (use parallel for levels at least this large)
    PARALLEL_THRESHOLD = 100

    # Worker count for the hashing thread pool
    MAX_WORKERS = 4

    # Proof cache size limit
    MAX_PROOF_CACHE_SIZE = 1000

    def __init__(
        self,
        data: Iterable[LeafData],
        leaf_hash_strategy: Optional[HashStrategy] = None,
        branch_hash_strategy: Optional[HashStrategy] = None,
        odd_node_policy: Union[OddNodePolicy, str] = OddNodePolicy.CARRY,
        use_parallel: bool = True,
        parallel_threshold: Optional[int] = None,
    ):
        """
        Build Merkle tree from leaf data.

        Args:
            data: Ordered leaf data (str or bytes); order determines the root
            leaf_hash_strategy: Strategy for leaves (default: tagged SHA-256
                with DEFAULT_TAG)
            branch_hash_strategy: Strategy for internal nodes (default: the
                leaf strategy when one is given, else tagged SHA-256 with
                DEFAULT_TAG)
            odd_node_policy: How unpaired nodes are handled (default: CARRY)
            use_parallel: Enable thread pool hashing for large inputs
            parallel_threshold: Min level size for thread pool hashing
                (default: PARALLEL_THRESHOLD)

        Raises:
            EmptyInputError: If data is empty
            ValueError: If odd_node_policy is unknown
        """
        leaves = [snapshot_leaf(leaf) for leaf in data]
        if not leaves:
            raise EmptyInputError("Cannot create Merkle tree from empty leaves list")

        if leaf_hash_strategy is None:
            leaf_hash_strategy = TaggedSha256Strategy(DEFAULT_TAG)
        if branch_hash_strategy is None:
            branch_hash_strategy = leaf_hash_strategy

        self._leaf_strategy = leaf_hash_strategy
        self._branch_strategy = branch_hash_strategy
        self._odd_node_policy = OddNodePolicy(odd_node_policy)
        if self._odd_node_policy is OddNodePolicy.DUPLICATE:
            logger.warning("legacy_odd_node_policy", policy=self._odd_node_policy.value)

        self._leaves: List[LeafData] = leaves
        self.parallel_threshold = (
            self.PARALLEL_THRESHOLD if parallel_threshold is None else parallel_threshold
        )
        self.use_parallel = use_parallel and len(leaves) >= self.parallel_threshold

        start = time.perf_counter()

        if self.use_parallel:
            leaf_hashes = self._hash_leaves_parallel(leaves)
        else:
            leaf_hashes = [self._leaf_strategy.hash(leaf) for leaf in leaves]

        self._levels: List[List[bytes]] = self._build_tree(leaf_hashes)

        self._proof_cache: Dict[int, MerkleProof] = {}

        log_merkle_root_computation(
            logger,
            leaf_count=len(leaves),
            merkle_root=self.get_root_hex(),
            duration_ms=(time.perf_counter() - start) * 1000,
            odd_node_policy=self._odd_node_policy.value,
            leaf_algorithm=self._leaf_strategy.get_algorithm_name(),
            branch_algorithm=self._branch_strategy.get_algorithm_name(),
        )

    @property
    def leaf_hash_strategy(self) -> HashStrategy:
        return self._leaf_strategy

    @property
    def branch_hash_strategy(self) -> HashStrategy:
        return self._branch_strategy

    @property
    def odd_node_policy(self) -> OddNodePolicy:
        return self._odd_node_policy

    @property
    def leaf_count(self) -> int:
        return len(self._leaves)

    @property
    def depth(self) -> int:
        """Number of levels, leaves and root included."""
        return len(self._levels)

    def __len__(self) -> int:
        return len(self._leaves)

    def __repr__(self) -> str:
        return (
            f"MerkleTree(leaf_count={len(self._leaves)}, root={self.get_root_hex()}, "
            f"odd_node_policy={self._odd_node_policy.value})"
        )

    def _hash_leaves_parallel(self, leaves: List[LeafData]) -> List[bytes]:
        """
        Hash leaves in parallel using ThreadPoolExecutor.

        Args:
            leaves: List of leaf data to hash

        Returns:
            List of leaf digests in input order
        """
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.MAX_WORKERS) as executor:
            return list(executor.map(self._leaf_strategy.hash, leaves))

    def _hash_pair(self, left: bytes, right: bytes) -> bytes:
        """Hash two child digests as branch_strategy(left || right)."""
        return self._branch_strategy.hash(left + right)

    def _odd_parent(self, node: bytes) -> bytes:
        """Parent of an unpaired node under the configured policy."""
        if self._odd_node_policy is OddNodePolicy.DUPLICATE:
            return self._hash_pair(node, node)
        return node

    def _build_level(self, current_level: List[bytes]) -> List[bytes]:
        """
        Derive the next level from the current one.

        Consecutive pairs (2i, 2i+1) are hashed; an unpaired final node is
        handled by _odd_parent.
        """
        next_level = [
            self._hash_pair(current_level[i], current_level[i + 1])
            for i in range(0, len(current_level) - 1, 2)
        ]
        if len(current_level) % 2 == 1:
            next_level.append(self._odd_parent(current_level[-1]))
        return next_level

    def _build_level_parallel(self, current_level: List[bytes]) -> List[bytes]:
        """
        Derive the next level, hashing pairs on a thread pool.

        Produces exactly the same level as _build_level.
        """
        pairs = [
            (current_level[i], current_level[i + 1])
            for i in range(0, len(current_level) - 1, 2)
        ]
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.MAX_WORKERS) as executor:
            next_level = list(executor.map(lambda p: self._hash_pair(p[0], p[1]), pairs))
        if len(current_level) % 2 == 1:
            next_level.append(self._odd_parent(current_level[-1]))
        return next_level

    def _build_tree(self, leaf_hashes: List[bytes]) -> List[List[bytes]]:
        """
        Build Merkle tree bottom-up by hashing pairs.

        The tree is stored as a list of levels, where:
        - tree[0] is the leaf level
        - tree[-1] is the root level (single hash)

        Returns:
            List of levels, each level is a list of hashes
        """
        tree = [leaf_hashes]
        current_level = leaf_hashes

        while len(current_level) > 1:
            if self.use_parallel and len(current_level) >= self.parallel_threshold:
                current_level = self._build_level_parallel(current_level)
            else:
                current_level = self._build_level(current_level)
            tree.append(current_level)

        return tree

    def _check_index(self, index: int) -> None:
        if index < 0 or index >= len(self._leaves):
            raise IndexOutOfRangeError(index, len(self._leaves))

    def get_root(self) -> bytes:
        """Get the Merkle root hash."""
        return self._levels[-1][0]

    def get_root_hex(self) -> str:
        """Get the Merkle root hash as lowercase hex."""
        return self.get_root().hex()

    def get_leaf_count(self) -> int:
        """Get the number of leaves currently held."""
        return len(self._leaves)

    def get_leaf(self, index: int) -> LeafData:
        """
        Get the original data of a leaf.

        Raises:
            IndexOutOfRangeError: If index is out of range
        """
        self._check_index(index)
        return self._leaves[index]

    def get_leaf_hash(self, index: int) -> bytes:
        """
        Get the digest of a leaf.

        Raises:
            IndexOutOfRangeError: If index is out of range
        """
        self._check_index(index)
        return self._levels[0][index]

    def find_leaf(self, data: LeafData) -> int:
        """
        Find the first leaf whose data equals data exactly.

        str and bytes never compare equal, so "a" does not match b"a".

        Returns:
            Index of the leaf, or -1 if absent
        """
        for index, leaf in enumerate(self._leaves):
            if leaf == data:
                return index
        return -1

    def export_tree(self) -> List[List[str]]:
        """
        Export every level as hex digests, ordered leaves to root.

        Returns:
            List of levels, each a list of lowercase hex strings
        """
        return [[node.hex() for node in level] for level in self._levels]

    def generate_proof(self, leaf_index: int) -> MerkleProof:
        """
        Generate Merkle proof for a leaf at the given index.

        The proof consists of sibling hashes along the path from leaf to root,
        along with directions indicating whether each sibling is on the left
        or right. Under CARRY, levels where the node has no sibling
        contribute no element. Under DUPLICATE, the node's own digest is
        emitted as its right sibling.

        Args:
            leaf_index: Index of the leaf (0-based)

        Returns:
            MerkleProof snapshot against the current root

        Raises:
            IndexOutOfRangeError: If leaf_index is out of range
        """
        self._check_index(leaf_index)

        cached = self._proof_cache.get(leaf_index)
        if cached is not None:
            return cached

        elements: List[ProofElement] = []
        current_index = leaf_index

        for level in self._levels[:-1]:
            if current_index % 2 == 0:
                sibling_index = current_index + 1
                direction = ProofDirection.RIGHT
            else:
                sibling_index = current_index - 1
                direction = ProofDirection.LEFT

            if sibling_index < len(level):
                elements.append(ProofElement(level[sibling_index], direction))
            elif self._odd_node_policy is OddNodePolicy.DUPLICATE:
                elements.append(ProofElement(level[current_index], ProofDirection.RIGHT))

            current_index //= 2

        proof = MerkleProof(
            leaf_data=self._leaves[leaf_index],
            leaf_index=leaf_index,
            elements=tuple(elements),
            root_hash=self.get_root(),
        )

        if len(self._proof_cache) < self.MAX_PROOF_CACHE_SIZE:
            self._proof_cache[leaf_index] = proof

        return proof

    def update_leaf(self, leaf_index: int, new_data: LeafData) -> bytes:
        """
        Replace a leaf and recompute its path to the root.

        Only the parent slot on each level of the leaf-to-root path is
        rewritten, costing O(log n) hash operations. Proofs issued before
        the update are unaffected and keep their recorded root.

        Args:
            leaf_index: Index of the leaf to replace
            new_data: New leaf data

        Returns:
            The new root hash

        Raises:
            IndexOutOfRangeError: If leaf_index is out of range
        """
        self._check_index(leaf_index)

        old_root = self.get_root()

        new_data = snapshot_leaf(new_data)
        self._leaves[leaf_index] = new_data
        self._levels[0][leaf_index] = self._leaf_strategy.hash(new_data)
        hash_operations = 1

        current_index = leaf_index
        for depth in range(len(self._levels) - 1):
            level = self._levels[depth]
            parent_index = current_index // 2
            left_index = current_index - (current_index % 2)
            right_index = left_index + 1

            if right_index < len(level):
                parent = self._hash_pair(level[left_index], level[right_index])
                hash_operations += 1
            else:
                parent = self._odd_parent(level[current_index])
                if self._odd_node_policy is OddNodePolicy.DUPLICATE:
                    hash_operations += 1

            self._levels[depth + 1][parent_index] = parent
            current_index = parent_index

        self._proof_cache.clear()

        new_root = self.get_root()
        log_leaf_update(
            logger,
            leaf_index=leaf_index,
            old_root=old_root.hex(),
            new_root=new_root.hex(),
            hash_operations=hash_operations,
        )

        return new_root
