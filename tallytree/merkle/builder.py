"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tallytree, a product of Garudex Labs

Configuration-driven Merkle tree construction.

MerkleTreeBuilder resolves the leaf and branch strategies and the odd-node
policy from a TallytreeConfig, so that the tree and every verifier handed
out for it are guaranteed to agree on hashing.
"""

from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

from tallytree.exceptions import EmptyInputError
from tallytree.hashing.factory import create_hash_strategy
from tallytree.hashing.strategy import HashStrategy
from tallytree.logging_config import get_logger
from tallytree.merkle.proof import LeafData, MerkleProof
from tallytree.merkle.tree import MerkleTree, OddNodePolicy
from tallytree.merkle.verifier import MerkleProofVerifier

if TYPE_CHECKING:
    from tallytree.config.settings import TallytreeConfig

logger = get_logger(__name__)


def create_strategies(config: "TallytreeConfig") -> Tuple[HashStrategy, HashStrategy]:
    """
    Create the (leaf, branch) strategy pair described by a configuration.

    Raises:
        UnsupportedStrategyError: If a configured algorithm is unknown
    """
    leaf = create_hash_strategy(config.hashing.leaf.algorithm, config.hashing.leaf.tag)
    branch = create_hash_strategy(config.hashing.branch.algorithm, config.hashing.branch.tag)
    return leaf, branch


class MerkleTreeBuilder:
    """
    Builder class for constructing Merkle trees from configuration.

    Example:
        >>> builder = MerkleTreeBuilder(load_config())
        >>> root = builder.build_tree(["account1:100.50", "account2:7.25"]).get_root()
        >>> proof = builder.get_proof(1)
        >>> assert builder.create_verifier().verify(proof)
    """

    def __init__(self, config: Optional["TallytreeConfig"] = None):
        """
        Initialize the Merkle tree builder.

        Args:
            config: Configuration to build from (default: built-in defaults)
        """
        if config is None:
            # Imported here to avoid a circular import with tallytree.config
            from tallytree.config.settings import get_default_config
            config = get_default_config()

        self.config = config
        self._leaf_strategy, self._branch_strategy = create_strategies(config)
        self._odd_node_policy = OddNodePolicy(config.tree.odd_node_policy.lower())
        self._tree: Optional[MerkleTree] = None

    @property
    def leaf_hash_strategy(self) -> HashStrategy:
        return self._leaf_strategy

    @property
    def branch_hash_strategy(self) -> HashStrategy:
        return self._branch_strategy

    def build_tree(self, leaves: Sequence[LeafData]) -> "MerkleTreeBuilder":
        """
        Build Merkle tree from leaf data.

        Args:
            leaves: Ordered leaf data

        Returns:
            Self for method chaining

        Raises:
            EmptyInputError: If leaves is empty
        """
        leaves = list(leaves)
        if not leaves:
            raise EmptyInputError("Cannot build Merkle tree from empty leaves list")

        self._tree = MerkleTree(
            leaves,
            leaf_hash_strategy=self._leaf_strategy,
            branch_hash_strategy=self._branch_strategy,
            odd_node_policy=self._odd_node_policy,
            use_parallel=self.config.tree.use_parallel,
            parallel_threshold=self.config.tree.parallel_threshold,
        )

        logger.debug(f"Built Merkle tree with {len(leaves)} leaves")

        return self

    def get_tree(self) -> MerkleTree:
        """
        Get the built tree.

        Raises:
            RuntimeError: If tree has not been built yet
        """
        if self._tree is None:
            raise RuntimeError("Tree has not been built yet. Call build_tree() first.")
        return self._tree

    def get_root(self) -> bytes:
        """
        Get the Merkle root hash.

        Raises:
            RuntimeError: If tree has not been built yet
        """
        return self.get_tree().get_root()

    def get_proof(self, leaf_index: int) -> MerkleProof:
        """
        Generate Merkle proof for the leaf at the given index.

        Raises:
            RuntimeError: If tree has not been built yet
            IndexOutOfRangeError: If leaf_index is out of range
        """
        return self.get_tree().generate_proof(leaf_index)

    def create_verifier(self) -> MerkleProofVerifier:
        """Create a verifier using the same strategies as the built tree."""
        return MerkleProofVerifier(self._leaf_strategy, self._branch_strategy)

    def get_leaves(self) -> List[LeafData]:
        """Return a copy of the current leaf data."""
        tree = self.get_tree()
        return [tree.get_leaf(i) for i in range(tree.get_leaf_count())]
