"""
Property-based tests for Merkle tree invariants.

Tests cover:
- Every issued proof verifies against its recorded root
- Level shape for arbitrary leaf counts
- In-place update equals a full rebuild
- Any single-byte change to leaf data breaks the proof
"""

import dataclasses

from hypothesis import given, strategies as st

from tallytree.merkle import MerkleProofVerifier, MerkleTree, OddNodePolicy


leaf_lists = st.lists(st.binary(max_size=32), min_size=1, max_size=40)
policies = st.sampled_from(list(OddNodePolicy))


@given(leaves=leaf_lists, policy=policies, data=st.data())
def test_every_proof_verifies(leaves, policy, data):
    """Test a proof for any index verifies against the tree root."""
    tree = MerkleTree(leaves, odd_node_policy=policy, use_parallel=False)
    index = data.draw(st.integers(min_value=0, max_value=len(leaves) - 1))

    proof = tree.generate_proof(index)

    assert proof.root_hash == tree.get_root()
    assert MerkleProofVerifier().verify(proof)


@given(leaves=leaf_lists, policy=policies)
def test_level_shape(leaves, policy):
    """Test level sizes follow floor(n/2) + (n mod 2) down to one root."""
    levels = MerkleTree(leaves, odd_node_policy=policy, use_parallel=False).export_tree()

    assert len(levels[0]) == len(leaves)
    assert len(levels[-1]) == 1
    for lower, upper in zip(levels, levels[1:]):
        assert len(upper) == (len(lower) + 1) // 2


@given(leaves=leaf_lists, policy=policies, replacement=st.binary(max_size=32), data=st.data())
def test_update_matches_rebuild(leaves, policy, replacement, data):
    """Test update_leaf yields exactly the tree a rebuild would."""
    index = data.draw(st.integers(min_value=0, max_value=len(leaves) - 1))
    tree = MerkleTree(leaves, odd_node_policy=policy, use_parallel=False)

    new_root = tree.update_leaf(index, replacement)

    expected = list(leaves)
    expected[index] = replacement
    rebuilt = MerkleTree(expected, odd_node_policy=policy, use_parallel=False)
    assert new_root == rebuilt.get_root()
    assert tree.export_tree() == rebuilt.export_tree()


@given(leaves=leaf_lists, data=st.data())
def test_modified_leaf_fails(leaves, data):
    """Test flipping any bit of the leaf data breaks verification."""
    index = data.draw(st.integers(min_value=0, max_value=len(leaves) - 1))
    proof = MerkleTree(leaves, use_parallel=False).generate_proof(index)

    original = proof.leaf_data + b"\x00" if not proof.leaf_data else proof.leaf_data
    position = data.draw(st.integers(min_value=0, max_value=len(original) - 1))
    changed = bytearray(original)
    changed[position] ^= 0x01
    tampered = dataclasses.replace(proof, leaf_data=bytes(changed))

    assert not MerkleProofVerifier().verify(tampered)
