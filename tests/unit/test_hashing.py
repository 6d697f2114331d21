"""
Unit tests for hash strategies and the strategy factory.

Tests cover:
- Plain and tagged SHA-256 byte contracts
- str / bytes input equivalence
- Domain separation between tags
- Factory resolution, default tag and unsupported identifiers
"""

import hashlib

import pytest

from tallytree.exceptions import UnsupportedStrategyError
from tallytree.hashing import (
    DEFAULT_TAG,
    HashAlgorithm,
    HashStrategy,
    Sha256Strategy,
    Sha3_256Strategy,
    Sha512Strategy,
    TaggedSha256Strategy,
    compute_tag_hash,
    create_hash_strategy,
    resolve_algorithm,
    tagged_hash,
)
from tallytree.merkle import MerkleTree


class TestSha256Strategy:
    """Test plain SHA-256 strategy."""

    def test_matches_hashlib(self):
        """Test digest equals hashlib SHA-256."""
        strategy = Sha256Strategy()
        assert strategy.hash(b"leaf") == hashlib.sha256(b"leaf").digest()

    def test_str_is_utf8_encoded(self):
        """Test str input hashes as its UTF-8 bytes."""
        strategy = Sha256Strategy()
        assert strategy.hash("héllo") == strategy.hash("héllo".encode("utf-8"))

    def test_digest_size(self):
        """Test digest is 32 bytes."""
        strategy = Sha256Strategy()
        assert len(strategy.hash(b"")) == 32
        assert strategy.digest_size == 32

    def test_algorithm_name(self):
        """Test algorithm name."""
        assert Sha256Strategy().get_algorithm_name() == "SHA-256"


class TestTaggedSha256Strategy:
    """Test BIP-340 style tagged SHA-256 strategy."""

    def test_byte_contract(self):
        """Test hash equals SHA256(tagHash || tagHash || msg)."""
        tag_hash = hashlib.sha256(b"MERKLE_LEAF").digest()
        expected = hashlib.sha256(tag_hash + tag_hash + b"payload").digest()

        strategy = TaggedSha256Strategy("MERKLE_LEAF")
        assert strategy.hash(b"payload") == expected

    def test_tag_hash_precomputed(self):
        """Test tag hash is SHA256 of the UTF-8 tag."""
        strategy = TaggedSha256Strategy("Bitcoin_Transaction")
        assert strategy.tag == "Bitcoin_Transaction"
        assert strategy.tag_hash == hashlib.sha256(b"Bitcoin_Transaction").digest()
        assert compute_tag_hash("Bitcoin_Transaction") == strategy.tag_hash

    def test_matches_one_shot_helper(self):
        """Test strategy agrees with the tagged_hash helper."""
        strategy = TaggedSha256Strategy("AUDIT")
        assert strategy.hash("entry-1") == tagged_hash("AUDIT", "entry-1")

    def test_domain_separation(self):
        """Test different tags give different digests for the same message."""
        leaf = TaggedSha256Strategy("BALANCE_LEAF")
        branch = TaggedSha256Strategy("BALANCE_BRANCH")
        assert leaf.hash(b"x") != branch.hash(b"x")
        assert leaf.hash(b"x") != Sha256Strategy().hash(b"x")

    def test_deterministic(self):
        """Test the same input always hashes the same."""
        strategy = TaggedSha256Strategy("T")
        assert strategy.hash(b"data") == strategy.hash(b"data")
        assert strategy.hash(b"data") == TaggedSha256Strategy("T").hash(b"data")

    def test_unicode_tag(self):
        """Test non-ASCII tags are UTF-8 encoded."""
        strategy = TaggedSha256Strategy("réserve")
        assert strategy.tag_hash == hashlib.sha256("réserve".encode("utf-8")).digest()

    def test_algorithm_name_includes_tag(self):
        """Test algorithm name carries the tag."""
        assert TaggedSha256Strategy("X").get_algorithm_name() == "Tagged-SHA-256(X)"


class TestOtherStrategies:
    """Test additional plain strategies."""

    def test_sha512(self):
        """Test SHA-512 strategy."""
        strategy = Sha512Strategy()
        assert strategy.hash(b"a") == hashlib.sha512(b"a").digest()
        assert len(strategy.hash(b"a")) == 64

    def test_sha3_256(self):
        """Test SHA3-256 strategy."""
        strategy = Sha3_256Strategy()
        assert strategy.hash(b"a") == hashlib.sha3_256(b"a").digest()
        assert strategy.get_algorithm_name() == "SHA3-256"

    @pytest.mark.parametrize(
        "strategy",
        [Sha256Strategy(), TaggedSha256Strategy("T"), Sha512Strategy(), Sha3_256Strategy()],
    )
    def test_satisfies_protocol(self, strategy):
        """Test every strategy satisfies the HashStrategy protocol."""
        assert isinstance(strategy, HashStrategy)


class TestHashInput:
    """Test accepted hash input types."""

    STRATEGIES = [Sha256Strategy(), TaggedSha256Strategy("T"), Sha512Strategy(), Sha3_256Strategy()]

    @pytest.mark.parametrize("strategy", STRATEGIES)
    def test_bytes_like_inputs_agree(self, strategy):
        """Test bytes, bytearray and memoryview hash identically."""
        expected = strategy.hash(b"payload")
        assert strategy.hash(bytearray(b"payload")) == expected
        assert strategy.hash(memoryview(b"payload")) == expected

    @pytest.mark.parametrize("strategy", STRATEGIES)
    @pytest.mark.parametrize("value", [0, 2, 3.5, None, ["a"]])
    def test_rejects_non_bytes_input(self, strategy, value):
        """Test values that are neither str nor bytes-like raise TypeError."""
        with pytest.raises(TypeError):
            strategy.hash(value)

    def test_tagged_hash_rejects_int(self):
        """Test the one-shot helper rejects int input."""
        with pytest.raises(TypeError):
            tagged_hash("T", 2)

    def test_int_leaf_does_not_collide_with_empty_leaf(self):
        """Test an int leaf is rejected instead of hashing as zero bytes."""
        with pytest.raises(TypeError):
            MerkleTree([0])
        with pytest.raises(TypeError):
            MerkleTree(["aaa", 2])


class TestHashStrategyFactory:
    """Test create_hash_strategy."""

    def test_create_sha256(self):
        """Test plain SHA-256 creation."""
        assert isinstance(create_hash_strategy(HashAlgorithm.SHA256), Sha256Strategy)

    def test_create_from_string(self):
        """Test string identifiers resolve case-insensitively."""
        assert isinstance(create_hash_strategy("SHA256"), Sha256Strategy)
        assert isinstance(create_hash_strategy("sha3-256"), Sha3_256Strategy)
        assert isinstance(create_hash_strategy("sha512"), Sha512Strategy)

    def test_create_tagged_with_tag(self):
        """Test tagged strategy uses the supplied tag."""
        strategy = create_hash_strategy("tagged-sha256", tag="BALANCE_LEAF")
        assert isinstance(strategy, TaggedSha256Strategy)
        assert strategy.tag == "BALANCE_LEAF"

    def test_tagged_without_tag_uses_default(self):
        """Test the default tag is applied when none is supplied."""
        strategy = create_hash_strategy(HashAlgorithm.TAGGED_SHA256)
        assert strategy.tag == DEFAULT_TAG
        assert DEFAULT_TAG == "Bitcoin_Transaction"

    def test_default_algorithm_is_tagged(self):
        """Test the factory default is tagged SHA-256."""
        assert isinstance(create_hash_strategy(), TaggedSha256Strategy)

    def test_tag_ignored_for_plain_algorithm(self):
        """Test a tag passed to a plain algorithm does not change its digest."""
        strategy = create_hash_strategy("sha256", tag="IGNORED")
        assert strategy.hash(b"a") == hashlib.sha256(b"a").digest()

    def test_unsupported_algorithm(self):
        """Test unknown identifiers raise UnsupportedStrategyError."""
        with pytest.raises(UnsupportedStrategyError, match="Unsupported hash algorithm"):
            create_hash_strategy("md5")

    def test_unsupported_is_value_error(self):
        """Test UnsupportedStrategyError can be caught as ValueError."""
        with pytest.raises(ValueError):
            resolve_algorithm("keccak256")
