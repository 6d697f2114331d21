"""
Unit tests for exception hierarchy.
"""

import pytest
from tallytree.exceptions import (
    ConfigurationError,
    EmptyInputError,
    HashingError,
    IndexOutOfRangeError,
    InvalidConfigurationError,
    MalformedEncodingError,
    ProofError,
    TallytreeError,
    TreeError,
    UnsupportedStrategyError,
)


class TestExceptionHierarchy:
    """Test that exception hierarchy is correctly defined."""

    def test_base_exception(self):
        """Test that TallytreeError is the base exception."""
        error = TallytreeError("test error")
        assert isinstance(error, Exception)
        assert str(error) == "test error"

    def test_tree_errors_inherit_from_base(self):
        """Test that tree errors inherit from TallytreeError."""
        assert issubclass(TreeError, TallytreeError)
        assert issubclass(EmptyInputError, TreeError)
        assert issubclass(IndexOutOfRangeError, TreeError)

    def test_hashing_errors_inherit_from_base(self):
        """Test that hashing errors inherit from TallytreeError."""
        assert issubclass(HashingError, TallytreeError)
        assert issubclass(UnsupportedStrategyError, HashingError)

    def test_proof_errors_inherit_from_base(self):
        """Test that proof errors inherit from TallytreeError."""
        assert issubclass(ProofError, TallytreeError)
        assert issubclass(MalformedEncodingError, ProofError)

    def test_configuration_errors_inherit_from_base(self):
        """Test that configuration errors inherit from TallytreeError."""
        assert issubclass(ConfigurationError, TallytreeError)
        assert issubclass(InvalidConfigurationError, ConfigurationError)


class TestBuiltinCompatibility:
    """Test that errors can be caught as the matching builtin exception."""

    @pytest.mark.parametrize(
        "error_class",
        [EmptyInputError, UnsupportedStrategyError, MalformedEncodingError],
    )
    def test_value_errors(self, error_class):
        """Test input errors are ValueErrors."""
        with pytest.raises(ValueError):
            raise error_class("bad input")

    def test_index_out_of_range_is_index_error(self):
        """Test IndexOutOfRangeError is an IndexError."""
        with pytest.raises(IndexError):
            raise IndexOutOfRangeError(7, 3)

    def test_index_out_of_range_message(self):
        """Test IndexOutOfRangeError reports the index and valid range."""
        error = IndexOutOfRangeError(7, 3)
        assert str(error) == "Leaf index 7 out of range [0, 3)"
        assert error.index == 7
        assert error.leaf_count == 3
