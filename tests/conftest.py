"""
Pytest configuration and shared fixtures for Tallytree tests.
"""

import os
import tempfile
from pathlib import Path
from typing import Generator, List

import pytest

from tallytree.hashing import DEFAULT_TAG, TaggedSha256Strategy


def create_test_config_content(
    leaf_tag: str = "TEST_LEAF",
    branch_tag: str = "TEST_BRANCH",
    odd_node_policy: str = "carry",
    log_file: str = "",
) -> str:
    """
    Generate test configuration YAML content.
    
    Args:
        leaf_tag: Tag for leaf hashing.
        branch_tag: Tag for branch hashing.
        odd_node_policy: Odd node policy name.
        log_file: Optional log file path.
        
    Returns:
        YAML configuration content as string.
    """
    return f"""
hashing:
  leaf:
    algorithm: tagged-sha256
    tag: {leaf_tag}
  branch:
    algorithm: tagged-sha256
    tag: {branch_tag}

tree:
  odd_node_policy: {odd_node_policy}
  use_parallel: true
  parallel_threshold: 100

logging:
  level: WARNING
  file: "{log_file}"
  format: console
"""


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """
    Create a temporary directory for test files.
    
    Yields:
        Path to temporary directory that is cleaned up after test.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_config_path(temp_dir: Path) -> Path:
    """
    Create a sample configuration file for testing.
    
    Args:
        temp_dir: Temporary directory fixture.
        
    Returns:
        Path to sample config file.
    """
    config_path = temp_dir / "config.yaml"
    config_path.write_text(create_test_config_content())
    return config_path


@pytest.fixture
def default_strategy() -> TaggedSha256Strategy:
    """Tagged SHA-256 strategy with the library default tag."""
    return TaggedSha256Strategy(DEFAULT_TAG)


@pytest.fixture
def four_leaves() -> List[str]:
    """Four-leaf input used across proof direction scenarios."""
    return ["aaa", "bbb", "ccc", "ddd"]


@pytest.fixture
def balances() -> List[str]:
    """Proof-of-reserve style account balances (odd count)."""
    return [
        "account1:100.50",
        "account2:2500.75",
        "account3:0.05",
        "account4:7890.00",
        "account5:123.45",
    ]


@pytest.fixture
def leaves_file(temp_dir: Path, balances: List[str]) -> Path:
    """Write the balances fixture one leaf per line."""
    path = temp_dir / "leaves.txt"
    path.write_text("\n".join(balances) + "\n", encoding="utf-8")
    return path


# Hypothesis settings for property-based tests
from hypothesis import settings, Verbosity

# Register custom profile for Tallytree tests
settings.register_profile("tallytree", max_examples=100, verbosity=Verbosity.normal)
settings.register_profile("tallytree-ci", max_examples=1000, verbosity=Verbosity.verbose)
settings.register_profile("tallytree-dev", max_examples=10, verbosity=Verbosity.verbose)

# Load profile from environment or use default
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "tallytree"))
