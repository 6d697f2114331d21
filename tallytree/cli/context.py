"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tallytree, a product of Garudex Labs

CLI context for Tallytree.

Provides the shared context object and decorator for CLI commands. The
context carries the loaded configuration plus the hashing and policy
overrides given on the `merkle` group, and turns them into a
MerkleTreeBuilder.
"""

from dataclasses import replace
from typing import Optional

import click

from tallytree.config.settings import TallytreeConfig, get_default_config
from tallytree.merkle import MerkleTreeBuilder


# Global context object to share configuration across commands
class CLIContext:
    """Context object for CLI commands."""

    def __init__(self):
        self.config: Optional[TallytreeConfig] = None
        self.config_path: Optional[str] = None
        self.verbose = False
        self.leaf_tag: Optional[str] = None
        self.branch_tag: Optional[str] = None
        self.odd_node_policy: Optional[str] = None

    def effective_config(self) -> TallytreeConfig:
        """Loaded configuration with command-line overrides applied."""
        config = self.config if self.config is not None else get_default_config()

        hashing = config.hashing
        if self.leaf_tag:
            hashing = replace(hashing, leaf=replace(hashing.leaf, tag=self.leaf_tag))
        if self.branch_tag:
            hashing = replace(hashing, branch=replace(hashing.branch, tag=self.branch_tag))

        tree = config.tree
        if self.odd_node_policy:
            tree = replace(tree, odd_node_policy=self.odd_node_policy)

        return replace(config, hashing=hashing, tree=tree)

    def make_builder(self) -> MerkleTreeBuilder:
        """
        Create a builder for the effective configuration.

        Raises:
            UnsupportedStrategyError: If a configured algorithm is unknown
        """
        return MerkleTreeBuilder(self.effective_config())


pass_context = click.make_pass_decorator(CLIContext, ensure=True)
