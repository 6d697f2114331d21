"""
CLI commands for Merkle tree operations.

Provides commands for:
- Computing the Merkle root of a leaves file
- Issuing an inclusion proof for one leaf
- Verifying an inclusion proof document
- Exporting the full level structure
"""

import json
import sys
from pathlib import Path
from typing import List, Optional

import click

from tallytree.cli.context import CLIContext, pass_context
from tallytree.exceptions import TallytreeError
from tallytree.logging_config import get_logger
from tallytree.merkle import MerkleProof, MerkleTreeBuilder, OddNodePolicy
from tallytree.merkle.proof import decode_hex

logger = get_logger(__name__)


def read_leaves(path: Path, json_input: bool = False) -> List[str]:
    """
    Read leaf data from a file.

    Args:
        path: File holding one UTF-8 leaf per line, or a JSON array of strings
        json_input: Parse the file as a JSON array

    Returns:
        Ordered leaf data

    Raises:
        click.BadParameter: If the JSON content is not an array of strings
    """
    text = Path(path).read_text(encoding="utf-8")

    if json_input:
        try:
            leaves = json.loads(text)
        except json.JSONDecodeError as e:
            raise click.BadParameter(f"Invalid JSON in {path}: {e}")
        if not isinstance(leaves, list) or not all(isinstance(leaf, str) for leaf in leaves):
            raise click.BadParameter(f"{path} must contain a JSON array of strings")
        return leaves

    leaves = text.split("\n")
    if leaves[-1] == "":
        leaves.pop()
    return leaves


def _build(ctx: CLIContext, leaves_file: Path, json_input: bool) -> MerkleTreeBuilder:
    leaves = read_leaves(leaves_file, json_input)
    try:
        return ctx.make_builder().build_tree(leaves)
    except TallytreeError as e:
        logger.error("merkle_build_failed", leaves_file=str(leaves_file), error=str(e))
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.group()
@click.option("--leaf-tag", help="Tag for leaf hashing (overrides configuration)")
@click.option("--branch-tag", help="Tag for branch hashing (overrides configuration)")
@click.option(
    "--policy",
    type=click.Choice([policy.value for policy in OddNodePolicy], case_sensitive=False),
    help="Odd node policy (overrides configuration)",
)
@pass_context
def merkle(ctx: CLIContext, leaf_tag: Optional[str], branch_tag: Optional[str], policy: Optional[str]):
    """Merkle root, proof and verification operations."""
    ctx.leaf_tag = leaf_tag
    ctx.branch_tag = branch_tag
    ctx.odd_node_policy = policy.lower() if policy else None


json_input_option = click.option(
    "--json",
    "json_input",
    is_flag=True,
    help="Read LEAVES_FILE as a JSON array of strings instead of one leaf per line",
)


@merkle.command("root")
@click.argument("leaves_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@json_input_option
@pass_context
def root(ctx: CLIContext, leaves_file: Path, json_input: bool):
    """
    Print the Merkle root of LEAVES_FILE as hex.

    Examples:

        tallytree merkle root balances.txt

        tallytree merkle --leaf-tag BALANCE_LEAF --branch-tag BALANCE_BRANCH root balances.txt
    """
    builder = _build(ctx, leaves_file, json_input)
    tree = builder.get_tree()

    if ctx.verbose:
        click.echo(f"Leaves: {tree.get_leaf_count()}", err=True)
        click.echo(f"Leaf hash: {tree.leaf_hash_strategy.get_algorithm_name()}", err=True)
        click.echo(f"Branch hash: {tree.branch_hash_strategy.get_algorithm_name()}", err=True)

    click.echo(tree.get_root_hex())


@merkle.command("proof")
@click.argument("leaves_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("index", type=int)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the proof document to a file instead of stdout",
)
@json_input_option
@pass_context
def proof(ctx: CLIContext, leaves_file: Path, index: int, output: Optional[Path], json_input: bool):
    """
    Issue an inclusion proof for leaf INDEX of LEAVES_FILE.

    The proof document is JSON with the leaf data, leaf index, sibling path
    as [hash_hex, direction] pairs (0=left, 1=right) and the root.
    """
    builder = _build(ctx, leaves_file, json_input)

    try:
        merkle_proof = builder.get_proof(index)
    except TallytreeError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    document = json.dumps(merkle_proof.to_dict(), indent=2)

    if output is not None:
        output.write_text(document + "\n", encoding="utf-8")
        logger.info("proof_written", leaf_index=index, path=str(output))
        click.echo(f"✓ Proof for leaf {index} written to {output}", err=True)
    else:
        click.echo(document)


@merkle.command("verify")
@click.argument("proof_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--root",
    "expected_root",
    help="Check against this root (hex) instead of the root recorded in the proof",
)
@pass_context
def verify(ctx: CLIContext, proof_file: Path, expected_root: Optional[str]):
    """
    Verify the inclusion proof document PROOF_FILE.

    Prints VALID and exits 0, or prints INVALID and exits 2. Malformed
    input exits 1.
    """
    try:
        document = json.loads(proof_file.read_text(encoding="utf-8"))
        merkle_proof = MerkleProof.from_dict(document)
        root_bytes = decode_hex(expected_root, "root hash") if expected_root else None
        verifier = ctx.make_builder().create_verifier()
    except json.JSONDecodeError as e:
        click.echo(f"Error: Invalid JSON in {proof_file}: {e}", err=True)
        sys.exit(1)
    except TallytreeError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if verifier.verify(merkle_proof, expected_root=root_bytes):
        click.echo("VALID")
    else:
        click.echo("INVALID")
        sys.exit(2)


@merkle.command("export")
@click.argument("leaves_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@json_input_option
@pass_context
def export(ctx: CLIContext, leaves_file: Path, json_input: bool):
    """Print every tree level of LEAVES_FILE as JSON, leaves to root."""
    builder = _build(ctx, leaves_file, json_input)
    click.echo(json.dumps(builder.get_tree().export_tree(), indent=2))
