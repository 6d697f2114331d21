"""
CLI entry point for Tallytree.

Provides command-line access to Merkle root computation, proof issuance,
proof verification and tree export.
"""

import sys
from pathlib import Path
from typing import Optional

import click

from tallytree._version import __version__
from tallytree.cli.context import CLIContext, pass_context
from tallytree.config.settings import get_default_config_path, load_config
from tallytree.exceptions import InvalidConfigurationError
from tallytree.logging_config import (
    get_logger,
    set_correlation_id,
    setup_logging,
    setup_logging_from_config,
)

logger = get_logger(__name__)


@click.group()
@click.option(
    '--config',
    '-c',
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    default=None,
    help=f'Path to configuration file (default: {get_default_config_path()})',
)
@click.option(
    '--log-level',
    '-l',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], case_sensitive=False),
    default=None,
    help='Set logging level (overrides configuration)',
)
@click.option(
    '--verbose',
    '-v',
    is_flag=True,
    help='Enable verbose output',
)
@click.version_option(version=__version__, prog_name='tallytree')
@pass_context
def cli(ctx: CLIContext, config: Optional[Path], log_level: Optional[str], verbose: bool):
    """
    Tallytree - Merkle commitments and inclusion proofs.
    
    Computes Merkle roots over ordered records, issues inclusion proofs and
    verifies them independently of the tree.
    """
    ctx.verbose = verbose
    ctx.config_path = str(config) if config else None
    
    # Route configuration loading messages to stderr before the real setup
    setup_logging(level=log_level or "WARNING", json_format=False)
    
    try:
        ctx.config = load_config(ctx.config_path)
    except InvalidConfigurationError as e:
        click.echo(f"Error: Invalid configuration: {e}", err=True)
        sys.exit(1)
    
    try:
        effective_log_level = setup_logging_from_config(ctx.config.logging, level_override=log_level)
    except OSError as e:
        click.echo(f"Error: Failed to set up logging: {e}", err=True)
        sys.exit(1)
    
    correlation_id = set_correlation_id()
    
    if verbose:
        logger.info(
            "cli_started",
            config_path=ctx.config_path or "defaults",
            log_level=effective_log_level,
            correlation_id=correlation_id,
        )


# Import and register Merkle commands
from tallytree.cli.merkle import merkle

cli.add_command(merkle)


def main():
    """Console script entry point."""
    cli()


if __name__ == '__main__':
    main()
