"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tallytree, a product of Garudex Labs

Version information for Tallytree.

Source checkouts and editable installs read the VERSION file at the
repository root; regular installs fall back to the installed distribution
metadata.
"""

from importlib import metadata
from pathlib import Path


def get_version() -> str:
    """
    Resolve the package version.

    Returns:
        str: The version string (e.g., "0.4.0"), or "unknown"
    """
    version_file = Path(__file__).parent.parent / "VERSION"
    if version_file.exists():
        return version_file.read_text().strip()
    try:
        return metadata.version("tallytree")
    except metadata.PackageNotFoundError:
        return "unknown"


__version__ = get_version()
