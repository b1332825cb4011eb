"""cloudmap command-line interface.

Exposes:
    cli -- Click group entry point (registered as ``cloudmap`` script).
"""

from cloudmap.cli.main import cli

__all__ = ["cli"]
