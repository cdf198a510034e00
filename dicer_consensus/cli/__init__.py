"""Command-line interface for dicer-consensus.

Example Usage
-------------
    # From command line:
    dicer-consensus --help
    dicer-consensus samples --input clusters.tsv
    dicer-consensus consensus --input clusters.tsv --out out/consensus.tsv --tidy
"""

from .main import cli, main

__all__ = [
    "cli",
    "main",
]
