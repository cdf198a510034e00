"""dicer-consensus: Consensus dicercalls for replicated small-RNA clusters.

This package provides tools for:
- Voting a consensus dicercall per cluster across replicate samples
- Resolving replicate ties by exclusion or seeded random choice
- Removing likely mapping errors in chimeric (two-genome) experiments
- Reading and writing cluster tables

Example usage:
    >>> from dicer_consensus.core.consensus import dicer_consensus
    >>> from dicer_consensus.io import load_cluster_table
    >>>
    >>> clusters = load_cluster_table("clusters.tsv")
    >>> out = dicer_consensus(clusters, ties="exclude", tidy=True)
"""

__version__ = "0.1.0"
