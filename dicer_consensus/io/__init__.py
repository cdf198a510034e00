"""I/O utilities for dicer-consensus.

Provides the run log and cluster-table loading/writing.
"""

from .logging import get_logger, log_yaml
from .csv import ensure_output_dir, load_cluster_table, write_dataframe

__all__ = [
    # Run log
    "get_logger",
    "log_yaml",
    # Table I/O
    "ensure_output_dir",
    "load_cluster_table",
    "write_dataframe",
]
