"""Test fixtures for dicer-consensus.

Provides mock data generators and test utilities.
"""

from .mock_clusters import (
    create_cluster_table,
    create_mock_cluster_table,
)

__all__ = [
    "create_cluster_table",
    "create_mock_cluster_table",
]
