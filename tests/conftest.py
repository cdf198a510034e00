"""Pytest configuration and shared fixtures for dicer-consensus tests."""

import sys
from pathlib import Path

import pytest
import pandas as pd

# Add package to path
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tests.fixtures import create_cluster_table, create_mock_cluster_table


# ============================================================================
# Cluster Table Fixtures
# ============================================================================


@pytest.fixture
def scenario_table() -> pd.DataFrame:
    """Clusters covering the documented tie scenarios.

    cluster_1: 24, 24, N   -> 24 (2)
    cluster_2: 22, 23, 24  -> N (0) under exclude
    cluster_3: 24, N, NA   -> N (2)
    cluster_4: 21, 21, 21  -> 21 (3)
    cluster_5: 22, 22, 23  -> 22 (2)
    """
    return create_cluster_table({
        "S1": ["24", "22", "24", "21", "22"],
        "S2": ["24", "23", "N", "21", "22"],
        "S3": ["N", "24", "NA", "21", "23"],
    })


@pytest.fixture
def two_sample_table() -> pd.DataFrame:
    """Two replicates; cluster_1 is a known-vs-N tie."""
    return create_cluster_table({
        "S1": ["24", "21", "N"],
        "S2": ["N", "22", "NA"],
    })


@pytest.fixture
def chimeric_table() -> pd.DataFrame:
    """Heterograft and self-graft samples over genomes A and B.

    Self-grafts (controls) carry genome A only, so a known call on B_chr1
    in a self-graft is a mapping error.
    """
    return create_cluster_table(
        {
            "hetero_1": ["24", "24", "22", "24", "21"],
            "hetero_2": ["24", "24", "22", "N", "21"],
            "self_1":   ["N",  "24", "N",  "24", "21"],
            "self_2":   ["N",  "N",  "N",  "N",  "21"],
        },
        chromosomes=["B_chr1", "B_chr1", "B_chr1", "A_chr1", "A_chr2"],
    )


@pytest.fixture
def mock_table() -> pd.DataFrame:
    """Random 200-cluster table with five samples."""
    return create_mock_cluster_table(n_clusters=200, seed=42)


@pytest.fixture
def sample_consensus_config(tmp_path) -> Path:
    """Create sample consensus configuration file."""
    import yaml

    config = {
        "consensus": {
            "conditions": ["hetero_1", "hetero_2"],
            "ties": "random",
            "tidy": True,
            "seed": 7,
            "vocabulary": {"dicer_min": 21, "dicer_max": 24},
            "parallel": {"n_jobs": 2, "batch_size": 100},
        },
    }

    path = tmp_path / "consensus.yaml"
    with open(path, "w") as f:
        yaml.dump(config, f)

    return path
