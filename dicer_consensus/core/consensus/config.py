"""Configuration dataclasses for the consensus module.

This module defines configuration structures for:
- Column naming (cluster id, chromosome, dicercall prefix, output columns)
- The accepted dicercall vocabulary
- Row-batch parallelism
- Tie policy, tidy and chimeric options
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import InvalidConfigError
from .rules import SIZE_RANGE, TIE_POLICIES

GENOME_MATCH_MODES = ("exact", "prefix")


@dataclass
class ColumnConfig:
    """Column names in the cluster table.

    Attributes
    ----------
    cluster_col : str
        Cluster identifier column
    chr_col : str
        Chromosome / genome-of-origin column
    call_prefix : str
        Prefix of the per-sample dicercall columns
    support_col : str
        Output column holding the consensus support count
    consensus_col : str
        Output column holding the consensus dicercall
    """

    cluster_col: str = "Cluster"
    chr_col: str = "chr"
    call_prefix: str = "DicerCall_"
    support_col: str = "DicerCounts"
    consensus_col: str = "DicerConsensus"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ColumnConfig":
        """Create ColumnConfig from dictionary."""
        return cls(
            cluster_col=data.get("cluster_col", "Cluster"),
            chr_col=data.get("chr_col", "chr"),
            call_prefix=data.get("call_prefix", "DicerCall_"),
            support_col=data.get("support_col", "DicerCounts"),
            consensus_col=data.get("consensus_col", "DicerConsensus"),
        )


@dataclass
class VocabularyConfig:
    """Accepted dicercall size window.

    Attributes
    ----------
    dicer_min : int
        Smallest size class (nt) accepted as a known call
    dicer_max : int
        Largest size class (nt) accepted as a known call
    """

    dicer_min: int = 20
    dicer_max: int = 24

    def __post_init__(self):
        lo, hi = SIZE_RANGE
        if not (lo <= self.dicer_min <= self.dicer_max <= hi):
            raise InvalidConfigError(
                f"dicer_min/dicer_max must satisfy {lo} <= min <= max <= {hi}, "
                f"got {self.dicer_min}/{self.dicer_max}"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VocabularyConfig":
        """Create VocabularyConfig from dictionary."""
        return cls(
            dicer_min=int(data.get("dicer_min", 20)),
            dicer_max=int(data.get("dicer_max", 24)),
        )


@dataclass
class ParallelConfig:
    """Row-batch parallelism.

    Attributes
    ----------
    n_jobs : int
        Number of joblib workers (1 = sequential)
    batch_size : int
        Rows per work batch
    """

    n_jobs: int = 1
    batch_size: int = 5000

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParallelConfig":
        """Create ParallelConfig from dictionary."""
        return cls(
            n_jobs=int(data.get("n_jobs", 1)),
            batch_size=int(data.get("batch_size", 5000)),
        )


@dataclass
class ConsensusConfig:
    """Master configuration for a consensus run.

    Attributes
    ----------
    conditions : List[str], optional
        Replicate samples used for voting (None = all)
    ties : str
        Tie policy: "exclude" or "random"
    tidy : bool
        Drop clusters whose consensus is unclassified
    chimeric : bool
        Enable the chimeric mapping-error filter
    controls : List[str]
        Control samples for the chimeric filter
    genome_id : str, optional
        Chromosome identifier of the non-native genome
    genome_match : str
        "exact" or "prefix" matching of genome_id against chromosome names
    seed : int, optional
        Seed for the "random" tie policy
    """

    conditions: Optional[List[str]] = None
    ties: str = "exclude"
    tidy: bool = False
    chimeric: bool = False
    controls: List[str] = field(default_factory=list)
    genome_id: Optional[str] = None
    genome_match: str = "exact"
    seed: Optional[int] = None
    columns: ColumnConfig = field(default_factory=ColumnConfig)
    vocabulary: VocabularyConfig = field(default_factory=VocabularyConfig)
    parallel: ParallelConfig = field(default_factory=ParallelConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConsensusConfig":
        """Create ConsensusConfig from dictionary."""
        conditions = data.get("conditions")
        return cls(
            conditions=list(conditions) if conditions else None,
            ties=data.get("ties", "exclude"),
            tidy=bool(data.get("tidy", False)),
            chimeric=bool(data.get("chimeric", False)),
            controls=list(data.get("controls") or []),
            genome_id=data.get("genome_id"),
            genome_match=data.get("genome_match", "exact"),
            seed=data.get("seed"),
            columns=ColumnConfig.from_dict(data.get("columns", {})),
            vocabulary=VocabularyConfig.from_dict(data.get("vocabulary", {})),
            parallel=ParallelConfig.from_dict(data.get("parallel", {})),
        )

    @classmethod
    def from_yaml(cls, path: Path) -> "ConsensusConfig":
        """Load configuration from YAML file.

        The settings may sit at the top level or under a ``consensus`` key.
        """
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if "consensus" in data:
            data = data["consensus"]

        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "conditions": self.conditions,
            "ties": self.ties,
            "tidy": self.tidy,
            "chimeric": self.chimeric,
            "controls": list(self.controls),
            "genome_id": self.genome_id,
            "genome_match": self.genome_match,
            "seed": self.seed,
            "columns": {
                "cluster_col": self.columns.cluster_col,
                "chr_col": self.columns.chr_col,
                "call_prefix": self.columns.call_prefix,
                "support_col": self.columns.support_col,
                "consensus_col": self.columns.consensus_col,
            },
            "vocabulary": {
                "dicer_min": self.vocabulary.dicer_min,
                "dicer_max": self.vocabulary.dicer_max,
            },
            "parallel": {
                "n_jobs": self.parallel.n_jobs,
                "batch_size": self.parallel.batch_size,
            },
        }

    def validate(self) -> List[str]:
        """Return a list of problems with option values (empty if valid)."""
        problems = []
        if self.ties not in TIE_POLICIES:
            problems.append(f"ties must be one of {list(TIE_POLICIES)}, got '{self.ties}'")
        if self.genome_match not in GENOME_MATCH_MODES:
            problems.append(
                f"genome_match must be one of {list(GENOME_MATCH_MODES)}, got '{self.genome_match}'"
            )
        if self.parallel.n_jobs == 0:
            problems.append("parallel.n_jobs must be non-zero")
        if self.parallel.batch_size < 1:
            problems.append("parallel.batch_size must be >= 1")
        return problems
