"""Consensus module for replicate dicercalls.

This module provides the ConsensusEngine for collapsing per-replicate
dicercalls of small-RNA clusters into one consensus call.

Key Features:
- Replicate selection: vote over all samples or a named subset
- Tie policies: "exclude" (known-vs-known ties become N) or "random"
- Chimeric filter: void calls on the non-native genome seen in controls
- Tidy output: optionally drop clusters without a consensus
- Row-batch parallelism via joblib

Example Usage
-------------
Functional form:

    >>> from dicer_consensus.core.consensus import dicer_consensus
    >>> out = dicer_consensus(clusters, ties="exclude", tidy=True)

With configuration:

    >>> from dicer_consensus.core.consensus import ConsensusEngine, ConsensusConfig
    >>> config = ConsensusConfig.from_yaml("consensus.yaml")
    >>> result = ConsensusEngine(config).execute(clusters)
    >>> print(f"{result.n_rows_out:,} clusters, {result.n_ties_excluded} ties excluded")
"""

# Configuration
from .config import (
    ColumnConfig,
    ConsensusConfig,
    ParallelConfig,
    VocabularyConfig,
)

# Errors
from .errors import (
    ConsensusError,
    InvalidConditionError,
    InvalidConfigError,
    InvalidPolicyError,
    MissingChimericParametersError,
    MissingColumnError,
    UnknownClassificationValueError,
    UnknownGenomeIdError,
)

# Vocabulary and voting rules
from .rules import (
    DicerCall,
    TIE_POLICIES,
    known_calls,
    parse_call,
    resolve_tally,
    tally_calls,
    tied_maxima,
)

from .selection import replicate_samples, select_replicate_columns
from .chimeric import genome_rows, has_control_signal, validate_chimeric_inputs
from .parallel import RowOutcome, resolve_row
from .engine import ConsensusEngine, ConsensusResult, dicer_consensus

__all__ = [
    # Configuration
    "ColumnConfig",
    "ConsensusConfig",
    "ParallelConfig",
    "VocabularyConfig",
    # Errors
    "ConsensusError",
    "InvalidConditionError",
    "InvalidConfigError",
    "InvalidPolicyError",
    "MissingChimericParametersError",
    "MissingColumnError",
    "UnknownClassificationValueError",
    "UnknownGenomeIdError",
    # Rules
    "DicerCall",
    "TIE_POLICIES",
    "known_calls",
    "parse_call",
    "resolve_tally",
    "tally_calls",
    "tied_maxima",
    # Selection / chimeric
    "replicate_samples",
    "select_replicate_columns",
    "genome_rows",
    "has_control_signal",
    "validate_chimeric_inputs",
    # Row resolution / engine
    "RowOutcome",
    "resolve_row",
    "ConsensusEngine",
    "ConsensusResult",
    "dicer_consensus",
]
