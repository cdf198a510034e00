"""Mapping-error filter for chimeric (two-genome) experiments.

In a graft or other two-genome system, reads from one genome can mis-map to
the other. Control samples carry no genuine small RNA from the non-native
genome, so a known dicercall in a control at a locus on that genome points
to mis-mapping rather than biology. Such clusters lose their consensus.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from .errors import (
    InvalidConditionError,
    MissingChimericParametersError,
    UnknownGenomeIdError,
)
from .rules import DicerCall


def validate_chimeric_inputs(
    data: pd.DataFrame,
    replicate_cols: Sequence[str],
    controls: Optional[Sequence[str]],
    genome_id: Optional[str],
    chr_col: str = "chr",
    prefix: str = "DicerCall_",
    genome_match: str = "exact",
) -> List[str]:
    """Check chimeric parameters and return the control dicercall columns.

    Raises
    ------
    MissingChimericParametersError
        If genome_id or controls is missing
    InvalidConditionError
        If a control is not part of the replicate set
    UnknownGenomeIdError
        If genome_id matches no chromosome in the table
    """
    if not genome_id or not controls:
        raise MissingChimericParametersError(
            "Chimeric mode needs both a genome id and at least one control sample"
        )

    control_cols = [f"{prefix}{c}" for c in dict.fromkeys(str(c) for c in controls)]
    missing = [col[len(prefix):] for col in control_cols if col not in replicate_cols]
    if missing:
        raise InvalidConditionError(
            missing, [col[len(prefix):] for col in replicate_cols]
        )

    if not genome_rows(data[chr_col], genome_id, genome_match).any():
        raise UnknownGenomeIdError(
            f"Genome id '{genome_id}' does not match any value in column '{chr_col}'"
        )

    return control_cols


def genome_rows(chromosomes: pd.Series, genome_id: str, genome_match: str = "exact") -> np.ndarray:
    """Boolean mask of rows located on the genome_id genome."""
    names = chromosomes.astype(str)
    if genome_match == "prefix":
        return names.str.startswith(genome_id).to_numpy()
    return (names == genome_id).to_numpy()


def has_control_signal(control_calls: Iterable[DicerCall]) -> bool:
    """True if any control reports a known dicercall."""
    return any(call.is_known for call in control_calls)
