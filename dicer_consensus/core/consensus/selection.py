"""Replicate column selection."""

from __future__ import annotations

from typing import List, Optional, Sequence

import pandas as pd

from .errors import InvalidConditionError, MissingColumnError


def replicate_samples(data: pd.DataFrame, prefix: str = "DicerCall_") -> List[str]:
    """Sample names that have a dicercall column, in table order."""
    return [
        str(col)[len(prefix):]
        for col in data.columns
        if str(col).startswith(prefix) and len(str(col)) > len(prefix)
    ]


def select_replicate_columns(
    data: pd.DataFrame,
    conditions: Optional[Sequence[str]] = None,
    prefix: str = "DicerCall_",
) -> List[str]:
    """Return the dicercall columns used for voting.

    Parameters
    ----------
    data : pd.DataFrame
        Cluster table
    conditions : Sequence[str], optional
        Sample names to keep. All samples are used when None or empty.
    prefix : str
        Dicercall column prefix

    Returns
    -------
    List[str]
        Column names, in the order given by conditions (table order otherwise)

    Raises
    ------
    MissingColumnError
        If the table has no dicercall columns
    InvalidConditionError
        If any named sample has no dicercall column
    """
    samples = replicate_samples(data, prefix)
    if not samples:
        raise MissingColumnError(
            f"No dicercall columns with prefix '{prefix}' found in cluster table"
        )

    if not conditions:
        return [f"{prefix}{s}" for s in samples]

    wanted = list(dict.fromkeys(str(c) for c in conditions))
    missing = [c for c in wanted if c not in samples]
    if missing:
        raise InvalidConditionError(missing, samples)
    return [f"{prefix}{c}" for c in wanted]
