"""Voting rules for dicercall consensus.

This module provides:
- DicerCall vocabulary and call parsing
- Vote tallies per cluster
- Tie resolution under the "exclude" and "random" policies
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from .errors import InvalidPolicyError

TIE_POLICIES: Tuple[str, ...] = ("exclude", "random")

# Relative tolerance used when comparing tallies against the maximum count
TIE_TOLERANCE = 1e-5

UNCLASSIFIED_SPELLINGS: FrozenSet[str] = frozenset({"N", "NA"})


class DicerCall(Enum):
    """Dicer-derived size class of a cluster's most abundant small RNA."""

    NT18 = "18"
    NT19 = "19"
    NT20 = "20"
    NT21 = "21"
    NT22 = "22"
    NT23 = "23"
    NT24 = "24"
    NT25 = "25"
    NT26 = "26"
    NT27 = "27"
    NT28 = "28"
    NT29 = "29"
    NT30 = "30"
    UNCLASSIFIED = "N"

    @property
    def is_known(self) -> bool:
        return self is not DicerCall.UNCLASSIFIED

    @property
    def size(self) -> Optional[int]:
        """Size class in nucleotides, None for unclassified."""
        return int(self.value) if self.is_known else None

    @classmethod
    def from_size(cls, size: int) -> "DicerCall":
        return cls(str(size))


SIZE_RANGE: Tuple[int, int] = (18, 30)


def known_calls(dicer_min: int = 20, dicer_max: int = 24) -> FrozenSet[DicerCall]:
    """Known size classes accepted between dicer_min and dicer_max inclusive."""
    return frozenset(
        call for call in DicerCall
        if call.is_known and dicer_min <= call.size <= dicer_max
    )


def parse_call(value: Any, allowed: Optional[FrozenSet[DicerCall]] = None) -> Optional[DicerCall]:
    """Normalize one raw classification cell to a DicerCall.

    Both "N" and "NA" (any case) and missing values map to
    DicerCall.UNCLASSIFIED. Integer-valued numbers map to their size class.

    Parameters
    ----------
    value : Any
        Raw cell value (str, int, float, None or pd.NA)
    allowed : FrozenSet[DicerCall], optional
        Known classes accepted. Defaults to the 20-24 nt window.

    Returns
    -------
    Optional[DicerCall]
        Parsed call, or None when the value is outside the vocabulary
    """
    if allowed is None:
        allowed = known_calls()

    if isinstance(value, DicerCall):
        return value if (not value.is_known or value in allowed) else None
    # None, NaN, NaT and pd.NA from nullable columns
    if value is None or (pd.api.types.is_scalar(value) and pd.isna(value)):
        return DicerCall.UNCLASSIFIED
    if isinstance(value, (float, np.floating)):
        if not float(value).is_integer():
            return None
        value = int(value)

    text = str(value).strip()
    if text.upper() in UNCLASSIFIED_SPELLINGS:
        return DicerCall.UNCLASSIFIED
    try:
        call = DicerCall(text)
    except ValueError:
        return None
    return call if call in allowed else None


def tally_calls(calls: Iterable[DicerCall]) -> Dict[DicerCall, int]:
    """Count occurrences of each call among one cluster's replicates."""
    tally: Dict[DicerCall, int] = {}
    for call in calls:
        tally[call] = tally.get(call, 0) + 1
    return tally


def tied_maxima(tally: Mapping[DicerCall, float]) -> Tuple[DicerCall, ...]:
    """Return the calls tied at the maximum count, sorted by value.

    Counts within TIE_TOLERANCE of the largest finite count are treated as
    equal, so probability-weighted tallies tie the same way integer ones do.
    """
    if not tally:
        return ()
    counts = np.asarray(list(tally.values()), dtype=float)
    finite = counts[np.isfinite(counts)]
    scale = float(np.max(np.abs(finite))) if finite.size else 0.0
    tol = TIE_TOLERANCE * scale
    best = float(np.max(counts))
    tied = [call for call, n in tally.items() if n >= best - tol]
    return tuple(sorted(tied, key=lambda c: c.value))


def validate_policy(ties: str) -> str:
    if ties not in TIE_POLICIES:
        raise InvalidPolicyError(ties, TIE_POLICIES)
    return ties


def resolve_tally(
    tally: Mapping[DicerCall, float],
    ties: str = "exclude",
    rng: Optional[np.random.Generator] = None,
) -> Tuple[DicerCall, float]:
    """Collapse one cluster's tally into (consensus, support).

    Rules:
    1. A single call at the maximum wins with its own count.
    2. "random": a tied maximum is broken by a uniform draw from rng.
    3. "exclude": one known call tied with N wins with its own count;
       any tie between two or more known calls gives (N, 0).

    Parameters
    ----------
    tally : Mapping[DicerCall, float]
        Call -> occurrence count for one cluster
    ties : str
        Tie policy, "exclude" (default) or "random"
    rng : np.random.Generator, optional
        Random source for the "random" policy. A fresh unseeded generator
        is used when omitted.

    Returns
    -------
    Tuple[DicerCall, float]
        Consensus call and its support count

    Raises
    ------
    InvalidPolicyError
        If ties is not a recognized policy
    """
    validate_policy(ties)

    tied = tied_maxima(tally)
    if not tied:
        return DicerCall.UNCLASSIFIED, 0

    if len(tied) == 1:
        winner = tied[0]
        return winner, tally[winner]

    if ties == "random":
        if rng is None:
            rng = np.random.default_rng()
        winner = tied[int(rng.integers(len(tied)))]
        return winner, tally[winner]

    known = [call for call in tied if call.is_known]
    if len(known) == 1:
        # N never wins a tie it takes part in
        return known[0], tally[known[0]]
    return DicerCall.UNCLASSIFIED, 0
