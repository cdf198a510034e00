"""Row-wise consensus resolution with optional joblib parallelism.

Each cluster is resolved independently:
1. Tally the dicercalls of its replicates
2. Resolve the tally under the tie policy
3. Apply the chimeric control check, when enabled

Rows are cut into contiguous batches, resolved sequentially or in worker
processes, and reassembled in original order by the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Sequence

import numpy as np
from joblib import Parallel, delayed

from .chimeric import has_control_signal
from .rules import DicerCall, resolve_tally, tally_calls, tied_maxima


class RowOutcome(NamedTuple):
    """Resolution of a single cluster."""

    consensus: DicerCall
    support: int
    tied: bool = False
    excluded: bool = False
    chimeric_filtered: bool = False


@dataclass
class RowBatch:
    """Contiguous block of clusters to resolve together."""

    start: int
    calls: np.ndarray                     # (n_rows, n_replicates) of DicerCall
    control_idx: Sequence[int] = ()       # Positions of control columns in calls
    on_genome: Optional[np.ndarray] = None
    seeds: Optional[np.ndarray] = None

    @property
    def n_rows(self) -> int:
        return int(self.calls.shape[0])


@dataclass
class BatchResult:
    """Resolved block, aligned with RowBatch.start."""

    start: int
    consensus: List[str]
    support: np.ndarray
    n_tied: int = 0
    n_excluded: int = 0
    n_chimeric_filtered: int = 0


def resolve_row(
    calls: Sequence[DicerCall],
    ties: str = "exclude",
    rng: Optional[np.random.Generator] = None,
    control_calls: Optional[Sequence[DicerCall]] = None,
) -> RowOutcome:
    """Resolve one cluster from its replicate calls.

    Parameters
    ----------
    calls : Sequence[DicerCall]
        Parsed calls of the selected replicates
    ties : str
        Tie policy
    rng : np.random.Generator, optional
        Random source for the "random" policy
    control_calls : Sequence[DicerCall], optional
        Calls of the control samples. Only passed for clusters on the
        chimeric genome; a known call among them voids the consensus.

    Returns
    -------
    RowOutcome
    """
    tally = tally_calls(calls)
    tied = len(tied_maxima(tally)) > 1
    consensus, support = resolve_tally(tally, ties=ties, rng=rng)
    excluded = tied and ties == "exclude" and consensus is DicerCall.UNCLASSIFIED

    if control_calls is not None and has_control_signal(control_calls):
        return RowOutcome(DicerCall.UNCLASSIFIED, 0, tied, excluded, True)

    return RowOutcome(consensus, int(support), tied, excluded, False)


def process_batch(batch: RowBatch, ties: str = "exclude") -> BatchResult:
    """Resolve every cluster in a batch."""
    consensus: List[str] = []
    support = np.zeros(batch.n_rows, dtype=np.int64)
    n_tied = n_excluded = n_chimeric = 0

    for i in range(batch.n_rows):
        row = batch.calls[i]
        rng = None
        if batch.seeds is not None:
            rng = np.random.default_rng(int(batch.seeds[i]))
        control_calls = None
        if batch.on_genome is not None and batch.on_genome[i]:
            control_calls = [row[j] for j in batch.control_idx]

        outcome = resolve_row(row, ties=ties, rng=rng, control_calls=control_calls)
        consensus.append(outcome.consensus.value)
        support[i] = outcome.support
        n_tied += outcome.tied
        n_excluded += outcome.excluded
        n_chimeric += outcome.chimeric_filtered

    return BatchResult(
        start=batch.start,
        consensus=consensus,
        support=support,
        n_tied=n_tied,
        n_excluded=n_excluded,
        n_chimeric_filtered=n_chimeric,
    )


def make_batches(
    calls: np.ndarray,
    batch_size: int,
    control_idx: Sequence[int] = (),
    on_genome: Optional[np.ndarray] = None,
    seeds: Optional[np.ndarray] = None,
) -> List[RowBatch]:
    """Split the call matrix into contiguous row batches."""
    batches = []
    for start in range(0, calls.shape[0], batch_size):
        stop = start + batch_size
        batches.append(
            RowBatch(
                start=start,
                calls=calls[start:stop],
                control_idx=tuple(control_idx),
                on_genome=None if on_genome is None else on_genome[start:stop],
                seeds=None if seeds is None else seeds[start:stop],
            )
        )
    return batches


def run_batches(
    batches: List[RowBatch],
    ties: str = "exclude",
    n_jobs: int = 1,
) -> List[BatchResult]:
    """Resolve batches sequentially (n_jobs=1) or with joblib workers.

    Results are returned sorted by batch start, whatever order the workers
    finish in.
    """
    if n_jobs == 1 or len(batches) <= 1:
        results = [process_batch(b, ties) for b in batches]
    else:
        results = Parallel(n_jobs=n_jobs, verbose=0)(
            delayed(process_batch)(b, ties) for b in batches
        )
    return sorted(results, key=lambda r: r.start)
