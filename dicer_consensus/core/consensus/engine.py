"""
Consensus engine for replicate dicercalls.

This module provides:
- ConsensusEngine: validates a cluster table and derives the consensus
- ConsensusResult: output table plus run statistics
- dicer_consensus: functional wrapper around ConsensusEngine
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from .chimeric import genome_rows, validate_chimeric_inputs
from .config import ConsensusConfig
from .errors import InvalidConfigError, MissingColumnError, UnknownClassificationValueError
from .parallel import make_batches, run_batches
from .rules import DicerCall, known_calls, parse_call, validate_policy
from .selection import select_replicate_columns


@dataclass
class ConsensusResult:
    """Result from a consensus run."""

    data: pd.DataFrame
    replicate_columns: List[str] = field(default_factory=list)
    control_columns: List[str] = field(default_factory=list)
    n_rows_in: int = 0
    n_rows_out: int = 0
    n_tied: int = 0
    n_ties_excluded: int = 0
    n_chimeric_filtered: int = 0
    n_unclassified: int = 0
    n_tidy_removed: int = 0
    summary: pd.DataFrame = field(default_factory=pd.DataFrame)
    elapsed_seconds: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Run statistics as a plain dictionary (no table)."""
        return {
            "replicate_columns": list(self.replicate_columns),
            "control_columns": list(self.control_columns),
            "n_rows_in": self.n_rows_in,
            "n_rows_out": self.n_rows_out,
            "n_tied": self.n_tied,
            "n_ties_excluded": self.n_ties_excluded,
            "n_chimeric_filtered": self.n_chimeric_filtered,
            "n_unclassified": self.n_unclassified,
            "n_tidy_removed": self.n_tidy_removed,
            "elapsed_seconds": round(self.elapsed_seconds, 3),
            "labels": {
                str(row.label): int(row.n_clusters)
                for row in self.summary.itertuples(index=False)
            },
        }


class ConsensusEngine:
    """Engine for deriving a consensus dicercall per cluster.

    Pipeline:
    1. Select replicate columns (optionally restricted to conditions)
    2. Tally each cluster's calls and resolve ties
    3. Void calls on the chimeric genome that controls also report
    4. Append support and consensus columns
    5. Optionally drop unclassified clusters

    Parameters
    ----------
    config : ConsensusConfig, optional
        Run configuration (defaults: all samples, "exclude" ties)
    logger : logging.Logger, optional
        Logger instance
    """

    def __init__(
        self,
        config: Optional[ConsensusConfig] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config or ConsensusConfig()
        self.logger = logger or logging.getLogger(__name__)
        self.allowed = known_calls(
            self.config.vocabulary.dicer_min, self.config.vocabulary.dicer_max
        )

    def execute(
        self,
        data: pd.DataFrame,
        rng: Optional[np.random.Generator] = None,
    ) -> ConsensusResult:
        """Derive the consensus for every cluster in data.

        The input table is not modified.

        Parameters
        ----------
        data : pd.DataFrame
            Cluster table with one dicercall column per sample
        rng : np.random.Generator, optional
            Random source for the "random" tie policy. Built from
            config.seed when omitted.

        Returns
        -------
        ConsensusResult
            Output table and run statistics

        Raises
        ------
        ConsensusError
            If any input check fails; nothing is computed in that case
        """
        cfg = self.config
        cols = cfg.columns
        start_time = time.time()

        self.logger.info("=" * 70)
        self.logger.info("[CONSENSUS] Deriving dicercall consensus...")
        self.logger.info("=" * 70)

        try:
            replicate_cols, control_cols, calls = self._validate(data)
        except ValueError as exc:
            self.logger.error(f"Consensus aborted: {exc}")
            raise

        n_rows = len(data)
        self.logger.info(f"Clusters: {n_rows:,}")
        self.logger.info(f"Replicates ({len(replicate_cols)}): {replicate_cols}")
        self.logger.info(f"Tie policy: {cfg.ties}")

        control_idx: List[int] = []
        on_genome = None
        if cfg.chimeric:
            control_idx = [replicate_cols.index(c) for c in control_cols]
            on_genome = genome_rows(data[cols.chr_col], cfg.genome_id, cfg.genome_match)
            self.logger.info(
                f"Chimeric filter: genome '{cfg.genome_id}' ({cfg.genome_match} match), "
                f"{int(on_genome.sum()):,} clusters on genome, controls={control_cols}"
            )

        seeds = None
        if cfg.ties == "random":
            if rng is None:
                rng = np.random.default_rng(cfg.seed)
            seeds = rng.integers(np.iinfo(np.int64).max, size=n_rows)

        batches = make_batches(
            calls,
            batch_size=cfg.parallel.batch_size,
            control_idx=control_idx,
            on_genome=on_genome,
            seeds=seeds,
        )
        self.logger.debug(
            f"Resolving {len(batches)} batch(es) with n_jobs={cfg.parallel.n_jobs}"
        )
        results = run_batches(batches, ties=cfg.ties, n_jobs=cfg.parallel.n_jobs)

        consensus: List[str] = []
        for r in results:
            consensus.extend(r.consensus)
        support = (
            np.concatenate([r.support for r in results])
            if results else np.zeros(0, dtype=np.int64)
        )

        out = self._annotate(data, support, consensus)
        unclassified = out[cols.consensus_col] == DicerCall.UNCLASSIFIED.value
        n_unclassified = int(unclassified.sum())

        if cfg.tidy:
            out = out.loc[~unclassified.to_numpy()]

        result = ConsensusResult(
            data=out,
            replicate_columns=replicate_cols,
            control_columns=control_cols,
            n_rows_in=n_rows,
            n_rows_out=len(out),
            n_tied=sum(r.n_tied for r in results),
            n_ties_excluded=sum(r.n_excluded for r in results),
            n_chimeric_filtered=sum(r.n_chimeric_filtered for r in results),
            n_unclassified=n_unclassified,
            n_tidy_removed=n_rows - len(out),
            summary=self._summarize(consensus),
            elapsed_seconds=time.time() - start_time,
        )
        self._log_summary(result)
        return result

    def _validate(self, data: pd.DataFrame):
        """Run every input check and parse the replicate calls.

        Returns (replicate columns, control columns, call matrix).
        """
        cfg = self.config
        cols = cfg.columns

        validate_policy(cfg.ties)
        problems = cfg.validate()
        if problems:
            raise InvalidConfigError("; ".join(problems))

        missing = [c for c in (cols.cluster_col, cols.chr_col) if c not in data.columns]
        if missing:
            raise MissingColumnError(f"Cluster table missing columns: {missing}")

        replicate_cols = select_replicate_columns(data, cfg.conditions, cols.call_prefix)

        control_cols: List[str] = []
        if cfg.chimeric:
            control_cols = validate_chimeric_inputs(
                data,
                replicate_cols,
                cfg.controls,
                cfg.genome_id,
                chr_col=cols.chr_col,
                prefix=cols.call_prefix,
                genome_match=cfg.genome_match,
            )

        calls = self._parse_calls(data, replicate_cols)
        return replicate_cols, control_cols, calls

    def _parse_calls(self, data: pd.DataFrame, replicate_cols: Sequence[str]) -> np.ndarray:
        """Parse dicercall columns into a (n_rows, n_replicates) DicerCall matrix."""
        calls = np.empty((len(data), len(replicate_cols)), dtype=object)
        offending = []
        for j, col in enumerate(replicate_cols):
            values = data[col].to_numpy(dtype=object)
            # pd.NA does not compare as a dict key
            missing = pd.isna(values)
            lookup: Dict[Any, Optional[DicerCall]] = {}
            parsed = []
            for value, is_missing in zip(values, missing):
                if is_missing:
                    parsed.append(DicerCall.UNCLASSIFIED)
                    continue
                if value not in lookup:
                    lookup[value] = parse_call(value, self.allowed)
                    if lookup[value] is None:
                        offending.append((col, value))
                parsed.append(lookup[value])
            calls[:, j] = parsed

        if offending:
            allowed = [c.value for c in sorted(self.allowed, key=lambda c: c.value)]
            raise UnknownClassificationValueError(offending, allowed)
        return calls

    def _annotate(self, data: pd.DataFrame, support: np.ndarray, consensus: List[str]) -> pd.DataFrame:
        """Append support and consensus columns to a copy of data."""
        cols = self.config.columns
        out = data.copy()
        for name in (cols.support_col, cols.consensus_col):
            if name in out.columns:
                self.logger.warning(f"Overwriting existing column '{name}'")

        categories = [c.value for c in sorted(self.allowed, key=lambda c: c.value)]
        categories.append(DicerCall.UNCLASSIFIED.value)

        out[cols.support_col] = np.asarray(support, dtype=np.int64)
        out[cols.consensus_col] = pd.Categorical(consensus, categories=categories)
        return out

    def _summarize(self, consensus: List[str]) -> pd.DataFrame:
        """Count clusters per consensus label (before tidy)."""
        counts = pd.Series(consensus, dtype=object).value_counts()
        total = int(counts.sum())
        summary = pd.DataFrame({
            "label": counts.index.astype(str),
            "n_clusters": counts.to_numpy(dtype=np.int64),
        })
        summary["fraction"] = summary["n_clusters"] / total if total else 0.0
        return summary.sort_values("label").reset_index(drop=True)

    def _log_summary(self, result: ConsensusResult) -> None:
        self.logger.info(f"Ties encountered: {result.n_tied:,}")
        if self.config.ties == "exclude":
            self.logger.info(f"Ties excluded (set to N): {result.n_ties_excluded:,}")
        if self.config.chimeric:
            self.logger.info(
                f"Chimeric mapping errors removed: {result.n_chimeric_filtered:,}"
            )
        for row in result.summary.itertuples(index=False):
            self.logger.info(f"  {row.label}: {row.n_clusters:,} ({row.fraction:.1%})")
        if self.config.tidy:
            self.logger.info(f"Tidy: removed {result.n_tidy_removed:,} unclassified clusters")
        self.logger.info(
            f"Clusters out: {result.n_rows_out:,} ({result.elapsed_seconds:.2f}s)"
        )


def dicer_consensus(
    data: pd.DataFrame,
    conditions: Optional[Sequence[str]] = None,
    ties: Optional[str] = None,
    tidy: Optional[bool] = None,
    chimeric: Optional[bool] = None,
    controls: Optional[Sequence[str]] = None,
    genome_id: Optional[str] = None,
    seed: Optional[int] = None,
    config: Optional[ConsensusConfig] = None,
    rng: Optional[np.random.Generator] = None,
    logger: Optional[logging.Logger] = None,
) -> pd.DataFrame:
    """Append the consensus dicercall and its support to a cluster table.

    Keyword arguments override the matching fields of config (defaults:
    all samples, "exclude" ties, no tidy, no chimeric filter). Column names,
    vocabulary and parallelism come from config.

    Examples
    --------
    >>> out = dicer_consensus(clusters, conditions=["heterograft_1", "heterograft_2"])
    >>> out[["Cluster", "DicerCounts", "DicerConsensus"]]
    """
    base = config or ConsensusConfig()
    run_config = ConsensusConfig(
        conditions=list(conditions) if conditions else base.conditions,
        ties=ties if ties is not None else base.ties,
        tidy=tidy if tidy is not None else base.tidy,
        chimeric=chimeric if chimeric is not None else base.chimeric,
        controls=list(controls) if controls else list(base.controls),
        genome_id=genome_id if genome_id is not None else base.genome_id,
        genome_match=base.genome_match,
        seed=seed if seed is not None else base.seed,
        columns=base.columns,
        vocabulary=base.vocabulary,
        parallel=base.parallel,
    )
    engine = ConsensusEngine(run_config, logger=logger)
    return engine.execute(data, rng=rng).data
