"""Table I/O for dicer-consensus.

Reads the merged cluster table produced by the import step (one row per
cluster, one DicerCall_<sample> column per replicate) and writes results.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

import pandas as pd

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

TAB_SUFFIXES = (".tsv", ".txt", ".tab")


def _separator(path: Path) -> str:
    return "\t" if path.suffix.lower() in TAB_SUFFIXES else ","


def ensure_output_dir(path: PathLike) -> Path:
    """Create the directory at path if it does not exist and return it."""
    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def load_cluster_table(path: PathLike, call_prefix: str = "DicerCall_") -> pd.DataFrame:
    """Load a cluster table from CSV or TSV.

    Dicercall columns are read as text. Empty and "NA" cells load as missing
    in every column, so numeric columns such as Count_* and RPM_* stay
    numeric; a missing dicercall counts as unclassified like a literal "N".

    Parameters
    ----------
    path : PathLike
        Path to .csv, .tsv or .txt file.
    call_prefix : str
        Prefix of the per-sample dicercall columns.

    Returns
    -------
    pd.DataFrame
        Loaded cluster table.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    """
    table_path = Path(path)
    if not table_path.exists():
        raise FileNotFoundError(f"Cluster table not found: {table_path}")

    sep = _separator(table_path)
    header = pd.read_csv(table_path, sep=sep, nrows=0)
    call_cols = [c for c in header.columns if str(c).startswith(call_prefix)]

    df = pd.read_csv(
        table_path,
        sep=sep,
        dtype={c: str for c in call_cols},
    )
    logger.info(
        f"Loaded {len(df):,} clusters with {len(call_cols)} dicercall columns from {table_path}"
    )
    return df


def write_dataframe(df: pd.DataFrame, path: PathLike, index: bool = False) -> Path:
    """Write a table as CSV or TSV (by suffix), creating parent directories."""
    out_path = Path(path)
    ensure_output_dir(out_path.parent)
    df.to_csv(out_path, sep=_separator(out_path), index=index)
    logger.info(f"Wrote {len(df):,} rows to {out_path}")
    return out_path
