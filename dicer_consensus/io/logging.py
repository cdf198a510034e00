"""Run log for the dicer-consensus CLI.

A run log is a plain-text file holding the engine's progress messages and
two YAML records: the resolved parameters and the run statistics.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Tuple, Union

import yaml

PathLike = Union[str, Path]

RUN_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"


def get_logger(
    name: str,
    log_path: PathLike,
    level: int = logging.INFO,
    timestamped: bool = True,
) -> Tuple[logging.Logger, Path]:
    """Return a logger writing one consensus run to a file.

    With timestamped=True, consensus.log becomes
    consensus_20261018_080530.log so earlier runs are kept. Otherwise the
    file is truncated. Handlers left over from a previous run under the same
    name are closed first.

    Returns
    -------
    Tuple[logging.Logger, Path]
        The logger and the file it writes to.
    """
    path = Path(log_path)
    if timestamped:
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        path = path.with_name(f"{path.stem}_{stamp}{path.suffix or '.log'}")
    path.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()

    handler = logging.FileHandler(path, mode="w", encoding="utf-8")
    handler.setFormatter(logging.Formatter(RUN_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)
    return logger, path


def log_yaml(logger: logging.Logger, section: str, record: Dict[str, Any]) -> None:
    """Log record as a YAML document keyed by section, ended by "---"."""
    text = yaml.safe_dump({section: record}, sort_keys=False).rstrip("\n")
    logger.info("%s\n---", text)
