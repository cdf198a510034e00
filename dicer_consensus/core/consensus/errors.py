"""Exceptions raised while validating a consensus run.

Every error is raised before any row is processed, so a failed run never
produces a partial table.
"""

from typing import Iterable, List, Optional


class ConsensusError(ValueError):
    """Base class for invalid consensus input."""


class InvalidConditionError(ConsensusError):
    """A named replicate sample has no classification column."""

    def __init__(self, missing: Iterable[str], available: Optional[Iterable[str]] = None):
        self.missing: List[str] = list(missing)
        self.available: List[str] = list(available or [])
        message = f"Sample(s) not found among replicate columns: {self.missing}"
        if self.available:
            message += f" (available: {self.available})"
        super().__init__(message)


class InvalidPolicyError(ConsensusError):
    """Tie policy is not one of the recognized values."""

    def __init__(self, policy: str, allowed: Iterable[str]):
        self.policy = policy
        super().__init__(
            f"Unknown tie policy '{policy}'. Choose one of: {sorted(allowed)}"
        )


class MissingChimericParametersError(ConsensusError):
    """Chimeric mode was requested without a genome id and controls."""


class UnknownClassificationValueError(ConsensusError):
    """A classification cell holds a value outside the vocabulary."""

    def __init__(self, offending: List[tuple], allowed: Iterable[str]):
        self.offending = offending
        shown = ", ".join(f"{col}={val!r}" for col, val in offending[:5])
        if len(offending) > 5:
            shown += f", ... ({len(offending)} total)"
        super().__init__(
            f"Unrecognized dicercall value(s): {shown}. "
            f"Allowed: {list(allowed)} or N/NA"
        )


class UnknownGenomeIdError(ConsensusError):
    """The genome id matches no value of the chromosome column."""


class MissingColumnError(ConsensusError):
    """A required column is absent from the cluster table."""


class InvalidConfigError(ConsensusError):
    """A configuration value is out of range or unrecognized."""
