"""Exceptions raised while building, solving and extracting allocation models."""

from collections.abc import Iterable
from typing import Any


class AllocationError(Exception):
    """Base class for all allocation errors."""


class InvalidProfile(AllocationError, ValueError):
    """Raised when an unrecognized constraint profile is supplied."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"Unknown constraint profile: {value!r}")


class MatrixError(AllocationError):
    """The preference matrix does not match the declared entity sets."""


class IncompleteMatrix(MatrixError):
    """Raised when the matrix does not cover the full person x course x site product."""

    def __init__(self, missing: Iterable[tuple[str, str, str]]):
        self.missing = sorted(missing)
        shown = ", ".join(str(t) for t in self.missing[:10])
        more = f" (and {len(self.missing) - 10} more)" if len(self.missing) > 10 else ""
        super().__init__(f"Preference matrix is missing {len(self.missing)} entries: {shown}{more}")


class UnknownEntity(MatrixError):
    """Raised when the matrix mentions identifiers outside the declared sets."""

    def __init__(self, unexpected: Iterable[tuple[str, str, str]]):
        self.unexpected = sorted(unexpected)
        shown = ", ".join(str(t) for t in self.unexpected[:10])
        super().__init__(f"Preference matrix has {len(self.unexpected)} undeclared entries: {shown}")


class NotOptimal(AllocationError):
    """Raised when a solver result without an optimal status is extracted."""

    def __init__(self, status: Any, message: str = ""):
        self.status = status
        text = f"Solver did not reach an optimal solution (status: {getattr(status, 'value', status)})"
        if message:
            text = f"{text}: {message}"
        super().__init__(text)


class Infeasible(NotOptimal):
    """No assignment satisfies all constraints of the profile."""


class SolverError(AllocationError):
    """Engine-level failure: timeout, numerical breakdown or non-binary values."""

    def __init__(self, message: str, status: Any = None):
        self.status = status
        super().__init__(message)


class SolutionMismatch(AllocationError):
    """Reported objective disagrees with the preferences of the selected triples."""

    def __init__(self, reported: float, recomputed: float):
        self.reported = reported
        self.recomputed = recomputed
        super().__init__(
            f"Objective value {reported} does not match the sum of selected preferences {recomputed}"
        )
