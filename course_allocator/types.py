"""Type definitions for the course allocation optimizer."""

import math
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from course_allocator.errors import InvalidProfile

if TYPE_CHECKING:
    from pulp import LpProblem, LpVariable

Triple = tuple[str, str, str]  # (person, course, site)


class ConstraintProfile(Enum):
    """Policy profile selecting which constraint set the model carries."""

    UNRESTRICTED = "unrestricted"
    SINGLE_SITE_OPTIONAL = "single_site_optional"
    SINGLE_SITE_MANDATORY = "single_site_mandatory"

    @classmethod
    def parse(cls, value: "ConstraintProfile | str") -> "ConstraintProfile":
        """Return the profile for an enum member or its (case-insensitive) name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower().replace("-", "_")
            for profile in cls:
                if profile.value == key:
                    return profile
        raise InvalidProfile(value)


class SolverStatus(Enum):
    """Status of the solver result."""

    OPTIMAL = "Optimal"
    INFEASIBLE = "Infeasible"
    UNBOUNDED = "Unbounded"
    SOLVER_ERROR = "Solver Error"


class PreferenceMatrix(Mapping[Triple, float]):
    """Read-only mapping from (person, course, site) to a preference score.

    The matrix is expected to be complete (zero-filled) by the time it reaches
    the model builder; completeness is checked there against the declared sets.

    Raises:
        ValueError: If a score is negative or not a number
    """

    def __init__(self, scores: Mapping[Triple, float]):
        checked: dict[Triple, float] = {}
        for key, score in scores.items():
            score = float(score)
            if math.isnan(score) or score < 0:
                raise ValueError(f"Preference for {key} must be a non-negative number, got {score}")
            checked[key] = score
        self._scores = checked

    def __getitem__(self, key: Triple) -> float:
        return self._scores[key]

    def __iter__(self) -> Iterator[Triple]:
        return iter(self._scores)

    def __len__(self) -> int:
        return len(self._scores)

    def __repr__(self) -> str:
        return f"PreferenceMatrix({len(self)} entries)"

    def persons(self) -> set[str]:
        return {p for p, _, _ in self._scores}

    def courses(self) -> set[str]:
        return {c for _, c, _ in self._scores}

    def sites(self) -> set[str]:
        return {s for _, _, s in self._scores}


@dataclass
class SolverOptions:
    """Options passed to the external MILP engine.

    Attributes:
        solver_name: PuLP solver name, as accepted by ``pulp.getSolver``
        time_limit: Engine time limit in seconds (None for no limit)
        msg: Whether the engine prints its own log
        tolerance: Distance from 0/1 accepted for binary variable values
    """

    solver_name: str = "PULP_CBC_CMD"
    time_limit: float | None = None
    msg: bool = False
    tolerance: float = 1e-6


@dataclass
class MILPInstance:
    """A built model, ready to be handed to the solver adapter."""

    profile: ConstraintProfile
    problem: "LpProblem"
    select: dict[Triple, "LpVariable"]  # person-course-site selection variables
    site_used: dict[str, "LpVariable"] = field(default_factory=dict)  # site activation variables

    @property
    def num_variables(self) -> int:
        return len(self.select) + len(self.site_used)

    @property
    def num_constraints(self) -> int:
        return self.problem.numConstraints()

    def to_dict(self) -> dict[str, Any]:
        """Serialize the model in PuLP's dict format."""
        return self.problem.toDict()


@dataclass(frozen=True)
class RawSolverResult:
    """Status and variable values reported by the engine."""

    status: SolverStatus
    objective_value: float | None = None
    select_values: Mapping[Triple, float | None] = field(default_factory=dict)
    site_used_values: Mapping[str, float | None] = field(default_factory=dict)
    solver_name: str = ""
    solve_time: float = 0.0
    message: str = ""


@dataclass(frozen=True)
class SelectedAssignment:
    """A (person, course, site) triple chosen by the solver."""

    person: str
    course: str
    site: str
    preference: float


@dataclass(frozen=True)
class AssignmentSolution:
    """Extracted assignment for a single constraint profile."""

    profile: ConstraintProfile | None
    objective_value: float
    assignments: tuple[SelectedAssignment, ...]
    site_usage: Mapping[str, int]  # site -> number of selected triples
    active_sites: frozenset[str]

    @property
    def selected_triples(self) -> set[Triple]:
        return {(a.person, a.course, a.site) for a in self.assignments}


@dataclass(frozen=True)
class ScenarioResult:
    """Outcome of running one profile through the pipeline."""

    profile: ConstraintProfile
    solution: AssignmentSolution | None = None
    error: Exception | None = None

    @property
    def status(self) -> SolverStatus:
        if self.solution is not None:
            return SolverStatus.OPTIMAL
        return getattr(self.error, "status", None) or SolverStatus.SOLVER_ERROR
