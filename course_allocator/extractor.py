"""Turn raw solver values into an AssignmentSolution."""

import math
from collections import Counter

from course_allocator.errors import Infeasible, NotOptimal, SolutionMismatch, SolverError
from course_allocator.types import (
    AssignmentSolution,
    ConstraintProfile,
    PreferenceMatrix,
    RawSolverResult,
    SelectedAssignment,
    SolverStatus,
)


def _is_selected(key: tuple[str, str, str], var_value: float | None, tolerance: float) -> bool:
    """Read a binary variable value, rejecting anything that is not 0 or 1."""
    if var_value is None:
        raise SolverError(f"No value reported for selection {key}")
    if abs(var_value - 1) <= tolerance:
        return True
    if abs(var_value) <= tolerance:
        return False
    raise SolverError(f"Non-binary value {var_value} reported for selection {key}")


def _raise_for_status(result: RawSolverResult) -> None:
    if result.status == SolverStatus.OPTIMAL:
        return
    if result.status == SolverStatus.INFEASIBLE:
        raise Infeasible(result.status, result.message)
    if result.status == SolverStatus.SOLVER_ERROR:
        raise SolverError(result.message or "Solver reported an error", result.status)
    raise NotOptimal(result.status, result.message)


def extract(
    result: RawSolverResult,
    matrix: PreferenceMatrix,
    profile: ConstraintProfile | None = None,
    tolerance: float = 1e-6,
) -> AssignmentSolution:
    """
    Extract the selected (person, course, site) triples from a solver result.

    Parameters:
        result: Raw result returned by ``solver.solve``
        matrix: Preference matrix the model was built from
        profile: Profile that produced the result, recorded on the solution
        tolerance: Accepted distance from 0/1 and from the recomputed objective

    Returns:
        AssignmentSolution with selections ordered by person, course and site

    Raises:
        NotOptimal: If the result is not optimal (Infeasible for infeasible results)
        SolverError: If a selection value is missing or not binary
        SolutionMismatch: If the reported objective differs from the selected preferences
    """
    _raise_for_status(result)

    assignments = tuple(
        SelectedAssignment(person, course, site, matrix[person, course, site])
        for (person, course, site), var_value in sorted(result.select_values.items())
        if _is_selected((person, course, site), var_value, tolerance)
    )

    recomputed = sum(a.preference for a in assignments)
    reported = result.objective_value if result.objective_value is not None else 0.0
    if not math.isclose(reported, recomputed, rel_tol=tolerance, abs_tol=tolerance):
        raise SolutionMismatch(reported, recomputed)

    site_usage = Counter(a.site for a in assignments)
    return AssignmentSolution(
        profile=profile,
        objective_value=reported,
        assignments=assignments,
        site_usage=dict(sorted(site_usage.items())),
        active_sites=frozenset(site_usage),
    )
