"""Run the build -> solve -> extract pipeline for one or more constraint profiles."""

import logging
from collections.abc import Iterable

from course_allocator.errors import Infeasible
from course_allocator.extractor import extract
from course_allocator.model_builder import build
from course_allocator.solver import solve
from course_allocator.types import (
    AssignmentSolution,
    ConstraintProfile,
    PreferenceMatrix,
    ScenarioResult,
    SolverOptions,
)

logger = logging.getLogger(__name__)


def run_scenario(
    matrix: PreferenceMatrix,
    profile: ConstraintProfile | str,
    persons: Iterable[str],
    courses: Iterable[str],
    sites: Iterable[str],
    options: SolverOptions | None = None,
) -> AssignmentSolution:
    """Build, solve and extract a single profile. Errors propagate unchanged."""
    options = options or SolverOptions()
    instance = build(matrix, profile, persons, courses, sites)
    result = solve(instance, options)
    return extract(result, matrix, instance.profile, options.tolerance)


def run_scenarios(
    matrix: PreferenceMatrix,
    profiles: Iterable[ConstraintProfile | str],
    persons: Iterable[str],
    courses: Iterable[str],
    sites: Iterable[str],
    options: SolverOptions | None = None,
) -> list[ScenarioResult]:
    """
    Evaluate each profile independently against the same preference matrix.

    Infeasibility is a legitimate outcome and is recorded on the profile's
    ScenarioResult; any other error aborts the run.

    Returns:
        One ScenarioResult per requested profile, in request order
    """
    persons, courses, sites = list(persons), list(courses), list(sites)
    # Parse up front so a bad profile fails before any solving starts
    parsed = [ConstraintProfile.parse(profile) for profile in profiles]

    results = []
    for profile in parsed:
        try:
            solution = run_scenario(matrix, profile, persons, courses, sites, options)
        except Infeasible as e:
            logger.warning("Profile %s is infeasible: %s", profile.value, e)
            results.append(ScenarioResult(profile=profile, error=e))
            continue
        logger.info(
            "Profile %s: objective %.2f, %d selections, active sites %s",
            profile.value,
            solution.objective_value,
            len(solution.assignments),
            sorted(solution.active_sites),
        )
        results.append(ScenarioResult(profile=profile, solution=solution))
    return results
