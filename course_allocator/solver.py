"""Solver adapter: hands a built model to a PuLP-driven MILP engine."""

import logging
import time

from pulp import LpProblem, PulpSolverError, getSolver, value
from pulp.constants import (
    LpSolutionOptimal,
    LpStatusInfeasible,
    LpStatusOptimal,
    LpStatusUnbounded,
)

from course_allocator.errors import Infeasible, SolverError
from course_allocator.types import (
    MILPInstance,
    RawSolverResult,
    SolverOptions,
    SolverStatus,
)

logger = logging.getLogger(__name__)


def _map_status(status_code: int, sol_status: int | None) -> SolverStatus:
    """Map PuLP status codes to SolverStatus.

    An "optimal" status whose solution status is not optimal means the
    engine stopped early (time limit) with an incumbent only.
    """
    if status_code == LpStatusOptimal:
        if sol_status in (None, LpSolutionOptimal):
            return SolverStatus.OPTIMAL
        return SolverStatus.SOLVER_ERROR
    status_map = {
        LpStatusInfeasible: SolverStatus.INFEASIBLE,
        LpStatusUnbounded: SolverStatus.UNBOUNDED,
    }
    return status_map.get(status_code, SolverStatus.SOLVER_ERROR)


def _make_solver(options: SolverOptions):
    kwargs: dict = {"msg": options.msg}
    if options.time_limit is not None:
        kwargs["timeLimit"] = options.time_limit
    try:
        solver = getSolver(options.solver_name, **kwargs)
    except PulpSolverError as e:
        raise SolverError(f"Unknown solver '{options.solver_name}': {e}") from e
    if not solver.available():
        raise SolverError(f"Solver '{options.solver_name}' is not available")
    return solver


def solve(instance: MILPInstance, options: SolverOptions | None = None) -> RawSolverResult:
    """
    Solve a built model with the configured engine.

    The instance itself is left untouched: a private copy of the problem is
    rebuilt from its serialized form and handed to the engine. No retry is
    attempted on failure.

    Parameters:
        instance: Model returned by ``model_builder.build``
        options: Engine selection and limits (defaults to CBC, no time limit)

    Returns:
        RawSolverResult with status, objective value and variable values

    Raises:
        Infeasible: If no assignment satisfies the constraints
        SolverError: If the engine fails, is unavailable or hits its time limit
    """
    options = options or SolverOptions()
    solver = _make_solver(options)

    variables, problem = LpProblem.fromDict(instance.to_dict())

    started = time.perf_counter()
    try:
        status_code = problem.solve(solver)
    except PulpSolverError as e:
        raise SolverError(f"{options.solver_name} failed: {e}", SolverStatus.SOLVER_ERROR) from e
    elapsed = time.perf_counter() - started

    solver_status = _map_status(status_code, getattr(problem, "sol_status", None))
    logger.info(
        "%s solved %s model in %.3fs: %s",
        options.solver_name,
        instance.profile.value,
        elapsed,
        solver_status.value,
    )

    if solver_status == SolverStatus.INFEASIBLE:
        raise Infeasible(solver_status, f"no assignment satisfies the {instance.profile.value} constraints")
    if solver_status == SolverStatus.SOLVER_ERROR:
        raise SolverError(
            f"{options.solver_name} stopped without proving optimality "
            f"(status code {status_code}, solution status {getattr(problem, 'sol_status', None)})",
            solver_status,
        )
    if solver_status != SolverStatus.OPTIMAL:
        return RawSolverResult(
            status=solver_status,
            solver_name=options.solver_name,
            solve_time=elapsed,
        )

    objective_value = value(problem.objective)
    return RawSolverResult(
        status=solver_status,
        objective_value=float(objective_value) if objective_value is not None else 0.0,
        select_values={
            key: variables[var.name].varValue for key, var in instance.select.items()
        },
        site_used_values={
            site: variables[var.name].varValue for site, var in instance.site_used.items()
        },
        solver_name=options.solver_name,
        solve_time=elapsed,
    )
