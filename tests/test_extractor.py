"""Tests for the solution extractor."""

import pytest

from course_allocator.errors import (
    Infeasible,
    NotOptimal,
    SolutionMismatch,
    SolverError,
)
from course_allocator.extractor import extract
from course_allocator.types import (
    AssignmentSolution,
    ConstraintProfile,
    PreferenceMatrix,
    RawSolverResult,
    SelectedAssignment,
    SolverStatus,
)


@pytest.fixture
def matrix():
    return PreferenceMatrix(
        {
            ("P1", "C1", "S1"): 4,
            ("P1", "C1", "S2"): 2,
            ("P2", "C1", "S1"): 0,
            ("P2", "C1", "S2"): 3,
        }
    )


def optimal_result(values, objective):
    return RawSolverResult(
        status=SolverStatus.OPTIMAL,
        objective_value=objective,
        select_values=values,
    )


class TestExtract:
    def test_selected_triples_with_scores(self, matrix):
        result = optimal_result(
            {
                ("P1", "C1", "S1"): 1.0,
                ("P1", "C1", "S2"): 0.0,
                ("P2", "C1", "S1"): 0.0,
                ("P2", "C1", "S2"): 1.0,
            },
            7.0,
        )
        solution = extract(result, matrix, ConstraintProfile.UNRESTRICTED)
        assert isinstance(solution, AssignmentSolution)
        assert solution.profile == ConstraintProfile.UNRESTRICTED
        assert solution.objective_value == 7.0
        assert solution.assignments == (
            SelectedAssignment("P1", "C1", "S1", 4.0),
            SelectedAssignment("P2", "C1", "S2", 3.0),
        )
        assert solution.site_usage == {"S1": 1, "S2": 1}
        assert solution.active_sites == frozenset({"S1", "S2"})

    def test_zero_preference_selection_kept(self, matrix):
        result = optimal_result(
            {
                ("P1", "C1", "S1"): 1.0,
                ("P1", "C1", "S2"): 0.0,
                ("P2", "C1", "S1"): 1.0,
                ("P2", "C1", "S2"): 0.0,
            },
            4.0,
        )
        solution = extract(result, matrix)
        assert ("P2", "C1", "S1") in solution.selected_triples
        assert solution.active_sites == frozenset({"S1"})

    def test_values_within_tolerance_accepted(self, matrix):
        result = optimal_result(
            {("P1", "C1", "S1"): 0.9999999, ("P2", "C1", "S2"): 1e-9},
            4.0,
        )
        solution = extract(result, matrix)
        assert solution.selected_triples == {("P1", "C1", "S1")}

    def test_empty_selection(self, matrix):
        solution = extract(optimal_result({("P1", "C1", "S1"): 0.0}, 0.0), matrix)
        assert solution.assignments == ()
        assert solution.active_sites == frozenset()
        assert solution.site_usage == {}


class TestExtractErrors:
    def test_non_binary_value_rejected(self, matrix):
        result = optimal_result({("P1", "C1", "S1"): 0.5}, 2.0)
        with pytest.raises(SolverError, match="Non-binary"):
            extract(result, matrix)

    def test_missing_value_rejected(self, matrix):
        result = optimal_result({("P1", "C1", "S1"): None}, 0.0)
        with pytest.raises(SolverError, match="No value"):
            extract(result, matrix)

    def test_objective_mismatch(self, matrix):
        result = optimal_result({("P1", "C1", "S1"): 1.0}, 5.0)
        with pytest.raises(SolutionMismatch) as exc_info:
            extract(result, matrix)
        assert exc_info.value.reported == 5.0
        assert exc_info.value.recomputed == 4.0

    def test_infeasible_status(self, matrix):
        with pytest.raises(Infeasible):
            extract(RawSolverResult(status=SolverStatus.INFEASIBLE), matrix)

    def test_solver_error_status(self, matrix):
        with pytest.raises(SolverError):
            extract(RawSolverResult(status=SolverStatus.SOLVER_ERROR), matrix)

    def test_unbounded_status(self, matrix):
        with pytest.raises(NotOptimal) as exc_info:
            extract(RawSolverResult(status=SolverStatus.UNBOUNDED), matrix)
        assert exc_info.value.status == SolverStatus.UNBOUNDED
