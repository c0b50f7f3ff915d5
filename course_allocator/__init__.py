"""Course allocation optimizer: assign people to courses at sites with a MILP."""

from course_allocator.model_builder import build
from course_allocator.scenarios import run_scenario, run_scenarios
from course_allocator.solver import solve
from course_allocator.extractor import extract
from course_allocator.types import ConstraintProfile, PreferenceMatrix, SolverOptions

__all__ = [
    "ConstraintProfile",
    "PreferenceMatrix",
    "SolverOptions",
    "build",
    "extract",
    "run_scenario",
    "run_scenarios",
    "solve",
]
