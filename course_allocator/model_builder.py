"""Build the allocation MILP for a preference matrix and a constraint profile."""

import logging
from collections.abc import Callable, Iterable
from itertools import product

from pulp import LpMaximize, LpProblem, LpVariable, lpSum

from course_allocator.errors import IncompleteMatrix, Infeasible, UnknownEntity
from course_allocator.types import (
    ConstraintProfile,
    MILPInstance,
    PreferenceMatrix,
    SolverStatus,
)

logger = logging.getLogger(__name__)


def _unique(items: Iterable[str]) -> list[str]:
    """Drop repeated identifiers, keeping declaration order."""
    return list(dict.fromkeys(items))


class ModelBuilder:
    """
    Translates a preference matrix into a PuLP model for one constraint profile.

    Every profile shares the selection variables and the objective; the
    profiles differ only in the constraint rules listed in ``RULES``.

    Attributes:
        matrix: Complete preference matrix
        profile: Constraint profile selecting the rules to apply
        persons: Declared persons
        courses: Declared courses
        sites: Declared sites
    """

    def __init__(
        self,
        matrix: PreferenceMatrix,
        profile: ConstraintProfile | str,
        persons: Iterable[str],
        courses: Iterable[str],
        sites: Iterable[str],
    ):
        """
        Raises:
            InvalidProfile: If the profile is not a known ConstraintProfile
        """
        self.matrix = matrix
        self.profile = ConstraintProfile.parse(profile)
        self.persons = _unique(persons)
        self.courses = _unique(courses)
        self.sites = _unique(sites)

        self._problem: LpProblem | None = None
        self._select: dict[tuple[str, str, str], LpVariable] = {}
        self._site_used: dict[str, LpVariable] = {}

    def _check_matrix(self) -> None:
        """Check that the matrix covers exactly the declared cross product."""
        expected = set(product(self.persons, self.courses, self.sites))
        missing = expected.difference(self.matrix)
        if missing:
            raise IncompleteMatrix(missing)
        unexpected = set(self.matrix).difference(expected)
        if unexpected:
            raise UnknownEntity(unexpected)

    def _build_model(self) -> None:
        """Declare the selection variables and the preference objective."""
        self._problem = LpProblem(f"Course-Allocation-{self.profile.value}", LpMaximize)

        # Variables are named by index so arbitrary identifiers stay valid LP names
        self._select = {}
        for (i, person), (j, course), (k, site) in product(
            enumerate(self.persons), enumerate(self.courses), enumerate(self.sites)
        ):
            self._select[person, course, site] = LpVariable(
                f"select_{i}_{j}_{k}", cat="Binary"
            )

        self._problem += lpSum(
            self.matrix[key] * var for key, var in self._select.items()
        )

    def _course_sites(self, person: str, course: str):
        return lpSum(self._select[person, course, site] for site in self.sites)

    def _at_most_one_site(self) -> None:
        """Each person attends a course at no more than one site."""
        if not self.sites:
            return
        for (i, person), (j, course) in product(
            enumerate(self.persons), enumerate(self.courses)
        ):
            self._problem += self._course_sites(person, course) <= 1, f"assign_{i}_{j}"

    def _exactly_one_site(self) -> None:
        """Each person attends every course at exactly one site."""
        if not self.sites:
            raise Infeasible(
                SolverStatus.INFEASIBLE,
                "mandatory attendance needs at least one site",
            )
        for (i, person), (j, course) in product(
            enumerate(self.persons), enumerate(self.courses)
        ):
            self._problem += self._course_sites(person, course) == 1, f"assign_{i}_{j}"

    def _single_active_site(self) -> None:
        """Link selections to site activation and allow one active site."""
        self._site_used = {
            site: LpVariable(f"site_used_{k}", cat="Binary")
            for k, site in enumerate(self.sites)
        }

        # Big-M: a site with any selection must be switched on
        big_m = len(self.persons) * len(self.courses)
        if big_m:
            for k, site in enumerate(self.sites):
                site_count = lpSum(
                    self._select[person, course, site]
                    for person, course in product(self.persons, self.courses)
                )
                self._problem += site_count <= big_m * self._site_used[site], f"link_{k}"

        if self._site_used:
            self._problem += lpSum(self._site_used.values()) <= 1, "single_site"

    RULES: dict[ConstraintProfile, tuple[Callable[["ModelBuilder"], None], ...]] = {
        ConstraintProfile.UNRESTRICTED: (_at_most_one_site,),
        ConstraintProfile.SINGLE_SITE_OPTIONAL: (_at_most_one_site, _single_active_site),
        ConstraintProfile.SINGLE_SITE_MANDATORY: (_exactly_one_site, _single_active_site),
    }

    def build(self) -> MILPInstance:
        """
        Build a fresh model instance.

        Returns:
            MILPInstance holding the problem and its variable maps

        Raises:
            IncompleteMatrix: If a declared (person, course, site) has no score
            UnknownEntity: If the matrix has entries outside the declared sets
            Infeasible: If the profile can never be satisfied by construction
        """
        self._check_matrix()
        self._build_model()

        for rule in self.RULES[self.profile]:
            rule(self)

        instance = MILPInstance(
            profile=self.profile,
            problem=self._problem,
            select=self._select,
            site_used=self._site_used,
        )
        logger.debug(
            "Built %s model: %d variables, %d constraints",
            self.profile.value,
            instance.num_variables,
            instance.num_constraints,
        )
        return instance


def build(
    matrix: PreferenceMatrix,
    profile: ConstraintProfile | str,
    persons: Iterable[str],
    courses: Iterable[str],
    sites: Iterable[str],
) -> MILPInstance:
    """
    Build the allocation MILP for one constraint profile.

    Parameters:
        matrix: Complete, zero-filled preference matrix
        profile: Constraint profile (enum member or its name)
        persons: Declared persons
        courses: Declared courses
        sites: Declared sites

    Returns:
        MILPInstance ready to be passed to ``solver.solve``
    """
    return ModelBuilder(matrix, profile, persons, courses, sites).build()
