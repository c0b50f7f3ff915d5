"""Output formatting and export for scenario results."""

import csv
from pathlib import Path

from course_allocator.types import ScenarioResult


def print_scenario_summary(results: list[ScenarioResult]) -> None:
    """Pretty-print one block per evaluated profile."""
    for scenario in results:
        print(f"\n=== Profile: {scenario.profile.value} | Status: {scenario.status.value} ===\n")

        solution = scenario.solution
        if solution is None:
            print(f"No assignment: {scenario.error}")
            continue

        print(f"Objective Value: {solution.objective_value:.2f}")
        print(f"Selections: {len(solution.assignments)}")
        print(f"Active Sites: {', '.join(sorted(solution.active_sites)) or '-'}")

        if solution.site_usage:
            print("\nSite Usage:")
            for site, count in solution.site_usage.items():
                print(f"  {site}: {count}")

        print("\nAssignments:")
        for a in solution.assignments:
            print(f"  {a.person} -> {a.course} @ {a.site} ({a.preference:g})")

    if len(results) > 1:
        print("\n=== Comparison ===")
        for scenario in results:
            objective = (
                f"{scenario.solution.objective_value:.2f}"
                if scenario.solution is not None
                else scenario.status.value
            )
            print(f"{scenario.profile.value}: {objective}")


def export_solutions_to_csv(results: list[ScenarioResult], filepath: Path | str) -> None:
    """Export the selected triples of every solved profile to CSV."""
    try:
        with open(filepath, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(["profile", "person", "course", "site", "preference"])
            for scenario in results:
                if scenario.solution is None:
                    continue
                for a in scenario.solution.assignments:
                    writer.writerow([
                        scenario.profile.value,
                        a.person,
                        a.course,
                        a.site,
                        a.preference,
                    ])
    except OSError as e:
        raise OSError(f"Failed to write results to '{filepath}': {e}") from e
