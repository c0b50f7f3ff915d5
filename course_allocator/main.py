"""CLI entry point for the course allocation optimizer."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from course_allocator.data_loader import load_preferences_from_csv
from course_allocator.errors import AllocationError, InvalidProfile
from course_allocator.output import export_solutions_to_csv, print_scenario_summary
from course_allocator.scenarios import run_scenarios
from course_allocator.types import ConstraintProfile, SolverOptions

app = typer.Typer(
    help="Assign people to courses at sites, comparing site-consolidation profiles"
)


@app.command()
def main(
    csv_file: Annotated[
        Path,
        typer.Argument(
            help="Path to preferences CSV file (columns: person, course, site, preference)"
        ),
    ],
    profiles: Annotated[
        Optional[list[str]],
        typer.Option(
            "-p",
            "--profile",
            help="Constraint profile to evaluate (repeatable): "
            + ", ".join(p.value for p in ConstraintProfile),
        ),
    ] = None,
    time_limit: Annotated[
        Optional[float],
        typer.Option("-t", "--time-limit", help="Solver time limit in seconds"),
    ] = None,
    solver_name: Annotated[
        str, typer.Option("--solver", help="PuLP solver name")
    ] = "PULP_CBC_CMD",
    output: Annotated[
        Optional[Path], typer.Option("-o", "--output", help="Export selections to CSV")
    ] = None,
    verbose: Annotated[
        bool, typer.Option("-v", "--verbose", help="Show debug logging")
    ] = False,
) -> None:
    """Run the allocation model for each requested profile."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not csv_file.exists():
        typer.echo(f"Error: File not found: {csv_file}", err=True)
        raise typer.Exit(1)

    try:
        selected = [ConstraintProfile.parse(p) for p in profiles] if profiles else list(ConstraintProfile)
    except InvalidProfile as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    try:
        persons, courses, sites, matrix = load_preferences_from_csv(csv_file)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    options = SolverOptions(solver_name=solver_name, time_limit=time_limit)
    try:
        results = run_scenarios(matrix, selected, persons, courses, sites, options)
    except AllocationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    print_scenario_summary(results)

    if output:
        export_solutions_to_csv(results, str(output))
        typer.echo(f"\nResults exported to: {output}")


if __name__ == "__main__":
    app()
