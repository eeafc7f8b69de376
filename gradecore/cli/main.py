"""Main CLI entry point for gradecore."""

import json
import sys
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console

from gradecore import __version__
from gradecore.core.exceptions import GradeCoreError
from gradecore.core.logging import configure_logging
from gradecore.core.settings import GradeCoreSettings, get_settings
from gradecore.curving import CommitStatus, CurvePolicy, GradeCurveEngine, parse_policy
from gradecore.loader import load_gradebook, load_scores
from gradecore.reporters import (
    JSONReporter,
    export_grades_csv,
    print_course_grade,
    print_curve_preview,
    statistics_table,
)
from gradecore.scoring import WeightedGradeAggregator
from gradecore.storage import Database, SqlGradeStore

EXIT_SUCCESS = 0
EXIT_FAILURE = 1  # Commit failed or had nothing to curve
EXIT_ERROR = 2  # Invalid input, configuration or storage error

POLICY_KINDS = ["flat", "percentage_boost", "square_root", "bell"]

output_option = click.option(
    "--output",
    "-o",
    type=click.Choice(["console", "json"]),
    default="console",
    help="Output format",
)


def policy_options(func: Any) -> Any:
    """Attach the curve policy options to a command."""
    options = [
        click.option(
            "--policy",
            "-p",
            "kind",
            type=click.Choice(POLICY_KINDS),
            required=True,
            help="Curve policy",
        ),
        click.option("--points", type=float, help="Points added (flat)"),
        click.option("--factor", type=float, help="Multiplier (percentage_boost)"),
        click.option("--target-mean", type=float, help="Target mean (bell)"),
        click.option("--target-std-dev", type=float, help="Target std dev (bell)"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_policy(
    kind: str,
    points: float | None,
    factor: float | None,
    target_mean: float | None,
    target_std_dev: float | None,
) -> CurvePolicy:
    """Build a curve policy from command line options.

    Raises:
        click.BadParameter: If a parameter the policy needs is missing.
    """
    params: dict[str, Any] = {"kind": kind}
    if points is not None:
        params["points"] = points
    if factor is not None:
        params["factor"] = factor
    if target_mean is not None:
        params["target_mean"] = target_mean
    if target_std_dev is not None:
        params["target_std_dev"] = target_std_dev
    try:
        return parse_policy(params)
    except PydanticValidationError as e:
        missing = ", ".join(
            "--" + str(err["loc"][-1]).replace("_", "-") for err in e.errors()
        )
        raise click.BadParameter(
            f"invalid or missing parameters for {kind}: {missing}",
            param_hint="--policy",
        ) from e


def _settings(ctx: click.Context) -> GradeCoreSettings:
    return ctx.ensure_object(dict)["settings"]


def _open_store(ctx: click.Context, database_url: str | None) -> SqlGradeStore:
    settings = _settings(ctx)
    url = database_url or settings.database_url
    if not url:
        raise click.UsageError("No database configured; pass --database")
    database = Database(url=url)
    database.create_tables()
    return SqlGradeStore(database, default_weights=settings.grading.default_weights)


@click.group()
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(exists=True, path_type=Path),
    help="Path to gradecore.config.yaml configuration file",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.version_option(version=__version__, prog_name="gradecore")
@click.pass_context
def cli(ctx: click.Context, config_file: Path | None, verbose: bool) -> None:
    """gradecore - weighted course grades and grade curving.

    Examples:

      # Weighted course grade from a gradebook file
      gradecore grade gradebook.yaml

      # Preview a bell curve over a list of scores
      gradecore curve scores.yaml --policy bell --target-mean 78 --target-std-dev 8

      # Commit a flat curve to stored grades
      gradecore commit --course bio-101 --assignment lab-3 --policy flat --points 5
    """
    overrides: dict[str, Any] = {"log_level": "DEBUG"} if verbose else {}
    settings = get_settings(config_file=config_file, **overrides)

    configure_logging(
        level=settings.log_level if verbose else settings.logging.level,
        json_output=settings.logging.json_output,
        log_file=settings.logging.file,
    )
    ctx.ensure_object(dict)["settings"] = settings


@cli.command(name="grade")
@click.argument("gradebook_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--strict",
    is_flag=True,
    help="Fail on weights that do not sum to 1.0 instead of normalizing",
)
@output_option
@click.pass_context
def grade_command(
    ctx: click.Context, gradebook_file: Path, strict: bool, output: str
) -> None:
    """Compute the weighted course grade in GRADEBOOK_FILE."""
    grading = _settings(ctx).grading
    try:
        gradebook = load_gradebook(gradebook_file)
        aggregator = WeightedGradeAggregator(
            strict=strict or grading.strict_weights,
            trend_window=grading.trend_window,
            trend_threshold=grading.trend_threshold,
        )
        result = aggregator.calculate_course_grade(
            gradebook.items,
            gradebook.weights or grading.default_weights,
            course_id=gradebook.course_id,
            course_name=gradebook.course_name,
        )
    except GradeCoreError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_ERROR)

    if output == "json":
        JSONReporter().report(result)
    else:
        print_course_grade(Console(), result)


@cli.command(name="stats")
@click.argument("scores_file", type=click.Path(exists=True, path_type=Path))
@output_option
def stats_command(scores_file: Path, output: str) -> None:
    """Show distribution statistics of the scores in SCORES_FILE."""
    try:
        scores = load_scores(scores_file)
    except GradeCoreError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_ERROR)

    stats = GradeCurveEngine().compute_statistics(scores)
    if output == "json":
        JSONReporter().report(stats)
    else:
        Console().print(statistics_table(stats))


@cli.command(name="curve")
@click.argument("scores_file", type=click.Path(exists=True, path_type=Path))
@policy_options
@output_option
def curve_command(
    scores_file: Path,
    kind: str,
    points: float | None,
    factor: float | None,
    target_mean: float | None,
    target_std_dev: float | None,
    output: str,
) -> None:
    """Preview a curve over the scores in SCORES_FILE. Nothing is saved."""
    policy = build_policy(kind, points, factor, target_mean, target_std_dev)
    try:
        scores = load_scores(scores_file)
        preview = GradeCurveEngine().preview(scores, policy)
    except GradeCoreError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_ERROR)

    if output == "json":
        JSONReporter().report(preview)
        return

    console = Console()
    if not policy.within_recommended_range():
        console.print("[yellow]Parameters are outside the recommended range.[/yellow]")
    print_curve_preview(console, preview)


@cli.command(name="commit")
@click.option("--course", "course_id", required=True, help="Course identifier")
@click.option("--assignment", "assignment_id", required=True, help="Assignment id")
@click.option("--database", "database_url", help="Database URL of the grade store")
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt")
@policy_options
@output_option
@click.pass_context
def commit_command(
    ctx: click.Context,
    course_id: str,
    assignment_id: str,
    database_url: str | None,
    yes: bool,
    kind: str,
    points: float | None,
    factor: float | None,
    target_mean: float | None,
    target_std_dev: float | None,
    output: str,
) -> None:
    """Apply a curve to the stored grades of an assignment.

    Exit Codes:

      0 - All matching grades were updated
      1 - Nothing to curve, or the commit failed and was rolled back
      2 - Error occurred
    """
    policy = build_policy(kind, points, factor, target_mean, target_std_dev)
    engine = GradeCurveEngine()

    try:
        store = _open_store(ctx, database_url)
        if not yes:
            records = store.graded_submissions(course_id, assignment_id)
            scores = [r.score for r in records if r.score is not None]
            print_curve_preview(Console(stderr=True), engine.preview(scores, policy))
            click.confirm(f"Curve {len(scores)} grades?", abort=True, err=True)
        outcome = engine.commit_curve(store, course_id, assignment_id, policy)
    except GradeCoreError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_ERROR)

    if output == "json":
        JSONReporter().report(outcome)
    elif outcome.status is CommitStatus.COMMITTED:
        click.echo(f"Curved {outcome.updated_count} grades.")
    elif outcome.status is CommitStatus.NOTHING_TO_CURVE:
        click.echo("Nothing to curve: no submitted and graded work matches.")
    else:
        click.echo(f"Commit failed, no grades changed: {outcome.reason}", err=True)

    if not outcome.succeeded:
        sys.exit(EXIT_FAILURE)


@cli.command(name="export")
@click.option("--course", "course_id", required=True, help="Course identifier")
@click.option("--assignment", "assignment_id", required=True, help="Assignment id")
@click.option("--database", "database_url", help="Database URL of the grade store")
@click.option(
    "--output-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the CSV to a file instead of stdout",
)
@click.pass_context
def export_command(
    ctx: click.Context,
    course_id: str,
    assignment_id: str,
    database_url: str | None,
    output_file: Path | None,
) -> None:
    """Export submitted work of an assignment as CSV, graded or not."""
    try:
        store = _open_store(ctx, database_url)
        records = store.submissions(course_id, assignment_id)
    except GradeCoreError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_ERROR)

    text = export_grades_csv(records, output_file=output_file)
    if output_file is None:
        click.echo(text, nl=False)
    else:
        click.echo(f"Exported {len(records)} grades to {output_file}")


@cli.command(name="config")
@click.pass_context
def config_command(ctx: click.Context) -> None:
    """Print the effective configuration as JSON."""
    click.echo(json.dumps(_settings(ctx).to_dict(), indent=2))


def main() -> None:
    """Console script entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
