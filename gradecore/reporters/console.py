"""Rich console rendering of grade and curve results."""

from rich.console import Console
from rich.table import Table

from gradecore.curving.models import CurvePreview
from gradecore.scoring.models import CourseGradeResult
from gradecore.statistics.models import HISTOGRAM_BUCKETS, GradeStatistics


def _fmt(value: float | None, suffix: str = "") -> str:
    if value is None:
        return "--"
    return f"{value:.2f}{suffix}"


def _cell(value: float | int) -> str:
    return str(value) if isinstance(value, int) else f"{value:.2f}"


def course_grade_table(result: CourseGradeResult) -> Table:
    """Per-category breakdown of a course grade."""
    table = Table(
        title=f"{result.course_name} ({result.course_id})",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Category", style="green", no_wrap=True)
    table.add_column("Weight", justify="right")
    table.add_column("Items", style="dim", justify="right")
    table.add_column("Points", justify="right")
    table.add_column("Average", style="yellow", justify="right")

    for breakdown in result.breakdowns:
        table.add_row(
            breakdown.category.value,
            f"{breakdown.weight:.2f}",
            str(breakdown.item_count),
            f"{breakdown.earned_points:g}/{breakdown.total_points:g}",
            _fmt(breakdown.percentage, "%"),
        )
    return table


def statistics_table(
    before: GradeStatistics, after: GradeStatistics | None = None
) -> Table:
    """Distribution summary, optionally side by side with a curved set."""
    table = Table(
        title="Score distribution", show_header=True, header_style="bold cyan"
    )
    table.add_column("Statistic", style="green")
    table.add_column("Before" if after is not None else "Value", justify="right")
    if after is not None:
        table.add_column("After", style="yellow", justify="right")

    fields = ["count", "mean", "median", "min", "max", "std_dev"]
    for name in fields:
        cells = [name.replace("_", " "), _cell(getattr(before, name))]
        if after is not None:
            cells.append(_cell(getattr(after, name)))
        table.add_row(*cells)

    for i in range(HISTOGRAM_BUCKETS):
        cells = [GradeStatistics.bucket_label(i), str(before.histogram[i])]
        if after is not None:
            cells.append(str(after.histogram[i]))
        table.add_row(*cells)
    return table


def print_course_grade(console: Console, result: CourseGradeResult) -> None:
    """Print a course grade with its breakdown."""
    console.print(course_grade_table(result))
    if not result.has_data:
        console.print("[yellow]No graded items; no grade computed.[/yellow]")
        return
    console.print(
        f"Overall: [bold]{result.overall_percentage:.2f}%[/bold]  "
        f"Letter: [bold]{result.letter_grade}[/bold]  "
        f"Points: {result.grade_points:.1f}  Trend: {result.trend.value}"
    )
    if result.weights_normalized:
        console.print(
            "[yellow]Warning: weights do not sum to 1.0 and were normalized.[/yellow]"
        )


def print_curve_preview(console: Console, preview: CurvePreview) -> None:
    """Print the before/after comparison of a curve."""
    console.print(f"[bold]Curve:[/bold] {preview.policy.kind}")
    console.print(statistics_table(preview.before, preview.after))
