"""CSV export of graded submissions."""

import csv
import io
from collections.abc import Iterable
from pathlib import Path

from gradecore.scoring.aggregator import letter_grade
from gradecore.storage.base import SubmissionRecord

CSV_HEADER = ["Student Name", "Assignment", "Grade", "Letter Grade", "Feedback"]


def _clean(text: str | None) -> str:
    """Flatten free text into a single comma-free cell."""
    if not text:
        return ""
    return text.replace(",", " ").replace("\r", " ").replace("\n", " ")


def export_grades_csv(
    records: Iterable[SubmissionRecord],
    output_file: Path | str | None = None,
) -> str:
    """Render submitted records as CSV.

    Args:
        records: Submissions to export; unsubmitted ones are skipped.
        output_file: Optional path the CSV is also written to.

    Returns:
        The CSV text, header included.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)

    for record in records:
        if not record.is_submitted:
            continue
        if record.score is not None:
            grade = f"{record.score:.1f}%"
            letter = record.letter_grade or letter_grade(record.score)
        else:
            grade = "Not Graded"
            letter = "--"
        writer.writerow(
            [
                _clean(record.student_name) or "Unknown Student",
                _clean(record.assignment_title or record.assignment_id),
                grade,
                letter,
                _clean(record.feedback),
            ]
        )

    text = buffer.getvalue()
    if output_file is not None:
        path = Path(output_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return text
