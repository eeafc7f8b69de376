"""Output of grade and curve results."""

from .console import (
    course_grade_table,
    print_course_grade,
    print_curve_preview,
    statistics_table,
)
from .csv_export import CSV_HEADER, export_grades_csv
from .json_reporter import JSONReporter

__all__ = [
    "CSV_HEADER",
    "JSONReporter",
    "course_grade_table",
    "export_grades_csv",
    "print_course_grade",
    "print_curve_preview",
    "statistics_table",
]
