"""Weighted course grade aggregation."""

from .aggregator import (
    LETTER_GRADE_TABLE,
    WeightedGradeAggregator,
    grade_points,
    letter_grade,
    percentage_needed,
)
from .models import (
    CategoryBreakdown,
    CourseGradeResult,
    GradeCategory,
    GradedItem,
    GradeTrend,
    GradeWeights,
    LatePenalty,
    LatePenaltyKind,
)
from .penalties import (
    apply_late_penalty,
    apply_late_penalty_to_score,
    late_penalty_summary,
)

__all__ = [
    "LETTER_GRADE_TABLE",
    "CategoryBreakdown",
    "CourseGradeResult",
    "GradeCategory",
    "GradeTrend",
    "GradeWeights",
    "GradedItem",
    "LatePenalty",
    "LatePenaltyKind",
    "WeightedGradeAggregator",
    "apply_late_penalty",
    "apply_late_penalty_to_score",
    "grade_points",
    "late_penalty_summary",
    "letter_grade",
    "percentage_needed",
]
