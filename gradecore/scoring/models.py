"""Data models for weighted grade aggregation."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Tolerance used when checking that weights sum to 1.0
WEIGHT_TOLERANCE = 1e-6


class GradeCategory(str, Enum):
    """Grade-weight bucket a graded item belongs to."""

    ASSIGNMENT = "assignment"
    QUIZ = "quiz"
    PARTICIPATION = "participation"
    ATTENDANCE = "attendance"

    @classmethod
    def categorize(cls, type_label: str) -> "GradeCategory":
        """Map a free-form item type label (e.g. "Pop Quiz") to a category."""
        lowered = type_label.lower()
        if "quiz" in lowered:
            return cls.QUIZ
        if "participation" in lowered:
            return cls.PARTICIPATION
        if "attend" in lowered:
            return cls.ATTENDANCE
        return cls.ASSIGNMENT


class GradeTrend(str, Enum):
    """Direction of a student's recent grades."""

    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


class GradeWeights(BaseModel):
    """Per-course category weights.

    A configuration is authoritative only when ``is_valid``; weights are
    replaced wholesale on save, never partially updated.
    """

    model_config = ConfigDict(frozen=True)

    assignments: float = Field(0.40, description="Assignments weight", ge=0.0)
    quizzes: float = Field(0.30, description="Quizzes weight", ge=0.0)
    participation: float = Field(0.20, description="Participation weight", ge=0.0)
    attendance: float = Field(0.10, description="Attendance weight", ge=0.0)

    @classmethod
    def default(cls) -> "GradeWeights":
        """Return the default 40/30/20/10 split."""
        return cls()

    @property
    def total(self) -> float:
        """Sum of the four weights."""
        return self.assignments + self.quizzes + self.participation + self.attendance

    @property
    def is_valid(self) -> bool:
        """Whether the weights sum to 1.0 within tolerance."""
        return abs(self.total - 1.0) <= WEIGHT_TOLERANCE

    def weight_for(self, category: GradeCategory) -> float:
        """Return the weight configured for a category."""
        return {
            GradeCategory.ASSIGNMENT: self.assignments,
            GradeCategory.QUIZ: self.quizzes,
            GradeCategory.PARTICIPATION: self.participation,
            GradeCategory.ATTENDANCE: self.attendance,
        }[category]

    def with_weight(self, category: GradeCategory, value: float) -> "GradeWeights":
        """Return a copy with one category's weight replaced."""
        field = {
            GradeCategory.ASSIGNMENT: "assignments",
            GradeCategory.QUIZ: "quizzes",
            GradeCategory.PARTICIPATION: "participation",
            GradeCategory.ATTENDANCE: "attendance",
        }[category]
        return GradeWeights(**{**self.model_dump(), field: value})


class GradedItem(BaseModel):
    """A single scored artifact for a student in a course."""

    model_config = ConfigDict(frozen=True)

    category: GradeCategory = Field(..., description="Weight bucket")
    score: float = Field(..., description="Points earned", ge=0.0)
    max_points: float = Field(..., description="Points possible", gt=0.0)
    title: str | None = Field(None, description="Item title")
    graded_at: datetime | None = Field(None, description="When the item was graded")
    student_id: str | None = Field(None, description="Student identifier")
    course_id: str | None = Field(None, description="Course identifier")

    @field_validator("graded_at")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        """Treat naive timestamps as UTC so all items sort together."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def percentage(self) -> float:
        """Score as a percentage of max points."""
        return self.score / self.max_points * 100


class CategoryBreakdown(BaseModel):
    """Contribution of one category to a course grade."""

    model_config = ConfigDict(frozen=True)

    category: GradeCategory
    weight: float = Field(..., ge=0.0)
    item_count: int = Field(0, ge=0)
    earned_points: float = Field(0.0, ge=0.0)
    total_points: float = Field(0.0, ge=0.0)
    percentage: float | None = Field(
        None, description="Points-based average (0-100), None without data"
    )
    weighted_contribution: float = Field(0.0, ge=0.0)

    @property
    def has_data(self) -> bool:
        """Whether any graded item fell in this category."""
        return self.percentage is not None


class CourseGradeResult(BaseModel):
    """Display-ready overall grade for one course.

    ``has_data`` distinguishes a computed 0% from "nothing computed"; without
    data the letter grade and grade points are None.
    """

    model_config = ConfigDict(frozen=True)

    course_id: str
    course_name: str
    overall_percentage: float = Field(..., ge=0.0, le=100.0)
    letter_grade: str | None = None
    grade_points: float | None = Field(None, ge=0.0, le=4.0)
    has_data: bool = True
    breakdowns: list[CategoryBreakdown] = Field(default_factory=list)
    trend: GradeTrend = GradeTrend.STABLE
    weights_normalized: bool = Field(
        False, description="Weights did not sum to 1.0 and were normalized"
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for reporting."""
        return {
            "course_id": self.course_id,
            "course_name": self.course_name,
            "overall_percentage": round(self.overall_percentage, 2),
            "letter_grade": self.letter_grade,
            "grade_points": self.grade_points,
            "has_data": self.has_data,
            "trend": self.trend.value,
            "weights_normalized": self.weights_normalized,
            "breakdowns": {
                b.category.value: {
                    "weight": b.weight,
                    "items": b.item_count,
                    "percentage": (
                        round(b.percentage, 2) if b.percentage is not None else None
                    ),
                    "weighted": round(b.weighted_contribution, 4),
                }
                for b in self.breakdowns
            },
        }


class LatePenaltyKind(str, Enum):
    """How a late submission is penalized."""

    NONE = "none"
    PERCENT_PER_DAY = "percent_per_day"
    FLAT_DEDUCTION = "flat_deduction"
    NO_CREDIT = "no_credit"


class LatePenalty(BaseModel):
    """Late-submission policy attached to an assignment."""

    model_config = ConfigDict(frozen=True)

    kind: LatePenaltyKind = LatePenaltyKind.NONE
    per_day: float = Field(
        0.0, description="Percent or points deducted per day late", ge=0.0
    )
    max_late_days: int = Field(
        7, description="Days late after which no credit is awarded", ge=0
    )
