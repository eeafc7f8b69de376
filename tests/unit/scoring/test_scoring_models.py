"""Unit tests for scoring models."""

import pytest
from pydantic import ValidationError

from gradecore.scoring.models import (
    CourseGradeResult,
    GradeCategory,
    GradedItem,
    GradeTrend,
    GradeWeights,
    LatePenalty,
    LatePenaltyKind,
)


class TestGradeCategory:
    """Tests for GradeCategory."""

    @pytest.mark.parametrize(
        ("label", "category"),
        [
            ("Quiz", GradeCategory.QUIZ),
            ("Pop quiz 3", GradeCategory.QUIZ),
            ("Class Participation", GradeCategory.PARTICIPATION),
            ("Attendance", GradeCategory.ATTENDANCE),
            ("attended lecture", GradeCategory.ATTENDANCE),
            ("Homework", GradeCategory.ASSIGNMENT),
            ("Lab report", GradeCategory.ASSIGNMENT),
            ("", GradeCategory.ASSIGNMENT),
        ],
    )
    def test_categorize(self, label: str, category: GradeCategory) -> None:
        """Test free-form type labels map to categories."""
        assert GradeCategory.categorize(label) is category


class TestGradeWeights:
    """Tests for GradeWeights."""

    def test_default(self) -> None:
        """Test the default split."""
        weights = GradeWeights.default()
        assert weights.assignments == 0.40
        assert weights.quizzes == 0.30
        assert weights.participation == 0.20
        assert weights.attendance == 0.10
        assert weights.is_valid

    def test_invalid_total(self) -> None:
        """Test weights not summing to 1.0 are invalid."""
        weights = GradeWeights(
            assignments=0.5, quizzes=0.3, participation=0.2, attendance=0.1
        )
        assert weights.total == pytest.approx(1.1)
        assert not weights.is_valid

    def test_tolerance(self) -> None:
        """Test tiny rounding differences are still valid."""
        weights = GradeWeights(
            assignments=0.4 + 5e-7, quizzes=0.3, participation=0.2, attendance=0.1
        )
        assert weights.is_valid

    def test_negative_rejected(self) -> None:
        """Test negative weights are rejected."""
        with pytest.raises(ValidationError):
            GradeWeights(assignments=-0.1)

    def test_weight_for(self) -> None:
        """Test lookup by category."""
        weights = GradeWeights.default()
        assert weights.weight_for(GradeCategory.QUIZ) == 0.30
        assert weights.weight_for(GradeCategory.ATTENDANCE) == 0.10

    def test_with_weight_returns_copy(self) -> None:
        """Test replacing one weight leaves the original untouched."""
        weights = GradeWeights.default()
        updated = weights.with_weight(GradeCategory.QUIZ, 0.2)

        assert updated.quizzes == 0.2
        assert weights.quizzes == 0.30
        assert not updated.is_valid

    def test_frozen(self) -> None:
        """Test weights are immutable."""
        weights = GradeWeights.default()
        with pytest.raises(ValidationError):
            weights.quizzes = 0.5  # type: ignore[misc]


class TestGradedItem:
    """Tests for GradedItem."""

    def test_percentage(self) -> None:
        """Test percentage of max points."""
        item = GradedItem(category=GradeCategory.QUIZ, score=8, max_points=10)
        assert item.percentage == 80.0

    def test_zero_max_points_rejected(self) -> None:
        """Test max points must be positive."""
        with pytest.raises(ValidationError):
            GradedItem(category=GradeCategory.QUIZ, score=0, max_points=0)

    def test_negative_score_rejected(self) -> None:
        """Test scores must be non-negative."""
        with pytest.raises(ValidationError):
            GradedItem(category=GradeCategory.QUIZ, score=-1, max_points=10)

    def test_category_from_value(self) -> None:
        """Test the category accepts its string value."""
        item = GradedItem(category="attendance", score=1, max_points=1)
        assert item.category is GradeCategory.ATTENDANCE


class TestCourseGradeResult:
    """Tests for CourseGradeResult."""

    def test_percentage_bounds(self) -> None:
        """Test the overall percentage stays within 0-100."""
        with pytest.raises(ValidationError):
            CourseGradeResult(
                course_id="c", course_name="C", overall_percentage=100.5
            )

    def test_to_dict(self) -> None:
        """Test dictionary form."""
        result = CourseGradeResult(
            course_id="bio-101",
            course_name="Biology",
            overall_percentage=86.666666,
            letter_grade="B",
            grade_points=3.0,
            trend=GradeTrend.IMPROVING,
        )
        data = result.to_dict()

        assert data["overall_percentage"] == 86.67
        assert data["letter_grade"] == "B"
        assert data["trend"] == "improving"
        assert data["breakdowns"] == {}


class TestLatePenalty:
    """Tests for LatePenalty."""

    def test_defaults(self) -> None:
        """Test a default policy applies no penalty."""
        penalty = LatePenalty()
        assert penalty.kind is LatePenaltyKind.NONE
        assert penalty.per_day == 0.0
        assert penalty.max_late_days == 7

    def test_negative_per_day_rejected(self) -> None:
        """Test per-day deduction must be non-negative."""
        with pytest.raises(ValidationError):
            LatePenalty(kind=LatePenaltyKind.PERCENT_PER_DAY, per_day=-5)
