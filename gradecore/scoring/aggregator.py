"""Weighted aggregation of graded items into a course grade."""

from collections import defaultdict
from collections.abc import Iterable, Sequence

from gradecore.core.exceptions import InvalidWeightsError
from gradecore.core.logging import get_logger

from .models import (
    CategoryBreakdown,
    CourseGradeResult,
    GradeCategory,
    GradedItem,
    GradeTrend,
    GradeWeights,
)

logger = get_logger(__name__)

# Inclusive lower bound, letter, grade points. Ordered highest first.
LETTER_GRADE_TABLE: tuple[tuple[float, str, float], ...] = (
    (93.0, "A", 4.0),
    (90.0, "A-", 3.7),
    (87.0, "B+", 3.3),
    (83.0, "B", 3.0),
    (80.0, "B-", 2.7),
    (77.0, "C+", 2.3),
    (73.0, "C", 2.0),
    (70.0, "C-", 1.7),
    (67.0, "D+", 1.3),
    (63.0, "D", 1.0),
    (60.0, "D-", 0.7),
)
FAILING_GRADE = ("F", 0.0)


def _lookup(percentage: float) -> tuple[str, float]:
    for lower_bound, letter, points in LETTER_GRADE_TABLE:
        if percentage >= lower_bound:
            return letter, points
    return FAILING_GRADE


def letter_grade(percentage: float) -> str:
    """Map a percentage to a letter grade using the fixed breakpoint table."""
    return _lookup(percentage)[0]


def grade_points(percentage: float) -> float:
    """Map a percentage to 4.0-scale grade points via its letter grade."""
    return _lookup(percentage)[1]


def _clamp_percentage(value: float) -> float:
    return min(max(value, 0.0), 100.0)


class WeightedGradeAggregator:
    """
    Combines per-category averages into one overall course grade.

    The overall percentage is:
        Σ(weight_c × average_c) / Σ(weight_c for categories with data)

    Categories without graded items are left out of both sums, so a course
    with no attendance taken yet is graded on the remaining categories only.

    Weights that do not sum to 1.0 are a caller error. By default they are
    normalized by the same division and the result is flagged with
    ``weights_normalized`` plus a ``grade_weights_invalid`` warning; this masks
    the misconfiguration rather than fixing it. Pass ``strict=True`` to raise
    InvalidWeightsError instead.
    """

    def __init__(
        self,
        strict: bool = False,
        trend_window: int = 5,
        trend_threshold: float = 2.0,
    ) -> None:
        """
        Initialize the aggregator.

        Args:
            strict: Raise on invalid weights instead of normalizing.
            trend_window: Number of recent items compared for the trend.
            trend_threshold: Percentage-point delta that counts as a trend.
        """
        self.strict = strict
        self.trend_window = trend_window
        self.trend_threshold = trend_threshold

    @staticmethod
    def compute_category_average(items: Sequence[GradedItem]) -> float | None:
        """
        Points-based average of one category's items.

        Args:
            items: Graded items belonging to a single category.

        Returns:
            sum(score) / sum(max_points) * 100 clamped to [0, 100],
            or None when there are no items.
        """
        if not items:
            return None
        earned = sum(item.score for item in items)
        possible = sum(item.max_points for item in items)
        return _clamp_percentage(earned / possible * 100)

    def calculate_course_grade(
        self,
        all_items: Iterable[GradedItem],
        weights: GradeWeights,
        course_id: str,
        course_name: str,
    ) -> CourseGradeResult:
        """
        Calculate the weighted course grade.

        Args:
            all_items: Every graded item for the student in the course.
            weights: Category weights for the course.
            course_id: Course identifier.
            course_name: Course display name.

        Returns:
            CourseGradeResult; ``has_data`` is False when nothing was graded.

        Raises:
            InvalidWeightsError: If strict and the weights do not sum to 1.0.
        """
        weights_normalized = False
        if not weights.is_valid:
            if self.strict:
                raise InvalidWeightsError(weights.total, course_id=course_id)
            weights_normalized = True
            logger.warning(
                "grade_weights_invalid",
                course_id=course_id,
                weight_total=round(weights.total, 6),
            )

        items = list(all_items)
        by_category: dict[GradeCategory, list[GradedItem]] = defaultdict(list)
        for item in items:
            by_category[item.category].append(item)

        breakdowns: list[CategoryBreakdown] = []
        weighted_sum = 0.0
        effective_weight = 0.0

        for category in GradeCategory:
            category_items = by_category.get(category, [])
            weight = weights.weight_for(category)
            average = self.compute_category_average(category_items)
            contribution = 0.0

            if average is not None:
                contribution = weight * average
                weighted_sum += contribution
                effective_weight += weight

            breakdowns.append(
                CategoryBreakdown(
                    category=category,
                    weight=weight,
                    item_count=len(category_items),
                    earned_points=sum(i.score for i in category_items),
                    total_points=sum(i.max_points for i in category_items),
                    percentage=average,
                    weighted_contribution=contribution,
                )
            )

        trend = self.calculate_trend(items)

        # Data only in zero-weight categories carries no grade either
        if effective_weight <= 0:
            logger.debug("course_grade_no_data", course_id=course_id)
            return CourseGradeResult(
                course_id=course_id,
                course_name=course_name,
                overall_percentage=0.0,
                letter_grade=None,
                grade_points=None,
                has_data=False,
                breakdowns=breakdowns,
                trend=trend,
                weights_normalized=weights_normalized,
            )

        overall = _clamp_percentage(weighted_sum / effective_weight)
        letter, points = _lookup(overall)

        logger.debug(
            "course_grade_calculated",
            course_id=course_id,
            overall_percentage=round(overall, 2),
            letter_grade=letter,
        )

        return CourseGradeResult(
            course_id=course_id,
            course_name=course_name,
            overall_percentage=overall,
            letter_grade=letter,
            grade_points=points,
            has_data=True,
            breakdowns=breakdowns,
            trend=trend,
            weights_normalized=weights_normalized,
        )

    @staticmethod
    def calculate_gpa(results: Iterable[CourseGradeResult]) -> float:
        """
        Cumulative GPA across courses.

        Courses without data are skipped.

        Returns:
            Mean grade points, or 0.0 when no course has data.
        """
        points = [r.grade_points for r in results if r.grade_points is not None]
        if not points:
            return 0.0
        return sum(points) / len(points)

    def calculate_trend(self, items: Sequence[GradedItem]) -> GradeTrend:
        """
        Compare the most recent items to the ones before them.

        Items are ordered by ``graded_at``; undated items are ignored.
        """
        dated = sorted(
            (i for i in items if i.graded_at is not None),
            key=lambda i: i.graded_at,  # type: ignore[arg-type, return-value]
        )
        if len(dated) < 2:
            return GradeTrend.STABLE

        recent_count = min(self.trend_window, len(dated))
        recent = dated[-recent_count:]
        remaining = dated[:-recent_count]
        if not remaining:
            return GradeTrend.STABLE
        previous = remaining[-self.trend_window :]

        recent_avg = sum(i.percentage for i in recent) / len(recent)
        previous_avg = sum(i.percentage for i in previous) / len(previous)
        delta = recent_avg - previous_avg

        if delta > self.trend_threshold:
            return GradeTrend.IMPROVING
        if delta < -self.trend_threshold:
            return GradeTrend.DECLINING
        return GradeTrend.STABLE


def percentage_needed(
    current_earned: float,
    current_total: float,
    remaining_total: float,
    target_percentage: float,
) -> float | None:
    """
    Percentage needed on remaining work to reach a target grade.

    Args:
        current_earned: Points earned so far.
        current_total: Points possible so far.
        remaining_total: Points still available.
        target_percentage: Desired overall percentage.

    Returns:
        Required percentage on the remaining work (never below 0), or None
        if nothing remains or the target needs more than 100%.
    """
    if remaining_total <= 0:
        return None
    total_possible = current_total + remaining_total
    needed = target_percentage / 100.0 * total_possible - current_earned
    needed_percent = needed / remaining_total * 100.0
    if needed_percent > 100.0:
        return None
    return max(0.0, needed_percent)
