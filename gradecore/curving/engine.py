"""Grade curving: score transforms, previews and atomic commits."""

import math
from collections.abc import Sequence

from gradecore.core.exceptions import ScoreValidationError, StorageError
from gradecore.core.logging import bind_context, get_logger
from gradecore.scoring.aggregator import letter_grade
from gradecore.statistics.calculator import StatisticsCalculator
from gradecore.statistics.models import GradeStatistics
from gradecore.storage.base import GradeStore

from .models import (
    BellCurve,
    CommitOutcome,
    CurvePolicy,
    CurvePreview,
    FlatCurve,
    PercentageBoostCurve,
    ScoreSet,
    SquareRootCurve,
)

logger = get_logger(__name__)

MIN_SCORE = 0.0
MAX_SCORE = 100.0


def _clamp(score: float) -> float:
    return min(max(score, MIN_SCORE), MAX_SCORE)


class GradeCurveEngine:
    """
    Transforms score sets under a curve policy.

    Policies:
    - flat: s + points
    - percentage_boost: s × factor
    - square_root: sqrt(s) × 10
    - bell: target_mean + z × target_std_dev, with z from the population
      mean and standard deviation of the input set

    Every result is clamped to [0, 100]. ``apply_curve`` and ``preview`` have
    no side effects and may be called on every parameter change;
    ``commit_curve`` is the only operation that writes.
    """

    def __init__(self, calculator: StatisticsCalculator | None = None) -> None:
        self._calculator = calculator or StatisticsCalculator()

    def compute_statistics(self, scores: Sequence[float]) -> GradeStatistics:
        """Distribution statistics of a score set (all zeros when empty)."""
        return self._calculator.compute(scores)

    def apply_curve(self, scores: Sequence[float], policy: CurvePolicy) -> ScoreSet:
        """
        Apply a curve policy to a score set.

        Not idempotent: curving an already curved set under flat or
        percentage_boost moves the scores again.

        Args:
            scores: Scores on the 0-100 scale, one per student.
            policy: Curve to apply.

        Returns:
            Curved scores in the input order.

        Raises:
            ScoreValidationError: If square_root receives a negative score.
        """
        if isinstance(policy, FlatCurve):
            return tuple(_clamp(s + policy.points) for s in scores)

        if isinstance(policy, PercentageBoostCurve):
            return tuple(_clamp(s * policy.factor) for s in scores)

        if isinstance(policy, SquareRootCurve):
            negative = [s for s in scores if s < 0]
            if negative:
                raise ScoreValidationError(
                    f"Square root curve requires non-negative scores, "
                    f"got {negative[0]}"
                )
            return tuple(_clamp(math.sqrt(s) * 10) for s in scores)

        if isinstance(policy, BellCurve):
            return self._apply_bell_curve(scores, policy)

        raise TypeError(f"Unsupported curve policy: {policy!r}")

    def _apply_bell_curve(self, scores: Sequence[float], policy: BellCurve) -> ScoreSet:
        if not scores:
            return ()

        mean = self._calculator.calculate_mean(scores)
        std = self._calculator.calculate_std(scores, ddof=0)

        # z-scores are undefined for identical scores; leave the set unchanged
        if std == 0:
            return tuple(scores)

        return tuple(
            _clamp(policy.target_mean + (s - mean) / std * policy.target_std_dev)
            for s in scores
        )

    def preview(self, scores: Sequence[float], policy: CurvePolicy) -> CurvePreview:
        """Curve a score set and report statistics before and after."""
        original = tuple(scores)
        curved = self.apply_curve(original, policy)

        logger.debug(
            "curve_applied",
            policy=policy.kind,
            count=len(original),
        )

        return CurvePreview(
            policy=policy,
            original=original,
            curved=curved,
            before=self.compute_statistics(original),
            after=self.compute_statistics(curved),
        )

    def commit_curve(
        self,
        store: GradeStore,
        course_id: str,
        assignment_id: str,
        policy: CurvePolicy,
    ) -> CommitOutcome:
        """
        Curve the stored grades of every submitted and graded item.

        All writes happen inside one store transaction, so either every
        matching grade is updated or none is.

        Args:
            store: Grade store holding the authoritative grades.
            course_id: Course identifier.
            assignment_id: Assignment whose submissions are curved.
            policy: Curve to apply.

        Returns:
            COMMITTED with the number of grades updated, NOTHING_TO_CURVE when
            no graded submission matches, or FAILED when the store raised and
            the batch was rolled back.
        """
        with bind_context(course_id=course_id, assignment_id=assignment_id):
            try:
                with store.transaction():
                    records = store.graded_submissions(course_id, assignment_id)
                    if not records:
                        logger.info("curve_nothing_to_curve")
                        return CommitOutcome.nothing_to_curve(course_id, assignment_id)

                    scores = [r.score for r in records if r.score is not None]
                    preview = self.preview(scores, policy)

                    for record, new_score in zip(records, preview.curved, strict=True):
                        store.update_score(
                            record.id, new_score, letter_grade=letter_grade(new_score)
                        )
            except StorageError as e:
                logger.error("curve_commit_failed", policy=policy.kind, error=str(e))
                return CommitOutcome.failed(course_id, assignment_id, reason=str(e))

            logger.info(
                "curve_committed",
                policy=policy.kind,
                updated_count=len(preview.curved),
                mean_before=round(preview.before.mean, 2),
                mean_after=round(preview.after.mean, 2),
            )
            return CommitOutcome.committed(course_id, assignment_id, preview)
