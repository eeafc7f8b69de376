"""Late-submission penalty adjustments."""

from .models import LatePenalty, LatePenaltyKind


def apply_late_penalty(
    raw_percent: float,
    penalty: LatePenalty,
    days_late: int,
    max_points: float,
) -> float:
    """
    Adjust a percentage grade for a late submission.

    Args:
        raw_percent: Grade before the penalty (0-100).
        penalty: Late policy of the assignment.
        days_late: Whole days past the due date.
        max_points: Points possible, used to convert flat deductions.

    Returns:
        Adjusted percentage, never below 0.
    """
    if penalty.kind is LatePenaltyKind.NONE or days_late <= 0:
        return raw_percent
    if days_late > penalty.max_late_days:
        return 0.0

    if penalty.kind is LatePenaltyKind.PERCENT_PER_DAY:
        return max(raw_percent - days_late * penalty.per_day, 0.0)
    if penalty.kind is LatePenaltyKind.FLAT_DEDUCTION:
        if max_points <= 0:
            return raw_percent
        deduction_percent = days_late * penalty.per_day / max_points * 100
        return max(raw_percent - deduction_percent, 0.0)
    # NO_CREDIT
    return 0.0


def apply_late_penalty_to_score(
    raw_score: float,
    penalty: LatePenalty,
    days_late: int,
    max_points: float,
) -> float:
    """Same as apply_late_penalty, expressed in points instead of percent."""
    if max_points <= 0:
        return raw_score
    raw_percent = raw_score / max_points * 100
    adjusted = apply_late_penalty(raw_percent, penalty, days_late, max_points)
    return adjusted / 100 * max_points


def late_penalty_summary(penalty: LatePenalty, days_late: int) -> str | None:
    """Human-readable description of the penalty applied, if any."""
    if penalty.kind is LatePenaltyKind.NONE or days_late <= 0:
        return None

    day_label = "day" if days_late == 1 else "days"
    if days_late > penalty.max_late_days:
        return (
            f"Submission is {days_late} {day_label} late "
            f"(exceeds {penalty.max_late_days}-day limit). No credit awarded."
        )

    if penalty.kind is LatePenaltyKind.PERCENT_PER_DAY:
        deducted = min(days_late * penalty.per_day, 100)
        return (
            f"Late penalty: -{deducted:g}% "
            f"({days_late} {day_label} x {penalty.per_day:g}% per day)"
        )
    if penalty.kind is LatePenaltyKind.FLAT_DEDUCTION:
        deducted = days_late * penalty.per_day
        return (
            f"Late penalty: -{deducted:g} points "
            f"({days_late} {day_label} x {penalty.per_day:g} pts per day)"
        )
    return "Late submission receives no credit."
