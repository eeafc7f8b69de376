"""Data models for grade curving."""

from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from gradecore.statistics.models import GradeStatistics

# Ordered raw scores for one assignment, already normalized to 0-100
ScoreSet = tuple[float, ...]

# Recommended parameter ranges offered to instructors. Values outside them are
# still accepted; the engine clamps every result to [0, 100].
POLICY_RANGES: dict[str, tuple[float, float]] = {
    "points": (1.0, 30.0),
    "factor": (1.01, 1.50),
    "target_mean": (60.0, 95.0),
    "target_std_dev": (3.0, 20.0),
}


def _in_range(name: str, value: float) -> bool:
    low, high = POLICY_RANGES[name]
    return low <= value <= high


class FlatCurve(BaseModel):
    """Add a fixed number of points to every score."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["flat"] = "flat"
    points: float = Field(..., description="Points added to each score")

    def within_recommended_range(self) -> bool:
        return _in_range("points", self.points)


class PercentageBoostCurve(BaseModel):
    """Multiply every score by a factor."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["percentage_boost"] = "percentage_boost"
    factor: float = Field(..., description="Multiplier applied to each score")

    def within_recommended_range(self) -> bool:
        return _in_range("factor", self.factor)


class SquareRootCurve(BaseModel):
    """Replace every score s with sqrt(s) * 10."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["square_root"] = "square_root"

    def within_recommended_range(self) -> bool:
        return True


class BellCurve(BaseModel):
    """Rescale scores to a target mean and standard deviation via z-scores."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["bell"] = "bell"
    target_mean: float = Field(..., description="Mean of the curved scores")
    target_std_dev: float = Field(
        ..., description="Standard deviation of the curved scores", ge=0.0
    )

    def within_recommended_range(self) -> bool:
        return _in_range("target_mean", self.target_mean) and _in_range(
            "target_std_dev", self.target_std_dev
        )


CurvePolicy = Annotated[
    FlatCurve | PercentageBoostCurve | SquareRootCurve | BellCurve,
    Field(discriminator="kind"),
]


class CurvePreview(BaseModel):
    """Side-effect free result of applying a policy to a score set."""

    model_config = ConfigDict(frozen=True)

    policy: CurvePolicy
    original: ScoreSet
    curved: ScoreSet
    before: GradeStatistics
    after: GradeStatistics

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for reporting."""
        return {
            "policy": self.policy.model_dump(),
            "original": [round(s, 2) for s in self.original],
            "curved": [round(s, 2) for s in self.curved],
            "before": self.before.to_dict(),
            "after": self.after.to_dict(),
        }


class CommitStatus(str, Enum):
    """Kind of outcome of a curve commit."""

    COMMITTED = "committed"
    NOTHING_TO_CURVE = "nothing_to_curve"
    FAILED = "failed"


class CommitOutcome(BaseModel):
    """Result of committing a curve to stored grades.

    ``updated_count`` is set only for COMMITTED; a FAILED commit changed
    nothing and reports no partial count.
    """

    model_config = ConfigDict(frozen=True)

    status: CommitStatus
    course_id: str
    assignment_id: str
    updated_count: int | None = Field(None, ge=0)
    preview: CurvePreview | None = None
    reason: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is CommitStatus.COMMITTED

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for reporting; the preview only when committed."""
        data: dict[str, Any] = {
            "status": self.status.value,
            "course_id": self.course_id,
            "assignment_id": self.assignment_id,
            "updated_count": self.updated_count,
            "reason": self.reason,
        }
        if self.preview is not None:
            data["preview"] = self.preview.to_dict()
        return data

    @classmethod
    def committed(
        cls, course_id: str, assignment_id: str, preview: CurvePreview
    ) -> "CommitOutcome":
        return cls(
            status=CommitStatus.COMMITTED,
            course_id=course_id,
            assignment_id=assignment_id,
            updated_count=len(preview.curved),
            preview=preview,
        )

    @classmethod
    def nothing_to_curve(cls, course_id: str, assignment_id: str) -> "CommitOutcome":
        return cls(
            status=CommitStatus.NOTHING_TO_CURVE,
            course_id=course_id,
            assignment_id=assignment_id,
            reason="No submitted and graded items match the assignment",
        )

    @classmethod
    def failed(cls, course_id: str, assignment_id: str, reason: str) -> "CommitOutcome":
        return cls(
            status=CommitStatus.FAILED,
            course_id=course_id,
            assignment_id=assignment_id,
            reason=reason,
        )


_policy_adapter: TypeAdapter[Any] = TypeAdapter(CurvePolicy)


def parse_policy(data: dict[str, Any]) -> CurvePolicy:
    """Build a curve policy from a mapping such as {"kind": "flat", "points": 5}.

    Raises:
        pydantic.ValidationError: If the kind is unknown or parameters invalid.
    """
    return _policy_adapter.validate_python(data)
