"""Grade store interface shared by the storage backends."""

from contextlib import AbstractContextManager
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from gradecore.core.exceptions import InvalidWeightsError
from gradecore.scoring.models import GradeWeights


class SubmissionRecord(BaseModel):
    """A student's submission for one assignment as held by a grade store."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Submission identifier")
    course_id: str = Field(..., description="Course identifier")
    assignment_id: str = Field(..., description="Assignment identifier")
    student_id: str = Field(..., description="Student identifier")
    student_name: str | None = Field(None, description="Student display name")
    assignment_title: str | None = Field(None, description="Assignment title")
    score: float | None = Field(
        None,
        description="Grade as a percentage (0-100), None if ungraded",
        ge=0.0,
        le=100.0,
    )
    letter_grade: str | None = Field(None, description="Letter grade for score")
    max_points: float = Field(100.0, description="Points possible", gt=0.0)
    is_submitted: bool = Field(True, description="Whether the work was turned in")
    feedback: str | None = Field(None, description="Instructor feedback")

    @property
    def is_graded(self) -> bool:
        return self.is_submitted and self.score is not None


@runtime_checkable
class GradeStore(Protocol):
    """Persistence collaborator consumed by the curve engine.

    Writes made inside ``transaction()`` are applied all together or not at
    all; backend failures surface as StorageError.
    """

    def graded_submissions(
        self, course_id: str, assignment_id: str
    ) -> list[SubmissionRecord]:
        """Submitted and graded records for an assignment, in stable order."""
        ...

    def update_score(
        self, submission_id: str, score: float, letter_grade: str | None = None
    ) -> None:
        """Replace the stored score of one submission."""
        ...

    def transaction(self) -> AbstractContextManager[None]:
        """Scope in which every update commits or rolls back together."""
        ...

    def get_weights(self, course_id: str) -> GradeWeights:
        """Weights for a course, or the defaults when none were saved."""
        ...

    def save_weights(self, course_id: str, weights: GradeWeights) -> None:
        """Replace the weights for a course."""
        ...


def ensure_valid_weights(course_id: str, weights: GradeWeights) -> None:
    """Reject a weight configuration that cannot be saved.

    Raises:
        InvalidWeightsError: If the weights do not sum to 1.0.
    """
    if not weights.is_valid:
        raise InvalidWeightsError(weights.total, course_id=course_id)

