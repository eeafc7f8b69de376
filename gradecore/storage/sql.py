"""SQLAlchemy-backed grade store."""

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gradecore.core.exceptions import StorageError
from gradecore.core.logging import get_logger
from gradecore.scoring.models import GradeWeights

from .base import SubmissionRecord, ensure_valid_weights
from .database import Database
from .models import CourseWeights, Submission

logger = get_logger(__name__)


def _to_record(submission: Submission) -> SubmissionRecord:
    return SubmissionRecord(
        id=submission.id,
        course_id=submission.course_id,
        assignment_id=submission.assignment_id,
        student_id=submission.student_id,
        student_name=submission.student_name,
        assignment_title=submission.assignment_title,
        score=submission.score,
        letter_grade=submission.letter_grade,
        max_points=submission.max_points,
        is_submitted=submission.is_submitted,
        feedback=submission.feedback,
    )


class SqlGradeStore:
    """Grade store persisting submissions and course weights with SQLAlchemy.

    Outside ``transaction()`` every call runs in its own session. Inside it,
    all updates share one session that commits when the block exits and
    rolls back if it raises.
    """

    def __init__(
        self,
        database: Database,
        default_weights: GradeWeights | None = None,
    ) -> None:
        """Initialize storage with a database.

        Args:
            database: Connection manager with tables already created.
            default_weights: Weights returned for courses without saved ones.
        """
        self._database = database
        self._default_weights = default_weights or GradeWeights.default()
        self._active: Session | None = None

    @contextmanager
    def _session(self) -> Iterator[Session]:
        if self._active is not None:
            yield self._active
            return
        try:
            with self._database.session() as session:
                yield session
        except SQLAlchemyError as e:
            raise StorageError(f"Grade store operation failed: {e}") from e

    # ==================== Submission Operations ====================

    def add_submission(self, record: SubmissionRecord) -> None:
        """Insert or replace a submission."""
        with self._session() as session:
            session.merge(Submission(**record.model_dump()))

    def graded_submissions(
        self, course_id: str, assignment_id: str
    ) -> list[SubmissionRecord]:
        stmt = (
            select(Submission)
            .where(
                Submission.course_id == course_id,
                Submission.assignment_id == assignment_id,
                Submission.is_submitted.is_(True),
                Submission.score.is_not(None),
            )
            .order_by(Submission.id)
        )
        with self._session() as session:
            return [_to_record(s) for s in session.scalars(stmt).all()]

    def submissions(self, course_id: str, assignment_id: str) -> list[SubmissionRecord]:
        """Submitted records for an assignment, graded or not."""
        stmt = (
            select(Submission)
            .where(
                Submission.course_id == course_id,
                Submission.assignment_id == assignment_id,
                Submission.is_submitted.is_(True),
            )
            .order_by(Submission.id)
        )
        with self._session() as session:
            return [_to_record(s) for s in session.scalars(stmt).all()]

    def get_submission(self, submission_id: str) -> SubmissionRecord | None:
        with self._session() as session:
            submission = session.get(Submission, submission_id)
            return _to_record(submission) if submission is not None else None

    def update_score(
        self, submission_id: str, score: float, letter_grade: str | None = None
    ) -> None:
        with self._session() as session:
            submission = session.get(Submission, submission_id)
            if submission is None:
                raise StorageError(f"Unknown submission: {submission_id}")
            submission.score = score
            submission.letter_grade = letter_grade
            session.flush()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self._active is not None:
            raise StorageError("Nested grade store transactions are not supported")

        session = self._database.session_factory()
        self._active = session
        try:
            yield
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(f"Grade store transaction failed: {e}") from e
        except BaseException:
            session.rollback()
            raise
        finally:
            self._active = None
            session.close()

    # ==================== Weight Operations ====================

    def get_weights(self, course_id: str) -> GradeWeights:
        with self._session() as session:
            row = session.get(CourseWeights, course_id)
            if row is None:
                return self._default_weights
            return GradeWeights(
                assignments=row.assignments,
                quizzes=row.quizzes,
                participation=row.participation,
                attendance=row.attendance,
            )

    def save_weights(self, course_id: str, weights: GradeWeights) -> None:
        ensure_valid_weights(course_id, weights)
        with self._session() as session:
            session.merge(CourseWeights(course_id=course_id, **weights.model_dump()))
        logger.info("grade_weights_saved", course_id=course_id)
