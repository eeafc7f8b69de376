"""Shared pytest fixtures for gradecore tests."""

from collections.abc import Callable, Iterator
from datetime import datetime, timedelta

import pytest

from gradecore.core.logging import reset_logging
from gradecore.scoring.models import GradeCategory, GradedItem, GradeWeights
from gradecore.storage import Database, InMemoryGradeStore, SubmissionRecord


@pytest.fixture(autouse=True)
def reset_logging_state() -> Iterator[None]:
    """Reset structlog and root logger state around each test."""
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def default_weights() -> GradeWeights:
    """Return the default 40/30/20/10 weights."""
    return GradeWeights.default()


@pytest.fixture
def sample_items() -> list[GradedItem]:
    """Return graded items covering all four categories."""
    return [
        GradedItem(category=GradeCategory.ASSIGNMENT, score=45, max_points=50),
        GradedItem(category=GradeCategory.ASSIGNMENT, score=40, max_points=50),
        GradedItem(category=GradeCategory.QUIZ, score=8, max_points=10),
        GradedItem(category=GradeCategory.PARTICIPATION, score=10, max_points=10),
        GradedItem(category=GradeCategory.ATTENDANCE, score=8, max_points=10),
    ]


def make_dated_items(percentages: list[float]) -> list[GradedItem]:
    """Build assignment items graded one day apart, oldest first."""
    start = datetime(2024, 9, 1)
    return [
        GradedItem(
            category=GradeCategory.ASSIGNMENT,
            score=p,
            max_points=100,
            graded_at=start + timedelta(days=i),
        )
        for i, p in enumerate(percentages)
    ]


def make_record(
    submission_id: str,
    score: float | None,
    *,
    course_id: str = "bio-101",
    assignment_id: str = "lab-3",
    is_submitted: bool = True,
    **kwargs: object,
) -> SubmissionRecord:
    """Build a submission record for the default course and assignment."""
    return SubmissionRecord(
        id=submission_id,
        course_id=course_id,
        assignment_id=assignment_id,
        student_id=f"student-{submission_id}",
        score=score,
        is_submitted=is_submitted,
        **kwargs,  # type: ignore[arg-type]
    )


@pytest.fixture
def record_factory() -> Callable[..., SubmissionRecord]:
    """Return the submission record builder."""
    return make_record


@pytest.fixture
def dated_items_factory() -> Callable[[list[float]], list[GradedItem]]:
    """Return the dated item builder."""
    return make_dated_items


@pytest.fixture
def sample_records() -> list[SubmissionRecord]:
    """Return three graded submissions plus one ungraded and one unsubmitted."""
    return [
        make_record("s1", 60.0, student_name="Ada"),
        make_record("s2", 70.0, student_name="Grace"),
        make_record("s3", 80.0, student_name="Alan"),
        make_record("s4", None, student_name="Edsger"),
        make_record("s5", 50.0, student_name="Barbara", is_submitted=False),
    ]


@pytest.fixture
def memory_store(sample_records: list[SubmissionRecord]) -> InMemoryGradeStore:
    """Return an in-memory store seeded with the sample records."""
    return InMemoryGradeStore(sample_records)


@pytest.fixture
def database() -> Iterator[Database]:
    """Return an in-memory SQLite database with tables created."""
    db = Database()
    db.create_tables()
    yield db
    db.close()
