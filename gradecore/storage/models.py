"""SQLAlchemy ORM models for the grade store."""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    Index,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class Submission(Base):
    """A student's submission for an assignment, with its current grade."""

    __tablename__ = "submissions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    course_id: Mapped[str] = mapped_column(String(64), nullable=False)
    assignment_id: Mapped[str] = mapped_column(String(64), nullable=False)
    student_id: Mapped[str] = mapped_column(String(64), nullable=False)
    student_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    assignment_title: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Grade as a percentage; NULL until graded
    score: Mapped[float | None] = mapped_column(Float, nullable=True)
    letter_grade: Mapped[str | None] = mapped_column(String(4), nullable=True)
    max_points: Mapped[float] = mapped_column(Float, default=100.0)
    is_submitted: Mapped[bool] = mapped_column(Boolean, default=True)
    feedback: Mapped[str | None] = mapped_column(Text, nullable=True)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.now, onupdate=datetime.now
    )

    __table_args__ = (
        Index("idx_submission_course_assignment", "course_id", "assignment_id"),
        Index("idx_submission_student", "student_id"),
    )

    def __repr__(self) -> str:
        return (
            f"Submission(id={self.id!r}, assignment={self.assignment_id!r}, "
            f"score={self.score})"
        )


class CourseWeights(Base):
    """Saved grade weights for one course."""

    __tablename__ = "course_weights"

    course_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    assignments: Mapped[float] = mapped_column(Float, nullable=False)
    quizzes: Mapped[float] = mapped_column(Float, nullable=False)
    participation: Mapped[float] = mapped_column(Float, nullable=False)
    attendance: Mapped[float] = mapped_column(Float, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.now, onupdate=datetime.now
    )

    def __repr__(self) -> str:
        return f"CourseWeights(course_id={self.course_id!r})"
