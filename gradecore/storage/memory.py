"""In-memory grade store."""

import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

from gradecore.core.exceptions import StorageError
from gradecore.scoring.models import GradeWeights

from .base import SubmissionRecord, ensure_valid_weights


class InMemoryGradeStore:
    """Grade store backed by a dictionary.

    A transaction snapshots every record and restores the snapshot if the
    block raises, so a failed batch leaves no trace.
    """

    def __init__(
        self,
        records: Iterable[SubmissionRecord] = (),
        default_weights: GradeWeights | None = None,
    ) -> None:
        self._records: dict[str, SubmissionRecord] = {r.id: r for r in records}
        self._weights: dict[str, GradeWeights] = {}
        self._default_weights = default_weights or GradeWeights.default()
        self._lock = threading.RLock()

    def add(self, record: SubmissionRecord) -> None:
        """Insert or replace a record."""
        with self._lock:
            self._records[record.id] = record

    def get(self, submission_id: str) -> SubmissionRecord | None:
        return self._records.get(submission_id)

    def all_records(self) -> list[SubmissionRecord]:
        return list(self._records.values())

    def graded_submissions(
        self, course_id: str, assignment_id: str
    ) -> list[SubmissionRecord]:
        with self._lock:
            return [
                r
                for r in self._records.values()
                if r.course_id == course_id
                and r.assignment_id == assignment_id
                and r.is_graded
            ]

    def submissions(self, course_id: str, assignment_id: str) -> list[SubmissionRecord]:
        with self._lock:
            return sorted(
                (
                    r
                    for r in self._records.values()
                    if r.course_id == course_id
                    and r.assignment_id == assignment_id
                    and r.is_submitted
                ),
                key=lambda r: r.id,
            )

    def update_score(
        self, submission_id: str, score: float, letter_grade: str | None = None
    ) -> None:
        with self._lock:
            record = self._records.get(submission_id)
            if record is None:
                raise StorageError(f"Unknown submission: {submission_id}")
            self._records[submission_id] = record.model_copy(
                update={"score": score, "letter_grade": letter_grade}
            )

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            snapshot = dict(self._records)
            try:
                yield
            except BaseException:
                self._records = snapshot
                raise

    def get_weights(self, course_id: str) -> GradeWeights:
        return self._weights.get(course_id, self._default_weights)

    def save_weights(self, course_id: str, weights: GradeWeights) -> None:
        ensure_valid_weights(course_id, weights)
        with self._lock:
            self._weights[course_id] = weights
