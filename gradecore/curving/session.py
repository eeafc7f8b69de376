"""Interactive curve session: select, preview, then commit."""

from collections.abc import Sequence
from enum import Enum

from gradecore.core.exceptions import CurveSessionError
from gradecore.storage.base import GradeStore

from .engine import GradeCurveEngine
from .models import CommitOutcome, CurvePolicy, CurvePreview


class CurveSessionState(str, Enum):
    """Lifecycle state of a curve session."""

    IDLE = "idle"
    POLICY_SELECTED = "policy_selected"
    PREVIEWED = "previewed"
    COMMITTING = "committing"
    COMMITTED = "committed"
    FAILED = "failed"


_FINAL_STATES = frozenset({CurveSessionState.COMMITTED, CurveSessionState.FAILED})


class CurveSession:
    """Tracks one instructor's curve of one assignment.

    idle -> policy_selected -> previewed (repeatable) -> committing ->
    committed | failed. Selecting a different policy returns to
    policy_selected. A session that reached committed or failed is closed.
    """

    def __init__(
        self,
        store: GradeStore,
        course_id: str,
        assignment_id: str,
        engine: GradeCurveEngine | None = None,
    ) -> None:
        self.store = store
        self.course_id = course_id
        self.assignment_id = assignment_id
        self.engine = engine or GradeCurveEngine()
        self.state = CurveSessionState.IDLE
        self.policy: CurvePolicy | None = None
        self.last_preview: CurvePreview | None = None
        self.outcome: CommitOutcome | None = None

    def _ensure_open(self) -> None:
        if self.state in _FINAL_STATES:
            raise CurveSessionError(f"Curve session is closed ({self.state.value})")

    def select_policy(self, policy: CurvePolicy) -> None:
        """Choose or change the curve policy and its parameters."""
        self._ensure_open()
        if self.state is CurveSessionState.COMMITTING:
            raise CurveSessionError("Cannot change policy while committing")
        self.policy = policy
        self.last_preview = None
        self.state = CurveSessionState.POLICY_SELECTED

    def preview(self, scores: Sequence[float] | None = None) -> CurvePreview:
        """
        Preview the selected policy without touching stored grades.

        Args:
            scores: Score set to curve. Defaults to the stored graded scores
                of the session's assignment.
        """
        self._ensure_open()
        if self.policy is None:
            raise CurveSessionError("Select a curve policy before previewing")

        if scores is None:
            records = self.store.graded_submissions(self.course_id, self.assignment_id)
            scores = [r.score for r in records if r.score is not None]

        self.last_preview = self.engine.preview(scores, self.policy)
        self.state = CurveSessionState.PREVIEWED
        return self.last_preview

    def commit(self) -> CommitOutcome:
        """Commit the selected policy to the stored grades."""
        self._ensure_open()
        if self.policy is None:
            raise CurveSessionError("Select a curve policy before committing")

        self.state = CurveSessionState.COMMITTING
        outcome = self.engine.commit_curve(
            self.store, self.course_id, self.assignment_id, self.policy
        )
        self.outcome = outcome
        if outcome.succeeded:
            self.state = CurveSessionState.COMMITTED
        else:
            self.state = CurveSessionState.FAILED
        return outcome
