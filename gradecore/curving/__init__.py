"""Grade curving engine."""

from .engine import GradeCurveEngine
from .models import (
    POLICY_RANGES,
    BellCurve,
    CommitOutcome,
    CommitStatus,
    CurvePolicy,
    CurvePreview,
    FlatCurve,
    PercentageBoostCurve,
    ScoreSet,
    SquareRootCurve,
    parse_policy,
)
from .session import CurveSession, CurveSessionState

__all__ = [
    "POLICY_RANGES",
    "BellCurve",
    "CommitOutcome",
    "CommitStatus",
    "CurvePolicy",
    "CurvePreview",
    "CurveSession",
    "CurveSessionState",
    "FlatCurve",
    "GradeCurveEngine",
    "PercentageBoostCurve",
    "ScoreSet",
    "SquareRootCurve",
    "parse_policy",
]
