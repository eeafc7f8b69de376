"""JSON output of grade and curve results."""

import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TextIO

from gradecore.curving.models import CommitOutcome, CurvePreview
from gradecore.scoring.models import CourseGradeResult
from gradecore.statistics.models import GradeStatistics

Reportable = CourseGradeResult | CurvePreview | CommitOutcome | GradeStatistics


class JSONReporter:
    """Writes one result as a versioned document::

        {"version": "1.0", "generated_at": "...", "result": {...}}

    Consumers should check ``version`` before reading ``result``.
    """

    FORMAT_VERSION = "1.0"

    def __init__(
        self,
        output_file: Path | str | None = None,
        output: TextIO | None = None,
        indent: int | None = 2,
    ) -> None:
        """
        Args:
            output_file: Write here instead of a stream; parents are created.
            output: Stream to write to, stdout when neither is given.
            indent: Indentation, or None for a single line.
        """
        self._path = Path(output_file) if output_file is not None else None
        self._stream = output
        self._indent = indent

    def build(self, result: Reportable) -> dict[str, Any]:
        """Wrap a result's dictionary form in the versioned envelope."""
        return {
            "version": self.FORMAT_VERSION,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "result": result.to_dict(),
        }

    def report(self, result: Reportable) -> None:
        """Serialize a result and write it to the configured target."""
        text = json.dumps(self.build(result), indent=self._indent, default=str) + "\n"

        if self._path is None:
            (self._stream or sys.stdout).write(text)
            return

        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(text, encoding="utf-8")
