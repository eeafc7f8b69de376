"""Load gradebooks and score sets from YAML files."""

import math
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from gradecore.core.exceptions import LoaderError
from gradecore.scoring.models import GradeCategory, GradedItem, GradeWeights


class Gradebook(BaseModel):
    """One student's graded items in one course.

    Example file:

        course:
          id: bio-101
          name: Biology
        weights: {assignments: 0.4, quizzes: 0.3, participation: 0.2,
                  attendance: 0.1}
        items:
          - {category: assignment, score: 45, max_points: 50}
          - {type: Pop Quiz, score: 8, max_points: 10}
    """

    course_id: str
    course_name: str
    weights: GradeWeights | None = None
    items: list[GradedItem] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def flatten_course(cls, data: Any) -> Any:
        """Accept a nested ``course`` section and free-form item types."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        course = data.pop("course", None)
        if isinstance(course, dict):
            data.setdefault("course_id", course.get("id"))
            data.setdefault("course_name", course.get("name", course.get("id")))

        items = []
        for item in data.get("items") or []:
            if isinstance(item, dict) and "category" not in item and "type" in item:
                item = dict(item)
                item["category"] = GradeCategory.categorize(str(item.pop("type")))
            items.append(item)
        data["items"] = items
        return data


def _parse_yaml(path: Path) -> Any:
    if not path.exists():
        raise LoaderError("File not found", file_path=str(path))
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise LoaderError(f"YAML parsing error: {e}", file_path=str(path)) from e
    if data is None:
        raise LoaderError("Empty YAML file", file_path=str(path))
    return data


def _format_errors(e: PydanticValidationError) -> str:
    errors = []
    for error in e.errors():
        loc = ".".join(str(x) for x in error["loc"])
        errors.append(f"{loc}: {error['msg']}")
    return "Validation failed:\n  " + "\n  ".join(errors)


def load_gradebook(file_path: str | Path) -> Gradebook:
    """Load and validate a gradebook file.

    Raises:
        LoaderError: If the file is missing, malformed or invalid.
    """
    path = Path(file_path)
    data = _parse_yaml(path)
    try:
        return Gradebook.model_validate(data)
    except PydanticValidationError as e:
        raise LoaderError(_format_errors(e), file_path=str(path)) from e


def load_scores(file_path: str | Path) -> list[float]:
    """Load a score set: a YAML list, or a mapping with a ``scores`` list.

    Raises:
        LoaderError: If the file is missing, malformed or holds non-numbers.
    """
    path = Path(file_path)
    data = _parse_yaml(path)
    if isinstance(data, dict):
        data = data.get("scores")
    if not isinstance(data, list):
        raise LoaderError("Expected a list of scores", file_path=str(path))

    scores: list[float] = []
    for i, value in enumerate(data):
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise LoaderError(
                f"scores[{i}]: expected a number, got {value!r}", file_path=str(path)
            )
        if not math.isfinite(value):
            raise LoaderError(
                f"scores[{i}]: expected a finite number, got {value!r}",
                file_path=str(path),
            )
        scores.append(float(value))
    return scores
