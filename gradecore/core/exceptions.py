"""gradecore exceptions."""


class GradeCoreError(Exception):
    """Base exception for all gradecore errors."""


class ConfigurationError(GradeCoreError):
    """Base exception for configuration errors."""


class InvalidWeightsError(ConfigurationError):
    """Grade weights that do not sum to 1.0."""

    def __init__(self, total: float, course_id: str | None = None):
        self.total = total
        self.course_id = course_id

        message = f"Grade weights must sum to 1.0, got {total:.6f}"
        if course_id is not None:
            message = f"Course: {course_id}: {message}"

        super().__init__(message)


class ScoreValidationError(GradeCoreError):
    """Score outside the domain an operation accepts."""


class CurveSessionError(GradeCoreError):
    """Illegal transition in a curve session."""


class StorageError(GradeCoreError):
    """Failure reading from or writing to a grade store."""


class LoaderError(GradeCoreError):
    """Gradebook or score file that cannot be read or parsed."""

    def __init__(self, message: str, file_path: str | None = None):
        self.message = message
        self.file_path = file_path

        if file_path:
            full_message = f"File: {file_path}: {message}"
        else:
            full_message = message

        super().__init__(full_message)
