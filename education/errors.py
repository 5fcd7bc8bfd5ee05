"""Error types for lesson playback and assessment."""


class LessonError(Exception):
    """Base class for lesson errors."""

    code = "lesson_error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class InvalidArgumentError(LessonError):
    """Operation argument out of range."""

    code = "invalid_argument"


class InvalidStateError(LessonError):
    """Operation not allowed in the current state."""

    code = "invalid_state"


class EmptyContentError(LessonError):
    """Lesson supplied no scenes or no questions."""

    code = "empty_content"


class ContentValidationError(LessonError):
    """Malformed lesson content, reported before a session starts."""

    code = "invalid_content"


class LessonNotFoundError(LessonError):
    code = "lesson_not_found"


class SessionNotFoundError(LessonError):
    code = "session_not_found"


class SessionLimitError(LessonError):
    code = "session_limit"
