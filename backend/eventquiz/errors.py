"""Error taxonomy shared by every quiz data store.

Backends translate their own failures (SQLAlchemy, httpx) into these
classes so callers never have to know which store is active.
"""


class QuizError(Exception):
    """Base class for all quiz store failures."""


class InvalidInputError(QuizError, ValueError):
    """Missing title, empty questions or empty answers."""


class NotFoundError(QuizError):
    """No quiz exists for the requested event."""


class ConflictError(QuizError):
    """Quiz id mismatch on submit or a concurrent create for the same event."""


class UnavailableError(QuizError):
    """The backend could not be reached or failed while handling the call."""
