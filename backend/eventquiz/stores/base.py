"""The data-store contract every quiz backend implements.

Reads go through `lookup_quiz`, which reports its outcome explicitly as
a `QuizLookup` (found, not found, or backend error) instead of hiding
failures behind a default value. `get_quiz_info` and
`get_quiz_definition` are derived from it and collapse a backend error
into the "no quiz" answer, so they never raise.

Writes raise the classes from `eventquiz.errors`.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import NamedTuple, Optional

from ..errors import ConflictError, InvalidInputError
from ..schemas import QuizAnswersIn, QuizDefinition, QuizIn, QuizInfo, QuizSubmissionResult

logger = logging.getLogger(__name__)


class LookupStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    BACKEND_ERROR = "backend_error"


class QuizLookup(NamedTuple):
    status: LookupStatus
    quiz: Optional[QuizDefinition] = None
    error: Optional[Exception] = None

    @classmethod
    def found(cls, quiz: QuizDefinition) -> "QuizLookup":
        return cls(LookupStatus.FOUND, quiz=quiz)

    @classmethod
    def not_found(cls) -> "QuizLookup":
        return cls(LookupStatus.NOT_FOUND)

    @classmethod
    def failed(cls, error: Exception) -> "QuizLookup":
        return cls(LookupStatus.BACKEND_ERROR, error=error)


def info_from_lookup(lookup: QuizLookup) -> QuizInfo:
    if lookup.status is not LookupStatus.FOUND:
        return QuizInfo()
    quiz = lookup.quiz
    return QuizInfo(
        has_quiz=True,
        quiz_id=quiz.id,
        is_active=quiz.is_active,
        title=quiz.title,
        question_count=len(quiz.questions),
    )


def validate_quiz_input(quiz_in: Optional[QuizIn]) -> None:
    """Raise `InvalidInputError` unless `quiz_in` can be stored."""
    if quiz_in is None:
        raise InvalidInputError("Quiz input is required")
    if not quiz_in.title or not quiz_in.title.strip():
        raise InvalidInputError("Quiz title is required")
    if quiz_in.questions is None:
        raise InvalidInputError("Quiz questions list is null")
    if not quiz_in.questions:
        raise InvalidInputError("Quiz must have at least one question")
    for idx, q in enumerate(quiz_in.questions):
        if q is None or q.question is None:
            raise InvalidInputError(f"Question {idx} has no text")
        if q.points is not None and q.points < 0:
            raise InvalidInputError(f"Question {idx} has negative points")


def validate_answers_input(answers_in: Optional[QuizAnswersIn]) -> None:
    if answers_in is None or not answers_in.answers:
        raise InvalidInputError("Quiz answers list is null or empty")


def check_quiz_id(answers_in: QuizAnswersIn, quiz: QuizDefinition) -> None:
    """A caller-supplied quiz id must name the event's active quiz."""
    if answers_in.quiz_id is not None and answers_in.quiz_id != quiz.id:
        raise ConflictError("Quiz ID does not match event quiz")


class QuizDataStore(ABC):
    """Interchangeable persistence for event quizzes."""

    name = "base"

    @abstractmethod
    def lookup_quiz(self, event_id: str) -> QuizLookup:
        """Find the active quiz of `event_id`; must not raise."""

    @abstractmethod
    def create_quiz(self, event_id: str, quiz_in: QuizIn, user_id: Optional[str]) -> QuizDefinition:
        """Validate `quiz_in` and replace any existing quiz of `event_id` with it."""

    @abstractmethod
    def submit_quiz(self, event_id: str, answers_in: QuizAnswersIn, user_id: Optional[str]) -> QuizSubmissionResult:
        """Grade `answers_in` against the active quiz and record the submission."""

    def get_quiz_info(self, event_id: str) -> QuizInfo:
        lookup = self.lookup_quiz(event_id)
        if lookup.status is LookupStatus.BACKEND_ERROR:
            logger.error("Failed to get quiz info for event %s: %s", event_id, lookup.error)
        return info_from_lookup(lookup)

    def get_quiz_definition(self, event_id: str) -> Optional[QuizDefinition]:
        lookup = self.lookup_quiz(event_id)
        if lookup.status is LookupStatus.BACKEND_ERROR:
            logger.error("Failed to get quiz definition for event %s: %s", event_id, lookup.error)
        return lookup.quiz
