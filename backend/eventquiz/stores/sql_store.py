"""Transactional quiz store backed by SQLModel/SQLAlchemy.

Each operation opens its own `Session` and commits at most once, so a
quiz replacement (delete the old graph, insert the new one) is a single
unit of work. The unique constraint on `quiz.event_id` guarantees one
quiz per event even when two replacements race; the one that commits
second fails with `ConflictError`.
"""

import logging
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from .. import repositories
from ..errors import ConflictError, NotFoundError, QuizError, UnavailableError
from ..grading import grade
from ..schemas import QuizAnswersIn, QuizDefinition, QuizIn, QuizSubmissionResult
from .base import QuizDataStore, QuizLookup, check_quiz_id, validate_answers_input, validate_quiz_input

logger = logging.getLogger(__name__)


class SqlQuizStore(QuizDataStore):
    name = "transactional"

    def __init__(self, engine: Engine):
        self.engine = engine

    def lookup_quiz(self, event_id: str) -> QuizLookup:
        try:
            with Session(self.engine) as session:
                quiz = repositories.QuizRepository(session).get_by_event(event_id, active_only=True)
                if quiz is None:
                    return QuizLookup.not_found()
                return QuizLookup.found(repositories.to_definition(quiz))
        except (SQLAlchemyError, ValueError) as exc:
            # ValueError: a stored options/answer column is not valid JSON
            return QuizLookup.failed(exc)

    def create_quiz(self, event_id: str, quiz_in: QuizIn, user_id: Optional[str]) -> QuizDefinition:
        validate_quiz_input(quiz_in)
        try:
            with Session(self.engine) as session:
                repo = repositories.QuizRepository(session)
                existing = repo.get_by_event(event_id)
                if existing is not None:
                    logger.info("replacing quiz %s of event %s", existing.id, event_id)
                    repo.delete(existing)
                quiz = repo.create(event_id, quiz_in, user_id)
                definition = repositories.to_definition(quiz)
                session.commit()
                return definition
        except IntegrityError as exc:
            raise ConflictError(f"A quiz for event {event_id} was created concurrently") from exc
        except SQLAlchemyError as exc:
            raise UnavailableError(f"Failed to store quiz for event {event_id}: {exc}") from exc

    def submit_quiz(self, event_id: str, answers_in: QuizAnswersIn, user_id: Optional[str]) -> QuizSubmissionResult:
        validate_answers_input(answers_in)
        try:
            with Session(self.engine) as session:
                repo = repositories.QuizRepository(session)
                quiz = repo.get_by_event(event_id, active_only=True)
                if quiz is None:
                    raise NotFoundError(f"Quiz not found for event: {event_id}")
                definition = repositories.to_definition(quiz)
                check_quiz_id(answers_in, definition)
                outcome = grade(definition, answers_in.answers)
                submission = repo.add_submission(
                    quiz, user_id, outcome.score, outcome.max_score, outcome.percentage, outcome.results
                )
                result = QuizSubmissionResult(
                    submission_id=str(submission.id),
                    score=outcome.score,
                    max_score=outcome.max_score,
                    percentage=outcome.percentage,
                    success=True,
                    answer_results=outcome.results,
                    submitted_at=submission.submitted_at,
                )
                session.commit()
                return result
        except QuizError:
            raise
        except IntegrityError as exc:
            # the quiz was replaced between our read and the insert
            raise ConflictError(f"Quiz for event {event_id} changed during submission") from exc
        except SQLAlchemyError as exc:
            raise UnavailableError(f"Failed to record submission for event {event_id}: {exc}") from exc
