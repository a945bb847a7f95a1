"""Repository encapsulating the quiz tables.

`QuizRepository` works on a caller-owned `Session` and only flushes; the
transactional store decides when a unit of work commits so that a quiz
replacement (delete + insert) lands in a single transaction.
"""

import json
from typing import List, Optional

from sqlmodel import Session, select

from . import models
from .schemas import AnswerResult, Question, QuizDefinition, QuizIn


def _dump(value) -> Optional[str]:
    return None if value is None else json.dumps(value)


def _load(raw: Optional[str]):
    return None if raw is None else json.loads(raw)


class QuizRepository:
    """Queries and writes for `Quiz`, `QuizQuestion` and `QuizSubmission`."""
    def __init__(self, session: Session):
        self.session = session

    def get_by_event(self, event_id: str, active_only: bool = False) -> Optional[models.Quiz]:
        """Return the quiz of `event_id` or `None`."""
        stmt = select(models.Quiz).where(models.Quiz.event_id == event_id)
        if active_only:
            stmt = stmt.where(models.Quiz.is_active == True)  # noqa: E712
        return self.session.exec(stmt.limit(1)).first()

    def delete(self, quiz: models.Quiz) -> None:
        """Delete `quiz` together with its questions and submissions."""
        self.session.delete(quiz)
        self.session.flush()

    def create(self, event_id: str, quiz_in: QuizIn, user_id: Optional[str]) -> models.Quiz:
        """Add a quiz and its questions, in input order."""
        quiz = models.Quiz(
            event_id=event_id,
            title=quiz_in.title,
            description=quiz_in.description,
            is_active=quiz_in.active,
            created_by=user_id,
        )
        quiz.updated_at = quiz.created_at
        for position, q in enumerate(quiz_in.questions):
            quiz.questions.append(models.QuizQuestion(
                position=position,
                question_text=q.question,
                question_type=q.type,
                options_json=_dump(q.options),
                correct_answer_json=_dump(q.correct_answer),
                points=q.points,
            ))
        self.session.add(quiz)
        self.session.flush()
        return quiz

    def add_submission(self, quiz: models.Quiz, user_id: Optional[str], score: int, max_score: int,
                       percentage: int, results: List[AnswerResult]) -> models.QuizSubmission:
        """Persist a graded submission for `quiz`."""
        submission = models.QuizSubmission(
            quiz_id=quiz.id,
            event_id=quiz.event_id,
            user_id=user_id,
            score=score,
            max_score=max_score,
            percentage=percentage,
            success=True,
            answers_json=json.dumps([r.model_dump(mode="json") for r in results]),
        )
        self.session.add(submission)
        self.session.flush()
        return submission

    def list_submissions(self, event_id: str) -> List[models.QuizSubmission]:
        """Return the submissions recorded for `event_id`, oldest first."""
        stmt = select(models.QuizSubmission).where(
            models.QuizSubmission.event_id == event_id
        ).order_by(models.QuizSubmission.id)
        return self.session.exec(stmt).all()


def to_definition(quiz: models.Quiz) -> QuizDefinition:
    """Convert a `Quiz` row (with its questions) to a `QuizDefinition`."""
    return QuizDefinition(
        id=str(quiz.id),
        event_id=quiz.event_id,
        title=quiz.title,
        description=quiz.description,
        is_active=quiz.is_active,
        created_by=quiz.created_by,
        created_at=quiz.created_at,
        updated_at=quiz.updated_at,
        questions=[
            Question(
                id=str(q.id),
                question=q.question_text,
                type=q.question_type,
                options=_load(q.options_json),
                points=q.points,
                correct_answer=_load(q.correct_answer_json),
            )
            for q in quiz.questions
        ],
    )
