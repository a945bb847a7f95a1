"""In-memory quiz store.

Used when no durable backend is configured. Data lives in this process
only and is lost on restart; it is meant for development and tests.
"""

from __future__ import annotations

import threading
import uuid
from datetime import datetime, timezone
from typing import Optional

from ..errors import NotFoundError
from ..grading import grade
from ..schemas import Question, QuizAnswersIn, QuizDefinition, QuizIn, QuizSubmissionResult
from .base import QuizDataStore, QuizLookup, check_quiz_id, validate_answers_input, validate_quiz_input


class MemoryQuizStore(QuizDataStore):
    name = "ephemeral"

    def __init__(self):
        self._quizzes: list[QuizDefinition] = []
        self._submissions: list[dict] = []
        self._lock = threading.Lock()

    def _find(self, event_id: str) -> Optional[QuizDefinition]:
        for quiz in self._quizzes:
            if quiz.event_id == event_id and quiz.is_active:
                return quiz
        return None

    def lookup_quiz(self, event_id: str) -> QuizLookup:
        with self._lock:
            quiz = self._find(event_id)
        return QuizLookup.found(quiz) if quiz else QuizLookup.not_found()

    def create_quiz(self, event_id: str, quiz_in: QuizIn, user_id: Optional[str]) -> QuizDefinition:
        validate_quiz_input(quiz_in)
        now = datetime.now(timezone.utc)
        quiz = QuizDefinition(
            id=uuid.uuid4().hex,
            event_id=event_id,
            title=quiz_in.title,
            description=quiz_in.description,
            is_active=quiz_in.active,
            created_by=user_id,
            created_at=now,
            updated_at=now,
            questions=[
                Question(
                    id=uuid.uuid4().hex,
                    question=q.question,
                    type=q.type,
                    options=q.options,
                    points=q.points,
                    correct_answer=q.correct_answer,
                )
                for q in quiz_in.questions
            ],
        )
        with self._lock:
            stale = {q.id for q in self._quizzes if q.event_id == event_id}
            self._quizzes = [q for q in self._quizzes if q.id not in stale]
            self._submissions = [s for s in self._submissions if s["quiz_id"] not in stale]
            self._quizzes.append(quiz)
        return quiz

    def submit_quiz(self, event_id: str, answers_in: QuizAnswersIn, user_id: Optional[str]) -> QuizSubmissionResult:
        validate_answers_input(answers_in)
        with self._lock:
            quiz = self._find(event_id)
            if quiz is None:
                raise NotFoundError(f"Quiz not found for event: {event_id}")
            check_quiz_id(answers_in, quiz)
            outcome = grade(quiz, answers_in.answers)
            result = QuizSubmissionResult(
                submission_id=uuid.uuid4().hex,
                score=outcome.score,
                max_score=outcome.max_score,
                percentage=outcome.percentage,
                success=True,
                answer_results=outcome.results,
                submitted_at=datetime.now(timezone.utc),
            )
            self._submissions.append({
                "quiz_id": quiz.id,
                "event_id": event_id,
                "user_id": user_id,
                "result": result,
            })
        return result

    def list_submissions(self, event_id: str) -> list[QuizSubmissionResult]:
        with self._lock:
            return [s["result"] for s in self._submissions if s["event_id"] == event_id]
