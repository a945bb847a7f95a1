"""Pydantic request/response schemas shared by the stores and the API.

Input models are deliberately permissive (most fields optional) so that
the stores apply the same validation rules regardless of the caller; the
HTTP layer never rejects a quiz with a 422 that a store would have
rejected with an InvalidInput error.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field


class QuestionIn(BaseModel):
    """A question as supplied when creating a quiz."""
    question: Optional[str] = None
    type: Optional[str] = None
    options: Optional[List[str]] = None
    correct_answer: Any = None
    points: Optional[int] = None


class QuizIn(BaseModel):
    """Payload for creating (or replacing) the quiz of an event."""
    title: Optional[str] = None
    description: Optional[str] = None
    questions: Optional[List[QuestionIn]] = None
    is_active: Optional[bool] = True

    @property
    def active(self) -> bool:
        # null means "not specified" and defaults to an active quiz
        return self.is_active is not False


class AnswerIn(BaseModel):
    """Single submitted answer."""
    question_id: str
    answer: Any = None


class QuizAnswersIn(BaseModel):
    """Request model for grading containing a list of answers."""
    quiz_id: Optional[str] = None
    answers: Optional[List[AnswerIn]] = None


class Question(BaseModel):
    """A stored question.

    `correct_answer` is excluded from every dump so the quiz-taking
    client never receives it; it is only read by the grading engine.
    """
    id: str
    question: Optional[str] = None
    type: Optional[str] = None
    options: Optional[List[str]] = None
    points: Optional[int] = None
    correct_answer: Any = Field(default=None, exclude=True)


class QuizDefinition(BaseModel):
    id: str
    event_id: str
    title: str
    description: Optional[str] = None
    is_active: bool = True
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    questions: List[Question] = Field(default_factory=list)


class QuizInfo(BaseModel):
    """Summary of the quiz attached to an event.

    The default instance is the "no quiz" value: `has_quiz` is False and
    every other field is null.
    """
    has_quiz: bool = False
    quiz_id: Optional[str] = None
    is_active: Optional[bool] = None
    title: Optional[str] = None
    question_count: Optional[int] = None


class AnswerResult(BaseModel):
    question_id: str
    answer: Any = None
    is_correct: bool = False
    points: int = 0


class QuizSubmissionResult(BaseModel):
    submission_id: str
    score: int
    max_score: int
    percentage: int
    success: bool = True
    answer_results: List[AnswerResult] = Field(default_factory=list)
    submitted_at: Optional[datetime] = None
