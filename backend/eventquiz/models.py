"""SQLModel data models.

This module defines the tables of the transactional store. A `Quiz`
owns its questions and submissions: deleting a quiz removes both, at the
ORM level through the relationship cascade and at the database level
through ``ON DELETE CASCADE`` foreign keys.

Option lists, correct answers and answer results are JSON-encoded text;
they are never queried by content.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlmodel import Field, Relationship, SQLModel


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Quiz(SQLModel, table=True):
    """The quiz attached to an event. `event_id` is unique."""
    __tablename__ = "quiz"
    # ids are never reused, so a replaced quiz keeps a distinct identity
    __table_args__ = {"sqlite_autoincrement": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: str = Field(max_length=128, nullable=False, unique=True, index=True)
    title: str = Field(max_length=512, nullable=False)
    description: Optional[str] = Field(default=None, max_length=4096)
    is_active: bool = False
    created_by: Optional[str] = Field(default=None, max_length=255)
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)
    questions: List["QuizQuestion"] = Relationship(
        back_populates="quiz",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "order_by": "QuizQuestion.position"},
    )
    submissions: List["QuizSubmission"] = Relationship(
        back_populates="quiz",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )


class QuizQuestion(SQLModel, table=True):
    """A question belonging to a `Quiz`, ordered by `position`."""
    __tablename__ = "quiz_question"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    quiz_id: int = Field(foreign_key="quiz.id", ondelete="CASCADE", index=True)
    position: int = 0
    question_text: Optional[str] = Field(default=None, max_length=4096)
    question_type: Optional[str] = Field(default=None, max_length=64)
    options_json: Optional[str] = None
    correct_answer_json: Optional[str] = None
    points: Optional[int] = None
    quiz: Optional[Quiz] = Relationship(back_populates="questions")


class QuizSubmission(SQLModel, table=True):
    """One graded attempt. `answers_json` holds the serialized answer results."""
    __tablename__ = "quiz_submission"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    quiz_id: int = Field(foreign_key="quiz.id", ondelete="CASCADE", index=True)
    event_id: str = Field(max_length=128, nullable=False, index=True)
    user_id: Optional[str] = Field(default=None, max_length=255)
    score: Optional[int] = None
    max_score: Optional[int] = None
    percentage: Optional[int] = None
    success: bool = False
    answers_json: Optional[str] = None
    submitted_at: datetime = Field(default_factory=_now)
    quiz: Optional[Quiz] = Relationship(back_populates="submissions")
