"""Grading engine shared by every quiz data store.

The engine is a pure function of a quiz definition and the submitted
answers. Stores call `grade` and persist whatever it returns; none of
them compares answers on its own, so a quiz scores the same no matter
which backend holds it.

Answer values arrive in several shapes (a string, a JSON list, a tuple
built by a Python caller, any other JSON value). Each value is first
classified into an `AnswerKind` and the comparison dispatches on the
pair of kinds:

1. text / text: exact string equality
2. choices / choices: set equality (same length, mutual containment)
3. choices / fixed choices: same length and every submitted string is
   one of the correct ones. Only that direction is checked, so a tuple
   with a repeated option can match a list it does not cover.
4. anything else: plain ``==``

A missing value on either side is always incorrect.
"""

from enum import Enum
from typing import Any, Iterable, List, NamedTuple

from .schemas import AnswerIn, AnswerResult, QuizDefinition


class AnswerKind(str, Enum):
    MISSING = "missing"
    TEXT = "text"
    CHOICES = "choices"
    FIXED_CHOICES = "fixed_choices"
    OPAQUE = "opaque"


class Grade(NamedTuple):
    score: int
    max_score: int
    percentage: int
    results: List[AnswerResult]


def classify(value: Any) -> AnswerKind:
    """Return the `AnswerKind` for a correct or submitted answer value."""
    if value is None:
        return AnswerKind.MISSING
    if isinstance(value, str):
        return AnswerKind.TEXT
    if isinstance(value, list):
        return AnswerKind.CHOICES
    if isinstance(value, tuple) and all(isinstance(v, str) for v in value):
        return AnswerKind.FIXED_CHOICES
    return AnswerKind.OPAQUE


def _contains_all(container: list, items: Iterable) -> bool:
    # membership by equality, elements may be unhashable (dicts, lists)
    return all(item in container for item in items)


def compare_answers(correct: Any, submitted: Any) -> bool:
    """Return True when `submitted` matches `correct`."""
    kinds = (classify(correct), classify(submitted))
    if AnswerKind.MISSING in kinds:
        return False
    if kinds == (AnswerKind.TEXT, AnswerKind.TEXT):
        return correct == submitted
    if kinds == (AnswerKind.CHOICES, AnswerKind.CHOICES):
        if len(correct) != len(submitted):
            return False
        return _contains_all(correct, submitted) and _contains_all(submitted, correct)
    if kinds == (AnswerKind.CHOICES, AnswerKind.FIXED_CHOICES):
        if len(correct) != len(submitted):
            return False
        return _contains_all(correct, submitted)
    return correct == submitted


def max_score_for(quiz: QuizDefinition) -> int:
    return sum(q.points or 0 for q in quiz.questions)


def percentage_for(score: int, max_score: int) -> int:
    """Truncated percentage; 0 when the quiz is worth no points."""
    if max_score <= 0:
        return 0
    return (score * 100) // max_score


def grade(quiz: QuizDefinition, answers: Iterable[AnswerIn]) -> Grade:
    """Score `answers` against `quiz`.

    Answers whose `question_id` is not part of the quiz are dropped: they
    produce no `AnswerResult` and add nothing to the score.
    """
    by_id = {q.id: q for q in quiz.questions}
    score = 0
    results = []
    for a in answers:
        question = by_id.get(a.question_id)
        if question is None:
            continue
        is_correct = compare_answers(question.correct_answer, a.answer)
        earned = (question.points or 0) if is_correct else 0
        score += earned
        results.append(AnswerResult(question_id=a.question_id, answer=a.answer, is_correct=is_correct, points=earned))
    max_score = max_score_for(quiz)
    return Grade(score=score, max_score=max_score, percentage=percentage_for(score, max_score), results=results)
