"""Quiz store backed by a remote document API.

The API exposes two endpoints under its base URL, ``api/query`` and
``api/mutation``. Both take ``{"path": <function>, "args": {...}}`` and
answer ``{"value": <result or null>}``. Quiz documents use the remote
camelCase shape::

    {"_id": "...", "eventId": "...", "title": "...", "description": null,
     "isActive": true, "createdBy": "...",
     "questions": [{"id": "...", "question": "...", "type": "text",
                    "options": null, "points": 1, "correctAnswer": "..."}]}

Reads are best effort (a failing call reads as "no quiz"); writes raise
`UnavailableError`. Submissions are graded locally with the shared
engine and recorded remotely with the computed result.
"""

import logging
import uuid
from typing import Any, Optional

import httpx

from ..errors import NotFoundError, UnavailableError
from ..grading import grade
from ..schemas import Question, QuizAnswersIn, QuizDefinition, QuizIn, QuizSubmissionResult
from .base import (
    LookupStatus,
    QuizDataStore,
    QuizLookup,
    check_quiz_id,
    validate_answers_input,
    validate_quiz_input,
)

logger = logging.getLogger(__name__)

GET_QUIZ = "quiz:getQuiz"
CREATE_QUIZ = "quiz:createQuiz"
SUBMIT_QUIZ = "quiz:submitQuiz"


def document_to_definition(doc: dict) -> QuizDefinition:
    """Convert a remote quiz document into a `QuizDefinition`.

    Raises KeyError/TypeError on documents missing required fields or
    carrying fields of the wrong type.
    """
    if not isinstance(doc, dict):
        raise TypeError(f"quiz document must be an object, got {type(doc).__name__}")
    is_active = doc.get("isActive")
    if is_active is None:
        is_active = True
    elif not isinstance(is_active, bool):
        raise TypeError(f"isActive must be a boolean, got {is_active!r}")
    questions = []
    for q in doc.get("questions") or []:
        if not isinstance(q, dict):
            raise TypeError(f"quiz question must be an object, got {type(q).__name__}")
        questions.append(Question(
            id=str(q["id"]),
            question=q.get("question"),
            type=q.get("type"),
            options=q.get("options"),
            points=q.get("points"),
            correct_answer=q.get("correctAnswer"),
        ))
    return QuizDefinition(
        id=str(doc["_id"]),
        event_id=doc["eventId"],
        title=doc["title"],
        description=doc.get("description"),
        is_active=is_active,
        created_by=doc.get("createdBy"),
        questions=questions,
    )


class RemoteQuizStore(QuizDataStore):
    name = "remote"

    def __init__(self, base_url: str, connect_timeout: float = 10.0, request_timeout: float = 30.0,
                 client: Optional[httpx.Client] = None):
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.client = client or httpx.Client(timeout=httpx.Timeout(request_timeout, connect=connect_timeout))

    def close(self) -> None:
        self.client.close()

    def _call(self, kind: str, path: str, args: dict) -> Any:
        """POST one query/mutation and return its ``value``."""
        url = f"{self.base_url}api/{kind}"
        try:
            response = self.client.post(url, json={"path": path, "args": args})
        except httpx.HTTPError as exc:
            raise UnavailableError(f"Remote {kind} {path} failed: {exc}") from exc
        if not response.is_success:
            raise UnavailableError(f"Remote store returned error {response.status_code} for {path}")
        try:
            body = response.json()
        except ValueError as exc:
            raise UnavailableError(f"Remote store sent an undecodable response for {path}") from exc
        return body.get("value") if isinstance(body, dict) else None

    def lookup_quiz(self, event_id: str) -> QuizLookup:
        try:
            doc = self._call("query", GET_QUIZ, {"eventId": event_id})
        except UnavailableError as exc:
            return QuizLookup.failed(exc)
        if not doc:
            return QuizLookup.not_found()
        try:
            quiz = document_to_definition(doc)
        except (KeyError, TypeError, ValueError) as exc:
            return QuizLookup.failed(exc)
        if not quiz.is_active:
            return QuizLookup.not_found()
        return QuizLookup.found(quiz)

    def create_quiz(self, event_id: str, quiz_in: QuizIn, user_id: Optional[str]) -> QuizDefinition:
        validate_quiz_input(quiz_in)
        questions = []
        for q in quiz_in.questions:
            item = {"id": str(uuid.uuid4()), "question": q.question, "type": q.type, "points": q.points}
            if q.options is not None:
                item["options"] = q.options
            if q.correct_answer is not None:
                item["correctAnswer"] = q.correct_answer
            questions.append(item)
        args = {
            "eventId": event_id,
            "title": quiz_in.title,
            "questions": questions,
            "isActive": quiz_in.active,
            "createdBy": user_id,
        }
        if quiz_in.description is not None:
            args["description"] = quiz_in.description
        doc = self._call("mutation", CREATE_QUIZ, args)
        if not doc:
            raise UnavailableError(f"Remote store returned no quiz for event {event_id}")
        try:
            return document_to_definition(doc)
        except (KeyError, TypeError, ValueError) as exc:
            raise UnavailableError(f"Remote store returned a malformed quiz for event {event_id}") from exc

    def submit_quiz(self, event_id: str, answers_in: QuizAnswersIn, user_id: Optional[str]) -> QuizSubmissionResult:
        validate_answers_input(answers_in)
        lookup = self.lookup_quiz(event_id)
        if lookup.status is LookupStatus.BACKEND_ERROR:
            raise UnavailableError(f"Could not load quiz for event {event_id}: {lookup.error}") from lookup.error
        if lookup.status is LookupStatus.NOT_FOUND:
            raise NotFoundError(f"Quiz not found for event: {event_id}")
        quiz = lookup.quiz
        check_quiz_id(answers_in, quiz)
        outcome = grade(quiz, answers_in.answers)
        results = [r.model_dump(mode="json") for r in outcome.results]
        value = self._call("mutation", SUBMIT_QUIZ, {
            "eventId": event_id,
            "quizId": quiz.id,
            "userId": user_id,
            "answers": [{"questionId": a.question_id, "answer": a.answer} for a in answers_in.answers],
            "score": outcome.score,
            "maxScore": outcome.max_score,
            "percentage": outcome.percentage,
            "answerResults": [
                {"questionId": r["question_id"], "answer": r["answer"], "isCorrect": r["is_correct"], "points": r["points"]}
                for r in results
            ],
        })
        if isinstance(value, dict):
            submission_id = value.get("submissionId") or value.get("_id")
        else:
            submission_id = value
        if not submission_id:
            raise UnavailableError(f"Remote store did not return a submission id for event {event_id}")
        return QuizSubmissionResult(
            submission_id=str(submission_id),
            score=outcome.score,
            max_score=outcome.max_score,
            percentage=outcome.percentage,
            success=True,
            answer_results=outcome.results,
        )
