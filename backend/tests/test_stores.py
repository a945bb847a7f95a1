"""Contract tests run against every backend."""

import pytest

from eventquiz.errors import ConflictError, InvalidInputError, NotFoundError
from eventquiz.schemas import QuizAnswersIn, QuizIn
from eventquiz.stores import LookupStatus


def _answers(quiz, *values, quiz_id=None):
    return QuizAnswersIn(
        quiz_id=quiz_id,
        answers=[{"question_id": q.id, "answer": v} for q, v in zip(quiz.questions, values)],
    )


def test_create_and_read_back(store, quiz_payload):
    quiz = store.create_quiz("ev1", QuizIn(**quiz_payload), "teacher")
    assert quiz.title == "Lecture 1 check"
    assert [q.question for q in quiz.questions] == ["Pick B", "Pick A and C"]

    info = store.get_quiz_info("ev1")
    assert info.has_quiz is True
    assert info.quiz_id == quiz.id
    assert info.is_active is True
    assert info.question_count == 2

    fetched = store.get_quiz_definition("ev1")
    assert fetched.id == quiz.id
    assert fetched.questions[1].options == ["A", "B", "C"]
    assert fetched.questions[1].correct_answer == ["A", "C"]


def test_no_quiz_reads(store):
    info = store.get_quiz_info("missing")
    assert info.has_quiz is False
    assert info.quiz_id is None
    assert info.title is None
    assert store.get_quiz_definition("missing") is None
    assert store.lookup_quiz("missing").status is LookupStatus.NOT_FOUND


def test_create_rejects_empty_questions(store, quiz_payload):
    with pytest.raises(InvalidInputError):
        store.create_quiz("ev1", QuizIn(**dict(quiz_payload, questions=[])), "teacher")
    with pytest.raises(InvalidInputError):
        store.create_quiz("ev1", QuizIn(**dict(quiz_payload, questions=None)), "teacher")


def test_create_rejects_blank_title(store, quiz_payload):
    with pytest.raises(InvalidInputError):
        store.create_quiz("ev1", QuizIn(**dict(quiz_payload, title="   ")), "teacher")
    assert store.get_quiz_info("ev1").has_quiz is False


def test_submit_without_quiz_is_not_found(store):
    with pytest.raises(NotFoundError):
        store.submit_quiz("missing", QuizAnswersIn(answers=[{"question_id": "1", "answer": "B"}]), "student")


def test_submit_rejects_empty_answers(store, quiz_payload):
    store.create_quiz("ev1", QuizIn(**quiz_payload), "teacher")
    with pytest.raises(InvalidInputError):
        store.submit_quiz("ev1", QuizAnswersIn(answers=[]), "student")
    with pytest.raises(InvalidInputError):
        store.submit_quiz("ev1", QuizAnswersIn(), "student")


def test_submit_with_wrong_quiz_id_conflicts(store, quiz_payload):
    quiz = store.create_quiz("ev1", QuizIn(**quiz_payload), "teacher")
    with pytest.raises(ConflictError):
        store.submit_quiz("ev1", _answers(quiz, "B", ["A", "C"], quiz_id="other"), "student")


def test_submit_grades_with_shared_engine(store, quiz_payload):
    quiz = store.create_quiz("ev1", QuizIn(**quiz_payload), "teacher")
    result = store.submit_quiz("ev1", _answers(quiz, "B", ["C", "A"], quiz_id=quiz.id), "student")
    assert (result.score, result.max_score, result.percentage) == (15, 15, 100)
    assert result.success is True
    assert result.submission_id

    result = store.submit_quiz("ev1", _answers(quiz, "B", ["A"]), "student")
    assert (result.score, result.percentage) == (10, 66)
    assert [r.is_correct for r in result.answer_results] == [True, False]
    assert sum(r.points for r in result.answer_results) == result.score


def test_replacing_quiz_hides_old_questions(store, quiz_payload):
    old = store.create_quiz("ev1", QuizIn(**quiz_payload), "teacher")
    store.submit_quiz("ev1", _answers(old, "B", ["A", "C"]), "student")
    new_payload = dict(quiz_payload, title="Replacement", questions=[
        {"question": "Type yes", "type": "text", "correct_answer": "yes", "points": 1},
    ])
    new = store.create_quiz("ev1", QuizIn(**new_payload), "teacher")

    fetched = store.get_quiz_definition("ev1")
    assert fetched.id == new.id
    assert [q.question for q in fetched.questions] == ["Type yes"]
    assert store.get_quiz_info("ev1").question_count == 1
    with pytest.raises(ConflictError):
        store.submit_quiz("ev1", _answers(old, "B", quiz_id=old.id), "student")


def test_inactive_quiz_is_not_served(store, quiz_payload):
    store.create_quiz("ev1", QuizIn(**dict(quiz_payload, is_active=False)), "teacher")
    assert store.get_quiz_info("ev1").has_quiz is False
    with pytest.raises(NotFoundError):
        store.submit_quiz("ev1", QuizAnswersIn(answers=[{"question_id": "1", "answer": "B"}]), "student")


def test_null_active_flag_defaults_to_active(store, quiz_payload):
    store.create_quiz("ev1", QuizIn(**dict(quiz_payload, is_active=None)), "teacher")
    assert store.get_quiz_info("ev1").is_active is True


def test_correct_answers_are_hidden_from_dumps(store, quiz_payload):
    quiz = store.create_quiz("ev1", QuizIn(**quiz_payload), "teacher")
    dumped = store.get_quiz_definition("ev1").model_dump()
    assert all("correct_answer" not in q for q in dumped["questions"])
    assert quiz.questions[0].correct_answer == "B"
