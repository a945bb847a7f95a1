import json
import os
import uuid

import httpx
import pytest

# App imports build their store from the environment; keep them in memory.
os.environ.setdefault("QUIZ_STORE", "ephemeral")

from eventquiz.database import ensure_quiz_schema, make_engine  # noqa: E402
from eventquiz.stores import MemoryQuizStore, RemoteQuizStore, SqlQuizStore  # noqa: E402


class FakeRemote:
    """Stand-in for the remote document API, served through httpx.MockTransport."""

    def __init__(self):
        self.quizzes = {}
        self.submissions = []
        self.calls = []
        self.fail_with = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.calls.append((request.url.path, body["path"], body["args"]))
        if self.fail_with:
            return httpx.Response(self.fail_with, json={"error": "boom"})
        args = body["args"]
        if body["path"] == "quiz:getQuiz":
            return httpx.Response(200, json={"value": self.quizzes.get(args["eventId"])})
        if body["path"] == "quiz:createQuiz":
            doc = dict(args, _id=uuid.uuid4().hex)
            self.submissions = [s for s in self.submissions if s["eventId"] != args["eventId"]]
            self.quizzes[args["eventId"]] = doc
            return httpx.Response(200, json={"value": doc})
        if body["path"] == "quiz:submitQuiz":
            self.submissions.append(args)
            return httpx.Response(200, json={"value": {"submissionId": uuid.uuid4().hex}})
        return httpx.Response(404, json={"error": "unknown function"})


@pytest.fixture
def fake_remote():
    return FakeRemote()


@pytest.fixture
def remote_store(fake_remote):
    client = httpx.Client(transport=httpx.MockTransport(fake_remote.handler))
    store = RemoteQuizStore("http://remote.test", client=client)
    yield store
    store.close()


@pytest.fixture
def sql_engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'quiz.db'}")
    ensure_quiz_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sql_store(sql_engine):
    return SqlQuizStore(sql_engine)


@pytest.fixture
def memory_store():
    return MemoryQuizStore()


@pytest.fixture(params=["ephemeral", "transactional", "remote"])
def store(request):
    """Every backend, so contract tests run once per store."""
    fixture = {"ephemeral": "memory_store", "transactional": "sql_store", "remote": "remote_store"}[request.param]
    return request.getfixturevalue(fixture)


@pytest.fixture
def quiz_payload():
    return {
        "title": "Lecture 1 check",
        "description": "Short recap",
        "questions": [
            {"question": "Pick B", "type": "single_choice", "options": ["A", "B", "C"],
             "correct_answer": "B", "points": 10},
            {"question": "Pick A and C", "type": "multiple_choice", "options": ["A", "B", "C"],
             "correct_answer": ["A", "C"], "points": 5},
        ],
    }
