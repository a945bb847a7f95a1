import pytest
from fastapi.testclient import TestClient

from eventquiz import services
from eventquiz.auth import issue_token
from eventquiz.config import settings
from eventquiz.main import app, get_quiz_service
from eventquiz.stores import MemoryQuizStore

client = TestClient(app)


@pytest.fixture(autouse=True)
def fresh_service():
    svc = services.QuizService(MemoryQuizStore())
    app.dependency_overrides[get_quiz_service] = lambda: svc
    yield svc
    app.dependency_overrides.clear()


@pytest.fixture
def headers():
    return {'Authorization': f'Bearer {issue_token("teacher")}'}


def test_health_reports_store():
    r = client.get('/health')
    assert r.status_code == 200
    assert r.json() == {'status': 'ok', 'store': 'ephemeral'}
    assert 'X-Request-ID' in r.headers


def test_create_fetch_and_submit_flow(headers, quiz_payload):
    created = client.post('/events/ev1/quiz', json=quiz_payload, headers=headers)
    assert created.status_code == 200
    quiz = created.json()
    assert quiz['created_by'] == 'teacher'
    assert all('correct_answer' not in q for q in quiz['questions'])

    info = client.get('/events/ev1/quiz/info').json()
    assert info == {'has_quiz': True, 'quiz_id': quiz['id'], 'is_active': True,
                    'title': 'Lecture 1 check', 'question_count': 2}

    fetched = client.get('/events/ev1/quiz')
    assert fetched.status_code == 200
    assert all('correct_answer' not in q for q in fetched.json()['questions'])

    answers = {'quiz_id': quiz['id'], 'answers': [
        {'question_id': quiz['questions'][0]['id'], 'answer': 'B'},
        {'question_id': quiz['questions'][1]['id'], 'answer': ['A']},
    ]}
    r = client.post('/events/ev1/quiz/submissions', json=answers, headers=headers)
    assert r.status_code == 200
    body = r.json()
    assert (body['score'], body['max_score'], body['percentage']) == (10, 15, 66)
    assert [a['is_correct'] for a in body['answer_results']] == [True, False]


def test_missing_quiz_reads():
    assert client.get('/events/none/quiz/info').json()['has_quiz'] is False
    assert client.get('/events/none/quiz').status_code == 404


def test_error_statuses(headers, quiz_payload):
    r = client.post('/events/ev1/quiz', json=dict(quiz_payload, questions=[]), headers=headers)
    assert r.status_code == 400
    r = client.post('/events/ev1/quiz', json={'questions': quiz_payload['questions']}, headers=headers)
    assert r.status_code == 400
    r = client.post('/events/ev1/quiz/submissions', json={'answers': [{'question_id': 'x', 'answer': 'B'}]}, headers=headers)
    assert r.status_code == 404
    client.post('/events/ev1/quiz', json=quiz_payload, headers=headers)
    r = client.post('/events/ev1/quiz/submissions', json={'quiz_id': 'other', 'answers': [{'question_id': 'x', 'answer': 'B'}]}, headers=headers)
    assert r.status_code == 409
    r = client.post('/events/ev1/quiz/submissions', json={'answers': []}, headers=headers)
    assert r.status_code == 400


def test_unavailable_maps_to_503(headers, quiz_payload):
    class DownStore(MemoryQuizStore):
        def create_quiz(self, event_id, quiz_in, user_id):
            raise ConnectionError("database is down")

    app.dependency_overrides[get_quiz_service] = lambda: services.QuizService(DownStore())
    r = client.post('/events/ev1/quiz', json=quiz_payload, headers=headers)
    assert r.status_code == 503
    assert 'Failed to create quiz' in r.json()['detail']


def test_writes_require_token(quiz_payload, monkeypatch):
    r = client.post('/events/ev1/quiz', json=quiz_payload)
    assert r.status_code == 401
    r = client.post('/events/ev1/quiz', json=quiz_payload, headers={'Authorization': 'Bearer not-a-token'})
    assert r.status_code == 401

    monkeypatch.setattr(settings, 'ALLOW_ANONYMOUS', True)
    r = client.post('/events/ev1/quiz', json=quiz_payload)
    assert r.status_code == 200
    assert r.json()['created_by'] == 'anonymous'


def test_request_id_is_echoed_and_logged(caplog):
    with caplog.at_level('INFO', logger='eventquiz.api'):
        r = client.get('/events/ev9/quiz/info', headers={'X-Request-ID': 'req-42'})
    assert r.headers['X-Request-ID'] == 'req-42'
    assert '"request_id": "req-42"' in caplog.text
    assert '"status": 200' in caplog.text


def test_shutdown_closes_store(monkeypatch):
    from eventquiz import main

    closed = []

    class ClosingStore(MemoryQuizStore):
        def close(self):
            closed.append(True)

    monkeypatch.setattr(main, 'quiz_service', services.QuizService(ClosingStore()))
    with TestClient(app) as scoped:
        assert scoped.get('/health').status_code == 200
        assert closed == []
    assert closed == [True]
