"""FastAPI application entrypoint and HTTP controllers.

This module exposes the quiz service over HTTP. Controllers are
intentionally thin: they resolve the caller, delegate to the
`QuizService` and translate quiz errors into status codes.

Endpoints implemented:
- GET /health
- GET /events/{event_id}/quiz/info
- GET /events/{event_id}/quiz
- POST /events/{event_id}/quiz
- POST /events/{event_id}/quiz/submissions
"""

import json
import logging
import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from . import services
from .auth import get_current_user_id
from .config import settings
from .errors import ConflictError, InvalidInputError, NotFoundError, QuizError, UnavailableError
from .schemas import QuizAnswersIn, QuizDefinition, QuizIn, QuizInfo, QuizSubmissionResult


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    close = getattr(quiz_service.store, "close", None)
    if close is not None:
        close()
        logger.info("closed %s quiz store", quiz_service.store_name)


app = FastAPI(title="Event Quiz API", lifespan=lifespan)
logger = logging.getLogger("eventquiz.api")
if not logger.handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

# Allow simple browser testing from file:// or localhost frontends
if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Serve the prebuilt quiz frontend bundle when it has been copied in.
static_dir = Path(__file__).resolve().parent.parent / "static" / "plugins" / "quiz"
if static_dir.exists():
    app.mount("/static/plugins/quiz", StaticFiles(directory=static_dir), name="quiz-plugin")

quiz_service = services.QuizService(services.build_store(settings))

ERROR_STATUS = (
    (InvalidInputError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
    (UnavailableError, 503),
)


def get_quiz_service() -> services.QuizService:
    """Dependency returning the process-wide quiz service."""
    return quiz_service


@app.exception_handler(QuizError)
async def quiz_error_handler(request: Request, exc: QuizError):
    status = 500
    for cls, code in ERROR_STATUS:
        if isinstance(exc, cls):
            status = code
            break
    return JSONResponse(status_code=status, content={"detail": str(exc)})


def _request_fields(request: Request, started: float, **extra) -> str:
    fields = {
        "request_id": request.state.request_id,
        "method": request.method,
        "path": request.url.path,
        "ms": round((time.perf_counter() - started) * 1000.0, 1),
        **extra,
    }
    return json.dumps(fields, ensure_ascii=True)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request.state.request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        logger.exception("quiz_request_failed %s", _request_fields(request, started))
        raise
    response.headers["X-Request-ID"] = request.state.request_id
    if request.url.path.startswith("/events"):
        logger.info("quiz_request %s", _request_fields(request, started, status=response.status_code))
    return response


@app.get("/health")
def health(svc: services.QuizService = Depends(get_quiz_service)):
    return {"status": "ok", "store": svc.store_name}


@app.get('/events/{event_id}/quiz/info', response_model=QuizInfo)
def quiz_info(event_id: str, svc: services.QuizService = Depends(get_quiz_service)):
    """Return whether `event_id` has a quiz, with its title and size."""
    return svc.get_quiz_info(event_id)


@app.get('/events/{event_id}/quiz', response_model=QuizDefinition)
def quiz_definition(event_id: str, svc: services.QuizService = Depends(get_quiz_service)):
    """Return the active quiz of `event_id`.

    Correct answers are never part of the response.
    """
    quiz = svc.get_quiz_definition(event_id)
    if quiz is None:
        raise HTTPException(status_code=404, detail='no quiz for event')
    return quiz


@app.post('/events/{event_id}/quiz', response_model=QuizDefinition)
def create_quiz(event_id: str, payload: QuizIn, user_id: str = Depends(get_current_user_id),
                svc: services.QuizService = Depends(get_quiz_service)):
    """Create the quiz of `event_id`, replacing any existing one.

    Replacing a quiz also discards every submission made against it.
    """
    return svc.create_quiz(event_id, payload, user_id)


@app.post('/events/{event_id}/quiz/submissions', response_model=QuizSubmissionResult)
def submit_quiz(event_id: str, payload: QuizAnswersIn, user_id: str = Depends(get_current_user_id),
                svc: services.QuizService = Depends(get_quiz_service)):
    """Grade the submitted answers and return the per-question results."""
    return svc.submit_quiz(event_id, payload, user_id)
