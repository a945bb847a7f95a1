"""Quiz service and backend selection.

`build_store` picks exactly one backend from the settings when the
process starts; `QuizService` receives that backend and is the only
object callers (the HTTP layer, scripts) talk to.

Failure policy:

- reads: a backend error is logged and answered as "no quiz"
- writes: taxonomy errors (`eventquiz.errors`) pass through unchanged;
  anything else is wrapped in `UnavailableError` with the cause chained
"""

import logging
from typing import Optional

from .config import Settings
from .database import check_connection, ensure_quiz_schema, make_engine
from .errors import QuizError, UnavailableError
from .schemas import QuizAnswersIn, QuizDefinition, QuizIn, QuizInfo, QuizSubmissionResult
from .stores.base import LookupStatus, QuizDataStore, QuizLookup, info_from_lookup
from .stores.memory_store import MemoryQuizStore
from .stores.remote_store import RemoteQuizStore
from .stores.sql_store import SqlQuizStore

logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> QuizDataStore:
    """Construct the backend selected by ``settings.QUIZ_STORE``.

    Falls back to the in-memory store when the chosen backend cannot be
    used (database unreachable, remote URL missing).
    """
    store = settings.QUIZ_STORE
    if store == "ephemeral":
        logger.warning("Initializing quiz service with in-memory store. Quiz data will not persist.")
        return MemoryQuizStore()
    if store == "remote":
        if not settings.REMOTE_STORE_URL:
            logger.warning("Remote store selected but REMOTE_STORE_URL is not set; falling back to in-memory store")
            return MemoryQuizStore()
        logger.info("Initializing quiz service with remote store at %s", settings.REMOTE_STORE_URL)
        return RemoteQuizStore(
            settings.REMOTE_STORE_URL,
            connect_timeout=settings.REMOTE_CONNECT_TIMEOUT,
            request_timeout=settings.REMOTE_REQUEST_TIMEOUT,
        )
    if store != "transactional":
        logger.warning("Unknown QUIZ_STORE %r; using transactional store", store)
    try:
        engine = make_engine(settings.DATABASE_URL)
    except Exception:
        logger.warning("Invalid DATABASE_URL; falling back to in-memory store", exc_info=True)
        return MemoryQuizStore()
    if not check_connection(engine):
        logger.warning("Transactional store selected but database is unavailable; falling back to in-memory store")
        return MemoryQuizStore()
    if settings.SCHEMA_AUTO_CREATE:
        ensure_quiz_schema(engine)
    else:
        logger.info("Quiz schema auto-create is disabled")
    logger.info("Initializing quiz service with transactional store (%s)", engine.dialect.name)
    return SqlQuizStore(engine)


class QuizService:
    """Front door for quiz operations; wraps exactly one `QuizDataStore`."""
    def __init__(self, store: QuizDataStore):
        self.store = store

    @property
    def store_name(self) -> str:
        return self.store.name

    def _lookup(self, event_id: str) -> QuizLookup:
        try:
            lookup = self.store.lookup_quiz(event_id)
        except Exception as exc:
            lookup = QuizLookup.failed(exc)
        if lookup.status is LookupStatus.BACKEND_ERROR:
            # reads degrade to "no quiz"
            logger.error("Quiz lookup failed for event %s: %s", event_id, lookup.error)
            return QuizLookup.not_found()
        return lookup

    def get_quiz_info(self, event_id: str) -> QuizInfo:
        """Return the quiz summary for `event_id`; never raises."""
        return info_from_lookup(self._lookup(event_id))

    def get_quiz_definition(self, event_id: str) -> Optional[QuizDefinition]:
        """Return the active quiz of `event_id` or `None`; never raises."""
        return self._lookup(event_id).quiz

    def create_quiz(self, event_id: str, quiz_in: QuizIn, user_id: Optional[str]) -> QuizDefinition:
        """Create (or replace) the quiz of `event_id`."""
        try:
            return self.store.create_quiz(event_id, quiz_in, user_id)
        except QuizError:
            logger.warning("Quiz creation rejected for event %s", event_id, exc_info=True)
            raise
        except Exception as exc:
            logger.error("Failed to create quiz for event %s", event_id, exc_info=True)
            raise UnavailableError(f"Failed to create quiz: {exc}") from exc

    def submit_quiz(self, event_id: str, answers_in: QuizAnswersIn, user_id: Optional[str]) -> QuizSubmissionResult:
        """Grade and record a submission for the quiz of `event_id`."""
        try:
            return self.store.submit_quiz(event_id, answers_in, user_id)
        except QuizError:
            logger.warning("Quiz submission rejected for event %s", event_id, exc_info=True)
            raise
        except Exception as exc:
            logger.error("Failed to submit quiz for event %s", event_id, exc_info=True)
            raise UnavailableError(f"Failed to submit quiz: {exc}") from exc
