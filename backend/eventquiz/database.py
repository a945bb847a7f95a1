"""Database engine and schema helpers for the transactional store.

`make_engine` builds the SQLAlchemy engine for the configured URL and
`ensure_quiz_schema` creates the quiz tables and their foreign keys.
Schema creation is idempotent and additive only: it creates missing
tables, adds missing constraints and never alters or drops anything that
already exists.
"""

import logging

from sqlalchemy import event, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel, create_engine

from . import models

logger = logging.getLogger(__name__)

SUPPORTED_DIALECTS = ("sqlite", "mysql", "mariadb", "postgresql")

# (table, constraint name, DDL) for the two ownership foreign keys
FOREIGN_KEYS = (
    (
        "quiz_question",
        "FK_quiz_question_quiz_id",
        "ALTER TABLE quiz_question ADD CONSTRAINT FK_quiz_question_quiz_id "
        "FOREIGN KEY (quiz_id) REFERENCES quiz (id) ON DELETE CASCADE",
    ),
    (
        "quiz_submission",
        "FK_quiz_submission_quiz_id",
        "ALTER TABLE quiz_submission ADD CONSTRAINT FK_quiz_submission_quiz_id "
        "FOREIGN KEY (quiz_id) REFERENCES quiz (id) ON DELETE CASCADE",
    ),
)

QUIZ_TABLES = [
    models.Quiz.__table__,
    models.QuizQuestion.__table__,
    models.QuizSubmission.__table__,
]


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine for `url`.

    SQLite connections get ``check_same_thread=False`` (the store is used
    from FastAPI worker threads) and foreign key enforcement switched on,
    which SQLite leaves off by default.
    """
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(url, echo=echo, connect_args=connect_args)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def check_connection(engine: Engine) -> bool:
    """Return True if a connection to the database can be opened."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as exc:
        logger.warning("database unavailable at %s: %s", engine.url, exc)
        return False


def ensure_quiz_schema(engine: Engine) -> bool:
    """Create the quiz tables and foreign keys if they are missing.

    Returns True when the schema was checked/created, False when the step
    was skipped (unsupported dialect) or failed. Failures are logged and
    never raised so that a broken database does not stop the process.
    """
    dialect = engine.dialect.name
    if dialect not in SUPPORTED_DIALECTS:
        logger.warning("quiz schema auto-create skipped: unsupported database %s", dialect)
        return False
    try:
        SQLModel.metadata.create_all(engine, tables=QUIZ_TABLES)
        for table, name, ddl in FOREIGN_KEYS:
            _ensure_foreign_key(engine, table, name, ddl)
    except SQLAlchemyError:
        logger.warning("quiz schema auto-create failed", exc_info=True)
        return False
    logger.info("quiz schema auto-create completed")
    return True


def has_quiz_foreign_key(engine: Engine, table: str) -> bool:
    """Capability check: does `table` already reference quiz(id) via quiz_id?"""
    for fk in inspect(engine).get_foreign_keys(table):
        if fk.get("referred_table") == "quiz" and fk.get("constrained_columns") == ["quiz_id"]:
            return True
    return False


def _is_duplicate_constraint_error(exc: SQLAlchemyError) -> bool:
    message = str(getattr(exc, "orig", exc)).lower()
    return "duplicate" in message or "already exists" in message or "errno: 121" in message


def _ensure_foreign_key(engine: Engine, table: str, name: str, ddl: str) -> None:
    if has_quiz_foreign_key(engine, table):
        return
    if engine.dialect.name == "sqlite":
        # sqlite cannot add constraints to an existing table
        logger.warning("table %s has no foreign key to quiz and sqlite cannot add %s", table, name)
        return
    try:
        with engine.begin() as conn:
            conn.execute(text(ddl))
        logger.info("added constraint %s on %s", name, table)
    except SQLAlchemyError as exc:
        if not _is_duplicate_constraint_error(exc):
            raise
        logger.info("constraint %s already exists on %s", name, table)
