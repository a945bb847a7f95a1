"""CLI script to create the quiz tables and constraints.
Usage: python scripts/init_schema.py [--database-url URL]

Safe to run repeatedly: existing tables and constraints are left untouched.
"""
import sys
import argparse
import logging
import pathlib
from typing import Optional
# Ensure `backend/` is on sys.path so `eventquiz` imports work when running this script directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
from eventquiz.config import settings
from eventquiz.database import ensure_quiz_schema, make_engine


def main(database_url: Optional[str] = None) -> int:
    """Create missing quiz tables and foreign keys; return an exit code.

    Defaults to the `DATABASE_URL` setting when no URL is given.
    """
    engine = make_engine(database_url or settings.DATABASE_URL)
    print("Using database:", engine.url.render_as_string(hide_password=True))
    ok = ensure_quiz_schema(engine)
    engine.dispose()
    print("Quiz schema ready." if ok else "Quiz schema was not created; see log output.")
    return 0 if ok else 1


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('--database-url', type=str, default=None)
    args = parser.parse_args()
    logging.basicConfig(level=settings.LOG_LEVEL)
    sys.exit(main(args.database_url))
