"""Application settings and validation."""

import os
from pathlib import Path

BASE = Path(__file__).resolve().parent.parent


class Settings:
    ENV: str
    JWT_SECRET: str
    JWT_ALGORITHM: str
    ALLOW_INSECURE_JWT: bool
    ALLOW_ANONYMOUS: bool
    ALLOW_DEV_CORS: bool
    QUIZ_STORE: str
    DATABASE_URL: str
    SCHEMA_AUTO_CREATE: bool
    REMOTE_STORE_URL: str
    REMOTE_CONNECT_TIMEOUT: float
    REMOTE_REQUEST_TIMEOUT: float
    LOG_LEVEL: str

    def __init__(self):
        self.ENV = os.getenv("ENV", "dev").lower()
        self.JWT_SECRET = os.getenv("JWT_SECRET", "change_me_for_prod")
        self.JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
        self.ALLOW_INSECURE_JWT = os.getenv("ALLOW_INSECURE_JWT", "false").lower() == "true"
        self.ALLOW_ANONYMOUS = os.getenv("ALLOW_ANONYMOUS", "false").lower() == "true"
        self.ALLOW_DEV_CORS = os.getenv("ALLOW_DEV_CORS", "true").lower() == "true"
        self.QUIZ_STORE = os.getenv("QUIZ_STORE", "transactional").strip().lower()
        self.DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE / 'quiz.db'}")
        self.SCHEMA_AUTO_CREATE = os.getenv("SCHEMA_AUTO_CREATE", "true").lower() == "true"
        self.REMOTE_STORE_URL = os.getenv("REMOTE_STORE_URL", "").strip()
        self.REMOTE_CONNECT_TIMEOUT = float(os.getenv("REMOTE_CONNECT_TIMEOUT", "10"))
        self.REMOTE_REQUEST_TIMEOUT = float(os.getenv("REMOTE_REQUEST_TIMEOUT", "30"))
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self._validate()

    def _validate(self):
        if self.ENV != "dev" and not self.ALLOW_INSECURE_JWT and self.JWT_SECRET == "change_me_for_prod":
            raise RuntimeError("JWT_SECRET must be set to a non-default value in non-dev environments")
        if self.REMOTE_CONNECT_TIMEOUT <= 0 or self.REMOTE_REQUEST_TIMEOUT <= 0:
            raise RuntimeError("remote store timeouts must be positive")


settings = Settings()
