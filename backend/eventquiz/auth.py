"""Authentication helpers and FastAPI security dependency.

This module decodes JWT bearer tokens and provides the dependency
`get_current_user_id`, which returns the id of the calling user. Users
themselves are managed by the surrounding platform; this service only
needs the id to attribute quizzes and submissions.

Token verification raises HTTPExceptions on failure so it can be used
directly inside route dependencies.
"""

from typing import Optional

import jwt
from fastapi import HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings

ANONYMOUS_USER = "anonymous"

bearer_scheme = HTTPBearer(auto_error=False)


def decode_token(token: str):
    """Decode and verify a JWT token.

    Returns the decoded payload on success or raises an HTTPException
    with status 401 on failure.
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        return payload
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail='token expired')
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail='invalid token')


def get_current_user_id(credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme)) -> str:
    """FastAPI dependency that returns the authenticated user id.

    The id is read from the `user_id` claim, falling back to `sub`.
    Requests without a token are rejected unless anonymous access is
    enabled, in which case they act as the `anonymous` user.
    """
    if credentials is None:
        if settings.ALLOW_ANONYMOUS:
            return ANONYMOUS_USER
        raise HTTPException(status_code=401, detail='not authenticated')
    payload = decode_token(credentials.credentials)
    user_id = payload.get('user_id') or payload.get('sub')
    if not user_id:
        raise HTTPException(status_code=401, detail='invalid token payload')
    return str(user_id)


def issue_token(user_id: str, expires_in_seconds: int = 3600) -> str:
    """Sign a token for `user_id`; used by scripts and tests."""
    import time
    payload = {"user_id": user_id, "exp": int(time.time()) + expires_in_seconds}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
