# auth.py
"""
Identity dependencies.

The identity gateway in front of this service authenticates the caller and
forwards the subject key in a header. This service trusts that key as given
and never sees credentials.
"""

import logging
from functools import lru_cache

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from config import AUTH_SUBJECT_HEADER
from database import get_db, get_company_by_auth_id, get_user_by_auth_id
from exceptions import ForbiddenError, ModelInvocationError, NotFoundError, UnauthorizedError
from skillgap.llm import ClaudeClient

logger = logging.getLogger(__name__)


def get_subject(request: Request) -> str:
    subject = request.headers.get(AUTH_SUBJECT_HEADER, "").strip()
    if not subject:
        raise UnauthorizedError()
    return subject


def get_current_user(subject: str = Depends(get_subject), db: Session = Depends(get_db)):
    user = get_user_by_auth_id(db, subject)
    if not user:
        raise NotFoundError("User", details={"hint": "Please complete your profile first."})
    return user


def get_current_company(subject: str = Depends(get_subject), db: Session = Depends(get_db)):
    company = get_company_by_auth_id(db, subject)
    if not company:
        logger.info("Company access denied for subject %s", subject)
        raise ForbiddenError("Access denied. Company account required.")
    return company


@lru_cache(maxsize=1)
def _claude_client() -> ClaudeClient:
    return ClaudeClient()


def get_generator():
    """The shared model client; tests override this dependency with a fake."""
    try:
        return _claude_client()
    except ValueError as e:
        raise ModelInvocationError(str(e)) from e
