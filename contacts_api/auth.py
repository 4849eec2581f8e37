"""Authentication helpers and the dependency that gates protected routes."""

import logging
import uuid
from typing import Protocol

from fastapi import Depends
from fastapi.security import APIKeyHeader
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from . import crud
from .database import get_db
from .exceptions import UnauthorizedException
from .models import User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
authorization_header = APIKeyHeader(name="Authorization", auto_error=False)

#: Checked when the username is unknown so failed logins take equal time
DUMMY_PASSWORD_HASH = pwd_context.hash("not-a-real-password")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Compare a plain password with its hashed value."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Generate a password hash using the configured context."""
    return pwd_context.hash(password)


def generate_token() -> str:
    """Create a new random session token."""
    return str(uuid.uuid4())


class TokenResolver(Protocol):
    """Strategy that maps a presented token to the user it identifies."""

    def resolve(self, token: str) -> User | None: ...


class StoredTokenResolver:
    """
    Resolve tokens by exact match against the token stored on the user row.

    Args:
        db (Session): Database session used for the lookup.
    """

    def __init__(self, db: Session):
        self.db = db

    def resolve(self, token: str) -> User | None:
        return crud.get_user_by_token(self.db, token)


def get_token_resolver(db: Session = Depends(get_db)) -> TokenResolver:
    """Dependency providing the token resolution strategy."""
    return StoredTokenResolver(db)


def get_current_user(
    token: str | None = Depends(authorization_header),
    resolver: TokenResolver = Depends(get_token_resolver),
) -> User:
    """
    Dependency that returns the user identified by the ``Authorization`` header.

    A missing header and an unknown token produce the same response.

    Raises:
        UnauthorizedException: If no user matches the header value.
    """
    user = resolver.resolve(token) if token else None
    if user is None:
        logger.warning("Rejected request with missing or unknown token")
        raise UnauthorizedException()
    return user
