"""User-related routes and operations for the Contacts API."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from . import schemas, crud
from .auth import (
    DUMMY_PASSWORD_HASH,
    generate_token,
    get_current_user,
    get_password_hash,
    verify_password,
)
from .database import get_db
from .exceptions import UnauthorizedException
from .models import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("", response_model=schemas.WebResponse[schemas.UserOut])
def register(user_in: schemas.UserRegister, db: Session = Depends(get_db)):
    """
    Register a new user.

    Args:
        user_in (UserRegister): Registration data.
        db (Session): Database session.

    Raises:
        ConflictException: If the username is already taken.

    Returns:
        WebResponse[UserOut]: Username and name of the created user.
    """
    hashed_password = get_password_hash(user_in.password)
    user = crud.create_user(db, user_in, hashed_password)
    logger.info("Registered user %s", user.username)
    return {"data": user}


@router.post("/login", response_model=schemas.WebResponse[schemas.TokenOut])
def login(credentials: schemas.UserLogin, db: Session = Depends(get_db)):
    """
    Authenticate a user and issue a new session token.

    An unknown username and a wrong password are reported identically.

    Args:
        credentials (UserLogin): Username and password.
        db (Session): Database session.

    Raises:
        UnauthorizedException: If the credentials do not match.

    Returns:
        WebResponse[TokenOut]: The new token.
    """
    user = crud.get_user_by_username(db, credentials.username)
    hashed_password = user.password if user else DUMMY_PASSWORD_HASH
    if not verify_password(credentials.password, hashed_password) or not user:
        logger.warning("Failed login attempt")
        raise UnauthorizedException("Username or password wrong")

    user = crud.update_user(db, user, {"token": generate_token()})
    logger.info("User %s logged in", user.username)
    return {"data": {"token": user.token}}


@router.get("/current", response_model=schemas.WebResponse[schemas.UserOut])
def get_current(current_user: User = Depends(get_current_user)):
    """Return the profile of the authenticated user."""
    return {"data": current_user}


@router.patch("/current", response_model=schemas.WebResponse[schemas.UserOut])
def update_current(
    changes: schemas.UserUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Update name and/or password of the authenticated user.

    Fields missing from the request are left unchanged.

    Args:
        changes (UserUpdate): Fields to update.
        current_user (User): Authenticated user.
        db (Session): Database session.

    Returns:
        WebResponse[UserOut]: Updated profile.
    """
    updates = {}
    if changes.name is not None:
        updates["name"] = changes.name
    if changes.password is not None:
        updates["password"] = get_password_hash(changes.password)

    user = crud.update_user(db, current_user, updates)
    return {"data": user}


@router.delete("/logout", response_model=schemas.WebResponse[str])
def logout(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Invalidate the token of the authenticated user."""
    crud.update_user(db, current_user, {"token": None})
    logger.info("User %s logged out", current_user.username)
    return {"data": "OK"}
