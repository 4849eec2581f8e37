"""CRUD operations for users and contacts.

This module contains database interaction logic for user and contact
entities, isolated from FastAPI route handlers.
"""

import math

from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import models, schemas
from .exceptions import ConflictException


def create_user(
    db: Session, user_in: schemas.UserRegister, hashed_password: str
) -> models.User:
    """
    Create and persist a new user with no token.

    Uniqueness of the username is enforced by the database constraint,
    so two concurrent registrations cannot both succeed.

    Args:
        db (Session): SQLAlchemy database session.
        user_in (UserRegister): Incoming user data.
        hashed_password (str): Securely hashed password.

    Raises:
        ConflictException: If a user with the same username already exists.

    Returns:
        User: Newly created user instance.
    """
    user = models.User(
        username=user_in.username,
        password=hashed_password,
        name=user_in.name,
        token=None,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictException("Username already exists")
    db.refresh(user)
    return user


def get_user_by_username(db: Session, username: str) -> models.User | None:
    """
    Retrieve a user by username.

    Args:
        db (Session): Database session.
        username (str): Login name.

    Returns:
        User | None: User if found, otherwise ``None``.
    """
    return db.execute(
        select(models.User).where(models.User.username == username)
    ).scalar_one_or_none()


def get_user_by_token(db: Session, token: str) -> models.User | None:
    """Retrieve the user whose stored token equals ``token``."""
    return db.execute(
        select(models.User).where(models.User.token == token)
    ).scalar_one_or_none()


def update_user(db: Session, user: models.User, changes: dict) -> models.User:
    """
    Update mutable fields of a user.

    Args:
        db (Session): Database session.
        user (User): Target user.
        changes (dict): Column values to set, e.g. ``name``, ``password``
            or ``token``.

    Returns:
        User: Updated user instance.
    """
    for key, value in changes.items():
        setattr(user, key, value)

    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_contact(
    db: Session, contact_in: schemas.ContactCreate, user: models.User
) -> models.Contact:
    """
    Create a new contact owned by the given user.

    Args:
        db (Session): Database session.
        contact_in (ContactCreate): Contact data.
        user (User): Owner of the contact.

    Returns:
        Contact: Newly created contact.
    """
    contact = models.Contact(**contact_in.model_dump(), owner_id=user.id)
    db.add(contact)
    db.commit()
    db.refresh(contact)
    return contact


def get_contact(db: Session, contact_id: int, user: models.User):
    """
    Retrieve a single contact owned by the given user.

    A contact owned by someone else is treated exactly like a missing one.

    Args:
        db (Session): Database session.
        contact_id (int): Contact identifier.
        user (User): Contact owner.

    Returns:
        Contact | None: Contact if found, otherwise ``None``.
    """
    return db.execute(
        select(models.Contact).where(
            models.Contact.id == contact_id,
            models.Contact.owner_id == user.id,
        )
    ).scalar_one_or_none()


def update_contact(db: Session, contact: models.Contact, changes: dict):
    """Write ``changes`` onto an owned contact and return it refreshed."""
    for key, value in changes.items():
        setattr(contact, key, value)

    db.add(contact)
    db.commit()
    db.refresh(contact)
    return contact


def delete_contact(db: Session, contact: models.Contact):
    db.delete(contact)
    db.commit()


def search_contacts(
    db: Session,
    user: models.User,
    search: schemas.ContactSearch,
    page_size: int = 10,
) -> tuple[list[models.Contact], schemas.Paging]:
    """
    Search the given user's contacts with optional filters and paging.

    Filters are combined with AND. ``name`` matches first or last name,
    ``email`` and ``name`` match case-insensitively, ``phone`` is a plain
    substring match. Results are ordered by id.

    Args:
        db (Session): Database session.
        user (User): Contact owner.
        search (ContactSearch): Filters and page number (1-based).
        page_size (int): Number of contacts per page.

    Returns:
        tuple[list[Contact], Paging]: The requested page and its metadata.
            A page past the end is empty but the metadata still reflects
            the full result set.
    """
    filters = [models.Contact.owner_id == user.id]
    if search.name:
        like_name = f"%{search.name}%"
        filters.append(
            or_(
                models.Contact.first_name.ilike(like_name),
                models.Contact.last_name.ilike(like_name),
            )
        )
    if search.email:
        filters.append(models.Contact.email.ilike(f"%{search.email}%"))
    if search.phone:
        filters.append(models.Contact.phone.like(f"%{search.phone}%"))

    total_item = db.scalar(select(func.count(models.Contact.id)).where(*filters))
    paging = schemas.Paging(
        page=search.page,
        total_page=math.ceil(total_item / page_size),
        total_item=total_item,
    )

    offset = (search.page - 1) * page_size
    # a page past the end may not fit the store's integer type
    if offset >= total_item:
        return [], paging

    contacts = db.scalars(
        select(models.Contact)
        .where(*filters)
        .order_by(models.Contact.id)
        .offset(offset)
        .limit(page_size)
    ).all()
    return list(contacts), paging
