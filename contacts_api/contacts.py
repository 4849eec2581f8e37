"""Contact management routes for the Contacts API."""

import logging

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from . import schemas, crud
from .database import get_db
from .auth import get_current_user
from .exceptions import NotFoundException
from .models import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/contacts", tags=["contacts"])

#: Range of the 64-bit integer primary key column
MIN_CONTACT_ID = -(2**63)
MAX_CONTACT_ID = 2**63 - 1


def get_owned_contact(db: Session, contact_id: int, current_user: User):
    """
    Resolve a contact id under the current user.

    Raises:
        NotFoundException: If the contact does not exist or belongs to
            another user.
    """
    if not MIN_CONTACT_ID <= contact_id <= MAX_CONTACT_ID:
        raise NotFoundException("Contact")
    contact = crud.get_contact(db, contact_id, current_user)
    if not contact:
        raise NotFoundException("Contact")
    return contact


@router.post("", response_model=schemas.WebResponse[schemas.ContactOut])
def create_contact(
    contact_in: schemas.ContactCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Create a new contact owned by the current user.

    Args:
        contact_in (ContactCreate): Contact input data.
        db (Session): Database session.
        current_user (User): Authenticated user.

    Returns:
        WebResponse[ContactOut]: Created contact.
    """
    contact = crud.create_contact(db, contact_in, current_user)
    logger.info("User %s created contact %s", current_user.username, contact.id)
    return {"data": contact}


@router.get("", response_model=schemas.ContactPage)
def search_contacts(
    request: Request,
    name: str | None = Query(None),
    email: str | None = Query(None),
    phone: str | None = Query(None),
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Search contacts belonging to the current user.

    Every given filter narrows the result. ``name`` is matched against
    first and last name.

    Args:
        request (Request): Incoming request, used to reach app settings.
        name (str | None): Substring of first or last name.
        email (str | None): Substring of the email address.
        phone (str | None): Substring of the phone number.
        page (int): 1-based page number.
        db (Session): Database session.
        current_user (User): Authenticated user.

    Returns:
        ContactPage: Matching contacts on the page and paging metadata.
    """
    search = schemas.ContactSearch(name=name, email=email, phone=phone, page=page)
    contacts, paging = crud.search_contacts(
        db,
        user=current_user,
        search=search,
        page_size=request.app.state.settings.PAGE_SIZE,
    )
    return {"data": contacts, "paging": paging}


@router.get("/{contact_id}", response_model=schemas.WebResponse[schemas.ContactOut])
def get_contact(
    contact_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Retrieve a single contact by ID for the current user."""
    return {"data": get_owned_contact(db, contact_id, current_user)}


@router.put("/{contact_id}", response_model=schemas.WebResponse[schemas.ContactOut])
def update_contact(
    contact_id: int,
    changes: schemas.ContactUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Replace every field of an existing contact.

    Optional fields missing from the request are cleared.

    Args:
        contact_id (int): Contact identifier.
        changes (ContactUpdate): New field values.
        db (Session): Database session.
        current_user (User): Authenticated user.

    Raises:
        NotFoundException: If contact is not found.

    Returns:
        WebResponse[ContactOut]: Updated contact.
    """
    contact = get_owned_contact(db, contact_id, current_user)
    return {"data": crud.update_contact(db, contact, changes.model_dump())}


@router.delete("/{contact_id}", response_model=schemas.WebResponse[str])
def remove_contact(
    contact_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Delete a contact owned by the current user.

    Raises:
        NotFoundException: If contact is not found.
    """
    contact = get_owned_contact(db, contact_id, current_user)
    crud.delete_contact(db, contact)
    logger.info("User %s deleted contact %s", current_user.username, contact_id)
    return {"data": "OK"}
