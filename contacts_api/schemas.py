from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, EmailStr, Field

T = TypeVar("T")


class WebResponse(BaseModel, Generic[T]):
    """Envelope for successful responses."""

    data: T


class UserRegister(BaseModel):
    """Payload for registering a new user."""

    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1, max_length=100)
    name: str = Field(min_length=1, max_length=100)


class UserLogin(BaseModel):
    """Payload for logging in."""

    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1, max_length=100)


class UserUpdate(BaseModel):
    """Partial profile update; absent fields are left unchanged."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    password: Optional[str] = Field(None, min_length=1, max_length=100)


class UserOut(BaseModel):
    """Public view of a user. Never carries the password or token."""

    username: str
    name: str

    class Config:
        from_attributes = True


class TokenOut(BaseModel):
    token: str


class ContactBase(BaseModel):
    """Shared fields for contact schemas."""

    first_name: str = Field(min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=20)


class ContactCreate(ContactBase):
    """Schema for creating new contact."""

    pass


class ContactUpdate(ContactBase):
    """Schema for replacing every field of an existing contact."""

    pass


class ContactOut(BaseModel):
    """Schema for returning contact with ID."""

    id: int
    first_name: str
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    class Config:
        from_attributes = True


class ContactSearch(BaseModel):
    """Filters and page number of a contact search."""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    page: int = Field(1, ge=1)


class Paging(BaseModel):
    """Position of a search page within the full filtered result set."""

    page: int
    total_page: int
    total_item: int


class ContactPage(BaseModel):
    """Search response: one page of contacts plus paging metadata."""

    data: List[ContactOut]
    paging: Paging
