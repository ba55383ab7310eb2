# tourportal/models/schemas.py
import re
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List, Literal

from pydantic import BaseModel, Field, HttpUrl, field_validator
from pydantic.alias_generators import to_camel

# Letters (Latin or Cyrillic), digits and hyphens
SLUG_RE = re.compile(r"[a-z0-9а-яё-]+", re.IGNORECASE)
EMAIL_PATTERN = r"^[\w\.+-]+@[\w\.-]+\.\w+$"

RoleName = Literal["USER", "MANAGER", "ADMIN"]
OrderStatusName = Literal["PENDING", "CONFIRMED", "CANCELLED", "COMPLETED"]
TicketStatusName = Literal["OPEN", "IN_PROGRESS", "RESOLVED", "CLOSED"]


def is_valid_slug(value: Optional[str]) -> bool:
    return bool(value) and SLUG_RE.fullmatch(value) is not None


def _check_slug(value: str) -> str:
    if not is_valid_slug(value):
        raise ValueError("Slug may only contain letters, digits and hyphens")
    return value


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


# ---------- Destination Schemas ----------
class AdminDestinationIn(ApiModel):
    name: str = Field(..., min_length=2, max_length=100)
    slug: str = Field(..., min_length=2, max_length=100)
    description: str = Field(..., min_length=10)
    image_url: HttpUrl

    @field_validator("slug")
    @classmethod
    def check_slug(cls, value: str) -> str:
        return _check_slug(value)


class ManagerDestinationIn(ApiModel):
    name: str = Field(..., min_length=3, max_length=100)
    slug: str = Field(..., min_length=3, max_length=100)
    description: str = Field(..., min_length=10)
    image_url: str = Field(..., min_length=5)

    @field_validator("slug")
    @classmethod
    def check_slug(cls, value: str) -> str:
        return _check_slug(value)


class DestinationOut(ApiModel):
    id: int
    name: str
    slug: str
    description: str
    image_url: str
    created_at: datetime
    updated_at: datetime


class DestinationBrief(ApiModel):
    name: str
    slug: str


# ---------- Tour Schemas ----------
class AdminTourIn(ApiModel):
    title: str = Field(..., min_length=3, max_length=100)
    slug: str = Field(..., min_length=3, max_length=100)
    price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    currency: str = Field(..., min_length=3, max_length=3)
    image_url: str = Field(..., min_length=5)
    short_description: str = Field(..., min_length=10, max_length=250)
    full_description: str = Field(..., min_length=50)
    inclusions: str = ""
    exclusions: str = ""
    itinerary: str = ""
    image_urls: List[str] = []
    destination_id: int = Field(..., gt=0)
    duration: int = Field(..., gt=0)
    group_size: int = Field(..., gt=0)
    next_tour_date: Optional[date] = None

    @field_validator("slug")
    @classmethod
    def check_slug(cls, value: str) -> str:
        return _check_slug(value)


class ManagerTourIn(AdminTourIn):
    duration: int = Field(7, gt=0)
    group_size: int = Field(10, gt=0)
    available_seats: int = Field(10, gt=0)

    @field_validator("next_tour_date", mode="before")
    @classmethod
    def blank_date_is_none(cls, value):
        # Forms send "" for an unset date
        return None if value == "" else value


class TourOut(ApiModel):
    id: int
    title: str
    slug: str
    price: Decimal
    currency: str
    image_url: str
    image_urls: List[str] = []
    short_description: str
    full_description: str
    inclusions: str
    exclusions: str
    itinerary: str
    duration: int
    group_size: int
    available_seats: int
    next_tour_date: Optional[date] = None
    destination_id: int
    destination: Optional[DestinationBrief] = None
    created_at: datetime
    updated_at: datetime


class TourBrief(ApiModel):
    id: int
    title: str
    slug: str
    price: Decimal
    currency: str
    image_url: str
    short_description: str
    available_seats: int
    next_tour_date: Optional[date] = None


# ---------- Review Schemas ----------
class ReviewIn(ApiModel):
    tour_id: int = Field(..., gt=0)
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=10, max_length=1000)


class ReviewAuthor(ApiModel):
    name: Optional[str] = None
    image: Optional[str] = None


class ReviewOut(ApiModel):
    id: int
    tour_id: int
    user_id: str
    rating: int
    comment: str
    is_approved: bool
    created_at: datetime
    user: Optional[ReviewAuthor] = None


# ---------- User Schemas ----------
class RegisterIn(ApiModel):
    name: Optional[str] = Field(None, max_length=100)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=6)


class LoginIn(ApiModel):
    email: str
    password: str


class UserCreateIn(ApiModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=6)
    role: RoleName
    phone: Optional[str] = None
    address: Optional[str] = None


class UserUpdateIn(ApiModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: Optional[str] = Field(None, min_length=6)
    role: RoleName
    phone: Optional[str] = None
    address: Optional[str] = None

    @field_validator("password", mode="before")
    @classmethod
    def blank_password_unchanged(cls, value):
        # An empty password field keeps the current password
        return None if value == "" else value

    @field_validator("phone", "address")
    @classmethod
    def blank_to_none(cls, value):
        return value or None


class ProfileUpdateIn(ApiModel):
    name: str = Field(..., min_length=2, max_length=100)
    phone: Optional[str] = Field(None, max_length=60)
    address: Optional[str] = Field(None, max_length=255)

    @field_validator("phone", "address")
    @classmethod
    def blank_to_none(cls, value):
        return value or None


class ChangePasswordIn(ApiModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)


class UserOut(ApiModel):
    id: str
    name: Optional[str] = None
    email: str
    role: RoleName
    image: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    created_at: datetime


# ---------- Order Schemas ----------
class OrderIn(ApiModel):
    tour_id: int = Field(..., gt=0)
    quantity: int = Field(..., gt=0)
    contact_email: str = Field(..., pattern=EMAIL_PATTERN)
    contact_phone: Optional[str] = Field(None, max_length=60)


class OrderStatusIn(ApiModel):
    order_id: int = Field(..., gt=0)
    status: OrderStatusName


class OrderOut(ApiModel):
    id: int
    user_id: str
    tour_id: Optional[int] = None
    quantity: int
    total_price: Decimal
    status: OrderStatusName
    contact_email: str
    contact_phone: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    tour: Optional[TourBrief] = None


# ---------- Ticket Schemas ----------
class TicketIn(ApiModel):
    subject: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)

    @field_validator("subject", "message")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Must not be blank")
        return value


class TicketResponseIn(ApiModel):
    message: str = Field(..., min_length=1)

    @field_validator("message")
    @classmethod
    def strip_message(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Must not be blank")
        return value


class StaffTicketResponseIn(TicketResponseIn):
    ticket_id: int = Field(..., gt=0)


class TicketStatusIn(ApiModel):
    status: TicketStatusName


class StaffTicketStatusIn(TicketStatusIn):
    ticket_id: int = Field(..., gt=0)


class TicketResponseOut(ApiModel):
    id: int
    ticket_id: int
    message: str
    is_from_staff: bool
    created_at: datetime


class TicketUser(ApiModel):
    id: str
    name: Optional[str] = None
    email: str
    phone: Optional[str] = None
    image: Optional[str] = None


class TicketOut(ApiModel):
    id: int
    user_id: str
    subject: str
    message: str
    status: TicketStatusName
    created_at: datetime
    updated_at: datetime
    responses: List[TicketResponseOut] = []


class StaffTicketOut(TicketOut):
    user: Optional[TicketUser] = None


# ---------- Favorite Schemas ----------
class FavoriteIn(ApiModel):
    tour_id: int = Field(..., gt=0)


class FavoriteOut(ApiModel):
    id: int
    user_id: str
    tour_id: int
    created_at: datetime
    tour: Optional[TourBrief] = None


def dump(schema, obj) -> dict:
    """Serialize an ORM object through a response schema to JSON-ready camelCase."""
    return schema.model_validate(obj).model_dump(by_alias=True, mode="json")
