"""
Pydantic Schemas for Request/Response Validation

Request bodies accept the column names (``customer_name``) as well as the
short form names used by the public booking form (``name``).
"""

from datetime import date, datetime, time
from typing import Any, Optional, List

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
)

from bellavista.models import ReservationStatus


# =============================================================================
# RESERVATIONS
# =============================================================================

class ReservationCreate(BaseModel):
    """Public booking request."""

    model_config = ConfigDict(str_strip_whitespace=True)

    customer_name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        validation_alias=AliasChoices("customer_name", "name"),
        examples=["Giulia Rossi"],
    )
    customer_email: str = Field(
        ...,
        min_length=1,
        max_length=255,
        validation_alias=AliasChoices("customer_email", "email"),
        examples=["giulia@example.com"],
    )
    customer_phone: str = Field(
        ...,
        min_length=1,
        max_length=40,
        validation_alias=AliasChoices("customer_phone", "phone"),
        examples=["+1 555 010 2020"],
    )
    party_size: int = Field(..., gt=0, examples=[4])
    reservation_date: date = Field(
        ...,
        validation_alias=AliasChoices("reservation_date", "date"),
        examples=["2025-06-01"],
    )
    reservation_time: time = Field(
        ...,
        validation_alias=AliasChoices("reservation_time", "time"),
        examples=["18:30"],
    )
    special_requests: Optional[str] = Field(
        None,
        max_length=1000,
        validation_alias=AliasChoices("special_requests", "notes"),
    )

    @field_validator("special_requests")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class ReservationSummary(BaseModel):
    """Customer-facing subset returned after booking."""
    id: str
    customer_name: str
    reservation_date: date
    reservation_time: time

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("reservation_time")
    def serialize_time(self, value: time) -> str:
        return value.strftime("%H:%M")


class ReservationCreateResponse(BaseModel):
    success: bool = True
    message: str
    verification_sent: bool
    reservation: ReservationSummary


class ReservationResponse(BaseModel):
    """Full reservation record. Verification codes are never exposed."""
    id: str
    customer_name: str
    customer_email: str
    customer_phone: str
    party_size: int
    reservation_date: date
    reservation_time: time
    special_requests: Optional[str]
    status: ReservationStatus
    otp_verified: bool
    confirmed_at: Optional[datetime]
    version: int
    created_at: datetime
    updated_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("reservation_time")
    def serialize_time(self, value: time) -> str:
        return value.strftime("%H:%M")


class ReservationListResponse(BaseModel):
    total: int
    reservations: List[ReservationResponse]


class VerifyOtpRequest(BaseModel):
    reservation_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("reservationId", "reservation_id"),
    )
    otp: str = Field(..., min_length=1, max_length=12)

    @field_validator("otp", mode="before")
    @classmethod
    def coerce_otp(cls, v):
        # Numeric inputs post the code as a number
        if isinstance(v, int):
            return str(v)
        return v.strip() if isinstance(v, str) else v


class ResendOtpRequest(BaseModel):
    reservation_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("reservationId", "reservation_id"),
    )


class ReservationStatusUpdate(BaseModel):
    """Admin status change. ``version`` enables a stale-write check."""
    status: ReservationStatus
    version: Optional[int] = Field(None, ge=1)

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v):
        return v.lower() if isinstance(v, str) else v


class ActionResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None


# =============================================================================
# MENU
# =============================================================================

class MenuCategoryCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100, examples=["Antipasti"])
    description: Optional[str] = Field(None, max_length=1000)
    display_order: int = Field(default=0, ge=0)
    is_active: bool = True


class MenuCategoryUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    display_order: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class MenuCategoryResponse(BaseModel):
    id: str
    name: str
    description: Optional[str]
    display_order: int
    is_active: bool
    item_count: int = 0

    model_config = ConfigDict(from_attributes=True)


class MenuItemCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    # Optional here so a missing category gets its own error message
    category_id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=150, examples=["Tagliatelle al Ragù"])
    description: Optional[str] = Field(None, max_length=2000)
    price: float = Field(..., ge=0, examples=[18.5])
    image_url: Optional[str] = Field(None, max_length=500)
    is_available: bool = True
    is_featured: bool = False
    allergens: List[str] = Field(default_factory=list)
    dietary_info: List[str] = Field(default_factory=list)
    display_order: int = Field(default=0, ge=0)


class MenuItemUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    category_id: Optional[str] = None
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    description: Optional[str] = Field(None, max_length=2000)
    price: Optional[float] = Field(None, ge=0)
    image_url: Optional[str] = Field(None, max_length=500)
    is_available: Optional[bool] = None
    is_featured: Optional[bool] = None
    allergens: Optional[List[str]] = None
    dietary_info: Optional[List[str]] = None
    display_order: Optional[int] = Field(None, ge=0)


class MenuItemResponse(BaseModel):
    id: str
    category_id: str
    category: Optional[str] = None
    name: str
    description: Optional[str]
    price: float
    image_url: Optional[str]
    is_available: bool
    is_featured: bool
    allergens: List[str]
    dietary_info: List[str]
    display_order: int

    model_config = ConfigDict(from_attributes=True)

    @field_validator("category", mode="before")
    @classmethod
    def category_name(cls, v):
        # ORM objects hand over the related MenuCategory
        return getattr(v, "name", v)


class MenuSection(BaseModel):
    """Public menu: one active category with its available items."""
    id: str
    name: str
    description: Optional[str]
    display_order: int
    items: List[MenuItemResponse]


# =============================================================================
# ANALYTICS
# =============================================================================

class HourCount(BaseModel):
    hour: str
    count: int


class DayCount(BaseModel):
    day: str
    count: int


class RecentReservation(BaseModel):
    id: str
    customer_name: str
    party_size: int
    reservation_date: date
    status: ReservationStatus


class AnalyticsResponse(BaseModel):
    days: int
    start_date: date
    end_date: date
    total_reservations: int
    total_guests: int
    avg_party_size: float
    peak_hours: List[HourCount]
    popular_days: List[DayCount]
    recent_reservations: List[RecentReservation]


class StatsResponse(BaseModel):
    today_reservations: int
    total_reservations: int
    pending_reservations: int
    total_menu_items: int
    avg_party_size: float


# =============================================================================
# AUTH
# =============================================================================

class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=255)


class LoginResponse(BaseModel):
    success: bool = True
    username: str
    token: str
    expires_at: datetime


class SessionResponse(BaseModel):
    username: str
    expires_at: datetime


# =============================================================================
# CONTACT
# =============================================================================

class ContactRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=40)
    subject: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=5000)


# =============================================================================
# COMMON
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[Any] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    redis: str
    notification_service: str
    timestamp: datetime
