"""
SQLAlchemy Database Models

Tables:
- reservations: bookings and their verification state
- menu_categories / menu_items: one items table keyed by category
- admin_sessions: server-issued admin session tokens
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column, Integer, String, Float, Date, Time, DateTime, Text, Enum, Boolean,
    ForeignKey, JSON,
)
from sqlalchemy.orm import relationship

from bellavista.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class ReservationStatus(str, enum.Enum):
    """Reservation lifecycle."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class Reservation(Base):
    """
    A table booking.

    Created as PENDING with a verification code; becomes CONFIRMED once the
    customer submits the code. Every write bumps ``version`` so concurrent
    writers cannot silently overwrite each other.
    """
    __tablename__ = "reservations"

    id = Column(String(36), primary_key=True, default=new_id)

    # =========================================================================
    # CUSTOMER INFORMATION
    # =========================================================================
    customer_name = Column(String(100), nullable=False)
    customer_email = Column(String(255), nullable=False)
    customer_phone = Column(String(40), nullable=False, index=True)

    # =========================================================================
    # BOOKING DETAILS
    # =========================================================================
    party_size = Column(Integer, nullable=False)
    reservation_date = Column(Date, nullable=False, index=True)
    reservation_time = Column(Time, nullable=False)
    special_requests = Column(Text, nullable=True)

    # =========================================================================
    # VERIFICATION
    # =========================================================================
    otp_code = Column(String(6), nullable=True)
    otp_created_at = Column(DateTime(timezone=True), nullable=True)
    otp_expires_at = Column(DateTime(timezone=True), nullable=True)
    otp_verified = Column(Boolean, default=False, nullable=False)
    confirmed_at = Column(DateTime(timezone=True), nullable=True)

    # =========================================================================
    # STATUS
    # =========================================================================
    status = Column(
        Enum(ReservationStatus),
        default=ReservationStatus.PENDING,
        nullable=False,
        index=True
    )
    version = Column(Integer, nullable=False)

    # =========================================================================
    # TIMESTAMPS
    # =========================================================================
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow, nullable=True)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<Reservation {self.id} - {self.customer_name} - {self.status.value}>"


class MenuCategory(Base):
    """Menu section such as Antipasti or Dolci."""
    __tablename__ = "menu_categories"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    display_order = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    items = relationship(
        "MenuItem",
        back_populates="category",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="MenuItem.display_order",
    )

    def __repr__(self):
        return f"<MenuCategory {self.name}>"


class MenuItem(Base):
    """A dish or drink, always attached to exactly one category."""
    __tablename__ = "menu_items"

    id = Column(String(36), primary_key=True, default=new_id)
    category_id = Column(
        String(36),
        ForeignKey("menu_categories.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    name = Column(String(150), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False)
    image_url = Column(String(500), nullable=True)
    is_available = Column(Boolean, default=True, nullable=False)
    is_featured = Column(Boolean, default=False, nullable=False)
    allergens = Column(JSON, default=list, nullable=False)
    dietary_info = Column(JSON, default=list, nullable=False)
    display_order = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow, nullable=True)

    category = relationship("MenuCategory", back_populates="items", lazy="joined")

    def __repr__(self):
        return f"<MenuItem {self.name} ({self.price:.2f})>"


class AdminSession(Base):
    """Opaque admin session token with a hard expiry."""
    __tablename__ = "admin_sessions"

    token = Column(String(64), primary_key=True)
    username = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)

    def __repr__(self):
        return f"<AdminSession {self.username} until {self.expires_at}>"
