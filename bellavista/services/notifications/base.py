"""
Notification Service Abstract Base Class

Defines the interface for sending SMS and email. Implementations only
provide the two transport primitives; the reservation messages built on top
of them are shared here so Mock and Real send identical text.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, time
from typing import Optional

from markupsafe import escape

from bellavista.core.config import get_settings

settings = get_settings()


@dataclass
class NotificationResult:
    """Result from sending a notification."""
    success: bool
    message_id: Optional[str] = None
    error_message: Optional[str] = None
    provider: str = "unknown"


class BaseNotificationService(ABC):
    """Abstract base class for notification services."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    async def send_sms(
        self,
        to_phone: str,
        message: str,
    ) -> NotificationResult:
        """Send an SMS message."""
        pass

    @abstractmethod
    async def send_email(
        self,
        to_email: str,
        subject: str,
        body_html: str,
        body_text: Optional[str] = None,
    ) -> NotificationResult:
        """Send an email."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check service connectivity."""
        pass

    # =========================================================================
    # RESERVATION MESSAGES
    # =========================================================================

    async def _send_both(
        self,
        customer_phone: str,
        customer_email: Optional[str],
        subject: str,
        text: str,
        html: str,
    ) -> NotificationResult:
        """SMS plus email; succeeds if either channel got through."""
        sms_result = await self.send_sms(customer_phone, text)

        email_result = None
        if customer_email:
            email_result = await self.send_email(
                to_email=customer_email,
                subject=subject,
                body_html=html,
                body_text=text,
            )

        success = sms_result.success or bool(email_result and email_result.success)
        message_id = sms_result.message_id or (email_result.message_id if email_result else None)
        error = None
        if not success:
            error = sms_result.error_message or (email_result.error_message if email_result else None)

        return NotificationResult(
            success=success,
            message_id=message_id,
            error_message=error,
            provider=self.provider_name,
        )

    async def send_verification_code(
        self,
        reservation_id: str,
        customer_name: str,
        customer_email: Optional[str],
        customer_phone: str,
        code: str,
        ttl_minutes: int,
    ) -> NotificationResult:
        """Deliver a reservation verification code."""
        text = (
            f"Hi {customer_name}! Your {settings.restaurant_name} verification code is {code}. "
            f"It expires in {ttl_minutes} minutes."
        )
        html = (
            f"<h1>Confirm your reservation</h1>"
            f"<p>Hi {escape(customer_name)},</p>"
            f"<p>Your verification code is <strong style=\"font-size: 24px;\">{code}</strong>.</p>"
            f"<p>It expires in {ttl_minutes} minutes.</p>"
            f"<p><a href=\"{settings.app_base_url}/verify-otp?reservation={reservation_id}\">"
            f"Enter your code</a></p>"
        )
        return await self._send_both(
            customer_phone,
            customer_email,
            f"Your verification code - {settings.restaurant_name}",
            text,
            html,
        )

    async def send_reservation_confirmation(
        self,
        reservation_id: str,
        customer_name: str,
        customer_email: Optional[str],
        customer_phone: str,
        party_size: int,
        reservation_date: date,
        reservation_time: time,
    ) -> NotificationResult:
        """Tell the guest their table is confirmed."""
        when = f"{reservation_date.strftime('%A, %d %B %Y')} at {reservation_time.strftime('%H:%M')}"
        text = (
            f"Hi {customer_name}! Your table for {party_size} at {settings.restaurant_name} "
            f"is confirmed for {when}. See you soon!"
        )
        html = (
            f"<h1>Reservation confirmed</h1>"
            f"<p>Hi {escape(customer_name)},</p>"
            f"<p>Your table for <strong>{party_size}</strong> is booked for <strong>{when}</strong>.</p>"
            f"<p><a href=\"{settings.app_base_url}/reservation-confirmed?id={reservation_id}\">"
            f"View your reservation</a></p>"
            f"<p>Need to change something? Call us on {settings.restaurant_phone}.</p>"
        )
        return await self._send_both(
            customer_phone,
            customer_email,
            f"Reservation confirmed - {settings.restaurant_name}",
            text,
            html,
        )

    async def send_contact_message(
        self,
        name: str,
        email: str,
        phone: Optional[str],
        subject: str,
        message: str,
    ) -> NotificationResult:
        """Forward a contact form submission to the restaurant inbox."""
        text = (
            f"From: {name} <{email}>\n"
            f"Phone: {phone or '-'}\n\n"
            f"{message}"
        )
        # Visitor input, escaped before it goes into markup
        html = (
            f"<p><strong>From:</strong> {escape(name)} &lt;{escape(email)}&gt;</p>"
            f"<p><strong>Phone:</strong> {escape(phone or '-')}</p>"
            f"<p>{escape(message)}</p>"
        )
        return await self.send_email(
            to_email=settings.restaurant_email,
            subject=f"[Contact] {subject}",
            body_html=html,
            body_text=text,
        )
