"""
                        Services Module

Business logic lives here; the API routers only translate HTTP to calls
into these modules.

Services:
    - reservations: booking intake, verification codes, status changes
    - menu: categories and items
    - analytics: dashboard stats and reservation trends
    - auth: admin sessions
    - notifications: SMS/email delivery (Mock in development, Twilio/SendGrid otherwise)
    - excel_manager: process-safe booking ledger
"""

from bellavista.services.excel_manager import ExcelManager

__all__ = ["ExcelManager"]
