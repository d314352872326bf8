"""
Module 'notifications': emails transactionnels (envoi SMTP côté serveur, client HTTP côté tunnel).
"""

from .email_config import SmtpSettings, load_smtp_settings
from .email_service import (
    send_customer_confirmation,
    send_owner_notification,
    send_order_emails,
    render_email,
)
from .client import HttpEmailNotifier

__all__ = [
    "SmtpSettings",
    "load_smtp_settings",
    "send_customer_confirmation",
    "send_owner_notification",
    "send_order_emails",
    "render_email",
    "HttpEmailNotifier",
]
