"""Mail relay adapter and the notification messages built on it."""

from __future__ import annotations

import html
import logging
from typing import Any, Protocol

import resend

from storefront.core.config import MailConfig

LOGGER = logging.getLogger(__name__)


class MailerProtocol(Protocol):
    """Best-effort mail sender used by resource services."""

    def send(self, to: str, subject: str, html_body: str, text_body: str) -> bool:
        """Send a message, returning whether the relay accepted it."""

    @property
    def notify_to(self) -> str:
        """Operator address for internal notifications."""


class ResendMailer:
    """Mail relay backed by the Resend API."""

    def __init__(self, config: MailConfig) -> None:
        self._api_key = config.api_key
        if self._api_key:
            resend.api_key = self._api_key
        self._sender = config.sender
        self._notify_to = config.notify_to

    @property
    def notify_to(self) -> str:
        return self._notify_to

    def send(self, to: str, subject: str, html_body: str, text_body: str) -> bool:
        recipient = (to or "").strip()
        if not self._api_key:
            LOGGER.info("mail_relay_disabled: %s", subject)
            return False
        if not recipient:
            LOGGER.warning("mail_skipped_no_recipient")
            return False

        payload: dict[str, Any] = {
            "from": self._sender,
            "to": [recipient],
            "subject": subject,
            "html": html_body,
            "text": text_body,
        }
        try:
            response = resend.Emails.send(payload)
        except Exception:
            LOGGER.exception("mail_send_failed")
            return False

        if not isinstance(response, dict) or not response.get("id"):
            LOGGER.warning("mail_send_rejected")
            return False
        return True


def order_confirmation_message(order: Any, full_name: str) -> tuple[str, str, str]:
    """Return subject, html and text bodies for an order receipt."""
    lines = [
        f"{item.product_name} x{item.quantity} ({item.price:.2f})" for item in order.items
    ]
    subject = f"Order {order.order_id} received"
    text_body = (
        f"Hi {full_name},\n\n"
        f"Thank you for your order {order.order_id}.\n"
        f"Items: {', '.join(lines)}.\n"
        f"Total: {order.total_amount:.2f}.\n"
    )
    rows = "".join(f"<li>{html.escape(line)}</li>" for line in lines)
    html_body = (
        f"<p>Hi {html.escape(full_name)},</p>"
        f"<p>Thank you for your order <strong>{html.escape(order.order_id)}</strong>.</p>"
        f"<ul>{rows}</ul>"
        f"<p>Total: {order.total_amount:.2f}</p>"
    )
    return subject, html_body, text_body


def enquiry_notification_message(enquiry: Any) -> tuple[str, str, str]:
    """Return subject, html and text bodies for a new enquiry alert."""
    fields = [
        ("Name", enquiry.name),
        ("Email", enquiry.email),
        ("Phone", enquiry.phone),
        ("Company", enquiry.company_name),
        ("Contact person", enquiry.contact_person),
        ("Category", enquiry.product_category),
        ("Quantity", str(enquiry.quantity_required)),
        ("Message", enquiry.message),
    ]
    subject = f"New enquiry from {enquiry.company_name}"
    text_body = "\n".join(f"{label}: {value}" for label, value in fields)
    html_body = "<table>" + "".join(
        f"<tr><th>{label}</th><td>{html.escape(str(value))}</td></tr>"
        for label, value in fields
    ) + "</table>"
    return subject, html_body, text_body
