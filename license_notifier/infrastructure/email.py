"""Transactional email delivery through SendGrid."""

from __future__ import annotations

import html
import json
import logging
from typing import Any

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from license_notifier.config import get_settings
from license_notifier.domain.entities import EmailDispatchRequest

logger = logging.getLogger(__name__)

_URGENT_COLOR = "#dc3545"
_IMPORTANT_COLOR = "#fd7e14"


def _extract_sendgrid_error_details(body: Any) -> str | None:
    """Return a human readable description for a SendGrid error payload."""

    if body in (None, ""):
        return None

    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None

    if isinstance(body, str):
        body = body.strip()
        if not body:
            return None
        try:
            parsed = json.loads(body)
        except json.JSONDecodeError:
            return body
    else:
        parsed = body

    if isinstance(parsed, dict):
        messages: list[str] = []
        for item in parsed.get("errors") or []:
            if not isinstance(item, dict) or not item.get("message"):
                continue
            help_link = item.get("help")
            if help_link:
                messages.append(f"{item['message']} (help: {help_link})")
            else:
                messages.append(str(item["message"]))
        if messages:
            return "; ".join(messages)
        try:
            return json.dumps(parsed)
        except (TypeError, ValueError):
            return None

    if isinstance(parsed, list):
        return "; ".join(str(item) for item in parsed)

    return None


def _log_sendgrid_failure(recipient: str, source: Any, *, raised: bool) -> None:
    """Log a failed SendGrid call with the status code and decoded error body."""

    status_code = getattr(source, "status_code", None)
    details = _extract_sendgrid_error_details(getattr(source, "body", None))
    verb = "request failed" if raised else "responded"

    if status_code and details:
        logger.error(
            "SendGrid API %s with status %s for %s: %s", verb, status_code, recipient, details
        )
    elif status_code:
        logger.error("SendGrid API %s with status %s for %s", verb, status_code, recipient)
    elif details:
        logger.error("SendGrid API %s for %s: %s", verb, recipient, details)
    else:
        logger.error("Error sending email via SendGrid to %s: %r", recipient, source)


def send_email(subject: str, html_content: str, recipient: str) -> bool:
    """Send an email using the configured SendGrid credentials."""

    settings = get_settings()
    if not (settings.sendgrid_api_key and settings.sendgrid_sender):
        logger.info("SendGrid configuration incomplete; skipping email delivery")
        return False

    message = Mail(
        from_email=settings.sendgrid_sender,
        to_emails=recipient,
        subject=subject,
        html_content=html_content,
    )

    try:
        client = SendGridAPIClient(settings.sendgrid_api_key)
        response = client.send(message)
    except Exception as exc:  # pragma: no cover - network failures depend on environment
        _log_sendgrid_failure(recipient, exc, raised=True)
        return False

    status_code = getattr(response, "status_code", None)
    if not isinstance(status_code, int) or not 200 <= status_code < 300:
        _log_sendgrid_failure(recipient, response, raised=False)
        return False

    return True


def deliver_email_request(request: EmailDispatchRequest) -> bool:
    """Mail sender used by the reminder pipeline."""

    return send_email(request.subject, request.html, request.to)


def get_mail_sender():
    """Return the default sender for reminder runs and email retries."""

    return deliver_email_request


def build_expiry_email(
    *,
    recipient: str,
    serial_label: str,
    message: str,
    expired: bool,
    urgent: bool,
    action_url: str | None,
) -> EmailDispatchRequest:
    """Compose the email announcing an expired or expiring serial."""

    urgency = "URGENT" if urgent else "IMPORTANT"
    color = _URGENT_COLOR if urgent else _IMPORTANT_COLOR
    state = "Expired" if expired else "Expiring Soon"
    subject = f"{urgency}: {serial_label} License {state}"

    first_action = "Contact vendor immediately" if expired else "Review license details"
    parts = [
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">',
        f'<div style="background: {color}; color: white; padding: 15px 20px; '
        f'text-align: center; font-weight: 600;">{urgency} - ACTION REQUIRED</div>',
        '<div style="padding: 30px 20px; background: white;">',
        f"<h2>License {state}</h2>",
        f"<p>{html.escape(message)}.</p>",
        "<ul>",
        f"<li>{first_action}</li>",
        "<li>Check renewal options</li>",
        "<li>Update license information in system</li>",
        "<li>Notify relevant team members</li>",
        "</ul>",
    ]
    if action_url:
        link = f"{get_settings().app_base_url.rstrip('/')}{action_url}"
        parts.append(
            f'<p><a href="{html.escape(link, quote=True)}" style="background: {color}; '
            'color: white; padding: 14px 28px; text-decoration: none;">View License Details</a></p>'
        )
    parts.append("</div></div>")
    return EmailDispatchRequest(to=recipient, subject=subject, html="".join(parts))


__all__ = ["build_expiry_email", "deliver_email_request", "get_mail_sender", "send_email"]
