import logging

import requests

import config
from errors import UpstreamError
from security import escape_html

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SEC = 15


def build_email(name, email, subject, message,
                recipient=None, recipient_name=config.CONTACT_RECIPIENT_NAME):
    body = escape_html(message).replace("\n", "<br/>")
    return {
        "sender": {"name": name, "email": email},
        "to": [{"email": recipient or config.CONTACT_RECIPIENT_EMAIL, "name": recipient_name}],
        "replyTo": {"name": name, "email": email},
        "subject": subject,
        "htmlContent": (
            "<html><body>"
            "<h2>New Contact Form Submission</h2>"
            f"<p><strong>From:</strong> {escape_html(name)} ({escape_html(email)})</p>"
            f"<p><strong>Subject:</strong> {escape_html(subject)}</p>"
            f"<div><p><strong>Message:</strong></p><p>{body}</p></div>"
            "</body></html>"
        ),
    }


def send_contact_message(name, email, subject, message, api_key):
    payload = build_email(name, email, subject, message)
    logger.info("Sending contact message via Brevo")
    try:
        resp = requests.post(
            config.BREVO_API_URL,
            json=payload,
            headers={
                "Accept": "application/json",
                "Content-Type": "application/json",
                "api-key": api_key,
            },
            timeout=REQUEST_TIMEOUT_SEC,
        )
    except requests.Timeout as exc:
        raise UpstreamError(504, "Email service timed out") from exc
    except requests.RequestException as exc:
        raise UpstreamError(502, "Failed to reach email service") from exc

    try:
        data = resp.json()
    except ValueError:
        data = {}
    if not isinstance(data, dict):
        data = {}
    if not resp.ok:
        logger.error("Brevo API error %s: %s", resp.status_code, data)
        raise UpstreamError(resp.status_code, data.get("message") or "Failed to send email")
    logger.info("Email sent: %s", data.get("messageId"))
    return data
