"""
Email Service - reminder message composition and delivery.

This module contains:
- compose_reminder(): builds the subject, plain-text and HTML bodies
- SmtpEmailSender: delivers through an SMTP server with a bounded timeout
- ConsoleEmailSender: logs messages instead of sending (development)
- get_email_sender(): builds the sender selected in configuration

A sender is any object with send(to_address, message) that raises
EmailSendError on failure.
"""

import html
import logging
import smtplib
from dataclasses import dataclass
from decimal import Decimal
from email.message import EmailMessage
from typing import Iterable, List, Optional

from gift_tracker.services.exceptions import EmailSendError
from gift_tracker.utils.constants import APP_NAME, THRESHOLD_PHRASES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReminderMessage:
    """A composed reminder email."""

    subject: str
    text_body: str
    html_body: str


def threshold_phrase(days_until: int) -> str:
    """
    Phrase used for a reminder threshold.

    Raises:
        ValueError: If days_until is not a reminder threshold
    """
    try:
        return THRESHOLD_PHRASES[days_until]
    except KeyError:
        raise ValueError(f"No reminder is sent {days_until} days before a birthday")


def _format_cost(cost) -> Optional[str]:
    if cost is None:
        return None
    cost = Decimal(str(cost))
    if cost == 0:
        return None
    return f"${cost:.2f}"


def compose_reminder(
    recipient_name: str,
    days_until: int,
    gift_ideas: Iterable,
    app_url: str,
) -> ReminderMessage:
    """
    Compose a birthday reminder.

    Args:
        recipient_name: Name of the person whose birthday is coming up
        days_until: 14, 7 or 1
        gift_ideas: Objects with title, estimated_cost and purchased
        app_url: Link target for the "View in Gift Tracker" button

    Returns:
        ReminderMessage listing the unpurchased ideas (with costs) and the
        number already purchased

    Raises:
        ValueError: If days_until is not a reminder threshold
    """
    phrase = threshold_phrase(days_until)
    ideas = list(gift_ideas)
    unpurchased = [idea for idea in ideas if not idea.purchased]
    purchased_count = len(ideas) - len(unpurchased)

    subject = f"Birthday reminder: {recipient_name} is {phrase}!"

    text_lines: List[str] = [
        "Hi there,",
        "",
        f"{recipient_name}'s birthday is {phrase}!",
        "",
    ]
    if unpurchased:
        text_lines.append("Gift ideas:")
        for idea in unpurchased:
            cost = _format_cost(idea.estimated_cost)
            text_lines.append(f"  - {idea.title}" + (f" (estimated cost: {cost})" if cost else ""))
        text_lines.append("")
        text_lines.append(f"You have {purchased_count} items already purchased.")
    else:
        text_lines.append(f"You have {purchased_count} gift ideas for {recipient_name}.")
    text_lines += [
        "",
        f"View in {APP_NAME}: {app_url}",
        "",
        f"This is an automated message from {APP_NAME}. "
        "You can disable notifications in your account settings.",
    ]

    name_html = html.escape(recipient_name)
    if unpurchased:
        items = []
        for idea in unpurchased:
            cost = _format_cost(idea.estimated_cost)
            cost_html = f"<br/>Estimated cost: {cost}" if cost else ""
            items.append(f"<li><strong>{html.escape(idea.title)}</strong>{cost_html}</li>")
        ideas_html = (
            "<h2>Gift Ideas:</h2>\n"
            f"<ul>{''.join(items)}</ul>\n"
            f"<p>You have {purchased_count} items already purchased.</p>"
        )
    else:
        ideas_html = f"<p>You have {purchased_count} gift ideas for {name_html}.</p>"

    html_body = (
        "<!DOCTYPE html>\n<html><body>\n"
        "<h1>Birthday Reminder!</h1>\n"
        "<p>Hi there,</p>\n"
        f"<p><strong>{name_html}'s</strong> birthday is <strong>{phrase}</strong>!</p>\n"
        f"{ideas_html}\n"
        f'<p><a href="{html.escape(app_url, quote=True)}">View in {APP_NAME}</a></p>\n'
        f"<p><small>This is an automated message from {APP_NAME}. "
        "You can disable notifications in your account settings.</small></p>\n"
        "</body></html>\n"
    )

    return ReminderMessage(subject=subject, text_body="\n".join(text_lines), html_body=html_body)


class SmtpEmailSender:
    """Send reminder emails through an SMTP server."""

    def __init__(
        self,
        host: str,
        port: int,
        from_address: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.from_address = from_address
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    def build_message(self, to_address: str, message: ReminderMessage) -> EmailMessage:
        """Build a multipart/alternative message with text and HTML parts."""
        email = EmailMessage()
        email["Subject"] = message.subject
        email["From"] = self.from_address
        email["To"] = to_address
        email.set_content(message.text_body)
        email.add_alternative(message.html_body, subtype="html")
        return email

    def send(self, to_address: str, message: ReminderMessage) -> None:
        """
        Deliver one message.

        Raises:
            EmailSendError: On connection, authentication, timeout or refusal
        """
        email = self.build_message(to_address, message)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                if self.use_tls:
                    smtp.starttls()
                if self.username:
                    smtp.login(self.username, self.password or "")
                refused = smtp.send_message(email)
        except (smtplib.SMTPException, OSError) as e:
            raise EmailSendError(to_address, str(e) or e.__class__.__name__, e) from e

        if refused:
            raise EmailSendError(to_address, f"recipient refused: {refused}")
        logger.debug(f"Sent '{message.subject}' to {to_address}")


class ConsoleEmailSender:
    """Log reminder emails instead of sending them."""

    def __init__(self, log_level: int = logging.INFO):
        self.log_level = log_level
        self.sent: List[tuple] = []

    def send(self, to_address: str, message: ReminderMessage) -> None:
        self.sent.append((to_address, message))
        logger.log(
            self.log_level,
            f"[console email] To: {to_address} | Subject: {message.subject}\n{message.text_body}",
        )


def get_email_sender(config=None):
    """
    Build the email sender selected by configuration.

    Args:
        config: Config instance (default: global config)

    Returns:
        SmtpEmailSender when email_backend is 'smtp', otherwise ConsoleEmailSender

    Raises:
        ValueError: If the backend name is unknown
    """
    if config is None:
        from gift_tracker.utils.config import get_config

        config = get_config()

    backend = config.email_backend.lower()
    if backend == "smtp":
        return SmtpEmailSender(
            host=config.smtp_host,
            port=config.smtp_port,
            from_address=config.email_sender,
            username=config.smtp_username,
            password=config.smtp_password,
            use_tls=config.smtp_use_tls,
            timeout=config.smtp_timeout,
        )
    if backend == "console":
        return ConsoleEmailSender()
    raise ValueError(f"Unknown email backend: {config.email_backend}")
