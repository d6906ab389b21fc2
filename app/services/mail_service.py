"""Mail service for sending templated staff emails over SMTP."""

import asyncio
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr
from string import Template
from typing import Any

import structlog

from app.config import Settings, settings

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class MailTemplate:
    """A mail subject and plain text body with ``$placeholder`` fields."""

    code: str
    subject: str
    body: str

    def render(self, data: dict[str, Any]) -> tuple[str, str]:
        """Fill the placeholders, leaving unknown ones untouched."""
        values = {key: "" if value is None else str(value) for key, value in data.items()}
        return (
            Template(self.subject).safe_substitute(values),
            Template(self.body).safe_substitute(values),
        )


DEFAULT_TEMPLATES: dict[str, MailTemplate] = {
    "password_reset": MailTemplate(
        code="password_reset",
        subject="Password reset at $site_name",
        body=(
            "Hi $staff_name,\n\n"
            "Your password for the username $username has been reset.\n"
            "Your new password is: $reset_password\n\n"
            "Please log in and change it as soon as possible.\n\n"
            "$site_name"
        ),
    ),
    "staff_added": MailTemplate(
        code="staff_added",
        subject="Your $site_name staff account",
        body=(
            "Hi $staff_name,\n\n"
            "A staff account has been created for you with the username $username.\n\n"
            "$site_name"
        ),
    ),
}


class MailService:
    """Render templates and deliver them through the configured SMTP server."""

    def __init__(
        self,
        config: Settings | None = None,
        templates: dict[str, MailTemplate] | None = None,
    ):
        """Initialize with settings and an optional template registry."""
        self.config = config or settings
        self.templates = dict(DEFAULT_TEMPLATES if templates is None else templates)

    def get_template(self, template: str | MailTemplate) -> MailTemplate | None:
        """Resolve a template code to a template."""
        if isinstance(template, MailTemplate):
            return template
        return self.templates.get(template)

    def build_message(
        self, email: str, template: MailTemplate, data: dict[str, Any]
    ) -> EmailMessage:
        """Build the message for a single recipient."""
        values = {"site_name": self.config.mail_from_name, **data}
        subject, body = template.render(values)

        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = formataddr((self.config.mail_from_name, self.config.mail_from_address))
        message["To"] = email
        message.set_content(body)
        return message

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(
            self.config.smtp_host,
            self.config.smtp_port,
            timeout=self.config.smtp_timeout,
        ) as smtp:
            if self.config.smtp_use_tls:
                smtp.starttls()
            if self.config.smtp_username:
                smtp.login(self.config.smtp_username, self.config.smtp_password)
            smtp.send_message(message)

    async def send_mail(
        self,
        email: str,
        template: str | MailTemplate,
        data: dict[str, Any] | None = None,
    ) -> bool:
        """
        Send a templated email.

        Args:
            email: Recipient address
            template: Template code or an explicit template
            data: Placeholder values

        Returns:
            True if the message was handed to the SMTP server
        """
        resolved = self.get_template(template)
        if resolved is None:
            logger.warning("mail_template_not_found", template=str(template))
            return False

        if not email:
            logger.warning("mail_recipient_missing", template=resolved.code)
            return False

        if not self.config.mail_enabled:
            logger.warning("mail_disabled", template=resolved.code, recipient=email)
            return False

        message = self.build_message(email, resolved, data or {})

        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("mail_send_failed", template=resolved.code, recipient=email, error=str(e))
            return False

        logger.info("mail_sent", template=resolved.code, recipient=email)
        return True
