import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from jinja2 import Environment, FileSystemLoader, TemplateNotFound
from sendgrid import SendGridAPIClient  # type: ignore
from sendgrid.helpers.mail import Content, From, Mail, ReplyTo, To  # type: ignore

from .settings import settings

logger = logging.getLogger(__name__)

SUPPORT_NAME = "EventHub Support"


class SendGridEmailService:
    """Email delivery through the SendGrid API with Jinja2 templates"""

    def __init__(self) -> None:
        self.sendgrid_enabled: bool = settings.email.emails_enabled

        if not self.sendgrid_enabled:
            logger.warning("SendGrid not configured. Email delivery disabled.")
        else:
            self.client = SendGridAPIClient(api_key=settings.email.SENDGRID_API_KEY)

        template_dir = Path(__file__).parent.parent / "templates" / "email"
        self.jinja_env = Environment(
            loader=FileSystemLoader(str(template_dir)), autoescape=True
        )

    def render_template(
        self, template_name: str, context: Dict[str, Any]
    ) -> Tuple[str, str]:
        """Render email templates (HTML and text versions)"""
        html_content = self.jinja_env.get_template(f"{template_name}.html").render(
            **context
        )
        try:
            text_template = self.jinja_env.get_template(f"{template_name}.txt")
            text_content = text_template.render(**context)
        except TemplateNotFound:
            text_content = re.sub(r"<[^>]+>", "", html_content)
            text_content = re.sub(r"\s+", " ", text_content).strip()
        return html_content, text_content

    def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: str,
        reply_to: Optional[str] = None,
    ) -> bool:
        """Send one email. Returns False when SendGrid is disabled or rejects it."""
        if not self.sendgrid_enabled:
            logger.info(f"SendGrid disabled. Would send to {to_email}: {subject}")
            return False

        mail = Mail(
            from_email=From(
                email=settings.email.SENDGRID_FROM_EMAIL,
                name=settings.email.SENDGRID_FROM_NAME,
            ),
            to_emails=To(to_email),
            subject=subject,
            html_content=Content("text/html", html_content),
            plain_text_content=Content("text/plain", text_content),
        )
        if reply_to:
            mail.reply_to = ReplyTo(reply_to)

        response = self.client.send(mail)

        if response.status_code in (200, 201, 202):
            logger.info(f"Email sent successfully to {to_email}")
            return True
        logger.error(f"SendGrid API error: {response.status_code} - {response.body}")
        return False

    def send_contact_message(self, message: Dict[str, Any]) -> bool:
        """Forward a contact form message to the support inbox"""
        inbox = settings.contact_inbox
        if not inbox:
            logger.warning("No contact inbox configured; dropping contact message")
            return False

        context = {
            "to_name": SUPPORT_NAME,
            "from_name": message["full_name"],
            "from_email": message["email"],
            "phone": message.get("phone") or "Not provided",
            "subject": message["subject"],
            "message": message["message"],
            "project_name": settings.PROJECT_NAME,
        }
        html_content, text_content = self.render_template("contact_message", context)
        return self.send_email(
            to_email=inbox,
            subject=f"[{settings.PROJECT_NAME} Contact] {message['subject']}",
            html_content=html_content,
            text_content=text_content,
            reply_to=message["email"],
        )

    def send_registration_confirmation(self, confirmation: Dict[str, Any]) -> bool:
        """Send the attendee a copy of their registration details"""
        context = {
            "confirmation": confirmation,
            "project_name": settings.PROJECT_NAME,
            "support_email": settings.contact_inbox,
        }
        html_content, text_content = self.render_template(
            "registration_confirmation", context
        )
        return self.send_email(
            to_email=confirmation["email"],
            subject=f"Registration Confirmed - {confirmation['event_title']}",
            html_content=html_content,
            text_content=text_content,
        )


email_service: SendGridEmailService = SendGridEmailService()
