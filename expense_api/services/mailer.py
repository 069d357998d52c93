import logging
import os
import smtplib
from decimal import Decimal
from email.message import EmailMessage
from typing import Iterable

from jinja2 import Environment, FileSystemLoader, select_autoescape

from expense_api.core.config import Settings

logger = logging.getLogger(__name__)

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "templates")

templates = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html"]),
)


def render_summary(total, items: Iterable[dict]) -> dict:
    """Build subject, html and text bodies for an expense summary mail."""
    total = Decimal(str(total))
    context = {"total": f"{total:.2f}", "items": list(items)}
    return {
        "subject": f"Your Expense Summary - Total: ${context['total']}",
        "html": templates.get_template("summary_email.html").render(**context),
        "text": templates.get_template("summary_email.txt").render(**context),
    }


class Mailer:
    """Sends expense summaries. ``send`` never raises; it reports success."""

    def send(self, recipient: str, total, items: Iterable[dict]) -> bool:
        raise NotImplementedError


class DisabledMailer(Mailer):
    def send(self, recipient: str, total, items: Iterable[dict]) -> bool:
        logger.warning("Mail credentials not configured, summary for %s not sent", recipient)
        return False


class SMTPMailer(Mailer):
    def __init__(self, host: str, port: int, user: str, password: str, use_tls: bool = True):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.use_tls = use_tls

    def build_message(self, recipient: str, total, items: Iterable[dict]) -> EmailMessage:
        rendered = render_summary(total, items)
        message = EmailMessage()
        message["From"] = f"Expense Tracker <{self.user}>"
        message["To"] = recipient
        message["Subject"] = rendered["subject"]
        message.set_content(rendered["text"])
        message.add_alternative(rendered["html"], subtype="html")
        return message

    def send(self, recipient: str, total, items: Iterable[dict]) -> bool:
        try:
            message = self.build_message(recipient, total, items)
            with smtplib.SMTP(self.host, self.port, timeout=30) as smtp:
                if self.use_tls:
                    smtp.starttls()
                smtp.login(self.user, self.password)
                smtp.send_message(message)
            logger.info("Expense summary sent to %s", recipient)
            return True
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Email sending error for %s: %s", recipient, e)
            return False


def build_mailer(settings: Settings) -> Mailer:
    if not settings.MAIL_ENABLED:
        return DisabledMailer()
    return SMTPMailer(
        host=settings.EMAIL_HOST,
        port=settings.EMAIL_PORT,
        user=settings.EMAIL_USER,
        password=settings.EMAIL_PASSWORD,
        use_tls=settings.EMAIL_USE_TLS,
    )
