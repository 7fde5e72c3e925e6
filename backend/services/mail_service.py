"""
Mail service — SMTP delivery of transactional email.

MailSender.send() is the only entry point used by the enrollment and
receipt flows. Delivery runs in the blocking-I/O thread pool; any SMTP or
socket failure surfaces as EmailDeliveryError.
"""
import logging
import smtplib
from dataclasses import dataclass, field
from email.message import EmailMessage

from domain.errors import EmailDeliveryError
from services.async_executor import run_blocking

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MailConfig:
    host: str
    port: int = 587
    user: str = ""
    password: str = field(default="", repr=False)
    sender: str = "no-reply@localhost"
    use_tls: bool = True
    timeout_seconds: float = 20.0

    @classmethod
    def from_settings(cls, settings) -> "MailConfig":
        return cls(
            host=settings.mail_host,
            port=settings.mail_port,
            user=settings.mail_user,
            password=settings.mail_password.get_secret_value(),
            sender=settings.mail_from,
            use_tls=settings.mail_use_tls,
            timeout_seconds=settings.mail_timeout_seconds,
        )


def build_message(sender: str, to_email: str, subject: str, body_html: str) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = sender
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content("This message requires an HTML-capable mail client.")
    msg.add_alternative(body_html, subtype="html")
    return msg


class MailSender:
    def __init__(self, config: MailConfig):
        self.config = config

    def _deliver(self, msg: EmailMessage) -> None:
        cfg = self.config
        with smtplib.SMTP(cfg.host, cfg.port, timeout=cfg.timeout_seconds) as smtp:
            if cfg.use_tls:
                smtp.starttls()
            if cfg.user:
                smtp.login(cfg.user, cfg.password)
            smtp.send_message(msg)

    async def send(self, to_email: str, subject: str, body_html: str) -> None:
        """
        Deliver one HTML email.

        Raises:
            EmailDeliveryError if the sender is unconfigured, unreachable, or rejects the message
        """
        if not self.config.host:
            logger.error("MAIL_HOST not configured, cannot send email")
            raise EmailDeliveryError()
        if not to_email:
            raise EmailDeliveryError("Recipient email address missing")

        msg = build_message(self.config.sender, to_email, subject, body_html)
        try:
            await run_blocking(self._deliver, msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Email to {to_email} failed ({subject!r}): {e.__class__.__name__}: {e}")
            raise EmailDeliveryError() from e

        logger.info(f"Email sent to {to_email}: {subject!r}")
