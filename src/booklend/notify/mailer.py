"""SMTP e-mail notifier.

Renders reminder templates and delivers them synchronously through
``smtplib``. Every failure, including missing credentials, is reported as a
failed ``DeliveryResult``; nothing is retried here.
"""

import smtplib
from email.errors import MessageError
from email.message import EmailMessage
from email.utils import formataddr
from typing import Callable, Optional, Sequence

from ..config import Config, get_config
from ..exceptions import NotificationError, NotifierNotConfiguredError
from ..utils.logging import get_logger
from . import templates
from .schemas import DeliveryResult, LoanNotice, OverdueItem, ReminderKind

logger = get_logger(__name__)

UPCOMING_SUBJECT = "Reminder: Book due soon"
OVERDUE_SUBJECT = "Reminder: Book is overdue"
DIGEST_SUBJECT = "Reminder: You have {count} overdue book(s)"

_UPCOMING_ACCENT = "#4F46E5"
_OVERDUE_ACCENT = "#DC2626"


class EmailNotifier:
    """Notifier that sends HTML + text e-mail over SMTP."""

    def __init__(
        self,
        config: Optional[Config] = None,
        smtp_factory: Callable[..., smtplib.SMTP] = smtplib.SMTP,
        timeout: float = 30.0,
    ):
        """Initialize the notifier.

        Args:
            config: Application config holding the SMTP settings
            smtp_factory: Callable returning a connected SMTP client
            timeout: Socket timeout for the SMTP connection (seconds)
        """
        self.config = config or get_config()
        self._smtp_factory = smtp_factory
        self._timeout = timeout

    def is_configured(self) -> bool:
        """Check that SMTP credentials are present."""
        return self.config.has_smtp_config()

    def send_single(
        self, address: str, kind: ReminderKind, notice: LoanNotice
    ) -> DeliveryResult:
        """Send a single-loan reminder of the given kind."""
        if kind == ReminderKind.UPCOMING:
            subject = UPCOMING_SUBJECT
            sources = (templates.UPCOMING_HTML, templates.UPCOMING_TEXT)
            accent, heading = _UPCOMING_ACCENT, "BookLib Reminder"
        else:
            subject = OVERDUE_SUBJECT
            sources = (templates.OVERDUE_HTML, templates.OVERDUE_TEXT)
            accent, heading = _OVERDUE_ACCENT, "BookLib Overdue Notice"

        return self._deliver(address, subject, sources, accent, heading, notice=notice)

    def send_digest(self, address: str, items: Sequence[OverdueItem]) -> DeliveryResult:
        """Send one e-mail listing every overdue item for an owner."""
        items = list(items)
        if not items:
            return DeliveryResult.failure("empty digest")
        subject = DIGEST_SUBJECT.format(count=len(items))
        return self._deliver(
            address,
            subject,
            (templates.DIGEST_HTML, templates.DIGEST_TEXT),
            _OVERDUE_ACCENT,
            "BookLib Overdue Notice",
            items=items,
        )

    def _deliver(self, address, subject, sources, accent, heading, **context) -> DeliveryResult:
        try:
            if not self.is_configured():
                raise NotifierNotConfiguredError("not configured")
            html_body, text_body = templates.render(
                sources[0], sources[1], accent, heading, **context
            )
            message = self._build_message(address, subject, html_body, text_body)
            self._send(message)
        except NotifierNotConfiguredError:
            logger.warning("Email service not configured, skipping email to %s", address)
            return DeliveryResult.failure("not configured")
        except NotificationError as exc:
            logger.warning("Failed to render email to %s: %s", address, exc)
            return DeliveryResult.failure(str(exc))
        except (ValueError, MessageError) as exc:
            logger.warning("Failed to build email to %r: %s", address, exc)
            return DeliveryResult.failure(f"invalid message: {exc}")
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning("Failed to send email to %s: %s", address, exc)
            return DeliveryResult.failure(str(exc) or exc.__class__.__name__)

        logger.info("Successfully sent email to %s", address)
        return DeliveryResult.success()

    def _build_message(
        self, address: str, subject: str, html_body: str, text_body: str
    ) -> EmailMessage:
        message = EmailMessage()
        message["From"] = formataddr((self.config.smtp_from_name, self.config.smtp_from_email))
        message["To"] = address
        message["Subject"] = subject
        message.set_content(text_body)
        message.add_alternative(html_body, subtype="html")
        return message

    def _send(self, message: EmailMessage) -> None:
        cfg = self.config
        with self._smtp_factory(cfg.smtp_host, cfg.smtp_port, timeout=self._timeout) as smtp:
            if cfg.smtp_use_tls:
                smtp.starttls()
            smtp.login(cfg.smtp_username, cfg.smtp_password)
            smtp.send_message(message)
