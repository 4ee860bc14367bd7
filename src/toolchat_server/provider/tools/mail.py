"""E-mail tools backed by the configured SMTP relay."""

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from email.utils import make_msgid

from pydantic import BaseModel, Field

from toolchat_server.config import ToolchatSettings
from toolchat_server.provider.server import CapabilityServer, ToolEnvelope, text_content

logger = logging.getLogger(__name__)

SMTP_TIMEOUT_SECONDS = 30


class SendEmailArgs(BaseModel):
    to: str = Field(..., description="Recipient email address")
    subject: str = Field(..., description="Email subject")
    text: str = Field(..., description="Email plain text body")
    html: str | None = Field(None, description="Optional HTML body")


class SmtpMailer:
    """Sends mail through one SMTP relay.

    With ``secure`` set the connection uses implicit TLS (typically port 465);
    otherwise STARTTLS is negotiated when the relay offers it.
    """

    def __init__(
        self,
        host: str,
        port: int,
        user: str | None = None,
        password: str | None = None,
        secure: bool = False,
    ) -> None:
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.secure = secure

    @classmethod
    def from_settings(cls, settings: ToolchatSettings) -> "SmtpMailer":
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            user=settings.smtp_user,
            password=settings.smtp_password,
            secure=settings.smtp_secure,
        )

    def _connect(self) -> smtplib.SMTP:
        if self.secure:
            smtp: smtplib.SMTP = smtplib.SMTP_SSL(
                self.host, self.port, timeout=SMTP_TIMEOUT_SECONDS
            )
        else:
            smtp = smtplib.SMTP(self.host, self.port, timeout=SMTP_TIMEOUT_SECONDS)
            smtp.ehlo()
            if smtp.has_extn("starttls"):
                smtp.starttls()
                smtp.ehlo()
        try:
            if self.user and self.password:
                smtp.login(self.user, self.password)
        except BaseException:
            smtp.close()
            raise
        return smtp

    def build_message(
        self, to: str, subject: str, text: str, html: str | None = None
    ) -> EmailMessage:
        if not self.user:
            raise ValueError("SMTP user is not configured")
        if not to or not subject or not (text or html):
            raise ValueError("Missing required email fields")

        message = EmailMessage()
        message["From"] = self.user
        message["To"] = to
        message["Subject"] = subject
        message["Message-ID"] = make_msgid()
        message.set_content(text or "")
        if html:
            message.add_alternative(html, subtype="html")
        return message

    def send(self, message: EmailMessage) -> str:
        """Send a message and return its Message-ID (blocking)."""
        with self._connect() as smtp:
            smtp.send_message(message)
        return message.get("Message-ID", "")

    def verify(self) -> None:
        """Open and authenticate a connection, then close it (blocking)."""
        with self._connect() as smtp:
            smtp.noop()


def register(server: CapabilityServer, mailer: SmtpMailer) -> None:
    @server.tool("sendEmail", "Send an email using SMTP", SendEmailArgs)
    async def send_email(args: SendEmailArgs) -> ToolEnvelope:
        message = mailer.build_message(args.to, args.subject, args.text, args.html)
        message_id = await asyncio.to_thread(mailer.send, message)
        logger.info(f"Sent email to {args.to}")
        return text_content(
            f"Email sent successfully to {args.to}. Message ID: {message_id or 'n/a'}"
        )

    @server.tool("verifyEmailConnection", "Verify SMTP connection is working")
    async def verify_email_connection(args: BaseModel) -> ToolEnvelope:
        await asyncio.to_thread(mailer.verify)
        return text_content("SMTP connection verified successfully")
