"""Outbound mail transports.

``SmtpMailTransport`` delivers through an SMTP relay. ``ConsoleMailTransport``
only logs the message and is selected when no SMTP host is configured.
"""

import logging
import smtplib
from dataclasses import dataclass, field
from email.message import EmailMessage
from email.utils import formataddr, make_msgid, parseaddr
from typing import List, Optional, Protocol

from invoicedesk.app.core.settings import get_settings

logger = logging.getLogger(__name__)


@dataclass
class MailAttachment:
    filename: str
    content: bytes
    content_type: str = "application/pdf"


@dataclass
class OutgoingMail:
    sender: str
    to: List[str]
    subject: str
    text: str
    html: Optional[str] = None
    cc: List[str] = field(default_factory=list)
    bcc: List[str] = field(default_factory=list)
    attachments: List[MailAttachment] = field(default_factory=list)

    @property
    def recipients(self) -> List[str]:
        return [*self.to, *self.cc, *self.bcc]


@dataclass
class DeliveryReceipt:
    message_id: str
    recipients: List[str]


class MailTransport(Protocol):
    def send(self, mail: OutgoingMail) -> DeliveryReceipt:
        ...

    def verify(self) -> None:
        ...


def build_email_message(mail: OutgoingMail) -> EmailMessage:
    message = EmailMessage()
    message["From"] = mail.sender
    message["To"] = ", ".join(mail.to)
    if mail.cc:
        message["Cc"] = ", ".join(mail.cc)
    message["Subject"] = mail.subject
    message["Message-ID"] = make_msgid(domain=parseaddr(mail.sender)[1].partition("@")[2] or None)
    message.set_content(mail.text)
    if mail.html:
        message.add_alternative(mail.html, subtype="html")
    for attachment in mail.attachments:
        maintype, _, subtype = attachment.content_type.partition("/")
        message.add_attachment(
            attachment.content,
            maintype=maintype,
            subtype=subtype or "octet-stream",
            filename=attachment.filename,
        )
    return message


class SmtpMailTransport:
    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        timeout: float = 30,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    def _connect(self) -> smtplib.SMTP:
        client = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        try:
            if self.use_tls:
                client.starttls()
            if self.username:
                client.login(self.username, self.password)
        except Exception:
            client.close()
            raise
        return client

    def send(self, mail: OutgoingMail) -> DeliveryReceipt:
        message = build_email_message(mail)
        # Bcc goes on the envelope only, never in the headers.
        with self._connect() as client:
            client.send_message(message, to_addrs=mail.recipients)
        logger.info("Sent mail %s via %s:%s to %s", message["Message-ID"], self.host, self.port, mail.recipients)
        return DeliveryReceipt(message_id=message["Message-ID"], recipients=mail.recipients)

    def verify(self) -> None:
        with self._connect() as client:
            client.noop()


class ConsoleMailTransport:
    def __init__(self):
        self.sent: List[EmailMessage] = []

    def send(self, mail: OutgoingMail) -> DeliveryReceipt:
        message = build_email_message(mail)
        self.sent.append(message)
        logger.info(
            "Console mail %s to %s: %s (%d attachment(s))",
            message["Message-ID"],
            mail.recipients,
            mail.subject,
            len(mail.attachments),
        )
        return DeliveryReceipt(message_id=message["Message-ID"], recipients=mail.recipients)

    def verify(self) -> None:
        return None


def format_sender(name: str, email: str) -> str:
    return formataddr((name, email))


def get_mail_transport() -> MailTransport:
    settings = get_settings()
    if not settings.smtp_host:
        return ConsoleMailTransport()
    return SmtpMailTransport(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_username,
        password=settings.smtp_password,
        use_tls=settings.smtp_use_tls,
    )
