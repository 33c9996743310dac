"""
Delivery of khata statements by email through an authenticated SMTP relay.

One attempt per call, no retry. The connection uses smtplib's default
socket timeout (none), so a slow relay blocks the calling request.
"""
import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr

from app.core.config import settings
from app.core.exceptions import ConfigurationError, DeliveryError

logger = logging.getLogger(__name__)

IMPLICIT_TLS_PORT = 465


def build_message(
    to_address: str,
    subject: str,
    body_text: str,
    attachment_bytes: bytes,
    attachment_name: str,
) -> EmailMessage:
    """multipart/mixed: UTF-8 text body plus a base64 PDF attachment."""
    message = EmailMessage()
    message["From"] = formataddr((settings.FROM_NAME, settings.sender_address))
    message["To"] = to_address
    message["Subject"] = subject
    message.set_content(body_text, charset="utf-8")
    message.add_attachment(
        attachment_bytes,
        maintype="application",
        subtype="pdf",
        filename=attachment_name,
    )
    return message


def _connect() -> smtplib.SMTP:
    port = int(settings.SMTP_PORT)
    if port == IMPLICIT_TLS_PORT:
        return smtplib.SMTP_SSL(settings.SMTP_HOST, port)

    client = smtplib.SMTP(settings.SMTP_HOST, port)
    try:
        client.ehlo()
        if client.has_extn("starttls"):
            client.starttls()
            client.ehlo()
    except BaseException:
        client.close()
        raise
    return client


def send_ledger_document(
    to_address: str,
    subject: str,
    body_text: str,
    attachment_bytes: bytes,
    attachment_name: str,
) -> None:
    """
    Send ``attachment_bytes`` as a PDF to ``to_address``.

    Raises:
        ConfigurationError: host, port, user or password is unset.
        DeliveryError: the relay refused the message or could not be reached;
            the message carries the transport's own error text.
    """
    if not settings.smtp_configured:
        raise ConfigurationError("SMTP configuration is missing")
    try:
        int(settings.SMTP_PORT)
    except ValueError:
        raise ConfigurationError(f"SMTP_PORT is not a number: {settings.SMTP_PORT!r}")

    message = build_message(to_address, subject, body_text, attachment_bytes, attachment_name)

    try:
        with _connect() as client:
            client.login(settings.SMTP_USER, settings.SMTP_PASS)
            client.send_message(message)
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"[Email] Delivery to {to_address} via {settings.SMTP_HOST} failed: {e}")
        raise DeliveryError(str(e) or type(e).__name__)

    logger.info(f"[Email] Sent {attachment_name} to {to_address}")
