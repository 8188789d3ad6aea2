"""
IMAP mail source: fetches the most recent message from the configured mailbox.

The blocking ``imaplib`` session runs in a worker thread so the request's
event loop is never blocked on the mail server.
"""

import asyncio
import email
import imaplib
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from email import policy
from email.message import EmailMessage
from email.utils import parseaddr, parsedate_to_datetime

from app.config import Settings
from app.exceptions import ConfigurationError, UpstreamFailure
from app.inquiry_intake.normalizers import coerce_text, normalize_subject

logger = logging.getLogger("intake.mail")

_UID_PATTERN = re.compile(rb"UID (\d+)")
_HTML_TAG = re.compile(r"<[^>]+>")

IMAPError = imaplib.IMAP4.error


@dataclass
class MailMessage:
    """The latest message in the mailbox, reduced to what extraction needs."""

    uid: int | None
    message_id: str
    subject: str
    subject_norm: str
    sender: str
    text: str
    sent_at: datetime


def _part_text(part: EmailMessage) -> str:
    try:
        return part.get_content()
    except (LookupError, UnicodeDecodeError) as e:
        # Unknown or lying charset
        logger.warning("Decoding %s body failed (%s); falling back to utf-8", part.get_content_type(), e)
        payload = part.get_payload(decode=True) or b""
        return payload.decode("utf-8", "replace")


def _body_text(message: EmailMessage) -> str:
    part = message.get_body(preferencelist=("plain",))
    if part is not None:
        return coerce_text(_part_text(part))
    part = message.get_body(preferencelist=("html",))
    if part is not None:
        return coerce_text(_HTML_TAG.sub(" ", _part_text(part)))
    return ""


def _sent_at(message: EmailMessage) -> datetime:
    raw_date = message.get("Date")
    if raw_date:
        try:
            sent_at = parsedate_to_datetime(str(raw_date))
        except (TypeError, ValueError):
            sent_at = None
        if sent_at is not None:
            if sent_at.tzinfo is None:
                sent_at = sent_at.replace(tzinfo=timezone.utc)
            return sent_at.astimezone(timezone.utc)
    return datetime.now(timezone.utc)


def parse_message(raw: bytes, uid: int | None = None) -> MailMessage:
    """Parse an RFC 822 message into a MailMessage."""
    message = email.message_from_bytes(raw, policy=policy.default)
    subject = coerce_text(message.get("Subject"))
    _, sender = parseaddr(str(message.get("From") or ""))
    return MailMessage(
        uid=uid,
        message_id=coerce_text(message.get("Message-ID")),
        subject=subject,
        subject_norm=normalize_subject(subject),
        sender=sender.strip().lower(),
        text=_body_text(message),
        sent_at=_sent_at(message),
    )


class MailService:
    def __init__(self, settings: Settings):
        self.host = settings.imap_host.strip()
        self.port = settings.imap_port
        self.secure = settings.imap_secure
        self.user = settings.imap_user.strip()
        self.password = settings.imap_password
        self.mailbox = settings.imap_mailbox.strip() or "INBOX"
        self.timeout = settings.imap_timeout_seconds

    def check_configured(self) -> None:
        if not self.host or not self.user or not self.password:
            raise ConfigurationError("Missing IMAP_HOST/IMAP_USER/IMAP_PASSWORD")

    async def fetch_latest(self) -> MailMessage:
        """Fetch and parse the most recent message in the mailbox."""
        self.check_configured()
        logger.info("Fetching latest message from %s@%s/%s", self.user, self.host, self.mailbox)
        uid, raw = await asyncio.to_thread(self._fetch_latest_raw)
        mail = parse_message(raw, uid)
        logger.info("Fetched message uid=%s subject=%r from %s", mail.uid, mail.subject, mail.sender)
        return mail

    def _connect(self) -> imaplib.IMAP4:
        if self.secure:
            return imaplib.IMAP4_SSL(self.host, self.port, timeout=self.timeout)
        return imaplib.IMAP4(self.host, self.port, timeout=self.timeout)

    def _fetch_latest_raw(self) -> tuple[int | None, bytes]:
        try:
            client = self._connect()
        except (OSError, IMAPError) as e:
            raise UpstreamFailure(f"IMAP connection failed: {e}") from e

        try:
            client.login(self.user, self.password)
            status, data = client.select(self.mailbox, readonly=True)
            if status != "OK":
                raise UpstreamFailure(f"Unable to open mailbox {self.mailbox}.", code=status)

            exists = int(data[0] or 0)
            if exists == 0:
                raise UpstreamFailure("Mailbox is empty.")

            status, fetched = client.fetch(str(exists), "(UID RFC822)")
            envelope = next((part for part in fetched or [] if isinstance(part, tuple)), None)
            if status != "OK" or envelope is None or not envelope[1]:
                raise UpstreamFailure("Unable to fetch latest message.", code=status)

            uid_match = _UID_PATTERN.search(envelope[0])
            uid = int(uid_match.group(1)) if uid_match else None
            return uid, envelope[1]
        except IMAPError as e:
            raise UpstreamFailure(f"IMAP error: {e}") from e
        except OSError as e:
            raise UpstreamFailure(f"IMAP connection failed: {e}") from e
        finally:
            try:
                client.logout()
            except (OSError, IMAPError) as e:
                logger.debug("IMAP logout failed: %s", e)
