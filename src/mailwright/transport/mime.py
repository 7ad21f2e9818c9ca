# =============================================================================
# Message Factory
# =============================================================================
# Turns composer state into a frozen Message.
#
# The composer never builds a Message directly. It asks a MessageFactory for
# a mutable MessageHandle, pushes every field into it, then calls freeze().
# This keeps the composer independent of how (or whether) MIME bytes are
# produced: tests plug in a factory that renders nothing, while the default
# MimeMessageFactory renders RFC 5322 bytes with the standard library's
# email package.
# =============================================================================

import email.policy
import logging
from datetime import datetime
from email.message import EmailMessage
from email.utils import format_datetime, make_msgid
from typing import Any, Protocol

from mailwright.core import Address, Message, RecipientKind

logger = logging.getLogger(__name__)

# Content type used when the composer has no content set
DEFAULT_CONTENT_TYPE = "text/plain"


class MessageHandle:
    """
    Mutable message under construction.

    Collects fields from the composer and turns them into a Message on
    freeze(). This base class renders no MIME bytes; subclasses override
    _render() to produce them.

    Attributes:
        session: The session the message is being built against.
    """

    def __init__(self, session: Any) -> None:
        self.session = session
        self.sender: Address | None = None
        self.recipients: dict[RecipientKind, list[Address]] = {
            kind: [] for kind in RecipientKind
        }
        self.headers: dict[str, str] = {}
        self.subject = ""
        self.body = ""
        self.content_type: str | None = None
        self.charset = "utf-8"
        self.sent_date: datetime | None = None
        self.bounce_address: Address | None = None
        self.message_id = ""
        self._frozen: Message | None = None

    # -------------------------------------------------------------------------
    # Population
    # -------------------------------------------------------------------------

    def set_sender(self, address: Address) -> None:
        self.sender = address

    def add_recipient(self, kind: RecipientKind, address: Address) -> None:
        self.recipients[kind].append(address)

    def add_header(self, name: str, value: str) -> None:
        self.headers[name] = value

    def set_subject(self, subject: str) -> None:
        self.subject = subject

    def set_content(self, body: str, content_type: str | None, charset: str = "utf-8") -> None:
        self.body = body
        self.content_type = content_type
        self.charset = charset

    def set_sent_date(self, sent_date: datetime) -> None:
        self.sent_date = sent_date

    def set_bounce_address(self, address: Address | None) -> None:
        self.bounce_address = address

    # -------------------------------------------------------------------------
    # Freezing
    # -------------------------------------------------------------------------

    def freeze(self) -> Message:
        """
        Produce the immutable Message.

        Calling freeze() again returns the same Message.

        Raises:
            ValueError: If no sender was set.
        """
        if self._frozen is not None:
            return self._frozen

        if self.sender is None:
            raise ValueError("Cannot freeze a message without a sender")

        raw = self._render()
        self._frozen = Message(
            sender=self.sender,
            to=self.recipients[RecipientKind.TO],
            cc=self.recipients[RecipientKind.CC],
            bcc=self.recipients[RecipientKind.BCC],
            reply_to=self.recipients[RecipientKind.REPLY_TO],
            subject=self.subject,
            body=self.body,
            content_type=self.content_type,
            charset=self.charset,
            headers=self.headers,
            sent_date=self.sent_date,
            bounce_address=self.bounce_address,
            message_id=self.message_id,
            session=self.session,
            raw=raw,
        )
        return self._frozen

    def _render(self) -> bytes:
        """Hook for subclasses that produce wire bytes."""
        return b""


class MessageFactory(Protocol):
    """Anything that can hand out a MessageHandle for a session."""

    def new_message(self, session: Any) -> MessageHandle:
        ...


class MimeMessageHandle(MessageHandle):
    """
    MessageHandle that renders the message with email.message.EmailMessage.

    Rendering rules:
        - Bcc recipients are never written to the headers (that's the
          point of Bcc); they only appear in the SMTP envelope.
        - A text/* content type is encoded with the configured charset.
          Any other type is sent as an opaque single part.
        - Custom headers are applied last and replace standard headers
          with the same name.
    """

    def _render(self) -> bytes:
        if not self.message_id:
            self.message_id = make_msgid(domain=self.sender.domain)

        msg = EmailMessage(policy=email.policy.SMTP)

        # Body first, so content headers sit after the envelope headers
        content_type = self.content_type or DEFAULT_CONTENT_TYPE
        maintype, subtype = _split_content_type(content_type)
        if maintype == "text":
            msg.set_content(self.body, subtype=subtype, charset=self.charset)
        else:
            msg.set_content(self.body.encode(self.charset), maintype=maintype, subtype=subtype)

        msg["From"] = str(self.sender)
        if self.recipients[RecipientKind.TO]:
            msg["To"] = _join(self.recipients[RecipientKind.TO])
        if self.recipients[RecipientKind.CC]:
            msg["Cc"] = _join(self.recipients[RecipientKind.CC])
        if self.recipients[RecipientKind.REPLY_TO]:
            msg["Reply-To"] = _join(self.recipients[RecipientKind.REPLY_TO])
        msg["Subject"] = self.subject
        if self.sent_date is not None:
            msg["Date"] = format_datetime(self.sent_date)
        msg["Message-ID"] = self.message_id

        for name, value in self.headers.items():
            del msg[name]
            msg[name] = value

        logger.debug(f"Rendered MIME message {self.message_id}")
        return msg.as_bytes()


class MimeMessageFactory:
    """
    Default message factory.

    Usage:
        >>> factory = MimeMessageFactory()
        >>> handle = factory.new_message(session)
        >>> handle.set_sender(validate_address("a@example.org"))
        >>> message = handle.freeze()
    """

    def new_message(self, session: Any) -> MimeMessageHandle:
        return MimeMessageHandle(session)


def _split_content_type(content_type: str) -> tuple[str, str]:
    """Split "text/html; charset=..." into ("text", "html")."""
    mime_type = content_type.split(";", 1)[0].strip().lower()
    if "/" not in mime_type:
        return "text", "plain"
    maintype, subtype = mime_type.split("/", 1)
    return maintype, subtype


def _join(addresses: list[Address]) -> str:
    return ", ".join(str(a) for a in addresses)
