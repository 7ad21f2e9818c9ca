# =============================================================================
# Message Model
# =============================================================================
# Represents a built email message. A Message is the frozen output of
# EmailComposer.build(): a snapshot of everything the composer held at the
# moment of the build, so later changes to the composer never leak into a
# message that has already been produced.
#
# Lists are stored as tuples and headers as a read-only mapping. The
# rendered MIME bytes (if the message factory produced any) are kept as
# bytes, which are immutable too.
# =============================================================================

import email
import email.policy
from dataclasses import dataclass, field
from datetime import datetime
from email.message import EmailMessage
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from mailwright.core.address import Address


class RecipientKind(Enum):
    """
    The address slots a composer can fill.

    TO, CC and BCC are recipients and count towards the "at least one
    recipient" rule. REPLY_TO is filled the same way but is never a
    delivery target.
    """
    TO = "To"
    CC = "Cc"
    BCC = "Bcc"
    REPLY_TO = "Reply-To"

    @property
    def is_recipient(self) -> bool:
        """Returns True for kinds that receive a copy of the message."""
        return self is not RecipientKind.REPLY_TO


class BuildState(Enum):
    """
    Build lifecycle of a composer.

    The only legal transition is NOT_BUILT -> BUILT, and it happens once.
    """
    NOT_BUILT = "not_built"
    BUILT = "built"


@dataclass(frozen=True)
class Message:
    """
    An immutable, fully populated email message.

    Attributes:
        sender: The From address.
        to: "To" recipients, in insertion order.
        cc: "Cc" recipients.
        bcc: "Bcc" recipients (envelope only, never rendered as a header).
        reply_to: Reply-To addresses.
        subject: Subject line.
        body: Message body, verbatim.
        content_type: Content type supplied with the body (e.g., "text/plain").
        charset: Charset used when rendering a text body.
        headers: Extra headers (read-only mapping).
        sent_date: Value of the Date header.
        bounce_address: Envelope sender, if different from the From address.
        message_id: RFC 5322 Message-ID assigned by the message factory.
        session: Session the message was built against.
        raw: Rendered RFC 5322 bytes, empty if the factory doesn't render.
    """
    sender: Address
    to: tuple[Address, ...] = ()
    cc: tuple[Address, ...] = ()
    bcc: tuple[Address, ...] = ()
    reply_to: tuple[Address, ...] = ()
    subject: str = ""
    body: str = ""
    content_type: str | None = None
    charset: str = "utf-8"
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    sent_date: datetime | None = None
    bounce_address: Address | None = None
    message_id: str = ""

    # Transport details, not part of message identity
    session: Any = field(default=None, compare=False, repr=False)
    raw: bytes = field(default=b"", compare=False, repr=False)

    def __post_init__(self) -> None:
        # Freeze whatever the factory handed us
        object.__setattr__(self, "to", tuple(self.to))
        object.__setattr__(self, "cc", tuple(self.cc))
        object.__setattr__(self, "bcc", tuple(self.bcc))
        object.__setattr__(self, "reply_to", tuple(self.reply_to))
        if not isinstance(self.headers, MappingProxyType):
            object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @property
    def recipients(self) -> list[Address]:
        """All delivery targets (To, then Cc, then Bcc)."""
        return [*self.to, *self.cc, *self.bcc]

    @property
    def envelope_sender(self) -> Address:
        """The address used for SMTP MAIL FROM."""
        return self.bounce_address or self.sender

    def to_mime(self) -> EmailMessage:
        """
        Parse the rendered bytes back into a standard library message.

        Returns a fresh EmailMessage on every call, so callers may modify
        it without affecting this Message.

        Raises:
            ValueError: If the message factory didn't render any bytes.
        """
        if not self.raw:
            raise ValueError("Message has no rendered MIME content")
        return email.message_from_bytes(self.raw, policy=email.policy.default)

    def __str__(self) -> str:
        """Human-readable representation."""
        to = ", ".join(a.email for a in self.to) or "(undisclosed)"
        return f"{self.sender.email} -> {to}: {self.subject}"
