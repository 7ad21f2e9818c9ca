# =============================================================================
# Email Composer
# =============================================================================
# Accumulates everything needed to send an email (sender, recipients,
# headers, content, transport settings), validates it, and builds a frozen
# Message exactly once.
#
# Key rules:
#   - Every address is validated the moment it's added. A batch of
#     addresses is all-or-nothing: one bad entry rejects the whole batch
#     and the composer is left exactly as it was.
#   - Empty header names/values, line breaks in headers or the subject,
#     and double builds are usage errors
#     (InvalidArgumentError, AlreadyBuiltError), not validation errors.
#   - build() is the only state transition (NOT_BUILT -> BUILT).
#   - The session is created lazily and cached for the composer's
#     lifetime. Changing the host name afterwards does NOT refresh it.
#
# The composer is not thread-safe; serialize access externally.
# =============================================================================

import codecs
import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from mailwright.core import Address, BuildState, Message, RecipientKind, validate_address
from mailwright.errors import (
    AlreadyBuiltError,
    EmptyInputError,
    InvalidArgumentError,
    MissingHostError,
    MissingRecipientError,
    MissingSenderError,
)
from mailwright.transport.client import SMTPTransport
from mailwright.transport.mime import MessageFactory, MimeMessageFactory
from mailwright.transport.session import (
    DEFAULT_SMTP_PORT,
    DEFAULT_TIMEOUT_MS,
    SECURITY_MODES,
    Session,
    SessionFactory,
    SMTPSessionFactory,
)

if TYPE_CHECKING:
    from mailwright.config import TransportConfig

logger = logging.getLogger(__name__)

# A batch entry is either "addr@example.org" or ("addr@example.org", "Name")
AddressInput = str | tuple[str, str | None]


class EmailComposer:
    """
    Mutable builder for a single email message.

    Usage:
        >>> composer = EmailComposer()
        >>> composer.set_host_name("mail.example.org")
        >>> composer.set_from("a@example.org")
        >>> composer.add_to("b@example.org")
        >>> composer.set_content("hi", "text/plain")
        >>> message = composer.build()

    Args:
        session_factory: Creates the Session on first use.
                         Defaults to SMTPSessionFactory.
        message_factory: Materializes the Message on build.
                         Defaults to MimeMessageFactory.
    """

    def __init__(
        self,
        session_factory: SessionFactory | None = None,
        message_factory: MessageFactory | None = None,
    ) -> None:
        self._session_factory = session_factory or SMTPSessionFactory()
        self._message_factory = message_factory or MimeMessageFactory()

        # Addressing
        self._from: Address | None = None
        self._addresses: dict[RecipientKind, list[Address]] = {
            kind: [] for kind in RecipientKind
        }
        self._bounce_address: Address | None = None

        # Content
        self._headers: dict[str, str] = {}
        self._subject = ""
        self._body: str | None = None
        self._content_type: str | None = None
        self._charset = "utf-8"
        self._sent_date: datetime | None = None

        # Transport settings (handed to the session factory)
        self._host_name: str | None = None
        self._smtp_port = DEFAULT_SMTP_PORT
        self._security = "none"
        self._connection_timeout_ms = DEFAULT_TIMEOUT_MS
        self._socket_timeout_ms = DEFAULT_TIMEOUT_MS
        self._username = ""
        self._password: str | None = None

        # Lifecycle
        self._session: Session | None = None
        self._state = BuildState.NOT_BUILT
        self._message: Message | None = None

    @classmethod
    def from_config(cls, config: "TransportConfig", **factories: Any) -> "EmailComposer":
        """
        Create a composer pre-loaded with a TransportConfig profile.

        Args:
            config: Transport profile to apply.
            **factories: Passed to the constructor (session_factory, message_factory).
        """
        composer = cls(**factories)
        composer.set_host_name(config.host_name)
        composer.set_smtp_port(config.smtp_port)
        composer.set_security(config.security)
        composer.set_socket_connection_timeout(config.connection_timeout_ms)
        composer.set_socket_timeout(config.socket_timeout_ms)
        composer.set_charset(config.charset)
        if config.username:
            composer.set_authentication(config.username)
        if config.bounce_address:
            composer.set_bounce_address(config.bounce_address)
        return composer

    # =========================================================================
    # Recipients
    # =========================================================================

    def add_addresses(self, kind: RecipientKind, inputs: Iterable[AddressInput] | None) -> None:
        """
        Validate a batch of addresses and append it to one of the lists.

        Args:
            kind: Which list to extend (To, Cc, Bcc or Reply-To).
            inputs: Address strings or (address, personal_name) tuples.

        Raises:
            EmptyInputError: If inputs is None or empty.
            InvalidAddressError: If any entry is invalid. Nothing is added.
        """
        validated = self._validate_batch(kind, inputs)
        self._addresses[kind].extend(validated)
        logger.debug(f"Added {len(validated)} {kind.value} address(es)")

    def set_addresses(self, kind: RecipientKind, inputs: Iterable[AddressInput] | None) -> None:
        """
        Validate a batch of addresses and replace one of the lists with it.

        Raises:
            EmptyInputError: If inputs is None or empty.
            InvalidAddressError: If any entry is invalid. The list is unchanged.
        """
        validated = self._validate_batch(kind, inputs)
        self._addresses[kind] = validated
        logger.debug(f"Replaced {kind.value} with {len(validated)} address(es)")

    def add_to(self, *emails: str, name: str | None = None) -> None:
        """Add one or more "To" recipients. name applies to a single address."""
        self.add_addresses(RecipientKind.TO, _named(emails, name))

    def add_cc(self, *emails: str, name: str | None = None) -> None:
        """Add one or more "Cc" recipients."""
        self.add_addresses(RecipientKind.CC, _named(emails, name))

    def add_bcc(self, *emails: str, name: str | None = None) -> None:
        """Add one or more "Bcc" recipients."""
        self.add_addresses(RecipientKind.BCC, _named(emails, name))

    def add_reply_to(self, *emails: str, name: str | None = None) -> None:
        """Add one or more Reply-To addresses."""
        self.add_addresses(RecipientKind.REPLY_TO, _named(emails, name))

    def set_to(self, inputs: Iterable[AddressInput] | None) -> None:
        self.set_addresses(RecipientKind.TO, inputs)

    def set_cc(self, inputs: Iterable[AddressInput] | None) -> None:
        self.set_addresses(RecipientKind.CC, inputs)

    def set_bcc(self, inputs: Iterable[AddressInput] | None) -> None:
        self.set_addresses(RecipientKind.BCC, inputs)

    def set_reply_to(self, inputs: Iterable[AddressInput] | None) -> None:
        self.set_addresses(RecipientKind.REPLY_TO, inputs)

    @property
    def to_addresses(self) -> list[Address]:
        return list(self._addresses[RecipientKind.TO])

    @property
    def cc_addresses(self) -> list[Address]:
        return list(self._addresses[RecipientKind.CC])

    @property
    def bcc_addresses(self) -> list[Address]:
        return list(self._addresses[RecipientKind.BCC])

    @property
    def reply_to_addresses(self) -> list[Address]:
        return list(self._addresses[RecipientKind.REPLY_TO])

    def _validate_batch(self, kind: RecipientKind, inputs: Iterable[AddressInput] | None) -> list[Address]:
        """Validate every entry before anything is stored."""
        if isinstance(inputs, str):
            # A bare address is a batch of one
            inputs = [inputs]
        entries = list(inputs) if inputs is not None else []
        if not entries:
            raise EmptyInputError(f"{kind.value} address list provided was invalid (null or empty)")
        return [_parse_entry(entry) for entry in entries]

    # =========================================================================
    # Headers
    # =========================================================================

    def add_header(self, name: str, value: str) -> None:
        """
        Add (or overwrite) a custom header.

        Raises:
            InvalidArgumentError: If name or value is None or empty.
        """
        _check_header(name, value)
        self._headers[name] = value

    def set_headers(self, headers: Mapping[str, str]) -> None:
        """
        Replace all custom headers.

        Raises:
            InvalidArgumentError: If any name or value is None or empty.
                                  Existing headers are kept in that case.
        """
        if headers is None:
            raise InvalidArgumentError("Headers cannot be None")
        for name, value in headers.items():
            _check_header(name, value)
        self._headers = dict(headers)

    def get_header(self, name: str) -> str | None:
        return self._headers.get(name)

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._headers)

    # =========================================================================
    # Sender and Content
    # =========================================================================

    def set_from(self, address: str, personal_name: str | None = None) -> None:
        """
        Set the From address.

        Raises:
            InvalidAddressError: If the address is invalid. The previous
                                 sender is kept.
        """
        self._from = validate_address(address, personal_name)

    @property
    def from_address(self) -> Address | None:
        return self._from

    def set_bounce_address(self, address: str | None) -> None:
        """
        Set the envelope sender (SMTP MAIL FROM). None clears it.

        Raises:
            InvalidAddressError: If the address is invalid.
        """
        self._bounce_address = validate_address(address) if address is not None else None

    @property
    def bounce_address(self) -> Address | None:
        return self._bounce_address

    def set_subject(self, subject: str | None) -> None:
        """
        Raises:
            InvalidArgumentError: If the subject contains a line break.
        """
        if subject and _has_line_break(subject):
            raise InvalidArgumentError("Subject may not contain line breaks")
        self._subject = subject or ""

    @property
    def subject(self) -> str:
        return self._subject

    def set_content(self, body: str, content_type: str) -> None:
        """
        Set the message body and its content type, stored verbatim.

        Raises:
            InvalidArgumentError: If body or content_type is None.
        """
        if body is None or content_type is None:
            raise InvalidArgumentError("Content body and content type cannot be None")
        self._body = body
        self._content_type = content_type

    @property
    def body(self) -> str | None:
        return self._body

    @property
    def content_type(self) -> str | None:
        return self._content_type

    def set_charset(self, charset: str) -> None:
        """
        Set the charset used for text bodies.

        Raises:
            InvalidArgumentError: If Python doesn't know the charset.
        """
        try:
            codecs.lookup(charset)
        except (LookupError, TypeError) as e:
            raise InvalidArgumentError(f"Unknown charset: {charset!r}") from e
        self._charset = charset

    @property
    def charset(self) -> str:
        return self._charset

    def set_sent_date(self, sent_date: datetime | None) -> None:
        """Set the Date header value. None restores the default (build time)."""
        self._sent_date = sent_date

    @property
    def sent_date(self) -> datetime:
        """The stored sent date, or the current time if none was set."""
        if self._sent_date is None:
            return datetime.now().astimezone()
        return self._sent_date

    # =========================================================================
    # Transport Settings
    # =========================================================================

    def set_host_name(self, host_name: str | None) -> None:
        """Set the SMTP host. Empty or blank values clear it."""
        host_name = host_name.strip() if host_name else ""
        self._host_name = host_name or None

    @property
    def host_name(self) -> str | None:
        return self._host_name

    def set_smtp_port(self, port: int) -> None:
        """
        Raises:
            InvalidArgumentError: If port is less than 1.
        """
        if port < 1:
            raise InvalidArgumentError(f"Cannot connect to a port number that is less than 1 ({port})")
        self._smtp_port = port

    @property
    def smtp_port(self) -> int:
        return self._smtp_port

    def set_security(self, security: str) -> None:
        """
        Raises:
            InvalidArgumentError: If security isn't "none", "ssl" or "starttls".
        """
        if security not in SECURITY_MODES:
            raise InvalidArgumentError(
                f"Unknown security mode {security!r}, expected one of {SECURITY_MODES}"
            )
        self._security = security

    @property
    def security(self) -> str:
        return self._security

    def set_socket_connection_timeout(self, timeout_ms: int) -> None:
        # Negative values are passed through to the transport unchanged
        self._connection_timeout_ms = timeout_ms

    @property
    def socket_connection_timeout(self) -> int:
        return self._connection_timeout_ms

    def set_socket_timeout(self, timeout_ms: int) -> None:
        self._socket_timeout_ms = timeout_ms

    @property
    def socket_timeout(self) -> int:
        return self._socket_timeout_ms

    def set_authentication(self, username: str, password: str | None = None) -> None:
        """
        Set SMTP login credentials.

        Args:
            username: Login name.
            password: Password. If omitted, it's read from the system
                      keyring when the message is sent.
        """
        self._username = username or ""
        self._password = password

    @property
    def username(self) -> str:
        return self._username

    # =========================================================================
    # Session
    # =========================================================================

    def get_session(self) -> Session:
        """
        Return the transport session, creating it on first call.

        The session is cached for the lifetime of this composer. Later
        changes to the host name or timeouts do not affect it.

        Raises:
            MissingHostError: If no session exists yet and no host is set.
        """
        if self._session is not None:
            return self._session

        if self._host_name is None:
            raise MissingHostError("Cannot find valid hostname for mail session")

        self._session = self._session_factory.create(
            self._host_name,
            self._connection_timeout_ms,
            port=self._smtp_port,
            security=self._security,
            socket_timeout_ms=self._socket_timeout_ms,
            username=self._username,
            password=self._password,
        )
        logger.debug(f"Created session for {self._host_name}")
        return self._session

    # =========================================================================
    # Build
    # =========================================================================

    @property
    def state(self) -> BuildState:
        return self._state

    @property
    def is_built(self) -> bool:
        return self._state is BuildState.BUILT

    @property
    def message(self) -> Message | None:
        """The built message, or None before build()."""
        return self._message

    def build(self) -> Message:
        """
        Validate the composer and freeze a Message.

        Can succeed only once per composer. A failed build leaves the
        composer unbuilt so the caller can fix the data and try again.

        Returns:
            The frozen Message.

        Raises:
            AlreadyBuiltError: If build() already succeeded.
            MissingSenderError: If no From address is set.
            MissingRecipientError: If To, Cc and Bcc are all empty.
            MissingHostError: If a session is needed and no host is set.
        """
        if self._state is BuildState.BUILT:
            raise AlreadyBuiltError("The message is already built")

        if self._from is None:
            raise MissingSenderError("From address required")

        if not any(self._addresses[kind] for kind in RecipientKind if kind.is_recipient):
            raise MissingRecipientError("At least one receiver address required")

        session = self.get_session()
        handle = self._message_factory.new_message(session)

        handle.set_sender(self._from)
        for kind, addresses in self._addresses.items():
            for address in addresses:
                handle.add_recipient(kind, address)
        handle.set_bounce_address(self._bounce_address)
        handle.set_subject(self._subject)
        if self._body is not None:
            handle.set_content(self._body, self._content_type, self._charset)
        for name, value in self._headers.items():
            handle.add_header(name, value)
        handle.set_sent_date(self.sent_date)

        message = handle.freeze()

        self._message = message
        self._state = BuildState.BUILT
        logger.info(f"Built message from {self._from.email} to {len(message.recipients)} recipient(s)")
        return message

    async def send(self) -> str:
        """
        Build the message (if not built yet) and deliver it over SMTP.

        Returns:
            Message-ID of the sent message.

        Raises:
            EmailValidationError: If the build fails.
            TransportError: If delivery fails.
        """
        message = self._message if self.is_built else self.build()
        async with SMTPTransport(message.session) as transport:
            return await transport.send(message)


class SimpleEmail(EmailComposer):
    """A composer for plain-text messages."""

    def set_msg(self, text: str) -> None:
        """
        Set a text/plain body.

        Raises:
            InvalidArgumentError: If text is None or empty.
        """
        if not text:
            raise InvalidArgumentError("Invalid message supplied")
        self.set_content(text, "text/plain")


# =============================================================================
# Helpers
# =============================================================================

def _named(emails: tuple[str, ...], name: str | None) -> list[AddressInput]:
    """Attach a display name to a single address."""
    if name is None:
        return list(emails)
    if len(emails) != 1:
        raise InvalidArgumentError("A display name can only be given with a single address")
    return [(emails[0], name)]


def _parse_entry(entry: AddressInput) -> Address:
    if isinstance(entry, tuple):
        if len(entry) != 2:
            raise InvalidArgumentError(f"Expected (address, name), got {entry!r}")
        return validate_address(entry[0], entry[1])
    return validate_address(entry)


def _check_header(name: str, value: str) -> None:
    if not name:
        raise InvalidArgumentError("name can not be null or empty")
    if not value:
        raise InvalidArgumentError("value can not be null or empty")
    if _has_line_break(name) or _has_line_break(value):
        raise InvalidArgumentError(f"Header {name!r} may not contain line breaks")


def _has_line_break(text: str) -> bool:
    return "\r" in text or "\n" in text
