# =============================================================================
# SMTP Transport
# =============================================================================
# Delivers built messages over SMTP.
#
# Key responsibilities:
#   - Connection management with SSL/STARTTLS
#   - Authentication (explicit password or system keyring)
#   - Sending a frozen Message to every envelope recipient
#
# Uses aiosmtplib for async operations. All connection settings come from
# the Message's Session; the transport holds no configuration of its own.
# =============================================================================

import logging
from typing import TYPE_CHECKING

import aiosmtplib
import keyring

from mailwright.errors import ErrorKind, MailwrightError

if TYPE_CHECKING:
    from mailwright.core import Message
    from mailwright.transport.session import Session

logger = logging.getLogger(__name__)


class SMTPTransport:
    """
    Async SMTP transport.

    Usage:
        >>> async with SMTPTransport(message.session) as transport:
        ...     await transport.send(message)

    Attributes:
        session: Connection settings (host, port, security, timeouts).
    """

    def __init__(self, session: "Session") -> None:
        """
        Initialize the transport.

        Args:
            session: Session the messages were built against.
        """
        self.session = session
        self._client: aiosmtplib.SMTP | None = None

    @property
    def is_connected(self) -> bool:
        """Check if transport is connected."""
        return self._client is not None and self._client.is_connected

    async def __aenter__(self) -> "SMTPTransport":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()

    async def connect(self) -> bool:
        """
        Connect to the SMTP server and log in if the session has a username.

        Returns:
            True if connection succeeded.

        Raises:
            TransportConnectionError: If unable to connect.
            TransportAuthenticationError: If authentication fails.
        """
        session = self.session
        logger.info(f"Connecting to SMTP {session.host}:{session.port}")

        try:
            self._client = aiosmtplib.SMTP(
                hostname=session.host,
                port=session.port,
                use_tls=session.security == "ssl",
                start_tls=session.security == "starttls",
                timeout=session.connection_timeout_ms / 1000,
            )
            await self._client.connect()
            # Connection timeout only covers the handshake
            self._client.timeout = session.socket_timeout_ms / 1000
            logger.debug("SMTP connection established")

            if session.requires_auth:
                await self._authenticate()

            logger.info(f"Successfully connected to SMTP {session.host}")
            return True

        except TransportAuthenticationError:
            self._client = None
            raise
        except aiosmtplib.SMTPAuthenticationError as e:
            self._client = None
            raise TransportAuthenticationError(
                f"SMTP authentication failed for {session.username}: {e}"
            ) from e
        except aiosmtplib.SMTPException as e:
            self._client = None
            raise TransportConnectionError(
                f"Failed to connect to SMTP {session.host}:{session.port}: {e}"
            ) from e
        except OSError as e:
            self._client = None
            raise TransportConnectionError(
                f"Failed to connect to SMTP {session.host}:{session.port}: {e}"
            ) from e

    async def _authenticate(self) -> None:
        """
        Log in with the session's credentials.

        Raises:
            TransportAuthenticationError: If login fails or no password is known.
        """
        session = self.session
        password = session.password
        if password is None:
            password = keyring.get_password(session.keyring_service, session.username)

        if not password:
            raise TransportAuthenticationError(
                f"No password found in keyring for {session.username}. "
                f"Set it with: keyring set {session.keyring_service} {session.username}"
            )

        logger.debug(f"Authenticating as {session.username}")

        try:
            await self._client.login(session.username, password)
            logger.debug("SMTP authentication successful")
        except aiosmtplib.SMTPAuthenticationError as e:
            raise TransportAuthenticationError(
                f"SMTP authentication failed for {session.username}: {e}"
            ) from e

    async def disconnect(self) -> None:
        """Disconnect from the SMTP server."""
        if self._client and self._client.is_connected:
            try:
                logger.debug("Disconnecting from SMTP")
                await self._client.quit()
            except aiosmtplib.SMTPException as e:
                logger.warning(f"Error during SMTP disconnect: {e}")
            finally:
                self._client = None

    async def send(self, message: "Message") -> str:
        """
        Send a built message.

        Args:
            message: The frozen message, as returned by EmailComposer.build().

        Returns:
            Message-ID of the sent message.

        Raises:
            SendError: If sending fails.
        """
        if not self.is_connected:
            raise SendError("Not connected to SMTP server")

        if not message.raw:
            raise SendError("Message has no rendered content to send")

        recipients = [a.email for a in message.recipients]
        if not recipients:
            raise SendError("No recipients specified")

        try:
            logger.info(f"Sending email to {', '.join(recipients)}")
            await self._client.sendmail(
                message.envelope_sender.email,
                recipients,
                message.raw,
            )
            logger.info(f"Email sent successfully: {message.message_id}")
            return message.message_id

        except aiosmtplib.SMTPException as e:
            logger.error(f"Failed to send email: {e}")
            raise SendError(f"Failed to send email: {e}") from e


class TransportError(MailwrightError):
    """Base exception for SMTP transport operations."""
    kind = ErrorKind.TRANSPORT


class TransportConnectionError(TransportError):
    """Raised when unable to connect to SMTP server."""
    pass


class TransportAuthenticationError(TransportError):
    """Raised when SMTP authentication fails."""
    pass


class SendError(TransportError):
    """Raised when email sending fails."""
    pass
