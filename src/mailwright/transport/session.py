# =============================================================================
# Transport Session
# =============================================================================
# A Session is the transport configuration a message is built against:
# which SMTP host to talk to, on which port, with which security, how long
# to wait, and who to authenticate as.
#
# Sessions are produced by a SessionFactory. The composer only cares about
# the host name and the connection timeout; everything else is passed
# through untouched so other factories can accept options we don't know
# about.
# =============================================================================

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

logger = logging.getLogger(__name__)

# Default SMTP port (plain / opportunistic STARTTLS)
DEFAULT_SMTP_PORT = 25

# Default socket timeouts, in milliseconds
DEFAULT_TIMEOUT_MS = 60_000

# Accepted values for Session.security
SECURITY_MODES = ("none", "ssl", "starttls")


@dataclass(frozen=True)
class Session:
    """
    Immutable SMTP connection settings.

    Attributes:
        host: Hostname of the SMTP server (e.g., "mail.example.org").
        port: Port for the SMTP connection. Standard ports:
              - 25 for plain SMTP
              - 465 for SMTP with SSL
              - 587 for SMTP with STARTTLS
        security: Connection security method ("none", "ssl" or "starttls").
        connection_timeout_ms: How long to wait for the TCP connection.
        socket_timeout_ms: How long to wait on reads and writes.
        username: Login name, empty if the server doesn't need auth.
        password: Explicit password. When None the transport asks the
                  system keyring instead.
        options: Any extra transport options, passed through as-is.
    """
    host: str
    port: int = DEFAULT_SMTP_PORT
    security: str = "none"
    connection_timeout_ms: int = DEFAULT_TIMEOUT_MS
    socket_timeout_ms: int = DEFAULT_TIMEOUT_MS
    username: str = ""
    password: str | None = field(default=None, repr=False)
    options: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def requires_auth(self) -> bool:
        """Returns True if a login should be attempted."""
        return bool(self.username)

    @property
    def keyring_service(self) -> str:
        """
        Service name used for keyring password lookups.

        Passwords can be managed with the keyring CLI:
            keyring set mailwright:mail.example.org user@example.org
        """
        return f"mailwright:{self.host}"

    def __str__(self) -> str:
        return f"{self.host}:{self.port} ({self.security})"


class SessionFactory(Protocol):
    """Anything that can turn a host name and timeout into a session."""

    def create(self, host_name: str, timeout_ms: int, **options: Any) -> Session:
        ...


class SMTPSessionFactory:
    """
    Default session factory for SMTP delivery.

    Recognized options: port, security, socket_timeout_ms, username,
    password. Anything else is kept in Session.options.

    Usage:
        >>> factory = SMTPSessionFactory()
        >>> session = factory.create("mail.example.org", 60_000, port=587)
        >>> session.port
        587
    """

    def create(self, host_name: str, timeout_ms: int, **options: Any) -> Session:
        """
        Create a new Session.

        Raises:
            ValueError: If security isn't one of SECURITY_MODES.
        """
        security = options.pop("security", "none")
        if security not in SECURITY_MODES:
            raise ValueError(
                f"Unknown security mode {security!r}, expected one of {SECURITY_MODES}"
            )

        session = Session(
            host=host_name,
            port=options.pop("port", DEFAULT_SMTP_PORT),
            security=security,
            connection_timeout_ms=timeout_ms,
            socket_timeout_ms=options.pop("socket_timeout_ms", DEFAULT_TIMEOUT_MS),
            username=options.pop("username", ""),
            password=options.pop("password", None),
            options=options,
        )
        logger.debug(f"Created SMTP session for {session}")
        return session
