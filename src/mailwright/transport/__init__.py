# =============================================================================
# Transport Module
# =============================================================================
# The collaborators a composer builds and delivers through.
#
#   - Session / SMTPSessionFactory: SMTP connection settings
#   - MessageFactory / MimeMessageFactory: materializing frozen messages
#   - SMTPTransport: async delivery via aiosmtplib
# =============================================================================

from mailwright.transport.client import (
    SMTPTransport,
    TransportError,
    TransportConnectionError,
    TransportAuthenticationError,
    SendError,
)
from mailwright.transport.mime import (
    MessageFactory,
    MessageHandle,
    MimeMessageFactory,
    MimeMessageHandle,
)
from mailwright.transport.session import (
    DEFAULT_SMTP_PORT,
    DEFAULT_TIMEOUT_MS,
    SECURITY_MODES,
    Session,
    SessionFactory,
    SMTPSessionFactory,
)

__all__ = [
    "SMTPTransport",
    "TransportError",
    "TransportConnectionError",
    "TransportAuthenticationError",
    "SendError",
    "MessageFactory",
    "MessageHandle",
    "MimeMessageFactory",
    "MimeMessageHandle",
    "DEFAULT_SMTP_PORT",
    "DEFAULT_TIMEOUT_MS",
    "SECURITY_MODES",
    "Session",
    "SessionFactory",
    "SMTPSessionFactory",
]
