# =============================================================================
# Mailwright: Validated Email Composition
# =============================================================================
#
# Mailwright collects the pieces of an email (sender, recipients, headers,
# content, SMTP settings), validates them as they arrive, and builds an
# immutable message exactly once. Built messages can be delivered with the
# async SMTP transport.
#
# Features:
#   - Eager, all-or-nothing address validation
#   - One-shot build with an explicit NOT_BUILT -> BUILT state machine
#   - Pluggable session and message factories
#   - Async SMTP delivery with SSL/STARTTLS and keyring-backed passwords
#   - XDG-compliant TOML transport profiles
#
# =============================================================================

__version__ = "0.1.0"
__app_name__ = "mailwright"

from mailwright.compose import EmailComposer, SimpleEmail
from mailwright.core import Address, BuildState, Message, RecipientKind, validate_address
from mailwright.errors import (
    AlreadyBuiltError,
    EmailValidationError,
    EmptyInputError,
    ErrorKind,
    InvalidAddressError,
    InvalidArgumentError,
    MailwrightError,
    MissingHostError,
    MissingRecipientError,
    MissingSenderError,
    UsageError,
)

__all__ = [
    "__version__",
    "__app_name__",
    "EmailComposer",
    "SimpleEmail",
    "Address",
    "BuildState",
    "Message",
    "RecipientKind",
    "validate_address",
    "AlreadyBuiltError",
    "EmailValidationError",
    "EmptyInputError",
    "ErrorKind",
    "InvalidAddressError",
    "InvalidArgumentError",
    "MailwrightError",
    "MissingHostError",
    "MissingRecipientError",
    "MissingSenderError",
    "UsageError",
]
