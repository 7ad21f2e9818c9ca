# =============================================================================
# Exceptions
# =============================================================================
# Two disjoint error families live here:
#
#   - Usage errors: the caller misused the API (empty header name, building
#     twice). These indicate a bug in the calling code.
#   - Validation errors: the caller supplied bad email data (malformed
#     address, no recipients). The caller can fix the data and try again.
#
# Every exception carries an ErrorKind so callers can branch on a value
# instead of an isinstance() chain.
# =============================================================================

from enum import Enum


class ErrorKind(Enum):
    """Tag identifying what went wrong."""
    INVALID_ARGUMENT = "invalid_argument"
    ALREADY_BUILT = "already_built"
    INVALID_ADDRESS = "invalid_address"
    EMPTY_INPUT = "empty_input"
    MISSING_SENDER = "missing_sender"
    MISSING_RECIPIENT = "missing_recipient"
    MISSING_HOST = "missing_host"
    TRANSPORT = "transport"
    CONFIG = "config"


class MailwrightError(Exception):
    """Base exception for everything raised by Mailwright."""
    kind: ErrorKind


# =============================================================================
# Usage Errors
# =============================================================================

class UsageError(MailwrightError):
    """Raised when the API is called incorrectly."""
    pass


class InvalidArgumentError(UsageError, ValueError):
    """Raised when a required argument is None or empty."""
    kind = ErrorKind.INVALID_ARGUMENT


class AlreadyBuiltError(UsageError, RuntimeError):
    """Raised when build() is called on a composer that was already built."""
    kind = ErrorKind.ALREADY_BUILT


# =============================================================================
# Validation Errors
# =============================================================================

class EmailValidationError(MailwrightError):
    """Raised when email data fails validation."""
    pass


class InvalidAddressError(EmailValidationError):
    """
    Raised when an email address is syntactically invalid.

    Attributes:
        address: The raw value that failed validation.
    """
    kind = ErrorKind.INVALID_ADDRESS

    def __init__(self, address: object, reason: str = "") -> None:
        self.address = address
        message = f"Invalid email address: {address!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class EmptyInputError(EmailValidationError):
    """Raised when an address batch is None or empty."""
    kind = ErrorKind.EMPTY_INPUT


class MissingSenderError(EmailValidationError):
    """Raised at build time when no From address was set."""
    kind = ErrorKind.MISSING_SENDER


class MissingRecipientError(EmailValidationError):
    """Raised at build time when To, Cc and Bcc are all empty."""
    kind = ErrorKind.MISSING_RECIPIENT


class MissingHostError(EmailValidationError):
    """Raised when a session is needed but no host name was set."""
    kind = ErrorKind.MISSING_HOST
