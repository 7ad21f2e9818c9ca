# =============================================================================
# Address Model
# =============================================================================
# Represents a single mailbox: an email address plus an optional display
# name (e.g., "Jane Doe <jane@example.org>").
#
# Syntax checking is done with the email-validator library. We only check
# syntax here; DNS deliverability is the transport's problem, so
# check_deliverability is always off.
#
# Accepted: quoted local parts ("john doe"@example.org) and domain literals
# (user@[192.0.2.1]). Rejected: non-ASCII addresses, which can't be written
# into an ASCII header, and hosts without a dot (user@localhost).
# =============================================================================

from dataclasses import dataclass, field
from email.utils import formataddr

from email_validator import EmailNotValidError, validate_email

from mailwright.errors import InvalidAddressError


@dataclass(frozen=True)
class Address:
    """
    An immutable, validated email address.

    Two addresses are equal when their raw address strings are equal;
    the personal name is informational only.

    Attributes:
        email: The address exactly as the caller supplied it.
        personal_name: Optional display name shown alongside the address.

    Example:
        >>> addr = validate_address("jane@example.org", "Jane Doe")
        >>> str(addr)
        'Jane Doe <jane@example.org>'
    """
    email: str
    personal_name: str | None = field(default=None, compare=False)

    def __str__(self) -> str:
        """RFC 5322 rendering, suitable for a header value."""
        return formataddr((self.personal_name or "", self.email))

    @property
    def domain(self) -> str:
        """The part after the last "@"."""
        return self.email.rsplit("@", 1)[1]


def validate_address(raw: str, personal_name: str | None = None) -> Address:
    """
    Validate an address string and wrap it in an Address.

    Args:
        raw: The address to check (e.g., "user@example.org").
        personal_name: Optional display name to attach.

    Returns:
        Address holding the original string and the display name.

    Raises:
        InvalidAddressError: If raw is not a string or fails the grammar.
    """
    if not isinstance(raw, str) or not raw:
        raise InvalidAddressError(raw, "expected a non-empty string")
    if not raw.isascii():
        # Internationalized domains pass email-validator even without SMTPUTF8
        raise InvalidAddressError(raw, "address must be ASCII")
    if personal_name and ("\r" in personal_name or "\n" in personal_name):
        raise InvalidAddressError(raw, "display name contains a line break")

    try:
        validate_email(
            raw,
            check_deliverability=False,
            allow_smtputf8=False,
            allow_quoted_local=True,
            allow_domain_literal=True,
        )
    except EmailNotValidError as e:
        raise InvalidAddressError(raw, str(e)) from e

    return Address(email=raw, personal_name=personal_name or None)
