# =============================================================================
# Mailwright Core Module
# =============================================================================
# Core domain models. These are plain dataclasses and enums that depend
# only on the errors module, so they can be imported from anywhere
# without circular imports.
#
#   - Address: A validated mailbox (address + display name)
#   - Message: The frozen result of a build
#   - RecipientKind: To / Cc / Bcc / Reply-To
#   - BuildState: NOT_BUILT / BUILT
# =============================================================================

from mailwright.core.address import Address, validate_address
from mailwright.core.message import BuildState, Message, RecipientKind

__all__ = [
    "Address",
    "validate_address",
    "Message",
    "RecipientKind",
    "BuildState",
]
