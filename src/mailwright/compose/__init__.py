# =============================================================================
# Compose Module
# =============================================================================
# Building outgoing messages.
#
#   - EmailComposer: Accumulates and validates message fields, builds once
#   - SimpleEmail: EmailComposer with a plain-text set_msg() shortcut
# =============================================================================

from mailwright.compose.composer import EmailComposer, SimpleEmail

__all__ = [
    "EmailComposer",
    "SimpleEmail",
]
