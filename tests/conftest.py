# =============================================================================
# Pytest Configuration and Fixtures
# =============================================================================
# Shared fixtures for the Mailwright test suite.
#
# The fake factories stand in for the transport collaborators so the
# composer can be exercised without rendering MIME or touching a network.
# =============================================================================

import pytest
import tempfile
from pathlib import Path
from typing import Any

from mailwright.compose import EmailComposer, SimpleEmail
from mailwright.transport import MessageHandle, Session


class FakeSessionFactory:
    """Records every create() call and returns plain Sessions."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, int, dict[str, Any]]] = []

    def create(self, host_name: str, timeout_ms: int, **options: Any) -> Session:
        self.calls.append((host_name, timeout_ms, options))
        return Session(host=host_name, connection_timeout_ms=timeout_ms)


class FakeMessageFactory:
    """Hands out non-rendering MessageHandles and keeps them for inspection."""

    def __init__(self) -> None:
        self.handles: list[MessageHandle] = []

    def new_message(self, session: Any) -> MessageHandle:
        handle = MessageHandle(session)
        self.handles.append(handle)
        return handle


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def session_factory():
    return FakeSessionFactory()


@pytest.fixture
def message_factory():
    return FakeMessageFactory()


@pytest.fixture
def composer(session_factory, message_factory):
    """An empty composer wired to the fake factories."""
    return SimpleEmail(session_factory=session_factory, message_factory=message_factory)


@pytest.fixture
def ready_composer(composer):
    """A composer with everything build() needs."""
    composer.set_host_name("mail.example.org")
    composer.set_from("sender@example.org")
    composer.add_to("recipient@example.org")
    return composer


@pytest.fixture
def full_composer():
    """A composer using the real session and MIME factories, fully populated."""
    composer = EmailComposer()
    composer.set_host_name("mail.example.org")
    composer.set_from("sender@example.org", "Sender Name")
    composer.add_to("recipient@example.org")
    composer.add_cc("cc-recipient@example.org")
    composer.add_bcc("bcc-recipient@example.org")
    composer.add_reply_to("reply-handler@example.org")
    composer.set_subject("Test Subject")
    composer.set_content("Email content for testing", "text/plain")
    composer.add_header("X-Custom", "TestValue")
    return composer
