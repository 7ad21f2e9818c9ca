from datetime import datetime, timezone

import pytest

from mailwright.core import BuildState, RecipientKind
from mailwright.errors import (
    AlreadyBuiltError,
    InvalidAddressError,
    InvalidArgumentError,
    MissingHostError,
    MissingRecipientError,
    MissingSenderError,
    UsageError,
)


class TestBuild:
    """Test the one-shot build state machine"""

    def test_build_succeeds(self, ready_composer):
        message = ready_composer.build()

        assert ready_composer.state is BuildState.BUILT
        assert ready_composer.is_built
        assert ready_composer.message is message
        assert message.sender.email == "sender@example.org"
        assert [a.email for a in message.to] == ["recipient@example.org"]

    def test_starts_not_built(self, composer):
        assert composer.state is BuildState.NOT_BUILT
        assert composer.message is None

    def test_missing_sender(self, composer):
        composer.set_host_name("mail.example.org")
        composer.add_to("recipient@example.org")

        with pytest.raises(MissingSenderError):
            composer.build()

        assert composer.state is BuildState.NOT_BUILT

    def test_missing_recipient(self, composer):
        composer.set_host_name("mail.example.org")
        composer.set_from("sender@example.org")

        with pytest.raises(MissingRecipientError):
            composer.build()

    def test_reply_to_is_not_a_recipient(self, composer):
        composer.set_host_name("mail.example.org")
        composer.set_from("sender@example.org")
        composer.add_reply_to("reply@example.org")

        with pytest.raises(MissingRecipientError):
            composer.build()

    @pytest.mark.parametrize("add", ["add_to", "add_cc", "add_bcc"])
    def test_any_recipient_kind_is_enough(self, composer, add):
        composer.set_host_name("mail.example.org")
        composer.set_from("sender@example.org")
        getattr(composer, add)("someone@example.org")

        assert composer.build().recipients[0].email == "someone@example.org"

    def test_missing_host(self, composer):
        composer.set_from("sender@example.org")
        composer.add_to("recipient@example.org")

        with pytest.raises(MissingHostError):
            composer.build()

    def test_sender_checked_before_host(self, composer):
        composer.add_to("recipient@example.org")

        with pytest.raises(MissingSenderError):
            composer.build()

    def test_failed_build_can_be_retried(self, composer):
        composer.set_host_name("mail.example.org")
        composer.add_to("recipient@example.org")
        with pytest.raises(MissingSenderError):
            composer.build()

        composer.set_from("sender@example.org")

        assert composer.build().sender.email == "sender@example.org"

    def test_build_twice(self, ready_composer, message_factory):
        first = ready_composer.build()

        with pytest.raises(AlreadyBuiltError) as exc_info:
            ready_composer.build()

        assert isinstance(exc_info.value, UsageError)
        assert isinstance(exc_info.value, RuntimeError)
        assert ready_composer.message is first
        assert len(message_factory.handles) == 1

    def test_build_twice_after_getters(self, ready_composer):
        ready_composer.build()
        ready_composer.get_session()
        _ = ready_composer.to_addresses

        with pytest.raises(AlreadyBuiltError):
            ready_composer.build()

    def test_message_is_a_snapshot(self, ready_composer):
        message = ready_composer.build()

        ready_composer.add_to("late@example.org")
        ready_composer.add_header("X-Late", "yes")

        assert [a.email for a in message.to] == ["recipient@example.org"]
        assert "X-Late" not in message.headers
        assert len(ready_composer.to_addresses) == 2

    def test_message_is_immutable(self, ready_composer):
        message = ready_composer.build()

        with pytest.raises(AttributeError):
            message.subject = "changed"
        with pytest.raises(TypeError):
            message.headers["X-New"] = "value"

    def test_handle_is_populated(self, ready_composer, message_factory):
        ready_composer.add_cc("cc@example.org")
        ready_composer.add_bcc("bcc@example.org")
        ready_composer.add_reply_to("reply@example.org", name="Replies")
        ready_composer.set_subject("Hello")
        ready_composer.set_content("hi", "text/plain")
        ready_composer.add_header("X-Custom", "v")

        ready_composer.build()

        handle = message_factory.handles[0]
        assert handle.session.host == "mail.example.org"
        assert handle.sender.email == "sender@example.org"
        assert [a.email for a in handle.recipients[RecipientKind.CC]] == ["cc@example.org"]
        assert [a.email for a in handle.recipients[RecipientKind.BCC]] == ["bcc@example.org"]
        assert handle.recipients[RecipientKind.REPLY_TO][0].personal_name == "Replies"
        assert handle.subject == "Hello"
        assert handle.body == "hi"
        assert handle.content_type == "text/plain"
        assert handle.headers == {"X-Custom": "v"}

    def test_explicit_sent_date(self, ready_composer):
        sent = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
        ready_composer.set_sent_date(sent)

        assert ready_composer.build().sent_date == sent

    def test_sent_date_defaults_to_build_time(self, ready_composer):
        before = datetime.now().astimezone()

        message = ready_composer.build()

        assert before <= message.sent_date <= datetime.now().astimezone()

    def test_envelope(self, ready_composer):
        ready_composer.add_cc("cc@example.org")
        ready_composer.add_bcc("bcc@example.org")
        ready_composer.set_bounce_address("bounces@example.org")

        message = ready_composer.build()

        assert [a.email for a in message.recipients] == [
            "recipient@example.org",
            "cc@example.org",
            "bcc@example.org",
        ]
        assert message.envelope_sender.email == "bounces@example.org"

    def test_envelope_sender_defaults_to_from(self, ready_composer):
        assert ready_composer.build().envelope_sender.email == "sender@example.org"

    def test_to_mime_without_rendering(self, ready_composer):
        message = ready_composer.build()

        with pytest.raises(ValueError):
            message.to_mime()

    def test_non_ascii_recipient_is_rejected_when_added(self, ready_composer):
        with pytest.raises(InvalidAddressError):
            ready_composer.add_to("üser@example.org")

        assert [a.email for a in ready_composer.to_addresses] == ["recipient@example.org"]


class TestEndToEnd:
    """Build with the real session and MIME factories"""

    def test_full_build(self, full_composer):
        message = full_composer.build()

        assert message.content_type == "text/plain"
        assert message.sender.email == "sender@example.org"
        assert message.session.host == "mail.example.org"
        assert message.message_id.endswith("@example.org>")

    def test_non_ascii_sender_fails_at_set_from(self, full_composer):
        with pytest.raises(InvalidAddressError):
            full_composer.set_from("sënder@example.org")

        message = full_composer.build()

        assert message.to_mime()["From"] == "Sender Name <sender@example.org>"

    def test_rejected_header_never_reaches_the_message(self, full_composer):
        with pytest.raises(InvalidArgumentError):
            full_composer.add_header("X-Custom", "v\r\nBcc: evil@example.org")
        with pytest.raises(InvalidArgumentError):
            full_composer.set_subject("hello\nBcc: x@example.org")

        message = full_composer.build()

        assert message.to_mime()["X-Custom"] == "TestValue"
        assert b"evil@example.org" not in message.raw

    def test_quoted_local_part_renders(self, full_composer):
        full_composer.add_to('"john doe"@example.org')

        mime = full_composer.build().to_mime()

        assert "john doe" in mime["To"]

    def test_minimal_message(self):
        from mailwright import EmailComposer

        composer = EmailComposer()
        composer.set_host_name("mail.example.org")
        composer.set_from("a@example.org")
        composer.add_to("b@example.org")
        composer.add_cc("c@example.org")
        composer.add_bcc("d@example.org")
        composer.add_reply_to("e@example.org")
        composer.set_content("hi", "text/plain")
        composer.add_header("X-Custom", "v")

        message = composer.build()

        assert message.content_type == "text/plain"
        assert message.sender.email == "a@example.org"
        assert message.to_mime().get_content_type() == "text/plain"
