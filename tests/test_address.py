import pytest

from mailwright.core import Address, validate_address
from mailwright.errors import ErrorKind, InvalidAddressError


class TestValidateAddress:
    """Test address syntax validation"""

    def test_valid_address_is_kept_verbatim(self):
        """The raw string is preserved, not normalized"""
        address = validate_address("User.Name@Example.org")

        assert address.email == "User.Name@Example.org"
        assert address.personal_name is None

    def test_personal_name_is_attached(self):
        address = validate_address("reply@example.org", "Reply Handler")

        assert address.email == "reply@example.org"
        assert address.personal_name == "Reply Handler"

    def test_empty_personal_name_becomes_none(self):
        assert validate_address("a@example.org", "").personal_name is None

    @pytest.mark.parametrize("raw", [
        "not an email address",
        "not an email",
        "user@",
        "@example.org",
        "user name@example.org",
        "user@exa mple.org",
        "user@example",
        "user@localhost",
        "üser@example.org",
        "user@exämple.org",
        "",
    ])
    def test_malformed_addresses_are_rejected(self, raw):
        with pytest.raises(InvalidAddressError) as exc_info:
            validate_address(raw)

        assert exc_info.value.address == raw
        assert exc_info.value.kind is ErrorKind.INVALID_ADDRESS

    def test_non_string_is_rejected(self):
        with pytest.raises(InvalidAddressError):
            validate_address(None)

    @pytest.mark.parametrize("raw", [
        '"john doe"@example.org',
        "user@[192.0.2.1]",
    ])
    def test_quoted_local_part_and_domain_literal(self, raw):
        assert validate_address(raw).email == raw

    def test_non_ascii_address_is_rejected_before_rendering(self):
        with pytest.raises(InvalidAddressError):
            validate_address("üser@example.org", "Üser")

    def test_non_ascii_personal_name_renders(self):
        address = validate_address("user@example.org", "Grüße")

        assert str(address).endswith("<user@example.org>")

    @pytest.mark.parametrize("name", ["Evil\r\nBcc: x@example.org", "Line\nBreak"])
    def test_personal_name_with_line_break_is_rejected(self, name):
        with pytest.raises(InvalidAddressError):
            validate_address("user@example.org", name)


class TestAddress:
    """Test the Address value object"""

    def test_equality_ignores_personal_name(self):
        assert Address("a@example.org", "Alice") == Address("a@example.org", "Someone Else")
        assert hash(Address("a@example.org", "Alice")) == hash(Address("a@example.org"))

    def test_different_addresses_are_not_equal(self):
        assert Address("a@example.org") != Address("b@example.org")

    def test_str_with_personal_name(self):
        assert str(Address("jane@example.org", "Jane Doe")) == "Jane Doe <jane@example.org>"

    def test_str_without_personal_name(self):
        assert str(Address("jane@example.org")) == "jane@example.org"

    def test_domain(self):
        assert Address("jane@mail.example.org").domain == "mail.example.org"

    def test_is_immutable(self):
        address = Address("jane@example.org")

        with pytest.raises(AttributeError):
            address.email = "other@example.org"
