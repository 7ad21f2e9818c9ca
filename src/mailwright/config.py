# =============================================================================
# Configuration Management
# =============================================================================
# Handles loading and saving named transport profiles.
#
# XDG Base Directory Compliance (https://specifications.freedesktop.org/basedir-spec/):
#   - Config:  $XDG_CONFIG_HOME/mailwright/  (default: ~/.config/mailwright/)
#
# Files:
#   - config.toml: Transport profiles (SMTP host, port, timeouts, ...)
#
# Example config.toml:
#
#   [general]
#   default_profile = "work"
#
#   [profiles.work]
#   host_name = "mail.example.org"
#   smtp_port = 587
#   security = "starttls"
#   username = "me@example.org"
#
# Passwords never go in this file. They're read from the system keyring
# at send time.
# =============================================================================

import os
import tomllib  # Built into Python 3.11+
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w  # For writing TOML (tomllib is read-only)

from mailwright.errors import ErrorKind, MailwrightError
from mailwright.transport.session import DEFAULT_SMTP_PORT, DEFAULT_TIMEOUT_MS


# Application identifier used in XDG paths
APP_NAME = "mailwright"


def get_xdg_config_home() -> Path:
    """
    Returns the XDG config directory for Mailwright.

    Respects $XDG_CONFIG_HOME if set, otherwise uses ~/.config/mailwright/
    """
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        base = Path(xdg_config)
    else:
        base = Path.home() / ".config"
    return base / APP_NAME


# =============================================================================
# Configuration Data Structures
# =============================================================================

@dataclass
class TransportConfig:
    """
    Transport settings applied to a new composer.

    Attributes:
        host_name: SMTP server hostname. Empty means "not configured".
        smtp_port: SMTP server port.
        security: "none", "ssl" or "starttls".
        connection_timeout_ms: TCP connect timeout in milliseconds.
        socket_timeout_ms: Read/write timeout in milliseconds.
        username: Login name; empty disables authentication.
        charset: Charset for text bodies.
        bounce_address: Envelope sender for bounces; empty uses From.
    """
    host_name: str = ""
    smtp_port: int = DEFAULT_SMTP_PORT
    security: str = "none"
    connection_timeout_ms: int = DEFAULT_TIMEOUT_MS
    socket_timeout_ms: int = DEFAULT_TIMEOUT_MS
    username: str = ""
    charset: str = "utf-8"
    bounce_address: str = ""


@dataclass
class Config:
    """
    Main configuration container.

    Attributes:
        default_profile: Name of the profile used when none is requested.
        profiles: Transport profiles keyed by name.

    Usage:
        >>> config = Config.load()
        >>> composer = EmailComposer.from_config(config.profile())
    """
    default_profile: str = ""
    profiles: dict[str, TransportConfig] = field(default_factory=dict)

    @staticmethod
    def config_file_path() -> Path:
        """Returns the path to the main config file."""
        return get_xdg_config_home() / "config.toml"

    def profile(self, name: str | None = None) -> TransportConfig:
        """
        Look up a profile.

        Args:
            name: Profile name. Defaults to default_profile.

        Raises:
            ConfigError: If the profile doesn't exist.
        """
        name = name or self.default_profile
        try:
            return self.profiles[name]
        except KeyError:
            raise ConfigError(f"No such profile: {name!r}") from None

    # -------------------------------------------------------------------------
    # Loading and Saving
    # -------------------------------------------------------------------------

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """
        Load configuration from a TOML file.

        If the file doesn't exist, returns default configuration.

        Args:
            path: Config file to read. Defaults to the XDG location.

        Raises:
            ConfigError: If the config file exists but is invalid.
        """
        config_path = path or cls.config_file_path()

        if not config_path.exists():
            return cls()

        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid config file: {e}") from e

        return cls._from_dict(data)

    def save(self, path: Path | None = None) -> None:
        """
        Save configuration to a TOML file.

        Creates the parent directory if it doesn't exist.
        """
        config_path = path or self.config_file_path()
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "wb") as f:
            tomli_w.dump(self._to_dict(), f)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "Config":
        """Create a Config from parsed TOML."""
        config = cls()

        general = data.get("general", {})
        config.default_profile = general.get("default_profile", "")

        # Each key under [profiles] is a profile name
        for name, profile in data.get("profiles", {}).items():
            if not isinstance(profile, dict):
                raise ConfigError(f"Profile {name!r} must be a table")
            config.profiles[name] = TransportConfig(
                host_name=profile.get("host_name", ""),
                smtp_port=profile.get("smtp_port", DEFAULT_SMTP_PORT),
                security=profile.get("security", "none"),
                connection_timeout_ms=profile.get("connection_timeout_ms", DEFAULT_TIMEOUT_MS),
                socket_timeout_ms=profile.get("socket_timeout_ms", DEFAULT_TIMEOUT_MS),
                username=profile.get("username", ""),
                charset=profile.get("charset", "utf-8"),
                bounce_address=profile.get("bounce_address", ""),
            )

        return config

    def _to_dict(self) -> dict[str, Any]:
        """Convert Config to a dictionary for TOML serialization."""
        data: dict[str, Any] = {
            "general": {"default_profile": self.default_profile},
            "profiles": {},
        }

        for name, profile in self.profiles.items():
            data["profiles"][name] = {
                "host_name": profile.host_name,
                "smtp_port": profile.smtp_port,
                "security": profile.security,
                "connection_timeout_ms": profile.connection_timeout_ms,
                "socket_timeout_ms": profile.socket_timeout_ms,
                "username": profile.username,
                "charset": profile.charset,
                "bounce_address": profile.bounce_address,
            }

        return data


# =============================================================================
# Exceptions
# =============================================================================

class ConfigError(MailwrightError):
    """Raised when there's an error loading or parsing configuration."""
    kind = ErrorKind.CONFIG
