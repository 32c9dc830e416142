"""
svn-worktile configuration.

Settings come from a TOML file (``config.toml`` next to the service by
default) and from environment variables, which take precedence:

    [worktile]
    api_url = "https://open.worktile.com"
    product_name = "SVN"
    client_id = "..."
    client_secret = "..."
    timeout = 30
    verify_ssl = true

    [svn]
    svnlook = "svnlook"
    encoding = "gbk"
    default_branch = "trunk"

    [http]
    listen = "127.0.0.1:1086"
"""

import codecs
import os
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from svn_worktile.exceptions import ValidationError

DEFAULT_API_URL = "https://open.worktile.com"
DEFAULT_CONFIG_PATH = "config.toml"
DEFAULT_HTTP_LISTEN = "127.0.0.1:1086"

# (table, key) in the TOML file for each settings field
_FILE_KEYS = {
    "api_url": ("worktile", "api_url"),
    "product_name": ("worktile", "product_name"),
    "client_id": ("worktile", "client_id"),
    "client_secret": ("worktile", "client_secret"),
    "timeout": ("worktile", "timeout"),
    "verify_ssl": ("worktile", "verify_ssl"),
    "svnlook_path": ("svn", "svnlook"),
    "svn_encoding": ("svn", "encoding"),
    "default_branch": ("svn", "default_branch"),
    "http_listen": ("http", "listen"),
}

_ENV_KEYS = {
    "api_url": "WORKTILE_API_URL",
    "product_name": "WORKTILE_PRODUCT_NAME",
    "client_id": "WORKTILE_CLIENT_ID",
    "client_secret": "WORKTILE_CLIENT_SECRET",
    "timeout": "WORKTILE_TIMEOUT",
    "verify_ssl": "WORKTILE_VERIFY_SSL",
    "svnlook_path": "SVNLOOK_PATH",
    "svn_encoding": "SVN_ENCODING",
    "default_branch": "SVN_DEFAULT_BRANCH",
    "http_listen": "HTTP_LISTEN",
}

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for the Worktile client and svnlook extractor."""

    product_name: str = ""
    client_id: str = ""
    client_secret: str = ""
    api_url: str = DEFAULT_API_URL
    timeout: float = 30.0
    verify_ssl: bool = True
    svnlook_path: str = "svnlook"
    svn_encoding: str = "gbk"
    default_branch: str = "trunk"
    http_listen: str = DEFAULT_HTTP_LISTEN

    @classmethod
    def from_env(cls, base: "Settings | None" = None) -> "Settings":
        """
        Create settings from environment variables.

        Environment variables:
            WORKTILE_PRODUCT_NAME: Worktile product display name (required)
            WORKTILE_CLIENT_ID: Application client id (required)
            WORKTILE_CLIENT_SECRET: Application client secret (required)
            WORKTILE_API_URL: API base URL (optional, default: https://open.worktile.com)
            WORKTILE_TIMEOUT: Request timeout in seconds (optional, default: 30)
            WORKTILE_VERIFY_SSL: Verify TLS certificates (optional, default: true)
            SVNLOOK_PATH: svnlook executable (optional, default: svnlook)
            SVN_ENCODING: svnlook output encoding (optional, default: gbk)
            SVN_DEFAULT_BRANCH: Branch for trunk commits (optional, default: trunk)
            HTTP_LISTEN: Address of the local commit listener (optional)

        Args:
            base: Settings to override (default: built-in defaults)

        Returns:
            Settings instance, not yet validated

        Raises:
            ValidationError: If a variable has an invalid value
        """
        values = {
            name: os.environ[env]
            for name, env in _ENV_KEYS.items()
            if os.environ.get(env)
        }
        return _coerce(base or cls(), values, "environment")

    @classmethod
    def from_file(cls, path: str | Path = DEFAULT_CONFIG_PATH, required: bool = False) -> "Settings":
        """
        Load settings from a TOML file, then apply environment overrides.

        Args:
            path: Configuration file path
            required: Fail when the file does not exist

        Returns:
            Settings instance, not yet validated

        Raises:
            ValidationError: If the file is missing (when required), is not
                valid TOML or has invalid values
        """
        path = Path(path)
        values: dict[str, Any] = {}
        if path.exists():
            try:
                with path.open("rb") as f:
                    document = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ValidationError(f"invalid configuration file {path}: {e}") from e

            for name, (table, key) in _FILE_KEYS.items():
                section = document.get(table, {})
                if isinstance(section, dict) and key in section:
                    values[name] = section[key]
        elif required:
            raise ValidationError(f"configuration file {path} not found")

        return cls.from_env(_coerce(cls(), values, str(path)))

    def validate(self) -> "Settings":
        """
        Check that the Worktile client can be built from these settings.

        Returns:
            self, for chaining

        Raises:
            ValidationError: If the API URL, product name or a credential is missing,
                the timeout is not positive or the svnlook encoding is unknown
        """
        if not self.api_url:
            raise ValidationError("Worktile API URL is empty")
        if not self.product_name:
            raise ValidationError("product_name is not set")
        if not self.client_id or not self.client_secret:
            raise ValidationError("Worktile API credentials are missing")
        if self.timeout <= 0:
            raise ValidationError(f"timeout must be positive, got {self.timeout}")
        try:
            codecs.lookup(self.svn_encoding)
        except LookupError as e:
            raise ValidationError(f"unknown svn encoding {self.svn_encoding!r}") from e
        return self

    @property
    def http_port(self) -> int:
        """Port of ``http_listen``; 80 when the address has none."""
        _, sep, port = self.http_listen.rpartition(":")
        if not sep or not port:
            return 80
        try:
            return int(port)
        except ValueError as e:
            raise ValidationError(f"invalid listen address {self.http_listen!r}") from e

    def __repr__(self) -> str:
        shown = ", ".join(
            f"{f.name}={'[REDACTED]' if f.name == 'client_secret' else repr(getattr(self, f.name))}"
            for f in fields(self)
        )
        return f"Settings({shown})"


def _coerce(base: Settings, values: dict[str, Any], source: str) -> Settings:
    """Convert raw values to field types and apply them to ``base``."""
    converted: dict[str, Any] = {}
    for name, value in values.items():
        if name == "timeout":
            try:
                converted[name] = float(value)
            except (TypeError, ValueError) as e:
                raise ValidationError(f"{source}: timeout must be a number, got {value!r}") from e
        elif name == "verify_ssl":
            converted[name] = _to_bool(value, source)
        else:
            converted[name] = str(value)
    return replace(base, **converted)


def _to_bool(value: Any, source: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValidationError(f"{source}: verify_ssl must be a boolean, got {value!r}")
