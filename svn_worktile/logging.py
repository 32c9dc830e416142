"""
svn-worktile logging utilities.

Provides configurable logging for Worktile HTTP traffic, svnlook invocations
and token handling. Ensures no credentials (client secrets, bearer tokens)
are logged.
"""

import logging
import re
from typing import Any

_sdk_logger = logging.getLogger("svn_worktile")
_http_logger = logging.getLogger("svn_worktile.http")
_svn_logger = logging.getLogger("svn_worktile.svn")

# Patterns for sensitive data that should be masked
_SENSITIVE_PATTERNS = [
    # client_secret passed in the token request query string
    (re.compile(r"(client_secret=)[^&\s]+"), r"\1[REDACTED]"),
    # Authorization header values
    (re.compile(r"(Bearer\s+)[A-Za-z0-9._~+/=-]+", re.IGNORECASE), r"\1[REDACTED]"),
    # Secret/token values in JSON or repr output
    (
        re.compile(r"""(access_token|client_secret|secret|token|password)(['"]?\s*[:=]\s*)['"][^'"]+['"]""", re.IGNORECASE),
        r"\1\2'[REDACTED]'",
    ),
]

_DEFAULT_SENSITIVE_KEYS = {"access_token", "authorization", "client_secret", "secret", "token", "password"}


def configure_logging(
    level: int = logging.INFO,
    http_level: int | None = None,
    svn_level: int | None = None,
    handler: logging.Handler | None = None,
    format_string: str | None = None,
) -> None:
    """
    Configure svn-worktile logging.

    Args:
        level: Default log level for all package loggers (default: INFO)
        http_level: Log level for Worktile request/response logging (default: same as level)
        svn_level: Log level for svnlook invocations (default: same as level)
        handler: Custom handler to use (default: StreamHandler to stderr)
        format_string: Custom format string (default: includes timestamp, level, logger name)

    Example:
        ```python
        import logging
        from svn_worktile.logging import configure_logging

        # Trace every tracker request
        configure_logging(level=logging.INFO, http_level=logging.DEBUG)

        # Write to a file instead of stderr
        configure_logging(handler=logging.FileHandler("svn-worktile.log"))
        ```
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    formatter = logging.Formatter(format_string)

    if handler is None:
        handler = logging.StreamHandler()

    handler.setFormatter(formatter)

    _sdk_logger.setLevel(level)
    _sdk_logger.addHandler(handler)

    _http_logger.setLevel(http_level if http_level is not None else level)
    _svn_logger.setLevel(svn_level if svn_level is not None else level)


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get an svn-worktile logger.

    Args:
        name: Logger name suffix (e.g., "http", "svn", "auth"). If None, returns the package logger.

    Returns:
        Logger instance
    """
    if name is None:
        return _sdk_logger
    return logging.getLogger(f"svn_worktile.{name}")


def mask_sensitive_data(text: str) -> str:
    """
    Mask credentials in a string.

    Replaces client secrets in query strings, bearer tokens and token/secret
    values with redacted placeholders.

    Args:
        text: Text that may contain sensitive data

    Returns:
        Text with sensitive data masked
    """
    result = text
    for pattern, replacement in _SENSITIVE_PATTERNS:
        result = pattern.sub(replacement, result)
    return result


def safe_log_dict(data: dict[str, Any], sensitive_keys: set[str] | None = None) -> dict[str, Any]:
    """
    Create a copy of a dictionary with sensitive values masked.

    Args:
        data: Dictionary that may contain sensitive values
        sensitive_keys: Keys to mask (default: access_token, authorization, client_secret, secret, token, password)

    Returns:
        Dictionary with sensitive values replaced with "[REDACTED]"
    """
    if sensitive_keys is None:
        sensitive_keys = _DEFAULT_SENSITIVE_KEYS

    result: dict[str, Any] = {}
    for key, value in data.items():
        key_lower = str(key).lower()
        if key_lower in sensitive_keys or any(sk in key_lower for sk in sensitive_keys):
            result[key] = "[REDACTED]"
        elif isinstance(value, dict):
            result[key] = safe_log_dict(value, sensitive_keys)
        elif isinstance(value, list):
            result[key] = [
                safe_log_dict(item, sensitive_keys) if isinstance(item, dict) else item
                for item in value
            ]
        else:
            result[key] = value

    return result


def log_http_request(
    method: str,
    url: str,
    params: dict[str, Any] | None = None,
    body: dict[str, Any] | None = None,
) -> None:
    """
    Log a Worktile request at DEBUG level with credentials masked.

    Args:
        method: HTTP method (GET, POST)
        url: Request URL or path
        params: Query parameters (optional)
        body: JSON request body (optional)
    """
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [f"{method} {mask_sensitive_data(url)}"]

    if params:
        log_parts.append(f"params={safe_log_dict(params)}")

    if body:
        log_parts.append(f"body={safe_log_dict(body)}")

    _http_logger.debug(" | ".join(log_parts))


def log_http_response(
    status_code: int,
    url: str,
    body: dict[str, Any] | None = None,
    elapsed_ms: float | None = None,
) -> None:
    """
    Log a Worktile response with credentials masked.

    Successful responses are logged at DEBUG level, error statuses at WARNING.

    Args:
        status_code: HTTP status code
        url: Request URL or path
        body: Decoded response body (optional)
        elapsed_ms: Request duration in milliseconds (optional)
    """
    level = logging.DEBUG if status_code < 400 else logging.WARNING
    if not _http_logger.isEnabledFor(level):
        return

    log_parts = [f"Response {status_code} from {mask_sensitive_data(url)}"]

    if elapsed_ms is not None:
        log_parts.append(f"elapsed={elapsed_ms:.2f}ms")

    if body:
        log_parts.append(f"body={safe_log_dict(body)}")

    _http_logger.log(level, " | ".join(log_parts))


def log_svnlook_command(args: list[str], returncode: int | None = None, output: str | None = None) -> None:
    """
    Log an svnlook invocation.

    A call without ``returncode`` logs the command about to run at DEBUG
    level; a non-zero ``returncode`` logs the failure and its diagnostic at
    WARNING level.

    Args:
        args: svnlook arguments
        returncode: Process exit status (optional)
        output: Diagnostic output of a failed run (optional)
    """
    command = " ".join(args)
    if returncode is None or returncode == 0:
        if _svn_logger.isEnabledFor(logging.DEBUG):
            _svn_logger.debug(f"svnlook {command}")
        return

    _svn_logger.warning(f"svnlook {command}, exit={returncode}, stderr: {output}")


__all__ = [
    "configure_logging",
    "get_logger",
    "mask_sensitive_data",
    "safe_log_dict",
    "log_http_request",
    "log_http_response",
    "log_svnlook_command",
]
