"""svn-worktile exception classes."""


class SyncError(Exception):
    """Base exception for all svn-worktile errors."""

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")


class ValidationError(SyncError):
    """Raised when configuration or credentials are missing or invalid."""

    def __init__(self, message: str) -> None:
        super().__init__("VALIDATION_ERROR", message)


class ExtractionError(SyncError):
    """Raised when svnlook fails or its output cannot be parsed."""

    def __init__(self, command: list[str], output: str) -> None:
        self.command = list(command)
        self.output = output
        super().__init__("EXTRACTION_ERROR", f"{' '.join(self.command)}, {output}")


class ApiError(SyncError):
    """Raised when a Worktile API call fails.

    ``code`` is the tracker error code from the response body when there is
    one, the HTTP status otherwise, or a transport-level marker such as
    ``CONNECTION_ERROR``.
    """

    def __init__(self, code: str, message: str, method: str, path: str) -> None:
        self.method = method
        self.path = path
        self.detail = message
        super().__init__(code, f"{method} {path}: {message}")


class AuthError(ApiError):
    """Raised when no usable access token can be obtained."""

    pass
