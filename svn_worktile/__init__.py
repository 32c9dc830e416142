"""svn-worktile - synchronize Subversion commits into Worktile."""

from svn_worktile.auth import AuthorizedTransport, TokenManager
from svn_worktile.cache import ResolutionCache
from svn_worktile.client import WorktileClient
from svn_worktile.dispatch import CommitDispatcher, CommitRequest
from svn_worktile.exceptions import (
    ApiError,
    AuthError,
    ExtractionError,
    SyncError,
    ValidationError,
)
from svn_worktile.logging import configure_logging, get_logger
from svn_worktile.settings import Settings
from svn_worktile.svn import SvnLook
from svn_worktile.transport import AsyncHTTPTransport, RetryConfig
from svn_worktile.types import AccessToken, ChangeSet, CommitMeta

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Main client
    "WorktileClient",
    "CommitDispatcher",
    "CommitRequest",
    # Extraction
    "SvnLook",
    # Types
    "ChangeSet",
    "CommitMeta",
    "AccessToken",
    # Auth and caching
    "TokenManager",
    "AuthorizedTransport",
    "ResolutionCache",
    # Exceptions
    "SyncError",
    "ValidationError",
    "ExtractionError",
    "ApiError",
    "AuthError",
    # Transport
    "AsyncHTTPTransport",
    "RetryConfig",
    # Configuration and logging
    "Settings",
    "configure_logging",
    "get_logger",
]
