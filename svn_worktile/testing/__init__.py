"""svn-worktile testing utilities.

Provides a fake Worktile server, an svnlook stub and fixtures for testing
code that synchronizes commits.
"""

from svn_worktile.testing.fixtures import (
    create_commit_meta,
    create_stub_svnlook,
    create_worktile_client,
)
from svn_worktile.testing.mock import MockCall, MockResponse, MockWorktile, StubSvnLook

__all__ = [
    # Fakes
    "MockWorktile",
    "MockCall",
    "MockResponse",
    "StubSvnLook",
    # Helper functions
    "create_commit_meta",
    "create_stub_svnlook",
    "create_worktile_client",
]
