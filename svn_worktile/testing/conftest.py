"""
Pytest plugin for svn-worktile testing fixtures.

To use these fixtures in your tests, add this to your conftest.py:

    pytest_plugins = ["svn_worktile.testing.conftest"]
"""

from svn_worktile.testing.fixtures import (
    mock_worktile,
    sample_commit_meta,
    sample_commit_request,
    stub_svnlook,
    worktile_client,
)

__all__ = [
    "mock_worktile",
    "worktile_client",
    "stub_svnlook",
    "sample_commit_meta",
    "sample_commit_request",
]
