"""Shared fixtures for the svn-worktile test suite."""

import pytest

from svn_worktile.testing.fixtures import (  # noqa: F401
    mock_worktile,
    sample_commit_meta,
    sample_commit_request,
    stub_svnlook,
    worktile_client,
)

_SETTINGS_ENV = [
    "WORKTILE_API_URL",
    "WORKTILE_PRODUCT_NAME",
    "WORKTILE_CLIENT_ID",
    "WORKTILE_CLIENT_SECRET",
    "WORKTILE_TIMEOUT",
    "WORKTILE_VERIFY_SSL",
    "SVNLOOK_PATH",
    "SVN_ENCODING",
    "SVN_DEFAULT_BRANCH",
    "HTTP_LISTEN",
]


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove every settings variable from the environment."""
    for name in _SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
