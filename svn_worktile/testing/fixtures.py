"""
Pytest fixtures for svn-worktile testing.

Provides a fake Worktile server, a client wired to it and sample commit data.
"""

from collections.abc import AsyncIterator
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from svn_worktile.client import WorktileClient
from svn_worktile.dispatch import CommitRequest
from svn_worktile.testing.mock import MockWorktile, StubSvnLook
from svn_worktile.types.commits import CommitMeta

SAMPLE_DATE = "2020-05-17 14:27:23 +0800 (Sun, 17 May 2020)"


# ============================================================================
# Helper Functions
# ============================================================================


def create_commit_meta(
    content_id: str = "42        " + "0" * 30,
    message: str = "#X-7 fix",
    committer_name: str = "alice",
    committed_at: datetime | None = None,
    files_added: tuple[str, ...] = ("trunk/a.txt",),
    files_removed: tuple[str, ...] = ("trunk/b.txt",),
    files_modified: tuple[str, ...] = (),
) -> CommitMeta:
    """Create a CommitMeta with sensible defaults."""
    return CommitMeta(
        content_id=content_id,
        message=message,
        committer_name=committer_name,
        committed_at=committed_at or datetime(2020, 5, 17, 14, 27, 23, tzinfo=timezone(timedelta(hours=8))),
        files_added=files_added,
        files_removed=files_removed,
        files_modified=files_modified,
    )


def create_stub_svnlook(
    message: str = "#X-7 fix",
    author: str = "alice",
    date: str = SAMPLE_DATE,
    changed: str = "A   trunk/a.txt\nD   trunk/b.txt/",
    dirs_changed: str = "trunk/",
) -> StubSvnLook:
    """Create a StubSvnLook answering every metadata query."""
    return StubSvnLook(
        {
            "log": message,
            "author": author,
            "date": date,
            "changed": changed,
            "dirs-changed": dirs_changed,
        }
    )


def create_worktile_client(server: MockWorktile, product_name: str = "SVN") -> WorktileClient:
    """Create a WorktileClient that talks to ``server``."""
    return WorktileClient(
        product_name=product_name,
        client_id="test-client-id",
        client_secret="test-client-secret",
        base_url="https://worktile.test",
        http_transport=server.transport(),
    )


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def mock_worktile() -> MockWorktile:
    """
    Provide a fake Worktile server.

    Example:
        ```python
        async def test_commit(worktile_client, mock_worktile, sample_commit_meta):
            await worktile_client.commit("project", "trunk", sample_commit_meta)
            assert mock_worktile.was_called("POST", "/v1/scm/commits")
        ```
    """
    return MockWorktile()


@pytest_asyncio.fixture
async def worktile_client(mock_worktile: MockWorktile) -> AsyncIterator[WorktileClient]:
    """Provide a WorktileClient backed by ``mock_worktile``."""
    client = create_worktile_client(mock_worktile)
    yield client
    await client.close()


@pytest.fixture
def stub_svnlook() -> StubSvnLook:
    """Provide an svnlook stub for revision 42 by alice on trunk."""
    return create_stub_svnlook()


@pytest.fixture
def sample_commit_meta() -> CommitMeta:
    """Provide sample commit metadata."""
    return create_commit_meta()


@pytest.fixture
def sample_commit_request() -> CommitRequest:
    """Provide a sample commit notification."""
    return CommitRequest(repo_path="/var/svn/project", repo_name="project", rev="42")
