"""
Commit notification handling.

A post-commit hook (or the local listener it notifies) hands over a
``(repo_path, repo_name, rev)`` triple. The dispatcher extracts the commit
metadata right away, so a bad revision is reported to the caller, and then
synchronizes with Worktile in a background task.
"""

import asyncio
from dataclasses import dataclass
from typing import Any

from svn_worktile.client import WorktileClient
from svn_worktile.commits import build_commit_meta
from svn_worktile.exceptions import SyncError, ValidationError
from svn_worktile.logging import get_logger
from svn_worktile.svn import SvnLook, gather_all
from svn_worktile.types.commits import CommitMeta

logger = get_logger()

DEFAULT_BRANCH = "trunk"


@dataclass(frozen=True)
class CommitRequest:
    """A commit notification."""

    repo_path: str
    repo_name: str
    rev: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CommitRequest":
        """
        Build a request from a decoded JSON payload.

        Raises:
            ValidationError: If a field is missing or empty
        """
        missing = [key for key in ("repo_path", "repo_name", "rev") if not data.get(key)]
        if missing:
            raise ValidationError(f"commit request is missing {', '.join(missing)}")
        return cls(repo_path=str(data["repo_path"]), repo_name=str(data["repo_name"]), rev=str(data["rev"]))

    def to_dict(self) -> dict[str, str]:
        return {"repo_path": self.repo_path, "repo_name": self.repo_name, "rev": self.rev}


class CommitDispatcher:
    """
    Turns commit notifications into Worktile synchronizations.

    Example:
        ```python
        async with WorktileClient.from_settings(settings) as client:
            dispatcher = CommitDispatcher(client, SvnLook())
            ack = await dispatcher.dispatch(CommitRequest("/var/svn/project", "project", "42"))
            ...
            await dispatcher.drain()
        ```
    """

    def __init__(
        self,
        client: WorktileClient,
        svnlook: SvnLook,
        default_branch: str = DEFAULT_BRANCH,
    ) -> None:
        """
        Initialize the dispatcher.

        Args:
            client: Shared Worktile client
            svnlook: Metadata extractor
            default_branch: Branch used when a revision touches no branch or tag
        """
        self.client = client
        self.svnlook = svnlook
        self.default_branch = default_branch
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        """Number of synchronizations still running in the background."""
        return len(self._tasks)

    async def prepare(self, request: CommitRequest) -> tuple[str, CommitMeta]:
        """
        Extract the branch and commit metadata of a notified revision.

        Returns:
            ``(branch, meta)``

        Raises:
            ExtractionError: If svnlook fails
        """
        (message, author, committed_at, changes), branch = await gather_all(
            self.svnlook.extract(request.repo_path, request.rev),
            self.svnlook.branch(request.repo_path, request.rev),
        )
        meta = build_commit_meta(request.rev, message, author, committed_at, changes)
        return branch or self.default_branch, meta

    async def synchronize(self, request: CommitRequest) -> CommitMeta:
        """
        Extract and synchronize a revision, waiting for Worktile.

        Returns:
            The submitted commit metadata

        Raises:
            SyncError: If extraction or any Worktile call fails
        """
        branch, meta = await self.prepare(request)
        await self.client.commit(request.repo_name, branch, meta)
        return meta

    async def dispatch(self, request: CommitRequest) -> dict[str, Any]:
        """
        Extract a revision and synchronize it in the background.

        Returns:
            ``{"status": 0, "msg": "ok"}`` once the synchronization is
            scheduled, or ``{"status": -1, "msg": <error>}`` when the
            revision cannot be read
        """
        try:
            branch, meta = await self.prepare(request)
        except SyncError as e:
            logger.warning(f"cannot read {request.repo_path} r{request.rev}: {e}")
            return {"status": -1, "msg": str(e)}

        task = asyncio.create_task(self._commit(request, branch, meta))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return {"status": 0, "msg": "ok"}

    async def drain(self) -> None:
        """Wait for all background synchronizations to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _commit(self, request: CommitRequest, branch: str, meta: CommitMeta) -> None:
        try:
            await self.client.commit(request.repo_name, branch, meta)
        except SyncError as e:
            logger.error(f"synchronizing {request.repo_name}@{branch} r{request.rev} failed: {e}")
        except Exception:
            logger.exception(f"synchronizing {request.repo_name}@{branch} r{request.rev} failed unexpectedly")
