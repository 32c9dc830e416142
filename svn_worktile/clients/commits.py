"""Commits and refs resource client."""

from typing import TYPE_CHECKING

from svn_worktile.clients._parse import parse_id
from svn_worktile.types.commits import CommitMeta

if TYPE_CHECKING:
    from svn_worktile.auth import AuthorizedTransport

COMMITS_PATH = "/v1/scm/commits"


class CommitsClient:
    """Client for commit submission and branch ref updates."""

    def __init__(self, transport: "AuthorizedTransport") -> None:
        self.transport = transport

    async def create(self, meta: CommitMeta, tree_id: str, work_item_identifiers: list[str]) -> str:
        """
        Submit a commit record.

        Args:
            meta: Commit metadata
            tree_id: Identifier correlating the commit with its branch
            work_item_identifiers: Work items referenced by the message

        Returns:
            Id Worktile assigned to the commit
        """
        body = {
            "sha": meta.content_id,
            "message": meta.message,
            "committer_name": meta.committer_name,
            "committed_at": int(meta.committed_at.timestamp()),
            "tree_id": tree_id,
            "files_added": list(meta.files_added),
            "files_removed": list(meta.files_removed),
            "files_modified": list(meta.files_modified),
            "work_item_identifiers": work_item_identifiers,
        }
        data = await self.transport.request("POST", COMMITS_PATH, body=body)
        return parse_id(data, "POST", COMMITS_PATH)

    async def update_branch_ref(self, product_id: str, repository_id: str, branch_id: str, sha: str) -> str:
        """
        Point a branch ref at a commit.

        Worktile upserts the ref, so repeating the call is harmless.
        """
        path = f"/v1/scm/products/{product_id}/repositories/{repository_id}/refs"
        body = {
            "meta_type": "branch",
            "meta_id": branch_id,
            "sha": sha,
        }
        data = await self.transport.request("POST", path, body=body)
        return parse_id(data, "POST", path)
