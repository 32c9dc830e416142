"""Branches resource client."""

import time
from typing import TYPE_CHECKING

from svn_worktile.clients._parse import parse_id, parse_ids

if TYPE_CHECKING:
    from svn_worktile.auth import AuthorizedTransport

DEFAULT_SENDER = "admin"


class BranchesClient:
    """Client for repository branch operations."""

    def __init__(self, transport: "AuthorizedTransport") -> None:
        self.transport = transport

    async def find(self, product_id: str, repository_id: str, name: str) -> list[str]:
        """Find repository branches by name."""
        path = f"/v1/scm/products/{product_id}/repositories/{repository_id}/branches"
        data = await self.transport.request("GET", path, params={"name": name})
        return parse_ids(data, "GET", path)

    async def create(
        self,
        product_id: str,
        repository_id: str,
        name: str,
        sender_name: str = DEFAULT_SENDER,
    ) -> str:
        """Create a repository branch and return its id."""
        path = f"/v1/scm/products/{product_id}/repositories/{repository_id}/branches"
        body = {
            "name": name,
            "sender_name": sender_name,
            "created_at": int(time.time()),
        }
        data = await self.transport.request("POST", path, body=body)
        return parse_id(data, "POST", path)
