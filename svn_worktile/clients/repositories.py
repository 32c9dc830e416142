"""Repositories resource client."""

import time
from typing import TYPE_CHECKING

from svn_worktile.clients._parse import parse_id, parse_ids

if TYPE_CHECKING:
    from svn_worktile.auth import AuthorizedTransport

DEFAULT_OWNER = "admin"


class RepositoriesClient:
    """Client for product repository operations."""

    def __init__(self, transport: "AuthorizedTransport") -> None:
        self.transport = transport

    async def find(self, product_id: str, full_name: str) -> list[str]:
        """Find repositories by full name."""
        path = f"/v1/scm/products/{product_id}/repositories"
        data = await self.transport.request("GET", path, params={"full_name": full_name})
        return parse_ids(data, "GET", path)

    async def create(self, product_id: str, full_name: str, owner_name: str = DEFAULT_OWNER) -> str:
        """
        Create a private repository.

        Args:
            product_id: Owning product
            full_name: Repository name, used as both ``name`` and ``full_name``
            owner_name: Worktile user recorded as the owner

        Returns:
            Id of the new repository
        """
        path = f"/v1/scm/products/{product_id}/repositories"
        body = {
            "name": full_name,
            "full_name": full_name,
            "is_fork": False,
            "is_private": True,
            "owner_name": owner_name,
            "created_at": int(time.time()),
        }
        data = await self.transport.request("POST", path, body=body)
        return parse_id(data, "POST", path)
