"""Users resource client."""

from typing import TYPE_CHECKING

from svn_worktile.clients._parse import parse_id, parse_ids

if TYPE_CHECKING:
    from svn_worktile.auth import AuthorizedTransport


class UsersClient:
    """Client for product user operations."""

    def __init__(self, transport: "AuthorizedTransport") -> None:
        self.transport = transport

    async def find(self, product_id: str, name: str) -> list[str]:
        """Find product users by name."""
        path = f"/v1/scm/products/{product_id}/users"
        data = await self.transport.request("GET", path, params={"name": name})
        return parse_ids(data, "GET", path)

    async def create(self, product_id: str, name: str) -> str:
        """
        Create a product user.

        The svn author name is used for both ``name`` and ``display_name``.
        """
        path = f"/v1/scm/products/{product_id}/users"
        data = await self.transport.request("POST", path, body={"name": name, "display_name": name})
        return parse_id(data, "POST", path)
