"""Products resource client.

A Worktile "product" is the code hosting platform commits are attributed
to; svn-worktile registers a single one of type ``svn``.
"""

from typing import TYPE_CHECKING

from svn_worktile.clients._parse import parse_id, parse_ids

if TYPE_CHECKING:
    from svn_worktile.auth import AuthorizedTransport

PRODUCTS_PATH = "/v1/scm/products"


class ProductsClient:
    """Client for SCM product operations."""

    def __init__(self, transport: "AuthorizedTransport") -> None:
        self.transport = transport

    async def find(self, name: str) -> list[str]:
        """
        Find products by name.

        Returns:
            Ids of matching products, possibly empty
        """
        data = await self.transport.request("GET", PRODUCTS_PATH, params={"name": name})
        return parse_ids(data, "GET", PRODUCTS_PATH)

    async def create(self, name: str) -> str:
        """
        Register a Subversion product.

        Returns:
            Id of the new product
        """
        body = {
            "name": name,
            "type": "svn",
            "description": "Subversion",
        }
        data = await self.transport.request("POST", PRODUCTS_PATH, body=body)
        return parse_id(data, "POST", PRODUCTS_PATH)
