"""
svn-worktile main client.

Provides the interface that synchronizes Subversion commits into Worktile.
"""

from typing import Any

import httpx

from svn_worktile.auth import AuthorizedTransport, TokenManager
from svn_worktile.cache import ResolutionCache
from svn_worktile.clients import (
    BranchesClient,
    CommitsClient,
    ProductsClient,
    RepositoriesClient,
    UsersClient,
)
from svn_worktile.commits import tree_id, work_item_identifiers
from svn_worktile.exceptions import ValidationError
from svn_worktile.logging import get_logger
from svn_worktile.resolver import EntityResolver
from svn_worktile.settings import DEFAULT_API_URL, Settings
from svn_worktile.transport import AsyncHTTPTransport, RetryConfig
from svn_worktile.types.commits import CommitMeta

logger = get_logger()


class WorktileClient:
    """
    Async client that links Subversion commits to Worktile.

    One instance is meant to be shared by every concurrent synchronization:
    it owns the access token and the cache of Worktile ids, both of which
    live as long as the client.

    Example:
        ```python
        import asyncio
        from svn_worktile import SvnLook, WorktileClient
        from svn_worktile.commits import build_commit_meta

        async def main():
            async with WorktileClient(
                product_name="SVN",
                client_id="my-client-id",
                client_secret="my-client-secret",
            ) as client:
                svnlook = SvnLook()
                message, author, committed_at, changes = await svnlook.extract(
                    "/var/svn/project", "42"
                )
                meta = build_commit_meta("42", message, author, committed_at, changes)
                await client.commit("project", "trunk", meta)

        asyncio.run(main())
        ```
    """

    DEFAULT_BASE_URL = DEFAULT_API_URL
    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        product_name: str,
        client_id: str,
        client_secret: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        retry_config: RetryConfig | None = None,
        verify_ssl: bool = True,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the Worktile client.

        Args:
            product_name: Display name of the Worktile product commits belong to
            client_id: Worktile application client id
            client_secret: Worktile application client secret
            base_url: Base URL for API requests (default: https://open.worktile.com)
            timeout: Request timeout in seconds (default: 30.0)
            retry_config: Transport-level retry behavior for queries (optional)
            verify_ssl: Verify the server certificate (default: True)
            http_transport: Custom httpx transport, mainly for tests (optional)

        Raises:
            ValidationError: If the URL, product name or credentials are empty
        """
        if not base_url:
            raise ValidationError("Worktile API URL is empty")
        if not product_name:
            raise ValidationError("product_name is not set")
        if not client_id or not client_secret:
            raise ValidationError("Worktile API credentials are missing")

        self.product_name = product_name
        self.base_url = base_url
        self.timeout = timeout

        self._transport = AsyncHTTPTransport(
            base_url=base_url,
            timeout=timeout,
            retry_config=retry_config,
            verify_ssl=verify_ssl,
            http_transport=http_transport,
        )
        self.tokens = TokenManager(self._transport, client_id, client_secret)
        self.cache = ResolutionCache()

        authorized = AuthorizedTransport(self._transport, self.tokens)
        self.products = ProductsClient(authorized)
        self.users = UsersClient(authorized)
        self.repositories = RepositoriesClient(authorized)
        self.branches = BranchesClient(authorized)
        self.commits = CommitsClient(authorized)

        self.resolver = EntityResolver(
            product_name,
            self.cache,
            self.products,
            self.users,
            self.repositories,
            self.branches,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        retry_config: RetryConfig | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> "WorktileClient":
        """
        Create a client from loaded settings.

        Raises:
            ValidationError: If required settings are missing
        """
        settings.validate()
        return cls(
            product_name=settings.product_name,
            client_id=settings.client_id,
            client_secret=settings.client_secret,
            base_url=settings.api_url,
            timeout=settings.timeout,
            retry_config=retry_config,
            verify_ssl=settings.verify_ssl,
            http_transport=http_transport,
        )

    @classmethod
    def from_env(cls, retry_config: RetryConfig | None = None) -> "WorktileClient":
        """
        Create a client from environment variables.

        See ``Settings.from_env`` for the variables read.

        Raises:
            ValidationError: If required environment variables are missing
        """
        return cls.from_settings(Settings.from_env(), retry_config=retry_config)

    @property
    def transport(self) -> AsyncHTTPTransport:
        """Get the underlying HTTP transport (for advanced use cases)."""
        return self._transport

    async def commit(self, repository: str, branch: str, meta: CommitMeta) -> None:
        """
        Synchronize one commit into Worktile.

        Resolves (creating when needed) the product, repository, branch and
        committer, submits the commit and moves the branch ref to it.

        Args:
            repository: Repository full name
            branch: Branch name
            meta: Commit metadata

        Raises:
            AuthError: If no valid access token can be obtained
            ApiError: If any Worktile call fails
        """
        product_id = await self.resolver.product_id()
        repository_id = await self.resolver.repository_id(repository)
        branch_id = await self.resolver.branch_id(repository, branch)

        # Worktile only links commits whose committer is a known user.
        await self.resolver.user_id(meta.committer_name)

        await self.commits.create(
            meta,
            tree_id(repository_id, branch_id),
            work_item_identifiers(meta.message),
        )
        await self.commits.update_branch_ref(product_id, repository_id, branch_id, meta.content_id)

        logger.info(f"synchronized commit {meta.content_id!r} to {repository}/{branch}")

    async def close(self) -> None:
        """Close the client and release resources."""
        await self._transport.close()

    async def __aenter__(self) -> "WorktileClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit - closes the client."""
        await self.close()
