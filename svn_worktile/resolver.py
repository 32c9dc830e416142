"""
Get-or-create resolution of Worktile entities.

Every entity follows the same protocol: a cache hit returns immediately;
a miss queries Worktile by natural key and takes the first match; no match
creates the entity. The resulting id is cached for the life of the process.

Two tasks resolving the same unseen key at once can both miss and both
create, leaving a duplicate entity in Worktile. The cache lock is only held
for the in-memory read or write, never across the query and create calls.
"""

from collections.abc import Awaitable, Callable

from svn_worktile.cache import ResolutionCache
from svn_worktile.clients import BranchesClient, ProductsClient, RepositoriesClient, UsersClient
from svn_worktile.logging import get_logger

logger = get_logger()


async def get_or_create(
    kind: str,
    key: str,
    lookup: Callable[[], Awaitable[str | None]],
    find: Callable[[], Awaitable[list[str]]],
    create: Callable[[], Awaitable[str]],
    store: Callable[[str], Awaitable[None]],
) -> str:
    """
    Resolve one entity id.

    Args:
        kind: Entity kind, for logging
        key: Natural key, for logging
        lookup: Cache read
        find: Worktile query by natural key
        create: Worktile create call
        store: Cache write

    Returns:
        Worktile id of the entity
    """
    cached = await lookup()
    if cached is not None:
        return cached

    ids = await find()
    if ids:
        entity_id = ids[0]
    else:
        entity_id = await create()
        logger.info(f"created {kind} {key!r} in Worktile, id={entity_id}")

    await store(entity_id)
    return entity_id


class EntityResolver:
    """
    Resolves product, repository, branch and user ids for one product.

    Parent entities are resolved only when the cache misses.
    """

    def __init__(
        self,
        product_name: str,
        cache: ResolutionCache,
        products: ProductsClient,
        users: UsersClient,
        repositories: RepositoriesClient,
        branches: BranchesClient,
    ) -> None:
        self.product_name = product_name
        self.cache = cache
        self.products = products
        self.users = users
        self.repositories = repositories
        self.branches = branches

    async def product_id(self) -> str:
        """Get the id of the configured product, registering it on first use."""
        name = self.product_name
        return await get_or_create(
            "product",
            name,
            lambda: self.cache.product(name),
            lambda: self.products.find(name),
            lambda: self.products.create(name),
            lambda entity_id: self.cache.set_product(name, entity_id),
        )

    async def user_id(self, name: str) -> str:
        """Get the id of a product user."""

        async def find() -> list[str]:
            return await self.users.find(await self.product_id(), name)

        async def create() -> str:
            return await self.users.create(await self.product_id(), name)

        return await get_or_create(
            "user",
            name,
            lambda: self.cache.user(name),
            find,
            create,
            lambda entity_id: self.cache.set_user(name, entity_id),
        )

    async def repository_id(self, full_name: str) -> str:
        """Get the id of a repository."""

        async def find() -> list[str]:
            return await self.repositories.find(await self.product_id(), full_name)

        async def create() -> str:
            return await self.repositories.create(await self.product_id(), full_name)

        return await get_or_create(
            "repository",
            full_name,
            lambda: self.cache.repository(full_name),
            find,
            create,
            lambda entity_id: self.cache.set_repository(full_name, entity_id),
        )

    async def branch_id(self, repository: str, name: str) -> str:
        """Get the id of a branch of a repository."""

        async def scope() -> tuple[str, str]:
            return await self.product_id(), await self.repository_id(repository)

        async def find() -> list[str]:
            return await self.branches.find(*await scope(), name)

        async def create() -> str:
            return await self.branches.create(*await scope(), name)

        return await get_or_create(
            "branch",
            f"{repository}:{name}",
            lambda: self.cache.branch(repository, name),
            find,
            create,
            lambda entity_id: self.cache.set_branch(repository, name, entity_id),
        )
