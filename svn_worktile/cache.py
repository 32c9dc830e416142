"""In-memory cache of Worktile identifiers keyed by natural names."""

from svn_worktile.locks import ReadWriteLock


class ResolutionCache:
    """
    Natural key to Worktile id mappings shared by all synchronizations.

    Holds the product id and the user, repository and branch ids issued by
    Worktile. Entries are never evicted: an id is trusted until the process
    exits. Lookups take the read side of the lock, insertions the write side,
    and the lock is never held across a network call.
    """

    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._product: tuple[str, str] | None = None
        self._users: dict[str, str] = {}
        self._repositories: dict[str, str] = {}
        self._branches: dict[tuple[str, str], str] = {}

    async def product(self, name: str) -> str | None:
        async with self._lock.reader():
            if self._product is not None and self._product[0] == name:
                return self._product[1]
            return None

    async def set_product(self, name: str, product_id: str) -> None:
        async with self._lock.writer():
            self._product = (name, product_id)

    async def user(self, name: str) -> str | None:
        async with self._lock.reader():
            return self._users.get(name)

    async def set_user(self, name: str, user_id: str) -> None:
        async with self._lock.writer():
            self._users[name] = user_id

    async def repository(self, full_name: str) -> str | None:
        async with self._lock.reader():
            return self._repositories.get(full_name)

    async def set_repository(self, full_name: str, repository_id: str) -> None:
        async with self._lock.writer():
            self._repositories[full_name] = repository_id

    async def branch(self, repository: str, name: str) -> str | None:
        async with self._lock.reader():
            return self._branches.get((repository, name))

    async def set_branch(self, repository: str, name: str, branch_id: str) -> None:
        async with self._lock.writer():
            self._branches[(repository, name)] = branch_id

    def __len__(self) -> int:
        return (self._product is not None) + len(self._users) + len(self._repositories) + len(self._branches)
