"""svn-worktile resource clients."""

from svn_worktile.clients.branches import BranchesClient
from svn_worktile.clients.commits import CommitsClient
from svn_worktile.clients.products import ProductsClient
from svn_worktile.clients.repositories import RepositoriesClient
from svn_worktile.clients.users import UsersClient

__all__ = [
    "ProductsClient",
    "UsersClient",
    "RepositoriesClient",
    "BranchesClient",
    "CommitsClient",
]
