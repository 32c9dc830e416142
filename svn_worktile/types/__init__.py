"""svn-worktile type definitions.

This module exports the data model types shared across the package.
"""

from svn_worktile.types.auth import AccessToken
from svn_worktile.types.commits import ChangeSet, CommitMeta

__all__ = [
    # Commit metadata
    "ChangeSet",
    "CommitMeta",
    # Authentication
    "AccessToken",
]
