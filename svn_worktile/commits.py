"""
Commit metadata transformation.

Turns raw svnlook output into the CommitMeta record Worktile expects.
Subversion revisions have no content hash, so a 40-character identifier
shaped like a git sha is synthesized from the revision number.
"""

import hashlib
import re
import secrets
from datetime import datetime

from svn_worktile.types.commits import ChangeSet, CommitMeta

REVISION_WIDTH = 10
RANDOM_BYTES = 15

# Worktile work item references, e.g. #PROD-1234
_WORK_ITEM_PATTERN = re.compile(r"#([A-Za-z0-9_]+-[0-9]+)")


def synthesize_content_id(rev: str) -> str:
    """
    Build a 40-character content identifier for a revision.

    The revision is left-justified in a 10-character space-padded field
    (truncated when longer) and followed by 15 random bytes as lowercase hex.
    Two calls for the same revision return different identifiers.
    """
    prefix = rev[:REVISION_WIDTH].ljust(REVISION_WIDTH)
    return prefix + secrets.token_hex(RANDOM_BYTES)


def work_item_identifiers(message: str) -> list[str]:
    """
    Extract Worktile work item identifiers referenced by a commit message.

    Example:
        >>> work_item_identifiers("fix #PROD-1234 and #ABC_1-22")
        ['PROD-1234', 'ABC_1-22']
    """
    return _WORK_ITEM_PATTERN.findall(message)


def tree_id(repository_id: str, branch_id: str) -> str:
    """SHA-1 hex digest of ``"<repository_id>/<branch_id>"``."""
    return hashlib.sha1(f"{repository_id}/{branch_id}".encode("utf-8")).hexdigest()


def build_commit_meta(
    rev: str,
    message: str,
    author: str,
    committed_at: datetime,
    changes: ChangeSet,
) -> CommitMeta:
    """
    Assemble the CommitMeta for one synchronization attempt.

    Args:
        rev: Revision number
        message: Log message
        author: svn author, used as the Worktile committer name
        committed_at: Commit time
        changes: Paths touched by the revision

    Returns:
        CommitMeta with a freshly synthesized content identifier
    """
    return CommitMeta(
        content_id=synthesize_content_id(rev),
        message=message,
        committer_name=author,
        committed_at=committed_at,
        files_added=tuple(changes.added),
        files_removed=tuple(changes.removed),
        files_modified=tuple(changes.modified),
    )
