"""Commit-related data models."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class ChangeSet:
    """Paths touched by a revision, partitioned by change kind."""

    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    modified: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CommitMeta:
    """Commit metadata submitted to Worktile."""

    content_id: str  # 40 characters, shaped like a git sha
    message: str
    committer_name: str
    committed_at: datetime  # timezone-aware
    files_added: tuple[str, ...] = ()
    files_removed: tuple[str, ...] = ()
    files_modified: tuple[str, ...] = ()
