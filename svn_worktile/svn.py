"""
Subversion helper utilities for svn-worktile.

Extracts commit metadata from a repository with read-only ``svnlook``
queries. ``svnlook`` writes in the console code page of the host, so output
is decoded with a configurable legacy encoding and invalid bytes are
replaced rather than rejected.
"""

import asyncio
import codecs
import contextlib
import re
from collections.abc import Awaitable
from datetime import datetime
from typing import Any

from svn_worktile.exceptions import ExtractionError, ValidationError
from svn_worktile.logging import log_svnlook_command
from svn_worktile.types.commits import ChangeSet

DEFAULT_ENCODING = "gbk"
SVNLOOK_TIMEOUT = 30.0

# svnlook date: 2020-05-17 14:27:23 +0800 (Sun, 17 May 2020)
DATE_FORMAT = "%Y-%m-%d %H:%M:%S %z"

_BRANCH_PATTERN = re.compile(r"(?m)(?:^|/)(?:branches|tags)/(\w+)/")

_CHANGE_KINDS = {"A": "added", "D": "removed", "U": "modified"}


def parse_date(text: str) -> datetime:
    """
    Parse ``svnlook date`` output.

    Args:
        text: Raw date line, optionally followed by a localized annotation
            in parentheses

    Returns:
        Timezone-aware datetime

    Raises:
        ValueError: If the text does not match ``YYYY-MM-DD HH:MM:SS +HHMM``
    """
    marker = text.find(" (")
    if marker != -1:
        text = text[:marker]
    return datetime.strptime(text.strip(), DATE_FORMAT)


def parse_changed(text: str) -> ChangeSet:
    """
    Partition ``svnlook changed`` output into added/removed/modified paths.

    Lines starting with ``A``, ``D`` or ``U`` are kept; the status letter,
    the whitespace after it and a single trailing ``/`` are dropped. Any
    other line is ignored.
    """
    changes = ChangeSet()
    for line in text.splitlines():
        kind = _CHANGE_KINDS.get(line[:1])
        if kind is None:
            continue
        path = line[1:].lstrip()
        if path.endswith("/"):
            path = path[:-1]
        getattr(changes, kind).append(path)
    return changes


def detect_branch(text: str) -> str | None:
    """
    Find the branch or tag a set of changed paths belongs to.

    Args:
        text: ``svnlook dirs-changed`` (or ``changed``) output

    Returns:
        The ``<name>`` of the first ``branches/<name>/`` or ``tags/<name>/``
        path, or None for trunk and anything else
    """
    match = _BRANCH_PATTERN.search(text)
    if match is None:
        return None
    return match.group(1)


async def gather_all(*aws: Awaitable[Any]) -> list[Any]:
    """
    Await several operations concurrently.

    When one fails, the others are cancelled and awaited before its
    exception propagates.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def _decode(data: bytes, encoding: str) -> str:
    text = data.decode(encoding, errors="replace")
    if text.endswith("\n"):
        text = text[:-1]
        if text.endswith("\r"):
            text = text[:-1]
    return text


async def _terminate(process: asyncio.subprocess.Process) -> None:
    with contextlib.suppress(ProcessLookupError):
        process.kill()
    await process.wait()


class SvnLook:
    """
    Runs ``svnlook`` subcommands against a repository revision.

    Example:
        ```python
        svnlook = SvnLook()
        message, author, committed_at, changes = await svnlook.extract(
            "/var/svn/project", "42"
        )
        branch = await svnlook.branch("/var/svn/project", "42") or "trunk"
        ```
    """

    def __init__(
        self,
        executable: str = "svnlook",
        encoding: str = DEFAULT_ENCODING,
        timeout: float = SVNLOOK_TIMEOUT,
    ) -> None:
        """
        Initialize the svnlook runner.

        Args:
            executable: svnlook binary name or path
            encoding: Encoding of svnlook's console output
            timeout: Per-invocation timeout in seconds

        Raises:
            ValidationError: If the encoding is unknown
        """
        try:
            codecs.lookup(encoding)
        except LookupError as e:
            raise ValidationError(f"unknown svnlook output encoding {encoding!r}") from e

        self.executable = executable
        self.encoding = encoding
        self.timeout = timeout

    async def message(self, repo_path: str, rev: str) -> str:
        """Get the log message of a revision."""
        return await self.run("log", repo_path, "-r", rev)

    async def author(self, repo_path: str, rev: str) -> str:
        """Get the author of a revision."""
        return await self.run("author", repo_path, "-r", rev)

    async def date(self, repo_path: str, rev: str) -> datetime:
        """
        Get the commit time of a revision.

        Raises:
            ExtractionError: If svnlook fails or prints an unparseable date
        """
        args = ["date", repo_path, "-r", rev]
        text = await self.run(*args)
        try:
            return parse_date(text)
        except ValueError as e:
            raise ExtractionError([self.executable, *args], f"cannot parse date {text!r}: {e}") from e

    async def changed(self, repo_path: str, rev: str) -> ChangeSet:
        """Get the paths added, removed and modified by a revision."""
        return parse_changed(await self.run("changed", repo_path, "-r", rev))

    async def branch(self, repo_path: str, rev: str) -> str | None:
        """Get the branch or tag a revision was committed to, None for trunk."""
        return detect_branch(await self.run("dirs-changed", repo_path, "-r", rev))

    async def extract(self, repo_path: str, rev: str) -> tuple[str, str, datetime, ChangeSet]:
        """
        Run the four metadata queries for a revision concurrently.

        When one query fails the others are cancelled.

        Returns:
            ``(message, author, committed_at, changes)``

        Raises:
            ExtractionError: If any query fails
        """
        message, author, committed_at, changes = await gather_all(
            self.message(repo_path, rev),
            self.author(repo_path, rev),
            self.date(repo_path, rev),
            self.changed(repo_path, rev),
        )
        return message, author, committed_at, changes

    async def run(self, *args: str) -> str:
        """
        Run one svnlook subcommand and return its decoded stdout.

        One trailing line terminator is removed from the output.

        Raises:
            ExtractionError: On a non-zero exit status, a missing executable
                or a timeout. The message carries stderr, else stdout, else
                ``(EMPTY)``.
        """
        command = [self.executable, *args]
        log_svnlook_command(list(args))

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise ExtractionError(command, f"{self.executable} not found") from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.CancelledError:
            await _terminate(process)
            raise
        except asyncio.TimeoutError as e:
            await _terminate(process)
            raise ExtractionError(command, f"timed out after {self.timeout} seconds") from e

        if process.returncode == 0:
            return _decode(stdout, self.encoding)

        diagnostic = _decode(stderr if stderr else stdout, self.encoding).strip()
        if not diagnostic:
            diagnostic = "(EMPTY)"
        log_svnlook_command(list(args), process.returncode, diagnostic)
        raise ExtractionError(command, diagnostic)
