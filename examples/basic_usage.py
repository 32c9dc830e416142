#!/usr/bin/env python3
"""
Basic svn-worktile usage example.

Synchronizes one revision, the way a post-commit hook would:

    python examples/basic_usage.py /var/svn/project project 42

Reads config.toml from the working directory and WORKTILE_* environment
variables.
"""

import asyncio
import logging
import sys

from svn_worktile import (
    CommitDispatcher,
    CommitRequest,
    Settings,
    SvnLook,
    SyncError,
    WorktileClient,
    configure_logging,
)


async def main(repo_path: str, repo_name: str, rev: str) -> int:
    settings = Settings.from_file().validate()
    svnlook = SvnLook(executable=settings.svnlook_path, encoding=settings.svn_encoding)

    async with WorktileClient.from_settings(settings) as client:
        dispatcher = CommitDispatcher(client, svnlook, default_branch=settings.default_branch)
        try:
            meta = await dispatcher.synchronize(CommitRequest(repo_path, repo_name, rev))
        except SyncError as e:
            print(f"r{rev} not synchronized: {e}", file=sys.stderr)
            return 1

    print(f"r{rev} synchronized as {meta.content_id}")
    return 0


if __name__ == "__main__":
    if len(sys.argv) != 4:
        print(f"usage: {sys.argv[0]} REPO_PATH REPO_NAME REV", file=sys.stderr)
        sys.exit(2)

    configure_logging(level=logging.INFO)
    sys.exit(asyncio.run(main(*sys.argv[1:])))
