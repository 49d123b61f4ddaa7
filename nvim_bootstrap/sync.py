from __future__ import annotations

import logging
import socket
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Sequence

from .errors import SyncConflict, SyncError
from .lib import git
from .lib.command import CmdResult

logger = logging.getLogger(__name__)


def _require_checkout(config_dir: Path) -> None:
    if not git.is_checkout(config_dir):
        raise SyncError(f"Config not found at {config_dir} (not a git checkout); run 'install' first")


def _first_ok(
    op: Callable[[str], CmdResult],
    branches: Sequence[str],
    verb: str,
) -> str:
    errors = []
    for branch in branches:
        r = op(branch)
        if r.ok:
            return branch
        logger.warning("git %s origin %s failed", verb, branch)
        errors.append(f"{branch}: {(r.stderr or '').strip()}")
    raise SyncError(f"git {verb} failed for all branches ({'; '.join(errors)})")


def commit_message(hostname: Optional[str] = None, now: Optional[datetime] = None) -> str:
    host = hostname or socket.gethostname()
    ts = (now or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")
    return f"Update from {host} at {ts}"


def push_config(config_dir: Path, branches: Sequence[str], *, dry_run: bool = False) -> bool:
    """Commit everything and push. Returns False when there was nothing to commit."""

    logger.info("Pushing config to git...")
    _require_checkout(config_dir)

    git.add_all(config_dir, dry_run=dry_run)
    if not dry_run and not git.has_staged_changes(config_dir):
        logger.warning("No changes to commit")
        return False

    r = git.commit(config_dir, commit_message(), dry_run=dry_run)
    if not r.ok:
        raise SyncError(f"git commit failed: {(r.stderr or r.stdout).strip()}")

    branch = _first_ok(lambda b: git.push(config_dir, b, dry_run=dry_run), branches, "push")
    logger.info("Config pushed successfully! (%s)", branch)
    return True


def pull_config(config_dir: Path, branches: Sequence[str], *, dry_run: bool = False) -> None:
    """Pull, keeping local edits via stash/pop."""

    logger.info("Pulling latest config from git...")
    _require_checkout(config_dir)

    stashed = False
    if not dry_run and git.is_dirty(config_dir):
        r = git.stash(config_dir)
        if not r.ok:
            raise SyncError(f"git stash failed: {r.stderr.strip()}")
        stashed = True
        logger.info("Stashed local changes")

    try:
        branch = _first_ok(lambda b: git.pull(config_dir, b, dry_run=dry_run), branches, "pull")
    finally:
        # local edits go back even if the pull failed
        if stashed:
            popped = git.stash_pop(config_dir)
            if not popped.ok:
                raise SyncConflict((popped.stderr or popped.stdout).strip() or "git stash pop failed")

    logger.info("Config pulled successfully! (%s)", branch)
    logger.info("Run :Lazy sync in Neovim to update plugins")
