from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .command import CmdResult, run_cmd

logger = logging.getLogger(__name__)


def _git(repo: Path, *args: str, check: bool = True, dry_run: bool = False) -> CmdResult:
    return run_cmd(["git", "-C", str(repo), *args], check=check, dry_run=dry_run)


def is_checkout(path: Path) -> bool:
    return (path / ".git").exists()


def clone(url: str, dest: Path, *, dry_run: bool = False) -> None:
    run_cmd(["git", "clone", url, str(dest)], dry_run=dry_run)


def add_all(repo: Path, *, dry_run: bool = False) -> None:
    _git(repo, "add", ".", dry_run=dry_run)


def has_staged_changes(repo: Path) -> bool:
    # exit 1 means differences
    return _git(repo, "diff", "--cached", "--quiet", check=False).returncode == 1


def is_dirty(repo: Path) -> bool:
    r = _git(repo, "status", "--porcelain", check=False)
    return bool(r.stdout.strip())


def commit(repo: Path, message: str, *, dry_run: bool = False) -> CmdResult:
    return _git(repo, "commit", "-m", message, check=False, dry_run=dry_run)


def push(repo: Path, branch: str, *, remote: str = "origin", dry_run: bool = False) -> CmdResult:
    return _git(repo, "push", remote, branch, check=False, dry_run=dry_run)


def pull(repo: Path, branch: str, *, remote: str = "origin", dry_run: bool = False) -> CmdResult:
    return _git(repo, "pull", remote, branch, check=False, dry_run=dry_run)


def stash(repo: Path, *, dry_run: bool = False) -> CmdResult:
    return _git(repo, "stash", "push", "--include-untracked", check=False, dry_run=dry_run)


def stash_pop(repo: Path, *, dry_run: bool = False) -> CmdResult:
    return _git(repo, "stash", "pop", check=False, dry_run=dry_run)


def remote_url(repo: Path, remote: str = "origin") -> Optional[str]:
    r = _git(repo, "remote", "get-url", remote, check=False)
    return (r.stdout.strip() or None) if r.ok else None


def current_branch(repo: Path) -> Optional[str]:
    r = _git(repo, "branch", "--show-current", check=False)
    return (r.stdout.strip() or None) if r.ok else None
