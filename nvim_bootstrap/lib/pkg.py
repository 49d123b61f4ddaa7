from __future__ import annotations

import logging
from typing import Sequence

from .command import CmdResult, run_cmd, sudo

logger = logging.getLogger(__name__)


def apt_update(*, check: bool = True, dry_run: bool = False) -> CmdResult:
    return run_cmd(sudo(["apt-get", "update"]), check=check, dry_run=dry_run)


def apt_clean(*, dry_run: bool = False) -> None:
    run_cmd(sudo(["apt-get", "clean"]), check=False, dry_run=dry_run)


def apt_install(packages: Sequence[str], *, dry_run: bool = False) -> None:
    if not packages:
        return
    run_cmd(sudo(["apt-get", "install", "-y", *packages]), dry_run=dry_run)


def apt_remove(packages: Sequence[str], *, purge: bool = True, dry_run: bool = False) -> CmdResult:
    """Remove packages; returns the result instead of raising so callers decide severity."""

    if not packages:
        return CmdResult(argv=[], returncode=0, stdout="", stderr="")
    argv = ["apt-get", "remove", "-y"]
    if purge:
        argv.append("--purge")
    return run_cmd(sudo([*argv, *packages]), check=False, dry_run=dry_run)


def add_apt_repository(repo: str, *, dry_run: bool = False) -> None:
    run_cmd(sudo(["add-apt-repository", "-y", repo]), dry_run=dry_run)


def brew_install(packages: Sequence[str], *, cask: bool = False, dry_run: bool = False) -> None:
    if not packages:
        return
    argv = ["brew", "install"]
    if cask:
        argv.append("--cask")
    run_cmd([*argv, *packages], dry_run=dry_run)


def brew_install_or_upgrade(package: str, *, dry_run: bool = False) -> None:
    r = run_cmd(["brew", "install", package], check=False, dry_run=dry_run)
    if not r.ok:
        logger.info("brew install %s failed, trying upgrade", package)
        run_cmd(["brew", "upgrade", package], dry_run=dry_run)


def brew_uninstall(package: str, *, dry_run: bool = False) -> CmdResult:
    return run_cmd(["brew", "uninstall", package], check=False, dry_run=dry_run)


def pip_install(
    packages: Sequence[str],
    *,
    user: bool = False,
    upgrade: bool = False,
    dry_run: bool = False,
) -> None:
    if not packages:
        return
    argv = ["pip3", "install"]
    if user:
        argv.append("--user")
    if upgrade:
        argv.append("--upgrade")
    run_cmd([*argv, *packages], dry_run=dry_run)
