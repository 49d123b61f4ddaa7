from __future__ import annotations

import logging
import os
import stat
import time
from pathlib import Path
from typing import Any, Dict, Optional

from ..errors import InstallationFailed
from ..lib import git
from ..lib.command import CommandError
from ..pipeline import InstallCtx

logger = logging.getLogger(__name__)

PATH_EXPORT = 'export PATH="$HOME/.local/bin:$PATH"'


def ensure_local_bin_on_path(ctx: InstallCtx) -> list[str]:
    """Append the PATH export to shell rc files; returns the files changed."""

    local_bin = str(ctx.paths.local_bin)
    if local_bin in os.environ.get("PATH", "").split(os.pathsep):
        return []

    changed = []
    for i, rc in enumerate(ctx.paths.shell_rcs):
        # .bashrc is always written; other rc files only when present
        if i > 0 and not rc.exists():
            continue
        if rc.exists() and PATH_EXPORT in rc.read_text(encoding="utf-8", errors="ignore"):
            continue
        if ctx.dry_run:
            logger.info("Would add ~/.local/bin to PATH in %s", rc)
        else:
            with rc.open("a", encoding="utf-8") as f:
                f.write(f"\n{PATH_EXPORT}\n")
        changed.append(str(rc))
    if not ctx.dry_run:
        # later steps (pip --user scripts, nvim) run in this process
        os.environ["PATH"] = f"{local_bin}{os.pathsep}{os.environ.get('PATH', '')}"
    return changed


def backup_existing(config_dir: Path, *, dry_run: bool = False, now: Optional[int] = None) -> Optional[Path]:
    """Rename a config dir that is not a git checkout. Backups are never deleted."""

    if not config_dir.is_dir() or git.is_checkout(config_dir):
        return None
    backup = config_dir.with_name(f"{config_dir.name}.backup.{now or int(time.time())}")
    logger.warning("Backing up existing config to %s", backup)
    if not dry_run:
        config_dir.rename(backup)
    return backup


def make_scripts_executable(config_dir: Path) -> None:
    for script in sorted((config_dir / "scripts").glob("*.sh")):
        mode = script.stat().st_mode
        script.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


class SetupConfigStep:
    step_id = "60_setup_config"

    def applies(self, ctx: InstallCtx, state: Dict[str, Any]) -> bool:
        return True

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        logger.info("Setting up common configurations...")
        decisions = state.setdefault("decisions", {})
        decisions["path_updated"] = ensure_local_bin_on_path(ctx)

        config_dir = ctx.settings.config_dir
        backup = backup_existing(config_dir, dry_run=ctx.dry_run)
        if backup:
            decisions["config_backup"] = str(backup)

        if not git.is_checkout(config_dir):
            logger.info("Cloning Neovim config from %s...", ctx.settings.repo_url)
            try:
                git.clone(ctx.settings.repo_url, config_dir, dry_run=ctx.dry_run)
            except CommandError as e:
                raise InstallationFailed(
                    "config clone",
                    f"{e.stderr.strip() or e}. Make sure repo_url points at your config repository",
                ) from e

        if not ctx.dry_run:
            make_scripts_executable(config_dir)
        return state
