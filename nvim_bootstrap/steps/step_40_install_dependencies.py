from __future__ import annotations

import logging
import platform
import tempfile
from pathlib import Path
from typing import Any, Dict

from ..context import OsKind
from ..lib import net
from ..lib.command import run_cmd, sudo
from ..lib.pkg import apt_install, apt_update, brew_install
from ..pipeline import InstallCtx

logger = logging.getLogger(__name__)

LAZYGIT_REPO = "jesseduffield/lazygit"

_LAZYGIT_ARCH = {
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "armv6",
    "armv6l": "armv6",
}


def lazygit_tarball_url(version: str, machine: str) -> str:
    arch = _LAZYGIT_ARCH.get(machine.lower(), machine.lower())
    return (
        f"https://github.com/{LAZYGIT_REPO}/releases/latest/download/"
        f"lazygit_{version}_Linux_{arch}.tar.gz"
    )


class InstallDependenciesStep:
    step_id = "40_install_dependencies"

    def applies(self, ctx: InstallCtx, state: Dict[str, Any]) -> bool:
        return ctx.context_for(state).os_kind in (OsKind.MACOS, OsKind.DEBIAN_LIKE)

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        if ctx.context_for(state).os_kind is OsKind.MACOS:
            self._macos(ctx)
        else:
            self._debian(ctx, state)
        return state

    def _macos(self, ctx: InstallCtx) -> None:
        logger.info("Installing macOS dependencies...")
        s = ctx.settings
        brew_install(s.brew_packages, dry_run=ctx.dry_run)
        # kitty for image support
        brew_install(s.brew_casks, cask=True, dry_run=ctx.dry_run)

    def _debian(self, ctx: InstallCtx, state: Dict[str, Any]) -> None:
        logger.info("Installing Ubuntu dependencies...")
        s = ctx.settings
        apt_update(dry_run=ctx.dry_run)
        apt_install(s.apt_packages, dry_run=ctx.dry_run)

        if ctx.host.which("node") is None:
            self._nodejs(ctx)

        if Path("/usr/bin/fdfind").exists():
            run_cmd(sudo(["ln", "-sf", "/usr/bin/fdfind", "/usr/local/bin/fd"]), dry_run=ctx.dry_run)

        if ctx.host.which("lazygit") is None:
            installed = self._lazygit(ctx)
            state.setdefault("decisions", {})["lazygit"] = installed or "skipped"

    def _nodejs(self, ctx: InstallCtx) -> None:
        s = ctx.settings
        logger.info("Installing Node.js from %s", s.nodesource_url)
        with tempfile.TemporaryDirectory() as tmp:
            script = net.download(
                s.nodesource_url,
                Path(tmp) / "nodesource_setup.sh",
                timeout_s=s.timeout_s,
                retries=s.retries,
                dry_run=ctx.dry_run,
            )
            run_cmd(sudo(["bash", str(script)]), dry_run=ctx.dry_run)
        apt_install(["nodejs"], dry_run=ctx.dry_run)

    def _lazygit(self, ctx: InstallCtx) -> str | None:
        s = ctx.settings
        tag = net.latest_release_tag(LAZYGIT_REPO, timeout_s=s.timeout_s, retries=s.retries, dry_run=ctx.dry_run)
        if not tag:
            if not ctx.dry_run:
                logger.warning("Could not determine latest lazygit release; skipping")
            return None
        version = tag.lstrip("v")
        with tempfile.TemporaryDirectory() as tmp:
            tarball = net.download(
                lazygit_tarball_url(version, platform.machine()),
                Path(tmp) / "lazygit.tar.gz",
                timeout_s=s.timeout_s,
                retries=s.retries,
                dry_run=ctx.dry_run,
            )
            run_cmd(["tar", "xf", str(tarball), "-C", tmp, "lazygit"], dry_run=ctx.dry_run)
            run_cmd(sudo(["install", str(Path(tmp) / "lazygit"), "/usr/local/bin"]), dry_run=ctx.dry_run)
        logger.info("lazygit %s installed", version)
        return version
