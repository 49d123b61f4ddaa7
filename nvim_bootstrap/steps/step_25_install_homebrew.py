from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import OsKind
from ..errors import InstallationFailed
from ..lib.command import CommandError
from ..pipeline import InstallCtx

logger = logging.getLogger(__name__)

HOMEBREW_INSTALL_URL = "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"


class InstallHomebrewStep:
    """Homebrew must exist before the native Neovim install on macOS."""

    step_id = "25_install_homebrew"

    def applies(self, ctx: InstallCtx, state: Dict[str, Any]) -> bool:
        return ctx.context_for(state).os_kind is OsKind.MACOS

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        decisions = state.setdefault("decisions", {})
        if ctx.host.which("brew") is not None:
            decisions["homebrew"] = "present"
            return state

        logger.info("Installing Homebrew...")
        try:
            ctx.host.install_package_manager("brew", HOMEBREW_INSTALL_URL)
        except CommandError as e:
            raise InstallationFailed("homebrew", e.stderr.strip() or str(e)) from e
        if ctx.host.which("brew") is None:
            raise InstallationFailed("homebrew", "brew is still not on PATH after the installer ran")
        decisions["homebrew"] = "installed"
        return state
