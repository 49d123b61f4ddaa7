from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import OsKind
from ..lib.pkg import pip_install
from ..pipeline import InstallCtx

logger = logging.getLogger(__name__)


class InstallPythonToolsStep:
    step_id = "50_install_python_tools"

    def applies(self, ctx: InstallCtx, state: Dict[str, Any]) -> bool:
        return ctx.context_for(state).os_kind in (OsKind.MACOS, OsKind.DEBIAN_LIKE)

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        # Homebrew's python is writable by the user; system python on Linux is not.
        user = ctx.context_for(state).os_kind is OsKind.DEBIAN_LIKE
        logger.info("Installing Python tooling (%d packages)...", len(ctx.settings.pip_packages))
        pip_install(["pip"], user=user, upgrade=True, dry_run=ctx.dry_run)
        pip_install(ctx.settings.pip_packages, user=user, dry_run=ctx.dry_run)
        return state
