from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.command import run_cmd
from ..pipeline import InstallCtx

logger = logging.getLogger(__name__)

NVIM_STATE_DIRS = ("backup", "undo", "swap")


class FinalizeStep:
    step_id = "70_finalize"

    def applies(self, ctx: InstallCtx, state: Dict[str, Any]) -> bool:
        return True

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        if ctx.host.which("nvim") is not None:
            r = run_cmd(
                ["nvim", "--headless", "+UpdateRemotePlugins", "+qa"],
                check=False,
                timeout_s=ctx.settings.timeout_s,
                dry_run=ctx.dry_run,
            )
            if not r.ok:
                logger.warning("UpdateRemotePlugins failed (%d); run it from Neovim later", r.returncode)

        for name in NVIM_STATE_DIRS:
            d = ctx.paths.nvim_data / name
            if ctx.dry_run:
                logger.info("Would create %s", d)
            else:
                d.mkdir(parents=True, exist_ok=True)

        logger.info("Installation complete!")
        logger.info("Open Neovim and run :Lazy sync to install plugins")
        logger.debug("Install decisions: %s", state.get("decisions") or {})
        return state
