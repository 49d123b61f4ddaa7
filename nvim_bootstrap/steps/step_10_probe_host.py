from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import OsKind
from ..errors import UnsupportedEnvironment
from ..pipeline import InstallCtx

logger = logging.getLogger(__name__)


class ProbeHostStep:
    step_id = "10_probe_host"

    def applies(self, ctx: InstallCtx, state: Dict[str, Any]) -> bool:
        return True

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        host_ctx = ctx.probe()
        state["context"] = host_ctx
        if host_ctx.os_kind is OsKind.UNKNOWN:
            raise UnsupportedEnvironment(host_ctx.os_kind.value)

        logger.info("Installing full Neovim setup for %s", host_ctx.describe())
        return state
