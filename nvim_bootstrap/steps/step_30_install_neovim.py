from __future__ import annotations

import logging
from typing import Any, Dict

from ..pipeline import InstallCtx
from ..resolver import resolve_and_install

logger = logging.getLogger(__name__)


class InstallNeovimStep:
    step_id = "30_install_neovim"

    def applies(self, ctx: InstallCtx, state: Dict[str, Any]) -> bool:
        return True

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        result = resolve_and_install(ctx.context_for(state), ctx.host, ctx.settings)
        decisions = state.setdefault("decisions", {})
        decisions["neovim_strategy"] = result.plan.label()
        decisions["neovim_version"] = result.installed_version
        return state
