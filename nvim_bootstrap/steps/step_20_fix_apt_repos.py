from __future__ import annotations

import logging
from typing import Any, Dict

from ..context import OsKind
from ..lib.aptfix import fix_apt_repos
from ..pipeline import InstallCtx

logger = logging.getLogger(__name__)


class FixAptReposStep:
    step_id = "20_fix_apt_repos"

    def applies(self, ctx: InstallCtx, state: Dict[str, Any]) -> bool:
        return ctx.context_for(state).os_kind is OsKind.DEBIAN_LIKE

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        fix_apt_repos(dry_run=ctx.dry_run)
        return state
