"""Machine-specific `lua/config/local.lua` generation.

The config repo is shared between machines; terminal image support and the
python host differ per machine, so they are written to an untracked file.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Callable, Mapping, Optional

from .lib.command import which

logger = logging.getLogger(__name__)

LOCAL_CONFIG_REL = Path("lua") / "config" / "local.lua"

_TEMPLATE = """\
-- Auto-generated local configuration
-- Generated on {generated}

local M = {{}}

-- Terminal
M.terminal = "{terminal}"

-- Python path
M.python_path = "{python_path}"

-- Image backend for Molten
if M.terminal == "kitty" then
    vim.g.molten_image_provider = "image.nvim"
    require("image").setup({{
        backend = "kitty",
    }})
elseif M.terminal == "iterm2" then
    vim.g.molten_image_provider = "image.nvim"
    require("image").setup({{
        backend = "ueberzug",
    }})
else
    vim.g.molten_image_provider = "none"
end

-- Python host
if M.python_path ~= "" then
    vim.g.python3_host_prog = M.python_path
end

return M
"""


def detect_terminal(environ: Mapping[str, str] | None = None) -> str:
    env = os.environ if environ is None else environ
    if env.get("KITTY_WINDOW_ID"):
        return "kitty"
    if env.get("ITERM_SESSION_ID"):
        return "iterm2"
    if env.get("TMUX"):
        return "tmux"
    return "unknown"


def detect_python(which_fn: Callable[[str], Optional[str]] = which) -> str:
    return which_fn("python3") or which_fn("python") or ""


def _lua_string(s: str) -> str:
    return s.replace("\\", "\\\\").replace('"', '\\"')


def render_local_config(terminal: str, python_path: str, generated: Optional[datetime] = None) -> str:
    return _TEMPLATE.format(
        generated=(generated or datetime.now()).strftime("%a %b %d %H:%M:%S %Y"),
        terminal=_lua_string(terminal),
        python_path=_lua_string(python_path),
    )


def generate_local_config(
    config_dir: Path,
    *,
    environ: Mapping[str, str] | None = None,
    which_fn: Callable[[str], Optional[str]] = which,
    dry_run: bool = False,
) -> Path:
    target = config_dir / LOCAL_CONFIG_REL
    content = render_local_config(detect_terminal(environ), detect_python(which_fn))
    if dry_run:
        logger.info("Would write %s", target)
        return target
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    logger.info("Local config generated at %s", target)
    return target
