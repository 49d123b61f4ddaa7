from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence, TextIO

from .context import BootstrapContext, OsKind
from .lib import git
from .lib.command import run_cmd, which

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComponentStatus:
    name: str
    ok: bool
    detail: str

    def line(self) -> str:
        mark = "✅" if self.ok else "❌"
        return f"{mark} {self.name}: {self.detail}"


@dataclass(frozen=True)
class Probe:
    name: str
    binary: str
    argv: Sequence[str]
    # picks the interesting part of stdout
    extract: Callable[[str], str] = lambda out: out.splitlines()[0].strip() if out else ""


PROBES: List[Probe] = [
    Probe("Neovim", "nvim", ["nvim", "--version"]),
    Probe("Python", "python3", ["python3", "--version"]),
    Probe("Node", "node", ["node", "--version"]),
    Probe("Git", "git", ["git", "--version"], extract=lambda out: (out.split() + ["", "", ""])[2]),
    Probe("Ripgrep", "rg", ["rg", "--version"]),
    Probe("Pynvim", "python3", ["python3", "-c", "import pynvim"], extract=lambda out: "Installed"),
]


def check_component(probe: Probe, *, which_fn: Callable[[str], Optional[str]] = which) -> ComponentStatus:
    if which_fn(probe.binary) is None:
        return ComponentStatus(probe.name, False, "Not installed")
    r = run_cmd(list(probe.argv), check=False, timeout_s=30)
    if not r.ok:
        return ComponentStatus(probe.name, False, "Not installed")
    # python < 3.4 printed --version on stderr
    detail = probe.extract(r.stdout or r.stderr) or "Installed"
    return ComponentStatus(probe.name, True, detail)


def check_config(config_dir: Path) -> List[str]:
    if not git.is_checkout(config_dir):
        return [f"❌ Config not found at {config_dir}"]
    return [
        f"✅ Config directory: {config_dir}",
        f"   Git remote: {git.remote_url(config_dir) or 'Not set'}",
        f"   Branch: {git.current_branch(config_dir) or 'unknown'}",
    ]


def system_lines(context: BootstrapContext, os_name: str) -> List[str]:
    lines = [f"OS: {os_name}"]
    if context.os_kind is OsKind.DEBIAN_LIKE:
        lines.append(f"Ubuntu Version: {context.distro_version}")
    lines.append(f"GLIBC Version: {context.runtime_library_version or 'unknown'}")
    return lines


def health_report(
    context: BootstrapContext,
    os_name: str,
    config_dir: Path,
    *,
    out: TextIO,
    which_fn: Callable[[str], Optional[str]] = which,
) -> List[ComponentStatus]:
    """Print the report to out. Never raises for a missing component."""

    logger.info("Running health check...")

    print("\nSystem Information:", file=out)
    for line in system_lines(context, os_name):
        print(line, file=out)

    print("\nDependencies:", file=out)
    statuses = []
    for probe in PROBES:
        try:
            status = check_component(probe, which_fn=which_fn)
        except OSError as e:
            logger.debug("%s probe failed: %s", probe.name, e)
            status = ComponentStatus(probe.name, False, "Not installed")
        statuses.append(status)
        print(status.line(), file=out)

    print("\nNeovim Config:", file=out)
    for line in check_config(config_dir):
        print(line, file=out)

    return statuses
