from __future__ import annotations

import logging
from typing import Callable, Dict

from .capability import HostCapability
from .context import BootstrapContext, InstallStrategy, OsKind
from .errors import UnsupportedEnvironment
from .lib.aptfix import fix_apt_repos
from .lib.command import run_cmd
from .lib.pkg import apt_install, pip_install
from .resolver import InstallPlan, ResolveResult, resolve_and_install
from .settings import Settings

logger = logging.getLogger(__name__)

ISSUES = ("apt", "glibc", "python", "all")


def fix_apt(*, dry_run: bool = False) -> None:
    logger.info("=== Fixing APT Repositories ===")
    fix_apt_repos(dry_run=dry_run)
    logger.info("APT repositories fixed!")


def fix_glibc(context: BootstrapContext, host: HostCapability, settings: Settings) -> ResolveResult:
    """Reinstall Neovim as the pinned portable binary regardless of what selection would pick."""

    logger.info("=== Fixing GLIBC Issues ===")
    if context.os_kind is not OsKind.DEBIAN_LIKE:
        raise UnsupportedEnvironment(context.os_kind.value, "the GLIBC fix applies to Debian/Ubuntu only")
    logger.info("Current GLIBC version: %s", context.runtime_library_version or "unknown")
    plan = InstallPlan(InstallStrategy.PORTABLE_BINARY, release=settings.pinned_release)
    result = resolve_and_install(context, host, settings, plan=plan)
    logger.info("Neovim fixed and working!")
    return result


def fix_python(context: BootstrapContext, host: HostCapability, *, dry_run: bool = False) -> None:
    logger.info("=== Fixing Python/Pynvim ===")
    if host.which("pip3") is None and context.os_kind is OsKind.DEBIAN_LIKE:
        logger.info("Installing pip3...")
        apt_install(["python3-pip"], dry_run=dry_run)

    logger.info("Installing pynvim...")
    pip_install(["pynvim"], user=True, upgrade=True, dry_run=dry_run)

    if host.which("nvim") is not None:
        run_cmd(["nvim", "--headless", "+UpdateRemotePlugins", "+qa"], dry_run=dry_run)
        logger.info("Python support fixed!")


def run_troubleshoot(
    issue: str,
    *,
    probe: Callable[[], BootstrapContext],
    host: HostCapability,
    settings: Settings,
    health: Callable[[], object],
    dry_run: bool = False,
) -> None:
    if issue not in ISSUES:
        raise ValueError(f"Unknown issue {issue!r} (expected one of: {', '.join(ISSUES)})")

    context = probe()
    actions: Dict[str, Callable[[], object]] = {
        "apt": lambda: fix_apt(dry_run=dry_run),
        "glibc": lambda: fix_glibc(context, host, settings),
        "python": lambda: fix_python(context, host, dry_run=dry_run),
    }

    if issue != "all":
        actions[issue]()
        return

    logger.info("=== Running Complete Fix ===")
    for name in ("apt", "glibc", "python"):
        actions[name]()
    health()
