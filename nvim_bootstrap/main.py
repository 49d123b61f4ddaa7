from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Callable, Dict, Optional, TextIO

from .capability import HostCapability, SystemHost
from .context import BootstrapContext, OsKind
from .errors import BootstrapError
from .health import health_report
from .lib.env import Paths
from .lib.hostdetect import detect_os_name, probe_context
from .local_config import generate_local_config
from .logging_utils import configure_logging, default_log_path
from .pipeline import InstallCtx, run_pipeline
from .resolver import ResolveResult, probe_and_resolve
from .settings import DEFAULT_SETTINGS_PATH, Settings, load_settings
from .steps import (
    FinalizeStep,
    FixAptReposStep,
    InstallHomebrewStep,
    InstallDependenciesStep,
    InstallNeovimStep,
    InstallPythonToolsStep,
    ProbeHostStep,
    SetupConfigStep,
)
from .sync import pull_config, push_config
from .troubleshoot import ISSUES, run_troubleshoot

logger = logging.getLogger(__name__)

PROG = "nvim-bootstrap"

USAGE = f"""\
Neovim Config Sync Tool

Usage: {PROG} [command]

Commands:
  install       Install full Neovim setup on this machine
  push          Push local config to git
  pull          Pull latest config from git
  health        Run health check (alias: check)
  fix-nvim      Fix Neovim installation issues
  troubleshoot  Fix a specific issue ({'|'.join(ISSUES)})
  env-detect    Generate machine-specific lua/config/local.lua
"""


def build_steps():
    return [
        ProbeHostStep(),
        FixAptReposStep(),
        InstallHomebrewStep(),
        InstallNeovimStep(),
        InstallDependenciesStep(),
        InstallPythonToolsStep(),
        SetupConfigStep(),
        FinalizeStep(),
    ]


def print_usage(context: BootstrapContext, os_name: str, out: TextIO) -> None:
    out.write(USAGE)
    print("\nSystem Info:", file=out)
    print(f"  OS: {os_name}", file=out)
    if context.os_kind is OsKind.DEBIAN_LIKE:
        print(f"  Ubuntu: {context.distro_version} (GLIBC {context.runtime_library_version or 'unknown'})", file=out)


def run_install(
    *,
    settings: Settings,
    host: HostCapability,
    probe: Callable[[], BootstrapContext],
    dry_run: bool = False,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
) -> Dict[str, Any]:
    """Run the full bootstrap pipeline."""

    ctx = InstallCtx(settings=settings, host=host, paths=Paths.for_home(), probe=probe, dry_run=dry_run)
    result = run_pipeline(ctx=ctx, steps=build_steps(), start_at=start_at, stop_after=stop_after)
    state = result.state
    state["summary"] = {"ran_steps": result.ran_steps, "skipped_steps": result.skipped_steps}
    return state


def run_fix_nvim(
    *,
    settings: Settings,
    host: HostCapability,
    probe: Callable[[], BootstrapContext],
) -> ResolveResult:
    return probe_and_resolve(host, settings, probe=probe)


def _add_common(p: argparse.ArgumentParser, *, suppress: bool) -> None:
    # Subparsers suppress defaults so options given before the command survive.
    def d(value: Any) -> Any:
        return argparse.SUPPRESS if suppress else value

    p.add_argument("--config", default=d(DEFAULT_SETTINGS_PATH), help="Path to settings YAML")
    p.add_argument("--log", default=d(None), help=f"Path to log file (default {default_log_path()})")
    p.add_argument("--dry-run", action="store_true", default=d(False), help="Log commands without running them")
    p.add_argument("-v", "--verbose", action="store_true", default=d(False), help="Show debug output")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog=PROG, description="Install and sync a Neovim configuration.", add_help=True)
    _add_common(p, suppress=False)

    sub = p.add_subparsers(dest="command")

    common = argparse.ArgumentParser(add_help=False)
    _add_common(common, suppress=True)

    sp = sub.add_parser("install", parents=[common], help="Install full Neovim setup on this machine")
    step_ids = [s.step_id for s in build_steps()]
    sp.add_argument("--start-at", default=None, choices=step_ids, help="Start at step_id")
    sp.add_argument("--stop-after", default=None, choices=step_ids, help="Stop after step_id")

    sub.add_parser("push", parents=[common], help="Push local config to git")
    sub.add_parser("pull", parents=[common], help="Pull latest config from git")
    sub.add_parser("health", parents=[common], aliases=["check"], help="Run health check")
    sub.add_parser("fix-nvim", parents=[common], help="Fix Neovim installation issues")

    tp = sub.add_parser("troubleshoot", parents=[common], help="Fix a specific issue")
    tp.add_argument("issue", choices=ISSUES)

    sub.add_parser("env-detect", parents=[common], help="Generate lua/config/local.lua")
    return p


def main(
    argv: Optional[list[str]] = None,
    *,
    host: Optional[HostCapability] = None,
    probe: Optional[Callable[[], BootstrapContext]] = None,
    out: Optional[TextIO] = None,
) -> int:
    args = build_parser().parse_args(argv)
    out = out or sys.stdout

    configure_logging(log_path=args.log, level=logging.DEBUG if args.verbose else logging.INFO)
    probe = probe or probe_context

    if not args.command:
        print_usage(probe(), detect_os_name(), out)
        return 0

    try:
        settings = load_settings(args.config)
        host = host or SystemHost(dry_run=args.dry_run, timeout_s=settings.timeout_s, retries=settings.retries)

        if args.command in ("health", "check"):
            health_report(probe(), detect_os_name(), settings.config_dir, out=out)
        elif args.command == "install":
            run_install(
                settings=settings,
                host=host,
                probe=probe,
                dry_run=args.dry_run,
                start_at=args.start_at,
                stop_after=args.stop_after,
            )
        elif args.command == "fix-nvim":
            run_fix_nvim(settings=settings, host=host, probe=probe)
        elif args.command == "push":
            push_config(settings.config_dir, settings.branches, dry_run=args.dry_run)
        elif args.command == "pull":
            pull_config(settings.config_dir, settings.branches, dry_run=args.dry_run)
        elif args.command == "troubleshoot":
            run_troubleshoot(
                args.issue,
                probe=probe,
                host=host,
                settings=settings,
                health=lambda: health_report(probe(), detect_os_name(), settings.config_dir, out=out),
                dry_run=args.dry_run,
            )
        elif args.command == "env-detect":
            generate_local_config(settings.config_dir, dry_run=args.dry_run)
    except BootstrapError as e:
        logger.error("%s", e)
        return 1
    except Exception:
        if args.command in ("health", "check"):
            logger.exception("Health check could not complete")
            return 0
        logger.exception("%s %s failed", PROG, args.command)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
