"""Environment bootstrap resolver.

Chooses how to install the editor binary from a BootstrapContext, runs that
strategy through a HostCapability, and verifies the result.

Selection (first match wins):

- macos                                        -> native package manager (brew)
- debian_like, legacy distro or glibc < gate   -> portable binary, pinned release
- debian_like                                  -> package repository (PPA),
                                                  falling back once to the
                                                  portable binary, latest release
- anything else                                -> UnsupportedEnvironment

Every call works from the context it is given; nothing is cached between
calls, so re-running after a partial failure is safe.
"""

from __future__ import annotations

import logging
import tempfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

from .capability import HostCapability
from .context import BootstrapContext, InstallStrategy, OsKind, Version
from .errors import (
    InstallationFailed,
    RemovalFailed,
    UnsupportedEnvironment,
    VerificationFailed,
)
from .lib.command import CommandError
from .settings import Settings

logger = logging.getLogger(__name__)

NVIM_BINARY = "nvim"
NVIM_PACKAGE = "neovim"

# Where each package manager links the binary.
MANAGED_PATHS = {
    InstallStrategy.PACKAGE_REPOSITORY: ("/usr/bin/nvim",),
    InstallStrategy.NATIVE_PACKAGE_MANAGER: ("/opt/homebrew/bin/nvim", "/usr/local/bin/nvim"),
}


class Phase(str, Enum):
    UNPROBED = "unprobed"
    PROBED = "probed"
    STRATEGY_SELECTED = "strategy_selected"
    INSTALLING = "installing"
    VERIFIED = "verified"
    FAILED = "failed"


@dataclass(frozen=True)
class InstallPlan:
    strategy: InstallStrategy
    # portable_binary only: a release tag or "latest"
    release: Optional[str] = None
    fallback: Optional["InstallPlan"] = None

    def label(self) -> str:
        if self.release:
            return f"{self.strategy.value}({self.release})"
        return self.strategy.value


@dataclass
class ResolveResult:
    context: BootstrapContext
    plan: InstallPlan
    installed_version: str
    phase: Phase = Phase.VERIFIED
    transitions: List[Phase] = field(default_factory=list)
    attempts: List[InstallPlan] = field(default_factory=list)
    removal_errors: List[RemovalFailed] = field(default_factory=list)


def select_strategy(context: BootstrapContext, settings: Settings | None = None) -> InstallPlan:
    """Pure mapping from context to plan."""

    settings = settings or Settings()

    if context.os_kind is OsKind.MACOS:
        return InstallPlan(InstallStrategy.NATIVE_PACKAGE_MANAGER)

    if context.os_kind is OsKind.DEBIAN_LIKE:
        glibc = context.glibc
        legacy = context.distro_version in settings.legacy_distro_versions
        # Unknown glibc is treated as too old.
        old_glibc = glibc is None or glibc < Version(settings.min_glibc)
        if legacy or old_glibc:
            return InstallPlan(InstallStrategy.PORTABLE_BINARY, release=settings.pinned_release)
        return InstallPlan(
            InstallStrategy.PACKAGE_REPOSITORY,
            fallback=InstallPlan(InstallStrategy.PORTABLE_BINARY, release="latest"),
        )

    raise UnsupportedEnvironment(context.os_kind.value)


class _Run:
    """Per-invocation bookkeeping for the state machine."""

    def __init__(self, context: BootstrapContext):
        self.context = context
        self.phase = Phase.UNPROBED
        self.transitions: List[Phase] = [Phase.UNPROBED]
        self.attempts: List[InstallPlan] = []
        self.removal_errors: List[RemovalFailed] = []

    def to(self, phase: Phase, detail: str = "") -> None:
        logger.debug("resolver %s -> %s %s", self.phase.value, phase.value, detail)
        self.phase = phase
        self.transitions.append(phase)


def _remove_conflicts(run: _Run, host: HostCapability, plan: InstallPlan, settings: Settings) -> None:
    """Best-effort removal of installs that would shadow the one about to be made."""

    if run.context.os_kind is not OsKind.DEBIAN_LIKE:
        return

    if plan.strategy is InstallStrategy.PORTABLE_BINARY:
        packages = settings.stale_packages
        paths = [p for p in settings.stale_paths if p != settings.install_path]
    else:
        # the package manager owns its own files; only a portable copy can shadow it
        packages = []
        paths = [p for p in settings.stale_paths if p == settings.install_path]

    for name in packages:
        try:
            host.remove_package(name, manager="apt")
        except (CommandError, OSError) as e:
            err = RemovalFailed(name, str(e).splitlines()[0] if str(e) else type(e).__name__)
            logger.warning("%s", err)
            run.removal_errors.append(err)

    for path in paths:
        try:
            host.remove_path(path)
        except (CommandError, OSError) as e:
            err = RemovalFailed(path, str(e).splitlines()[0] if str(e) else type(e).__name__)
            logger.warning("%s", err)
            run.removal_errors.append(err)


def _managed_install_present(host: HostCapability, strategy: InstallStrategy) -> bool:
    """A working nvim first on PATH at the location this strategy's manager owns."""

    location = host.which(NVIM_BINARY)
    if location not in MANAGED_PATHS.get(strategy, ()):
        return False
    return bool(host.probe_version(NVIM_BINARY))


def _install_native(host: HostCapability) -> None:
    if host.which("brew") is None:
        raise InstallationFailed(
            InstallStrategy.NATIVE_PACKAGE_MANAGER.value,
            "Homebrew not installed. Please install it first.",
        )
    if _managed_install_present(host, InstallStrategy.NATIVE_PACKAGE_MANAGER):
        logger.info("Neovim already installed with Homebrew")
        return
    host.install_package(NVIM_PACKAGE, manager="brew")


def _install_package_repository(host: HostCapability, settings: Settings) -> None:
    # a distro-stock neovim also lives in /usr/bin, so the PPA must be configured too
    if host.has_package_repository(settings.ppa) and _managed_install_present(
        host, InstallStrategy.PACKAGE_REPOSITORY
    ):
        logger.info("Neovim already installed from %s", settings.ppa)
        return
    logger.info("Installing Neovim from %s...", settings.ppa)
    host.add_package_repository(settings.ppa)
    host.refresh_package_index()
    host.install_package(NVIM_PACKAGE, manager="apt")


def _pinned_already_installed(host: HostCapability, plan: InstallPlan, settings: Settings) -> bool:
    if plan.release in (None, "latest"):
        return False
    current = Version.parse(host.probe_version(settings.install_path))
    return current is not None and current == Version(str(plan.release))


def _install_portable(host: HostCapability, plan: InstallPlan, settings: Settings, workdir: Path) -> None:
    release = plan.release or "latest"
    if _pinned_already_installed(host, plan, settings):
        logger.info("Neovim %s already present at %s", release, settings.install_path)
        return

    logger.info("Installing Neovim via AppImage (%s)...", release)
    artifact = host.fetch_artifact(settings.appimage_url(release), workdir / "nvim.appimage")
    # Test-run before it replaces anything on PATH.
    if host.probe_version(str(artifact)) is None:
        raise InstallationFailed(plan.label(), "AppImage doesn't work on this system")
    host.install_binary(artifact, settings.install_path)


def _execute(host: HostCapability, plan: InstallPlan, settings: Settings, workdir: Path) -> str:
    """Install per plan and return the verified version string."""

    try:
        if plan.strategy is InstallStrategy.NATIVE_PACKAGE_MANAGER:
            _install_native(host)
            target = NVIM_BINARY
        elif plan.strategy is InstallStrategy.PACKAGE_REPOSITORY:
            _install_package_repository(host, settings)
            target = NVIM_BINARY
        elif plan.strategy is InstallStrategy.PORTABLE_BINARY:
            _install_portable(host, plan, settings, workdir)
            target = settings.install_path
        else:  # pragma: no cover
            raise AssertionError(f"unhandled strategy {plan.strategy!r}")
    except CommandError as e:
        raise InstallationFailed(plan.label(), str(e)) from e

    version = host.probe_version(target)
    if not version:
        raise VerificationFailed(plan.label(), target)
    return version


def resolve_and_install(
    context: BootstrapContext,
    host: HostCapability,
    settings: Settings | None = None,
    *,
    plan: InstallPlan | None = None,
    workdir: Path | None = None,
) -> ResolveResult:
    """Select a strategy for context, run it, verify the binary.

    plan overrides selection (troubleshooting forces the pinned portable
    binary). Raises UnsupportedEnvironment, InstallationFailed or
    VerificationFailed; removal problems are collected on the result.
    """

    settings = settings or Settings()
    run = _Run(context)
    run.to(Phase.PROBED, context.describe())

    if context.os_kind is OsKind.UNKNOWN:
        run.to(Phase.FAILED, "unsupported")
        raise UnsupportedEnvironment(context.os_kind.value)

    current = plan or select_strategy(context, settings)

    logger.info(
        "Installing Neovim for %s (distro %s, GLIBC %s)...",
        context.os_kind.value,
        context.distro_version or "-",
        context.runtime_library_version or "-",
    )

    if workdir is not None:
        return _attempt(run, host, current, settings, workdir)
    with tempfile.TemporaryDirectory(prefix="nvim-bootstrap-") as tmp:
        return _attempt(run, host, current, settings, Path(tmp))


def _attempt(run: _Run, host: HostCapability, current: InstallPlan, settings: Settings, work: Path) -> ResolveResult:
    """Run current, then its fallback at most once."""

    while True:
        run.to(Phase.STRATEGY_SELECTED, current.label())
        run.attempts.append(current)
        _remove_conflicts(run, host, current, settings)

        run.to(Phase.INSTALLING, current.label())
        try:
            version = _execute(host, current, settings, work)
        except (InstallationFailed, VerificationFailed) as e:
            run.to(Phase.FAILED, str(e))
            if current.fallback is None:
                logger.error("Neovim installation failed: %s", e)
                raise
            logger.warning("%s, falling back to %s...", e, current.fallback.label())
            current = current.fallback
            continue

        run.to(Phase.VERIFIED, version)
        logger.info("Neovim installed successfully: %s", version)
        return ResolveResult(
            context=run.context,
            plan=current,
            installed_version=version,
            transitions=run.transitions,
            attempts=run.attempts,
            removal_errors=run.removal_errors,
        )


def probe_and_resolve(
    host: HostCapability,
    settings: Settings | None = None,
    *,
    probe: Callable[[], BootstrapContext],
) -> ResolveResult:
    """Re-probe the host and resolve; what `fix-nvim` runs."""

    return resolve_and_install(probe(), host, settings)
