from __future__ import annotations

import logging
import os
import platform
from typing import Any, Dict, Optional

import distro

from ..context import BootstrapContext, OsKind, Version
from .command import run_cmd

logger = logging.getLogger(__name__)

_DEBIAN_IDS = {"ubuntu", "debian"}


def _os_family(ostype: Optional[str]) -> str:
    """Return 'darwin', 'linux' or 'other' from $OSTYPE, falling back to platform."""

    if ostype:
        if ostype.startswith("darwin"):
            return "darwin"
        if ostype.startswith("linux-gnu"):
            return "linux"
        return "other"

    system = platform.system().lower()
    if system == "darwin":
        return "darwin"
    if system == "linux":
        return "linux"
    return "other"


def _os_release() -> Dict[str, Any]:
    info = distro.info()
    return {
        "id": (info.get("id") or "").lower(),
        "like": (distro.like() or "").lower().split(),
        "version_id": distro.version() or None,
        "codename": (info.get("codename") or "") or None,
    }


def detect_glibc_version() -> Optional[str]:
    """GLIBC version from the interpreter's libc, else from `ldd --version`."""

    lib, ver = platform.libc_ver()
    if lib == "glibc" and Version.parse(ver):
        return ver

    # ldd prints e.g. "ldd (Ubuntu GLIBC 2.35-0ubuntu3.8) 2.35"
    r = run_cmd(["ldd", "--version"], check=False)
    lines = (r.stdout or r.stderr).splitlines()
    tokens = lines[0].split() if lines else []
    if not tokens:
        return None
    return tokens[-1] if Version.parse(tokens[-1]) else None


def detect_os_name(ostype: Optional[str] = None) -> str:
    """Human-readable OS id as the original tooling printed it (macos, ubuntu, debian, linux, unknown)."""

    family = _os_family(ostype if ostype is not None else os.environ.get("OSTYPE"))
    if family == "darwin":
        return "macos"
    if family == "linux":
        return _os_release()["id"] or "linux"
    return "unknown"


def probe_context(*, ostype: Optional[str] = None) -> BootstrapContext:
    """Build a fresh BootstrapContext from the running host."""

    family = _os_family(ostype if ostype is not None else os.environ.get("OSTYPE"))

    if family == "darwin":
        ctx = BootstrapContext(os_kind=OsKind.MACOS)
    elif family == "linux":
        rel = _os_release()
        ids = {rel["id"], *rel["like"]}
        if ids & _DEBIAN_IDS:
            ctx = BootstrapContext(
                os_kind=OsKind.DEBIAN_LIKE,
                distro_version=rel["version_id"] or "unknown",
                runtime_library_version=detect_glibc_version(),
            )
        else:
            ctx = BootstrapContext(os_kind=OsKind.UNKNOWN, runtime_library_version=detect_glibc_version())
    else:
        ctx = BootstrapContext(os_kind=OsKind.UNKNOWN)

    logger.debug("Probed host: %s", ctx.describe())
    return ctx
