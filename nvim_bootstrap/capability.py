from __future__ import annotations

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Optional, Protocol

from .lib import net, pkg
from .lib.command import CommandError, run_cmd, sudo, which

logger = logging.getLogger(__name__)

_NVIM_VERSION_RE = re.compile(r"v?\d+\.\d+(?:\.\d+)?\S*")

# Homebrew installs here on Apple silicon and Intel respectively.
HOMEBREW_BIN_DIRS = ("/opt/homebrew/bin", "/usr/local/bin")


class HostCapability(Protocol):
    """Everything the resolver is allowed to do to the machine.

    Mutating methods raise lib.command.CommandError when the underlying
    command fails.
    """

    def refresh_package_index(self) -> None:
        ...

    def add_package_repository(self, repo: str) -> None:
        ...

    def has_package_repository(self, repo: str) -> bool:
        ...

    def install_package_manager(self, manager: str, installer_url: str) -> None:
        ...

    def install_package(self, name: str, *, manager: str) -> None:
        ...

    def remove_package(self, name: str, *, manager: str) -> None:
        ...

    def fetch_artifact(self, url: str, dest: Path) -> Path:
        ...

    def install_binary(self, src: Path, dest: str) -> None:
        ...

    def remove_path(self, path: str) -> None:
        ...

    def probe_version(self, binary: str) -> Optional[str]:
        ...

    def which(self, binary: str) -> Optional[str]:
        ...


class SystemHost:
    """HostCapability backed by apt/brew/curl on the real machine."""

    def __init__(
        self,
        *,
        dry_run: bool = False,
        timeout_s: float = 120.0,
        retries: int = 1,
        sources_dir: str = "/etc/apt/sources.list.d",
    ):
        self.dry_run = dry_run
        self.timeout_s = timeout_s
        self.retries = retries
        self.sources_dir = Path(sources_dir)
        # binaries a dry run pretended to install, so later steps can be planned
        self._simulated: dict[str, str] = {}

    def refresh_package_index(self) -> None:
        pkg.apt_update(dry_run=self.dry_run)

    def add_package_repository(self, repo: str) -> None:
        pkg.add_apt_repository(repo, dry_run=self.dry_run)

    def has_package_repository(self, repo: str) -> bool:
        """True when add-apt-repository has already written a source for a ppa:owner/name repo."""

        if not repo.startswith("ppa:") or "/" not in repo:
            return False
        owner, name = repo[len("ppa:"):].split("/", 1)
        pattern = f"{owner}-ubuntu-{name}-*"
        return any(self.sources_dir.glob(pattern))

    def install_package_manager(self, manager: str, installer_url: str) -> None:
        if manager != "brew":
            raise ValueError(f"Unknown package manager: {manager}")
        with tempfile.TemporaryDirectory() as tmp:
            script = net.download(
                installer_url,
                Path(tmp) / "install.sh",
                timeout_s=self.timeout_s,
                retries=self.retries,
                dry_run=self.dry_run,
            )
            # output is captured, so the installer must not prompt
            run_cmd(["/bin/bash", str(script)], env={"NONINTERACTIVE": "1"}, dry_run=self.dry_run)

        if self.dry_run:
            self._simulated["brew"] = f"{HOMEBREW_BIN_DIRS[0]}/brew"
            return
        # a fresh install is not on PATH until the shell profile is reloaded
        path = os.environ.get("PATH", "").split(os.pathsep)
        for bin_dir in HOMEBREW_BIN_DIRS:
            if Path(bin_dir, "brew").exists() and bin_dir not in path:
                os.environ["PATH"] = os.pathsep.join([bin_dir, *path])
                break

    def install_package(self, name: str, *, manager: str) -> None:
        if manager == "apt":
            pkg.apt_install([name], dry_run=self.dry_run)
        elif manager == "brew":
            pkg.brew_install_or_upgrade(name, dry_run=self.dry_run)
        else:
            raise ValueError(f"Unknown package manager: {manager}")

    def remove_package(self, name: str, *, manager: str) -> None:
        if manager == "apt":
            r = pkg.apt_remove([name], dry_run=self.dry_run)
        elif manager == "brew":
            r = pkg.brew_uninstall(name, dry_run=self.dry_run)
        else:
            raise ValueError(f"Unknown package manager: {manager}")
        if not r.ok:
            raise CommandError(r.argv, r.returncode, r.stderr)

    def fetch_artifact(self, url: str, dest: Path) -> Path:
        return net.download(url, dest, timeout_s=self.timeout_s, retries=self.retries, dry_run=self.dry_run)

    def install_binary(self, src: Path, dest: str) -> None:
        run_cmd(["chmod", "u+x", str(src)], dry_run=self.dry_run)
        run_cmd(sudo(["mkdir", "-p", str(Path(dest).parent)]), dry_run=self.dry_run)
        run_cmd(sudo(["mv", str(src), dest]), dry_run=self.dry_run)

    def remove_path(self, path: str) -> None:
        if not self.dry_run and not Path(path).exists() and not Path(path).is_symlink():
            return
        run_cmd(sudo(["rm", "-f", path]), dry_run=self.dry_run)

    def probe_version(self, binary: str) -> Optional[str]:
        if self.dry_run:
            return "dry-run"
        r = run_cmd([binary, "--version"], check=False, timeout_s=30)
        if not r.ok:
            return None
        first = r.stdout.splitlines()[0] if r.stdout else ""
        m = _NVIM_VERSION_RE.search(first)
        return first.strip() if m else None

    def which(self, binary: str) -> Optional[str]:
        return which(binary) or self._simulated.get(binary)
