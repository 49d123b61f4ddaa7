from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

import pytest

from nvim_bootstrap.context import BootstrapContext, OsKind
from nvim_bootstrap.lib.command import CommandError

# Resolution order used when something asks for plain "nvim".
PATH_ORDER = ["/usr/local/bin/nvim", "/usr/bin/nvim", "/opt/homebrew/bin/nvim"]


class FakeHost:
    """In-memory HostCapability.

    files maps a path to the version line its binary prints, or None when the
    binary exists but cannot run.
    """

    def __init__(
        self,
        *,
        has_brew: bool = True,
        apt_nvim_version: Optional[str] = "NVIM v0.10.2",
        brew_nvim_version: Optional[str] = "NVIM v0.10.2",
        artifact_versions: Optional[Dict[str, Optional[str]]] = None,
        fail: Optional[Set[str]] = None,
    ):
        self.has_brew = has_brew
        self.apt_nvim_version = apt_nvim_version
        self.brew_nvim_version = brew_nvim_version
        self.artifact_versions = artifact_versions or {}
        self.fail = fail or set()
        self.files: Dict[str, Optional[str]] = {}
        self.packages: Dict[str, Set[str]] = {"apt": set(), "brew": set()}
        self.repos: List[str] = []
        self.calls: List[Tuple[str, ...]] = []

    def _maybe_fail(self, op: str) -> None:
        if op in self.fail:
            raise CommandError([op], 100, f"{op} failed")

    # mutations

    def refresh_package_index(self) -> None:
        self.calls.append(("refresh_package_index",))
        self._maybe_fail("refresh_package_index")

    def add_package_repository(self, repo: str) -> None:
        self.calls.append(("add_package_repository", repo))
        self._maybe_fail("add_package_repository")
        if repo not in self.repos:
            self.repos.append(repo)

    def install_package_manager(self, manager: str, installer_url: str) -> None:
        self.calls.append(("install_package_manager", manager))
        self._maybe_fail("install_package_manager")
        self.has_brew = True

    def install_package(self, name: str, *, manager: str) -> None:
        self.calls.append(("install_package", manager, name))
        self._maybe_fail(f"install_package:{manager}")
        self.packages[manager].add(name)
        if name == "neovim" and manager == "apt":
            self.files["/usr/bin/nvim"] = self.apt_nvim_version
        if name == "neovim" and manager == "brew":
            self.files["/opt/homebrew/bin/nvim"] = self.brew_nvim_version

    def remove_package(self, name: str, *, manager: str) -> None:
        self.calls.append(("remove_package", manager, name))
        self._maybe_fail(f"remove_package:{manager}")
        self.packages[manager].discard(name)
        if name == "neovim" and manager == "apt":
            self.files.pop("/usr/bin/nvim", None)

    def fetch_artifact(self, url: str, dest: Path) -> Path:
        self.calls.append(("fetch_artifact", url))
        self._maybe_fail("fetch_artifact")
        self.files[str(dest)] = self.artifact_versions.get(url, "NVIM v0.10.2")
        return dest

    def install_binary(self, src: Path, dest: str) -> None:
        self.calls.append(("install_binary", dest))
        self._maybe_fail("install_binary")
        self.files[dest] = self.files.pop(str(src))

    def remove_path(self, path: str) -> None:
        self.calls.append(("remove_path", path))
        self._maybe_fail("remove_path")
        self.files.pop(path, None)

    # queries

    def has_package_repository(self, repo: str) -> bool:
        return repo in self.repos

    def probe_version(self, binary: str) -> Optional[str]:
        if binary == "nvim":
            for p in PATH_ORDER:
                if p in self.files:
                    return self.files[p]
            return None
        return self.files.get(binary)

    def which(self, binary: str) -> Optional[str]:
        if binary == "brew":
            return "/opt/homebrew/bin/brew" if self.has_brew else None
        if binary == "nvim":
            return next((p for p in PATH_ORDER if p in self.files), None)
        return None

    def mutations(self) -> List[Tuple[str, ...]]:
        return list(self.calls)


@pytest.fixture
def fake_host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def macos() -> BootstrapContext:
    return BootstrapContext(os_kind=OsKind.MACOS)


@pytest.fixture
def focal() -> BootstrapContext:
    return BootstrapContext(os_kind=OsKind.DEBIAN_LIKE, distro_version="20.04", runtime_library_version="2.31")


@pytest.fixture
def jammy() -> BootstrapContext:
    return BootstrapContext(os_kind=OsKind.DEBIAN_LIKE, distro_version="22.04", runtime_library_version="2.35")


@pytest.fixture
def unknown() -> BootstrapContext:
    return BootstrapContext(os_kind=OsKind.UNKNOWN)


@pytest.fixture(autouse=True)
def _isolated_home(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


@pytest.fixture(autouse=True)
def _reset_root_logger():
    root = logging.getLogger()
    yield
    for h in getattr(root, "_nvim_bootstrap_handlers", []):
        root.removeHandler(h)
        h.close()
    for attr in ("_nvim_bootstrap_configured", "_nvim_bootstrap_log_path", "_nvim_bootstrap_handlers"):
        if hasattr(root, attr):
            delattr(root, attr)
