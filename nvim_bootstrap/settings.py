from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml

DEFAULT_SETTINGS_PATH = "~/.config/nvim-bootstrap/config.yaml"

DEFAULT_APT_PACKAGES = [
    "tmux",
    "git",
    "curl",
    "wget",
    "build-essential",
    "python3-pip",
    "python3-venv",
    "ripgrep",
    "fd-find",
]

DEFAULT_BREW_PACKAGES = ["tmux", "node", "python@3.11", "ripgrep", "fd", "lazygit"]

DEFAULT_BREW_CASKS = ["kitty"]

DEFAULT_PIP_PACKAGES = [
    # Molten / image rendering
    "pynvim",
    "jupyter_client",
    "cairosvg",
    "pnglatex",
    "plotly",
    "kaleido",
    "pyperclip",
    "nbformat",
    # LSP, formatters, debugger
    "pyright",
    "ruff",
    "black",
    "isort",
    "debugpy",
    "ipython",
    "jupytext",
    "jupyter",
    # test runner
    "pytest",
    "pytest-cov",
]


def _home() -> Path:
    return Path(os.environ.get("HOME") or str(Path.home()))


@dataclass(frozen=True)
class Settings:
    raw: Dict[str, Any] = field(default_factory=dict)

    def _section(self, name: str) -> Dict[str, Any]:
        return self.raw.get(name) or {}

    @property
    def config_dir(self) -> Path:
        v = self.raw.get("config_dir")
        return Path(os.path.expanduser(str(v))) if v else _home() / ".config" / "nvim"

    @property
    def repo_url(self) -> str:
        return str(self.raw.get("repo_url") or "https://github.com/YOUR_USERNAME/nvim-config.git")

    @property
    def branches(self) -> List[str]:
        return [str(b) for b in (self.raw.get("branches") or ["main", "master"])]

    @property
    def nodesource_url(self) -> str:
        return str(self.raw.get("nodesource_url") or "https://deb.nodesource.com/setup_18.x")

    # neovim

    @property
    def ppa(self) -> str:
        return str(self._section("neovim").get("ppa") or "ppa:neovim-ppa/stable")

    @property
    def pinned_release(self) -> str:
        return str(self._section("neovim").get("pinned_release") or "v0.9.5")

    @property
    def min_glibc(self) -> str:
        return str(self._section("neovim").get("min_glibc") or "2.32")

    @property
    def legacy_distro_versions(self) -> List[str]:
        return [str(v) for v in (self._section("neovim").get("legacy_distro_versions") or ["20.04"])]

    @property
    def install_path(self) -> str:
        return str(self._section("neovim").get("install_path") or "/usr/local/bin/nvim")

    @property
    def stale_paths(self) -> List[str]:
        return [str(p) for p in (self._section("neovim").get("stale_paths") or ["/usr/local/bin/nvim", "/usr/bin/nvim"])]

    @property
    def stale_packages(self) -> List[str]:
        return [str(p) for p in (self._section("neovim").get("stale_packages") or ["neovim", "neovim-runtime"])]

    def appimage_url(self, release: str) -> str:
        if release == "latest":
            return "https://github.com/neovim/neovim/releases/latest/download/nvim.appimage"
        return f"https://github.com/neovim/neovim/releases/download/{release}/nvim.appimage"

    # network

    @property
    def timeout_s(self) -> float:
        return float(self._section("network").get("timeout_s") or 120)

    @property
    def retries(self) -> int:
        v = self._section("network").get("retries")
        return 1 if v is None else int(v)

    # packages

    @property
    def apt_packages(self) -> List[str]:
        return list(self._section("packages").get("apt") or DEFAULT_APT_PACKAGES)

    @property
    def brew_packages(self) -> List[str]:
        return list(self._section("packages").get("brew") or DEFAULT_BREW_PACKAGES)

    @property
    def brew_casks(self) -> List[str]:
        return list(self._section("packages").get("brew_casks") or DEFAULT_BREW_CASKS)

    @property
    def pip_packages(self) -> List[str]:
        return list(self._section("packages").get("pip") or DEFAULT_PIP_PACKAGES)


def load_settings(path: str | None = None) -> Settings:
    """Load settings from YAML; a missing file means all defaults."""

    p = Path(os.path.expanduser(path or DEFAULT_SETTINGS_PATH))
    if not p.exists():
        return Settings()

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError(f"settings file must be YAML: {p}")

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{p} must contain a mapping/object")

    return Settings(raw=raw)
