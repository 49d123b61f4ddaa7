from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def home() -> Path:
    return Path(os.environ.get("HOME") or str(Path.home()))


@dataclass(frozen=True)
class Paths:
    root: Path

    @classmethod
    def for_home(cls, root: Path | None = None) -> "Paths":
        return cls(root=root or home())

    @property
    def local_bin(self) -> Path:
        return self.root / ".local" / "bin"

    @property
    def nvim_data(self) -> Path:
        return self.root / ".local" / "share" / "nvim"

    @property
    def state_dir(self) -> Path:
        return self.root / ".local" / "state" / "nvim-bootstrap"

    @property
    def log_default(self) -> Path:
        return self.state_dir / "nvim-bootstrap.log"

    @property
    def shell_rcs(self) -> list[Path]:
        return [self.root / ".bashrc", self.root / ".zshrc"]
