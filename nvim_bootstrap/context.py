"""Bootstrap context: the immutable description of the host that drives strategy selection."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from functools import total_ordering
from typing import Optional, Tuple, Union

_VERSION_RE = re.compile(r"(\d+(?:\.\d+)*)")


class OsKind(str, Enum):
    MACOS = "macos"
    DEBIAN_LIKE = "debian_like"
    UNKNOWN = "unknown"


class InstallStrategy(str, Enum):
    PACKAGE_REPOSITORY = "package_repository"
    PORTABLE_BINARY = "portable_binary"
    NATIVE_PACKAGE_MANAGER = "native_package_manager"


@total_ordering
class Version:
    """Dotted numeric version compared component by component.

    Accepts decorated strings ("v0.9.5", "2.35-0ubuntu3") and compares them
    as integer tuples, padding the shorter one with zeros. "2.9" < "2.32".
    """

    __slots__ = ("raw", "parts")

    def __init__(self, raw: str):
        m = _VERSION_RE.search(raw or "")
        if not m:
            raise ValueError(f"Not a version string: {raw!r}")
        self.raw = raw
        self.parts: Tuple[int, ...] = tuple(int(p) for p in m.group(1).split("."))

    @classmethod
    def parse(cls, raw: Optional[str]) -> Optional["Version"]:
        if not raw:
            return None
        try:
            return cls(raw)
        except ValueError:
            return None

    def _padded(self, other: "Version") -> Tuple[Tuple[int, ...], Tuple[int, ...]]:
        n = max(len(self.parts), len(other.parts))
        return (
            self.parts + (0,) * (n - len(self.parts)),
            other.parts + (0,) * (n - len(other.parts)),
        )

    @staticmethod
    def _coerce(other: Union["Version", str]) -> "Version":
        return other if isinstance(other, Version) else Version(other)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, (Version, str)):
            return NotImplemented
        try:
            a, b = self._padded(self._coerce(other))
        except ValueError:
            return False
        return a == b

    def __lt__(self, other: Union["Version", str]) -> bool:
        try:
            a, b = self._padded(self._coerce(other))
        except ValueError:
            return NotImplemented
        return a < b

    def __hash__(self) -> int:
        parts = list(self.parts)
        while len(parts) > 1 and parts[-1] == 0:
            parts.pop()
        return hash(tuple(parts))

    def __str__(self) -> str:
        return ".".join(str(p) for p in self.parts)

    def __repr__(self) -> str:
        return f"Version({self.raw!r})"


@dataclass(frozen=True)
class BootstrapContext:
    os_kind: OsKind
    distro_version: Optional[str] = None
    runtime_library_version: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.os_kind is OsKind.DEBIAN_LIKE) != (self.distro_version is not None):
            raise ValueError(
                f"distro_version must be set iff os_kind is debian_like "
                f"(os_kind={self.os_kind.value}, distro_version={self.distro_version!r})"
            )

    @property
    def glibc(self) -> Optional[Version]:
        return Version.parse(self.runtime_library_version)

    def describe(self) -> str:
        parts = [f"os={self.os_kind.value}"]
        if self.distro_version:
            parts.append(f"distro={self.distro_version}")
        if self.runtime_library_version:
            parts.append(f"glibc={self.runtime_library_version}")
        return " ".join(parts)
