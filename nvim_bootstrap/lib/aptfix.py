from __future__ import annotations

import logging
import tempfile
import time
from pathlib import Path
from typing import Iterable, List

from .command import run_cmd, sudo
from .pkg import apt_clean, apt_update

logger = logging.getLogger(__name__)

SOURCES_LIST = "/etc/apt/sources.list"
SOURCES_LIST_D = "/etc/apt/sources.list.d"

# Lines where a shell substitution was written literally into a sources file.
_MALFORMED_MARKER = "$(lsb_release"


def clean_source_lines(lines: Iterable[str]) -> List[str]:
    """Drop malformed entries and exact duplicates, keeping first occurrences in order."""

    seen = set()
    out: List[str] = []
    for line in lines:
        if _MALFORMED_MARKER in line:
            continue
        if line in seen:
            continue
        seen.add(line)
        out.append(line)
    return out


def ubuntu_sources(codename: str) -> str:
    base = "http://archive.ubuntu.com/ubuntu"
    return "".join(
        [
            f"deb {base} {codename} main restricted universe multiverse\n",
            f"deb {base} {codename}-updates main restricted universe multiverse\n",
            f"deb {base} {codename}-backports main restricted universe multiverse\n",
            f"deb http://security.ubuntu.com/ubuntu {codename}-security main restricted universe multiverse\n",
        ]
    )


def _write_root_file(path: str, content: str, *, dry_run: bool) -> None:
    if dry_run:
        logger.info("Would rewrite %s", path)
        return
    with tempfile.NamedTemporaryFile("w", encoding="utf-8", delete=False, suffix=".list") as f:
        f.write(content)
        tmp = f.name
    try:
        run_cmd(sudo(["cp", tmp, path]))
    finally:
        Path(tmp).unlink(missing_ok=True)


def _rewrite(path: Path, *, dry_run: bool) -> None:
    try:
        lines = path.read_text(encoding="utf-8", errors="ignore").splitlines(keepends=True)
    except OSError as e:
        logger.warning("Cannot read %s: %s", path, e)
        return
    cleaned = clean_source_lines(lines)
    if cleaned != lines:
        logger.info("Cleaning %s (%d -> %d lines)", path, len(lines), len(cleaned))
        _write_root_file(str(path), "".join(cleaned), dry_run=dry_run)


def fix_apt_repos(*, sources_list: str = SOURCES_LIST, sources_dir: str = SOURCES_LIST_D, dry_run: bool = False) -> None:
    """Back up sources.list, remove malformed and duplicate entries, update.

    If the update still fails, replace sources.list with a stock Ubuntu list
    for this release and update again.
    """

    logger.info("Checking APT repositories...")
    src = Path(sources_list)
    if src.exists():
        backup = f"{sources_list}.backup.{int(time.time())}"
        run_cmd(sudo(["cp", sources_list, backup]), dry_run=dry_run)
        _rewrite(src, dry_run=dry_run)

    d = Path(sources_dir)
    if d.is_dir():
        for p in sorted(d.glob("*.list")):
            _rewrite(p, dry_run=dry_run)

    apt_clean(dry_run=dry_run)
    if apt_update(check=False, dry_run=dry_run).ok:
        logger.info("APT repositories OK")
        return

    logger.warning("APT update failed. Attempting to fix...")
    codename = run_cmd(["lsb_release", "-cs"], dry_run=dry_run).stdout.strip()
    if not codename and not dry_run:
        raise RuntimeError("Cannot determine release codename (lsb_release -cs)")
    _write_root_file(sources_list, ubuntu_sources(codename), dry_run=dry_run)
    apt_update(dry_run=dry_run)
