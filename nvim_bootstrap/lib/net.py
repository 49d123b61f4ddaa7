from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from .command import CmdResult, run_cmd

logger = logging.getLogger(__name__)


def download(
    url: str,
    dest: str | Path,
    *,
    timeout_s: float = 120.0,
    retries: int = 1,
    dry_run: bool = False,
) -> Path:
    """Fetch url to dest with curl; follows redirects and fails on HTTP errors."""

    out = Path(dest)
    if not dry_run:
        out.parent.mkdir(parents=True, exist_ok=True)
    run_cmd(
        ["curl", "-fsSL", "--max-time", str(int(timeout_s)), "-o", str(out), url],
        timeout_s=timeout_s + 5,
        retries=retries,
        dry_run=dry_run,
    )
    return out


def fetch_text(url: str, *, timeout_s: float = 30.0, retries: int = 1, dry_run: bool = False) -> CmdResult:
    return run_cmd(
        ["curl", "-fsSL", "--max-time", str(int(timeout_s)), url],
        timeout_s=timeout_s + 5,
        retries=retries,
        dry_run=dry_run,
    )


def latest_release_tag(repo: str, *, timeout_s: float = 30.0, retries: int = 1, dry_run: bool = False) -> Optional[str]:
    """Tag name of the latest GitHub release of owner/name, or None."""

    r = fetch_text(
        f"https://api.github.com/repos/{repo}/releases/latest",
        timeout_s=timeout_s,
        retries=retries,
        dry_run=dry_run,
    )
    if dry_run or not r.stdout:
        return None
    try:
        data = json.loads(r.stdout)
    except json.JSONDecodeError:
        logger.warning("Release metadata for %s is not JSON", repo)
        return None
    tag = data.get("tag_name") if isinstance(data, dict) else None
    return str(tag) if tag else None
