from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandError(RuntimeError):
    def __init__(self, argv: Sequence[str], returncode: int, stderr: str):
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"Command failed ({returncode}): {fmt_argv(self.argv)}\n{stderr}".rstrip())


def fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def which(name: str) -> Optional[str]:
    return shutil.which(name)


def sudo(argv: Sequence[str]) -> list[str]:
    """Prefix argv with sudo unless already root or sudo is unavailable."""

    if hasattr(os, "geteuid") and os.geteuid() == 0:
        return list(argv)
    if which("sudo") is None:
        return list(argv)
    return ["sudo", *argv]


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    env: Mapping[str, str] | None = None,
    cwd: str | None = None,
    input_text: str | None = None,
    timeout_s: float | None = None,
    retries: int = 0,
    dry_run: bool = False,
) -> CmdResult:
    """Run a command with consistent logging.

    - Always logs the command.
    - Captures stdout/stderr; both are debug-logged.
    - retries re-runs a failing command (non-zero exit or timeout) up to
      that many extra times. Used for network fetches only.
    - dry_run logs but does not execute.
    """

    argv_list = list(argv)
    logger.info("CMD %s", fmt_argv(argv_list))

    if dry_run:
        return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")

    attempts = max(0, retries) + 1
    attempt = 0
    while True:
        attempt += 1
        try:
            p = subprocess.run(
                argv_list,
                input=input_text,
                text=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                cwd=cwd,
                env=dict(os.environ, **(env or {})),
                timeout=timeout_s,
            )
            result = CmdResult(argv=argv_list, returncode=p.returncode, stdout=p.stdout, stderr=p.stderr)
        except subprocess.TimeoutExpired:
            result = CmdResult(argv=argv_list, returncode=124, stdout="", stderr=f"timed out after {timeout_s}s")
        except FileNotFoundError as e:
            result = CmdResult(argv=argv_list, returncode=127, stdout="", stderr=str(e))

        if result.stdout:
            logger.debug("STDOUT %s", result.stdout.strip())
        if result.stderr:
            logger.debug("STDERR %s", result.stderr.strip())

        if result.ok or attempt == attempts:
            break
        logger.warning("Attempt %d/%d failed (%d), retrying: %s", attempt, attempts, result.returncode, fmt_argv(argv_list))

    if check and not result.ok:
        raise CommandError(argv_list, result.returncode, result.stderr)

    return result
