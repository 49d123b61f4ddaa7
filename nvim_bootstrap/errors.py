from __future__ import annotations

from typing import Optional


class BootstrapError(RuntimeError):
    """Base class for failures that terminate a command with exit status 1."""


class UnsupportedEnvironment(BootstrapError):
    def __init__(self, os_kind: str, detail: str = ""):
        self.os_kind = os_kind
        msg = f"Unsupported OS: {os_kind}"
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(msg)


class InstallationFailed(BootstrapError):
    """A strategy's underlying command exited non-zero."""

    def __init__(self, strategy: str, detail: str):
        self.strategy = strategy
        self.detail = detail
        super().__init__(f"{strategy} installation failed: {detail}")


class VerificationFailed(BootstrapError):
    """The binary was installed but is not invocable or reports no version."""

    def __init__(self, strategy: str, binary: str):
        self.strategy = strategy
        self.binary = binary
        super().__init__(f"{strategy}: {binary} is not invocable or reported no version")


class RemovalFailed(BootstrapError):
    """Removing a prior installation failed. Logged, never raised past the resolver."""

    def __init__(self, target: str, detail: str):
        self.target = target
        self.detail = detail
        super().__init__(f"Could not remove {target}: {detail}")


class SyncError(BootstrapError):
    pass


class SyncConflict(SyncError):
    """Local changes could not be re-applied after a pull."""

    def __init__(self, detail: str, stash_ref: Optional[str] = "stash@{0}"):
        self.detail = detail
        self.stash_ref = stash_ref
        super().__init__(
            f"Local changes conflict with pulled config: {detail}. "
            f"Your changes are kept in {stash_ref}; resolve and run 'git stash drop'."
        )
