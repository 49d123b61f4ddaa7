from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence

from .capability import HostCapability
from .context import BootstrapContext
from .lib.env import Paths
from .settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstallCtx:
    """Everything a step may use. The host context itself is probed by the first step."""

    settings: Settings
    host: HostCapability
    paths: Paths
    probe: Callable[[], BootstrapContext]
    dry_run: bool = False

    def context_for(self, state: Dict[str, Any]) -> BootstrapContext:
        """The probed context, probing now if the probe step was skipped via start_at."""
        ctx = state.get("context")
        if ctx is None:
            ctx = self.probe()
            state["context"] = ctx
        return ctx


class Step(Protocol):
    """A single idempotent step."""

    step_id: str

    def applies(self, ctx: InstallCtx, state: Dict[str, Any]) -> bool:
        ...

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        ...


@dataclass(frozen=True)
class PipelineResult:
    state: Dict[str, Any]
    ran_steps: List[str] = field(default_factory=list)
    skipped_steps: List[str] = field(default_factory=list)


def run_pipeline(
    *,
    ctx: InstallCtx,
    steps: Sequence[Step],
    state: Optional[Dict[str, Any]] = None,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
) -> PipelineResult:
    """Run steps in order. State lives only for this invocation."""

    known = [s.step_id for s in steps]
    for sid in (start_at, stop_after):
        if sid is not None and sid not in known:
            raise ValueError(f"Unknown step {sid!r} (expected one of: {', '.join(known)})")

    state = state if state is not None else {}
    state.setdefault("decisions", {})
    ran: List[str] = []
    skipped: List[str] = []

    started = start_at is None

    for step in steps:
        if not started:
            if step.step_id == start_at:
                started = True
            else:
                continue

        state["current_step"] = step.step_id

        if not step.applies(ctx, state):
            logger.debug("Skipping step %s (not applicable)", step.step_id)
            skipped.append(step.step_id)
        else:
            logger.debug("Running step %s", step.step_id)
            state = step.run(ctx, state)
            ran.append(step.step_id)

        if stop_after is not None and step.step_id == stop_after:
            logger.info("Stopping after %s", stop_after)
            break

    state["current_step"] = None
    return PipelineResult(state=state, ran_steps=ran, skipped_steps=skipped)
