"""Operator actions: allow-listed scripts, cooldowns and confirmations.

Three executables may be run, each with a fixed argument vector; callers
only ever name the action.  A script that could not be started because of
permissions is reported as BLOCKED, which is kept distinct from a script
that ran and FAILED.

Controls are serialized with per-action cooldowns (ActionGuard) rather
than a lock.  Destructive actions go through ConfirmationBook:
stage → confirm → commit.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Mapping, Sequence
from uuid import UUID

from fanpanel.domain.enums import ScriptKind, ScriptOutcome
from fanpanel.foundation.clock import monotonic
from fanpanel.foundation.identifiers import new_id
from fanpanel.models.actions import PendingAction, ScriptResult

logger = logging.getLogger(__name__)

Clock = Callable[[], float]

CONFIRMATION_PROMPTS: Mapping[ScriptKind, str] = {
    ScriptKind.RESTART: "Restart the fan daemon now?",
    ScriptKind.UPDATE: (
        "Download and install the latest release now? "
        "The service upgrades and restarts automatically."
    ),
}


# ── Script execution ─────────────────────────────────────────────────────────

class ScriptRunner:
    """Runs allow-listed scripts with their fixed argument vectors.

    Args:
        scripts: Action → argv.  Actions missing from the mapping are
                 treated as denied by policy.
        timeout: Seconds before a running script is killed.
    """

    def __init__(
        self,
        scripts: Mapping[ScriptKind, Sequence[str]],
        timeout: float = 120.0,
    ) -> None:
        self._scripts = {kind: tuple(argv) for kind, argv in scripts.items()}
        self._timeout = timeout

    async def run(self, kind: ScriptKind) -> ScriptResult:
        argv = self._scripts.get(kind)
        if not argv:
            logger.warning("Script '%s' is not allow-listed", kind.value)
            return ScriptResult(kind=kind, outcome=ScriptOutcome.BLOCKED, detail="Not allow-listed")

        logger.info("Running %s: %s", kind.value, " ".join(argv))
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except PermissionError as exc:
            logger.warning("Script '%s' blocked: %s", kind.value, exc)
            return ScriptResult(
                kind=kind, outcome=ScriptOutcome.BLOCKED, detail="Execution blocked by policy",
            )
        except OSError as exc:
            logger.error("Script '%s' could not start: %s", kind.value, exc)
            return ScriptResult(kind=kind, outcome=ScriptOutcome.FAILED, detail=str(exc))

        try:
            _, err = await asyncio.wait_for(proc.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            logger.error("Script '%s' timed out after %.0fs", kind.value, self._timeout)
            return ScriptResult(
                kind=kind, outcome=ScriptOutcome.FAILED, exit_code=proc.returncode,
                detail="Timed out",
            )

        code = proc.returncode
        if code == 0:
            logger.info("Script '%s' completed", kind.value)
            return ScriptResult(kind=kind, outcome=ScriptOutcome.SUCCEEDED, exit_code=0)

        tail = err.decode(errors="replace").strip().splitlines()[-1:] if err else []
        logger.error("Script '%s' exited with %s", kind.value, code)
        return ScriptResult(
            kind=kind, outcome=ScriptOutcome.FAILED, exit_code=code,
            detail=tail[0] if tail else "Check system logs (logread).",
        )


# ── Re-entrancy guard ────────────────────────────────────────────────────────

class ActionCoolingDownError(RuntimeError):
    """Raised when a control is triggered again inside its cooldown window."""

    def __init__(self, action: str, retry_after: float) -> None:
        self.action = action
        self.retry_after = retry_after
        super().__init__(f"'{action}' was just triggered; retry in {retry_after:.1f}s")


class ActionGuard:
    """Disables each control for *cooldown* seconds after it fires."""

    def __init__(self, cooldown: float = 5.0, clock: Clock = monotonic) -> None:
        self._cooldown = cooldown
        self._clock = clock
        self._last: dict[str, float] = {}

    def remaining(self, action: str) -> float:
        last = self._last.get(action)
        if last is None:
            return 0.0
        return max(0.0, self._cooldown - (self._clock() - last))

    def acquire(self, action: str) -> None:
        """Claim *action*, or raise ActionCoolingDownError."""
        left = self.remaining(action)
        if left > 0.0:
            raise ActionCoolingDownError(action, left)
        self._last[action] = self._clock()

    def release(self, action: str) -> None:
        """Give back a claim whose action never went through."""
        self._last.pop(action, None)


# ── Two-step confirmation ────────────────────────────────────────────────────

class ConfirmationNotFoundError(KeyError):
    """Raised for an unknown, already-used or expired confirmation id."""


class ConfirmationBook:
    """Holds staged destructive actions until confirmed or expired."""

    def __init__(self, ttl: float = 60.0, clock: Clock = monotonic) -> None:
        self._ttl = ttl
        self._clock = clock
        self._pending: dict[UUID, tuple[ScriptKind, float]] = {}

    def stage(self, kind: ScriptKind) -> PendingAction:
        self._purge()
        confirmation_id = new_id()
        self._pending[confirmation_id] = (kind, self._clock() + self._ttl)
        logger.info("Staged %s awaiting confirmation %s", kind.value, confirmation_id)
        return PendingAction(
            confirmation_id=confirmation_id,
            kind=kind,
            prompt=CONFIRMATION_PROMPTS.get(kind, f"Run {kind.value}?"),
            expires_in_seconds=self._ttl,
        )

    def confirm(self, confirmation_id: UUID) -> ScriptKind:
        """Consume a confirmation; each id commits at most once."""
        self._purge()
        entry = self._pending.pop(confirmation_id, None)
        if entry is None:
            raise ConfirmationNotFoundError(str(confirmation_id))
        return entry[0]

    def cancel(self, confirmation_id: UUID) -> bool:
        return self._pending.pop(confirmation_id, None) is not None

    @property
    def pending_count(self) -> int:
        self._purge()
        return len(self._pending)

    def _purge(self) -> None:
        now = self._clock()
        expired = [cid for cid, (_, deadline) in self._pending.items() if deadline <= now]
        for cid in expired:
            del self._pending[cid]
        if expired:
            logger.info("Expired %d unconfirmed action(s)", len(expired))
