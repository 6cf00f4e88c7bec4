# codecollab/core/run_poller.py
"""
Run Poller

State machine for one remote run:

    SUBMITTED -> POLLING -> COMPLETED | FAILED | TIMED_OUT | CANCELLED

Polling happens at a fixed interval and is bounded by both an attempt
count and a wall-clock budget. There is no automatic retry; a failed,
timed-out or cancelled run ends the turn.
"""

import asyncio
import logging
import time
from enum import Enum
from typing import Callable, List, Optional

from codecollab.core.ai.base import RunStatus, RunStatusValue, ThreadMessage
from codecollab.core.errors import BackendError, RunCancelled, RunFailed, RunTimedOut

logger = logging.getLogger(__name__)


class RunState(Enum):
    IDLE = "idle"
    SUBMITTED = "submitted"
    POLLING = "polling"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"


TransitionCallback = Callable[[RunState, Optional[str]], None]


class RunPoller:
    """Submits a prompt as a remote run and waits for it to finish."""

    def __init__(
        self,
        backend,
        poll_interval: float = 3.0,
        max_attempts: Optional[int] = 100,
        max_wait: Optional[float] = 600.0,
        on_transition: Optional[TransitionCallback] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.backend = backend
        self.poll_interval = max(0.0, poll_interval)
        self.max_attempts = max_attempts
        self.max_wait = max_wait
        self.on_transition = on_transition
        self.clock = clock

        self.state = RunState.IDLE
        self.run_id: Optional[str] = None
        self.attempts = 0

    @property
    def is_active(self) -> bool:
        return self.state in (RunState.SUBMITTED, RunState.POLLING)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def run(
        self,
        thread_id: str,
        assistant_id: str,
        prompt: str,
        history: Optional[List[ThreadMessage]] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> str:
        """Submit, wait for completion, and return the assistant's reply text."""
        run_id = await self.submit(thread_id, assistant_id, prompt, history=history)
        await self.wait(thread_id, run_id, cancel_event=cancel_event)
        return await self.fetch_reply(thread_id)

    async def submit(
        self,
        thread_id: str,
        assistant_id: str,
        prompt: str,
        history: Optional[List[ThreadMessage]] = None,
    ) -> str:
        self.run_id = None
        self.attempts = 0
        try:
            run_id = await self.backend.create_run(thread_id, assistant_id, prompt, history=history)
        except BackendError:
            self._transition(RunState.FAILED)
            raise
        self.run_id = run_id
        self._transition(RunState.SUBMITTED)
        return run_id

    async def wait(
        self,
        thread_id: str,
        run_id: str,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> RunStatus:
        self.run_id = run_id
        self._transition(RunState.POLLING)
        started = self.clock()

        try:
            while True:
                if await self._sleep(cancel_event):
                    await self._cancel(thread_id, run_id)

                self.attempts += 1
                try:
                    status = await self.backend.get_run_status(thread_id, run_id)
                except BackendError:
                    self._transition(RunState.FAILED)
                    raise
                logger.debug(f"Run {run_id} poll #{self.attempts}: {status.raw_status or status.status.value}")

                if status.status is RunStatusValue.COMPLETED:
                    self._transition(RunState.COMPLETED)
                    return status

                if status.status is RunStatusValue.FAILED:
                    self._transition(RunState.FAILED)
                    reason = status.last_error or status.raw_status or "failed"
                    raise RunFailed(f"Run {run_id} failed: {reason}", run_id=run_id, status=status.raw_status)

                if self.max_attempts is not None and self.attempts >= self.max_attempts:
                    self._timeout(run_id, f"no result after {self.attempts} polls")

                if self.max_wait is not None and self.clock() - started >= self.max_wait:
                    self._timeout(run_id, f"no result after {self.max_wait:.0f}s")
        except asyncio.CancelledError:
            self._transition(RunState.CANCELLED)
            raise

    async def fetch_reply(self, thread_id: str) -> str:
        """Latest assistant message on the thread."""
        messages = await self.backend.list_messages(thread_id)
        for message in messages:
            if message.role == "assistant":
                return message.content
        raise BackendError(f"Thread {thread_id} has no assistant reply")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    async def _sleep(self, cancel_event: Optional[asyncio.Event]) -> bool:
        """Wait one interval. Returns True if cancellation was requested."""
        if cancel_event is None:
            await asyncio.sleep(self.poll_interval)
            return False
        if cancel_event.is_set():
            return True
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=self.poll_interval)
        except asyncio.TimeoutError:
            return False
        return True

    async def _cancel(self, thread_id: str, run_id: str) -> None:
        self._transition(RunState.CANCELLED)
        try:
            await self.backend.cancel_run(thread_id, run_id)
        except BackendError as e:
            logger.warning(f"Remote cancel of run {run_id} failed: {e}")
        raise RunCancelled(f"Run {run_id} cancelled", run_id=run_id)

    def _timeout(self, run_id: str, reason: str) -> None:
        self._transition(RunState.TIMED_OUT)
        raise RunTimedOut(f"Run {run_id} timed out: {reason}", run_id=run_id)

    def _transition(self, state: RunState) -> None:
        previous = self.state
        self.state = state
        logger.debug(f"Run {self.run_id}: {previous.value} -> {state.value}")
        if self.on_transition is not None:
            try:
                self.on_transition(state, self.run_id)
            except Exception as e:
                logger.warning(f"Run transition callback failed: {e}")
