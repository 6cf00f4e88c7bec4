"""
RunPoller state machine tests against a scripted fake backend.
"""

import asyncio
import itertools
from typing import List, Optional

import pytest

from codecollab.core.ai.base import (
    AssistantConfig,
    BaseAssistantBackend,
    RunStatus,
    RunStatusValue,
    ThreadMessage,
)
from codecollab.core.errors import BackendError, RunCancelled, RunFailed, RunTimedOut
from codecollab.core.run_poller import RunPoller, RunState


# ---------------------------------------------------------------------------
# Helpers / Fakes
# ---------------------------------------------------------------------------

def run_async(coro):
    return asyncio.run(coro)


class ScriptedBackend(BaseAssistantBackend):
    """Returns the scripted statuses in order; records every call."""

    requires_api_key = False

    def __init__(self, statuses: List[str], reply: str = '{"actions": []}', fail_submit: bool = False):
        super().__init__(AssistantConfig())
        self.statuses = list(statuses)
        self.reply = reply
        self.fail_submit = fail_submit
        self.calls: List[tuple] = []

    async def create_assistant(self) -> str:
        return "asst_1"

    async def create_thread(self) -> str:
        return "thread_1"

    async def create_run(self, thread_id, assistant_id, prompt, history=None) -> str:
        self.calls.append(("create_run", thread_id, assistant_id, prompt))
        if self.fail_submit:
            raise BackendError("connection refused")
        return "run_1"

    async def get_run_status(self, thread_id, run_id) -> RunStatus:
        self.calls.append(("get_run_status", run_id))
        raw = self.statuses.pop(0) if self.statuses else "in_progress"
        return RunStatus(run_id=run_id, status=RunStatusValue(raw), raw_status=raw, last_error=None)

    async def list_messages(self, thread_id) -> List[ThreadMessage]:
        self.calls.append(("list_messages", thread_id))
        return [
            ThreadMessage(role="assistant", content=self.reply),
            ThreadMessage(role="user", content="make it so"),
        ]

    async def cancel_run(self, thread_id, run_id) -> None:
        self.calls.append(("cancel_run", run_id))

    def count(self, name: str) -> int:
        return sum(1 for c in self.calls if c[0] == name)


def _poller(backend, transitions: Optional[list] = None, **kwargs) -> RunPoller:
    kwargs.setdefault("poll_interval", 0)
    on_transition = (lambda state, run_id: transitions.append(state)) if transitions is not None else None
    return RunPoller(backend, on_transition=on_transition, **kwargs)


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

def test_three_in_progress_then_completed():
    backend = ScriptedBackend(["in_progress", "in_progress", "in_progress", "completed"], reply="REPLY")
    transitions = []
    poller = _poller(backend, transitions)

    reply = run_async(poller.run("thread_1", "asst_1", "hello"))

    assert reply == "REPLY"
    assert transitions == [RunState.SUBMITTED, RunState.POLLING, RunState.COMPLETED]
    assert transitions.count(RunState.COMPLETED) == 1
    assert backend.count("get_run_status") == 4
    assert backend.count("list_messages") == 1
    assert poller.state is RunState.COMPLETED
    assert poller.run_id == "run_1"
    assert not poller.is_active


def test_queued_is_not_terminal():
    backend = ScriptedBackend(["queued", "queued", "completed"])
    poller = _poller(backend)

    run_async(poller.run("thread_1", "asst_1", "hello"))

    assert poller.attempts == 3


def test_failed_on_first_poll_never_fetches_messages():
    backend = ScriptedBackend(["failed"])
    transitions = []
    poller = _poller(backend, transitions)

    with pytest.raises(RunFailed) as exc_info:
        run_async(poller.run("thread_1", "asst_1", "hello"))

    assert transitions[-1] is RunState.FAILED
    assert poller.state is RunState.FAILED
    assert backend.count("list_messages") == 0
    assert exc_info.value.run_id == "run_1"
    assert exc_info.value.status == "failed"


def test_attempt_cap_times_out():
    backend = ScriptedBackend([])  # in_progress forever
    poller = _poller(backend, max_attempts=3, max_wait=None)

    with pytest.raises(RunTimedOut):
        run_async(poller.run("thread_1", "asst_1", "hello"))

    assert poller.state is RunState.TIMED_OUT
    assert poller.attempts == 3
    assert backend.count("list_messages") == 0


def test_wall_clock_budget_times_out():
    backend = ScriptedBackend([])
    ticks = itertools.count(0, 10)
    poller = _poller(backend, max_attempts=None, max_wait=25, clock=lambda: next(ticks))

    with pytest.raises(RunTimedOut):
        run_async(poller.run("thread_1", "asst_1", "hello"))

    assert poller.state is RunState.TIMED_OUT
    assert poller.attempts == 3


def test_submit_failure_is_failed_state():
    backend = ScriptedBackend([], fail_submit=True)
    poller = _poller(backend)

    with pytest.raises(BackendError):
        run_async(poller.run("thread_1", "asst_1", "hello"))

    assert poller.state is RunState.FAILED
    assert backend.count("get_run_status") == 0


def test_cancel_event_stops_polling_and_cancels_remote_run():
    backend = ScriptedBackend([])
    transitions = []
    poller = _poller(backend, transitions, poll_interval=60)

    async def scenario():
        cancel = asyncio.Event()
        task = asyncio.create_task(poller.run("thread_1", "asst_1", "hello", cancel_event=cancel))
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        cancel.set()
        return await task

    with pytest.raises(RunCancelled):
        run_async(scenario())

    assert poller.state is RunState.CANCELLED
    assert transitions[-1] is RunState.CANCELLED
    assert backend.count("cancel_run") == 1
    assert backend.count("list_messages") == 0


def test_task_cancellation_marks_run_cancelled():
    backend = ScriptedBackend([])
    poller = _poller(backend, poll_interval=60)

    async def scenario():
        task = asyncio.create_task(poller.run("thread_1", "asst_1", "hello"))
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        task.cancel()
        await task

    with pytest.raises(asyncio.CancelledError):
        run_async(scenario())

    assert poller.state is RunState.CANCELLED


def test_fetch_reply_without_assistant_message():
    class SilentBackend(ScriptedBackend):
        async def list_messages(self, thread_id):
            return [ThreadMessage(role="user", content="anyone?")]

    poller = _poller(SilentBackend(["completed"]))

    with pytest.raises(BackendError):
        run_async(poller.run("thread_1", "asst_1", "hello"))


def test_transition_callback_errors_do_not_break_polling():
    backend = ScriptedBackend(["completed"])

    def explode(state, run_id):
        raise RuntimeError("ui gone")

    poller = RunPoller(backend, poll_interval=0, on_transition=explode)

    assert run_async(poller.run("thread_1", "asst_1", "hello")) == '{"actions": []}'
