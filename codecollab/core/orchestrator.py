# codecollab/core/orchestrator.py
"""
Session Orchestrator

One instance per workspace. For each user prompt it:

  1. makes sure the workspace has a remote assistant + thread (cached)
  2. builds the outgoing prompt (file tree snapshot, optional target file)
  3. drives the RunPoller to completion
  4. extracts → decodes → resolves/applies the actions in order
  5. emits exactly one terminal feedback event (response or error)

Only one run may be outstanding per session. With busy_policy="reject"
a second prompt is refused with SessionBusyError; with "queue" it waits.
Conversation history lives on the remote thread; prior turns are never
resent.
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Union

from codecollab.core.action_executor import ActionExecutor, BatchResult
from codecollab.core.decoder import ActionDecoder
from codecollab.core.errors import (
    ExtractionError,
    RunCancelled,
    SessionBusyError,
    TurnError,
)
from codecollab.core.execution import EditPolicy
from codecollab.core.extractor import ResponseExtractor
from codecollab.core.feedback import FeedbackChannel, NullFeedbackChannel
from codecollab.core.file_tree import DEFAULT_IGNORE, build_file_tree
from codecollab.core.prompt import PromptRequest, build_prompt
from codecollab.core.run_poller import RunPoller
from codecollab.core.session_store import RunSession, SessionStore
from codecollab.utils.file_ops import WorkspaceFS
from codecollab.utils.path_utils import is_safe_path

logger = logging.getLogger(__name__)


@dataclass
class TurnResult:
    """Outcome of one prompt."""
    ok: bool
    raw_text: Optional[str] = None
    batch: Optional[BatchResult] = None
    error: Optional[Exception] = None
    run_id: Optional[str] = None


class SessionOrchestrator:
    """Sequences poller → extractor → decoder → executor for one workspace."""

    def __init__(
        self,
        workspace_root: Union[str, Path],
        backend,
        store: Optional[SessionStore] = None,
        feedback: Optional[FeedbackChannel] = None,
        fs: Optional[WorkspaceFS] = None,
        poll_interval: float = 3.0,
        max_poll_attempts: Optional[int] = 100,
        max_poll_seconds: Optional[float] = 600.0,
        edit_policy: EditPolicy = EditPolicy.OVERWRITE,
        busy_policy: str = "reject",
        include_file_tree: bool = True,
        tree_ignore: Iterable[str] = DEFAULT_IGNORE,
    ):
        self.workspace_root = Path(workspace_root).resolve()
        self.backend = backend
        self.store = store or SessionStore()
        self.feedback = feedback or NullFeedbackChannel()
        self.fs = fs or WorkspaceFS()

        self.poll_interval = poll_interval
        self.max_poll_attempts = max_poll_attempts
        self.max_poll_seconds = max_poll_seconds
        self.busy_policy = busy_policy
        self.include_file_tree = include_file_tree
        self.tree_ignore = list(tree_ignore)

        self.extractor = ResponseExtractor()
        self.decoder = ActionDecoder()
        self.executor = ActionExecutor(
            self.workspace_root, fs=self.fs, feedback=self.feedback, edit_policy=edit_policy
        )

        self.poller: Optional[RunPoller] = None
        self._session: Optional[RunSession] = None
        self._lock = asyncio.Lock()
        self._cancel_event: Optional[asyncio.Event] = None

    @classmethod
    def from_settings(
        cls,
        workspace_root: Union[str, Path],
        settings,
        backend=None,
        feedback: Optional[FeedbackChannel] = None,
    ) -> "SessionOrchestrator":
        if backend is None:
            from codecollab.core.ai.factory import AssistantBackendFactory
            backend = AssistantBackendFactory.create_from_settings(settings)

        return cls(
            workspace_root,
            backend,
            store=SessionStore(storage_dir=settings.state_dir),
            feedback=feedback,
            poll_interval=settings.poll_interval,
            max_poll_attempts=settings.max_poll_attempts,
            max_poll_seconds=settings.max_poll_seconds,
            edit_policy=EditPolicy(settings.edit_policy),
            busy_policy=settings.busy_policy,
            include_file_tree=settings.include_file_tree,
            tree_ignore=settings.tree_ignore,
        )

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------
    @property
    def busy(self) -> bool:
        return self._lock.locked()

    async def ensure_session(self) -> RunSession:
        """Create (once) and cache the assistant/thread ids for this workspace."""
        if self._session is not None and self._session.is_ready:
            return self._session

        session = self.store.get(self.workspace_root)
        changed = False

        if not session.assistant_id:
            session.assistant_id = await self.backend.create_assistant()
            changed = True
        if not session.thread_id:
            session.thread_id = await self.backend.create_thread()
            changed = True

        if changed:
            self.store.save(session)
            logger.info(
                f"Session {session.session_key}: assistant={session.assistant_id} thread={session.thread_id}"
            )
        self._session = session
        return session

    def reset_session(self) -> bool:
        """Forget cached ids; the next prompt starts a fresh thread."""
        self._session = None
        return self.store.forget(self.workspace_root)

    def cancel(self) -> bool:
        """Stop the in-flight poll loop; its result is discarded."""
        if self._cancel_event is None:
            return False
        logger.info("Cancelling in-flight run")
        self._cancel_event.set()
        return True

    close = cancel

    # ------------------------------------------------------------------
    # Prompt handling
    # ------------------------------------------------------------------
    async def handle_prompt(self, prompt: Union[str, PromptRequest]) -> TurnResult:
        request = prompt if isinstance(prompt, PromptRequest) else PromptRequest(text=prompt)

        if self._lock.locked() and self.busy_policy == "reject":
            error = SessionBusyError("A run is already in progress for this workspace; try again when it finishes")
            logger.warning(str(error))
            self.feedback.error(str(error))
            return TurnResult(ok=False, error=error)

        async with self._lock:
            self._cancel_event = asyncio.Event()
            try:
                return await self._run_turn(request, self._cancel_event)
            finally:
                self._cancel_event = None

    async def _run_turn(self, request: PromptRequest, cancel_event: asyncio.Event) -> TurnResult:
        raw_text: Optional[str] = None
        run_id: Optional[str] = None
        try:
            session = await self.ensure_session()
            outgoing = await self._build_outgoing(request)

            self.poller = RunPoller(
                self.backend,
                poll_interval=self.poll_interval,
                max_attempts=self.max_poll_attempts,
                max_wait=self.max_poll_seconds,
            )
            raw_text = await self.poller.run(
                session.thread_id,
                session.assistant_id,
                outgoing,
                cancel_event=cancel_event,
            )
            run_id = self.poller.run_id
            if cancel_event.is_set():
                raise RunCancelled(f"Run {run_id} cancelled; reply discarded", run_id=run_id)

            document = self.extractor.extract_document(raw_text)
            batch = self.decoder.decode_batch(document)
            outcome = await self.executor.apply_batch(batch)
        except ExtractionError as e:
            logger.error(f"Failed to process response: {e}")
            self.feedback.error(str(e), detail=raw_text)
            return TurnResult(ok=False, raw_text=raw_text, error=e, run_id=run_id)
        except TurnError as e:
            logger.error(f"Turn failed: {e}")
            self.feedback.error(str(e))
            return TurnResult(ok=False, raw_text=raw_text, error=e, run_id=run_id)
        except Exception as e:
            logger.exception(f"Unexpected failure while handling prompt: {e}")
            self.feedback.error(f"Unexpected error: {e}", detail=raw_text)
            return TurnResult(ok=False, raw_text=raw_text, error=e, run_id=run_id)

        self.feedback.response(raw_text)
        return TurnResult(ok=True, raw_text=raw_text, batch=outcome, run_id=run_id)

    async def _build_outgoing(self, request: PromptRequest) -> str:
        tree = None
        if self.include_file_tree:
            tree = await build_file_tree(self.workspace_root, fs=self.fs, ignore=self.tree_ignore)

        file_content = None
        if request.file_path:
            file_content = await self._read_target(request.file_path)

        return build_prompt(request, tree=tree, file_content=file_content)

    async def _read_target(self, file_path: str) -> Optional[str]:
        target = (self.workspace_root / file_path.lstrip("/\\")).resolve()
        if not is_safe_path(self.workspace_root, target, allow_root=False):
            logger.warning(f"Target file outside workspace ignored: {file_path}")
            self.feedback.action(f"Target file outside workspace ignored: {file_path}", ok=False)
            return None
        try:
            return await self.fs.read_text(target)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to read file {target}: {e}")
            self.feedback.action(f"Failed to read file: {file_path} ({e})", path=str(target), ok=False)
            return None
