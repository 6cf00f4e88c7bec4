# codecollab/core/action_executor.py
"""
Action Executor

Facade over the per-category executors. Applies actions one at a time,
strictly in document order, and reports one feedback event per action.
Per-action failures (bad path, missing target, OS and encoding errors)
become failed ExecutionResults; nothing raises past the batch boundary.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Union

from codecollab.core.actions import PATH_ACTIONS, Action, Summary
from codecollab.core.decoder import DecodedBatch
from codecollab.core.errors import ActionError
from codecollab.core.execution import EditPolicy, ExecutionResult, ExecutorFactory, FileExecutor
from codecollab.core.feedback import FeedbackChannel, NullFeedbackChannel
from codecollab.core.path_resolver import BatchContext, PathResolver
from codecollab.utils.file_ops import WorkspaceFS

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    results: List[ExecutionResult] = field(default_factory=list)

    @property
    def succeeded(self) -> List[ExecutionResult]:
        return [r for r in self.results if r.success]

    @property
    def failed(self) -> List[ExecutionResult]:
        return [r for r in self.results if not r.success]

    @property
    def ok(self) -> bool:
        return not self.failed


class ActionExecutor:
    """Resolves and applies decoded actions inside one workspace."""

    def __init__(
        self,
        workspace_root: Union[str, Path],
        fs: Optional[WorkspaceFS] = None,
        feedback: Optional[FeedbackChannel] = None,
        edit_policy: EditPolicy = EditPolicy.OVERWRITE,
    ):
        self.workspace_root = Path(workspace_root).resolve()
        self.fs = fs or WorkspaceFS()
        self.feedback = feedback or NullFeedbackChannel()
        self.resolver = PathResolver(self.workspace_root)
        self.executors = ExecutorFactory.create_executors(self.workspace_root, self.fs, self.feedback)
        for executor in self.executors.values():
            if isinstance(executor, FileExecutor):
                executor.edit_policy = edit_policy
        self.routes = ExecutorFactory.routing_table(self.executors)

    # ------------------------------------------------------------------
    # Single action
    # ------------------------------------------------------------------
    async def apply(self, action: Action, resolved_path: Optional[Path] = None) -> ExecutionResult:
        executor = self.routes.get(action.kind)
        if executor is None:
            result = ExecutionResult(
                success=False,
                message=f"No executor for {action.kind.value}",
                action_type=action.kind.value,
                error="unsupported",
                index=action.index,
            )
            self._report(result)
            return result

        try:
            result = await executor.execute(action, resolved_path)
        except ActionError as e:
            result = self._failure(action, e, resolved_path)
        except OSError as e:
            logger.error(f"{action.kind.value} failed on {resolved_path}: {e}")
            result = self._failure(action, e, resolved_path)
        except (UnicodeError, ValueError) as e:
            # content the filesystem encoding cannot represent, e.g. a lone surrogate
            logger.error(f"{action.kind.value} could not write {resolved_path}: {e}")
            result = self._failure(action, e, resolved_path)

        if not isinstance(action, Summary):
            self._report(result)
        return result

    # ------------------------------------------------------------------
    # Batch
    # ------------------------------------------------------------------
    async def apply_batch(self, batch: Union[DecodedBatch, Iterable[Action]]) -> BatchResult:
        """
        Apply a batch in document order. Entries the decoder skipped are
        reported at their original position.
        """
        if isinstance(batch, DecodedBatch):
            entries = list(batch.actions) + list(batch.skipped)
        else:
            entries = list(batch)
        entries.sort(key=lambda e: e.index if e.index is not None else 0)

        context = BatchContext()
        outcome = BatchResult()

        for entry in entries:
            if isinstance(entry, ActionError):
                result = ExecutionResult(
                    success=False,
                    message=f"Skipped action: {entry}",
                    action_type=entry.action_type,
                    error=type(entry).__name__,
                    index=entry.index,
                )
                self._report(result)
                outcome.results.append(result)
                continue

            resolved: Optional[Path] = None
            if isinstance(entry, PATH_ACTIONS):
                try:
                    resolved = self.resolver.resolve(entry, context)
                except ActionError as e:
                    logger.warning(f"Rejected {entry.kind.value} '{entry.name}': {e}")
                    result = self._failure(entry, e, None)
                    self._report(result)
                    outcome.results.append(result)
                    continue

            outcome.results.append(await self.apply(entry, resolved))

        logger.info(
            f"Batch applied: {len(outcome.succeeded)} succeeded, {len(outcome.failed)} failed"
        )
        return outcome

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _failure(action: Action, error: Exception, path: Optional[Path]) -> ExecutionResult:
        return ExecutionResult(
            success=False,
            message=f"{action.kind.value} '{action.name}' failed: {error}",
            action_type=action.kind.value,
            path=str(path) if path is not None else None,
            error=type(error).__name__,
            index=action.index,
        )

    def _report(self, result: ExecutionResult) -> None:
        self.feedback.action(result.message, path=result.path, ok=result.success)
