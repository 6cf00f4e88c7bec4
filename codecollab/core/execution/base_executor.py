"""
Base Executor Interface

Abstract base class for all action executors.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from codecollab.core.actions import Action, ActionType
from codecollab.core.feedback import FeedbackChannel, NullFeedbackChannel
from codecollab.utils.file_ops import WorkspaceFS


@dataclass
class ExecutionResult:
    """Standardized execution result."""
    success: bool
    message: str
    action_type: Optional[str] = None
    path: Optional[str] = None
    error: Optional[str] = None
    index: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "success": self.success,
            "message": self.message,
        }
        if self.action_type is not None:
            result["action_type"] = self.action_type
        if self.path is not None:
            result["path"] = self.path
        if self.error is not None:
            result["error"] = self.error
        return result


class BaseExecutor(ABC):
    """
    Abstract base class for all action executors.

    Each executor is responsible for a category of actions:
    - FileExecutor: folder creation, file creation, file edits
    - SummaryExecutor: informational summaries (no filesystem effect)
    """

    def __init__(
        self,
        base_dir: Path,
        fs: Optional[WorkspaceFS] = None,
        feedback: Optional[FeedbackChannel] = None,
    ):
        """
        Args:
            base_dir: Workspace root
            fs: Filesystem collaborator
            feedback: Channel for user-visible output
        """
        self.base_dir = Path(base_dir).resolve()
        self.fs = fs or WorkspaceFS()
        self.feedback = feedback or NullFeedbackChannel()

    @abstractmethod
    def can_execute(self, action_type: ActionType) -> bool:
        """Check if this executor can handle the given action type."""

    @abstractmethod
    async def execute(self, action: Action, resolved_path: Optional[Path]) -> ExecutionResult:
        """
        Execute an action.

        May raise ActionError or OSError; the ActionExecutor facade turns
        those into failed results.
        """
