"""
Summary Executor

Summaries never touch the filesystem; they go straight to the user.
"""

from pathlib import Path
from typing import Optional

from codecollab.core.actions import Action, ActionType
from codecollab.core.execution.base_executor import BaseExecutor, ExecutionResult


class SummaryExecutor(BaseExecutor):

    def can_execute(self, action_type: ActionType) -> bool:
        return action_type is ActionType.SUMMARY

    async def execute(self, action: Action, resolved_path: Optional[Path] = None) -> ExecutionResult:
        self.feedback.summary(action.content)
        return ExecutionResult(
            success=True,
            message="Summary delivered",
            action_type=action.kind.value,
            index=action.index,
        )
