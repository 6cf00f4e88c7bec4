"""
File Operation Executor

Applies createFolder / createFile / editFile against the workspace.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Optional

from codecollab.core.actions import Action, ActionType, CreateFile, CreateFolder, EditFile
from codecollab.core.errors import TargetNotFoundError
from codecollab.core.execution.base_executor import BaseExecutor, ExecutionResult

logger = logging.getLogger(__name__)


class EditPolicy(Enum):
    OVERWRITE = "overwrite"
    APPEND = "append"


class FileExecutor(BaseExecutor):
    """Executor for folder and file operations."""

    FILE_ACTIONS = {
        ActionType.CREATE_FOLDER,
        ActionType.CREATE_FILE,
        ActionType.EDIT_FILE,
    }

    edit_policy: EditPolicy = EditPolicy.OVERWRITE

    def can_execute(self, action_type: ActionType) -> bool:
        return action_type in self.FILE_ACTIONS

    async def execute(self, action: Action, resolved_path: Optional[Path]) -> ExecutionResult:
        if resolved_path is None:
            raise ValueError(f"{action.kind.value} needs a resolved path")

        if isinstance(action, CreateFolder):
            await self.fs.make_dirs(resolved_path)
            message = f"Folder created: {resolved_path}"
        elif isinstance(action, CreateFile):
            await self.fs.write_text(resolved_path, action.content)
            message = f"File created: {resolved_path}"
        elif isinstance(action, EditFile):
            message = await self._edit(action, resolved_path)
        else:
            raise TypeError(f"FileExecutor cannot run {action.kind.value}")

        logger.info(message)
        return ExecutionResult(
            success=True,
            message=message,
            action_type=action.kind.value,
            path=str(resolved_path),
            index=action.index,
        )

    async def _edit(self, action: EditFile, path: Path) -> str:
        if not await self.fs.is_file(path):
            raise TargetNotFoundError(
                f"Cannot edit missing file: {path}",
                action_type=action.kind.value,
                index=action.index,
            )

        if self.edit_policy is EditPolicy.APPEND:
            logger.warning(f"edit_policy=append: appending to {path} instead of overwriting")
            await self.fs.append_text(path, action.content)
            return f"File appended: {path}"

        await self.fs.write_text(path, action.content)
        return f"File edited: {path}"
