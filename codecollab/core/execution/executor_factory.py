"""
Executor Factory

Builds one executor instance per registered class and a routing table
from ActionType to the executor that handles it.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Type

from codecollab.core.actions import ActionType
from codecollab.core.execution.base_executor import BaseExecutor
from codecollab.core.execution.file_executor import FileExecutor
from codecollab.core.execution.summary_executor import SummaryExecutor
from codecollab.core.feedback import FeedbackChannel
from codecollab.utils.file_ops import WorkspaceFS

logger = logging.getLogger(__name__)


class ExecutorFactory:
    """
    Registry of executor classes.

    The first executor in the registry that claims an ActionType wins.
    """

    _executors: List[Type[BaseExecutor]] = [
        FileExecutor,
        SummaryExecutor,
    ]

    @classmethod
    def create_executors(
        cls,
        base_dir: Path,
        fs: Optional[WorkspaceFS] = None,
        feedback: Optional[FeedbackChannel] = None,
    ) -> Dict[str, BaseExecutor]:
        """Instantiate every registered executor, keyed by class name."""
        return {
            executor_class.__name__: executor_class(base_dir, fs, feedback)
            for executor_class in cls._executors
        }

    @classmethod
    def routing_table(cls, executors: Dict[str, BaseExecutor]) -> Dict[ActionType, BaseExecutor]:
        table: Dict[ActionType, BaseExecutor] = {}
        for action_type in ActionType:
            executor = cls.get_executor_for_action(action_type, executors)
            if executor is None:
                logger.warning(f"No executor handles {action_type.value}")
                continue
            table[action_type] = executor
        return table

    @classmethod
    def get_executor_for_action(
        cls,
        action_type: ActionType,
        executors: Dict[str, BaseExecutor],
    ) -> Optional[BaseExecutor]:
        return next((e for e in executors.values() if e.can_execute(action_type)), None)
