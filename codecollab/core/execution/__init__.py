"""
Execution Layer

One executor per action category, selected through ExecutorFactory.
"""

from codecollab.core.execution.base_executor import BaseExecutor, ExecutionResult
from codecollab.core.execution.executor_factory import ExecutorFactory
from codecollab.core.execution.file_executor import EditPolicy, FileExecutor
from codecollab.core.execution.summary_executor import SummaryExecutor

__all__ = [
    "BaseExecutor",
    "ExecutionResult",
    "ExecutorFactory",
    "EditPolicy",
    "FileExecutor",
    "SummaryExecutor",
]
