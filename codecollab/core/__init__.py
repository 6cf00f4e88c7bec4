# Core modules
from .actions import ActionType, CreateFile, CreateFolder, EditFile, Summary
from .extractor import ResponseExtractor
from .decoder import ActionDecoder
from .path_resolver import BatchContext, PathResolver
from .action_executor import ActionExecutor
from .run_poller import RunPoller, RunState
from .orchestrator import SessionOrchestrator, TurnResult

__all__ = [
    "ActionType",
    "CreateFile",
    "CreateFolder",
    "EditFile",
    "Summary",
    "ResponseExtractor",
    "ActionDecoder",
    "BatchContext",
    "PathResolver",
    "ActionExecutor",
    "RunPoller",
    "RunState",
    "SessionOrchestrator",
    "TurnResult",
]
