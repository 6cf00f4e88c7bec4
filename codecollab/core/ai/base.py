"""
Base Assistant Backend Interface

Abstract base class for remote assistants that execute prompts in
discrete runs on a server-side thread.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from codecollab.core.errors import ConfigError


class RunStatusValue(Enum):
    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class RunStatus:
    """Transient status of one submitted run."""
    run_id: str
    status: RunStatusValue
    raw_status: Optional[str] = None
    last_error: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in (RunStatusValue.COMPLETED, RunStatusValue.FAILED)


@dataclass
class ThreadMessage:
    role: str
    content: str
    message_id: Optional[str] = None


@dataclass
class AssistantConfig:
    """Configuration for an assistant backend."""
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    model: str = "gpt-4"
    name: str = "Code Collaborator Assistant"
    description: Optional[str] = None
    instructions: Optional[str] = None
    temperature: float = 1.0
    timeout: float = 60.0
    extra_params: Optional[Dict[str, Any]] = None


class BaseAssistantBackend(ABC):
    """
    All remote assistant backends implement this interface.

    The core only depends on create_run / get_run_status / list_messages;
    create_assistant / create_thread bootstrap a session once per workspace.
    """

    requires_api_key = True

    def __init__(self, config: AssistantConfig):
        self.config = config
        self._validate_config()

    def _validate_config(self) -> None:
        if self.requires_api_key and not self.config.api_key:
            raise ConfigError(f"API key required for {type(self).__name__}")

    @abstractmethod
    async def create_assistant(self) -> str:
        """Create the remote assistant and return its identifier."""

    @abstractmethod
    async def create_thread(self) -> str:
        """Create an empty conversation thread and return its identifier."""

    @abstractmethod
    async def create_run(
        self,
        thread_id: str,
        assistant_id: str,
        prompt: str,
        history: Optional[List[ThreadMessage]] = None,
    ) -> str:
        """
        Post `prompt` (after any prior `history` turns) to the thread and
        start a run. Returns the run identifier.
        """

    @abstractmethod
    async def get_run_status(self, thread_id: str, run_id: str) -> RunStatus:
        """Poll the current status of a run."""

    @abstractmethod
    async def list_messages(self, thread_id: str) -> List[ThreadMessage]:
        """Return thread messages, newest first."""

    async def cancel_run(self, thread_id: str, run_id: str) -> None:
        """Ask the remote side to stop a run. Optional."""
        return None
