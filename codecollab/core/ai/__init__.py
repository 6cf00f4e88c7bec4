"""
Remote Assistant Layer

A three-operation contract (create run, poll status, list messages) plus
assistant/thread bootstrap. OpenAI's assistants API is the shipped backend.
"""

from codecollab.core.ai.base import (
    AssistantConfig,
    BaseAssistantBackend,
    RunStatus,
    RunStatusValue,
    ThreadMessage,
)
from codecollab.core.ai.openai_provider import OpenAIAssistantBackend
from codecollab.core.ai.factory import AssistantBackendFactory

__all__ = [
    "AssistantConfig",
    "BaseAssistantBackend",
    "RunStatus",
    "RunStatusValue",
    "ThreadMessage",
    "OpenAIAssistantBackend",
    "AssistantBackendFactory",
]
