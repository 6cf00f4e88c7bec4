"""
OpenAI Assistant Backend

Concrete BaseAssistantBackend on top of the OpenAI assistants API
(assistants / threads / runs).
"""

import logging
from typing import List, Optional

from openai import AsyncOpenAI, OpenAIError

from codecollab.core.ai.base import (
    AssistantConfig,
    BaseAssistantBackend,
    RunStatus,
    RunStatusValue,
    ThreadMessage,
)
from codecollab.core.errors import BackendError

logger = logging.getLogger(__name__)


# OpenAI run statuses -> the four values the poller understands
_STATUS_MAP = {
    "queued": RunStatusValue.QUEUED,
    "in_progress": RunStatusValue.IN_PROGRESS,
    "requires_action": RunStatusValue.IN_PROGRESS,
    "cancelling": RunStatusValue.IN_PROGRESS,
    "completed": RunStatusValue.COMPLETED,
    "failed": RunStatusValue.FAILED,
    "cancelled": RunStatusValue.FAILED,
    "expired": RunStatusValue.FAILED,
    "incomplete": RunStatusValue.FAILED,
}


class OpenAIAssistantBackend(BaseAssistantBackend):
    """OpenAI assistants API backend."""

    def __init__(self, config: AssistantConfig, client: Optional[AsyncOpenAI] = None):
        super().__init__(config)
        self.client = client or AsyncOpenAI(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.timeout,
        )
        logger.info(f"OpenAIAssistantBackend initialized with model: {config.model}")

    async def create_assistant(self) -> str:
        try:
            assistant = await self.client.beta.assistants.create(
                model=self.config.model,
                name=self.config.name,
                description=self.config.description,
                instructions=self.config.instructions,
                temperature=self.config.temperature,
                response_format={"type": "json_object"},
                **(self.config.extra_params or {}),
            )
        except OpenAIError as e:
            raise BackendError(f"Failed to create assistant: {e}") from e
        logger.info(f"Assistant created: {assistant.id}")
        return assistant.id

    async def create_thread(self) -> str:
        try:
            thread = await self.client.beta.threads.create()
        except OpenAIError as e:
            raise BackendError(f"Failed to create thread: {e}") from e
        logger.info(f"Thread created: {thread.id}")
        return thread.id

    async def create_run(
        self,
        thread_id: str,
        assistant_id: str,
        prompt: str,
        history: Optional[List[ThreadMessage]] = None,
    ) -> str:
        try:
            for turn in history or []:
                await self.client.beta.threads.messages.create(
                    thread_id=thread_id, role=turn.role, content=turn.content
                )
            await self.client.beta.threads.messages.create(
                thread_id=thread_id, role="user", content=prompt
            )
            run = await self.client.beta.threads.runs.create(
                thread_id=thread_id, assistant_id=assistant_id
            )
        except OpenAIError as e:
            raise BackendError(f"Failed to create run: {e}") from e
        logger.info(f"Run created: {run.id} (thread {thread_id})")
        return run.id

    async def get_run_status(self, thread_id: str, run_id: str) -> RunStatus:
        try:
            run = await self.client.beta.threads.runs.retrieve(run_id=run_id, thread_id=thread_id)
        except OpenAIError as e:
            raise BackendError(f"Failed to check run status: {e}") from e

        raw = str(run.status)
        status = _STATUS_MAP.get(raw)
        if status is None:
            logger.warning(f"Unknown run status {raw!r}, treating as in progress")
            status = RunStatusValue.IN_PROGRESS

        last_error = None
        if getattr(run, "last_error", None):
            last_error = f"{run.last_error.code}: {run.last_error.message}"

        return RunStatus(run_id=run.id, status=status, raw_status=raw, last_error=last_error)

    async def list_messages(self, thread_id: str) -> List[ThreadMessage]:
        try:
            page = await self.client.beta.threads.messages.list(thread_id=thread_id, order="desc")
        except OpenAIError as e:
            raise BackendError(f"Failed to list messages: {e}") from e

        messages: List[ThreadMessage] = []
        for msg in page.data:
            parts = [
                block.text.value
                for block in msg.content
                if getattr(block, "type", None) == "text"
            ]
            messages.append(ThreadMessage(role=msg.role, content="\n".join(parts), message_id=msg.id))
        logger.debug(f"Retrieved {len(messages)} message(s) from thread {thread_id}")
        return messages

    async def cancel_run(self, thread_id: str, run_id: str) -> None:
        try:
            await self.client.beta.threads.runs.cancel(run_id=run_id, thread_id=thread_id)
        except OpenAIError as e:
            raise BackendError(f"Failed to cancel run: {e}") from e
        logger.info(f"Run cancel requested: {run_id}")
