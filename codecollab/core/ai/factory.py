"""
Assistant Backend Factory

Factory pattern for creating assistant backends from settings.
"""

import logging
from typing import Dict, List, Type

from codecollab.core.ai.base import AssistantConfig, BaseAssistantBackend
from codecollab.core.ai.openai_provider import OpenAIAssistantBackend
from codecollab.core.errors import ConfigError

logger = logging.getLogger(__name__)


class AssistantBackendFactory:
    """
    Factory for assistant backends.

    Maps the `backend` config value to a backend class.
    """

    _backends: Dict[str, Type[BaseAssistantBackend]] = {
        "openai": OpenAIAssistantBackend,
    }

    @classmethod
    def create(cls, name: str, config: AssistantConfig) -> BaseAssistantBackend:
        backend_class = cls._backends.get(name.lower())
        if not backend_class:
            raise ConfigError(
                f"Assistant backend {name!r} not registered "
                f"(available: {', '.join(cls.get_available_backends())})"
            )
        return backend_class(config)

    @classmethod
    def create_from_settings(cls, settings) -> BaseAssistantBackend:
        """Build the configured backend from CollabSettings."""
        from codecollab.core.prompt import ASSISTANT_DESCRIPTION, ASSISTANT_INSTRUCTIONS

        config = AssistantConfig(
            api_key=settings.api_key,
            base_url=settings.base_url,
            model=settings.model,
            name=settings.assistant_name,
            description=ASSISTANT_DESCRIPTION,
            instructions=ASSISTANT_INSTRUCTIONS,
            temperature=settings.temperature,
            timeout=settings.request_timeout,
        )
        return cls.create(settings.backend, config)

    @classmethod
    def get_available_backends(cls) -> List[str]:
        return list(cls._backends.keys())
