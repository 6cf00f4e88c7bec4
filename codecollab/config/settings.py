"""
Settings

Typed view over ~/.codecollab/config.json plus environment overrides.

Example config.json:
{
    "openai": {"api_key": "sk-...", "model": "gpt-4"},
    "polling": {"interval": 3, "max_attempts": 100, "max_seconds": 600},
    "edit_policy": "overwrite",
    "busy_policy": "reject"
}
"""

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from codecollab.core.errors import ConfigError
from codecollab.core.file_tree import DEFAULT_IGNORE
from codecollab.services.config_service import ConfigService

logger = logging.getLogger(__name__)

EDIT_POLICIES = ("overwrite", "append")
BUSY_POLICIES = ("reject", "queue")


@dataclass
class CollabSettings:
    backend: str = "openai"
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    model: str = "gpt-4"
    assistant_name: str = "Code Collaborator Assistant"
    temperature: float = 1.0
    request_timeout: float = 60.0
    poll_interval: float = 3.0
    max_poll_attempts: Optional[int] = 100
    max_poll_seconds: Optional[float] = 600.0
    edit_policy: str = "overwrite"
    busy_policy: str = "reject"
    include_file_tree: bool = True
    tree_ignore: List[str] = field(default_factory=lambda: list(DEFAULT_IGNORE))
    state_dir: Path = field(default_factory=lambda: Path.home() / ".codecollab")

    def __post_init__(self):
        if self.edit_policy not in EDIT_POLICIES:
            raise ConfigError(f"edit_policy must be one of {EDIT_POLICIES}, got {self.edit_policy!r}")
        if self.busy_policy not in BUSY_POLICIES:
            raise ConfigError(f"busy_policy must be one of {BUSY_POLICIES}, got {self.busy_policy!r}")
        if self.poll_interval < 0:
            raise ConfigError("poll interval must not be negative")
        self.state_dir = Path(self.state_dir).expanduser()

    @classmethod
    def from_config(cls, service: ConfigService) -> "CollabSettings":
        defaults = cls()
        return cls(
            backend=service.get("backend", defaults.backend),
            api_key=service.get("openai.api_key"),
            base_url=service.get("openai.base_url"),
            model=service.get("openai.model", defaults.model),
            assistant_name=service.get("assistant.name", defaults.assistant_name),
            temperature=float(service.get("openai.temperature", defaults.temperature)),
            request_timeout=float(service.get("openai.timeout", defaults.request_timeout)),
            poll_interval=float(service.get("polling.interval", defaults.poll_interval)),
            max_poll_attempts=service.get("polling.max_attempts", defaults.max_poll_attempts),
            max_poll_seconds=service.get("polling.max_seconds", defaults.max_poll_seconds),
            edit_policy=service.get("edit_policy", defaults.edit_policy),
            busy_policy=service.get("busy_policy", defaults.busy_policy),
            include_file_tree=bool(service.get("include_file_tree", defaults.include_file_tree)),
            tree_ignore=list(service.get("tree_ignore", defaults.tree_ignore)),
            state_dir=Path(service.get("state_dir", str(defaults.state_dir))),
        )


def _env_overrides(env: Mapping[str, str]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if env.get("OPENAI_API_KEY"):
        overrides["api_key"] = env["OPENAI_API_KEY"]
    if env.get("CODECOLLAB_MODEL"):
        overrides["model"] = env["CODECOLLAB_MODEL"]
    if env.get("CODECOLLAB_POLL_INTERVAL"):
        try:
            overrides["poll_interval"] = float(env["CODECOLLAB_POLL_INTERVAL"])
        except ValueError:
            raise ConfigError(
                f"CODECOLLAB_POLL_INTERVAL must be a number, got {env['CODECOLLAB_POLL_INTERVAL']!r}"
            )
    return overrides


def load_settings(
    config_path: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
    **overrides: Any,
) -> CollabSettings:
    """
    Build settings: config file, then environment, then explicit overrides
    (CLI flags). None-valued overrides are ignored.
    """
    service = ConfigService(config_path=config_path)
    service.load()
    settings = CollabSettings.from_config(service)

    changes = _env_overrides(os.environ if env is None else env)
    changes.update({k: v for k, v in overrides.items() if v is not None})
    if changes:
        settings = replace(settings, **changes)
    return settings
