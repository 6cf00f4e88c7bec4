"""
Persistent per-workspace session identifiers.

Stores the remote assistant/thread ids for each workspace in a JSON file
under ~/.codecollab, keyed by the md5 of the workspace root, so a
conversation keeps using one remote thread across prompts and restarts.
Only identifiers are stored, never code or credentials.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from codecollab.utils.path_utils import workspace_key


logger = logging.getLogger(__name__)


@dataclass
class RunSession:
    session_key: str
    workspace_root: Optional[str] = None
    thread_id: Optional[str] = None
    assistant_id: Optional[str] = None

    @property
    def is_ready(self) -> bool:
        return bool(self.thread_id and self.assistant_id)


@dataclass
class SessionStore:
    """
    Small JSON-backed store with one bucket per workspace.
    Load/save failures are logged and the store keeps working in memory.
    """

    storage_dir: Path = field(
        default_factory=lambda: Path(os.path.expanduser("~/.codecollab"))
    )
    filename: str = "sessions.json"

    def __post_init__(self) -> None:
        self.storage_dir = Path(self.storage_dir)
        self._data: Dict[str, Dict[str, Any]] = {}
        self._loaded: bool = False

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @property
    def path(self) -> Path:
        return self.storage_dir / self.filename

    def _load(self) -> None:
        if self._loaded:
            return
        self._loaded = True

        if not self.path.exists():
            self._data = {}
            return

        try:
            obj = json.loads(self.path.read_text(encoding="utf-8"))
            self._data = obj if isinstance(obj, dict) else {}
        except (OSError, ValueError) as e:
            logger.warning(f"SessionStore: failed to load {self.path}: {e}")
            self._data = {}

    def _save(self) -> None:
        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning(f"SessionStore: failed to save {self.path}: {e}")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def get(self, workspace_root: Union[str, Path, None]) -> RunSession:
        """Return the session for a workspace, creating an empty one lazily."""
        self._load()
        key = workspace_key(workspace_root)
        bucket = self._data.get(key) or {}
        return RunSession(
            session_key=key,
            workspace_root=str(workspace_root) if workspace_root else None,
            thread_id=bucket.get("thread_id"),
            assistant_id=bucket.get("assistant_id"),
        )

    def save(self, session: RunSession) -> None:
        self._load()
        bucket = {k: v for k, v in asdict(session).items() if k != "session_key" and v is not None}
        self._data[session.session_key] = bucket
        self._save()
        logger.debug(f"SessionStore: saved session {session.session_key}")

    def forget(self, workspace_root: Union[str, Path, None]) -> bool:
        self._load()
        key = workspace_key(workspace_root)
        if key not in self._data:
            return False
        self._data.pop(key, None)
        self._save()
        return True
