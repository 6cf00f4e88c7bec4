# codecollab/core/path_resolver.py
"""
Path resolution for decoded actions.

Priority for path-carrying actions:
  1. explicit absolute `path` inside the workspace → used as-is
     (a leading-slash path outside it, e.g. "/NewFolder", is workspace-rooted)
  2. explicit relative `path` → joined under the workspace root
  3. no `path`:
       createFolder         → workspace root
       createFile/editFile  → folder from the most recent createFolder
                              in the batch, else MissingContextError

An editFile whose `path` already ends in its file name targets that path
directly. Every resolved path must stay inside the workspace root
(PathEscapeError); a path the OS cannot represent is rejected the same way.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from codecollab.core.actions import Action, CreateFile, CreateFolder, EditFile
from codecollab.core.errors import MissingContextError, PathEscapeError
from codecollab.utils.path_utils import is_safe_path

logger = logging.getLogger(__name__)


@dataclass
class BatchContext:
    """
    State threaded through one action batch.

    `last_folder_path` is updated after every createFolder and consumed by
    later file actions that omit `path`.
    """
    last_folder_path: Optional[Path] = None


class PathResolver:
    """Maps actions to absolute paths under one workspace root."""

    def __init__(self, workspace_root: Union[str, Path]):
        self.root = Path(workspace_root).resolve()

    def resolve(self, action: Action, context: BatchContext) -> Path:
        if isinstance(action, CreateFolder):
            base = self._base_from(action, action.path) if action.path else self.root
            target = self._check(base / action.folder_name, action, allow_root=True)
            context.last_folder_path = target
            return target

        if isinstance(action, (CreateFile, EditFile)):
            if action.path:
                base = self._base_from(action, action.path)
                # editFile "path": "/dir/File.ext" already names the file
                if (
                    isinstance(action, EditFile)
                    and base.name == Path(action.file_name).name
                    and base != self.root
                ):
                    candidate = base
                else:
                    candidate = base / action.file_name
            elif context.last_folder_path is not None:
                candidate = context.last_folder_path / action.file_name
            else:
                raise MissingContextError(
                    f"No folder path defined for {action.kind.value} '{action.file_name}'",
                    action_type=action.kind.value,
                    index=action.index,
                )
            return self._check(candidate, action, allow_root=False)

        raise TypeError(f"{type(action).__name__} has no filesystem path")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _base_from(self, action: Action, raw_path: str) -> Path:
        p = Path(raw_path)
        if p.is_absolute():
            if self._inside(p, action, allow_root=True):
                return p
            # "/NewFolder" means <root>/NewFolder
            return self.root / p.relative_to(p.anchor)
        return self.root / p

    def _check(self, candidate: Path, action: Action, allow_root: bool) -> Path:
        if not self._inside(candidate, action, allow_root=allow_root):
            raise PathEscapeError(
                f"Path outside workspace: {candidate} (workspace root: {self.root})",
                action_type=action.kind.value,
                index=action.index,
            )
        resolved = candidate.resolve()
        logger.debug(f"Resolved {action.kind.value} '{action.name}' -> {resolved}")
        return resolved

    def _inside(self, candidate: Path, action: Action, allow_root: bool) -> bool:
        if "\x00" in str(candidate):
            raise self._invalid(candidate, action, "embedded null byte")
        try:
            return is_safe_path(self.root, candidate, allow_root=allow_root)
        except (ValueError, OSError) as e:
            raise self._invalid(candidate, action, e) from e

    @staticmethod
    def _invalid(candidate: Path, action: Action, reason) -> PathEscapeError:
        return PathEscapeError(
            f"Invalid path {str(candidate)!r}: {reason}",
            action_type=action.kind.value,
            index=action.index,
        )
