"""
Read-only workspace snapshots.

A FileTree is built once per prompt to give the assistant situational
context. It is never mutated by actions and is discarded after the turn.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from codecollab.utils.file_ops import WorkspaceFS

logger = logging.getLogger(__name__)

DEFAULT_IGNORE = (".git", "node_modules", "__pycache__", ".venv", "venv", ".pytest_cache")


@dataclass
class FileEntry:
    name: str
    size: int
    mtime: float
    is_directory: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "size": self.size,
            "mtime": datetime.fromtimestamp(self.mtime, tz=timezone.utc).isoformat(),
            "isDirectory": self.is_directory,
        }


@dataclass
class FileTree:
    path: str
    files: List[FileEntry] = field(default_factory=list)
    folders: List["FileTree"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "files": [f.to_dict() for f in self.files],
            "folders": [f.to_dict() for f in self.folders],
        }

    def iter_files(self, prefix: str = "") -> Iterable[str]:
        """Relative paths of every file in the tree."""
        for f in self.files:
            yield f"{prefix}{f.name}"
        for folder in self.folders:
            name = Path(folder.path).name
            yield from folder.iter_files(f"{prefix}{name}/")


async def build_file_tree(
    root: Union[str, Path],
    fs: Optional[WorkspaceFS] = None,
    ignore: Iterable[str] = DEFAULT_IGNORE,
    max_depth: Optional[int] = None,
) -> FileTree:
    """Recursively snapshot `root`. Ignored names are skipped at every level."""
    fs = fs or WorkspaceFS()
    ignored = set(ignore)
    return await _build(Path(root), fs, ignored, max_depth, 0)


async def _build(path: Path, fs: WorkspaceFS, ignored, max_depth, depth) -> FileTree:
    tree = FileTree(path=str(path))
    try:
        entries = await fs.list_dir(path)
    except OSError as e:
        logger.warning(f"Cannot list {path}: {e}")
        return tree

    for entry in entries:
        if entry.name in ignored:
            continue
        if entry.is_directory:
            if max_depth is not None and depth >= max_depth:
                continue
            tree.folders.append(await _build(entry.path, fs, ignored, max_depth, depth + 1))
        else:
            tree.files.append(
                FileEntry(name=entry.name, size=entry.size, mtime=entry.mtime, is_directory=False)
            )
    return tree


async def list_workspace_files(
    root: Union[str, Path],
    fs: Optional[WorkspaceFS] = None,
    ignore: Iterable[str] = DEFAULT_IGNORE,
) -> List[str]:
    """Flat, sorted list of workspace-relative file paths."""
    tree = await build_file_tree(root, fs=fs, ignore=ignore)
    return sorted(tree.iter_files())
