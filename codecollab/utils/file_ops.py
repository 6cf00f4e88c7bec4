# codecollab/utils/file_ops.py
import asyncio
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

logger = logging.getLogger("codecollab.FileOps")

PathLike = Union[str, Path]


@dataclass
class EntryInfo:
    """One directory entry with the stat fields the file tree needs."""
    name: str
    path: Path
    size: int
    mtime: float
    is_directory: bool


class WorkspaceFS:
    """
    Asynchronous filesystem collaborator.

    The blocking pathlib calls run in a worker thread so the event loop
    stays responsive while actions are applied. Errors propagate as
    OSError; the action executor reports them per action.
    """

    encoding = "utf-8"

    # --------------------------------------------------------
    # Directories
    # --------------------------------------------------------
    async def make_dirs(self, path: PathLike) -> None:
        """Recursive and idempotent."""
        await asyncio.to_thread(Path(path).mkdir, parents=True, exist_ok=True)

    # --------------------------------------------------------
    # Basic Read / Write
    # --------------------------------------------------------
    async def write_text(self, path: PathLike, content: str) -> None:
        """Create or truncate-and-overwrite."""
        p = Path(path)
        await asyncio.to_thread(self._write, p, content, "w")

    async def append_text(self, path: PathLike, content: str) -> None:
        p = Path(path)
        await asyncio.to_thread(self._write, p, content, "a")

    async def read_text(self, path: PathLike) -> str:
        return await asyncio.to_thread(Path(path).read_text, encoding=self.encoding)

    def _write(self, p: Path, content: str, mode: str) -> None:
        p.parent.mkdir(parents=True, exist_ok=True)
        with p.open(mode, encoding=self.encoding) as f:
            f.write(content)

    # --------------------------------------------------------
    # Queries
    # --------------------------------------------------------
    async def is_file(self, path: PathLike) -> bool:
        return await asyncio.to_thread(Path(path).is_file)

    # --------------------------------------------------------
    # Listing
    # --------------------------------------------------------
    async def list_dir(self, path: PathLike) -> List[EntryInfo]:
        return await asyncio.to_thread(self._scan, Path(path))

    @staticmethod
    def _scan(path: Path) -> List[EntryInfo]:
        entries: List[EntryInfo] = []
        with os.scandir(path) as it:
            for entry in it:
                try:
                    st = entry.stat()
                    is_dir = entry.is_dir()
                except OSError as e:
                    logger.warning(f"[list_dir] Cannot stat {entry.path}: {e}")
                    continue
                entries.append(
                    EntryInfo(
                        name=entry.name,
                        path=Path(entry.path),
                        size=st.st_size,
                        mtime=st.st_mtime,
                        is_directory=is_dir,
                    )
                )
        entries.sort(key=lambda e: e.name)
        return entries
