# codecollab/core/decoder.py
"""
Action decoding.

Turns an extracted document into an ordered list of typed actions.
Document-level problems (not JSON/XML, no actions list) raise DecodeError
and abort the turn. Problems with a single entry (unknown type, empty
name, NUL in a name or path, non-string content) only skip that entry;
they are collected on the DecodedBatch so the caller can report them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from codecollab.core.actions import (
    Action,
    ActionType,
    CreateFile,
    CreateFolder,
    EditFile,
    Summary,
    normalize_action_type,
)
from codecollab.core.errors import ActionError, InvalidActionError, UnknownActionType
from codecollab.core.extractor import (
    DocumentFormat,
    ExtractedDocument,
    PlainJsonFormat,
    XmlFormat,
)

logger = logging.getLogger(__name__)

# Field spellings accepted per logical field, first match wins.
_FOLDER_NAME_KEYS = ("folderName", "foldername", "folder_name", "folder")
_FILE_NAME_KEYS = ("fileName", "filename", "file_name", "file")
_CONTENT_KEYS = ("content", "text", "body", "value")


def _pick(raw: Dict[str, Any], keys) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def _reject_nul(value: str, label: str, action_type: ActionType, index: int) -> None:
    if "\x00" in value:
        raise InvalidActionError(
            f"'{label}' contains a NUL character",
            action_type=action_type.value,
            index=index,
        )


@dataclass
class DecodedBatch:
    """Actions in document order plus the entries that were skipped."""
    actions: List[Action] = field(default_factory=list)
    skipped: List[ActionError] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.actions)

    def __iter__(self):
        return iter(self.actions)


class ActionDecoder:
    """Validates raw action mappings into typed Action records."""

    def decode(self, document: Union[str, ExtractedDocument]) -> List[Action]:
        return self.decode_batch(document).actions

    def decode_batch(self, document: Union[str, ExtractedDocument]) -> DecodedBatch:
        fmt, text = self._split(document)
        raw_actions = fmt.parse(text)

        batch = DecodedBatch()
        for index, raw in enumerate(raw_actions):
            try:
                batch.actions.append(self.decode_action(raw, index))
            except ActionError as e:
                logger.warning(f"Skipping actions[{index}]: {e}")
                batch.skipped.append(e)

        logger.debug(
            f"Decoded {len(batch.actions)} action(s), skipped {len(batch.skipped)} "
            f"from {fmt.name} document"
        )
        return batch

    def decode_action(self, raw: Dict[str, Any], index: int = 0) -> Action:
        raw_type = raw.get("type")
        action_type = normalize_action_type(raw_type)
        if action_type is None:
            raise UnknownActionType(
                f"Unsupported action type: {raw_type!r}",
                action_type=str(raw_type),
                index=index,
            )

        if action_type is ActionType.SUMMARY:
            content = _pick(raw, _CONTENT_KEYS)
            if not isinstance(content, str):
                raise InvalidActionError(
                    "summary requires a 'content' string",
                    action_type=action_type.value,
                    index=index,
                )
            return Summary(content=content, index=index)

        path = self._optional_path(raw, action_type, index)

        if action_type is ActionType.CREATE_FOLDER:
            name = self._required_name(raw, _FOLDER_NAME_KEYS, "folderName", action_type, index)
            return CreateFolder(folder_name=name, path=path, index=index)

        name = self._required_name(raw, _FILE_NAME_KEYS, "fileName", action_type, index)
        content = _pick(raw, _CONTENT_KEYS)
        if content is None:
            content = ""
        elif not isinstance(content, str):
            raise InvalidActionError(
                f"'content' must be a string, got {type(content).__name__}",
                action_type=action_type.value,
                index=index,
            )

        if action_type is ActionType.CREATE_FILE:
            return CreateFile(file_name=name, content=content, path=path, index=index)
        return EditFile(file_name=name, content=content, path=path, index=index)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _split(document: Union[str, ExtractedDocument]):
        if isinstance(document, ExtractedDocument):
            return document.format, document.text
        fmt: DocumentFormat = XmlFormat() if document.lstrip().startswith("<") else PlainJsonFormat()
        return fmt, document

    @staticmethod
    def _required_name(raw, keys, label: str, action_type: ActionType, index: int) -> str:
        value = _pick(raw, keys)
        if not isinstance(value, str) or not value.strip():
            raise InvalidActionError(
                f"{action_type.value} requires a non-empty '{label}'",
                action_type=action_type.value,
                index=index,
            )
        _reject_nul(value, label, action_type, index)
        return value.strip()

    @staticmethod
    def _optional_path(raw, action_type: ActionType, index: int) -> Optional[str]:
        value = raw.get("path")
        if value is None:
            return None
        if not isinstance(value, str):
            raise InvalidActionError(
                f"'path' must be a string, got {type(value).__name__}",
                action_type=action_type.value,
                index=index,
            )
        _reject_nul(value, "path", action_type, index)
        value = value.strip()
        return value or None


def decode(document: Union[str, ExtractedDocument]) -> List[Action]:
    return ActionDecoder().decode(document)
