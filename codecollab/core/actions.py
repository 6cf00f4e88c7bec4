# codecollab/core/actions.py
"""
Typed action records decoded from an assistant reply.

Wire names are camelCase (`createFolder`, `fileName`); the Python side
uses snake_case. `normalize_action_type` accepts the usual spellings an
assistant produces for the same kind.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Union


class ActionType(Enum):
    CREATE_FOLDER = "createFolder"
    CREATE_FILE = "createFile"
    EDIT_FILE = "editFile"
    SUMMARY = "summary"


# Extra spellings seen in replies, keyed by the cleaned form.
_TYPE_ALIASES = {
    "makefolder": ActionType.CREATE_FOLDER,
    "createdirectory": ActionType.CREATE_FOLDER,
    "createdir": ActionType.CREATE_FOLDER,
    "mkdir": ActionType.CREATE_FOLDER,
    "makefile": ActionType.CREATE_FILE,
    "writefile": ActionType.CREATE_FILE,
    "updatefile": ActionType.EDIT_FILE,
    "modifyfile": ActionType.EDIT_FILE,
    "overwritefile": ActionType.EDIT_FILE,
}


def normalize_action_type(raw_type: Any) -> Optional[ActionType]:
    """
    Normalizes various string formats to a canonical ActionType.
    e.g. "createFile", "CreateFile", "create_file", "create file" -> CREATE_FILE
    """
    if not isinstance(raw_type, str):
        return None

    cleaned = raw_type.replace("-", "").replace("_", "").replace(" ", "").lower()
    if not cleaned:
        return None

    for at in ActionType:
        if cleaned == at.value.lower():
            return at

    return _TYPE_ALIASES.get(cleaned)


@dataclass(frozen=True)
class CreateFolder:
    folder_name: str
    path: Optional[str] = None
    index: int = 0

    kind: ClassVar[ActionType] = ActionType.CREATE_FOLDER

    @property
    def name(self) -> str:
        return self.folder_name


@dataclass(frozen=True)
class CreateFile:
    file_name: str
    content: str = ""
    path: Optional[str] = None
    index: int = 0

    kind: ClassVar[ActionType] = ActionType.CREATE_FILE

    @property
    def name(self) -> str:
        return self.file_name


@dataclass(frozen=True)
class EditFile:
    file_name: str
    content: str = ""
    path: Optional[str] = None
    index: int = 0

    kind: ClassVar[ActionType] = ActionType.EDIT_FILE

    @property
    def name(self) -> str:
        return self.file_name


@dataclass(frozen=True)
class Summary:
    content: str
    index: int = 0

    kind: ClassVar[ActionType] = ActionType.SUMMARY

    @property
    def name(self) -> str:
        return "summary"


Action = Union[CreateFolder, CreateFile, EditFile, Summary]

# Actions that need a filesystem path.
PATH_ACTIONS = (CreateFolder, CreateFile, EditFile)


def action_to_dict(action: Action) -> Dict[str, Any]:
    """Render an action back into its wire (camelCase) form."""
    data: Dict[str, Any] = {"type": action.kind.value}
    if isinstance(action, CreateFolder):
        data["folderName"] = action.folder_name
    elif isinstance(action, (CreateFile, EditFile)):
        data["fileName"] = action.file_name
        data["content"] = action.content
    else:
        data["content"] = action.content
    if getattr(action, "path", None) is not None:
        data["path"] = action.path
    return data
