# codecollab/core/prompt.py
from __future__ import annotations

import json
import textwrap
from dataclasses import dataclass
from typing import Optional

from codecollab.core.file_tree import FileTree

ASSISTANT_DESCRIPTION = (
    "An assistant specialized in software development, providing code insights, "
    "creating and managing project files, and writing working code."
)

ASSISTANT_INSTRUCTIONS = textwrap.dedent(
    """
    You provide JSON output that suggests folders and files containing professional,
    working code in the requested programming language for the requested task.
    You may output several files in one folder (for example a component and the
    .css file it imports).

    Your reply must be a single JSON object with this structure:
    {"actions":[
        {"type": "createFolder", "folderName": "NewFolder", "path": "/"},
        {"type": "createFolder", "folderName": "NewFolder2", "path": "/NewFolder"},
        {"type": "createFile", "fileName": "NewFile.txt", "content": "code goes here", "path": "/NewFolder/NewFolder2"},
        {"type": "editFile", "fileName": "ExistingFile.txt", "content": "Full updated content of the file.", "path": "/pathToFolder"},
        {"type": "summary", "content": "Summary of the folders and files managed and the code provided."}
    ]}

    Rules:
    - Paths are relative to the workspace root; never use "..".
    - createFile and editFile carry the complete file content; editFile replaces the file.
    - A createFile without "path" goes into the folder created just before it.
    - Put any general message or feedback in the "summary" action.
    - Use modern syntax, current project layouts, and secure defaults.
    - Start each file with a comment describing it, including its function names.
    """
).strip()


@dataclass
class PromptRequest:
    """One user prompt, optionally aimed at an existing workspace file."""
    text: str
    file_path: Optional[str] = None


def build_prompt(
    request: PromptRequest,
    tree: Optional[FileTree] = None,
    file_content: Optional[str] = None,
) -> str:
    """Assemble the outgoing message: prompt text, tree snapshot, target file."""
    parts = [request.text.strip()]

    if tree is not None:
        parts.append(
            "Here is the current file structure:\n"
            + json.dumps(tree.to_dict(), separators=(",", ":"))
        )

    if request.file_path and file_content is not None:
        parts.append(f"Please edit {request.file_path} - here is the content:\n{file_content}")

    return "\n\n".join(parts)
