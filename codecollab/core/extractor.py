# codecollab/core/extractor.py
"""
Response extraction.

Pulls a single machine-readable payload out of a free-form assistant
reply. Each supported wire shape is a DocumentFormat; the extractor
asks them in order and the first one that finds a candidate wins:

  1. PlainJsonFormat: the whole reply is a JSON object
  2. FencedJsonFormat: the first ```json fenced block
  3. XmlFormat: a <response>...</response> element

Validation of the payload is the decoder's job, not ours.
"""

from __future__ import annotations

import json
import logging
import re
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from codecollab.core.errors import DecodeError, ExtractionError

logger = logging.getLogger(__name__)


class DocumentFormat(ABC):
    """One wire shape an assistant may answer in."""

    name: str = "abstract"

    @abstractmethod
    def find(self, text: str) -> Optional[str]:
        """Return the candidate document inside `text`, or None."""

    @abstractmethod
    def parse(self, document: str) -> List[Dict[str, Any]]:
        """
        Parse a candidate document into a list of raw action mappings.
        Raises DecodeError when the document is not well-formed.
        """

    def __repr__(self) -> str:
        return f"<{type(self).__name__}>"


def _actions_from_json(document: str) -> List[Dict[str, Any]]:
    try:
        data = json.loads(document)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Invalid JSON payload: {e}") from e

    # A bare list of actions is accepted as shorthand for {"actions": [...]}
    if isinstance(data, list):
        actions = data
    elif isinstance(data, dict):
        if "actions" not in data:
            raise DecodeError("JSON payload has no 'actions' field")
        actions = data["actions"]
    else:
        raise DecodeError(f"JSON payload must be an object, got {type(data).__name__}")

    if not isinstance(actions, list):
        raise DecodeError("'actions' must be an array")

    for i, item in enumerate(actions):
        if not isinstance(item, dict):
            raise DecodeError(f"actions[{i}] must be an object")
    return actions


class PlainJsonFormat(DocumentFormat):
    """Fast path: the reply is nothing but a JSON object."""

    name = "json"

    def find(self, text: str) -> Optional[str]:
        stripped = text.strip()
        if stripped.startswith("{") and stripped.endswith("}"):
            return text
        return None

    def parse(self, document: str) -> List[Dict[str, Any]]:
        return _actions_from_json(document)


class FencedJsonFormat(DocumentFormat):
    """JSON inside a ```json fenced block, surrounded by prose."""

    name = "fenced-json"

    _FENCE_RE = re.compile(r"```jsonc?\b(.*?)```", re.DOTALL | re.IGNORECASE)

    def find(self, text: str) -> Optional[str]:
        match = self._FENCE_RE.search(text)
        if match and match.group(1).strip():
            return match.group(1).strip()
        return None

    def parse(self, document: str) -> List[Dict[str, Any]]:
        return _actions_from_json(document)


class XmlFormat(DocumentFormat):
    """
    <response>
      <action type="createFile" path="/src">
        <fileName>index.js</fileName>
        <content><![CDATA[console.log(1)]]></content>
      </action>
    </response>

    Fields may be given as attributes or as child elements.
    """

    name = "xml"

    _RESPONSE_RE = re.compile(r"<response\b.*?</response\s*>", re.DOTALL)

    def find(self, text: str) -> Optional[str]:
        match = self._RESPONSE_RE.search(text)
        if match:
            return match.group(0)
        return None

    def parse(self, document: str) -> List[Dict[str, Any]]:
        try:
            root = ET.fromstring(document)
        except ET.ParseError as e:
            raise DecodeError(f"Invalid XML payload: {e}") from e

        if root.tag != "response":
            raise DecodeError(f"XML root must be <response>, got <{root.tag}>")

        actions: List[Dict[str, Any]] = []
        for elem in root:
            if elem.tag != "action":
                logger.debug(f"Ignoring <{elem.tag}> inside <response>")
                continue
            item: Dict[str, Any] = dict(elem.attrib)
            children = list(elem)
            for child in children:
                item[child.tag] = child.text or ""
            # <action type="summary">All done</action>
            if not children and "content" not in item and elem.text and elem.text.strip():
                item["content"] = elem.text.strip()
            actions.append(item)
        return actions


DEFAULT_FORMATS: Sequence[DocumentFormat] = (
    PlainJsonFormat(),
    FencedJsonFormat(),
    XmlFormat(),
)


@dataclass
class ExtractedDocument:
    """A candidate payload and the format that found it."""
    text: str
    format: DocumentFormat


class ResponseExtractor:
    """Finds the single machine-readable document in an assistant reply."""

    def __init__(self, formats: Optional[Sequence[DocumentFormat]] = None):
        self.formats = list(formats) if formats is not None else list(DEFAULT_FORMATS)

    def extract_document(self, raw_text: str) -> ExtractedDocument:
        if not raw_text or not raw_text.strip():
            raise ExtractionError("Assistant reply is empty", raw_text=raw_text or "")

        for fmt in self.formats:
            candidate = fmt.find(raw_text)
            if candidate is not None:
                logger.debug(f"Extracted {fmt.name} document ({len(candidate)} chars)")
                return ExtractedDocument(text=candidate, format=fmt)

        raise ExtractionError(
            "No JSON found in the response or failed to extract JSON.",
            raw_text=raw_text,
        )

    def extract(self, raw_text: str) -> str:
        """Return the candidate document text; raises ExtractionError if none."""
        return self.extract_document(raw_text).text


def extract(raw_text: str) -> str:
    """Module-level convenience using the default formats."""
    return ResponseExtractor().extract(raw_text)
