# codecollab/core/feedback.py
"""
UI feedback channel.

A one-way sink: the core emits events and never waits for the UI.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class FeedbackType(Enum):
    RESPONSE = "response"   # terminal: the turn finished
    ERROR = "error"         # terminal: the turn was aborted
    SUMMARY = "summary"     # assistant's summary action
    ACTION = "action"       # one per applied/skipped action


@dataclass
class FeedbackEvent:
    type: FeedbackType
    content: str
    path: Optional[str] = None
    ok: bool = True
    detail: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.type in (FeedbackType.RESPONSE, FeedbackType.ERROR)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"type": self.type.value, "content": self.content}
        if self.path is not None:
            result["path"] = self.path
        if not self.ok:
            result["ok"] = False
        if self.detail is not None:
            result["detail"] = self.detail
        return result


class FeedbackChannel:
    """Base sink. Subclasses override `emit`."""

    def emit(self, event: FeedbackEvent) -> None:
        raise NotImplementedError

    # Convenience helpers
    def response(self, content: str) -> None:
        self.emit(FeedbackEvent(FeedbackType.RESPONSE, content))

    def error(self, content: str, detail: Optional[str] = None) -> None:
        self.emit(FeedbackEvent(FeedbackType.ERROR, content, ok=False, detail=detail))

    def summary(self, content: str) -> None:
        self.emit(FeedbackEvent(FeedbackType.SUMMARY, content))

    def action(self, content: str, path: Optional[str] = None, ok: bool = True) -> None:
        self.emit(FeedbackEvent(FeedbackType.ACTION, content, path=path, ok=ok))


class CallbackFeedbackChannel(FeedbackChannel):
    """Forwards every event to a callable (e.g. the terminal renderer)."""

    def __init__(self, callback: Callable[[FeedbackEvent], None]):
        self.callback = callback

    def emit(self, event: FeedbackEvent) -> None:
        try:
            self.callback(event)
        except Exception as e:
            # The UI must never break the action pipeline.
            logger.warning(f"Feedback callback failed for {event.type.value}: {e}")


class CollectingFeedbackChannel(FeedbackChannel):
    """Keeps events in memory."""

    def __init__(self):
        self.events: List[FeedbackEvent] = []

    def emit(self, event: FeedbackEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: FeedbackType) -> List[FeedbackEvent]:
        return [e for e in self.events if e.type is event_type]

    def clear(self) -> None:
        self.events.clear()


class NullFeedbackChannel(FeedbackChannel):
    def emit(self, event: FeedbackEvent) -> None:
        logger.debug(f"feedback dropped: {event.type.value}")
