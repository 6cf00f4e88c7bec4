# codecollab/core/errors.py
"""
Error taxonomy for the action protocol.

Two families:
- ActionError: scoped to one action. The batch keeps going.
- TurnError: scoped to one prompt. The turn is aborted, the session survives.
"""

from typing import Optional


class CollabError(Exception):
    """Base class for all codecollab errors."""


# ----------------------------------------------------------------------
# Per-action errors
# ----------------------------------------------------------------------
class ActionError(CollabError):
    """An error that only affects a single action in a batch."""

    def __init__(self, message: str, action_type: Optional[str] = None, index: Optional[int] = None):
        super().__init__(message)
        self.action_type = action_type
        self.index = index


class UnknownActionType(ActionError):
    """The action's `type` is not one of the known kinds."""


class InvalidActionError(ActionError):
    """A known action kind with missing or malformed fields."""


class MissingContextError(ActionError):
    """A file action without `path` and no preceding folder in the batch."""


class PathEscapeError(ActionError):
    """The resolved path falls outside the workspace root."""


class TargetNotFoundError(ActionError):
    """EditFile targeted a file that does not exist."""


# ----------------------------------------------------------------------
# Per-turn errors
# ----------------------------------------------------------------------
class TurnError(CollabError):
    """An error that aborts the current prompt."""


class ExtractionError(TurnError):
    """No JSON/XML payload could be found in the assistant reply."""

    def __init__(self, message: str, raw_text: str = ""):
        super().__init__(message)
        self.raw_text = raw_text


class DecodeError(TurnError):
    """The extracted payload does not match the action document schema."""


class BackendError(TurnError):
    """A remote assistant call failed (network, auth, bad response)."""


class RunFailed(TurnError):
    """The remote run finished with a failure status."""

    def __init__(self, message: str, run_id: Optional[str] = None, status: Optional[str] = None):
        super().__init__(message)
        self.run_id = run_id
        self.status = status


class RunTimedOut(TurnError):
    """Polling exceeded the configured attempt count or wall-clock budget."""

    def __init__(self, message: str, run_id: Optional[str] = None):
        super().__init__(message)
        self.run_id = run_id


class RunCancelled(TurnError):
    """The poll loop was cancelled before the run finished."""

    def __init__(self, message: str, run_id: Optional[str] = None):
        super().__init__(message)
        self.run_id = run_id


class SessionBusyError(TurnError):
    """A prompt arrived while another run is still outstanding."""


class ConfigError(CollabError):
    """Missing or invalid configuration (e.g. no API key)."""
