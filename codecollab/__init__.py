"""
codecollab — terminal collaborator that chats with a remote assistant
and applies its file/folder actions inside the current workspace.
"""

__version__ = "0.3.0"
