"""
Service layer: editor session driven by host messages.
"""
from .editor_session import EditorSession

__all__ = ["EditorSession"]
