from .session import (
    GENERIC_ERROR_MESSAGE,
    UPGRADE_REQUIRED_MESSAGE,
    EditorBackend,
    EditorSession,
    EditorState,
    EditorStateError,
    PageServiceBackend,
)

__all__ = [
    "GENERIC_ERROR_MESSAGE",
    "UPGRADE_REQUIRED_MESSAGE",
    "EditorBackend",
    "EditorSession",
    "EditorState",
    "EditorStateError",
    "PageServiceBackend",
]
