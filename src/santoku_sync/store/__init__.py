"""Boundary with the external document-state store."""

from .actions import (
    Action,
    ChunkCreationRequest,
    CreateSnippet,
    Edit,
    SetSelections,
    UploadFileContents,
    create_snippet,
    edit,
    set_selections,
    upload_file_contents,
)
from .adapter import SantokuAdapter, StoreAdapter
from .connector import Message, SantokuConnector
from .state import Chunk, ChunkVersion, StoreState, changed_paths

__all__ = [
    "Action",
    "Chunk",
    "ChunkCreationRequest",
    "ChunkVersion",
    "CreateSnippet",
    "Edit",
    "Message",
    "SantokuAdapter",
    "SantokuConnector",
    "SetSelections",
    "StoreAdapter",
    "StoreState",
    "UploadFileContents",
    "changed_paths",
    "create_snippet",
    "edit",
    "set_selections",
    "upload_file_contents",
]
