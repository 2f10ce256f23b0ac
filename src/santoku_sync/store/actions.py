"""Canonical actions submitted to the document-state store."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

from ..core.positions import CanonicalRange, CanonicalSelection, SourceRef

__all__ = [
    "Action",
    "ChunkCreationRequest",
    "SetSelections",
    "Edit",
    "UploadFileContents",
    "CreateSnippet",
    "set_selections",
    "edit",
    "upload_file_contents",
    "create_snippet",
]


@dataclass(slots=True, frozen=True)
class ChunkCreationRequest:
    """Location and text of a chunk the store should start tracking."""

    path: str
    line: int
    text: str

    def __post_init__(self) -> None:
        if int(self.line) < 1:
            raise ValueError(f"Chunk anchor lines are one-based, got {self.line}")
        object.__setattr__(self, "line", int(self.line))

    def to_dict(self) -> dict[str, Any]:
        return {"location": {"path": self.path, "line": self.line}, "text": self.text}


@dataclass(slots=True, frozen=True)
class SetSelections:
    type: ClassVar[str] = "set_selections"

    selections: tuple[CanonicalSelection, ...] = ()

    def payload(self) -> dict[str, Any]:
        return {"selections": [selection.to_dict() for selection in self.selections]}

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "payload": self.payload()}


@dataclass(slots=True, frozen=True)
class Edit:
    type: ClassVar[str] = "edit"

    path: str
    range: CanonicalRange
    text: str
    relative_to: SourceRef = field(default_factory=SourceRef)

    def payload(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "range": self.range.to_dict(),
            "text": self.text,
            "relative_to": self.relative_to.to_dict(),
        }

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "payload": self.payload()}


@dataclass(slots=True, frozen=True)
class UploadFileContents:
    type: ClassVar[str] = "upload_file_contents"

    path: str
    text: str

    def payload(self) -> dict[str, Any]:
        return {"path": self.path, "text": self.text}

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "payload": self.payload()}


@dataclass(slots=True, frozen=True)
class CreateSnippet:
    type: ClassVar[str] = "create_snippet"

    index: int
    chunks: tuple[ChunkCreationRequest, ...] = ()

    def payload(self) -> dict[str, Any]:
        return {"index": self.index, "chunks": [chunk.to_dict() for chunk in self.chunks]}

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "payload": self.payload()}


Action = Union[SetSelections, Edit, UploadFileContents, CreateSnippet]


def set_selections(*selections: CanonicalSelection) -> SetSelections:
    return SetSelections(tuple(selections))


def edit(path: str, edit_range: CanonicalRange, text: str) -> Edit:
    """Build an edit expressed in the whole-document frame."""

    return Edit(path=path, range=edit_range, text=text, relative_to=SourceRef())


def upload_file_contents(path: str, text: str) -> UploadFileContents:
    return UploadFileContents(path=path, text=text)


def create_snippet(index: int, *chunks: ChunkCreationRequest) -> CreateSnippet:
    return CreateSnippet(index=int(index), chunks=tuple(chunks))
