"""Structured helpers for positions and ranges in the host and canonical frames."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, ClassVar, Iterator, TypeVar

__all__ = [
    "Position",
    "HostPosition",
    "CanonicalPosition",
    "HostRange",
    "CanonicalRange",
    "HostSelection",
    "REFERENCE",
    "CHUNK_VERSION",
    "SourceRef",
    "CanonicalSelection",
]

TPosition = TypeVar("TPosition", bound="Position")


@dataclass(slots=True, frozen=True, order=True)
class Position:
    """Line/character pair. Subclasses fix the lowest legal line number."""

    line: int
    character: int

    MIN_LINE: ClassVar[int] = 0

    def __post_init__(self) -> None:
        line = self._coerce_index(self.line, "line")
        character = self._coerce_index(self.character, "character")
        if line < self.MIN_LINE:
            raise ValueError(
                f"{type(self).__name__} line must be >= {self.MIN_LINE}, got {line}"
            )
        if character < 0:
            raise ValueError(f"{type(self).__name__} character must be >= 0, got {character}")
        object.__setattr__(self, "line", line)
        object.__setattr__(self, "character", character)

    @classmethod
    def _coerce_index(cls, value: Any, label: str) -> int:
        if isinstance(value, bool):
            raise ValueError(f"{cls.__name__} {label} must be an integer")
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"{cls.__name__} {label} must be an integer") from exc

    def __iter__(self) -> Iterator[int]:
        yield self.line
        yield self.character

    def to_dict(self) -> dict[str, int]:
        """Return the position as a JSON-friendly mapping."""

        return {"line": self.line, "character": self.character}

    @classmethod
    def from_value(cls: type[TPosition], value: Any) -> TPosition:
        """Coerce mappings, pairs or position-like objects into ``cls``."""

        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            line = value.get("line")
            character = value.get("character")
            if line is None or character is None:
                raise ValueError(f"{cls.__name__} mappings require line and character keys")
            return cls(line, character)
        if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
            seq = list(value)
            if len(seq) != 2:
                raise ValueError(f"{cls.__name__} sequences must have exactly two entries")
            return cls(seq[0], seq[1])
        line = getattr(value, "line", None)
        character = getattr(value, "character", None)
        if line is not None and character is not None:
            return cls(line, character)
        raise TypeError(f"Unsupported {cls.__name__} input")


@dataclass(slots=True, frozen=True, order=True)
class HostPosition(Position):
    """Zero-based position used at the host editor boundary."""

    MIN_LINE: ClassVar[int] = 0


@dataclass(slots=True, frozen=True, order=True)
class CanonicalPosition(Position):
    """One-based line position used by the document-state store."""

    MIN_LINE: ClassVar[int] = 1


@dataclass(slots=True, frozen=True)
class _RangeBase:
    start: Any
    end: Any

    POSITION_TYPE: ClassVar[type[Position]] = Position

    def __post_init__(self) -> None:
        start = self.POSITION_TYPE.from_value(self.start)
        end = self.POSITION_TYPE.from_value(self.end)
        if end < start:
            start, end = end, start
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)

    @property
    def is_empty(self) -> bool:
        """Return ``True`` when the range collapses to a caret."""

        return self.start == self.end

    @property
    def line_span(self) -> tuple[int, int]:
        return (self.start.line, self.end.line)

    def to_dict(self) -> dict[str, dict[str, int]]:
        return {"start": self.start.to_dict(), "end": self.end.to_dict()}

    @classmethod
    def from_value(cls, value: Any):
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            if "start" not in value or "end" not in value:
                raise ValueError(f"{cls.__name__} mappings require start and end keys")
            return cls(value["start"], value["end"])
        if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
            seq = list(value)
            if len(seq) != 2:
                raise ValueError(f"{cls.__name__} sequences must have exactly two entries")
            return cls(seq[0], seq[1])
        start = getattr(value, "start", None)
        end = getattr(value, "end", None)
        if start is not None and end is not None:
            return cls(start, end)
        raise TypeError(f"Unsupported {cls.__name__} input")


@dataclass(slots=True, frozen=True)
class HostRange(_RangeBase):
    """Ordered pair of zero-based positions."""

    POSITION_TYPE: ClassVar[type[Position]] = HostPosition


@dataclass(slots=True, frozen=True)
class CanonicalRange(_RangeBase):
    """Ordered pair of one-based positions."""

    POSITION_TYPE: ClassVar[type[Position]] = CanonicalPosition


@dataclass(slots=True, frozen=True)
class HostSelection:
    """Selection on a host surface.

    ``anchor`` is where the selection began and ``active`` is the caret. Unlike
    a range the pair is not reordered: a backwards selection keeps its caret
    at the start.
    """

    anchor: HostPosition
    active: HostPosition

    def __post_init__(self) -> None:
        object.__setattr__(self, "anchor", HostPosition.from_value(self.anchor))
        object.__setattr__(self, "active", HostPosition.from_value(self.active))

    @property
    def start(self) -> HostPosition:
        return min(self.anchor, self.active)

    @property
    def end(self) -> HostPosition:
        return max(self.anchor, self.active)

    @property
    def is_empty(self) -> bool:
        return self.anchor == self.active

    def to_range(self) -> HostRange:
        return HostRange(self.start, self.end)

    @classmethod
    def caret(cls, line: int, character: int) -> "HostSelection":
        position = HostPosition(line, character)
        return cls(position, position)


REFERENCE = "reference"
CHUNK_VERSION = "chunk-version"
_SOURCES = (REFERENCE, CHUNK_VERSION)


@dataclass(slots=True, frozen=True)
class SourceRef:
    """Relativity tag naming the frame a canonical selection is expressed in."""

    source: str = REFERENCE
    chunk_version_id: str | None = None

    def __post_init__(self) -> None:
        if self.source not in _SOURCES:
            raise ValueError(f"Unknown selection source: {self.source!r}")
        if self.source == CHUNK_VERSION and not self.chunk_version_id:
            raise ValueError("chunk-version sources require a chunk_version_id")
        if self.source == REFERENCE and self.chunk_version_id is not None:
            object.__setattr__(self, "chunk_version_id", None)

    @property
    def is_reference(self) -> bool:
        return self.source == REFERENCE

    def to_dict(self) -> dict[str, str]:
        payload = {"source": self.source}
        if self.chunk_version_id is not None:
            payload["chunk_version_id"] = self.chunk_version_id
        return payload

    @classmethod
    def chunk_version(cls, chunk_version_id: str) -> "SourceRef":
        return cls(CHUNK_VERSION, str(chunk_version_id))

    @classmethod
    def from_value(cls, value: Any) -> "SourceRef":
        if isinstance(value, SourceRef):
            return value
        if value is None:
            return cls()
        if isinstance(value, str):
            return cls(value)
        if isinstance(value, Mapping):
            version_id = value.get("chunk_version_id", value.get("chunkVersionId"))
            return cls(
                str(value.get("source", REFERENCE)),
                str(version_id) if version_id is not None else None,
            )
        raise TypeError("Unsupported SourceRef input")


@dataclass(slots=True, frozen=True)
class CanonicalSelection:
    """Selection in the store's frame, keyed by canonical path."""

    anchor: CanonicalPosition
    active: CanonicalPosition
    path: str
    relative_to: SourceRef = SourceRef()

    def __post_init__(self) -> None:
        object.__setattr__(self, "anchor", CanonicalPosition.from_value(self.anchor))
        object.__setattr__(self, "active", CanonicalPosition.from_value(self.active))
        object.__setattr__(self, "relative_to", SourceRef.from_value(self.relative_to))

    def to_dict(self) -> dict[str, Any]:
        return {
            "anchor": self.anchor.to_dict(),
            "active": self.active.to_dict(),
            "path": self.path,
            "relative_to": self.relative_to.to_dict(),
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "CanonicalSelection":
        path = payload.get("path")
        if not isinstance(path, str) or not path:
            raise ValueError("Selection payloads require a path")
        relative_to = payload.get("relative_to", payload.get("relativeTo"))
        return cls(
            anchor=CanonicalPosition.from_value(payload.get("anchor")),
            active=CanonicalPosition.from_value(payload.get("active")),
            path=path,
            relative_to=SourceRef.from_value(relative_to),
        )
