"""Immutable snapshot of the document-state store."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from ..core.positions import CanonicalSelection
from ..errors import InvalidStatePayloadError

__all__ = ["Chunk", "ChunkVersion", "StoreState", "changed_paths"]

_LOGGER = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class Chunk:
    """A line-anchored sub-region of a file. ``line`` never moves after creation."""

    id: str
    path: str
    line: int
    versions: tuple[str, ...] = ()

    @classmethod
    def from_payload(cls, chunk_id: str, payload: Mapping[str, Any]) -> "Chunk":
        location = payload.get("location")
        source = location if isinstance(location, Mapping) else payload
        path = source.get("path")
        line = int(source.get("line"))
        if not isinstance(path, str) or line < 1:
            raise ValueError(f"Chunk {chunk_id} has an invalid location")
        versions = payload.get("versions") or ()
        return cls(id=chunk_id, path=path, line=line, versions=tuple(str(v) for v in versions))


@dataclass(slots=True, frozen=True)
class ChunkVersion:
    """Immutable snapshot of one chunk's text. Owned by exactly one chunk."""

    id: str
    chunk: str
    text: str = ""

    @classmethod
    def from_payload(cls, version_id: str, payload: Mapping[str, Any]) -> "ChunkVersion":
        chunk_id = payload.get("chunk")
        if chunk_id is None:
            raise ValueError(f"Chunk version {version_id} has no owning chunk")
        return cls(id=version_id, chunk=str(chunk_id), text=str(payload.get("text") or ""))


def _frozen(mapping: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping))


@dataclass(slots=True, frozen=True)
class StoreState:
    """One atomically observed store snapshot.

    Chunks and chunk versions are indexed by id. Lookups return ``None``
    instead of raising so stale references can be skipped.
    """

    selections: tuple[CanonicalSelection, ...] = ()
    chunks: Mapping[str, Chunk] = field(default_factory=dict)
    chunk_versions: Mapping[str, ChunkVersion] = field(default_factory=dict)
    texts: Mapping[str, str] = field(default_factory=dict)
    active_paths: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(self, "selections", tuple(self.selections))
        object.__setattr__(self, "chunks", _frozen(self.chunks))
        object.__setattr__(self, "chunk_versions", _frozen(self.chunk_versions))
        object.__setattr__(self, "texts", _frozen(self.texts))
        object.__setattr__(self, "active_paths", frozenset(self.active_paths))

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def chunk(self, chunk_id: str) -> Chunk | None:
        return self.chunks.get(chunk_id)

    def chunk_version(self, chunk_version_id: str) -> ChunkVersion | None:
        return self.chunk_versions.get(chunk_version_id)

    def chunk_anchor_line(self, chunk_version_id: str) -> int | None:
        """Resolve chunk version -> chunk -> anchor line."""

        version = self.chunk_version(chunk_version_id)
        if version is None:
            return None
        chunk = self.chunk(version.chunk)
        if chunk is None:
            return None
        return chunk.line

    def is_path_active(self, path: str) -> bool:
        return path in self.active_paths

    def text_for(self, path: str) -> str | None:
        """Return the reference text tracked for ``path``."""

        return self.texts.get(path)

    def selections_for(self, path: str) -> tuple[CanonicalSelection, ...]:
        return tuple(selection for selection in self.selections if selection.path == path)

    def paths(self) -> frozenset[str]:
        """Every path this snapshot says anything about."""

        paths = set(self.active_paths) | set(self.texts)
        paths.update(selection.path for selection in self.selections)
        paths.update(chunk.path for chunk in self.chunks.values())
        return frozenset(paths)

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------
    @classmethod
    def from_payload(cls, payload: Any) -> "StoreState":
        """Parse the store's JSON state. Malformed entries are dropped."""

        if isinstance(payload, StoreState):
            return payload
        if not isinstance(payload, Mapping):
            raise InvalidStatePayloadError(
                "Store state payload must be a mapping",
                details={"type": type(payload).__name__},
            )

        selections: list[CanonicalSelection] = []
        raw_selections = payload.get("selections") or ()
        if isinstance(raw_selections, Sequence) and not isinstance(raw_selections, (str, bytes)):
            for entry in raw_selections:
                if not isinstance(entry, Mapping):
                    continue
                try:
                    selections.append(CanonicalSelection.from_payload(entry))
                except (TypeError, ValueError) as exc:
                    _LOGGER.debug("Skipping malformed selection %r: %s", entry, exc)

        chunks = _parse_table(payload.get("chunks"), Chunk.from_payload, "chunk")
        versions = _parse_table(
            payload.get("chunk_versions", payload.get("chunkVersions")),
            ChunkVersion.from_payload,
            "chunk version",
        )

        texts: dict[str, str] = {}
        raw_texts = payload.get("texts")
        if isinstance(raw_texts, Mapping):
            texts = {str(path): str(text) for path, text in raw_texts.items() if text is not None}

        raw_active = payload.get("active_paths", payload.get("activePaths"))
        if raw_active is None:
            active_paths = frozenset(texts)
        else:
            active_paths = frozenset(str(path) for path in raw_active)

        return cls(
            selections=tuple(selections),
            chunks=chunks,
            chunk_versions=versions,
            texts=texts,
            active_paths=active_paths,
        )


def _parse_table(raw: Any, factory, label: str) -> dict[str, Any]:
    if not isinstance(raw, Mapping):
        return {}
    table: dict[str, Any] = {}
    for key, entry in raw.items():
        if not isinstance(entry, Mapping):
            continue
        try:
            table[str(key)] = factory(str(key), entry)
        except (TypeError, ValueError) as exc:
            _LOGGER.debug("Skipping malformed %s %s: %s", label, key, exc)
    return table


def changed_paths(previous: StoreState | None, current: StoreState) -> frozenset[str]:
    """Return the paths whose text, selections or chunks differ between snapshots."""

    if previous is None:
        return current.paths()
    if previous is current:
        return frozenset()

    changed: set[str] = set()
    for path in previous.paths() | current.paths():
        if previous.text_for(path) != current.text_for(path):
            changed.add(path)
        elif previous.is_path_active(path) != current.is_path_active(path):
            changed.add(path)
        elif previous.selections_for(path) != current.selections_for(path):
            changed.add(path)

    if previous.chunks != current.chunks or previous.chunk_versions != current.chunk_versions:
        # Chunk-relative selections move with their chunk tables.
        for selection in current.selections:
            if not selection.relative_to.is_reference:
                changed.add(selection.path)
    return frozenset(changed)
