"""Coordinate transforms between the host, canonical and chunk-relative frames.

Two independent transforms compose here:

* the *frame shift* renumbers lines between the host's zero-based frame and
  the store's one-based canonical frame (characters already agree), and
* *chunk anchoring* moves one-based lines between a chunk-relative frame and
  the whole-document frame using the chunk's anchor line ``A``:
  ``absolute = relative + A - 1``.

Outbound data is frame-shifted only and is always tagged ``reference``.
Inbound chunk-version data is de-anchored first and then frame-shifted.
"""

from __future__ import annotations

import logging
from typing import Iterable, Protocol, Sequence

from .positions import (
    CanonicalPosition,
    CanonicalRange,
    CanonicalSelection,
    HostPosition,
    HostRange,
    HostSelection,
    SourceRef,
)

__all__ = [
    "ChunkLookup",
    "host_to_canonical",
    "canonical_to_host",
    "host_range_to_canonical",
    "canonical_range_to_host",
    "host_selection_to_canonical",
    "to_absolute",
    "to_relative",
    "resolve_anchor_line",
    "canonical_selection_to_host",
    "canonical_selections_to_host",
]

_LOGGER = logging.getLogger(__name__)


class ChunkLookup(Protocol):
    """Indexed chunk tables able to resolve a chunk-version's anchor line."""

    def chunk_anchor_line(self, chunk_version_id: str) -> int | None:
        ...


# ----------------------------------------------------------------------
# Frame shift
# ----------------------------------------------------------------------
def host_to_canonical(position: HostPosition) -> CanonicalPosition:
    return CanonicalPosition(position.line + 1, position.character)


def canonical_to_host(position: CanonicalPosition) -> HostPosition:
    return HostPosition(position.line - 1, position.character)


def host_range_to_canonical(host_range: HostRange) -> CanonicalRange:
    return CanonicalRange(host_to_canonical(host_range.start), host_to_canonical(host_range.end))


def canonical_range_to_host(canonical_range: CanonicalRange) -> HostRange:
    return HostRange(canonical_to_host(canonical_range.start), canonical_to_host(canonical_range.end))


def host_selection_to_canonical(selection: HostSelection, path: str) -> CanonicalSelection:
    """Shift a locally made selection into the canonical whole-document frame."""

    return CanonicalSelection(
        anchor=host_to_canonical(selection.anchor),
        active=host_to_canonical(selection.active),
        path=path,
        relative_to=SourceRef(),
    )


# ----------------------------------------------------------------------
# Chunk anchoring
# ----------------------------------------------------------------------
def to_absolute(anchor_line: int, position: CanonicalPosition) -> CanonicalPosition:
    """Convert a chunk-relative position into the whole-document frame."""

    _check_anchor(anchor_line)
    return CanonicalPosition(position.line + anchor_line - 1, position.character)


def to_relative(anchor_line: int, position: CanonicalPosition) -> CanonicalPosition:
    """Convert a whole-document position into the frame of a chunk anchored at ``anchor_line``.

    Raises ``ValueError`` when the position sits above the chunk.
    """

    _check_anchor(anchor_line)
    return CanonicalPosition(position.line - anchor_line + 1, position.character)


def _check_anchor(anchor_line: int) -> None:
    if anchor_line < 1:
        raise ValueError(f"Chunk anchor lines are one-based, got {anchor_line}")


def resolve_anchor_line(lookup: ChunkLookup, relative_to: SourceRef) -> int | None:
    """Return the anchor line used to de-anchor ``relative_to``.

    Reference selections are already whole-document, so their anchor is 1.
    ``None`` means the chunk version or its chunk is unknown.
    """

    if relative_to.is_reference:
        return 1
    if relative_to.chunk_version_id is None:
        return None
    return lookup.chunk_anchor_line(relative_to.chunk_version_id)


def canonical_selection_to_host(
    lookup: ChunkLookup, selection: CanonicalSelection
) -> HostSelection | None:
    """Map a store selection onto host coordinates, or ``None`` if it cannot be placed."""

    anchor_line = resolve_anchor_line(lookup, selection.relative_to)
    if anchor_line is None:
        _LOGGER.debug(
            "Dropping selection on %s: unresolved chunk version %s",
            selection.path,
            selection.relative_to.chunk_version_id,
        )
        return None
    return HostSelection(
        anchor=canonical_to_host(to_absolute(anchor_line, selection.anchor)),
        active=canonical_to_host(to_absolute(anchor_line, selection.active)),
    )


def canonical_selections_to_host(
    lookup: ChunkLookup, selections: Iterable[CanonicalSelection]
) -> Sequence[HostSelection]:
    """Map many selections, omitting the ones whose chunk reference is unresolvable."""

    mapped: list[HostSelection] = []
    for selection in selections:
        host = canonical_selection_to_host(lookup, selection)
        if host is not None:
            mapped.append(host)
    return tuple(mapped)
