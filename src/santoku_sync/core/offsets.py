"""Conversions between absolute character offsets and host line/character positions."""

from __future__ import annotations

from bisect import bisect_right
from typing import Sequence

from .positions import HostPosition, HostRange

__all__ = [
    "line_start_offsets",
    "position_at",
    "offset_of",
    "apply_host_edit",
    "full_line_text",
]


def line_start_offsets(text: str) -> tuple[int, ...]:
    """Return the offset at which each line of ``text`` begins.

    Only ``"\\n"`` separates lines, matching how editors number lines for
    ``"\\r\\n"`` documents once the carriage return is treated as content.
    """

    offsets = [0]
    cursor = text.find("\n")
    while cursor != -1:
        offsets.append(cursor + 1)
        cursor = text.find("\n", cursor + 1)
    return tuple(offsets)


def position_at(text: str, offset: int, *, offsets: Sequence[int] | None = None) -> HostPosition:
    """Return the host position of ``offset`` clamped into ``text``."""

    offset = max(0, min(int(offset), len(text)))
    starts = offsets if offsets is not None else line_start_offsets(text)
    line = bisect_right(starts, offset) - 1
    return HostPosition(line, offset - starts[line])


def offset_of(text: str, position: HostPosition, *, offsets: Sequence[int] | None = None) -> int:
    """Return the absolute offset of ``position``.

    Lines past the end clamp to the end of the text and characters past the
    end of a line clamp to the line end.
    """

    starts = offsets if offsets is not None else line_start_offsets(text)
    if position.line >= len(starts):
        return len(text)
    line_start = starts[position.line]
    if position.line + 1 < len(starts):
        line_end = starts[position.line + 1] - 1
    else:
        line_end = len(text)
    return min(line_start + position.character, line_end)


def apply_host_edit(text: str, edit_range: HostRange, replacement: str) -> str:
    """Return ``text`` with ``edit_range`` replaced by ``replacement``."""

    starts = line_start_offsets(text)
    start = offset_of(text, edit_range.start, offsets=starts)
    end = offset_of(text, edit_range.end, offsets=starts)
    return text[:start] + replacement + text[end:]


def full_line_text(text: str, start_line: int, end_line: int) -> str:
    """Return lines ``start_line``..``end_line`` (zero-based, inclusive) without the final newline."""

    lines = text.split("\n")
    if start_line < 0 or start_line >= len(lines):
        return ""
    end_line = max(start_line, min(end_line, len(lines) - 1))
    return "\n".join(lines[start_line : end_line + 1])
