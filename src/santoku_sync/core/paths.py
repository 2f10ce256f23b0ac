"""Map host file identifiers onto canonical, workspace-relative store paths."""

from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass
from typing import Final
from urllib.parse import unquote, urlparse

__all__ = ["PathResolver", "normalize_local_path"]

WINDOWS_ABSOLUTE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^/?[a-zA-Z]:[\\/]")


def normalize_local_path(candidate: str) -> str | None:
    """Return ``candidate`` as a normalized POSIX path, or ``None`` for non-local URIs."""

    value = candidate.strip()
    if not value:
        return None
    if not WINDOWS_ABSOLUTE_PATTERN.match(value):
        parsed = urlparse(value)
        if parsed.scheme == "file":
            if parsed.netloc not in ("", "localhost"):
                return None
            value = unquote(parsed.path)
        elif parsed.scheme:
            return None
    value = value.replace("\\", "/")
    if WINDOWS_ABSOLUTE_PATTERN.match(value):
        value = value.lstrip("/")
        drive, rest = value[0].lower(), value[2:]
        value = f"{drive}:{rest}"
    if not (value.startswith("/") or WINDOWS_ABSOLUTE_PATTERN.match(value)):
        return None
    return posixpath.normpath(value)


@dataclass(slots=True, frozen=True)
class PathResolver:
    """Resolve absolute host paths against an optional workspace root.

    Resolution never touches the filesystem. ``resolve`` returns ``None`` when
    no root is configured, when the root is not a local filesystem location,
    or when the path sits outside the root.
    """

    root: str | None = None

    @property
    def normalized_root(self) -> str | None:
        if self.root is None:
            return None
        return normalize_local_path(str(self.root))

    @property
    def is_configured(self) -> bool:
        return self.normalized_root is not None

    def resolve(self, host_path: str) -> str | None:
        root = self.normalized_root
        if root is None or not host_path:
            return None
        absolute = normalize_local_path(str(host_path))
        if absolute is None:
            return None
        prefix = root if root.endswith("/") else f"{root}/"
        if not absolute.startswith(prefix):
            return None
        relative = absolute[len(prefix):]
        return relative or None
