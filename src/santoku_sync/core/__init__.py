"""Core coordinate types, transforms and path resolution."""

from .paths import PathResolver
from .positions import (
    CHUNK_VERSION,
    REFERENCE,
    CanonicalPosition,
    CanonicalRange,
    CanonicalSelection,
    HostPosition,
    HostRange,
    HostSelection,
    SourceRef,
)

__all__ = [
    "CHUNK_VERSION",
    "REFERENCE",
    "CanonicalPosition",
    "CanonicalRange",
    "CanonicalSelection",
    "HostPosition",
    "HostRange",
    "HostSelection",
    "PathResolver",
    "SourceRef",
]
