"""Synchronization layer: tracker, propagator, extractor and session wiring."""

from .extractor import ChunkExtractor
from .panel import AdapterCreatedListener, AdapterFactory, PanelManager
from .propagator import ApplyReport, ChangePropagator
from .session import FailureListener, SyncSession
from .tracker import ActiveSurfaceTracker

__all__ = [
    "ActiveSurfaceTracker",
    "AdapterCreatedListener",
    "AdapterFactory",
    "ApplyReport",
    "ChangePropagator",
    "ChunkExtractor",
    "FailureListener",
    "PanelManager",
    "SyncSession",
]
