"""Editor package containing host surfaces and the open-surface workspace."""

from importlib import import_module
from typing import Any

from . import surface, workspace

__all__ = ["surface", "workspace"]


def __getattr__(name: str) -> Any:
	if name == "qt_surface":
		module = import_module(f"{__name__}.{name}")
		globals()[name] = module
		return module
	raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
