"""Editor package containing the document model, protection overlay and Qt widgets."""

from importlib import import_module
from typing import Any

from . import document_model, protection

__all__ = ["document_model", "protection"]


def __getattr__(name: str) -> Any:
	if name in {"protected_edit", "window"}:
		module = import_module(f"{__name__}.{name}")
		globals()[name] = module
		return module
	raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
