"""Core value types shared by the editor, outline and locking layers."""

from .ranges import TextRange

__all__ = ["TextRange"]
