"""Tag-driven locking of outline subtrees."""

from .mode import LockMode, ModeState
from .synchronizer import LockResult, LockStatus, LockSynchronizer

__all__ = ["LockMode", "ModeState", "LockResult", "LockStatus", "LockSynchronizer"]
