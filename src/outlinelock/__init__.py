"""Tag-triggered read-only protection for outline documents."""

from .editor.document_model import DocumentMetadata, DocumentState
from .errors import (
    InvalidTagName,
    ModelAccessFailure,
    NoEnclosingHeadline,
    OutlineLockError,
    OutlineParseError,
    ProtectedRegionError,
)
from .locking import LockMode, LockResult, LockStatus, LockSynchronizer
from .outline import Headline, HeadlineOutline, OutlineModel
from .services.settings import Settings
from .session import DocumentSession

__version__ = "0.1.0"

__all__ = [
    "DocumentMetadata",
    "DocumentState",
    "DocumentSession",
    "Headline",
    "HeadlineOutline",
    "InvalidTagName",
    "LockMode",
    "LockResult",
    "LockStatus",
    "LockSynchronizer",
    "ModelAccessFailure",
    "NoEnclosingHeadline",
    "OutlineLockError",
    "OutlineModel",
    "OutlineParseError",
    "ProtectedRegionError",
    "Settings",
    "__version__",
]
