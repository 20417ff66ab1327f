from .config import settings
from .errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    SentryDashError,
    StaleVersionError,
    ValidationError,
)

__all__ = [
    "settings",
    "ConflictError",
    "DependencyError",
    "NotFoundError",
    "SentryDashError",
    "StaleVersionError",
    "ValidationError",
]
