"""Rate limiting configuration."""

from __future__ import annotations

import logging

from slowapi import Limiter
from slowapi.util import get_remote_address

from sentrydash.core.config import settings

logger = logging.getLogger(__name__)

# Per-client limits; POST /api/entry applies settings.ENTRY_RATE_LIMIT on top.
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    default_limits=["1000/hour"],
)
logger.debug(f"Rate limiter configured with storage: {settings.RATE_LIMIT_STORAGE_URI}")