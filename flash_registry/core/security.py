"""API key check for admin routes"""

import logging
from typing import Optional

from fastapi import Header, HTTPException

from flash_registry.core.config import settings

logger = logging.getLogger(__name__)


async def require_api_key(x_api_key: Optional[str] = Header(None)):
    """Dependency requiring a valid X-API-Key header"""
    if not x_api_key:
        logger.warning("Admin request missing API key")
        raise HTTPException(status_code=401, detail="API key is missing")

    if x_api_key != settings.ADMIN_API_KEY:
        logger.warning(f"Invalid API key attempted: {x_api_key[:5]}...")
        raise HTTPException(status_code=401, detail="Invalid API key")
