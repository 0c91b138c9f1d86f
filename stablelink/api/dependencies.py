"""
API dependencies for FastAPI endpoints.
Provides the database session and API-key authentication.
"""

from typing import AsyncGenerator, Optional

from fastapi import Depends, Request
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

import structlog

from stablelink.core.database import get_async_session
from stablelink.core.config import settings
from stablelink.core.exceptions import AuthenticationError
from stablelink.models.organization import ApiKey


logger = structlog.get_logger(__name__)


async def get_database() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    async with get_async_session() as session:
        yield session


def extract_api_key(request: Request) -> Optional[str]:
    """API key from the configured header, or from ``Authorization: Bearer``."""
    header = request.headers.get(settings.api_key_header) or request.headers.get("authorization")
    if not header:
        return None
    if header.startswith("Bearer "):
        return header[7:] or None
    return header


async def get_organization_id(
    request: Request,
    db: AsyncSession = Depends(get_database)
) -> str:
    """
    Resolve the calling organization from its API key.

    Both the test and the live key of a pair are accepted.
    """
    api_key = extract_api_key(request)
    if not api_key:
        raise AuthenticationError("Missing API key")

    result = await db.execute(
        select(ApiKey.organization_id).where(
            or_(ApiKey.live_key == api_key, ApiKey.test_key == api_key)
        )
    )
    organization_id = result.scalars().first()

    if organization_id is None:
        logger.warning("Invalid API key", path=request.url.path)
        raise AuthenticationError("Invalid API key")

    return organization_id
