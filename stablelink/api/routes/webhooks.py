"""
Webhook subscription routes.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

import structlog

from stablelink.api.dependencies import get_database, get_organization_id
from stablelink.api.schemas.webhooks import (
    WebhookCreateRequest,
    WebhookListResponse,
    WebhookResponse,
)
from stablelink.core.exceptions import ValidationError
from stablelink.models.webhook import Webhook


logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=WebhookResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register Webhook"
)
async def create_webhook(
    request: WebhookCreateRequest,
    organization_id: str = Depends(get_organization_id),
    db: AsyncSession = Depends(get_database)
):
    """Subscribe a URL to event labels such as ``invoice.paid``."""
    if not request.url or not request.subscribed_events:
        raise ValidationError("url and subscribed_events required")

    webhook = Webhook(
        organization_id=organization_id,
        url=request.url,
        subscribed_events=list(request.subscribed_events),
    )
    db.add(webhook)
    await db.flush()
    await db.refresh(webhook)

    logger.info(
        "Webhook registered",
        webhook_id=webhook.id,
        organization_id=organization_id,
        events=webhook.subscribed_events
    )
    return WebhookResponse.model_validate(webhook)


@router.get("", response_model=WebhookListResponse, summary="List Webhooks")
async def list_webhooks(
    organization_id: str = Depends(get_organization_id),
    db: AsyncSession = Depends(get_database)
):
    result = await db.execute(
        select(Webhook).where(Webhook.organization_id == organization_id)
    )
    return WebhookListResponse(
        webhooks=[WebhookResponse.model_validate(w) for w in result.scalars().all()]
    )
