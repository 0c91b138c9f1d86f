"""
Withdrawal history routes.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stablelink.api.dependencies import get_database, get_organization_id
from stablelink.api.schemas.webhooks import WithdrawalListResponse, WithdrawalResponse
from stablelink.core.exceptions import ValidationError
from stablelink.models.withdrawal import Withdrawal


router = APIRouter()


@router.get("", response_model=WithdrawalListResponse, summary="List Withdrawals")
async def list_withdrawals(
    wallet: Optional[str] = Query(None, description="Receiving wallet address"),
    organization_id: str = Depends(get_organization_id),
    db: AsyncSession = Depends(get_database)
):
    """Withdrawals to ``wallet``, newest first. Addresses match case-insensitively."""
    wallet = (wallet or "").strip()
    if not wallet:
        raise ValidationError("Query parameter 'wallet' (address) is required")

    result = await db.execute(
        select(Withdrawal)
        .where(Withdrawal.wallet == wallet.lower())
        .order_by(Withdrawal.created_at.desc())
    )
    return WithdrawalListResponse(
        withdrawals=[WithdrawalResponse.model_validate(w) for w in result.scalars().all()]
    )
