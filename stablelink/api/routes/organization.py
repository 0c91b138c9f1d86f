"""
Organization profile route.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from stablelink.api.dependencies import get_database, get_organization_id
from stablelink.api.schemas.organization import OrganizationResponse
from stablelink.services.invoice_service import InvoiceService


router = APIRouter()


@router.get("", response_model=OrganizationResponse, summary="Get Organization")
async def get_organization(
    organization_id: str = Depends(get_organization_id),
    db: AsyncSession = Depends(get_database)
):
    """Organization of the calling API key, including its default wallet and fee."""
    organization = await InvoiceService(db).get_organization(organization_id)
    return OrganizationResponse.model_validate(organization)
