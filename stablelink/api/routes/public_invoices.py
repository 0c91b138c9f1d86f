"""
Public invoice lookup for checkout and payment links.

No API key: invoice ids are random UUIDs.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from stablelink.api.dependencies import get_database
from stablelink.api.schemas.invoices import PublicInvoiceResponse
from stablelink.services.invoice_service import InvoiceService


router = APIRouter()


@router.get(
    "/invoices/{invoice_id}",
    response_model=PublicInvoiceResponse,
    summary="Get Public Invoice"
)
async def get_public_invoice(
    invoice_id: str,
    db: AsyncSession = Depends(get_database)
):
    invoice = await InvoiceService(db).get_public_invoice(invoice_id)
    return PublicInvoiceResponse.model_validate(invoice)
