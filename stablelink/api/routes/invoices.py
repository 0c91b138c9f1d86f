"""
Invoice routes for the StableLink API.
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

import structlog

from stablelink.api.dependencies import get_database, get_organization_id
from stablelink.api.schemas.common import ReminderResponse
from stablelink.api.schemas.invoices import (
    InvoiceCreateRequest,
    InvoiceCreatedResponse,
    InvoiceListResponse,
    InvoiceResponse,
)
from stablelink.services.invoice_service import InvoiceService


logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=InvoiceCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Invoice"
)
async def create_invoice(
    request: InvoiceCreateRequest,
    organization_id: str = Depends(get_organization_id),
    db: AsyncSession = Depends(get_database)
):
    """Create an invoice. It is deployed only when a transaction hash is given."""
    invoice = await InvoiceService(db).create_invoice(
        organization_id,
        amount=request.amount,
        token=request.token,
        splits=request.splits,
        client_name=request.client_name,
        client_email=request.client_email,
        description=request.description,
        due_date=request.due_date,
        onchain_invoice_id=request.onchain_invoice_id,
        creator_wallet=request.creator_wallet,
        tx_hash=request.tx_hash,
    )
    return InvoiceCreatedResponse.model_validate(invoice)


@router.get("", response_model=InvoiceListResponse, summary="List Invoices")
async def list_invoices(
    organization_id: str = Depends(get_organization_id),
    db: AsyncSession = Depends(get_database)
):
    invoices = await InvoiceService(db).list_invoices(organization_id)
    return InvoiceListResponse(
        invoices=[InvoiceResponse.model_validate(invoice) for invoice in invoices]
    )


@router.get("/{invoice_id}", response_model=InvoiceResponse, summary="Get Invoice")
async def get_invoice(
    invoice_id: str,
    organization_id: str = Depends(get_organization_id),
    db: AsyncSession = Depends(get_database)
):
    invoice = await InvoiceService(db).get_invoice(organization_id, invoice_id)
    return InvoiceResponse.model_validate(invoice)


@router.post(
    "/{invoice_id}/send-reminder",
    response_model=ReminderResponse,
    summary="Send Payment Reminder"
)
async def send_reminder(
    invoice_id: str,
    organization_id: str = Depends(get_organization_id),
    db: AsyncSession = Depends(get_database)
):
    """Paid invoices cannot be reminded."""
    return await InvoiceService(db).send_reminder(organization_id, invoice_id)


@router.delete(
    "/{invoice_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete Invoice"
)
async def delete_invoice(
    invoice_id: str,
    organization_id: str = Depends(get_organization_id),
    db: AsyncSession = Depends(get_database)
):
    await InvoiceService(db).delete_invoice(organization_id, invoice_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
