"""
Invoice-related Pydantic schemas.
"""

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from stablelink.models.invoice import InvoiceStatus


class InvoiceSplit(BaseModel):
    """Share of an invoice paid out to one wallet."""
    wallet: str
    percentage: float = Field(ge=0, le=100)


class InvoiceCreateRequest(BaseModel):
    """
    Request body for creating an invoice.

    ``amount``, ``token`` and ``splits`` are checked by the service so a
    missing one answers 400 like other validation failures.
    """
    amount: Optional[Union[int, float, str]] = None
    token: Optional[str] = None
    splits: List[InvoiceSplit] = []
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    onchain_invoice_id: Optional[int] = None
    creator_wallet: Optional[str] = None
    tx_hash: Optional[str] = None


class InvoiceCreatedResponse(BaseModel):
    """Response for a newly created invoice."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    onchain_invoice_id: int
    amount: str
    token: str
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    status: InvoiceStatus
    created_at: Optional[datetime] = None


class InvoiceResponse(BaseModel):
    """Full invoice representation."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    onchain_invoice_id: int
    organization_id: str
    creator_wallet: str
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    token: str
    amount: str
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    status: InvoiceStatus
    tx_hash: Optional[str] = None
    created_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None


class InvoiceListResponse(BaseModel):
    invoices: List[InvoiceResponse]


class PublicInvoiceResponse(BaseModel):
    """Invoice fields shown on a public payment page."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    onchain_invoice_id: int
    amount: str
    token: str
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    creator_wallet: str
    status: InvoiceStatus
    description: Optional[str] = None
    due_date: Optional[datetime] = None
