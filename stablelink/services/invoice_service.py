"""
Invoice service for the public API.

Creates invoices with the correlation-id rules the indexer relies on and
serves organization-scoped reads.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Union

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stablelink.core.exceptions import (
    InvoiceNotFoundError,
    OrganizationNotFoundError,
    ValidationError,
)
from stablelink.models.invoice import Invoice, InvoiceStatus, NO_ONCHAIN_ID
from stablelink.models.organization import Organization


logger = structlog.get_logger(__name__)


def resolve_onchain_id(tx_hash: Optional[str], onchain_invoice_id: Optional[int]) -> int:
    """
    Correlation id to store for a new invoice.

    Only a deployed invoice (non-blank ``tx_hash``) keeps the caller's
    non-negative on-chain id. Everything else gets ``NO_ONCHAIN_ID`` so it
    cannot match a real contract invoice, including id 0.
    """
    is_deployed = bool(tx_hash and tx_hash.strip())
    if is_deployed and onchain_invoice_id is not None and onchain_invoice_id >= 0:
        return onchain_invoice_id
    return NO_ONCHAIN_ID


def _format_amount(amount: Union[int, float, Decimal, str]) -> str:
    if isinstance(amount, float) and amount.is_integer():
        return str(int(amount))
    return str(amount)


class InvoiceService:
    """Organization-scoped invoice operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.logger = logger.bind(service="invoice_service")

    async def create_invoice(
        self,
        organization_id: str,
        amount: Optional[Union[int, float, Decimal, str]],
        token: Optional[str],
        splits: Optional[Sequence[Any]],
        client_name: Optional[str] = None,
        client_email: Optional[str] = None,
        description: Optional[str] = None,
        due_date: Optional[datetime] = None,
        onchain_invoice_id: Optional[int] = None,
        creator_wallet: Optional[str] = None,
        tx_hash: Optional[str] = None,
    ) -> Invoice:
        """
        Create an invoice for ``organization_id``.

        The invoice is ``deployed`` when a non-blank ``tx_hash`` is given and
        ``draft`` otherwise. ``creator_wallet`` falls back to the
        organization's primary wallet.

        Raises:
            ValidationError: If amount, token or splits are missing
            OrganizationNotFoundError: If the organization does not exist
        """
        if amount is None or not token or not splits:
            raise ValidationError("amount, token, and splits required")

        organization = await self.get_organization(organization_id)

        is_deployed = bool(tx_hash and tx_hash.strip())

        invoice = Invoice(
            organization_id=organization_id,
            onchain_invoice_id=resolve_onchain_id(tx_hash, onchain_invoice_id),
            creator_wallet=creator_wallet or organization.primary_wallet,
            client_name=client_name,
            client_email=client_email,
            token=token,
            amount=_format_amount(amount),
            description=description.strip() if description else None,
            due_date=due_date,
            status=InvoiceStatus.DEPLOYED if is_deployed else InvoiceStatus.DRAFT,
            tx_hash=tx_hash.strip() if is_deployed else None,
        )
        self.db.add(invoice)
        await self.db.flush()
        await self.db.refresh(invoice)

        self.logger.info(
            "Invoice created",
            invoice_id=invoice.id,
            organization_id=organization_id,
            onchain_invoice_id=invoice.onchain_invoice_id,
            status=invoice.status.value
        )
        return invoice

    async def list_invoices(self, organization_id: str) -> List[Invoice]:
        """Invoices of an organization, newest first."""
        result = await self.db.execute(
            select(Invoice)
            .where(Invoice.organization_id == organization_id)
            .order_by(Invoice.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_invoice(self, organization_id: str, invoice_id: str) -> Invoice:
        result = await self.db.execute(
            select(Invoice).where(
                Invoice.id == invoice_id,
                Invoice.organization_id == organization_id
            )
        )
        invoice = result.scalar_one_or_none()
        if invoice is None:
            raise InvoiceNotFoundError(invoice_id)
        return invoice

    async def get_public_invoice(self, invoice_id: str) -> Invoice:
        """Look up an invoice by id alone, for payment links."""
        invoice = await self.db.get(Invoice, invoice_id)
        if invoice is None:
            raise InvoiceNotFoundError(invoice_id)
        return invoice

    async def get_organization(self, organization_id: str) -> Organization:
        organization = await self.db.get(Organization, organization_id)
        if organization is None:
            raise OrganizationNotFoundError(organization_id)
        return organization

    async def send_reminder(self, organization_id: str, invoice_id: str) -> Dict[str, Any]:
        """
        Acknowledge a payment reminder.

        No mail transport is configured; clients share the payment link.
        """
        invoice = await self.get_invoice(organization_id, invoice_id)
        if invoice.status == InvoiceStatus.PAID:
            raise ValidationError(
                "Cannot send reminder for a paid invoice",
                {"invoice_id": invoice_id}
            )

        self.logger.info("Reminder requested", invoice_id=invoice_id)
        return {"ok": True, "message": "Reminder sent"}

    async def delete_invoice(self, organization_id: str, invoice_id: str) -> None:
        invoice = await self.get_invoice(organization_id, invoice_id)
        await self.db.delete(invoice)
        await self.db.flush()
        self.logger.info("Invoice deleted", invoice_id=invoice_id)
