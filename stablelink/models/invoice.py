"""
Invoice model - off-chain record of an InvoicePayments invoice.
"""

from datetime import datetime
from typing import Optional
from enum import Enum

from sqlalchemy import (
    String, BigInteger, Text, Index, DateTime, ForeignKey, Enum as SQLEnum
)
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel, TimestampMixin, generate_uuid


# Correlation id for invoices with no on-chain counterpart yet.
# On-chain ids are uint256 counters starting at 0, so -1 never collides.
NO_ONCHAIN_ID = -1


class InvoiceStatus(Enum):
    """Invoice lifecycle states."""
    DRAFT = "draft"
    DEPLOYED = "deployed"
    PAID = "paid"
    CANCELLED = "cancelled"


# States the indexer may still move forward. Paid and cancelled are terminal.
OPEN_STATUSES = (InvoiceStatus.DRAFT, InvoiceStatus.DEPLOYED)


class Invoice(BaseModel, TimestampMixin):
    """Invoice created through the API and reconciled from chain events."""

    __tablename__ = "invoices"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=generate_uuid
    )

    organization_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("organizations.id", ondelete="CASCADE")
    )

    onchain_invoice_id: Mapped[int] = mapped_column(
        BigInteger,
        default=NO_ONCHAIN_ID,
        comment="Invoice id in the InvoicePayments contract, -1 if not deployed"
    )

    creator_wallet: Mapped[str] = mapped_column(
        String(42),
        comment="Wallet that receives the payment"
    )

    client_name: Mapped[Optional[str]] = mapped_column(String(200))
    client_email: Mapped[Optional[str]] = mapped_column(String(320))

    token: Mapped[str] = mapped_column(
        String(42),
        comment="ERC20 token address"
    )

    amount: Mapped[str] = mapped_column(
        String(78),
        comment="Amount as a decimal string"
    )

    description: Mapped[Optional[str]] = mapped_column(Text)

    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    status: Mapped[InvoiceStatus] = mapped_column(
        SQLEnum(
            InvoiceStatus,
            name="invoicestatus",
            values_callable=lambda e: [member.value for member in e]
        ),
        default=InvoiceStatus.DRAFT
    )

    tx_hash: Mapped[Optional[str]] = mapped_column(
        String(66),
        comment="Deployment hash, replaced by the payment hash once paid"
    )

    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        Index("idx_invoice_onchain_id", "onchain_invoice_id"),
        Index("idx_invoice_org_created", "organization_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Invoice(id={self.id}, onchain_id={self.onchain_invoice_id}, status={self.status.value})>"
