"""
Event handlers for invoice-related events.
"""

from datetime import datetime, timezone

import structlog
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from stablelink.core.exceptions import ReconcileFailedError
from stablelink.models.invoice import Invoice, InvoiceStatus, OPEN_STATUSES
from stablelink.services.event_parser import ChainEvent


logger = structlog.get_logger(__name__)


class InvoiceHandlers:
    """
    Handles invoice lifecycle events.

    Status writes only move open invoices forward, so replaying an event
    changes nothing.
    """

    def __init__(self, stats):
        """Initialize invoice handlers."""
        self.stats = stats
        self.logger = logger.bind(service="invoice_handlers")

    async def handle_invoice_created(self, db: AsyncSession, event: ChainEvent) -> int:
        """Handle InvoiceCreated event. The invoice row comes from the API."""
        self.stats.invoices_created += 1
        self.logger.debug(
            "Invoice created on-chain",
            invoice_id=event.data.invoice_id,
            block=event.block_number
        )
        return 0

    async def handle_invoice_paid(self, db: AsyncSession, event: ChainEvent) -> int:
        """Handle InvoicePaid event."""
        updated = await self._close_invoices(
            db,
            event,
            status=InvoiceStatus.PAID,
            paid_at=datetime.now(timezone.utc),
            tx_hash=event.transaction_hash,
        )
        self.stats.invoices_paid += 1

        self.logger.info(
            "Invoice paid",
            invoice_id=event.data.invoice_id,
            payer=event.data.payer,
            tx_hash=event.transaction_hash,
            rows_updated=updated
        )
        return updated

    async def handle_invoice_cancelled(self, db: AsyncSession, event: ChainEvent) -> int:
        """Handle InvoiceCancelled event."""
        updated = await self._close_invoices(db, event, status=InvoiceStatus.CANCELLED)
        self.stats.invoices_cancelled += 1

        self.logger.info(
            "Invoice cancelled",
            invoice_id=event.data.invoice_id,
            tx_hash=event.transaction_hash,
            rows_updated=updated
        )
        return updated

    async def _close_invoices(self, db: AsyncSession, event: ChainEvent, **values) -> int:
        # Every open invoice sharing the on-chain id moves; drafts may share one.
        try:
            result = await db.execute(
                update(Invoice)
                .where(
                    Invoice.onchain_invoice_id == event.data.invoice_id,
                    Invoice.status.in_(OPEN_STATUSES)
                )
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount or 0
        except SQLAlchemyError as e:
            self.stats.errors += 1
            self.logger.error(
                f"Failed to handle {event.kind.value} event",
                invoice_id=event.data.invoice_id,
                tx_hash=event.transaction_hash,
                error=str(e)
            )
            raise ReconcileFailedError(event.kind.value, event.transaction_hash, str(e)) from e
