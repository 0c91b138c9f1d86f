"""
Dispatches decoded chain events to their local-state handler.
"""

from typing import Awaitable, Callable, Dict

from sqlalchemy.ext.asyncio import AsyncSession

from stablelink.services.event_parser import ChainEvent, EventKind

from .invoice_handlers import InvoiceHandlers
from .withdrawal_handlers import WithdrawalHandlers


Handler = Callable[[AsyncSession, ChainEvent], Awaitable[int]]


class EventReconciler:
    """Applies the one local effect each event kind implies."""

    def __init__(self, stats):
        self.stats = stats
        self._invoice_handlers = InvoiceHandlers(self.stats)
        self._withdrawal_handlers = WithdrawalHandlers(self.stats)

        self._handlers: Dict[EventKind, Handler] = {
            EventKind.CREATED: self._invoice_handlers.handle_invoice_created,
            EventKind.PAID: self._invoice_handlers.handle_invoice_paid,
            EventKind.CANCELLED: self._invoice_handlers.handle_invoice_cancelled,
            EventKind.WITHDRAWAL_COMPLETED: self._withdrawal_handlers.handle_withdrawal_completed,
        }

    async def reconcile(self, db: AsyncSession, event: ChainEvent) -> int:
        """
        Apply ``event`` to local state.

        Returns:
            Number of invoice rows changed

        Raises:
            ReconcileFailedError: If the database write fails
        """
        updated = await self._handlers[event.kind](db, event)
        self.stats.events_processed += 1
        self.stats.invoices_updated += updated
        return updated
