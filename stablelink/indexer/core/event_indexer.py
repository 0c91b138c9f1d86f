"""
EventIndexer: one indexing pass over the InvoicePayments contract.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple
from datetime import datetime, timezone
from dataclasses import asdict

import structlog

from stablelink.core.config import settings
from stablelink.core.database import get_async_session
from stablelink.services.event_parser import ChainEvent, EventKind, FETCH_ORDER
from stablelink.services.ledger_client import LedgerClient, get_ledger_client

from .types import IndexerStatus, ProcessingStats, PassResult
from ..checkpoint import CheckpointStore
from ..fetcher import LogFetcher
from ..handlers.reconciler import EventReconciler
from ..notifications.webhook_dispatcher import WebhookDispatcher


logger = structlog.get_logger(__name__)


class EventIndexer:
    """
    Polling indexer for InvoicePayments events.

    A pass fetches every event kind over ``(checkpoint, head]``, reconciles
    the events into invoice state, fans them out to webhooks and only then
    advances the checkpoint. Any failure before the checkpoint write leaves
    it untouched, so the next pass retries the same range.
    """

    def __init__(
        self,
        ledger: LedgerClient,
        fetcher: Optional[LogFetcher] = None,
        checkpoint: Optional[CheckpointStore] = None,
        reconciler: Optional[EventReconciler] = None,
        dispatcher: Optional[WebhookDispatcher] = None,
        session_factory: Callable = get_async_session,
        state_key: Optional[str] = None,
    ):
        self.logger = logger.bind(service="event_indexer")
        self.status = IndexerStatus.STOPPED
        self.stats = ProcessingStats()

        self.ledger = ledger
        self.fetcher = fetcher or LogFetcher(ledger)
        self.checkpoint = checkpoint or CheckpointStore()
        self.reconciler = reconciler or EventReconciler(self.stats)
        self.dispatcher = dispatcher or WebhookDispatcher(session_factory)
        self.session_factory = session_factory
        self.state_key = state_key or settings.indexer_state_key

        # Share counters with the reconciler when it was built elsewhere
        self.stats = self.reconciler.stats

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.shutdown()

    async def initialize(self):
        """Create the checkpoint at the chain head if this is the first run."""
        try:
            async with self.session_factory() as db:
                last_block = await self.checkpoint.get_or_init(
                    db, self.state_key, self.ledger.current_height
                )

            self.stats.last_processed_block = last_block
            self.stats.start_time = datetime.now(timezone.utc)
            self.status = IndexerStatus.READY

            self.logger.info(
                "Event indexer initialized",
                state_key=self.state_key,
                last_block=last_block
            )

        except Exception as e:
            self.status = IndexerStatus.ERROR
            self.logger.error("Failed to initialize event indexer", error=str(e))
            raise

    async def run_pass(self) -> PassResult:
        """
        Run one indexing pass.

        Raises:
            FetchFailedError: A range could not be fetched
            ReconcileFailedError: Invoice state could not be written
            LedgerError: The chain head could not be read
        """
        async with self.session_factory() as db:
            from_block = await self.checkpoint.get_or_init(
                db, self.state_key, self.ledger.current_height
            )
        to_block = await self.ledger.current_height()

        if self.status != IndexerStatus.READY:
            self.status = IndexerStatus.READY
            self.stats.start_time = self.stats.start_time or datetime.now(timezone.utc)

        result = PassResult(from_block=from_block, to_block=to_block)
        if from_block >= to_block:
            self.logger.debug("No new blocks", last_block=from_block, head=to_block)
            return result

        self.logger.info("Indexing pass started", from_block=from_block + 1, to_block=to_block)

        batches: List[Tuple[EventKind, List[ChainEvent]]] = []
        for kind in FETCH_ORDER:
            events = await self.fetcher.fetch_range(kind, from_block + 1, to_block)
            batches.append((kind, events))
            result.events[kind.label] = len(events)

        async with self.session_factory() as db:
            for _, events in batches:
                for event in events:
                    result.invoices_updated += await self.reconciler.reconcile(db, event)

        for _, events in batches:
            for event in events:
                result.notifications += await self.dispatcher.notify(
                    event.label, event.webhook_payload()
                )

        async with self.session_factory() as db:
            await self.checkpoint.set(db, self.state_key, to_block)

        result.advanced = True
        self.stats.notifications_queued += result.notifications
        self.stats.last_processed_block = to_block

        self.logger.info(
            "Indexing pass completed",
            from_block=from_block + 1,
            to_block=to_block,
            events=result.events,
            invoices_updated=result.invoices_updated,
            notifications=result.notifications
        )
        return result

    async def shutdown(self):
        """Release the HTTP client and RPC provider."""
        await self.dispatcher.close()
        await self.ledger.close()
        self.status = IndexerStatus.STOPPED
        self.logger.info("Event indexer shutdown complete")

    async def get_status(self) -> Dict[str, Any]:
        """Get current indexer status and statistics."""
        return {
            "status": self.status.value,
            "state_key": self.state_key,
            "stats": asdict(self.stats),
            "pending_deliveries": self.dispatcher.pending,
            "uptime": (
                (datetime.now(timezone.utc) - self.stats.start_time).total_seconds()
                if self.stats.start_time else None
            )
        }


async def create_event_indexer() -> EventIndexer:
    """Build an indexer wired to the global ledger client and database."""
    ledger = await get_ledger_client()
    return EventIndexer(ledger)
