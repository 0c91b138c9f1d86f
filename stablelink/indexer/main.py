"""
Main entry point for the standalone indexer service.

    python -m stablelink.indexer.main
"""

import asyncio
import signal

import structlog

from stablelink.core.config import settings
from stablelink.core.database import init_database, close_database
from stablelink.core.logging import setup_logging
from stablelink.services.ledger_client import close_ledger_client
from stablelink.scheduler.poll_scheduler import get_poll_scheduler, shutdown_poll_scheduler


logger = structlog.get_logger(__name__)


class IndexerMain:
    """Runs the poll scheduler until a shutdown signal arrives."""

    def __init__(self):
        self.scheduler = None
        self._stop_event = asyncio.Event()

    async def initialize(self):
        """Initialize database and scheduler."""
        try:
            logger.info(
                "Initializing indexer service",
                rpc_url=settings.etherlink_rpc_url,
                contract=settings.invoice_payments_address
            )

            await init_database()
            self.scheduler = await get_poll_scheduler()

            logger.info("Indexer service initialized")

        except Exception as e:
            logger.error("Failed to initialize indexer service", error=str(e))
            raise

    async def start(self):
        """Start polling and wait for a stop request."""
        await self.scheduler.start()
        logger.info("Indexer service started", interval=self.scheduler.interval)
        await self._stop_event.wait()

    def request_stop(self):
        self._stop_event.set()

    async def stop(self):
        """Stop polling and release connections."""
        logger.info("Stopping indexer service")

        await shutdown_poll_scheduler()
        await close_ledger_client()
        await close_database()

        logger.info("Indexer service stopped")


async def main():
    """Main function to run the indexer service."""
    setup_logging()

    indexer = IndexerMain()

    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signum, indexer.request_stop)

    try:
        await indexer.initialize()
        await indexer.start()
    except Exception as e:
        logger.error("Indexer service failed", error=str(e))
        raise
    finally:
        await indexer.stop()


def run():
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
