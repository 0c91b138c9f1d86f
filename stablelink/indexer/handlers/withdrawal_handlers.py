"""
Event handlers for withdrawal events.
"""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from stablelink.services.event_parser import ChainEvent


logger = structlog.get_logger(__name__)


class WithdrawalHandlers:
    """Withdrawal rows are written elsewhere; the indexer only notifies."""

    def __init__(self, stats):
        self.stats = stats
        self.logger = logger.bind(service="withdrawal_handlers")

    async def handle_withdrawal_completed(self, db: AsyncSession, event: ChainEvent) -> int:
        """Handle Withdrawal event."""
        self.stats.withdrawals_completed += 1
        self.logger.info(
            "Withdrawal completed",
            user=event.data.user,
            token=event.data.token,
            amount=str(event.data.amount),
            tx_hash=event.transaction_hash
        )
        return 0
