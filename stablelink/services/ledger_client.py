"""
EVM RPC client for the InvoicePayments contract.
Provides chain height and range-bounded log queries.
"""

from typing import List, Optional

import structlog
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3

from stablelink.core.config import LedgerConfig
from stablelink.core.exceptions import LedgerError
from stablelink.services.contract_abi import INVOICE_PAYMENTS_EVENTS_ABI
from stablelink.services.event_parser import ChainEvent, EventKind, parse_event_log


logger = structlog.get_logger(__name__)


class LedgerClient:
    """
    Async client for the remote ledger.

    Log queries let RPC errors propagate untouched so callers can tell
    rate limiting apart from other failures.
    """

    def __init__(self, w3: Optional[AsyncWeb3] = None):
        """Initialize the web3 provider and contract binding from configuration."""
        self.rpc_config = LedgerConfig.get_rpc_config()
        self.w3 = w3 or AsyncWeb3(
            AsyncHTTPProvider(
                self.rpc_config["endpoint"],
                request_kwargs={"timeout": self.rpc_config["timeout"]}
            )
        )
        self.contract = self.w3.eth.contract(
            address=Web3.to_checksum_address(self.rpc_config["contract_address"]),
            abi=INVOICE_PAYMENTS_EVENTS_ABI
        )
        self.logger = logger.bind(service="ledger_client")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close the provider's HTTP session."""
        try:
            await self.w3.provider.disconnect()
        except Exception as e:
            self.logger.warning("Error closing RPC provider", error=str(e))

    async def current_height(self) -> int:
        """Get the current block number."""
        try:
            return int(await self.w3.eth.block_number)
        except Exception as e:
            self.logger.error("Failed to get block number", error=str(e))
            raise LedgerError(f"Failed to get block number: {e}") from e

    async def query_logs(self, kind: EventKind, from_block: int, to_block: int) -> List[ChainEvent]:
        """
        Fetch one contract event over ``[from_block, to_block]``.

        Returns events sorted by block number and log index.
        """
        contract_event = getattr(self.contract.events, kind.value)
        logs = await contract_event.get_logs(from_block=from_block, to_block=to_block)
        events = [parse_event_log(kind, log) for log in logs]
        events.sort(key=lambda event: event.sort_key)
        return events


# Global client instance
_client: Optional[LedgerClient] = None


async def get_ledger_client() -> LedgerClient:
    """Get or create a global ledger client instance."""
    global _client
    if _client is None:
        _client = LedgerClient()
    return _client


async def close_ledger_client():
    """Close the global ledger client instance."""
    global _client
    if _client:
        await _client.close()
        _client = None
