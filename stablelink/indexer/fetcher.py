"""
Rate-limit-aware log fetcher.

Pages a block range across the RPC span ceiling, throttles between pages
and retries a page with a cooldown when the endpoint rate limits.
"""

import asyncio
import re
from typing import Any, Awaitable, Callable, List, Optional, Protocol, Tuple

import structlog

from stablelink.core.config import settings, LedgerConfig
from stablelink.core.exceptions import FetchFailedError, RateLimitedError
from stablelink.services.event_parser import ChainEvent, EventKind


logger = structlog.get_logger(__name__)

_RATE_LIMIT_PATTERN = re.compile(r"rate limit|retry in", re.IGNORECASE)


class LogSource(Protocol):
    async def query_logs(self, kind: EventKind, from_block: int, to_block: int) -> List[ChainEvent]:
        ...


def _rpc_error(exc: BaseException) -> Optional[dict]:
    """JSON-RPC error object carried by a web3 exception, if any."""
    rpc_response = getattr(exc, "rpc_response", None)
    if isinstance(rpc_response, dict) and isinstance(rpc_response.get("error"), dict):
        return rpc_response["error"]
    for arg in exc.args:
        if isinstance(arg, dict):
            return arg.get("error") if isinstance(arg.get("error"), dict) else arg
    return None


def is_rate_limit_error(exc: BaseException) -> bool:
    """
    Check whether an RPC failure is a rate-limit signal.

    Matches the Etherlink throttling code, HTTP 429 and "rate limit" or
    "retry in" messages.
    """
    if isinstance(exc, RateLimitedError):
        return True
    if getattr(exc, "status", None) == 429:
        return True

    error = _rpc_error(exc)
    code: Any = error.get("code") if error else getattr(exc, "code", None)
    if code == LedgerConfig.RATE_LIMIT_ERROR_CODE:
        return True

    message = str(error.get("message", "")) if error else ""
    return bool(_RATE_LIMIT_PATTERN.search(message) or _RATE_LIMIT_PATTERN.search(str(exc)))


def split_range(from_block: int, to_block: int, max_span: int) -> List[Tuple[int, int]]:
    """Split ``[from_block, to_block]`` into inclusive chunks of at most ``max_span`` blocks."""
    chunks = []
    for start in range(from_block, to_block + 1, max_span):
        chunks.append((start, min(start + max_span - 1, to_block)))
    return chunks


class LogFetcher:
    """Fetches every log of one event kind over a block range, or fails as a whole."""

    def __init__(
        self,
        source: LogSource,
        max_block_range: Optional[int] = None,
        request_delay: Optional[float] = None,
        rate_limit_retry_delay: Optional[float] = None,
        rate_limit_max_retries: Optional[int] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.source = source
        self.max_block_range = max_block_range or settings.indexer_max_block_range
        self.request_delay = (
            settings.indexer_request_delay if request_delay is None else request_delay
        )
        self.rate_limit_retry_delay = (
            settings.indexer_rate_limit_retry_delay
            if rate_limit_retry_delay is None else rate_limit_retry_delay
        )
        self.rate_limit_max_retries = (
            settings.indexer_rate_limit_max_retries
            if rate_limit_max_retries is None else rate_limit_max_retries
        )
        self._sleep = sleep
        self.logger = logger.bind(service="log_fetcher")

    async def fetch_range(self, kind: EventKind, from_block: int, to_block: int) -> List[ChainEvent]:
        """
        Fetch ``kind`` logs over ``[from_block, to_block]`` inclusive.

        Returns:
            Events in ascending block order

        Raises:
            FetchFailedError: If any chunk fails; nothing is returned for
                chunks that succeeded before it
        """
        chunks = split_range(from_block, to_block, self.max_block_range)
        events: List[ChainEvent] = []

        for index, (start, end) in enumerate(chunks):
            events.extend(await self._fetch_chunk(kind, start, end))

            if index < len(chunks) - 1:
                await self._sleep(self.request_delay)

        self.logger.debug(
            "Fetched event range",
            event_name=kind.value,
            from_block=from_block,
            to_block=to_block,
            chunks=len(chunks),
            events=len(events)
        )
        return events

    async def _query(self, kind: EventKind, start: int, end: int) -> List[ChainEvent]:
        try:
            return await self.source.query_logs(kind, start, end)
        except Exception as e:
            if is_rate_limit_error(e):
                raise RateLimitedError(
                    str(e),
                    {"event_name": kind.value, "from_block": start, "to_block": end}
                ) from e
            raise

    async def _fetch_chunk(self, kind: EventKind, start: int, end: int) -> List[ChainEvent]:
        retries = 0

        while True:
            try:
                return await self._query(kind, start, end)

            except RateLimitedError as e:
                if retries >= self.rate_limit_max_retries:
                    self.logger.error(
                        "Rate limit retries exhausted",
                        event_name=kind.value,
                        from_block=start,
                        to_block=end,
                        retries=retries
                    )
                    raise FetchFailedError(
                        kind.value, start, end, f"still rate limited after {retries} retries"
                    ) from e

                retries += 1
                self.logger.warning(
                    "Rate limited, cooling down",
                    event_name=kind.value,
                    from_block=start,
                    to_block=end,
                    retry=retries,
                    max_retries=self.rate_limit_max_retries,
                    wait_seconds=self.rate_limit_retry_delay
                )
                await self._sleep(self.rate_limit_retry_delay)

            except Exception as e:
                self.logger.error(
                    "Error querying event logs",
                    event_name=kind.value,
                    from_block=start,
                    to_block=end,
                    block_count=end - start + 1,
                    error=str(e),
                    error_type=type(e).__name__
                )
                raise FetchFailedError(kind.value, start, end, str(e)) from e
