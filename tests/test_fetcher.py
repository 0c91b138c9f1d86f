"""
Tests for the rate-limit-aware log fetcher.
"""

from unittest.mock import AsyncMock, call

import pytest

from stablelink.core.exceptions import FetchFailedError, RateLimitedError
from stablelink.indexer.fetcher import LogFetcher, is_rate_limit_error, split_range
from stablelink.services.event_parser import EventKind

from conftest import paid_event


class _RPCError(Exception):
    """Shape of a web3 RPC error carrying the JSON-RPC response."""

    def __init__(self, message, rpc_response=None):
        super().__init__(message)
        self.rpc_response = rpc_response


def _rate_limited():
    return _RPCError(
        "Rate limit exceeded",
        {"jsonrpc": "2.0", "id": 1, "error": {"code": -32090, "message": "Too many requests, retry in 10s"}},
    )


def make_fetcher(source, **overrides):
    options = dict(
        max_block_range=200,
        request_delay=0.8,
        rate_limit_retry_delay=12,
        rate_limit_max_retries=3,
        sleep=AsyncMock(),
    )
    options.update(overrides)
    return LogFetcher(source, **options)


def test_split_range_pages_at_max_span():
    assert split_range(100, 850, 200) == [(100, 299), (300, 499), (500, 699), (700, 850)]


def test_split_range_single_block():
    assert split_range(42, 42, 200) == [(42, 42)]


def test_split_range_exact_multiple():
    assert split_range(0, 399, 200) == [(0, 199), (200, 399)]


@pytest.mark.parametrize(
    "error",
    [
        _rate_limited(),
        Exception({"code": -32090, "message": "throttled"}),
        Exception("429 Client Error: rate limit reached"),
        Exception("Please retry in 10s"),
    ],
)
def test_is_rate_limit_error_detects_signals(error):
    assert is_rate_limit_error(error)


def test_is_rate_limit_error_detects_http_429():
    error = Exception("Too Many Requests")
    error.status = 429
    assert is_rate_limit_error(error)


def test_is_rate_limit_error_ignores_other_failures():
    assert not is_rate_limit_error(ValueError("execution reverted"))
    assert not is_rate_limit_error(_RPCError("bad", {"error": {"code": -32000, "message": "header not found"}}))


@pytest.mark.asyncio
async def test_fetch_range_queries_each_chunk_in_order():
    source = AsyncMock()
    source.query_logs = AsyncMock(side_effect=lambda kind, start, end: [paid_event(1, start)])
    fetcher = make_fetcher(source)

    events = await fetcher.fetch_range(EventKind.PAID, 100, 850)

    assert source.query_logs.await_args_list == [
        call(EventKind.PAID, 100, 299),
        call(EventKind.PAID, 300, 499),
        call(EventKind.PAID, 500, 699),
        call(EventKind.PAID, 700, 850),
    ]
    assert [event.block_number for event in events] == [100, 300, 500, 700]


@pytest.mark.asyncio
async def test_fetch_range_throttles_between_chunks_only():
    source = AsyncMock()
    source.query_logs = AsyncMock(return_value=[])
    sleep = AsyncMock()
    fetcher = make_fetcher(source, sleep=sleep)

    await fetcher.fetch_range(EventKind.CREATED, 100, 850)

    assert sleep.await_args_list == [call(0.8)] * 3


@pytest.mark.asyncio
async def test_single_chunk_does_not_sleep():
    source = AsyncMock()
    source.query_logs = AsyncMock(return_value=[])
    sleep = AsyncMock()
    fetcher = make_fetcher(source, sleep=sleep)

    assert await fetcher.fetch_range(EventKind.CREATED, 10, 20) == []
    sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_rate_limited_chunk_is_retried_after_cooldown():
    source = AsyncMock()
    source.query_logs = AsyncMock(side_effect=[_rate_limited(), [paid_event(3, 150)]])
    sleep = AsyncMock()
    fetcher = make_fetcher(source, sleep=sleep)

    events = await fetcher.fetch_range(EventKind.PAID, 100, 200)

    assert [event.block_number for event in events] == [150]
    assert source.query_logs.await_args_list == [call(EventKind.PAID, 100, 200)] * 2
    assert sleep.await_args_list == [call(12)]


@pytest.mark.asyncio
async def test_rate_limit_retries_are_bounded():
    attempts = {"second_chunk": 0}

    async def query_logs(kind, start, end):
        if start == 100:
            return [paid_event(1, 120)]
        attempts["second_chunk"] += 1
        raise _rate_limited()

    source = AsyncMock()
    source.query_logs = AsyncMock(side_effect=query_logs)
    sleep = AsyncMock()
    fetcher = make_fetcher(source, sleep=sleep)

    with pytest.raises(FetchFailedError) as exc_info:
        await fetcher.fetch_range(EventKind.PAID, 100, 450)

    # One attempt plus three retries, then the whole range fails
    assert attempts["second_chunk"] == 4
    assert sleep.await_args_list == [call(0.8), call(12), call(12), call(12)]
    assert exc_info.value.details["from_block"] == 300
    assert exc_info.value.details["to_block"] == 450
    assert isinstance(exc_info.value.__cause__, RateLimitedError)


@pytest.mark.asyncio
async def test_zero_retries_fails_on_first_rate_limit():
    source = AsyncMock()
    source.query_logs = AsyncMock(side_effect=_rate_limited())
    fetcher = make_fetcher(source, rate_limit_max_retries=0)

    with pytest.raises(FetchFailedError):
        await fetcher.fetch_range(EventKind.CANCELLED, 1, 10)

    assert source.query_logs.await_count == 1


@pytest.mark.asyncio
async def test_other_errors_fail_without_retry():
    source = AsyncMock()
    source.query_logs = AsyncMock(side_effect=ConnectionError("connection reset"))
    sleep = AsyncMock()
    fetcher = make_fetcher(source, sleep=sleep)

    with pytest.raises(FetchFailedError) as exc_info:
        await fetcher.fetch_range(EventKind.WITHDRAWAL_COMPLETED, 100, 850)

    assert source.query_logs.await_count == 1
    sleep.assert_not_awaited()
    assert isinstance(exc_info.value.__cause__, ConnectionError)
    assert exc_info.value.code == "FETCH_FAILED"
