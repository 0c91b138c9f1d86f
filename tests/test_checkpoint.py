"""
Tests for the checkpoint store.
"""

from unittest.mock import AsyncMock

import pytest

from stablelink.indexer.checkpoint import CheckpointStore


KEY = "invoice_payments_last_block"


@pytest.mark.asyncio
async def test_get_missing_key_returns_none(session_factory):
    async with session_factory() as db:
        assert await CheckpointStore().get(db, KEY) is None


@pytest.mark.asyncio
async def test_set_creates_and_advances(session_factory):
    store = CheckpointStore()

    async with session_factory() as db:
        await store.set(db, KEY, 100)
    async with session_factory() as db:
        await store.set(db, KEY, 250)
    async with session_factory() as db:
        assert await store.get(db, KEY) == 250


@pytest.mark.asyncio
async def test_set_never_lowers_the_checkpoint(session_factory):
    store = CheckpointStore()

    async with session_factory() as db:
        await store.set(db, KEY, 500)
    async with session_factory() as db:
        await store.set(db, KEY, 400)
        await store.set(db, KEY, 500)
    async with session_factory() as db:
        assert await store.get(db, KEY) == 500


@pytest.mark.asyncio
async def test_keys_are_independent(session_factory):
    store = CheckpointStore()

    async with session_factory() as db:
        await store.set(db, KEY, 10)
        await store.set(db, "other_contract", 99)
    async with session_factory() as db:
        assert await store.get(db, KEY) == 10
        assert await store.get(db, "other_contract") == 99


@pytest.mark.asyncio
async def test_get_or_init_starts_at_chain_head(session_factory):
    store = CheckpointStore()
    head = AsyncMock(return_value=1_234)

    async with session_factory() as db:
        assert await store.get_or_init(db, KEY, head) == 1_234
    async with session_factory() as db:
        assert await store.get(db, KEY) == 1_234

    head.assert_awaited_once()


@pytest.mark.asyncio
async def test_get_or_init_keeps_existing_value(session_factory):
    store = CheckpointStore()
    head = AsyncMock(return_value=9_999)

    async with session_factory() as db:
        await store.set(db, KEY, 77)
    async with session_factory() as db:
        assert await store.get_or_init(db, KEY, head) == 77

    head.assert_not_awaited()


@pytest.mark.asyncio
async def test_seed_can_rewind_for_operators(session_factory):
    store = CheckpointStore()

    async with session_factory() as db:
        await store.set(db, KEY, 800)
    async with session_factory() as db:
        await store.seed(db, KEY, 120)
    async with session_factory() as db:
        assert await store.get(db, KEY) == 120
