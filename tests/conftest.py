"""Pytest configuration and shared fixtures for all tests."""

import os

# Minimal environment for Settings; must run before stablelink is imported
os.environ.setdefault("INVOICE_PAYMENTS_ADDRESS", "0x5FbDB2315678afecb367f032d93F642f64180aa3")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ETHERLINK_RPC_URL", "http://127.0.0.1:8545")
os.environ.setdefault("INDEXER_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "development")

from contextlib import asynccontextmanager
from typing import Optional

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from stablelink.models import Base, Organization, ApiKey, Invoice, InvoiceStatus, Webhook, NO_ONCHAIN_ID
from stablelink.services.event_parser import (
    ChainEvent,
    EventKind,
    InvoiceCreatedData,
    InvoicePaidData,
    InvoiceCancelledData,
    WithdrawalCompletedData,
)


TEST_API_KEY = "sk_test_conftest_key"
CREATOR = "0x1111111111111111111111111111111111111111"
PAYER = "0x2222222222222222222222222222222222222222"
TOKEN = "0x3333333333333333333333333333333333333333"


@pytest.fixture
async def engine():
    """In-memory SQLite engine shared by every session of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def session_factory(session_maker):
    """Drop-in for ``get_async_session`` bound to the test engine."""
    @asynccontextmanager
    async def _factory():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    return _factory


@pytest.fixture
async def organization(session_factory):
    """Organization with a test API key."""
    async with session_factory() as db:
        org = Organization(name="Acme", primary_wallet=CREATOR, default_platform_fee=300)
        db.add(org)
        await db.flush()
        db.add(ApiKey(organization_id=org.id, test_key=TEST_API_KEY))
    return org


@pytest.fixture
def add_invoice(session_factory, organization):
    """Insert an invoice and return its id."""
    async def _add(
        onchain_invoice_id: int = NO_ONCHAIN_ID,
        status: InvoiceStatus = InvoiceStatus.DRAFT,
        tx_hash: Optional[str] = None,
    ) -> str:
        async with session_factory() as db:
            invoice = Invoice(
                organization_id=organization.id,
                onchain_invoice_id=onchain_invoice_id,
                creator_wallet=CREATOR,
                token=TOKEN,
                amount="1000000",
                status=status,
                tx_hash=tx_hash,
            )
            db.add(invoice)
            await db.flush()
            return invoice.id

    return _add


@pytest.fixture
def add_webhook(session_factory, organization):
    async def _add(url: str, events) -> str:
        async with session_factory() as db:
            webhook = Webhook(organization_id=organization.id, url=url, subscribed_events=list(events))
            db.add(webhook)
            await db.flush()
            return webhook.id

    return _add


def tx(n: int) -> str:
    return "0x" + format(n, "064x")


def created_event(invoice_id: int, block: int, log_index: int = 0) -> ChainEvent:
    return ChainEvent(
        kind=EventKind.CREATED,
        block_number=block,
        transaction_hash=tx(block * 100 + log_index),
        log_index=log_index,
        data=InvoiceCreatedData(invoice_id=invoice_id, creator=CREATOR, token=TOKEN, amount=1_000_000),
    )


def paid_event(invoice_id: int, block: int, log_index: int = 0) -> ChainEvent:
    return ChainEvent(
        kind=EventKind.PAID,
        block_number=block,
        transaction_hash=tx(block * 100 + log_index),
        log_index=log_index,
        data=InvoicePaidData(invoice_id=invoice_id, payer=PAYER, amount=1_000_000),
    )


def cancelled_event(invoice_id: int, block: int, log_index: int = 0) -> ChainEvent:
    return ChainEvent(
        kind=EventKind.CANCELLED,
        block_number=block,
        transaction_hash=tx(block * 100 + log_index),
        log_index=log_index,
        data=InvoiceCancelledData(invoice_id=invoice_id),
    )


def withdrawal_event(block: int, amount: int = 5_000, log_index: int = 0) -> ChainEvent:
    return ChainEvent(
        kind=EventKind.WITHDRAWAL_COMPLETED,
        block_number=block,
        transaction_hash=tx(block * 100 + log_index),
        log_index=log_index,
        data=WithdrawalCompletedData(user=CREATOR, token=TOKEN, amount=amount),
    )
