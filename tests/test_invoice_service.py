"""
Tests for invoice creation rules.
"""

import pytest

from stablelink.core.exceptions import OrganizationNotFoundError
from stablelink.models import InvoiceStatus, NO_ONCHAIN_ID
from stablelink.services.invoice_service import InvoiceService, resolve_onchain_id


@pytest.mark.parametrize("tx_hash, onchain_id, expected", [
    (None, None, NO_ONCHAIN_ID),
    (None, 0, NO_ONCHAIN_ID),
    ("   ", 4, NO_ONCHAIN_ID),
    ("0xabc", None, NO_ONCHAIN_ID),
    ("0xabc", -1, NO_ONCHAIN_ID),
    ("0xabc", 0, 0),
    ("0xabc", 17, 17),
])
def test_resolve_onchain_id(tx_hash, onchain_id, expected):
    assert resolve_onchain_id(tx_hash, onchain_id) == expected


@pytest.mark.asyncio
async def test_create_invoice_for_missing_organization(session_factory):
    async with session_factory() as db:
        with pytest.raises(OrganizationNotFoundError):
            await InvoiceService(db).create_invoice(
                "00000000-0000-0000-0000-000000000000",
                amount=1,
                token="0x3333333333333333333333333333333333333333",
                splits=[{"wallet": "0x1", "percentage": 100}],
            )


@pytest.mark.asyncio
async def test_float_amount_keeps_decimal_string(session_factory, organization):
    async with session_factory() as db:
        service = InvoiceService(db)
        whole = await service.create_invoice(organization.id, amount=25.0, token="0xt", splits=[1])
        fractional = await service.create_invoice(organization.id, amount=12.5, token="0xt", splits=[1])

    assert whole.amount == "25"
    assert fractional.amount == "12.5"
    assert whole.status == InvoiceStatus.DRAFT
    assert whole.onchain_invoice_id == NO_ONCHAIN_ID
