"""
Tests for the HTTP API: API-key auth, invoice creation rules and listings.
"""

import httpx
import pytest

from stablelink.api.dependencies import get_database
from stablelink.api.main import create_app
from stablelink.models import Invoice, InvoiceStatus, NO_ONCHAIN_ID, Withdrawal

from conftest import CREATOR, TEST_API_KEY, TOKEN, tx


SPLITS = [{"wallet": CREATOR, "percentage": 100}]
HEADERS = {"x-api-key": TEST_API_KEY}


@pytest.fixture
async def client(session_factory, organization):
    app = create_app()

    async def override_database():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_database] = override_database

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "stablelink-backend"}


@pytest.mark.asyncio
async def test_missing_api_key_is_rejected(client):
    response = await client.get("/api/invoices")
    assert response.status_code == 401
    assert response.json()["error"] == "Missing API key"


@pytest.mark.asyncio
async def test_unknown_api_key_is_rejected(client):
    response = await client.get("/api/invoices", headers={"x-api-key": "sk_test_nope"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_bearer_api_key_is_accepted(client):
    response = await client.get("/api/invoices", headers={"Authorization": f"Bearer {TEST_API_KEY}"})
    assert response.status_code == 200
    assert response.json() == {"invoices": []}


@pytest.mark.asyncio
async def test_create_draft_invoice_uses_sentinel_id(client):
    response = await client.post("/api/invoices", headers=HEADERS, json={
        "amount": 150,
        "token": TOKEN,
        "splits": SPLITS,
        "onchain_invoice_id": 0,
    })

    assert response.status_code == 201
    body = response.json()
    assert body["onchain_invoice_id"] == NO_ONCHAIN_ID
    assert body["status"] == "draft"
    assert body["amount"] == "150"


@pytest.mark.asyncio
async def test_create_deployed_invoice_keeps_onchain_id(client, session_factory):
    response = await client.post("/api/invoices", headers=HEADERS, json={
        "amount": 150,
        "token": TOKEN,
        "splits": SPLITS,
        "onchain_invoice_id": 0,
        "tx_hash": f"  {tx(9)}  ",
        "client_name": "Globex",
    })

    assert response.status_code == 201
    body = response.json()
    assert body["onchain_invoice_id"] == 0
    assert body["status"] == "deployed"

    async with session_factory() as db:
        invoice = await db.get(Invoice, body["id"])
    assert invoice.tx_hash == tx(9)
    assert invoice.creator_wallet == CREATOR


@pytest.mark.asyncio
async def test_deployed_invoice_with_negative_id_gets_sentinel(client):
    response = await client.post("/api/invoices", headers=HEADERS, json={
        "amount": 1, "token": TOKEN, "splits": SPLITS, "onchain_invoice_id": -5, "tx_hash": tx(1),
    })
    assert response.json()["onchain_invoice_id"] == NO_ONCHAIN_ID


@pytest.mark.asyncio
async def test_explicit_creator_wallet_wins(client):
    other = "0x9999999999999999999999999999999999999999"
    response = await client.post("/api/invoices", headers=HEADERS, json={
        "amount": 1, "token": TOKEN, "splits": SPLITS, "creator_wallet": other,
    })
    invoice = (await client.get(f"/api/invoices/{response.json()['id']}", headers=HEADERS)).json()
    assert invoice["creator_wallet"] == other


@pytest.mark.parametrize("payload", [
    {"token": TOKEN, "splits": SPLITS},
    {"amount": 10, "splits": SPLITS},
    {"amount": 10, "token": TOKEN, "splits": []},
])
@pytest.mark.asyncio
async def test_create_invoice_requires_amount_token_and_splits(client, payload):
    response = await client.post("/api/invoices", headers=HEADERS, json=payload)
    assert response.status_code == 400
    assert response.json()["error"] == "amount, token, and splits required"


@pytest.mark.asyncio
async def test_get_unknown_invoice_is_404(client):
    response = await client.get("/api/invoices/does-not-exist", headers=HEADERS)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_reminder_rejected_for_paid_invoice(client, add_invoice):
    paid_id = await add_invoice(onchain_invoice_id=1, status=InvoiceStatus.PAID, tx_hash=tx(1))
    open_id = await add_invoice()

    paid = await client.post(f"/api/invoices/{paid_id}/send-reminder", headers=HEADERS)
    open_ = await client.post(f"/api/invoices/{open_id}/send-reminder", headers=HEADERS)

    assert paid.status_code == 400
    assert open_.status_code == 200
    assert open_.json() == {"ok": True, "message": "Reminder sent"}


@pytest.mark.asyncio
async def test_delete_invoice(client, add_invoice):
    invoice_id = await add_invoice()

    response = await client.delete(f"/api/invoices/{invoice_id}", headers=HEADERS)
    assert response.status_code == 204

    response = await client.get(f"/api/invoices/{invoice_id}", headers=HEADERS)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_invoices(client, add_invoice):
    await add_invoice()
    await add_invoice(onchain_invoice_id=3, status=InvoiceStatus.DEPLOYED, tx_hash=tx(3))

    response = await client.get("/api/invoices", headers=HEADERS)

    invoices = response.json()["invoices"]
    assert len(invoices) == 2
    assert {i["status"] for i in invoices} == {"draft", "deployed"}


@pytest.mark.asyncio
async def test_register_and_list_webhooks(client):
    response = await client.post("/api/webhooks", headers=HEADERS, json={
        "url": "https://hooks.example/stablelink",
        "subscribed_events": ["invoice.paid"],
    })
    assert response.status_code == 201
    assert response.json()["subscribed_events"] == ["invoice.paid"]

    listed = (await client.get("/api/webhooks", headers=HEADERS)).json()["webhooks"]
    assert [w["url"] for w in listed] == ["https://hooks.example/stablelink"]


@pytest.mark.asyncio
async def test_webhook_requires_events(client):
    response = await client.post("/api/webhooks", headers=HEADERS, json={"url": "https://x.example"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_withdrawals_filter_by_lowercased_wallet(client, session_factory):
    wallet = "0xAbCdEf0000000000000000000000000000000001"
    async with session_factory() as db:
        db.add(Withdrawal(wallet=wallet.lower(), token=TOKEN, amount_raw="500", tx_hash=tx(4)))
        db.add(Withdrawal(wallet=CREATOR, token=TOKEN, amount_raw="1", tx_hash=tx(5)))

    response = await client.get("/api/withdrawals", params={"wallet": wallet}, headers=HEADERS)

    withdrawals = response.json()["withdrawals"]
    assert [w["amount_raw"] for w in withdrawals] == ["500"]


@pytest.mark.asyncio
async def test_withdrawals_require_wallet(client):
    response = await client.get("/api/withdrawals", headers=HEADERS)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_indexer_status_without_scheduler(client):
    response = await client.get("/api/indexer/status")
    assert response.status_code == 200
    assert response.json()["status"] == "stopped"


@pytest.mark.asyncio
async def test_public_invoice_needs_no_api_key(client, add_invoice):
    invoice_id = await add_invoice(onchain_invoice_id=11, status=InvoiceStatus.DEPLOYED, tx_hash=tx(11))

    response = await client.get(f"/api/public/invoices/{invoice_id}")

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == invoice_id
    assert body["onchain_invoice_id"] == 11
    assert body["status"] == "deployed"
    assert body["creator_wallet"] == CREATOR
    assert "organization_id" not in body
    assert "tx_hash" not in body


@pytest.mark.asyncio
async def test_public_invoice_unknown_id_is_404(client):
    response = await client.get("/api/public/invoices/does-not-exist")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_organization_profile(client, organization):
    response = await client.get("/api/organization", headers=HEADERS)

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == organization.id
    assert body["name"] == "Acme"
    assert body["primary_wallet"] == CREATOR
    assert body["default_platform_fee"] == 300


@pytest.mark.asyncio
async def test_organization_profile_requires_api_key(client):
    response = await client.get("/api/organization")
    assert response.status_code == 401
