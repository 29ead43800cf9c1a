"""Tests for Plaid transaction sync."""

import pytest

from clients.plaid_client import PlaidError
from tests.helpers.stubs import plaid_transaction


@pytest.mark.asyncio
async def test_sync_stores_all_raw_transactions(transaction_sync, store, plaid_client):
    await transaction_sync.sync_user("u1", "access-sandbox-x")

    assert plaid_client.access_tokens == ["access-sandbox-x"]
    assert sorted(store.transactions) == ["t1", "t2", "t3", "t4", "t5"]

    row = store.transactions["t1"]
    assert row["user_id"] == "u1"
    assert row["merchant_name"] == "Starbucks"
    assert row["amount"] == 12.5
    assert row["transaction_date"] == "2024-03-01"
    assert row["raw_data"]["name"] == "STARBUCKS #123"
    assert store.transactions["t4"]["category"] == "Travel, Taxi"
    assert store.transactions["t1"]["category"] is None


@pytest.mark.asyncio
async def test_sync_creates_feed_items_for_food_only(transaction_sync, store):
    result = await transaction_sync.sync_user("u1", "access-sandbox-x")

    assert [row["transaction_id"] for row in store.feed_items] == ["t1", "t3"]
    assert store.feed_items[0]["place_id"] == "sbux"
    assert all(row["user_id"] == "u1" for row in store.feed_items)
    assert result.created == 2


@pytest.mark.asyncio
async def test_resync_overwrites_raw_rows_and_keeps_feed_unique(transaction_sync, store, plaid_client):
    await transaction_sync.sync_user("u1", "access-sandbox-x")
    plaid_client.transactions[0] = plaid_transaction("t1", merchant_name="Starbucks", mcc="5814", amount=15.0)

    await transaction_sync.sync_user("u1", "access-sandbox-x")

    assert len(store.transactions) == 5
    assert store.transactions["t1"]["amount"] == 15.0
    assert [row["transaction_id"] for row in store.feed_items] == ["t1", "t3"]


@pytest.mark.asyncio
async def test_upsert_failure_does_not_stop_sync(transaction_sync, store):
    store.fail_on["upsert_transaction"] = {"t1", "t2"}

    await transaction_sync.sync_user("u1", "access-sandbox-x")

    assert sorted(store.transactions) == ["t3", "t4", "t5"]
    # feed items are built from the fetched set, not from what was stored
    assert [row["transaction_id"] for row in store.feed_items] == ["t1", "t3"]


@pytest.mark.asyncio
async def test_fetch_error_propagates(transaction_sync, store, plaid_client):
    plaid_client.error = PlaidError("ITEM_LOGIN_REQUIRED", error_code="ITEM_LOGIN_REQUIRED")

    with pytest.raises(PlaidError):
        await transaction_sync.sync_user("u1", "access-sandbox-x")

    assert store.transactions == {}
    assert store.feed_items == []


@pytest.mark.asyncio
async def test_sync_with_no_transactions(transaction_sync, store, plaid_client):
    plaid_client.transactions = []

    result = await transaction_sync.sync_user("u1", "access-sandbox-x")

    assert store.transactions == {}
    assert result.created == 0


@pytest.mark.asyncio
async def test_transactions_without_id_are_skipped(transaction_sync, store, plaid_client, caplog):
    plaid_client.transactions.append(plaid_transaction(None, name="Blue Bottle Coffee", mcc="5814"))
    plaid_client.transactions.append(plaid_transaction("", name="Sweetgreen", mcc="5812"))

    with caplog.at_level("WARNING"):
        result = await transaction_sync.sync_user("u1", "access-sandbox-x")

    assert sorted(store.transactions) == ["t1", "t2", "t3", "t4", "t5"]
    assert "" not in store.transactions
    assert [row["transaction_id"] for row in store.feed_items] == ["t1", "t3"]
    assert result.created == 2
    assert "Skipping 2 transactions without a transaction_id" in caplog.text
