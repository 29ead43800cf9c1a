"""Shared pytest fixtures for the FoodFeed tests."""

import pytest

from handlers.webhook_dispatcher import WebhookDispatcher
from tests.helpers.memory_store import InMemoryStore
from tests.helpers.stubs import StubPlaidClient, StubPlacesClient, place_response, plaid_transaction
from transaction.feed_materializer import FeedMaterializer
from transaction.food_classifier import load_food_rules
from transaction.place_enricher import PlaceEnricher
from transaction.transaction_pipeline import TransactionPipeline
from transaction.transaction_sync import TransactionSync


@pytest.fixture
def food_rules():
    return load_food_rules()


@pytest.fixture
def store():
    store = InMemoryStore()
    store.add_item("X", "u1", access_token="access-sandbox-x")
    return store


@pytest.fixture
def places_client():
    return StubPlacesClient(responses={
        "Starbucks": place_response("Starbucks", place_id="sbux"),
        "Joe's Pizzeria": place_response("Joe's Pizzeria", place_id="joes", photo_reference=None),
    })


@pytest.fixture
def sample_transactions():
    return [
        plaid_transaction("t1", name="STARBUCKS #123", merchant_name="Starbucks", mcc="5814"),
        plaid_transaction("t2", name="Acme Hardware", category=["Shops"]),
        plaid_transaction("t3", name="Joe's Pizzeria"),
        plaid_transaction("t4", name="Uber 072515", category=["Travel", "Taxi"]),
        plaid_transaction("t5", name="Whole Foods Market", pending=True),
    ]


@pytest.fixture
def plaid_client(sample_transactions):
    return StubPlaidClient(transactions=sample_transactions)


@pytest.fixture
def pipeline(places_client, food_rules):
    return TransactionPipeline(PlaceEnricher(places_client), food_rules)


@pytest.fixture
def transaction_sync(plaid_client, store, pipeline):
    return TransactionSync(plaid_client, store, pipeline, FeedMaterializer(store))


@pytest.fixture
def dispatcher(store, transaction_sync):
    return WebhookDispatcher(store, transaction_sync)
