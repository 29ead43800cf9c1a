"""
Wiring: build clients, storage and the webhook dispatcher from Settings
"""

from clients.plaid_client import PlaidClient
from clients.places_client import PlacesClient
from config import Settings
from handlers.webhook_dispatcher import WebhookDispatcher
from storage.supabase_store import SupabaseStore
from transaction.feed_materializer import FeedMaterializer
from transaction.food_classifier import load_food_rules
from transaction.place_enricher import PlaceEnricher
from transaction.transaction_pipeline import TransactionPipeline
from transaction.transaction_sync import TransactionSync


def make_plaid_client(settings: Settings) -> PlaidClient:
    settings.require("plaid_client_id", "plaid_secret")
    return PlaidClient(
        settings.plaid_client_id,
        settings.plaid_secret,
        base_url=settings.plaid_base_url,
        webhook_url=settings.plaid_webhook_url,
        max_pages=settings.plaid_max_pages,
    )


async def make_store(settings: Settings) -> SupabaseStore:
    settings.require("supabase_url", "supabase_service_key")
    return await SupabaseStore.create(settings.supabase_url, settings.supabase_service_key)


async def build_dispatcher(settings: Settings) -> WebhookDispatcher:
    """Everything the webhook worker needs, created inside the worker's event loop"""
    settings.require("google_places_api_key")

    store = await make_store(settings)
    enricher = PlaceEnricher(
        PlacesClient(settings.google_places_api_key),
        max_concurrency=settings.places_max_concurrency or None,
    )
    pipeline = TransactionPipeline(enricher, load_food_rules(settings.food_rules_path))
    sync = TransactionSync(make_plaid_client(settings), store, pipeline, FeedMaterializer(store))
    return WebhookDispatcher(store, sync)
