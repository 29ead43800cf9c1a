from dataclasses import dataclass
from typing import Any, Dict, Iterable

from logging_setup import get_logger
from storage.base import FeedStore, StorageError
from transaction.models import EnrichedTransaction

logger = get_logger(__name__)


@dataclass
class FeedResult:
    created: int = 0
    skipped: int = 0
    failed: int = 0


def build_feed_item(user_id: str, enriched: EnrichedTransaction) -> Dict[str, Any]:
    """
    Feed row for a food transaction

    Amounts are hidden by default (show_amount=False); the user opts in elsewhere.
    """
    tx = enriched.transaction
    place = enriched.place

    return {
        "user_id": user_id,
        "transaction_id": tx.transaction_id,
        "merchant_name": tx.display_name,
        "amount": float(tx.amount),
        "transaction_date": tx.date,
        "place_id": place.place_id if place else None,
        "place_name": place.name if place else None,
        "place_address": place.address if place else None,
        "latitude": place.latitude if place else None,
        "longitude": place.longitude if place else None,
        "photo_url": place.photo_url if place else None,
        "is_visible": True,
        "show_amount": False,
    }


class FeedMaterializer:
    """
    Turn processed food transactions into feed items, one per transaction id

    Runs one transaction at a time: each insert is preceded by a lookup so
    webhook redeliveries don't create duplicates.
    """

    def __init__(self, store: FeedStore):
        self.store = store

    async def create_feed_items(self, user_id: str, transactions: Iterable[EnrichedTransaction]) -> FeedResult:
        result = FeedResult()

        for enriched in transactions or []:
            try:
                existing = await self.store.find_feed_item(enriched.transaction_id)
            except StorageError as e:
                logger.error(f"Error checking for existing feed item {enriched.transaction_id}: {e}")
                result.failed += 1
                continue

            if existing:
                result.skipped += 1
                continue

            try:
                await self.store.insert_feed_item(build_feed_item(user_id, enriched))
            except StorageError as e:
                logger.error(f"Error creating feed item {enriched.transaction_id}: {e}")
                result.failed += 1
                continue

            result.created += 1

        logger.info(
            f"Feed items for user {user_id}: {result.created} created, "
            f"{result.skipped} already present, {result.failed} failed"
        )
        return result
