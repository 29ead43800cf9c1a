import asyncio
from typing import Any, List, Optional, Sequence

from logging_setup import get_logger
from transaction.models import EnrichedTransaction, PlaceData, TransactionRecord

logger = get_logger(__name__)


class PlaceEnricher:
    """
    Attach Google Places metadata to food transactions

    Best-effort: any lookup failure leaves the transaction without place
    data and is only logged.
    """

    def __init__(self, places_client, max_concurrency: Optional[int] = None):
        self.places = places_client
        # None/0 means no cap on concurrent lookups
        self._semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None

    async def _find_place(self, query: str) -> Any:
        if self._semaphore is None:
            return await self.places.find_place(query)
        async with self._semaphore:
            return await self.places.find_place(query)

    def _to_place_data(self, result: Any) -> Optional[PlaceData]:
        """Build PlaceData from the first candidate of a Find Place response"""
        if not isinstance(result, dict) or result.get("status") != "OK":
            return None

        candidates = result.get("candidates") or []
        if not candidates:
            return None

        place = candidates[0]
        location = (place.get("geometry") or {}).get("location") or {}

        photo_url = None
        photos = place.get("photos") or []
        if photos and photos[0].get("photo_reference"):
            photo_url = self.places.photo_url(photos[0]["photo_reference"])

        return PlaceData(
            place_id=place.get("place_id"),
            name=place.get("name"),
            address=place.get("formatted_address"),
            latitude=location.get("lat"),
            longitude=location.get("lng"),
            photo_url=photo_url,
        )

    async def enrich(self, tx: TransactionRecord) -> EnrichedTransaction:
        query = tx.display_name
        if not query:
            return EnrichedTransaction(tx)

        try:
            place = self._to_place_data(await self._find_place(query))
        except Exception as e:
            logger.warning(f"Error enriching transaction {tx.transaction_id} with place data: {e}")
            return EnrichedTransaction(tx)

        if place is None:
            logger.debug(f"No place found for '{query}'")

        return EnrichedTransaction(tx, place)

    async def enrich_all(self, transactions: Sequence[TransactionRecord]) -> List[EnrichedTransaction]:
        """Enrich all transactions concurrently; results keep input order"""
        if not transactions:
            return []
        return list(await asyncio.gather(*(self.enrich(tx) for tx in transactions)))
