from typing import Iterable, List, Optional

from logging_setup import get_logger
from transaction.food_classifier import FoodRules, filter_food_transactions
from transaction.models import EnrichedTransaction, TransactionRecord
from transaction.place_enricher import PlaceEnricher

logger = get_logger(__name__)


class TransactionPipeline:
    """Classify transactions as food, then enrich the survivors with place data"""

    def __init__(self, enricher: PlaceEnricher, rules: Optional[FoodRules] = None):
        self.enricher = enricher
        self.rules = rules

    async def process(self, transactions: Optional[Iterable[TransactionRecord]]) -> List[EnrichedTransaction]:
        if not transactions or isinstance(transactions, (str, bytes, dict)):
            return []
        try:
            transactions = list(transactions)
        except TypeError:
            return []

        food_transactions = filter_food_transactions(transactions, self.rules)
        logger.info(
            f"Filtered {len(food_transactions)} food-related transactions out of {len(transactions)} total"
        )

        return await self.enricher.enrich_all(food_transactions)
