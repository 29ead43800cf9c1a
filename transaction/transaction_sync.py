from typing import Any, Dict, List

from logging_setup import get_logger
from storage.base import FeedStore, StorageError
from transaction.feed_materializer import FeedMaterializer, FeedResult
from transaction.models import TransactionRecord
from transaction.transaction_pipeline import TransactionPipeline

logger = get_logger(__name__)


def build_transaction_row(user_id: str, tx: TransactionRecord) -> Dict[str, Any]:
    return {
        "user_id": user_id,
        "plaid_transaction_id": tx.transaction_id,
        "merchant_name": tx.display_name,
        "amount": float(tx.amount),
        "transaction_date": tx.date,
        "category": tx.category_string,
        "raw_data": tx.raw,
    }


class TransactionSync:
    """
    Pull a user's recent transactions from Plaid and rebuild their food feed

    Raw rows are upserted first (all of them, food or not), then the food
    ones go through the pipeline and into feed items.
    """

    def __init__(
        self,
        plaid_client,
        store: FeedStore,
        pipeline: TransactionPipeline,
        materializer: FeedMaterializer,
    ):
        self.plaid = plaid_client
        self.store = store
        self.pipeline = pipeline
        self.materializer = materializer

    async def store_transactions(self, user_id: str, transactions: List[TransactionRecord]) -> int:
        """Upsert raw transactions, returns how many were stored"""
        stored = 0
        for tx in transactions:
            try:
                await self.store.upsert_transaction(build_transaction_row(user_id, tx))
                stored += 1
            except StorageError as e:
                logger.error(f"Error storing transaction {tx.transaction_id}: {e}")
        return stored

    async def sync_user(self, user_id: str, access_token: str) -> FeedResult:
        payloads = await self.plaid.get_recent_transactions(access_token)
        transactions = [TransactionRecord.from_plaid(p) for p in payloads]

        logger.info(f"Retrieved {len(transactions)} transactions from Plaid for user {user_id}")

        # rows and feed items are keyed by transaction id
        missing_id = [tx for tx in transactions if not tx.transaction_id]
        if missing_id:
            logger.warning(f"Skipping {len(missing_id)} transactions without a transaction_id for user {user_id}")
            transactions = [tx for tx in transactions if tx.transaction_id]

        stored = await self.store_transactions(user_id, transactions)
        if stored < len(transactions):
            logger.warning(f"Stored {stored} of {len(transactions)} transactions for user {user_id}")

        processed = await self.pipeline.process(transactions)
        result = await self.materializer.create_feed_items(user_id, processed)

        logger.info(f"Completed processing transactions for user {user_id}")
        return result
