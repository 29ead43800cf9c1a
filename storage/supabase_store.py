from typing import Any, Dict, List, Optional

import httpx
from postgrest.exceptions import APIError
from supabase import AsyncClient, acreate_client

from logging_setup import get_logger
from storage.base import FeedStore, StorageError

logger = get_logger(__name__)

# PostgREST "no rows returned" for .single() / .maybe_single()
NO_ROWS_CODE = "PGRST116"

ITEMS_TABLE = "plaid_items"
TRANSACTIONS_TABLE = "transactions"
FEED_ITEMS_TABLE = "feed_items"


class SupabaseStore(FeedStore):
    """FeedStore backed by Supabase (PostgREST) tables"""

    def __init__(self, client: AsyncClient):
        self.supabase = client

    @classmethod
    async def create(cls, supabase_url: str, supabase_key: str) -> "SupabaseStore":
        if not supabase_url or not supabase_key:
            raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_KEY must be set")

        client = await acreate_client(supabase_url, supabase_key)
        return cls(client)

    async def _execute(self, query, action: str):
        """
        Run a PostgREST query

        Raises:
            StorageError: for API errors (with the PostgREST code) and for
                network failures reaching Supabase
        """
        try:
            return await query.execute()
        except APIError as e:
            raise StorageError(f"Error {action}: {e.message}", code=e.code) from e
        except httpx.HTTPError as e:
            raise StorageError(f"Error {action}: {type(e).__name__}") from e

    async def _first_row(self, query, action: str) -> Optional[Dict[str, Any]]:
        try:
            response = await self._execute(query.limit(1), action)
        except StorageError as e:
            if e.code == NO_ROWS_CODE:
                return None
            raise

        return response.data[0] if response.data else None

    async def get_linked_item(self, item_id: str) -> Optional[Dict[str, Any]]:
        query = self.supabase.table(ITEMS_TABLE).select(
            "item_id, user_id, access_token, status, error"
        ).eq("item_id", item_id)
        return await self._first_row(query, f"finding item {item_id}")

    async def insert_linked_item(self, row: Dict[str, Any]) -> None:
        await self._execute(self.supabase.table(ITEMS_TABLE).insert(row), "storing linked item")

    async def mark_item_error(self, item_id: str, error: Optional[Dict[str, Any]]) -> None:
        query = self.supabase.table(ITEMS_TABLE).update(
            {"status": "ERROR", "error": error}
        ).eq("item_id", item_id)
        await self._execute(query, f"marking item {item_id} as errored")

    async def upsert_transaction(self, row: Dict[str, Any]) -> None:
        query = self.supabase.table(TRANSACTIONS_TABLE).upsert(row, on_conflict="plaid_transaction_id")
        await self._execute(query, "storing transaction")

    async def delete_transactions(self, user_id: str, transaction_ids: List[str]) -> None:
        query = self.supabase.table(TRANSACTIONS_TABLE).delete().in_(
            "plaid_transaction_id", transaction_ids
        ).eq("user_id", user_id)
        await self._execute(query, "removing transactions")

    async def find_feed_item(self, transaction_id: str) -> Optional[Dict[str, Any]]:
        query = self.supabase.table(FEED_ITEMS_TABLE).select("id").eq("transaction_id", transaction_id)
        return await self._first_row(query, "checking for existing feed item")

    async def insert_feed_item(self, row: Dict[str, Any]) -> None:
        await self._execute(self.supabase.table(FEED_ITEMS_TABLE).insert(row), "creating feed item")
