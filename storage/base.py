from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class StorageError(Exception):
    """A storage call failed. `code` is the backend error code when known"""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class FeedStore(ABC):
    """
    Storage operations the ingestion core needs

    Three record kinds: linked Plaid items (by item_id), raw transactions
    (by Plaid transaction id, upserted) and feed items (by transaction id,
    insert-if-absent). Implementations raise StorageError on failure and
    return None for "no rows".
    """

    @abstractmethod
    async def get_linked_item(self, item_id: str) -> Optional[Dict[str, Any]]:
        """Return {item_id, user_id, access_token, status, error} or None"""

    @abstractmethod
    async def insert_linked_item(self, row: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    async def mark_item_error(self, item_id: str, error: Optional[Dict[str, Any]]) -> None:
        """Set the item's status to ERROR and store the error payload"""

    @abstractmethod
    async def upsert_transaction(self, row: Dict[str, Any]) -> None:
        """Insert or overwrite a raw transaction keyed by plaid_transaction_id"""

    @abstractmethod
    async def delete_transactions(self, user_id: str, transaction_ids: List[str]) -> None:
        """Delete the user's raw transactions with these Plaid ids"""

    @abstractmethod
    async def find_feed_item(self, transaction_id: str) -> Optional[Dict[str, Any]]:
        pass

    @abstractmethod
    async def insert_feed_item(self, row: Dict[str, Any]) -> None:
        pass
