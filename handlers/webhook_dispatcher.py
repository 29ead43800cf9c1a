from typing import Any, Dict, Optional

from clients.plaid_client import PlaidError
from logging_setup import get_logger
from storage.base import FeedStore, StorageError
from transaction.transaction_sync import TransactionSync

logger = get_logger(__name__)

SYNC_CODES = {"INITIAL_UPDATE", "HISTORICAL_UPDATE", "DEFAULT_UPDATE"}


class WebhookDispatcher:
    """
    Route Plaid webhook events to their handlers

    Stateless per event. Unknown types/codes, missing items and failed
    downstream calls are logged; every event reports success.
    """

    def __init__(self, store: FeedStore, sync: TransactionSync):
        self.store = store
        self.sync = sync

    async def handle_webhook(self, event: Dict[str, Any]) -> Dict[str, bool]:
        webhook_type = event.get("webhook_type")
        logger.info(
            f"Received webhook: type={webhook_type} code={event.get('webhook_code')} item={event.get('item_id')}"
        )

        if webhook_type == "TRANSACTIONS":
            await self.handle_transactions_webhook(event)
        elif webhook_type == "ITEM":
            await self.handle_item_webhook(event)
        else:
            logger.info(f"Unhandled webhook type: {webhook_type}")

        return {"success": True}

    async def _find_item(self, item_id: Optional[str]) -> Optional[Dict[str, Any]]:
        if not item_id:
            logger.error("Webhook has no item_id")
            return None

        try:
            item = await self.store.get_linked_item(item_id)
        except StorageError as e:
            logger.error(f"Error finding item {item_id}: {e}")
            return None

        if not item:
            logger.error(f"Item {item_id} not found")
        return item

    async def handle_transactions_webhook(self, event: Dict[str, Any]) -> None:
        webhook_code = event.get("webhook_code")

        item = await self._find_item(event.get("item_id"))
        if not item:
            return

        user_id = item["user_id"]

        if webhook_code in SYNC_CODES:
            try:
                await self.sync.sync_user(user_id, item["access_token"])
            except PlaidError as e:
                logger.error(f"Error fetching transactions for user {user_id}: {e}")
        elif webhook_code == "TRANSACTIONS_REMOVED":
            await self.handle_removed_transactions(event, user_id)
        else:
            logger.info(f"Unhandled transactions webhook code: {webhook_code}")

    async def handle_removed_transactions(self, event: Dict[str, Any], user_id: str) -> None:
        """
        Delete removed raw transactions for the user

        Feed items built from them are kept; the feed is history once shown.
        """
        removed = event.get("removed_transactions") or []
        if not removed:
            return

        try:
            await self.store.delete_transactions(user_id, list(removed))
        except StorageError as e:
            logger.error(f"Error removing transactions for user {user_id}: {e}")
            return

        logger.info(f"Removed {len(removed)} transactions for user {user_id}")

    async def handle_item_webhook(self, event: Dict[str, Any]) -> None:
        webhook_code = event.get("webhook_code")
        item_id = event.get("item_id")

        item = await self._find_item(item_id)
        if not item:
            return

        if webhook_code == "ERROR":
            try:
                await self.store.mark_item_error(item_id, event.get("error"))
            except StorageError as e:
                logger.error(f"Error marking item {item_id} as errored: {e}")
                return
            logger.warning(f"Item {item_id} marked as ERROR")
        else:
            logger.info(f"Unhandled item webhook code: {webhook_code}")
