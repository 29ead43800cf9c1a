from datetime import date, timedelta
from typing import Any, Dict, List, Optional

import httpx

from logging_setup import get_logger

logger = get_logger(__name__)

PAGE_SIZE = 250
RECENT_DAYS = 90


class PlaidError(Exception):
    """
    Raised for failed Plaid calls

    error_code / error_type come from the Plaid error body when there is one.
    """

    def __init__(self, message: str, error_code: Optional[str] = None, error_type: Optional[str] = None):
        super().__init__(message)
        self.error_code = error_code
        self.error_type = error_type


class PlaidClient:
    """Async client for the handful of Plaid endpoints FoodFeed uses"""

    def __init__(
        self,
        client_id: str,
        secret: str,
        base_url: str = "https://sandbox.plaid.com",
        webhook_url: Optional[str] = None,
        max_pages: int = 10,
        http: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        if not client_id or not secret:
            raise ValueError("PLAID_CLIENT_ID and PLAID_SECRET must be set")

        self.client_id = client_id
        self.secret = secret
        self.base_url = base_url.rstrip("/")
        self.webhook_url = webhook_url
        self.max_pages = max(1, max_pages)
        self._http = http
        self._timeout = timeout

    def _client(self) -> httpx.AsyncClient:
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(
                timeout=self._timeout,
                headers={"Content-Type": "application/json"},
            )
        return self._http

    async def close(self) -> None:
        if self._http is not None and not self._http.is_closed:
            await self._http.aclose()

    async def _post(self, endpoint: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        body = {"client_id": self.client_id, "secret": self.secret, **payload}

        try:
            response = await self._client().post(f"{self.base_url}/{endpoint}", json=body)
        except httpx.HTTPError as e:
            raise PlaidError(f"Plaid /{endpoint} request failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.status_code >= 400:
            raise PlaidError(
                f"Plaid /{endpoint} returned {response.status_code}: "
                f"{data.get('error_message', response.reason_phrase)}",
                error_code=data.get("error_code"),
                error_type=data.get("error_type"),
            )

        return data

    async def create_link_token(self, user_id: str) -> str:
        """Create a Link token to initialize Plaid Link for a user"""
        payload = {
            "user": {"client_user_id": user_id},
            "client_name": "FoodFeed",
            "products": ["transactions"],
            "country_codes": ["US"],
            "language": "en",
        }
        if self.webhook_url:
            payload["webhook"] = self.webhook_url

        data = await self._post("link/token/create", payload)
        return data["link_token"]

    async def exchange_public_token(self, public_token: str) -> Dict[str, str]:
        """
        Exchange a public token from Plaid Link

        Returns:
            Dict with access_token and item_id
        """
        data = await self._post("item/public_token/exchange", {"public_token": public_token})
        return {
            "access_token": data["access_token"],
            "item_id": data["item_id"],
        }

    async def get_transactions(self, access_token: str, start_date: date, end_date: date) -> List[Dict]:
        """
        Fetch transactions between two dates

        Pages by offset until total_transactions is reached or max_pages
        pages were read; the latter is logged as truncation.
        """
        transactions: List[Dict] = []
        total = None

        for _ in range(self.max_pages):
            data = await self._post(
                "transactions/get",
                {
                    "access_token": access_token,
                    "start_date": start_date.isoformat(),
                    "end_date": end_date.isoformat(),
                    "options": {"count": PAGE_SIZE, "offset": len(transactions)},
                },
            )

            batch = data.get("transactions") or []
            transactions.extend(batch)
            total = data.get("total_transactions", len(transactions))

            if not batch or len(transactions) >= total:
                return transactions

        logger.warning(
            f"Stopped after {self.max_pages} pages: fetched {len(transactions)} of {total} transactions "
            f"({start_date} to {end_date})"
        )
        return transactions

    async def get_recent_transactions(self, access_token: str, days: int = RECENT_DAYS) -> List[Dict]:
        end_date = date.today()
        start_date = end_date - timedelta(days=days)
        return await self.get_transactions(access_token, start_date, end_date)
