from typing import Any, Dict, Optional

import httpx

from logging_setup import get_logger

logger = get_logger(__name__)

PLACES_BASE_URL = "https://maps.googleapis.com/maps/api/place"
PLACE_FIELDS = "place_id,name,formatted_address,geometry,photos"
PHOTO_MAX_WIDTH = 400


class PlacesError(Exception):
    """Raised when the Google Places API can't be reached or answers with an HTTP error"""
    pass


class PlacesClient:
    """
    Thin async wrapper over the Google Places "Find Place" endpoint

    Returns the decoded JSON body as-is ({status, candidates: [...]});
    interpreting the status is the caller's job.
    """

    def __init__(self, api_key: str, http: Optional[httpx.AsyncClient] = None, timeout: float = 10.0):
        if not api_key:
            raise ValueError("GOOGLE_PLACES_API_KEY must be set")

        self.api_key = api_key
        self._http = http
        self._timeout = timeout

    def _client(self) -> httpx.AsyncClient:
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(timeout=self._timeout)
        return self._http

    async def close(self) -> None:
        if self._http is not None and not self._http.is_closed:
            await self._http.aclose()

    async def find_place(self, query_text: str) -> Dict[str, Any]:
        params = {
            "input": query_text,
            "inputtype": "textquery",
            "fields": PLACE_FIELDS,
            "key": self.api_key,
        }

        try:
            response = await self._client().get(f"{PLACES_BASE_URL}/findplacefromtext/json", params=params)
            response.raise_for_status()
        except httpx.HTTPError as e:
            # httpx errors carry the request URL, which includes the key
            raise PlacesError(f"Place lookup failed for '{query_text}': {type(e).__name__}") from e

        try:
            return response.json()
        except ValueError as e:
            raise PlacesError(f"Place lookup for '{query_text}' returned invalid JSON") from e

    def photo_url(self, photo_reference: str) -> str:
        return (
            f"{PLACES_BASE_URL}/photo?maxwidth={PHOTO_MAX_WIDTH}"
            f"&photoreference={photo_reference}&key={self.api_key}"
        )
