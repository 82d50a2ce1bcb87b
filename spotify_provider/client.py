import json
import logging
from typing import Any, Dict, Optional

import httpx

from .exceptions import SpotifyAPIError
from .models import (
    AccessToken,
    Category,
    Page,
    Paging,
    PrivateUser,
    SearchResponse,
    SearchType,
    SimplifiedPlaylist,
)

logger = logging.getLogger(__name__)

SPOTIFY_API_BASE_URL = "https://api.spotify.com/v1"


class SpotifyClient:
    """Thin async Spotify Web API client for catalog browsing.

    The token is attached by the auth session; every method issues exactly one
    request and never retries.
    """

    def __init__(
        self,
        *,
        api_base_url: str = SPOTIFY_API_BASE_URL,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_base_url = api_base_url.rstrip("/")
        self.timeout = float(timeout)
        self.http_client = http_client
        self._token: Optional[AccessToken] = None

    # -----------------
    # Token management
    # -----------------

    def set_token(self, token: Optional[AccessToken]) -> None:
        self._token = token

    @property
    def has_token(self) -> bool:
        return self._token is not None

    # -----------------
    # HTTP helpers
    # -----------------

    async def request_json(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Make a Spotify Web API request and return parsed JSON."""

        token = self._token
        if token is None:
            raise SpotifyAPIError("No Spotify token attached to the client.")

        url = f"{self.api_base_url}{path}"
        query = {k: str(v) for k, v in (params or {}).items() if v is not None}
        headers = {
            "Authorization": f"{token.token_type} {token.value}",
            "Accept": "application/json",
        }

        own_client = self.http_client is None
        client = self.http_client or httpx.AsyncClient(timeout=self.timeout)
        try:
            resp = await client.request(method.upper(), url, params=query, headers=headers)
        except httpx.HTTPError as e:
            raise SpotifyAPIError(f"Spotify API request failed: {e}") from e
        finally:
            if own_client:
                await client.aclose()

        if resp.status_code >= 400:
            raise SpotifyAPIError(f"Spotify API error {resp.status_code}: {resp.text}", status_code=resp.status_code)

        if not resp.content:
            return {}

        try:
            payload = resp.json()
        except json.JSONDecodeError as e:
            raise SpotifyAPIError(f"Spotify API response was not JSON (status {resp.status_code}): {resp.text}") from e

        return payload if isinstance(payload, dict) else {}

    @staticmethod
    def _page_params(page: Page) -> Dict[str, Any]:
        return {"limit": page.limit, "offset": page.offset}

    # -----------------
    # Catalog endpoints
    # -----------------

    async def get_user_profile(self) -> PrivateUser:
        return PrivateUser.from_payload(await self.request_json("GET", "/me"))

    async def get_all_categories(self, page: Page) -> Paging[Category]:
        payload = await self.request_json("GET", "/browse/categories", params=self._page_params(page))
        return Paging.from_payload(payload.get("categories"), Category.from_payload)

    async def get_category_playlists(self, category_id: str, page: Page) -> Paging[SimplifiedPlaylist]:
        category_id = str(category_id or "").strip()
        if not category_id:
            raise ValueError("category_id is required to list category playlists")
        payload = await self.request_json(
            "GET",
            f"/browse/categories/{category_id}/playlists",
            params=self._page_params(page),
        )
        return Paging.from_payload(payload.get("playlists"), SimplifiedPlaylist.from_payload)

    async def search_for_item(self, query: str, search_type: SearchType, page: Page) -> SearchResponse:
        type_param = search_type.to_param()
        if not type_param:
            # Spotify rejects a search with no type; nothing was asked for.
            return SearchResponse()
        payload = await self.request_json(
            "GET",
            "/search",
            params={"q": query, "type": type_param, **self._page_params(page)},
        )
        return SearchResponse.from_payload(payload)
