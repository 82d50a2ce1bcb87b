import logging
from typing import Any, Dict, List, Optional

import httpx

from .auth import SPOTIFY_ACCOUNTS_BASE_URL, SpotifyAuthClient
from .client import SPOTIFY_API_BASE_URL, SpotifyClient
from .dispatch import ResourceDispatcher
from .exceptions import SpotifyAuthError
from .models import ItemKind, PrivateUser
from .navigation import ConsoleNavigator, Navigator
from .session import DEFAULT_STATE, AuthSession, SessionState
from .token_store import DEFAULT_STORE_PATH, JsonFileTokenStore, TokenStore

logger = logging.getLogger(__name__)


class SpotifyProvider:
    """Entry point for the UI: login/logout, session checks, and capped catalog listing/search."""

    def __init__(
        self,
        auth_client: SpotifyAuthClient,
        catalog_client: SpotifyClient,
        store: TokenStore,
        navigator: Navigator,
        *,
        state: str = DEFAULT_STATE,
        session: Optional[AuthSession] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.catalog_client = catalog_client
        self.session = session or AuthSession(auth_client, store, navigator, catalog_client, state=state)
        self.dispatcher = ResourceDispatcher(catalog_client)
        self._http_client = http_client

    @classmethod
    def from_config(cls, config: Dict[str, Any], *, navigator: Optional[Navigator] = None) -> "SpotifyProvider":
        config = config or {}
        timeout = float(config.get("spotify_timeout", 30))
        http_client = httpx.AsyncClient(timeout=timeout, follow_redirects=False)

        auth_client = SpotifyAuthClient(
            str(config.get("spotify_client_id", "")),
            accounts_base_url=str(config.get("spotify_accounts_base_url") or SPOTIFY_ACCOUNTS_BASE_URL),
            timeout=timeout,
            http_client=http_client,
        )
        catalog_client = SpotifyClient(
            api_base_url=str(config.get("spotify_api_base_url") or SPOTIFY_API_BASE_URL),
            timeout=timeout,
            http_client=http_client,
        )
        store = JsonFileTokenStore(str(config.get("token_store_path") or DEFAULT_STORE_PATH))
        navigator = navigator or ConsoleNavigator(str(config.get("spotify_redirect_uri", "")))

        return cls(
            auth_client,
            catalog_client,
            store,
            navigator,
            state=str(config.get("spotify_state") or DEFAULT_STATE),
            http_client=http_client,
        )

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()

    # -----------------
    # Session
    # -----------------

    @property
    def is_logged_in(self) -> bool:
        return self.session.is_logged_in

    @property
    def state(self) -> SessionState:
        return self.session.state

    @property
    def redirect_uri(self) -> str:
        return self.session.redirect_uri

    async def login(self) -> None:
        await self.session.login()

    async def logout(self) -> None:
        await self.session.logout()

    async def check_session_async(self) -> bool:
        return await self.session.check_session_async()

    async def handle_callback_async(self, code: Optional[str] = None) -> bool:
        return await self.session.handle_callback_async(code)

    async def _require_session(self) -> None:
        if not await self.session.check_session_async():
            raise SpotifyAuthError("Not logged in to Spotify.")

    # -----------------
    # Catalog
    # -----------------

    async def get_current_user_async(self) -> PrivateUser:
        await self._require_session()
        return await self.catalog_client.get_user_profile()

    async def list_async(self, kind: ItemKind, parent_id: Optional[str] = None) -> List[Any]:
        await self._require_session()
        return await self.dispatcher.list(kind, parent_id)

    async def search_async(self, kind: ItemKind, query: str) -> List[Any]:
        await self._require_session()
        return await self.dispatcher.search(kind, query)
