"""Login state for the Authorization Code + PKCE flow.

The flow spans a full browser redirect, so the code verifier is handed to the
token store before leaving and read back when the callback arrives. The access
token lives in a TokenCell that is hydrated from the store at most once.
"""

import logging
import time
from enum import Enum
from typing import Callable, Optional

from .auth import SpotifyAuthClient
from .client import SpotifyClient
from .models import AccessToken
from .navigation import Navigator, redirect_uri_from
from .token_store import CODE_VERIFIER_KEY, TOKEN_KEY, TokenStore

logger = logging.getLogger(__name__)

DEFAULT_STATE = "SpotifyProvider"


class CellState(str, Enum):
    UNLOADED = "unloaded"
    ABSENT = "absent"
    PRESENT = "present"


class TokenCell:
    """In-memory access token: not yet read from the store, known absent, or held."""

    def __init__(self):
        self.state = CellState.UNLOADED
        self._token: Optional[AccessToken] = None

    @property
    def token(self) -> Optional[AccessToken]:
        return self._token

    @property
    def loaded(self) -> bool:
        return self.state is not CellState.UNLOADED

    def hydrate(self, token: Optional[AccessToken]) -> None:
        if self.loaded:
            raise RuntimeError("TokenCell was already hydrated")
        self.set(token)

    def set(self, token: Optional[AccessToken]) -> None:
        self._token = token
        self.state = CellState.PRESENT if token is not None else CellState.ABSENT

    def clear(self) -> None:
        self.set(None)


class SessionState(str, Enum):
    LOGGED_OUT = "logged_out"
    PENDING_REDIRECT = "pending_redirect"
    LOGGED_IN = "logged_in"


class AuthSession:
    def __init__(
        self,
        auth_client: SpotifyAuthClient,
        store: TokenStore,
        navigator: Navigator,
        catalog_client: SpotifyClient,
        *,
        state: str = DEFAULT_STATE,
        clock: Callable[[], float] = time.time,
    ):
        self.auth_client = auth_client
        self.store = store
        self.navigator = navigator
        self.catalog_client = catalog_client
        self.oauth_state = state
        self.clock = clock
        self.cell = TokenCell()
        self._pending_redirect = False
        # Fixed for the lifetime of the session.
        self.redirect_uri = redirect_uri_from(navigator.current_uri())

    @property
    def is_logged_in(self) -> bool:
        return self.cell.token is not None

    @property
    def state(self) -> SessionState:
        if self.is_logged_in:
            return SessionState.LOGGED_IN
        if self._pending_redirect:
            return SessionState.PENDING_REDIRECT
        return SessionState.LOGGED_OUT

    async def login(self) -> None:
        auth_uri, verifier = self.auth_client.build_authorization_uri(self.redirect_uri, self.oauth_state, None)
        await self.store.set_item(CODE_VERIFIER_KEY, verifier)
        if auth_uri is None:
            logger.warning("Spotify login unavailable: no authorization URL was produced")
            return

        self._pending_redirect = True
        logger.info("Redirecting to Spotify for authorization")
        self.navigator.navigate_to(auth_uri)

    async def logout(self) -> None:
        self.cell.clear()
        self._pending_redirect = False
        self.catalog_client.set_token(None)
        await self.store.set_item(TOKEN_KEY, None)
        logger.info("Logged out of Spotify")
        self.navigator.navigate_to(self.redirect_uri, force_reload=True)

    async def check_session_async(self) -> bool:
        if not self.cell.loaded:
            self.cell.hydrate(AccessToken.from_dict(await self.store.get_item(TOKEN_KEY)))

        token = self.cell.token
        if token is None:
            return False

        if token.is_expired(self.clock()):
            logger.info("Spotify access token expired; logging out")
            await self.logout()
            return False

        self.catalog_client.set_token(token)
        return True

    async def handle_callback_async(self, code: Optional[str] = None) -> bool:
        """Finish a login when the page was loaded with ?code=...; otherwise just check the session.

        Exchange failures propagate; the authorization code cannot be reused.
        """

        if code is not None:
            # Win or lose, this code has been spent; the redirect is no longer pending.
            self._pending_redirect = False
            verifier = await self.store.get_item(CODE_VERIFIER_KEY)
            token = await self.auth_client.exchange_code_for_token(
                self.navigator.current_uri(),
                self.redirect_uri,
                self.oauth_state,
                verifier,
            )
            self.cell.set(token)
            await self.store.set_item(TOKEN_KEY, token.to_dict())
            logger.info("Spotify authorization complete")
            self.navigator.navigate_to(self.redirect_uri)

        return await self.check_session_async()
