"""Spotify catalog provider (OAuth Authorization Code + PKCE).

Login spans a browser redirect; the code verifier and access token are kept in
an async key/value store so the callback can finish the exchange. Catalog
listing and search walk pages of 50 and stop at 100 results.
"""

from .auth import SpotifyAuthClient
from .client import SpotifyClient
from .exceptions import SpotifyAPIError, SpotifyAuthError
from .models import AccessToken, ItemKind, Page, Paging, SearchType
from .navigation import ConsoleNavigator, Navigator
from .paging import collect_pages
from .provider import SpotifyProvider
from .session import AuthSession
from .token_store import JsonFileTokenStore, MemoryTokenStore, TokenStore

__all__ = [
    "AccessToken",
    "AuthSession",
    "ConsoleNavigator",
    "ItemKind",
    "JsonFileTokenStore",
    "MemoryTokenStore",
    "Navigator",
    "Page",
    "Paging",
    "SearchType",
    "SpotifyAPIError",
    "SpotifyAuthClient",
    "SpotifyAuthError",
    "SpotifyClient",
    "SpotifyProvider",
    "TokenStore",
    "collect_pages",
]
