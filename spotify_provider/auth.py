import base64
import hashlib
import json
import logging
import secrets
import urllib.parse
from typing import Any, Dict, Optional, Tuple

import httpx

from .exceptions import SpotifyAuthError
from .models import AccessToken

logger = logging.getLogger(__name__)

SPOTIFY_ACCOUNTS_BASE_URL = "https://accounts.spotify.com"


def _base64url_no_pad(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("utf-8").rstrip("=")


def generate_code_verifier() -> str:
    """Generate a PKCE code_verifier.

    RFC 7636: verifier length 43-128 chars, characters from ALPHA / DIGIT / "-" / "." / "_" / "~"
    """

    verifier = secrets.token_urlsafe(64).rstrip("=")
    verifier = verifier[:128]
    if len(verifier) < 43:
        verifier = (verifier + secrets.token_urlsafe(64)).rstrip("=")[:43]
    return verifier


def code_challenge_from_verifier(verifier: str) -> str:
    """Compute PKCE S256 code_challenge from code_verifier."""

    digest = hashlib.sha256((verifier or "").encode("utf-8")).digest()
    return _base64url_no_pad(digest)


def extract_code_from_redirect_url(redirect_url: str) -> Dict[str, str]:
    """Parse a redirect URL and return {"code": ..., "state": ...} (missing keys omitted)."""

    parsed = urllib.parse.urlparse(str(redirect_url or "").strip())
    qs = urllib.parse.parse_qs(parsed.query)
    out: Dict[str, str] = {}
    if qs.get("code"):
        out["code"] = str(qs["code"][0])
    if qs.get("state"):
        out["state"] = str(qs["state"][0])
    if qs.get("error"):
        out["error"] = str(qs["error"][0])
    return out


class SpotifyAuthClient:
    """Spotify accounts service endpoints for Authorization Code + PKCE.

    Building the authorize URL is local; only the token exchange talks to the network.
    """

    def __init__(
        self,
        client_id: str,
        *,
        accounts_base_url: str = SPOTIFY_ACCOUNTS_BASE_URL,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.client_id = str(client_id or "").strip()
        self.accounts_base_url = accounts_base_url.rstrip("/")
        self.timeout = float(timeout)
        self.http_client = http_client

    def build_authorization_uri(
        self,
        redirect_uri: str,
        state: str,
        scope: Optional[str] = None,
    ) -> Tuple[Optional[str], str]:
        """Return (authorize_url, code_verifier).

        The URL is None when no request can be built (missing client id or redirect URI);
        a fresh verifier is returned either way.
        """

        verifier = generate_code_verifier()
        redirect_uri = str(redirect_uri or "").strip()
        if not self.client_id or not redirect_uri:
            logger.warning("Cannot build Spotify authorize URL: client id or redirect URI is missing")
            return None, verifier

        params: Dict[str, str] = {
            "client_id": self.client_id,
            "response_type": "code",
            "redirect_uri": redirect_uri,
            "code_challenge_method": "S256",
            "code_challenge": code_challenge_from_verifier(verifier),
        }
        if scope:
            params["scope"] = scope
        if state:
            params["state"] = str(state)

        return f"{self.accounts_base_url}/authorize?{urllib.parse.urlencode(params)}", verifier

    async def exchange_code_for_token(
        self,
        current_uri: str,
        redirect_uri: str,
        state: str,
        code_verifier: Optional[str],
    ) -> AccessToken:
        """Exchange the code carried by current_uri (the callback URL) for an AccessToken."""

        parsed = extract_code_from_redirect_url(current_uri)
        if parsed.get("error"):
            raise SpotifyAuthError(f"Spotify returned an error: {parsed['error']}")
        code = parsed.get("code")
        if not code:
            raise SpotifyAuthError("No authorization code found in the callback URL.")
        if state and parsed.get("state") and parsed["state"] != state:
            raise SpotifyAuthError("OAuth state mismatch.")
        if not code_verifier:
            raise SpotifyAuthError("No stored code verifier; start the login again.")

        payload = await self._post_form(
            f"{self.accounts_base_url}/api/token",
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": redirect_uri,
                "client_id": self.client_id,
                "code_verifier": code_verifier,
            },
        )
        token = AccessToken.from_spotify_token_response(payload)
        if not token.value:
            raise SpotifyAuthError("Spotify token exchange failed: response has no access_token")

        return token

    async def _post_form(self, url: str, form: Dict[str, Any]) -> Dict[str, Any]:
        data = {k: str(v) for k, v in (form or {}).items() if v is not None}

        own_client = self.http_client is None
        client = self.http_client or httpx.AsyncClient(timeout=self.timeout, follow_redirects=False)
        try:
            resp = await client.post(
                url,
                data=data,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except httpx.HTTPError as e:
            raise SpotifyAuthError(f"Spotify token request failed: {e}") from e
        finally:
            if own_client:
                await client.aclose()

        if resp.status_code >= 400:
            raise SpotifyAuthError(f"Spotify token request failed (HTTP {resp.status_code}): {resp.text}")

        try:
            payload = resp.json()
        except json.JSONDecodeError as e:
            raise SpotifyAuthError(f"Spotify token response was not JSON: {resp.text}") from e

        if not isinstance(payload, dict):
            raise SpotifyAuthError(f"Spotify token response was not an object: {payload}")

        return payload
