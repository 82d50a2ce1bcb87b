class SpotifyAuthError(RuntimeError):
    """Code-for-token exchange failed, or a catalog call was attempted while logged out."""


class SpotifyAPIError(RuntimeError):
    """A Spotify Web API catalog request failed."""

    def __init__(self, message: str, *, status_code: int = 0):
        super().__init__(message)
        self.status_code = status_code
