import logging
import urllib.parse
import webbrowser
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


def redirect_uri_from(uri: str) -> str:
    """Scheme, authority and path of uri; query string and fragment are dropped."""

    parts = urllib.parse.urlsplit(str(uri or "").strip())
    return urllib.parse.urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


class Navigator(ABC):
    @abstractmethod
    def current_uri(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def navigate_to(self, uri: str, force_reload: bool = False) -> None:
        raise NotImplementedError


class ConsoleNavigator(Navigator):
    """Terminal stand-in for the browser location bar.

    Off-site URLs (the Spotify authorize page) are opened in the default browser.
    The callback URL comes back through set_current_uri(), usually pasted by the user.
    """

    def __init__(self, start_uri: str, *, open_browser: bool = True):
        self._uri = str(start_uri or "").strip()
        self.open_browser = open_browser

    def current_uri(self) -> str:
        return self._uri

    def set_current_uri(self, uri: str) -> None:
        self._uri = str(uri or "").strip()

    def navigate_to(self, uri: str, force_reload: bool = False) -> None:
        here = urllib.parse.urlsplit(self._uri)
        there = urllib.parse.urlsplit(uri)
        external = (there.scheme, there.netloc) != (here.scheme, here.netloc)

        self._uri = uri
        if external and self.open_browser:
            try:
                webbrowser.open(uri)
            except webbrowser.Error as e:
                logger.warning("Could not open browser: %s", e)
        logger.debug("Navigated to %s (force_reload=%s)", redirect_uri_from(uri), force_reload)
