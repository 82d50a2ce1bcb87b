import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class AccessToken:
    """Bearer credential plus the absolute time (epoch seconds) it stops being valid."""

    value: str
    expiration: float
    token_type: str = "Bearer"

    @staticmethod
    def from_spotify_token_response(payload: Dict[str, Any], *, now: Optional[float] = None) -> "AccessToken":
        """Convert Spotify token response JSON into AccessToken.

        Spotify returns:
        - access_token
        - token_type
        - expires_in (seconds)
        - refresh_token (ignored; expiry forces a new login)
        - scope
        """

        now_ts = float(time.time() if now is None else now)
        expires_in = float(payload.get("expires_in", 0))

        return AccessToken(
            value=str(payload.get("access_token", "")),
            expiration=now_ts + expires_in,
            token_type=str(payload.get("token_type", "Bearer")),
        )

    @staticmethod
    def from_dict(data: Any) -> Optional["AccessToken"]:
        if not isinstance(data, dict) or not data.get("value"):
            return None
        return AccessToken(
            value=str(data["value"]),
            expiration=float(data.get("expiration") or 0),
            token_type=str(data.get("token_type", "Bearer")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "value": self.value,
            "expiration": self.expiration,
            "token_type": self.token_type,
        }

    def is_expired(self, now: float) -> bool:
        return float(self.expiration) <= float(now)


@dataclass
class Page:
    limit: int
    offset: int = 0


@dataclass
class Paging(Generic[T]):
    """One slice of a remote collection: {items, total, limit, offset}."""

    items: List[T] = field(default_factory=list)
    total: int = 0
    limit: int = 0
    offset: int = 0
    # Entries the server sent for this page, including null ones that were dropped.
    returned: Optional[int] = None

    @property
    def count(self) -> int:
        return len(self.items) if self.returned is None else self.returned

    @staticmethod
    def from_payload(payload: Any, parse_item: Callable[[Dict[str, Any]], T]) -> "Paging[T]":
        payload = payload if isinstance(payload, dict) else {}
        raw_items = payload.get("items") or []
        if not isinstance(raw_items, list):
            raw_items = []
        items = [parse_item(x) for x in raw_items if isinstance(x, dict)]
        return Paging(
            items=items,
            total=int(payload.get("total") or 0),
            limit=int(payload.get("limit") or 0),
            offset=int(payload.get("offset") or 0),
            returned=len(raw_items),
        )


class ItemKind(str, Enum):
    CATEGORY = "category"
    PLAYLIST = "playlist"
    ALBUM = "album"
    SHOW = "show"


@dataclass(frozen=True)
class SearchType:
    """Which sub-resources a single /search call should return."""

    playlist: bool = False
    album: bool = False
    show: bool = False

    @staticmethod
    def for_kind(kind: ItemKind) -> "SearchType":
        return SearchType(
            playlist=kind is ItemKind.PLAYLIST,
            album=kind is ItemKind.ALBUM,
            show=kind is ItemKind.SHOW,
        )

    def to_param(self) -> str:
        flags = [("playlist", self.playlist), ("album", self.album), ("show", self.show)]
        return ",".join(name for name, enabled in flags if enabled)


def _image_url(obj: Dict[str, Any]) -> Optional[str]:
    images = obj.get("images") or obj.get("icons") or []
    if isinstance(images, list) and images and isinstance(images[0], dict):
        return images[0].get("url")
    return None


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    image_url: Optional[str] = None

    @staticmethod
    def from_payload(obj: Dict[str, Any]) -> "Category":
        return Category(id=str(obj.get("id") or ""), name=str(obj.get("name") or ""), image_url=_image_url(obj))


@dataclass(frozen=True)
class SimplifiedPlaylist:
    id: str
    name: str
    owner: Optional[str] = None
    tracks_total: Optional[int] = None
    uri: Optional[str] = None
    image_url: Optional[str] = None

    @staticmethod
    def from_payload(obj: Dict[str, Any]) -> "SimplifiedPlaylist":
        owner = obj.get("owner")
        tracks = obj.get("tracks")
        return SimplifiedPlaylist(
            id=str(obj.get("id") or ""),
            name=str(obj.get("name") or ""),
            owner=(owner.get("display_name") if isinstance(owner, dict) else None),
            tracks_total=(tracks.get("total") if isinstance(tracks, dict) else None),
            uri=obj.get("uri"),
            image_url=_image_url(obj),
        )


@dataclass(frozen=True)
class Album:
    id: str
    name: str
    artists: str = ""
    release_date: Optional[str] = None
    uri: Optional[str] = None
    image_url: Optional[str] = None

    @staticmethod
    def from_payload(obj: Dict[str, Any]) -> "Album":
        artists = obj.get("artists")
        names = []
        if isinstance(artists, list):
            names = [str(a.get("name")).strip() for a in artists if isinstance(a, dict) and a.get("name")]
        return Album(
            id=str(obj.get("id") or ""),
            name=str(obj.get("name") or ""),
            artists=", ".join(names),
            release_date=obj.get("release_date"),
            uri=obj.get("uri"),
            image_url=_image_url(obj),
        )


@dataclass(frozen=True)
class SimplifiedShow:
    id: str
    name: str
    publisher: Optional[str] = None
    description: Optional[str] = None
    uri: Optional[str] = None
    image_url: Optional[str] = None

    @staticmethod
    def from_payload(obj: Dict[str, Any]) -> "SimplifiedShow":
        return SimplifiedShow(
            id=str(obj.get("id") or ""),
            name=str(obj.get("name") or ""),
            publisher=obj.get("publisher"),
            description=obj.get("description"),
            uri=obj.get("uri"),
            image_url=_image_url(obj),
        )


@dataclass(frozen=True)
class PrivateUser:
    id: str
    display_name: Optional[str] = None
    email: Optional[str] = None
    country: Optional[str] = None
    product: Optional[str] = None

    @staticmethod
    def from_payload(obj: Any) -> "PrivateUser":
        obj = obj if isinstance(obj, dict) else {}
        return PrivateUser(
            id=str(obj.get("id") or ""),
            display_name=obj.get("display_name"),
            email=obj.get("email"),
            country=obj.get("country"),
            product=obj.get("product"),
        )


@dataclass
class SearchResponse:
    """Heterogeneous /search envelope; only the requested kinds are populated."""

    playlists: Optional[Paging[SimplifiedPlaylist]] = None
    albums: Optional[Paging[Album]] = None
    shows: Optional[Paging[SimplifiedShow]] = None

    @staticmethod
    def from_payload(payload: Any) -> "SearchResponse":
        payload = payload if isinstance(payload, dict) else {}
        out = SearchResponse()
        if isinstance(payload.get("playlists"), dict):
            out.playlists = Paging.from_payload(payload["playlists"], SimplifiedPlaylist.from_payload)
        if isinstance(payload.get("albums"), dict):
            out.albums = Paging.from_payload(payload["albums"], Album.from_payload)
        if isinstance(payload.get("shows"), dict):
            out.shows = Paging.from_payload(payload["shows"], SimplifiedShow.from_payload)
        return out
