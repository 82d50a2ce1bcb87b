"""Maps an ItemKind to the catalog call that serves it.

Listing and searching share the same page loop (see paging.collect_pages); this
module only decides which endpoint feeds it and which slice of a search
response belongs to the requested kind.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from .client import SpotifyClient
from .models import ItemKind, Page, Paging, SearchResponse, SearchType
from .paging import PageFetch, collect_pages

logger = logging.getLogger(__name__)

ListCall = Callable[[SpotifyClient, Optional[str], Page], Awaitable[Paging[Any]]]
SearchSlice = Callable[[SearchResponse], Optional[Paging[Any]]]


async def _list_categories(client: SpotifyClient, parent_id: Optional[str], page: Page) -> Paging[Any]:
    return await client.get_all_categories(page)


async def _list_category_playlists(client: SpotifyClient, parent_id: Optional[str], page: Page) -> Paging[Any]:
    return await client.get_category_playlists(parent_id or "", page)


LIST_STRATEGIES: Dict[ItemKind, ListCall] = {
    ItemKind.CATEGORY: _list_categories,
    ItemKind.PLAYLIST: _list_category_playlists,
}

# Kinds whose listing is scoped to a parent category.
REQUIRES_PARENT = frozenset({ItemKind.PLAYLIST})

SEARCH_SLICES: Dict[ItemKind, SearchSlice] = {
    ItemKind.PLAYLIST: lambda response: response.playlists,
    ItemKind.ALBUM: lambda response: response.albums,
    ItemKind.SHOW: lambda response: response.shows,
}


def _as_kind(kind: Any) -> Optional[ItemKind]:
    try:
        return ItemKind(kind)
    except ValueError:
        return None


class ResourceDispatcher:
    def __init__(self, client: SpotifyClient):
        self.client = client

    def list_fetch(self, kind: ItemKind, parent_id: Optional[str] = None) -> Optional[PageFetch]:
        kind = _as_kind(kind)
        call = LIST_STRATEGIES.get(kind)
        if call is None:
            return None
        if kind in REQUIRES_PARENT and not str(parent_id or "").strip():
            raise ValueError(f"Listing {kind.value} items requires a parent id")

        async def fetch(page: Page) -> Optional[Paging[Any]]:
            return await call(self.client, parent_id, page)

        return fetch

    def search_fetch(self, kind: ItemKind, query: str) -> Optional[PageFetch]:
        kind = _as_kind(kind)
        extract = SEARCH_SLICES.get(kind)
        if extract is None:
            return None
        search_type = SearchType.for_kind(kind)

        async def fetch(page: Page) -> Optional[Paging[Any]]:
            response = await self.client.search_for_item(query, search_type, page)
            return extract(response)

        return fetch

    async def list(self, kind: ItemKind, parent_id: Optional[str] = None) -> List[Any]:
        fetch = self.list_fetch(kind, parent_id)
        if fetch is None:
            logger.debug("No list endpoint for %s; returning no results", kind)
            return []
        return await collect_pages(fetch)

    async def search(self, kind: ItemKind, query: str) -> List[Any]:
        fetch = self.search_fetch(kind, query)
        if fetch is None:
            logger.debug("No search slice for %s; returning no results", kind)
            return []
        return await collect_pages(fetch)
