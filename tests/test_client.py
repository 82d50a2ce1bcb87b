import unittest

import fakes  # noqa: F401
import httpx

from spotify_provider.client import SpotifyClient
from spotify_provider.exceptions import SpotifyAPIError
from spotify_provider.models import AccessToken, Category, Page, SearchType


def catalog_client(handler, token=AccessToken("T1", 9999999999.0)):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = SpotifyClient(http_client=http_client)
    client.set_token(token)
    return client, http_client


class TestSpotifyClient(unittest.IsolatedAsyncioTestCase):
    async def test_categories_request_and_parse(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(
                200,
                json={
                    "categories": {
                        "items": [{"id": "pop", "name": "Pop", "icons": [{"url": "https://i/pop.png"}]}],
                        "total": 1,
                        "limit": 50,
                        "offset": 0,
                    }
                },
            )

        client, http_client = catalog_client(handler)
        async with http_client:
            paging = await client.get_all_categories(Page(limit=50, offset=0))

        self.assertEqual(seen["path"], "/v1/browse/categories")
        self.assertEqual(seen["params"], {"limit": "50", "offset": "0"})
        self.assertEqual(seen["auth"], "Bearer T1")
        self.assertEqual(paging.items, [Category(id="pop", name="Pop", image_url="https://i/pop.png")])
        self.assertEqual(paging.count, 1)

    async def test_category_playlists_skip_null_entries(self):
        def handler(request):
            self.assertEqual(request.url.path, "/v1/browse/categories/pop/playlists")
            return httpx.Response(
                200,
                json={"playlists": {"items": [None, {"id": "p1", "name": "Hits", "owner": {"display_name": "Spotify"}}], "total": 2}},
            )

        client, http_client = catalog_client(handler)
        async with http_client:
            paging = await client.get_category_playlists("pop", Page(limit=50, offset=50))

        self.assertEqual([p.id for p in paging.items], ["p1"])
        self.assertEqual(paging.items[0].owner, "Spotify")
        self.assertEqual(paging.count, 2)

    async def test_search_sends_type_flags(self):
        seen = {}

        def handler(request):
            seen["params"] = dict(request.url.params)
            return httpx.Response(
                200,
                json={"albums": {"items": [{"id": "a1", "name": "Blue", "artists": [{"name": "Joni"}]}], "total": 1}},
            )

        client, http_client = catalog_client(handler)
        async with http_client:
            response = await client.search_for_item("blue", SearchType(album=True), Page(limit=50))

        self.assertEqual(seen["params"], {"q": "blue", "type": "album", "limit": "50", "offset": "0"})
        self.assertIsNone(response.playlists)
        self.assertEqual(response.albums.items[0].artists, "Joni")

    async def test_current_user(self):
        client, http_client = catalog_client(lambda request: httpx.Response(200, json={"id": "u1", "display_name": "Ann"}))
        async with http_client:
            user = await client.get_user_profile()
        self.assertEqual((user.id, user.display_name), ("u1", "Ann"))

    async def test_http_error_raises(self):
        client, http_client = catalog_client(lambda request: httpx.Response(401, text="expired"))
        async with http_client:
            with self.assertRaises(SpotifyAPIError) as ctx:
                await client.get_all_categories(Page(limit=50))
        self.assertEqual(ctx.exception.status_code, 401)

    async def test_no_token_raises_without_request(self):
        calls = []
        client, http_client = catalog_client(lambda request: calls.append(request), token=None)
        async with http_client:
            with self.assertRaises(SpotifyAPIError):
                await client.get_user_profile()
        self.assertEqual(calls, [])


if __name__ == "__main__":
    unittest.main(verbosity=2)
