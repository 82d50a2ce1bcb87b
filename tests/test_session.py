import unittest

from fakes import (
    REDIRECT,
    FailingStore,
    RecordingNavigator,
    RecordingStore,
    StubAuthClient,
    StubCatalogClient,
)

from spotify_provider.exceptions import SpotifyAuthError
from spotify_provider.models import AccessToken
from spotify_provider.session import AuthSession, CellState, SessionState, TokenCell
from spotify_provider.token_store import CODE_VERIFIER_KEY, TOKEN_KEY

NOW = 1_700_000_000.0


def make_session(store=None, auth=None, navigator=None):
    store = store if store is not None else RecordingStore()
    auth = auth or StubAuthClient()
    navigator = navigator or RecordingNavigator()
    catalog = StubCatalogClient()
    session = AuthSession(auth, store, navigator, catalog, clock=lambda: NOW)
    return session, store, auth, navigator, catalog


class TestTokenCell(unittest.TestCase):
    def test_starts_unloaded(self):
        cell = TokenCell()
        self.assertEqual(cell.state, CellState.UNLOADED)
        self.assertIsNone(cell.token)

    def test_hydrate_once(self):
        cell = TokenCell()
        cell.hydrate(None)
        self.assertEqual(cell.state, CellState.ABSENT)
        with self.assertRaises(RuntimeError):
            cell.hydrate(AccessToken("T", NOW))

    def test_set_and_clear(self):
        cell = TokenCell()
        cell.set(AccessToken("T", NOW))
        self.assertEqual(cell.state, CellState.PRESENT)
        cell.clear()
        self.assertEqual(cell.state, CellState.ABSENT)


class TestLogin(unittest.IsolatedAsyncioTestCase):
    async def test_redirect_uri_strips_query_and_fragment(self):
        session, *_ = make_session()
        self.assertEqual(session.redirect_uri, REDIRECT)

    async def test_login_stores_verifier_and_navigates(self):
        session, store, auth, navigator, _ = make_session()

        await session.login()

        self.assertEqual(store.writes, [(CODE_VERIFIER_KEY, "V1")])
        self.assertEqual(navigator.calls, [("https://auth.example/authorize?x=1", False)])
        self.assertEqual(auth.build_calls, [(REDIRECT, "SpotifyProvider", None)])
        self.assertEqual(session.state, SessionState.PENDING_REDIRECT)

    async def test_login_without_authorization_url_does_not_navigate(self):
        session, _, _, navigator, _ = make_session(auth=StubAuthClient(auth_uri=None))

        await session.login()

        self.assertEqual(navigator.calls, [])
        self.assertEqual(session.state, SessionState.LOGGED_OUT)


class TestLogout(unittest.IsolatedAsyncioTestCase):
    async def test_logout_twice_is_idempotent(self):
        token = AccessToken("T", NOW + 60).to_dict()
        session, store, _, navigator, catalog = make_session(store=RecordingStore({TOKEN_KEY: token}))
        self.assertTrue(await session.check_session_async())

        await session.logout()
        self.assertFalse(session.is_logged_in)
        await session.logout()
        self.assertFalse(session.is_logged_in)

        self.assertEqual(store.writes, [(TOKEN_KEY, None), (TOKEN_KEY, None)])
        self.assertEqual(navigator.calls, [(REDIRECT, True), (REDIRECT, True)])
        self.assertIsNone(catalog.token)


class TestCheckSession(unittest.IsolatedAsyncioTestCase):
    async def test_no_token_returns_false(self):
        session, store, _, navigator, _ = make_session()
        self.assertFalse(await session.check_session_async())
        self.assertEqual(store.writes, [])
        self.assertEqual(navigator.calls, [])

    async def test_valid_token_is_attached(self):
        stored = AccessToken("T1", NOW + 3600)
        session, _, _, _, catalog = make_session(store=RecordingStore({TOKEN_KEY: stored.to_dict()}))

        self.assertTrue(await session.check_session_async())
        self.assertTrue(session.is_logged_in)
        self.assertEqual(catalog.token, stored)

    async def test_expired_token_forces_logout(self):
        for expiration in (NOW, NOW - 1):
            stored = AccessToken("T1", expiration)
            session, store, _, navigator, catalog = make_session(store=RecordingStore({TOKEN_KEY: stored.to_dict()}))

            self.assertFalse(await session.check_session_async())
            self.assertFalse(session.is_logged_in)
            self.assertEqual(store.writes, [(TOKEN_KEY, None)])
            self.assertEqual(navigator.calls, [(REDIRECT, True)])
            self.assertNotIn(stored, catalog.tokens)

            # Stays logged out on later checks.
            self.assertFalse(await session.check_session_async())
            self.assertFalse(session.is_logged_in)

    async def test_store_is_read_once(self):
        session, store, _, _, _ = make_session()
        await session.check_session_async()
        await session.check_session_async()
        self.assertEqual(store.reads, [TOKEN_KEY])

    async def test_storage_failure_propagates(self):
        session, *_ = make_session(store=FailingStore())
        with self.assertRaises(OSError):
            await session.check_session_async()


class TestHandleCallback(unittest.IsolatedAsyncioTestCase):
    async def test_without_code_behaves_like_check_session(self):
        stored = AccessToken("T1", NOW + 3600).to_dict()
        first, first_store, first_auth, first_nav, _ = make_session(store=RecordingStore({TOKEN_KEY: stored}))
        second, second_store, second_auth, second_nav, _ = make_session(store=RecordingStore({TOKEN_KEY: stored}))

        self.assertEqual(await first.handle_callback_async(None), await second.check_session_async())
        self.assertEqual(first_store.writes, second_store.writes)
        self.assertEqual(first_store.reads, second_store.reads)
        self.assertEqual(first_nav.calls, second_nav.calls)
        self.assertEqual(first_auth.exchange_calls, [])

    async def test_code_is_exchanged_and_persisted(self):
        token = AccessToken("T1", NOW + 3600)
        auth = StubAuthClient(token=token)
        navigator = RecordingNavigator(REDIRECT + "?code=CODE1&state=SpotifyProvider")
        store = RecordingStore({CODE_VERIFIER_KEY: "V1"})
        session, _, _, _, catalog = make_session(store=store, auth=auth, navigator=navigator)

        self.assertTrue(await session.handle_callback_async("CODE1"))

        self.assertEqual(
            auth.exchange_calls,
            [(REDIRECT + "?code=CODE1&state=SpotifyProvider", REDIRECT, "SpotifyProvider", "V1")],
        )
        self.assertEqual(store.writes, [(TOKEN_KEY, token.to_dict())])
        self.assertEqual(store.writes[0][1]["value"], "T1")
        self.assertEqual(navigator.calls, [(REDIRECT, False)])
        self.assertEqual(session.state, SessionState.LOGGED_IN)
        self.assertEqual(catalog.token, token)

    async def test_exchange_failure_propagates(self):
        auth = StubAuthClient(error=SpotifyAuthError("invalid_grant"))
        session, store, _, navigator, _ = make_session(auth=auth)
        await session.login()
        self.assertEqual(session.state, SessionState.PENDING_REDIRECT)

        with self.assertRaises(SpotifyAuthError):
            await session.handle_callback_async("CODE1")

        self.assertEqual(auth.exchange_calls[0][3], "V1")
        self.assertFalse(session.is_logged_in)
        self.assertEqual(session.state, SessionState.LOGGED_OUT)
        self.assertEqual(store.writes, [(CODE_VERIFIER_KEY, "V1")])
        self.assertEqual(navigator.calls, [("https://auth.example/authorize?x=1", False)])

    async def test_token_already_expired_after_exchange(self):
        auth = StubAuthClient(token=AccessToken("T1", NOW - 5))
        session, store, _, navigator, _ = make_session(store=RecordingStore({CODE_VERIFIER_KEY: "V1"}), auth=auth)

        self.assertFalse(await session.handle_callback_async("CODE1"))
        self.assertFalse(session.is_logged_in)
        self.assertEqual(store.writes[-1], (TOKEN_KEY, None))
        self.assertEqual(navigator.calls, [(REDIRECT, False), (REDIRECT, True)])


if __name__ == "__main__":
    unittest.main(verbosity=2)
