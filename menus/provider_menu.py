import time

import questionary

from spotify_provider import ItemKind, SpotifyAPIError, SpotifyAuthError, SpotifyProvider
from spotify_provider.auth import extract_code_from_redirect_url
from spotify_provider.navigation import ConsoleNavigator
from spotify_provider.session import SessionState
from utils.logger import log_error, log_info, log_success, log_warning

SEARCH_KINDS = {
    "Playlists": ItemKind.PLAYLIST,
    "Albums": ItemKind.ALBUM,
    "Shows / podcasts": ItemKind.SHOW,
}


def _describe(item) -> str:
    name = getattr(item, "name", "") or "(unnamed)"
    extra = (
        getattr(item, "owner", None)
        or getattr(item, "artists", None)
        or getattr(item, "publisher", None)
        or ""
    )
    return f"{name} — {extra}" if extra else name


def _print_items(title: str, items: list) -> None:
    log_info("")
    log_info(f"{title}: {len(items)} result(s)")
    for i, item in enumerate(items, start=1):
        log_info(f"  {i:3d}. {_describe(item)}")
    log_info("")


async def _login(provider: SpotifyProvider) -> None:
    await provider.login()
    if provider.state is not SessionState.PENDING_REDIRECT:
        log_warning("Spotify did not produce an authorization URL. Is spotify_client_id set in config.json?")
        return
    log_info("A browser window should open. After approving, copy the FULL redirect URL from the address bar.")
    await _complete_login(provider)


async def _complete_login(provider: SpotifyProvider) -> None:
    pasted = await questionary.text("Paste the full redirect URL (it contains ?code=...):").ask_async()
    pasted = (pasted or "").strip()
    if not pasted:
        log_warning("No redirect URL provided. Cancelling login.")
        return

    parsed = extract_code_from_redirect_url(pasted)
    if parsed.get("error"):
        log_error(f"Spotify returned an error: {parsed['error']}")
        return

    navigator = provider.session.navigator
    if isinstance(navigator, ConsoleNavigator):
        navigator.set_current_uri(pasted)

    if await provider.handle_callback_async(parsed.get("code")):
        token = provider.session.cell.token
        exp_str = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(float(token.expiration))) if token else "?"
        log_success(f"Spotify login successful. Token expires at: {exp_str}")
    else:
        log_warning("Login did not produce a usable session.")


async def _show_user(provider: SpotifyProvider) -> None:
    user = await provider.get_current_user_async()
    log_info(f"Signed in as: {user.display_name or user.id}" + (f" ({user.product})" if user.product else ""))


async def _browse_categories(provider: SpotifyProvider) -> None:
    categories = await provider.list_async(ItemKind.CATEGORY)
    if not categories:
        log_info("No categories returned.")
        return

    choices = [questionary.Choice(title=c.name or c.id, value=c.id) for c in categories]
    choices.append(questionary.Choice(title="Back", value=""))
    category_id = await questionary.select("Pick a category to list its playlists:", choices=choices).ask_async()
    if not category_id:
        return

    playlists = await provider.list_async(ItemKind.PLAYLIST, category_id)
    _print_items(f"Playlists in '{category_id}'", playlists)


async def _search(provider: SpotifyProvider) -> None:
    label = await questionary.select("Search for:", choices=list(SEARCH_KINDS.keys())).ask_async()
    if not label:
        return
    query = (await questionary.text("Search query:").ask_async() or "").strip()
    if not query:
        log_warning("Empty query.")
        return

    results = await provider.search_async(SEARCH_KINDS[label], query)
    _print_items(f"{label} matching '{query}'", results)


async def provider_menu(provider: SpotifyProvider) -> None:
    """Interactive loop; the session is checked once on entry like a fresh page load."""

    if await provider.handle_callback_async(None):
        log_info("Existing Spotify session found.")

    actions = {
        "Log in to Spotify": _login,
        "Complete login (paste redirect URL)": _complete_login,
        "Show current user": _show_user,
        "Browse categories": _browse_categories,
        "Search catalog": _search,
    }

    while True:
        status = "logged in" if provider.is_logged_in else "logged out"
        choice = await questionary.select(
            f"🎵 Spotify Menu ({status}) — What would you like to do?",
            choices=[*actions.keys(), "Check session", "Log out", "Exit"],
        ).ask_async()

        if choice in (None, "Exit"):
            log_info("Exiting program...")
            break

        try:
            if choice == "Check session":
                ok = await provider.check_session_async()
                log_info("Session is valid." if ok else "Not logged in (or the token expired).")
            elif choice == "Log out":
                await provider.logout()
                log_success("Logged out.")
            else:
                await actions[choice](provider)
        except SpotifyAuthError as e:
            log_error(f"Spotify authentication problem: {e}")
        except SpotifyAPIError as e:
            log_error(f"Spotify request failed: {e}")
        except (OSError, ValueError) as e:
            log_error(f"{choice} failed: {e}")
