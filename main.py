import asyncio
import json

from config import load_config, validate_config
from menus.provider_menu import provider_menu
from spotify_provider import SpotifyProvider
from utils.logger import log_error, log_warning, setup_logging


async def run(config: dict) -> None:
    provider = SpotifyProvider.from_config(config)
    try:
        await provider_menu(provider)
    finally:
        await provider.aclose()


if __name__ == "__main__":
    setup_logging()

    try:
        config = load_config()
    except FileNotFoundError as e:
        log_error(f"Config file not found: {e}")
        log_error("Please create config.json with required settings.")
        exit(1)
    except json.JSONDecodeError as e:
        log_error(f"Config file contains invalid JSON: {e}")
        exit(1)

    setup_logging(config.get("log_level", "INFO"))

    is_valid, errors = validate_config(config)
    if not is_valid:
        for err in errors:
            log_error(err)
        exit(1)

    if not str(config.get("spotify_client_id", "")).strip():
        log_warning("spotify_client_id is not set; login will not be available.")

    asyncio.run(run(config))
