#!/usr/bin/env python3
"""
Pocket Add Tool
Saves a URL to the Pocket account whose access token is in the settings store.
"""

import sys
import logging
from typing import Optional

from api_client import PocketAPIClient
from config import load_config
from errors import PocketError
from pocket_client import CONSUMER_KEY_SETTING, PocketClient
from storage import JSONSettingsStore

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def setup_client() -> Optional[PocketClient]:
    """
    Build a PocketClient from the environment.

    The consumer key from POCKET_CONSUMER_KEY is written to the settings
    store so the client picks it up on construction.
    """
    config = load_config()
    if not config.consumer_key:
        logger.error("POCKET_CONSUMER_KEY is not set")
        return None

    store = JSONSettingsStore(config.settings_path)
    if store.get_string(CONSUMER_KEY_SETTING) != config.consumer_key:
        store.update({CONSUMER_KEY_SETTING: config.consumer_key})

    return PocketClient(store, PocketAPIClient(timeout=config.timeout))


def add_url(url: str, title: str = "", tags: str = "") -> int:
    """Add url and report the outcome. Returns the process exit status."""
    try:
        client = setup_client()
    except PocketError as e:
        logger.error(f"❌ Configuration error: {e}")
        return 1
    if not client:
        logger.error("Failed to create Pocket client. Exiting.")
        return 1

    tag_list = [t.strip() for t in tags.split(",") if t.strip()] if tags else []
    with client:
        try:
            item = client.add(url, title=title, tags=tag_list)
        except PocketError as e:
            logger.error(f"❌ Failed to add {url}: {e}")
            return 1

    if item.is_empty:
        logger.warning("⚠️  Pocket accepted the request but returned no item id")
    else:
        print(f"✅ Saved {url} (item {item.item_id})")
    return 0


def main():
    import argparse
    parser = argparse.ArgumentParser(description="Pocket Add Tool")
    parser.add_argument("url", help="URL to save")
    parser.add_argument("--title", default="", help="Item title")
    parser.add_argument("--tags", default="", help="Comma separated tags")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    args = parser.parse_args()
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    sys.exit(add_url(args.url, title=args.title, tags=args.tags))


if __name__ == "__main__":
    main()
