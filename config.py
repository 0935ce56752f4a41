import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from api_client import DEFAULT_TIMEOUT
from errors import ConfigError

DEFAULT_SETTINGS_PATH = os.path.join("~", ".pocket", "settings.json")


@dataclass
class PocketConfig:
    consumer_key: Optional[str]
    settings_path: str
    timeout: float = DEFAULT_TIMEOUT


def load_config(dotenv: bool = True) -> PocketConfig:
    """Read POCKET_* variables from the environment (and .env when present)."""
    if dotenv:
        load_dotenv()

    consumer_key = os.getenv("POCKET_CONSUMER_KEY")
    if consumer_key is not None and consumer_key.strip() == "":
        consumer_key = None

    settings_path = os.path.expanduser(
        os.getenv("POCKET_SETTINGS_PATH") or DEFAULT_SETTINGS_PATH
    )

    raw_timeout = os.getenv("POCKET_TIMEOUT")
    timeout = DEFAULT_TIMEOUT
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ConfigError(f"POCKET_TIMEOUT must be a number, got '{raw_timeout}'")
        if timeout <= 0:
            raise ConfigError("POCKET_TIMEOUT must be positive")

    return PocketConfig(
        consumer_key=consumer_key,
        settings_path=settings_path,
        timeout=timeout,
    )
