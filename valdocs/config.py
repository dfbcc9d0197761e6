# Runtime options for the Jötunn docs cache.
# Defaults point at the public Jötunn data pages; every value can be
# overridden from the environment (or a .env file next to the process).

import os
from dataclasses import dataclass, field
from datetime import timedelta

from dotenv import load_dotenv

JOTUNN_BASE = "https://valheim-modding.github.io/Jotunn/data"

DEFAULT_ITEMS_URL = f"{JOTUNN_BASE}/objects/item-list.html"
DEFAULT_RECIPES_URL = f"{JOTUNN_BASE}/objects/recipe-list.html"
DEFAULT_PREFABS_URL = f"{JOTUNN_BASE}/prefabs/prefab-list.html"
DEFAULT_PIECES_URL = f"{JOTUNN_BASE}/pieces/piece-list.html"
DEFAULT_CHARACTERS_URL = f"{JOTUNN_BASE}/prefabs/character-list.html"

DEFAULT_EXPIRY = timedelta(hours=24)
DEFAULT_POLL_INTERVAL = timedelta(minutes=30)
DEFAULT_TIMEOUT_SECONDS = 12.0
DEFAULT_USER_AGENT = "ValDocs/1.0 (+jotunn-cache)"

_default_origins = "http://localhost:3000,http://localhost:8001"


@dataclass(frozen=True)
class CacheOptions:
    items_url: str = DEFAULT_ITEMS_URL
    recipes_url: str = DEFAULT_RECIPES_URL
    prefabs_url: str = DEFAULT_PREFABS_URL
    pieces_url: str = DEFAULT_PIECES_URL
    characters_url: str = DEFAULT_CHARACTERS_URL
    expiry: timedelta = DEFAULT_EXPIRY
    poll_interval: timedelta = DEFAULT_POLL_INTERVAL
    request_timeout: float = DEFAULT_TIMEOUT_SECONDS
    user_agent: str = DEFAULT_USER_AGENT
    allowed_origins: tuple = field(default_factory=tuple)

    def source_urls(self) -> dict:
        """Record kind → source page URL."""
        return {
            "items": self.items_url,
            "recipes": self.recipes_url,
            "prefabs": self.prefabs_url,
            "pieces": self.pieces_url,
            "characters": self.characters_url,
        }


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def load_options(env_file=None) -> CacheOptions:
    """
    Build CacheOptions from the environment.

    VALDOCS_*_URL override the five source pages; VALDOCS_EXPIRY_HOURS,
    VALDOCS_POLL_MINUTES and VALDOCS_TIMEOUT_SECONDS take numbers.
    ALLOWED_ORIGINS is a comma-separated list used by the HTTP app's CORS setup.
    """
    load_dotenv(env_file)

    origins = os.getenv("ALLOWED_ORIGINS", _default_origins)
    return CacheOptions(
        items_url=os.getenv("VALDOCS_ITEMS_URL", DEFAULT_ITEMS_URL),
        recipes_url=os.getenv("VALDOCS_RECIPES_URL", DEFAULT_RECIPES_URL),
        prefabs_url=os.getenv("VALDOCS_PREFABS_URL", DEFAULT_PREFABS_URL),
        pieces_url=os.getenv("VALDOCS_PIECES_URL", DEFAULT_PIECES_URL),
        characters_url=os.getenv("VALDOCS_CHARACTERS_URL", DEFAULT_CHARACTERS_URL),
        expiry=timedelta(hours=_env_float("VALDOCS_EXPIRY_HOURS", 24)),
        poll_interval=timedelta(minutes=_env_float("VALDOCS_POLL_MINUTES", 30)),
        request_timeout=_env_float("VALDOCS_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
        user_agent=os.getenv("VALDOCS_USER_AGENT", DEFAULT_USER_AGENT),
        allowed_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
    )
