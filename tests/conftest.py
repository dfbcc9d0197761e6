"""Shared fixtures for the ValDocs tests: inline Jötunn-style pages and a fake fetcher."""

import os
import sys
import threading
import time

import pytest

# Add project root to path so valdocs can be imported without installing
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from valdocs.config import CacheOptions  # noqa: E402
from valdocs.fetcher import Document, Fetched, Unchanged  # noqa: E402


BASE = "https://example.test/data"

URLS = {
    "items": f"{BASE}/objects/item-list.html",
    "recipes": f"{BASE}/objects/recipe-list.html",
    "prefabs": f"{BASE}/prefabs/prefab-list.html",
    "pieces": f"{BASE}/pieces/piece-list.html",
    "characters": f"{BASE}/prefabs/character-list.html",
}


def table_page(header_cells, rows) -> str:
    """Wrap <tr> row markup in a page shaped like the Jötunn list pages."""
    head = "".join(f"<th>{h}</th>" for h in header_cells)
    body = "\n".join(rows)
    return (
        "<html><head><title>list</title></head><body>"
        f"<table><thead><tr>{head}</tr></thead><tbody>\n{body}\n</tbody></table>"
        "</body></html>"
    )


ITEM_ROWS = [
    '<tr><td><img src="../images/bronze.png">Bronze</td><td>a1</td><td>$item_bronze</td>'
    "<td>Bronze</td><td>Material</td><td>An alloy of copper and tin.</td></tr>",
    "<tr><td>Wood</td><td>a2</td><td>$item_wood</td><td></td><td>Material</td><td>Logs.</td></tr>",
    "<tr><td>AxeBronze</td><td>a3</td><td>$item_axe_bronze</td><td>Bronze&nbsp;axe</td>"
    "<td>OneHandedWeapon</td><td>Chop chop.</td></tr>",
]

RECIPE_ROWS = [
    "<tr><td>Recipe_Bronze</td><td>r1</td><td>Bronze</td><td>1</td>"
    "<td><ul><li>Copper x2</li><li>Tin x1</li></ul></td></tr>",
    "<tr><td>Recipe_ArrowWood</td><td>r2</td><td>Wood arrow</td><td>twenty</td>"
    "<td>Level 1:<ul><li>Wood x8</li><li>Feathers x2</li></ul>Level 2:<ul><li>Wood x4</li></ul></td></tr>",
    "<tr><td>Recipe_AxeBronze</td><td>r3</td><td>Bronze axe</td><td>1</td>"
    "<td><ul><li>Wood x4</li><li>Bronze x8</li></ul></td></tr>",
]

PREFAB_ROWS = [
    "<tr><td>Troll</td><td>p1</td><td>$enemy_troll</td><td>Troll</td>"
    "<td><ul><li>Humanoid</li><li>MonsterAI</li></ul></td><td><ul><li>Visual</li></ul></td></tr>",
    "<tr><td>Boar</td><td>p2</td><td>$enemy_boar</td><td>Boar</td>"
    "<td>Character\nTameable\n</td><td></td></tr>",
]

PIECE_ROWS = [
    '<tr><td><img src="/img/workbench.png">piece_workbench</td><td>pc1</td><td>$piece_workbench</td>'
    "<td>Workbench</td><td>Crafting station.</td><td><ul><li>Wood x10</li></ul></td><td>Wood</td></tr>",
    "<tr><td>piece_bed</td><td>pc2</td><td>$piece_bed</td><td>Bed</td>"
    "<td></td><td>Wood x8\nDeer Hide x2</td><td></td></tr>",
]

CHARACTER_ROWS = [
    "<tr><td>Greydwarf</td><td>c1</td><td><ul><li>Humanoid</li><li>MonsterAI</li></ul></td>"
    "<td><ul><li>Fire: Weak</li></ul></td><td>Greydwarf_attack</td>"
    "<td><ul><li>Wood</li><li>Resin</li></ul></td></tr>",
    "<tr><td>Neck</td><td>c2</td><td><ul><li>Character</li></ul></td><td></td><td></td>"
    "<td><ul><li>NeckTail</li></ul></td></tr>",
]

HEADERS = {
    "items": ["Prefab", "AssetID", "Token", "Name", "Type", "Description"],
    "recipes": ["Recipe", "AssetID", "Result", "Amount", "Requirements"],
    "prefabs": ["Name", "AssetID", "Token", "Name", "Components", "Children"],
    "pieces": ["Name", "AssetID", "Token", "Name", "Description", "Resources", "Material"],
    "characters": ["Name", "AssetID", "Components", "DamageModifiers", "Items", "Drops"],
}

ROWS = {
    "items": ITEM_ROWS,
    "recipes": RECIPE_ROWS,
    "prefabs": PREFAB_ROWS,
    "pieces": PIECE_ROWS,
    "characters": CHARACTER_ROWS,
}


def page_for(kind: str, rows=None) -> str:
    return table_page(HEADERS[kind], ROWS[kind] if rows is None else rows)


def document_for(kind: str, rows=None) -> Document:
    return Document.from_html(page_for(kind, rows), URLS[kind])


# ─────────────────────────────────────────────────────────────
# Fake fetcher + clock
# ─────────────────────────────────────────────────────────────

UNCHANGED = object()


class FakeFetcher:
    """
    Serves pages from a dict keyed by URL.

    A value may be page HTML, an exception instance (raised), or UNCHANGED
    (answers like a 304). ETags are derived from the page text so a changed
    page gets a new token.
    """

    def __init__(self, pages=None, delay: float = 0.0):
        self.pages = dict(pages) if pages is not None else {URLS[k]: page_for(k) for k in URLS}
        self.delay = delay
        self.calls = []
        self._lock = threading.Lock()

    def fetch(self, url, previous_token=None):
        with self._lock:
            self.calls.append((url, previous_token))
        if self.delay:
            time.sleep(self.delay)
        page = self.pages[url]
        if isinstance(page, Exception):
            raise page
        if page is UNCHANGED:
            return Unchanged(previous_token)
        return Fetched(Document.from_html(page, url), f'"{abs(hash(page))}"')

    def set_page(self, kind, value):
        self.pages[URLS[kind]] = value

    def calls_for(self, kind):
        return [token for url, token in self.calls if url == URLS[kind]]


class FakeClock:
    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_options(**overrides) -> CacheOptions:
    return CacheOptions(
        items_url=URLS["items"],
        recipes_url=URLS["recipes"],
        prefabs_url=URLS["prefabs"],
        pieces_url=URLS["pieces"],
        characters_url=URLS["characters"],
        **overrides,
    )


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def options():
    return make_options()
