# Table-row extractors for the five Jötunn list pages.
# All five pages are one big <table>; each kind differs only in how many
# cells a row needs and how those cells map onto record fields, so a single
# row walker is driven by an ExtractorSpec per kind.

from dataclasses import dataclass
from typing import Callable, Optional
from urllib.parse import urljoin

from valdocs.fetcher import Document
from valdocs.models import (
    CHARACTERS,
    ITEMS,
    PIECES,
    PREFABS,
    RECIPES,
    Character,
    Item,
    Piece,
    Prefab,
    Recipe,
)
from valdocs.requirements import normalize_requirements


# ─────────────────────────────────────────
# CELL HELPERS
# ─────────────────────────────────────────

def cell_text(cell) -> str:
    """Full text content of a cell, NBSP folded to space, trimmed."""
    return cell.get_text().replace("\u00a0", " ").strip()


def cell_list(cell) -> tuple:
    """
    List-valued cell: the <li> texts when the cell has a list, otherwise the
    cell text split into non-empty lines (some rows skip the <ul> markup).
    """
    items = [cell_text(li) for li in cell.find_all("li")]
    items = [s for s in items if s]
    if items:
        return tuple(items)
    return tuple(line.strip() for line in cell_text(cell).split("\n") if line.strip())


def resolve_url(base_url: Optional[str], relative: Optional[str]) -> Optional[str]:
    if not base_url or not base_url.strip() or not relative or not relative.strip():
        return None
    try:
        absolute = urljoin(base_url, relative.strip())
    except ValueError:
        return None
    if not absolute.lower().startswith(("http://", "https://")):
        return None
    return absolute


def cell_image(cell, base_url: Optional[str]) -> Optional[str]:
    img = cell.find("img")
    if img is None:
        return None
    return resolve_url(base_url, img.get("src"))


def parse_amount(text: str) -> int:
    try:
        amount = int(text.strip())
    except ValueError:
        return 1
    return amount if amount >= 1 else 1


def optional_text(text: str) -> Optional[str]:
    return text or None


# ─────────────────────────────────────────
# ROW WALKER
# ─────────────────────────────────────────

@dataclass(frozen=True)
class ExtractorSpec:
    kind: str
    min_cells: int
    build: Callable  # (cells, base_url) -> record


def table_rows(document: Document) -> list:
    rows = document.soup.select("table tbody tr")
    if not rows:
        # html.parser does not invent <tbody>; header rows have no <td> and
        # fall out on the cell-count check
        rows = document.soup.select("table tr")
    return rows


def extract(document: Document, spec: ExtractorSpec) -> list:
    records = []
    for row in table_rows(document):
        cells = row.find_all("td")
        if len(cells) < spec.min_cells:
            continue
        records.append(spec.build(cells, document.base_url))
    return records


# ─────────────────────────────────────────
# PER-KIND CELL MAPPINGS
# ─────────────────────────────────────────

def _build_item(td, base_url) -> Item:
    token = cell_text(td[2])
    english = cell_text(td[3])
    return Item(
        display_cell=cell_text(td[0]),
        asset_id=cell_text(td[1]),
        token=token,
        english_name=english or token,
        type=cell_text(td[4]),
        description=cell_text(td[5]),
        image_url=cell_image(td[0], base_url),
    )


def _build_recipe(td, base_url) -> Recipe:
    return Recipe(
        recipe_name=cell_text(td[0]),
        asset_id=cell_text(td[1]),
        result_name=cell_text(td[2]),
        amount=parse_amount(cell_text(td[3])),
        requirements_text=normalize_requirements(td[4].decode_contents().strip()),
    )


def _build_prefab(td, base_url) -> Prefab:
    return Prefab(
        name=cell_text(td[0]),
        asset_id=cell_text(td[1]),
        token=cell_text(td[2]),
        english_name=cell_text(td[3]),
        components=cell_list(td[4]),
        child_components=cell_list(td[5]),
    )


def _build_piece(td, base_url) -> Piece:
    return Piece(
        name=cell_text(td[0]),
        asset_id=cell_text(td[1]),
        token=cell_text(td[2]),
        english_name=cell_text(td[3]),
        description=optional_text(cell_text(td[4])),
        resources_required=cell_list(td[5]),
        material_type=optional_text(cell_text(td[6])),
        image_url=cell_image(td[0], base_url),
    )


def _build_character(td, base_url) -> Character:
    # Name, AssetID, Components, DamageModifiers, Items, Drops
    return Character(
        name=cell_text(td[0]),
        asset_id=cell_text(td[1]),
        components=cell_list(td[2]),
        damage_modifiers=cell_list(td[3]),
        items=cell_list(td[4]),
        drops=cell_list(td[5]),
        image_url=cell_image(td[0], base_url),
    )


ITEM_SPEC = ExtractorSpec(ITEMS, 6, _build_item)
RECIPE_SPEC = ExtractorSpec(RECIPES, 5, _build_recipe)
PREFAB_SPEC = ExtractorSpec(PREFABS, 6, _build_prefab)
PIECE_SPEC = ExtractorSpec(PIECES, 7, _build_piece)
CHARACTER_SPEC = ExtractorSpec(CHARACTERS, 6, _build_character)

EXTRACTORS = {
    spec.kind: spec
    for spec in (ITEM_SPEC, RECIPE_SPEC, PREFAB_SPEC, PIECE_SPEC, CHARACTER_SPEC)
}


def extract_kind(kind: str, document: Document) -> list:
    return extract(document, EXTRACTORS[kind])


def extract_items(document: Document) -> list:
    return extract(document, ITEM_SPEC)


def extract_recipes(document: Document) -> list:
    return extract(document, RECIPE_SPEC)


def extract_prefabs(document: Document) -> list:
    return extract(document, PREFAB_SPEC)


def extract_pieces(document: Document) -> list:
    return extract(document, PIECE_SPEC)


def extract_characters(document: Document) -> list:
    return extract(document, CHARACTER_SPEC)
