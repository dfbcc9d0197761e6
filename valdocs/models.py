# Record types for the Jötunn docs cache.
# Every record is frozen; list-valued fields are tuples so a Snapshot can be
# shared between reader threads without copying.

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

# Record kinds, in the order sources are fetched and reported.
ITEMS = "items"
RECIPES = "recipes"
PREFABS = "prefabs"
PIECES = "pieces"
CHARACTERS = "characters"

KINDS = (ITEMS, RECIPES, PREFABS, PIECES, CHARACTERS)


# ─────────────────────────────────────────
# RECORDS
# ─────────────────────────────────────────

@dataclass(frozen=True)
class Item:
    display_cell: str
    asset_id: str
    token: str
    english_name: str
    type: str
    description: str
    image_url: Optional[str] = None


@dataclass(frozen=True)
class Recipe:
    recipe_name: str
    asset_id: str
    result_name: str
    amount: int
    requirements_text: str


@dataclass(frozen=True)
class Prefab:
    name: str
    asset_id: str
    token: str
    english_name: str
    components: tuple = ()
    child_components: tuple = ()


@dataclass(frozen=True)
class Piece:
    name: str
    asset_id: str
    token: str
    english_name: str
    description: Optional[str] = None
    resources_required: tuple = ()
    material_type: Optional[str] = None
    image_url: Optional[str] = None


@dataclass(frozen=True)
class Character:
    name: str
    asset_id: str
    components: tuple = ()
    damage_modifiers: tuple = ()
    items: tuple = ()
    drops: tuple = ()
    image_url: Optional[str] = None


# ─────────────────────────────────────────
# SNAPSHOT + SOURCE STATE
# ─────────────────────────────────────────

@dataclass(frozen=True)
class Snapshot:
    """
    One consistent view of all five record collections.

    Built once per refresh round and swapped in whole; never mutated.
    """
    items: tuple = ()
    recipes: tuple = ()
    prefabs: tuple = ()
    pieces: tuple = ()
    characters: tuple = ()

    @property
    def has_data(self) -> bool:
        return bool(self.items or self.recipes or self.prefabs)

    def records(self, kind: str) -> tuple:
        if kind not in KINDS:
            raise KeyError(kind)
        return getattr(self, kind)

    def counts(self) -> dict:
        return {kind: len(self.records(kind)) for kind in KINDS}


@dataclass(frozen=True)
class SourceState:
    """Last validation token (ETag) and last good check time for one source."""
    token: Optional[str] = None
    checked_at: Optional[float] = None


EMPTY_SNAPSHOT = Snapshot()


def initial_source_states() -> dict:
    return {kind: SourceState() for kind in KINDS}


class SourceOutcome(str, Enum):
    FETCHED = "fetched"
    UNCHANGED = "unchanged"
    FAILED = "failed"


@dataclass
class RefreshReport:
    """Outcome of one ensure_fresh()/refresh() call, keyed by record kind."""
    outcomes: dict = field(default_factory=dict)
    skipped: bool = False
    refreshed_at: Optional[float] = None

    def failed(self) -> list:
        return [kind for kind, outcome in self.outcomes.items() if outcome is SourceOutcome.FAILED]
