# Read-only queries over the current snapshot.
# Nothing here fetches: callers run ensure_fresh() first if they care about
# freshness, so a query costs only a scan of in-memory tuples.

from typing import Iterable

from valdocs.models import Snapshot
from valdocs.requirements import BULLET, NO_DATA
from valdocs.store import SnapshotStore

MAX_LIMIT = 50
DEFAULT_LIMIT = 10
DEFAULT_SUGGESTIONS = 25


def clamp_limit(limit: int) -> int:
    return max(1, min(int(limit), MAX_LIMIT))


def _contains(field, needle: str) -> bool:
    return needle in (field or "").lower()


def _is_level_header(line: str) -> bool:
    return line.startswith("**") and line.endswith(":**")


# ─────────────────────────────────────────
# RANKING
# ─────────────────────────────────────────

def dedupe_casefold(candidates: Iterable[str]) -> list:
    """Drop blanks and case-insensitive duplicates, keeping the first casing seen."""
    seen = set()
    unique = []
    for s in candidates:
        if not s or not s.strip():
            continue
        key = s.lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(s)
    return unique


def rank(candidates: Iterable[str], needle: str) -> list:
    """
    Order candidates for autocomplete.

    Empty needle: every candidate, alphabetical (case-insensitive).
    Otherwise only candidates containing the needle, prefix matches first,
    then by where the needle first occurs, then alphabetical.
    """
    q = (needle or "").strip().lower()
    pool = dedupe_casefold(candidates)
    if not q:
        return sorted(pool, key=str.lower)

    scored = []
    for s in pool:
        lower = s.lower()
        index = lower.find(q)
        if index < 0:
            continue
        scored.append((0 if index == 0 else 1, index, lower, s))
    scored.sort(key=lambda t: t[:3])
    return [t[3] for t in scored]


# ─────────────────────────────────────────
# QUERY ENGINE
# ─────────────────────────────────────────

class QueryEngine:
    def __init__(self, store: SnapshotStore):
        self.store = store

    @property
    def snapshot(self) -> Snapshot:
        return self.store.snapshot

    def _take(self, records, predicate, limit: int) -> list:
        limit = clamp_limit(limit)
        out = []
        for record in records:
            if predicate(record):
                out.append(record)
                if len(out) >= limit:
                    break
        return out

    # ── search ─────────────────────────────────

    def find_items(self, query: str, limit: int = DEFAULT_LIMIT) -> list:
        q = (query or "").lower()
        return self._take(
            self.snapshot.items,
            lambda it: (
                _contains(it.english_name, q)
                or _contains(it.display_cell, q)
                or _contains(it.token, q)
                or _contains(it.asset_id, q)
                or _contains(it.type, q)
            ),
            limit,
        )

    def find_recipes_for(self, result_name: str, limit: int = DEFAULT_LIMIT) -> list:
        q = (result_name or "").lower()
        return self._take(self.snapshot.recipes, lambda r: _contains(r.result_name, q), limit)

    def find_recipes_by_ingredient(self, ingredient: str, limit: int = DEFAULT_LIMIT) -> list:
        q = (ingredient or "").lower()
        return self._take(self.snapshot.recipes, lambda r: _contains(r.requirements_text, q), limit)

    def find_prefabs(self, query: str, limit: int = DEFAULT_LIMIT) -> list:
        q = (query or "").lower()
        return self._take(
            self.snapshot.prefabs,
            lambda p: (
                _contains(p.name, q)
                or _contains(p.english_name, q)
                or _contains(p.token, q)
                or _contains(p.asset_id, q)
            ),
            limit,
        )

    def find_pieces(self, query: str, limit: int = DEFAULT_LIMIT) -> list:
        q = (query or "").lower()
        return self._take(
            self.snapshot.pieces,
            lambda p: (
                _contains(p.name, q)
                or _contains(p.english_name, q)
                or _contains(p.token, q)
                or _contains(p.asset_id, q)
            ),
            limit,
        )

    def find_characters(self, query: str, limit: int = DEFAULT_LIMIT) -> list:
        q = (query or "").lower()
        return self._take(
            self.snapshot.characters,
            lambda c: (
                _contains(c.name, q)
                or _contains(c.asset_id, q)
                or any(_contains(comp, q) for comp in c.components)
            ),
            limit,
        )

    # ── suggest ────────────────────────────────

    def _suggest(self, names: Iterable[str], needle: str, max_results: int) -> list:
        return rank(names, needle)[:clamp_limit(max_results)]

    def suggest_items(self, needle: str, max_results: int = DEFAULT_SUGGESTIONS) -> list:
        return self._suggest((i.english_name for i in self.snapshot.items), needle, max_results)

    def suggest_prefabs(self, needle: str, max_results: int = DEFAULT_SUGGESTIONS) -> list:
        return self._suggest((p.name for p in self.snapshot.prefabs), needle, max_results)

    def suggest_pieces(self, needle: str, max_results: int = DEFAULT_SUGGESTIONS) -> list:
        return self._suggest((p.name for p in self.snapshot.pieces), needle, max_results)

    def suggest_characters(self, needle: str, max_results: int = DEFAULT_SUGGESTIONS) -> list:
        return self._suggest((c.name for c in self.snapshot.characters), needle, max_results)

    def suggest_recipe_results(self, needle: str, max_results: int = DEFAULT_SUGGESTIONS) -> list:
        return self._suggest((r.result_name for r in self.snapshot.recipes), needle, max_results)

    def ingredient_pool(self) -> list:
        """Every distinct bullet line across all recipes' requirement text."""
        lines = []
        for recipe in self.snapshot.recipes:
            for line in recipe.requirements_text.split("\n"):
                s = line.strip()
                if s.startswith(BULLET):
                    s = s[len(BULLET):].strip()
                elif _is_level_header(s) or s == NO_DATA:
                    continue
                if s:
                    lines.append(s)
        return dedupe_casefold(lines)

    def suggest_recipe_ingredients(self, needle: str, max_results: int = DEFAULT_SUGGESTIONS) -> list:
        return self._suggest(self.ingredient_pool(), needle, max_results)
