# FastAPI application entry point for the ValDocs cache.
# Exposes search and autocomplete routes over the Jötunn snapshot. Every
# query route calls ensure_fresh() first, which is a no-op unless the
# snapshot is empty or past its expiry.

from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from valdocs.cache import JotunnCache
from valdocs.config import load_options
from valdocs.query import DEFAULT_LIMIT, DEFAULT_SUGGESTIONS


# ─────────────────────────────────────────
# RESPONSE MODELS
# ─────────────────────────────────────────

class ItemOut(BaseModel):
    display_cell: str
    asset_id: str
    token: str
    english_name: str
    type: str
    description: str
    image_url: Optional[str] = None


class RecipeOut(BaseModel):
    recipe_name: str
    asset_id: str
    result_name: str
    amount: int
    requirements_text: str


class PrefabOut(BaseModel):
    name: str
    asset_id: str
    token: str
    english_name: str
    components: List[str] = []
    child_components: List[str] = []


class PieceOut(BaseModel):
    name: str
    asset_id: str
    token: str
    english_name: str
    description: Optional[str] = None
    resources_required: List[str] = []
    material_type: Optional[str] = None
    image_url: Optional[str] = None


class CharacterOut(BaseModel):
    name: str
    asset_id: str
    components: List[str] = []
    damage_modifiers: List[str] = []
    items: List[str] = []
    drops: List[str] = []
    image_url: Optional[str] = None


class RefreshOut(BaseModel):
    skipped: bool
    outcomes: dict
    refreshed_at: Optional[float] = None


def _out(model, records) -> list:
    return [model(**asdict(r)) for r in records]


def create_app(cache: Optional[JotunnCache] = None, run_timer: bool = True) -> FastAPI:
    """
    Build the app around `cache` (a fresh one from the environment if omitted).

    With run_timer the cache warms up and polls in the background for the
    lifetime of the app; the timer is stopped on shutdown.
    """
    options = cache.options if cache is not None else load_options()
    cache = cache or JotunnCache(options)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if run_timer:
            cache.start()
        try:
            yield
        finally:
            cache.stop()

    app = FastAPI(title="ValDocs API", lifespan=lifespan)
    app.state.cache = cache

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(options.allowed_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    suggesters = {
        "items": cache.suggest_items,
        "prefabs": cache.suggest_prefabs,
        "pieces": cache.suggest_pieces,
        "characters": cache.suggest_characters,
        "recipes": cache.suggest_recipe_results,
        "ingredients": cache.suggest_recipe_ingredients,
    }

    # ─────────────────────────────────────────
    # ROUTES
    # ─────────────────────────────────────────

    @app.get("/health")
    def health():
        return {"status": "ok", **cache.stats()}

    @app.get("/items", response_model=List[ItemOut])
    def items(q: str = "", limit: int = DEFAULT_LIMIT):
        cache.ensure_fresh()
        return _out(ItemOut, cache.find_items(q, limit))

    @app.get("/recipes", response_model=List[RecipeOut])
    def recipes(q: str = "", reverse: bool = False, limit: int = DEFAULT_LIMIT):
        """Recipes producing `q`, or with reverse=true, recipes that use `q` as an ingredient."""
        cache.ensure_fresh()
        found = cache.find_recipes_by_ingredient(q, limit) if reverse else cache.find_recipes_for(q, limit)
        return _out(RecipeOut, found)

    @app.get("/prefabs", response_model=List[PrefabOut])
    def prefabs(q: str = "", limit: int = DEFAULT_LIMIT):
        cache.ensure_fresh()
        return _out(PrefabOut, cache.find_prefabs(q, limit))

    @app.get("/pieces", response_model=List[PieceOut])
    def pieces(q: str = "", limit: int = DEFAULT_LIMIT):
        cache.ensure_fresh()
        return _out(PieceOut, cache.find_pieces(q, limit))

    @app.get("/characters", response_model=List[CharacterOut])
    def characters(q: str = "", limit: int = DEFAULT_LIMIT):
        cache.ensure_fresh()
        return _out(CharacterOut, cache.find_characters(q, limit))

    @app.get("/suggest/{kind}", response_model=List[str])
    def suggest(kind: str, q: str = "", max_results: int = Query(DEFAULT_SUGGESTIONS, alias="max")):
        suggester = suggesters.get(kind)
        if suggester is None:
            raise HTTPException(status_code=404, detail=f"Unknown suggestion kind: {kind}")
        cache.ensure_fresh()
        return suggester(q, max_results)

    @app.post("/refresh", response_model=RefreshOut)
    def refresh():
        """Force a refresh round now, bypassing the expiry window."""
        report = cache.refresh()
        return RefreshOut(
            skipped=report.skipped,
            outcomes={kind: outcome.value for kind, outcome in report.outcomes.items()},
            refreshed_at=report.refreshed_at,
        )

    return app


app = create_app()


# ─────────────────────────────────────────
# RUN
# ─────────────────────────────────────────

if __name__ == "__main__":
    import logging
    import uvicorn
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run("valdocs.main:app", host="0.0.0.0", port=8001, reload=True)
