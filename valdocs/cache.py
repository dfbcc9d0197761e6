# JotunnCache: the one object the HTTP app and scripts talk to.
# Wires fetcher → extractors → store → query engine together and forwards
# the lifecycle (start/stop) and query calls.

import time
from typing import Callable, Optional

from valdocs.config import CacheOptions
from valdocs.fetcher import DocumentFetcher
from valdocs.models import RefreshReport, Snapshot
from valdocs.query import DEFAULT_LIMIT, DEFAULT_SUGGESTIONS, QueryEngine
from valdocs.refresh import RefreshOrchestrator
from valdocs.store import SnapshotStore


class JotunnCache:
    def __init__(
        self,
        options: Optional[CacheOptions] = None,
        fetcher: Optional[DocumentFetcher] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.options = options or CacheOptions()
        self.fetcher = fetcher or DocumentFetcher(
            timeout=self.options.request_timeout,
            user_agent=self.options.user_agent,
        )
        self.store = SnapshotStore()
        self.orchestrator = RefreshOrchestrator(self.options, self.fetcher, self.store, clock=clock)
        self.query = QueryEngine(self.store)

    # ── lifecycle ──────────────────────────────

    def start(self) -> None:
        self.orchestrator.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self.orchestrator.stop(timeout)

    def ensure_fresh(self) -> RefreshReport:
        return self.orchestrator.ensure_fresh()

    def refresh(self) -> RefreshReport:
        return self.orchestrator.refresh()

    @property
    def snapshot(self) -> Snapshot:
        return self.store.snapshot

    def stats(self) -> dict:
        return {
            "has_data": self.snapshot.has_data,
            "counts": self.snapshot.counts(),
            "last_refresh": self.store.last_refresh,
            "fresh": self.orchestrator.is_fresh(),
        }

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()
        return False

    # ── search ─────────────────────────────────

    def find_items(self, query: str, limit: int = DEFAULT_LIMIT) -> list:
        return self.query.find_items(query, limit)

    def find_recipes_for(self, result_name: str, limit: int = DEFAULT_LIMIT) -> list:
        return self.query.find_recipes_for(result_name, limit)

    def find_recipes_by_ingredient(self, ingredient: str, limit: int = DEFAULT_LIMIT) -> list:
        return self.query.find_recipes_by_ingredient(ingredient, limit)

    def find_prefabs(self, query: str, limit: int = DEFAULT_LIMIT) -> list:
        return self.query.find_prefabs(query, limit)

    def find_pieces(self, query: str, limit: int = DEFAULT_LIMIT) -> list:
        return self.query.find_pieces(query, limit)

    def find_characters(self, query: str, limit: int = DEFAULT_LIMIT) -> list:
        return self.query.find_characters(query, limit)

    # ── suggest ────────────────────────────────

    def suggest_items(self, needle: str, max_results: int = DEFAULT_SUGGESTIONS) -> list:
        return self.query.suggest_items(needle, max_results)

    def suggest_prefabs(self, needle: str, max_results: int = DEFAULT_SUGGESTIONS) -> list:
        return self.query.suggest_prefabs(needle, max_results)

    def suggest_pieces(self, needle: str, max_results: int = DEFAULT_SUGGESTIONS) -> list:
        return self.query.suggest_pieces(needle, max_results)

    def suggest_characters(self, needle: str, max_results: int = DEFAULT_SUGGESTIONS) -> list:
        return self.query.suggest_characters(needle, max_results)

    def suggest_recipe_results(self, needle: str, max_results: int = DEFAULT_SUGGESTIONS) -> list:
        return self.query.suggest_recipe_results(needle, max_results)

    def suggest_recipe_ingredients(self, needle: str, max_results: int = DEFAULT_SUGGESTIONS) -> list:
        return self.query.suggest_recipe_ingredients(needle, max_results)
