#!/usr/bin/env python3
"""
Fetch the Jötunn source pages once and report what the cache would hold.

Usage
-----
One refresh round, print record counts per kind:
    python scripts/refresh_snapshot.py

Search a kind after the round (items, recipes, ingredients, prefabs, pieces, characters):
    python scripts/refresh_snapshot.py --find items "bronze"

Autocomplete suggestions for a kind:
    python scripts/refresh_snapshot.py --suggest ingredients "wo"

Source URLs and timeouts come from the same VALDOCS_* environment variables
(or .env file) the API server reads.
"""

import argparse
import logging
import os
import sys

# Make sure project root is on the path so we can import valdocs/
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from valdocs.cache import JotunnCache
from valdocs.config import load_options
from valdocs.models import Recipe


# ── Lookup tables ─────────────────────────────────────────────────────────────

def _finders(cache: JotunnCache) -> dict:
    return {
        "items": cache.find_items,
        "recipes": cache.find_recipes_for,
        "ingredients": cache.find_recipes_by_ingredient,
        "prefabs": cache.find_prefabs,
        "pieces": cache.find_pieces,
        "characters": cache.find_characters,
    }


def _suggesters(cache: JotunnCache) -> dict:
    return {
        "items": cache.suggest_items,
        "recipes": cache.suggest_recipe_results,
        "ingredients": cache.suggest_recipe_ingredients,
        "prefabs": cache.suggest_prefabs,
        "pieces": cache.suggest_pieces,
        "characters": cache.suggest_characters,
    }


KIND_CHOICES = ["items", "recipes", "ingredients", "prefabs", "pieces", "characters"]


# ── Output ────────────────────────────────────────────────────────────────────

def _describe(record) -> str:
    if isinstance(record, Recipe):
        return f"{record.result_name} x{record.amount}  ({record.recipe_name})\n{record.requirements_text}"
    name = getattr(record, "english_name", "") or getattr(record, "name", "")
    return f"{name}  [{record.asset_id}]"


def print_report(report, cache: JotunnCache) -> None:
    for kind, outcome in report.outcomes.items():
        print(f"  {kind:<11} {outcome.value}")
    print()
    for kind, count in cache.snapshot.counts().items():
        print(f"  {kind:<11} {count:>6} records")


# ── Entry point ───────────────────────────────────────────────────────────────

def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Run one Jötunn refresh round and optionally query the result.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--find", nargs=2, metavar=("KIND", "QUERY"), help="Search records of KIND.")
    group.add_argument("--suggest", nargs=2, metavar=("KIND", "NEEDLE"), help="Autocomplete names of KIND.")
    parser.add_argument("--limit", type=int, default=10, help="Max results (1-50).")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log each source fetch.")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    for pair in (args.find, args.suggest):
        if pair and pair[0] not in KIND_CHOICES:
            parser.error(f"KIND must be one of: {', '.join(KIND_CHOICES)}")

    cache = JotunnCache(load_options())
    print("Fetching Jötunn source pages …")
    report = cache.refresh()
    print_report(report, cache)

    if args.find:
        kind, query = args.find
        results = _finders(cache)[kind](query, args.limit)
        print(f"\n{len(results)} {kind} match(es) for {query!r}:")
        for record in results:
            print(f"  - {_describe(record)}")
    elif args.suggest:
        kind, needle = args.suggest
        for s in _suggesters(cache)[kind](needle, args.limit):
            print(f"  {s}")

    return 1 if len(report.failed()) == len(report.outcomes) else 0


if __name__ == "__main__":
    sys.exit(main())
