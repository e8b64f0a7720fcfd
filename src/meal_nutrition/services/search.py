"""Lookup and search over an immutable index of reference foods."""

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from meal_nutrition.domain.foods import FoodRecord
from meal_nutrition.domain.matching import FoodCandidate
from meal_nutrition.services.similarity import (
    SimilarityScorer,
    containment_similarity,
)
from meal_nutrition.services.text import normalize_key, normalize_query


@dataclass(frozen=True)
class SearchEntry:
    text: str
    food_id: str


@dataclass(frozen=True)
class FoodIndex:
    """Read-only lookup structures built from one dataset load.

    An index is never mutated once built; a reload produces a new index that
    replaces the old one as a whole.
    """

    by_id: dict[str, FoodRecord]
    by_name: dict[str, FoodRecord]
    by_alias: dict[str, str]
    name_entries: tuple[SearchEntry, ...]
    alias_entries: tuple[SearchEntry, ...]
    generation: int = 0
    loaded_at: datetime | None = None

    @property
    def record_count(self) -> int:
        return len(self.by_id)


def build_index(
    records: Iterable[FoodRecord],
    *,
    generation: int = 0,
    loaded_at: datetime | None = None,
) -> FoodIndex:
    """Build lookup maps from records; later records win on key collisions."""
    by_id: dict[str, FoodRecord] = {}
    for record in records:
        by_id[record.id] = record

    by_name: dict[str, FoodRecord] = {}
    by_alias: dict[str, str] = {}
    name_entries: list[SearchEntry] = []
    alias_entries: list[SearchEntry] = []
    for record in by_id.values():
        name_key = normalize_key(record.name)
        if name_key:
            by_name[name_key] = record
        name_entries.append(SearchEntry(normalize_query(record.name), record.id))
        for alias in record.aliases:
            alias_key = normalize_key(alias)
            if alias_key:
                by_alias[alias_key] = record.id
            alias_entries.append(SearchEntry(normalize_query(alias), record.id))

    return FoodIndex(
        by_id=by_id,
        by_name=by_name,
        by_alias=by_alias,
        name_entries=tuple(name_entries),
        alias_entries=tuple(alias_entries),
        generation=generation,
        loaded_at=loaded_at,
    )


def get_by_id(index: FoodIndex, food_id: str) -> FoodRecord | None:
    return index.by_id.get(food_id)


def get_by_ids(index: FoodIndex, food_ids: Iterable[str]) -> dict[str, FoodRecord]:
    """Return the records for the ids that exist, keyed by id."""
    found: dict[str, FoodRecord] = {}
    for food_id in food_ids:
        record = index.by_id.get(food_id)
        if record is not None:
            found[food_id] = record
    return found


def get_by_exact_name(index: FoodIndex, name: str) -> FoodRecord | None:
    """Return the record whose name, or failing that alias, normalizes to name."""
    key = normalize_key(name)
    if not key:
        return None
    record = index.by_name.get(key)
    if record is not None:
        return record
    food_id = index.by_alias.get(key)
    if food_id is None:
        return None
    return index.by_id.get(food_id)


def search_by_partial_name(
    index: FoodIndex, query: str, limit: int = 10
) -> list[FoodRecord]:
    """Return records whose name or alias contains the query.

    Name hits come before alias hits, each in dataset order.
    """
    needle = normalize_query(query)
    if not needle or limit <= 0:
        return []
    results: list[FoodRecord] = []
    seen: set[str] = set()
    for entry in (*index.name_entries, *index.alias_entries):
        if entry.food_id in seen or needle not in entry.text:
            continue
        seen.add(entry.food_id)
        results.append(index.by_id[entry.food_id])
        if len(results) >= limit:
            break
    return results


def search_by_fuzzy_match(
    index: FoodIndex,
    query: str,
    limit: int = 5,
    scorer: SimilarityScorer = containment_similarity,
) -> list[FoodCandidate]:
    """Return the best scoring foods for a query, highest similarity first.

    An exact name or alias hit short-circuits with similarity 1.0. Otherwise
    every name and alias is scored, the best score per food is kept and zero
    scores are dropped. Ties keep dataset order.
    """
    needle = normalize_query(query)
    if not needle or limit <= 0:
        return []

    exact = get_by_exact_name(index, needle)
    if exact is not None:
        return [FoodCandidate(record=exact, similarity=1.0)]

    best: dict[str, float] = {}
    for entry in (*index.name_entries, *index.alias_entries):
        score = scorer(needle, entry.text)
        if math.isnan(score) or score <= 0.0:
            continue
        score = min(score, 1.0)
        if score > best.get(entry.food_id, 0.0):
            best[entry.food_id] = score

    ranked = sorted(best.items(), key=lambda item: item[1], reverse=True)
    return [
        FoodCandidate(record=index.by_id[food_id], similarity=score)
        for food_id, score in ranked[:limit]
    ]


def search_by_category(
    index: FoodIndex, category: str, limit: int = 20
) -> list[FoodRecord]:
    key = normalize_key(category)
    if not key or limit <= 0:
        return []
    matches = [
        record
        for record in index.by_id.values()
        if normalize_key(record.category) == key
    ]
    return matches[:limit]
