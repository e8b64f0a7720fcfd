"""Resolve raw food names to reference records."""

import asyncio
import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from meal_nutrition.domain.foods import FoodRecord
from meal_nutrition.domain.matching import (
    FoodCandidate,
    MatchedPair,
    MatchingOptions,
    MatchResult,
    PairMatches,
)
from meal_nutrition.errors import DatasetUnavailableError
from meal_nutrition.services.confidence import MIN_MATCH_SIMILARITY, confidence_tier
from meal_nutrition.services.text import normalize_key

_logger = logging.getLogger(__name__)

_CATEGORY_SCAN_LIMIT = 20


class FoodRepository(Protocol):
    """Lookup operations the matcher needs from the reference store."""

    async def get_by_exact_name(self, name: str) -> FoodRecord | None:
        """Return the record for an exact name or alias."""

    async def search_by_fuzzy_match(
        self, query: str, limit: int | None = None
    ) -> list[FoodCandidate]:
        """Return ranked fuzzy candidates."""


@dataclass
class FoodMatchingService:
    """Matches free-text food names against the reference dataset."""

    repository: FoodRepository
    min_similarity: float = 0.5
    default_limit: int = 1

    async def match_food(
        self, name: str, options: MatchingOptions | None = None
    ) -> MatchResult | None:
        """Return the best match for name, or None when nothing usable is found.

        Candidates under ``min_similarity`` are still returned, flagged with
        ``below_threshold``, unless they fall under the very-low tier floor.
        Lookup errors other than an unavailable dataset are logged and treated
        as no match.
        """
        resolved = options or MatchingOptions()
        query = name.strip() if isinstance(name, str) else ""
        if not query:
            return None

        try:
            candidate = await self._best_candidate(query, resolved)
        except DatasetUnavailableError:
            raise
        except Exception:
            _logger.exception("Food matching failed: input=%r", query)
            return None

        if candidate is None:
            _logger.debug("No food match: input=%r", query)
            return None
        if not _is_well_formed(candidate):
            _logger.warning("Ignoring malformed match candidate for %r", query)
            return None

        similarity = candidate.similarity
        if similarity < MIN_MATCH_SIMILARITY:
            return None

        threshold = (
            resolved.min_similarity
            if resolved.min_similarity is not None
            else self.min_similarity
        )
        below_threshold = similarity < threshold
        if below_threshold:
            _logger.warning(
                "Low confidence match: input=%r matched=%r similarity=%.2f threshold=%.2f",
                query,
                candidate.record.name,
                similarity,
                threshold,
            )
        return MatchResult(
            original_input=name,
            record=candidate.record,
            similarity=similarity,
            tier=confidence_tier(similarity),
            below_threshold=below_threshold,
        )

    async def match_foods(
        self, names: Iterable[str], options: MatchingOptions | None = None
    ) -> dict[str, MatchResult | None]:
        """Match several names concurrently; duplicates are matched once."""
        unique = list(dict.fromkeys(names))
        results = await asyncio.gather(
            *(self.match_food(name, options) for name in unique)
        )
        return dict(zip(unique, results, strict=True))

    async def match_name_quantity_pairs(
        self,
        pairs: Iterable[tuple[str, str | None]],
        options: MatchingOptions | None = None,
    ) -> PairMatches:
        """Match names and keep each quantity text next to its match."""
        pair_list = list(pairs)
        matches = await self.match_foods([name for name, _ in pair_list], options)
        matched: list[MatchedPair] = []
        not_found: list[str] = []
        for name, quantity_text in pair_list:
            match = matches.get(name)
            if match is None or match.record is None:
                not_found.append(name)
                continue
            matched.append(
                MatchedPair(name=name, quantity_text=quantity_text, match=match)
            )
        return PairMatches(matched=matched, not_found=not_found)

    async def _best_candidate(
        self, query: str, options: MatchingOptions
    ) -> FoodCandidate | None:
        if options.strict_mode:
            record = await self.repository.get_by_exact_name(query)
            if record is None:
                return None
            return FoodCandidate(record=record, similarity=1.0)

        limit = options.limit if options.limit is not None else self.default_limit
        if options.category:
            limit = max(limit, _CATEGORY_SCAN_LIMIT)
        candidates = await self.repository.search_by_fuzzy_match(query, limit=limit)
        if options.category and candidates:
            wanted = normalize_key(options.category)
            in_category = [
                candidate
                for candidate in candidates
                if isinstance(candidate, FoodCandidate)
                and normalize_key(candidate.record.category) == wanted
            ]
            if in_category:
                candidates = in_category
        return candidates[0] if candidates else None


def _is_well_formed(candidate: object) -> bool:
    if not isinstance(candidate, FoodCandidate):
        return False
    if not isinstance(candidate.record, FoodRecord):
        return False
    similarity = candidate.similarity
    if not isinstance(similarity, int | float) or math.isnan(similarity):
        return False
    return 0.0 <= similarity <= 1.0
