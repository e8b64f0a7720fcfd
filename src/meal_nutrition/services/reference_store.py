"""Lazily loaded, atomically swappable store of reference foods."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from meal_nutrition.domain.dataset import parse_dataset
from meal_nutrition.domain.foods import FoodRecord, StoreStats
from meal_nutrition.domain.matching import FoodCandidate
from meal_nutrition.errors import DatasetUnavailableError
from meal_nutrition.services import search
from meal_nutrition.services.search import FoodIndex
from meal_nutrition.services.similarity import (
    SimilarityScorer,
    containment_similarity,
)

_logger = logging.getLogger(__name__)


class DatasetSource(Protocol):
    """Source of the raw reference dataset payload."""

    async def load(self) -> object:
        """Return the decoded dataset document."""


@dataclass
class ReferenceStore:
    """Holds the current reference index and serves lookups against it.

    The dataset is loaded on first use. Concurrent first calls share a single
    load. A refresh builds a new index off to the side and swaps it in only
    when the load succeeds, so readers always see one complete generation.
    """

    source: DatasetSource
    scorer: SimilarityScorer = containment_similarity
    fuzzy_limit: int = 5
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3
    _index: FoodIndex | None = field(default=None, init=False, repr=False)
    _loading: "asyncio.Future[FoodIndex] | None" = field(
        default=None, init=False, repr=False
    )
    _generation: int = field(default=0, init=False, repr=False)

    @property
    def is_loaded(self) -> bool:
        return self._index is not None

    async def ensure_loaded(self) -> FoodIndex:
        """Return the current index, loading the dataset once if needed."""
        index = self._index
        if index is not None:
            return index

        loading = self._loading
        if loading is None or loading.done():
            loading = asyncio.ensure_future(self._load_and_publish())
            self._loading = loading
        try:
            return await asyncio.shield(loading)
        finally:
            if loading.done() and self._loading is loading:
                self._loading = None

    async def refresh(self) -> FoodIndex:
        """Reload the dataset and swap in the new index.

        On failure the previous index stays in place and the error is raised.
        """
        try:
            index = await self._build_index()
        except DatasetUnavailableError:
            _logger.error(
                "Reference refresh failed; keeping generation %s",
                self._index.generation if self._index else None,
            )
            raise
        return self._publish(index)

    def stats(self) -> StoreStats:
        index = self._index
        if index is None:
            return StoreStats(
                loaded=False,
                record_count=0,
                name_count=0,
                alias_count=0,
                generation=0,
                loaded_at=None,
            )
        return StoreStats(
            loaded=True,
            record_count=index.record_count,
            name_count=len(index.by_name),
            alias_count=len(index.by_alias),
            generation=index.generation,
            loaded_at=index.loaded_at,
        )

    async def get_by_id(self, food_id: str) -> FoodRecord | None:
        return search.get_by_id(await self.ensure_loaded(), food_id)

    async def get_by_ids(self, food_ids: list[str]) -> dict[str, FoodRecord]:
        return search.get_by_ids(await self.ensure_loaded(), food_ids)

    async def get_by_exact_name(self, name: str) -> FoodRecord | None:
        return search.get_by_exact_name(await self.ensure_loaded(), name)

    async def search_by_partial_name(
        self, query: str, limit: int = 10
    ) -> list[FoodRecord]:
        return search.search_by_partial_name(await self.ensure_loaded(), query, limit)

    async def search_by_fuzzy_match(
        self, query: str, limit: int | None = None
    ) -> list[FoodCandidate]:
        return search.search_by_fuzzy_match(
            await self.ensure_loaded(),
            query,
            limit=limit if limit is not None else self.fuzzy_limit,
            scorer=self.scorer,
        )

    async def search_by_category(
        self, category: str, limit: int = 20
    ) -> list[FoodRecord]:
        return search.search_by_category(await self.ensure_loaded(), category, limit)

    async def _load_and_publish(self) -> FoodIndex:
        return self._publish(await self._build_index())

    def _publish(self, index: FoodIndex) -> FoodIndex:
        """Install ``index`` unless a load started later already published."""
        current = self._index
        if current is not None and current.generation > index.generation:
            _logger.info(
                "Discarding stale reference generation %s; current is %s",
                index.generation,
                current.generation,
            )
            return current
        self._index = index
        return index

    async def _build_index(self) -> FoodIndex:
        # Generations are ordered by load start.
        self._generation += 1
        generation = self._generation
        payload = await self._load_with_retry()
        parsed = parse_dataset(payload)
        if parsed.malformed:
            _logger.warning(
                "Reference dataset has no foods collection; treating it as empty"
            )
        for invalid in parsed.invalid:
            _logger.warning(
                "Skipping invalid food record %s: %s", invalid.key, invalid.reason
            )
        index = search.build_index(
            parsed.records,
            generation=generation,
            loaded_at=datetime.now(UTC),
        )
        _logger.info(
            "Reference dataset loaded: generation=%s records=%s aliases=%s skipped=%s",
            index.generation,
            index.record_count,
            len(index.by_alias),
            len(parsed.invalid),
        )
        return index

    async def _load_with_retry(self) -> object:
        """Load the raw payload with a short retry."""
        attempt = 0
        while True:
            try:
                return await self.source.load()
            except Exception as exc:
                attempt += 1
                _logger.warning(
                    "Reference dataset load failed (attempt %s/%s): %s",
                    attempt,
                    self.retry_attempts + 1,
                    exc,
                )
                if attempt > self.retry_attempts:
                    if isinstance(exc, DatasetUnavailableError):
                        raise
                    raise DatasetUnavailableError(
                        f"Reference dataset could not be loaded: {exc}"
                    ) from exc
                await asyncio.sleep(self.retry_delay_seconds)
