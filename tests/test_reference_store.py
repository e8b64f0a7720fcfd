"""Tests for the reference store lifecycle."""

import asyncio
import copy
import logging
from dataclasses import dataclass

import pytest

from meal_nutrition.errors import DatasetUnavailableError
from meal_nutrition.services.reference_store import DatasetSource, ReferenceStore
from tests.conftest import SAMPLE_DATASET, FakeDatasetSource, unavailable


def test_ensure_loaded_loads_once(reference_store, dataset_source) -> None:
    async def run() -> None:
        first = await reference_store.ensure_loaded()
        second = await reference_store.ensure_loaded()
        assert first is second

    asyncio.run(run())

    assert dataset_source.calls == 1
    assert reference_store.is_loaded


def test_concurrent_first_calls_share_one_load() -> None:
    source = FakeDatasetSource(delay_seconds=0.01)
    store = ReferenceStore(source=source, retry_attempts=0)

    async def run() -> list[object]:
        return await asyncio.gather(*(store.ensure_loaded() for _ in range(5)))

    indexes = asyncio.run(run())

    assert source.calls == 1
    assert all(index is indexes[0] for index in indexes)


def test_lookups_trigger_lazy_load(reference_store, dataset_source) -> None:
    record = asyncio.run(reference_store.get_by_id("apple"))

    assert record is not None
    assert record.name == "apple"
    assert dataset_source.calls == 1


def test_store_lookup_operations(reference_store) -> None:
    async def run() -> None:
        assert (await reference_store.get_by_exact_name("鮭")).id == "salmon"
        assert list(await reference_store.get_by_ids(["natto", "ghost"])) == ["natto"]
        partial = await reference_store.search_by_partial_name("yog")
        assert [r.id for r in partial] == ["yogurt"]
        fuzzy = await reference_store.search_by_fuzzy_match("boiled white rice")
        assert [c.record.id for c in fuzzy] == ["rice"]
        fruit = await reference_store.search_by_category("fruit")
        assert [r.id for r in fruit] == ["apple", "banana"]

    asyncio.run(run())


def test_io_failure_propagates_and_is_retried_later() -> None:
    source = FakeDatasetSource(error=unavailable())
    store = ReferenceStore(source=source, retry_attempts=0)

    with pytest.raises(DatasetUnavailableError):
        asyncio.run(store.ensure_loaded())
    assert store.is_loaded is False

    source.error = None
    index = asyncio.run(store.ensure_loaded())

    assert index.record_count == 6
    assert source.calls == 2


def test_unexpected_source_errors_are_wrapped() -> None:
    source = FakeDatasetSource(error=OSError("disk gone"))
    store = ReferenceStore(source=source, retry_attempts=0)

    with pytest.raises(DatasetUnavailableError) as exc_info:
        asyncio.run(store.ensure_loaded())

    assert isinstance(exc_info.value.__cause__, OSError)


def test_load_retries_before_failing() -> None:
    source = FakeDatasetSource(error=unavailable())
    store = ReferenceStore(source=source, retry_attempts=2, retry_delay_seconds=0)

    with pytest.raises(DatasetUnavailableError):
        asyncio.run(store.ensure_loaded())

    assert source.calls == 3


def test_malformed_dataset_is_empty_with_warning(caplog, propagating_logs) -> None:
    store = ReferenceStore(
        source=FakeDatasetSource(payload={"items": []}), retry_attempts=0
    )
    with caplog.at_level(logging.WARNING, logger="meal_nutrition"):
        index = asyncio.run(store.ensure_loaded())

    assert index.record_count == 0
    assert "treating it as empty" in caplog.text
    assert asyncio.run(store.get_by_exact_name("apple")) is None


def test_invalid_records_are_skipped(caplog, propagating_logs) -> None:
    payload = {"foods": {"ok": {"name": "egg"}, "bad": {"calories": 1}}}
    store = ReferenceStore(source=FakeDatasetSource(payload=payload), retry_attempts=0)

    with caplog.at_level(logging.WARNING, logger="meal_nutrition"):
        index = asyncio.run(store.ensure_loaded())

    assert index.record_count == 1
    assert "Skipping invalid food record bad" in caplog.text


def test_refresh_swaps_in_new_generation(reference_store, dataset_source) -> None:
    first = asyncio.run(reference_store.ensure_loaded())
    dataset_source.payload = {"foods": {"egg": {"name": "egg", "calories": 142}}}

    second = asyncio.run(reference_store.refresh())

    assert second is not first
    assert second.generation == first.generation + 1
    assert asyncio.run(reference_store.get_by_id("apple")) is None
    assert asyncio.run(reference_store.get_by_id("egg")).nutrients.calories == 142


def test_failed_refresh_keeps_previous_index(reference_store, dataset_source) -> None:
    first = asyncio.run(reference_store.ensure_loaded())
    dataset_source.error = unavailable()

    with pytest.raises(DatasetUnavailableError):
        asyncio.run(reference_store.refresh())

    assert reference_store.stats().generation == first.generation
    assert asyncio.run(reference_store.get_by_id("apple")) is not None


def test_stats_before_and_after_load(reference_store) -> None:
    before = reference_store.stats()
    assert before.loaded is False
    assert before.record_count == 0
    assert before.loaded_at is None

    asyncio.run(reference_store.ensure_loaded())
    after = reference_store.stats()

    assert after.loaded is True
    assert after.record_count == 6
    assert after.alias_count == 7
    assert after.generation == 1
    assert after.loaded_at is not None


@dataclass
class SequencedDatasetSource(DatasetSource):
    """Serves one payload per call, each after its own delay."""

    responses: list[tuple[float, object]]
    calls: int = 0

    async def load(self) -> object:
        delay, payload = self.responses[self.calls]
        self.calls += 1
        await asyncio.sleep(delay)
        return payload


def test_refresh_during_slow_initial_load_wins() -> None:
    updated = copy.deepcopy(SAMPLE_DATASET)
    updated["foods"]["egg"] = {"name": "egg", "category": "eggs", "calories": 142}
    source = SequencedDatasetSource(
        responses=[(0.05, copy.deepcopy(SAMPLE_DATASET)), (0.0, updated)]
    )
    store = ReferenceStore(source=source, retry_attempts=0)

    async def run() -> tuple[int, int]:
        initial = asyncio.ensure_future(store.ensure_loaded())
        await asyncio.sleep(0)
        refreshed = await store.refresh()
        slow = await initial
        return refreshed.record_count, slow.record_count

    refreshed_count, initial_count = asyncio.run(run())

    assert refreshed_count == 7
    assert initial_count == 7
    assert store.stats().record_count == 7
    assert store.stats().generation == 2
