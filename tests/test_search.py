"""Tests for the reference index and lexical search."""

from meal_nutrition.domain.dataset import parse_dataset
from meal_nutrition.domain.foods import FoodRecord, NutrientProfile
from meal_nutrition.services.search import (
    FoodIndex,
    build_index,
    get_by_exact_name,
    get_by_id,
    get_by_ids,
    search_by_category,
    search_by_fuzzy_match,
    search_by_partial_name,
)
from meal_nutrition.services.similarity import levenshtein_similarity
from meal_nutrition.services.text import normalize_key, normalize_query
from tests.conftest import SAMPLE_DATASET


def _index() -> FoodIndex:
    return build_index(parse_dataset(SAMPLE_DATASET).records)


def _record(food_id: str, name: str, aliases: tuple[str, ...] = ()) -> FoodRecord:
    return FoodRecord(
        id=food_id,
        name=name,
        category="misc",
        aliases=aliases,
        standard_quantity="100g",
        nutrients=NutrientProfile(),
    )


def test_normalize_key_folds_width_case_and_punctuation() -> None:
    assert normalize_key("  ＡＰＰＬＥ　") == "apple"
    assert normalize_key("りんご。") == "りんご"
    assert normalize_key("Cooked  Rice！") == "cookedrice"
    assert normalize_key(None) == ""


def test_normalize_query_collapses_whitespace() -> None:
    assert normalize_query("  Cooked \t  RICE ") == "cooked rice"
    assert normalize_query("（白米）") == "(白米)"


def test_index_sizes_match_records() -> None:
    index = _index()

    assert index.record_count == 6
    assert len(index.by_name) == 6
    assert len(index.by_alias) == 7


def test_exact_lookup_by_name_and_alias() -> None:
    index = _index()

    assert get_by_exact_name(index, "APPLE").id == "apple"
    assert get_by_exact_name(index, "ｂａｎａｎａ").id == "banana"
    assert get_by_exact_name(index, "りんご").id == "apple"
    assert get_by_exact_name(index, "White Rice").id == "rice"
    assert get_by_exact_name(index, "") is None
    assert get_by_exact_name(index, "durian") is None


def test_name_wins_over_alias() -> None:
    index = build_index(
        [_record("a", "milk", aliases=("soy milk",)), _record("b", "soy milk")]
    )

    assert get_by_exact_name(index, "soy milk").id == "b"


def test_later_records_win_on_collisions() -> None:
    first = _record("a", "Tea")
    second = _record("a", "green tea")
    index = build_index([first, second, _record("b", "tea")])

    assert get_by_id(index, "a") is second
    assert get_by_exact_name(index, "tea").id == "b"
    assert index.record_count == 2


def test_get_by_ids_skips_unknown() -> None:
    found = get_by_ids(_index(), ["apple", "ghost", "salmon"])

    assert list(found) == ["apple", "salmon"]


def test_partial_search_prefers_names_then_aliases() -> None:
    index = _index()

    assert [r.id for r in search_by_partial_name(index, "rice")] == ["rice"]
    assert [r.id for r in search_by_partial_name(index, "an")] == ["banana"]
    assert [r.id for r in search_by_partial_name(index, "ご")] == ["apple", "rice"]
    assert search_by_partial_name(index, "   ") == []
    assert search_by_partial_name(index, "a", limit=0) == []
    assert len(search_by_partial_name(index, "a", limit=2)) == 2


def test_fuzzy_exact_hit_short_circuits() -> None:
    results = search_by_fuzzy_match(_index(), "Salmon")

    assert len(results) == 1
    assert results[0].record.id == "salmon"
    assert results[0].similarity == 1.0


def test_fuzzy_containment_matches_either_direction() -> None:
    index = _index()

    yogurt = search_by_fuzzy_match(index, "yogurt")
    assert [c.record.id for c in yogurt] == ["yogurt"]

    longer = search_by_fuzzy_match(index, "grilled salmon fillet")
    assert [c.record.id for c in longer] == ["salmon"]

    assert search_by_fuzzy_match(index, "durian") == []
    assert search_by_fuzzy_match(index, "") == []


def test_fuzzy_ties_keep_dataset_order_and_limit() -> None:
    index = build_index(
        [
            _record("1", "green tea"),
            _record("2", "black tea"),
            _record("3", "tea cake"),
        ]
    )

    results = search_by_fuzzy_match(index, "ea", limit=2)
    assert [c.record.id for c in results] == ["1", "2"]


def test_fuzzy_with_graded_scorer_ranks_descending() -> None:
    index = _index()

    results = search_by_fuzzy_match(
        index, "salmn", limit=3, scorer=levenshtein_similarity
    )

    assert results[0].record.id == "salmon"
    similarities = [c.similarity for c in results]
    assert similarities == sorted(similarities, reverse=True)
    assert all(0.0 < s <= 1.0 for s in similarities)


def test_category_search_uses_normalized_keys() -> None:
    index = _index()

    assert [r.id for r in search_by_category(index, "FRUIT")] == ["apple", "banana"]
    assert [r.id for r in search_by_category(index, "fruit", limit=1)] == ["apple"]
    assert search_by_category(index, "") == []
