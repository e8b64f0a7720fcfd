"""Similarity scorers used by fuzzy food search."""

from collections.abc import Callable

from rapidfuzz.distance import Levenshtein

SimilarityScorer = Callable[[str, str], float]


def containment_similarity(query: str, candidate: str) -> float:
    """Score 1.0 when either string contains the other, else 0.0."""
    if not query or not candidate:
        return 0.0
    if query in candidate or candidate in query:
        return 1.0
    return 0.0


def levenshtein_similarity(query: str, candidate: str) -> float:
    """Graded edit-distance similarity with a bonus for containment."""
    if not query or not candidate:
        return 0.0
    if query == candidate:
        return 1.0
    score = Levenshtein.normalized_similarity(query, candidate)
    if query in candidate or candidate in query:
        shorter, longer = sorted((len(query), len(candidate)))
        score += 0.1 + (shorter / longer) * 0.1
    return max(0.0, min(1.0, score))


SCORERS: dict[str, SimilarityScorer] = {
    "containment": containment_similarity,
    "levenshtein": levenshtein_similarity,
}


def get_scorer(name: str) -> SimilarityScorer:
    try:
        return SCORERS[name]
    except KeyError as exc:
        raise ValueError(f"Unknown similarity scorer: {name}") from exc
