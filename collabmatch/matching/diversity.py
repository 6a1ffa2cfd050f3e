"""Maximal-marginal-relevance re-ranking of scored projects."""

from __future__ import annotations

import math
from collections.abc import Callable, Hashable, Sequence
from typing import TypeVar

from collabmatch.matching.models import ScoredProject

T = TypeVar("T")


def jaccard_similarity(a: frozenset[Hashable], b: frozenset[Hashable]) -> float:
    """Overlap of two sets in [0, 1]; two empty sets are not similar."""
    union = len(a | b)
    if not union:
        return 0.0
    return len(a & b) / union


def _project_languages(item: ScoredProject) -> frozenset[Hashable]:
    return item.project.language_names


def _project_relevance(item: ScoredProject) -> float:
    return float(item.score)


def diversity_rerank(
    items: Sequence[T],
    lam: float = 0.25,
    *,
    features: Callable[[T], frozenset[Hashable]] = _project_languages,  # type: ignore[assignment]
    relevance: Callable[[T], float] = _project_relevance,  # type: ignore[assignment]
    limit: int | None = None,
) -> list[T]:
    """Greedily order items by MMR over their technology sets.

    Each step picks the remaining item maximizing
    ``(1 - lam) * relevance - lam * 100 * max_similarity_to_selected``.
    Ties keep the earlier item, so the result is deterministic for a given
    input order. Lists of zero or one item are returned unchanged.
    """
    if len(items) <= 1:
        return list(items)

    target = len(items) if limit is None else max(0, min(limit, len(items)))
    remaining = list(items)
    remaining_features = [features(item) for item in remaining]
    selected: list[T] = []
    selected_features: list[frozenset[Hashable]] = []

    while remaining and len(selected) < target:
        best_index = 0
        best_score = -math.inf
        for index, candidate in enumerate(remaining):
            similarity = max(
                (
                    jaccard_similarity(remaining_features[index], chosen)
                    for chosen in selected_features
                ),
                default=0.0,
            )
            mmr = (1 - lam) * relevance(candidate) - lam * similarity * 100
            if mmr > best_score:
                best_score = mmr
                best_index = index

        selected.append(remaining.pop(best_index))
        selected_features.append(remaining_features.pop(best_index))

    return selected
