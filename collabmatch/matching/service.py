"""Project recommendation service."""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Awaitable, Sequence
from typing import Any, Protocol, TypeVar

from collabmatch.errors import (
    DataUnavailableError,
    RecommendationTimeoutError,
    UserNotFoundError,
)
from collabmatch.matching.cache import AsyncCache, TTLCache
from collabmatch.matching.config import MatchingConfig, get_matching_config
from collabmatch.matching.diversity import diversity_rerank
from collabmatch.matching.explain import build_match_factors
from collabmatch.matching.models import (
    CandidateFilter,
    MatchFactors,
    ProjectCandidate,
    Recommendation,
    ScoredProject,
    UserProfile,
)
from collabmatch.matching.scorers import aggregate_score, compute_features
from collabmatch.matching.tasks import BestEffortRunner

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ProjectStore(Protocol):
    """Data-store collaborator used by the recommendation service."""

    async def get_user_profile(self, user_id: str) -> UserProfile | None: ...

    async def get_candidate_projects(
        self, candidate_filter: CandidateFilter
    ) -> list[ProjectCandidate]: ...

    async def upsert_recommendations(
        self, recommendations: Sequence[Recommendation]
    ) -> None: ...


def round_score(score: float) -> int:
    """Round half up to an integer score in [0, 100]."""
    return max(0, min(100, int(math.floor(score + 0.5))))


class RecommendationService:
    """Rank recruitable projects for a user.

    Scoring is synchronous and stateless; the only mutable state is the
    injected candidate-pool cache and the background runner used to
    persist results.
    """

    def __init__(
        self,
        store: ProjectStore,
        config: MatchingConfig | None = None,
        *,
        cache: AsyncCache | None = None,
        side_effects: BestEffortRunner | None = None,
    ) -> None:
        self.store = store
        self.config = config or get_matching_config()
        self.cache = cache if cache is not None else TTLCache(self.config.cache_ttl_seconds)
        self.side_effects = side_effects or BestEffortRunner()

    @property
    def candidate_filter(self) -> CandidateFilter:
        return CandidateFilter(
            statuses=tuple(self.config.candidate_statuses),
            visibility=self.config.candidate_visibility,
        )

    async def recommend_projects(
        self,
        user_id: str,
        *,
        limit: int | None = None,
        diversify: bool = True,
        timeout: float | None = None,
    ) -> list[ScoredProject]:
        """Return up to ``limit`` explained recommendations for a user.

        Raises:
            UserNotFoundError: The user profile does not exist or could not be loaded.
            RecommendationTimeoutError: Loading the profile exceeded ``timeout``.
        """
        limit = self.config.default_limit if limit is None else limit
        if limit <= 0:
            return []

        user_result, pool_result = await asyncio.gather(
            self._with_timeout(self.store.get_user_profile(user_id), timeout),
            self._with_timeout(self._load_candidates(), timeout),
            return_exceptions=True,
        )

        if isinstance(user_result, asyncio.TimeoutError):
            raise RecommendationTimeoutError(user_id, timeout or 0.0) from user_result
        if isinstance(user_result, Exception):
            logger.warning("Failed to load profile for user %s: %s", user_id, user_result)
            raise UserNotFoundError(user_id) from user_result
        if isinstance(user_result, BaseException):
            raise user_result
        if user_result is None:
            raise UserNotFoundError(user_id)
        user: UserProfile = user_result

        if isinstance(pool_result, BaseException):
            if not isinstance(pool_result, Exception):
                raise pool_result
            logger.warning(
                "Candidate projects unavailable for user %s: %s", user_id, pool_result
            )
            return []
        candidates = [p for p in pool_result if not p.excludes(user_id)]

        scored = self.score_candidates(user, candidates)
        scored.sort(key=lambda item: item.raw_score, reverse=True)

        if diversify:
            window = scored[: limit * self.config.diversity_window_factor]
            scored = diversity_rerank(window, self.config.diversity_lambda)
        recommendations = scored[:limit]

        self._persist(user_id, recommendations)
        logger.info(
            "Recommended %d of %d candidate project(s) to user %s",
            len(recommendations),
            len(candidates),
            user_id,
        )
        return recommendations

    def score_candidates(
        self, user: UserProfile, candidates: Sequence[ProjectCandidate]
    ) -> list[ScoredProject]:
        """Score candidates in input order, keeping those above the threshold.

        A candidate whose scoring raises is logged and skipped.
        """
        kept: list[ScoredProject] = []
        for project in candidates:
            try:
                features = compute_features(user, project, self.config)
                score = aggregate_score(features, self.config)
                if score < self.config.recommendation_threshold:
                    continue
                kept.append(
                    ScoredProject(
                        project=project,
                        score=round_score(score),
                        match_factors=build_match_factors(features),
                        raw_score=score,
                    )
                )
            except Exception:
                logger.exception(
                    "Skipping project %s: scoring failed", getattr(project, "id", "?")
                )
        return kept

    def get_match_factors(
        self, user: UserProfile, project: ProjectCandidate
    ) -> tuple[int, MatchFactors]:
        """Score and explain one pair without applying the threshold."""
        features = compute_features(user, project, self.config)
        score = aggregate_score(features, self.config)
        return round_score(score), build_match_factors(features)

    def get_thresholds(self) -> dict[str, Any]:
        return self.config.thresholds()

    def clear_cache(self) -> None:
        self.cache.clear()

    async def _load_candidates(self) -> list[ProjectCandidate]:
        candidate_filter = self.candidate_filter

        async def _fetch() -> list[ProjectCandidate]:
            try:
                return list(await self.store.get_candidate_projects(candidate_filter))
            except Exception as e:
                raise DataUnavailableError(f"Failed to fetch projects: {e}") from e

        return await self.cache.get(
            ("candidates", candidate_filter), _fetch, self.config.cache_ttl_seconds
        )

    @staticmethod
    async def _with_timeout(awaitable: Awaitable[T], timeout: float | None) -> T:
        if timeout is None:
            return await awaitable
        return await asyncio.wait_for(awaitable, timeout)

    def _persist(self, user_id: str, recommendations: list[ScoredProject]) -> None:
        if not recommendations:
            return
        rows = [Recommendation.from_scored(user_id, item) for item in recommendations]
        self.side_effects.submit(
            lambda: self.store.upsert_recommendations(rows),
            description=f"persist {len(rows)} recommendation(s) for user {user_id}",
        )
