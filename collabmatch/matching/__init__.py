"""Skill matching and project recommendation.

Scores recruitable projects for a user from topic coverage, language
proficiency and difficulty alignment, explains each match, and re-ranks
the result for diversity.

Public API:
    - RecommendationService: Load, score, re-rank and persist recommendations
    - MatchingConfig: Configuration settings
    - UserProfile / ProjectCandidate: Input snapshots
    - ScoredProject / MatchFactors / Recommendation: Results
    - TTLCache / NullCache: Candidate pool caches
    - BestEffortRunner: Fire-and-forget side effects
"""

from collabmatch.matching.cache import NullCache, TTLCache
from collabmatch.matching.config import (
    MatchingConfig,
    get_matching_config,
    reset_matching_config,
)
from collabmatch.matching.models import (
    CandidateFilter,
    MatchFactors,
    ProjectCandidate,
    ProjectLanguage,
    ProjectMember,
    ProjectTopic,
    Recommendation,
    ScoredProject,
    UserLanguage,
    UserProfile,
    UserTopic,
)
from collabmatch.matching.service import ProjectStore, RecommendationService
from collabmatch.matching.tasks import BestEffortRunner

__all__ = [
    "RecommendationService",
    "ProjectStore",
    "MatchingConfig",
    "get_matching_config",
    "reset_matching_config",
    "CandidateFilter",
    "UserProfile",
    "UserTopic",
    "UserLanguage",
    "ProjectCandidate",
    "ProjectTopic",
    "ProjectLanguage",
    "ProjectMember",
    "ScoredProject",
    "MatchFactors",
    "Recommendation",
    "TTLCache",
    "NullCache",
    "BestEffortRunner",
]
