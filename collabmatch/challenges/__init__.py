"""Coding challenges, attempt tracking and ELO skill ratings.

Public API:
    - ChallengeService: Evaluate submissions, gate project membership, update ratings
    - Challenge / AttemptRecord / AttemptStats: Data models
    - update_ratings / select_next_challenge: ELO helpers
"""

from collabmatch.challenges.models import (
    AttemptRecord,
    AttemptStats,
    Challenge,
    ChallengeRating,
    SkillRating,
)
from collabmatch.challenges.ratings import (
    RatingUpdate,
    expected_score,
    map_difficulty_to_elo,
    select_next_challenge,
    update_ratings,
)
from collabmatch.challenges.service import (
    AttemptEligibility,
    ChallengeService,
    ChallengeStore,
    SubmissionResult,
    generate_comforting_message,
)

__all__ = [
    "ChallengeService",
    "ChallengeStore",
    "SubmissionResult",
    "AttemptEligibility",
    "generate_comforting_message",
    "Challenge",
    "AttemptRecord",
    "AttemptStats",
    "ChallengeRating",
    "SkillRating",
    "RatingUpdate",
    "expected_score",
    "map_difficulty_to_elo",
    "select_next_challenge",
    "update_ratings",
]
