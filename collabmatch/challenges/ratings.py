"""ELO skill ratings and adaptive challenge selection."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from collabmatch.challenges.models import Challenge

DEFAULT_RATING = 1200
K_BASE = 32
K_USER_MIN = 16
K_CHALLENGE_MIN = 12

DIFFICULTY_ELO: dict[str, int] = {
    "easy": 1000,
    "medium": 1200,
    "hard": 1400,
    "expert": 1600,
}


@dataclass(frozen=True)
class RatingUpdate:
    user_rating: int
    challenge_rating: int
    expected: float


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def map_difficulty_to_elo(difficulty: str | None) -> int:
    """Initial rating of an unrated challenge."""
    if not difficulty:
        return DEFAULT_RATING
    return DIFFICULTY_ELO.get(difficulty.lower(), DEFAULT_RATING)


def expected_score(user_rating: float, challenge_rating: float) -> float:
    """Probability that the user passes the challenge."""
    return 1 / (1 + 10 ** ((challenge_rating - user_rating) / 400))


def update_ratings(
    user_rating: float,
    user_attempts: int,
    challenge_rating: float,
    challenge_attempts: int,
    passed: bool,
) -> RatingUpdate:
    """Apply one attempt's outcome to both ratings.

    The K-factor shrinks with experience: by one point every 5 user
    attempts (floor 16) and every 10 challenge attempts (floor 12).
    """
    expected = expected_score(user_rating, challenge_rating)
    outcome = 1 if passed else 0

    k_user = max(K_USER_MIN, K_BASE - user_attempts // 5)
    k_challenge = max(K_CHALLENGE_MIN, K_BASE - challenge_attempts // 10)

    return RatingUpdate(
        user_rating=_round_half_up(user_rating + k_user * (outcome - expected)),
        challenge_rating=_round_half_up(
            challenge_rating + k_challenge * ((1 - outcome) - (1 - expected))
        ),
        expected=expected,
    )


def challenge_elo(challenge: Challenge, ratings: Mapping[str, int] | None = None) -> int:
    if ratings and ratings.get(challenge.id):
        return ratings[challenge.id]
    return map_difficulty_to_elo(challenge.difficulty_level)


def select_next_challenge(
    challenges: Sequence[Challenge],
    user_rating: float = DEFAULT_RATING,
    ratings: Mapping[str, int] | None = None,
) -> Challenge | None:
    """Pick the challenge rated closest to the user; ties keep input order."""
    if not challenges:
        return None
    return min(
        challenges,
        key=lambda challenge: abs(challenge_elo(challenge, ratings) - user_rating),
    )
