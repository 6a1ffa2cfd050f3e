"""Challenge submission, skill rating and adaptive selection service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

from collabmatch.challenges.models import (
    AttemptRecord,
    AttemptStats,
    Challenge,
    ChallengeRating,
    SkillRating,
)
from collabmatch.challenges.ratings import (
    DEFAULT_RATING,
    RatingUpdate,
    map_difficulty_to_elo,
    select_next_challenge,
    update_ratings,
)
from collabmatch.errors import (
    AlreadyMemberError,
    AttemptLimitError,
    ChallengeNotFoundError,
    SubmissionTooShortError,
)
from collabmatch.evaluation.config import EvaluationConfig, get_evaluation_config
from collabmatch.evaluation.models import EvaluationResult
from collabmatch.evaluation.service import LanguageFeatureEvaluator, resolve_language_name
from collabmatch.matching.models import ProjectCandidate

logger = logging.getLogger(__name__)

# Failed attempts on one project before the user is offered a way out
ALERT_THRESHOLD = 7

COMFORTING_MESSAGES: tuple[tuple[int, str], ...] = (
    (
        10,
        "You've tried {count} times to join \"{title}\". It's completely okay to "
        "take a break and come back stronger! Consider exploring beginner-friendly "
        "resources or trying a different project that matches your current skill "
        "level. Remember, every expert was once a beginner!",
    ),
    (
        ALERT_THRESHOLD,
        "It seems like you're having a hard time entering the \"{title}\" project "
        "and answering the challenge. Don't worry, coding challenges can be tricky! "
        "Consider reviewing the requirements again, or perhaps this project might be "
        "more advanced than your current skill level. Keep practicing and you'll "
        "get there!",
    ),
)
DEFAULT_COMFORT = "Keep trying! You can do this!"


def generate_comforting_message(attempt_count: int, project_title: str | None) -> str:
    """Pick the message for a user who keeps failing a project's challenge."""
    title = project_title or "this project"
    for threshold, template in COMFORTING_MESSAGES:
        if attempt_count >= threshold:
            return template.format(count=attempt_count, title=title)
    return DEFAULT_COMFORT


class ChallengeStore(Protocol):
    """Data-store collaborator used by the challenge service."""

    async def get_challenge(self, challenge_id: str) -> Challenge | None: ...

    async def list_challenges(
        self, language_name: str | None = None, project_id: str | None = None
    ) -> list[Challenge]: ...

    async def count_attempts(self, user_id: str, challenge_id: str) -> int: ...

    async def record_attempt(self, attempt: AttemptRecord) -> int: ...

    async def get_attempt_stats(self, user_id: str) -> AttemptStats: ...

    async def count_failed_attempts(self, user_id: str, project_id: str) -> int: ...

    async def is_member(self, project_id: str, user_id: str) -> bool: ...

    async def add_member(
        self, project_id: str, user_id: str, role: str = "member"
    ) -> bool: ...

    async def get_skill_rating(
        self, user_id: str, language_name: str
    ) -> SkillRating | None: ...

    async def upsert_skill_rating(
        self, user_id: str, language_name: str, rating: SkillRating
    ) -> None: ...

    async def get_challenge_rating(self, challenge_id: str) -> ChallengeRating | None: ...

    async def get_challenge_ratings(self) -> dict[str, int]: ...

    async def upsert_challenge_rating(
        self, challenge_id: str, rating: ChallengeRating
    ) -> None: ...


@dataclass
class SubmissionResult:
    """Outcome of one challenge submission."""

    attempt_id: int
    attempt_number: int
    result: EvaluationResult
    ratings: RatingUpdate | None = None
    project_joined: bool = False
    failed_attempts: int | None = None
    alert_message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "attempt_id": self.attempt_id,
            "attempt_number": self.attempt_number,
            **self.result.to_dict(),
            "project_joined": self.project_joined,
        }
        if self.ratings is not None:
            payload["user_rating"] = self.ratings.user_rating
            payload["challenge_rating"] = self.ratings.challenge_rating
        if self.failed_attempts is not None:
            payload["failed_attempts"] = self.failed_attempts
        if self.alert_message is not None:
            payload["alert_message"] = self.alert_message
        return payload


@dataclass
class AttemptEligibility:
    """Whether a user may attempt a project's challenge."""

    can_attempt: bool
    reason: str | None = None
    failed_attempts: int = 0
    alert_message: str | None = None


class ChallengeService:
    """Evaluate challenge submissions and keep skill ratings current."""

    def __init__(
        self,
        store: ChallengeStore,
        config: EvaluationConfig | None = None,
        *,
        evaluator: LanguageFeatureEvaluator | None = None,
    ) -> None:
        self.store = store
        self.config = config or get_evaluation_config()
        self.evaluator = evaluator or LanguageFeatureEvaluator(self.config)

    async def submit(
        self,
        user_id: str,
        challenge_id: str,
        code: str,
        project: ProjectCandidate | None = None,
    ) -> SubmissionResult:
        """Evaluate and record a submission.

        With a project, a passing attempt makes the user a member of it and
        a failing one reports how many times they have failed that project.

        Raises:
            SubmissionTooShortError: If the trimmed code is below the minimum length.
            ChallengeNotFoundError: If the challenge does not exist or is inactive.
            AlreadyMemberError: If the user already belongs to ``project``.
            AttemptLimitError: If the user has no attempts left.
        """
        if len(str(code or "").strip()) < self.config.min_code_length:
            raise SubmissionTooShortError(self.config.min_code_length)

        challenge = await self.store.get_challenge(challenge_id)
        if challenge is None or not challenge.is_active:
            raise ChallengeNotFoundError(challenge_id)

        if project is not None and await self.store.is_member(project.id, user_id):
            raise AlreadyMemberError(project.id, user_id)

        previous = await self.store.count_attempts(user_id, challenge_id)
        if previous >= self.config.max_attempts:
            raise AttemptLimitError(challenge_id, self.config.max_attempts)

        language = resolve_language_name(
            challenge.language_name,
            project.languages if project is not None else (),
            self.config.default_language,
        )
        result = self.evaluator.evaluate(code, language, challenge.difficulty_level)

        attempt_id = await self.store.record_attempt(
            AttemptRecord(
                user_id=user_id,
                challenge_id=challenge.id,
                score=result.score,
                passed=result.passed,
                feedback=result.feedback,
                submitted_code=code,
                language_name=language,
                project_id=project.id if project is not None else challenge.project_id,
            )
        )
        logger.info(
            "Recorded attempt %d for user %s on challenge %s: score=%d status=%s",
            attempt_id,
            user_id,
            challenge.id,
            result.score,
            result.status,
        )

        ratings: RatingUpdate | None = None
        try:
            ratings = await self.update_skill_ratings(
                user_id, language, challenge, result.passed
            )
        except Exception:
            # Rating bookkeeping never fails a recorded submission
            logger.exception(
                "Failed to update skill ratings for user %s on challenge %s",
                user_id,
                challenge.id,
            )

        submission = SubmissionResult(
            attempt_id=attempt_id,
            attempt_number=previous + 1,
            result=result,
            ratings=ratings,
        )
        if project is None:
            return submission

        if result.passed:
            submission.project_joined = await self.store.add_member(project.id, user_id)
            if submission.project_joined:
                logger.info("User %s joined project %s", user_id, project.id)
        else:
            failed = await self.store.count_failed_attempts(user_id, project.id)
            submission.failed_attempts = failed
            if failed >= ALERT_THRESHOLD:
                submission.alert_message = generate_comforting_message(
                    failed, project.title
                )
        return submission

    async def can_attempt(
        self, user_id: str, project: ProjectCandidate
    ) -> AttemptEligibility:
        """Check whether a user may still attempt a project's challenge."""
        if await self.store.is_member(project.id, user_id):
            return AttemptEligibility(can_attempt=False, reason="already_member")

        failed = await self.store.count_failed_attempts(user_id, project.id)
        alert = (
            generate_comforting_message(failed, project.title)
            if failed >= ALERT_THRESHOLD
            else None
        )
        return AttemptEligibility(
            can_attempt=True, failed_attempts=failed, alert_message=alert
        )

    async def update_skill_ratings(
        self, user_id: str, language_name: str, challenge: Challenge, passed: bool
    ) -> RatingUpdate:
        """Apply an ELO update to the user's language rating and the challenge."""
        user = await self.store.get_skill_rating(user_id, language_name) or SkillRating()
        current = await self.store.get_challenge_rating(challenge.id)
        if current is None:
            current = ChallengeRating(
                rating=map_difficulty_to_elo(challenge.difficulty_level)
            )

        update = update_ratings(
            user.rating, user.attempts, current.rating, current.attempts, passed
        )

        await self.store.upsert_skill_rating(
            user_id,
            language_name,
            SkillRating(rating=update.user_rating, attempts=user.attempts + 1),
        )
        await self.store.upsert_challenge_rating(
            challenge.id,
            ChallengeRating(
                rating=update.challenge_rating,
                attempts=current.attempts + 1,
                pass_count=current.pass_count + (1 if passed else 0),
            ),
        )
        logger.debug(
            "Ratings updated: user %s %s -> %d, challenge %s -> %d (expected %.3f)",
            user_id,
            language_name,
            update.user_rating,
            challenge.id,
            update.challenge_rating,
            update.expected,
        )
        return update

    async def next_challenge(
        self, user_id: str, language_name: str, project_id: str | None = None
    ) -> tuple[Challenge | None, int]:
        """Pick the challenge closest to the user's rating in a language."""
        skill = await self.store.get_skill_rating(user_id, language_name)
        user_rating = skill.rating if skill is not None else DEFAULT_RATING

        challenges = await self.store.list_challenges(language_name, project_id)
        ratings = await self.store.get_challenge_ratings()
        return select_next_challenge(challenges, user_rating, ratings), user_rating

    async def get_stats(self, user_id: str) -> AttemptStats:
        return await self.store.get_attempt_stats(user_id)
