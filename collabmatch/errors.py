"""Exception hierarchy shared by the matching, evaluation and admission layers."""

from __future__ import annotations


class CollabMatchError(Exception):
    """Base class for all CollabMatch errors."""


class UserNotFoundError(CollabMatchError):
    """The requesting user's profile does not exist."""

    status_code = 404

    def __init__(self, user_id: str) -> None:
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id


class DataUnavailableError(CollabMatchError):
    """The candidate project pool could not be loaded."""


class RecommendationTimeoutError(CollabMatchError):
    """A data fetch for a recommendation call exceeded the caller's timeout."""

    def __init__(self, user_id: str, timeout: float) -> None:
        super().__init__(
            f"Timed out after {timeout:.2f}s loading data for user {user_id}"
        )
        self.user_id = user_id
        self.timeout = timeout


class PersistenceError(CollabMatchError):
    """A write to the data store failed."""


class EvaluationError(CollabMatchError):
    """A code submission could not be evaluated."""


class AdmissionRejectedError(CollabMatchError):
    """The admission queue could not schedule a request."""

    status_code = 503
    message = "Server is busy, please try again later"

    def __init__(self, queue_name: str, reason: str | None = None) -> None:
        detail = f" ({reason})" if reason else ""
        super().__init__(f"Queue '{queue_name}' rejected request{detail}")
        self.queue_name = queue_name
        self.reason = reason

    def to_response(self) -> dict[str, object]:
        """Body returned to the transport layer in place of the handler's."""
        return {"success": False, "message": self.message}


class ChallengeNotFoundError(CollabMatchError):
    """The submitted challenge does not exist or is inactive."""

    status_code = 404

    def __init__(self, challenge_id: str) -> None:
        super().__init__(f"Challenge not found: {challenge_id}")
        self.challenge_id = challenge_id


class AttemptLimitError(CollabMatchError):
    """The user has used every allowed attempt on a challenge."""

    status_code = 429

    def __init__(self, challenge_id: str, max_attempts: int) -> None:
        super().__init__(
            f"Maximum of {max_attempts} attempts reached for challenge {challenge_id}"
        )
        self.challenge_id = challenge_id
        self.max_attempts = max_attempts


class SubmissionTooShortError(CollabMatchError):
    """The submitted code is empty or shorter than the configured minimum."""

    status_code = 400

    def __init__(self, min_length: int) -> None:
        super().__init__(
            "Code submission is too short. Please provide a more complete "
            f"solution (minimum {min_length} characters)."
        )
        self.min_length = min_length


class AlreadyMemberError(CollabMatchError):
    """The user already belongs to the project whose challenge they submitted."""

    status_code = 409

    def __init__(self, project_id: str, user_id: str) -> None:
        super().__init__(f"User {user_id} is already a member of project {project_id}")
        self.project_id = project_id
        self.user_id = user_id
