"""Pytest configuration and shared fixtures."""

import pytest


@pytest.fixture(autouse=True)
def _reset_singletons():
    """Give every test fresh configuration singletons and logging state."""
    from collabmatch.admission.config import reset_admission_config
    from collabmatch.config.settings import reset_settings
    from collabmatch.evaluation.config import reset_evaluation_config
    from collabmatch.matching.config import reset_matching_config
    from collabmatch.utils.logging import reset_logging

    resets = (
        reset_admission_config,
        reset_settings,
        reset_evaluation_config,
        reset_matching_config,
        reset_logging,
    )
    for reset in resets:
        reset()
    yield
    for reset in resets:
        reset()


@pytest.fixture
def matching_config():
    """MatchingConfig with defaults, isolated from any .env file."""
    from collabmatch.matching.config import MatchingConfig

    return MatchingConfig(_env_file=None)  # type: ignore[call-arg]


@pytest.fixture
def evaluation_config():
    """EvaluationConfig with defaults, isolated from any .env file."""
    from collabmatch.evaluation.config import EvaluationConfig

    return EvaluationConfig(_env_file=None)  # type: ignore[call-arg]


@pytest.fixture
def sample_user():
    """A mid-level Python/JavaScript developer interested in web and data."""
    from collabmatch.matching.models import UserProfile

    return UserProfile.model_validate(
        {
            "id": "user-1",
            "years_experience": 2,
            "topics": [
                {
                    "topic_name": "Web Development",
                    "interest_level": "high",
                    "experience_level": "intermediate",
                },
                {
                    "topic_name": "Data Science",
                    "interest_level": "medium",
                    "experience_level": "beginner",
                },
            ],
            "languages": [
                {"language_name": "Python", "proficiency_level": "advanced"},
                {"language_name": "JavaScript", "proficiency_level": "intermediate"},
            ],
        }
    )


@pytest.fixture
def make_project():
    """Factory for ProjectCandidate records with sensible defaults."""
    from collabmatch.matching.models import ProjectCandidate

    def _make(project_id: str = "p1", **overrides):
        data = {
            "id": project_id,
            "title": f"Project {project_id}",
            "owner_id": "owner-1",
            "required_experience_level": "intermediate",
            "topics": [{"topic_name": "Web Development", "is_primary": True}],
            "languages": [
                {
                    "language_name": "Python",
                    "is_primary": True,
                    "required_level": "intermediate",
                }
            ],
        }
        data.update(overrides)
        return ProjectCandidate.model_validate(data)

    return _make
