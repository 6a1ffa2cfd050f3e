"""Data models for the skill matching and recommendation engine."""

from __future__ import annotations

from dataclasses import dataclass, field, is_dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, Field, PlainSerializer

from collabmatch.matching.levels import Level, level_to_raw, parse_level


def _fraction_level(value: Any) -> Level | None:
    return parse_level(value, numbers_as="fraction")


def _years_level(value: Any) -> Level | None:
    return parse_level(value, numbers_as="years")


def _identifier(value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


# Levels where a bare number means a fraction in [0, 1]
FractionLevelField = Annotated[
    Level | None,
    BeforeValidator(_fraction_level),
    PlainSerializer(level_to_raw),
]
# Levels where a bare number means years of experience
YearsLevelField = Annotated[
    Level | None,
    BeforeValidator(_years_level),
    PlainSerializer(level_to_raw),
]
Identifier = Annotated[str, BeforeValidator(_identifier)]


def _jsonable(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, (set, frozenset)):
        return sorted(_jsonable(item) for item in value)
    if isinstance(value, dict):
        return {str(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if is_dataclass(value):
        return {field: _jsonable(getattr(value, field)) for field in value.__dict__}
    return value


# ---------------------------------------------------------------------------
# Profiles and projects (read-only snapshots loaded from the data store)
# ---------------------------------------------------------------------------


class UserTopic(BaseModel):
    """A topic a user is interested in or experienced with."""

    topic_name: str | None = Field(default=None, description="Topic name (join key)")
    interest_level: FractionLevelField = Field(default=None)
    experience_level: FractionLevelField = Field(default=None)


class UserLanguage(BaseModel):
    """A programming language on a user's profile."""

    language_name: str | None = Field(
        default=None, description="Language name (join key)"
    )
    proficiency_level: FractionLevelField = Field(default=None)
    years_experience: float | None = Field(default=None, ge=0)


class UserProfile(BaseModel):
    """Snapshot of a user's skills used for matching."""

    id: Identifier = Field(..., description="User identifier")
    years_experience: YearsLevelField = Field(
        default=None, description="Overall experience (years or level name)"
    )
    topics: list[UserTopic] = Field(default_factory=list)
    languages: list[UserLanguage] = Field(default_factory=list)

    def to_dict(self) -> dict:
        """Serialize to a dictionary."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: dict) -> UserProfile:
        """Deserialize from a dictionary."""
        return cls.model_validate(data)


class ProjectTopic(BaseModel):
    """A topic declared by a project."""

    topic_name: str | None = Field(default=None)
    is_primary: bool = Field(default=False)


class ProjectLanguage(BaseModel):
    """A language a project requires, with its required level."""

    language_name: str | None = Field(default=None)
    is_primary: bool = Field(default=False)
    required_level: FractionLevelField = Field(default=None)


class ProjectMember(BaseModel):
    """Membership of a user in a project."""

    user_id: Identifier
    role: str = Field(default="member")
    status: str = Field(default="active")


class ProjectCandidate(BaseModel):
    """A recruitable project considered for recommendation."""

    id: Identifier = Field(..., description="Project identifier")
    title: str = Field(default="")
    description: str = Field(default="")
    owner_id: Identifier | None = Field(default=None)
    required_experience_level: YearsLevelField = Field(default=None)
    status: str = Field(default="recruiting")
    visibility: str = Field(default="public")
    max_members: int | None = Field(default=None, ge=0)
    current_members: int = Field(default=0, ge=0)
    topics: list[ProjectTopic] = Field(default_factory=list)
    languages: list[ProjectLanguage] = Field(default_factory=list)
    members: list[ProjectMember] = Field(default_factory=list)

    def excludes(self, user_id: str) -> bool:
        """True if the user owns the project or is an active member of it."""
        if self.owner_id is not None and self.owner_id == user_id:
            return True
        return any(
            member.user_id == user_id and member.status == "active"
            for member in self.members
        )

    @property
    def language_names(self) -> frozenset[str]:
        return frozenset(
            lang.language_name for lang in self.languages if lang.language_name
        )

    def to_dict(self) -> dict:
        """Serialize to a dictionary."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: dict) -> ProjectCandidate:
        """Deserialize from a dictionary."""
        return cls.model_validate(data)


@dataclass(frozen=True)
class CandidateFilter:
    """Server-side filter applied when loading the candidate pool."""

    statuses: tuple[str, ...] = ("recruiting",)
    visibility: str | None = None


# ---------------------------------------------------------------------------
# Features (ephemeral, computed per user/project pair)
# ---------------------------------------------------------------------------


@dataclass
class TopicMatch:
    name: str
    user_experience: float
    user_interest: float
    is_primary: bool
    contribution: float


@dataclass
class LanguageMatch:
    name: str
    user_proficiency: float
    required: float
    is_primary: bool
    contribution: float

    @property
    def meets(self) -> bool:
        return self.user_proficiency >= self.required


@dataclass
class RequirementGap:
    """A project requirement the user lacks or does not meet."""

    name: str
    is_primary: bool
    status: Literal["missing", "below"] = "missing"
    user_proficiency: float | None = None
    required: float | None = None

    def __post_init__(self) -> None:
        if self.status not in {"missing", "below"}:
            raise ValueError(f"status must be 'missing' or 'below' (got {self.status})")


@dataclass
class CoverageResult:
    """Score of one requirement family (topics or languages)."""

    score: float
    matches: list = field(default_factory=list)
    gaps: list[RequirementGap] = field(default_factory=list)
    coverage: float = 0.0

    def __post_init__(self) -> None:
        if not (0.0 <= self.coverage <= 1.0):
            raise ValueError(f"coverage must be between 0.0 and 1.0 (got {self.coverage})")


@dataclass
class MatchFeatures:
    topic: CoverageResult
    language: CoverageResult
    difficulty: float


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass
class MatchFactors:
    """Explainable breakdown of a recommendation."""

    topic_coverage: float
    topic_matches: list[TopicMatch]
    language_proficiency: float
    language_matches: list[LanguageMatch]
    difficulty_alignment: float
    strengths_highlight: list[str] = field(default_factory=list)
    improvement_suggestions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return _jsonable(self)


@dataclass
class ScoredProject:
    """A candidate project that passed the recommendation threshold."""

    project: ProjectCandidate
    score: int
    match_factors: MatchFactors
    raw_score: float = 0.0

    def __post_init__(self) -> None:
        if not (0 <= self.score <= 100):
            raise ValueError(f"score must be between 0 and 100 (got {self.score})")

    @property
    def project_id(self) -> str:
        return self.project.id

    def to_dict(self) -> dict[str, Any]:
        return {
            "project_id": self.project_id,
            "title": self.project.title,
            "score": self.score,
            "match_factors": self.match_factors.to_dict(),
        }


@dataclass
class Recommendation:
    """Persisted recommendation row, keyed on (user_id, project_id)."""

    user_id: str
    project_id: str
    score: int
    match_factors: dict[str, Any]
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if not (0 <= self.score <= 100):
            raise ValueError(f"score must be between 0 and 100 (got {self.score})")

    @classmethod
    def from_scored(cls, user_id: str, scored: ScoredProject) -> Recommendation:
        return cls(
            user_id=user_id,
            project_id=scored.project_id,
            score=scored.score,
            match_factors=scored.match_factors.to_dict(),
        )

    def to_dict(self) -> dict[str, Any]:
        return _jsonable(self)
