"""Sub-scores of the matching model: topics, languages and difficulty."""

from __future__ import annotations

from collections.abc import Sequence

from collabmatch.matching.config import MatchingConfig
from collabmatch.matching.levels import (
    level_to_num,
    normalize_level,
    normalize_required_level,
    years_to_level_name,
)
from collabmatch.matching.models import (
    CoverageResult,
    LanguageMatch,
    MatchFeatures,
    ProjectCandidate,
    ProjectLanguage,
    ProjectTopic,
    RequirementGap,
    TopicMatch,
    UserLanguage,
    UserProfile,
    UserTopic,
)

# Score of a family the project places no constraint on
NEUTRAL_SCORE = 50.0

# Share of the family score driven by match quality; the rest is breadth
QUALITY_SHARE = 0.85
COVERAGE_SHARE = 0.15


def _blend(total: float, covered_weight: float, total_weight: float) -> tuple[float, float]:
    if not total_weight:
        return 0.0, 0.0
    coverage = min(1.0, covered_weight / total_weight)
    base_score = total / total_weight
    return QUALITY_SHARE * base_score + COVERAGE_SHARE * coverage * 100, coverage


def topic_coverage_score(
    user_topics: Sequence[UserTopic],
    project_topics: Sequence[ProjectTopic],
    *,
    primary_boost: float = 1.5,
) -> CoverageResult:
    """Score how well the user's topics cover the project's declared topics.

    Each matched topic contributes the mean of the user's normalized
    interest and experience, scaled to 100 and weighted by
    ``primary_boost`` for primary topics. The result blends that weighted
    mean with the weighted share of topics covered at all.
    """
    if not project_topics:
        return CoverageResult(score=NEUTRAL_SCORE)

    by_name = {ut.topic_name: ut for ut in reversed(user_topics) if ut.topic_name}

    total = 0.0
    total_weight = 0.0
    covered_weight = 0.0
    matches: list[TopicMatch] = []
    gaps: list[RequirementGap] = []

    for requirement in project_topics:
        name = requirement.topic_name
        if not name:
            continue

        weight = primary_boost if requirement.is_primary else 1.0
        total_weight += weight

        user_topic = by_name.get(name)
        if user_topic is None:
            gaps.append(RequirementGap(name=name, is_primary=requirement.is_primary))
            continue

        experience = normalize_level(user_topic.experience_level)
        interest = normalize_level(user_topic.interest_level)
        contribution = ((experience + interest) / 2) * 100 * weight
        total += contribution
        covered_weight += weight
        matches.append(
            TopicMatch(
                name=name,
                user_experience=experience,
                user_interest=interest,
                is_primary=requirement.is_primary,
                contribution=contribution,
            )
        )

    score, coverage = _blend(total, covered_weight, total_weight)
    return CoverageResult(score=score, matches=matches, gaps=gaps, coverage=coverage)


def language_proficiency_score(
    user_languages: Sequence[UserLanguage],
    project_languages: Sequence[ProjectLanguage],
    *,
    primary_boost: float = 1.5,
) -> CoverageResult:
    """Score the user's proficiency against each required language level.

    A language at or above the required level contributes a full 100;
    below it contributes ``min(proficiency / required, 1.0) * 100``. Both
    are weighted by ``primary_boost`` for primary languages. Languages the
    user lacks are "missing" gaps, languages below requirement are also
    recorded as "below" gaps.
    """
    if not project_languages:
        return CoverageResult(score=NEUTRAL_SCORE)

    by_name = {
        ul.language_name: ul for ul in reversed(user_languages) if ul.language_name
    }

    total = 0.0
    total_weight = 0.0
    covered_weight = 0.0
    matches: list[LanguageMatch] = []
    gaps: list[RequirementGap] = []

    for requirement in project_languages:
        name = requirement.language_name
        if not name:
            continue

        weight = primary_boost if requirement.is_primary else 1.0
        total_weight += weight
        required = normalize_required_level(requirement.required_level)

        user_language = by_name.get(name)
        if user_language is None:
            gaps.append(
                RequirementGap(
                    name=name,
                    is_primary=requirement.is_primary,
                    status="missing",
                    user_proficiency=0.0,
                    required=required,
                )
            )
            continue

        proficiency = normalize_level(user_language.proficiency_level)
        if proficiency >= required:
            ratio = 1.0
        else:
            ratio = min(proficiency / required, 1.0) if required > 0 else 1.0
        contribution = ratio * 100 * weight
        total += contribution
        covered_weight += weight
        matches.append(
            LanguageMatch(
                name=name,
                user_proficiency=proficiency,
                required=required,
                is_primary=requirement.is_primary,
                contribution=contribution,
            )
        )
        if proficiency < required:
            gaps.append(
                RequirementGap(
                    name=name,
                    is_primary=requirement.is_primary,
                    status="below",
                    user_proficiency=proficiency,
                    required=required,
                )
            )

    score, coverage = _blend(total, covered_weight, total_weight)
    return CoverageResult(score=score, matches=matches, gaps=gaps, coverage=coverage)


def difficulty_alignment_score(
    user_years: object, required_level: object, *, penalty: float = 18.0
) -> float:
    """Score the user's seniority against the project's required level.

    Meeting or exceeding the requirement scores 100; every level short of
    it costs ``penalty`` points, floored at 0.
    """
    user_level = level_to_num(years_to_level_name(user_years))
    required = level_to_num(years_to_level_name(required_level))

    if user_level >= required:
        return 100.0
    return max(0.0, 100.0 - (required - user_level) * penalty)


def compute_features(
    user: UserProfile, project: ProjectCandidate, config: MatchingConfig
) -> MatchFeatures:
    """Compute all three sub-scores for one user/project pair."""
    return MatchFeatures(
        topic=topic_coverage_score(
            user.topics, project.topics, primary_boost=config.primary_boost
        ),
        language=language_proficiency_score(
            user.languages, project.languages, primary_boost=config.primary_boost
        ),
        difficulty=difficulty_alignment_score(
            user.years_experience,
            project.required_experience_level,
            penalty=config.difficulty_penalty,
        ),
    )


def aggregate_score(features: MatchFeatures, config: MatchingConfig) -> float:
    """Combine the sub-scores with the configured weights, clamped to [0, 100]."""
    score = (
        config.topic_weight * (features.topic.score or 0.0)
        + config.language_weight * (features.language.score or 0.0)
        + config.difficulty_weight * (features.difficulty or 0.0)
    )
    if score != score:  # NaN from a misbehaving scorer
        return 0.0
    return max(0.0, min(100.0, score))


def is_recommendable(score: float, config: MatchingConfig) -> bool:
    return score >= config.recommendation_threshold
