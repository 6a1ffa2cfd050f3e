"""Human-readable strengths and improvement suggestions for a match."""

from __future__ import annotations

import math

from collabmatch.matching.models import (
    LanguageMatch,
    MatchFactors,
    MatchFeatures,
    RequirementGap,
    TopicMatch,
)

MAX_HIGHLIGHTS = 3
MAX_SUGGESTIONS = 3

# Suggestions are phrased on a 1..5 skill scale
SKILL_STEPS = 5


def top_language_matches(
    matches: list[LanguageMatch], limit: int = MAX_HIGHLIGHTS
) -> list[LanguageMatch]:
    """Matches meeting their requirement, primary first, then by proficiency."""
    meeting = [m for m in matches if m.meets]
    meeting.sort(key=lambda m: (not m.is_primary, -m.user_proficiency))
    return meeting[:limit]


def top_topic_matches(
    matches: list[TopicMatch], limit: int = MAX_HIGHLIGHTS
) -> list[TopicMatch]:
    """Topic matches, primary first, then by experience."""
    ranked = sorted(matches, key=lambda m: (not m.is_primary, -m.user_experience))
    return ranked[:limit]


def strengths_highlight(
    language_matches: list[LanguageMatch], topic_matches: list[TopicMatch]
) -> list[str]:
    bits: list[str] = []
    if language_matches:
        bits.append(f"Strong fit in {language_matches[0].name}")
    if topic_matches:
        bits.append(f"Good coverage on {topic_matches[0].name}")
    return bits


def suggest_improvement(gap: RequirementGap) -> str:
    if gap.required is None:
        return f"Explore topic {gap.name}"

    if gap.status == "missing":
        target = max(2, math.ceil(gap.required * SKILL_STEPS))
        return f"Add basics of {gap.name} (target ~{target}/{SKILL_STEPS})"

    proficiency = gap.user_proficiency or 0.0
    steps = max(1, math.ceil(gap.required * SKILL_STEPS - proficiency * SKILL_STEPS))
    return f"Level up {gap.name} by ~{steps} step(s) to meet project needs"


def suggest_improvements(
    language_gaps: list[RequirementGap],
    topic_gaps: list[RequirementGap],
    limit: int = MAX_SUGGESTIONS,
) -> list[str]:
    """One suggestion per gap, languages before topics, primary gaps first."""
    gaps = sorted([*language_gaps, *topic_gaps], key=lambda g: not g.is_primary)
    return [suggest_improvement(gap) for gap in gaps[:limit]]


def build_match_factors(features: MatchFeatures) -> MatchFactors:
    """Derive the explanation object from already-computed features."""
    language_matches = top_language_matches(features.language.matches)
    topic_matches = top_topic_matches(features.topic.matches)

    return MatchFactors(
        topic_coverage=features.topic.score,
        topic_matches=topic_matches,
        language_proficiency=features.language.score,
        language_matches=language_matches,
        difficulty_alignment=features.difficulty,
        strengths_highlight=strengths_highlight(language_matches, topic_matches),
        improvement_suggestions=suggest_improvements(
            features.language.gaps, features.topic.gaps
        ),
    )
