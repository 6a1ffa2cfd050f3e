"""Language-aware evaluation of challenge submissions.

Scores a submission against the feature table of its target language
(declaration words, control keywords, built-in calls, named idiom
patterns), adds comment, complexity and organization bonuses, and builds
itemized feedback. Any internal failure yields a fixed neutral result.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable

from collabmatch.errors import EvaluationError
from collabmatch.evaluation.config import EvaluationConfig, get_evaluation_config
from collabmatch.evaluation.features import (
    COMMENT_PATTERNS,
    COMPLEXITY_INDICATORS,
    LanguageFeatures,
    get_language_features,
)
from collabmatch.evaluation.models import EvaluationResult, LanguageFeatureDetails
from collabmatch.matching.models import ProjectLanguage

logger = logging.getLogger(__name__)

MIN_LENGTH = 20
LENGTH_POINTS = 5
FUNCTION_POINTS, FUNCTION_CAP = 4, 20
KEYWORD_POINTS, KEYWORD_CAP = 3, 25
METHOD_POINTS, METHOD_CAP = 3, 15
PATTERN_POINTS, PATTERN_CAP = 3, 20
COMMENT_POINTS = 5
COMPLEXITY_CAP = 10
ORGANIZATION_POINTS = 5
ORGANIZED_LINES = (10, 500)

CHALLENGING_DIFFICULTIES = frozenset({"hard", "expert"})
ENCOURAGEMENT = " This is a challenging problem - great effort tackling it!"

FALLBACK_SCORE = 50
FALLBACK_FEEDBACK = (
    "Code submitted but could not be fully evaluated. Please review your solution."
)

FEEDBACK_TIERS: tuple[tuple[int, str], ...] = (
    (90, "Excellent work! Your {language} code demonstrates exceptional programming skills and best practices."),
    (80, "Great job! Your {language} code shows strong understanding and good structure."),
    (70, "Good effort! Your {language} code demonstrates solid programming fundamentals."),
    (60, "Nice try! Your {language} solution shows promise."),
    (40, "Keep practicing! Your {language} code needs more structure."),
)
LOW_TIER_FEEDBACK = "Good start! Focus on using {language} functions and control structures."


def resolve_language_name(
    challenge_language: str | None,
    project_languages: Iterable[ProjectLanguage] = (),
    default: str | None = None,
) -> str:
    """Pick the target language of a submission.

    The challenge's own language wins, then the project's primary language,
    then the configured default.
    """
    if challenge_language:
        return challenge_language
    for language in project_languages:
        if language.is_primary and language.language_name:
            return language.language_name
    return default or get_evaluation_config().default_language


def _word_hit(word: str, code: str) -> bool:
    return re.search(rf"\b{re.escape(word)}\b", code, re.IGNORECASE) is not None


def _literal_hit(text: str, code: str) -> bool:
    return re.search(re.escape(text), code, re.IGNORECASE) is not None


def analyze_language_features(
    code: str, language_name: str, features: LanguageFeatures
) -> tuple[int, LanguageFeatureDetails]:
    """Score trimmed code against one language's feature table."""
    details = LanguageFeatureDetails(language_name=language_name)
    found, missing = details.found_features, details.missing_features
    score = 0

    if len(code) >= MIN_LENGTH:
        score += LENGTH_POINTS
        found.append("Adequate code length")
    else:
        missing.append("Code is too short")

    function_hits = [word for word in features.functions if _word_hit(word, code)]
    if function_hits:
        score += min(FUNCTION_CAP, len(function_hits) * FUNCTION_POINTS)
        details.has_function = True
        found.extend(f"Uses '{word}'" for word in function_hits)
    else:
        missing.append("No language-specific functions found")

    keyword_count = sum(1 for word in features.keywords if _word_hit(word, code))
    if keyword_count:
        score += min(KEYWORD_CAP, keyword_count * KEYWORD_POINTS)
        details.has_logic = True
        found.append(f"Uses {keyword_count} control structure(s)")
    else:
        missing.append("No control structures (if/for/while)")

    method_count = sum(1 for method in features.methods if _literal_hit(method, code))
    if method_count:
        score += min(METHOD_CAP, method_count * METHOD_POINTS)
        found.append(f"Uses {method_count} built-in method(s)")

    pattern_score = 0
    for name, pattern in features.patterns.items():
        hits = sum(1 for _ in pattern.finditer(code))
        if hits:
            pattern_score += PATTERN_POINTS
            details.pattern_matches[name] = hits
            found.append(f"Uses {name} ({hits}x)")
    score += min(PATTERN_CAP, pattern_score)
    details.proper_structure = pattern_score > 0

    if any(pattern.search(code) for pattern in COMMENT_PATTERNS):
        score += COMMENT_POINTS
        details.has_comments = True
        found.append("Includes comments")

    complexity_score = 0
    for pattern, weight, _label in COMPLEXITY_INDICATORS:
        hits = len(pattern.findall(code))
        complexity_score += hits * weight
        details.complexity += hits
    score += min(COMPLEXITY_CAP, math.floor(complexity_score / 2))

    lines = [line for line in code.split("\n") if line.strip()]
    low, high = ORGANIZED_LINES
    if low < len(lines) < high:
        score += ORGANIZATION_POINTS
        found.append("Well-organized code structure")

    return min(100, score), details


def build_feedback(score: int, details: LanguageFeatureDetails) -> str:
    """Tier message, then up to three suggestions and three strengths."""
    template = next(
        (text for floor, text in FEEDBACK_TIERS if score >= floor), LOW_TIER_FEEDBACK
    )
    feedback = template.format(language=details.language_name)

    if details.missing_features:
        feedback += "\n\nSuggestions:"
        for item in details.missing_features[:3]:
            feedback += f"\n• {item}"

    if len(details.found_features) > 3:
        feedback += "\n\nStrengths:"
        for item in details.found_features[:3]:
            feedback += f"\n• {item}"

    return feedback


class LanguageFeatureEvaluator:
    """Evaluates submissions against per-language feature tables."""

    def __init__(self, config: EvaluationConfig | None = None) -> None:
        self.config = config or get_evaluation_config()

    def evaluate(
        self,
        code: str | None,
        language_name: str | None = None,
        difficulty_level: str | None = None,
    ) -> EvaluationResult:
        language = language_name or self.config.default_language
        try:
            return self._evaluate(code, language, difficulty_level)
        except Exception as e:
            logger.exception("Language-feature evaluation failed for %s", language)
            return EvaluationResult(
                score=FALLBACK_SCORE,
                passed=False,
                feedback=FALLBACK_FEEDBACK,
                details={"error": str(e)},
                language_name=language,
            )

    def _evaluate(
        self, code: str | None, language: str, difficulty_level: str | None
    ) -> EvaluationResult:
        src = str(code or "").strip()
        try:
            features = get_language_features(language)
            score, details = analyze_language_features(src, language, features)
        except re.error as e:
            raise EvaluationError(f"Invalid feature pattern for {language}: {e}") from e

        feedback = build_feedback(score, details)
        if difficulty_level in CHALLENGING_DIFFICULTIES:
            feedback += ENCOURAGEMENT

        passed = score >= self.config.min_passing_score
        logger.debug(
            "Evaluated %s submission: score=%d found=%d missing=%d",
            language,
            score,
            len(details.found_features),
            len(details.missing_features),
        )
        return EvaluationResult(
            score=score,
            passed=passed,
            feedback=feedback,
            details=details.to_dict(),
            language_name=language,
            used_language_features=True,
        )


def evaluate_code_with_language_features(
    code: str | None,
    language_name: str | None = None,
    difficulty_level: str | None = None,
    *,
    config: EvaluationConfig | None = None,
) -> EvaluationResult:
    """Convenience wrapper around `LanguageFeatureEvaluator.evaluate`."""
    return LanguageFeatureEvaluator(config).evaluate(code, language_name, difficulty_level)
