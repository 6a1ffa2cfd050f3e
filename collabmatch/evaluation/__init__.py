"""Heuristic evaluation of challenge code submissions.

Public API:
    - CodeQualityEvaluator / evaluate_code: Language-agnostic structural score
    - LanguageFeatureEvaluator: Score against a language's feature table
    - resolve_language_name: Challenge, project or default target language
    - EvaluationConfig: Configuration settings
    - EvaluationResult: Score, pass flag, feedback and details
"""

from collabmatch.evaluation.config import (
    EvaluationConfig,
    get_evaluation_config,
    reset_evaluation_config,
)
from collabmatch.evaluation.features import get_language_features, supported_languages
from collabmatch.evaluation.heuristics import (
    CodeQualityEvaluator,
    evaluate_code,
    generate_feedback,
)
from collabmatch.evaluation.models import EvaluationResult
from collabmatch.evaluation.service import (
    LanguageFeatureEvaluator,
    evaluate_code_with_language_features,
    resolve_language_name,
)

__all__ = [
    "CodeQualityEvaluator",
    "evaluate_code",
    "generate_feedback",
    "LanguageFeatureEvaluator",
    "evaluate_code_with_language_features",
    "resolve_language_name",
    "get_language_features",
    "supported_languages",
    "EvaluationConfig",
    "get_evaluation_config",
    "reset_evaluation_config",
    "EvaluationResult",
]
