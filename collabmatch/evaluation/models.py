"""Data models for code submission evaluation."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Literal


@dataclass
class CodeQualityDetails:
    """Structural signals found in a submission by the heuristic evaluator."""

    has_function: bool = False
    has_logic: bool = False
    has_return: bool = False
    has_comments: bool = False
    has_variables: bool = False
    has_error_handling: bool = False
    has_async: bool = False
    has_class_or_oop: bool = False
    code_length: int = 0
    line_count: int = 0
    has_proper_indentation: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class LanguageFeatureDetails:
    """Itemized findings of the language-feature evaluator."""

    language_name: str
    has_function: bool = False
    has_logic: bool = False
    has_comments: bool = False
    proper_structure: bool = False
    complexity: int = 0
    found_features: list[str] = field(default_factory=list)
    missing_features: list[str] = field(default_factory=list)
    pattern_matches: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class EvaluationResult:
    """Outcome of evaluating one code submission."""

    score: int
    passed: bool
    feedback: str
    details: dict[str, Any] = field(default_factory=dict)
    language_name: str | None = None
    used_language_features: bool = False

    def __post_init__(self) -> None:
        if not (0 <= self.score <= 100):
            raise ValueError(f"score must be between 0 and 100 (got {self.score})")

    @property
    def status(self) -> Literal["passed", "completed"]:
        return "passed" if self.passed else "completed"

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["status"] = self.status
        return payload
