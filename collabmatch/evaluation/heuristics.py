"""Language-agnostic heuristic scoring of code submissions.

The score is a proxy for structural sophistication, not correctness: the
submission is only pattern-matched, never executed.
"""

from __future__ import annotations

import re

from collabmatch.evaluation.config import EvaluationConfig, get_evaluation_config
from collabmatch.evaluation.models import CodeQualityDetails, EvaluationResult

_FUNCTION_RE = re.compile(
    r"function\s+\w+|const\s+\w+\s*=|def\s+\w+|class\s+\w+|func\s+\w+|fn\s+\w+"
    r"|public\s+\w+|private\s+\w+|sub\s+\w+|proc\s+\w+",
    re.IGNORECASE,
)
_LOGIC_RE = re.compile(
    r"if\s*\(|for\s*\(|while\s*\(|switch\s*\(|forEach|map|filter|reduce|match"
    r"|case|when|loop|do\s+|until|unless",
    re.IGNORECASE,
)
_RETURN_RE = re.compile(
    r"return\s+|yield\s+|res\.json|echo\s+|print\s+|println|puts\s+|console\.log",
    re.IGNORECASE,
)
_COMMENT_RE = re.compile(r"//|/\*|\*/|#|\"\"\"|'''|<!--")
_VARIABLE_RE = re.compile(
    r"const\s+\w+|let\s+\w+|var\s+\w+|:\w+\s+=|my\s+\w+|\$\w+\s*=|dim\s+\w+",
    re.IGNORECASE,
)
_ERROR_HANDLING_RE = re.compile(
    r"try\s*\{|catch\s*\(|except\s*:|rescue\s+|error\s*=>|throw\s+|raise\s+",
    re.IGNORECASE,
)
_ASYNC_RE = re.compile(
    r"async\s+|await\s+|promise|\.then\(|callback|future|task\s*<",
    re.IGNORECASE,
)
_OOP_RE = re.compile(
    r"class\s+\w+|extends\s+\w+|implements\s+\w+|interface\s+\w+|new\s+\w+\("
    r"|this\.|self\.",
    re.IGNORECASE,
)

# (exclusive lower bound on trimmed length, points)
LENGTH_BONUSES: tuple[tuple[int, int], ...] = ((20, 20), (100, 5), (200, 5))

FUNCTION_POINTS = 30
LOGIC_POINTS = 25
RETURN_POINTS = 15
COMMENT_POINTS = 5
VARIABLE_POINTS = 5
ERROR_HANDLING_BONUS = 3
ASYNC_BONUS = 3
OOP_BONUS = 4

FEEDBACK_TIERS: tuple[tuple[int, str], ...] = (
    (
        90,
        "Excellent work! Your code demonstrates exceptional programming skills "
        "with clear structure, logic, and best practices.",
    ),
    (
        80,
        "Great job! Your code shows strong understanding with good structure "
        "and solid implementation.",
    ),
    (
        70,
        "Good effort! Your code demonstrates solid programming fundamentals. "
        "Consider adding more robust error handling or comments.",
    ),
    (
        60,
        "Nice try! Your solution shows promise. Try adding more structure, "
        "control flow, and proper variable management.",
    ),
    (
        40,
        "Keep practicing! Focus on creating complete functions with clear logic "
        "and return values. Add comments to explain your approach.",
    ),
)
FALLBACK_FEEDBACK = (
    "Good start! Remember to include functions, variables, control flow "
    "(if/for/while), and return statements. Every expert was once a beginner!"
)


def analyze_code_quality(code: str | None) -> CodeQualityDetails:
    """Detect structural features of a submission."""
    src = str(code or "")
    return CodeQualityDetails(
        has_function=bool(_FUNCTION_RE.search(src)),
        has_logic=bool(_LOGIC_RE.search(src)),
        has_return=bool(_RETURN_RE.search(src)),
        has_comments=bool(_COMMENT_RE.search(src)),
        has_variables=bool(_VARIABLE_RE.search(src)),
        has_error_handling=bool(_ERROR_HANDLING_RE.search(src)),
        has_async=bool(_ASYNC_RE.search(src)),
        has_class_or_oop=bool(_OOP_RE.search(src)),
        code_length=len(src),
        line_count=len(src.split("\n")),
        has_proper_indentation="  " in src or "\t" in src,
    )


def score_details(details: CodeQualityDetails, length: int) -> int:
    score = sum(points for bound, points in LENGTH_BONUSES if length > bound)

    if details.has_function:
        score += FUNCTION_POINTS
    if details.has_logic:
        score += LOGIC_POINTS
    if details.has_return:
        score += RETURN_POINTS
    if details.has_comments:
        score += COMMENT_POINTS
    if details.has_variables:
        score += VARIABLE_POINTS

    if details.has_error_handling:
        score += ERROR_HANDLING_BONUS
    if details.has_async:
        score += ASYNC_BONUS
    if details.has_class_or_oop:
        score += OOP_BONUS

    return min(100, max(0, score))


def evaluate_code(code: str | None, *, min_length: int = 10) -> int:
    """Score a submission from 0 to 100; empty or very short input scores 0."""
    src = str(code or "").strip()
    if not src or len(src) < min_length:
        return 0
    return score_details(analyze_code_quality(src), len(src))


def generate_feedback(score: int) -> str:
    """Canned encouragement for a score tier."""
    for floor, message in FEEDBACK_TIERS:
        if score >= floor:
            return message
    return FALLBACK_FEEDBACK


class CodeQualityEvaluator:
    """Heuristic evaluator used when the target language is unknown."""

    def __init__(self, config: EvaluationConfig | None = None) -> None:
        self.config = config or get_evaluation_config()

    def evaluate(self, code: str | None) -> EvaluationResult:
        score = evaluate_code(code, min_length=self.config.min_code_length)
        details = analyze_code_quality(str(code or "").strip())
        return EvaluationResult(
            score=score,
            passed=score >= self.config.min_passing_score,
            feedback=generate_feedback(score),
            details=details.to_dict(),
        )
