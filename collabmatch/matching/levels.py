"""Level representations and their normalization to a common [0, 1] scale.

Profile and project data express skill levels in three interchangeable
ways: a named level ("beginner" .. "expert", or "low" .. "high"), a
fraction already in [0, 1], or a number of years. ``parse_level`` is the
only place that inspects raw values; everything downstream works on the
``Level`` union and goes through the normalization functions here.

All public functions are total: any input, including ``None``, NaN and
unknown strings, maps to a documented default instead of raising.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Literal, Union

LevelName = Literal["beginner", "intermediate", "advanced", "expert"]

EXPERIENCE_LEVELS: tuple[LevelName, ...] = (
    "beginner",
    "intermediate",
    "advanced",
    "expert",
)

LEVEL_ANCHORS: dict[str, float] = {
    "beginner": 0.25,
    "low": 0.25,
    "intermediate": 0.5,
    "medium": 0.5,
    "advanced": 0.75,
    "expert": 1.0,
    "high": 1.0,
}

LEVEL_ORDER: dict[str, int] = {
    "beginner": 1,
    "intermediate": 2,
    "advanced": 3,
    "expert": 4,
}

DEFAULT_LEVEL = 0.4
DEFAULT_REQUIRED_LEVEL = 0.5
DEFAULT_LEVEL_NAME: LevelName = "intermediate"

# Upper bounds (exclusive) of each years-of-experience bucket
_YEARS_CUTOFFS: tuple[tuple[float, LevelName], ...] = (
    (1.0, "beginner"),
    (3.0, "intermediate"),
    (5.0, "advanced"),
)


@dataclass(frozen=True)
class NamedLevel:
    """A level given by name, e.g. ``"advanced"`` or ``"medium"``."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class FractionLevel:
    """A level given as a fraction of mastery in [0, 1]."""

    value: float

    def __str__(self) -> str:
        return repr(float(self.value))


@dataclass(frozen=True)
class YearsLevel:
    """A level given as a number of years of experience."""

    years: float

    def __str__(self) -> str:
        return repr(float(self.years))


Level = Union[NamedLevel, FractionLevel, YearsLevel]

NumericKind = Literal["fraction", "years"]


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def parse_level(value: Any, *, numbers_as: NumericKind = "fraction") -> Level | None:
    """Convert a raw level value into a ``Level``.

    Numbers (and numeric strings) become a ``FractionLevel`` or a
    ``YearsLevel`` depending on ``numbers_as``; other non-empty strings
    become a lower-cased ``NamedLevel``. Anything else returns ``None``.
    """
    if isinstance(value, (NamedLevel, FractionLevel, YearsLevel)):
        return value
    if value is None:
        return None

    number = _as_number(value)
    if number is not None:
        if math.isnan(number):
            return None
        if numbers_as == "years":
            return YearsLevel(number)
        return FractionLevel(number)

    if isinstance(value, str):
        name = value.strip().lower()
        return NamedLevel(name) if name else None
    return None


def level_to_raw(level: Level | None) -> str | float | None:
    """Inverse of ``parse_level``: the plain value a Level was built from."""
    if isinstance(level, NamedLevel):
        return level.name
    if isinstance(level, FractionLevel):
        return level.value
    if isinstance(level, YearsLevel):
        return level.years
    return None


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def _fraction_to_level_name(value: float) -> LevelName:
    if value <= LEVEL_ANCHORS["beginner"]:
        return "beginner"
    if value <= LEVEL_ANCHORS["intermediate"]:
        return "intermediate"
    if value <= LEVEL_ANCHORS["advanced"]:
        return "advanced"
    return "expert"


def years_to_level_name(value: Any) -> LevelName:
    """Bucket a years count (or pass through a level name) into a LevelName.

    <1y beginner, <3y intermediate, <5y advanced, otherwise expert. A named
    experience level is returned as-is; missing or unrecognized input is
    "intermediate". Bare numbers are read as years.
    """
    level = parse_level(value, numbers_as="years")

    if isinstance(level, YearsLevel):
        if math.isnan(level.years):
            return DEFAULT_LEVEL_NAME
        for upper, name in _YEARS_CUTOFFS:
            if level.years < upper:
                return name
        return "expert"
    if isinstance(level, NamedLevel):
        if level.name in LEVEL_ORDER:
            return level.name  # type: ignore[return-value]
        return DEFAULT_LEVEL_NAME
    if isinstance(level, FractionLevel) and not math.isnan(level.value):
        return _fraction_to_level_name(clamp01(level.value))
    return DEFAULT_LEVEL_NAME


def level_to_num(level_name: Any) -> int:
    """Return the ordinal 1..4 of an experience level name (default 2)."""
    if isinstance(level_name, NamedLevel):
        level_name = level_name.name
    return LEVEL_ORDER.get(str(level_name).strip().lower(), LEVEL_ORDER["intermediate"])


def _normalize(value: Any, default: float) -> float:
    level = parse_level(value)

    if isinstance(level, FractionLevel):
        if math.isnan(level.value):
            return default
        return clamp01(level.value)
    if isinstance(level, NamedLevel):
        return LEVEL_ANCHORS.get(level.name, default)
    if isinstance(level, YearsLevel):
        return LEVEL_ANCHORS[years_to_level_name(level)]
    return default


def normalize_level(value: Any) -> float:
    """Normalize a proficiency or interest level to [0, 1] (default 0.4)."""
    return _normalize(value, DEFAULT_LEVEL)


def normalize_required_level(value: Any) -> float:
    """Normalize a project requirement level to [0, 1] (default 0.5).

    A missing requirement means "intermediate", not the lenient 0.4 used
    for a user's own levels.
    """
    return _normalize(value, DEFAULT_REQUIRED_LEVEL)
