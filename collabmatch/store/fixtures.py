"""Fixture loading for seeding a repository from YAML or JSON."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from collabmatch.challenges.models import Challenge
from collabmatch.matching.models import ProjectCandidate, UserProfile

logger = logging.getLogger(__name__)


@dataclass
class Fixture:
    """Users, projects and challenges parsed from one fixture file."""

    users: list[UserProfile] = field(default_factory=list)
    projects: list[ProjectCandidate] = field(default_factory=list)
    challenges: list[Challenge] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Fixture:
        return cls(
            users=[UserProfile.model_validate(item) for item in data.get("users") or []],
            projects=[
                ProjectCandidate.model_validate(item)
                for item in data.get("projects") or []
            ],
            challenges=[
                Challenge.model_validate(item) for item in data.get("challenges") or []
            ],
        )


def load_fixture(path: Path | str) -> Fixture:
    """Load and validate a fixture from YAML or JSON.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not a mapping or cannot be parsed.
        pydantic.ValidationError: If a record is invalid.
    """
    fixture_path = Path(path)
    if not fixture_path.exists():
        raise FileNotFoundError(f"Fixture not found: {fixture_path}")

    suffix = fixture_path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        data = _load_yaml(fixture_path)
    elif suffix == ".json":
        data = _load_json(fixture_path)
    else:
        data = _load_unknown(fixture_path)

    return Fixture.from_dict(data)


async def apply_fixture(repository: Any, fixture: Fixture) -> dict[str, int]:
    """Write every fixture record to the repository and return counts."""
    for user in fixture.users:
        await repository.save_user(user)
    for project in fixture.projects:
        await repository.save_project(project)
    for challenge in fixture.challenges:
        await repository.save_challenge(challenge)

    counts = {
        "users": len(fixture.users),
        "projects": len(fixture.projects),
        "challenges": len(fixture.challenges),
    }
    logger.info("Loaded fixture: %s", counts)
    return counts


def _ensure_mapping(data: Any, path: Path) -> dict:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Fixture must be a mapping/dict: {path}")
    return data


def _load_yaml(path: Path) -> dict:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML fixture: {path}") from e
    return _ensure_mapping(data, path)


def _load_json(path: Path) -> dict:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON fixture: {path}") from e
    if data is None:
        raise ValueError(f"Fixture must be a mapping/dict: {path}")
    return _ensure_mapping(data, path)


def _load_unknown(path: Path) -> dict:
    """Auto-detect the format when the file extension is unknown."""
    raw = path.read_text(encoding="utf-8")

    # JSON if it looks like JSON, otherwise YAML
    if raw.lstrip().startswith(("{", "[")):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            pass
        else:
            return _ensure_mapping(data, path)

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid fixture format: {path}") from e
    return _ensure_mapping(data, path)
