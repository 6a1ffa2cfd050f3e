"""Persistence for profiles, projects, recommendations and challenges.

Public API:
    - MatchingRepository: Async SQLite data store
    - load_fixture / apply_fixture: Seed a repository from YAML or JSON
"""

from collabmatch.store.fixtures import Fixture, apply_fixture, load_fixture
from collabmatch.store.repository import MatchingRepository

__all__ = [
    "MatchingRepository",
    "Fixture",
    "load_fixture",
    "apply_fixture",
]
