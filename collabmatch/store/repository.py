"""Database repository for profiles, projects, recommendations and challenges.

This module provides async SQLite database operations backing the
recommendation service and the challenge submission flow.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from collections import defaultdict
from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import aiosqlite
from pydantic import ValidationError

from collabmatch.challenges.models import (
    AttemptRecord,
    AttemptStats,
    Challenge,
    ChallengeRating,
    SkillRating,
)
from collabmatch.errors import PersistenceError
from collabmatch.matching.levels import Level, level_to_raw
from collabmatch.matching.models import (
    CandidateFilter,
    ProjectCandidate,
    Recommendation,
    UserProfile,
)

logger = logging.getLogger(__name__)

CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    years_experience TEXT
);
CREATE TABLE IF NOT EXISTS user_topics (
    user_id TEXT NOT NULL,
    topic_name TEXT,
    interest_level TEXT,
    experience_level TEXT
);
CREATE TABLE IF NOT EXISTS user_languages (
    user_id TEXT NOT NULL,
    language_name TEXT,
    proficiency_level TEXT,
    years_experience REAL
);
CREATE TABLE IF NOT EXISTS projects (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL DEFAULT '',
    description TEXT NOT NULL DEFAULT '',
    owner_id TEXT,
    required_experience_level TEXT,
    status TEXT NOT NULL,
    visibility TEXT NOT NULL,
    max_members INTEGER,
    current_members INTEGER DEFAULT 0
);
CREATE TABLE IF NOT EXISTS project_topics (
    project_id TEXT NOT NULL,
    topic_name TEXT,
    is_primary INTEGER DEFAULT 0
);
CREATE TABLE IF NOT EXISTS project_languages (
    project_id TEXT NOT NULL,
    language_name TEXT,
    is_primary INTEGER DEFAULT 0,
    required_level TEXT
);
CREATE TABLE IF NOT EXISTS project_members (
    project_id TEXT NOT NULL,
    user_id TEXT NOT NULL,
    role TEXT NOT NULL DEFAULT 'member',
    status TEXT NOT NULL DEFAULT 'active',
    PRIMARY KEY (project_id, user_id)
);
CREATE TABLE IF NOT EXISTS recommendations (
    user_id TEXT NOT NULL,
    project_id TEXT NOT NULL,
    score INTEGER NOT NULL,
    match_factors TEXT NOT NULL,
    created_at TEXT NOT NULL,
    PRIMARY KEY (user_id, project_id)
);
CREATE TABLE IF NOT EXISTS challenges (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL DEFAULT '',
    description TEXT NOT NULL DEFAULT '',
    language_name TEXT,
    difficulty_level TEXT NOT NULL DEFAULT 'medium',
    project_id TEXT,
    is_active INTEGER DEFAULT 1
);
CREATE TABLE IF NOT EXISTS challenge_attempts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    challenge_id TEXT NOT NULL,
    project_id TEXT,
    submitted_code TEXT NOT NULL,
    language_name TEXT,
    status TEXT NOT NULL,
    score INTEGER NOT NULL,
    feedback TEXT NOT NULL,
    submitted_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS user_skill_ratings (
    user_id TEXT NOT NULL,
    language_name TEXT NOT NULL,
    rating INTEGER NOT NULL,
    attempts INTEGER NOT NULL DEFAULT 0,
    last_updated TEXT NOT NULL,
    PRIMARY KEY (user_id, language_name)
);
CREATE TABLE IF NOT EXISTS challenge_ratings (
    challenge_id TEXT PRIMARY KEY,
    rating INTEGER NOT NULL,
    attempts INTEGER NOT NULL DEFAULT 0,
    pass_count INTEGER NOT NULL DEFAULT 0,
    last_updated TEXT NOT NULL
);
"""

CREATE_INDEX_SQL = """
CREATE INDEX IF NOT EXISTS idx_projects_status ON projects(status);
CREATE INDEX IF NOT EXISTS idx_user_topics_user ON user_topics(user_id);
CREATE INDEX IF NOT EXISTS idx_user_languages_user ON user_languages(user_id);
CREATE INDEX IF NOT EXISTS idx_project_topics_project ON project_topics(project_id);
CREATE INDEX IF NOT EXISTS idx_project_languages_project ON project_languages(project_id);
CREATE INDEX IF NOT EXISTS idx_attempts_user ON challenge_attempts(user_id, challenge_id);
"""


def _level_text(level: Level | None) -> str | None:
    raw = level_to_raw(level)
    return None if raw is None else str(raw)


def _now() -> str:
    return datetime.now(UTC).isoformat()


def _placeholders(count: int) -> str:
    return ", ".join("?" for _ in range(count))


class MatchingRepository:
    """Async SQLite repository for the matching and challenge data.

    Implements the data-store collaborator used by RecommendationService
    and ChallengeService using aiosqlite for async database access.
    """

    def __init__(self, db_path: Path | str):
        """Initialize the repository.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self._connection: aiosqlite.Connection | None = None

    @asynccontextmanager
    async def _get_connection(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        """Get a database connection.

        Yields:
            An aiosqlite connection.
        """
        if self._connection is None:
            self._connection = await aiosqlite.connect(self.db_path)
            self._connection.row_factory = aiosqlite.Row
        yield self._connection

    async def initialize(self) -> None:
        """Initialize the database, creating tables if needed."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        async with self._get_connection() as conn:
            await conn.executescript(CREATE_TABLES_SQL)
            await conn.executescript(CREATE_INDEX_SQL)
            await conn.commit()

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def save_user(self, profile: UserProfile) -> None:
        """Insert or replace a user profile with its topics and languages."""
        async with self._get_connection() as conn:
            await conn.execute(
                "INSERT OR REPLACE INTO users (id, years_experience) VALUES (?, ?)",
                (profile.id, _level_text(profile.years_experience)),
            )
            await conn.execute("DELETE FROM user_topics WHERE user_id = ?", (profile.id,))
            await conn.execute(
                "DELETE FROM user_languages WHERE user_id = ?", (profile.id,)
            )
            await conn.executemany(
                """
                INSERT INTO user_topics (user_id, topic_name, interest_level, experience_level)
                VALUES (?, ?, ?, ?)
                """,
                [
                    (
                        profile.id,
                        topic.topic_name,
                        _level_text(topic.interest_level),
                        _level_text(topic.experience_level),
                    )
                    for topic in profile.topics
                ],
            )
            await conn.executemany(
                """
                INSERT INTO user_languages (
                    user_id, language_name, proficiency_level, years_experience
                ) VALUES (?, ?, ?, ?)
                """,
                [
                    (
                        profile.id,
                        lang.language_name,
                        _level_text(lang.proficiency_level),
                        lang.years_experience,
                    )
                    for lang in profile.languages
                ],
            )
            await conn.commit()

    async def get_user_profile(self, user_id: str) -> UserProfile | None:
        """Get a user's profile.

        Args:
            user_id: The user to look up.

        Returns:
            The profile if found, None otherwise.
        """
        async with self._get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM users WHERE id = ?", (user_id,))
            row = await cursor.fetchone()
            if row is None:
                return None

            cursor = await conn.execute(
                "SELECT * FROM user_topics WHERE user_id = ? ORDER BY rowid", (user_id,)
            )
            topic_rows = await cursor.fetchall()
            cursor = await conn.execute(
                "SELECT * FROM user_languages WHERE user_id = ? ORDER BY rowid",
                (user_id,),
            )
            language_rows = await cursor.fetchall()

        return UserProfile.model_validate(
            {
                "id": row["id"],
                "years_experience": row["years_experience"],
                "topics": [
                    {
                        "topic_name": r["topic_name"],
                        "interest_level": r["interest_level"],
                        "experience_level": r["experience_level"],
                    }
                    for r in topic_rows
                ],
                "languages": [
                    {
                        "language_name": r["language_name"],
                        "proficiency_level": r["proficiency_level"],
                        "years_experience": r["years_experience"],
                    }
                    for r in language_rows
                ],
            }
        )

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    async def save_project(self, project: ProjectCandidate) -> None:
        """Insert or replace a project with its requirements and members."""
        async with self._get_connection() as conn:
            await conn.execute(
                """
                INSERT OR REPLACE INTO projects (
                    id, title, description, owner_id, required_experience_level,
                    status, visibility, max_members, current_members
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    project.id,
                    project.title,
                    project.description,
                    project.owner_id,
                    _level_text(project.required_experience_level),
                    project.status,
                    project.visibility,
                    project.max_members,
                    project.current_members,
                ),
            )
            for table in ("project_topics", "project_languages", "project_members"):
                await conn.execute(
                    f"DELETE FROM {table} WHERE project_id = ?", (project.id,)
                )
            await conn.executemany(
                "INSERT INTO project_topics (project_id, topic_name, is_primary) VALUES (?, ?, ?)",
                [
                    (project.id, topic.topic_name, 1 if topic.is_primary else 0)
                    for topic in project.topics
                ],
            )
            await conn.executemany(
                """
                INSERT INTO project_languages (
                    project_id, language_name, is_primary, required_level
                ) VALUES (?, ?, ?, ?)
                """,
                [
                    (
                        project.id,
                        lang.language_name,
                        1 if lang.is_primary else 0,
                        _level_text(lang.required_level),
                    )
                    for lang in project.languages
                ],
            )
            await conn.executemany(
                """
                INSERT OR REPLACE INTO project_members (project_id, user_id, role, status)
                VALUES (?, ?, ?, ?)
                """,
                [
                    (project.id, member.user_id, member.role, member.status)
                    for member in project.members
                ],
            )
            await conn.commit()

    async def get_candidate_projects(
        self, candidate_filter: CandidateFilter
    ) -> list[ProjectCandidate]:
        """List recruitable projects matching the filter, in insertion order.

        Args:
            candidate_filter: Allowed statuses and optional visibility.

        Returns:
            Projects with their topics, languages and members attached.
            Rows that fail validation are logged and left out.
        """
        statuses = list(candidate_filter.statuses)
        if not statuses:
            return []

        query = f"SELECT * FROM projects WHERE status IN ({_placeholders(len(statuses))})"
        params: list[Any] = statuses
        if candidate_filter.visibility is not None:
            query += " AND visibility = ?"
            params = [*statuses, candidate_filter.visibility]
        query += " ORDER BY rowid"

        async with self._get_connection() as conn:
            cursor = await conn.execute(query, params)
            project_rows = await cursor.fetchall()
            if not project_rows:
                return []

            ids = [row["id"] for row in project_rows]
            children: dict[str, dict[str, list[dict[str, Any]]]] = defaultdict(
                lambda: defaultdict(list)
            )
            for table, key in (
                ("project_topics", "topics"),
                ("project_languages", "languages"),
                ("project_members", "members"),
            ):
                cursor = await conn.execute(
                    f"SELECT * FROM {table} WHERE project_id IN ({_placeholders(len(ids))}) "
                    "ORDER BY rowid",
                    ids,
                )
                for row in await cursor.fetchall():
                    children[row["project_id"]][key].append(dict(row))

        projects: list[ProjectCandidate] = []
        for row in project_rows:
            try:
                projects.append(self._row_to_project(row, children[row["id"]]))
            except ValidationError as e:
                logger.warning(
                    "Skipping malformed project %s: %d validation error(s): %s",
                    row["id"],
                    e.error_count(),
                    e,
                )
        return projects

    async def is_member(self, project_id: str, user_id: str) -> bool:
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT 1 FROM project_members
                WHERE project_id = ? AND user_id = ? AND status = 'active'
                """,
                (project_id, user_id),
            )
            row = await cursor.fetchone()
        return row is not None

    async def add_member(
        self, project_id: str, user_id: str, role: str = "member"
    ) -> bool:
        """Add an active member and bump the project's member count.

        A lapsed membership row is reactivated.

        Returns:
            True if the user joined, False if they were already active.
        """
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO project_members (project_id, user_id, role, status)
                VALUES (?, ?, ?, 'active')
                ON CONFLICT (project_id, user_id) DO UPDATE SET status = 'active'
                WHERE project_members.status != 'active'
                """,
                (project_id, user_id, role),
            )
            joined = cursor.rowcount == 1
            if joined:
                await conn.execute(
                    """
                    UPDATE projects SET current_members = COALESCE(current_members, 0) + 1
                    WHERE id = ?
                    """,
                    (project_id,),
                )
            await conn.commit()
        return joined

    # ------------------------------------------------------------------
    # Recommendations
    # ------------------------------------------------------------------

    async def upsert_recommendations(
        self, recommendations: Sequence[Recommendation]
    ) -> None:
        """Insert or update recommendations keyed on (user_id, project_id).

        Raises:
            PersistenceError: If the write fails.
        """
        if not recommendations:
            return

        try:
            async with self._get_connection() as conn:
                await conn.executemany(
                    """
                    INSERT INTO recommendations (
                        user_id, project_id, score, match_factors, created_at
                    ) VALUES (?, ?, ?, ?, ?)
                    ON CONFLICT (user_id, project_id) DO UPDATE SET
                        score = excluded.score,
                        match_factors = excluded.match_factors,
                        created_at = excluded.created_at
                    """,
                    [
                        (
                            rec.user_id,
                            rec.project_id,
                            rec.score,
                            json.dumps(rec.match_factors),
                            rec.created_at.isoformat(),
                        )
                        for rec in recommendations
                    ],
                )
                await conn.commit()
        except (sqlite3.Error, ValueError, TypeError) as e:
            raise PersistenceError(f"Failed to upsert recommendations: {e}") from e

    async def get_recommendations(self, user_id: str) -> list[Recommendation]:
        """List a user's persisted recommendations, best score first."""
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM recommendations
                WHERE user_id = ?
                ORDER BY score DESC, project_id
                """,
                (user_id,),
            )
            rows = await cursor.fetchall()

        return [
            Recommendation(
                user_id=row["user_id"],
                project_id=row["project_id"],
                score=int(row["score"]),
                match_factors=json.loads(row["match_factors"]),
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in rows
        ]

    # ------------------------------------------------------------------
    # Challenges and attempts
    # ------------------------------------------------------------------

    async def save_challenge(self, challenge: Challenge) -> None:
        """Insert or replace a challenge."""
        async with self._get_connection() as conn:
            await conn.execute(
                """
                INSERT OR REPLACE INTO challenges (
                    id, title, description, language_name, difficulty_level,
                    project_id, is_active
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    challenge.id,
                    challenge.title,
                    challenge.description,
                    challenge.language_name,
                    challenge.difficulty_level,
                    challenge.project_id,
                    1 if challenge.is_active else 0,
                ),
            )
            await conn.commit()

    async def get_challenge(self, challenge_id: str) -> Challenge | None:
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM challenges WHERE id = ?", (challenge_id,)
            )
            row = await cursor.fetchone()

        if row is None:
            return None
        return self._row_to_challenge(row)

    async def list_challenges(
        self,
        language_name: str | None = None,
        project_id: str | None = None,
    ) -> list[Challenge]:
        """List active challenges.

        Without a project only global challenges are returned; with one,
        global challenges plus those scoped to that project.
        """
        query = "SELECT * FROM challenges WHERE is_active = 1"
        params: list[Any] = []
        if language_name is not None:
            query += " AND language_name = ?"
            params.append(language_name)
        if project_id is None:
            query += " AND project_id IS NULL"
        else:
            query += " AND (project_id IS NULL OR project_id = ?)"
            params.append(project_id)
        query += " ORDER BY rowid"

        async with self._get_connection() as conn:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()

        return [self._row_to_challenge(row) for row in rows]

    async def record_attempt(self, attempt: AttemptRecord) -> int:
        """Insert an attempt and return its row id."""
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO challenge_attempts (
                    user_id, challenge_id, project_id, submitted_code,
                    language_name, status, score, feedback, submitted_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    attempt.user_id,
                    attempt.challenge_id,
                    attempt.project_id,
                    attempt.submitted_code,
                    attempt.language_name,
                    attempt.status,
                    attempt.score,
                    attempt.feedback,
                    attempt.submitted_at.isoformat(),
                ),
            )
            await conn.commit()
            return int(cursor.lastrowid or 0)

    async def count_attempts(self, user_id: str, challenge_id: str) -> int:
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT COUNT(*) AS count FROM challenge_attempts
                WHERE user_id = ? AND challenge_id = ?
                """,
                (user_id, challenge_id),
            )
            row = await cursor.fetchone()
        return int(row["count"]) if row is not None else 0

    async def count_failed_attempts(self, user_id: str, project_id: str) -> int:
        """Count attempts on a project's challenges that did not pass."""
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT COUNT(*) AS count FROM challenge_attempts
                WHERE user_id = ? AND project_id = ? AND status = 'completed'
                """,
                (user_id, project_id),
            )
            row = await cursor.fetchone()
        return int(row["count"]) if row is not None else 0

    async def get_attempt_stats(self, user_id: str) -> AttemptStats:
        """Aggregate a user's attempts across all challenges."""
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                "SELECT status, score FROM challenge_attempts WHERE user_id = ?",
                (user_id,),
            )
            rows = await cursor.fetchall()

        return AttemptStats.from_attempts((row["status"], row["score"]) for row in rows)

    # ------------------------------------------------------------------
    # Ratings
    # ------------------------------------------------------------------

    async def get_skill_rating(
        self, user_id: str, language_name: str
    ) -> SkillRating | None:
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT rating, attempts FROM user_skill_ratings
                WHERE user_id = ? AND language_name = ?
                """,
                (user_id, language_name),
            )
            row = await cursor.fetchone()

        if row is None:
            return None
        return SkillRating(rating=int(row["rating"]), attempts=int(row["attempts"]))

    async def upsert_skill_rating(
        self, user_id: str, language_name: str, rating: SkillRating
    ) -> None:
        async with self._get_connection() as conn:
            await conn.execute(
                """
                INSERT INTO user_skill_ratings (
                    user_id, language_name, rating, attempts, last_updated
                ) VALUES (?, ?, ?, ?, ?)
                ON CONFLICT (user_id, language_name) DO UPDATE SET
                    rating = excluded.rating,
                    attempts = excluded.attempts,
                    last_updated = excluded.last_updated
                """,
                (user_id, language_name, rating.rating, rating.attempts, _now()),
            )
            await conn.commit()

    async def get_challenge_rating(self, challenge_id: str) -> ChallengeRating | None:
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM challenge_ratings WHERE challenge_id = ?",
                (challenge_id,),
            )
            row = await cursor.fetchone()

        if row is None:
            return None
        return ChallengeRating(
            rating=int(row["rating"]),
            attempts=int(row["attempts"]),
            pass_count=int(row["pass_count"]),
        )

    async def get_challenge_ratings(self) -> dict[str, int]:
        """Current rating of every rated challenge."""
        async with self._get_connection() as conn:
            cursor = await conn.execute("SELECT challenge_id, rating FROM challenge_ratings")
            rows = await cursor.fetchall()
        return {row["challenge_id"]: int(row["rating"]) for row in rows}

    async def upsert_challenge_rating(
        self, challenge_id: str, rating: ChallengeRating
    ) -> None:
        async with self._get_connection() as conn:
            await conn.execute(
                """
                INSERT INTO challenge_ratings (
                    challenge_id, rating, attempts, pass_count, last_updated
                ) VALUES (?, ?, ?, ?, ?)
                ON CONFLICT (challenge_id) DO UPDATE SET
                    rating = excluded.rating,
                    attempts = excluded.attempts,
                    pass_count = excluded.pass_count,
                    last_updated = excluded.last_updated
                """,
                (
                    challenge_id,
                    rating.rating,
                    rating.attempts,
                    rating.pass_count,
                    _now(),
                ),
            )
            await conn.commit()

    # ------------------------------------------------------------------
    # Row conversion
    # ------------------------------------------------------------------

    def _row_to_project(
        self, row: aiosqlite.Row, children: dict[str, list[dict[str, Any]]]
    ) -> ProjectCandidate:
        """Convert a projects row and its child rows to a ProjectCandidate."""
        return ProjectCandidate.model_validate(
            {
                "id": row["id"],
                "title": row["title"],
                "description": row["description"],
                "owner_id": row["owner_id"],
                "required_experience_level": row["required_experience_level"],
                "status": row["status"],
                "visibility": row["visibility"],
                "max_members": row["max_members"],
                "current_members": row["current_members"] or 0,
                "topics": [
                    {"topic_name": t["topic_name"], "is_primary": bool(t["is_primary"])}
                    for t in children.get("topics", [])
                ],
                "languages": [
                    {
                        "language_name": lang["language_name"],
                        "is_primary": bool(lang["is_primary"]),
                        "required_level": lang["required_level"],
                    }
                    for lang in children.get("languages", [])
                ],
                "members": [
                    {"user_id": m["user_id"], "role": m["role"], "status": m["status"]}
                    for m in children.get("members", [])
                ],
            }
        )

    def _row_to_challenge(self, row: aiosqlite.Row) -> Challenge:
        return Challenge(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            language_name=row["language_name"],
            difficulty_level=row["difficulty_level"],
            project_id=row["project_id"],
            is_active=bool(row["is_active"]),
        )
