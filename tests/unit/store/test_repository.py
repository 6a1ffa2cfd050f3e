"""Tests for the MatchingRepository database layer."""

import pytest


@pytest.fixture
async def repo(tmp_path):
    from collabmatch.store.repository import MatchingRepository

    repository = MatchingRepository(tmp_path / "collabmatch.db")
    await repository.initialize()
    yield repository
    await repository.close()


class TestDatabaseInitialization:
    """Test database initialization."""

    @pytest.mark.asyncio
    async def test_creates_database_file_if_not_exists(self, tmp_path):
        """Should create the database file and its parent directory."""
        from collabmatch.store.repository import MatchingRepository

        db_path = tmp_path / "nested" / "collabmatch.db"
        assert not db_path.exists()

        repository = MatchingRepository(db_path)
        await repository.initialize()

        assert db_path.exists()
        await repository.close()

    @pytest.mark.asyncio
    async def test_creates_all_tables(self, repo):
        async with repo._get_connection() as conn:
            cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
            tables = {row[0] for row in await cursor.fetchall()}

        for table in (
            "users",
            "user_topics",
            "user_languages",
            "projects",
            "project_topics",
            "project_languages",
            "project_members",
            "recommendations",
            "challenges",
            "challenge_attempts",
            "user_skill_ratings",
            "challenge_ratings",
        ):
            assert table in tables

    @pytest.mark.asyncio
    async def test_handles_existing_database_gracefully(self, tmp_path):
        """Initializing twice should not error."""
        from collabmatch.store.repository import MatchingRepository

        db_path = tmp_path / "collabmatch.db"
        first = MatchingRepository(db_path)
        await first.initialize()
        await first.close()

        second = MatchingRepository(db_path)
        await second.initialize()
        await second.close()


class TestUsers:
    """Test user profile persistence."""

    @pytest.mark.asyncio
    async def test_profile_round_trip(self, repo, sample_user):
        await repo.save_user(sample_user)

        loaded = await repo.get_user_profile("user-1")

        assert loaded == sample_user

    @pytest.mark.asyncio
    async def test_missing_user_returns_none(self, repo):
        assert await repo.get_user_profile("ghost") is None

    @pytest.mark.asyncio
    async def test_save_replaces_child_rows(self, repo, sample_user):
        await repo.save_user(sample_user)
        updated = sample_user.model_copy(update={"topics": sample_user.topics[:1]})

        await repo.save_user(updated)
        loaded = await repo.get_user_profile("user-1")

        assert [t.topic_name for t in loaded.topics] == ["Web Development"]
        assert len(loaded.languages) == 2


class TestProjects:
    """Test candidate project loading."""

    @pytest.mark.asyncio
    async def test_candidate_round_trip(self, repo, make_project):
        from collabmatch.matching.models import CandidateFilter

        project = make_project(
            "p1",
            members=[{"user_id": "u2", "role": "developer", "status": "active"}],
            max_members=4,
            current_members=1,
        )
        await repo.save_project(project)

        loaded = await repo.get_candidate_projects(CandidateFilter())

        assert loaded == [project]

    @pytest.mark.asyncio
    async def test_filters_by_status_and_visibility(self, repo, make_project):
        from collabmatch.matching.models import CandidateFilter

        await repo.save_project(make_project("open"))
        await repo.save_project(make_project("done", status="completed"))
        await repo.save_project(make_project("hidden", visibility="private"))
        await repo.save_project(make_project("active", status="active"))

        recruiting = await repo.get_candidate_projects(CandidateFilter())
        public = await repo.get_candidate_projects(
            CandidateFilter(statuses=("recruiting", "active"), visibility="public")
        )

        assert [p.id for p in recruiting] == ["open", "hidden"]
        assert [p.id for p in public] == ["open", "active"]

    @pytest.mark.asyncio
    async def test_empty_status_list_returns_nothing(self, repo, make_project):
        from collabmatch.matching.models import CandidateFilter

        await repo.save_project(make_project("open"))

        assert await repo.get_candidate_projects(CandidateFilter(statuses=())) == []

    @pytest.mark.asyncio
    async def test_child_rows_are_grouped_per_project(self, repo, make_project):
        from collabmatch.matching.levels import FractionLevel
        from collabmatch.matching.models import CandidateFilter

        await repo.save_project(make_project("a"))
        await repo.save_project(
            make_project(
                "b",
                topics=[{"topic_name": "AI", "is_primary": False}],
                languages=[{"language_name": "Go", "required_level": 0.6}],
            )
        )

        projects = {p.id: p for p in await repo.get_candidate_projects(CandidateFilter())}

        assert [t.topic_name for t in projects["a"].topics] == ["Web Development"]
        assert [t.topic_name for t in projects["b"].topics] == ["AI"]
        assert projects["b"].languages[0].language_name == "Go"
        assert projects["b"].languages[0].required_level == FractionLevel(0.6)

    @pytest.mark.asyncio
    async def test_malformed_row_is_skipped(self, repo, make_project, caplog):
        """One corrupt project row should not hide the valid ones."""
        from collabmatch.matching.models import CandidateFilter

        for project_id in ("good-1", "bad", "good-2"):
            await repo.save_project(make_project(project_id))
        async with repo._get_connection() as conn:
            await conn.execute("UPDATE projects SET current_members = -1 WHERE id = 'bad'")
            await conn.commit()

        loaded = await repo.get_candidate_projects(CandidateFilter())

        assert [p.id for p in loaded] == ["good-1", "good-2"]
        assert "Skipping malformed project bad" in caplog.text


class TestMembership:
    """Test project membership writes."""

    @pytest.mark.asyncio
    async def test_add_member_joins_once(self, repo, make_project):
        from collabmatch.matching.models import CandidateFilter

        await repo.save_project(make_project("p1", current_members=2))

        assert not await repo.is_member("p1", "u1")
        assert await repo.add_member("p1", "u1") is True
        assert await repo.add_member("p1", "u1") is False

        (project,) = await repo.get_candidate_projects(CandidateFilter())
        assert await repo.is_member("p1", "u1")
        assert project.current_members == 3
        assert [(m.user_id, m.role, m.status) for m in project.members] == [
            ("u1", "member", "active")
        ]

    @pytest.mark.asyncio
    async def test_lapsed_member_is_reactivated(self, repo, make_project):
        await repo.save_project(
            make_project(
                "p1",
                current_members=0,
                members=[{"user_id": "u1", "status": "inactive"}],
            )
        )

        assert not await repo.is_member("p1", "u1")
        assert await repo.add_member("p1", "u1") is True
        assert await repo.is_member("p1", "u1")


class TestRecommendations:
    """Test recommendation upserts."""

    def _rec(self, project_id, score):
        from collabmatch.matching.models import Recommendation

        return Recommendation(
            user_id="u1",
            project_id=project_id,
            score=score,
            match_factors={"topic_coverage": 50},
        )

    @pytest.mark.asyncio
    async def test_upsert_inserts_then_updates(self, repo):
        await repo.upsert_recommendations([self._rec("p1", 70), self._rec("p2", 80)])
        await repo.upsert_recommendations([self._rec("p1", 90)])

        rows = await repo.get_recommendations("u1")

        assert [(r.project_id, r.score) for r in rows] == [("p1", 90), ("p2", 80)]
        assert rows[0].match_factors == {"topic_coverage": 50}

    @pytest.mark.asyncio
    async def test_upsert_empty_is_noop(self, repo):
        await repo.upsert_recommendations([])

        assert await repo.get_recommendations("u1") == []

    @pytest.mark.asyncio
    async def test_unserializable_factors_raise_persistence_error(self, repo):
        from collabmatch.errors import PersistenceError
        from collabmatch.matching.models import Recommendation

        bad = Recommendation(
            user_id="u1", project_id="p1", score=10, match_factors={"x": object()}
        )

        with pytest.raises(PersistenceError):
            await repo.upsert_recommendations([bad])


class TestChallenges:
    """Test challenge, attempt and rating persistence."""

    @pytest.mark.asyncio
    async def test_challenge_round_trip(self, repo):
        from collabmatch.challenges.models import Challenge

        challenge = Challenge(id="c1", title="FizzBuzz", language_name="Python")
        await repo.save_challenge(challenge)

        assert await repo.get_challenge("c1") == challenge
        assert await repo.get_challenge("missing") is None

    @pytest.mark.asyncio
    async def test_list_challenges_scoping(self, repo):
        from collabmatch.challenges.models import Challenge

        for challenge in (
            Challenge(id="global-py", language_name="Python"),
            Challenge(id="global-go", language_name="Go"),
            Challenge(id="p1-py", language_name="Python", project_id="p1"),
            Challenge(id="p2-py", language_name="Python", project_id="p2"),
            Challenge(id="retired", language_name="Python", is_active=False),
        ):
            await repo.save_challenge(challenge)

        global_only = await repo.list_challenges("Python")
        with_project = await repo.list_challenges("Python", project_id="p1")
        every_language = await repo.list_challenges()

        assert [c.id for c in global_only] == ["global-py"]
        assert [c.id for c in with_project] == ["global-py", "p1-py"]
        assert [c.id for c in every_language] == ["global-py", "global-go"]

    @pytest.mark.asyncio
    async def test_attempts_count_and_stats(self, repo):
        from collabmatch.challenges.models import AttemptRecord

        for score, passed in ((80, True), (40, False), (55, False)):
            attempt_id = await repo.record_attempt(
                AttemptRecord(
                    user_id="u1",
                    challenge_id="c1",
                    score=score,
                    passed=passed,
                    feedback="ok",
                )
            )
            assert attempt_id > 0

        stats = await repo.get_attempt_stats("u1")

        assert await repo.count_attempts("u1", "c1") == 3
        assert await repo.count_attempts("u1", "c2") == 0
        assert (stats.total_attempts, stats.passed, stats.failed) == (3, 1, 2)
        assert stats.average_score == 58

    @pytest.mark.asyncio
    async def test_failed_attempts_are_counted_per_project(self, repo):
        from collabmatch.challenges.models import AttemptRecord

        for project_id, passed in (("p1", False), ("p1", False), ("p1", True), ("p2", False)):
            await repo.record_attempt(
                AttemptRecord(
                    user_id="u1",
                    challenge_id="c1",
                    score=90 if passed else 20,
                    passed=passed,
                    feedback="ok",
                    project_id=project_id,
                )
            )

        assert await repo.count_failed_attempts("u1", "p1") == 2
        assert await repo.count_failed_attempts("u1", "p2") == 1
        assert await repo.count_failed_attempts("u2", "p1") == 0

    @pytest.mark.asyncio
    async def test_ratings_upsert(self, repo):
        from collabmatch.challenges.models import ChallengeRating, SkillRating

        assert await repo.get_skill_rating("u1", "Python") is None
        await repo.upsert_skill_rating("u1", "Python", SkillRating(1216, 1))
        await repo.upsert_skill_rating("u1", "Python", SkillRating(1230, 2))
        await repo.upsert_challenge_rating("c1", ChallengeRating(1184, 1, 1))

        assert await repo.get_skill_rating("u1", "Python") == SkillRating(1230, 2)
        assert await repo.get_challenge_rating("c1") == ChallengeRating(1184, 1, 1)
        assert await repo.get_challenge_rating("c2") is None
        assert await repo.get_challenge_ratings() == {"c1": 1184}
