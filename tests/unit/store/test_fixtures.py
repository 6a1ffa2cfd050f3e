"""Tests for fixture loading."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

FIXTURE_YAML = """
users:
  - id: u1
    years_experience: 4
    topics:
      - topic_name: AI
        interest_level: high
    languages:
      - language_name: Python
        proficiency_level: advanced
projects:
  - id: p1
    title: Chatbot
    owner_id: u2
    required_experience_level: intermediate
    topics:
      - topic_name: AI
        is_primary: true
challenges:
  - id: c1
    title: Reverse a string
    language_name: Python
    difficulty_level: Easy
"""


class TestLoadFixture:
    """Test load_fixture."""

    def test_loads_yaml(self, tmp_path):
        from collabmatch.store.fixtures import load_fixture

        path = tmp_path / "seed.yaml"
        path.write_text(FIXTURE_YAML, encoding="utf-8")

        fixture = load_fixture(path)

        assert [u.id for u in fixture.users] == ["u1"]
        assert fixture.projects[0].title == "Chatbot"
        assert fixture.challenges[0].difficulty_level == "easy"

    def test_loads_json(self, tmp_path):
        from collabmatch.store.fixtures import load_fixture

        path = tmp_path / "seed.json"
        path.write_text(json.dumps({"users": [{"id": 5}]}), encoding="utf-8")

        fixture = load_fixture(path)

        assert fixture.users[0].id == "5"
        assert fixture.projects == []

    def test_detects_format_for_unknown_extension(self, tmp_path):
        from collabmatch.store.fixtures import load_fixture

        as_json = tmp_path / "seed.txt"
        as_json.write_text('{"projects": [{"id": "p1"}]}', encoding="utf-8")
        as_yaml = tmp_path / "seed.data"
        as_yaml.write_text(FIXTURE_YAML, encoding="utf-8")

        assert load_fixture(as_json).projects[0].id == "p1"
        assert load_fixture(as_yaml).challenges[0].id == "c1"

    def test_empty_yaml_is_empty_fixture(self, tmp_path):
        from collabmatch.store.fixtures import load_fixture

        path = tmp_path / "empty.yml"
        path.write_text("", encoding="utf-8")

        fixture = load_fixture(path)

        assert (fixture.users, fixture.projects, fixture.challenges) == ([], [], [])

    def test_missing_file_raises(self, tmp_path):
        from collabmatch.store.fixtures import load_fixture

        with pytest.raises(FileNotFoundError):
            load_fixture(tmp_path / "nope.yaml")

    @pytest.mark.parametrize(
        ("name", "content"),
        [
            ("list.yaml", "- a\n- b\n"),
            ("bad.yaml", "users: [unclosed\n"),
            ("bad.json", "{not json"),
            ("null.json", "null"),
        ],
    )
    def test_invalid_content_raises_value_error(self, tmp_path, name, content):
        from collabmatch.store.fixtures import load_fixture

        path = tmp_path / name
        path.write_text(content, encoding="utf-8")

        with pytest.raises(ValueError):
            load_fixture(path)


class TestApplyFixture:
    """Test apply_fixture."""

    @pytest.mark.asyncio
    async def test_writes_every_record(self, tmp_path):
        from collabmatch.store.fixtures import apply_fixture, load_fixture

        path = tmp_path / "seed.yaml"
        path.write_text(FIXTURE_YAML, encoding="utf-8")
        repository = MagicMock()
        repository.save_user = AsyncMock()
        repository.save_project = AsyncMock()
        repository.save_challenge = AsyncMock()

        counts = await apply_fixture(repository, load_fixture(path))

        assert counts == {"users": 1, "projects": 1, "challenges": 1}
        repository.save_user.assert_awaited_once()
        repository.save_project.assert_awaited_once()
        repository.save_challenge.assert_awaited_once()
