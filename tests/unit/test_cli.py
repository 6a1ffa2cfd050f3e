from __future__ import annotations

import json
from pathlib import Path

import pytest

FIXTURE = """
users:
  - id: user-1
    years_experience: 2
    topics:
      - topic_name: Web Development
        interest_level: high
        experience_level: intermediate
    languages:
      - language_name: Python
        proficiency_level: advanced
projects:
  - id: p1
    title: Recipe API
    owner_id: owner-1
    required_experience_level: intermediate
    topics:
      - topic_name: Web Development
        is_primary: true
    languages:
      - language_name: Python
        is_primary: true
        required_level: intermediate
  - id: mine
    title: My Own Project
    owner_id: user-1
    topics:
      - topic_name: Web Development
        is_primary: true
challenges:
  - id: c1
    title: Sum evens
    language_name: Python
"""


@pytest.fixture
def seeded_db(tmp_path) -> Path:
    from collabmatch.__main__ import main

    db_path = tmp_path / "collabmatch.db"
    fixture = tmp_path / "seed.yaml"
    fixture.write_text(FIXTURE, encoding="utf-8")

    assert main(["--db", str(db_path), "load", str(fixture)]) == 0
    return db_path


def test_cli_without_command_prints_help(capsys) -> None:
    from collabmatch.__main__ import main

    assert main([]) == 0
    assert "commands" in capsys.readouterr().out


def test_cli_init_db_creates_database(tmp_path, capsys) -> None:
    from collabmatch.__main__ import main

    db_path = tmp_path / "data" / "collabmatch.db"

    assert main(["--db", str(db_path), "init-db"]) == 0
    assert db_path.exists()
    assert "Initialized" in capsys.readouterr().out


def test_cli_load_reports_counts(capsys, seeded_db) -> None:
    out = capsys.readouterr().out

    assert "users: 1" in out
    assert "projects: 2" in out
    assert "challenges: 1" in out


def test_cli_load_missing_fixture_errors_cleanly(tmp_path, capsys) -> None:
    from collabmatch.__main__ import main

    exit_code = main(["--db", str(tmp_path / "db.sqlite"), "load", str(tmp_path / "nope.yaml")])

    assert exit_code == 1
    assert "Error loading fixture" in capsys.readouterr().err


def test_cli_recommend_prints_json(seeded_db, capsys) -> None:
    from collabmatch.__main__ import main

    capsys.readouterr()
    exit_code = main(["--db", str(seeded_db), "recommend", "user-1", "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert [item["project_id"] for item in payload] == ["p1"]
    assert payload[0]["score"] >= 60
    assert payload[0]["match_factors"]["strengths_highlight"]


def test_cli_recommend_text_output(seeded_db, capsys) -> None:
    from collabmatch.__main__ import main

    capsys.readouterr()
    exit_code = main(["--db", str(seeded_db), "recommend", "user-1", "--limit", "1"])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert out.startswith("1. [")
    assert "Recipe API" in out


def test_cli_recommend_unknown_user_errors_cleanly(seeded_db, capsys) -> None:
    from collabmatch.__main__ import main

    assert main(["--db", str(seeded_db), "recommend", "ghost"]) == 1
    assert "ghost" in capsys.readouterr().err


def test_cli_recommend_rejects_non_positive_limit(seeded_db) -> None:
    from collabmatch.__main__ import main

    with pytest.raises(SystemExit):
        main(["--db", str(seeded_db), "recommend", "user-1", "--limit", "0"])


def test_cli_evaluate_with_language(tmp_path, capsys) -> None:
    from collabmatch.__main__ import main

    source = tmp_path / "solution.py"
    source.write_text("def add(a, b):\n    return a + b\n", encoding="utf-8")

    exit_code = main(["evaluate", str(source), "--language", "Python", "--difficulty", "hard"])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "Score: 16" in out
    assert "Status: completed" in out
    assert "great effort tackling it" in out


def test_cli_evaluate_without_language_uses_heuristics(tmp_path, capsys) -> None:
    from collabmatch.__main__ import main

    source = tmp_path / "solution.js"
    source.write_text("function add(a, b) {\n  // add\n  return a + b;\n}\n", encoding="utf-8")

    assert main(["evaluate", str(source)]) == 0
    assert "Score: 70" in capsys.readouterr().out


def test_cli_evaluate_missing_file_errors_cleanly(tmp_path, capsys) -> None:
    from collabmatch.__main__ import main

    assert main(["evaluate", str(tmp_path / "missing.py")]) == 1
    assert "Error reading" in capsys.readouterr().err


def test_cli_evaluate_tolerates_undecodable_bytes(tmp_path, capsys) -> None:
    from collabmatch.__main__ import main

    source = tmp_path / "latin1.js"
    source.write_bytes(
        b"function add(a, b) {\n  // caf\xe9 \xff\xfe\n  return a + b;\n}\n"
    )

    assert main(["evaluate", str(source)]) == 0
    assert "Score: 70" in capsys.readouterr().out


def test_cli_thresholds_prints_config(capsys) -> None:
    from collabmatch.__main__ import main

    assert main(["thresholds"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["recommendation_threshold"] == 60
    assert payload["weights"]["language"] == 0.35
    assert payload["diversity_lambda"] == 0.25
