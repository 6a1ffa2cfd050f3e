"""Tests for topic, language and difficulty scorers and the aggregator."""

import pytest


def _topics(*specs):
    from collabmatch.matching.models import ProjectTopic

    return [ProjectTopic(topic_name=name, is_primary=primary) for name, primary in specs]


def _languages(*specs):
    from collabmatch.matching.models import ProjectLanguage

    return [
        ProjectLanguage.model_validate(
            {"language_name": name, "is_primary": primary, "required_level": level}
        )
        for name, primary, level in specs
    ]


class TestTopicCoverageScore:
    """Test topic_coverage_score."""

    def test_no_project_topics_is_neutral(self, sample_user):
        """A project without topics should score exactly 50 with no matches or gaps."""
        from collabmatch.matching.scorers import topic_coverage_score

        result = topic_coverage_score(sample_user.topics, [])

        assert result.score == 50
        assert result.matches == []
        assert result.gaps == []

    def test_full_match_blends_quality_and_coverage(self):
        """A single fully covered topic should score 0.85*quality + 15."""
        from collabmatch.matching.models import UserTopic
        from collabmatch.matching.scorers import topic_coverage_score

        user_topics = [
            UserTopic(topic_name="AI", interest_level="high", experience_level="advanced")
        ]
        result = topic_coverage_score(user_topics, _topics(("AI", False)))

        # quality = (1.0 + 0.75) / 2 * 100 = 87.5
        assert result.score == pytest.approx(0.85 * 87.5 + 15)
        assert result.coverage == 1.0
        assert [m.name for m in result.matches] == ["AI"]

    def test_missing_topics_become_gaps(self, sample_user):
        """Uncovered topics should be recorded as missing gaps."""
        from collabmatch.matching.scorers import topic_coverage_score

        result = topic_coverage_score(
            sample_user.topics,
            _topics(("Web Development", True), ("Blockchain", False)),
            primary_boost=1.5,
        )

        assert [g.name for g in result.gaps] == ["Blockchain"]
        assert result.gaps[0].status == "missing"
        assert result.coverage == pytest.approx(1.5 / 2.5)

    def test_primary_boost_weights_primary_topics(self):
        """A covered primary topic should pull the score up more than a secondary one."""
        from collabmatch.matching.models import UserTopic
        from collabmatch.matching.scorers import topic_coverage_score

        user_topics = [
            UserTopic(topic_name="AI", interest_level="high", experience_level="expert")
        ]
        as_primary = topic_coverage_score(
            user_topics, _topics(("AI", True), ("Games", False)), primary_boost=1.8
        )
        as_secondary = topic_coverage_score(
            user_topics, _topics(("AI", False), ("Games", True)), primary_boost=1.8
        )

        assert as_primary.score > as_secondary.score

    def test_matching_is_case_sensitive(self):
        """Topic names should match by exact string equality."""
        from collabmatch.matching.models import UserTopic
        from collabmatch.matching.scorers import topic_coverage_score

        result = topic_coverage_score(
            [UserTopic(topic_name="web development")], _topics(("Web Development", False))
        )

        assert result.matches == []
        assert len(result.gaps) == 1

    def test_unnamed_entries_are_ignored(self):
        """Topics without a name should not count on either side."""
        from collabmatch.matching.models import ProjectTopic, UserTopic
        from collabmatch.matching.scorers import topic_coverage_score

        result = topic_coverage_score(
            [UserTopic(topic_name=None, interest_level="high")],
            [ProjectTopic(topic_name=None), ProjectTopic(topic_name="AI")],
        )

        assert result.matches == []
        assert [g.name for g in result.gaps] == ["AI"]


class TestLanguageProficiencyScore:
    """Test language_proficiency_score."""

    def test_no_project_languages_is_neutral(self, sample_user):
        """A project without languages should score exactly 50."""
        from collabmatch.matching.scorers import language_proficiency_score

        result = language_proficiency_score(sample_user.languages, [])

        assert result.score == 50
        assert result.matches == []
        assert result.gaps == []

    def test_meeting_requirement_scores_full(self):
        """Proficiency at the required level should contribute a full 100."""
        from collabmatch.matching.models import UserLanguage
        from collabmatch.matching.scorers import language_proficiency_score

        result = language_proficiency_score(
            [UserLanguage(language_name="Go", proficiency_level="intermediate")],
            _languages(("Go", True, "intermediate")),
        )

        assert result.score == pytest.approx(100.0)
        assert result.matches[0].meets
        assert result.gaps == []

    def test_below_requirement_uses_ratio(self):
        """Below the requirement the contribution should be prof/req * 100."""
        from collabmatch.matching.models import UserLanguage
        from collabmatch.matching.scorers import language_proficiency_score

        result = language_proficiency_score(
            [UserLanguage(language_name="Go", proficiency_level="beginner")],
            _languages(("Go", False, "expert")),
        )

        # ratio 0.25 / 1.0
        assert result.score == pytest.approx(0.85 * 25 + 15)
        assert result.gaps[0].status == "below"
        assert result.gaps[0].user_proficiency == 0.25
        assert result.gaps[0].required == 1.0

    def test_missing_language_is_gap_with_requirement(self):
        """A language the user lacks should be a missing gap carrying the requirement."""
        from collabmatch.matching.scorers import language_proficiency_score

        result = language_proficiency_score([], _languages(("Rust", True, "advanced")))

        assert result.score == 0
        assert result.gaps[0].status == "missing"
        assert result.gaps[0].required == 0.75
        assert result.gaps[0].user_proficiency == 0.0

    def test_first_user_entry_wins_for_duplicates(self):
        """Duplicate user languages should resolve to the first entry."""
        from collabmatch.matching.models import UserLanguage
        from collabmatch.matching.scorers import language_proficiency_score

        result = language_proficiency_score(
            [
                UserLanguage(language_name="Go", proficiency_level="expert"),
                UserLanguage(language_name="Go", proficiency_level="beginner"),
            ],
            _languages(("Go", False, "advanced")),
        )

        assert result.matches[0].user_proficiency == 1.0


class TestDifficultyAlignmentScore:
    """Test difficulty_alignment_score."""

    @pytest.mark.parametrize(
        ("user_years", "required"),
        [
            (0, "beginner"),
            (2, "intermediate"),
            (2, "beginner"),
            (4, "advanced"),
            (10, "expert"),
            (10, "beginner"),
            ("expert", "advanced"),
        ],
    )
    def test_no_penalty_when_user_meets_level(self, user_years, required):
        """Users at or above the required level should score exactly 100."""
        from collabmatch.matching.scorers import difficulty_alignment_score

        assert difficulty_alignment_score(user_years, required) == 100.0

    def test_penalty_per_level(self):
        """Each level short of the requirement should cost the configured penalty."""
        from collabmatch.matching.scorers import difficulty_alignment_score

        assert difficulty_alignment_score(0, "expert", penalty=18) == 100 - 3 * 18
        assert difficulty_alignment_score(0, "expert", penalty=22) == 100 - 3 * 22
        assert difficulty_alignment_score(2, "advanced", penalty=20) == 80

    def test_missing_values_default_to_intermediate(self):
        """Missing user and project levels should both mean intermediate."""
        from collabmatch.matching.scorers import difficulty_alignment_score

        assert difficulty_alignment_score(None, None) == 100.0
        assert difficulty_alignment_score(None, "advanced", penalty=18) == 82.0


class TestAggregateScore:
    """Test aggregate_score."""

    def _features(self, topic, language, difficulty):
        from collabmatch.matching.models import CoverageResult, MatchFeatures

        return MatchFeatures(
            topic=CoverageResult(score=topic),
            language=CoverageResult(score=language),
            difficulty=difficulty,
        )

    def test_weighted_sum(self, matching_config):
        """The aggregate should be the weighted sum of the sub-scores."""
        from collabmatch.matching.scorers import aggregate_score

        score = aggregate_score(self._features(50, 100, 100), matching_config)

        assert score == pytest.approx(0.30 * 50 + 0.35 * 100 + 0.20 * 100)

    @pytest.mark.parametrize(
        "sub_scores",
        [
            (-500, -500, -500),
            (1000, 1000, 1000),
            (float("inf"), 0, 0),
            (float("-inf"), 100, 100),
            (float("nan"), 50, 50),
            (None, None, None),
        ],
    )
    def test_clamped_to_range(self, matching_config, sub_scores):
        """Misbehaving sub-scores should never push the aggregate outside [0, 100]."""
        from collabmatch.matching.scorers import aggregate_score

        score = aggregate_score(self._features(*sub_scores), matching_config)

        assert 0.0 <= score <= 100.0


class TestIsRecommendable:
    """Test threshold monotonicity."""

    def test_raising_threshold_never_grows_the_set(self):
        """A higher threshold should admit a subset of what a lower one admits."""
        from collabmatch.matching.config import MatchingConfig
        from collabmatch.matching.scorers import is_recommendable

        scores = [12.0, 45.5, 59.9, 60.0, 72.3, 88.0, 100.0]
        previous = len(scores)
        for threshold in range(0, 101, 5):
            config = MatchingConfig(
                _env_file=None,  # type: ignore[call-arg]
                recommendation_threshold=threshold,
            )
            admitted = sum(1 for s in scores if is_recommendable(s, config))
            assert admitted <= previous
            previous = admitted
