"""
Tests for the data models.

Validates snapshot parsing, interest vector invariants and topic
vocabulary resolution.
"""

import pytest
from datetime import date, datetime

from caredigest.models import (
    ContextSnapshot,
    DEFAULT_INTEREST_SCORES,
    InterestVector,
    PriorityLabel,
    RecentEvent,
    Topic,
    Trend,
    canonical_topic_name,
    optional_label,
    parse_date,
    resolve_topic,
)
from tests.test_config import EXPECTED, TEST_DATA, get_context, get_interest_vector_data


# =============================================================================
# Topic Vocabulary
# =============================================================================

class TestTopicVocabulary:
    """Tests for topic and trend resolution."""

    @pytest.mark.parametrize("name,expected", [
        ("sleep", Topic.SLEEP),
        ("  Sleep ", Topic.SLEEP),
        ("feeding", Topic.FOOD),
        ("milestone", Topic.DEVELOPMENT),
        ("friend", Topic.SOCIAL),
        ("toilet", Topic.POTTY),
        ("medical", Topic.HEALTH),
        (Topic.MOOD, Topic.MOOD),
    ])
    def test_resolve_topic(self, name, expected):
        assert resolve_topic(name) is expected

    def test_unknown_topic_resolves_to_none(self):
        assert resolve_topic("astronomy") is None
        assert resolve_topic("") is None
        assert resolve_topic(None) is None

    def test_canonical_name_keeps_unknown_topics(self):
        assert canonical_topic_name("Feeding") == "food"
        assert canonical_topic_name("Astronomy") == "astronomy"

    def test_trend_parse(self):
        assert Trend.parse("Declining") is Trend.DECLINING
        assert Trend.parse("sideways") is None
        assert Trend.parse(None) is None

    @pytest.mark.parametrize("score,label", [
        (100, PriorityLabel.HIGH),
        (75, PriorityLabel.HIGH),
        (74, PriorityLabel.MEDIUM),
        (50, PriorityLabel.MEDIUM),
        (49, PriorityLabel.LOW),
        (0, PriorityLabel.LOW),
    ])
    def test_priority_label_from_score(self, score, label):
        assert PriorityLabel.from_score(score) is label

    def test_optional_label_defaults_to_low(self):
        assert optional_label("HIGH") is PriorityLabel.HIGH
        assert optional_label("urgent") is PriorityLabel.LOW
        assert optional_label(None) is PriorityLabel.LOW


# =============================================================================
# Interest Vector
# =============================================================================

class TestInterestVector:
    """Tests for InterestVector invariants and serialization."""

    def test_default_is_baseline(self):
        vector = InterestVector.default("u", "s")

        assert vector.scores == DEFAULT_INTEREST_SCORES
        assert vector.explicit_topics == []
        assert vector.recent_topics == []
        assert vector.last_interaction_at is None

    def test_default_scores_are_not_shared(self):
        a = InterestVector.default("u", "a")
        b = InterestVector.default("u", "b")
        a.scores["sleep"] = 0.1

        assert b.scores["sleep"] == 0.7

    def test_out_of_range_score_rejected(self):
        with pytest.raises(ValueError, match="between 0.0 and 1.0"):
            InterestVector("u", "s", scores={"sleep": 1.2})

    def test_duplicate_recent_topics_rejected(self):
        with pytest.raises(ValueError, match="duplicates"):
            InterestVector("u", "s", recent_topics=["sleep", "sleep"])

    def test_recent_topics_bounded(self):
        topics = [f"topic-{i}" for i in range(EXPECTED["interest"]["max_recent_topics"] + 1)]

        with pytest.raises(ValueError, match="at most 10"):
            InterestVector("u", "s", recent_topics=topics)

    def test_recent_topics_at_limit_accepted(self):
        topics = [f"topic-{i}" for i in range(EXPECTED["interest"]["max_recent_topics"])]

        assert len(InterestVector("u", "s", recent_topics=topics).recent_topics) == 10

    @pytest.mark.parametrize("overrides", [
        {"scores": [1, 2]},
        {"scores": {"sleep": "high"}},
        {"recent_topics": "sleep"},
        {"explicit_topics": [["sleep"]]},
    ])
    def test_from_dict_rejects_wrong_shapes(self, overrides):
        with pytest.raises(ValueError):
            InterestVector.from_dict(get_interest_vector_data(**overrides))

    def test_from_dict_rejects_non_object(self):
        with pytest.raises(ValueError, match="must be an object"):
            InterestVector.from_dict(["sleep"])

    def test_empty_ids_rejected(self):
        with pytest.raises(ValueError, match="user_id"):
            InterestVector("  ", "s")

    def test_dict_round_trip_preserves_fields(self):
        vector = InterestVector.from_dict(get_interest_vector_data())
        restored = InterestVector.from_dict(vector.to_dict())

        assert restored.scores == vector.scores
        assert restored.explicit_topics == ["sleep"]
        assert restored.recent_topics == ["sleep", "health"]
        assert restored.last_interaction_at == datetime(2026, 1, 19, 20, 15)

    def test_from_dict_accepts_interest_vector_alias(self):
        data = get_interest_vector_data()
        data["interest_vector"] = data.pop("scores")

        vector = InterestVector.from_dict(data)

        assert vector.scores["sleep"] == 0.9

    def test_score_for_unknown_topic_is_neutral(self, interest_vector):
        assert interest_vector.score_for("astronomy") == 0.5


# =============================================================================
# Context Snapshot
# =============================================================================

class TestContextSnapshot:
    """Tests for building snapshots from documents."""

    def test_minimal_document(self):
        snapshot = ContextSnapshot.from_dict({"user_id": "u", "subject_id": "s"})

        assert snapshot.date == date.today()
        assert snapshot.age_months is None
        assert snapshot.daily_summary is None
        assert snapshot.report is None
        assert snapshot.reminders == ()
        assert snapshot.recent_events == ()
        assert snapshot.interest is None

    def test_busy_document(self, busy_context):
        assert busy_context.date == date(2026, 1, 20)
        assert busy_context.age_months == 12
        assert busy_context.subject_name == "Leo"
        assert busy_context.has_daily_sickness is True
        assert busy_context.has_daily_incident is False
        assert busy_context.high_priority_event_count == 2
        assert busy_context.reminders[0].due_date == date(2026, 1, 20)
        assert busy_context.report.has_notes is True
        assert busy_context.topic_trends == {"mood": "declining"}
        assert len(busy_context.metric_history) == 3

    def test_embedded_interest_takes_snapshot_ids(self):
        data = get_context("quiet", interest={"scores": {"sleep": 0.2}})

        snapshot = ContextSnapshot.from_dict(data)

        assert snapshot.interest.user_id == "user-1"
        assert snapshot.interest.scores == {"sleep": 0.2}

    def test_with_interest_returns_copy(self, quiet_context, interest_vector):
        updated = quiet_context.with_interest(interest_vector)

        assert updated.interest is interest_vector
        assert quiet_context.interest is None

    @pytest.mark.parametrize("document,field_name", TEST_DATA["invalid_contexts"])
    def test_invalid_documents_raise_value_error(self, document, field_name):
        with pytest.raises(ValueError, match=field_name):
            ContextSnapshot.from_dict(document)

    @pytest.mark.parametrize("overrides,field_name", [
        ({"recent_events": ["sleep"]}, "recent_events"),
        ({"reminders": ["vaccines"]}, "reminders"),
        ({"topic_trends": ["sleep", "declining"]}, "topic_trends"),
        ({"daily_summary": [1]}, "daily_summary"),
        ({"daily_summary": {"recent_trends": ["sleep_hours"]}}, "recent_trends"),
        ({"daily_summary": {"metrics": [9.5]}}, "metrics"),
        ({"daily_summary": {"recent_trends": [{"change_percent": "lots"}]}}, "change_percent"),
        ({"report": [1]}, "report"),
        ({"report": {"meals": "lunch"}}, "meals"),
        ({"interest": ["sleep"]}, "interest"),
        ({"interest": {"scores": [0.5]}}, "scores"),
        ({"metric_history": ["2026-01-20"]}, "metric_history"),
    ])
    def test_wrong_section_types_raise_value_error(self, overrides, field_name):
        with pytest.raises(ValueError, match=field_name):
            ContextSnapshot.from_dict(get_context("quiet", **overrides))

    def test_missing_labels_do_not_break_high_priority_count(self):
        snapshot = ContextSnapshot(
            user_id="u", subject_id="s", date=date(2026, 1, 20),
            recent_events=(RecentEvent("sleep", priority=None), RecentEvent("mood", priority="HIGH")),
        )

        assert snapshot.high_priority_event_count == 1

    def test_non_object_document_rejected(self):
        with pytest.raises(ValueError):
            ContextSnapshot.from_dict(["not", "an", "object"])

    def test_parse_date_variants(self):
        assert parse_date("2026-01-20") == date(2026, 1, 20)
        assert parse_date("2026-01-20T08:30:00Z") == date(2026, 1, 20)
        assert parse_date(datetime(2026, 1, 20, 8, 30)) == date(2026, 1, 20)
        assert parse_date(None) is None
