"""
Tests for priority scoring.

Validates each normalized component, the weighted 0-100 formula,
rounding, bounds and weight validation.
"""

import pytest
from datetime import date, timedelta

from caredigest.models import (
    ContextSnapshot,
    DailySummary,
    DaycareReport,
    InterestVector,
    RecentEvent,
    TrendData,
)
from caredigest.scoring import (
    PriorityScorer,
    PriorityWeights,
    age_relevance,
    compute_interest_score,
    compute_priority_breakdown,
    compute_recency_score,
    compute_trend_score,
    compute_urgency_signal,
)
from tests.test_config import EXPECTED

TODAY = date(2026, 1, 20)


def make_context(**kwargs) -> ContextSnapshot:
    kwargs.setdefault("user_id", "u")
    kwargs.setdefault("subject_id", "s")
    kwargs.setdefault("date", TODAY)
    return ContextSnapshot(**kwargs)


# =============================================================================
# Weights
# =============================================================================

class TestPriorityWeights:
    """Tests for weight configuration."""

    def test_default_weights(self):
        weights = PriorityWeights()

        assert weights.as_dict() == pytest.approx(EXPECTED["priority"]["weights"])
        assert weights.total == pytest.approx(1.0)

    def test_weights_must_sum_to_one(self):
        with pytest.raises(ValueError, match="sum to 1.0"):
            PriorityWeights(interest=0.5)

    def test_negative_weights_rejected(self):
        with pytest.raises(ValueError, match="negative"):
            PriorityWeights(interest=0.6, trend=-0.2)

    def test_custom_weights_change_score(self, incident_sickness_context):
        urgency_only = PriorityWeights(
            interest=0.0, urgency=1.0, age_relevance=0.0, recency=0.0, trend=0.0,
        )

        assert PriorityScorer(urgency_only).score("health", incident_sickness_context) == 100


# =============================================================================
# Components
# =============================================================================

class TestInterestComponent:
    """Tests for the interest component."""

    def test_no_profile_is_neutral(self, quiet_context):
        assert compute_interest_score("sleep", quiet_context) == 0.5

    def test_explicit_and_recent_boosts_capped(self, quiet_context, interest_vector):
        context = quiet_context.with_interest(interest_vector)

        assert compute_interest_score("sleep", context) == 1.0

    def test_recent_boost(self, quiet_context, interest_vector):
        context = quiet_context.with_interest(interest_vector)

        assert compute_interest_score("health", context) == pytest.approx(0.9)

    def test_plain_score(self, quiet_context, interest_vector):
        context = quiet_context.with_interest(interest_vector)

        assert compute_interest_score("food", context) == pytest.approx(0.4)

    def test_alias_reads_canonical_score(self, quiet_context, interest_vector):
        context = quiet_context.with_interest(interest_vector)

        assert compute_interest_score("feeding", context) == pytest.approx(0.4)

    def test_unknown_topic_gets_boosts_on_neutral(self, quiet_context):
        vector = InterestVector("u", "s", explicit_topics=["astronomy"])
        context = quiet_context.with_interest(vector)

        assert compute_interest_score("astronomy", context) == pytest.approx(0.7)


class TestUrgencySignal:
    """Tests for the continuous urgency signal."""

    def test_no_signals(self, quiet_context):
        assert compute_urgency_signal(quiet_context) == 0.0

    def test_incident_and_sickness_saturate(self, incident_sickness_context):
        assert compute_urgency_signal(incident_sickness_context) == 1.0

    def test_report_contributions(self):
        context = make_context(report=DaycareReport(has_incident=True, teacher_notes="ok"))

        assert compute_urgency_signal(context) == pytest.approx(0.6)

    def test_blank_notes_ignored(self):
        context = make_context(report=DaycareReport(teacher_notes="   "))

        assert compute_urgency_signal(context) == 0.0

    def test_high_priority_events_capped(self):
        events = tuple(RecentEvent("sleep", priority="critical") for _ in range(10))
        context = make_context(recent_events=events)

        assert compute_urgency_signal(context) == pytest.approx(0.6)

    def test_low_priority_events_ignored(self):
        events = (RecentEvent("sleep", priority="low"), RecentEvent("food", priority="medium"))

        assert compute_urgency_signal(make_context(recent_events=events)) == 0.0


class TestRecencyComponent:
    """Tests for the recency component."""

    @pytest.mark.parametrize("days_ago,expected", [
        (0, 1.0),
        (1, 0.9),
        (2, 0.7),
        (3, 0.7),
        (5, 0.5),
        (7, 0.5),
        (10, 0.3),
        (14, 0.3),
        (15, 0.1),
        (90, 0.1),
    ])
    def test_recency_steps(self, days_ago, expected):
        event = RecentEvent("sleep_disruption", occurred_at=TODAY - timedelta(days=days_ago))

        assert compute_recency_score("sleep", make_context(recent_events=(event,))) == expected

    def test_newest_matching_event_wins(self):
        events = (
            RecentEvent("sleep_nap", occurred_at=TODAY - timedelta(days=20)),
            RecentEvent("Sleep_Disruption", occurred_at=TODAY - timedelta(days=1)),
            RecentEvent("food", occurred_at=TODAY),
        )

        assert compute_recency_score("sleep", make_context(recent_events=events)) == 0.9

    def test_future_event_counts_as_today(self):
        event = RecentEvent("sleep", occurred_at=TODAY + timedelta(days=2))

        assert compute_recency_score("sleep", make_context(recent_events=(event,))) == 1.0

    def test_no_matching_event(self):
        event = RecentEvent("food_refusal", occurred_at=TODAY)

        assert compute_recency_score("sleep", make_context(recent_events=(event,))) == 0.3

    def test_undated_events_ignored(self):
        event = RecentEvent("sleep_disruption", occurred_at=None)

        assert compute_recency_score("sleep", make_context(recent_events=(event,))) == 0.3


class TestTrendComponent:
    """Tests for the trend component."""

    def test_daily_summary_trends_are_not_scored(self, busy_context):
        assert compute_trend_score("sleep", busy_context) == 0.5
        assert compute_trend_score("food", busy_context) == 0.5

    def test_lone_declining_metric_scores_unknown(self):
        summary = DailySummary(recent_trends=(TrendData("sleep_hours", "declining"),))

        assert compute_trend_score("sleep", make_context(daily_summary=summary)) == 0.5

    def test_explicit_topic_trend(self, busy_context):
        assert compute_trend_score("mood", busy_context) == 1.0

    def test_unknown_trend(self, busy_context):
        assert compute_trend_score("health", busy_context) == 0.5

    @pytest.mark.parametrize("trend,expected", [
        ("declining", 1.0), ("improving", 0.6), ("stable", 0.4),
    ])
    def test_trend_values(self, trend, expected):
        context = make_context(topic_trends={"activity": trend})

        assert compute_trend_score("activity", context) == expected

    def test_unrecognized_trend_value_is_unknown(self):
        context = make_context(topic_trends={"sleep": "sideways"})

        assert compute_trend_score("sleep", context) == 0.5


class TestAgeRelevance:
    """Tests for the age relevance tables."""

    @pytest.mark.parametrize("topic,age,expected", [
        ("sleep", 6, 1.0),
        ("sleep", 18, 0.8),
        ("sleep", 30, 0.6),
        ("food", 6, 1.0),
        ("food", 12, 1.0),
        ("food", 18, 1.0),
        ("food", 9, 0.7),
        ("feeding", 6, 1.0),
        ("development", 10, 1.0),
        ("milestone", 30, 0.9),
        ("development", 60, 0.7),
        ("social", 6, 0.3),
        ("social", 18, 0.6),
        ("friend", 30, 0.9),
        ("potty", 12, 0.1),
        ("potty", 24, 1.0),
        ("toilet", 36, 1.0),
        ("potty", 40, 0.4),
        ("health", 3, 0.9),
        ("medical", 48, 0.9),
        ("activity", 12, 0.5),
        ("mood", 12, 0.5),
        ("astronomy", 12, 0.5),
    ])
    def test_age_tables(self, topic, age, expected):
        assert age_relevance(topic, age) == expected

    def test_unknown_age_uses_default(self):
        assert age_relevance("sleep", None) == 0.5
        assert age_relevance("potty", None) == 0.5

    def test_unknown_age_keeps_constant_health_relevance(self):
        assert age_relevance("health", None) == 0.9


# =============================================================================
# Final Score
# =============================================================================

class TestPriorityScore:
    """Tests for the combined priority score."""

    def test_incident_sickness_health_scenario(self, incident_sickness_context):
        scorer = PriorityScorer()

        assert scorer.score("health", incident_sickness_context) == EXPECTED["priority"]["incident_sickness_health"]

    def test_half_point_rounds_up(self, quiet_context):
        # 15 + 0 + 12 + 4.5 + 5 = 36.5
        assert PriorityScorer().score("sleep", quiet_context) == 37

    def test_breakdown_components(self, incident_sickness_context):
        breakdown = compute_priority_breakdown("health", incident_sickness_context)

        assert breakdown.topic == "health"
        assert breakdown.interest == 0.5
        assert breakdown.urgency_signal == 1.0
        assert breakdown.age_relevance == 0.9
        assert breakdown.recency == 0.3
        assert breakdown.trend == 0.5
        assert breakdown.to_dict()["priority"] == 68

    def test_maximum_evidence_scores_100(self):
        summary = DailySummary(
            has_incident=True,
            has_sickness=True,
        )
        vector = InterestVector("u", "s", scores={"sleep": 1.0})
        context = make_context(
            age_months=6,
            daily_summary=summary,
            topic_trends={"sleep": "declining"},
            interest=vector,
            recent_events=(RecentEvent("sleep_disruption", occurred_at=TODAY),),
        )

        assert PriorityScorer().score("sleep", context) == 100

    def test_missing_event_labels_use_defaults(self):
        event = RecentEvent("sleep_disruption", occurred_at=TODAY, priority=None, risk_level=None)
        labelled = RecentEvent("sleep_disruption", occurred_at=TODAY)

        score = PriorityScorer().score("sleep", make_context(recent_events=(event,)))

        assert score == PriorityScorer().score("sleep", make_context(recent_events=(labelled,)))

    def test_empty_context_has_valid_low_score(self):
        score = PriorityScorer().score("mood", make_context())

        low, high = EXPECTED["priority"]["range"]
        assert low <= score <= high
        assert score < 50

    @pytest.mark.parametrize("topic", ["sleep", "food", "health", "development", "social",
                                       "activity", "mood", "potty", "astronomy", ""])
    def test_bounds_for_every_topic(self, topic, busy_context, interest_vector):
        context = busy_context.with_interest(interest_vector)

        score = PriorityScorer().score(topic, context)

        assert isinstance(score, int)
        assert 0 <= score <= 100
