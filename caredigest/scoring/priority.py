"""
Priority scoring for Care Digest.

Estimates how worth-surfacing a topic is today, as an integer 0-100.

Formula:
    priority = round(100 * (w_interest * interest
                            + w_urgency * urgency_signal
                            + w_age * age_relevance
                            + w_recency * recency
                            + w_trend * trend)), capped at 100

Every component is normalized to 0.0 - 1.0 and has a documented default,
so a topic with no evidence at all still gets a valid, low score. The
urgency *signal* used here is a continuous 0-1 value and is unrelated to
the 0-10 urgency level computed in caredigest.scoring.urgency.

All functions are pure and never raise on missing context sections.
"""

import math
from dataclasses import dataclass
from typing import Optional

from loguru import logger

from caredigest.config import (
    PRIORITY_WEIGHT_AGE,
    PRIORITY_WEIGHT_INTEREST,
    PRIORITY_WEIGHT_RECENCY,
    PRIORITY_WEIGHT_TREND,
    PRIORITY_WEIGHT_URGENCY,
)
from caredigest.models.context import ContextSnapshot
from caredigest.models.interest import NEUTRAL_INTEREST
from caredigest.models.outputs import TopicBreakdown
from caredigest.models.topic import Trend, canonical_topic_name
from caredigest.scoring.rules import age_relevance, event_matches_topic, topic_trend


# =============================================================================
# Scoring Configuration
# =============================================================================

# Interest boosts for pinned and recently touched topics
EXPLICIT_TOPIC_BOOST: float = 0.2
RECENT_TOPIC_BOOST: float = 0.1

# Continuous urgency signal contributions
SIGNAL_DAILY_INCIDENT: float = 0.5
SIGNAL_DAILY_SICKNESS: float = 0.5
SIGNAL_REPORT_INCIDENT: float = 0.4
SIGNAL_REPORT_NOTES: float = 0.2
SIGNAL_PER_HIGH_EVENT: float = 0.15
SIGNAL_HIGH_EVENT_CAP: float = 0.6

# Recency when no event matches the topic
DEFAULT_RECENCY: float = 0.3

# (max days since the last matching event, score), checked in order
RECENCY_STEPS: tuple[tuple[int, float], ...] = (
    (0, 1.0),
    (1, 0.9),
    (3, 0.7),
    (7, 0.5),
    (14, 0.3),
)
STALE_RECENCY: float = 0.1

TREND_SCORES: dict[Trend, float] = {
    Trend.DECLINING: 1.0,
    Trend.IMPROVING: 0.6,
    Trend.STABLE: 0.4,
}
DEFAULT_TREND_SCORE: float = 0.5


@dataclass(frozen=True)
class PriorityWeights:
    """
    Weights of the five priority components.

    They must sum to 1.0 so that a topic maxing every component scores 100.
    """
    interest: float = PRIORITY_WEIGHT_INTEREST
    urgency: float = PRIORITY_WEIGHT_URGENCY
    age_relevance: float = PRIORITY_WEIGHT_AGE
    recency: float = PRIORITY_WEIGHT_RECENCY
    trend: float = PRIORITY_WEIGHT_TREND

    def __post_init__(self) -> None:
        if any(w < 0 for w in self.as_dict().values()):
            raise ValueError("priority weights cannot be negative")
        if not math.isclose(self.total, 1.0, abs_tol=1e-9):
            raise ValueError(f"priority weights must sum to 1.0, got {self.total:.4f}")

    @property
    def total(self) -> float:
        return self.interest + self.urgency + self.age_relevance + self.recency + self.trend

    def as_dict(self) -> dict[str, float]:
        return {
            "interest": self.interest,
            "urgency": self.urgency,
            "age_relevance": self.age_relevance,
            "recency": self.recency,
            "trend": self.trend,
        }


def _clamp(value: float, minimum: float = 0.0, maximum: float = 1.0) -> float:
    return max(minimum, min(maximum, value))


def _round_half_up(value: float) -> int:
    # Float noise (67.49999999999999) must not flip an exact .5 downwards
    return int(math.floor(round(value, 9) + 0.5))


# =============================================================================
# Component Scores
# =============================================================================

def compute_interest_score(topic, context: ContextSnapshot) -> float:
    """
    User interest in the topic (0.0 to 1.0).

    - Base: the interest vector score (0.5 if no profile or topic unknown)
    - +0.2 if the user pinned the topic, +0.1 if they touched it recently
    """
    profile = context.interest
    if profile is None:
        return NEUTRAL_INTEREST

    name = canonical_topic_name(topic)
    score = profile.scores.get(name, NEUTRAL_INTEREST)

    if name in (profile.explicit_topics or []):
        score = min(score + EXPLICIT_TOPIC_BOOST, 1.0)

    if name in (profile.recent_topics or []):
        score = min(score + RECENT_TOPIC_BOOST, 1.0)

    return _clamp(score)


def compute_urgency_signal(context: ContextSnapshot) -> float:
    """
    Continuous urgency signal (0.0 to 1.0) from today's flags.

    - +0.5 daily incident, +0.5 daily sickness
    - +0.4 daycare incident, +0.2 non-empty teacher notes
    - +0.15 per high/critical recent event, at most 0.6
    """
    signal = 0.0

    if context.has_daily_incident:
        signal += SIGNAL_DAILY_INCIDENT
    if context.has_daily_sickness:
        signal += SIGNAL_DAILY_SICKNESS

    if context.report is not None:
        if context.report.has_incident:
            signal += SIGNAL_REPORT_INCIDENT
        if context.report.has_notes:
            signal += SIGNAL_REPORT_NOTES

    signal += min(context.high_priority_event_count * SIGNAL_PER_HIGH_EVENT, SIGNAL_HIGH_EVENT_CAP)

    return _clamp(signal)


def days_since_last_event(topic, context: ContextSnapshot) -> Optional[int]:
    """
    Days between the newest event matching the topic and the snapshot date.

    Events dated after the snapshot count as today. Events without a date
    are ignored.

    Returns:
        Days since the event, or None if no dated event matches.
    """
    dates = [
        e.occurred_at
        for e in context.recent_events
        if e.occurred_at is not None and event_matches_topic(e.event_type, topic)
    ]
    if not dates:
        return None
    return max((context.date - max(dates)).days, 0)


def compute_recency_score(topic, context: ContextSnapshot) -> float:
    """
    Recency of the last matching event (0.0 to 1.0).

    0 days -> 1.0, 1 -> 0.9, <=3 -> 0.7, <=7 -> 0.5, <=14 -> 0.3, older -> 0.1,
    no matching event -> 0.3.
    """
    days = days_since_last_event(topic, context)
    if days is None:
        return DEFAULT_RECENCY

    for max_days, score in RECENCY_STEPS:
        if days <= max_days:
            return score
    return STALE_RECENCY


def compute_trend_score(topic, context: ContextSnapshot) -> float:
    """
    Trend component (0.0 to 1.0): declining topics deserve the most attention.

    declining -> 1.0, improving -> 0.6, stable -> 0.4, unknown -> 0.5.
    """
    trend = topic_trend(topic, context)
    return TREND_SCORES.get(trend, DEFAULT_TREND_SCORE)


def compute_age_relevance_score(topic, context: ContextSnapshot) -> float:
    return age_relevance(topic, context.age_months)


# =============================================================================
# Scorer
# =============================================================================

def compute_priority_breakdown(
    topic,
    context: ContextSnapshot,
    weights: Optional[PriorityWeights] = None,
) -> TopicBreakdown:
    """
    Compute the priority score and its component breakdown.

    Returns:
        TopicBreakdown with the final 0-100 priority and every component.
    """
    weights = weights or PriorityWeights()

    interest = compute_interest_score(topic, context)
    signal = compute_urgency_signal(context)
    age = compute_age_relevance_score(topic, context)
    recency = compute_recency_score(topic, context)
    trend = compute_trend_score(topic, context)

    raw = (
        interest * weights.interest * 100
        + signal * weights.urgency * 100
        + age * weights.age_relevance * 100
        + recency * weights.recency * 100
        + trend * weights.trend * 100
    )
    priority = max(0, min(_round_half_up(min(raw, 100.0)), 100))

    return TopicBreakdown(
        topic=canonical_topic_name(topic),
        priority=priority,
        interest=interest,
        urgency_signal=signal,
        age_relevance=age,
        recency=recency,
        trend=trend,
        weights=weights.as_dict(),
    )


class PriorityScorer:
    """
    Scores topics 0-100 for ranking.

    Usage:
        scorer = PriorityScorer()
        priority = scorer.score("sleep", context)
    """

    def __init__(self, weights: Optional[PriorityWeights] = None):
        self.weights = weights or PriorityWeights()

    def breakdown(self, topic, context: ContextSnapshot) -> TopicBreakdown:
        return compute_priority_breakdown(topic, context, self.weights)

    def score(self, topic, context: ContextSnapshot) -> int:
        """Priority of topic in context (0 to 100)."""
        result = self.breakdown(topic, context)

        logger.debug(
            "Priority for topic '{}': {} (interest={:.2f}, urgency={:.2f}, age={:.2f}, recency={:.2f}, trend={:.2f})",
            result.topic, result.priority, result.interest, result.urgency_signal,
            result.age_relevance, result.recency, result.trend,
        )
        return result.priority
