"""
Scoring module.

Scores topics for priority (0-100) and urgency (0-10) from a context snapshot.
"""

from caredigest.scoring.rules import (
    AGE_RELEVANCE,
    EVENT_SEVERITY_KEYWORDS,
    URGENT_NOTE_KEYWORDS,
    age_relevance,
    event_base_severity,
    event_matches_topic,
    notes_are_concerning,
    resolve_trend,
    topic_trend,
)

from caredigest.scoring.priority import (
    PriorityScorer,
    PriorityWeights,
    compute_age_relevance_score,
    compute_interest_score,
    compute_priority_breakdown,
    compute_recency_score,
    compute_trend_score,
    compute_urgency_signal,
)

from caredigest.scoring.urgency import (
    IMMEDIATE_ACTION_THRESHOLD,
    UrgencyBreakdown,
    UrgencyScorer,
    compute_event_urgency,
    compute_reminder_urgency,
    compute_report_urgency,
    compute_trend_urgency,
    level_label,
)

__all__ = [
    # Rules
    "AGE_RELEVANCE",
    "EVENT_SEVERITY_KEYWORDS",
    "URGENT_NOTE_KEYWORDS",
    "age_relevance",
    "event_base_severity",
    "event_matches_topic",
    "notes_are_concerning",
    "resolve_trend",
    "topic_trend",
    # Priority
    "PriorityScorer",
    "PriorityWeights",
    "compute_age_relevance_score",
    "compute_interest_score",
    "compute_priority_breakdown",
    "compute_recency_score",
    "compute_trend_score",
    "compute_urgency_signal",
    # Urgency
    "IMMEDIATE_ACTION_THRESHOLD",
    "UrgencyBreakdown",
    "UrgencyScorer",
    "compute_event_urgency",
    "compute_reminder_urgency",
    "compute_report_urgency",
    "compute_trend_urgency",
    "level_label",
]
