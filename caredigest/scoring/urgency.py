"""
Urgency scoring for Care Digest.

Estimates how time-sensitive a topic's current state is, as an integer
0-10 (10 = act now). Four independent contributions are summed and the
total is capped at 10:

1. Events:    max severity over recent events matching the topic
2. Reminders: max due-date pressure over active reminders
3. Trend:     a declining trend, weighted higher for sleep/food/health
4. Report:    daycare incident or teacher notes

Contributions are summed rather than maxed, so a daycare concern does not
hide an independent event-driven urgency.

This discrete urgency level is shown to users; it is a different quantity
from the continuous urgency signal that feeds priority scoring.
"""

from dataclasses import dataclass
from datetime import date

from loguru import logger

from caredigest.models.context import ContextSnapshot, RecentEvent, Reminder
from caredigest.models.topic import Trend, resolve_topic
from caredigest.scoring.rules import (
    CRITICAL_TREND_TOPICS,
    EVENT_PRIORITY_BOOST,
    HIGH_RISK_LEVEL,
    TIME_CRITICAL_REMINDER_CATEGORIES,
    event_base_severity,
    event_matches_topic,
    notes_are_concerning,
    topic_trend,
)


# =============================================================================
# Scoring Configuration
# =============================================================================

MAX_URGENCY: int = 10

# Urgency at or above which a topic needs immediate action
IMMEDIATE_ACTION_THRESHOLD: int = 8

# Reminder urgency by days until due: (max days, urgency), checked in order
REMINDER_DUE_STEPS: tuple[tuple[int, int], ...] = (
    (-1, 8),  # overdue
    (0, 7),   # today
    (1, 5),   # tomorrow
    (3, 3),
    (7, 2),
)

TREND_URGENCY_CRITICAL: int = 6
TREND_URGENCY_OTHER: int = 4

REPORT_INCIDENT_URGENCY: int = 7
REPORT_CONCERNING_NOTES_URGENCY: int = 6
REPORT_NOTES_URGENCY: int = 3

# (minimum urgency, label), checked in order
URGENCY_LEVELS: tuple[tuple[int, str], ...] = (
    (9, "critical"),
    (7, "high"),
    (5, "medium"),
    (3, "low"),
)


@dataclass(frozen=True)
class UrgencyBreakdown:
    """Per-source urgency contributions for one topic."""
    topic: str
    urgency: int
    events: int
    reminders: int
    trend: int
    report: int

    def to_dict(self) -> dict:
        return {
            "topic": self.topic,
            "urgency": self.urgency,
            "events": self.events,
            "reminders": self.reminders,
            "trend": self.trend,
            "report": self.report,
        }


def _cap(value: int) -> int:
    return max(0, min(value, MAX_URGENCY))


# =============================================================================
# Contributions
# =============================================================================

def single_event_urgency(event: RecentEvent, today: date) -> int:
    """
    Urgency of one event (0-10).

    Base severity from the event type, +2 critical / +1 high priority,
    +1 for a HIGH risk label, then -2 if older than 3 days or -1 if older
    than 1 day.
    """
    urgency = event_base_severity(event.event_type)
    urgency += EVENT_PRIORITY_BOOST.get((event.priority or "").lower(), 0)

    if (event.risk_level or "").lower() == HIGH_RISK_LEVEL:
        urgency += 1

    if event.occurred_at is not None:
        days_since = (today - event.occurred_at).days
        if days_since > 3:
            urgency -= 2
        elif days_since > 1:
            urgency -= 1

    return _cap(urgency)


def compute_event_urgency(topic, context: ContextSnapshot) -> int:
    """Highest single-event urgency among events whose type mentions the topic."""
    matching = [e for e in context.recent_events if event_matches_topic(e.event_type, topic)]
    if not matching:
        return 0
    return max(single_event_urgency(e, context.date) for e in matching)


def single_reminder_urgency(reminder: Reminder, today: date) -> int:
    """
    Urgency of one reminder (0-10).

    Overdue 8, today 7, tomorrow 5, within 3 days 3, within a week 2,
    later 0; +1 for high priority, +1 for appointment/vaccination/medication.
    Reminders without a due date score 0.
    """
    if reminder.due_date is None:
        return 0

    days_until = (reminder.due_date - today).days

    urgency = 0
    for max_days, value in REMINDER_DUE_STEPS:
        if days_until <= max_days:
            urgency = value
            break

    if (reminder.priority or "").lower() == "high":
        urgency += 1
    if (reminder.category or "").lower() in TIME_CRITICAL_REMINDER_CATEGORIES:
        urgency += 1

    return _cap(urgency)


def compute_reminder_urgency(context: ContextSnapshot) -> int:
    """Highest urgency among the active reminders with a due date."""
    values = [
        single_reminder_urgency(r, context.date)
        for r in context.reminders
        if r.due_date is not None
    ]
    return max(values, default=0)


def compute_trend_urgency(topic, context: ContextSnapshot) -> int:
    """6 for a declining sleep/food/health topic, 4 for other declines, else 0."""
    if topic_trend(topic, context) is not Trend.DECLINING:
        return 0
    if resolve_topic(topic) in CRITICAL_TREND_TOPICS:
        return TREND_URGENCY_CRITICAL
    return TREND_URGENCY_OTHER


def compute_report_urgency(context: ContextSnapshot) -> int:
    """
    Urgency from the daycare report.

    7 for a reported incident; otherwise 6 for notes containing an urgent
    keyword, 3 for any other notes, 0 without notes.
    """
    report = context.report
    if report is None:
        return 0

    if report.has_incident:
        return REPORT_INCIDENT_URGENCY

    if report.has_notes:
        if notes_are_concerning(report.teacher_notes):
            return REPORT_CONCERNING_NOTES_URGENCY
        return REPORT_NOTES_URGENCY

    return 0


def level_label(urgency: int) -> str:
    """critical >= 9, high >= 7, medium >= 5, low >= 3, otherwise none."""
    for minimum, label in URGENCY_LEVELS:
        if urgency >= minimum:
            return label
    return "none"


# =============================================================================
# Scorer
# =============================================================================

class UrgencyScorer:
    """
    Scores topics 0-10 for time sensitivity.

    Usage:
        scorer = UrgencyScorer()
        urgency = scorer.score("health", context)
        if scorer.is_immediate_action_required("health", context): ...
    """

    def breakdown(self, topic, context: ContextSnapshot) -> UrgencyBreakdown:
        events = compute_event_urgency(topic, context)
        reminders = compute_reminder_urgency(context)
        trend = compute_trend_urgency(topic, context)
        report = compute_report_urgency(context)

        return UrgencyBreakdown(
            topic=str(topic),
            urgency=_cap(events + reminders + trend + report),
            events=events,
            reminders=reminders,
            trend=trend,
            report=report,
        )

    def score(self, topic, context: ContextSnapshot) -> int:
        """Urgency of topic in context (0 to 10)."""
        result = self.breakdown(topic, context)
        logger.debug(
            "Urgency for topic '{}': {} (events={}, reminders={}, trend={}, report={})",
            result.topic, result.urgency, result.events, result.reminders,
            result.trend, result.report,
        )
        return result.urgency

    def is_immediate_action_required(self, topic, context: ContextSnapshot) -> bool:
        return self.score(topic, context) >= IMMEDIATE_ACTION_THRESHOLD

    @staticmethod
    def level_label(urgency: int) -> str:
        return level_label(urgency)
