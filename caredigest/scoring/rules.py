"""
Classification rules for Care Digest scoring.

This file is the single source of truth for the keyword lists and lookup
tables the scorers rely on:

1. Event severity keywords (event type -> base urgency)
2. Teacher-note keywords that mark a report as concerning
3. Reminder categories and topics that carry extra urgency
4. Age relevance per topic (piecewise by age in months)
5. Trend lookup for scoring and for insight cards

KEYWORD MATCHING:

All matching is case-insensitive substring containment, so "sleep" matches
an event typed "sleep_regression" and "concern" matches "concerned". This
also means short topic names can match inside unrelated words; keep topic
names and keywords specific.
"""

from typing import Callable, Optional

from caredigest.models.context import ContextSnapshot
from caredigest.models.topic import Topic, Trend, resolve_topic, topic_name


# =============================================================================
# Event Severity
# =============================================================================

# Ordered (keywords, base urgency) pairs; the first matching row wins
EVENT_SEVERITY_KEYWORDS: tuple[tuple[tuple[str, ...], int], ...] = (
    (("incident",), 9),
    (("sickness", "illness"), 8),
    (("medical",), 7),
    (("injury",), 8),
    (("allergy",), 7),
)

# Event priority label -> urgency adjustment
EVENT_PRIORITY_BOOST: dict[str, int] = {
    "critical": 2,
    "high": 1,
}

# Event risk label that adds one urgency point
HIGH_RISK_LEVEL: str = "high"


def event_base_severity(event_type: str) -> int:
    """
    Base urgency (0-10) of an event from keywords in its type.

    Returns 0 when no severity keyword is present.
    """
    text = (event_type or "").lower()
    for keywords, severity in EVENT_SEVERITY_KEYWORDS:
        if any(k in text for k in keywords):
            return severity
    return 0


def event_matches_topic(event_type: str, topic) -> bool:
    """True if the topic name appears anywhere in the event type (case-insensitive)."""
    name = topic_name(topic)
    return bool(name) and name in (event_type or "").lower()


# =============================================================================
# Daycare Report Notes
# =============================================================================

# Words in teacher notes that mark them as needing attention
URGENT_NOTE_KEYWORDS: tuple[str, ...] = (
    "urgent",
    "immediate",
    "concern",
    "worried",
)


def notes_are_concerning(notes: str) -> bool:
    """True if the notes contain any of URGENT_NOTE_KEYWORDS."""
    text = (notes or "").lower()
    return any(k in text for k in URGENT_NOTE_KEYWORDS)


# =============================================================================
# Reminders and Trends
# =============================================================================

# Reminder categories that add one urgency point
TIME_CRITICAL_REMINDER_CATEGORIES: frozenset[str] = frozenset({
    "appointment",
    "vaccination",
    "medication",
})

# Topics whose decline is more urgent than the rest
CRITICAL_TREND_TOPICS: frozenset[Topic] = frozenset({
    Topic.SLEEP,
    Topic.FOOD,
    Topic.HEALTH,
})


def topic_trend(topic, context: ContextSnapshot) -> Optional[Trend]:
    """
    The trend recorded for a topic in context.topic_trends.

    Priority and urgency scoring read only this map.
    """
    name = topic_name(topic)
    if not name or not context.topic_trends:
        return None

    explicit = context.topic_trends.get(name)
    return Trend.parse(explicit) if explicit is not None else None


def resolve_trend(topic, context: ContextSnapshot) -> Optional[Trend]:
    """
    Find the trend shown on a topic's insight card.

    Lookup order:
    1. context.topic_trends[topic]
    2. The first daily-summary trend whose metric name contains the topic

    Returns:
        The Trend, or None when no recognizable trend is available.
    """
    name = topic_name(topic)
    if not name:
        return None

    if context.topic_trends and context.topic_trends.get(name) is not None:
        return topic_trend(name, context)

    if context.daily_summary:
        for trend in context.daily_summary.recent_trends:
            if name in (trend.metric or "").lower():
                return Trend.parse(trend.trend)

    return None


# =============================================================================
# Age Relevance
# =============================================================================

# Relevance used for topics without a table or when age is unknown
DEFAULT_AGE_RELEVANCE: float = 0.5


def _sleep(age: int) -> float:
    if age < 12:
        return 1.0
    if age < 24:
        return 0.8
    return 0.6


def _food(age: int) -> float:
    # Solid-food transitions around 6, 12 and 18 months
    if 5 <= age <= 7 or 11 <= age <= 13 or 17 <= age <= 19:
        return 1.0
    return 0.7


def _development(age: int) -> float:
    if age < 24:
        return 1.0
    if age < 48:
        return 0.9
    return 0.7


def _social(age: int) -> float:
    if age < 12:
        return 0.3
    if age < 24:
        return 0.6
    return 0.9


def _potty(age: int) -> float:
    if age < 18:
        return 0.1
    if age <= 36:
        return 1.0
    return 0.4


def _health(age: int) -> float:
    return 0.9


AGE_RELEVANCE: dict[Topic, Callable[[int], float]] = {
    Topic.SLEEP: _sleep,
    Topic.FOOD: _food,
    Topic.DEVELOPMENT: _development,
    Topic.SOCIAL: _social,
    Topic.POTTY: _potty,
    Topic.HEALTH: _health,
}

# Topics whose relevance does not depend on age
AGE_INDEPENDENT_TOPICS: frozenset[Topic] = frozenset({Topic.HEALTH})


def age_relevance(topic, age_months: Optional[int]) -> float:
    """
    How relevant a topic is at the given age (0.0 to 1.0).

    Topics are resolved through their aliases (e.g. "feeding" uses the food
    table). Unknown topics score DEFAULT_AGE_RELEVANCE; so does an unknown
    age, except for topics whose relevance is constant.
    """
    resolved = resolve_topic(topic)
    table = AGE_RELEVANCE.get(resolved)
    if table is None:
        return DEFAULT_AGE_RELEVANCE

    if age_months is None:
        if resolved in AGE_INDEPENDENT_TOPICS:
            return table(0)
        return DEFAULT_AGE_RELEVANCE

    return table(age_months)
