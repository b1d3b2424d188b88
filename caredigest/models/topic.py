"""
Topic, trend and label vocabularies for Care Digest.

Topics are a closed set. Free-form names coming from events, reminders or
API callers are resolved through TOPIC_ALIASES; anything that does not
resolve is still scorable and simply falls back to the neutral defaults.
"""

from enum import Enum
from typing import Optional


class Topic(str, Enum):
    """Well-being areas used as the unit of scoring."""

    SLEEP = "sleep"
    FOOD = "food"
    HEALTH = "health"
    DEVELOPMENT = "development"
    SOCIAL = "social"
    ACTIVITY = "activity"
    MOOD = "mood"
    POTTY = "potty"

    def __str__(self) -> str:
        return self.value


# Topics shown as insight cards, in display order before ranking
INSIGHT_TOPICS: tuple[Topic, ...] = (
    Topic.SLEEP,
    Topic.FOOD,
    Topic.HEALTH,
    Topic.DEVELOPMENT,
    Topic.SOCIAL,
    Topic.ACTIVITY,
    Topic.MOOD,
)

# Alternative names that map onto the same topic
TOPIC_ALIASES: dict[str, Topic] = {
    "feeding": Topic.FOOD,
    "milestone": Topic.DEVELOPMENT,
    "friend": Topic.SOCIAL,
    "toilet": Topic.POTTY,
    "medical": Topic.HEALTH,
}


def resolve_topic(name) -> Optional[Topic]:
    """
    Resolve a topic name (or Topic) to a Topic member.

    Matching is case-insensitive and ignores surrounding whitespace.

    Returns:
        The Topic, or None when the name is not part of the vocabulary.
    """
    if isinstance(name, Topic):
        return name
    if not name:
        return None

    key = str(name).strip().lower()
    try:
        return Topic(key)
    except ValueError:
        return TOPIC_ALIASES.get(key)


def topic_name(topic) -> str:
    """Lowercase string form of a topic or topic name."""
    if isinstance(topic, Topic):
        return topic.value
    return str(topic or "").strip().lower()


def canonical_topic_name(topic) -> str:
    """
    Name under which a topic is stored in interest vectors.

    Known topics and aliases map to the Topic value ("feeding" -> "food");
    anything else is its lowercase name.
    """
    resolved = resolve_topic(topic)
    return resolved.value if resolved is not None else topic_name(topic)


class Trend(str, Enum):
    """Direction of a topic's recent trajectory."""

    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value) -> Optional["Trend"]:
        """Parse a trend string; unknown values return None."""
        if isinstance(value, Trend):
            return value
        if not value:
            return None
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


class PriorityLabel(str, Enum):
    """Display bucket for numeric priority scores."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_score(cls, score: int) -> "PriorityLabel":
        """Map a 0-100 insight priority to a label (high >= 75, medium >= 50)."""
        if score >= 75:
            return cls.HIGH
        if score >= 50:
            return cls.MEDIUM
        return cls.LOW
