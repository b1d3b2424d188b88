"""
Data models module.

Defines the context snapshot, interest vector, topic vocabulary and
ranking outputs.
"""

from caredigest.models.topic import (
    Topic,
    Trend,
    PriorityLabel,
    INSIGHT_TOPICS,
    TOPIC_ALIASES,
    resolve_topic,
    topic_name,
    canonical_topic_name,
)
from caredigest.models.interest import (
    InterestVector,
    DEFAULT_INTEREST_SCORES,
    NEUTRAL_INTEREST,
    clamp_score,
)
from caredigest.models.context import (
    ContextSnapshot,
    DailySummary,
    DailyMetrics,
    DaycareReport,
    RecentEvent,
    Reminder,
    TrendData,
    parse_date,
)
from caredigest.models.outputs import (
    ConversationStarter,
    DataPoint,
    InsightCard,
    TopicBreakdown,
    TopicScore,
    optional_label,
)

__all__ = [
    "Topic",
    "Trend",
    "PriorityLabel",
    "INSIGHT_TOPICS",
    "TOPIC_ALIASES",
    "resolve_topic",
    "topic_name",
    "canonical_topic_name",
    "InterestVector",
    "DEFAULT_INTEREST_SCORES",
    "NEUTRAL_INTEREST",
    "clamp_score",
    "ContextSnapshot",
    "DailySummary",
    "DailyMetrics",
    "DaycareReport",
    "RecentEvent",
    "Reminder",
    "TrendData",
    "parse_date",
    "ConversationStarter",
    "DataPoint",
    "InsightCard",
    "TopicBreakdown",
    "TopicScore",
    "optional_label",
]
