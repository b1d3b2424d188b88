"""
Ranking output records for Care Digest.

TopicScore is the ephemeral per-topic scoring result; InsightCard and
ConversationStarter are what the presentation layer displays. All are
frozen: they are built once per request and never modified.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from caredigest.models.topic import PriorityLabel, Trend


@dataclass(frozen=True)
class TopicScore:
    """
    Scores for one topic in one context.

    Attributes:
        topic: Topic name.
        priority: Priority score (0 to 100).
        urgency: Urgency level (0 to 10).
        trend: Resolved trend for the topic.
    """
    topic: str
    priority: int
    urgency: int
    trend: Trend

    def to_dict(self) -> dict:
        return {
            "topic": self.topic,
            "priority": self.priority,
            "urgency": self.urgency,
            "trend": self.trend.value,
        }


@dataclass(frozen=True)
class DataPoint:
    """One chart value for an insight card."""
    day: date
    value: float
    label: str

    def to_dict(self) -> dict:
        return {"date": self.day.isoformat(), "value": self.value, "label": self.label}


@dataclass(frozen=True)
class InsightCard:
    """
    A topic insight shown on the digest.

    Attributes:
        topic: Topic the card is about.
        title: Headline.
        summary: One-sentence trend summary.
        priority: Display label derived from priority_score.
        priority_score: Ranking score (0 to 100).
        urgency: Urgency level (0 to 10).
        trend: Resolved trend.
        actionable: Whether the card calls for an action.
        suggested_action: What the caregiver could do.
        chart_type: Chart hint for the UI ("line" or "bar").
        conversation_starters: Follow-up questions for the assistant.
        data_points: Recent metric values for the chart.
        calculated_date: Snapshot date the card was computed for.
    """
    topic: str
    title: str
    summary: str
    priority: PriorityLabel
    priority_score: int
    urgency: int
    trend: Trend
    actionable: bool
    suggested_action: str
    chart_type: str
    calculated_date: date
    conversation_starters: tuple[str, ...] = ()
    data_points: tuple[DataPoint, ...] = ()

    @property
    def score(self) -> int:
        return self.priority_score

    def to_dict(self) -> dict:
        return {
            "topic": self.topic,
            "title": self.title,
            "summary": self.summary,
            "priority": self.priority.value,
            "priority_score": self.priority_score,
            "urgency": self.urgency,
            "trend": self.trend.value,
            "actionable": self.actionable,
            "suggested_action": self.suggested_action,
            "chart_type": self.chart_type,
            "conversation_starters": list(self.conversation_starters),
            "data_points": [p.to_dict() for p in self.data_points],
            "calculated_date": self.calculated_date.isoformat(),
        }


@dataclass(frozen=True)
class ConversationStarter:
    """
    A suggested question the caregiver can ask the assistant.

    Attributes:
        category: age_milestone, recent_event, seasonal, health or development.
        title: Short heading.
        prompt: The question itself.
        reason: Why it is being suggested.
        priority: Label assigned by the generating rule.
        icon: UI icon identifier.
        score: Ranking score (0 to 100), 0 until scored.
    """
    category: str
    title: str
    prompt: str
    reason: str
    priority: PriorityLabel
    icon: str
    score: int = 0

    @property
    def actionable(self) -> bool:
        return self.category in ("recent_event", "health")

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "title": self.title,
            "prompt": self.prompt,
            "reason": self.reason,
            "priority": self.priority.value,
            "score": self.score,
            "actionable": self.actionable,
            "icon": self.icon,
        }


@dataclass
class TopicBreakdown:
    """
    Component breakdown of a priority score, for transparency and debugging.

    All components are normalized to 0.0 - 1.0.
    """
    topic: str
    priority: int
    interest: float
    urgency_signal: float
    age_relevance: float
    recency: float
    trend: float
    weights: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "topic": self.topic,
            "priority": self.priority,
            "interest": self.interest,
            "urgency_signal": self.urgency_signal,
            "age_relevance": self.age_relevance,
            "recency": self.recency,
            "trend": self.trend,
            "weights": dict(self.weights),
        }


def optional_label(value: Optional[str]) -> PriorityLabel:
    """Parse a rule's priority label; unknown or missing labels count as low."""
    try:
        return PriorityLabel(str(value).strip().lower()) if value else PriorityLabel.LOW
    except ValueError:
        return PriorityLabel.LOW
