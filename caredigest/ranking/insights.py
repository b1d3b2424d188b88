"""
Insight ranking for Care Digest.

Scores the fixed insight topic set against a context snapshot and turns
every topic worth showing into an InsightCard:

1. Compute priority (0-100) and urgency (0-10) per topic
2. Drop topics with priority < 20 and urgency < 3
3. Build the card from the topic templates for the resolved trend
4. Sort by priority descending, then urgency descending

Ranking is pure: the same snapshot always yields the same cards.
"""

from numbers import Number
from typing import Optional

from loguru import logger

from caredigest.models.context import ContextSnapshot
from caredigest.models.outputs import DataPoint, InsightCard, TopicScore
from caredigest.models.topic import INSIGHT_TOPICS, PriorityLabel, Topic, Trend
from caredigest.ranking import templates
from caredigest.scoring.priority import PriorityScorer
from caredigest.scoring.rules import resolve_trend
from caredigest.scoring.urgency import UrgencyScorer


# =============================================================================
# Ranking Configuration
# =============================================================================

# A card is dropped only when BOTH scores are below their threshold
MIN_PRIORITY: int = 20
MIN_URGENCY: int = 3

# Urgency at or above which a card is actionable regardless of trend
ACTIONABLE_URGENCY: int = 6


def card_trend(topic: Topic, context: ContextSnapshot) -> Trend:
    """Resolved trend for a card; topics without trend data read as stable."""
    return resolve_trend(topic, context) or Trend.STABLE


def should_include(priority: int, urgency: int) -> bool:
    return priority >= MIN_PRIORITY or urgency >= MIN_URGENCY


def is_actionable(trend: Trend, urgency: int) -> bool:
    return trend is Trend.DECLINING or urgency >= ACTIONABLE_URGENCY


def extract_data_points(topic: Topic, context: ContextSnapshot) -> tuple[DataPoint, ...]:
    """
    Chart values for a topic from the snapshot's metric history.

    Every numeric metric whose name contains the topic name contributes
    one point, in day order.
    """
    points = []
    for entry in sorted(context.metric_history, key=lambda m: m.day):
        for metric, value in entry.metrics.items():
            if topic.value not in str(metric).lower():
                continue
            if isinstance(value, bool) or not isinstance(value, Number):
                continue
            points.append(DataPoint(day=entry.day, value=float(value), label=str(metric)))
    return tuple(points)


def sort_cards(cards: list[InsightCard]) -> list[InsightCard]:
    """Priority descending, ties by urgency descending; stable otherwise."""
    return sorted(cards, key=lambda c: (-c.priority_score, -c.urgency))


# =============================================================================
# Ranker
# =============================================================================

class InsightRanker:
    """
    Builds the ranked insight cards for a snapshot.

    Usage:
        ranker = InsightRanker()
        cards = ranker.rank(context)
    """

    def __init__(
        self,
        priority_scorer: Optional[PriorityScorer] = None,
        urgency_scorer: Optional[UrgencyScorer] = None,
        topics: tuple[Topic, ...] = INSIGHT_TOPICS,
    ):
        self.priority_scorer = priority_scorer or PriorityScorer()
        self.urgency_scorer = urgency_scorer or UrgencyScorer()
        self.topics = topics

    def score_topics(self, context: ContextSnapshot) -> list[TopicScore]:
        """Priority, urgency and trend for every ranked topic, in topic order."""
        return [
            TopicScore(
                topic=topic.value,
                priority=self.priority_scorer.score(topic, context),
                urgency=self.urgency_scorer.score(topic, context),
                trend=card_trend(topic, context),
            )
            for topic in self.topics
        ]

    def build_card(self, topic: Topic, score: TopicScore, context: ContextSnapshot) -> InsightCard:
        trend = score.trend
        return InsightCard(
            topic=topic.value,
            title=templates.render_title(topic, trend, context.subject_name),
            summary=templates.render_summary(topic, trend),
            priority=PriorityLabel.from_score(score.priority),
            priority_score=score.priority,
            urgency=score.urgency,
            trend=trend,
            actionable=is_actionable(trend, score.urgency),
            suggested_action=templates.render_suggested_action(topic, trend),
            chart_type=templates.chart_type_for(topic),
            calculated_date=context.date,
            conversation_starters=templates.render_questions(topic, context.subject_name),
            data_points=extract_data_points(topic, context),
        )

    def rank(self, context: ContextSnapshot) -> list[InsightCard]:
        """
        Rank insight cards for a snapshot.

        Args:
            context: The snapshot to rank for.

        Returns:
            Cards sorted by priority then urgency, possibly empty.
        """
        return self.rank_scores(context, self.score_topics(context))

    def rank_scores(self, context: ContextSnapshot, topic_scores: list[TopicScore]) -> list[InsightCard]:
        """Rank cards from scores already computed by score_topics."""
        cards = []
        for topic, score in zip(self.topics, topic_scores):
            if not should_include(score.priority, score.urgency):
                logger.debug(
                    "Dropping insight '{}' (priority={}, urgency={})",
                    topic.value, score.priority, score.urgency,
                )
                continue
            cards.append(self.build_card(topic, score, context))

        ranked = sort_cards(cards)
        logger.info(
            "Ranked {} insight(s) for subject {} on {}",
            len(ranked), context.subject_id, context.date.isoformat(),
        )
        return ranked
