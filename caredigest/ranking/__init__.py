"""
Ranking module.

Turns topic scores into ranked insight cards and conversation starters.
"""

from caredigest.ranking.insights import (
    InsightRanker,
    extract_data_points,
    is_actionable,
    should_include,
    sort_cards,
)
from caredigest.ranking.starters import (
    STARTER_RULES,
    StarterRanker,
    age_milestone_starters,
    development_starters,
    health_starters,
    recent_event_starters,
    seasonal_starters,
    starter_score,
)

__all__ = [
    "InsightRanker",
    "extract_data_points",
    "is_actionable",
    "should_include",
    "sort_cards",
    "STARTER_RULES",
    "StarterRanker",
    "age_milestone_starters",
    "development_starters",
    "health_starters",
    "recent_event_starters",
    "seasonal_starters",
    "starter_score",
]
