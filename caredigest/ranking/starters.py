"""
Conversation starter ranking for Care Digest.

Candidate questions come from independent generator rules, each a pure
function of the context snapshot:

- Age milestones: narrow age windows (solid foods, first steps, ...)
- Recent events: today's incident or sickness, high-priority events
- Seasonal: month groups (winter, summer, back to school)
- Health: vaccination ages and a general wellness check
- Development: age thresholds for learning and emotional growth

Candidates are scored (priority label base + category bonus, capped at
100), sorted by score and truncated.

Prompt templates use {name}: the subject's name, "my baby" if unknown.
"""

from dataclasses import dataclass, replace
from typing import Callable, Optional

from loguru import logger

from caredigest.config import MAX_STARTERS
from caredigest.models.context import ContextSnapshot
from caredigest.models.outputs import ConversationStarter, optional_label
from caredigest.models.topic import PriorityLabel


DEFAULT_SUBJECT_NAME = "my baby"


# =============================================================================
# Scoring Configuration
# =============================================================================

PRIORITY_BASE_SCORES: dict[PriorityLabel, int] = {
    PriorityLabel.HIGH: 70,
    PriorityLabel.MEDIUM: 50,
    PriorityLabel.LOW: 30,
}

CATEGORY_BONUSES: dict[str, int] = {
    "recent_event": 20,
    "age_milestone": 15,
    "health": 10,
}

MAX_STARTER_SCORE: int = 100


# =============================================================================
# Starter Templates
# =============================================================================

@dataclass(frozen=True)
class StarterTemplate:
    """A starter before the subject's name is filled in."""
    category: str
    title: str
    prompt: str
    reason: str
    priority: str
    icon: str

    def render(self, name: str) -> ConversationStarter:
        return ConversationStarter(
            category=self.category,
            title=self.title,
            prompt=self.prompt.format(name=name),
            reason=self.reason,
            priority=optional_label(self.priority),
            icon=self.icon,
        )


# (min age, max age inclusive, template)
AGE_MILESTONES: tuple[tuple[int, int, StarterTemplate], ...] = (
    (5, 7, StarterTemplate(
        "age_milestone", "Starting Solid Foods",
        "What foods should I introduce to {name} at 6 months?",
        "Baby is at the age for introducing solid foods", "high", "utensils",
    )),
    (11, 13, StarterTemplate(
        "age_milestone", "First Steps",
        "How can I help {name} learn to walk?",
        "Baby is approaching walking milestone", "high", "baby",
    )),
    (17, 19, StarterTemplate(
        "age_milestone", "Language Development",
        "What words should {name} be saying by 18 months?",
        "Language development milestone period", "medium", "message-circle",
    )),
    (23, 25, StarterTemplate(
        "age_milestone", "Potty Training",
        "When should I start potty training {name}?",
        "Approaching potty training age", "medium", "droplet",
    )),
    (35, 37, StarterTemplate(
        "age_milestone", "Preschool Readiness",
        "Is {name} ready for preschool?",
        "Approaching preschool age", "medium", "school",
    )),
)

INCIDENT_STARTER = StarterTemplate(
    "recent_event", "Recent Incident",
    "What should I do after {name}'s recent incident?",
    "An incident was reported today", "high", "alert-triangle",
)
SICKNESS_STARTER = StarterTemplate(
    "recent_event", "Health Concern",
    "How can I help {name} feel better?",
    "Sickness reported recently", "high", "thermometer",
)
HIGH_PRIORITY_EVENTS_STARTER = StarterTemplate(
    "recent_event", "Recent Concerns",
    "Should I be worried about {name}'s recent behavior?",
    "Multiple high-priority events detected", "medium", "help-circle",
)

# (months, template)
SEASONAL_STARTERS: tuple[tuple[frozenset, StarterTemplate], ...] = (
    (frozenset({12, 1, 2}), StarterTemplate(
        "seasonal", "Winter Care",
        "How do I keep {name} healthy during winter?",
        "Winter season care tips", "medium", "snowflake",
    )),
    (frozenset({6, 7, 8}), StarterTemplate(
        "seasonal", "Summer Safety",
        "What sun protection does {name} need?",
        "Summer safety and sun protection", "medium", "sun",
    )),
    (frozenset({9}), StarterTemplate(
        "seasonal", "Back to School",
        "How can I prepare {name} for daycare/school?",
        "School season preparation", "medium", "backpack",
    )),
)

VACCINATION_STARTER = StarterTemplate(
    "health", "Vaccination Schedule",
    "What vaccinations does {name} need at this age?",
    "Vaccination milestone age", "high", "shield",
)
WELLNESS_STARTER = StarterTemplate(
    "health", "Wellness Check",
    "What health milestones should {name} reach?",
    "General health and wellness", "low", "heart",
)

# (min age, template)
DEVELOPMENT_STARTERS: tuple[tuple[int, StarterTemplate], ...] = (
    (12, StarterTemplate(
        "development", "Learning Activities",
        "What activities can help {name}'s development?",
        "Age-appropriate development activities", "medium", "brain",
    )),
    (18, StarterTemplate(
        "development", "Emotional Growth",
        "How can I support {name}'s emotional development?",
        "Social-emotional development support", "medium", "smile",
    )),
)


def _name(context: ContextSnapshot) -> str:
    return context.subject_name or DEFAULT_SUBJECT_NAME


# =============================================================================
# Generator Rules
# =============================================================================

def age_milestone_starters(context: ContextSnapshot) -> list[ConversationStarter]:
    age = context.age_months
    if age is None:
        return []
    return [
        template.render(_name(context))
        for low, high, template in AGE_MILESTONES
        if low <= age <= high
    ]


def recent_event_starters(context: ContextSnapshot) -> list[ConversationStarter]:
    templates = []
    if context.has_daily_incident:
        templates.append(INCIDENT_STARTER)
    if context.has_daily_sickness:
        templates.append(SICKNESS_STARTER)
    if context.high_priority_event_count > 0:
        templates.append(HIGH_PRIORITY_EVENTS_STARTER)
    return [t.render(_name(context)) for t in templates]


def seasonal_starters(context: ContextSnapshot) -> list[ConversationStarter]:
    month = context.date.month
    return [
        template.render(_name(context))
        for months, template in SEASONAL_STARTERS
        if month in months
    ]


def health_starters(context: ContextSnapshot) -> list[ConversationStarter]:
    """Vaccination prompt every 6 months and at 11-13 months; wellness always."""
    age = context.age_months
    if age is None:
        return []

    templates = []
    if age % 6 == 0 or 11 <= age <= 13:
        templates.append(VACCINATION_STARTER)
    templates.append(WELLNESS_STARTER)
    return [t.render(_name(context)) for t in templates]


def development_starters(context: ContextSnapshot) -> list[ConversationStarter]:
    age = context.age_months
    if age is None:
        return []
    return [
        template.render(_name(context))
        for min_age, template in DEVELOPMENT_STARTERS
        if age >= min_age
    ]


StarterRule = Callable[[ContextSnapshot], list[ConversationStarter]]

STARTER_RULES: tuple[StarterRule, ...] = (
    age_milestone_starters,
    recent_event_starters,
    seasonal_starters,
    health_starters,
    development_starters,
)


def starter_score(starter: ConversationStarter) -> int:
    """
    Ranking score of a starter (0 to 100).

    Base from the priority label (high 70, medium 50, low 30) plus a
    category bonus (recent_event 20, age_milestone 15, health 10).
    """
    score = PRIORITY_BASE_SCORES.get(starter.priority, PRIORITY_BASE_SCORES[PriorityLabel.LOW])
    score += CATEGORY_BONUSES.get(starter.category, 0)
    return min(score, MAX_STARTER_SCORE)


# =============================================================================
# Ranker
# =============================================================================

class StarterRanker:
    """
    Collects, scores and ranks conversation starters.

    Usage:
        ranker = StarterRanker()
        starters = ranker.rank(context)
    """

    def __init__(
        self,
        max_starters: int = MAX_STARTERS,
        rules: tuple[StarterRule, ...] = STARTER_RULES,
    ):
        if max_starters < 0:
            raise ValueError("max_starters cannot be negative")
        self.max_starters = max_starters
        self.rules = rules

    def candidates(self, context: ContextSnapshot) -> list[ConversationStarter]:
        """Unscored candidates from every rule, in rule order."""
        starters = []
        for rule in self.rules:
            starters.extend(rule(context))
        return starters

    def rank(self, context: ContextSnapshot, limit: Optional[int] = None) -> list[ConversationStarter]:
        """
        Rank conversation starters for a snapshot.

        Args:
            context: The snapshot to rank for.
            limit: Override for the maximum number of starters returned.

        Returns:
            Starters sorted by score descending, at most limit long.
        """
        limit = self.max_starters if limit is None else limit

        scored = [replace(s, score=starter_score(s)) for s in self.candidates(context)]
        ranked = sorted(scored, key=lambda s: s.score, reverse=True)[:limit]

        logger.info(
            "Ranked {} of {} starter(s) for subject {}",
            len(ranked), len(scored), context.subject_id,
        )
        return ranked
