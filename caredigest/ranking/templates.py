"""
Display templates for insight cards.

Titles, trend summaries, suggested actions, chart hints and follow-up
questions, keyed by Topic. Placeholders:

- {name}: the subject's display name ("Baby" in titles, "my baby" in
  questions when unknown)
- {topic}: the capitalized topic name
"""

from typing import Optional

from caredigest.models.topic import Topic, Trend


DEFAULT_TITLE_NAME = "Baby"
DEFAULT_PROMPT_NAME = "my baby"


# =============================================================================
# Titles
# =============================================================================

# Topic -> (title when declining, title otherwise)
INSIGHT_TITLES: dict[Topic, tuple[str, str]] = {
    Topic.SLEEP: ("{name}'s Sleep Pattern Needs Attention", "{name}'s Sleep Pattern"),
    Topic.FOOD: ("Appetite Changes Detected", "Eating Habits Overview"),
    Topic.HEALTH: ("Health Status", "Health Status"),
    Topic.DEVELOPMENT: ("Development Progress", "Development Progress"),
    Topic.SOCIAL: ("Social Interactions", "Social Interactions"),
    Topic.ACTIVITY: ("Activity Level", "Activity Level"),
    Topic.MOOD: ("Mood Patterns", "Mood Patterns"),
}

DEFAULT_TITLE = "{topic} Insights"


# =============================================================================
# Summaries
# =============================================================================

TREND_DESCRIPTIONS: dict[Trend, str] = {
    Trend.IMPROVING: "showing positive improvement",
    Trend.DECLINING: "showing concerning decline",
    Trend.STABLE: "remaining stable",
}

SUMMARY_TEMPLATE = "{topic} patterns are {description} over the past week."


# =============================================================================
# Suggested Actions
# =============================================================================

DECLINING_ACTIONS: dict[Topic, str] = {
    Topic.SLEEP: "Consider reviewing bedtime routine and sleep environment",
    Topic.FOOD: "Monitor meal times and food preferences, consult pediatrician if persists",
    Topic.HEALTH: "Schedule a check-up with pediatrician",
    Topic.MOOD: "Increase one-on-one time and observe for triggers",
}

DEFAULT_DECLINING_ACTION = "Monitor closely and consult with healthcare provider if concerned"
IMPROVING_ACTION = "Continue current approach and maintain consistency"
STABLE_ACTION = "Keep monitoring and maintain current routine"


# =============================================================================
# Chart Hints
# =============================================================================

CHART_TYPES: dict[Topic, str] = {
    Topic.SLEEP: "line",
    Topic.FOOD: "line",
    Topic.ACTIVITY: "line",
    Topic.DEVELOPMENT: "line",
    Topic.MOOD: "bar",
    Topic.HEALTH: "bar",
}

DEFAULT_CHART_TYPE = "line"


# =============================================================================
# Follow-up Questions
# =============================================================================

TOPIC_QUESTIONS: dict[Topic, tuple[str, ...]] = {
    Topic.SLEEP: (
        "What's a good bedtime routine for {name}?",
        "How can I improve {name}'s sleep quality?",
        "Is {name} getting enough sleep?",
    ),
    Topic.FOOD: (
        "What are healthy meal options for {name}?",
        "How can I encourage better eating habits?",
        "Is {name}'s diet balanced?",
    ),
    Topic.DEVELOPMENT: (
        "What milestones should {name} reach soon?",
        "How can I support {name}'s development?",
        "Is {name}'s development on track?",
    ),
    Topic.SOCIAL: (
        "How can I help {name} make friends?",
        "What social activities are good for {name}?",
    ),
}

DEFAULT_QUESTION = "Tell me more about {name}'s {topic_lower}"


# =============================================================================
# Rendering
# =============================================================================

def _label(topic: Topic) -> str:
    return topic.value.capitalize()


def render_title(topic: Topic, trend: Trend, subject_name: Optional[str]) -> str:
    declining, normal = INSIGHT_TITLES.get(topic, (DEFAULT_TITLE, DEFAULT_TITLE))
    template = declining if trend is Trend.DECLINING else normal
    return template.format(name=subject_name or DEFAULT_TITLE_NAME, topic=_label(topic))


def render_summary(topic: Topic, trend: Trend) -> str:
    description = TREND_DESCRIPTIONS.get(trend, "being monitored")
    return SUMMARY_TEMPLATE.format(topic=_label(topic), description=description)


def render_suggested_action(topic: Topic, trend: Trend) -> str:
    if trend is Trend.DECLINING:
        return DECLINING_ACTIONS.get(topic, DEFAULT_DECLINING_ACTION)
    if trend is Trend.IMPROVING:
        return IMPROVING_ACTION
    return STABLE_ACTION


def chart_type_for(topic: Topic) -> str:
    return CHART_TYPES.get(topic, DEFAULT_CHART_TYPE)


def render_questions(topic: Topic, subject_name: Optional[str]) -> tuple[str, ...]:
    name = subject_name or DEFAULT_PROMPT_NAME
    templates = TOPIC_QUESTIONS.get(topic, (DEFAULT_QUESTION,))
    return tuple(t.format(name=name, topic_lower=topic.value) for t in templates)
