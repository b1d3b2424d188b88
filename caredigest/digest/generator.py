"""
Daily Digest Generator for Care Digest.

Builds a DailyDigest (ranked insight cards, conversation starters, per-topic
scores) from a context snapshot and renders it as Markdown.

Format: Markdown (.md), readable as plain text and in any Markdown viewer.

Output: digests/<subject>-YYYY-MM-DD.md
"""

import re
from dataclasses import dataclass, field
from datetime import date as date_type
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from loguru import logger

from caredigest.config import DIGEST_OUTPUT_DIR, MAX_STARTERS
from caredigest.models.context import ContextSnapshot
from caredigest.models.outputs import ConversationStarter, InsightCard, TopicScore
from caredigest.ranking.insights import InsightRanker
from caredigest.ranking.starters import StarterRanker
from caredigest.scoring.urgency import IMMEDIATE_ACTION_THRESHOLD, level_label


# =============================================================================
# Digest Configuration
# =============================================================================

@dataclass
class DigestConfig:
    """
    Configuration for digest generation.

    Attributes:
        output_dir: Directory to write digest files.
        max_insights: Maximum number of insight cards to include (0 = no limit).
        max_starters: Maximum number of conversation starters to include.
        include_scores: Whether to render the per-topic score table.
    """
    output_dir: str = DIGEST_OUTPUT_DIR
    max_insights: int = 0
    max_starters: int = MAX_STARTERS
    include_scores: bool = True


# =============================================================================
# Digest Records
# =============================================================================

@dataclass
class DailyDigest:
    """
    Everything shown to a caregiver for one subject and day.

    Attributes:
        user_id: Caregiver the digest is ranked for.
        subject_id: Monitored subject.
        subject_name: Display name, None if unknown.
        date: Snapshot date.
        insights: Ranked insight cards.
        starters: Ranked conversation starters.
        topic_scores: Scores for every topic, including dropped ones.
        immediate_action_topics: Topics with urgency at or above the action threshold.
    """
    user_id: str
    subject_id: str
    date: date_type
    subject_name: Optional[str] = None
    insights: List[InsightCard] = field(default_factory=list)
    starters: List[ConversationStarter] = field(default_factory=list)
    topic_scores: List[TopicScore] = field(default_factory=list)
    immediate_action_topics: List[str] = field(default_factory=list)

    @property
    def needs_attention(self) -> bool:
        return bool(self.immediate_action_topics)

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "subject_id": self.subject_id,
            "subject_name": self.subject_name,
            "date": self.date.isoformat(),
            "insights": [c.to_dict() for c in self.insights],
            "starters": [s.to_dict() for s in self.starters],
            "topic_scores": [t.to_dict() for t in self.topic_scores],
            "immediate_action_topics": list(self.immediate_action_topics),
        }


@dataclass
class DigestResult:
    """
    Result of digest generation.

    Attributes:
        success: Whether the digest was generated successfully.
        digest: The generated digest, None on failure.
        filepath: Path to the written digest file, None if not written.
        insights_included: Number of insight cards in the digest.
        starters_included: Number of conversation starters in the digest.
        error: Error message if generation failed.
    """
    success: bool
    digest: Optional[DailyDigest] = None
    filepath: Optional[str] = None
    insights_included: int = 0
    starters_included: int = 0
    error: Optional[str] = None


# =============================================================================
# Digest Generator
# =============================================================================

TOPIC_EMOJI: Dict[str, str] = {
    "sleep": "😴",
    "food": "🍎",
    "health": "🩺",
    "development": "🧩",
    "social": "🤝",
    "activity": "🏃",
    "mood": "🙂",
}

TREND_ARROWS: Dict[str, str] = {
    "improving": "↑",
    "declining": "↓",
    "stable": "→",
}


def digest_filename(subject_id: str, day: date_type) -> str:
    """File name for a subject's digest: <subject>-YYYY-MM-DD.md"""
    safe = re.sub(r"[^A-Za-z0-9_.-]+", "_", subject_id).strip("_") or "subject"
    return f"{safe}-{day.isoformat()}.md"


class DigestGenerator:
    """
    Generates daily digests from context snapshots.

    Usage:
        generator = DigestGenerator()
        result = generator.generate(context)
        print(f"Digest saved to: {result.filepath}")

    The generator:
    1. Scores every topic and ranks insight cards
    2. Ranks conversation starters
    3. Flags topics needing immediate action
    4. Renders Markdown and writes <subject>-YYYY-MM-DD.md
    """

    def __init__(
        self,
        insight_ranker: Optional[InsightRanker] = None,
        starter_ranker: Optional[StarterRanker] = None,
        config: Optional[DigestConfig] = None,
    ):
        """
        Initialize the digest generator.

        Args:
            insight_ranker: Ranker for insight cards. Defaults to InsightRanker().
            starter_ranker: Ranker for conversation starters. Defaults to StarterRanker().
            config: Digest configuration. Defaults to DigestConfig().
        """
        self.config = config or DigestConfig()
        self.insight_ranker = insight_ranker or InsightRanker()
        self.starter_ranker = starter_ranker or StarterRanker(max_starters=self.config.max_starters)

    def build(self, context: ContextSnapshot) -> DailyDigest:
        """
        Build the digest for a snapshot without writing anything.

        Args:
            context: The snapshot to summarize.

        Returns:
            DailyDigest with ranked insights and starters.
        """
        topic_scores = self.insight_ranker.score_topics(context)
        insights = self.insight_ranker.rank_scores(context, topic_scores)
        if self.config.max_insights > 0:
            insights = insights[: self.config.max_insights]

        starters = self.starter_ranker.rank(context, limit=self.config.max_starters)

        immediate = [
            s.topic for s in topic_scores if s.urgency >= IMMEDIATE_ACTION_THRESHOLD
        ]
        if immediate:
            logger.warning(
                "Subject {} needs immediate attention on: {}",
                context.subject_id, ", ".join(immediate),
            )

        return DailyDigest(
            user_id=context.user_id,
            subject_id=context.subject_id,
            subject_name=context.subject_name,
            date=context.date,
            insights=insights,
            starters=starters,
            topic_scores=topic_scores,
            immediate_action_topics=immediate,
        )

    def generate(self, context: ContextSnapshot, write: bool = True) -> DigestResult:
        """
        Generate the daily digest for a snapshot.

        Args:
            context: The snapshot to summarize.
            write: Whether to write the Markdown file.

        Returns:
            DigestResult with success status and file path.
        """
        try:
            digest = self.build(context)

            filepath = None
            if write:
                filepath = str(self._write_file(self.render_markdown(digest), digest))
                logger.info("Digest for {} written to {}", digest.subject_id, filepath)

            return DigestResult(
                success=True,
                digest=digest,
                filepath=filepath,
                insights_included=len(digest.insights),
                starters_included=len(digest.starters),
            )

        except OSError as e:
            logger.error("Failed to write digest for {}: {}", context.subject_id, e)
            return DigestResult(success=False, error=str(e))

    def render_markdown(self, digest: DailyDigest, generated_at: Optional[datetime] = None) -> str:
        """
        Render a digest as Markdown.

        Args:
            digest: The digest to render.
            generated_at: Timestamp for the header. Defaults to now.

        Returns:
            Markdown string.
        """
        generated_at = generated_at or datetime.now()
        name = digest.subject_name or digest.subject_id
        lines = []

        # Header
        lines.append(f"# Care Digest - {name} - {digest.date.isoformat()}")
        lines.append("")
        lines.append(f"*Generated on {generated_at.strftime('%B %d, %Y at %H:%M')}*")
        lines.append("")

        lines.extend(self._generate_summary(digest))
        lines.append("")

        lines.extend(self._generate_insight_section(digest.insights))
        lines.extend(self._generate_starter_section(digest.starters))

        if self.config.include_scores:
            lines.extend(self._generate_score_table(digest.topic_scores))

        # Footer
        lines.append("---")
        lines.append("")
        lines.append("*Generated by Care Digest*")
        lines.append("")

        return "\n".join(lines)

    def _generate_summary(self, digest: DailyDigest) -> List[str]:
        """Generate the summary section."""
        lines = []

        lines.append("## 📊 Summary")
        lines.append("")
        lines.append(f"- **Insights:** {len(digest.insights)}")
        lines.append(f"- **Conversation starters:** {len(digest.starters)}")

        if digest.insights:
            top = digest.insights[0]
            lines.append(f"- **Top insight:** {top.title} (priority: {top.priority_score})")

        actionable = [c.topic for c in digest.insights if c.actionable]
        if actionable:
            lines.append(f"- **Actionable:** {', '.join(actionable)}")

        if digest.immediate_action_topics:
            lines.append(f"- **⚠️ Needs attention now:** {', '.join(digest.immediate_action_topics)}")

        return lines

    def _generate_insight_section(self, insights: List[InsightCard]) -> List[str]:
        lines = ["## 💡 Insights", ""]

        if not insights:
            lines.append("*Nothing stands out today.*")
            lines.append("")
            return lines

        for card in insights:
            lines.extend(self._format_card(card))

        return lines

    def _format_card(self, card: InsightCard) -> List[str]:
        """Format a single insight card as Markdown."""
        lines = []

        emoji = TOPIC_EMOJI.get(card.topic, "📌")
        arrow = TREND_ARROWS.get(card.trend.value, "")
        lines.append(f"### {emoji} {card.title}")
        lines.append("")
        lines.append(
            f"`{card.priority.value}` **[{card.priority_score}]** "
            f"| urgency {card.urgency} ({level_label(card.urgency)}) "
            f"| trend {card.trend.value} {arrow}".rstrip()
        )
        lines.append("")
        lines.append(f"> {card.summary}")
        lines.append("")

        prefix = "**Action:** " if card.actionable else "**Suggestion:** "
        lines.append(prefix + card.suggested_action)
        lines.append("")

        if card.data_points:
            values = ", ".join(f"{p.value:g}" for p in card.data_points[-7:])
            lines.append(f"Recent values: {values}")
            lines.append("")

        return lines

    def _generate_starter_section(self, starters: List[ConversationStarter]) -> List[str]:
        lines = ["## 💬 Questions to Ask", ""]

        if not starters:
            lines.append("*No suggestions today.*")
            lines.append("")
            return lines

        for starter in starters:
            lines.append(f"- **{starter.title}** [{starter.score}]: {starter.prompt}")
            lines.append(f"  - *{starter.reason}*")
        lines.append("")

        return lines

    def _generate_score_table(self, scores: List[TopicScore]) -> List[str]:
        lines = ["## 📈 Topic Scores", ""]
        lines.append("| Topic | Priority | Urgency | Trend |")
        lines.append("|-------|----------|---------|-------|")
        for s in sorted(scores, key=lambda x: (-x.priority, -x.urgency, x.topic)):
            lines.append(f"| {s.topic} | {s.priority} | {s.urgency} | {s.trend.value} |")
        lines.append("")
        return lines

    def _write_file(self, content: str, digest: DailyDigest) -> Path:
        """
        Write digest content to file.

        Args:
            content: Markdown content to write.
            digest: Digest the content was rendered from.

        Returns:
            Path to written file.
        """
        output_dir = Path(self.config.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        filepath = output_dir / digest_filename(digest.subject_id, digest.date)
        filepath.write_text(content, encoding="utf-8")

        return filepath


# =============================================================================
# Convenience Functions
# =============================================================================

def generate_digest(
    context: ContextSnapshot,
    output_dir: str = DIGEST_OUTPUT_DIR,
    max_starters: int = MAX_STARTERS,
) -> DigestResult:
    """
    Generate and write a daily digest.

    Convenience function for simple usage.

    Args:
        context: The snapshot to summarize.
        output_dir: Output directory for digest files.
        max_starters: Maximum conversation starters to include.

    Returns:
        DigestResult with success status and file path.
    """
    config = DigestConfig(output_dir=output_dir, max_starters=max_starters)
    return DigestGenerator(config=config).generate(context)


def generate_digest_content(context: ContextSnapshot, generated_at: Optional[datetime] = None) -> str:
    """
    Generate digest Markdown without writing to file.

    Useful for previewing or sending via other channels.
    """
    generator = DigestGenerator()
    return generator.render_markdown(generator.build(context), generated_at)
