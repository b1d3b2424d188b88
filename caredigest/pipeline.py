"""
Care Digest Pipeline - Core execution logic.

This module orchestrates the complete pipeline:

    Context files → Interest → Ranking → Digest → Summary

Steps:
1. Load each context document (JSON) into a ContextSnapshot
2. Attach the stored interest vector when the document carries none
3. Rank insight cards and conversation starters
4. Write the Markdown digest (unless dry-run)
5. Print execution summary

Design principles:
- Error isolation: one bad context file doesn't stop others
- Idempotency: re-running overwrites the same digest file
- Dry-run support: rank without writing (`--dry-run`)
"""

import json
import traceback
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from loguru import logger

from caredigest.config import DIGEST_OUTPUT_DIR, MAX_STARTERS
from caredigest.digest import DailyDigest, DigestConfig, DigestGenerator, DigestResult
from caredigest.interest import InterestTracker
from caredigest.models.context import ContextSnapshot
from caredigest.storage import InterestStore, create_store


# =============================================================================
# Pipeline Result Data Structures
# =============================================================================

@dataclass
class ContextResult:
    """Result of processing a single context file."""
    source: str
    success: bool
    subject_id: Optional[str] = None
    insights: int = 0
    starters: int = 0
    immediate_action_topics: List[str] = field(default_factory=list)
    filepath: Optional[str] = None
    digest: Optional[DailyDigest] = None
    error: Optional[str] = None
    duration_ms: float = 0.0


@dataclass
class PipelineResult:
    """Complete result of a pipeline execution."""
    started_at: datetime
    finished_at: Optional[datetime] = None
    context_results: List[ContextResult] = field(default_factory=list)
    dry_run: bool = False
    errors: List[str] = field(default_factory=list)

    @property
    def contexts_succeeded(self) -> int:
        return sum(1 for r in self.context_results if r.success)

    @property
    def contexts_failed(self) -> int:
        return sum(1 for r in self.context_results if not r.success)

    @property
    def digests(self) -> List[DailyDigest]:
        return [r.digest for r in self.context_results if r.digest is not None]

    @property
    def duration_seconds(self) -> float:
        """Total pipeline duration in seconds."""
        if self.finished_at:
            return (self.finished_at - self.started_at).total_seconds()
        return 0.0

    def to_summary(self) -> str:
        """Generate a human-readable summary."""
        lines = [
            "=" * 60,
            "PIPELINE EXECUTION SUMMARY",
            "=" * 60,
            f"Started:  {self.started_at.strftime('%Y-%m-%d %H:%M:%S')}",
            f"Duration: {self.duration_seconds:.2f}s",
            f"Mode:     {'DRY RUN' if self.dry_run else 'LIVE'}",
            "",
            "Contexts:",
        ]

        for cr in self.context_results:
            status = "✓" if cr.success else "✗"
            lines.append(
                f"  {status} {cr.source}: {cr.insights} insights, "
                f"{cr.starters} starters ({cr.duration_ms:.0f}ms)"
            )
            if cr.immediate_action_topics:
                lines.append(f"      Needs attention: {', '.join(cr.immediate_action_topics)}")
            if cr.filepath:
                lines.append(f"      Digest: {cr.filepath}")
            if cr.error:
                lines.append(f"      Error: {cr.error}")

        lines.extend([
            "",
            f"Succeeded: {self.contexts_succeeded}",
            f"Failed:    {self.contexts_failed}",
        ])

        if self.dry_run:
            lines.append("\nDigest files: SKIPPED (dry-run mode)")

        if self.errors:
            lines.extend([
                "",
                "Errors:",
            ])
            for error in self.errors[:5]:
                lines.append(f"  - {error}")

        lines.append("=" * 60)
        return "\n".join(lines)


# =============================================================================
# Pipeline Configuration
# =============================================================================

@dataclass
class PipelineConfig:
    """
    Configuration for a pipeline run.

    CLI arguments override config file defaults.
    """
    context_paths: List[str] = field(default_factory=list)
    dry_run: bool = False
    verbose: bool = False
    output_dir: str = DIGEST_OUTPUT_DIR
    max_starters: int = MAX_STARTERS
    store: Optional[str] = None

    @classmethod
    def from_args(cls, args) -> "PipelineConfig":
        """Create config from argparse namespace."""
        max_starters = getattr(args, "max_starters", None)
        return cls(
            context_paths=list(getattr(args, "contexts", None) or []),
            dry_run=getattr(args, "dry_run", False),
            verbose=getattr(args, "verbose", False),
            output_dir=getattr(args, "output_dir", None) or DIGEST_OUTPUT_DIR,
            max_starters=MAX_STARTERS if max_starters is None else max_starters,
            store=getattr(args, "store", None),
        )


def load_context_file(path) -> ContextSnapshot:
    """
    Read a JSON context document from disk.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not valid JSON or not a valid snapshot.
    """
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"{path} is not valid JSON: {e}") from e
    return ContextSnapshot.from_dict(data)


def attach_interest(context: ContextSnapshot, tracker: InterestTracker) -> ContextSnapshot:
    """Attach the stored interest vector unless the snapshot already has one."""
    if context.interest is not None:
        return context
    return context.with_interest(tracker.get_vector(context.user_id, context.subject_id))


# =============================================================================
# Pipeline Class
# =============================================================================

class DigestPipeline:
    """
    Main pipeline for turning context snapshots into daily digests.

    Usage:
        config = PipelineConfig(context_paths=["today.json"], dry_run=True)
        pipeline = DigestPipeline(config)
        result = pipeline.run()
        print(result.to_summary())
    """

    def __init__(
        self,
        config: PipelineConfig = None,
        store: Optional[InterestStore] = None,
        generator: Optional[DigestGenerator] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            config: Pipeline configuration. Defaults to PipelineConfig().
            store: Interest store. Defaults to the configured backend.
            generator: Digest generator. Defaults to one built from config.
        """
        self.config = config or PipelineConfig()
        self.tracker = InterestTracker(store or create_store(self.config.store))
        self.generator = generator or DigestGenerator(
            config=DigestConfig(
                output_dir=self.config.output_dir,
                max_starters=self.config.max_starters,
            )
        )

    def process(self, context: ContextSnapshot) -> DigestResult:
        """Rank and (unless dry-run) write the digest for one snapshot."""
        context = attach_interest(context, self.tracker)
        return self.generator.generate(context, write=not self.config.dry_run)

    def _process_path(self, path: str) -> ContextResult:
        """
        Process one context file with error isolation.

        Returns:
            ContextResult with success/failure status.
        """
        start_time = datetime.now()

        def elapsed_ms() -> float:
            return (datetime.now() - start_time).total_seconds() * 1000

        try:
            context = load_context_file(path)
        except (OSError, ValueError) as e:
            error_msg = f"{type(e).__name__}: {e}"
            if self.config.verbose:
                error_msg += f"\n{traceback.format_exc()}"
            logger.error("Skipping context {}: {}", path, e)
            return ContextResult(source=path, success=False, error=error_msg, duration_ms=elapsed_ms())

        digest_result = self.process(context)
        digest = digest_result.digest

        return ContextResult(
            source=path,
            success=digest_result.success,
            subject_id=context.subject_id,
            insights=digest_result.insights_included,
            starters=digest_result.starters_included,
            immediate_action_topics=list(digest.immediate_action_topics) if digest else [],
            filepath=digest_result.filepath,
            digest=digest,
            error=digest_result.error,
            duration_ms=elapsed_ms(),
        )

    def run(self) -> PipelineResult:
        """
        Execute the full pipeline over every configured context file.

        Returns:
            PipelineResult with execution details.
        """
        result = PipelineResult(started_at=datetime.now(), dry_run=self.config.dry_run)

        logger.info("Processing {} context file(s)", len(self.config.context_paths))

        for path in self.config.context_paths:
            context_result = self._process_path(path)
            result.context_results.append(context_result)
            if not context_result.success:
                result.errors.append(f"{path}: {context_result.error}")

        result.finished_at = datetime.now()
        return result


# =============================================================================
# Convenience Functions
# =============================================================================

def run_pipeline(
    context_paths: List[str],
    dry_run: bool = False,
    verbose: bool = False,
    output_dir: str = DIGEST_OUTPUT_DIR,
    store: Optional[InterestStore] = None,
) -> PipelineResult:
    """
    Run the pipeline with specified options.

    Convenience function for programmatic use.

    Args:
        context_paths: JSON context files to process.
        dry_run: If True, rank without writing digest files.
        verbose: If True, include tracebacks in errors.
        output_dir: Directory for digest files.
        store: Interest store (default: configured backend).

    Returns:
        PipelineResult with execution details.
    """
    config = PipelineConfig(
        context_paths=list(context_paths),
        dry_run=dry_run,
        verbose=verbose,
        output_dir=output_dir,
    )
    return DigestPipeline(config, store=store).run()
