#!/usr/bin/env python3
"""
Care Digest - Personalized daily digest for caregivers.

Command-line entry point:
  - Rank insight cards and conversation starters from context snapshots
  - Write Markdown digests (or print JSON)
  - Inspect and update stored interest vectors

Usage:
    python main.py digest today.json             # Rank and write digest
    python main.py digest today.json --dry-run   # Rank only, no files written
    python main.py digest today.json --json      # Print digest as JSON
    python main.py interest show u1 child-1      # Show interest vector
    python main.py interest record u1 child-1 sleep
    python main.py interest pin u1 child-1 sleep health

Examples:
    # Development run
    python main.py -v digest examples/context.json --dry-run

    # Production run with the file-backed interest store
    INTEREST_STORE=file python main.py digest contexts/*.json
"""

import argparse
import json
import sys

from caredigest.config import (
    DIGEST_OUTPUT_DIR,
    MAX_STARTERS,
    VALID_INTEREST_STORES,
    print_config_summary,
    validate_config,
)
from caredigest.interest import InterestTracker
from caredigest.logging_setup import configure_logging
from caredigest.pipeline import DigestPipeline, PipelineConfig, PipelineResult
from caredigest.storage import StorageError, create_store


def create_parser() -> argparse.ArgumentParser:
    """Create the command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="care-digest",
        description="Rank daily insights and conversation starters for caregivers.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s digest today.json                 Rank and write today's digest
  %(prog)s digest today.json --dry-run       Rank only, skip writing files
  %(prog)s digest today.json --json          Print the digest as JSON
  %(prog)s digest a.json b.json -o out/      Write digests to out/
  %(prog)s interest show u1 child-1          Show the stored interest vector
  %(prog)s interest record u1 child-1 sleep  Record an interaction
  %(prog)s interest pin u1 child-1 sleep     Pin topics of interest
        """,
    )

    # Output options
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show detailed progress and debug info",
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only show warnings, errors and the final summary",
    )

    parser.add_argument(
        "--store",
        choices=sorted(VALID_INTEREST_STORES),
        default=None,
        help="Interest store backend (default: INTEREST_STORE setting)",
    )

    # Info options
    parser.add_argument(
        "--show-config",
        action="store_true",
        help="Show current configuration and exit",
    )

    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 1.0.0",
    )

    subparsers = parser.add_subparsers(dest="command")

    # digest
    digest = subparsers.add_parser("digest", help="Rank and write daily digests")
    digest.add_argument(
        "contexts",
        nargs="+",
        metavar="CONTEXT",
        help="JSON context snapshot file(s)",
    )
    digest.add_argument(
        "--dry-run", "-n",
        action="store_true",
        help="Rank but skip writing digest files",
    )
    digest.add_argument(
        "--json",
        action="store_true",
        help="Print the ranked digests as JSON instead of a summary",
    )
    digest.add_argument(
        "--output-dir", "-o",
        default=None,
        metavar="DIR",
        help=f"Directory for digest files (default: {DIGEST_OUTPUT_DIR})",
    )
    digest.add_argument(
        "--max-starters",
        type=int,
        default=None,
        metavar="N",
        help=f"Maximum conversation starters per digest (default: {MAX_STARTERS})",
    )

    # interest
    interest = subparsers.add_parser("interest", help="Inspect or update interest vectors")
    interest_commands = interest.add_subparsers(dest="interest_command", required=True)

    show = interest_commands.add_parser("show", help="Show the interest vector")
    show.add_argument("user_id")
    show.add_argument("subject_id")

    record = interest_commands.add_parser("record", help="Record an interaction with a topic")
    record.add_argument("user_id")
    record.add_argument("subject_id")
    record.add_argument("topic")
    record.add_argument(
        "--weight", "-w",
        type=float,
        default=1.0,
        help="Interaction weight (default: 1.0)",
    )

    pin = interest_commands.add_parser("pin", help="Replace the explicitly chosen topics")
    pin.add_argument("user_id")
    pin.add_argument("subject_id")
    pin.add_argument("topics", nargs="*", metavar="TOPIC")

    return parser


def show_config() -> None:
    """Display current configuration."""
    print("=" * 60)
    print("Care Digest Configuration")
    print("=" * 60)
    print_config_summary()

    errors = validate_config()
    if errors:
        print("\nConfiguration warnings:")
        for error in errors:
            print(f"  ⚠️  {error}")
    else:
        print("\n✓ Configuration valid")
    print("=" * 60)


def print_result_summary(result: PipelineResult, verbose: bool = False) -> None:
    """Print the pipeline result summary."""
    print(result.to_summary())

    if verbose:
        for digest in result.digests:
            print(f"\nTop insights for {digest.subject_id}:")
            for card in digest.insights[:3]:
                print(f"  [{card.priority_score:3d}] {card.title} (urgency {card.urgency})")


def run_digest(args) -> int:
    """Run the digest pipeline for the given context files."""
    config = PipelineConfig.from_args(args)

    if not args.quiet and not args.json:
        print("=" * 60)
        print("Care Digest Pipeline")
        print("=" * 60)
        if config.dry_run:
            print("Mode: DRY RUN (no files written)")
        print(f"Contexts: {len(config.context_paths)}")
        print(f"Output dir: {config.output_dir}")
        print()

    result = DigestPipeline(config).run()

    if args.json:
        print(json.dumps([d.to_dict() for d in result.digests], indent=2))
    elif not args.quiet:
        print_result_summary(result, args.verbose)

    if result.contexts_failed > 0:
        return 1
    return 0


def run_interest(args) -> int:
    """Show or update a stored interest vector."""
    tracker = InterestTracker(create_store(args.store))

    if args.interest_command == "show":
        vector = tracker.get_vector(args.user_id, args.subject_id)
    elif args.interest_command == "record":
        vector = tracker.record_interaction(args.user_id, args.subject_id, args.topic, args.weight)
    else:
        vector = tracker.set_explicit_topics(args.user_id, args.subject_id, args.topics)

    print(json.dumps(vector.to_dict(), indent=2))
    return 0


def log_level(args):
    """Log level for the output flags; --verbose wins over --quiet."""
    if args.verbose:
        return "DEBUG"
    if args.quiet:
        return "WARNING"
    return None


def main(argv: list = None) -> int:
    """
    Main entry point.

    Args:
        argv: Command-line arguments (default: sys.argv[1:]).

    Returns:
        Exit code (0 = success, 1 = error).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(log_level(args))

    # Handle --show-config
    if args.show_config:
        show_config()
        return 0

    if args.command is None:
        parser.print_help()
        return 1

    try:
        if args.command == "digest":
            return run_digest(args)
        return run_interest(args)

    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        return 130
    except (StorageError, ValueError) as e:
        print(f"\n❌ Error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
