"""
Configuration module for Care Digest.

Loads environment variables from .env file and exposes them as typed configuration values.
Uses python-dotenv for loading and provides safe defaults where appropriate.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file from project root
# The .env file should be in the root directory (parent of caredigest/)
_project_root = Path(__file__).parent.parent.parent
_env_path = _project_root / ".env"
load_dotenv(_env_path)


# =============================================================================
# Application Environment
# =============================================================================

# Application environment: "development", "staging", or "production"
# Default: "development" for safe local testing
APP_ENV: str = os.getenv("APP_ENV", "development")

# Enable debug mode for verbose logging (only in development)
DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

# Minimum level for the loguru stderr sink
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()


# =============================================================================
# Priority Scoring Weights
# =============================================================================

# Weight of each priority component. Must sum to 1.0 (checked by validate_config).
PRIORITY_WEIGHT_INTEREST: float = float(os.getenv("PRIORITY_WEIGHT_INTEREST", "0.30"))
PRIORITY_WEIGHT_URGENCY: float = float(os.getenv("PRIORITY_WEIGHT_URGENCY", "0.25"))
PRIORITY_WEIGHT_AGE: float = float(os.getenv("PRIORITY_WEIGHT_AGE", "0.20"))
PRIORITY_WEIGHT_RECENCY: float = float(os.getenv("PRIORITY_WEIGHT_RECENCY", "0.15"))
PRIORITY_WEIGHT_TREND: float = float(os.getenv("PRIORITY_WEIGHT_TREND", "0.10"))


# =============================================================================
# Interest Tracking
# =============================================================================

# Multiplier applied to every interest score on each interaction
INTEREST_DECAY_FACTOR: float = float(os.getenv("INTEREST_DECAY_FACTOR", "0.95"))

# Length of the most-recent-first topic history
MAX_RECENT_TOPICS: int = int(os.getenv("MAX_RECENT_TOPICS", "10"))

# Which interest store backs the tracker: "memory", "file" or "airtable"
INTEREST_STORE: str = os.getenv("INTEREST_STORE", "memory").lower()

# Directory used by the "file" interest store
INTEREST_STORE_DIR: str = os.getenv("INTEREST_STORE_DIR", "data/interests")


# =============================================================================
# Ranking and Digest Output
# =============================================================================

# Maximum number of conversation starters returned per request
MAX_STARTERS: int = int(os.getenv("MAX_STARTERS", "10"))

# Directory where Markdown digests are written
DIGEST_OUTPUT_DIR: str = os.getenv("DIGEST_OUTPUT_DIR", "digests")


# =============================================================================
# Airtable Configuration
# =============================================================================

# Airtable API key for authentication
# Required in production when INTEREST_STORE=airtable
AIRTABLE_API_KEY: str = os.getenv("AIRTABLE_API_KEY", "")

# Airtable base ID where interest profiles are stored
AIRTABLE_BASE_ID: str = os.getenv("AIRTABLE_BASE_ID", "")

# Airtable table name for interest profiles
AIRTABLE_INTEREST_TABLE: str = os.getenv("AIRTABLE_INTEREST_TABLE", "InterestProfiles")

# HTTP request timeout in seconds
REQUEST_TIMEOUT: int = int(os.getenv("REQUEST_TIMEOUT", "30"))


# =============================================================================
# Helper Functions
# =============================================================================

VALID_INTEREST_STORES = ("memory", "file", "airtable")


def is_production() -> bool:
    """Check if running in production environment."""
    return APP_ENV == "production"


def is_development() -> bool:
    """Check if running in development environment."""
    return APP_ENV == "development"


def priority_weight_total() -> float:
    return (
        PRIORITY_WEIGHT_INTEREST
        + PRIORITY_WEIGHT_URGENCY
        + PRIORITY_WEIGHT_AGE
        + PRIORITY_WEIGHT_RECENCY
        + PRIORITY_WEIGHT_TREND
    )


def validate_config() -> list[str]:
    """
    Validate configuration values.

    Returns:
        List of missing or invalid configuration keys (empty if all valid).
    """
    errors = []

    if abs(priority_weight_total() - 1.0) > 1e-9:
        errors.append(
            f"PRIORITY_WEIGHT_* must sum to 1.0, got {priority_weight_total():.4f}"
        )

    if not (0.0 < INTEREST_DECAY_FACTOR <= 1.0):
        errors.append("INTEREST_DECAY_FACTOR must be in (0.0, 1.0]")

    if MAX_RECENT_TOPICS < 1:
        errors.append("MAX_RECENT_TOPICS must be at least 1")

    if MAX_STARTERS < 1:
        errors.append("MAX_STARTERS must be at least 1")

    if INTEREST_STORE not in VALID_INTEREST_STORES:
        errors.append(
            f"INTEREST_STORE must be one of {', '.join(VALID_INTEREST_STORES)}, got {INTEREST_STORE!r}"
        )

    if INTEREST_STORE == "airtable" and is_production():
        if not AIRTABLE_API_KEY:
            errors.append("AIRTABLE_API_KEY is required in production")
        if not AIRTABLE_BASE_ID:
            errors.append("AIRTABLE_BASE_ID is required in production")

    if REQUEST_TIMEOUT < 1:
        errors.append("REQUEST_TIMEOUT must be at least 1 second")

    return errors


def print_config_summary() -> None:
    """Print a summary of current configuration (safe for logs, no secrets)."""
    print(f"  APP_ENV: {APP_ENV}")
    print(f"  DEBUG: {DEBUG}")
    print(f"  LOG_LEVEL: {LOG_LEVEL}")
    print(
        "  PRIORITY_WEIGHTS: "
        f"interest={PRIORITY_WEIGHT_INTEREST} urgency={PRIORITY_WEIGHT_URGENCY} "
        f"age={PRIORITY_WEIGHT_AGE} recency={PRIORITY_WEIGHT_RECENCY} trend={PRIORITY_WEIGHT_TREND}"
    )
    print(f"  INTEREST_DECAY_FACTOR: {INTEREST_DECAY_FACTOR}")
    print(f"  MAX_RECENT_TOPICS: {MAX_RECENT_TOPICS}")
    print(f"  MAX_STARTERS: {MAX_STARTERS}")
    print(f"  INTEREST_STORE: {INTEREST_STORE}")
    print(f"  INTEREST_STORE_DIR: {INTEREST_STORE_DIR}")
    print(f"  DIGEST_OUTPUT_DIR: {DIGEST_OUTPUT_DIR}")
    print(f"  AIRTABLE_API_KEY: {'***' if AIRTABLE_API_KEY else '(not set)'}")
    print(f"  AIRTABLE_BASE_ID: {'***' if AIRTABLE_BASE_ID else '(not set)'}")
    print(f"  AIRTABLE_INTEREST_TABLE: {AIRTABLE_INTEREST_TABLE}")
    print(f"  REQUEST_TIMEOUT: {REQUEST_TIMEOUT}s")
