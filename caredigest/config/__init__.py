"""
Configuration module.

Handles environment variables, scoring weights, and storage settings.
"""

from caredigest.config.config import (
    APP_ENV,
    DEBUG,
    LOG_LEVEL,
    PRIORITY_WEIGHT_INTEREST,
    PRIORITY_WEIGHT_URGENCY,
    PRIORITY_WEIGHT_AGE,
    PRIORITY_WEIGHT_RECENCY,
    PRIORITY_WEIGHT_TREND,
    INTEREST_DECAY_FACTOR,
    MAX_RECENT_TOPICS,
    INTEREST_STORE,
    INTEREST_STORE_DIR,
    MAX_STARTERS,
    DIGEST_OUTPUT_DIR,
    AIRTABLE_API_KEY,
    AIRTABLE_BASE_ID,
    AIRTABLE_INTEREST_TABLE,
    REQUEST_TIMEOUT,
    VALID_INTEREST_STORES,
    is_production,
    is_development,
    priority_weight_total,
    validate_config,
    print_config_summary,
)

__all__ = [
    "APP_ENV",
    "DEBUG",
    "LOG_LEVEL",
    "PRIORITY_WEIGHT_INTEREST",
    "PRIORITY_WEIGHT_URGENCY",
    "PRIORITY_WEIGHT_AGE",
    "PRIORITY_WEIGHT_RECENCY",
    "PRIORITY_WEIGHT_TREND",
    "INTEREST_DECAY_FACTOR",
    "MAX_RECENT_TOPICS",
    "INTEREST_STORE",
    "INTEREST_STORE_DIR",
    "MAX_STARTERS",
    "DIGEST_OUTPUT_DIR",
    "AIRTABLE_API_KEY",
    "AIRTABLE_BASE_ID",
    "AIRTABLE_INTEREST_TABLE",
    "REQUEST_TIMEOUT",
    "VALID_INTEREST_STORES",
    "is_production",
    "is_development",
    "priority_weight_total",
    "validate_config",
    "print_config_summary",
]
