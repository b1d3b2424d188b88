"""
Digest module.

Generates formatted daily digests from context snapshots.
"""

from caredigest.digest.generator import (
    DailyDigest,
    DigestGenerator,
    DigestConfig,
    DigestResult,
    digest_filename,
    generate_digest,
    generate_digest_content,
)

__all__ = [
    "DailyDigest",
    "DigestGenerator",
    "DigestConfig",
    "DigestResult",
    "digest_filename",
    "generate_digest",
    "generate_digest_content",
]
