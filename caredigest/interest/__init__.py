"""
Interest module.

Learns per-user, per-subject topic affinity with decay and reinforcement.
"""

from caredigest.interest.tracker import (
    EXPLICIT_BOOST,
    INTERACTION_BOOST,
    InterestTracker,
    apply_explicit_topics,
    apply_interaction,
    normalize_topic,
)

__all__ = [
    "EXPLICIT_BOOST",
    "INTERACTION_BOOST",
    "InterestTracker",
    "apply_explicit_topics",
    "apply_interaction",
    "normalize_topic",
]
