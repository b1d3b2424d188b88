"""
Interest tracking for Care Digest.

The learned interest vector is updated by two rules:

1. Interaction (repeated): every score decays by INTEREST_DECAY_FACTOR, then
   the touched topic gains weight * 0.1 (capped at 1.0) and moves to the
   front of the recent-topic history.
2. Explicit pinning (one-time): each pinned topic gains 0.3 (capped at 1.0).

Decay is applied before the boost so the topic just reinforced is not
decayed by the same update.

The update rules are pure functions over InterestVector records.
InterestTracker wraps them with a load/modify/save cycle against an
InterestStore, serialized per (user, subject) key.
"""

import copy
import threading
from datetime import datetime
from typing import Iterable, Optional

from loguru import logger

from caredigest.config import INTEREST_DECAY_FACTOR, MAX_RECENT_TOPICS
from caredigest.models.interest import (
    InterestVector,
    NEUTRAL_INTEREST,
    clamp_score,
)
from caredigest.models.topic import canonical_topic_name
from caredigest.storage.base import InterestStore, StorageError


# Score gained per unit of interaction weight
INTERACTION_BOOST: float = 0.1

# One-time gain for a topic the user pins explicitly
EXPLICIT_BOOST: float = 0.3


def normalize_topic(topic) -> str:
    """
    Canonical storage name for a topic.

    Known topics and aliases map to the Topic value ("feeding" -> "food");
    anything else is kept as its lowercase name.

    Raises:
        ValueError: If the topic is empty.
    """
    name = canonical_topic_name(topic)
    if not name:
        raise ValueError("topic is required and cannot be empty")
    return name


# =============================================================================
# Pure Update Rules
# =============================================================================

def apply_interaction(
    vector: InterestVector,
    topic,
    weight: float = 1.0,
    decay_factor: float = INTEREST_DECAY_FACTOR,
    max_recent: int = MAX_RECENT_TOPICS,
    now: Optional[datetime] = None,
) -> InterestVector:
    """
    Return a new vector with one interaction applied.

    Steps:
    1. Multiply every score by decay_factor.
    2. Boost topic: min(current + weight * 0.1, 1.0), current defaulting to 0.5.
    3. Move topic to the front of recent_topics, truncated to max_recent.
    4. Stamp last_interaction_at and updated_at.

    The input vector is not modified.
    """
    name = normalize_topic(topic)
    now = now or datetime.now()

    scores = {t: clamp_score(s * decay_factor) for t, s in vector.scores.items()}

    current = scores.get(name, NEUTRAL_INTEREST)
    scores[name] = clamp_score(current + weight * INTERACTION_BOOST)

    recent = [name] + [t for t in vector.recent_topics if t != name]

    updated = copy.deepcopy(vector)
    updated.scores = scores
    updated.recent_topics = recent[:max_recent]
    updated.last_interaction_at = now
    updated.updated_at = now
    return updated


def apply_explicit_topics(
    vector: InterestVector,
    topics: Iterable,
    now: Optional[datetime] = None,
) -> InterestVector:
    """
    Return a new vector whose explicit topics are replaced by topics.

    Each listed topic receives a one-time boost of 0.3 (capped at 1.0).
    Duplicates in the input are boosted once.
    """
    names = []
    for topic in topics:
        name = normalize_topic(topic)
        if name not in names:
            names.append(name)

    scores = dict(vector.scores)
    for name in names:
        scores[name] = clamp_score(scores.get(name, NEUTRAL_INTEREST) + EXPLICIT_BOOST)

    updated = copy.deepcopy(vector)
    updated.scores = scores
    updated.explicit_topics = names
    updated.updated_at = now or datetime.now()
    return updated


# =============================================================================
# Tracker
# =============================================================================

class InterestTracker:
    """
    Stateful front end for interest vectors.

    Usage:
        tracker = InterestTracker(InMemoryInterestStore())
        tracker.record_interaction("u1", "child-1", "sleep", weight=1.0)
        vector = tracker.get_vector("u1", "child-1")

    Writes for the same (user, subject) pair are serialized with a
    per-key lock; different pairs proceed in parallel.
    """

    def __init__(
        self,
        store: InterestStore,
        decay_factor: float = INTEREST_DECAY_FACTOR,
        max_recent_topics: int = MAX_RECENT_TOPICS,
    ):
        self.store = store
        self.decay_factor = decay_factor
        self.max_recent_topics = max_recent_topics

        self._locks: dict[tuple[str, str], threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, user_id: str, subject_id: str) -> threading.Lock:
        key = (str(user_id), str(subject_id))
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def _load_or_default(self, user_id, subject_id) -> InterestVector:
        vector = self.store.load(str(user_id), str(subject_id))
        return vector if vector is not None else InterestVector.default(user_id, subject_id)

    def get_vector(self, user_id, subject_id) -> InterestVector:
        """
        Return the stored vector, or the baseline default if none exists.

        Never raises: a failing store is logged and the baseline is returned.
        """
        try:
            return self._load_or_default(user_id, subject_id)
        except StorageError as e:
            logger.warning(
                "Interest store {} failed to load {}/{}: {}; using baseline",
                self.store.name, user_id, subject_id, e,
            )
            return InterestVector.default(user_id, subject_id)

    def record_interaction(self, user_id, subject_id, topic, weight: float = 1.0) -> InterestVector:
        """
        Apply decay then reinforcement for one interaction and persist it.

        Returns:
            The saved vector.

        Raises:
            ValueError: If topic is empty.
            StorageError: If the store cannot be read or written.
        """
        weight = 1.0 if weight is None else float(weight)

        with self._lock_for(user_id, subject_id):
            vector = self._load_or_default(user_id, subject_id)
            updated = apply_interaction(
                vector,
                topic,
                weight=weight,
                decay_factor=self.decay_factor,
                max_recent=self.max_recent_topics,
            )
            self.store.save(updated)

        logger.info(
            "Recorded interaction {}/{} topic={} weight={} -> {:.3f}",
            user_id, subject_id, updated.recent_topics[0], weight,
            updated.scores[updated.recent_topics[0]],
        )
        return updated

    def set_explicit_topics(self, user_id, subject_id, topics: Iterable) -> InterestVector:
        """
        Replace the pinned topic set and boost each pinned topic once.

        Returns:
            The saved vector.

        Raises:
            ValueError: If any topic is empty.
            StorageError: If the store cannot be read or written.
        """
        topics = list(topics or [])

        with self._lock_for(user_id, subject_id):
            vector = self._load_or_default(user_id, subject_id)
            updated = apply_explicit_topics(vector, topics)
            self.store.save(updated)

        logger.info(
            "Set explicit topics {}/{}: {}",
            user_id, subject_id, ", ".join(updated.explicit_topics) or "(none)",
        )
        return updated
