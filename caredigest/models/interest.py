"""
Interest profile data model for Care Digest.

Defines the InterestVector dataclass: the learned per-(user, subject)
affinity for each topic, plus the topics the user pinned and the topics
they touched most recently.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from caredigest.config import MAX_RECENT_TOPICS


# Baseline affinity for a user who has never interacted with a subject
DEFAULT_INTEREST_SCORES: dict[str, float] = {
    "sleep": 0.7,
    "food": 0.7,
    "health": 0.8,
    "development": 0.6,
    "social": 0.5,
    "activity": 0.5,
    "mood": 0.6,
}

# Score assumed for a topic missing from the vector
NEUTRAL_INTEREST: float = 0.5


def clamp_score(value: float) -> float:
    """Clamp an interest score to the closed interval [0.0, 1.0]."""
    return max(0.0, min(1.0, float(value)))


def parse_scores(value: Any) -> dict[str, float]:
    """
    Coerce a stored topic -> score mapping to floats.

    Raises:
        ValueError: If the value is not a mapping of numbers.
    """
    if not isinstance(value, dict):
        raise ValueError(f"scores must be an object, got {type(value).__name__}")
    try:
        return {str(k): float(v) for k, v in value.items()}
    except (TypeError, ValueError):
        raise ValueError(f"scores must map topics to numbers, got {value!r}") from None


def parse_topic_list(value: Any, field_name: str) -> list[str]:
    """
    Coerce a stored topic list, treating None as empty.

    Raises:
        ValueError: If the value is not a list of strings.
    """
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(t, str) for t in value):
        raise ValueError(f"{field_name} must be a list of topic names, got {value!r}")
    return list(value)


@dataclass
class InterestVector:
    """
    Interest profile for one user looking at one subject.

    Attributes:
        user_id: Identifier of the caregiver/user.
        subject_id: Identifier of the monitored subject (child profile).
        scores: Mapping topic name -> affinity (0.0 to 1.0).
        explicit_topics: Topics the user pinned for tracking.
        recent_topics: Most-recent-first topic history, no duplicates.
        last_interaction_at: When the user last interacted with a topic.
        updated_at: When this record was last written.
    """

    user_id: str
    subject_id: str
    scores: dict[str, float] = field(default_factory=lambda: dict(DEFAULT_INTEREST_SCORES))
    explicit_topics: list[str] = field(default_factory=list)
    recent_topics: list[str] = field(default_factory=list)
    last_interaction_at: Optional[datetime] = None
    updated_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        self.user_id = str(self.user_id)
        self.subject_id = str(self.subject_id)
        self.validate()

    @classmethod
    def default(cls, user_id, subject_id) -> "InterestVector":
        """Baseline vector with empty explicit and recent topic lists."""
        return cls(user_id=user_id, subject_id=subject_id)

    @property
    def key(self) -> tuple[str, str]:
        return (self.user_id, self.subject_id)

    def validate(self) -> None:
        """
        Validate the record invariants.

        Raises:
            ValueError: If any invariant is violated.
        """
        errors = []

        if not self.user_id.strip():
            errors.append("user_id is required and cannot be empty")
        if not self.subject_id.strip():
            errors.append("subject_id is required and cannot be empty")

        if not isinstance(self.scores, dict):
            errors.append(f"scores must be a dict, got {type(self.scores).__name__}")
        else:
            for topic, score in self.scores.items():
                if not isinstance(score, (int, float)) or not (0.0 <= score <= 1.0):
                    errors.append(f"score for {topic!r} must be between 0.0 and 1.0, got {score!r}")

        if not isinstance(self.explicit_topics, list):
            errors.append("explicit_topics must be a list")

        if not isinstance(self.recent_topics, list):
            errors.append("recent_topics must be a list")
        else:
            if len(set(self.recent_topics)) != len(self.recent_topics):
                errors.append("recent_topics must not contain duplicates")
            if len(self.recent_topics) > MAX_RECENT_TOPICS:
                errors.append(
                    f"recent_topics holds at most {MAX_RECENT_TOPICS} topics, "
                    f"got {len(self.recent_topics)}"
                )

        if errors:
            raise ValueError(f"InterestVector validation failed: {'; '.join(errors)}")

    def score_for(self, topic: str) -> float:
        return self.scores.get(topic, NEUTRAL_INTEREST)

    def to_dict(self) -> dict:
        """Plain dictionary with ISO-formatted timestamps."""
        return {
            "user_id": self.user_id,
            "subject_id": self.subject_id,
            "scores": dict(self.scores),
            "explicit_topics": list(self.explicit_topics),
            "recent_topics": list(self.recent_topics),
            "last_interaction_at": (
                self.last_interaction_at.isoformat() if self.last_interaction_at else None
            ),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "InterestVector":
        """
        Create an InterestVector from a dictionary (e.g., from storage).

        Accepts "interest_vector" as an alias of "scores".

        Raises:
            ValueError: If the document or one of its fields has the wrong shape.
            KeyError: If user_id or subject_id is missing.
        """
        if not isinstance(data, dict):
            raise ValueError(f"interest vector must be an object, got {type(data).__name__}")
        data = dict(data)

        scores = data.pop("scores", None)
        if scores is None:
            scores = data.pop("interest_vector", None)
        else:
            data.pop("interest_vector", None)

        last = data.get("last_interaction_at")
        if isinstance(last, str):
            last = datetime.fromisoformat(last)

        updated = data.get("updated_at")
        if isinstance(updated, str):
            updated = datetime.fromisoformat(updated)

        return cls(
            user_id=data["user_id"],
            subject_id=data["subject_id"],
            scores=parse_scores(scores) if scores else dict(DEFAULT_INTEREST_SCORES),
            explicit_topics=parse_topic_list(data.get("explicit_topics"), "explicit_topics"),
            recent_topics=parse_topic_list(data.get("recent_topics"), "recent_topics"),
            last_interaction_at=last,
            updated_at=updated or datetime.now(),
        )

    def __str__(self) -> str:
        top = sorted(self.scores.items(), key=lambda kv: -kv[1])[:3]
        top_str = ", ".join(f"{t}={s:.2f}" for t, s in top)
        return f"InterestVector({self.user_id}/{self.subject_id}: {top_str})"
