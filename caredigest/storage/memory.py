"""
In-memory interest store for testing and development.
"""

import copy
from typing import Dict, Optional, Tuple

from caredigest.models.interest import InterestVector
from caredigest.storage.base import InterestStore


class InMemoryInterestStore(InterestStore):
    """
    In-memory store.

    Use this when no persistent backend is configured or for testing.
    Data is stored in memory and lost when the process ends. Records are
    copied on the way in and out so callers cannot mutate stored state.
    """

    def __init__(self):
        self._records: Dict[Tuple[str, str], InterestVector] = {}

    @property
    def name(self) -> str:
        return "memory"

    def load(self, user_id: str, subject_id: str) -> Optional[InterestVector]:
        record = self._records.get((str(user_id), str(subject_id)))
        return copy.deepcopy(record) if record else None

    def save(self, vector: InterestVector) -> None:
        self._records[vector.key] = copy.deepcopy(vector)

    def clear(self) -> None:
        """Clear all records (for testing)."""
        self._records.clear()

    def count(self) -> int:
        """Return number of stored records (for testing)."""
        return len(self._records)
