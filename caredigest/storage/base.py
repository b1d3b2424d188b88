"""
Base storage abstraction for interest profiles.

Defines the abstract interface that all interest-vector backends must implement.
This allows swapping between in-memory, local JSON files, Airtable, etc.
"""

from abc import ABC, abstractmethod
from typing import Optional

from caredigest.models.interest import InterestVector


class StorageError(Exception):
    """A storage backend could not complete a read or write."""


class InterestStore(ABC):
    """
    Abstract base class for all interest-vector backends.

    Implementations must provide:
    - load: fetch the stored vector for a (user, subject) pair, or None
    - save: overwrite the whole record for that pair

    A save always replaces the full record (scores, explicit topics,
    recent topics and timestamps together); there are no partial updates.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Return the name of this storage backend.

        Used for logging and debugging.
        """
        pass

    @abstractmethod
    def load(self, user_id: str, subject_id: str) -> Optional[InterestVector]:
        """
        Load the stored vector.

        Args:
            user_id: Caregiver identifier.
            subject_id: Subject identifier.

        Returns:
            The stored InterestVector, or None if nothing has been saved yet.

        Raises:
            StorageError: If the backend could not be read.
        """
        pass

    @abstractmethod
    def save(self, vector: InterestVector) -> None:
        """
        Atomically overwrite the record for vector.user_id / vector.subject_id.

        Raises:
            StorageError: If the backend could not be written.
        """
        pass

    def __str__(self) -> str:
        return f"InterestStore({self.name})"

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
