"""
Storage module.

Handles persistence of interest vectors via in-memory, JSON file or Airtable backends.
"""

from caredigest.storage.base import InterestStore, StorageError
from caredigest.storage.memory import InMemoryInterestStore
from caredigest.storage.json_file import JsonFileInterestStore
from caredigest.storage.airtable import AirtableInterestStore


def create_store(kind: str = None, base_dir: str = None) -> InterestStore:
    """
    Build the interest store selected by configuration.

    Args:
        kind: "memory", "file" or "airtable". Defaults to config.INTEREST_STORE.
        base_dir: Directory for the file store. Defaults to config.INTEREST_STORE_DIR.

    Raises:
        ValueError: If kind is not a known backend.
    """
    from caredigest.config import INTEREST_STORE, INTEREST_STORE_DIR

    kind = (kind or INTEREST_STORE).lower()
    if kind == "memory":
        return InMemoryInterestStore()
    if kind == "file":
        return JsonFileInterestStore(base_dir or INTEREST_STORE_DIR)
    if kind == "airtable":
        return AirtableInterestStore()
    raise ValueError(f"Unknown interest store: {kind!r}")


__all__ = [
    "InterestStore",
    "StorageError",
    "InMemoryInterestStore",
    "JsonFileInterestStore",
    "AirtableInterestStore",
    "create_store",
]
