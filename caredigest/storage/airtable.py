"""
Airtable storage backend for interest profiles.

Implements the InterestStore interface using Airtable as the persistence layer.
Uses the Airtable REST API for all operations.

Airtable API Documentation: https://airtable.com/developers/web/api/introduction

=============================================================================
AIRTABLE SCHEMA
=============================================================================

Required table columns (create these in Airtable):

| Column Name         | Field Type       | Description                            |
|---------------------|------------------|----------------------------------------|
| unique_key          | Single line text | "<user_id>__<subject_id>" (display)    |
| user_id             | Single line text | Caregiver identifier                   |
| subject_id          | Single line text | Subject identifier                     |
| scores              | Long text        | JSON object topic -> score             |
| explicit_topics     | Long text        | JSON list of pinned topics             |
| recent_topics       | Long text        | JSON list, most recent first           |
| last_interaction_at | Date             | Last interaction (ISO format)          |
| updated_at          | Date             | When the record was last written       |

The whole record is written on every save so the three interest fields
never drift apart. Lookups match on the user_id and subject_id columns.

=============================================================================
"""

import json
import time
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

import requests
from loguru import logger

from caredigest.config import (
    AIRTABLE_API_KEY,
    AIRTABLE_BASE_ID,
    AIRTABLE_INTEREST_TABLE,
    REQUEST_TIMEOUT,
)
from caredigest.models.interest import InterestVector, parse_scores, parse_topic_list
from caredigest.storage.base import InterestStore, StorageError


class AirtableInterestStore(InterestStore):
    """
    Airtable-backed interest store.

    Configuration is pulled from environment variables via caredigest.config:
    - AIRTABLE_API_KEY: API key for authentication
    - AIRTABLE_BASE_ID: Base ID (starts with "app")
    - AIRTABLE_INTEREST_TABLE: Name of the table to use
    """

    # Airtable API base URL
    API_BASE = "https://api.airtable.com/v0"

    # Rate limiting: Airtable allows 5 requests per second
    REQUEST_DELAY = 0.25

    def __init__(
        self,
        api_key: str = None,
        base_id: str = None,
        table_name: str = None,
        session: requests.Session = None,
    ):
        """
        Initialize AirtableInterestStore.

        Args:
            api_key: Airtable API key. Defaults to config.AIRTABLE_API_KEY.
            base_id: Airtable base ID. Defaults to config.AIRTABLE_BASE_ID.
            table_name: Table name. Defaults to config.AIRTABLE_INTEREST_TABLE.
            session: Optional requests session (for connection reuse and tests).
        """
        # Use provided values, or fall back to config if None (not empty string)
        self.api_key = api_key if api_key is not None else AIRTABLE_API_KEY
        self.base_id = base_id if base_id is not None else AIRTABLE_BASE_ID
        self.table_name = table_name if table_name is not None else AIRTABLE_INTEREST_TABLE
        self.session = session or requests.Session()

        self._last_request_time = 0.0

    @property
    def name(self) -> str:
        return "airtable"

    @property
    def _base_url(self) -> str:
        """Construct the base URL for API requests."""
        return f"{self.API_BASE}/{self.base_id}/{self.table_name}"

    @property
    def _headers(self) -> Dict[str, str]:
        """Construct headers for API requests."""
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _rate_limit(self) -> None:
        """Enforce rate limiting between requests."""
        now = time.time()
        elapsed = now - self._last_request_time
        if elapsed < self.REQUEST_DELAY:
            time.sleep(self.REQUEST_DELAY - elapsed)
        self._last_request_time = time.time()

    def _validate_config(self) -> None:
        """Validate that required configuration is present."""
        if not self.api_key:
            raise StorageError("AIRTABLE_API_KEY is not configured")
        if not self.base_id:
            raise StorageError("AIRTABLE_BASE_ID is not configured")
        if not self.table_name:
            raise StorageError("AIRTABLE_INTEREST_TABLE is not configured")

    @staticmethod
    def unique_key(user_id: str, subject_id: str) -> str:
        return f"{user_id}__{subject_id}"

    @staticmethod
    def formula_string(value: str) -> str:
        """Quote a value as an Airtable formula string literal."""
        escaped = str(value).replace("\\", "\\\\").replace("'", "\\'")
        return f"'{escaped}'"

    @classmethod
    def key_formula(cls, user_id: str, subject_id: str) -> str:
        """
        Formula matching the record for exactly this (user, subject) pair.

        Filters on the id columns rather than unique_key, since "__" may
        also appear inside an id.
        """
        return (
            f"AND({{user_id}}={cls.formula_string(user_id)}, "
            f"{{subject_id}}={cls.formula_string(subject_id)})"
        )

    # =========================================================================
    # Serialization: InterestVector <-> Airtable
    # =========================================================================

    @staticmethod
    def vector_to_airtable_fields(vector: InterestVector) -> Dict[str, Any]:
        """
        Convert an InterestVector to Airtable field format.

        List and mapping fields are stored as JSON text.
        """
        fields = {
            "unique_key": AirtableInterestStore.unique_key(vector.user_id, vector.subject_id),
            "user_id": vector.user_id,
            "subject_id": vector.subject_id,
            "scores": json.dumps(vector.scores, sort_keys=True),
            "explicit_topics": json.dumps(vector.explicit_topics),
            "recent_topics": json.dumps(vector.recent_topics),
            "updated_at": vector.updated_at.isoformat(),
        }

        if vector.last_interaction_at:
            fields["last_interaction_at"] = vector.last_interaction_at.isoformat()

        return fields

    @staticmethod
    def airtable_record_to_vector(record: Dict[str, Any]) -> InterestVector:
        """
        Convert an Airtable record to an InterestVector.

        Raises:
            StorageError: If the record is missing fields or holds malformed JSON.
        """
        fields = record.get("fields", {})

        try:
            last = fields.get("last_interaction_at")
            updated = fields.get("updated_at")
            return InterestVector(
                user_id=fields["user_id"],
                subject_id=fields["subject_id"],
                scores=parse_scores(json.loads(fields.get("scores") or "{}")),
                explicit_topics=parse_topic_list(
                    json.loads(fields.get("explicit_topics") or "[]"), "explicit_topics"
                ),
                recent_topics=parse_topic_list(
                    json.loads(fields.get("recent_topics") or "[]"), "recent_topics"
                ),
                last_interaction_at=(
                    datetime.fromisoformat(last.replace("Z", "+00:00")) if last else None
                ),
                updated_at=(
                    datetime.fromisoformat(updated.replace("Z", "+00:00")) if updated else datetime.now()
                ),
            )
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise StorageError(f"Malformed Airtable record {record.get('id')!r}: {e}") from e

    # =========================================================================
    # API Operations
    # =========================================================================

    def _find_record(self, user_id: str, subject_id: str) -> Optional[Tuple[str, Dict]]:
        """
        Find the existing record for a (user, subject) pair.

        Returns:
            Tuple of (record_id, record) if found, None otherwise.
        """
        self._rate_limit()

        unique_key = self.unique_key(user_id, subject_id)
        params = {
            "filterByFormula": self.key_formula(user_id, subject_id),
            "maxRecords": 1,
        }

        try:
            response = self.session.get(
                self._base_url,
                headers=self._headers,
                params=params,
                timeout=REQUEST_TIMEOUT,
            )
            response.raise_for_status()
            records = response.json().get("records", [])
        except (requests.RequestException, ValueError) as e:
            raise StorageError(f"Airtable lookup failed for {unique_key}: {e}") from e

        if records:
            return (records[0]["id"], records[0])
        return None

    # =========================================================================
    # InterestStore Interface Implementation
    # =========================================================================

    def load(self, user_id: str, subject_id: str) -> Optional[InterestVector]:
        self._validate_config()

        found = self._find_record(user_id, subject_id)
        if found is None:
            return None

        _, record = found
        vector = self.airtable_record_to_vector(record)
        if vector.key != (str(user_id), str(subject_id)):
            raise StorageError(
                f"Airtable record {record.get('id')!r} belongs to "
                f"{vector.user_id}/{vector.subject_id}, not {user_id}/{subject_id}"
            )
        return vector

    def save(self, vector: InterestVector) -> None:
        """
        Insert or update the record for the vector's (user, subject) key.

        The existing record, if any, is overwritten field by field with the
        full set of fields, so the stored profile always matches the vector.
        """
        self._validate_config()

        key = self.unique_key(vector.user_id, vector.subject_id)
        existing = self._find_record(vector.user_id, vector.subject_id)
        payload = {"fields": self.vector_to_airtable_fields(vector)}

        self._rate_limit()

        try:
            if existing:
                record_id, _ = existing
                response = self.session.patch(
                    f"{self._base_url}/{record_id}",
                    headers=self._headers,
                    json=payload,
                    timeout=REQUEST_TIMEOUT,
                )
            else:
                response = self.session.post(
                    self._base_url,
                    headers=self._headers,
                    json=payload,
                    timeout=REQUEST_TIMEOUT,
                )
            response.raise_for_status()
        except requests.RequestException as e:
            raise StorageError(f"Airtable save failed for {key}: {e}") from e

        logger.debug("Saved interest profile {} to Airtable ({})", key, "update" if existing else "insert")
