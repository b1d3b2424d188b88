"""
Local JSON file interest store.

One file per (user, subject) pair under a base directory:

    <base_dir>/<quoted user_id>+<quoted subject_id>.json

Both ids are percent-encoded, so "+" never appears inside either part and
every key maps to its own file.

Writes go to a temporary file in the same directory followed by
os.replace, so a reader never sees a half-written record.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional
from urllib.parse import quote

from caredigest.models.interest import InterestVector
from caredigest.storage.base import InterestStore, StorageError

KEY_SEPARATOR = "+"


class JsonFileInterestStore(InterestStore):
    """File-backed store, suitable for a single host."""

    def __init__(self, base_dir: str):
        self.base_dir = Path(base_dir)

    @property
    def name(self) -> str:
        return "file"

    def _path(self, user_id: str, subject_id: str) -> Path:
        user = quote(str(user_id), safe="")
        subject = quote(str(subject_id), safe="")
        return self.base_dir / f"{user}{KEY_SEPARATOR}{subject}.json"

    def load(self, user_id: str, subject_id: str) -> Optional[InterestVector]:
        path = self._path(user_id, subject_id)
        if not path.exists():
            return None

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            vector = InterestVector.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

        if vector.key != (str(user_id), str(subject_id)):
            raise StorageError(
                f"{path} holds the record for {vector.user_id}/{vector.subject_id}, "
                f"not {user_id}/{subject_id}"
            )
        return vector

    def save(self, vector: InterestVector) -> None:
        path = self._path(vector.user_id, vector.subject_id)

        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.base_dir, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(vector.to_dict(), f, indent=2, sort_keys=True)
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e
