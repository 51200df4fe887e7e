"""
Simple key-value storage backends for session persistence.
"""
import json
import os
import re
import tempfile
from pathlib import Path
from typing import Dict, Optional

from .exceptions import PersistenceError

_SAFE_KEY_RE = re.compile(r"[^A-Za-z0-9_.-]")


class MemoryStore:
    """Dict-backed key-value store."""

    def __init__(self, quota_bytes: Optional[int] = None):
        self.quota_bytes = quota_bytes
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str):
        if self.quota_bytes is not None and len(value.encode("utf-8")) > self.quota_bytes:
            raise PersistenceError(f"Storage quota of {self.quota_bytes} bytes exceeded")
        self._data[key] = value

    def delete(self, key: str):
        self._data.pop(key, None)


class JsonFileStore:
    """One JSON file per key inside a data directory."""

    def __init__(self, data_dir: str = "doc_data", quota_bytes: Optional[int] = None):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.quota_bytes = quota_bytes

    def _path(self, key: str) -> Path:
        return self.data_dir / f"{_SAFE_KEY_RE.sub('_', key)}.json"

    def get(self, key: str) -> Optional[str]:
        """Return the raw stored value, or None if the key is absent."""
        path = self._path(key)
        if not path.exists():
            return None
        with open(path, 'r', encoding="utf-8") as f:
            return json.load(f)

    def set(self, key: str, value: str):
        """Write a value. Raises PersistenceError when full or unwritable.

        The value goes to a temp file in the data dir first and replaces the
        old file only once fully written, so a failed write keeps the previous value.
        """
        if self.quota_bytes is not None and len(value.encode("utf-8")) > self.quota_bytes:
            raise PersistenceError(f"Storage quota of {self.quota_bytes} bytes exceeded")
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(dir=self.data_dir, prefix=".tmp-", suffix=".json")
            with os.fdopen(fd, 'w', encoding="utf-8") as f:
                json.dump(value, f)
            os.replace(tmp_path, self._path(key))
        except OSError as e:
            if tmp_path is not None:
                Path(tmp_path).unlink(missing_ok=True)
            raise PersistenceError(f"Could not write to storage: {e}") from e

    def delete(self, key: str):
        self._path(key).unlink(missing_ok=True)
