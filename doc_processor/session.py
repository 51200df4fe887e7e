"""
Session persistence: snapshot the image set and options to key-value storage and restore them.
"""
import json
from typing import List, Optional

from . import config
from .core import logger
from .exceptions import CorruptSessionError, FormatError
from .models import ImageAsset, ProcessingOptions, SessionSnapshot
from .storage import JsonFileStore


class SessionStore:
    """Saves and restores a single session under a fixed storage key.

    Args:
        storage: Any object with get(key), set(key, value) and delete(key).
            Defaults to a JsonFileStore in SESSION_CONFIG["data_dir"].
        key: Storage key holding the serialized snapshot.
    """

    def __init__(self, storage=None, key: str = config.SESSION_CONFIG["storage_key"]):
        if storage is None:
            storage = JsonFileStore(
                data_dir=config.SESSION_CONFIG["data_dir"],
                quota_bytes=config.SESSION_CONFIG["quota_bytes"],
            )
        self.storage = storage
        self.key = key

    def save(self, images: List[ImageAsset], options: ProcessingOptions):
        """Serialize and write the session. Raises PersistenceError on storage failure."""
        snapshot = SessionSnapshot(images=list(images), options=options)
        payload = json.dumps(snapshot.to_dict())
        self.storage.set(self.key, payload)
        logger.info(f"Saved session with {len(images)} image(s) ({len(payload)} bytes) under '{self.key}'")

    def has(self) -> bool:
        try:
            return self.storage.get(self.key) is not None
        except ValueError:
            # Present but unreadable; load() will discard it
            return True

    def clear(self):
        self.storage.delete(self.key)

    def load(self) -> Optional[SessionSnapshot]:
        """
        Read and rebuild the persisted session.

        Returns:
            The snapshot, or None when nothing has been saved.

        Raises:
            CorruptSessionError: if the stored value cannot be parsed or lacks
                'images'/'options'. The stored value is deleted first so the
                same failure is never hit twice.
        """
        try:
            raw = self.storage.get(self.key)
        except ValueError as e:
            self._discard(f"unreadable storage entry: {e}")
            raise CorruptSessionError(f"Invalid saved data format: {e}") from e
        if raw is None:
            return None

        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            self._discard(f"invalid JSON: {e}")
            raise CorruptSessionError(f"Invalid saved data format: {e}") from e

        if not isinstance(data, dict) or "images" not in data or "options" not in data:
            self._discard("missing 'images' or 'options'")
            raise CorruptSessionError("Invalid saved data format.")
        if not isinstance(data["images"], list) or not isinstance(data["options"], dict):
            self._discard("'images' or 'options' has the wrong type")
            raise CorruptSessionError("Invalid saved data format.")

        options = ProcessingOptions.from_dict(data["options"])
        images = []
        for idx, entry in enumerate(data["images"]):
            try:
                images.append(ImageAsset.from_encoded(
                    id=entry["id"],
                    encoded=entry["encoded"],
                    name=entry["name"],
                    media_type=entry.get("media_type"),
                ))
            except (FormatError, KeyError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping unreadable image entry {idx} in saved session: {e}")

        logger.info(f"Loaded session with {len(images)} image(s) from '{self.key}'")
        return SessionSnapshot(images=images, options=options)

    def _discard(self, reason: str):
        logger.warning(f"Discarding corrupt saved session '{self.key}': {reason}")
        self.storage.delete(self.key)
