"""Saved / liked paper collections persisted in a local key-value store."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

from platformdirs import user_data_dir

from arxiv_scroll.models import CONFIG_APP_NAME, PaperRecord

logger = logging.getLogger(__name__)

SAVED_PAPERS_KEY = "savedPapers"
LIKED_PAPERS_KEY = "likedPapers"


class PreferenceSaveError(OSError):
    """A collection change could not be written, so it was rolled back."""


@runtime_checkable
class KeyValueStorage(Protocol):
    """Durable string-keyed storage for serialized collections."""

    def get(self, key: str) -> str | None:
        """Return the stored value, or None when missing."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store a value, raising OSError on failure."""
        ...


class MemoryStorage:
    """In-process storage, used for tests and ``--no-persist`` sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


def get_preferences_dir() -> Path:
    """Get the directory holding preference files.

    Uses platformdirs for a cross-platform data directory:
    - Linux: ~/.local/share/arxiv-scroll/
    - macOS: ~/Library/Application Support/arxiv-scroll/
    - Windows: %LOCALAPPDATA%/arxiv-scroll/
    """
    return Path(user_data_dir(CONFIG_APP_NAME))


class JsonFileStorage:
    """One ``<key>.json`` file per key, written atomically."""

    def __init__(self, directory: Path | None = None) -> None:
        self.directory = directory if directory is not None else get_preferences_dir()

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        """Write via tempfile + os.replace() so a crash never leaves half a file."""
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, suffix=".tmp", prefix=f".{key}-")
        closed = False
        try:
            os.write(fd, value.encode("utf-8"))
            os.close(fd)
            closed = True
            os.replace(tmp_path, self._path(key))
        except BaseException:
            if not closed:
                os.close(fd)
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise


class PreferenceCollection:
    """An ordered set of full paper snapshots keyed by id."""

    def __init__(self, name: str, storage: KeyValueStorage, key: str) -> None:
        self.name = name
        self._storage = storage
        self._key = key
        self._records: dict[str, PaperRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, paper_id: object) -> bool:
        return paper_id in self._records

    def load(self) -> None:
        """Replace in-memory state with the persisted collection.

        Missing or corrupt data loads as an empty collection.
        """
        self._records = {}
        try:
            raw = self._storage.get(self._key)
        except OSError as e:
            logger.warning("Could not read %s preferences, starting empty: %s", self.name, e)
            return
        if raw is None:
            return
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("%s preferences have invalid JSON, starting empty: %s", self.name, e)
            return
        if not isinstance(data, list):
            logger.warning("%s preferences are not a list, starting empty", self.name)
            return
        for item in data:
            record = PaperRecord.from_dict(item)
            if record is not None and record.id not in self._records:
                self._records[record.id] = record

    def persist(self) -> bool:
        """Write the full collection. Returns True on success."""
        payload = json.dumps([record.to_dict() for record in self._records.values()])
        try:
            self._storage.set(self._key, payload)
        except OSError as e:
            logger.error("Failed to save %s preferences: %s", self.name, e)
            return False
        return True

    def contains(self, paper_id: str) -> bool:
        return paper_id in self._records

    def toggle(self, record: PaperRecord) -> bool:
        """Remove the paper if present, else add it. Returns True if now present.

        Raises:
            PreferenceSaveError: if the change could not be persisted. The
                in-memory collection is left as it was before the call.
        """
        previous = dict(self._records)
        if record.id in self._records:
            del self._records[record.id]
            present = False
        else:
            self._records[record.id] = record
            present = True
        if not self.persist():
            self._records = previous
            raise PreferenceSaveError(f"could not write the {self.name} list")
        return present

    def list(self) -> list[PaperRecord]:
        """Ordered snapshot, oldest addition first."""
        return list(self._records.values())

    def ids(self) -> set[str]:
        return set(self._records)


class PreferenceStore:
    """The user's saved and liked collections."""

    def __init__(self, storage: KeyValueStorage) -> None:
        self.saved = PreferenceCollection("saved", storage, SAVED_PAPERS_KEY)
        self.liked = PreferenceCollection("liked", storage, LIKED_PAPERS_KEY)

    @classmethod
    def open(cls, storage: KeyValueStorage | None = None) -> PreferenceStore:
        """Create a store and load both collections (file storage by default)."""
        store = cls(storage if storage is not None else JsonFileStorage())
        store.saved.load()
        store.liked.load()
        return store

    def toggle_saved(self, record: PaperRecord) -> bool:
        return self.saved.toggle(record)

    def toggle_liked(self, record: PaperRecord) -> bool:
        return self.liked.toggle(record)


__all__ = [
    "LIKED_PAPERS_KEY",
    "SAVED_PAPERS_KEY",
    "JsonFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "PreferenceCollection",
    "PreferenceSaveError",
    "PreferenceStore",
    "get_preferences_dir",
]
