"""
File-backed store for the language dataset.

The dataset lives in three versioned JSON documents inside the data directory.
Readers get a snapshot that is loaded once and cached for the process lifetime;
writes made by the persistence service only become visible to readers after an
explicit `reload()` (or `invalidate()` followed by the next read).
"""
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock, RLock
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from app.core.exceptions import PersistenceError
from app.utils.file_utils import atomic_write_text, get_backups_directory, get_data_directory

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1

# document name -> (file name, payload key, empty payload)
LANGUAGES = "languages"
LEARNING_RESOURCES = "learning_resources"
CULTURE = "culture"

DOCUMENTS: Dict[str, tuple] = {
    LANGUAGES: ("languages.json", "languages", list),
    LEARNING_RESOURCES: ("learning_resources.json", "resources", dict),
    CULTURE: ("culture_data.json", "culture", dict),
}


class DatasetSnapshot(BaseModel):
    """Raw records as stored on disk, in file order."""
    languages: List[Dict[str, Any]] = []
    resources: Dict[str, List[Dict[str, Any]]] = {}
    culture: Dict[str, Dict[str, Any]] = {}
    loaded_at: Optional[datetime] = None


class DataStore:
    """Repository over the JSON data documents."""

    def __init__(self, data_dir: Optional[Path] = None, backups_dir: Optional[Path] = None):
        self.data_dir = Path(data_dir) if data_dir else get_data_directory()
        self.backups_dir = Path(backups_dir) if backups_dir else get_backups_directory(self.data_dir)
        # Held by every read-modify-write sequence in the persistence service
        self.write_lock = RLock()
        self._cache_lock = Lock()
        self._snapshot: Optional[DatasetSnapshot] = None

    def path_for(self, name: str) -> Path:
        if name not in DOCUMENTS:
            raise KeyError(f"Unknown data document: {name}")
        return self.data_dir / DOCUMENTS[name][0]

    # ------------------------------------------------------------------
    # Raw file access
    # ------------------------------------------------------------------

    def read_text(self, name: str) -> str:
        """Read a document's current file content from disk."""
        path = self.path_for(name)
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Cannot read data file {path}: {exc}") from exc

    def parse_document(self, name: str, text: str) -> Any:
        """Parse a document's file content and return its payload."""
        file_name, key, _ = DOCUMENTS[name]
        try:
            document = json.loads(text)
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"Data file {file_name} is not valid JSON: {exc}") from exc

        if not isinstance(document, dict) or key not in document:
            raise PersistenceError(f"Data file {file_name} has an unexpected format (missing '{key}')")

        version = document.get("version", FORMAT_VERSION)
        if not isinstance(version, int) or version > FORMAT_VERSION:
            raise PersistenceError(f"Data file {file_name} has unsupported format version {version!r}")

        return document[key]

    def read_document(self, name: str) -> Any:
        """Read and parse a document fresh from disk, bypassing the cache."""
        return self.parse_document(name, self.read_text(name))

    def render_document(self, name: str, payload: Any) -> str:
        """Serialize a payload into the versioned document format."""
        _, key, _ = DOCUMENTS[name]
        document = {
            "version": FORMAT_VERSION,
            "generated_at": datetime.now(timezone.utc).isoformat(timespec="seconds"),
            key: payload,
        }
        return json.dumps(document, ensure_ascii=False, indent=2) + "\n"

    def write_document(self, name: str, payload: Any) -> str:
        """Render and atomically write a document. Returns the written text."""
        path = self.path_for(name)
        text = self.render_document(name, payload)
        try:
            atomic_write_text(path, text)
        except OSError as exc:
            raise PersistenceError(f"Cannot write data file {path}: {exc}") from exc
        logger.info(f"Wrote data file {path}")
        return text

    # ------------------------------------------------------------------
    # Cached read path
    # ------------------------------------------------------------------

    def load(self) -> DatasetSnapshot:
        """Read all documents from disk into a new snapshot and cache it."""
        languages = self.read_document(LANGUAGES)
        if not isinstance(languages, list):
            raise PersistenceError("languages.json must hold a list of languages")

        resources = self._read_optional(LEARNING_RESOURCES)
        culture = self._read_optional(CULTURE)

        snapshot = DatasetSnapshot(
            languages=languages,
            resources=resources,
            culture=culture,
            loaded_at=datetime.now(timezone.utc),
        )
        with self._cache_lock:
            self._snapshot = snapshot
        logger.info(
            f"Loaded dataset from {self.data_dir}: {len(languages)} languages, "
            f"{len(resources)} resource lists, {len(culture)} culture records"
        )
        return snapshot

    def _read_optional(self, name: str) -> Any:
        empty = DOCUMENTS[name][2]
        if not self.path_for(name).exists():
            logger.warning(f"Data file {self.path_for(name)} not found, using an empty {name} map")
            return empty()
        payload = self.read_document(name)
        if not isinstance(payload, empty):
            raise PersistenceError(f"{DOCUMENTS[name][0]} has an unexpected payload type")
        return payload

    def snapshot(self) -> DatasetSnapshot:
        """Return the cached snapshot, loading it on first use. Callers must not mutate it."""
        with self._cache_lock:
            cached = self._snapshot
        if cached is None:
            cached = self.load()
        return cached

    def invalidate(self) -> None:
        """Drop the cached snapshot; the next read reloads from disk."""
        with self._cache_lock:
            self._snapshot = None
        logger.info("Dataset cache invalidated")

    def reload(self) -> DatasetSnapshot:
        """Reload the snapshot from disk so readers see the latest saved data."""
        return self.load()

    @property
    def is_loaded(self) -> bool:
        return self._snapshot is not None


_store: Optional[DataStore] = None
_store_lock = Lock()


def get_store() -> DataStore:
    """Dependency for getting the process-wide data store."""
    global _store
    with _store_lock:
        if _store is None:
            _store = DataStore()
            logger.info(f"Using data directory: {_store.data_dir}")
        return _store
