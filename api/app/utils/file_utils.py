"""
Shared utilities for data and backup directory management.
"""
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from app.core.config import settings

logger = logging.getLogger(__name__)


def get_data_directory() -> Path:
    """
    Get the data directory path.

    Uses DATA_PATH environment variable if set (for mounted volumes),
    otherwise falls back to the api/data directory.

    Returns:
        Path to the data directory
    """
    if settings.data_path:
        return Path(settings.data_path)
    # utils/file_utils.py -> app -> api, then into data
    api_root = Path(__file__).parent.parent.parent
    return api_root / "data"


def get_backups_directory(data_dir: Optional[Path] = None) -> Path:
    """
    Get the backups directory path.

    Uses BACKUPS_PATH if set, otherwise a `backups` folder inside the data directory.
    """
    if settings.backups_path:
        return Path(settings.backups_path)
    return (data_dir or get_data_directory()) / "backups"


def backup_timestamp(moment: Optional[datetime] = None) -> str:
    """
    Build a filesystem-safe ISO-8601 timestamp.

    Colons and dots are replaced with dashes, e.g. 2025-09-02T09-11-36-880Z.
    """
    moment = moment or datetime.now(timezone.utc)
    iso = moment.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    iso = iso.replace("+00:00", "Z")
    return iso.replace(":", "-").replace(".", "-")


def atomic_write_text(path: Path, content: str) -> None:
    """
    Write text to a file through a temporary sibling and an atomic rename.

    Readers see either the old file or the complete new one, never a partial write.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


def is_within_directory(path: Path, directory: Path) -> bool:
    """Return True when `path` resolves to a location inside `directory`."""
    try:
        path.resolve().relative_to(directory.resolve())
    except ValueError:
        return False
    return True
