"""Cross-cutting helpers: constants, file fingerprints, JSON state I/O."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from .models import AppSettings

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_BATCH_SIZE = 10
MAX_FILE_NAME_LENGTH = 240
UNKNOWN_PLACEHOLDER = "Desconhecido"
TYPE_THRESHOLD = 40
CLASSIFIER_SAMPLE_PAGES = 5
AUTHOR_SEARCH_PAGES = 3
RECORDS_FILE_NAME = "filerecords.json"
SETTINGS_FILE_NAME = "appsettings.json"
UPDATED_SUFFIX = "_updated"


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------


def file_fingerprint(path: Path) -> dict[str, int]:
    """Return a cheap fingerprint for local change detection."""
    stat = path.stat()
    return {
        "size": stat.st_size,
        "mtime_ns": stat.st_mtime_ns,
    }


# ---------------------------------------------------------------------------
# Record file I/O
# ---------------------------------------------------------------------------


def load_record_entries(path: Path) -> list[dict[str, Any]]:
    """Load raw record dicts from *path*; missing or corrupt files yield ``[]``."""
    if not path.exists():
        return []
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (json.JSONDecodeError, OSError, ValueError) as exc:
        log.warning("Could not read records from %s: %s", path, exc)
        return []

    if not isinstance(data, list):
        log.warning("Ignoring records file %s: expected a JSON list", path)
        return []
    return [item for item in data if isinstance(item, dict)]


def save_record_entries(path: Path, entries: list[dict[str, Any]]) -> Path:
    """Persist record dicts and return the file path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(entries, fh, indent=2, ensure_ascii=False, default=str)
    return path


# ---------------------------------------------------------------------------
# Settings I/O
# ---------------------------------------------------------------------------


def load_settings(path: Path) -> AppSettings:
    """Load application settings, falling back to defaults."""
    if not path.exists():
        return AppSettings()
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (json.JSONDecodeError, OSError, ValueError) as exc:
        log.warning("Could not read settings from %s: %s", path, exc)
        return AppSettings()

    if not isinstance(data, dict):
        return AppSettings()
    return AppSettings(last_directory=str(data.get("last_directory") or ""))


def save_settings(path: Path, settings: AppSettings) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(
            {"last_directory": settings.last_directory},
            fh,
            indent=2,
            ensure_ascii=False,
        )
    return path
