"""PDF text access (pypdf) and local filesystem operations."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional, Protocol

from .utils import UPDATED_SUFFIX, file_fingerprint

log = logging.getLogger(__name__)


class TextSource(Protocol):
    """What the classifier and extractor need from a PDF toolkit.

    Page numbers are 1-based.  Implementations may raise on unreadable
    documents; callers contain those failures.
    """

    def page_count(self, path: Path) -> int: ...

    def page_text(self, path: Path, page_no: int) -> str: ...

    def text(self, path: Path, first: int, last: int) -> str: ...

    def info_title(self, path: Path) -> str: ...

    def info_author(self, path: Path) -> str: ...

    def set_document_info(self, path: Path, title: str, author: str) -> bool: ...


def updated_path(path: Path) -> Path:
    """Sibling that receives rewritten metadata: ``<stem>_updated.pdf``."""
    return path.with_name(f"{path.stem}{UPDATED_SUFFIX}{path.suffix or '.pdf'}")


# ---------------------------------------------------------------------------
# pypdf-backed text source
# ---------------------------------------------------------------------------


class PdfTextSource:
    """Reads page text and document info with pypdf.

    Readers are cached per path and reopened when the file's size or
    mtime changes.
    """

    def __init__(self) -> None:
        self._readers: dict[str, tuple[dict[str, int], Any]] = {}

    def _reader(self, path: Path):
        from pypdf import PdfReader

        key = str(path)
        fingerprint = file_fingerprint(path)
        cached = self._readers.get(key)
        if cached is not None and cached[0] == fingerprint:
            return cached[1]

        reader = PdfReader(key)
        if reader.is_encrypted:
            reader.decrypt("")
        self._readers[key] = (fingerprint, reader)
        log.debug("Opened %s (%s pages)", path.name, len(reader.pages))
        return reader

    def page_count(self, path: Path) -> int:
        return len(self._reader(path).pages)

    def page_text(self, path: Path, page_no: int) -> str:
        reader = self._reader(path)
        if page_no < 1 or page_no > len(reader.pages):
            return ""
        return reader.pages[page_no - 1].extract_text() or ""

    def text(self, path: Path, first: int, last: int) -> str:
        last = min(last, self.page_count(path))
        return "\n".join(
            self.page_text(path, page_no) for page_no in range(max(1, first), last + 1)
        )

    def _info(self, path: Path):
        return self._reader(path).metadata

    def info_title(self, path: Path) -> str:
        info = self._info(path)
        return str(info.title or "").strip() if info is not None else ""

    def info_author(self, path: Path) -> str:
        info = self._info(path)
        return str(info.author or "").strip() if info is not None else ""

    def set_document_info(self, path: Path, title: str, author: str) -> bool:
        """Write title/author into an ``_updated.pdf`` sibling of *path*."""
        from pypdf import PdfWriter

        dest = updated_path(path)
        try:
            writer = PdfWriter(clone_from=self._reader(path))
            writer.add_metadata({"/Title": title, "/Author": author})
            with open(dest, "wb") as fh:
                writer.write(fh)
        except Exception as exc:
            log.error("Metadata update failed for %s: %s", path.name, exc)
            return False
        log.info("Metadata written to %s", dest.name)
        return True


# ---------------------------------------------------------------------------
# Local filesystem
# ---------------------------------------------------------------------------


def list_pdf_files(folder: Path) -> list[Path]:
    """Top-level ``*.pdf`` files in *folder* (any suffix case), sorted by name."""
    if not folder.is_dir():
        return []
    return sorted(
        p for p in folder.iterdir() if p.is_file() and p.suffix.lower() == ".pdf"
    )


def rename_file(path: Path, new_name: str) -> Optional[Path]:
    """Rename *path* inside its directory; ``None`` when the rename is refused."""
    if not path.exists():
        log.warning("Rename skipped, source missing: %s", path)
        return None

    dest = path.with_name(new_name)
    if dest.exists():
        log.warning("Rename skipped, destination exists: %s", dest)
        return None

    try:
        path.rename(dest)
    except OSError as exc:
        log.error("Rename failed for %s: %s", path.name, exc)
        return None
    log.info("Renamed %s -> %s", path.name, dest.name)
    return dest
