"""Shared fixtures for the organizer test suite.

Most tests run against ``FakeTextSource``, an in-memory text source fed
with page strings.  PDF-level tests build tiny real PDFs with pypdf.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import pytest

# ---------------------------------------------------------------------------
# Configure verbose logging for test debugging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stderr,
    force=True,
)
log = logging.getLogger("conftest")

FILLER = (
    "Lorem ipsum dolor sit amet consectetur adipiscing elit sed do eiusmod "
    "tempor incididunt ut labore magna aliqua. "
)


class FakeTextSource:
    """Serves per-path page texts and document info from memory.

    Paths registered with ``broken=True`` raise on every access, like an
    unreadable PDF.
    """

    def __init__(self) -> None:
        self.docs: dict[str, dict] = {}
        self.written: list[tuple[str, str, str]] = []
        self.write_ok = True

    def add(
        self,
        path: Path,
        pages: list[str],
        *,
        page_count: Optional[int] = None,
        title: str = "",
        author: str = "",
        broken: bool = False,
    ) -> Path:
        self.docs[str(path)] = {
            "pages": pages,
            "page_count": len(pages) if page_count is None else page_count,
            "title": title,
            "author": author,
            "broken": broken,
        }
        return path

    def _doc(self, path: Path) -> dict:
        doc = self.docs.get(str(path))
        if doc is None or doc["broken"]:
            raise OSError(f"cannot open {path}")
        return doc

    def page_count(self, path: Path) -> int:
        return self._doc(path)["page_count"]

    def page_text(self, path: Path, page_no: int) -> str:
        pages = self._doc(path)["pages"]
        if 1 <= page_no <= len(pages):
            return pages[page_no - 1]
        return ""

    def text(self, path: Path, first: int, last: int) -> str:
        return "\n".join(self.page_text(path, n) for n in range(first, last + 1))

    def info_title(self, path: Path) -> str:
        return self._doc(path)["title"]

    def info_author(self, path: Path) -> str:
        return self._doc(path)["author"]

    def set_document_info(self, path: Path, title: str, author: str) -> bool:
        self.written.append((str(path), title, author))
        return self.write_ok


@pytest.fixture
def fake_source() -> FakeTextSource:
    return FakeTextSource()


@pytest.fixture
def classifier(fake_source):
    from pdforganizer import DocumentTypeClassifier

    return DocumentTypeClassifier(fake_source)


@pytest.fixture
def extractor(fake_source, classifier):
    from pdforganizer import MetadataExtractor

    return MetadataExtractor(fake_source, classifier)


@pytest.fixture
def synthesizer(classifier, extractor):
    from pdforganizer import NameSynthesizer

    return NameSynthesizer(classifier, extractor)


@pytest.fixture
def state_machine(tmp_path: Path):
    from pdforganizer import RecordStateMachine, RecordStore

    return RecordStateMachine(RecordStore(tmp_path / "filerecords.json"))


@pytest.fixture
def make_pdf(tmp_path: Path):
    """Factory writing a blank-page PDF with optional document info."""

    def _make(
        name: str,
        *,
        pages: int = 1,
        title: Optional[str] = None,
        author: Optional[str] = None,
        folder: Optional[Path] = None,
    ) -> Path:
        from pypdf import PdfWriter

        writer = PdfWriter()
        for _ in range(pages):
            writer.add_blank_page(width=200, height=200)
        info = {}
        if title is not None:
            info["/Title"] = title
        if author is not None:
            info["/Author"] = author
        if info:
            writer.add_metadata(info)
        target = (folder or tmp_path) / name
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "wb") as fh:
            writer.write(fh)
        log.debug("make_pdf: wrote %s (%s pages)", target, pages)
        return target

    return _make
