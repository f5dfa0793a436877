"""Docling OCR text source for scanned PDFs without a text layer."""

from __future__ import annotations

import importlib.util
import logging
import re
import shutil
import time
from pathlib import Path
from typing import Any, Optional

from .sources import PdfTextSource

log = logging.getLogger(__name__)

_MD_HEADING_RE = re.compile(r"^\s*#{1,6}\s+", re.MULTILINE)


def create_ocr_converter(
    *,
    num_threads: int = 4,
    ocr_batch_size: int = 4,
) -> tuple[Any, str]:
    """Build a Docling ``DocumentConverter`` with OCR enabled.

    Returns:
        (converter, ocr_engine) where ``ocr_engine`` is a best-effort profile.
    """
    t0 = time.time()
    from docling.datamodel.accelerator_options import AcceleratorOptions
    from docling.datamodel.base_models import InputFormat
    from docling.datamodel.pipeline_options import (
        EasyOcrOptions,
        OcrAutoOptions,
        PdfPipelineOptions,
        TesseractOcrOptions,
    )
    from docling.document_converter import DocumentConverter, PdfFormatOption

    if importlib.util.find_spec("easyocr") is not None:
        ocr_options, ocr_engine = EasyOcrOptions(), "easyocr"
    elif shutil.which("tesseract") is not None:
        ocr_options, ocr_engine = TesseractOcrOptions(), "tesseract"
    else:
        ocr_options, ocr_engine = OcrAutoOptions(), "auto"

    pipeline_options = PdfPipelineOptions(
        do_ocr=True,
        ocr_options=ocr_options,
        accelerator_options=AcceleratorOptions(num_threads=max(1, num_threads)),
        ocr_batch_size=max(1, ocr_batch_size),
    )
    converter = DocumentConverter(
        format_options={
            InputFormat.PDF: PdfFormatOption(pipeline_options=pipeline_options),
        }
    )
    log.info(
        "Docling OCR converter initialized (%s) in %.2fs",
        ocr_engine,
        time.time() - t0,
    )
    return converter, ocr_engine


class OcrTextSource:
    """Page text from Docling OCR; document info goes through pypdf.

    Each document is converted once and kept for the lifetime of the source.
    Conversion errors propagate so the classifier and extractor can
    contain them like any other unreadable document.
    """

    def __init__(
        self,
        converter: Any = None,
        info_source: Optional[PdfTextSource] = None,
    ) -> None:
        self._converter = converter
        self.info_source = info_source or PdfTextSource()
        self._docs: dict[str, Any] = {}

    @property
    def converter(self) -> Any:
        if self._converter is None:
            self._converter, _ = create_ocr_converter()
        return self._converter

    def _document(self, path: Path) -> Any:
        key = str(path)
        if key not in self._docs:
            t0 = time.time()
            result = self.converter.convert(source=key)
            self._docs[key] = result.document
            log.info("OCR converted %s in %.2fs", path.name, time.time() - t0)
        return self._docs[key]

    def page_count(self, path: Path) -> int:
        return self._document(path).num_pages()

    def page_text(self, path: Path, page_no: int) -> str:
        if page_no < 1 or page_no > self.page_count(path):
            return ""
        markdown = self._document(path).export_to_markdown(page_no=page_no)
        return _MD_HEADING_RE.sub("", markdown)

    def text(self, path: Path, first: int, last: int) -> str:
        last = min(last, self.page_count(path))
        return "\n".join(
            self.page_text(path, page_no) for page_no in range(max(1, first), last + 1)
        )

    def info_title(self, path: Path) -> str:
        return self.info_source.info_title(path)

    def info_author(self, path: Path) -> str:
        return self.info_source.info_author(path)

    def set_document_info(self, path: Path, title: str, author: str) -> bool:
        return self.info_source.set_document_info(path, title, author)
