"""Service facade: directory selection, proposals, renames, metadata refresh."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .batching import BatchCoordinator, batch, total_batches
from .classification import DocumentTypeClassifier
from .extraction import MetadataExtractor
from .models import AppSettings, FileRecord
from .naming import NameSynthesizer, is_standardized, parse_standard_name
from .records import RecordStateMachine, RecordStore
from .sources import PdfTextSource, TextSource, list_pdf_files, rename_file
from .utils import (
    DEFAULT_BATCH_SIZE,
    RECORDS_FILE_NAME,
    SETTINGS_FILE_NAME,
    UNKNOWN_PLACEHOLDER,
    load_settings,
    save_settings,
)

log = logging.getLogger(__name__)


class FileOrganizer:
    """Ties analysis, decision memory and the filesystem together."""

    def __init__(
        self,
        *,
        source: Optional[TextSource] = None,
        records: Optional[RecordStateMachine] = None,
        settings_path: Optional[Path] = Path(SETTINGS_FILE_NAME),
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        self.source = source or PdfTextSource()
        self.records = records or RecordStateMachine(RecordStore(Path(RECORDS_FILE_NAME)))
        self.classifier = DocumentTypeClassifier(self.source)
        self.extractor = MetadataExtractor(self.source, self.classifier)
        self.synthesizer = NameSynthesizer(self.classifier, self.extractor)
        self.batches = BatchCoordinator(
            self.records, self.list_pdf_files, batch_size=batch_size
        )
        self.settings_path = settings_path
        self.settings = (
            load_settings(settings_path) if settings_path is not None else AppSettings()
        )

        self.directory: Optional[Path] = None
        last = self.settings.last_directory
        if last and Path(last).is_dir():
            self.directory = Path(last)
            log.debug("Restored last directory: %s", last)

    # -- directory ---------------------------------------------------------

    def set_directory(self, directory: Path) -> bool:
        if not directory.is_dir():
            log.warning("Directory not found: %s", directory)
            return False
        self.directory = directory.resolve()
        self.settings.last_directory = str(self.directory)
        if self.settings_path is not None:
            save_settings(self.settings_path, self.settings)
        return True

    def list_pdf_files(self) -> list[Path]:
        if self.directory is None:
            return []
        return list_pdf_files(self.directory)

    def list_non_standardized(self) -> list[Path]:
        return self.batches.non_standardized()

    def list_standardized(self) -> list[Path]:
        return self.batches.standardized()

    def get_batch(self, index: int, size: Optional[int] = None) -> list[Path]:
        return self.batches.get_batch(index, size)

    def total_batches(self, size: Optional[int] = None) -> int:
        return self.batches.total_batches(size)

    # -- proposals ---------------------------------------------------------

    def process_file(self, path: Path) -> FileRecord:
        return self.records.record_proposal(self.synthesizer.proposal(path))

    def process_files(self, paths: list[Path]) -> list[FileRecord]:
        return [self.process_file(path) for path in paths]

    def process_in_batches(
        self, paths: list[Path], size: int = DEFAULT_BATCH_SIZE
    ) -> list[list[FileRecord]]:
        return [
            self.process_files(batch(paths, index, size))
            for index in range(total_batches(paths, size))
        ]

    # -- decisions ---------------------------------------------------------

    def rename_file(self, path: Path, new_name: str) -> bool:
        """Rename on disk, then remember the acceptance under the new path."""
        new_path = rename_file(path, new_name)
        if new_path is None:
            return False
        try:
            self.records.mark_renamed(str(path), str(new_path))
        except OSError as exc:
            log.error(
                "Renamed %s -> %s but could not record it: %s",
                path.name,
                new_path.name,
                exc,
            )
            return False
        return True

    def reject_file(self, path: Path) -> bool:
        try:
            self.records.mark_rejected(str(path))
        except OSError as exc:
            log.error("Could not record rejection of %s: %s", path.name, exc)
            return False
        log.info("Rejected proposal for %s", path.name)
        return True

    def extract_info_from_file_name(self, path: Path) -> tuple[str, str]:
        parsed = parse_standard_name(path.name)
        return (
            parsed.author or UNKNOWN_PLACEHOLDER,
            parsed.title or UNKNOWN_PLACEHOLDER,
        )

    def update_metadata(self, path: Path) -> bool:
        """Write title/author from a standardized name into ``_updated.pdf``."""
        if not path.exists() or not is_standardized(path.name):
            log.warning("Metadata update skipped for %s", path.name)
            return False
        author, title = self.extract_info_from_file_name(path)
        if not self.source.set_document_info(path, title, author):
            return False
        self.records.mark_metadata_updated(str(path))
        return True

    def reject_metadata_update(self, path: Path) -> bool:
        try:
            self.records.mark_metadata_rejected(str(path))
        except OSError as exc:
            log.error("Could not record metadata rejection of %s: %s", path.name, exc)
            return False
        log.info("Rejected metadata update for %s", path.name)
        return True

    def history(self) -> list[FileRecord]:
        return self.records.history()
