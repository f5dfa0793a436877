"""Persistent per-file decision memory.

``RecordStore`` keeps one live ``FileRecord`` per path in a JSON file.
``RecordStateMachine`` applies the sticky transitions on top of it:
once a rename or a metadata update is rejected the file is never offered
again for that decision.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, Optional

from .models import DocumentType, FileRecord, Proposal, RecordState
from .utils import TYPE_THRESHOLD, load_record_entries, save_record_entries

log = logging.getLogger(__name__)


class RecordStore:
    """JSON-file-backed record store; ``path=None`` keeps records in memory."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = path
        self._records: dict[str, FileRecord] = {}
        if path is not None:
            self._load()

    def _load(self) -> None:
        for entry in load_record_entries(self.path):
            try:
                record = FileRecord.from_dict(entry)
            except (TypeError, ValueError) as exc:
                log.warning("Skipping malformed record in %s: %s", self.path, exc)
                continue
            self._records[record.file_path] = record
        log.debug("Loaded %s records from %s", len(self._records), self.path)

    def save(self) -> None:
        if self.path is None:
            return
        save_record_entries(self.path, [r.to_dict() for r in self._records.values()])

    def get_by_path(self, file_path: str) -> Optional[FileRecord]:
        return self._records.get(file_path)

    def add(self, record: FileRecord) -> None:
        self._records[record.file_path] = record
        self.save()

    def add_many(self, records: Iterable[FileRecord]) -> None:
        for record in records:
            self._records[record.file_path] = record
        self.save()

    def update(self, record: FileRecord, previous_path: Optional[str] = None) -> None:
        """Store *record*, re-keying it when its path changed from *previous_path*."""
        if previous_path is not None and previous_path != record.file_path:
            self._records.pop(previous_path, None)
        self._records[record.file_path] = record
        self.save()

    def all_records(self) -> list[FileRecord]:
        return list(self._records.values())


class RecordStateMachine:
    """Idempotent, monotonic decision transitions per file path."""

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    @staticmethod
    def _minimal(file_path: str) -> FileRecord:
        return FileRecord(file_path=file_path, original_name=Path(file_path).name)

    def record_proposal(self, proposal: Proposal) -> FileRecord:
        """Create or overwrite the proposal for a path, keeping its flags."""
        existing = self.store.get_by_path(proposal.file_path)
        result = proposal.document_type
        record = FileRecord(
            file_path=proposal.file_path,
            original_name=(
                existing.original_name
                if existing is not None and existing.original_name
                else Path(proposal.file_path).name
            ),
            proposed_name=proposal.proposed_name,
            document_type=result.doc_type.value,
            confidence=result.confidence,
            extracted_title=proposal.title,
            extracted_author=proposal.author,
            is_ebook=(
                result.doc_type is DocumentType.EBOOK
                and result.confidence >= TYPE_THRESHOLD
            ),
            state=existing.state if existing is not None else RecordState(),
        )
        self.store.add(record)
        return record

    def _transition(
        self,
        file_path: str,
        step: Callable[[RecordState], RecordState],
        new_path: Optional[str] = None,
    ) -> FileRecord:
        record = self.store.get_by_path(file_path)
        if record is None and new_path is not None:
            # a repeated rename finds the record already under its new path
            record = self.store.get_by_path(new_path)
            if record is not None:
                file_path = new_path
        created = record is None
        if record is None:
            record = self._minimal(file_path)

        state = step(record.state)
        target_path = new_path or record.file_path
        if not created and state == record.state and target_path == record.file_path:
            return record

        record.state = state
        record.file_path = target_path
        record.operation_date = datetime.now()
        if created:
            self.store.add(record)
        else:
            self.store.update(record, previous_path=file_path)
        return record

    def mark_renamed(self, file_path: str, new_path: str) -> FileRecord:
        return self._transition(file_path, RecordState.accept, new_path=new_path)

    def mark_rejected(self, file_path: str) -> FileRecord:
        return self._transition(file_path, RecordState.reject)

    def mark_metadata_updated(self, file_path: str) -> FileRecord:
        return self._transition(file_path, RecordState.accept_metadata)

    def mark_metadata_rejected(self, file_path: str) -> FileRecord:
        return self._transition(file_path, RecordState.reject_metadata)

    def is_rejected(self, file_path: str) -> bool:
        record = self.store.get_by_path(file_path)
        return record is not None and record.rejected

    def is_metadata_rejected(self, file_path: str) -> bool:
        record = self.store.get_by_path(file_path)
        return record is not None and record.metadata_update_rejected

    def history(self) -> list[FileRecord]:
        return sorted(self.store.all_records(), key=lambda r: r.operation_date)
