"""Shared data models for the organizer."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class DocumentType(str, Enum):
    """Candidate document categories, in tie-break order."""

    EBOOK = "Ebook"
    MAGAZINE = "Magazine"
    ARTICLE = "Article"
    SCIENTIFIC_PAPER = "ScientificPaper"
    NEWSPAPER = "Newspaper"
    PRESENTATION = "Presentation"
    GENERIC = "Generic"


@dataclass(frozen=True)
class DocumentTypeResult:
    doc_type: DocumentType
    confidence: float


@dataclass(frozen=True)
class MetadataCandidate:
    """A title or author guess. ``method`` is diagnostic only."""

    value: str
    confidence: float
    method: str


@dataclass(frozen=True)
class RecordState:
    """Sticky decision flags for one file.

    Transitions only ever set a flag; nothing in this type clears one.
    """

    accepted: bool = False
    rejected: bool = False
    metadata_updated: bool = False
    metadata_update_rejected: bool = False

    def accept(self) -> RecordState:
        return replace(self, accepted=True)

    def reject(self) -> RecordState:
        return replace(self, rejected=True)

    def accept_metadata(self) -> RecordState:
        return replace(self, metadata_updated=True)

    def reject_metadata(self) -> RecordState:
        return replace(self, metadata_update_rejected=True)

    @property
    def rename_status(self) -> str:
        if self.accepted:
            return "accepted"
        if self.rejected:
            return "rejected"
        return "pending"


@dataclass
class FileRecord:
    """Durable decision memory for a single PDF, keyed by ``file_path``."""

    file_path: str
    original_name: str = ""
    proposed_name: str = ""
    document_type: str = ""
    confidence: float = 0.0
    extracted_title: Optional[str] = None
    extracted_author: Optional[str] = None
    is_ebook: bool = False
    state: RecordState = field(default_factory=RecordState)
    operation_date: datetime = field(default_factory=datetime.now)

    @property
    def accepted(self) -> bool:
        return self.state.accepted

    @property
    def rejected(self) -> bool:
        return self.state.rejected

    @property
    def metadata_updated(self) -> bool:
        return self.state.metadata_updated

    @property
    def metadata_update_rejected(self) -> bool:
        return self.state.metadata_update_rejected

    def to_dict(self) -> dict[str, Any]:
        return {
            "file_path": self.file_path,
            "original_name": self.original_name,
            "proposed_name": self.proposed_name,
            "document_type": self.document_type,
            "confidence": self.confidence,
            "extracted_title": self.extracted_title,
            "extracted_author": self.extracted_author,
            "is_ebook": self.is_ebook,
            "accepted": self.state.accepted,
            "rejected": self.state.rejected,
            "metadata_updated": self.state.metadata_updated,
            "metadata_update_rejected": self.state.metadata_update_rejected,
            "operation_date": self.operation_date.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FileRecord:
        """Build a record from its JSON form; raises ValueError on bad input."""
        file_path = data.get("file_path")
        if not isinstance(file_path, str) or not file_path:
            raise ValueError("record without file_path")

        raw_date = data.get("operation_date")
        operation_date = (
            datetime.fromisoformat(raw_date)
            if isinstance(raw_date, str) and raw_date
            else datetime.now()
        )
        return cls(
            file_path=file_path,
            original_name=str(data.get("original_name") or ""),
            proposed_name=str(data.get("proposed_name") or ""),
            document_type=str(data.get("document_type") or ""),
            confidence=float(data.get("confidence") or 0.0),
            extracted_title=data.get("extracted_title"),
            extracted_author=data.get("extracted_author"),
            is_ebook=bool(data.get("is_ebook", False)),
            state=RecordState(
                accepted=bool(data.get("accepted", False)),
                rejected=bool(data.get("rejected", False)),
                metadata_updated=bool(data.get("metadata_updated", False)),
                metadata_update_rejected=bool(
                    data.get("metadata_update_rejected", False)
                ),
            ),
            operation_date=operation_date,
        )


@dataclass
class Proposal:
    """Everything computed for a rename proposal of one file."""

    file_path: str
    proposed_name: str
    document_type: DocumentTypeResult
    title: Optional[str] = None
    author: Optional[str] = None


@dataclass
class AppSettings:
    last_directory: str = ""
