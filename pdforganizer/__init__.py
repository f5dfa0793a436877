"""PDF type classification, title/author extraction and standardized renaming.

Public API -- all symbols that tests and external code import live here.
Internally the code is split across focused submodules; this file
re-exports the stable public surface so ``from pdforganizer import X`` works.
"""

from .batching import BatchCoordinator, batch, total_batches
from .classification import TYPE_RULES, DocumentTypeClassifier, score_rule
from .extraction import MetadataExtractor
from .models import (
    AppSettings,
    DocumentType,
    DocumentTypeResult,
    FileRecord,
    MetadataCandidate,
    Proposal,
    RecordState,
)
from .naming import (
    NameSynthesizer,
    ParsedName,
    build_standard_name,
    is_standardized,
    parse_standard_name,
    sanitize_file_name,
)
from .organizer import FileOrganizer
from .records import RecordStateMachine, RecordStore
from .sources import PdfTextSource, TextSource, list_pdf_files, rename_file, updated_path
from .utils import (
    DEFAULT_BATCH_SIZE,
    MAX_FILE_NAME_LENGTH,
    TYPE_THRESHOLD,
    UNKNOWN_PLACEHOLDER,
)

__all__ = [
    # Models
    "AppSettings",
    "DocumentType",
    "DocumentTypeResult",
    "FileRecord",
    "MetadataCandidate",
    "Proposal",
    "RecordState",
    # Constants
    "DEFAULT_BATCH_SIZE",
    "MAX_FILE_NAME_LENGTH",
    "TYPE_THRESHOLD",
    "UNKNOWN_PLACEHOLDER",
    # Sources
    "TextSource",
    "PdfTextSource",
    "list_pdf_files",
    "rename_file",
    "updated_path",
    # Classification
    "TYPE_RULES",
    "DocumentTypeClassifier",
    "score_rule",
    # Extraction
    "MetadataExtractor",
    # Naming
    "NameSynthesizer",
    "ParsedName",
    "build_standard_name",
    "is_standardized",
    "parse_standard_name",
    "sanitize_file_name",
    # Decision memory
    "RecordStore",
    "RecordStateMachine",
    # Batching
    "BatchCoordinator",
    "batch",
    "total_batches",
    # Service
    "FileOrganizer",
]
