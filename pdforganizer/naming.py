"""Standardized file names: ``<Prefix> - <Author> - <Title>.pdf``.

``build_standard_name``/``NameSynthesizer`` produce such names,
``is_standardized``/``parse_standard_name`` recognise and split them.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from .models import DocumentType, DocumentTypeResult, Proposal
from .utils import MAX_FILE_NAME_LENGTH, UNKNOWN_PLACEHOLDER

if TYPE_CHECKING:
    from .classification import DocumentTypeClassifier
    from .extraction import MetadataExtractor

log = logging.getLogger(__name__)

TYPE_PREFIXES = {
    DocumentType.EBOOK: "Livro",
    DocumentType.MAGAZINE: "Revista",
    DocumentType.ARTICLE: "Artigo",
    DocumentType.SCIENTIFIC_PAPER: "Paper",
    DocumentType.NEWSPAPER: "Jornal",
}
DEFAULT_PREFIX = "Documento"
VALID_PREFIXES = frozenset(p.lower() for p in (*TYPE_PREFIXES.values(), DEFAULT_PREFIX))

# Reserved on at least one common filesystem; applied on every platform
RESERVED_CHARACTERS = frozenset('<>:"/\\|?*') | frozenset(chr(c) for c in range(32))

# Author longer than this is cut so the title survives length truncation
MAX_AUTHOR_LENGTH = 100

# Consecutive hyphens would produce a blank name segment
_HYPHEN_RUN_RE = re.compile(r"-[\s-]*-")


# ---------------------------------------------------------------------------
# Conformance
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ParsedName:
    prefix: Optional[str] = None
    author: Optional[str] = None
    title: Optional[str] = None


def _segments(name: str) -> list[str]:
    stem = Path(name).stem if name.lower().endswith(".pdf") else name
    return stem.split("-")


def is_standardized(name: str) -> bool:
    """Whether *name* (file name or path) follows the naming convention."""
    parts = _segments(Path(name).name)
    if len(parts) < 3:
        return False
    if parts[0].strip().lower() not in VALID_PREFIXES:
        return False
    return bool(parts[1].strip()) and bool(parts[2].strip())


def parse_standard_name(name: str) -> ParsedName:
    """Best-effort split into prefix, author and title.

    Segments past the third are part of the title, since titles may
    contain hyphens.
    """
    parts = [p.strip() for p in _segments(Path(name).name)]
    prefix = parts[0] or None if parts else None
    author = parts[1] or None if len(parts) >= 2 else None
    title = " - ".join(parts[2:]).strip(" -") or None if len(parts) >= 3 else None
    return ParsedName(prefix=prefix, author=author, title=title)


# ---------------------------------------------------------------------------
# Synthesis
# ---------------------------------------------------------------------------


def type_prefix(doc_type: DocumentType) -> str:
    return TYPE_PREFIXES.get(doc_type, DEFAULT_PREFIX)


def sanitize_file_name(name: str) -> str:
    """Replace reserved filename characters with ``_``."""
    return "".join("_" if ch in RESERVED_CHARACTERS else ch for ch in name)


def _field(value: Optional[str], limit: Optional[int] = None) -> str:
    cleaned = _HYPHEN_RUN_RE.sub("-", " ".join((value or "").split())).strip(" -")
    if limit is not None:
        cleaned = cleaned[:limit].rstrip(" -")
    return cleaned or UNKNOWN_PLACEHOLDER


def build_standard_name(
    doc_type: DocumentType,
    author: Optional[str],
    title: Optional[str],
    *,
    max_length: int = MAX_FILE_NAME_LENGTH,
) -> str:
    """Compose, sanitize and length-limit a standardized file name."""
    name = (
        f"{type_prefix(doc_type)} - {_field(author, MAX_AUTHOR_LENGTH)}"
        f" - {_field(title)}.pdf"
    )
    name = sanitize_file_name(name)
    if len(name) > max_length:
        name = name[:max_length] + ".pdf"
    return name


class NameSynthesizer:
    """Proposes standardized names from classification and extraction."""

    def __init__(
        self, classifier: DocumentTypeClassifier, extractor: MetadataExtractor
    ) -> None:
        self.classifier = classifier
        self.extractor = extractor

    def proposal(
        self, path: Path, doc_type: Optional[DocumentTypeResult] = None
    ) -> Proposal:
        resolved = doc_type or self.classifier.best(path)
        title = self.extractor.extract_title(path, resolved.doc_type)
        author = self.extractor.extract_author(path, resolved.doc_type)
        name = build_standard_name(resolved.doc_type, author, title)
        log.info(
            "Proposal for %s: %s (%s %.0f)",
            path.name,
            name,
            resolved.doc_type.value,
            resolved.confidence,
        )
        return Proposal(
            file_path=str(path),
            proposed_name=name,
            document_type=resolved,
            title=title,
            author=author,
        )

    def propose(
        self, path: Path, doc_type: Optional[DocumentTypeResult] = None
    ) -> str:
        return self.proposal(path, doc_type).proposed_name
