"""Title and author extraction with confidence-ranked candidates.

Candidates come from document info, type-aware layout heuristics, a
general first-lines heuristic, wrapped multi-line titles, explicit author
markers and multi-author lines.  The highest confidence wins; ties keep
insertion order.  When nothing is found the current file name is parsed
as ``<Prefix> - <Author> - <Title>``.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Callable, Optional

from .classification import DocumentTypeClassifier
from .models import DocumentType, MetadataCandidate
from .naming import parse_standard_name
from .sources import TextSource
from .utils import AUTHOR_SEARCH_PAGES

log = logging.getLogger(__name__)

METADATA_CONFIDENCE = 90.0
AUTHOR_MARKER_CONFIDENCE = 85.0

AUTHOR_MARKERS = (
    "autor:", "author:", "by:", "por:", "escrito por", "written by",
    "autoria de", "authored by", "criado por", "created by",
)
PRESENTER_PHRASES = ("apresentado por", "presented by", "palestrante", "speaker")
AUTHOR_CONTEXT_WORDS = (
    "autor", "autores", "autora", "author", "authors", "by", "por",
    "organizado por", "organização", "edited by", "editado por",
)
CONNECTOR_WORDS = frozenset(
    {
        "a", "o", "as", "os", "e", "de", "da", "do", "das", "dos", "em", "no",
        "na", "para", "com", "sobre", "um", "uma", "the", "of", "and", "for",
        "in", "on", "to", "with", "an", "at", "from", "by",
    }
)
AUTHOR_SEPARATORS = (",", " e ", " and ", " & ")

# Matched against the original text so match offsets stay valid for slicing
_AUTHOR_MARKER_RES = tuple(
    (marker, re.compile(re.escape(marker), re.IGNORECASE)) for marker in AUTHOR_MARKERS
)
_PRESENTER_RE = re.compile(
    "|".join(re.escape(p) for p in PRESENTER_PHRASES), re.IGNORECASE
)
_ABSTRACT_RE = re.compile("abstract", re.IGNORECASE)

_EMAIL_RE = re.compile(r"[\w.+-]+@[\w-]+(?:\.[\w-]+)+")
_NAME_RE = re.compile(r"\b[A-ZÀ-Ý][a-zà-ÿ]+\s+[A-ZÀ-Ý][a-zà-ÿ]+")
_CAPITALIZED_WORDS_RE = re.compile(
    r"^[A-ZÀ-Ý][\w'.-]*(?:\s+(?:[A-ZÀ-Ý][\w'.-]*|d[aeo]s?|van|von|de))*"
    r"\s+[A-ZÀ-Ý][\w'.-]*$"
)
_PAGE_NUMBER_RE = re.compile(
    r"^(?:p[áa]g(?:ina)?\.?|page)?\s*\d+(?:\s*(?:/|de|of)\s*\d+)?$", re.IGNORECASE
)
_NUMBERED_ITEM_RE = re.compile(r"^(?:\d+(?:\.\d+)*[.)]?|[ivxlc]+[.)])\s+", re.IGNORECASE)
_COPYRIGHT_MARKERS = (
    "copyright", "©", "(c)", "isbn", "todos os direitos", "all rights reserved",
)
_DATE_LINE_RE = re.compile(r"\d{1,2}\s+de\s+\w+\s+de\s+\d{4}|\w+\s+\d{1,2},\s+\d{4}")
_TRAILING_PUNCTUATION = ".,;:!?"


# ---------------------------------------------------------------------------
# Line helpers
# ---------------------------------------------------------------------------


def split_lines(text: str) -> list[str]:
    """Non-empty, stripped lines of *text*."""
    return [ln.strip() for ln in text.splitlines() if ln.strip()]


def is_copyright_line(line: str) -> bool:
    lower = line.lower()
    return any(marker in lower for marker in _COPYRIGHT_MARKERS)


def is_page_number(line: str) -> bool:
    return bool(_PAGE_NUMBER_RE.match(line.strip()))


def is_numbered_item(line: str) -> bool:
    return bool(_NUMBERED_ITEM_RE.match(line))


def starts_upper(line: str) -> bool:
    return bool(line) and line[0].isupper()


def digit_ratio(line: str) -> float:
    return sum(ch.isdigit() for ch in line) / len(line) if line else 0.0


def join_wrapped(first: str, second: str) -> str:
    """Join two wrapped lines; a trailing hyphen glues the word back."""
    if first.endswith("-"):
        return first[:-1] + second
    return f"{first} {second}"


def ends_with_connector(line: str) -> bool:
    words = line.split()
    return bool(words) and words[-1].lower() in CONNECTOR_WORDS


def _clean_value(value: str) -> str:
    return " ".join(value.strip(" \t:-–—,;").split())


def _best(candidates: list[MetadataCandidate]) -> Optional[MetadataCandidate]:
    best: Optional[MetadataCandidate] = None
    for candidate in candidates:
        if best is None or candidate.confidence > best.confidence:
            best = candidate
    return best


# ---------------------------------------------------------------------------
# Extractor
# ---------------------------------------------------------------------------


class MetadataExtractor:
    """Collects ranked title and author candidates for a PDF."""

    def __init__(
        self,
        source: TextSource,
        classifier: Optional[DocumentTypeClassifier] = None,
        *,
        author_pages: int = AUTHOR_SEARCH_PAGES,
    ) -> None:
        self.source = source
        self.classifier = classifier or DocumentTypeClassifier(source)
        self.author_pages = author_pages

    # -- safe source access ------------------------------------------------

    def _safe(self, path: Path, label: str, fn: Callable[[], str]) -> str:
        try:
            return fn() or ""
        except Exception as exc:
            log.warning("Cannot read %s of %s: %s", label, path.name, exc)
            return ""

    def _page(self, path: Path, page_no: int) -> str:
        return self._safe(path, f"page {page_no}", lambda: self.source.page_text(path, page_no))

    def _pages(self, path: Path, first: int, last: int) -> str:
        return self._safe(
            path, f"pages {first}-{last}", lambda: self.source.text(path, first, last)
        )

    def _resolve_type(self, path: Path, doc_type: Optional[DocumentType]) -> DocumentType:
        if doc_type is not None:
            return doc_type
        return self.classifier.best(path).doc_type

    # -- titles ------------------------------------------------------------

    def collect_title_candidates(
        self, path: Path, doc_type: Optional[DocumentType] = None
    ) -> list[MetadataCandidate]:
        candidates: list[MetadataCandidate] = []

        info_title = _clean_value(self._safe(path, "title", lambda: self.source.info_title(path)))
        if info_title:
            candidates.append(MetadataCandidate(info_title, METADATA_CONFIDENCE, "metadata"))

        doc_type = self._resolve_type(path, doc_type)
        first_page = split_lines(self._page(path, 1))

        if doc_type is DocumentType.SCIENTIFIC_PAPER:
            candidates.extend(self._paper_titles(path))
        elif doc_type is DocumentType.ARTICLE:
            candidates.extend(self._article_titles(first_page))
        elif doc_type is DocumentType.EBOOK:
            candidates.extend(self._ebook_titles(path))
        elif doc_type is DocumentType.PRESENTATION:
            candidates.extend(self._presentation_titles(first_page))
        elif doc_type in (DocumentType.NEWSPAPER, DocumentType.MAGAZINE):
            candidates.extend(self._headline_titles(first_page))

        candidates.extend(self._general_titles(first_page))
        candidates.extend(self._multiline_titles(first_page))
        return candidates

    def _paper_span(self, path: Path) -> list[str]:
        text = self._pages(path, 1, 2)
        match = _ABSTRACT_RE.search(text)
        if match is None:
            return []
        return split_lines(text[: match.start()])

    def _paper_titles(self, path: Path) -> list[MetadataCandidate]:
        span = self._paper_span(path)
        author_lines = {c.value for c in self._paper_authors_from_span(span)}
        for line in reversed(span):
            if _EMAIL_RE.search(line) or _clean_value(line) in author_lines:
                continue
            if starts_upper(line):
                return [MetadataCandidate(line, 80, "paper-before-abstract")]
        return []

    def _article_titles(self, lines: list[str]) -> list[MetadataCandidate]:
        title, _ = self._article_title_index(lines)
        return [MetadataCandidate(title, 75, "article-first-line")] if title else []

    @staticmethod
    def _article_title_index(lines: list[str]) -> tuple[Optional[str], int]:
        for i, line in enumerate(lines[:10]):
            if (
                10 < len(line) < 150
                and starts_upper(line)
                and not line.endswith(":")
                and not is_numbered_item(line)
            ):
                return line, i
        return None, -1

    def _ebook_lines(self, path: Path) -> list[str]:
        return split_lines(self._pages(path, 1, 3))

    def _ebook_titles(self, path: Path) -> list[MetadataCandidate]:
        for line in self._ebook_lines(path)[:15]:
            if (
                3 <= len(line) < 100
                and not is_copyright_line(line)
                and not is_page_number(line)
            ):
                return [MetadataCandidate(line, 70, "ebook-cover")]
        return []

    def _presentation_titles(self, lines: list[str]) -> list[MetadataCandidate]:
        for line in lines[:5]:
            if 3 <= len(line) < 150 and not is_page_number(line):
                return [MetadataCandidate(line, 75, "presentation-first-slide")]
        return []

    def _headline_titles(self, lines: list[str]) -> list[MetadataCandidate]:
        for line in lines[:15]:
            if (
                15 <= len(line) <= 120
                and starts_upper(line)
                and not line.endswith(".")
                and not is_numbered_item(line)
                and not is_copyright_line(line)
                and not _DATE_LINE_RE.search(line)
            ):
                return [MetadataCandidate(line, 65, "headline")]
        return []

    def _general_titles(self, lines: list[str]) -> list[MetadataCandidate]:
        for line in lines[:10]:
            if not (3 < len(line) < 200):
                continue
            if is_page_number(line) or is_copyright_line(line):
                continue
            if not any(ch.isalpha() for ch in line):
                continue
            confidence = 60.0
            if starts_upper(line):
                confidence += 5
            if line[-1] not in _TRAILING_PUNCTUATION:
                confidence += 5
            if len(line) < 10:
                confidence -= 10
            if digit_ratio(line) > 0.25:
                confidence -= 10
            return [MetadataCandidate(line, confidence, "general-first-line")]
        return []

    @staticmethod
    def _title_part(line: str) -> bool:
        return (
            3 <= len(line) <= 100
            and not is_copyright_line(line)
            and not is_page_number(line)
            and not line.endswith(".")
            and not is_numbered_item(line)
        )

    def _multiline_titles(self, lines: list[str]) -> list[MetadataCandidate]:
        head = lines[:10]
        for i in range(len(head) - 1):
            first, second = head[i], head[i + 1]
            if not (starts_upper(first) and self._title_part(first) and self._title_part(second)):
                continue
            joined = join_wrapped(first, second)
            found = [MetadataCandidate(joined, 70, "multiline-2")]
            if i + 2 < len(head) and self._title_part(head[i + 2]) and (
                second.endswith("-") or ends_with_connector(second)
            ):
                found.append(
                    MetadataCandidate(join_wrapped(joined, head[i + 2]), 65, "multiline-3")
                )
            return found
        return []

    # -- authors -----------------------------------------------------------

    def collect_author_candidates(
        self, path: Path, doc_type: Optional[DocumentType] = None
    ) -> list[MetadataCandidate]:
        candidates: list[MetadataCandidate] = []

        info_author = _clean_value(
            self._safe(path, "author", lambda: self.source.info_author(path))
        )
        if info_author:
            candidates.append(MetadataCandidate(info_author, METADATA_CONFIDENCE, "metadata"))

        doc_type = self._resolve_type(path, doc_type)
        first_page = split_lines(self._page(path, 1))

        if doc_type is DocumentType.SCIENTIFIC_PAPER:
            candidates.extend(self._paper_authors_from_span(self._paper_span(path)))
        elif doc_type is DocumentType.ARTICLE:
            candidates.extend(self._article_authors(first_page))
        elif doc_type is DocumentType.EBOOK:
            candidates.extend(self._ebook_authors(path))
        elif doc_type is DocumentType.PRESENTATION:
            candidates.extend(self._presentation_authors(first_page))

        search_text = self._pages(path, 1, self.author_pages)
        candidates.extend(self._marker_authors(search_text))
        candidates.extend(self._multi_authors(split_lines(search_text)[:30]))
        return candidates

    def _paper_authors_from_span(self, span: list[str]) -> list[MetadataCandidate]:
        found: list[MetadataCandidate] = []
        for i, line in enumerate(span):
            if not _EMAIL_RE.search(line):
                continue
            value = _clean_value(_EMAIL_RE.sub("", line))
            if not any(ch.isalpha() for ch in value) and i > 0:
                value = _clean_value(span[i - 1])
            if value and not any(c.value == value for c in found):
                found.append(MetadataCandidate(value, 75, "paper-email"))
        return found

    def _article_authors(self, lines: list[str]) -> list[MetadataCandidate]:
        _, idx = self._article_title_index(lines)
        if idx < 0:
            return []
        for line in lines[idx + 1 : idx + 4]:
            if (
                3 <= len(line) <= 100
                and starts_upper(line)
                and not line.endswith(":")
                and not is_numbered_item(line)
                and not is_copyright_line(line)
            ):
                value = _clean_value(re.sub(r"^(?:por|by)\s+", "", line, flags=re.IGNORECASE))
                return [MetadataCandidate(value, 70, "article-byline")] if value else []
        return []

    def _ebook_authors(self, path: Path) -> list[MetadataCandidate]:
        lines = self._ebook_lines(path)[:20]
        for line in lines:
            match = re.match(r"^(?:por|by)\s+(.+)$", line, re.IGNORECASE)
            if match and _clean_value(match.group(1)):
                return [MetadataCandidate(_clean_value(match.group(1)), 80, "ebook-by-line")]

        titles = self._ebook_titles(path)
        title = titles[0].value if titles else None
        for line in lines:
            if line != title and len(line) < 60 and _CAPITALIZED_WORDS_RE.match(line):
                return [MetadataCandidate(line, 65, "ebook-capitalized-name")]
        return []

    def _presentation_authors(self, lines: list[str]) -> list[MetadataCandidate]:
        head = lines[:10]
        titles = self._presentation_titles(lines)
        title = titles[0].value if titles else None
        found: list[MetadataCandidate] = []
        for i, line in enumerate(head):
            if line == title or is_page_number(line) or not (3 <= len(line) < 80):
                continue
            match = _PRESENTER_RE.search(line)
            if match is not None:
                value = _clean_value(line[match.end() :])
                if value:
                    found.append(MetadataCandidate(value, 75, "presenter-phrase"))
                continue
            if (
                line.endswith(":")
                or any(ch.isdigit() for ch in line)
                or len(line.split()) > 6
                or not _NAME_RE.search(line)
            ):
                continue
            context = " ".join(head[max(0, i - 1) : i + 2]).lower()
            if any(p in context for p in PRESENTER_PHRASES):
                found.append(MetadataCandidate(_clean_value(line), 75, "presenter-context"))
            else:
                found.append(MetadataCandidate(_clean_value(line), 60, "presentation-name"))
        return found

    def _marker_authors(self, text: str) -> list[MetadataCandidate]:
        found: list[MetadataCandidate] = []
        for marker, pattern in _AUTHOR_MARKER_RES:
            for match in pattern.finditer(text):
                end = text.find("\n", match.end())
                value = _clean_value(text[match.end() : end if end >= 0 else len(text)])
                if value and len(value) < 100 and not any(c.value == value for c in found):
                    found.append(
                        MetadataCandidate(value, AUTHOR_MARKER_CONFIDENCE, f"marker:{marker}")
                    )
        return found

    def _multi_authors(self, lines: list[str]) -> list[MetadataCandidate]:
        found: list[MetadataCandidate] = []
        for line in lines:
            if len(line) > 150 or not any(sep in line for sep in AUTHOR_SEPARATORS):
                continue
            lower = line.lower()
            context = next(
                (w for w in AUTHOR_CONTEXT_WORDS if re.search(rf"\b{re.escape(w)}\b", lower)),
                None,
            )
            if context is not None:
                value = _clean_value(
                    re.sub(
                        rf"^.*?\b{re.escape(context)}\b\s*:?",
                        "",
                        line,
                        count=1,
                        flags=re.IGNORECASE,
                    )
                )
                confidence = 80.0
            elif _NAME_RE.search(line):
                value = _clean_value(line)
                confidence = 65.0
            else:
                continue
            if value and not any(c.value == value for c in found):
                found.append(MetadataCandidate(value, confidence, "multi-author"))
        return found

    # -- resolved fields ---------------------------------------------------

    def extract_title(
        self, path: Path, doc_type: Optional[DocumentType] = None
    ) -> Optional[str]:
        best = _best(self.collect_title_candidates(path, doc_type))
        if best is not None:
            log.debug("%s: title %r via %s (%.0f)", path.name, best.value, best.method, best.confidence)
            return best.value
        return parse_standard_name(path.name).title

    def extract_author(
        self, path: Path, doc_type: Optional[DocumentType] = None
    ) -> Optional[str]:
        best = _best(self.collect_author_candidates(path, doc_type))
        if best is not None:
            log.debug("%s: author %r via %s (%.0f)", path.name, best.value, best.method, best.confidence)
            return best.value
        return parse_standard_name(path.name).author
