"""Confidence-scored document type classification.

Every type is scored by the same function, driven by a per-type
:class:`TypeRule`: page-count bands, keyword density, structural regex
signals, layout tiers and filename hints.  Scores are clamped to
``[0, 100]``; the best type wins and exact ties go to the type declared
first in :class:`DocumentType`.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .models import DocumentType, DocumentTypeResult
from .sources import TextSource
from .utils import CLASSIFIER_SAMPLE_PAGES, TYPE_THRESHOLD

log = logging.getLogger(__name__)

GENERIC_CONFIDENCE = 10.0
FILENAME_HINT_BONUS = 15.0

_BULLET_RE = re.compile(r"^\s*(?:[•▪●◦►○➢*>-]|\d{1,2}[.)])\s+")


# ---------------------------------------------------------------------------
# Rule table types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PageBand:
    """Adds *bonus* when ``low <= page_count <= high`` (None = unbounded)."""

    low: Optional[int]
    high: Optional[int]
    bonus: float

    def applies(self, page_count: int) -> bool:
        if self.low is not None and page_count < self.low:
            return False
        if self.high is not None and page_count > self.high:
            return False
        return True


@dataclass(frozen=True)
class Signal:
    """Regex searched in the lower-cased sample text."""

    pattern: re.Pattern
    bonus: float


@dataclass(frozen=True)
class Tier:
    """Threshold step for layout metrics; the first matching tier counts."""

    threshold: float
    bonus: float


@dataclass(frozen=True)
class TypeRule:
    doc_type: DocumentType
    page_bands: tuple[PageBand, ...] = ()
    keywords: tuple[str, ...] = ()
    keyword_weight: float = 0.4
    signals: tuple[Signal, ...] = ()
    filename_hints: tuple[str, ...] = ()
    # Presentation layout: bullet line ratio at least / avg chars per page below
    bullet_tiers: tuple[Tier, ...] = ()
    sparse_page_tiers: tuple[Tier, ...] = ()


def _signal(pattern: str, bonus: float) -> Signal:
    return Signal(re.compile(pattern, re.MULTILINE), bonus)


# ---------------------------------------------------------------------------
# Keyword lists (bilingual, lower-case substring match)
# ---------------------------------------------------------------------------

EBOOK_KEYWORDS = (
    "capítulo", "chapter", "sumário", "table of contents", "prefácio",
    "preface", "isbn", "copyright", "editora", "publisher",
    "todos os direitos reservados", "all rights reserved", "edição",
    "edition", "epílogo", "epilogue", "agradecimentos", "acknowledgments",
    "dedicatória", "dedication",
)

MAGAZINE_KEYWORDS = (
    "revista", "magazine", "assinatura", "subscribe", "assinante",
    "entrevista", "interview", "capa", "cover story", "nesta edição",
    "in this issue", "publicidade", "advertising", "editor-chefe",
    "editor in chief", "colunistas", "columnists",
)

ARTICLE_KEYWORDS = (
    "artigo", "article", "publicado em", "published", "palavras-chave",
    "keywords", "autor", "author", "leia também", "read more", "fonte",
    "source", "opinião", "opinion",
)

SCIENTIFIC_PAPER_KEYWORDS = (
    "abstract", "introduction", "methodology", "methods", "results",
    "discussion", "conclusion", "references", "doi", "et al", "resumo",
    "introdução", "metodologia", "resultados", "discussão", "conclusão",
    "referências", "bibliografia", "university", "universidade",
)

NEWSPAPER_KEYWORDS = (
    "jornal", "newspaper", "editorial", "manchete", "headline", "notícias",
    "news", "reportagem", "redação", "classificados", "caderno",
    "correspondente", "colunista", "daily", "gazette", "tribune",
)

PRESENTATION_KEYWORDS = (
    "apresentação", "presentation", "slide", "agenda", "obrigado",
    "thank you", "perguntas", "questions", "palestrante", "speaker",
    "apresentado por", "presented by", "webinar", "workshop",
)

_PT_MONTHS = (
    "janeiro|fevereiro|março|marco|abril|maio|junho|julho|agosto|"
    "setembro|outubro|novembro|dezembro"
)
_EN_MONTHS = (
    "january|february|march|april|may|june|july|august|september|"
    "october|november|december"
)


# ---------------------------------------------------------------------------
# Rule table, in tie-break order
# ---------------------------------------------------------------------------

TYPE_RULES: tuple[TypeRule, ...] = (
    TypeRule(
        DocumentType.EBOOK,
        page_bands=(PageBand(None, 4, -30), PageBand(31, None, 20)),
        keywords=EBOOK_KEYWORDS,
        signals=(
            _signal(r"^\s*(?:cap[íi]tulo|chapter)\s+(?:\d+|[ivxlc]+)\b", 15),
            _signal(r"\bisbn(?:-1[03])?[:\s]*[\dx-]{10,17}", 10),
        ),
        filename_hints=("livro", "ebook", "e-book", "book"),
    ),
    TypeRule(
        DocumentType.MAGAZINE,
        page_bands=(
            PageBand(None, 9, -20),
            PageBand(301, None, -20),
            PageBand(20, 200, 20),
        ),
        keywords=MAGAZINE_KEYWORDS,
        signals=(
            _signal(r"\bvol\.?\s*\d+|\bissue\s*\d+|\bno\.\s*\d+|\bn[º°]\s*\d+", 15),
        ),
        filename_hints=("revista", "magazine"),
    ),
    TypeRule(
        DocumentType.ARTICLE,
        page_bands=(PageBand(2, 20, 15), PageBand(41, None, -20)),
        keywords=ARTICLE_KEYWORDS,
        keyword_weight=0.5,
        signals=(
            _signal(r"^\s*(?:por|by)\s+[^\W\d_]+\s+[^\W\d_]+", 10),
            _signal(r"\bpublicado em\b|\bpublished (?:on|in)\b", 10),
        ),
        filename_hints=("artigo", "article"),
    ),
    TypeRule(
        DocumentType.SCIENTIFIC_PAPER,
        page_bands=(
            PageBand(None, 2, -20),
            PageBand(51, None, -20),
            PageBand(5, 30, 15),
        ),
        keywords=SCIENTIFIC_PAPER_KEYWORDS,
        signals=(
            _signal(r"\babstract\b|\bresumo\b", 10),
            _signal(r"\bintroduction\b|\bintrodução\b", 10),
            _signal(r"\bconclusions?\b|\bconclusão\b|\bconclusões\b", 10),
            _signal(r"\breferences\b|\breferências\b|\bbibliography\b", 10),
        ),
        filename_hints=("paper", "thesis", "tese", "dissertação", "dissertation"),
    ),
    TypeRule(
        DocumentType.NEWSPAPER,
        page_bands=(PageBand(None, 3, -30), PageBand(8, None, 15)),
        keywords=NEWSPAPER_KEYWORDS,
        signals=(
            _signal(
                rf"\b\d{{1,2}}\s+de\s+(?:{_PT_MONTHS})\s+de\s+\d{{4}}\b"
                rf"|\b(?:{_EN_MONTHS})\s+\d{{1,2}},\s+\d{{4}}\b",
                15,
            ),
        ),
        filename_hints=("jornal", "newspaper", "gazette", "gazeta"),
    ),
    TypeRule(
        DocumentType.PRESENTATION,
        page_bands=(
            PageBand(None, 4, -10),
            PageBand(10, 60, 20),
            PageBand(101, None, -30),
        ),
        keywords=PRESENTATION_KEYWORDS,
        filename_hints=("apresentação", "apresentacao", "presentation", "slides", "palestra"),
        bullet_tiers=(Tier(0.3, 20), Tier(0.15, 10)),
        sparse_page_tiers=(Tier(500, 20), Tier(1000, 10)),
    ),
)

RULES_BY_TYPE = {rule.doc_type: rule for rule in TYPE_RULES}


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


@dataclass
class DocumentSample:
    """Text features shared by every type's scoring pass."""

    page_count: int
    pages: list[str]
    filename: str

    @property
    def text(self) -> str:
        return "\n".join(self.pages).lower()

    @property
    def bullet_ratio(self) -> float:
        lines = [ln for page in self.pages for ln in page.splitlines() if ln.strip()]
        if not lines:
            return 0.0
        return sum(1 for ln in lines if _BULLET_RE.match(ln)) / len(lines)

    @property
    def avg_chars_per_page(self) -> float:
        if not self.pages:
            return 0.0
        return sum(len(page.strip()) for page in self.pages) / len(self.pages)


def keyword_density(text: str, keywords: tuple[str, ...]) -> float:
    """Fraction of *keywords* present in *text* (already lower-cased)."""
    if not keywords:
        return 0.0
    return sum(1 for kw in keywords if kw in text) / len(keywords)


def _tier_bonus(value: float, tiers: tuple[Tier, ...], *, at_least: bool) -> float:
    for tier in tiers:
        if (value >= tier.threshold) if at_least else (value < tier.threshold):
            return tier.bonus
    return 0.0


def score_rule(rule: TypeRule, sample: DocumentSample) -> float:
    """Confidence for one type, clamped to ``[0, 100]``."""
    text = sample.text
    score = 0.0

    for band in rule.page_bands:
        if band.applies(sample.page_count):
            score += band.bonus

    score += keyword_density(text, rule.keywords) * 100 * rule.keyword_weight

    for signal in rule.signals:
        if signal.pattern.search(text):
            score += signal.bonus

    if rule.bullet_tiers and sample.pages:
        score += _tier_bonus(sample.bullet_ratio, rule.bullet_tiers, at_least=True)
    # pages without any text mean no text layer, not sparse slides
    if rule.sparse_page_tiers and sample.avg_chars_per_page > 0:
        score += _tier_bonus(
            sample.avg_chars_per_page, rule.sparse_page_tiers, at_least=False
        )

    stem = sample.filename.lower()
    if any(hint in stem for hint in rule.filename_hints):
        score += FILENAME_HINT_BONUS

    return max(0.0, min(100.0, score))


class DocumentTypeClassifier:
    """Scores every :class:`DocumentType` for a PDF and ranks them."""

    def __init__(
        self,
        source: TextSource,
        *,
        rules: tuple[TypeRule, ...] = TYPE_RULES,
        sample_pages: int = CLASSIFIER_SAMPLE_PAGES,
        threshold: float = TYPE_THRESHOLD,
    ) -> None:
        self.source = source
        self.rules = rules
        self.sample_pages = sample_pages
        self.threshold = threshold

    def sample(self, path: Path) -> DocumentSample:
        page_count = self.source.page_count(path)
        pages = [
            self.source.page_text(path, page_no)
            for page_no in range(1, min(page_count, self.sample_pages) + 1)
        ]
        return DocumentSample(page_count=page_count, pages=pages, filename=path.stem)

    def classify(self, path: Path) -> list[DocumentTypeResult]:
        """All types with their confidence, best first.

        Unreadable documents score 0 everywhere except Generic.
        """
        try:
            sample = self.sample(path)
        except Exception as exc:
            log.warning("Cannot read %s for classification: %s", path.name, exc)
            sample = None

        scores = {rule.doc_type: 0.0 for rule in self.rules}
        if sample is not None:
            for rule in self.rules:
                scores[rule.doc_type] = score_rule(rule, sample)

        results = [
            DocumentTypeResult(doc_type, scores.get(doc_type, 0.0))
            for doc_type in DocumentType
            if doc_type is not DocumentType.GENERIC
        ]
        results.append(DocumentTypeResult(DocumentType.GENERIC, GENERIC_CONFIDENCE))
        # sorted() is stable, so equal scores keep declaration order
        ranked = sorted(results, key=lambda r: r.confidence, reverse=True)
        log.debug(
            "%s: %s",
            path.name,
            ", ".join(f"{r.doc_type.value}={r.confidence:.1f}" for r in ranked),
        )
        return ranked

    def best(self, path: Path) -> DocumentTypeResult:
        return self.classify(path)[0]

    def confidence(self, path: Path, doc_type: DocumentType) -> float:
        for result in self.classify(path):
            if result.doc_type is doc_type:
                return result.confidence
        return 0.0

    def is_type(self, path: Path, doc_type: DocumentType) -> bool:
        return self.confidence(path, doc_type) >= self.threshold

    def is_ebook(self, path: Path) -> bool:
        return self.is_type(path, DocumentType.EBOOK)
