"""Tests for the confidence-scored document type classifier."""

from __future__ import annotations

from pathlib import Path

import pytest

from pdforganizer import DocumentType, DocumentTypeClassifier, score_rule
from pdforganizer.classification import (
    GENERIC_CONFIDENCE,
    RULES_BY_TYPE,
    DocumentSample,
    PageBand,
    TypeRule,
    keyword_density,
)

from conftest import FILLER

LONG_PAGE = FILLER * 10


def _scores(classifier, path):
    return {r.doc_type: r.confidence for r in classifier.classify(path)}


class TestScientificPaper:
    def test_forty_page_paper_with_section_markers_wins(self, fake_source, classifier):
        path = fake_source.add(
            Path("/docs/scan_0001.pdf"),
            [
                f"Abstract\n{LONG_PAGE}",
                f"Introduction\n{LONG_PAGE}",
                f"Conclusion\n{LONG_PAGE}",
                f"References\n{LONG_PAGE}",
                LONG_PAGE,
            ],
            page_count=40,
        )
        best = classifier.best(path)
        assert best.doc_type is DocumentType.SCIENTIFIC_PAPER
        assert best.confidence == pytest.approx(48.0)

    def test_section_signals_each_add_ten(self):
        rule = RULES_BY_TYPE[DocumentType.SCIENTIFIC_PAPER]
        base = DocumentSample(page_count=40, pages=[LONG_PAGE], filename="x")
        with_abstract = DocumentSample(
            page_count=40, pages=[f"Abstract {LONG_PAGE}"], filename="x"
        )
        # +10 structural and +2 for one of twenty keywords
        assert score_rule(rule, with_abstract) - score_rule(rule, base) == pytest.approx(12.0)


class TestEbook:
    def test_long_book_with_chapters_is_ebook(self, fake_source, classifier):
        path = fake_source.add(
            Path("/docs/guia.pdf"),
            [
                "O Guia\nEditora Exemplo\nISBN 978-85-333-0227-3\n"
                "Copyright 2004. Todos os direitos reservados.",
                f"Capítulo 1\n{LONG_PAGE}",
                LONG_PAGE,
            ],
            page_count=200,
        )
        assert classifier.best(path).doc_type is DocumentType.EBOOK
        assert classifier.is_ebook(path) is True
        assert classifier.confidence(path, DocumentType.EBOOK) == pytest.approx(55.0)

    def test_confidence_non_decreasing_past_thirty_pages(self):
        rule = RULES_BY_TYPE[DocumentType.EBOOK]
        previous = None
        for pages in (5, 10, 30, 31, 60, 300, 1000):
            sample = DocumentSample(page_count=pages, pages=[LONG_PAGE], filename="x")
            score = score_rule(rule, sample)
            if previous is not None:
                assert score >= previous
            previous = score
        assert previous == pytest.approx(20.0)

    def test_short_document_penalized(self):
        rule = RULES_BY_TYPE[DocumentType.EBOOK]
        sample = DocumentSample(page_count=3, pages=["Capítulo 1 " + LONG_PAGE], filename="x")
        # -30 page band, +15 chapter heading, +2 keyword
        assert score_rule(rule, sample) == 0.0


class TestOtherTypes:
    def test_presentation_bullets_and_sparse_pages(self, fake_source, classifier):
        slide = "Agenda\n• Primeiro ponto\n• Segundo ponto\n• Terceiro ponto"
        path = fake_source.add(Path("/docs/q3.pdf"), [slide] * 5, page_count=20)
        best = classifier.best(path)
        assert best.doc_type is DocumentType.PRESENTATION
        assert best.confidence > 60

    def test_newspaper_date_pattern(self, fake_source, classifier):
        front = (
            "Jornal da Cidade\nSão Paulo, 5 de março de 2024\n"
            "Editorial\nNotícias do caderno principal\n" + LONG_PAGE
        )
        path = fake_source.add(
            Path("/docs/edicao.pdf"), [front] + [LONG_PAGE] * 4, page_count=12
        )
        best = classifier.best(path)
        assert best.doc_type is DocumentType.NEWSPAPER
        assert classifier.is_type(path, DocumentType.NEWSPAPER) is True

    def test_english_date_pattern(self):
        rule = RULES_BY_TYPE[DocumentType.NEWSPAPER]
        plain = DocumentSample(page_count=1, pages=[LONG_PAGE], filename="x")
        dated = DocumentSample(
            page_count=1, pages=[f"March 5, 2024\n{LONG_PAGE}"], filename="x"
        )
        assert score_rule(rule, plain) == 0.0
        assert score_rule(rule, dated) == 0.0  # -30 band still dominates
        dated_long = DocumentSample(
            page_count=8, pages=[f"March 5, 2024\n{LONG_PAGE}"], filename="x"
        )
        assert score_rule(rule, dated_long) == pytest.approx(30.0)

    def test_magazine_issue_markers(self, fake_source, classifier):
        cover = (
            "Revista Exemplo Vol. 12 No. 3\nEntrevista exclusiva\n"
            "Assinatura anual\nNesta edição\n" + LONG_PAGE
        )
        path = fake_source.add(
            Path("/docs/mensal.pdf"), [cover] + [LONG_PAGE] * 4, page_count=60
        )
        assert classifier.best(path).doc_type is DocumentType.MAGAZINE

    def test_filename_hint_bonus(self, fake_source, classifier):
        plain = fake_source.add(Path("/docs/texto.pdf"), [LONG_PAGE], page_count=6)
        hinted = fake_source.add(
            Path("/docs/Artigo sobre algo.pdf"), [LONG_PAGE], page_count=6
        )
        diff = (
            classifier.confidence(hinted, DocumentType.ARTICLE)
            - classifier.confidence(plain, DocumentType.ARTICLE)
        )
        assert diff == pytest.approx(15.0)


class TestFallbacks:
    def test_unreadable_document_is_generic(self, fake_source, classifier):
        path = fake_source.add(Path("/docs/broken.pdf"), [], broken=True)
        results = classifier.classify(path)
        assert results[0].doc_type is DocumentType.GENERIC
        assert results[0].confidence == GENERIC_CONFIDENCE
        assert all(r.confidence == 0.0 for r in results[1:])

    def test_missing_document_is_generic(self, classifier):
        assert classifier.best(Path("/nowhere.pdf")).doc_type is DocumentType.GENERIC

    def test_signal_free_document_falls_to_generic(self, fake_source, classifier):
        path = fake_source.add(Path("/docs/nota.pdf"), [LONG_PAGE], page_count=1)
        assert classifier.best(path).doc_type is DocumentType.GENERIC

    def test_blank_pages_do_not_look_like_slides(self, fake_source, classifier):
        path = fake_source.add(Path("/docs/scan.pdf"), ["", ""], page_count=2)
        scores = _scores(classifier, path)
        assert scores[DocumentType.PRESENTATION] == 0.0

    def test_every_type_reported_best_first(self, fake_source, classifier):
        path = fake_source.add(Path("/docs/a.pdf"), [LONG_PAGE], page_count=12)
        results = classifier.classify(path)
        assert {r.doc_type for r in results} == set(DocumentType)
        confidences = [r.confidence for r in results]
        assert confidences == sorted(confidences, reverse=True)


class TestScoring:
    def test_scores_clamped(self):
        high = TypeRule(DocumentType.EBOOK, page_bands=(PageBand(None, None, 500),))
        low = TypeRule(DocumentType.EBOOK, page_bands=(PageBand(None, None, -500),))
        sample = DocumentSample(page_count=1, pages=["x"], filename="x")
        assert score_rule(high, sample) == 100.0
        assert score_rule(low, sample) == 0.0

    def test_keyword_density(self):
        assert keyword_density("a chapter and a preface", ("chapter", "preface", "isbn", "x")) == 0.5
        assert keyword_density("anything", ()) == 0.0

    def test_page_band_bounds_inclusive(self):
        band = PageBand(5, 30, 15)
        assert band.applies(5) and band.applies(30)
        assert not band.applies(4) and not band.applies(31)

    def test_exact_tie_keeps_declaration_order(self, fake_source):
        """Assumption: an exact tie goes to the type declared first."""
        flat = (PageBand(None, None, 30),)
        rules = (
            TypeRule(DocumentType.MAGAZINE, page_bands=flat),
            TypeRule(DocumentType.EBOOK, page_bands=flat),
        )
        classifier = DocumentTypeClassifier(fake_source, rules=rules)
        path = fake_source.add(Path("/docs/tie.pdf"), [LONG_PAGE], page_count=3)
        results = classifier.classify(path)
        assert [r.doc_type for r in results[:2]] == [
            DocumentType.EBOOK,
            DocumentType.MAGAZINE,
        ]
