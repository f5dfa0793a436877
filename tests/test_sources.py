"""Tests for the pypdf text source and filesystem helpers."""

from __future__ import annotations

from pathlib import Path

from pdforganizer import PdfTextSource, list_pdf_files, rename_file, updated_path


class TestPdfTextSource:
    def test_page_access_is_one_based(self, make_pdf):
        path = make_pdf("blank.pdf", pages=3)
        source = PdfTextSource()
        assert source.page_count(path) == 3
        assert source.page_text(path, 1) == ""
        assert source.page_text(path, 0) == ""
        assert source.page_text(path, 99) == ""
        assert source.text(path, 1, 50) == "\n\n"

    def test_document_info(self, make_pdf):
        path = make_pdf("info.pdf", title="  My Title ", author="Jane Doe")
        source = PdfTextSource()
        assert source.info_title(path) == "My Title"
        assert source.info_author(path) == "Jane Doe"

    def test_missing_info_is_empty(self, make_pdf):
        path = make_pdf("plain.pdf")
        source = PdfTextSource()
        assert source.info_title(path) == ""
        assert source.info_author(path) == ""

    def test_reader_reopened_after_change(self, make_pdf):
        source = PdfTextSource()
        path = make_pdf("doc.pdf", title="First")
        assert source.info_title(path) == "First"
        make_pdf("doc.pdf", title="A much longer second title")
        assert source.info_title(path) == "A much longer second title"

    def test_set_document_info_writes_sibling(self, make_pdf):
        path = make_pdf("Livro - Jane Doe - My Title.pdf", pages=2)
        source = PdfTextSource()
        assert source.set_document_info(path, "My Title", "Jane Doe") is True

        dest = updated_path(path)
        assert dest.name == "Livro - Jane Doe - My Title_updated.pdf"
        assert dest.exists()

        fresh = PdfTextSource()
        assert fresh.info_title(dest) == "My Title"
        assert fresh.info_author(dest) == "Jane Doe"
        assert fresh.page_count(dest) == 2
        assert fresh.info_title(path) == ""

    def test_set_document_info_failure(self, tmp_path: Path):
        source = PdfTextSource()
        assert source.set_document_info(tmp_path / "missing.pdf", "T", "A") is False
        assert not (tmp_path / "missing_updated.pdf").exists()


class TestFilesystem:
    def test_list_pdf_files(self, tmp_path: Path):
        for name in ("a.pdf", "B.PDF", "notes.txt"):
            (tmp_path / name).write_bytes(b"%PDF-1.4")
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "c.pdf").write_bytes(b"%PDF-1.4")
        assert [p.name for p in list_pdf_files(tmp_path)] == ["B.PDF", "a.pdf"]

    def test_list_missing_folder(self, tmp_path: Path):
        assert list_pdf_files(tmp_path / "nope") == []

    def test_rename(self, tmp_path: Path):
        src = tmp_path / "scan.pdf"
        src.write_bytes(b"%PDF-1.4")
        dest = rename_file(src, "Livro - A - B.pdf")
        assert dest == tmp_path / "Livro - A - B.pdf"
        assert dest.exists() and not src.exists()

    def test_rename_refuses_existing_destination(self, tmp_path: Path):
        src = tmp_path / "scan.pdf"
        src.write_bytes(b"one")
        (tmp_path / "taken.pdf").write_bytes(b"two")
        assert rename_file(src, "taken.pdf") is None
        assert src.exists()
        assert (tmp_path / "taken.pdf").read_bytes() == b"two"

    def test_rename_missing_source(self, tmp_path: Path):
        assert rename_file(tmp_path / "ghost.pdf", "x.pdf") is None

    def test_updated_path(self):
        assert updated_path(Path("/d/x.pdf")) == Path("/d/x_updated.pdf")
