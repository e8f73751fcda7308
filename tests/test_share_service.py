"""Tests for the desktop share service and temp file handling."""

import pytest
from PySide6.QtCore import QRect, QUrlQuery

from pdf_preview import share_service
from pdf_preview.errors import ShareError
from pdf_preview.share_service import QtShareService, TempFileManager, build_mailto_url


@pytest.fixture
def temp_files():
    manager = TempFileManager()
    yield manager
    manager.cleanup()


@pytest.fixture
def opened(monkeypatch):
    urls = []

    def open_url(url):
        urls.append(url)
        return True

    monkeypatch.setattr(share_service.QDesktopServices, "openUrl", open_url)
    return urls


class TestTempFileManager:

    def test_writes_file_with_name(self, temp_files):
        path = temp_files.create_temp_pdf(b"%PDF", "report.pdf")
        assert path.name == "report.pdf"
        assert path.read_bytes() == b"%PDF"
        assert path.parent.name.startswith("pdf_preview_")

    def test_duplicate_names_get_counter(self, temp_files):
        first = temp_files.create_temp_pdf(b"1", "report.pdf")
        second = temp_files.create_temp_pdf(b"2", "report.pdf")
        assert second.name == "report_1.pdf"
        assert first.read_bytes() == b"1"

    def test_path_components_are_dropped(self, temp_files):
        path = temp_files.create_temp_pdf(b"x", "../../evil.pdf")
        assert path.parent == temp_files.temp_dir

    def test_cleanup_removes_directory(self, temp_files):
        path = temp_files.create_temp_pdf(b"x", "a.pdf")
        directory = path.parent
        temp_files.cleanup()
        assert not directory.exists()

    def test_write_failure(self, temp_files, monkeypatch):
        def fail(self, data):
            raise OSError("disk full")

        monkeypatch.setattr(share_service.Path, "write_bytes", fail)
        with pytest.raises(ShareError):
            temp_files.create_temp_pdf(b"x", "a.pdf")


def test_mailto_url():
    url = build_mailto_url(["a@example.com", "b@example.com"], "Invoice", "See attached")

    assert url.scheme() == "mailto"
    assert url.path() == "a@example.com,b@example.com"
    query = QUrlQuery(url)
    assert query.queryItemValue("subject") == "Invoice"
    assert query.queryItemValue("body") == "See attached"


def test_mailto_url_without_query():
    url = build_mailto_url(None, None, None)
    assert url.scheme() == "mailto"
    assert not url.hasQuery()


class TestQtShareService:

    def test_opens_file_without_mail_metadata(self, temp_files, opened):
        service = QtShareService(temp_files)

        assert service.share_pdf(b"%PDF", QRect(), "doc.pdf") is True

        assert len(opened) == 1
        assert opened[0].isLocalFile()
        assert opened[0].toLocalFile().endswith("doc.pdf")

    def test_opens_mail_client_and_folder(self, temp_files, opened):
        service = QtShareService(temp_files)

        assert service.share_pdf(
            b"%PDF", QRect(0, 0, 10, 10), "doc.pdf", subject="Hello", emails=["a@example.com"]
        ) is True

        assert [url.scheme() for url in opened] == ["mailto", "file"]
        assert opened[1].toLocalFile().rstrip("/") == str(temp_files.temp_dir)

    def test_refused_by_desktop(self, temp_files, monkeypatch):
        monkeypatch.setattr(share_service.QDesktopServices, "openUrl", lambda url: False)
        service = QtShareService(temp_files)

        assert service.share_pdf(b"%PDF", QRect(), "doc.pdf") is False
