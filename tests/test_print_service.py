"""Tests for the Qt print service."""

import pikepdf
import pytest
from PySide6.QtGui import QPageLayout
from PySide6.QtPrintSupport import QPrinter

from conftest import make_pdf
from pdf_preview import print_service
from pdf_preview.errors import PrintError
from pdf_preview.page_format import A4, PageFormat
from pdf_preview.print_service import (
    QtPrintService, export_pdf_pages, page_format_from_layout, page_layout_from_format
)

pytestmark = pytest.mark.usefixtures("qapp")


def pdf_page_count(path):
    with pikepdf.open(path) as pdf:
        return len(pdf.pages)


class FakePrintDialog:
    """Stands in for QPrintDialog; optionally redirects output to a PDF file."""

    accept = True
    output_file = None
    instances = []

    def __init__(self, printer, parent=None):
        self.printer = printer
        self.title = None
        FakePrintDialog.instances.append(self)

    def setWindowTitle(self, title):
        self.title = title

    def exec(self):
        if self.output_file:
            self.printer.setOutputFormat(QPrinter.OutputFormat.PdfFormat)
            self.printer.setOutputFileName(self.output_file)
        return 1 if self.accept else 0


@pytest.fixture
def fake_dialog(monkeypatch):
    FakePrintDialog.accept = True
    FakePrintDialog.output_file = None
    FakePrintDialog.instances = []
    monkeypatch.setattr(print_service, "QPrintDialog", FakePrintDialog)
    return FakePrintDialog


def test_page_layout_round_trip():
    layout = page_layout_from_format(A4.landscape)

    assert layout.orientation() == QPageLayout.Orientation.Landscape
    page_format = page_format_from_layout(layout)
    assert page_format.is_landscape
    assert page_format.width == pytest.approx(A4.landscape.width, abs=1)
    assert page_format.margin_left == pytest.approx(A4.margin_left, abs=0.5)


def test_export_pdf_pages(tmp_path):
    output = tmp_path / "out.pdf"
    export_pdf_pages(make_pdf(4), str(output), 2, 3)
    assert pdf_page_count(output) == 2


def test_export_clamps_range(tmp_path):
    output = tmp_path / "out.pdf"
    export_pdf_pages(make_pdf(2), str(output), 0, 10)
    assert pdf_page_count(output) == 2


def test_export_invalid_pdf(tmp_path):
    with pytest.raises(PrintError):
        export_pdf_pages(b"not a pdf", str(tmp_path / "out.pdf"), 1, 1)


def test_print_pages_to_pdf_printer(tmp_path):
    output = tmp_path / "printed.pdf"
    printer = QPrinter(QPrinter.PrinterMode.ScreenResolution)
    printer.setOutputFormat(QPrinter.OutputFormat.PdfFormat)
    printer.setOutputFileName(str(output))

    QtPrintService(dpi=36).print_pages(printer, make_pdf(3), 1, 2)

    assert pdf_page_count(output) == 2


class TestLayoutPdf:

    def test_cancelled_dialog(self, fake_dialog):
        fake_dialog.accept = False
        formats = []

        result = QtPrintService().layout_pdf(
            lambda page_format: formats.append(page_format) or make_pdf(1), "Invoice", A4
        )

        assert result is False
        assert formats == []
        assert "Invoice" in fake_dialog.instances[0].title

    def test_print_to_pdf_file(self, fake_dialog, tmp_path):
        output = tmp_path / "invoice.pdf"
        fake_dialog.output_file = str(output)
        formats = []

        def source(page_format):
            formats.append(page_format)
            return make_pdf(2, page_format)

        result = QtPrintService().layout_pdf(source, "Invoice", A4)

        assert result is True
        assert pdf_page_count(output) == 2
        assert len(formats) == 1
        assert isinstance(formats[0], PageFormat)

    def test_static_layout_keeps_format(self, fake_dialog, tmp_path):
        fake_dialog.output_file = str(tmp_path / "out.pdf")
        page_format = PageFormat(300, 400)
        formats = []

        def source(fmt):
            formats.append(fmt)
            return make_pdf(1, fmt)

        QtPrintService().layout_pdf(source, "Label", page_format, dynamic_layout=False)

        assert formats == [page_format]
