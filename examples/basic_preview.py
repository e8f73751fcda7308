"""Basic PDF preview example.

Lays out a small report with QTextDocument for whatever page format the
preview asks for, and shows it with printing, sharing and format controls.
"""

import logging
import sys

from PySide6.QtCore import QBuffer, QIODevice, QMarginsF, QSizeF
from PySide6.QtGui import QPageLayout, QPageSize, QPdfWriter, QTextDocument
from PySide6.QtWidgets import QApplication, QMainWindow, QMessageBox

from pdf_preview import A4, A5, PageFormat, PdfPreviewWidget, PreviewAction, PreviewConfig

REPORT_HTML = """
<h1>Quarterly Report</h1>
<p>This document is rebuilt for every page format and orientation the
preview asks for, so the text always reflows to the paper.</p>
""" + "".join(
    f"<h2>Section {i}</h2><p>{'Lorem ipsum dolor sit amet. ' * 40}</p>"
    for i in range(1, 8)
)


def build_report(page_format: PageFormat) -> bytes:
    """Lay out the report as PDF bytes for ``page_format``.

    Runs on the preview's worker thread, so it only touches objects it creates.
    """
    buffer = QBuffer()
    buffer.open(QIODevice.OpenModeFlag.WriteOnly)

    writer = QPdfWriter(buffer)
    writer.setTitle("Quarterly Report")
    writer.setPageLayout(QPageLayout(
        QPageSize(
            QSizeF(page_format.width, page_format.height),
            QPageSize.Unit.Point,
            "",
            QPageSize.SizeMatchPolicy.FuzzyMatch,
        ),
        QPageLayout.Orientation.Portrait,
        QMarginsF(
            page_format.margin_left,
            page_format.margin_top,
            page_format.margin_right,
            page_format.margin_bottom,
        ),
        QPageLayout.Unit.Point,
    ))

    document = QTextDocument()
    document.setHtml(REPORT_HTML)
    document.print_(writer)

    data = bytes(buffer.data())
    buffer.close()
    return data


def main():
    logging.basicConfig(level=logging.INFO)
    app = QApplication(sys.argv)

    window = QMainWindow()
    window.setWindowTitle("PDF Preview - Basic Example")
    window.resize(900, 1000)

    # ===== EXAMPLE 1: Every control enabled (default) =====
    config = PreviewConfig(
        pdf_file_name="quarterly-report.pdf",
        page_formats={"A4": A4, "A5": A5},
        share_extra_subject="Quarterly report",
    )

    # ===== EXAMPLE 2: Preset - fixed layout, print and share only =====
    # config = ConfigPresets.simple()

    # ===== EXAMPLE 3: Customize a preset =====
    # preview = PdfPreviewWidget(
    #     build_report,
    #     preset="readonly",
    #     customize={"max_page_width": 600, "show_error_details": True},
    # )

    def show_format(widget, source, page_format):
        QMessageBox.information(widget, "Page format", str(page_format))

    preview = PdfPreviewWidget(
        build_report,
        config=config,
        actions=[PreviewAction(text="Format info", on_pressed=show_format)],
    )
    preview.printed.connect(lambda: print("Document printed"))
    preview.print_failed.connect(lambda e: print(f"Printing failed: {e}"))
    preview.shared.connect(lambda: print("Document shared"))
    preview.error_changed.connect(lambda e: e and print(f"Preview error: {e}"))

    window.setCentralWidget(preview)
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
