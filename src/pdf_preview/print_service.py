"""Printing through the Qt print dialog.

Pages are rendered with pypdfium2 and painted onto a QPrinter one at a
time, so only a single page bitmap is held in memory. Printing to a PDF
file copies the selected pages with pikepdf instead, keeping the vector
content.
"""

import io
import logging
from abc import ABC, abstractmethod
from typing import Optional

from PySide6.QtCore import QMarginsF, QSizeF, Qt
from PySide6.QtGui import QPageLayout, QPageSize, QPainter
from PySide6.QtPrintSupport import QPrintDialog, QPrinter
from PySide6.QtWidgets import QWidget

from .errors import PrintError
from .page_format import DocumentSource, PageFormat
from .raster import page_count, raster_pdf
from .ui_translations import get_translations

logger = logging.getLogger(__name__)


class PrintService(ABC):
    """Hands a document to the platform's printing system."""

    @abstractmethod
    def layout_pdf(
        self,
        document_source: DocumentSource,
        name: str,
        page_format: PageFormat,
        dynamic_layout: bool = True
    ) -> bool:
        """Print a document built on demand.

        Args:
            document_source: Builds the PDF bytes for a page format
            name: Job name shown by the print system
            page_format: Format to lay the document out with
            dynamic_layout: Rebuild the document for the paper and margins
                the user picks in the print dialog

        Returns:
            True if the job was sent, False if the user cancelled

        Raises:
            PrintError: If printing failed
        """


def page_layout_from_format(page_format: PageFormat) -> QPageLayout:
    """Convert a PageFormat to a QPageLayout in points."""
    landscape = page_format.is_landscape
    portrait = page_format.portrait
    page_size = QPageSize(
        QSizeF(portrait.width, portrait.height),
        QPageSize.Unit.Point,
        "",
        QPageSize.SizeMatchPolicy.FuzzyMatch,
    )
    orientation = (
        QPageLayout.Orientation.Landscape if landscape
        else QPageLayout.Orientation.Portrait
    )
    margins = QMarginsF(
        page_format.margin_left,
        page_format.margin_top,
        page_format.margin_right,
        page_format.margin_bottom,
    )
    return QPageLayout(page_size, orientation, margins, QPageLayout.Unit.Point)


def page_format_from_layout(layout: QPageLayout) -> PageFormat:
    """Read paper size and margins, in points, from a page layout."""
    rect = layout.fullRect(QPageLayout.Unit.Point)
    margins = layout.margins(QPageLayout.Unit.Point)
    return PageFormat(
        width=rect.width(),
        height=rect.height(),
        margin_left=margins.left(),
        margin_top=margins.top(),
        margin_right=margins.right(),
        margin_bottom=margins.bottom(),
    )


def export_pdf_pages(pdf_data: bytes, output_path: str, from_page: int, to_page: int) -> None:
    """Export specific pages from PDF to a new file using pikepdf.

    Args:
        pdf_data: Source PDF as bytes
        output_path: Destination file path
        from_page: First page to export (1-indexed)
        to_page: Last page to export (1-indexed, inclusive)

    Raises:
        PrintError: If the export fails
    """
    import pikepdf

    try:
        with pikepdf.open(io.BytesIO(pdf_data)) as pdf:
            pdf_output = pikepdf.new()
            try:
                total_pages = len(pdf.pages)
                from_page = max(1, min(from_page, total_pages))
                to_page = max(from_page, min(to_page, total_pages))

                for page_num in range(from_page - 1, to_page):
                    pdf_output.pages.append(pdf.pages[page_num])

                pdf_output.save(output_path)
            finally:
                pdf_output.close()
    except pikepdf.PdfError as e:
        raise PrintError(f"PDF export failed: {e}") from e
    except OSError as e:
        raise PrintError(f"Could not write {output_path}: {e}") from e


class QtPrintService(PrintService):
    """Print service backed by QPrintDialog and QPainter.

    Args:
        dpi: Resolution pages are rendered at before painting
        fit_to_page: Scale each page to the printable area
        parent: Parent widget for the print dialog
    """

    def __init__(self, dpi: int = 300, fit_to_page: bool = True, parent: Optional[QWidget] = None):
        self.dpi = dpi
        self.fit_to_page = fit_to_page
        self.parent = parent
        self.tr = get_translations()

    def layout_pdf(
        self,
        document_source: DocumentSource,
        name: str,
        page_format: PageFormat,
        dynamic_layout: bool = True
    ) -> bool:
        printer = QPrinter(QPrinter.PrinterMode.HighResolution)
        printer.setDocName(name)
        printer.setPageLayout(page_layout_from_format(page_format))

        dialog = QPrintDialog(printer, self.parent)
        dialog.setWindowTitle(self.tr['print_dialog_title'].format(name=name))
        if not dialog.exec():
            logger.info("Print of '%s' cancelled by user", name)
            return False

        if dynamic_layout:
            page_format = page_format_from_layout(printer.pageLayout())
            logger.debug("Re-laying out '%s' for %s", name, page_format)

        pdf_data = document_source(page_format)
        total_pages = page_count(pdf_data)

        # 0 means the user did not restrict the range
        from_page = printer.fromPage() or 1
        to_page = printer.toPage() or total_pages

        output_file = printer.outputFileName()
        if printer.outputFormat() == QPrinter.OutputFormat.PdfFormat and output_file:
            export_pdf_pages(pdf_data, output_file, from_page, to_page)
            logger.info("Exported pages %d-%d of '%s' to %s", from_page, to_page, name, output_file)
            return True

        self.print_pages(printer, pdf_data, from_page, to_page)
        logger.info("Sent pages %d-%d of '%s' to %s", from_page, to_page, name, printer.printerName())
        return True

    def print_pages(self, printer: QPrinter, pdf_data: bytes, from_page: int, to_page: int) -> None:
        """Render -> print -> release for each page of the range.

        Args:
            printer: Configured printer
            pdf_data: PDF file bytes
            from_page: First page (1-indexed)
            to_page: Last page (1-indexed, inclusive)

        Raises:
            PrintError: If the printer cannot be started or any page fails
        """
        painter = QPainter()
        if not painter.begin(printer):
            raise PrintError("Failed to start printer")

        errors = []
        is_first_page = True
        try:
            for page in raster_pdf(pdf_data, self.dpi, range(from_page - 1, to_page)):
                try:
                    # Set orientation before newPage/first page draw
                    if page.width > page.height:
                        printer.setPageOrientation(QPageLayout.Orientation.Landscape)
                    else:
                        printer.setPageOrientation(QPageLayout.Orientation.Portrait)

                    if not is_first_page and not printer.newPage():
                        raise PrintError("Failed to create new page")

                    # Re-query page rect after orientation change
                    page_rect = printer.pageRect(QPrinter.Unit.DevicePixel)
                    q_image = page.to_qimage()

                    if self.fit_to_page:
                        q_image = q_image.scaled(
                            int(page_rect.width()),
                            int(page_rect.height()),
                            Qt.AspectRatioMode.KeepAspectRatio,
                            Qt.TransformationMode.SmoothTransformation
                        )
                    painter.drawImage(0, 0, q_image)
                    is_first_page = False
                except PrintError as e:
                    errors.append(self.tr['page_error'].format(page=page.index + 1, error=e))
        finally:
            painter.end()

        if errors:
            raise PrintError('; '.join(errors[:5]))
