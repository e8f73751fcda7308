"""PDF Preview Widget for PySide6.

An embeddable preview for documents built on demand. The host supplies a
callable that lays out a PDF for a page format; the widget renders the
pages with pdfium, and offers page format, orientation, zoom, printing
and sharing.
"""

__version__ = "1.0.0"

from .actions import PreviewAction
from .config import ConfigPresets, PreviewConfig
from .controller import PreviewController, PreviewState, compute_dpi
from .errors import (
    DocumentBuildError,
    PreviewError,
    PrintError,
    RasterError,
    RasterUnavailableError,
    ShareError,
)
from .page_format import (
    A3,
    A4,
    A5,
    A6,
    CM,
    INCH,
    LEGAL,
    LETTER,
    MM,
    POINT,
    DocumentSource,
    PageFormat,
    default_page_format,
)
from .print_service import PrintService, QtPrintService
from .printing_info import PrintingInfo, probe_printing_info
from .raster import RasterPage, raster_pdf
from .share_service import QtShareService, ShareService
from .widget import PdfPreviewWidget

__all__ = [
    "PdfPreviewWidget",
    "PreviewController",
    "PreviewState",
    "PreviewConfig",
    "ConfigPresets",
    "PreviewAction",
    "PageFormat",
    "DocumentSource",
    "default_page_format",
    "A3",
    "A4",
    "A5",
    "A6",
    "LETTER",
    "LEGAL",
    "POINT",
    "INCH",
    "CM",
    "MM",
    "RasterPage",
    "raster_pdf",
    "compute_dpi",
    "PrintingInfo",
    "probe_printing_info",
    "PrintService",
    "QtPrintService",
    "ShareService",
    "QtShareService",
    "PreviewError",
    "RasterUnavailableError",
    "DocumentBuildError",
    "RasterError",
    "PrintError",
    "ShareError",
]
