"""PDF rasterization with pypdfium2."""

import io
import logging
import threading
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

from PySide6.QtGui import QImage

from .errors import RasterError
from .page_format import INCH

logger = logging.getLogger(__name__)

# pdfium is not thread-safe; previews render on a worker while printing
# renders on the GUI thread
_pdfium_lock = threading.RLock()


@dataclass(frozen=True)
class RasterPage:
    """One rendered page.

    ``pixels`` holds packed RGB888 rows, ``width * 3`` bytes each.
    """
    index: int
    width: int
    height: int
    pixels: bytes

    def to_qimage(self) -> QImage:
        """Convert to a QImage that owns its pixel data."""
        image = QImage(
            self.pixels, self.width, self.height, self.width * 3,
            QImage.Format.Format_RGB888
        )
        # QImage does not copy the buffer it is built from
        return image.copy()

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


def _import_pdfium():
    try:
        import pypdfium2 as pdfium
    except ImportError as exc:
        raise RasterError("pypdfium2 is required for PDF rasterization") from exc
    return pdfium


def raster_pdf(
    data: bytes,
    dpi: float,
    pages: Optional[Sequence[int]] = None
) -> Iterator[RasterPage]:
    """Rasterize a PDF document page by page.

    The generator is lazy: each page is rendered only when requested, and
    closing the generator early releases the document.

    Args:
        data: PDF file bytes
        dpi: Target resolution in dots per inch
        pages: Zero-based page indices to render, in order. ``None`` renders
            every page. Indices outside the document are skipped.

    Yields:
        RasterPage for each rendered page

    Raises:
        RasterError: If the bytes are not a readable PDF
    """
    pdfium = _import_pdfium()
    if dpi <= 0:
        raise ValueError(f"dpi must be positive, got {dpi}")

    with _pdfium_lock:
        try:
            pdf = pdfium.PdfDocument(io.BytesIO(data))
            total_pages = len(pdf)
        except Exception as e:
            raise RasterError(f"Failed to load PDF: {e}") from e

    try:
        indices = range(total_pages) if pages is None else pages
        scale = dpi / INCH

        for page_idx in indices:
            if not 0 <= page_idx < total_pages:
                logger.debug("Skipping page %d, document has %d pages", page_idx, total_pages)
                continue

            with _pdfium_lock:
                page = pdf.get_page(page_idx)
                try:
                    bitmap = page.render(scale=scale)
                    pil_image = bitmap.to_pil().convert("RGB")
                    width, height = pil_image.size
                    image_bytes = pil_image.tobytes("raw", "RGB")
                    del bitmap
                    del pil_image
                finally:
                    page.close()

            # The lock is not held while the consumer handles the page
            yield RasterPage(index=page_idx, width=width, height=height, pixels=image_bytes)
    finally:
        with _pdfium_lock:
            pdf.close()


def page_count(data: bytes) -> int:
    """Get page count from PDF data.

    Returns:
        Number of pages

    Raises:
        RasterError: If neither pypdfium2 nor pikepdf can read the bytes
    """
    try:
        pdfium = _import_pdfium()
        with _pdfium_lock:
            pdf = pdfium.PdfDocument(io.BytesIO(data))
            try:
                return len(pdf)
            finally:
                pdf.close()
    except Exception as e:
        logger.debug("pypdfium2 could not count pages (%s), trying pikepdf", e)

    try:
        import pikepdf
        with pikepdf.open(io.BytesIO(data)) as pdf:
            return len(pdf.pages)
    except Exception as e:
        raise RasterError(f"Unable to read page count: {e}") from e
