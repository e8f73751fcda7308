"""Background tasks that keep document builds and rendering off the GUI thread.

Tasks run on a QThreadPool and report through a signals object created on
the GUI thread, so every result is delivered to the controller as a queued
call. Refresh results carry the generation they were started for; the
controller drops anything that is not current.
"""

import logging
from typing import Callable, Iterable, Optional, Sequence

from PySide6.QtCore import QObject, QRunnable, Signal

from .errors import DocumentBuildError, PreviewError, RasterError
from .page_format import DocumentSource, PageFormat
from .raster import RasterPage

logger = logging.getLogger(__name__)

Rasterizer = Callable[[bytes, float, Optional[Sequence[int]]], Iterable[RasterPage]]


def as_build_error(error: Exception) -> DocumentBuildError:
    wrapped = DocumentBuildError(f"Error while generating a PDF: {error}")
    wrapped.__cause__ = error
    return wrapped


def as_raster_error(error: Exception) -> PreviewError:
    if isinstance(error, PreviewError):
        return error
    wrapped = RasterError(f"Error while rendering the PDF: {error}")
    wrapped.__cause__ = error
    return wrapped


class RefreshSignals(QObject):
    built = Signal(int)               # (generation)
    page_ready = Signal(int, object)  # (generation, RasterPage)
    failed = Signal(int, object)      # (generation, PreviewError)
    finished = Signal(int)            # (generation)


class RefreshTask(QRunnable):
    """Build the document for a format, then rasterize it page by page."""

    def __init__(
        self,
        generation: int,
        document_source: DocumentSource,
        page_format: PageFormat,
        rasterizer: Rasterizer,
        dpi: float,
        pages: Optional[Sequence[int]] = None
    ):
        super().__init__()
        self.generation = generation
        self.document_source = document_source
        self.page_format = page_format
        self.rasterizer = rasterizer
        self.dpi = dpi
        self.pages = list(pages) if pages is not None else None
        self._cancel_requested = False
        self.signals = RefreshSignals()

    def cancel(self):
        self._cancel_requested = True

    @property
    def is_cancelled(self) -> bool:
        return self._cancel_requested

    def run(self):
        if self._cancel_requested:
            logger.debug("Refresh %d cancelled before start", self.generation)
            return

        try:
            data = self.document_source(self.page_format)
        except Exception as e:
            logger.exception("Error while generating a PDF for %s", self.page_format)
            self.signals.failed.emit(self.generation, as_build_error(e))
            return
        if self._cancel_requested:
            logger.debug("Refresh %d cancelled after the build", self.generation)
            return
        self.signals.built.emit(self.generation)

        stream = None
        try:
            stream = iter(self.rasterizer(data, self.dpi, self.pages))
            for page in stream:
                if self._cancel_requested:
                    logger.debug("Refresh %d cancelled while rendering", self.generation)
                    return
                self.signals.page_ready.emit(self.generation, page)
        except Exception as e:
            logger.exception("Error while rendering the PDF")
            self.signals.failed.emit(self.generation, as_raster_error(e))
            return
        finally:
            close = getattr(stream, "close", None)
            if close is not None:
                close()

        if not self._cancel_requested:
            self.signals.finished.emit(self.generation)


class BuildSignals(QObject):
    built = Signal(object)   # (bytes)
    failed = Signal(object)  # (DocumentBuildError)


class BuildTask(QRunnable):
    """Build the document bytes for a format."""

    def __init__(self, document_source: DocumentSource, page_format: PageFormat):
        super().__init__()
        self.document_source = document_source
        self.page_format = page_format
        self.signals = BuildSignals()

    def run(self):
        try:
            data = self.document_source(self.page_format)
        except Exception as e:
            logger.exception("Error while generating a PDF for %s", self.page_format)
            self.signals.failed.emit(as_build_error(e))
            return
        self.signals.built.emit(data)
