"""Preview refresh and pagination state machine.

The controller owns the selected page format, the buffer of rendered pages
and the zoom selection. The buffer lives on the GUI thread; the document
source and the rasterizer run on a worker thread and deliver each page
through a queued signal, so the view shows pages as they arrive.

Transitions:
    IDLE/READY/ERROR --refresh()--> RASTERING
    RASTERING --capability missing / build or raster failure--> ERROR
    RASTERING --stream exhausted--> READY

Only one refresh runs at a time. A refresh requested while another is in
flight is dropped, not queued; the next layout or format change catches up.
"""

import logging
import math
from enum import Enum
from typing import List, Optional, Tuple

from PySide6.QtCore import QObject, QRect, QThreadPool, QTimer, Signal, Slot

from .config import PreviewConfig
from .errors import RasterUnavailableError
from .page_format import INCH, MM, DocumentSource, PageFormat, resolve_page_format
from .print_service import PrintService, QtPrintService
from .printing_info import PrintingInfo, probe_printing_info
from .raster import RasterPage, raster_pdf
from .share_service import QtShareService, ShareService
from .workers import BuildTask, Rasterizer, RefreshTask

logger = logging.getLogger(__name__)

INITIAL_DPI = 10.0
MIN_DPI = 1.0
# Margin around print formats derived from rendered pages
DERIVED_PRINT_MARGIN = 5 * MM


class PreviewState(str, Enum):
    """Lifecycle of the page buffer."""
    IDLE = "idle"
    RASTERING = "rastering"
    ERROR = "error"
    READY = "ready"


def compute_dpi(
    available_width: float,
    max_page_width: Optional[float],
    device_pixel_ratio: float,
    page_format: PageFormat
) -> float:
    """Resolution at which a page fills the available width on screen."""
    width = min(available_width, max_page_width if max_page_width is not None else math.inf)
    dpi = width * device_pixel_ratio / page_format.width * INCH
    return max(dpi, MIN_DPI)


class PreviewController(QObject):
    """Drives the preview of a document built on demand.

    Signals:
        state_changed: PreviewState value after every transition
        page_updated: Index of a page that was added or replaced
        pages_truncated: New buffer length after the document shrank
        error_changed: Current error, or None once cleared
        zoom_changed: Zoomed page index, or None for the list view
        page_format_changed: New effective page format
        refresh_finished: Number of pages received by a completed refresh
        printed / print_failed: Outcome of print_document()
        shared / share_failed: Outcome of share_document()
    """

    state_changed = Signal(str)
    page_updated = Signal(int)
    pages_truncated = Signal(int)
    error_changed = Signal(object)
    zoom_changed = Signal(object)
    page_format_changed = Signal(object)
    refresh_finished = Signal(int)
    printed = Signal()
    print_failed = Signal(object)
    shared = Signal()
    share_failed = Signal(object)

    def __init__(
        self,
        document_source: DocumentSource,
        config: Optional[PreviewConfig] = None,
        info: Optional[PrintingInfo] = None,
        rasterizer: Optional[Rasterizer] = None,
        print_service: Optional[PrintService] = None,
        share_service: Optional[ShareService] = None,
        parent: Optional[QObject] = None
    ):
        """Initialize the controller.

        Args:
            document_source: Builds the PDF bytes for a page format
            config: Preview configuration (defaults to PreviewConfig())
            info: Platform capabilities (probed when omitted)
            rasterizer: Turns PDF bytes into pages (defaults to raster_pdf)
            print_service: Printing backend (defaults to QtPrintService)
            share_service: Sharing backend (defaults to QtShareService)
            parent: Parent QObject (usually the preview widget)
        """
        super().__init__(parent)
        self.config = config or PreviewConfig()
        self._document_source = document_source
        self._info = info if info is not None else probe_printing_info()
        self._rasterizer = rasterizer or raster_pdf
        self._print_service = print_service
        self._share_service = share_service

        # Format selection
        self._page_formats = self.config.effective_page_formats
        self._page_format = resolve_page_format(self.config.initial_page_format, self._page_formats)
        self._landscape: Optional[bool] = None
        if self.config.can_change_page_format and self.config.can_change_orientation:
            self._landscape = self._page_format.is_landscape

        # Buffer and view state
        self._pages: List[RasterPage] = []
        self._state = PreviewState.IDLE
        self._error: Optional[Exception] = None
        self._zoom_index: Optional[int] = None
        self._scroll_restore: Optional[float] = None

        # Layout metrics
        self._dpi = INITIAL_DPI
        self._available_width: Optional[float] = None
        self._pixel_ratio = 1.0

        # Background work. One thread keeps host source calls sequential.
        self._thread_pool = QThreadPool()
        self._thread_pool.setMaxThreadCount(1)
        self._generation = 0
        self._refresh_task: Optional[RefreshTask] = None
        self._share_task: Optional[BuildTask] = None
        self._share_bounds = QRect()

        # Refresh in flight
        self._rastering = False
        self._disposed = False
        self._received = 0

        self._layout_timer = QTimer(self)
        self._layout_timer.setSingleShot(True)
        self._layout_timer.setInterval(self.config.refresh_delay_ms)
        self._layout_timer.timeout.connect(self._on_layout_settled)

    # ---- Read-only state -----------------------------------------------

    @property
    def document_source(self) -> DocumentSource:
        return self._document_source

    @property
    def info(self) -> PrintingInfo:
        return self._info

    @property
    def pages(self) -> Tuple[RasterPage, ...]:
        return tuple(self._pages)

    @property
    def page_count(self) -> int:
        return len(self._pages)

    @property
    def state(self) -> PreviewState:
        return self._state

    @property
    def error(self) -> Optional[Exception]:
        return self._error

    @property
    def dpi(self) -> float:
        return self._dpi

    @property
    def page_formats(self):
        return dict(self._page_formats)

    @property
    def page_format(self) -> PageFormat:
        """Selected format, before the orientation override."""
        return self._page_format

    @property
    def landscape(self) -> Optional[bool]:
        return self._landscape

    @property
    def computed_page_format(self) -> PageFormat:
        """Selected format with the orientation override applied."""
        return self._page_format.oriented(self._landscape)

    @property
    def zoom_index(self) -> Optional[int]:
        return self._zoom_index

    @property
    def is_rastering(self) -> bool:
        return self._rastering

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def print_service(self) -> PrintService:
        if self._print_service is None:
            self._print_service = QtPrintService(dpi=self.config.print_dpi)
        return self._print_service

    @property
    def share_service(self) -> ShareService:
        if self._share_service is None:
            self._share_service = QtShareService()
        return self._share_service

    # ---- Refresh protocol ----------------------------------------------

    def refresh(self):
        """Rebuild the document and stream its pages into the buffer.

        Returns at once; the document source and the rasterizer run on a
        worker thread. No-op while another refresh is in flight or after
        dispose().
        """
        if self._disposed:
            logger.debug("Refresh requested after dispose, ignored")
            return
        if self._rastering:
            logger.debug("Refresh already in progress, request dropped")
            return

        self._rastering = True
        self._set_state(PreviewState.RASTERING)

        if not self._info.can_raster:
            logger.warning("PDF rasterization is not available on this platform")
            self._fail(RasterUnavailableError())
            return

        self._generation += 1
        self._received = 0
        task = RefreshTask(
            self._generation,
            self._document_source,
            self.computed_page_format,
            self._rasterizer,
            self._dpi,
            self.config.pages,
        )
        task.signals.built.connect(self._on_document_built)
        task.signals.page_ready.connect(self._on_page_ready)
        task.signals.failed.connect(self._on_refresh_failed)
        task.signals.finished.connect(self._on_refresh_finished)
        self._refresh_task = task
        self._thread_pool.start(task)

    def reload(self):
        """Refresh without any change, e.g. after the host's data changed."""
        self.refresh()

    def _is_current(self, generation: int) -> bool:
        return not self._disposed and generation == self._generation

    @Slot(int)
    def _on_document_built(self, generation: int):
        if not self._is_current(generation):
            return
        if self._error is not None:
            self._set_error(None)

    @Slot(int, object)
    def _on_page_ready(self, generation: int, page: RasterPage):
        """Put a rendered page in the buffer."""
        if not self._is_current(generation):
            return

        index = self._received
        if index < len(self._pages):
            self._pages[index] = page
        else:
            self._pages.append(page)
        self._received += 1
        logger.debug("Page %d rendered (%dx%d)", index, page.width, page.height)
        self.page_updated.emit(index)

    @Slot(int, object)
    def _on_refresh_failed(self, generation: int, error: Exception):
        if not self._is_current(generation):
            return
        self._refresh_task = None
        self._fail(error)

    @Slot(int)
    def _on_refresh_finished(self, generation: int):
        if not self._is_current(generation):
            return
        self._refresh_task = None
        self._finish()

    def _finish(self):
        received = self._received

        if len(self._pages) > received:
            del self._pages[received:]
            if self._zoom_index is not None and self._zoom_index >= received:
                self._set_zoom(None)
            self.pages_truncated.emit(received)

        self._rastering = False
        self._set_state(PreviewState.READY)
        logger.info("Rendered %d page(s) at %.1f dpi", received, self._dpi)
        self.refresh_finished.emit(received)

    def _fail(self, error: Exception):
        self._rastering = False
        self._set_error(error)
        self._set_state(PreviewState.ERROR)

    def _set_state(self, state: PreviewState):
        if state == self._state:
            return
        self._state = state
        self.state_changed.emit(state.value)

    def _set_error(self, error: Optional[Exception]):
        if error is self._error:
            return
        self._error = error
        self.error_changed.emit(error)

    # ---- Events from the host and the view ------------------------------

    def update_layout(self, available_width: float, device_pixel_ratio: float = 1.0):
        """Record new view metrics; the refresh follows after a quiet period.

        Bursts of calls (window resizing) restart the delay, so they
        collapse into a single refresh.
        """
        if self._disposed:
            return
        self._available_width = available_width
        self._pixel_ratio = device_pixel_ratio
        self._layout_timer.start()

    def _on_layout_settled(self):
        self._update_dpi()
        self.refresh()

    def _update_dpi(self):
        if self._available_width is None:
            return
        self._dpi = compute_dpi(
            self._available_width,
            self.config.max_page_width,
            self._pixel_ratio,
            self.computed_page_format,
        )

    def set_page_format(self, page_format: PageFormat):
        """Select a page format and rebuild the preview.

        Raises:
            ValueError: If the format is not one of ``page_formats``
        """
        if self._disposed:
            return
        if page_format not in self._page_formats.values():
            raise ValueError(
                f"{page_format} is not one of the selectable formats: "
                f"{', '.join(self._page_formats)}"
            )
        self._page_format = page_format
        self.page_format_changed.emit(self.computed_page_format)
        self._update_dpi()
        self.refresh()

    def set_landscape(self, landscape: Optional[bool]):
        """Set the orientation override (None: keep the format's own)."""
        if self._disposed:
            return
        self._landscape = landscape
        self.page_format_changed.emit(self.computed_page_format)
        self._update_dpi()
        self.refresh()

    def set_document_source(self, document_source: DocumentSource):
        """Replace the host's document source.

        The preview is rebuilt when the source changed, or on every call
        when ``config.should_repaint`` is set.
        """
        changed = document_source is not self._document_source
        self._document_source = document_source
        if changed or self.config.should_repaint:
            self._set_zoom(None)
            self._scroll_restore = None
            self.refresh()

    def dispose(self):
        """Stop all pending work; the buffer is not touched afterwards."""
        if self._disposed:
            return
        self._disposed = True
        self._layout_timer.stop()
        if self._refresh_task is not None:
            self._refresh_task.cancel()
            self._refresh_task = None
        self._rastering = False
        logger.debug("Preview controller disposed")

    # ---- Zoom ------------------------------------------------------------

    def enter_zoom(self, index: int, scroll_offset: Optional[float] = None):
        """Show a single page magnified.

        Args:
            index: Page to zoom into
            scroll_offset: List scroll position to restore on exit

        Raises:
            IndexError: If the page is not in the buffer
        """
        if not 0 <= index < len(self._pages):
            raise IndexError(
                f"Page {index} is not in the preview ({len(self._pages)} pages)"
            )
        self._scroll_restore = scroll_offset
        self._set_zoom(index)

    def exit_zoom(self):
        self._set_zoom(None)

    def toggle_zoom(self, index: int, scroll_offset: Optional[float] = None):
        if self._zoom_index is None:
            self.enter_zoom(index, scroll_offset)
        else:
            self.exit_zoom()

    def take_scroll_restore(self) -> Optional[float]:
        """Return the pending scroll offset once, then forget it."""
        offset = self._scroll_restore
        self._scroll_restore = None
        return offset

    def _set_zoom(self, index: Optional[int]):
        if index == self._zoom_index:
            return
        self._zoom_index = index
        self.zoom_changed.emit(index)

    # ---- Print and share ---------------------------------------------------

    def print_format(self) -> PageFormat:
        """Format handed to the print service.

        When the user cannot pick a format, the host decides the layout, so
        the format is measured from the first rendered page instead.
        """
        page_format = self.computed_page_format
        if not self.config.can_change_page_format and self._pages:
            first = self._pages[0]
            page_format = PageFormat.from_pixels(
                first.width, first.height, self._dpi, DERIVED_PRINT_MARGIN
            )
        return page_format

    def print_document(self) -> bool:
        """Print the document; the outcome is reported through signals.

        Returns:
            True if the job was sent
        """
        name = self.config.document_name
        try:
            result = self.print_service.layout_pdf(
                self._document_source,
                name,
                self.print_format(),
                self.config.dynamic_layout,
            )
        except Exception as e:
            logger.exception("Printing '%s' failed", name)
            self.print_failed.emit(e)
            return False

        if result:
            self.printed.emit()
        return result

    def share_document(self, bounds: Optional[QRect] = None) -> bool:
        """Build the document in the background, then share it.

        The outcome is reported through the shared and share_failed signals.

        Args:
            bounds: Global geometry of the share button

        Returns:
            False if the request was ignored (disposed, or a share is
            already being prepared)
        """
        if self._disposed:
            return False
        if self._share_task is not None:
            logger.debug("Share already in progress, request dropped")
            return False

        self._share_bounds = bounds if bounds is not None else QRect()
        task = BuildTask(self._document_source, self.computed_page_format)
        task.signals.built.connect(self._on_share_built)
        task.signals.failed.connect(self._on_share_failed)
        self._share_task = task
        self._thread_pool.start(task)
        return True

    @Slot(object)
    def _on_share_built(self, data: bytes):
        self._share_task = None
        if self._disposed:
            return

        filename = self.config.share_file_name
        try:
            result = self.share_service.share_pdf(
                data,
                self._share_bounds,
                filename,
                body=self.config.share_extra_body,
                subject=self.config.share_extra_subject,
                emails=self.config.share_extra_emails,
            )
        except Exception as e:
            logger.exception("Sharing '%s' failed", filename)
            self.share_failed.emit(e)
            return

        if result:
            self.shared.emit()

    @Slot(object)
    def _on_share_failed(self, error: Exception):
        self._share_task = None
        if self._disposed:
            return
        self.share_failed.emit(error)
