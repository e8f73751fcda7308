"""Main PDF preview widget - view over a PreviewController."""

import logging
from typing import Callable, List, Optional

from PySide6.QtCore import QEvent, QPoint, QRect, Qt, QTimer, Signal
from PySide6.QtGui import QIcon
from PySide6.QtWidgets import (
    QButtonGroup, QComboBox, QFrame, QHBoxLayout, QLabel, QProgressBar,
    QStackedWidget, QToolButton, QVBoxLayout, QWidget
)

from .actions import PreviewAction
from .config import DEFAULT_SCROLL_VIEW_STYLESHEET, ConfigPresets, PreviewConfig
from .controller import PreviewController
from .errors import RasterUnavailableError
from .page_format import DocumentSource, format_name
from .page_view import PageListView, ZoomView
from .print_service import PrintService, QtPrintService
from .printing_info import PrintingInfo
from .share_service import ShareService
from .ui_translations import get_translations

logger = logging.getLogger(__name__)

ErrorViewFactory = Callable[[QWidget], QWidget]

# Horizontal space reserved around the page list
LAYOUT_INSET = 16

PORTRAIT_ID = 0
LANDSCAPE_ID = 1


class PdfPreviewWidget(QWidget):
    """Qt widget that previews, prints and shares a document built on demand.

    The host supplies a document source: a callable that takes a PageFormat
    and returns PDF bytes. The widget rebuilds the document whenever the
    page format, the orientation or its own width changes, and shows the
    pages as they are rendered.

    Signals:
        printed: Emitted when a print job was sent
        print_failed: Emitted with the exception when printing failed
        shared: Emitted when the platform accepted the document
        share_failed: Emitted with the exception when sharing failed
        error_changed: Emitted with the preview error, or None once cleared
    """

    printed = Signal()
    print_failed = Signal(object)
    shared = Signal()
    share_failed = Signal(object)
    error_changed = Signal(object)

    def __init__(
        self,
        document_source: DocumentSource,
        parent: Optional[QWidget] = None,
        config: Optional[PreviewConfig] = None,
        preset: Optional[str] = None,
        customize: Optional[dict] = None,
        actions: Optional[List[PreviewAction]] = None,
        error_view_factory: Optional[ErrorViewFactory] = None,
        info: Optional[PrintingInfo] = None,
        print_service: Optional[PrintService] = None,
        share_service: Optional[ShareService] = None
    ):
        """Initialize the preview widget.

        Args:
            document_source: Builds the PDF bytes for a page format
            parent: Parent Qt widget
            config: Full configuration object (takes precedence over preset)
            preset: Preset name ("readonly", "simple", "full")
            customize: Dict of overrides for preset (requires preset parameter)
            actions: Extra buttons for the action bar
            error_view_factory: Builds the widget shown when the preview fails
            info: Platform capabilities (probed when omitted)
            print_service: Printing backend (QtPrintService by default)
            share_service: Sharing backend (QtShareService by default)

        Configuration Priority (highest to lowest):
            1. config parameter (if provided, preset/customize ignored)
            2. preset + customize
            3. full preset (default)

        Examples:
            >>> preview = PdfPreviewWidget(build_invoice, preset="simple")

            >>> preview = PdfPreviewWidget(
            ...     build_invoice,
            ...     preset="readonly",
            ...     customize={"max_page_width": 600},
            ... )

        Raises:
            ValueError: If preset name is unknown or customize used without preset
        """
        super().__init__(parent)

        # Resolve configuration
        if config is None:
            if customize and not preset:
                raise ValueError(
                    "customize parameter requires preset parameter. "
                    "Use: PdfPreviewWidget(source, preset='name', customize={...})"
                )

            if preset is not None:
                if customize:
                    config = ConfigPresets.custom(base=preset, **customize)
                else:
                    config = ConfigPresets.get(preset)
            else:
                config = ConfigPresets.full()

        self.config = config
        self.tr = get_translations()
        self._actions = list(actions or [])
        self._error_view_factory = error_view_factory
        self._error_view: Optional[QWidget] = None
        self._print_button: Optional[QToolButton] = None
        self._share_button: Optional[QToolButton] = None
        self._format_combo: Optional[QComboBox] = None
        self._orientation_group: Optional[QButtonGroup] = None

        if print_service is None:
            print_service = QtPrintService(dpi=config.print_dpi, parent=self)

        self.controller = PreviewController(
            document_source,
            config=config,
            info=info,
            print_service=print_service,
            share_service=share_service,
            parent=self,
        )

        self._setup_ui()
        self._connect_controller()
        self._update_view()

    # ---- UI construction -------------------------------------------------

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        self._stack = QStackedWidget(self)
        self._stack.setStyleSheet(
            self.config.scroll_view_stylesheet or DEFAULT_SCROLL_VIEW_STYLESHEET
        )

        self._busy_view = QWidget()
        busy_layout = QVBoxLayout(self._busy_view)
        self._progress = QProgressBar()
        self._progress.setRange(0, 0)  # Indeterminate
        self._progress.setTextVisible(False)
        self._progress.setMaximumWidth(200)
        busy_layout.addWidget(self._progress, 0, Qt.AlignmentFlag.AlignCenter)

        self._page_list = PageListView(
            margin=self.config.preview_page_margin,
            padding=self.config.padding,
            page_stylesheet=self.config.page_stylesheet,
            max_page_width=self.config.max_page_width,
        )
        self._page_list.page_double_clicked.connect(self._on_page_double_clicked)

        self._zoom_view = ZoomView(max_zoom=self.config.max_zoom)
        self._zoom_view.double_clicked.connect(self.controller.exit_zoom)

        self._error_container = QWidget()
        self._error_layout = QVBoxLayout(self._error_container)

        for view in (self._busy_view, self._page_list, self._zoom_view, self._error_container):
            self._stack.addWidget(view)

        self._action_bar = self._build_action_bar()
        if self._action_bar is not None:
            layout.addWidget(self._action_bar)
        layout.addWidget(self._stack, 1)

    def _build_action_bar(self) -> Optional[QFrame]:
        """Build the action bar, or return None when it has no buttons."""
        if not self.config.use_actions:
            return None

        info = self.controller.info
        widgets: List[QWidget] = []

        if self.config.allow_printing and info.can_print:
            self._print_button = self._tool_button(
                QIcon.fromTheme("document-print"), self.tr['print']
            )
            if not info.can_list_printers:
                # The dialog can still print to a PDF file
                self._print_button.setToolTip(self.tr['no_printers'])
            self._print_button.clicked.connect(self.print_document)
            widgets.append(self._print_button)

        if self.config.allow_sharing and info.can_share:
            self._share_button = self._tool_button(
                QIcon.fromTheme("document-send"), self.tr['share']
            )
            self._share_button.clicked.connect(self.share_document)
            widgets.append(self._share_button)

        if self.config.can_change_page_format:
            self._format_combo = QComboBox()
            self._format_combo.setToolTip(self.tr['page_format'])
            self._format_combo.addItems(list(self.controller.page_formats))
            self._sync_format_controls()
            self._format_combo.currentTextChanged.connect(self._on_format_selected)
            widgets.append(self._format_combo)

            if self.config.can_change_orientation:
                orientation = QWidget()
                orientation_layout = QHBoxLayout(orientation)
                orientation_layout.setContentsMargins(0, 0, 0, 0)
                self._orientation_group = QButtonGroup(self)
                self._orientation_group.setExclusive(True)
                portrait = self._tool_button(
                    QIcon.fromTheme("object-rotate-left"), self.tr['portrait']
                )
                landscape = self._tool_button(
                    QIcon.fromTheme("object-rotate-right"), self.tr['landscape']
                )
                for button_id, button in ((PORTRAIT_ID, portrait), (LANDSCAPE_ID, landscape)):
                    button.setCheckable(True)
                    self._orientation_group.addButton(button, button_id)
                    orientation_layout.addWidget(button)
                self._sync_format_controls()
                self._orientation_group.idClicked.connect(self._on_orientation_selected)
                widgets.append(orientation)

        for action in self._actions:
            widgets.append(self._action_button(action))

        if not widgets:
            return None

        bar = QFrame(self)
        bar.setObjectName("previewActionBar")
        bar_layout = QHBoxLayout(bar)
        bar_layout.addStretch()
        for widget in widgets:
            bar_layout.addWidget(widget)
            bar_layout.addStretch()
        return bar

    def _tool_button(self, icon: QIcon, text: str) -> QToolButton:
        button = QToolButton()
        button.setText(text)
        button.setToolTip(text)
        if not icon.isNull():
            button.setIcon(icon)
            button.setToolButtonStyle(Qt.ToolButtonStyle.ToolButtonTextBesideIcon)
        return button

    def _action_button(self, action: PreviewAction) -> QToolButton:
        button = self._tool_button(action.icon or QIcon(), action.text)
        if action.tooltip:
            button.setToolTip(action.tooltip)
        if action.on_pressed is None:
            button.setEnabled(False)
        else:
            button.clicked.connect(lambda: self._run_action(action))
        return button

    def _run_action(self, action: PreviewAction):
        action.on_pressed(
            self, self.controller.document_source, self.controller.computed_page_format
        )

    def _connect_controller(self):
        c = self.controller
        c.page_updated.connect(self._on_page_updated)
        c.pages_truncated.connect(self._on_pages_truncated)
        c.state_changed.connect(self._update_view)
        c.error_changed.connect(self._on_error_changed)
        c.zoom_changed.connect(self._on_zoom_changed)
        c.page_format_changed.connect(self._sync_format_controls)

        c.printed.connect(self.printed.emit)
        c.print_failed.connect(self.print_failed.emit)
        c.shared.connect(self.shared.emit)
        c.share_failed.connect(self.share_failed.emit)

    # ---- Public API ------------------------------------------------------

    @property
    def page_list(self) -> PageListView:
        return self._page_list

    @property
    def zoom_view(self) -> ZoomView:
        return self._zoom_view

    @property
    def action_bar(self) -> Optional[QFrame]:
        return self._action_bar

    def current_view(self) -> QWidget:
        """Widget currently shown in the content area."""
        return self._stack.currentWidget()

    def set_document_source(self, document_source: DocumentSource):
        """Replace the document source, rebuilding the preview if it changed."""
        self.controller.set_document_source(document_source)

    def refresh(self):
        self.controller.refresh()

    def print_document(self) -> bool:
        return self.controller.print_document()

    def share_document(self) -> bool:
        """Start sharing; the outcome arrives through shared/share_failed."""
        bounds = QRect()
        if self._share_button is not None:
            top_left = self._share_button.mapToGlobal(QPoint(0, 0))
            bounds = QRect(top_left, self._share_button.size())
        return self.controller.share_document(bounds)

    # ---- Controller events -----------------------------------------------

    def _on_page_updated(self, index: int):
        page = self.controller.pages[index]
        self._page_list.set_page(index, page)
        if self.controller.zoom_index == index:
            self._zoom_view.set_image(page.to_qimage())
        self._update_view()

    def _on_pages_truncated(self, count: int):
        self._page_list.truncate(count)
        self._update_view()

    def _on_error_changed(self, error: Optional[Exception]):
        if error is not None:
            self._show_error(error)
        self.error_changed.emit(error)
        self._update_view()

    def _on_zoom_changed(self, index: Optional[int]):
        if index is not None:
            self._zoom_view.set_image(self.controller.pages[index].to_qimage())
            self._zoom_view.reset_zoom()
        else:
            # Wait for the list to be laid out again before scrolling
            QTimer.singleShot(0, self._restore_scroll)
        self._update_view()

    def _on_page_double_clicked(self, index: int):
        self.controller.enter_zoom(index, self._page_list.scroll_offset())

    def _on_format_selected(self, name: str):
        page_format = self.controller.page_formats.get(name)
        if page_format is not None:
            self.controller.set_page_format(page_format)

    def _on_orientation_selected(self, button_id: int):
        self.controller.set_landscape(button_id == LANDSCAPE_ID)

    def _restore_scroll(self):
        offset = self.controller.take_scroll_restore()
        if offset is not None:
            self._page_list.set_scroll_offset(offset)

    def _sync_format_controls(self, *args):
        """Reflect the controller's format selection without feedback."""
        if self._format_combo is not None:
            name = format_name(self.controller.page_format, self.controller.page_formats)
            if name is not None:
                self._format_combo.blockSignals(True)
                self._format_combo.setCurrentText(name)
                self._format_combo.blockSignals(False)

        if self._orientation_group is not None:
            landscape = self.controller.computed_page_format.is_landscape
            button = self._orientation_group.button(LANDSCAPE_ID if landscape else PORTRAIT_ID)
            if button is not None:
                button.setChecked(True)

    def _show_error(self, error: Exception):
        logger.debug("Showing error view for %r", error)
        if self._error_view is not None:
            self._error_layout.removeWidget(self._error_view)
            self._error_view.deleteLater()

        if self._error_view_factory is not None:
            view = self._error_view_factory(self._error_container)
        else:
            if isinstance(error, RasterUnavailableError):
                text = self.tr['raster_unavailable']
            else:
                text = self.tr['unable_to_display']
            if self.config.show_error_details:
                text = f"{text}\n{error}"
            view = QLabel(text)
            view.setAlignment(Qt.AlignmentFlag.AlignCenter)
            view.setWordWrap(True)

        self._error_view = view
        self._error_layout.addWidget(view)

    def _update_view(self, *args):
        c = self.controller
        if c.zoom_index is not None:
            view = self._zoom_view
        elif c.error is not None:
            view = self._error_container
        elif c.page_count == 0:
            view = self._busy_view
        else:
            view = self._page_list
        if self._stack.currentWidget() is not view:
            self._stack.setCurrentWidget(view)

    # ---- Qt events -------------------------------------------------------

    def _notify_layout(self):
        width = self.width() - LAYOUT_INSET
        if width <= 0:
            return
        self.controller.update_layout(width, self.devicePixelRatioF())

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self._notify_layout()

    def showEvent(self, event):
        super().showEvent(event)
        self._notify_layout()

    def event(self, event):
        # Moving to a screen with another scale factor changes the target dpi
        if event.type() == QEvent.Type.DevicePixelRatioChange:
            self._notify_layout()
        return super().event(event)

    def closeEvent(self, event):
        """Stop rendering before the widget goes away."""
        self.controller.dispose()
        super().closeEvent(event)
