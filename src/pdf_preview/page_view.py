"""Widgets that display rendered pages."""

from typing import List, Optional

from PySide6.QtCore import QRect, QSize, Qt, Signal
from PySide6.QtGui import QColor, QImage, QPainter, QPixmap
from PySide6.QtWidgets import (
    QFrame, QGraphicsDropShadowEffect, QGraphicsPixmapItem, QGraphicsScene,
    QGraphicsView, QScrollArea, QSizePolicy, QStyle, QStyleOption,
    QVBoxLayout, QWidget
)

from .config import DEFAULT_PREVIEW_PAGE_MARGIN, Margins
from .raster import RasterPage

ZOOM_STEP = 1.25
QWIDGETSIZE_MAX = (1 << 24) - 1


class PreviewPage(QWidget):
    """One page of the list, scaled to the available width.

    Signals:
        double_clicked: Emitted with the page index
    """

    double_clicked = Signal(int)

    def __init__(
        self,
        index: int,
        page: RasterPage,
        margin: Margins = DEFAULT_PREVIEW_PAGE_MARGIN,
        stylesheet: Optional[str] = None,
        max_width: Optional[float] = None,
        parent: Optional[QWidget] = None
    ):
        super().__init__(parent)
        self.index = index
        self._pixmap = QPixmap()
        self._aspect_ratio = 1.0

        self.setContentsMargins(*margin)
        policy = QSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Preferred)
        policy.setHeightForWidth(True)
        self.setSizePolicy(policy)
        if max_width is not None:
            self.setMaximumWidth(int(max_width))

        if stylesheet:
            self.setStyleSheet(stylesheet)
        else:
            shadow = QGraphicsDropShadowEffect(self)
            shadow.setOffset(0, 3)
            shadow.setBlurRadius(5)
            shadow.setColor(QColor(0, 0, 0))
            self.setGraphicsEffect(shadow)

        self.set_page(page)

    def set_page(self, page: RasterPage):
        self._pixmap = QPixmap.fromImage(page.to_qimage())
        self._aspect_ratio = page.aspect_ratio
        self.updateGeometry()
        self.update()

    def hasHeightForWidth(self) -> bool:
        return True

    def heightForWidth(self, width: int) -> int:
        margins = self.contentsMargins()
        inner = max(width - margins.left() - margins.right(), 1)
        return int(inner / self._aspect_ratio) + margins.top() + margins.bottom()

    def sizeHint(self) -> QSize:
        # A capped page asks for its cap so a centering layout grows it to fit
        width = self.maximumWidth() if self.maximumWidth() < QWIDGETSIZE_MAX else 400
        return QSize(width, self.heightForWidth(width))

    def paintEvent(self, event):
        painter = QPainter(self)
        if self.styleSheet():
            # Honour background and border rules of the page stylesheet
            option = QStyleOption()
            option.initFrom(self)
            self.style().drawPrimitive(QStyle.PrimitiveElement.PE_Widget, option, painter, self)

        target = self.contentsRect()
        height = int(target.width() / self._aspect_ratio)
        target = QRect(target.x(), target.y(), target.width(), min(height, target.height()))

        painter.fillRect(target, Qt.GlobalColor.white)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        painter.drawPixmap(target, self._pixmap)
        painter.end()

    def mouseDoubleClickEvent(self, event):
        if event.button() == Qt.MouseButton.LeftButton:
            self.double_clicked.emit(self.index)
            event.accept()
            return
        super().mouseDoubleClickEvent(event)


class PageListView(QScrollArea):
    """Scrollable column of pages.

    Signals:
        page_double_clicked: Emitted with the index of the page
    """

    page_double_clicked = Signal(int)

    def __init__(
        self,
        margin: Margins = DEFAULT_PREVIEW_PAGE_MARGIN,
        padding: Margins = (0, 0, 0, 0),
        page_stylesheet: Optional[str] = None,
        max_page_width: Optional[float] = None,
        parent: Optional[QWidget] = None
    ):
        super().__init__(parent)
        self._margin = margin
        self._page_stylesheet = page_stylesheet
        self._max_page_width = max_page_width
        self._page_widgets: List[PreviewPage] = []

        self.setWidgetResizable(True)
        self.setFrameShape(QFrame.Shape.NoFrame)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)

        container = QWidget()
        container.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground)
        self._layout = QVBoxLayout(container)
        self._layout.setContentsMargins(*padding)
        self._layout.setSpacing(0)
        self._layout.addStretch()
        self.setWidget(container)

    def page_widgets(self) -> List[PreviewPage]:
        return list(self._page_widgets)

    def set_page(self, index: int, page: RasterPage):
        """Replace the page at ``index`` or append it."""
        if index < len(self._page_widgets):
            self._page_widgets[index].set_page(page)
            return

        widget = PreviewPage(
            index,
            page,
            margin=self._margin,
            stylesheet=self._page_stylesheet,
            max_width=self._max_page_width,
        )
        widget.double_clicked.connect(self.page_double_clicked.emit)
        self._page_widgets.append(widget)
        # Keep the trailing stretch last
        position = len(self._page_widgets) - 1
        if self._max_page_width is not None:
            self._layout.insertWidget(position, widget, 0, Qt.AlignmentFlag.AlignHCenter)
        else:
            self._layout.insertWidget(position, widget)

    def truncate(self, count: int):
        """Remove the pages from ``count`` on."""
        while len(self._page_widgets) > count:
            widget = self._page_widgets.pop()
            self._layout.removeWidget(widget)
            widget.deleteLater()

    def scroll_offset(self) -> int:
        return self.verticalScrollBar().value()

    def set_scroll_offset(self, offset: float):
        self.verticalScrollBar().setValue(int(offset))


class ZoomView(QGraphicsView):
    """Single page view with wheel zoom and drag panning.

    Zoom 1.0 fits the whole page in the viewport.

    Signals:
        double_clicked: Emitted on a left double-click
    """

    double_clicked = Signal()

    def __init__(self, max_zoom: float = 5.0, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.max_zoom = max_zoom
        self._zoom = 1.0

        self._scene = QGraphicsScene(self)
        self._item = QGraphicsPixmapItem()
        self._item.setTransformationMode(Qt.TransformationMode.SmoothTransformation)
        self._scene.addItem(self._item)
        self.setScene(self._scene)

        self.setFrameShape(QFrame.Shape.NoFrame)
        self.setDragMode(QGraphicsView.DragMode.ScrollHandDrag)
        self.setTransformationAnchor(QGraphicsView.ViewportAnchor.AnchorUnderMouse)
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)

    @property
    def zoom(self) -> float:
        return self._zoom

    def set_image(self, image: QImage):
        self._item.setPixmap(QPixmap.fromImage(image))
        self._scene.setSceneRect(self._item.boundingRect())
        self._apply_zoom()

    def reset_zoom(self):
        self._zoom = 1.0
        self._apply_zoom()

    def set_zoom(self, zoom: float):
        self._zoom = min(max(zoom, 1.0), self.max_zoom)
        self._apply_zoom()

    def _fit_scale(self) -> float:
        rect = self._item.boundingRect()
        viewport = self.viewport().size()
        if rect.isEmpty() or viewport.isEmpty():
            return 1.0
        return min(viewport.width() / rect.width(), viewport.height() / rect.height())

    def _apply_zoom(self):
        scale = self._fit_scale() * self._zoom
        self.resetTransform()
        self.scale(scale, scale)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self._apply_zoom()

    def wheelEvent(self, event):
        if event.angleDelta().y() > 0:
            self.set_zoom(self._zoom * ZOOM_STEP)
        else:
            self.set_zoom(self._zoom / ZOOM_STEP)
        event.accept()

    def mouseDoubleClickEvent(self, event):
        if event.button() == Qt.MouseButton.LeftButton:
            self.double_clicked.emit()
            event.accept()
            return
        super().mouseDoubleClickEvent(event)
