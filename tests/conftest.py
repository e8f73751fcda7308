"""Shared fixtures for the preview tests."""

import os
import threading
import time

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtCore import QBuffer, QIODevice, QMarginsF, QSizeF  # noqa: E402
from PySide6.QtGui import QPageLayout, QPageSize, QPainter, QPdfWriter  # noqa: E402
from PySide6.QtWidgets import QApplication  # noqa: E402

from pdf_preview.page_format import PageFormat  # noqa: E402
from pdf_preview.printing_info import PrintingInfo  # noqa: E402
from pdf_preview.raster import RasterPage  # noqa: E402

FULL_INFO = PrintingInfo(can_raster=True, can_print=True, can_share=True, can_list_printers=False)


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


def wait_until(predicate, timeout=3.0):
    """Pump Qt events until ``predicate()`` is true.

    Returns:
        The final value of the predicate
    """
    app = QApplication.instance()
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        app.processEvents()
        if predicate():
            return True
        time.sleep(0.005)
    app.processEvents()
    return bool(predicate())


def process_events(duration=0.05):
    """Pump Qt events for a fixed time."""
    wait_until(lambda: False, timeout=duration)


def make_page(index, width=20, height=30):
    return RasterPage(index=index, width=width, height=height, pixels=b"\xff" * (width * height * 3))


def make_pdf(page_count=1, page_format=None):
    """Generate a real PDF with QPdfWriter, one numbered page per page."""
    page_format = page_format or PageFormat(200, 300)
    buffer = QBuffer()
    buffer.open(QIODevice.OpenModeFlag.WriteOnly)

    writer = QPdfWriter(buffer)
    writer.setResolution(72)
    writer.setPageLayout(QPageLayout(
        QPageSize(
            QSizeF(page_format.width, page_format.height),
            QPageSize.Unit.Point,
            "",
            QPageSize.SizeMatchPolicy.ExactMatch,
        ),
        QPageLayout.Orientation.Portrait,
        QMarginsF(0, 0, 0, 0),
        QPageLayout.Unit.Point,
    ))

    painter = QPainter(writer)
    for i in range(page_count):
        if i > 0:
            writer.newPage()
        painter.drawText(20, 40, f"Page {i + 1}")
    painter.end()
    data = bytes(buffer.data())
    buffer.close()
    return data


class FakeRasterizer:
    """Rasterizer that yields a scripted number of pages.

    ``counts`` gives the page count of each successive call. An entry
    that is an exception is raised after ``fail_after`` pages.
    """

    def __init__(self, *counts, fail_after=0):
        self.counts = list(counts)
        self.fail_after = fail_after
        self.calls = []
        self.closed = 0

    def __call__(self, data, dpi, pages=None):
        self.calls.append((data, dpi, pages))
        count = self.counts.pop(0) if len(self.counts) > 1 else self.counts[0]
        return self._generate(count)

    def _generate(self, count):
        try:
            if isinstance(count, Exception):
                for i in range(self.fail_after):
                    yield make_page(i)
                raise count
            for i in range(count):
                yield make_page(i)
        finally:
            self.closed += 1


class FakeSource:
    """Document source that records the formats it was asked for."""

    def __init__(self, error=None):
        self.error = error
        self.formats = []

    def __call__(self, page_format):
        self.formats.append(page_format)
        if self.error is not None:
            raise self.error
        return b"%PDF-fake"


@pytest.fixture
def source():
    return FakeSource()


class GatedSource(FakeSource):
    """Document source that blocks until ``gate`` is set.

    ``entered`` is set as soon as a build starts.
    """

    def __init__(self, error=None):
        super().__init__(error)
        self.gate = threading.Event()
        self.entered = threading.Event()

    def __call__(self, page_format):
        self.entered.set()
        self.gate.wait(5)
        return super().__call__(page_format)


class StaticSource:
    """Document source returning PDF bytes prepared up front."""

    def __init__(self, data):
        self.data = data
        self.formats = []

    def __call__(self, page_format):
        self.formats.append(page_format)
        return self.data
